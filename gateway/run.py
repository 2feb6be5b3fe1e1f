"""
Proxy runner - entry point for the OpenAI-compatible server.

Usage:
    # Start with settings from ~/.claude-proxy/config.yaml and the environment
    python -m gateway.run

    # Override on the command line
    claude-code-proxy --port 11480 --model opus --verbose
"""

import json
import logging
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Optional

import fire
import uvicorn

from gateway.config import ProxyConfig, load_config
from gateway.server import create_app
from proxy_constants import PROXY_MODEL_ID, SERVICE_NAME

logger = logging.getLogger(__name__)


def setup_logging(config: ProxyConfig) -> None:
    """Console logging plus a rotating proxy.log in the configured log dir."""
    level = logging.DEBUG if config.verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        datefmt="%H:%M:%S",
    )

    try:
        log_dir = Path(config.log_dir)
        log_dir.mkdir(parents=True, exist_ok=True)
        handler = RotatingFileHandler(
            log_dir / "proxy.log", maxBytes=5 * 1024 * 1024, backupCount=3, encoding="utf-8",
        )
        handler.setFormatter(logging.Formatter("%(asctime)s %(levelname)s %(name)s: %(message)s"))
        logging.getLogger().addHandler(handler)
    except OSError as e:
        logger.warning("File logging disabled (%s): %s", config.log_dir, e)

    if not config.verbose:
        # Keep third-party chatter out of the proxy log
        logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
        logging.getLogger("httpx").setLevel(logging.WARNING)


def client_config_snippet(config: ProxyConfig) -> str:
    """Provider block a client (e.g. Clawdbot) can paste into its config."""
    return json.dumps(
        {
            "models": {
                "providers": {
                    PROXY_MODEL_ID: {
                        "baseUrl": f"http://{config.host}:{config.port}/v1",
                        "apiKey": "not-needed",
                        "models": [
                            {"id": PROXY_MODEL_ID, "name": "Claude Code CLI", "api": "openai-completions"}
                        ],
                    }
                }
            }
        },
        indent=2,
    )


def main(
    host: Optional[str] = None,
    port: Optional[int] = None,
    model: Optional[str] = None,
    verbose: bool = False,
):
    """
    Start the proxy server.

    Args:
        host: Host to bind to (default from config: 127.0.0.1)
        port: Port to listen on (default from config: 11480)
        model: Default Claude model alias or name (default from config: sonnet)
        verbose: Enable debug logging
    """
    config = load_config()
    if host:
        config.host = host
    if port:
        config.port = int(port)
    if model:
        config.default_model = model
    if verbose:
        config.verbose = True

    setup_logging(config)
    app = create_app(config)

    print(f"\n{SERVICE_NAME} running at http://{config.host}:{config.port}")
    print(f"Using model: {config.default_model}")
    print("\nClient config:\n")
    print(client_config_snippet(config))
    print()

    uvicorn.run(
        app,
        host=config.host,
        port=config.port,
        log_level="debug" if config.verbose else "info",
        timeout_keep_alive=600,
    )


def cli():
    fire.Fire(main)


if __name__ == "__main__":
    cli()
