"""
Proxy configuration.

Loading order (later wins):
  1. Built-in defaults
  2. ~/.claude-proxy/config.yaml  (override dir with CLAUDE_PROXY_HOME)
  3. Environment variables, after loading ~/.claude-proxy/.env and then the
     project .env

config.yaml layout:

    server:
      host: 127.0.0.1
      port: 11480
    agent:
      model: sonnet
      binary: claude
      timeout: 300
      skip_permissions: true
    prompt:
      context_window: 6
      context_char_cap: 500
      advertise_tools_in_conversation: false
    logging:
      dir: ~/.claude-proxy/logs
      verbose: false
      request_dump: last-request.json
"""

import logging
import os
from dataclasses import dataclass, fields
from pathlib import Path
from typing import Any, Dict, Optional

import yaml
from dotenv import load_dotenv

from proxy_constants import (
    DEFAULT_CLI_BINARY,
    DEFAULT_HOST,
    DEFAULT_MODEL,
    DEFAULT_PORT,
    DEFAULT_TIMEOUT_SECONDS,
    PROXY_HOME,
)
from translator.prompt_assembler import DEFAULT_CONTEXT_CHAR_CAP, DEFAULT_CONTEXT_WINDOW

logger = logging.getLogger(__name__)


class ConfigError(Exception):
    """Raised when config.yaml exists but is not a mapping."""


@dataclass
class ProxyConfig:
    host: str = DEFAULT_HOST
    port: int = DEFAULT_PORT
    default_model: str = DEFAULT_MODEL
    cli_binary: str = DEFAULT_CLI_BINARY
    timeout_seconds: float = float(DEFAULT_TIMEOUT_SECONDS)
    skip_permissions: bool = True
    context_window: int = DEFAULT_CONTEXT_WINDOW
    context_char_cap: int = DEFAULT_CONTEXT_CHAR_CAP
    advertise_tools_in_conversation: bool = False
    request_dump_path: Optional[str] = None
    log_dir: str = str(PROXY_HOME / "logs")
    verbose: bool = False


# field name -> (yaml section, yaml key, env var)
_SOURCES = {
    "host": ("server", "host", "PROXY_HOST"),
    "port": ("server", "port", "PORT"),
    "default_model": ("agent", "model", "CLAUDE_MODEL"),
    "cli_binary": ("agent", "binary", "CLAUDE_BIN"),
    "timeout_seconds": ("agent", "timeout", "CLAUDE_TIMEOUT"),
    "skip_permissions": ("agent", "skip_permissions", "CLAUDE_SKIP_PERMISSIONS"),
    "context_window": ("prompt", "context_window", "PROXY_CONTEXT_WINDOW"),
    "context_char_cap": ("prompt", "context_char_cap", "PROXY_CONTEXT_CHAR_CAP"),
    "advertise_tools_in_conversation": (
        "prompt", "advertise_tools_in_conversation", "PROXY_ADVERTISE_TOOLS_IN_CONVERSATION",
    ),
    "request_dump_path": ("logging", "request_dump", "PROXY_REQUEST_DUMP"),
    "log_dir": ("logging", "dir", "PROXY_LOG_DIR"),
    "verbose": ("logging", "verbose", "PROXY_VERBOSE"),
}

_TRUE = {"1", "true", "yes", "on"}
_FALSE = {"0", "false", "no", "off", ""}


def load_env_files(home: Path = PROXY_HOME) -> None:
    """Load ~/.claude-proxy/.env first, then the project .env as fallback."""
    env_path = home / ".env"
    if env_path.exists():
        try:
            load_dotenv(env_path, encoding="utf-8")
        except UnicodeDecodeError:
            load_dotenv(env_path, encoding="latin-1")
    load_dotenv()


def load_yaml_config(path: Path) -> Dict[str, Any]:
    if not path.exists():
        return {}
    with open(path, encoding="utf-8") as f:
        data = yaml.safe_load(f) or {}
    if not isinstance(data, dict):
        raise ConfigError(f"{path} must contain a mapping, got {type(data).__name__}")
    return data


def _coerce(name: str, value: Any, default: Any) -> Any:
    """Convert a raw yaml/env value to the type of the field's default."""
    if value is None:
        return default
    try:
        if isinstance(default, bool):
            if isinstance(value, bool):
                return value
            text = str(value).strip().lower()
            if text in _TRUE:
                return True
            if text in _FALSE:
                return False
            raise ValueError(value)
        if isinstance(default, int):
            return int(value)
        if isinstance(default, float):
            return float(value)
    except (TypeError, ValueError):
        logger.warning("Invalid value for %s: %r, using default %r", name, value, default)
        return default
    text = str(value).strip()
    if name == "log_dir":
        text = os.path.expanduser(text)
    return text or default


def load_config(home: Path = PROXY_HOME, *, load_env: bool = True) -> ProxyConfig:
    """Build a ProxyConfig from defaults, config.yaml and the environment.

    Raises:
        ConfigError: config.yaml is present but not a mapping.
    """
    if load_env:
        load_env_files(home)
    raw = load_yaml_config(home / "config.yaml")

    defaults = ProxyConfig()
    values: Dict[str, Any] = {}
    for f in fields(ProxyConfig):
        section, key, env_var = _SOURCES[f.name]
        default = getattr(defaults, f.name)
        value = None
        section_cfg = raw.get(section)
        if isinstance(section_cfg, dict) and key in section_cfg:
            value = section_cfg[key]
        env_value = os.getenv(env_var)
        if env_value is not None:
            value = env_value
        values[f.name] = _coerce(f.name, value, default)

    return ProxyConfig(**values)
