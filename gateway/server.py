"""
OpenAI-compatible HTTP front end for the Claude CLI.

Endpoints:
- POST /v1/chat/completions  -- JSON or SSE (``stream: true``)
- GET  /v1/models            -- the single ``claude-code`` model
- GET  /health, GET /        -- liveness

The agent call blocks for as long as the CLI runs, so it is pushed to a
worker thread; the event loop keeps accepting other requests meanwhile.
"""

import asyncio
import json
import logging
import time
from typing import Any, Dict, Optional

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, StreamingResponse
from pydantic import ValidationError
from starlette.exceptions import HTTPException as StarletteHTTPException

from claude_cli.runner import ClaudeCLIRunner
from gateway.config import ProxyConfig, load_config
from gateway.schemas import ChatCompletionRequest
from proxy_constants import PROXY_MODEL_ID, PROXY_MODEL_OWNER, SERVICE_NAME
from translator.pipeline import EmptyConversationError, TranslationPipeline
from translator.prompt_assembler import PromptAssembler
from translator.response_encoder import ResponseEncoder

logger = logging.getLogger(__name__)


def _error(message: str, status_code: int) -> JSONResponse:
    return JSONResponse({"error": message}, status_code=status_code)


def _validation_summary(exc: ValidationError) -> str:
    parts = []
    for err in exc.errors():
        loc = ".".join(str(p) for p in err.get("loc", ()))
        parts.append(f"{loc}: {err.get('msg', 'invalid')}")
    return "; ".join(parts)


def dump_request(path: Optional[str], data: Dict[str, Any]) -> None:
    """Write the last inbound request to disk for debugging (best effort)."""
    if not path:
        return
    try:
        with open(path, "w", encoding="utf-8") as f:
            json.dump(data, f, indent=2, ensure_ascii=False)
    except OSError as e:
        logger.warning("Could not write request dump %s: %s", path, e)


def build_pipeline(config: ProxyConfig, runner=None) -> TranslationPipeline:
    runner = runner or ClaudeCLIRunner(
        binary=config.cli_binary,
        timeout=config.timeout_seconds,
        skip_permissions=config.skip_permissions,
    )
    assembler = PromptAssembler(
        context_window=config.context_window,
        context_char_cap=config.context_char_cap,
        advertise_tools_in_conversation=config.advertise_tools_in_conversation,
    )
    return TranslationPipeline(runner, default_model=config.default_model, assembler=assembler)


def create_app(config: Optional[ProxyConfig] = None, runner=None) -> FastAPI:
    """Build the FastAPI app.

    Args:
        config: Proxy settings; loaded from config.yaml/env when omitted.
        runner: Agent runner override (tests pass a fake).
    """
    config = config or load_config()
    pipeline = build_pipeline(config, runner)

    app = FastAPI(
        title="Claude Code Proxy",
        description="OpenAI-compatible chat completions backed by the claude CLI",
        version="1.0.0",
    )
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["GET", "POST", "OPTIONS"],
        allow_headers=["Content-Type", "Authorization"],
    )
    app.state.config = config
    app.state.pipeline = pipeline

    @app.exception_handler(StarletteHTTPException)
    async def http_error(request: Request, exc: StarletteHTTPException):
        message = "Not found" if exc.status_code == 404 else str(exc.detail)
        return _error(message, exc.status_code)

    @app.post("/v1/chat/completions")
    async def chat_completions(request: Request):
        try:
            data = await request.json()
        except ValueError:
            return _error("Invalid JSON", 400)

        if not isinstance(data, dict) or not isinstance(data.get("messages"), list):
            return _error("messages array required", 400)

        dump_request(config.request_dump_path, data)
        tools = data.get("tools") or []
        logger.info(
            "Tools present: %d, tool_choice: %s",
            len(tools) if isinstance(tools, list) else 0,
            json.dumps(data.get("tool_choice")),
        )

        try:
            chat_request = ChatCompletionRequest.model_validate(data)
        except ValidationError as e:
            return _error(f"Invalid request: {_validation_summary(e)}", 400)

        try:
            prepared = await asyncio.to_thread(
                pipeline.prepare,
                chat_request.message_dicts(),
                tools=chat_request.tools,
                model=chat_request.model,
            )
        except EmptyConversationError as e:
            return _error(str(e), 400)
        except Exception as e:
            logger.exception("Error preparing chat completion")
            return _error(str(e), 500)

        try:
            result = await asyncio.to_thread(pipeline.invoke, prepared)
        except Exception as e:
            logger.exception("Error handling chat completion")
            return _error(str(e), 500)

        encoder = ResponseEncoder(model=chat_request.model or PROXY_MODEL_ID)
        if chat_request.stream:
            return StreamingResponse(
                encoder.iter_sse_events(result.reply),
                media_type="text/event-stream",
                headers={"Cache-Control": "no-cache", "Connection": "keep-alive"},
            )
        return JSONResponse(encoder.encode_completion(result.reply, result.prompt_text))

    @app.get("/v1/models")
    async def list_models():
        return {
            "object": "list",
            "data": [
                {
                    "id": PROXY_MODEL_ID,
                    "object": "model",
                    "created": int(time.time()),
                    "owned_by": PROXY_MODEL_OWNER,
                }
            ],
        }

    @app.get("/health")
    @app.get("/")
    async def health_check():
        return {"status": "ok", "service": SERVICE_NAME, "model": config.default_model}

    return app
