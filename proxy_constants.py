"""Shared constants for claude-code-proxy.

Import-safe module with no dependencies; it can be imported from anywhere
without risk of circular imports.
"""

import os
from pathlib import Path

PROXY_HOME = Path(os.getenv("CLAUDE_PROXY_HOME", Path.home() / ".claude-proxy"))

SERVICE_NAME = "claude-code-proxy"

# Model id advertised on /v1/models; clients echo it back in requests.
PROXY_MODEL_ID = "claude-code"
PROXY_MODEL_OWNER = "anthropic"

DEFAULT_HOST = "127.0.0.1"
DEFAULT_PORT = 11480
DEFAULT_MODEL = "sonnet"
DEFAULT_CLI_BINARY = "claude"
DEFAULT_TIMEOUT_SECONDS = 300

# Inline tool-call delimiters the agent is taught to emit.
TOOL_CALL_OPEN = "<tool_call>"
TOOL_CALL_CLOSE = "</tool_call>"

SSE_DONE = "data: [DONE]\n\n"
