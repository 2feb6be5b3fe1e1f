"""
Parse inline tool calls out of the agent's free-text reply.

Format: <tool_call>{"name": "...", "arguments": {...}}</tool_call>

Malformed blocks are logged and skipped; they never abort the scan.
"""

import json
import logging
import re
from typing import Any, List, Optional

from proxy_constants import TOOL_CALL_CLOSE, TOOL_CALL_OPEN
from translator.ids import new_tool_call_id
from translator.models import ParsedReply, ToolCall

logger = logging.getLogger(__name__)

TOOL_CALL_PATTERN = re.compile(
    re.escape(TOOL_CALL_OPEN) + r"\s*(.*?)\s*" + re.escape(TOOL_CALL_CLOSE),
    re.DOTALL,
)


def _decode_call(span: str) -> Optional[ToolCall]:
    try:
        data = json.loads(span)
    except json.JSONDecodeError as e:
        logger.warning("Skipping malformed tool call %r: %s", span[:100], e)
        return None

    if not isinstance(data, dict):
        logger.warning("Skipping tool call that is not a JSON object: %r", span[:100])
        return None

    name = data.get("name")
    if not isinstance(name, str) or not name.strip():
        logger.warning("Skipping tool call without a name: %r", span[:100])
        return None

    arguments: Any = data.get("arguments", {})
    if arguments is None:
        arguments = {}
    if isinstance(arguments, str):
        # Some models double-encode the arguments object.
        try:
            arguments = json.loads(arguments) if arguments.strip() else {}
        except json.JSONDecodeError:
            arguments = None
    if not isinstance(arguments, dict):
        logger.warning("Skipping tool call %r: arguments are not an object", name)
        return None

    return ToolCall(
        id=new_tool_call_id(),
        name=name.strip(),
        arguments=json.dumps(arguments, separators=(",", ":"), ensure_ascii=False),
    )


def parse_tool_calls(text: str) -> List[ToolCall]:
    calls = []
    for match in TOOL_CALL_PATTERN.finditer(text):
        call = _decode_call(match.group(1))
        if call is not None:
            calls.append(call)
    return calls


def parse_reply(text: str) -> ParsedReply:
    """Split a raw reply into tool calls and residual content."""
    text = text or ""
    calls = parse_tool_calls(text)
    residual = TOOL_CALL_PATTERN.sub("", text).strip()
    if calls:
        logger.info("Parsed %d tool call(s): %s", len(calls), ", ".join(c.name for c in calls))
    return ParsedReply(content=residual, tool_calls=calls)
