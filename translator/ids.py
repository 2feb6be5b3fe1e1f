"""Identifier helpers for completions and tool calls.

Ids are random uuid4 tokens rather than timestamps or a shared counter, so
concurrent requests handled in different worker threads never collide.
"""

import uuid


def new_completion_id() -> str:
    return f"chatcmpl-{uuid.uuid4().hex[:24]}"


def new_tool_call_id() -> str:
    return f"call_{uuid.uuid4().hex[:24]}"
