"""Message normalization -- OpenAI message content to plain text.

Chat platforms that sit in front of the proxy decorate user text with
channel headers (``[WhatsApp +1555 2025-01-01 10:00] hello``) and inline
message-id tags. Those are noise for the agent, so they are stripped before
classification and prompt assembly. Synthetic "history was compacted"
notices are dropped entirely.
"""

import re
from typing import Any, Dict, Iterable, List

from translator.models import NormalizedMessage

COMPACTION_MARKER = "The conversation history before this point was compacted"

# Bracketed channel header at the very start of a user message.
PLATFORM_PREFIX_PATTERNS = [
    re.compile(
        r"^\s*\[(?:WhatsApp|Telegram|Discord|Slack|Signal|iMessage|SMS|Matrix)\b[^\]]*\]\s*",
        re.IGNORECASE,
    ),
]

MESSAGE_ID_PATTERN = re.compile(
    r"\s*\[(?:message[_ ]id|msg[_ ]id|id):\s*[^\]]*\]",
    re.IGNORECASE,
)


def content_to_text(content: Any) -> str:
    """Flatten message content (string, or list of text parts or strings) to text."""
    if content is None:
        return ""
    if isinstance(content, str):
        return content
    if isinstance(content, list):
        parts = []
        for part in content:
            if isinstance(part, str):
                parts.append(part)
            elif isinstance(part, dict) and part.get("type") == "text":
                parts.append(str(part.get("text") or ""))
        return "\n".join(parts)
    return str(content)


def clean_user_text(text: str) -> str:
    """Strip channel prefixes and message-id tags from user-authored text."""
    # Removing an id tag can expose another prefix, so run to a fixed point.
    while True:
        cleaned = MESSAGE_ID_PATTERN.sub("", text)
        for pattern in PLATFORM_PREFIX_PATTERNS:
            cleaned = pattern.sub("", cleaned, count=1)
        cleaned = cleaned.strip()
        if cleaned == text:
            return cleaned
        text = cleaned


def message_text(message: Dict[str, Any]) -> str:
    """Normalized text of a single message."""
    text = content_to_text(message.get("content"))
    if message.get("role") == "user":
        text = clean_user_text(text)
    return text


def normalize_messages(messages: Iterable[Dict[str, Any]]) -> List[NormalizedMessage]:
    """Normalize a raw message list, preserving order.

    Compaction notices are dropped for every role; user and assistant
    messages that end up empty are dropped as well since they carry nothing
    the agent could use.
    """
    normalized: List[NormalizedMessage] = []
    for message in messages:
        role = message.get("role", "")
        text = message_text(message)
        if text.startswith(COMPACTION_MARKER):
            continue
        if role in ("user", "assistant") and not text.strip():
            continue
        normalized.append(NormalizedMessage(role=role, text=text))
    return normalized
