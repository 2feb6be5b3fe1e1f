"""
Context extraction from the caller's system message.

Agent frontends embed three independent sub-documents in their system
prompt, all of which matter to how the request is dispatched:

- a skill catalog as ``<skill><name/><description/><location/></skill>``
  blocks,
- persona files (IDENTITY.md, SOUL.md) pasted under markdown headers,
- a "working directory is: <path>" sentence.

All functions here are read-only; running them twice on the same text gives
the same result.
"""

import os
import re
from typing import Any, Dict, List, Optional, Sequence

from translator.message_normalizer import content_to_text
from translator.models import RequestContext, Skill

SKILL_PATTERN = re.compile(
    r"<skill>\s*<name>([^<]+)</name>\s*"
    r"<description>([^<]+)</description>\s*"
    r"<location>([^<]+)</location>\s*</skill>"
)

MARKDOWN_HEADER = re.compile(r"^(#{1,6})[ \t]+(.*?)[ \t]*$", re.MULTILINE)

# Header text that is a path to a markdown file, e.g. "/home/me/clawd/SOUL.md".
CONTEXT_FILE_NAME = re.compile(r"\S*\.md", re.IGNORECASE)

WORKSPACE_PATTERN = re.compile(r"working directory is:\s*(\S+)", re.IGNORECASE)

SOUL_PARAGRAPH_LIMIT = 3


def system_text(messages: Sequence[Dict[str, Any]]) -> str:
    """Text of the first system message, or an empty string."""
    for message in messages:
        if message.get("role") == "system":
            return content_to_text(message.get("content"))
    return ""


def extract_skills(text: str) -> List[Skill]:
    return [
        Skill(
            name=match.group(1).strip(),
            description=match.group(2).strip(),
            location=match.group(3).strip(),
        )
        for match in SKILL_PATTERN.finditer(text)
    ]


def _context_file_sections(text: str) -> Dict[str, str]:
    """Map upper-cased file basename -> section body.

    A section starts at a header whose text is a ``.md`` path and ends at the
    next file header, or at the next header of the same or a higher level
    ("## Silent Replies" after "## /x/IDENTITY.md"). A header on the first
    line of the body is the pasted file's own title ("# SOUL.md - Who You
    Are") and does not end it.
    """
    sections: Dict[str, str] = {}
    headers = list(MARKDOWN_HEADER.finditer(text))
    for idx, header in enumerate(headers):
        if not CONTEXT_FILE_NAME.fullmatch(header.group(2)):
            continue
        level = len(header.group(1))
        end = len(text)
        for following in headers[idx + 1:]:
            if CONTEXT_FILE_NAME.fullmatch(following.group(2)):
                end = following.start()
                break
            if len(following.group(1)) <= level and text[header.end():following.start()].strip():
                end = following.start()
                break
        basename = header.group(2).rsplit("/", 1)[-1].upper()
        sections.setdefault(basename, text[header.end():end].strip())
    return sections


def extract_persona(text: str) -> Optional[str]:
    """Identity in full plus the opening paragraphs of the soul file."""
    sections = _context_file_sections(text)
    parts = []

    identity = sections.get("IDENTITY.MD")
    if identity:
        parts.append(identity)

    soul = sections.get("SOUL.MD")
    if soul:
        paragraphs = [p.strip() for p in re.split(r"\n\s*\n", soul) if p.strip()]
        parts.append("\n\n".join(paragraphs[:SOUL_PARAGRAPH_LIMIT]))

    return "\n\n".join(parts) if parts else None


def extract_workspace(text: str) -> Optional[str]:
    match = WORKSPACE_PATTERN.search(text)
    if not match:
        return None
    path = match.group(1).rstrip(".,;:")
    if not path:
        return None
    return os.path.expanduser(path)


def extract_context(messages: Sequence[Dict[str, Any]]) -> RequestContext:
    """Run all three extractions over the system message."""
    text = system_text(messages)
    if not text:
        return RequestContext()
    return RequestContext(
        skills=extract_skills(text),
        persona=extract_persona(text),
        workspace=extract_workspace(text),
    )
