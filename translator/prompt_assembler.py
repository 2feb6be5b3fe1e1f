"""Outbound prompt assembly.

Assembles the single prompt handed to the agent from layered, typed
sections. Each section kind has one fixed slot, so ordering is decided in
one place:

    system prompt:  PERSONA -> TOOL_MENU
    user prompt:    SKILL preamble wrapping CONTEXT -> TASK

Mode rules:
    - coding:          executor prefix (when requested) + context + task;
                       tool menu appended to the system prompt.
    - skill:           skill instructions wrap the coding-style prompt
                       (without the executor prefix).
    - conversational:  persona + "reply conversationally" directive become
                       the system prompt and the agent's own tools are
                       disabled. The caller's tool menu is suppressed unless
                       ``advertise_tools_in_conversation`` is set.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Dict, List, Optional, Sequence

from translator.models import BuiltPrompt, DispatchMode, NormalizedMessage, Skill

EXECUTOR_PREFIX = "Execute this task and report what you did: "

CONTEXT_FRAMING = (
    "Recent conversation context (for reference only -- the current question "
    "below is what you should act on):"
)

CONVERSATIONAL_DIRECTIVE = (
    "Reply conversationally and stay in character. Do not use tools, run "
    "commands, or read or modify files for this message -- just answer."
)

SKILL_TEMPLATE = """You are helping with a skill called "{name}".

Here are the skill instructions (SKILL.md):
---
{instructions}
---

User request: {request}

Follow the skill instructions above to complete this task. Use bash commands as specified in the skill."""

DEFAULT_CONTEXT_WINDOW = 6
DEFAULT_CONTEXT_CHAR_CAP = 500
TRUNCATION_MARKER = "..."


class EmptyConversationError(ValueError):
    """Raised when the conversation holds no user message to act on."""


class Section(str, Enum):
    PERSONA = "persona"
    TOOL_MENU = "tool_menu"
    SKILL = "skill"
    CONTEXT = "context"
    TASK = "task"


SYSTEM_SECTIONS = (Section.PERSONA, Section.TOOL_MENU)


@dataclass(frozen=True)
class Exchange:
    role: str
    text: str

    @property
    def label(self) -> str:
        return "User" if self.role == "user" else "Assistant"


def exchanges_from(messages: Sequence[NormalizedMessage]) -> List[Exchange]:
    """User/assistant turns only; system and tool messages never reach the prompt."""
    return [Exchange(m.role, m.text) for m in messages if m.role in ("user", "assistant")]


def truncate(text: str, limit: int) -> str:
    if len(text) <= limit:
        return text
    return text[:limit].rstrip() + TRUNCATION_MARKER


class PromptAssembler:
    """Builds a BuiltPrompt from the normalized conversation.

    Args:
        context_window: How many exchanges before the question are kept.
        context_char_cap: Per-message character cap for context lines.
        advertise_tools_in_conversation: Keep the tool menu in
            conversational mode.
    """

    def __init__(
        self,
        *,
        context_window: int = DEFAULT_CONTEXT_WINDOW,
        context_char_cap: int = DEFAULT_CONTEXT_CHAR_CAP,
        advertise_tools_in_conversation: bool = False,
    ):
        self.context_window = max(0, context_window)
        self.context_char_cap = max(1, context_char_cap)
        self.advertise_tools_in_conversation = advertise_tools_in_conversation

    def _context_lines(self, exchanges: Sequence[Exchange], question_idx: int) -> List[str]:
        if self.context_window == 0:
            return []
        start = max(0, question_idx - self.context_window)
        return [
            f"{ex.label}: {truncate(ex.text, self.context_char_cap)}"
            for ex in exchanges[start:question_idx]
        ]

    def build(
        self,
        exchanges: Sequence[Exchange],
        *,
        mode: DispatchMode,
        use_executor_prefix: bool = False,
        skill: Optional[Skill] = None,
        skill_instructions: Optional[str] = None,
        persona: Optional[str] = None,
        tool_menu: str = "",
    ) -> BuiltPrompt:
        """Assemble prompt and system prompt for one agent invocation.

        Raises:
            EmptyConversationError: No user exchange to answer.
        """
        question_idx = None
        for idx in range(len(exchanges) - 1, -1, -1):
            if exchanges[idx].role == "user":
                question_idx = idx
                break
        if question_idx is None:
            raise EmptyConversationError("no user message to answer")

        question = exchanges[question_idx].text
        sections: Dict[Section, str] = {}

        context = self._context_lines(exchanges, question_idx)
        if context:
            sections[Section.CONTEXT] = CONTEXT_FRAMING + "\n" + "\n".join(context)
            sections[Section.TASK] = f"Current question: {question}"
        else:
            sections[Section.TASK] = question

        if mode == DispatchMode.CODING and use_executor_prefix:
            first = Section.CONTEXT if Section.CONTEXT in sections else Section.TASK
            sections[first] = EXECUTOR_PREFIX + sections[first]

        if mode == DispatchMode.SKILL and skill is not None and skill_instructions:
            sections[Section.SKILL] = skill.name

        conversational = mode == DispatchMode.CONVERSATIONAL
        if conversational:
            sections[Section.PERSONA] = "\n\n".join(p for p in (persona, CONVERSATIONAL_DIRECTIVE) if p)

        if tool_menu and (not conversational or self.advertise_tools_in_conversation):
            sections[Section.TOOL_MENU] = tool_menu

        return self._render(sections, skill_instructions, persona_override=conversational and bool(persona))

    @staticmethod
    def _render(
        sections: Dict[Section, str],
        skill_instructions: Optional[str],
        *,
        persona_override: bool,
    ) -> BuiltPrompt:
        body = "\n\n".join(sections[s] for s in (Section.CONTEXT, Section.TASK) if s in sections)
        if Section.SKILL in sections:
            body = SKILL_TEMPLATE.format(
                name=sections[Section.SKILL],
                instructions=skill_instructions,
                request=body,
            )

        system_parts = [sections[s] for s in SYSTEM_SECTIONS if s in sections]
        return BuiltPrompt(
            prompt=body,
            system_prompt="\n\n".join(system_parts) if system_parts else None,
            replace_system_prompt=persona_override,
            allow_tools=Section.PERSONA not in sections,
        )
