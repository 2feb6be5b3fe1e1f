"""
Dispatch-mode classification for the latest user message.

Precedence, highest first:

1. An explicit skill invocation ("use wingman skill to ...") that resolves
   against the request's skill catalog.
2. The coding rules -- action verbs, software nouns, workflow nouns and
   code-looking tokens. These run before the conversational rules so a
   short technical question ("fix login bug?") is not mistaken for chat
   because of its trailing question mark.
3. The conversational rules -- greetings, question openers, trailing "?",
   acknowledgments.
4. A length fallback.

The rules live in ``CLASSIFICATION_RULES`` so they can be tested and
extended without touching the control flow.
"""

import logging
import re
from dataclasses import dataclass
from typing import List, Optional, Pattern, Sequence

from translator.models import Classification, DispatchMode, Skill

logger = logging.getLogger(__name__)

SKILL_INVOCATION_PATTERNS = [
    re.compile(r"\buse\s+([\w-]+)\s+skill\b", re.IGNORECASE),
    re.compile(r"\b([\w-]+)\s+skill\s+to\b", re.IGNORECASE),
    re.compile(r"\buse\s+([\w-]+)\s+to\b", re.IGNORECASE),
]

VENDOR_SKILL_PREFIX = "claude-code-"
FUZZY_PREFIX_LENGTH = 4

SHORT_MESSAGE_THRESHOLD = 80


@dataclass(frozen=True)
class ClassificationRule:
    name: str
    pattern: Pattern[str]
    mode: DispatchMode

    def matches(self, text: str) -> bool:
        return self.pattern.search(text) is not None


def _rule(name: str, pattern: str, mode: DispatchMode) -> ClassificationRule:
    return ClassificationRule(name, re.compile(pattern), mode)


CLASSIFICATION_RULES: List[ClassificationRule] = [
    # Coding
    _rule(
        "action_verb",
        r"\b(fix|implement|create|build|write|refactor|debug|deploy|install|"
        r"update|upgrade|add|remove|delete|rename|migrate|configure|optimi[sz]e|"
        r"compile|lint|run|test|commit|push|merge|generate|setup|set up)\b",
        DispatchMode.CODING,
    ),
    _rule(
        "software_noun",
        r"\b(function|class|method|variable|file|files|directory|folder|script|"
        r"module|package|library|repo|repository|codebase|api|endpoint|database|"
        r"schema|query|server|config|dependency|dependencies)\b",
        DispatchMode.CODING,
    ),
    _rule(
        "workflow_noun",
        r"\b(bug|bugs|issue|issues|commit|branch|pull request|pr|deployment|"
        r"error|exception|stack ?trace|traceback|build|ci|pipeline)\b",
        DispatchMode.CODING,
    ),
    _rule("inline_code", r"`[^`]+`", DispatchMode.CODING),
    _rule(
        "source_extension",
        r"\w\.(py|js|ts|tsx|jsx|go|rs|java|rb|sh|json|ya?ml|toml|md|sql|css|html)\b",
        DispatchMode.CODING,
    ),
    # Conversational
    _rule(
        "greeting",
        r"^(hi|hello|hey|yo|sup|hiya|howdy|good (morning|afternoon|evening|night))\b",
        DispatchMode.CONVERSATIONAL,
    ),
    _rule(
        "question_opener",
        r"^(what|who|why|how|when|where|which|can you|could you|would you|"
        r"do you|are you|is it|tell me)\b",
        DispatchMode.CONVERSATIONAL,
    ),
    _rule("trailing_question", r"\?\s*$", DispatchMode.CONVERSATIONAL),
    _rule(
        "acknowledgment",
        r"\b(thanks|thank you|thx|ty|ok|okay|cool|great|nice|awesome|lol|haha)\b",
        DispatchMode.CONVERSATIONAL,
    ),
]


def skill_name_variants(name: str) -> List[str]:
    """Spellings a user might use for a catalog skill name."""
    lower = name.lower()
    variants = [
        lower,
        lower.replace("-", ""),
        lower.replace("-", " "),
        lower.replace(VENDOR_SKILL_PREFIX, ""),
    ]
    unique: List[str] = []
    for variant in variants:
        if variant and variant not in unique:
            unique.append(variant)
    return unique


def _variant_matches(requested: str, variant: str) -> bool:
    # Abbreviations ("win" -> "wingman") and typos ("wingmand" -> "wingman").
    return (
        requested == variant
        or variant.startswith(requested)
        or requested.startswith(variant[:FUZZY_PREFIX_LENGTH])
    )


def resolve_skill(requested: str, skills: Sequence[Skill]) -> Optional[Skill]:
    """First catalog skill whose name variants match ``requested``."""
    requested = requested.lower()
    for skill in skills:
        for variant in skill_name_variants(skill.name):
            if _variant_matches(requested, variant):
                return skill
    return None


def find_mentioned_skill(text: str, skills: Sequence[Skill]) -> Optional[Skill]:
    if not skills:
        return None
    for pattern in SKILL_INVOCATION_PATTERNS:
        for match in pattern.finditer(text):
            requested = match.group(1)
            logger.debug("Looking for skill: %r", requested)
            skill = resolve_skill(requested, skills)
            if skill is not None:
                return skill
    return None


def classify(text: str, skills: Sequence[Skill] = ()) -> Classification:
    """Classify the latest user message.

    Args:
        text: Normalized text of the latest user message.
        skills: Skill catalog extracted from the system message.

    Returns:
        A Classification naming the mode, the bound skill (skill mode only)
        and the rule that decided it.
    """
    skill = find_mentioned_skill(text, skills)
    if skill is not None:
        return Classification(DispatchMode.SKILL, skill=skill, rule="skill_invocation")

    lowered = text.lower().strip()
    for rule in CLASSIFICATION_RULES:
        if rule.matches(lowered):
            return Classification(rule.mode, rule=rule.name)

    if len(lowered) < SHORT_MESSAGE_THRESHOLD and "file" not in lowered and "code" not in lowered:
        return Classification(DispatchMode.CONVERSATIONAL, rule="short_message")
    return Classification(DispatchMode.CODING, rule="long_message")
