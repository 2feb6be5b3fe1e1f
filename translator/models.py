"""
Data model for the translation pipeline.

Every record here lives for a single request. Tool definitions and tool
calls convert from and to OpenAI dicts at the edges and carry plain
attributes in between.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional


class DispatchMode(str, Enum):
    """How a request is handed to the agent."""

    SKILL = "skill"
    CONVERSATIONAL = "conversational"
    CODING = "coding"


@dataclass(frozen=True)
class NormalizedMessage:
    role: str
    text: str


@dataclass(frozen=True)
class Skill:
    """A skill advertised in the system message catalog."""

    name: str
    description: str
    location: str


@dataclass
class RequestContext:
    """What the system message tells us about the caller's environment."""

    skills: List[Skill] = field(default_factory=list)
    persona: Optional[str] = None
    workspace: Optional[str] = None


@dataclass(frozen=True)
class Classification:
    mode: DispatchMode
    skill: Optional[Skill] = None
    rule: str = ""


@dataclass
class ToolDefinition:
    """A caller-supplied function tool."""

    name: str
    description: str = ""
    parameters: Dict[str, Dict[str, Any]] = field(default_factory=dict)
    required: List[str] = field(default_factory=list)

    @classmethod
    def from_openai(cls, tool: Dict[str, Any]) -> "ToolDefinition":
        """Build from ``{"type": "function", "function": {...}}`` or a bare function dict.

        Malformed entries come back with an empty name so callers can skip them.
        """
        func = (tool.get("function") or tool) if isinstance(tool, dict) else None
        if not isinstance(func, dict):
            return cls(name="")
        params = func.get("parameters")
        params = params if isinstance(params, dict) else {}
        properties = params.get("properties")
        required = params.get("required")
        return cls(
            name=str(func.get("name") or ""),
            description=str(func.get("description") or ""),
            parameters=dict(properties) if isinstance(properties, dict) else {},
            required=list(required) if isinstance(required, list) else [],
        )


@dataclass
class ToolCall:
    """A tool call parsed out of the agent's reply."""

    id: str
    name: str
    arguments: str  # compact JSON object

    def to_openai(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "type": "function",
            "function": {"name": self.name, "arguments": self.arguments},
        }


@dataclass
class ParsedReply:
    content: str
    tool_calls: List[ToolCall] = field(default_factory=list)


@dataclass
class BuiltPrompt:
    """Everything the agent runner needs for one invocation."""

    prompt: str
    system_prompt: Optional[str] = None
    replace_system_prompt: bool = False
    allow_tools: bool = True
