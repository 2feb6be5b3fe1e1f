"""
Tool menu rendering.

The agent cannot receive OpenAI function schemas natively, so caller tools
are described in prose and the agent is taught an inline tagged-JSON
syntax:

<tool_call>{"name": "bash", "arguments": {"command": "ls"}}</tool_call>

The menu is appended to the system prompt; ``response_parser`` reads the
calls back out of the reply.
"""

from typing import Any, Dict, Iterable, List

from proxy_constants import TOOL_CALL_CLOSE, TOOL_CALL_OPEN
from translator.models import ToolDefinition

TOOL_MENU_HEADING = "## Available Tools"

TOOL_USAGE_INSTRUCTIONS = (
    "The caller can run the tools listed below on your behalf. To call one, "
    f"write a {TOOL_CALL_OPEN}...{TOOL_CALL_CLOSE} block containing a single-line "
    'JSON object with "name" and "arguments", for example:\n'
    f'{TOOL_CALL_OPEN}{{"name": "tool_name", "arguments": {{"param": "value"}}}}{TOOL_CALL_CLOSE}\n'
    "Use one block per call; several blocks may appear in one reply. "
    "Do not wrap the blocks in code fences. The results will be sent back "
    "to you in a later message."
)


def describe_tool(tool: ToolDefinition) -> str:
    """Human-readable description of one tool."""
    params_desc = []
    for name, spec in tool.parameters.items():
        spec = spec if isinstance(spec, dict) else {}
        param_type = spec.get("type", "string")
        req = " (required)" if name in tool.required else ""
        desc = spec.get("description", "")
        params_desc.append(f"  - {name} ({param_type}){req}: {desc}".rstrip())

    params_str = "\n".join(params_desc) if params_desc else "  (no parameters)"
    return f"**{tool.name}**: {tool.description}\nParameters:\n{params_str}"


def format_tool_menu(tools: Iterable[ToolDefinition]) -> str:
    """Render the tool section for the system prompt; empty when no tools."""
    tools = list(tools)
    if not tools:
        return ""
    parts = [TOOL_MENU_HEADING, TOOL_USAGE_INSTRUCTIONS]
    parts.extend(describe_tool(tool) for tool in tools)
    return "\n\n".join(parts)


def tool_definitions(raw_tools: Iterable[Dict[str, Any]]) -> List[ToolDefinition]:
    """Convert request ``tools`` entries, skipping ones without a name."""
    definitions = []
    for raw in raw_tools or []:
        if not isinstance(raw, dict):
            continue
        definition = ToolDefinition.from_openai(raw)
        if definition.name:
            definitions.append(definition)
    return definitions
