"""Tests for translator/tool_schema.py — tool menu rendering."""

from translator.models import ToolDefinition
from translator.tool_schema import (
    TOOL_MENU_HEADING,
    TOOL_USAGE_INSTRUCTIONS,
    describe_tool,
    format_tool_menu,
    tool_definitions,
)

WEATHER_TOOL = {
    "type": "function",
    "function": {
        "name": "get_weather",
        "description": "Current weather for a city.",
        "parameters": {
            "type": "object",
            "properties": {
                "city": {"type": "string", "description": "City name"},
                "units": {"type": "string", "description": "metric or imperial"},
            },
            "required": ["city"],
        },
    },
}


class TestToolDefinitions:
    def test_from_openai_wrapper(self):
        (tool,) = tool_definitions([WEATHER_TOOL])
        assert tool.name == "get_weather"
        assert tool.required == ["city"]
        assert list(tool.parameters) == ["city", "units"]

    def test_bare_function_object(self):
        (tool,) = tool_definitions([{"name": "ping", "description": "Ping."}])
        assert tool == ToolDefinition(name="ping", description="Ping.")

    def test_nameless_and_non_dict_entries_skipped(self):
        assert tool_definitions([{"type": "function", "function": {}}, "junk"]) == []

    def test_null_function_skipped(self):
        assert tool_definitions([{"type": "function", "function": None}]) == []

    def test_malformed_parameters_ignored(self):
        (tool,) = tool_definitions([
            {"type": "function", "function": {"name": "t", "parameters": "oops"}},
        ])
        assert tool == ToolDefinition(name="t")

    def test_malformed_properties_and_required_ignored(self):
        (tool,) = tool_definitions([
            {"name": "t", "parameters": {"properties": ["q"], "required": "q"}},
        ])
        assert (tool.parameters, tool.required) == ({}, [])

    def test_null_name_skipped(self):
        assert tool_definitions([{"name": None}]) == []

    def test_none(self):
        assert tool_definitions(None) == []


class TestDescribeTool:
    def test_parameters_with_required_marker(self):
        (tool,) = tool_definitions([WEATHER_TOOL])
        assert describe_tool(tool) == (
            "**get_weather**: Current weather for a city.\n"
            "Parameters:\n"
            "  - city (string) (required): City name\n"
            "  - units (string): metric or imperial"
        )

    def test_no_parameters(self):
        text = describe_tool(ToolDefinition(name="ping", description="Ping."))
        assert text.endswith("Parameters:\n  (no parameters)")

    def test_missing_type_defaults_to_string(self):
        tool = ToolDefinition(name="t", parameters={"q": {"description": "query"}})
        assert "  - q (string): query" in describe_tool(tool)


class TestFormatToolMenu:
    def test_empty_input_yields_empty_string(self):
        assert format_tool_menu([]) == ""

    def test_heading_then_instructions_then_tools_in_order(self):
        tools = tool_definitions([
            WEATHER_TOOL,
            {"type": "function", "function": {"name": "ping", "description": "Ping."}},
        ])
        menu = format_tool_menu(tools)
        assert menu.startswith(f"{TOOL_MENU_HEADING}\n\n{TOOL_USAGE_INSTRUCTIONS}\n\n")
        assert menu.index("**get_weather**") < menu.index("**ping**")

    def test_instructions_teach_inline_syntax(self):
        assert '<tool_call>{"name": "tool_name", "arguments": {"param": "value"}}</tool_call>' in TOOL_USAGE_INSTRUCTIONS

    def test_deterministic(self):
        tools = tool_definitions([WEATHER_TOOL])
        assert format_tool_menu(tools) == format_tool_menu(tools)
