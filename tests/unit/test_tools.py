"""Tests for tool definitions and local tool execution."""

from typing import List, Literal, Optional

import pytest

from harness_ai.errors import MissingToolExecutorError, ToolInputValidationError
from harness_ai.tools.schema_utils import schema_from_callable
from harness_ai.tools.tool_definition import FunctionTool, ProviderTool
from harness_ai.tools.tool_executor import ToolExecutor


def get_weather(city: str, unit: Literal["c", "f"] = "c", days: Optional[int] = None) -> dict:
    """Current weather for a city."""
    return {"city": city, "unit": unit, "days": days}


class TestSchemaFromCallable:

    def test_required_and_optional_parameters(self):
        schema = schema_from_callable(get_weather)
        assert schema == {
            "type": "object",
            "properties": {
                "city": {"type": "string"},
                "unit": {"enum": ["c", "f"]},
                "days": {"type": "integer"},
            },
            "required": ["city"],
            "additionalProperties": False,
        }

    def test_containers_and_varargs(self):
        def lookup(ids: List[int], filters: dict, *args, **kwargs):
            return ids

        schema = schema_from_callable(lookup)
        assert schema["properties"] == {
            "ids": {"type": "array", "items": {"type": "integer"}},
            "filters": {"type": "object"},
        }
        assert schema["required"] == ["ids", "filters"]


class TestFunctionTool:

    def test_from_callable(self):
        tool = FunctionTool.from_callable(get_weather)
        assert tool.description == "Current weather for a city."
        assert tool.input_schema["required"] == ["city"]
        assert tool.execute({"city": "Rome"}) == {"city": "Rome", "unit": "c", "days": None}

    def test_explicit_description_wins(self):
        tool = FunctionTool.from_callable(get_weather, description="Weather lookup")
        assert tool.description == "Weather lookup"

    def test_provider_tool_settings(self):
        tool = ProviderTool(anthropic_type="web_search_20250305", name="web_search", settings={"max_uses": 3})
        assert tool.type == "provider"
        assert tool.settings == {"max_uses": 3}


class TestToolExecutor:

    @pytest.mark.asyncio
    async def test_sync_executor(self, weather_schema):
        tool = FunctionTool(input_schema=weather_schema, execute=lambda tool_input: tool_input["city"].upper())
        assert await ToolExecutor().execute("weather", tool, {"city": "paris"}) == "PARIS"

    @pytest.mark.asyncio
    async def test_async_executor(self, weather_schema):
        async def execute(tool_input):
            return {"forecast": "rain", **tool_input}

        tool = FunctionTool(input_schema=weather_schema, execute=execute)
        result = await ToolExecutor().execute("weather", tool, {"city": "Oslo"})
        assert result == {"forecast": "rain", "city": "Oslo"}

    @pytest.mark.asyncio
    async def test_missing_executor(self, weather_schema):
        with pytest.raises(MissingToolExecutorError) as exc_info:
            await ToolExecutor().execute("weather", FunctionTool(input_schema=weather_schema), {"city": "Oslo"})
        assert exc_info.value.tool_name == "weather"

    @pytest.mark.asyncio
    async def test_unknown_tool(self):
        with pytest.raises(MissingToolExecutorError):
            await ToolExecutor().execute("weather", None, {})

    @pytest.mark.asyncio
    async def test_schema_violation(self, weather_schema):
        tool = FunctionTool(input_schema=weather_schema, execute=lambda tool_input: "unused")
        with pytest.raises(ToolInputValidationError) as exc_info:
            await ToolExecutor().execute("weather", tool, {"city": 7})
        assert exc_info.value.tool_name == "weather"
        assert "weather" in str(exc_info.value)

    @pytest.mark.asyncio
    async def test_validation_can_be_disabled(self, weather_schema):
        tool = FunctionTool(input_schema=weather_schema, execute=lambda tool_input: "ran")
        assert await ToolExecutor(validate_input=False).execute("weather", tool, {}) == "ran"
