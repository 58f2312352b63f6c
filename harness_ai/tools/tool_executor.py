from __future__ import annotations

import inspect
from typing import Any

from jsonschema import Draft202012Validator, ValidationError

from ..errors import MissingToolExecutorError, ToolInputValidationError
from .tool_definition import FunctionTool


class ToolExecutor:
    """Runs local tool executors for tool calls the model made."""

    def __init__(self, validate_input: bool = True) -> None:
        self.validate_input = validate_input

    def validate(self, tool_name: str, tool: FunctionTool, tool_input: Any) -> None:
        if not self.validate_input or not tool.input_schema:
            return
        try:
            Draft202012Validator(tool.input_schema).validate(tool_input)
        except ValidationError as e:
            raise ToolInputValidationError(tool_name, e.message) from e

    async def execute(self, tool_name: str, tool: Any, tool_input: Any) -> Any:
        """Validate ``tool_input`` and invoke the tool's executor.

        Sync and async executors are both supported. Raises
        MissingToolExecutorError when the tool has no executor.
        """
        if not isinstance(tool, FunctionTool) or tool.execute is None:
            raise MissingToolExecutorError(tool_name)
        self.validate(tool_name, tool, tool_input)
        result = tool.execute(tool_input)
        if inspect.isawaitable(result):
            result = await result
        return result
