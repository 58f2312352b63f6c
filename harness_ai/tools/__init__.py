"""Tool definitions and local tool execution."""

from .schema_utils import schema_from_callable
from .tool_definition import FunctionTool, ProviderTool, ToolDefinition, ToolSet
from .tool_executor import ToolExecutor

__all__ = [
    "FunctionTool",
    "ProviderTool",
    "ToolDefinition",
    "ToolExecutor",
    "ToolSet",
    "schema_from_callable",
]
