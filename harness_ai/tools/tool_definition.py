from __future__ import annotations

from typing import Any, Callable, Dict, Literal, Optional, Union

from pydantic import BaseModel, Field
from typing_extensions import Annotated

from .schema_utils import schema_from_callable


class FunctionTool(BaseModel):
    """A tool the model may call; ``execute`` resolves calls locally.

    A tool without ``execute`` is declared to the model but its calls resolve
    as a "missing executor" tool error.
    """
    type: Literal["function"] = "function"
    description: Optional[str] = None
    input_schema: Optional[Dict[str, Any]] = None
    execute: Optional[Callable[[Any], Any]] = None
    dynamic: Optional[bool] = None
    title: Optional[str] = None

    @classmethod
    def from_callable(cls, func: Callable[..., Any], description: Optional[str] = None) -> "FunctionTool":
        """Wrap a keyword-argument function, deriving its input schema."""
        schema = schema_from_callable(func)

        def execute(tool_input: Any) -> Any:
            return func(**(tool_input or {}))

        return cls(
            description=description or (func.__doc__ or "").strip() or None,
            input_schema=schema,
            execute=execute,
        )


class ProviderTool(BaseModel):
    """A tool executed by Anthropic itself (web search, web fetch, tool search)."""
    type: Literal["provider"] = "provider"
    provider: Literal["anthropic"] = "anthropic"
    anthropic_type: str
    name: str
    description: Optional[str] = None
    input_schema: Optional[Dict[str, Any]] = None
    settings: Dict[str, Any] = Field(default_factory=dict)
    dynamic: Optional[bool] = None
    title: Optional[str] = None


ToolDefinition = Annotated[Union[FunctionTool, ProviderTool], Field(discriminator="type")]

ToolSet = Dict[str, ToolDefinition]
