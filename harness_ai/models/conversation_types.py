from pydantic import BaseModel, Field
from typing import Any, List, Literal, Union
from typing_extensions import Annotated
from enum import Enum


class TurnRole(str, Enum):
    """Transcript roles."""
    SYSTEM = "system"
    USER = "user"
    ASSISTANT = "assistant"
    TOOL = "tool"


class TextContentPart(BaseModel):
    type: Literal["text"] = "text"
    text: str


class ToolCallContentPart(BaseModel):
    """A tool call made by the assistant, replayed to the provider on the next step."""
    type: Literal["tool-call"] = "tool-call"
    tool_call_id: str
    tool_name: str
    input: Any = None


class ToolResultContentPart(BaseModel):
    """The local resolution of a tool call."""
    type: Literal["tool-result"] = "tool-result"
    tool_call_id: str
    tool_name: str
    output: Any = None
    is_error: bool = False


AssistantContentPart = Annotated[
    Union[TextContentPart, ToolCallContentPart],
    Field(discriminator="type"),
]


class SystemMessage(BaseModel):
    role: Literal["system"] = "system"
    content: str


class UserMessage(BaseModel):
    role: Literal["user"] = "user"
    content: Union[str, List[TextContentPart]]


class AssistantMessage(BaseModel):
    role: Literal["assistant"] = "assistant"
    content: Union[str, List[AssistantContentPart]]


class ToolMessage(BaseModel):
    role: Literal["tool"] = "tool"
    content: List[ToolResultContentPart]


ModelMessage = Annotated[
    Union[SystemMessage, UserMessage, AssistantMessage, ToolMessage],
    Field(discriminator="role"),
]
