"""Data models: transcript messages, run options and stream parts."""

from .conversation_types import (
    AssistantMessage,
    ModelMessage,
    SystemMessage,
    TextContentPart,
    ToolCallContentPart,
    ToolMessage,
    ToolResultContentPart,
    TurnRole,
    UserMessage,
)
from .generation import (
    FinishReason,
    GenerateTextResult,
    LanguageModelUsage,
    RequestMetadata,
    ResponseMetadata,
    StepResult,
    StreamTextOptions,
)
from .parts import (
    AbortPart,
    ErrorPart,
    FinishPart,
    FinishStepPart,
    RawPart,
    ReasoningDeltaPart,
    ReasoningEndPart,
    ReasoningStartPart,
    SourcePart,
    StartPart,
    StartStepPart,
    StreamPart,
    TextDeltaPart,
    TextEndPart,
    TextStartPart,
    ToolCallPart,
    ToolErrorPart,
    ToolInputDeltaPart,
    ToolInputEndPart,
    ToolInputStartPart,
    ToolResultPart,
)

__all__ = [
    "AbortPart",
    "AssistantMessage",
    "ErrorPart",
    "FinishPart",
    "FinishReason",
    "FinishStepPart",
    "GenerateTextResult",
    "LanguageModelUsage",
    "ModelMessage",
    "RawPart",
    "ReasoningDeltaPart",
    "ReasoningEndPart",
    "ReasoningStartPart",
    "RequestMetadata",
    "ResponseMetadata",
    "SourcePart",
    "StartPart",
    "StartStepPart",
    "StepResult",
    "StreamPart",
    "StreamTextOptions",
    "SystemMessage",
    "TextContentPart",
    "TextDeltaPart",
    "TextEndPart",
    "TextStartPart",
    "ToolCallContentPart",
    "ToolCallPart",
    "ToolErrorPart",
    "ToolInputDeltaPart",
    "ToolInputEndPart",
    "ToolInputStartPart",
    "ToolMessage",
    "ToolResultContentPart",
    "ToolResultPart",
    "TurnRole",
    "UserMessage",
]
