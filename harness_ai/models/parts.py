"""Stream part models.

These are the normalized, provider-agnostic units a run emits. Every part
carries a fixed ``type`` tag; the union below is closed.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Literal, Optional, Union

from .generation import (
    FinishReason,
    LanguageModelUsage,
    RequestMetadata,
    ResponseMetadata,
)

ProviderMetadata = Dict[str, Dict[str, Any]]


@dataclass
class StartPart:
    type: Literal["start"] = field(default="start", init=False)


@dataclass
class StartStepPart:
    type: Literal["start-step"] = field(default="start-step", init=False)
    request: RequestMetadata = field(default_factory=RequestMetadata)
    warnings: List[str] = field(default_factory=list)


@dataclass
class TextStartPart:
    id: str
    type: Literal["text-start"] = field(default="text-start", init=False)
    provider_metadata: Optional[ProviderMetadata] = None


@dataclass
class TextDeltaPart:
    id: str
    text: str
    type: Literal["text-delta"] = field(default="text-delta", init=False)
    provider_metadata: Optional[ProviderMetadata] = None


@dataclass
class TextEndPart:
    id: str
    type: Literal["text-end"] = field(default="text-end", init=False)
    provider_metadata: Optional[ProviderMetadata] = None


@dataclass
class ReasoningStartPart:
    id: str
    type: Literal["reasoning-start"] = field(default="reasoning-start", init=False)
    provider_metadata: Optional[ProviderMetadata] = None


@dataclass
class ReasoningDeltaPart:
    id: str
    text: str
    type: Literal["reasoning-delta"] = field(default="reasoning-delta", init=False)
    provider_metadata: Optional[ProviderMetadata] = None


@dataclass
class ReasoningEndPart:
    id: str
    type: Literal["reasoning-end"] = field(default="reasoning-end", init=False)
    provider_metadata: Optional[ProviderMetadata] = None


@dataclass
class ToolInputStartPart:
    id: str
    tool_name: str
    type: Literal["tool-input-start"] = field(default="tool-input-start", init=False)
    provider_executed: Optional[bool] = None
    dynamic: Optional[bool] = None
    title: Optional[str] = None
    provider_metadata: Optional[ProviderMetadata] = None


@dataclass
class ToolInputDeltaPart:
    id: str
    delta: str
    type: Literal["tool-input-delta"] = field(default="tool-input-delta", init=False)
    provider_metadata: Optional[ProviderMetadata] = None


@dataclass
class ToolInputEndPart:
    id: str
    type: Literal["tool-input-end"] = field(default="tool-input-end", init=False)
    provider_metadata: Optional[ProviderMetadata] = None


@dataclass
class ToolCallPart:
    """A complete tool call. ``invalid`` marks input that could not be parsed."""
    tool_call_id: str
    tool_name: str
    input: Any = None
    type: Literal["tool-call"] = field(default="tool-call", init=False)
    provider_executed: Optional[bool] = None
    dynamic: Optional[bool] = None
    title: Optional[str] = None
    provider_metadata: Optional[ProviderMetadata] = None
    invalid: Optional[bool] = None
    error: Optional[str] = None


@dataclass
class ToolResultPart:
    tool_call_id: str
    tool_name: str
    output: Any = None
    type: Literal["tool-result"] = field(default="tool-result", init=False)
    input: Any = None
    provider_executed: Optional[bool] = None
    preliminary: Optional[bool] = None
    dynamic: Optional[bool] = None


@dataclass
class ToolErrorPart:
    tool_call_id: str
    tool_name: str
    error: Any = None
    type: Literal["tool-error"] = field(default="tool-error", init=False)
    input: Any = None
    provider_executed: Optional[bool] = None
    dynamic: Optional[bool] = None


@dataclass
class SourcePart:
    id: str
    source_type: Literal["url", "document"]
    type: Literal["source"] = field(default="source", init=False)
    url: Optional[str] = None
    title: Optional[str] = None
    media_type: Optional[str] = None
    filename: Optional[str] = None
    provider_metadata: Optional[ProviderMetadata] = None


@dataclass
class RawPart:
    raw_value: Any
    type: Literal["raw"] = field(default="raw", init=False)


@dataclass
class FinishStepPart:
    type: Literal["finish-step"] = field(default="finish-step", init=False)
    response: ResponseMetadata = field(default_factory=ResponseMetadata)
    usage: LanguageModelUsage = field(default_factory=LanguageModelUsage)
    finish_reason: FinishReason = "other"
    raw_finish_reason: Optional[str] = None
    provider_metadata: Optional[ProviderMetadata] = None


@dataclass
class FinishPart:
    type: Literal["finish"] = field(default="finish", init=False)
    finish_reason: FinishReason = "other"
    total_usage: LanguageModelUsage = field(default_factory=LanguageModelUsage)
    raw_finish_reason: Optional[str] = None


@dataclass
class AbortPart:
    type: Literal["abort"] = field(default="abort", init=False)
    reason: Optional[str] = None


@dataclass
class ErrorPart:
    error: Any
    type: Literal["error"] = field(default="error", init=False)


StreamPart = Union[
    StartPart,
    StartStepPart,
    TextStartPart,
    TextDeltaPart,
    TextEndPart,
    ReasoningStartPart,
    ReasoningDeltaPart,
    ReasoningEndPart,
    ToolInputStartPart,
    ToolInputDeltaPart,
    ToolInputEndPart,
    ToolCallPart,
    ToolResultPart,
    ToolErrorPart,
    SourcePart,
    RawPart,
    FinishStepPart,
    FinishPart,
    AbortPart,
    ErrorPart,
]

ToolResolutionPart = Union[ToolResultPart, ToolErrorPart]
