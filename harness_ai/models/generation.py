import asyncio
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Callable, Dict, List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from ..config.constants import DEFAULT_MAX_OUTPUT_TOKENS, DEFAULT_MAX_TOOL_ROUNDTRIPS
from ..errors import InvalidPromptError
from ..tools.tool_definition import ToolSet
from .conversation_types import ModelMessage


FinishReason = Literal["stop", "length", "content-filter", "tool-calls", "error", "other"]

FINISH_REASONS = ("stop", "length", "content-filter", "tool-calls", "error", "other")


@dataclass
class LanguageModelUsage:
    """Token usage for one step or a whole run.

    ``total_tokens`` is always ``input_tokens + output_tokens``.
    """
    input_tokens: int = 0
    output_tokens: int = 0
    total_tokens: int = 0
    reasoning_tokens: int = 0
    cached_input_tokens: int = 0

    def __add__(self, other: "LanguageModelUsage") -> "LanguageModelUsage":
        input_tokens = self.input_tokens + other.input_tokens
        output_tokens = self.output_tokens + other.output_tokens
        return LanguageModelUsage(
            input_tokens=input_tokens,
            output_tokens=output_tokens,
            total_tokens=input_tokens + output_tokens,
            reasoning_tokens=self.reasoning_tokens + other.reasoning_tokens,
            cached_input_tokens=self.cached_input_tokens + other.cached_input_tokens,
        )

    def to_dict(self) -> Dict[str, int]:
        return {
            "inputTokens": self.input_tokens,
            "outputTokens": self.output_tokens,
            "totalTokens": self.total_tokens,
            "reasoningTokens": self.reasoning_tokens,
            "cachedInputTokens": self.cached_input_tokens,
        }


@dataclass
class RequestMetadata:
    """The request body sent for a step."""
    body: Dict[str, Any] = field(default_factory=dict)


@dataclass
class ResponseMetadata:
    """Response identity captured from the provider's message-start event."""
    id: Optional[str] = None
    model_id: Optional[str] = None
    timestamp: Optional[datetime] = None
    headers: Dict[str, str] = field(default_factory=dict)


@dataclass
class StepResult:
    """One request/response cycle of a run."""
    text: str = ""
    reasoning_text: str = ""
    tool_calls: List[Any] = field(default_factory=list)
    tool_results: List[Any] = field(default_factory=list)
    finish_reason: FinishReason = "other"
    raw_finish_reason: Optional[str] = None
    usage: LanguageModelUsage = field(default_factory=LanguageModelUsage)
    request: RequestMetadata = field(default_factory=RequestMetadata)
    response: ResponseMetadata = field(default_factory=ResponseMetadata)
    warnings: List[str] = field(default_factory=list)
    messages: List[Any] = field(default_factory=list)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class StreamTextOptions(BaseModel):
    """
    Validated options for a streaming run.

    Exactly one of ``prompt`` and ``messages`` must be given. ``model`` is an
    AnthropicModel produced by create_anthropic().
    """
    model_config = ConfigDict(arbitrary_types_allowed=True)

    model: Any = Field(..., description="AnthropicModel used for every step")
    prompt: Optional[str] = Field(None, description="Flat user prompt")
    messages: Optional[List[ModelMessage]] = Field(None, description="Message transcript")
    system: Optional[str] = Field(None, description="System instruction")
    tools: ToolSet = Field(default_factory=dict, description="Tool name to definition")

    max_output_tokens: int = Field(default=DEFAULT_MAX_OUTPUT_TOKENS, ge=1, description="Maximum tokens per step")
    temperature: Optional[float] = Field(None, ge=0.0, description="Sampling temperature")
    top_p: Optional[float] = Field(None, ge=0.0, le=1.0, description="Nucleus sampling parameter")
    stop_sequences: Optional[List[str]] = Field(None, description="Stop sequences")

    include_raw_chunks: bool = Field(False, description="Emit raw parts for every provider frame")
    abort_signal: Optional[asyncio.Event] = Field(None, description="Cooperative cancellation signal")
    max_tool_roundtrips: int = Field(
        default=DEFAULT_MAX_TOOL_ROUNDTRIPS, ge=0, description="Maximum number of steps (requests) per run"
    )
    clock: Callable[[], datetime] = Field(default=_utcnow, description="Timestamp source for response metadata")

    @field_validator("stop_sequences")
    def validate_stop_sequences(cls, v):
        if v is not None and not v:
            return None
        return v

    @classmethod
    def from_kwargs(cls, **kwargs: Any) -> "StreamTextOptions":
        """Build options, rejecting an inconsistent prompt/messages pair."""
        prompt = kwargs.get("prompt")
        messages = kwargs.get("messages")
        if prompt is None and messages is None:
            raise InvalidPromptError("either prompt or messages must be provided")
        if prompt is not None and messages is not None:
            raise InvalidPromptError("prompt and messages are mutually exclusive")
        if messages is not None and len(messages) == 0:
            raise InvalidPromptError("messages must not be empty")
        return cls(**kwargs)


@dataclass
class GenerateTextResult:
    """Completed run returned by generate_text()."""
    text: str = ""
    finish_reason: FinishReason = "other"
    raw_finish_reason: Optional[str] = None
    usage: LanguageModelUsage = field(default_factory=LanguageModelUsage)
    response: ResponseMetadata = field(default_factory=ResponseMetadata)
    tool_calls: List[Any] = field(default_factory=list)
    tool_results: List[Any] = field(default_factory=list)
    steps: List[StepResult] = field(default_factory=list)
