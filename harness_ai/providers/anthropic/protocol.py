"""
Anthropic Messages streaming event vocabulary.

``parse_anthropic_stream_chunk`` decodes one event payload into a closed set
of tagged variants. Types outside the vocabulary decode to the explicit
``Unknown*`` fallbacks rather than failing, so new provider event kinds are
skipped instead of breaking a stream. Payloads that carry a known tag but do
not match its declared shape raise ``pydantic.ValidationError``.
"""

from __future__ import annotations

from typing import Any, Dict, List, Literal, Mapping, Optional, Type, TypeVar, Union

from pydantic import BaseModel, ConfigDict, field_validator


class _ProtocolModel(BaseModel):
    model_config = ConfigDict(extra="allow")


M = TypeVar("M", bound=_ProtocolModel)


def _decode_variant(value: Any, variants: Mapping[str, Type[M]], fallback: Type[M]) -> Any:
    if isinstance(value, BaseModel):
        return value
    if not isinstance(value, dict):
        raise ValueError(f"expected an object, got {type(value).__name__}")
    model = variants.get(value.get("type"), fallback)
    return model.model_validate(value)


# Content blocks

class TextBlock(_ProtocolModel):
    type: Literal["text"]
    text: str = ""


class ThinkingBlock(_ProtocolModel):
    type: Literal["thinking"]
    thinking: str = ""
    signature: Optional[str] = None


class RedactedThinkingBlock(_ProtocolModel):
    type: Literal["redacted_thinking"]
    data: str = ""


class ToolUseBlock(_ProtocolModel):
    type: Literal["tool_use"]
    id: str
    name: str
    input: Any = None


class ServerToolUseBlock(_ProtocolModel):
    type: Literal["server_tool_use"]
    id: str
    name: str
    input: Any = None


class WebSearchToolResultBlock(_ProtocolModel):
    type: Literal["web_search_tool_result"]
    tool_use_id: str
    content: Any = None


class WebFetchToolResultBlock(_ProtocolModel):
    type: Literal["web_fetch_tool_result"]
    tool_use_id: str
    content: Any = None


class ToolSearchToolResultBlock(_ProtocolModel):
    type: Literal["tool_search_tool_result"]
    tool_use_id: str
    content: Any = None


class UnknownBlock(_ProtocolModel):
    type: str = "unknown"


ContentBlock = Union[
    TextBlock,
    ThinkingBlock,
    RedactedThinkingBlock,
    ToolUseBlock,
    ServerToolUseBlock,
    WebSearchToolResultBlock,
    WebFetchToolResultBlock,
    ToolSearchToolResultBlock,
    UnknownBlock,
]

_BLOCK_TYPES: Dict[str, Type[_ProtocolModel]] = {
    "text": TextBlock,
    "thinking": ThinkingBlock,
    "redacted_thinking": RedactedThinkingBlock,
    "tool_use": ToolUseBlock,
    "server_tool_use": ServerToolUseBlock,
    "web_search_tool_result": WebSearchToolResultBlock,
    "web_fetch_tool_result": WebFetchToolResultBlock,
    "tool_search_tool_result": ToolSearchToolResultBlock,
}

PROVIDER_TOOL_RESULT_BLOCKS = (
    WebSearchToolResultBlock,
    WebFetchToolResultBlock,
    ToolSearchToolResultBlock,
)


# Block deltas

class TextDelta(_ProtocolModel):
    type: Literal["text_delta"]
    text: str = ""


class InputJsonDelta(_ProtocolModel):
    type: Literal["input_json_delta"]
    partial_json: str = ""


class ThinkingDelta(_ProtocolModel):
    type: Literal["thinking_delta"]
    thinking: str = ""


class SignatureDelta(_ProtocolModel):
    type: Literal["signature_delta"]
    signature: str = ""


class CitationsDelta(_ProtocolModel):
    type: Literal["citations_delta"]
    citation: Dict[str, Any]


class UnknownDelta(_ProtocolModel):
    type: str = "unknown"


BlockDelta = Union[TextDelta, InputJsonDelta, ThinkingDelta, SignatureDelta, CitationsDelta, UnknownDelta]

_DELTA_TYPES: Dict[str, Type[_ProtocolModel]] = {
    "text_delta": TextDelta,
    "input_json_delta": InputJsonDelta,
    "thinking_delta": ThinkingDelta,
    "signature_delta": SignatureDelta,
    "citations_delta": CitationsDelta,
}


# Stream chunks

class MessageInfo(_ProtocolModel):
    id: Optional[str] = None
    model: Optional[str] = None
    usage: Optional[Dict[str, Any]] = None
    content: List[ContentBlock] = []

    @field_validator("content", mode="before")
    def decode_content(cls, v):
        if v is None:
            return []
        return [_decode_variant(block, _BLOCK_TYPES, UnknownBlock) for block in v]


class MessageDeltaInfo(_ProtocolModel):
    stop_reason: Optional[str] = None
    stop_sequence: Optional[str] = None


class ErrorInfo(_ProtocolModel):
    type: str = "error"
    message: str = ""


class MessageStartChunk(_ProtocolModel):
    type: Literal["message_start"]
    message: MessageInfo


class ContentBlockStartChunk(_ProtocolModel):
    type: Literal["content_block_start"]
    index: int
    content_block: ContentBlock

    @field_validator("content_block", mode="before")
    def decode_content_block(cls, v):
        return _decode_variant(v, _BLOCK_TYPES, UnknownBlock)


class ContentBlockDeltaChunk(_ProtocolModel):
    type: Literal["content_block_delta"]
    index: int
    delta: BlockDelta

    @field_validator("delta", mode="before")
    def decode_delta(cls, v):
        return _decode_variant(v, _DELTA_TYPES, UnknownDelta)


class ContentBlockStopChunk(_ProtocolModel):
    type: Literal["content_block_stop"]
    index: int


class MessageDeltaChunk(_ProtocolModel):
    type: Literal["message_delta"]
    delta: MessageDeltaInfo = MessageDeltaInfo()
    usage: Optional[Dict[str, Any]] = None


class MessageStopChunk(_ProtocolModel):
    type: Literal["message_stop"]


class PingChunk(_ProtocolModel):
    type: Literal["ping"]


class ErrorChunk(_ProtocolModel):
    type: Literal["error"]
    error: ErrorInfo = ErrorInfo()


class UnknownChunk(_ProtocolModel):
    type: str = "unknown"


AnthropicStreamChunk = Union[
    MessageStartChunk,
    ContentBlockStartChunk,
    ContentBlockDeltaChunk,
    ContentBlockStopChunk,
    MessageDeltaChunk,
    MessageStopChunk,
    PingChunk,
    ErrorChunk,
    UnknownChunk,
]

_CHUNK_TYPES: Dict[str, Type[_ProtocolModel]] = {
    "message_start": MessageStartChunk,
    "content_block_start": ContentBlockStartChunk,
    "content_block_delta": ContentBlockDeltaChunk,
    "content_block_stop": ContentBlockStopChunk,
    "message_delta": MessageDeltaChunk,
    "message_stop": MessageStopChunk,
    "ping": PingChunk,
    "error": ErrorChunk,
}


def parse_anthropic_stream_chunk(raw: Any) -> AnthropicStreamChunk:
    """
    Decode one parsed JSON payload into its stream chunk variant.

    Raises:
        ValueError: ``raw`` is not an object, or a known variant has the
            wrong shape (pydantic.ValidationError is a ValueError).
    """
    return _decode_variant(raw, _CHUNK_TYPES, UnknownChunk)


def web_search_results(content: Any) -> List[Dict[str, Any]]:
    """The result entries of a web_search_tool_result block, or [] for an error payload."""
    if not isinstance(content, list):
        return []
    return [item for item in content if isinstance(item, dict) and item.get("type") == "web_search_result"]
