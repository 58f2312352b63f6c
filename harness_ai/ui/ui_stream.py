"""
UI message stream protocol.

Re-encodes stream parts as UI chunks (plain dicts with camelCase keys) and
frames them as server-sent events terminated by ``data: [DONE]``.
"""

import json
from typing import Any, AsyncIterable, AsyncIterator, Callable, Dict, List, Mapping, Optional

from fastapi.responses import StreamingResponse

from ..config.constants import SSE_DONE_SENTINEL, UI_MESSAGE_STREAM_VERSION
from ..errors import UnhandledStreamPartError
from ..models.parts import (
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

UI_MESSAGE_STREAM_HEADERS: Mapping[str, str] = {
    "content-type": "text/event-stream",
    "cache-control": "no-cache",
    "connection": "keep-alive",
    "x-vercel-ai-ui-message-stream": UI_MESSAGE_STREAM_VERSION,
    "x-accel-buffering": "no",
}

ErrorFormatter = Callable[[Any], str]


def default_error_text(error: Any) -> str:
    if isinstance(error, BaseException):
        return str(error) or type(error).__name__
    if isinstance(error, str):
        return error
    return json.dumps(error, default=str)


def _chunk(chunk_type: str, **fields: Any) -> Dict[str, Any]:
    chunk = {"type": chunk_type}
    chunk.update({key: value for key, value in fields.items() if value is not None})
    return chunk


def to_ui_message_chunks(part: Any, on_error: Optional[ErrorFormatter] = None) -> List[Dict[str, Any]]:
    """
    Map one stream part to the UI chunks it produces.

    ``raw`` and ``tool-input-end`` parts produce no chunk.

    Raises:
        UnhandledStreamPartError: ``part`` is not a stream part
    """
    format_error = on_error or default_error_text

    if isinstance(part, StartPart):
        return [_chunk("start")]
    if isinstance(part, StartStepPart):
        return [_chunk("start-step")]

    if isinstance(part, (TextStartPart, TextEndPart, ReasoningStartPart, ReasoningEndPart)):
        return [_chunk(part.type, id=part.id, providerMetadata=part.provider_metadata)]
    if isinstance(part, (TextDeltaPart, ReasoningDeltaPart)):
        return [_chunk(part.type, id=part.id, delta=part.text, providerMetadata=part.provider_metadata)]

    if isinstance(part, ToolInputStartPart):
        return [_chunk(
            "tool-input-start",
            toolCallId=part.id,
            toolName=part.tool_name,
            providerExecuted=part.provider_executed,
            providerMetadata=part.provider_metadata,
            dynamic=part.dynamic,
            title=part.title,
        )]
    if isinstance(part, ToolInputDeltaPart):
        return [_chunk("tool-input-delta", toolCallId=part.id, inputTextDelta=part.delta)]

    if isinstance(part, ToolCallPart):
        fields = dict(
            toolCallId=part.tool_call_id,
            toolName=part.tool_name,
            input=part.input,
            providerExecuted=part.provider_executed,
            providerMetadata=part.provider_metadata,
            dynamic=part.dynamic,
            title=part.title,
        )
        if part.invalid:
            return [_chunk("tool-input-error", errorText=part.error or "Invalid tool call", **fields)]
        return [_chunk("tool-input-available", **fields)]

    if isinstance(part, ToolResultPart):
        return [_chunk(
            "tool-output-available",
            toolCallId=part.tool_call_id,
            output=part.output,
            providerExecuted=part.provider_executed,
            dynamic=part.dynamic,
            preliminary=part.preliminary,
        )]
    if isinstance(part, ToolErrorPart):
        return [_chunk(
            "tool-output-error",
            toolCallId=part.tool_call_id,
            providerExecuted=part.provider_executed,
            dynamic=part.dynamic,
            errorText=format_error(part.error),
        )]

    if isinstance(part, SourcePart):
        if part.source_type == "url":
            return [_chunk(
                "source-url",
                sourceId=part.id,
                url=part.url,
                title=part.title,
                providerMetadata=part.provider_metadata,
            )]
        return [_chunk(
            "source-document",
            sourceId=part.id,
            mediaType=part.media_type,
            title=part.title,
            filename=part.filename,
            providerMetadata=part.provider_metadata,
        )]

    if isinstance(part, FinishStepPart):
        return [_chunk("finish-step")]
    if isinstance(part, FinishPart):
        return [_chunk("finish", finishReason=part.finish_reason)]
    if isinstance(part, AbortPart):
        return [_chunk("abort", reason=part.reason)]
    if isinstance(part, ErrorPart):
        return [_chunk("error", errorText=format_error(part.error))]
    if isinstance(part, (RawPart, ToolInputEndPart)):
        return []

    raise UnhandledStreamPartError(part)


async def create_ui_message_stream(
    parts: AsyncIterable[Any],
    on_error: Optional[ErrorFormatter] = None,
) -> AsyncIterator[Dict[str, Any]]:
    """Re-encode a part sequence as UI chunks, in order."""
    async for part in parts:
        for chunk in to_ui_message_chunks(part, on_error):
            yield chunk


async def json_to_sse(chunks: AsyncIterable[Dict[str, Any]]) -> AsyncIterator[str]:
    """Frame each chunk as ``data: <json>`` and finish with the ``[DONE]`` frame."""
    async for chunk in chunks:
        yield f"data: {json.dumps(chunk, default=str, ensure_ascii=False)}\n\n"
    yield f"data: {SSE_DONE_SENTINEL}\n\n"


def ui_message_stream_headers(headers: Optional[Mapping[str, str]] = None) -> Dict[str, str]:
    """Default stream headers overlaid with the caller's (caller wins, case-insensitively)."""
    caller = {key.lower(): value for key, value in (headers or {}).items()}
    merged = dict(UI_MESSAGE_STREAM_HEADERS)
    merged.update(caller)
    return merged


def create_ui_message_stream_response(
    chunks: AsyncIterable[Dict[str, Any]],
    status_code: int = 200,
    headers: Optional[Mapping[str, str]] = None,
) -> StreamingResponse:
    """Stream UI chunks as an SSE HTTP response."""
    merged = ui_message_stream_headers(headers)
    return StreamingResponse(
        json_to_sse(chunks),
        status_code=status_code,
        headers=merged,
        media_type=merged["content-type"],
    )
