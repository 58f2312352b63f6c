"""
Translation of Anthropic stream events into stream parts.

One AnthropicStreamTranslator handles one step. It owns the per-index
content block state and accumulates what the orchestrator needs once the
step ends: tool calls, provider-executed results, the assistant content for
the transcript, usage and the finish reason.
"""

from __future__ import annotations

import json
import logging
import uuid
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Callable, Dict, List, Optional, Union

from ...core.normalization.finish_reason import map_anthropic_stop_reason
from ...core.normalization.usage import extract_cache_info, merge_usage_update, normalize_usage
from ...errors import ProviderEventParseError, ProviderStreamIncompleteError
from ...models.conversation_types import TextContentPart, ToolCallContentPart
from ...models.generation import FinishReason, LanguageModelUsage, RequestMetadata, ResponseMetadata
from ...models.parts import (
    ErrorPart,
    FinishStepPart,
    ProviderMetadata,
    RawPart,
    ReasoningDeltaPart,
    ReasoningEndPart,
    ReasoningStartPart,
    SourcePart,
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
    ToolResolutionPart,
    ToolResultPart,
)
from ...tools.tool_definition import ToolSet
from ..errors import ErrorMapper
from .client import ParsedStreamEvent
from .protocol import (
    PROVIDER_TOOL_RESULT_BLOCKS,
    CitationsDelta,
    ContentBlockDeltaChunk,
    ContentBlockStartChunk,
    ContentBlockStopChunk,
    ErrorChunk,
    InputJsonDelta,
    MessageDeltaChunk,
    MessageStartChunk,
    MessageStopChunk,
    PingChunk,
    RedactedThinkingBlock,
    ServerToolUseBlock,
    SignatureDelta,
    TextBlock,
    TextDelta,
    ThinkingBlock,
    ThinkingDelta,
    ToolUseBlock,
    WebFetchToolResultBlock,
    WebSearchToolResultBlock,
    web_search_results,
)

logger = logging.getLogger(__name__)

# Tool owning each provider result block, used when its call was not seen
_RESULT_BLOCK_TOOL_NAMES = {
    "web_search_tool_result": "web_search",
    "web_fetch_tool_result": "web_fetch",
    "tool_search_tool_result": "tool_search",
}

_DOCUMENT_CITATION_MEDIA_TYPES = {
    "char_location": "text/plain",
    "page_location": "application/pdf",
    "content_block_location": "text/plain",
}


def generate_id() -> str:
    return uuid.uuid4().hex[:16]


def _anthropic_metadata(**values: Any) -> Optional[ProviderMetadata]:
    present = {key: value for key, value in values.items() if value is not None}
    return {"anthropic": present} if present else None


@dataclass
class ContentBlockState:
    """Accumulator for one open content block."""
    kind: str  # text | reasoning | tool | passive
    id: str
    tool_name: Optional[str] = None
    provider_executed: bool = False
    dynamic: Optional[bool] = None
    title: Optional[str] = None
    initial_input: Any = None
    signature: Optional[str] = None
    fragments: List[str] = field(default_factory=list)


class AnthropicStreamTranslator:
    """Stateful event-to-part translator for a single step."""

    def __init__(
        self,
        *,
        request_body: Dict[str, Any],
        warnings: Optional[List[str]] = None,
        tools: Optional[ToolSet] = None,
        provider_tool_names: Optional[Dict[str, str]] = None,
        response_headers: Optional[Dict[str, str]] = None,
        include_raw_chunks: bool = False,
        clock: Optional[Callable[[], datetime]] = None,
        id_generator: Callable[[], str] = generate_id,
    ):
        self.request_body = request_body
        self.warnings = list(warnings or [])
        self.tools = tools or {}
        self.provider_tool_names = provider_tool_names or {}
        self.include_raw_chunks = include_raw_chunks
        self.clock = clock
        self.id_generator = id_generator

        self.started = False
        self.finished = False
        self.failed = False
        self.response = ResponseMetadata(headers=dict(response_headers or {}))
        self.raw_usage: Dict[str, Any] = {}
        self.raw_finish_reason: Optional[str] = None
        self.stop_sequence: Optional[str] = None

        self.tool_calls: List[ToolCallPart] = []
        self.provider_results: List[ToolResolutionPart] = []
        self.content: List[Union[TextContentPart, ToolCallContentPart]] = []
        self._text_segments: List[str] = []
        self._reasoning_segments: List[str] = []
        self._blocks: Dict[int, ContentBlockState] = {}
        self._server_calls: Dict[str, ToolCallPart] = {}

    @property
    def text(self) -> str:
        return "".join(self._text_segments)

    @property
    def reasoning_text(self) -> str:
        return "".join(self._reasoning_segments)

    @property
    def usage(self) -> LanguageModelUsage:
        return normalize_usage(self.raw_usage, "anthropic")

    @property
    def finish_reason(self) -> FinishReason:
        return map_anthropic_stop_reason(self.raw_finish_reason)

    @property
    def local_tool_calls(self) -> List[ToolCallPart]:
        return [call for call in self.tool_calls if not call.provider_executed]

    def process(self, event: ParsedStreamEvent) -> List[StreamPart]:
        """Translate one parsed event into zero or more parts."""
        parts: List[StreamPart] = []
        if self.include_raw_chunks:
            parts.append(RawPart(raw_value=event.raw_value))

        if event.chunk is None:
            self.failed = True
            raw_data = event.raw_value if isinstance(event.raw_value, str) else json.dumps(event.raw_value)
            parts.append(ErrorPart(error=ProviderEventParseError(
                f"failed to parse provider event: {event.parse_error}", raw_data=raw_data,
            )))
            return parts

        chunk = event.chunk
        if isinstance(chunk, MessageStartChunk):
            parts.extend(self._message_start(chunk))
        elif isinstance(chunk, ContentBlockStartChunk):
            parts.extend(self._block_start(chunk))
        elif isinstance(chunk, ContentBlockDeltaChunk):
            parts.extend(self._block_delta(chunk))
        elif isinstance(chunk, ContentBlockStopChunk):
            if chunk.index in self._blocks:
                parts.extend(self._end_block(chunk.index))
            else:
                logger.debug("content_block_stop for unknown index %d", chunk.index)
        elif isinstance(chunk, MessageDeltaChunk):
            self.raw_usage = merge_usage_update(self.raw_usage, chunk.usage)
            if chunk.delta.stop_reason is not None:
                self.raw_finish_reason = chunk.delta.stop_reason
            if chunk.delta.stop_sequence is not None:
                self.stop_sequence = chunk.delta.stop_sequence
        elif isinstance(chunk, MessageStopChunk):
            parts.extend(self._close_open_blocks())
            parts.append(self._finish_step(self.finish_reason))
            self.finished = True
        elif isinstance(chunk, ErrorChunk):
            self.failed = True
            parts.append(ErrorPart(error=ErrorMapper.from_stream_error(chunk.error.type, chunk.error.message)))
        elif isinstance(chunk, PingChunk):
            pass
        else:
            logger.debug("Skipping unknown stream event type %r", chunk.type)
        return parts

    def close(self) -> List[StreamPart]:
        """
        Finalize a step whose event stream ended without message_stop.

        Open blocks are ended, the step is marked failed, and a finish-step is
        emitted if the step had started.
        """
        if self.finished:
            return []
        parts = self._close_open_blocks()
        if not self.failed:
            self.failed = True
            parts.append(ErrorPart(error=ProviderStreamIncompleteError(
                "provider stream ended before message_stop"
            )))
        if self.started:
            parts.append(self._finish_step("error"))
        self.finished = True
        return parts

    def _message_start(self, chunk: MessageStartChunk) -> List[StreamPart]:
        if self.started:
            logger.debug("Ignoring repeated message_start")
            return []
        self.started = True
        self.response.id = chunk.message.id
        self.response.model_id = chunk.message.model
        self.response.timestamp = self.clock() if self.clock else None
        self.raw_usage = dict(chunk.message.usage or {})
        parts: List[StreamPart] = [
            StartStepPart(request=RequestMetadata(body=self.request_body), warnings=list(self.warnings)),
        ]
        # Blocks delivered complete inside message_start are started and ended
        # at once. Negative indices keep them clear of streamed block indices.
        for position, block in enumerate(chunk.message.content):
            index = -(position + 1)
            parts.extend(self._open_block(index, block))
            parts.extend(self._end_block(index))
        return parts

    def _block_start(self, chunk: ContentBlockStartChunk) -> List[StreamPart]:
        return self._open_block(chunk.index, chunk.content_block)

    def _open_block(self, index: int, block: Any) -> List[StreamPart]:
        parts: List[StreamPart] = []
        if index in self._blocks:
            parts.extend(self._end_block(index))

        if isinstance(block, TextBlock):
            state = ContentBlockState(kind="text", id=self.id_generator())
            parts.append(TextStartPart(id=state.id))
            if block.text:
                state.fragments.append(block.text)
                parts.append(TextDeltaPart(id=state.id, text=block.text))
        elif isinstance(block, ThinkingBlock):
            state = ContentBlockState(kind="reasoning", id=self.id_generator(), signature=block.signature)
            parts.append(ReasoningStartPart(id=state.id))
            if block.thinking:
                state.fragments.append(block.thinking)
                parts.append(ReasoningDeltaPart(id=state.id, text=block.thinking))
        elif isinstance(block, RedactedThinkingBlock):
            state = ContentBlockState(kind="reasoning", id=self.id_generator())
            parts.append(ReasoningStartPart(
                id=state.id, provider_metadata=_anthropic_metadata(redactedData=block.data),
            ))
        elif isinstance(block, ToolUseBlock):
            tool = self.tools.get(block.name)
            state = ContentBlockState(
                kind="tool",
                id=block.id,
                tool_name=block.name,
                dynamic=getattr(tool, "dynamic", None),
                title=getattr(tool, "title", None),
                initial_input=block.input,
            )
            parts.append(ToolInputStartPart(
                id=state.id, tool_name=block.name, dynamic=state.dynamic, title=state.title,
            ))
        elif isinstance(block, ServerToolUseBlock):
            state = ContentBlockState(
                kind="tool",
                id=block.id,
                tool_name=self.provider_tool_names.get(block.name, block.name),
                provider_executed=True,
                initial_input=block.input,
            )
            parts.append(ToolInputStartPart(id=state.id, tool_name=state.tool_name, provider_executed=True))
        elif isinstance(block, PROVIDER_TOOL_RESULT_BLOCKS):
            state = ContentBlockState(kind="passive", id=block.tool_use_id)
            parts.extend(self._provider_tool_result(block))
        else:
            logger.debug("Skipping unknown content block type %r at index %d", block.type, index)
            state = ContentBlockState(kind="passive", id=self.id_generator())

        self._blocks[index] = state
        return parts

    def _block_delta(self, chunk: ContentBlockDeltaChunk) -> List[StreamPart]:
        state = self._blocks.get(chunk.index)
        if state is None:
            logger.debug("content_block_delta for unknown index %d", chunk.index)
            return []

        delta = chunk.delta
        if isinstance(delta, TextDelta) and state.kind == "text":
            state.fragments.append(delta.text)
            return [TextDeltaPart(id=state.id, text=delta.text)]
        if isinstance(delta, ThinkingDelta) and state.kind == "reasoning":
            state.fragments.append(delta.thinking)
            return [ReasoningDeltaPart(id=state.id, text=delta.thinking)]
        if isinstance(delta, InputJsonDelta) and state.kind == "tool":
            if not delta.partial_json:
                return []
            state.fragments.append(delta.partial_json)
            return [ToolInputDeltaPart(id=state.id, delta=delta.partial_json)]
        if isinstance(delta, SignatureDelta):
            state.signature = (state.signature or "") + delta.signature
            return []
        if isinstance(delta, CitationsDelta):
            source = self._citation_source(delta.citation)
            return [source] if source is not None else []

        logger.debug("Skipping %s delta for %s block at index %d", delta.type, state.kind, chunk.index)
        return []

    def _end_block(self, index: int) -> List[StreamPart]:
        state = self._blocks.pop(index)

        if state.kind == "text":
            text = "".join(state.fragments)
            self._text_segments.append(text)
            if text:
                self.content.append(TextContentPart(text=text))
            return [TextEndPart(id=state.id)]

        if state.kind == "reasoning":
            self._reasoning_segments.append("".join(state.fragments))
            return [ReasoningEndPart(id=state.id, provider_metadata=_anthropic_metadata(signature=state.signature))]

        if state.kind == "tool":
            return [ToolInputEndPart(id=state.id), self._tool_call(state)]

        return []

    def _tool_call(self, state: ContentBlockState) -> ToolCallPart:
        json_text = "".join(state.fragments)
        invalid = None
        error = None
        if not json_text.strip():
            tool_input = state.initial_input if state.initial_input is not None else {}
        else:
            try:
                tool_input = json.loads(json_text)
            except ValueError as e:
                tool_input = json_text
                invalid = True
                error = f"invalid tool input JSON: {e}"

        call = ToolCallPart(
            tool_call_id=state.id,
            tool_name=state.tool_name,
            input=tool_input,
            provider_executed=True if state.provider_executed else None,
            dynamic=state.dynamic,
            title=state.title,
            invalid=invalid,
            error=error,
        )
        self.tool_calls.append(call)
        if state.provider_executed:
            self._server_calls[call.tool_call_id] = call
        else:
            self.content.append(ToolCallContentPart(
                tool_call_id=call.tool_call_id,
                tool_name=call.tool_name,
                input=tool_input if not invalid else {},
            ))
        return call

    def _provider_tool_result(self, block: Any) -> List[StreamPart]:
        call = self._server_calls.get(block.tool_use_id)
        if call is not None:
            tool_name = call.tool_name
        else:
            api_name = _RESULT_BLOCK_TOOL_NAMES.get(block.type, block.type)
            tool_name = self.provider_tool_names.get(api_name, api_name)
        tool_input = call.input if call is not None else None
        content = block.content

        if isinstance(content, dict) and str(content.get("type", "")).endswith("_error"):
            resolution: ToolResolutionPart = ToolErrorPart(
                tool_call_id=block.tool_use_id,
                tool_name=tool_name,
                error={"type": content.get("type"), "errorCode": content.get("error_code")},
                input=tool_input,
                provider_executed=True,
            )
            self.provider_results.append(resolution)
            return [resolution]

        parts: List[StreamPart] = []
        if isinstance(block, WebSearchToolResultBlock):
            for result in web_search_results(content):
                parts.append(SourcePart(
                    id=self.id_generator(),
                    source_type="url",
                    url=result.get("url"),
                    title=result.get("title"),
                    provider_metadata=_anthropic_metadata(pageAge=result.get("page_age")),
                ))
        elif isinstance(block, WebFetchToolResultBlock) and isinstance(content, dict):
            document = content.get("content") or {}
            source = document.get("source") or {}
            parts.append(SourcePart(
                id=self.id_generator(),
                source_type="document",
                title=document.get("title") or content.get("url"),
                media_type=source.get("media_type"),
                provider_metadata=_anthropic_metadata(
                    url=content.get("url"), retrievedAt=content.get("retrieved_at"),
                ),
            ))

        resolution = ToolResultPart(
            tool_call_id=block.tool_use_id,
            tool_name=tool_name,
            output=content,
            input=tool_input,
            provider_executed=True,
        )
        self.provider_results.append(resolution)
        parts.append(resolution)
        return parts

    def _citation_source(self, citation: Dict[str, Any]) -> Optional[SourcePart]:
        citation_type = citation.get("type")
        if citation_type == "web_search_result_location":
            return SourcePart(
                id=self.id_generator(),
                source_type="url",
                url=citation.get("url"),
                title=citation.get("title"),
                provider_metadata=_anthropic_metadata(citedText=citation.get("cited_text")),
            )
        if citation_type in _DOCUMENT_CITATION_MEDIA_TYPES:
            return SourcePart(
                id=self.id_generator(),
                source_type="document",
                title=citation.get("document_title") or f"Document {citation.get('document_index', 0)}",
                media_type=_DOCUMENT_CITATION_MEDIA_TYPES[citation_type],
                provider_metadata=_anthropic_metadata(
                    citedText=citation.get("cited_text"), documentIndex=citation.get("document_index"),
                ),
            )
        logger.debug("Skipping citation of type %r", citation_type)
        return None

    def _close_open_blocks(self) -> List[StreamPart]:
        parts: List[StreamPart] = []
        for index in sorted(self._blocks):
            parts.extend(self._end_block(index))
        return parts

    def _finish_step(self, finish_reason: FinishReason) -> FinishStepPart:
        metadata: Dict[str, Any] = {"usage": dict(self.raw_usage)}
        if self.stop_sequence is not None:
            metadata["stopSequence"] = self.stop_sequence
        metadata.update(extract_cache_info(self.raw_usage))
        return FinishStepPart(
            response=self.response,
            usage=self.usage,
            finish_reason=finish_reason,
            raw_finish_reason=self.raw_finish_reason,
            provider_metadata={"anthropic": metadata},
        )
