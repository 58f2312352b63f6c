"""
Consumer-facing views over one run.

A run is a single producer task that appends parts to a PartBroadcaster.
Every view (full_stream, text_stream, the UI encoder and the awaitable
aggregates) reads that shared log, so views can be opened in any order and
at any time without losing parts or slowing the producer.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field
from typing import Any, AsyncIterator, Callable, Dict, List, Optional, TypeVar

from ..models.generation import FinishReason, LanguageModelUsage, ResponseMetadata, StepResult
from ..models.parts import (
    FinishPart,
    FinishStepPart,
    StreamPart,
    TextDeltaPart,
    ToolCallPart,
    ToolErrorPart,
    ToolResolutionPart,
    ToolResultPart,
)
from ..ui.ui_stream import create_ui_message_stream, create_ui_message_stream_response
from .broadcast import PartBroadcaster

logger = logging.getLogger(__name__)

R = TypeVar("R")

PartProducer = Callable[[], AsyncIterator[StreamPart]]


@dataclass
class RunSummary:
    """Aggregates derived from a run's parts, fixed once ``finish`` is seen."""
    text: str = ""
    tool_calls: List[ToolCallPart] = field(default_factory=list)
    tool_results: List[ToolResolutionPart] = field(default_factory=list)
    usage: LanguageModelUsage = field(default_factory=LanguageModelUsage)
    finish_reason: FinishReason = "other"
    raw_finish_reason: Optional[str] = None
    response: ResponseMetadata = field(default_factory=ResponseMetadata)
    steps: List[StepResult] = field(default_factory=list)


class _RunAggregator:
    def __init__(self) -> None:
        self.text_fragments: List[str] = []
        self.tool_calls: List[ToolCallPart] = []
        self.tool_results: List[ToolResolutionPart] = []
        self.first_response: Optional[ResponseMetadata] = None

    def observe(self, part: StreamPart) -> None:
        if isinstance(part, TextDeltaPart):
            self.text_fragments.append(part.text)
        elif isinstance(part, ToolCallPart):
            self.tool_calls.append(part)
        elif isinstance(part, (ToolResultPart, ToolErrorPart)):
            self.tool_results.append(part)
        elif isinstance(part, FinishStepPart) and self.first_response is None:
            self.first_response = part.response

    def summarize(self, finish: FinishPart, steps: List[StepResult]) -> RunSummary:
        return RunSummary(
            text="".join(self.text_fragments),
            tool_calls=list(self.tool_calls),
            tool_results=list(self.tool_results),
            usage=finish.total_usage,
            finish_reason=finish.finish_reason,
            raw_finish_reason=finish.raw_finish_reason,
            response=self.first_response or ResponseMetadata(),
            steps=list(steps),
        )


def _mark_exception_retrieved(future: asyncio.Future) -> None:
    if not future.cancelled():
        future.exception()


class StreamTextResult:
    """
    Handle returned by stream_text().

    Nothing runs until a view is first used. ``full_stream`` and
    ``text_stream`` return a fresh iterator on every access; ``text``,
    ``usage``, ``finish_reason``, ``response``, ``tool_calls``,
    ``tool_results`` and ``steps`` are awaitables that resolve when the run
    finishes. ``tool_results`` holds every resolution, tool-result and
    tool-error parts alike.
    """

    def __init__(self, producer: PartProducer, steps: Optional[List[StepResult]] = None):
        self._producer = producer
        self._steps = steps if steps is not None else []
        self._broadcaster: PartBroadcaster[StreamPart] = PartBroadcaster()
        self._task: Optional[asyncio.Task] = None
        self._summary: Optional[asyncio.Future] = None

    def _ensure_started(self) -> None:
        if self._task is not None:
            return
        loop = asyncio.get_running_loop()
        self._summary = loop.create_future()
        self._summary.add_done_callback(_mark_exception_retrieved)
        self._task = loop.create_task(self._run())

    async def _run(self) -> None:
        aggregator = _RunAggregator()
        try:
            async for part in self._producer():
                aggregator.observe(part)
                await self._broadcaster.publish(part)
                if isinstance(part, FinishPart) and not self._summary.done():
                    self._summary.set_result(aggregator.summarize(part, self._steps))
        except Exception as e:
            logger.error("Run failed with an internal error: %s", e, exc_info=True)
            if not self._summary.done():
                self._summary.set_exception(e)
            await self._broadcaster.close(error=e)
            return

        if not self._summary.done():
            self._summary.set_exception(RuntimeError("run ended without a finish part"))
        await self._broadcaster.close()

    async def _deferred(self, select: Callable[[RunSummary], R]) -> R:
        self._ensure_started()
        summary = await asyncio.shield(self._summary)
        return select(summary)

    async def _iterate_parts(self) -> AsyncIterator[StreamPart]:
        self._ensure_started()
        async for part in self._broadcaster.subscribe():
            yield part

    async def _iterate_text(self) -> AsyncIterator[str]:
        async for part in self._iterate_parts():
            if isinstance(part, TextDeltaPart):
                yield part.text

    @property
    def full_stream(self) -> AsyncIterator[StreamPart]:
        return self._iterate_parts()

    @property
    def text_stream(self) -> AsyncIterator[str]:
        return self._iterate_text()

    @property
    def text(self):
        return self._deferred(lambda s: s.text)

    @property
    def usage(self):
        return self._deferred(lambda s: s.usage)

    @property
    def finish_reason(self):
        return self._deferred(lambda s: s.finish_reason)

    @property
    def response(self):
        return self._deferred(lambda s: s.response)

    @property
    def tool_calls(self):
        return self._deferred(lambda s: s.tool_calls)

    @property
    def tool_results(self):
        return self._deferred(lambda s: s.tool_results)

    @property
    def steps(self):
        return self._deferred(lambda s: s.steps)

    async def summary(self) -> RunSummary:
        return await self._deferred(lambda s: s)

    async def consume_stream(self) -> None:
        """Drive the run to completion without reading any part."""
        async for _ in self._iterate_parts():
            pass

    def to_ui_message_stream(self, on_error: Optional[Callable[[Any], str]] = None) -> AsyncIterator[Dict[str, Any]]:
        return create_ui_message_stream(self.full_stream, on_error=on_error)

    def to_ui_message_stream_response(
        self,
        status_code: int = 200,
        headers: Optional[Dict[str, str]] = None,
        on_error: Optional[Callable[[Any], str]] = None,
    ):
        """FastAPI StreamingResponse carrying the run as a UI message stream."""
        return create_ui_message_stream_response(
            self.to_ui_message_stream(on_error=on_error),
            status_code=status_code,
            headers=headers,
        )
