"""
Multi-step text generation with local tool roundtrips.

stream_text() runs a loop of steps. Each step streams one Messages request;
when the model stops to call tools, locally executable calls are resolved,
their results are appended to the transcript and another step is requested.
Every failure that happens while the run is streaming is reported as a part,
and the run always ends with a ``finish`` part.
"""

import asyncio
import time
from typing import Any, AsyncIterator, List, Optional

import httpx

from ..core.normalization.usage import sum_usage
from ..errors import StreamDecodeError, ToolInputValidationError, ToolRoundtripLimitError
from ..models.conversation_types import (
    AssistantMessage,
    ToolMessage,
    ToolResultContentPart,
    UserMessage,
)
from ..models.generation import (
    GenerateTextResult,
    LanguageModelUsage,
    RequestMetadata,
    StepResult,
    StreamTextOptions,
)
from ..models.parts import (
    AbortPart,
    ErrorPart,
    FinishPart,
    StartPart,
    StreamPart,
    ToolCallPart,
    ToolErrorPart,
    ToolResolutionPart,
    ToolResultPart,
)
from ..observability.logging import ProviderLogger
from ..providers.anthropic.client import open_messages_stream
from ..providers.anthropic.payloads import build_messages_body, provider_tool_names
from ..providers.anthropic.translator import AnthropicStreamTranslator
from ..providers.base import ProviderError
from ..providers.errors import ErrorMapper
from ..streaming.result import StreamTextResult
from ..tools.tool_executor import ToolExecutor


logger = ProviderLogger("anthropic")

ABORT_REASON = "aborted"


def _resolution_content(part: ToolResolutionPart) -> ToolResultContentPart:
    if isinstance(part, ToolErrorPart):
        error = part.error
        output = str(error) if isinstance(error, BaseException) else error
        return ToolResultContentPart(
            tool_call_id=part.tool_call_id, tool_name=part.tool_name, output=output, is_error=True,
        )
    return ToolResultContentPart(tool_call_id=part.tool_call_id, tool_name=part.tool_name, output=part.output)


def _discard_result(task: "asyncio.Future[Any]") -> None:
    if not task.cancelled():
        task.exception()


class _RoundtripRun:
    """The producer side of one stream_text() call."""

    def __init__(self, options: StreamTextOptions, tool_executor: Optional[ToolExecutor] = None):
        self.options = options
        self.model = options.model
        self.tool_executor = tool_executor or ToolExecutor()
        self.steps: List[StepResult] = []
        self.transcript: List[Any] = (
            [UserMessage(content=options.prompt)] if options.prompt is not None else list(options.messages)
        )
        self.total_usage = LanguageModelUsage()

    def _aborted(self) -> bool:
        signal = self.options.abort_signal
        return signal is not None and signal.is_set()

    async def _race_abort(self, task: "asyncio.Future[Any]") -> bool:
        """Wait for ``task`` or the abort signal, whichever comes first.

        Returns True when the signal won and ``task`` is still pending. The
        task is never cancelled here.
        """
        signal = self.options.abort_signal
        if signal is None:
            await asyncio.wait([task])
            return False
        waiter = asyncio.ensure_future(signal.wait())
        try:
            await asyncio.wait([task, waiter], return_when=asyncio.FIRST_COMPLETED)
        finally:
            waiter.cancel()
        return not task.done()

    def _abort_parts(self) -> List[StreamPart]:
        logger.warning("Run aborted", model=self.model.model_id, steps=len(self.steps))
        return [AbortPart(reason=ABORT_REASON), FinishPart(finish_reason="other", total_usage=self.total_usage)]

    def _error_parts(self, error: BaseException, raw_finish_reason: Optional[str] = None) -> List[StreamPart]:
        return [
            ErrorPart(error=error),
            FinishPart(finish_reason="error", total_usage=self.total_usage, raw_finish_reason=raw_finish_reason),
        ]

    async def parts(self) -> AsyncIterator[StreamPart]:
        yield StartPart()

        while True:
            if self._aborted():
                for part in self._abort_parts():
                    yield part
                return

            if len(self.steps) >= self.options.max_tool_roundtrips:
                logger.warning(
                    "Tool roundtrip limit reached",
                    model=self.model.model_id,
                    max_tool_roundtrips=self.options.max_tool_roundtrips,
                )
                for part in self._error_parts(ToolRoundtripLimitError(self.options.max_tool_roundtrips)):
                    yield part
                return

            translator = None
            aborted = False
            error: Optional[BaseException] = None
            try:
                async for item in self._stream_step():
                    if isinstance(item, AnthropicStreamTranslator):
                        translator = item
                    elif item is None:
                        aborted = True
                    else:
                        yield item
            except (ProviderError, StreamDecodeError) as e:
                error = e
            except httpx.HTTPError as e:
                error = ErrorMapper.map_anthropic_error(e)

            if error is not None:
                for part in self._error_parts(error):
                    yield part
                return
            if aborted:
                for part in self._abort_parts():
                    yield part
                return

            step = self._record_step(translator)
            if translator.failed:
                yield FinishPart(
                    finish_reason="error",
                    total_usage=self.total_usage,
                    raw_finish_reason=translator.raw_finish_reason,
                )
                return

            resolutions: List[ToolResolutionPart] = []
            if translator.finish_reason == "tool-calls":
                for call in translator.local_tool_calls:
                    if self._aborted():
                        break
                    resolving = asyncio.ensure_future(self._resolve_tool_call(call))
                    if await self._race_abort(resolving):
                        # the executor is left running; its result is dropped
                        resolving.add_done_callback(_discard_result)
                        break
                    resolution = resolving.result()
                    # a result that arrives after an abort is discarded
                    if self._aborted():
                        break
                    resolutions.append(resolution)
                    yield resolution

            if self._aborted():
                for part in self._abort_parts():
                    yield part
                return

            if resolutions:
                tool_message = ToolMessage(content=[_resolution_content(r) for r in resolutions])
                self.transcript.append(tool_message)
                step.messages.append(tool_message)
                step.tool_results.extend(resolutions)
                continue

            yield FinishPart(
                finish_reason=translator.finish_reason,
                total_usage=self.total_usage,
                raw_finish_reason=translator.raw_finish_reason,
            )
            return

    async def _stream_step(self) -> AsyncIterator[Any]:
        """
        Stream one request.

        Yields the step's translator first, then its parts, then None if the
        run was aborted mid-stream.
        """
        options = self.options
        body, warnings = build_messages_body(
            self.model.model_id,
            self.transcript,
            system=options.system,
            tools=options.tools,
            max_output_tokens=options.max_output_tokens,
            temperature=options.temperature,
            top_p=options.top_p,
            stop_sequences=options.stop_sequences,
        )
        for warning in warnings:
            logger.warning(warning, model=self.model.model_id)

        with logger.track_request("stream-step", self.model.model_id) as request_info:
            started = time.time()
            frames = 0
            emitted = 0
            async with open_messages_stream(self.model, body) as response:
                translator = AnthropicStreamTranslator(
                    request_body=body,
                    warnings=warnings,
                    tools=options.tools,
                    provider_tool_names=provider_tool_names(options.tools),
                    response_headers=response.headers,
                    include_raw_chunks=options.include_raw_chunks,
                    clock=options.clock,
                )
                yield translator

                events = response.events.__aiter__()
                while True:
                    next_event = asyncio.ensure_future(events.__anext__())
                    try:
                        aborted = await self._race_abort(next_event)
                    finally:
                        if not next_event.done():
                            next_event.cancel()
                            await asyncio.wait([next_event])
                    if aborted:
                        yield None
                        return
                    try:
                        event = next_event.result()
                    except StopAsyncIteration:
                        break
                    if self._aborted():
                        yield None
                        return
                    frames += 1
                    for part in translator.process(event):
                        emitted += 1
                        yield part

                if self._aborted():
                    yield None
                    return
                for part in translator.close():
                    emitted += 1
                    yield part

            logger.log_streaming_metrics(
                frames, emitted, time.time() - started, self.model.model_id, request_info["request_id"],
            )
            logger.log_usage(translator.usage, self.model.model_id, request_info["request_id"])

    def _record_step(self, translator: AnthropicStreamTranslator) -> StepResult:
        usage = translator.usage

        messages: List[Any] = []
        if translator.content:
            assistant_message = AssistantMessage(content=list(translator.content))
            self.transcript.append(assistant_message)
            messages.append(assistant_message)

        step = StepResult(
            text=translator.text,
            reasoning_text=translator.reasoning_text,
            tool_calls=list(translator.tool_calls),
            tool_results=list(translator.provider_results),
            finish_reason="error" if translator.failed else translator.finish_reason,
            raw_finish_reason=translator.raw_finish_reason,
            usage=usage,
            request=RequestMetadata(body=translator.request_body),
            response=translator.response,
            warnings=list(translator.warnings),
            messages=messages,
        )
        self.steps.append(step)
        self.total_usage = sum_usage(s.usage for s in self.steps)
        return step

    async def _resolve_tool_call(self, call: ToolCallPart) -> ToolResolutionPart:
        if call.invalid:
            return ToolErrorPart(
                tool_call_id=call.tool_call_id,
                tool_name=call.tool_name,
                error=ToolInputValidationError(call.tool_name, call.error or "invalid tool call"),
                input=call.input,
                dynamic=call.dynamic,
            )

        tool = self.options.tools.get(call.tool_name)
        try:
            output = await self.tool_executor.execute(call.tool_name, tool, call.input)
        except Exception as e:
            logger.debug(
                f"Tool call failed: {e}",
                model=self.model.model_id,
                tool_name=call.tool_name,
                tool_call_id=call.tool_call_id,
            )
            return ToolErrorPart(
                tool_call_id=call.tool_call_id,
                tool_name=call.tool_name,
                error=e,
                input=call.input,
                dynamic=call.dynamic,
            )

        return ToolResultPart(
            tool_call_id=call.tool_call_id,
            tool_name=call.tool_name,
            output=output,
            input=call.input,
            dynamic=call.dynamic,
        )


def stream_text(
    model: Any,
    *,
    prompt: Optional[str] = None,
    messages: Optional[List[Any]] = None,
    tool_executor: Optional[ToolExecutor] = None,
    **options: Any,
) -> StreamTextResult:
    """
    Start a streaming run.

    The run does not begin until one of the result's views is used.

    Args:
        model: AnthropicModel from create_anthropic()
        prompt: Flat user prompt (exclusive with ``messages``)
        messages: Transcript (exclusive with ``prompt``)
        tool_executor: Executor used for local tool calls
        **options: Remaining StreamTextOptions fields (system, tools,
            temperature, max_tool_roundtrips, abort_signal, ...)

    Raises:
        InvalidPromptError: prompt/messages are both or neither given, or
            messages is empty
        pydantic.ValidationError: an option is out of range
    """
    run_options = StreamTextOptions.from_kwargs(model=model, prompt=prompt, messages=messages, **options)
    run = _RoundtripRun(run_options, tool_executor=tool_executor)
    return StreamTextResult(run.parts, steps=run.steps)


async def generate_text(model: Any, **options: Any) -> GenerateTextResult:
    """Run stream_text() to completion and return its aggregates."""
    result = stream_text(model, **options)
    await result.consume_stream()
    summary = await result.summary()
    return GenerateTextResult(
        text=summary.text,
        finish_reason=summary.finish_reason,
        raw_finish_reason=summary.raw_finish_reason,
        usage=summary.usage,
        response=summary.response,
        tool_calls=summary.tool_calls,
        tool_results=summary.tool_results,
        steps=summary.steps,
    )


async def collect_full_stream(result: StreamTextResult) -> List[StreamPart]:
    """Read a fresh full_stream to the end and return its parts."""
    return [part async for part in result.full_stream]
