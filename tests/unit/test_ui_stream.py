"""Tests for the UI message stream encoder."""

import json

import pytest

from harness_ai.errors import ToolInputValidationError, UnhandledStreamPartError
from harness_ai.models.parts import (
    AbortPart,
    ErrorPart,
    FinishPart,
    FinishStepPart,
    RawPart,
    ReasoningDeltaPart,
    SourcePart,
    StartPart,
    TextDeltaPart,
    ToolCallPart,
    ToolErrorPart,
    ToolInputDeltaPart,
    ToolInputEndPart,
    ToolInputStartPart,
    ToolResultPart,
)
from harness_ai.orchestration import stream_text
from harness_ai.ui import (
    UI_MESSAGE_STREAM_HEADERS,
    create_ui_message_stream,
    default_error_text,
    json_to_sse,
    to_ui_message_chunks,
    ui_message_stream_headers,
)
from tests.helpers.streaming_mocks import collect, text_response, tool_call_response


async def async_items(items):
    for item in items:
        yield item


class TestChunkMapping:

    def test_text_and_reasoning_deltas(self):
        assert to_ui_message_chunks(TextDeltaPart(id="t1", text="Hi")) == [
            {"type": "text-delta", "id": "t1", "delta": "Hi"}
        ]
        assert to_ui_message_chunks(ReasoningDeltaPart(id="r1", text="hmm")) == [
            {"type": "reasoning-delta", "id": "r1", "delta": "hmm"}
        ]

    def test_tool_input_lifecycle(self):
        assert to_ui_message_chunks(ToolInputStartPart(id="c1", tool_name="weather")) == [
            {"type": "tool-input-start", "toolCallId": "c1", "toolName": "weather"}
        ]
        assert to_ui_message_chunks(ToolInputDeltaPart(id="c1", delta='{"ci')) == [
            {"type": "tool-input-delta", "toolCallId": "c1", "inputTextDelta": '{"ci'}
        ]
        assert to_ui_message_chunks(ToolInputEndPart(id="c1")) == []
        assert to_ui_message_chunks(
            ToolCallPart(tool_call_id="c1", tool_name="weather", input={"city": "Paris"})
        ) == [{"type": "tool-input-available", "toolCallId": "c1", "toolName": "weather", "input": {"city": "Paris"}}]

    def test_invalid_tool_call_becomes_input_error(self):
        part = ToolCallPart(
            tool_call_id="c1", tool_name="weather", input='{"city": ', invalid=True, error="bad JSON",
        )
        assert to_ui_message_chunks(part) == [{
            "type": "tool-input-error",
            "toolCallId": "c1",
            "toolName": "weather",
            "input": '{"city": ',
            "errorText": "bad JSON",
        }]

    def test_tool_outputs(self):
        assert to_ui_message_chunks(
            ToolResultPart(tool_call_id="c1", tool_name="weather", output={"t": 21}, provider_executed=True)
        ) == [{"type": "tool-output-available", "toolCallId": "c1", "output": {"t": 21}, "providerExecuted": True}]
        assert to_ui_message_chunks(
            ToolErrorPart(tool_call_id="c1", tool_name="weather", error=ToolInputValidationError("weather", "bad"))
        ) == [{
            "type": "tool-output-error",
            "toolCallId": "c1",
            "errorText": "invalid input for tool 'weather': bad",
        }]

    def test_sources(self):
        assert to_ui_message_chunks(
            SourcePart(id="s1", source_type="url", url="https://a.example", title="A")
        ) == [{"type": "source-url", "sourceId": "s1", "url": "https://a.example", "title": "A"}]
        assert to_ui_message_chunks(
            SourcePart(id="s2", source_type="document", media_type="application/pdf", title="Doc")
        ) == [{"type": "source-document", "sourceId": "s2", "mediaType": "application/pdf", "title": "Doc"}]

    def test_lifecycle_parts(self):
        assert to_ui_message_chunks(StartPart()) == [{"type": "start"}]
        assert to_ui_message_chunks(FinishStepPart(finish_reason="stop")) == [{"type": "finish-step"}]
        assert to_ui_message_chunks(FinishPart(finish_reason="length")) == [{"type": "finish", "finishReason": "length"}]
        assert to_ui_message_chunks(AbortPart(reason="aborted")) == [{"type": "abort", "reason": "aborted"}]
        assert to_ui_message_chunks(RawPart(raw_value={"type": "ping"})) == []

    def test_error_text_formatting(self):
        assert to_ui_message_chunks(ErrorPart(error=RuntimeError("boom"))) == [{"type": "error", "errorText": "boom"}]
        assert to_ui_message_chunks(ErrorPart(error="boom"), on_error=lambda e: "hidden") == [
            {"type": "error", "errorText": "hidden"}
        ]

    def test_unknown_part_raises(self):
        with pytest.raises(UnhandledStreamPartError):
            to_ui_message_chunks(object())


@pytest.mark.parametrize("error, expected", [
    (RuntimeError("boom"), "boom"),
    (RuntimeError(), "RuntimeError"),
    ("plain text", "plain text"),
    ({"code": 1}, '{"code": 1}'),
])
def test_default_error_text(error, expected):
    assert default_error_text(error) == expected


class TestSSEFraming:

    @pytest.mark.asyncio
    async def test_frames_end_with_done(self):
        frames = await collect(json_to_sse(async_items([{"type": "start"}, {"type": "text-delta", "id": "t", "delta": "é"}])))
        assert frames == [
            'data: {"type": "start"}\n\n',
            'data: {"type": "text-delta", "id": "t", "delta": "é"}\n\n',
            "data: [DONE]\n\n",
        ]

    @pytest.mark.asyncio
    async def test_empty_stream_still_sends_done(self):
        assert await collect(json_to_sse(async_items([]))) == ["data: [DONE]\n\n"]

    def test_headers_caller_overrides_case_insensitively(self):
        headers = ui_message_stream_headers({"Cache-Control": "no-store", "X-Trace": "abc"})
        assert headers["cache-control"] == "no-store"
        assert headers["x-trace"] == "abc"
        assert headers["x-vercel-ai-ui-message-stream"] == "v1"
        assert "Cache-Control" not in headers
        assert UI_MESSAGE_STREAM_HEADERS["cache-control"] == "no-cache"


class TestRunEncoding:

    @pytest.mark.asyncio
    async def test_text_run_chunks(self, anthropic_server):
        anthropic_server.add(text_response(["Hello", " world"]))
        result = stream_text(anthropic_server.model(), prompt="Hi")
        chunks = await collect(result.to_ui_message_stream())

        assert [c["type"] for c in chunks] == [
            "start", "start-step", "text-start", "text-delta", "text-delta", "text-end", "finish-step", "finish",
        ]
        assert "".join(c["delta"] for c in chunks if c["type"] == "text-delta") == "Hello world"

    @pytest.mark.asyncio
    async def test_invalid_tool_call_yields_single_input_error(self, anthropic_server, weather_schema):
        from harness_ai.tools.tool_definition import FunctionTool

        anthropic_server.add(tool_call_response("toolu_1", "weather", ['{"city": ']))
        anthropic_server.add(text_response(["Sorry."]))
        result = stream_text(
            anthropic_server.model(),
            prompt="Weather?",
            tools={"weather": FunctionTool(input_schema=weather_schema, execute=lambda tool_input: "x")},
        )
        chunks = await collect(create_ui_message_stream(result.full_stream))
        types = [c["type"] for c in chunks]

        assert types.count("tool-input-error") == 1
        assert "tool-input-available" not in types
        assert types.count("tool-output-error") == 1

    @pytest.mark.asyncio
    async def test_every_frame_is_json_until_done(self, anthropic_server):
        anthropic_server.add(text_response(["ok"]))
        result = stream_text(anthropic_server.model(), prompt="Hi")
        frames = await collect(json_to_sse(result.to_ui_message_stream()))

        assert frames[-1] == "data: [DONE]\n\n"
        for frame in frames[:-1]:
            assert frame.startswith("data: ") and frame.endswith("\n\n")
            json.loads(frame[len("data: "):])
