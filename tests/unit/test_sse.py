"""Tests for the SSE frame decoder."""

import httpx
import pytest

from harness_ai.errors import StreamDecodeError
from harness_ai.streaming.sse import Frame, iter_sse_events, parse_sse_event_block
from tests.helpers.streaming_mocks import byte_source, collect


class TestParseEventBlock:

    def test_event_and_data(self):
        frame = parse_sse_event_block('event: ping\ndata: {"type":"ping"}')
        assert frame == Frame(event="ping", data='{"type":"ping"}')

    def test_default_event_name(self):
        assert parse_sse_event_block("data: hello").event == "message"

    def test_multiple_data_lines_are_joined(self):
        frame = parse_sse_event_block("data: one\ndata: two")
        assert frame.data == "one\ntwo"

    def test_only_one_leading_space_is_removed(self):
        assert parse_sse_event_block("data:   indented").data == "  indented"
        assert parse_sse_event_block("data:tight").data == "tight"
        assert parse_sse_event_block("data: a\ndata:  b").data == "a\n b"

    def test_comment_only_block_has_no_frame(self):
        assert parse_sse_event_block(": keep-alive") is None

    def test_event_without_data_has_no_frame(self):
        assert parse_sse_event_block("event: message_start") is None


class TestIterSseEvents:

    @pytest.mark.asyncio
    async def test_frames_in_arrival_order(self):
        body = b"event: a\ndata: 1\n\nevent: b\ndata: 2\n\n"
        frames = await collect(iter_sse_events(byte_source([body])))
        assert [(f.event, f.data) for f in frames] == [("a", "1"), ("b", "2")]

    @pytest.mark.asyncio
    async def test_frame_split_across_reads(self):
        frames = await collect(iter_sse_events(byte_source([b"event: a\nda", b"ta: hel", b"lo\n\n"])))
        assert frames == [Frame(event="a", data="hello")]

    @pytest.mark.asyncio
    async def test_multibyte_character_split_across_reads(self):
        encoded = "data: café ☃\n\n".encode("utf-8")
        split = encoded.index(b"\xe2") + 1
        frames = await collect(iter_sse_events(byte_source([encoded[:split], encoded[split:]])))
        assert frames[0].data == "café ☃"

    @pytest.mark.asyncio
    async def test_crlf_line_endings(self):
        frames = await collect(iter_sse_events(byte_source([b"event: a\r\ndata: 1\r\n\r\ndata: 2\r", b"\n\r\n"])))
        assert [f.data for f in frames] == ["1", "2"]

    @pytest.mark.asyncio
    async def test_trailing_block_flushed_once(self):
        frames = await collect(iter_sse_events(byte_source([b"data: 1\n\ndata: tail"])))
        assert [f.data for f in frames] == ["1", "tail"]

    @pytest.mark.asyncio
    async def test_blocks_without_data_are_skipped(self):
        body = b": comment\n\nevent: only-name\n\ndata: x\n\n"
        frames = await collect(iter_sse_events(byte_source([body])))
        assert len(frames) == 1
        assert all(frame.data for frame in frames)

    @pytest.mark.asyncio
    async def test_channel_failure_keeps_pending_text(self):
        source = byte_source([b"data: 1\n\ndata: part"], error=httpx.ReadError("connection reset"))
        frames = []
        with pytest.raises(StreamDecodeError) as exc_info:
            async for frame in iter_sse_events(source):
                frames.append(frame)

        assert [f.data for f in frames] == ["1"]
        assert exc_info.value.pending == "data: part"
        assert isinstance(exc_info.value.original_error, httpx.ReadError)
