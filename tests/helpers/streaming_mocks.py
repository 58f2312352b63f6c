"""Helpers for scripting Anthropic streaming responses over httpx.MockTransport."""

import asyncio
import json
from typing import Any, Callable, Dict, Iterable, List, Optional, Sequence, Union

import httpx

from harness_ai.providers.anthropic.provider import AnthropicModel, create_anthropic


def sse_frame(payload: Dict[str, Any], event: Optional[str] = None) -> str:
    """Encode one event the way the Messages API does (``event:`` + ``data:``)."""
    event_name = event or payload["type"]
    return f"event: {event_name}\ndata: {json.dumps(payload)}\n\n"


def encode_sse(events: Iterable[Dict[str, Any]]) -> bytes:
    return "".join(sse_frame(event) for event in events).encode("utf-8")


def message_start(message_id: str = "msg_1", model: str = "claude-test", input_tokens: int = 10,
                  content: Optional[List[Dict[str, Any]]] = None, **usage: Any) -> Dict[str, Any]:
    return {
        "type": "message_start",
        "message": {
            "id": message_id,
            "type": "message",
            "role": "assistant",
            "model": model,
            "content": list(content or []),
            "usage": {"input_tokens": input_tokens, "output_tokens": 1, **usage},
        },
    }


def message_end(stop_reason: str = "end_turn", output_tokens: int = 5,
                stop_sequence: Optional[str] = None) -> List[Dict[str, Any]]:
    return [
        {
            "type": "message_delta",
            "delta": {"stop_reason": stop_reason, "stop_sequence": stop_sequence},
            "usage": {"output_tokens": output_tokens},
        },
        {"type": "message_stop"},
    ]


def text_block(index: int, chunks: Sequence[str]) -> List[Dict[str, Any]]:
    events = [{"type": "content_block_start", "index": index, "content_block": {"type": "text", "text": ""}}]
    for chunk in chunks:
        events.append({"type": "content_block_delta", "index": index, "delta": {"type": "text_delta", "text": chunk}})
    events.append({"type": "content_block_stop", "index": index})
    return events


def tool_use_block(index: int, tool_call_id: str, name: str, json_fragments: Sequence[str],
                   block_type: str = "tool_use") -> List[Dict[str, Any]]:
    events = [{
        "type": "content_block_start",
        "index": index,
        "content_block": {"type": block_type, "id": tool_call_id, "name": name, "input": {}},
    }]
    for fragment in json_fragments:
        events.append({
            "type": "content_block_delta",
            "index": index,
            "delta": {"type": "input_json_delta", "partial_json": fragment},
        })
    events.append({"type": "content_block_stop", "index": index})
    return events


def text_response(chunks: Sequence[str], stop_reason: str = "end_turn", input_tokens: int = 10,
                  output_tokens: int = 5, message_id: str = "msg_1") -> List[Dict[str, Any]]:
    """Full event list for a plain text answer."""
    return [
        message_start(message_id=message_id, input_tokens=input_tokens),
        *text_block(0, chunks),
        *message_end(stop_reason=stop_reason, output_tokens=output_tokens),
    ]


def tool_call_response(tool_call_id: str, name: str, json_fragments: Sequence[str],
                       input_tokens: int = 10, output_tokens: int = 5,
                       message_id: str = "msg_1") -> List[Dict[str, Any]]:
    """Full event list for a step that stops to call one tool."""
    return [
        message_start(message_id=message_id, input_tokens=input_tokens),
        *tool_use_block(0, tool_call_id, name, json_fragments),
        *message_end(stop_reason="tool_use", output_tokens=output_tokens),
    ]


class ChunkedByteStream(httpx.AsyncByteStream):
    """Response body delivered as the given byte chunks.

    ``after_chunk`` is called with the index of each chunk once it has been
    consumed; ``error`` is raised after the last chunk when set.
    """

    def __init__(self, chunks: Sequence[bytes], after_chunk: Optional[Callable[[int], None]] = None,
                 error: Optional[Exception] = None):
        self.chunks = list(chunks)
        self.after_chunk = after_chunk
        self.error = error

    async def __aiter__(self):
        for index, chunk in enumerate(self.chunks):
            yield chunk
            if self.after_chunk is not None:
                self.after_chunk(index)
        if self.error is not None:
            raise self.error


class StallingByteStream(httpx.AsyncByteStream):
    """Response body that sends ``chunks`` and then goes quiet without closing."""

    def __init__(self, chunks: Sequence[bytes]):
        self.chunks = list(chunks)
        self.closed = False

    async def __aiter__(self):
        for chunk in self.chunks:
            yield chunk
        await asyncio.Event().wait()

    async def aclose(self):
        self.closed = True


ScriptedResponse = Union[List[Dict[str, Any]], bytes, httpx.Response, Callable[[httpx.Request], httpx.Response]]


class MockAnthropicServer:
    """Plays back one scripted response per request and records the requests."""

    def __init__(self, responses: Optional[Sequence[ScriptedResponse]] = None):
        self.responses: List[ScriptedResponse] = list(responses or [])
        self.requests: List[httpx.Request] = []

    def add(self, response: ScriptedResponse) -> "MockAnthropicServer":
        self.responses.append(response)
        return self

    @property
    def bodies(self) -> List[Dict[str, Any]]:
        return [json.loads(request.content) for request in self.requests]

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if not self.responses:
            return httpx.Response(500, json={"type": "error", "error": {"type": "api_error", "message": "no scripted response"}})
        scripted = self.responses.pop(0)
        if callable(scripted) and not isinstance(scripted, httpx.Response):
            return scripted(request)
        if isinstance(scripted, httpx.Response):
            return scripted
        content = scripted if isinstance(scripted, bytes) else encode_sse(scripted)
        return httpx.Response(200, content=content, headers={"content-type": "text/event-stream", "request-id": "req_test"})

    def client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(transport=httpx.MockTransport(self.handler))

    def model(self, model_id: str = "claude-test") -> AnthropicModel:
        return create_anthropic(api_key="test-key", http_client=self.client())(model_id)


def streaming_response(chunks: Sequence[bytes], **kwargs: Any) -> httpx.Response:
    return httpx.Response(
        200,
        stream=ChunkedByteStream(chunks, **kwargs),
        headers={"content-type": "text/event-stream"},
    )


async def byte_source(chunks: Iterable[bytes], error: Optional[Exception] = None):
    """Async byte channel for feeding the SSE decoder directly."""
    for chunk in chunks:
        yield chunk
    if error is not None:
        raise error


async def collect(stream) -> List[Any]:
    return [item async for item in stream]
