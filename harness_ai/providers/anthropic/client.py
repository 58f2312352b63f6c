from __future__ import annotations

import json
from contextlib import asynccontextmanager
from dataclasses import dataclass
from typing import Any, AsyncIterable, AsyncIterator, Dict, Optional

import httpx

from ...config.constants import ANTHROPIC_API_VERSION, SSE_DONE_SENTINEL
from ...streaming.sse import Frame, iter_sse_events
from ..errors import ErrorMapper
from .protocol import AnthropicStreamChunk, parse_anthropic_stream_chunk
from .provider import AnthropicModel


@dataclass
class ParsedStreamEvent:
    """A decoded frame payload; ``chunk`` is None when parsing failed."""
    raw_value: Any
    chunk: Optional[AnthropicStreamChunk] = None
    parse_error: Optional[str] = None


@dataclass
class AnthropicStreamResponse:
    request_body: Dict[str, Any]
    headers: Dict[str, str]
    events: AsyncIterator[ParsedStreamEvent]


def request_headers(model: AnthropicModel) -> Dict[str, str]:
    headers = {
        "content-type": "application/json",
        "x-api-key": model.api_key,
        "anthropic-version": ANTHROPIC_API_VERSION,
    }
    headers.update(model.headers)
    return headers


async def parse_stream_events(frames: AsyncIterable[Frame]) -> AsyncIterator[ParsedStreamEvent]:
    """Decode each frame's JSON payload, skipping the ``[DONE]`` sentinel."""
    async for frame in frames:
        if frame.data == SSE_DONE_SENTINEL:
            continue
        try:
            raw = json.loads(frame.data)
        except ValueError as e:
            yield ParsedStreamEvent(raw_value=frame.data, parse_error=str(e))
            continue
        try:
            chunk = parse_anthropic_stream_chunk(raw)
        except ValueError as e:
            yield ParsedStreamEvent(raw_value=raw, parse_error=str(e))
            continue
        yield ParsedStreamEvent(raw_value=raw, chunk=chunk)


@asynccontextmanager
async def open_messages_stream(
    model: AnthropicModel,
    body: Dict[str, Any],
) -> AsyncIterator[AnthropicStreamResponse]:
    """
    POST a streaming Messages request and expose its parsed events.

    The response (and the client, when one is created here) is closed when
    the context exits, whether the stream was drained or not.

    Raises:
        ProviderError: the API answered with a non-2xx status
        httpx.HTTPError: the request could not be sent
    """
    client = model.http_client
    owns_client = client is None
    if owns_client:
        client = httpx.AsyncClient(timeout=model.timeout)

    try:
        async with client.stream(
            "POST", model.messages_url, headers=request_headers(model), json=body
        ) as response:
            if not response.is_success:
                error_body = (await response.aread()).decode("utf-8", errors="replace")
                raise ErrorMapper.from_response(response, error_body)

            yield AnthropicStreamResponse(
                request_body=body,
                headers=dict(response.headers),
                events=parse_stream_events(iter_sse_events(response.aiter_bytes())),
            )
    finally:
        if owns_client:
            await client.aclose()
