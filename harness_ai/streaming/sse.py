"""
Server-sent event framing.

Turns a raw byte channel into ``Frame`` objects. Only the framing rules are
handled here; payloads are left as text for the provider protocol layer.
"""

from __future__ import annotations

import codecs
import logging
from dataclasses import dataclass
from typing import AsyncIterable, AsyncIterator, List, Optional

from ..errors import StreamDecodeError

logger = logging.getLogger(__name__)

DEFAULT_EVENT_NAME = "message"


@dataclass(frozen=True)
class Frame:
    """One SSE block: the event name and its newline-joined data lines."""
    event: str
    data: str


def parse_sse_event_block(block: str) -> Optional[Frame]:
    """
    Parse one blank-line delimited SSE block.

    Returns None for blocks that carry no ``data:`` line (comments,
    keep-alives, bare ``event:`` lines).
    """
    event_name = DEFAULT_EVENT_NAME
    data_lines: List[str] = []

    for line in block.split("\n"):
        if line.startswith(":"):
            continue
        if line.startswith("event:"):
            event_name = line[len("event:"):].strip() or DEFAULT_EVENT_NAME
            continue
        if line.startswith("data:"):
            value = line[len("data:"):]
            data_lines.append(value[1:] if value.startswith(" ") else value)

    if not data_lines:
        return None

    return Frame(event=event_name, data="\n".join(data_lines))


async def iter_sse_events(byte_chunks: AsyncIterable[bytes]) -> AsyncIterator[Frame]:
    """
    Decode an async byte channel into frames, in arrival order.

    Text is decoded with an incremental UTF-8 decoder so characters split
    across reads survive. Whatever remains buffered when the channel closes is
    flushed as a final frame if it holds a ``data:`` line.

    Raises:
        StreamDecodeError: the channel failed; ``pending`` holds the text of
            the incomplete block that was buffered at that moment.
    """
    decoder = codecs.getincrementaldecoder("utf-8")(errors="replace")
    buffer = ""

    try:
        async for chunk in byte_chunks:
            if not chunk:
                continue
            buffer += decoder.decode(chunk)
            if "\r" in buffer:
                buffer = buffer.replace("\r\n", "\n")

            while True:
                boundary = buffer.find("\n\n")
                if boundary < 0:
                    break
                block = buffer[:boundary]
                buffer = buffer[boundary + 2:]
                frame = parse_sse_event_block(block)
                if frame is not None:
                    yield frame
    except StreamDecodeError:
        raise
    except Exception as e:
        pending = buffer + decoder.decode(b"", final=True)
        logger.debug("SSE channel failed with %d buffered chars: %s", len(pending), e)
        raise StreamDecodeError(f"event stream failed: {e}", pending=pending, original_error=e) from e

    buffer += decoder.decode(b"", final=True)
    tail = parse_sse_event_block(buffer.replace("\r\n", "\n").rstrip("\n"))
    if tail is not None:
        yield tail
