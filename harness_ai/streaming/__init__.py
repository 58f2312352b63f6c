"""Streaming layer: SSE framing, fan-out views and JSON object extraction.

This layer handles:
- Decoding a byte channel into server-sent event frames
- Broadcasting one run's parts to independent consumers
- The StreamTextResult views over a run
- Extracting JSON objects from streamed text
"""

from .broadcast import PartBroadcaster
from .json_handler import (
    PartialObjectExtractor,
    extract_first_balanced_json_object,
    parse_json_object_from_text,
    safe_json_parse,
)
from .result import RunSummary, StreamTextResult
from .sse import Frame, iter_sse_events, parse_sse_event_block

__all__ = [
    "Frame",
    "PartBroadcaster",
    "PartialObjectExtractor",
    "RunSummary",
    "StreamTextResult",
    "extract_first_balanced_json_object",
    "iter_sse_events",
    "parse_json_object_from_text",
    "parse_sse_event_block",
    "safe_json_parse",
]
