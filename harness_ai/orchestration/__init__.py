"""Run orchestration: multi-step streaming, tool roundtrips and structured output."""

from .stream_object import StreamObjectResult, build_json_instruction, stream_object
from .stream_text import collect_full_stream, generate_text, stream_text

__all__ = [
    "StreamObjectResult",
    "build_json_instruction",
    "collect_full_stream",
    "generate_text",
    "stream_object",
    "stream_text",
]
