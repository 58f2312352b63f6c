"""Structured output on top of stream_text()."""

import json
from typing import Any, AsyncIterator, Callable, Dict, List, Optional, Tuple

from ..errors import NoObjectGeneratedError
from ..models.conversation_types import ModelMessage
from ..models.parts import TextDeltaPart
from ..streaming.json_handler import PartialObjectExtractor, parse_json_object_from_text
from ..streaming.result import StreamTextResult
from .stream_text import stream_text


def build_json_instruction(schema: Dict[str, Any]) -> str:
    return " ".join([
        "Respond with strict JSON only.",
        "Do not include markdown fences or extra commentary.",
        f"JSON schema: {json.dumps(schema)}",
    ])


def with_object_instruction(
    schema: Dict[str, Any],
    prompt: Optional[str],
    messages: Optional[List[ModelMessage]],
    system: Optional[str],
) -> Tuple[Optional[str], Optional[List[ModelMessage]], Optional[str]]:
    """Attach the JSON instruction to the prompt, or to the system text for a transcript."""
    instruction = build_json_instruction(schema)
    if prompt is not None:
        return f"{prompt}\n\n{instruction}", messages, system
    return prompt, messages, f"{system}\n\n{instruction}" if system is not None else instruction


class StreamObjectResult:
    """
    Handle returned by stream_object().

    ``partial_object_stream`` yields each new complete object found in the
    text so far; ``object`` resolves to the final validated object.
    """

    def __init__(self, result: StreamTextResult, validate: Optional[Callable[[Any], bool]] = None):
        self.stream_text_result = result
        self.validate = validate

    async def _iterate_partial_objects(self) -> AsyncIterator[Dict[str, Any]]:
        extractor = PartialObjectExtractor()
        async for part in self.stream_text_result.full_stream:
            if not isinstance(part, TextDeltaPart):
                continue
            snapshot = extractor.process_chunk(part.text)
            if snapshot is not None:
                yield snapshot

    @property
    def partial_object_stream(self) -> AsyncIterator[Dict[str, Any]]:
        return self._iterate_partial_objects()

    async def _final_object(self) -> Any:
        text = await self.stream_text_result.text
        parsed = parse_json_object_from_text(text)
        if parsed is None:
            raise NoObjectGeneratedError("stream_object failed: no JSON object found in model output", text=text)
        if self.validate is not None and not self.validate(parsed):
            raise NoObjectGeneratedError("stream_object failed: parsed JSON did not pass validator", text=text)
        return parsed

    @property
    def object(self):
        return self._final_object()

    @property
    def text(self):
        return self.stream_text_result.text

    @property
    def finish_reason(self):
        return self.stream_text_result.finish_reason


def stream_object(
    model: Any,
    *,
    schema: Dict[str, Any],
    validate: Optional[Callable[[Any], bool]] = None,
    prompt: Optional[str] = None,
    messages: Optional[List[Any]] = None,
    system: Optional[str] = None,
    **options: Any,
) -> StreamObjectResult:
    """
    Stream a run whose answer is a single JSON object.

    Args:
        model: AnthropicModel from create_anthropic()
        schema: JSON schema described to the model
        validate: Predicate the final object must satisfy
        prompt, messages, system: As for stream_text()
        **options: Remaining stream_text() options
    """
    prompt, messages, system = with_object_instruction(schema, prompt, messages, system)
    result = stream_text(model, prompt=prompt, messages=messages, system=system, **options)
    return StreamObjectResult(result, validate=validate)
