"""Tests for structured output streaming."""

import json

import pytest

from harness_ai.errors import NoObjectGeneratedError
from harness_ai.models.conversation_types import UserMessage
from harness_ai.orchestration import build_json_instruction, stream_object
from tests.helpers.streaming_mocks import collect, text_response

SCHEMA = {"type": "object", "properties": {"city": {"type": "string"}}, "required": ["city"]}


def test_instruction_embeds_schema():
    instruction = build_json_instruction(SCHEMA)
    assert instruction.startswith("Respond with strict JSON only.")
    assert json.dumps(SCHEMA) in instruction


@pytest.mark.asyncio
async def test_object_from_fenced_output(anthropic_server):
    anthropic_server.add(text_response(["Here you go:\n```json\n{\"ci", "ty\": \"Pa", "ris\"}\n```"]))
    result = stream_object(anthropic_server.model(), schema=SCHEMA, prompt="Pick a city")

    partials = await collect(result.partial_object_stream)

    assert partials == [{"city": "Paris"}]
    assert await result.object == {"city": "Paris"}
    assert await result.finish_reason == "stop"
    prompt_text = anthropic_server.bodies[0]["messages"][0]["content"][0]["text"]
    assert prompt_text.startswith("Pick a city\n\nRespond with strict JSON only.")


@pytest.mark.asyncio
async def test_instruction_goes_to_system_for_transcripts(anthropic_server):
    anthropic_server.add(text_response(['{"city": "Rome"}']))
    result = stream_object(
        anthropic_server.model(), schema=SCHEMA, messages=[UserMessage(content="Pick")], system="Be terse.",
    )

    assert await result.object == {"city": "Rome"}
    system = anthropic_server.bodies[0]["system"]
    assert system.startswith("Be terse.\n\nRespond with strict JSON only.")


@pytest.mark.asyncio
async def test_no_object_in_output(anthropic_server):
    anthropic_server.add(text_response(["I would rather not."]))
    result = stream_object(anthropic_server.model(), schema=SCHEMA, prompt="Pick a city")

    with pytest.raises(NoObjectGeneratedError) as exc_info:
        await result.object
    assert exc_info.value.text == "I would rather not."
    assert await collect(result.partial_object_stream) == []


@pytest.mark.asyncio
async def test_validator_rejects_object(anthropic_server):
    anthropic_server.add(text_response(['{"town": "Paris"}']))
    result = stream_object(
        anthropic_server.model(),
        schema=SCHEMA,
        prompt="Pick a city",
        validate=lambda value: "city" in value,
    )

    with pytest.raises(NoObjectGeneratedError, match="validator"):
        await result.object
