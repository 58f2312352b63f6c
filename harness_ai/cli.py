"""CLI entry point for harness-ai."""

import argparse
import asyncio
import os
import sys
from typing import Any, Dict, List, Optional

from dotenv import load_dotenv

from .config.constants import DEFAULT_SMOKE_MODEL_CANDIDATES, HARNESS_AI_MODEL_ENV_VAR
from .orchestration.stream_object import stream_object
from .orchestration.stream_text import stream_text
from .providers.anthropic.provider import create_anthropic
from .tools.tool_definition import FunctionTool

SMOKE_TIMEOUT_SECONDS = 90.0


class SmokeTestFailure(Exception):
    pass


def _check(condition: bool, message: str) -> None:
    if not condition:
        raise SmokeTestFailure(message)


async def generate_text(model_id: str, prompt: str, system: Optional[str] = None,
                        max_tokens: Optional[int] = None, temperature: Optional[float] = None,
                        stream: bool = False, base_url: Optional[str] = None) -> int:
    """Generate text with the given model and print it."""
    options: Dict[str, Any] = {}
    if system:
        options['system'] = system
    if max_tokens:
        options['max_output_tokens'] = max_tokens
    if temperature is not None:
        options['temperature'] = temperature

    model = create_anthropic(base_url=base_url)(model_id)
    result = stream_text(model, prompt=prompt, **options)

    if stream:
        print(f"Streaming response from {model_id}:\n")
        async for chunk in result.text_stream:
            print(chunk, end='', flush=True)
        print()
    else:
        print(f"Response from {model_id}:\n")
        print(await result.text)

    summary = await result.summary()
    print(f"\nFinish reason: {summary.finish_reason}")
    print(f"Tokens used: {summary.usage.to_dict()}")
    return 0 if summary.finish_reason != "error" else 1


def _weather(city: str) -> Dict[str, str]:
    """Get weather by city"""
    return {"city": city, "forecast": f"{city}: 68F clear"}


async def _smoke_model(model: Any) -> Dict[str, Any]:
    text_result = stream_text(
        model,
        prompt="Respond with exactly HARNESS_SMOKE_OK.",
        max_output_tokens=32,
        temperature=0,
    )
    text_deltas = [delta async for delta in text_result.text_stream]
    text = await text_result.text
    _check("HARNESS_SMOKE_OK" in text, f"unexpected text response: {text!r}")
    _check(await text_result.finish_reason == "stop", "text run did not finish with 'stop'")

    object_result = stream_object(
        model,
        prompt='Return a JSON object with exactly two keys: status and value. status must be "ok" and value must be 7.',
        temperature=0,
        max_output_tokens=128,
        schema={
            "type": "object",
            "properties": {"status": {"type": "string"}, "value": {"type": "number"}},
            "required": ["status", "value"],
        },
        validate=lambda value: value.get("status") == "ok" and value.get("value") == 7,
    )
    partial_objects = [snapshot async for snapshot in object_result.partial_object_stream]
    final_object = await object_result.object
    _check(final_object == {"status": "ok", "value": 7}, f"unexpected object: {final_object!r}")
    _check(await object_result.finish_reason == "stop", "object run did not finish with 'stop'")

    tool_result = stream_text(
        model,
        prompt=" ".join([
            'You must call the weather tool exactly once with {"city":"San Francisco"} before answering.',
            "After receiving tool output, respond exactly with TOOL_SMOKE_OK.",
            "Do not include any additional text.",
        ]),
        max_output_tokens=128,
        temperature=0,
        tools={"weather": FunctionTool.from_callable(_weather)},
    )
    summary = await tool_result.summary()
    _check(len(summary.tool_calls) >= 1, "model made no tool call")
    _check(len(summary.tool_results) >= 1, "no tool result was produced")
    _check("TOOL_SMOKE_OK" in summary.text, f"unexpected tool run text: {summary.text!r}")
    _check(summary.finish_reason == "stop", "tool run did not finish with 'stop'")

    return {
        "text_deltas": len(text_deltas),
        "tool_calls": len(summary.tool_calls),
        "tool_results": len(summary.tool_results),
        "partial_objects": len(partial_objects),
    }


async def run_smoke(model_id: Optional[str] = None, base_url: Optional[str] = None) -> int:
    """Exercise text, object and tool streaming against the live API.

    Tries each candidate model in turn and succeeds on the first that passes.
    """
    factory = create_anthropic(base_url=base_url)
    candidates: List[str] = [model_id] if model_id else list(DEFAULT_SMOKE_MODEL_CANDIDATES)

    failures = []
    for candidate in candidates:
        try:
            counts = await asyncio.wait_for(_smoke_model(factory(candidate)), SMOKE_TIMEOUT_SECONDS)
        except Exception as e:
            failures.append(f"{candidate}: {str(e) or type(e).__name__}")
            continue

        print("harness-ai smoke test passed")
        print(f"model={candidate}")
        for key, value in counts.items():
            print(f"{key}={value}")
        return 0

    print("harness-ai smoke test failed for all models", file=sys.stderr)
    for failure in failures:
        print(failure, file=sys.stderr)
    return 1


def main(argv: Optional[List[str]] = None) -> int:
    """Main CLI function."""
    parser = argparse.ArgumentParser(description="harness-ai CLI")
    parser.add_argument('--env-file', help='Load environment variables from this file first')
    parser.add_argument('--base-url', help='Anthropic API base URL')
    subparsers = parser.add_subparsers(dest='command', help='Available commands')

    generate_parser = subparsers.add_parser('generate', help='Generate text with a model')
    generate_parser.add_argument('prompt', help='Text prompt')
    generate_parser.add_argument('--model', help=f'Model id (default: ${HARNESS_AI_MODEL_ENV_VAR})')
    generate_parser.add_argument('--system', help='System instruction')
    generate_parser.add_argument('--max-tokens', type=int, help='Maximum output tokens per step')
    generate_parser.add_argument('--temperature', type=float, help='Temperature (0.0-1.0)')
    generate_parser.add_argument('--stream', action='store_true', help='Stream the response')

    smoke_parser = subparsers.add_parser('smoke', help='Run the live API smoke test')
    smoke_parser.add_argument('--model', help='Model id (default: try known models in order)')

    args = parser.parse_args(argv)

    if args.env_file:
        load_dotenv(args.env_file)

    try:
        if args.command == 'generate':
            model_id = args.model or os.getenv(HARNESS_AI_MODEL_ENV_VAR)
            if not model_id:
                parser.error(f"--model is required when ${HARNESS_AI_MODEL_ENV_VAR} is not set")
            return asyncio.run(generate_text(
                model_id,
                args.prompt,
                args.system,
                args.max_tokens,
                args.temperature,
                args.stream,
                args.base_url,
            ))
        elif args.command == 'smoke':
            return asyncio.run(run_smoke(args.model, args.base_url))
    except ValueError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 2

    parser.print_help()
    return 0


if __name__ == "__main__":
    sys.exit(main())
