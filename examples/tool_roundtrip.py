"""
Example: Tool roundtrips with streaming

Streams a run in which the model calls a local weather tool, prints the
parts as they arrive, then prints the run's aggregates.

Requires ANTHROPIC_API_KEY (a .env file is loaded if present).
"""

import asyncio
import os

from harness_ai import FunctionTool, create_anthropic, stream_text


def get_weather(city: str) -> dict:
    """Current weather for a city."""
    return {"city": city, "temperature_c": 21, "conditions": "clear"}


async def example_tool_roundtrip():
    print("=== Tool roundtrip ===\n")

    anthropic = create_anthropic()
    model = anthropic(os.getenv("HARNESS_AI_MODEL", "claude-sonnet-4-5-20250929"))

    result = stream_text(
        model,
        prompt="What's the weather like in Lisbon right now?",
        tools={"weather": FunctionTool.from_callable(get_weather)},
        max_tool_roundtrips=3,
    )

    async for part in result.full_stream:
        if part.type == "text-delta":
            print(part.text, end="", flush=True)
        elif part.type == "tool-call":
            print(f"\n[calling {part.tool_name} with {part.input}]")
        elif part.type == "tool-result":
            print(f"[{part.tool_name} returned {part.output}]")
        elif part.type == "error":
            print(f"\n[error: {part.error}]")

    usage = await result.usage
    print(f"\n\nFinish reason: {await result.finish_reason}")
    print(f"Steps: {len(await result.steps)}")
    print(f"Tokens: {usage.input_tokens} in / {usage.output_tokens} out")


async def example_web_search():
    print("\n=== Provider-executed web search ===\n")

    anthropic = create_anthropic()
    model = anthropic(os.getenv("HARNESS_AI_MODEL", "claude-sonnet-4-5-20250929"))

    result = stream_text(
        model,
        prompt="Find one recent headline about the Python language.",
        tools={"web_search": anthropic.tools.web_search_20250305(max_uses=2)},
    )

    async for part in result.full_stream:
        if part.type == "text-delta":
            print(part.text, end="", flush=True)
        elif part.type == "source" and part.url:
            print(f"\n[source: {part.url}]")
    print()


async def main():
    await example_tool_roundtrip()
    await example_web_search()


if __name__ == "__main__":
    asyncio.run(main())
