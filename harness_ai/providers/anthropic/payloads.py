from __future__ import annotations

import json
from typing import Any, Dict, List, Optional, Sequence, Tuple

from ...config.constants import ANTHROPIC_MAX_TEMPERATURE
from ...models.conversation_types import (
    AssistantMessage,
    SystemMessage,
    TextContentPart,
    ToolCallContentPart,
    ToolMessage,
    UserMessage,
)
from ...tools.tool_definition import FunctionTool, ProviderTool, ToolSet


EMPTY_INPUT_SCHEMA: Dict[str, Any] = {"type": "object", "properties": {}}


def _tool_result_content(output: Any) -> str:
    if isinstance(output, str):
        return output
    return json.dumps(output, default=str)


def _user_blocks(message: UserMessage) -> List[Dict[str, Any]]:
    if isinstance(message.content, str):
        return [{"type": "text", "text": message.content}]
    return [{"type": "text", "text": part.text} for part in message.content]


def _assistant_blocks(message: AssistantMessage) -> List[Dict[str, Any]]:
    if isinstance(message.content, str):
        return [{"type": "text", "text": message.content}] if message.content else []
    blocks: List[Dict[str, Any]] = []
    for part in message.content:
        if isinstance(part, TextContentPart):
            if part.text:
                blocks.append({"type": "text", "text": part.text})
        elif isinstance(part, ToolCallContentPart):
            blocks.append({
                "type": "tool_use",
                "id": part.tool_call_id,
                "name": part.tool_name,
                "input": part.input if isinstance(part.input, dict) else {},
            })
    return blocks


def _tool_result_blocks(message: ToolMessage) -> List[Dict[str, Any]]:
    blocks = []
    for part in message.content:
        block: Dict[str, Any] = {
            "type": "tool_result",
            "tool_use_id": part.tool_call_id,
            "content": _tool_result_content(part.output),
        }
        if part.is_error:
            block["is_error"] = True
        blocks.append(block)
    return blocks


def convert_messages(
    messages: Sequence[Any],
    system: Optional[str] = None,
) -> Tuple[Optional[str], List[Dict[str, Any]]]:
    """Convert a transcript into Anthropic ``system`` and ``messages``.

    System messages are lifted out and joined after ``system``. Tool messages
    become user turns carrying ``tool_result`` blocks, and consecutive turns
    with the same role are merged since the API requires alternation.
    """
    system_parts = [system] if system else []
    converted: List[Dict[str, Any]] = []

    for message in messages:
        if isinstance(message, SystemMessage):
            system_parts.append(message.content)
            continue
        if isinstance(message, UserMessage):
            role, blocks = "user", _user_blocks(message)
        elif isinstance(message, AssistantMessage):
            role, blocks = "assistant", _assistant_blocks(message)
        elif isinstance(message, ToolMessage):
            role, blocks = "user", _tool_result_blocks(message)
        else:
            raise TypeError(f"unsupported message type: {type(message).__name__}")

        if not blocks:
            continue
        if converted and converted[-1]["role"] == role:
            converted[-1]["content"].extend(blocks)
        else:
            converted.append({"role": role, "content": blocks})

    merged_system = "\n\n".join(system_parts) if system_parts else None
    return merged_system, converted


def convert_tools(tools: ToolSet) -> List[Dict[str, Any]]:
    """Declare each tool to the API, keyed by its name in the tool set."""
    declared = []
    for name, tool in tools.items():
        if isinstance(tool, ProviderTool):
            entry: Dict[str, Any] = {"type": tool.anthropic_type, "name": tool.name}
            entry.update(tool.settings)
        elif isinstance(tool, FunctionTool):
            entry = {"name": name, "input_schema": tool.input_schema or EMPTY_INPUT_SCHEMA}
            if tool.description:
                entry["description"] = tool.description
        else:
            raise TypeError(f"unsupported tool definition for '{name}': {type(tool).__name__}")
        declared.append(entry)
    return declared


def provider_tool_names(tools: ToolSet) -> Dict[str, str]:
    """Map the API name of each provider tool to its key in the tool set."""
    return {tool.name: key for key, tool in tools.items() if isinstance(tool, ProviderTool)}


def build_messages_body(
    model_id: str,
    messages: Sequence[Any],
    *,
    system: Optional[str] = None,
    tools: Optional[ToolSet] = None,
    max_output_tokens: int,
    temperature: Optional[float] = None,
    top_p: Optional[float] = None,
    stop_sequences: Optional[List[str]] = None,
) -> Tuple[Dict[str, Any], List[str]]:
    """Assemble a streaming Messages request body.

    Returns the body and any warnings about settings that were adjusted.
    """
    warnings: List[str] = []
    merged_system, converted = convert_messages(messages, system)

    body: Dict[str, Any] = {
        "model": model_id,
        "max_tokens": max_output_tokens,
        "messages": converted,
        "stream": True,
    }
    if merged_system:
        body["system"] = merged_system

    if temperature is not None:
        if temperature > ANTHROPIC_MAX_TEMPERATURE:
            warnings.append(
                f"temperature {temperature} exceeds the supported maximum; "
                f"clamped to {ANTHROPIC_MAX_TEMPERATURE}"
            )
            temperature = ANTHROPIC_MAX_TEMPERATURE
        body["temperature"] = temperature
    if top_p is not None:
        body["top_p"] = top_p
    if stop_sequences:
        body["stop_sequences"] = list(stop_sequences)
    if tools:
        body["tools"] = convert_tools(tools)

    return body, warnings
