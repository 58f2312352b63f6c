"""
harness-ai - Streaming text generation with tool roundtrips for Anthropic models.

This package provides:
- A server-sent event decoder for the Anthropic Messages streaming API
- Normalized, provider-agnostic stream parts
- Multi-step runs that resolve tool calls locally between requests
- Structured JSON output with partial object snapshots
- A UI message stream encoder for browser clients
"""

__version__ = "0.1.0"

from .errors import (
    HarnessAIError,
    InvalidPromptError,
    MissingToolExecutorError,
    NoObjectGeneratedError,
    StreamDecodeError,
    ToolInputValidationError,
    ToolRoundtripLimitError,
    UnhandledStreamPartError,
)
from .models.conversation_types import (
    AssistantMessage,
    SystemMessage,
    TextContentPart,
    ToolCallContentPart,
    ToolMessage,
    ToolResultContentPart,
    UserMessage,
)
from .models.generation import GenerateTextResult, LanguageModelUsage, StepResult
from .orchestration import (
    StreamObjectResult,
    collect_full_stream,
    generate_text,
    stream_object,
    stream_text,
)
from .providers.anthropic import AnthropicModel, anthropic_tools, create_anthropic
from .providers.base import ProviderError
from .streaming import StreamTextResult
from .tools import FunctionTool, ProviderTool, ToolExecutor
from .ui import (
    UI_MESSAGE_STREAM_HEADERS,
    create_ui_message_stream,
    create_ui_message_stream_response,
    json_to_sse,
    to_ui_message_chunks,
)

__all__ = [
    # Entry points
    "create_anthropic",
    "stream_text",
    "generate_text",
    "stream_object",
    "collect_full_stream",

    # Results
    "StreamTextResult",
    "StreamObjectResult",
    "GenerateTextResult",
    "StepResult",
    "LanguageModelUsage",

    # Models and tools
    "AnthropicModel",
    "anthropic_tools",
    "FunctionTool",
    "ProviderTool",
    "ToolExecutor",

    # Messages
    "SystemMessage",
    "UserMessage",
    "AssistantMessage",
    "ToolMessage",
    "TextContentPart",
    "ToolCallContentPart",
    "ToolResultContentPart",

    # UI stream
    "UI_MESSAGE_STREAM_HEADERS",
    "create_ui_message_stream",
    "create_ui_message_stream_response",
    "json_to_sse",
    "to_ui_message_chunks",

    # Errors
    "HarnessAIError",
    "InvalidPromptError",
    "MissingToolExecutorError",
    "NoObjectGeneratedError",
    "ProviderError",
    "StreamDecodeError",
    "ToolInputValidationError",
    "ToolRoundtripLimitError",
    "UnhandledStreamPartError",
]
