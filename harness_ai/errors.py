"""
Exception hierarchy for harness-ai.

Errors raised while a run is streaming (transport, parse, tool, roundtrip
budget, cancellation) are reported as stream parts rather than raised to the
consumer. The classes below are what those parts carry, plus the few errors
that are raised directly (bad run options, structured-output failures,
encoder bugs).
"""

from typing import Any, Optional


class HarnessAIError(Exception):
    """Base class for all harness-ai errors."""
    pass


class InvalidPromptError(HarnessAIError, ValueError):
    """Raised when prompt/messages options are inconsistent."""
    pass


class StreamDecodeError(HarnessAIError):
    """
    Raised by the SSE decoder when the underlying byte channel fails.

    Attributes:
        pending: Buffered text that had not yet formed a complete frame
        original_error: The exception raised by the byte channel
    """

    def __init__(self, message: str, pending: str = "", original_error: Optional[BaseException] = None):
        super().__init__(message)
        self.pending = pending
        self.original_error = original_error


class ProviderEventParseError(HarnessAIError):
    """Reported when a frame's payload is not a valid provider event."""

    def __init__(self, message: str, raw_data: str = ""):
        super().__init__(message)
        self.raw_data = raw_data


class ProviderStreamIncompleteError(HarnessAIError):
    """Reported when the provider stream closes before its message-stop event."""
    pass


class ToolRoundtripLimitError(HarnessAIError):
    """Reported when a run needs more steps than max_tool_roundtrips allows."""

    def __init__(self, max_tool_roundtrips: int):
        super().__init__(
            f"maximum tool roundtrips ({max_tool_roundtrips}) reached before the run finished"
        )
        self.max_tool_roundtrips = max_tool_roundtrips


class MissingToolExecutorError(HarnessAIError):
    """Reported for a tool call that no local executor can resolve."""

    def __init__(self, tool_name: str):
        super().__init__(f"missing executor for tool '{tool_name}'")
        self.tool_name = tool_name


class ToolInputValidationError(HarnessAIError):
    """Reported when a tool call's input does not match the tool's schema."""

    def __init__(self, tool_name: str, message: str):
        super().__init__(f"invalid input for tool '{tool_name}': {message}")
        self.tool_name = tool_name


class NoObjectGeneratedError(HarnessAIError):
    """Raised by StreamObjectResult.object when no valid object was produced."""

    def __init__(self, message: str, text: str = ""):
        super().__init__(message)
        self.text = text


class UnhandledStreamPartError(HarnessAIError, TypeError):
    """Raised by the UI encoder for a part outside the StreamPart union."""

    def __init__(self, part: Any):
        super().__init__(f"unhandled stream part: {part!r}")
        self.part = part
