"""UI message stream encoding."""

from .ui_stream import (
    UI_MESSAGE_STREAM_HEADERS,
    create_ui_message_stream,
    create_ui_message_stream_response,
    default_error_text,
    json_to_sse,
    to_ui_message_chunks,
    ui_message_stream_headers,
)

__all__ = [
    "UI_MESSAGE_STREAM_HEADERS",
    "create_ui_message_stream",
    "create_ui_message_stream_response",
    "default_error_text",
    "json_to_sse",
    "to_ui_message_chunks",
    "ui_message_stream_headers",
]
