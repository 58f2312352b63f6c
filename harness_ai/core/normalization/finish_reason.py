from typing import Optional

from ...models.generation import FinishReason


_ANTHROPIC_STOP_REASONS = {
    "end_turn": "stop",
    "stop_sequence": "stop",
    "pause_turn": "stop",
    "max_tokens": "length",
    "model_context_window_exceeded": "length",
    "refusal": "content-filter",
    "tool_use": "tool-calls",
}


def map_anthropic_stop_reason(raw: Optional[str]) -> FinishReason:
    """Map an Anthropic stop_reason literal onto the closed finish-reason set."""
    if raw is None:
        return "other"
    return _ANTHROPIC_STOP_REASONS.get(raw, "other")
