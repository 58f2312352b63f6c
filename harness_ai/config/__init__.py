"""Configuration defaults for harness-ai."""

from .constants import (
    ANTHROPIC_API_KEY_ENV_VAR,
    ANTHROPIC_API_VERSION,
    ANTHROPIC_BASE_URL_ENV_VAR,
    DEFAULT_ANTHROPIC_BASE_URL,
    DEFAULT_MAX_OUTPUT_TOKENS,
    DEFAULT_MAX_TOOL_ROUNDTRIPS,
    HARNESS_AI_MODEL_ENV_VAR,
)

__all__ = [
    "ANTHROPIC_API_KEY_ENV_VAR",
    "ANTHROPIC_API_VERSION",
    "ANTHROPIC_BASE_URL_ENV_VAR",
    "DEFAULT_ANTHROPIC_BASE_URL",
    "DEFAULT_MAX_OUTPUT_TOKENS",
    "DEFAULT_MAX_TOOL_ROUNDTRIPS",
    "HARNESS_AI_MODEL_ENV_VAR",
]
