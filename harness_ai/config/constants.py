"""
Provider and run defaults.

Values here are the fallbacks used when neither the caller nor the
environment provides a setting.
"""

# Anthropic Messages API
DEFAULT_ANTHROPIC_BASE_URL = "https://api.anthropic.com/v1"
ANTHROPIC_API_VERSION = "2023-06-01"
ANTHROPIC_MAX_TEMPERATURE = 1.0

# Environment variables read by create_anthropic() and the CLI
ANTHROPIC_API_KEY_ENV_VAR = "ANTHROPIC_API_KEY"
ANTHROPIC_BASE_URL_ENV_VAR = "ANTHROPIC_BASE_URL"
HARNESS_AI_MODEL_ENV_VAR = "HARNESS_AI_MODEL"

# Run defaults
DEFAULT_MAX_OUTPUT_TOKENS = 4096
DEFAULT_MAX_TOOL_ROUNDTRIPS = 10
DEFAULT_REQUEST_TIMEOUT_SECONDS = 600.0

# Models tried in order by the smoke command when no model is given
DEFAULT_SMOKE_MODEL_CANDIDATES = (
    "claude-sonnet-4-6",
    "claude-sonnet-4-5-20250929",
    "claude-3-5-haiku-20241022",
)

# UI message stream protocol
UI_MESSAGE_STREAM_VERSION = "v1"
SSE_DONE_SENTINEL = "[DONE]"
