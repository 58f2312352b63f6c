"""Anthropic Messages API provider."""

from .provider import AnthropicModel, AnthropicModelFactory, AnthropicTools, anthropic_tools, create_anthropic
from .translator import AnthropicStreamTranslator

__all__ = [
    "AnthropicModel",
    "AnthropicModelFactory",
    "AnthropicStreamTranslator",
    "AnthropicTools",
    "anthropic_tools",
    "create_anthropic",
]
