"""
Anthropic model factory.

``create_anthropic`` resolves credentials once and returns a factory that
binds them to a model id. The resulting AnthropicModel is what run options
take as ``model``.
"""

import os
from dataclasses import dataclass, field
from typing import Any, Dict, Optional

import httpx
from dotenv import load_dotenv

from ...config.constants import (
    ANTHROPIC_API_KEY_ENV_VAR,
    ANTHROPIC_BASE_URL_ENV_VAR,
    DEFAULT_ANTHROPIC_BASE_URL,
    DEFAULT_REQUEST_TIMEOUT_SECONDS,
)
from ...tools.tool_definition import ProviderTool


@dataclass
class AnthropicModel:
    """Connection settings for one Anthropic model."""
    model_id: str
    api_key: str
    base_url: str = DEFAULT_ANTHROPIC_BASE_URL
    headers: Dict[str, str] = field(default_factory=dict)
    http_client: Optional[httpx.AsyncClient] = None
    timeout: float = DEFAULT_REQUEST_TIMEOUT_SECONDS
    provider: str = "harness.anthropic"

    @property
    def messages_url(self) -> str:
        return f"{self.base_url}/messages"


def _provider_tool(anthropic_type: str, name: str, settings: Dict[str, Any]) -> ProviderTool:
    return ProviderTool(anthropic_type=anthropic_type, name=name, settings=dict(settings))


class AnthropicTools:
    """Builders for tools that Anthropic executes server-side."""

    @staticmethod
    def web_search_20250305(**settings: Any) -> ProviderTool:
        return _provider_tool("web_search_20250305", "web_search", settings)

    @staticmethod
    def web_fetch_20250910(**settings: Any) -> ProviderTool:
        return _provider_tool("web_fetch_20250910", "web_fetch", settings)

    @staticmethod
    def tool_search_regex_20251119(**settings: Any) -> ProviderTool:
        return _provider_tool("tool_search_tool_regex_20251119", "tool_search", settings)

    @staticmethod
    def tool_search_bm25_20251119(**settings: Any) -> ProviderTool:
        return _provider_tool("tool_search_tool_bm25_20251119", "tool_search", settings)


anthropic_tools = AnthropicTools()


def normalize_base_url(value: Optional[str]) -> str:
    base = (value or "").strip() or DEFAULT_ANTHROPIC_BASE_URL
    return base[:-1] if base.endswith("/") else base


class AnthropicModelFactory:
    """Callable returned by create_anthropic(); ``factory("claude-...")`` builds a model."""

    tools = anthropic_tools

    def __init__(self, api_key: str, base_url: str, headers: Dict[str, str],
                 http_client: Optional[httpx.AsyncClient] = None):
        self.api_key = api_key
        self.base_url = base_url
        self.headers = headers
        self.http_client = http_client

    def __call__(self, model_id: str) -> AnthropicModel:
        if not model_id or not model_id.strip():
            raise ValueError("model_id is required")
        return AnthropicModel(
            model_id=model_id,
            api_key=self.api_key,
            base_url=self.base_url,
            headers=dict(self.headers),
            http_client=self.http_client,
        )


def create_anthropic(
    api_key: Optional[str] = None,
    base_url: Optional[str] = None,
    headers: Optional[Dict[str, str]] = None,
    http_client: Optional[httpx.AsyncClient] = None,
) -> AnthropicModelFactory:
    """
    Create an Anthropic model factory.

    Missing ``api_key``/``base_url`` fall back to ANTHROPIC_API_KEY and
    ANTHROPIC_BASE_URL, after loading a ``.env`` file if one exists.

    Args:
        api_key: Anthropic API key
        base_url: API base URL; a trailing slash is dropped
        headers: Extra headers sent with every request
        http_client: Client to send requests with; one is created per
            request when omitted

    Raises:
        ValueError: no API key was given or found in the environment
    """
    load_dotenv()
    api_key = api_key or os.getenv(ANTHROPIC_API_KEY_ENV_VAR)
    if not api_key:
        raise ValueError(f"Anthropic API key not provided and {ANTHROPIC_API_KEY_ENV_VAR} is not set")
    return AnthropicModelFactory(
        api_key=api_key,
        base_url=normalize_base_url(base_url or os.getenv(ANTHROPIC_BASE_URL_ENV_VAR)),
        headers=dict(headers or {}),
        http_client=http_client,
    )
