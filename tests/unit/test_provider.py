"""Tests for the Anthropic model factory, request headers and error mapping."""

import httpx
import pytest

from harness_ai.providers import ErrorMapper, ProviderError
from harness_ai.providers.anthropic import create_anthropic
from harness_ai.providers.anthropic.client import request_headers


class TestCreateAnthropic:

    def test_environment_fallbacks(self, mock_env_vars, monkeypatch):
        monkeypatch.setenv("ANTHROPIC_BASE_URL", "https://proxy.example/v1/")
        model = create_anthropic()("claude-test")

        assert model.api_key == "test-anthropic-key"
        assert model.base_url == "https://proxy.example/v1"
        assert model.messages_url == "https://proxy.example/v1/messages"
        assert model.provider == "harness.anthropic"

    def test_explicit_settings_win(self, mock_env_vars):
        model = create_anthropic(api_key="explicit", base_url="https://other.example/", headers={"x-team": "a"})(
            "claude-test"
        )
        assert model.api_key == "explicit"
        assert model.base_url == "https://other.example"
        assert request_headers(model)["x-team"] == "a"

    def test_default_base_url(self, mock_env_vars):
        assert create_anthropic()("claude-test").base_url == "https://api.anthropic.com/v1"

    def test_missing_api_key(self, monkeypatch):
        monkeypatch.delenv("ANTHROPIC_API_KEY", raising=False)
        with pytest.raises(ValueError, match="ANTHROPIC_API_KEY"):
            create_anthropic()

    @pytest.mark.parametrize("model_id", ["", "   "])
    def test_blank_model_id(self, mock_env_vars, model_id):
        with pytest.raises(ValueError, match="model_id is required"):
            create_anthropic()(model_id)

    def test_provider_tool_builders(self, mock_env_vars):
        factory = create_anthropic()
        tool = factory.tools.web_fetch_20250910(max_uses=1)
        assert (tool.anthropic_type, tool.name, tool.settings) == ("web_fetch_20250910", "web_fetch", {"max_uses": 1})
        assert factory.tools.tool_search_bm25_20251119().name == "tool_search"

    def test_request_headers(self, mock_env_vars):
        headers = request_headers(create_anthropic()("claude-test"))
        assert headers["x-api-key"] == "test-anthropic-key"
        assert headers["anthropic-version"] == "2023-06-01"
        assert headers["content-type"] == "application/json"


class TestErrorMapper:

    def test_from_response(self):
        response = httpx.Response(429, headers={"retry-after": "12"})
        error = ErrorMapper.from_response(response, '{"error": "slow down"}')

        assert error.status_code == 429
        assert error.retry_after == 12.0
        assert error.is_retryable is True
        assert error.response_body == '{"error": "slow down"}'
        assert ErrorMapper.get_error_classification(error)["category"] == "rate_limit"

    def test_client_error_is_not_retryable(self):
        error = ErrorMapper.from_response(httpx.Response(401), "unauthorized")
        assert error.is_retryable is False
        assert ErrorMapper.get_error_classification(error)["category"] == "authentication"

    def test_stream_error(self):
        error = ErrorMapper.from_stream_error("invalid_request_error", "bad")
        assert str(error) == "anthropic stream error (invalid_request_error): bad"
        assert error.is_retryable is False

    def test_timeout_is_retryable(self):
        error = ErrorMapper.map_anthropic_error(httpx.ReadTimeout("timed out"))
        assert error.is_retryable is True
        assert isinstance(error.original_error, httpx.ReadTimeout)
        assert ErrorMapper.get_error_classification(error)["category"] == "timeout"

    def test_provider_error_passes_through(self):
        original = ProviderError("already mapped", provider="anthropic")
        assert ErrorMapper.map_anthropic_error(original) is original
