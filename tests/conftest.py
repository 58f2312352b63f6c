"""Shared pytest fixtures for harness-ai tests."""

import pytest

from tests.helpers.streaming_mocks import MockAnthropicServer


def pytest_configure(config):
    config.addinivalue_line("markers", "integration: end-to-end tests through the HTTP layer")


@pytest.fixture
def mock_env_vars(monkeypatch):
    """Mock environment variables for testing."""
    env_vars = {
        "ANTHROPIC_API_KEY": "test-anthropic-key",
        "HARNESS_AI_MODEL": "claude-test",
    }
    for key, value in env_vars.items():
        monkeypatch.setenv(key, value)
    monkeypatch.delenv("ANTHROPIC_BASE_URL", raising=False)
    return env_vars


@pytest.fixture
def anthropic_server():
    """Scripted Anthropic endpoint; add responses before starting a run."""
    return MockAnthropicServer()


@pytest.fixture
def weather_schema():
    return {
        "type": "object",
        "properties": {"city": {"type": "string"}},
        "required": ["city"],
    }


@pytest.fixture
def fixed_clock():
    from datetime import datetime, timezone

    moment = datetime(2025, 1, 1, 12, 0, tzinfo=timezone.utc)
    return lambda: moment
