"""Tests for the harness-ai command line."""

import pytest

from harness_ai import cli
from harness_ai.providers.anthropic import create_anthropic
from tests.helpers.streaming_mocks import text_response


@pytest.fixture
def mocked_factory(anthropic_server, monkeypatch):
    def factory(base_url=None):
        return create_anthropic(api_key="test-key", base_url=base_url, http_client=anthropic_server.client())

    monkeypatch.setattr(cli, "create_anthropic", factory)
    return anthropic_server


def test_generate(mocked_factory, capsys):
    mocked_factory.add(text_response(["Four."]))

    exit_code = cli.main(["generate", "2+2?", "--model", "claude-test", "--max-tokens", "64"])

    output = capsys.readouterr().out
    assert exit_code == 0
    assert "Four." in output
    assert "Finish reason: stop" in output
    assert mocked_factory.bodies[0]["max_tokens"] == 64


def test_generate_streaming(mocked_factory, capsys):
    mocked_factory.add(text_response(["Fo", "ur."]))

    exit_code = cli.main(["generate", "2+2?", "--model", "claude-test", "--stream"])

    assert exit_code == 0
    assert "Four." in capsys.readouterr().out


def test_generate_failure_exit_code(mocked_factory, capsys):
    exit_code = cli.main(["generate", "2+2?", "--model", "claude-test"])
    assert exit_code == 1
    assert "Finish reason: error" in capsys.readouterr().out


def test_generate_requires_model(monkeypatch):
    monkeypatch.delenv("HARNESS_AI_MODEL", raising=False)
    with pytest.raises(SystemExit):
        cli.main(["generate", "Hi"])


def test_missing_api_key(monkeypatch, capsys):
    monkeypatch.delenv("ANTHROPIC_API_KEY", raising=False)
    exit_code = cli.main(["generate", "Hi", "--model", "claude-test"])
    assert exit_code == 2
    assert "ANTHROPIC_API_KEY" in capsys.readouterr().err


def test_no_command_prints_help(capsys):
    assert cli.main([]) == 0
    assert "harness-ai CLI" in capsys.readouterr().out
