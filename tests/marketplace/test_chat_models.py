"""Tests for the OpenAI and Anthropic chat model adapters."""

import builtins
from types import SimpleNamespace
from unittest.mock import MagicMock, patch

import pytest

from tradeline.models import AnthropicChatModel, ModelError, OpenAIChatModel


class FakeRateLimitError(Exception):
    pass


class FakeTimeoutError(Exception):
    pass


class FakeStatusError(Exception):
    def __init__(self, message, status_code):
        super().__init__(message)
        self.status_code = status_code


def _fake_sdk(client, entry_point):
    module = SimpleNamespace(
        RateLimitError=FakeRateLimitError,
        APITimeoutError=FakeTimeoutError,
        APIStatusError=FakeStatusError,
    )
    setattr(module, entry_point, MagicMock(return_value=client))
    return module


def _install(name, module):
    return patch.dict("sys.modules", {name: module})


def _openai_reply(content):
    return SimpleNamespace(choices=[SimpleNamespace(message=SimpleNamespace(content=content))])


class TestOpenAIChatModel:
    def test_requires_api_key(self, monkeypatch):
        monkeypatch.delenv("OPENAI_API_KEY", raising=False)
        with _install("openai", _fake_sdk(MagicMock(), "OpenAI")):
            with pytest.raises(ValueError, match="OPENAI_API_KEY"):
                OpenAIChatModel()

    def test_missing_package(self):
        original_import = builtins.__import__

        def _import(name, *args, **kwargs):
            if name == "openai":
                raise ImportError("no module named openai")
            return original_import(name, *args, **kwargs)

        with patch("builtins.__import__", side_effect=_import):
            with pytest.raises(ImportError, match="pip install openai"):
                OpenAIChatModel(api_key="test-key")

    def test_client_gets_timeout(self):
        sdk = _fake_sdk(MagicMock(), "OpenAI")
        with _install("openai", sdk):
            model = OpenAIChatModel("gpt-4o-mini", api_key="test-key", timeout=7.5)
        assert model.model_id == "gpt-4o-mini"
        assert sdk.OpenAI.call_args.kwargs["timeout"] == 7.5

    def test_complete_sends_system_and_user(self):
        client = MagicMock()
        client.chat.completions.create.return_value = _openai_reply('{"title": "Fix tap"}')
        with _install("openai", _fake_sdk(client, "OpenAI")):
            model = OpenAIChatModel(api_key="test-key")
            reply = model.complete("Be terse.", "tap drips")

        assert reply == '{"title": "Fix tap"}'
        messages = client.chat.completions.create.call_args.kwargs["messages"]
        assert messages == [
            {"role": "system", "content": "Be terse."},
            {"role": "user", "content": "tap drips"},
        ]

    def test_empty_reply(self):
        client = MagicMock()
        client.chat.completions.create.return_value = _openai_reply("   ")
        with _install("openai", _fake_sdk(client, "OpenAI")):
            model = OpenAIChatModel(api_key="test-key")
            with pytest.raises(ModelError) as exc_info:
                model.complete("s", "t")
        assert exc_info.value.error_class == "empty"

    @pytest.mark.parametrize(
        "exc,error_class",
        [
            (FakeRateLimitError("slow down"), "rate_limit"),
            (FakeTimeoutError("took too long"), "timeout"),
            (FakeStatusError("bad gateway", 502), "server"),
            (RuntimeError("socket closed"), "unknown"),
        ],
    )
    def test_errors_are_classified(self, exc, error_class):
        client = MagicMock()
        client.chat.completions.create.side_effect = exc
        with _install("openai", _fake_sdk(client, "OpenAI")):
            model = OpenAIChatModel(api_key="test-key")
            with pytest.raises(ModelError) as exc_info:
                model.complete("s", "t")
        assert exc_info.value.error_class == error_class
        assert exc_info.value.kind == "upstream"


class TestAnthropicChatModel:
    def test_requires_api_key(self, monkeypatch):
        monkeypatch.delenv("CLAUDE_API_KEY", raising=False)
        monkeypatch.delenv("ANTHROPIC_API_KEY", raising=False)
        with _install("anthropic", _fake_sdk(MagicMock(), "Anthropic")):
            with pytest.raises(ValueError, match="ANTHROPIC_API_KEY"):
                AnthropicChatModel()

    def test_env_key(self, monkeypatch):
        monkeypatch.setenv("ANTHROPIC_API_KEY", "test-key")
        sdk = _fake_sdk(MagicMock(), "Anthropic")
        with _install("anthropic", sdk):
            AnthropicChatModel()
        assert sdk.Anthropic.call_args.kwargs["api_key"] == "test-key"

    def test_complete_joins_text_blocks(self):
        client = MagicMock()
        client.messages.create.return_value = SimpleNamespace(
            content=[
                SimpleNamespace(type="text", text='{"title": '),
                SimpleNamespace(type="tool_use", text="ignored"),
                SimpleNamespace(type="text", text='"Fix tap"}'),
            ]
        )
        with _install("anthropic", _fake_sdk(client, "Anthropic")):
            model = AnthropicChatModel(api_key="test-key")
            reply = model.complete("Be terse.", "tap drips")

        assert reply == '{"title": "Fix tap"}'
        kwargs = client.messages.create.call_args.kwargs
        assert kwargs["system"] == "Be terse."
        assert kwargs["messages"] == [{"role": "user", "content": "tap drips"}]

    def test_rate_limit(self):
        client = MagicMock()
        client.messages.create.side_effect = FakeRateLimitError("429")
        with _install("anthropic", _fake_sdk(client, "Anthropic")):
            model = AnthropicChatModel(api_key="test-key")
            with pytest.raises(ModelError) as exc_info:
                model.complete("s", "t")
        assert exc_info.value.error_class == "rate_limit"
