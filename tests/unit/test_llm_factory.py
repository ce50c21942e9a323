"""Unit tests for the LLM provider factory."""

from unittest.mock import MagicMock, patch

import pytest

from src.exceptions import ConfigurationError
from src.llm import get_llm, list_supported_providers


def _settings(provider: str, model: str = "gpt-4o", key: str = "sk-test", base_url=None):
    settings = MagicMock()
    settings.llm_provider = provider
    settings.llm_model = model
    settings.llm_temperature = 0.7
    settings.llm_api_key.get_secret_value.return_value = key
    settings.llm_base_url = base_url
    settings.google_api_key.get_secret_value.return_value = "google-test-key"
    return settings


class TestOpenAICompatible:
    def test_openai(self):
        with (
            patch("src.llm.factory.get_settings", return_value=_settings("openai")),
            patch("langchain_openai.ChatOpenAI") as chat_cls,
        ):
            get_llm(max_tokens=8192)

        kwargs = chat_cls.call_args.kwargs
        assert kwargs["model"] == "gpt-4o"
        assert kwargs["base_url"] == "https://api.openai.com/v1"
        assert kwargs["api_key"] == "sk-test"
        assert kwargs["max_tokens"] == 8192
        assert "model_kwargs" not in kwargs

    def test_json_mode(self):
        with (
            patch("src.llm.factory.get_settings", return_value=_settings("openai")),
            patch("langchain_openai.ChatOpenAI") as chat_cls,
        ):
            get_llm(json_mode=True)

        kwargs = chat_cls.call_args.kwargs
        assert kwargs["model_kwargs"]["response_format"] == {"type": "json_object"}

    def test_openrouter_headers(self):
        settings = _settings("openrouter", model="anthropic/claude-sonnet-4")
        with (
            patch("src.llm.factory.get_settings", return_value=settings),
            patch("langchain_openai.ChatOpenAI") as chat_cls,
        ):
            get_llm()

        kwargs = chat_cls.call_args.kwargs
        assert kwargs["model"] == "anthropic/claude-sonnet-4"
        assert kwargs["base_url"] == "https://openrouter.ai/api/v1"
        assert kwargs["default_headers"]["X-Title"] == "Specflow"

    def test_custom_base_url(self):
        settings = _settings("custom", base_url="https://llm.internal/v1")
        with (
            patch("src.llm.factory.get_settings", return_value=settings),
            patch("langchain_openai.ChatOpenAI") as chat_cls,
        ):
            get_llm()

        assert chat_cls.call_args.kwargs["base_url"] == "https://llm.internal/v1"

    def test_ollama_prefix_needs_no_key(self):
        settings = _settings("openai", model="ollama/llama3", key="")
        with (
            patch("src.llm.factory.get_settings", return_value=settings),
            patch("langchain_openai.ChatOpenAI") as chat_cls,
        ):
            get_llm()

        kwargs = chat_cls.call_args.kwargs
        assert kwargs["model"] == "llama3"
        assert kwargs["base_url"] == "http://localhost:11434/v1"
        assert kwargs["api_key"] == "ollama"

    def test_missing_key(self):
        with patch("src.llm.factory.get_settings", return_value=_settings("openai", key="")):
            with pytest.raises(ConfigurationError, match="LLM_API_KEY"):
                get_llm()

    def test_custom_without_base_url(self):
        with patch("src.llm.factory.get_settings", return_value=_settings("custom")):
            with pytest.raises(ConfigurationError, match="Unknown provider"):
                get_llm()


class TestGoogle:
    def test_google(self):
        settings = _settings("google", model="gemini-2.0-flash")
        with (
            patch("src.llm.factory.get_settings", return_value=settings),
            patch("langchain_google_genai.ChatGoogleGenerativeAI") as chat_cls,
        ):
            get_llm(max_tokens=2048, json_mode=True)

        kwargs = chat_cls.call_args.kwargs
        assert kwargs["model"] == "gemini-2.0-flash"
        assert kwargs["google_api_key"] == "google-test-key"
        assert kwargs["max_output_tokens"] == 2048
        assert kwargs["response_mime_type"] == "application/json"

    def test_google_missing_key(self):
        settings = _settings("google")
        settings.google_api_key.get_secret_value.return_value = ""
        with patch("src.llm.factory.get_settings", return_value=settings):
            with pytest.raises(ConfigurationError, match="GOOGLE_API_KEY"):
                get_llm()


def test_list_supported_providers():
    providers = list_supported_providers()
    assert providers["groq"] == "https://api.groq.com/openai/v1"
    assert "google" in providers
