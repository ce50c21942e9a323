"""LLM provider factory.

Supports multiple LLM backends:
- OpenAI (default): Direct OpenAI API access
- OpenRouter: Access to many models via unified API
- Google: Google Gemini via langchain-google-genai
- Any OpenAI-compatible API: Set LLM_BASE_URL

Environment variables:
- LLM_PROVIDER: openai (default), openrouter, google, ollama, together, groq, custom
- LLM_MODEL: Model name (e.g., gpt-4o, anthropic/claude-sonnet-4, gemini-2.0-flash)
- LLM_API_KEY: API key for the provider
- LLM_BASE_URL: Custom base URL for OpenAI-compatible APIs
- LLM_TEMPERATURE: Generation temperature (0.0-2.0)

Calls are made once; failures surface to the caller as-is.
"""

from typing import Any

from langchain_core.language_models import BaseChatModel

from src.exceptions import ConfigurationError
from src.settings import get_settings

# Provider base URLs
PROVIDER_BASE_URLS = {
    "openrouter": "https://openrouter.ai/api/v1",
    "openai": "https://api.openai.com/v1",
    "together": "https://api.together.xyz/v1",
    "groq": "https://api.groq.com/openai/v1",
    "ollama": "http://localhost:11434/v1",
}


def get_llm(
    temperature: float | None = None,
    model: str | None = None,
    provider: str | None = None,
    max_tokens: int | None = None,
    json_mode: bool = False,
    **kwargs: Any,
) -> BaseChatModel:
    """Get LLM instance based on configured provider.

    Args:
        temperature: Override default temperature
        model: Override default model name (an "ollama/" prefix selects Ollama)
        provider: Override default provider
        max_tokens: Cap on generated tokens
        json_mode: Ask the provider for a single JSON object response
        **kwargs: Additional provider-specific arguments

    Returns:
        Configured LLM instance

    Raises:
        ConfigurationError: If provider is not supported or API key is missing
    """
    settings = get_settings()
    model_name = model or settings.llm_model
    temp = temperature if temperature is not None else settings.llm_temperature

    # "ollama/llama3" -> provider="ollama", model="llama3"; other prefixes are
    # OpenRouter model paths and stay as-is
    detected_provider = None
    if model_name.startswith("ollama/"):
        detected_provider = "ollama"
        model_name = model_name.split("/", 1)[1]

    provider = provider or detected_provider or settings.llm_provider

    if provider == "google":
        return _create_google_llm(model_name, temp, max_tokens, json_mode, **kwargs)
    return _create_openai_compatible_llm(
        provider, model_name, temp, max_tokens, json_mode, **kwargs
    )


def _create_google_llm(
    model: str,
    temperature: float,
    max_tokens: int | None,
    json_mode: bool,
    **kwargs: Any,
) -> BaseChatModel:
    from langchain_google_genai import ChatGoogleGenerativeAI

    api_key = get_settings().google_api_key.get_secret_value()
    if not api_key:
        raise ConfigurationError("GOOGLE_API_KEY is required when using Google provider")

    if max_tokens is not None:
        kwargs["max_output_tokens"] = max_tokens
    if json_mode:
        kwargs["response_mime_type"] = "application/json"

    return ChatGoogleGenerativeAI(
        model=model,
        temperature=temperature,
        google_api_key=api_key,
        **kwargs,
    )


def _create_openai_compatible_llm(
    provider: str,
    model: str,
    temperature: float,
    max_tokens: int | None,
    json_mode: bool,
    **kwargs: Any,
) -> BaseChatModel:
    from langchain_openai import ChatOpenAI

    settings = get_settings()

    api_key = settings.llm_api_key.get_secret_value()
    if not api_key and provider != "ollama":
        raise ConfigurationError(f"LLM_API_KEY is required when using {provider} provider")

    # Determine base URL
    base_url = settings.llm_base_url
    if base_url is None:
        base_url = PROVIDER_BASE_URLS.get(provider)
        if base_url is None:
            raise ConfigurationError(
                f"Unknown provider '{provider}'. Set LLM_BASE_URL for custom providers."
            )

    llm_kwargs: dict[str, Any] = {
        "model": model,
        "temperature": temperature,
        "base_url": base_url,
        "api_key": api_key or "ollama",
        **kwargs,
    }

    if max_tokens is not None:
        llm_kwargs["max_tokens"] = max_tokens
    if json_mode:
        llm_kwargs.setdefault("model_kwargs", {})
        llm_kwargs["model_kwargs"]["response_format"] = {"type": "json_object"}

    # Add headers for OpenRouter
    if provider == "openrouter":
        llm_kwargs.setdefault("default_headers", {})
        llm_kwargs["default_headers"]["HTTP-Referer"] = "https://github.com/specflow"
        llm_kwargs["default_headers"]["X-Title"] = "Specflow"

    return ChatOpenAI(**llm_kwargs)


def list_supported_providers() -> dict[str, str]:
    """List supported LLM providers and their base URLs.

    Returns:
        Dict of provider name to base URL
    """
    return {
        **PROVIDER_BASE_URLS,
        "google": "(uses Google SDK)",
    }
