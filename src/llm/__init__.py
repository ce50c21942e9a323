"""LLM provider factory."""

from src.llm.content import message_text
from src.llm.factory import (
    PROVIDER_BASE_URLS,
    get_llm,
    list_supported_providers,
)

__all__ = [
    "PROVIDER_BASE_URLS",
    "get_llm",
    "list_supported_providers",
    "message_text",
]
