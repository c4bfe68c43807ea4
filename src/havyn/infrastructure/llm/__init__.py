"""LLM provider infrastructure."""

from havyn.infrastructure.llm.provider import (
    ChatTurn,
    LLMProvider,
    LLMProviderError,
    LLMResponse,
    RateLimitError,
)
from havyn.infrastructure.llm.openai_provider import OpenAIProvider

__all__ = [
    "ChatTurn",
    "LLMProvider",
    "LLMProviderError",
    "LLMResponse",
    "RateLimitError",
    "OpenAIProvider",
]
