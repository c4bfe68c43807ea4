"""
Chat Model Interface

The contract between the chat endpoint and whatever model produces
Havyn's conversational replies. The crisis pipeline never depends on
it: classification happens before, and independently of, every call
made through this interface.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Literal, Optional


@dataclass(frozen=True)
class ChatTurn:
    """One prior turn of the conversation."""

    role: Literal["user", "assistant"]
    content: str

    def to_message(self) -> dict[str, str]:
        return {"role": self.role, "content": self.content}


@dataclass(frozen=True)
class LLMResponse:
    """
    A generated reply.

    Attributes:
        content: Reply text (may be empty; callers substitute a fallback)
        finish_reason: Stop reason reported by the model
        usage: Prompt/completion token counts, when reported
        model: Model identifier that answered
        provider: Provider name
        latency_ms: Wall time of the call
    """

    content: str
    finish_reason: str = "stop"
    usage: dict[str, int] = field(default_factory=dict)
    model: str = ""
    provider: str = ""
    latency_ms: int = 0


class LLMProvider(ABC):
    """
    A chat model reachable over the network.

    Implementations translate their SDK's failures into
    LLMProviderError or RateLimitError; nothing else escapes generate().
    """

    @property
    @abstractmethod
    def provider_name(self) -> str:
        """Short name used in logs and metric labels."""

    @abstractmethod
    async def generate(
        self,
        system_prompt: str,
        history: list[ChatTurn],
        message: str,
    ) -> LLMResponse:
        """
        Reply to `message` given the persona prompt and prior turns.

        Raises:
            RateLimitError: Provider throttled the request
            LLMProviderError: Any other provider failure
        """

    @abstractmethod
    def is_configured(self) -> bool:
        """True when credentials are present."""

    async def close(self) -> None:
        """Release network resources."""


class LLMProviderError(Exception):
    """The chat model could not produce a reply."""

    def __init__(self, message: str, provider: str, is_retryable: bool = False) -> None:
        super().__init__(message)
        self.provider = provider
        self.is_retryable = is_retryable


class RateLimitError(LLMProviderError):
    """The provider throttled us; retry_after_seconds is its hint, if any."""

    def __init__(self, provider: str, retry_after_seconds: Optional[int] = None) -> None:
        super().__init__(f"{provider} is rate limiting requests", provider=provider, is_retryable=True)
        self.retry_after_seconds = retry_after_seconds
