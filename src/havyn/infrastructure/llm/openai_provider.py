"""
OpenAI-Compatible LLM Provider

LLMProvider implementation for any endpoint speaking the OpenAI chat
completions API (xAI Grok by default).
"""

import time
from typing import Optional

from openai import (
    AsyncOpenAI,
    APIConnectionError,
    APIError,
    RateLimitError as OpenAIRateLimitError,
)
from tenacity import (
    retry,
    stop_after_attempt,
    wait_exponential,
    retry_if_exception_type,
)

from havyn.config import get_settings
from havyn.config.logging_config import get_logger
from havyn.infrastructure.llm.provider import (
    ChatTurn,
    LLMProvider,
    LLMProviderError,
    LLMResponse,
    RateLimitError,
)
from havyn.infrastructure.metrics import track_llm_request

logger = get_logger(__name__)


class OpenAIProvider(LLMProvider):
    """
    OpenAI-compatible chat provider.

    Connection errors are retried once with backoff. Rate limits are
    NOT retried here: the user sees a "give me a moment" reply instead
    of a long spinner.

    Usage:
        provider = OpenAIProvider()
        response = await provider.generate(system_prompt, history, "hi")
    """

    def __init__(
        self,
        api_key: Optional[str] = None,
        base_url: Optional[str] = None,
        model: Optional[str] = None,
        client: Optional[AsyncOpenAI] = None,
    ) -> None:
        """
        Initialize provider.

        Args:
            api_key: API key (defaults to settings)
            base_url: OpenAI-compatible base URL (defaults to settings)
            model: Model identifier (defaults to settings)
            client: Pre-built SDK client, mainly for tests
        """
        settings = get_settings()

        self._api_key = api_key or settings.llm.api_key.get_secret_value()
        self._base_url = base_url or settings.llm.base_url
        self._model = model or settings.llm.model
        self._max_tokens = settings.llm.max_tokens
        self._temperature = settings.llm.temperature
        self._timeout = settings.llm.timeout_seconds
        self._history_limit = settings.llm.history_limit
        self._max_input_chars = settings.llm.max_input_chars

        self._client: Optional[AsyncOpenAI] = client

    @property
    def provider_name(self) -> str:
        return "openai_compatible"

    def is_configured(self) -> bool:
        return bool(self._api_key)

    def _get_client(self) -> AsyncOpenAI:
        if self._client is None:
            self._client = AsyncOpenAI(
                api_key=self._api_key,
                base_url=self._base_url,
                timeout=self._timeout,
                max_retries=0,
            )
        return self._client

    def _build_messages(
        self,
        system_prompt: str,
        history: list[ChatTurn],
        message: str,
    ) -> list[dict]:
        messages = [{"role": "system", "content": system_prompt}]
        recent = history[-self._history_limit:] if self._history_limit else []
        messages.extend(turn.to_message() for turn in recent)
        # Only the model sees the clipped text; screening has the full message
        messages.append({"role": "user", "content": message[-self._max_input_chars:]})
        return messages

    @retry(
        stop=stop_after_attempt(2),
        wait=wait_exponential(multiplier=1, min=1, max=4),
        retry=retry_if_exception_type(APIConnectionError),
        reraise=True,
    )
    async def _complete(self, messages: list[dict]):
        return await self._get_client().chat.completions.create(
            model=self._model,
            messages=messages,
            max_tokens=self._max_tokens,
            temperature=self._temperature,
        )

    @track_llm_request("openai_compatible")
    async def generate(
        self,
        system_prompt: str,
        history: list[ChatTurn],
        message: str,
    ) -> LLMResponse:
        if not self.is_configured():
            raise LLMProviderError(
                "LLM API key not configured",
                provider=self.provider_name,
            )

        start_time = time.time()

        try:
            response = await self._complete(
                self._build_messages(system_prompt, history, message)
            )
        except OpenAIRateLimitError as e:
            logger.warning("LLM rate limit hit", model=self._model)
            retry_after = None
            if e.response is not None:
                header = e.response.headers.get("retry-after")
                if header and header.isdigit():
                    retry_after = int(header)
            raise RateLimitError(
                provider=self.provider_name,
                retry_after_seconds=retry_after or 60,
            ) from e
        except APIError as e:
            logger.error("LLM API error", model=self._model, error=str(e))
            raise LLMProviderError(
                f"LLM API error: {e}",
                provider=self.provider_name,
                is_retryable=isinstance(e, APIConnectionError),
            ) from e

        latency_ms = int((time.time() - start_time) * 1000)
        choice = response.choices[0]
        usage = {}
        if response.usage is not None:
            usage = {
                "prompt_tokens": response.usage.prompt_tokens,
                "completion_tokens": response.usage.completion_tokens,
                "total_tokens": response.usage.total_tokens,
            }

        logger.debug(
            "LLM completion generated",
            model=self._model,
            latency_ms=latency_ms,
        )

        return LLMResponse(
            content=choice.message.content or "",
            finish_reason=choice.finish_reason or "stop",
            usage=usage,
            model=self._model,
            provider=self.provider_name,
            latency_ms=latency_ms,
        )

    async def close(self) -> None:
        if self._client is not None:
            await self._client.close()
