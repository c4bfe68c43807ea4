"""Prompt services package."""

from havyn.services.prompt.companion_prompt import (
    COMPANION_SYSTEM_PROMPT,
    DEGRADED_REPLY,
    RATE_LIMIT_REPLY,
    RATE_LIMIT_RETRY_AFTER_SECONDS,
    get_fallback_reply,
)

__all__ = [
    "COMPANION_SYSTEM_PROMPT",
    "DEGRADED_REPLY",
    "RATE_LIMIT_REPLY",
    "RATE_LIMIT_RETRY_AFTER_SECONDS",
    "get_fallback_reply",
]
