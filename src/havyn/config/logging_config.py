"""
Havyn Logging Configuration

structlog on top of the stdlib logging module. Console rendering in
development, one JSON object per line elsewhere.

PRIVACY: Crisis message text is never passed to the logger. Log user
ids, severities and matched signals only. The processors below are a
second line of defence: secrets are redacted and any field that looks
like message content or a full email address is withheld or masked.
"""

import logging
import sys
from typing import Any

import structlog
from structlog.typing import EventDict, WrappedLogger

from havyn import __version__
from havyn.config.settings import Settings


SECRET_KEY_FRAGMENTS: tuple[str, ...] = (
    "password",
    "secret",
    "token",
    "api_key",
    "authorization",
)

# Keys that could carry what the user typed
CONTENT_KEYS: frozenset[str] = frozenset({
    "message",
    "content",
    "crisis_snippet",
    "snippet",
    "body_html",
    "body_text",
    "html",
    "text",
})

# Keys whose values are addresses; logged as the domain only
ADDRESS_KEYS: frozenset[str] = frozenset({
    "email",
    "recipient",
    "guardian_email",
    "helpline_email",
})

NOISY_LOGGERS: tuple[str, ...] = (
    "uvicorn.access",
    "httpx",
    "httpcore",
    "openai",
    "aiosqlite",
    "sqlalchemy.engine",
)


def mask_address(address: Any) -> Any:
    """Keep only the domain: guardian@example.com becomes ***@example.com."""
    if isinstance(address, str) and "@" in address:
        return "***@" + address.rsplit("@", 1)[1]
    return address


def _scrub(key: str, value: Any) -> Any:
    lowered = key.lower()
    if any(fragment in lowered for fragment in SECRET_KEY_FRAGMENTS):
        return "[REDACTED]"
    if lowered in CONTENT_KEYS:
        return "[WITHHELD]"
    if lowered in ADDRESS_KEYS:
        return mask_address(value)
    if isinstance(value, dict):
        return {k: _scrub(str(k), v) for k, v in value.items()}
    return value


def scrub_event(
    logger: WrappedLogger,
    method_name: str,
    event_dict: EventDict,
) -> EventDict:
    """Redact secrets, withhold message content and mask addresses."""
    return {
        key: value if key == "event" else _scrub(key, value)
        for key, value in event_dict.items()
    }


class ServiceContext:
    """Processor stamping service name, version and environment."""

    def __init__(self, env: str) -> None:
        self._fields = {
            "service": "havyn-backend",
            "version": __version__,
            "env": env,
        }

    def __call__(
        self,
        logger: WrappedLogger,
        method_name: str,
        event_dict: EventDict,
    ) -> EventDict:
        for key, value in self._fields.items():
            event_dict.setdefault(key, value)
        return event_dict


def build_processors(settings: Settings) -> list[Any]:
    """Processor chain for the configured environment."""
    processors: list[Any] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.TimeStamper(fmt="iso", utc=True),
        structlog.processors.StackInfoRenderer(),
        scrub_event,
        ServiceContext(settings.env),
    ]

    if settings.env == "development":
        processors.append(structlog.dev.ConsoleRenderer())
    else:
        processors += [
            structlog.processors.dict_tracebacks,
            structlog.processors.JSONRenderer(),
        ]
    return processors


def configure_logging(settings: Settings) -> None:
    """
    Configure structlog and the stdlib root logger.

    Call once at startup, before the first log line.
    """
    level = getattr(logging, settings.log_level)

    logging.basicConfig(format="%(message)s", stream=sys.stdout, level=level)
    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(max(level, logging.WARNING))

    structlog.configure(
        processors=build_processors(settings),
        wrapper_class=structlog.stdlib.BoundLogger,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )


def get_logger(name: str) -> structlog.stdlib.BoundLogger:
    """Logger for a module; pass __name__."""
    return structlog.get_logger(name)


def bind_correlation_id(correlation_id: str) -> None:
    """
    Attach a correlation ID to every log line in the current context.

    Background alert tasks copy the context when spawned, so their
    log lines carry the ID of the request that started them.
    """
    structlog.contextvars.bind_contextvars(correlation_id=correlation_id)


def clear_context() -> None:
    structlog.contextvars.clear_contextvars()
