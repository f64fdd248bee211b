"""Structured logging configuration using structlog.

Events are rendered as JSON (production) or for the console (development).
Identities, message bodies and credentials are redacted before rendering.
"""

import logging
import re
import sys
from typing import Any, cast

import structlog
from structlog.types import EventDict, WrappedLogger

# Keys whose values never reach the log output
REDACTED_KEYS: frozenset[str] = frozenset({
    "email",
    "identity",
    "user_message",
    "assistant_message",
    "api_key",
    "authorization",
    "password",
    "dsn",
    "redis_url",
})

EMAIL_PATTERN = re.compile(r"[a-zA-Z0-9._%+-]+@[a-zA-Z0-9.-]+\.[a-zA-Z]{2,}")
BEARER_PATTERN = re.compile(r"(?i)bearer\s+[a-z0-9._\-]+")


def _redact(value: Any) -> Any:
    if isinstance(value, dict):
        return {
            k: "[REDACTED]" if str(k).lower() in REDACTED_KEYS else _redact(v)
            for k, v in value.items()
        }
    if isinstance(value, list):
        return [_redact(item) for item in value]
    if isinstance(value, str):
        value = EMAIL_PATTERN.sub("[EMAIL]", value)
        return BEARER_PATTERN.sub("Bearer [REDACTED]", value)
    return value


def redact_sensitive(
    _logger: WrappedLogger,
    _method_name: str,
    event_dict: EventDict,
) -> EventDict:
    """structlog processor masking sensitive keys and e-mail/token patterns."""
    return cast(EventDict, _redact(dict(event_dict)))


def setup_logging(
    level: str = "INFO",
    format: str = "json",
    redact_pii: bool = True,
) -> None:
    """Configure structured logging.

    Args:
        level: Minimum log level name
        format: "json" or "console"
        redact_pii: Mask identities, message bodies and credentials
    """
    processors: list[Any] = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
    ]
    if redact_pii:
        processors.append(redact_sensitive)

    if format == "json":
        processors += [structlog.processors.format_exc_info, structlog.processors.JSONRenderer()]
    else:
        processors.append(structlog.dev.ConsoleRenderer(colors=True))

    level_num = logging.getLevelNamesMapping().get(level.upper(), logging.INFO)
    structlog.configure(
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(level_num),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(sys.stderr),
        cache_logger_on_first_use=True,
    )


def get_logger(name: str) -> structlog.stdlib.BoundLogger:
    """Return a structlog logger bound to `name`."""
    return cast(structlog.stdlib.BoundLogger, structlog.get_logger(name))
