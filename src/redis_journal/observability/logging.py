"""Structured logging configuration for redis_journal.

Configures structlog with a shared processor chain. Development mode renders
human-readable console lines; production mode renders one JSON object per
line. Logging is diagnostic only: journal failures are always reported as
Result values, never solely through logs.

Event naming convention:
- dot.notation, domain.entity.verb_past_tense
- e.g. "journal.batch.committed", "journal.replay.decoding_failed"

Standard log keys:
- persistence_id: Journal being operated on
- sequence_nr: Record position, when relevant
- batch_size: Number of records in a write

Usage:
    from redis_journal.observability import configure_logging, get_logger

    configure_logging(LoggingConfig(mode=LogMode.PROD))
    log = get_logger(__name__)
    log.info("journal.batch.committed", persistence_id="acct-1", batch_size=2)
"""

from __future__ import annotations

from enum import Enum
import logging
import os
import re
import sys
from typing import Any

from pydantic import BaseModel, Field
import structlog


class LogMode(str, Enum):
    """Logging output mode."""

    DEV = "dev"
    PROD = "prod"


class LoggingConfig(BaseModel):
    """Configuration for structured logging.

    Attributes:
        mode: Output mode (dev for human-readable, prod for JSON).
        level: Minimum log level to output.
    """

    mode: LogMode = Field(default=LogMode.DEV)
    level: str = Field(default="INFO")

    model_config = {"frozen": True}


_SENSITIVE_KEYS = frozenset({"password", "passwd", "secret", "token", "auth", "credentials"})
_URL_CREDENTIALS = re.compile(r"(?P<scheme>[a-z][a-z0-9+.-]*://)(?P<creds>[^@/\s]+)@")


def _get_mode_from_env() -> LogMode:
    """Read REDIS_JOURNAL_LOG_MODE, defaulting to DEV."""
    env_mode = os.environ.get("REDIS_JOURNAL_LOG_MODE", "dev").lower()
    if env_mode == "prod":
        return LogMode.PROD
    return LogMode.DEV


def _get_log_level(level_str: str) -> int:
    level = logging.getLevelName(level_str.upper())
    return level if isinstance(level, int) else logging.INFO


def _redact_url(value: str) -> str:
    return _URL_CREDENTIALS.sub(r"\g<scheme><REDACTED>@", value)


def _redact_secrets(
    _logger: Any,
    _method_name: str,
    event_dict: dict[str, Any],
) -> dict[str, Any]:
    """Structlog processor that hides passwords and URL credentials.

    Redis URLs may carry ``user:password@`` and config dumps may carry a
    ``password`` field; neither may reach a log sink.
    """
    for key, value in list(event_dict.items()):
        if key in ("event", "level", "timestamp"):
            continue
        if key.lower() in _SENSITIVE_KEYS and value is not None:
            event_dict[key] = "<REDACTED>"
        elif isinstance(value, str):
            event_dict[key] = _redact_url(value)
        elif isinstance(value, dict):
            event_dict[key] = _redact_dict(value)
    return event_dict


def _redact_dict(data: dict[str, Any]) -> dict[str, Any]:
    result: dict[str, Any] = {}
    for key, value in data.items():
        if str(key).lower() in _SENSITIVE_KEYS and value is not None:
            result[key] = "<REDACTED>"
        elif isinstance(value, str):
            result[key] = _redact_url(value)
        elif isinstance(value, dict):
            result[key] = _redact_dict(value)
        else:
            result[key] = value
    return result


def _get_processors(mode: LogMode) -> list[Any]:
    processors: list[Any] = [
        # Merge contextvars into event dict (for cross-async context)
        structlog.contextvars.merge_contextvars,
        _redact_secrets,
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="iso", utc=True),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
    ]
    if mode == LogMode.DEV:
        processors.append(structlog.dev.ConsoleRenderer(colors=False))
    else:
        processors.append(structlog.processors.JSONRenderer())
    return processors


def configure_logging(config: LoggingConfig | None = None) -> None:
    """Configure structlog for the process.

    Call once at startup. Output goes to stderr so that command output on
    stdout stays machine-readable.

    Args:
        config: Logging configuration. If None, uses defaults with the mode
               taken from REDIS_JOURNAL_LOG_MODE.
    """
    if config is None:
        config = LoggingConfig(mode=_get_mode_from_env())

    log_level = _get_log_level(config.level)

    structlog.configure(
        processors=_get_processors(config.mode),
        wrapper_class=structlog.make_filtering_bound_logger(log_level),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(file=sys.stderr),
        cache_logger_on_first_use=False,
    )


def get_logger(name: str | None = None) -> Any:
    """Get a bound logger instance.

    Loggers are lazy proxies: configuration applied after this call still
    takes effect on the next log call.

    Args:
        name: Optional logger name, usually ``__name__``.

    Returns:
        A structlog logger.
    """
    if name is None:
        return structlog.get_logger()
    return structlog.get_logger(name)


def bind_context(**kwargs: Any) -> None:
    """Bind context variables for cross-async propagation.

    Never bind credentials.

    Example:
        bind_context(persistence_id="acct-1")
    """
    structlog.contextvars.bind_contextvars(**kwargs)


def unbind_context(*keys: str) -> None:
    """Remove context variables from the logging context."""
    structlog.contextvars.unbind_contextvars(*keys)


def clear_context() -> None:
    """Clear all bound context variables."""
    structlog.contextvars.clear_contextvars()


def reset_logging() -> None:
    """Reset logging configuration state (for tests)."""
    structlog.contextvars.clear_contextvars()
    structlog.reset_defaults()
