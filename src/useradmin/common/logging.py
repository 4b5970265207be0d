"""Logging configuration and helpers.

This module configures process-wide logging and supports two formats:

* human-readable console logs, and
* structured JSON logs for production ingestion.

It also exposes helpers for binding a request-scoped correlation ID and for
building consistent ``extra`` payloads for structured logs.

Everything uses the standard :mod:`logging` library.
"""

from __future__ import annotations

import json
import logging
from contextvars import ContextVar
from datetime import UTC, datetime
from typing import Any
from uuid import UUID

from useradmin.settings import Settings

# ---------------------------------------------------------------------------
# Context and constants
# ---------------------------------------------------------------------------

# Request-scoped correlation ID, set/cleared by RequestContextMiddleware.
_CORRELATION_ID: ContextVar[str | None] = ContextVar(
    "useradmin_correlation_id",
    default=None,
)

# Attributes that are already handled by logging and should not be copied into
# the extra key=value list.
_STANDARD_ATTRS: set[str] = {
    "name",
    "msg",
    "args",
    "levelname",
    "levelno",
    "pathname",
    "filename",
    "module",
    "exc_info",
    "exc_text",
    "stack_info",
    "lineno",
    "funcName",
    "created",
    "msecs",
    "relativeCreated",
    "thread",
    "threadName",
    "processName",
    "process",
    "message",
    "asctime",
    "correlation_id",
    "taskName",
    "color_message",
}

_CONFIGURED_FLAG = "_useradmin_configured"
_SERVICE_NAME = "useradmin"


# ---------------------------------------------------------------------------
# Formatters
# ---------------------------------------------------------------------------


class ConsoleLogFormatter(logging.Formatter):
    """Render log records as single-line console output.

    Example line:

        2025-11-27T02:57:00.302Z INFO  useradmin.features.users.service [cid=1234abcd]
        users.create.success user_id=... actor_id=...
    """

    _time_format = "%Y-%m-%dT%H:%M:%S"

    def __init__(self) -> None:
        fmt = "%(asctime)s %(levelname)-5s %(name)s [cid=%(correlation_id)s] %(message)s"
        super().__init__(fmt=fmt, datefmt=self._time_format)

    def formatTime(self, record: logging.LogRecord, datefmt: str | None = None) -> str:
        dt = datetime.fromtimestamp(record.created, tz=UTC)
        pattern = datefmt or self._time_format
        base = dt.strftime(pattern)
        return f"{base}.{int(record.msecs):03d}Z"

    def format(self, record: logging.LogRecord) -> str:  # noqa: D401 - std signature
        cid = getattr(record, "correlation_id", None) or _CORRELATION_ID.get() or "-"
        record.correlation_id = cid

        base = super().format(record)

        extras = [
            f"{key}={_format_extra_value(value)}"
            for key, value in sorted(_record_extras(record).items())
        ]
        if extras:
            return f"{base} " + " ".join(extras)
        return base


class JsonLogFormatter(logging.Formatter):
    """Render log records as one JSON object per line."""

    _time_format = "%Y-%m-%dT%H:%M:%S"

    def formatTime(self, record: logging.LogRecord, datefmt: str | None = None) -> str:
        dt = datetime.fromtimestamp(record.created, tz=UTC)
        pattern = datefmt or self._time_format
        base = dt.strftime(pattern)
        return f"{base}.{int(record.msecs):03d}Z"

    def format(self, record: logging.LogRecord) -> str:  # noqa: D401 - std signature
        cid = getattr(record, "correlation_id", None) or _CORRELATION_ID.get() or "-"
        record.correlation_id = cid
        payload: dict[str, Any] = {
            "timestamp": self.formatTime(record, self._time_format),
            "level": record.levelname,
            "service": _SERVICE_NAME,
            "logger": record.name,
            "message": record.getMessage(),
            "correlation_id": cid,
        }
        payload.update(_record_extras(record))
        if record.exc_info:
            payload["exc_info"] = self.formatException(record.exc_info)
        return json.dumps(payload, default=_json_default, separators=(",", ":"))


# ---------------------------------------------------------------------------
# Configuration
# ---------------------------------------------------------------------------


def setup_logging(settings: Settings) -> None:
    """Configure root logging for the process.

    Installs a single StreamHandler, sets the baseline level from
    ``settings.log_level`` and routes uvicorn and SQLAlchemy loggers through the
    same root handler so every line shares one format.
    """
    root_logger = logging.getLogger()
    level = getattr(logging, settings.log_level)

    configured = getattr(root_logger, _CONFIGURED_FLAG, False)
    if not configured or not root_logger.handlers:
        root_logger.handlers = [logging.StreamHandler()]
        setattr(root_logger, _CONFIGURED_FLAG, True)
    else:
        root_logger.handlers = [root_logger.handlers[0]]

    handler = root_logger.handlers[0]
    handler.setFormatter(_build_formatter(settings.log_format))
    root_logger.setLevel(level)

    for name in (
        "uvicorn",
        "uvicorn.error",
        "uvicorn.access",
        "useradmin.request",
        "sqlalchemy",
        "sqlalchemy.engine",
        "sqlalchemy.pool",
    ):
        logger = logging.getLogger(name)
        logger.handlers.clear()
        logger.propagate = True
        logger.disabled = False
        logger.setLevel(logging.NOTSET)

    logging.getLogger("uvicorn").setLevel(level)
    logging.getLogger("useradmin.request").setLevel(
        getattr(logging, settings.effective_request_log_level)
    )

    # SQLAlchemy logs are noisy; opt in with USERADMIN_DATABASE_LOG_LEVEL.
    db_level = getattr(logging, settings.database_log_level or "WARNING")
    for name in ("sqlalchemy", "sqlalchemy.engine", "sqlalchemy.pool"):
        logging.getLogger(name).setLevel(db_level)


# ---------------------------------------------------------------------------
# Context helpers
# ---------------------------------------------------------------------------


def bind_request_context(correlation_id: str | None) -> None:
    """Bind a correlation ID to the logging context for the current request."""
    _CORRELATION_ID.set(correlation_id)


def clear_request_context() -> None:
    """Clear the request-scoped logging context."""
    _CORRELATION_ID.set(None)


def current_request_id() -> str | None:
    """Return the current request/correlation ID if bound."""
    return _CORRELATION_ID.get()


def log_context(
    *,
    user_id: UUID | str | None = None,
    actor_id: UUID | str | None = None,
    target_id: UUID | str | None = None,
    **extra: Any,
) -> dict[str, Any]:
    """Build a consistent ``extra`` payload for structured logs.

    Example:
        logger.info(
            "users.create.success",
            extra=log_context(user_id=user.id, actor_id=principal.id),
        )
    """
    ctx: dict[str, Any] = {}

    if user_id is not None:
        ctx["user_id"] = str(user_id)
    if actor_id is not None:
        ctx["actor_id"] = str(actor_id)
    if target_id is not None:
        ctx["target_id"] = str(target_id)

    for key, value in extra.items():
        ctx[key] = value

    return ctx


# ---------------------------------------------------------------------------
# Internal helpers
# ---------------------------------------------------------------------------


def _format_extra_value(value: Any) -> str:
    if value is None:
        return "null"
    return str(value)


def _record_extras(record: logging.LogRecord) -> dict[str, Any]:
    extras: dict[str, Any] = {}
    for key, value in record.__dict__.items():
        if key in _STANDARD_ATTRS or key.startswith("_"):
            continue
        extras[key] = value
    return extras


def _json_default(value: Any) -> str:
    return str(value)


def _build_formatter(log_format: str) -> logging.Formatter:
    if log_format == "json":
        return JsonLogFormatter()
    return ConsoleLogFormatter()


__all__ = [
    "ConsoleLogFormatter",
    "JsonLogFormatter",
    "bind_request_context",
    "clear_request_context",
    "current_request_id",
    "log_context",
    "setup_logging",
]
