"""Structured logging helpers for the Daily Mirror outfit engine.

Every engine operation runs inside :func:`operation_context`, which scopes a
correlation id that :func:`log_event` and :class:`JsonFormatter` attach to
each record. Structured fields pass through :func:`redact_for_log` so user
ids, locations and free-text notes never reach the log stream.
"""

from __future__ import annotations

import contextlib
import contextvars
import json
import logging
import os
import re
import time
import uuid
from datetime import date, datetime
from typing import Any, Dict, Iterator, Mapping

CORRELATION_ID: contextvars.ContextVar[str | None] = contextvars.ContextVar("correlation_id", default=None)

RESERVED_RECORD_KEYS = frozenset(vars(logging.LogRecord("", 0, "", 0, "", None, None))) | {"message", "asctime"}
REDACTED_KEYS = frozenset(
    {
        "user_id",
        "email",
        "location",
        "events",
        "title",
        "notes",
        "image_uri",
        "confidence_note",
    }
)
REDACTED = "[redacted]"

_EMAIL_PATTERN = re.compile(r"[\w.\-]+@[\w.\-]+")
_TEXT_FORMAT = "%(asctime)s %(levelname)s %(name)s %(message)s"


class JsonFormatter(logging.Formatter):
    """One JSON object per record: level, logger, event, correlation id and extras."""

    def format(self, record: logging.LogRecord) -> str:  # noqa: D401
        message = record.getMessage()
        payload: Dict[str, Any] = {
            "timestamp": self.formatTime(record, datefmt="%Y-%m-%dT%H:%M:%S%z"),
            "level": record.levelname,
            "logger": record.name,
            "message": message,
            "event": getattr(record, "event", message),
            "correlation_id": getattr(record, "correlation_id", None) or CORRELATION_ID.get(),
        }
        if record.exc_info:
            payload["exception"] = self.formatException(record.exc_info)

        for key, value in vars(record).items():
            if key in RESERVED_RECORD_KEYS or key in payload:
                continue
            payload[key] = redact_for_log(value)
        return json.dumps(payload, default=str)


def configure_logging(level: int | str | None = None, *, json_output: bool | None = None) -> None:
    """Install a single root handler; ``LOG_LEVEL`` and ``LOG_FORMAT`` fill unset arguments."""

    desired_level = level or os.getenv("LOG_LEVEL", "INFO")
    if json_output is None:
        json_output = os.getenv("LOG_FORMAT", "json").lower() != "text"

    handler = logging.StreamHandler()
    handler.setFormatter(JsonFormatter() if json_output else logging.Formatter(_TEXT_FORMAT))
    logging.root.handlers.clear()
    logging.basicConfig(level=desired_level, handlers=[handler])


def get_logger(name: str) -> logging.Logger:
    if not logging.getLogger().handlers:
        configure_logging()
    return logging.getLogger(name)


def _redact_string(value: str) -> str:
    if value.lower().startswith(("http://", "https://")):
        return "[redacted-url]"
    return _EMAIL_PATTERN.sub("[redacted-email]", value)


def redact_for_log(payload: Any) -> Any:
    """Recursively scrub user identifiers, locations and free-text notes."""

    if payload is None or isinstance(payload, (bool, int, float)):
        return payload
    if isinstance(payload, str):
        return _redact_string(payload)
    if isinstance(payload, (datetime, date)):
        return payload.isoformat()
    if isinstance(payload, Mapping):
        return {key: REDACTED if key in REDACTED_KEYS else redact_for_log(value) for key, value in payload.items()}
    if isinstance(payload, (list, tuple, set, frozenset)):
        return [redact_for_log(item) for item in payload]
    return str(payload)


def ensure_correlation_id(correlation_id: str | None = None) -> str:
    """Adopt ``correlation_id``, else keep the current one, else start a new one."""

    if correlation_id:
        CORRELATION_ID.set(correlation_id)
        return correlation_id
    current = CORRELATION_ID.get()
    if current:
        return current
    new_id = uuid.uuid4().hex
    CORRELATION_ID.set(new_id)
    return new_id


@contextlib.contextmanager
def correlation_context(correlation_id: str | None = None) -> Iterator[str]:
    token = CORRELATION_ID.set(correlation_id or ensure_correlation_id())
    try:
        yield CORRELATION_ID.get()
    finally:
        CORRELATION_ID.reset(token)


def log_event(logger: logging.Logger, level: int, event: str, **fields: Any) -> None:
    """Emit ``event`` with redacted structured fields.

    Field names that collide with ``LogRecord`` attributes are prefixed with
    ``field_`` so they cannot break record construction.
    """

    correlation_id = ensure_correlation_id(fields.pop("correlation_id", None))
    exc_info = fields.pop("exc_info", None)
    extra: Dict[str, Any] = {"event": event, "correlation_id": correlation_id}
    for key, value in redact_for_log(fields).items():
        extra[f"field_{key}" if key in RESERVED_RECORD_KEYS else key] = value
    logger.log(level, event, exc_info=exc_info, extra=extra)


@contextlib.contextmanager
def operation_context(name: str, **attributes: Any) -> Iterator[str]:
    """Scope a correlation id around one engine operation and log its outcome."""

    logger = logging.getLogger("mirror_app.operations")
    correlation_id = ensure_correlation_id(attributes.pop("correlation_id", None))
    with correlation_context(correlation_id) as scoped_id:
        start = time.perf_counter()
        log_event(logger, logging.DEBUG, "operation_started", operation=name, **attributes)
        try:
            yield scoped_id
        except Exception as exc:
            log_event(
                logger,
                logging.WARNING,
                "operation_failed",
                operation=name,
                error_type=type(exc).__name__,
                duration_ms=round((time.perf_counter() - start) * 1000, 2),
            )
            raise
        log_event(
            logger,
            logging.DEBUG,
            "operation_finished",
            operation=name,
            duration_ms=round((time.perf_counter() - start) * 1000, 2),
        )


__all__ = [
    "CORRELATION_ID",
    "JsonFormatter",
    "REDACTED_KEYS",
    "configure_logging",
    "correlation_context",
    "ensure_correlation_id",
    "get_logger",
    "log_event",
    "operation_context",
    "redact_for_log",
]
