"""JSON logging for planner runs.

Every record carries the correlation id of the run or request it belongs to,
and user identifiers, locations, notes and URLs are masked before they are
written.
"""

from __future__ import annotations

import contextlib
import contextvars
import json
import logging
import os
import re
import uuid
from datetime import date
from typing import Any, Dict, Iterator

CORRELATION_ID: contextvars.ContextVar[str | None] = contextvars.ContextVar("correlation_id", default=None)

# Attributes every LogRecord has; anything else was passed through ``extra``.
_RECORD_ATTRS = frozenset(vars(logging.LogRecord("", 0, "", 0, "", None, None))) | {"message", "asctime"}
_MASKED_FIELDS = frozenset({"user_id", "email", "location", "image_url", "notes", "api_key", "appid"})
_EMAIL = re.compile(r"[\w.\-]+@[\w.\-]+")


class JsonFormatter(logging.Formatter):
    """One JSON object per line: level, logger, event name, correlation id and extras."""

    def format(self, record: logging.LogRecord) -> str:  # noqa: D401
        message = super().format(record)
        payload: Dict[str, Any] = {
            "timestamp": self.formatTime(record, datefmt="%Y-%m-%dT%H:%M:%S%z"),
            "level": record.levelname,
            "logger": record.name,
            "event": getattr(record, "event", message),
            "message": message,
            "correlation_id": getattr(record, "correlation_id", None) or CORRELATION_ID.get(),
        }
        extras = {key: value for key, value in vars(record).items() if key not in _RECORD_ATTRS and key not in payload}
        payload.update(redact_for_log(extras))
        return json.dumps(payload)


def configure_logging(level: int | str | None = None) -> None:
    """Send root logging to stderr as JSON at ``level`` (default ``LOG_LEVEL`` or INFO)."""

    handler = logging.StreamHandler()
    handler.setFormatter(JsonFormatter())
    logging.basicConfig(level=level or os.getenv("LOG_LEVEL", "INFO"), handlers=[handler], force=True)


def get_logger(name: str) -> logging.Logger:
    if not logging.getLogger().handlers:
        configure_logging()
    return logging.getLogger(name)


def redact_for_log(value: Any) -> Any:
    """Return a JSON-safe copy of ``value`` with sensitive fields masked."""

    if value is None or isinstance(value, (bool, int, float)):
        return value
    if isinstance(value, str):
        if value.lower().startswith("http"):
            return "[redacted-url]"
        return _EMAIL.sub("[redacted-email]", value)
    if isinstance(value, date):
        return value.isoformat()
    if isinstance(value, dict):
        return {key: "[redacted]" if key in _MASKED_FIELDS else redact_for_log(item) for key, item in value.items()}
    if isinstance(value, (list, tuple, set, frozenset)):
        return [redact_for_log(item) for item in value]
    return str(value)


def ensure_correlation_id(correlation_id: str | None = None) -> str:
    """Current correlation id, adopting ``correlation_id`` or minting one if none is set."""

    if correlation_id:
        CORRELATION_ID.set(correlation_id)
        return correlation_id
    current = CORRELATION_ID.get()
    if current is None:
        current = uuid.uuid4().hex
        CORRELATION_ID.set(current)
    return current


def log_event(logger: logging.Logger, level: int, event: str, **fields: Any) -> None:
    """Log ``event`` with structured ``fields``; ``exc_info`` is passed through."""

    correlation_id = ensure_correlation_id(fields.pop("correlation_id", None))
    exc_info = fields.pop("exc_info", None)
    logger.log(
        level,
        event,
        exc_info=exc_info,
        extra={"event": event, "correlation_id": correlation_id, **redact_for_log(fields)},
    )


@contextlib.contextmanager
def operation_context(name: str, correlation_id: str | None = None, **attributes: Any) -> Iterator[str]:
    """Run the block under its own correlation id (one planning run, one request).

    The previous id is restored on exit, so nested operations do not leak ids
    into their caller.
    """

    scoped_id = correlation_id or uuid.uuid4().hex
    token = CORRELATION_ID.set(scoped_id)
    try:
        log_event(logging.getLogger(__name__), logging.DEBUG, "operation_started", operation=name, **attributes)
        yield scoped_id
    finally:
        CORRELATION_ID.reset(token)


__all__ = [
    "CORRELATION_ID",
    "JsonFormatter",
    "configure_logging",
    "ensure_correlation_id",
    "get_logger",
    "log_event",
    "operation_context",
    "redact_for_log",
]
