"""Structured JSON logging for the Smart Closet service.

Every record carries the correlation id of the request it belongs to, and any
structured fields are scrubbed before they are written: emails, image URLs,
user prompts and raw LLM output never reach the log stream verbatim.
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
from typing import Any, Dict, Iterator, Optional

CORRELATION_ID: contextvars.ContextVar[Optional[str]] = contextvars.ContextVar("correlation_id", default=None)

# Attributes present on every LogRecord; anything else was passed via ``extra``.
_RECORD_ATTRIBUTES = frozenset(logging.LogRecord("", 0, "", 0, "", None, None).__dict__) | {"message", "taskName"}
_SENSITIVE_FIELDS = frozenset({"email", "last_name", "image_url", "prompt", "raw_response"})
_EMAIL = re.compile(r"[\w.\-]+@[\w.\-]+")
_SERVICE_NAME = "smart-closet"


def _scrub_text(value: str) -> str:
    if _EMAIL.search(value):
        return _EMAIL.sub("[redacted-email]", value)
    if value[:4].lower() == "http":
        return "[redacted-url]"
    return value


def redact_for_log(payload: Any) -> Any:
    """Return a log-safe copy of ``payload``.

    Sensitive keys are masked wholesale, strings are checked for emails and
    URLs, and binary image data is reduced to its length.
    """

    if payload is None or isinstance(payload, (bool, int, float)):
        return payload
    if isinstance(payload, str):
        return _scrub_text(payload)
    if isinstance(payload, (bytes, bytearray)):
        return f"<{len(payload)} bytes>"
    if isinstance(payload, dict):
        return {
            key: "[redacted]" if key in _SENSITIVE_FIELDS else redact_for_log(value)
            for key, value in payload.items()
        }
    if isinstance(payload, (list, tuple, set)):
        return [redact_for_log(item) for item in payload]
    return str(payload)


class JsonFormatter(logging.Formatter):
    """One JSON object per line, with event name and correlation id."""

    def format(self, record: logging.LogRecord) -> str:
        message = super().format(record)
        document: Dict[str, Any] = {
            "timestamp": self.formatTime(record, datefmt="%Y-%m-%dT%H:%M:%S%z"),
            "level": record.levelname,
            "service": _SERVICE_NAME,
            "logger": record.name,
            "event": getattr(record, "event", message),
            "message": message,
            "correlation_id": getattr(record, "correlation_id", None) or CORRELATION_ID.get(),
        }
        extras = {
            key: value
            for key, value in record.__dict__.items()
            if key not in _RECORD_ATTRIBUTES and key not in document
        }
        document.update(redact_for_log(extras))
        return json.dumps(document, default=str)


def configure_logging(level: int | str | None = None) -> None:
    """Route the root logger to stderr through :class:`JsonFormatter`.

    ``LOG_LEVEL`` sets the level when ``level`` is not given.
    """

    handler = logging.StreamHandler()
    handler.setFormatter(JsonFormatter())
    root = logging.getLogger()
    root.handlers[:] = [handler]
    root.setLevel(level or os.getenv("LOG_LEVEL", "INFO"))


def get_logger(name: str) -> logging.Logger:
    if not logging.getLogger().handlers:
        configure_logging()
    return logging.getLogger(name)


def ensure_correlation_id(correlation_id: str | None = None) -> str:
    """Adopt ``correlation_id``, else keep the current one, else mint one."""

    resolved = correlation_id or CORRELATION_ID.get() or uuid.uuid4().hex
    if resolved != CORRELATION_ID.get():
        CORRELATION_ID.set(resolved)
    return resolved


@contextlib.contextmanager
def correlation_context(correlation_id: str | None = None) -> Iterator[str]:
    """Bind a correlation id for the duration of the block, then restore."""

    token = CORRELATION_ID.set(correlation_id or CORRELATION_ID.get() or uuid.uuid4().hex)
    try:
        yield CORRELATION_ID.get()
    finally:
        CORRELATION_ID.reset(token)


def log_event(logger: logging.Logger, level: int, event: str, **fields: Any) -> None:
    """Log ``event`` with scrubbed structured ``fields``.

    ``correlation_id`` and ``exc_info`` are taken out of ``fields`` and handled
    by the logging call itself.
    """

    correlation_id = ensure_correlation_id(fields.pop("correlation_id", None))
    exc_info = fields.pop("exc_info", None)
    extra = {"event": event, "correlation_id": correlation_id}
    extra.update(redact_for_log(fields))
    logger.log(level, event, exc_info=exc_info, extra=extra)


@contextlib.contextmanager
def operation_context(name: str, correlation_id: str | None = None) -> Iterator[str]:
    """Scope one logical operation, such as an outfit request, to a correlation id."""

    logger = logging.getLogger(__name__)
    started = time.perf_counter()
    with correlation_context(correlation_id) as scoped_id:
        logger.debug("operation started", extra={"event": "operation_started", "operation": name})
        try:
            yield scoped_id
        finally:
            logger.debug(
                "operation finished",
                extra={
                    "event": "operation_finished",
                    "operation": name,
                    "duration_ms": round((time.perf_counter() - started) * 1000, 2),
                },
            )


__all__ = [
    "JsonFormatter",
    "configure_logging",
    "correlation_context",
    "ensure_correlation_id",
    "get_logger",
    "log_event",
    "redact_for_log",
    "operation_context",
]
