"""Structured JSON logging for the Wardrobe Flow app.

Every record carries the correlation id of the action that produced it and,
inside :func:`operation_context`, the action name. Spending figures and the
per-category histories are masked before they reach a handler.
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
from typing import Any, Dict, Iterator

CORRELATION_ID: contextvars.ContextVar[str | None] = contextvars.ContextVar("correlation_id", default=None)
CURRENT_ACTION: contextvars.ContextVar[str | None] = contextvars.ContextVar("current_action", default=None)

# Attributes every LogRecord has; anything else on a record came in via ``extra``.
_RECORD_ATTRS = frozenset(vars(logging.makeLogRecord({}))) | {"message", "asctime", "taskName"}
SENSITIVE_KEYS = frozenset(
    {
        "price",
        "storage_path",
        "purchase_history",
        "purchaseHistory",
        "retirement_history",
        "retirementHistory",
        "wear_history",
        "wearHistory",
    }
)
_EMAIL = re.compile(r"[\w.\-]+@[\w.\-]+\.\w+")


class JsonFormatter(logging.Formatter):
    """One JSON object per record: level, logger, event, correlation id and extras."""

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
        action = getattr(record, "action", None) or CURRENT_ACTION.get()
        if action:
            payload["action"] = action
        for key, value in vars(record).items():
            if key not in _RECORD_ATTRS and key not in payload:
                payload[key] = redact_for_log(value)
        return json.dumps(payload, ensure_ascii=False)


def configure_logging(level: int | str | None = None) -> None:
    """Install a single JSON handler on the root logger.

    Calling it again only updates the level; handlers installed by other code
    (test capture, for example) are left alone.
    """

    root = logging.getLogger()
    root.setLevel(level or os.getenv("LOG_LEVEL", "INFO"))
    if any(isinstance(handler.formatter, JsonFormatter) for handler in root.handlers):
        return
    handler = logging.StreamHandler()
    handler.setFormatter(JsonFormatter())
    root.addHandler(handler)


def redact_for_log(payload: Any) -> Any:
    """Mask spending details, histories and email addresses, recursively."""

    if payload is None or isinstance(payload, (bool, int, float)):
        return payload
    if isinstance(payload, str):
        return _EMAIL.sub("[redacted-email]", payload)
    if isinstance(payload, (list, tuple)):
        return [redact_for_log(item) for item in payload]
    if isinstance(payload, dict):
        return {
            key: "[redacted]" if key in SENSITIVE_KEYS else redact_for_log(value)
            for key, value in payload.items()
        }
    return str(payload)


def get_logger(name: str) -> logging.Logger:
    if not logging.getLogger().handlers:
        configure_logging()
    return logging.getLogger(name)


def ensure_correlation_id(correlation_id: str | None = None) -> str:
    """Return the active correlation id, adopting ``correlation_id`` or minting one."""

    if correlation_id:
        CORRELATION_ID.set(correlation_id)
        return correlation_id
    current = CORRELATION_ID.get()
    if current:
        return current
    minted = uuid.uuid4().hex
    CORRELATION_ID.set(minted)
    return minted


@contextlib.contextmanager
def correlation_context(correlation_id: str | None = None) -> Iterator[str]:
    token = CORRELATION_ID.set(correlation_id or uuid.uuid4().hex)
    try:
        yield CORRELATION_ID.get()
    finally:
        CORRELATION_ID.reset(token)


def log_event(logger: logging.Logger, level: int, event: str, **fields: Any) -> None:
    """Emit ``event`` with redacted structured fields and the correlation id."""

    correlation_id = ensure_correlation_id(fields.pop("correlation_id", None))
    exc_info = fields.pop("exc_info", None)
    logger.log(
        level,
        event,
        exc_info=exc_info,
        extra={"event": event, "correlation_id": correlation_id, **redact_for_log(fields)},
    )


@contextlib.contextmanager
def operation_context(name: str, correlation_id: str | None = None) -> Iterator[str]:
    """Scope a fresh correlation id and the action name around one operation."""

    logger = logging.getLogger(__name__)
    action_token = CURRENT_ACTION.set(name)
    start = time.perf_counter()
    try:
        with correlation_context(correlation_id) as scoped_id:
            yield scoped_id
            log_event(
                logger,
                logging.DEBUG,
                "operation_finished",
                duration_ms=round((time.perf_counter() - start) * 1000, 2),
            )
    finally:
        CURRENT_ACTION.reset(action_token)


__all__ = [
    "CORRELATION_ID",
    "CURRENT_ACTION",
    "JsonFormatter",
    "configure_logging",
    "correlation_context",
    "ensure_correlation_id",
    "get_logger",
    "log_event",
    "operation_context",
    "redact_for_log",
]
