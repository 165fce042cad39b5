"""
Structured JSON logging for the patient billing kernel.

Every record under the ``patient_billing`` logger is written as one JSON
object per line.  Request-scoped identifiers live in LogContext and are
stamped onto each line; anything passed via ``extra=`` is copied in as-is.

Usage:
    configure_logging(level=logging.INFO)
    with LogContext.bind(request_id="cli:pay-invoice"):
        with LogContext.bind(invoice_id=7):
            get_logger("services.invoice").info("invoice_paid")
"""

__all__ = [
    "StructuredFormatter",
    "LogContext",
    "get_logger",
    "configure_logging",
    "reset_logging",
]

import json
import logging
import sys
import threading
from contextlib import contextmanager
from contextvars import ContextVar
from datetime import date, datetime, timezone
from decimal import Decimal
from enum import Enum
from typing import Any, Iterator

_LOGGER_PREFIX = "patient_billing"
_HANDLER_NAME = "patient_billing.structured"

# ---------------------------------------------------------------------------
# Context propagation
# ---------------------------------------------------------------------------

# Never mutated in place; bind() always installs a fresh dict
_context: ContextVar[dict[str, Any] | None] = ContextVar(
    "patient_billing_log_context", default=None
)


class LogContext:
    """
    Identifiers of the request, patient and invoice currently being handled.

    Backed by a ContextVar, so each thread and each asyncio task sees its
    own values.  Fields are only ever set through ``bind``, which restores
    the previous values on exit.
    """

    FIELDS = ("request_id", "patient_id", "invoice_id")

    @classmethod
    def get_all(cls) -> dict[str, Any]:
        return dict(_context.get() or {})

    @classmethod
    def clear(cls) -> None:
        _context.set(None)

    @classmethod
    @contextmanager
    def bind(cls, **fields: Any) -> Iterator[None]:
        """
        Layer ``fields`` over the current context for the ``with`` body.

        None values leave the outer value in place.

        Raises:
            TypeError: If a field name is not one of FIELDS.
        """
        unknown = sorted(set(fields) - set(cls.FIELDS))
        if unknown:
            raise TypeError(f"Unknown log context field(s): {', '.join(unknown)}")

        merged = cls.get_all()
        merged.update((k, v) for k, v in fields.items() if v is not None)
        token = _context.set(merged)
        try:
            yield
        finally:
            _context.reset(token)


# ---------------------------------------------------------------------------
# JSON Formatter
# ---------------------------------------------------------------------------

_RESERVED_ATTRS: frozenset[str] = frozenset(
    vars(logging.LogRecord("", 0, "", 0, "", (), None))
) | {"message", "taskName"}


def _json_default(obj: Any) -> Any:
    if isinstance(obj, (datetime, date)):
        return obj.isoformat()
    if isinstance(obj, Decimal):
        return str(obj)
    if isinstance(obj, Enum):
        return obj.value
    return str(obj)


def _exception_fields(exc: BaseException) -> dict[str, Any]:
    """exc_type/exc_message, plus code and public attributes of BillingErrors."""
    fields: dict[str, Any] = {
        "exc_type": type(exc).__name__,
        "exc_message": str(exc),
    }
    code = getattr(exc, "code", None)
    if code is not None:
        fields["exc_code"] = code
    for name, value in vars(exc).items():
        if not name.startswith("_") and name != "code":
            fields[f"exc_{name}"] = value
    return fields


class StructuredFormatter(logging.Formatter):
    """
    One JSON object per record.

    Key precedence, highest first: ts/level/logger/message, LogContext
    fields, then ``extra=`` attributes.
    """

    def format(self, record: logging.LogRecord) -> str:
        payload: dict[str, Any] = {
            key: value
            for key, value in vars(record).items()
            if key not in _RESERVED_ATTRS
        }
        payload.update(LogContext.get_all())
        payload.update(
            ts=datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            level=record.levelname,
            logger=record.name,
            message=record.getMessage(),
        )

        if record.exc_info and record.exc_info[1] is not None:
            payload.update(_exception_fields(record.exc_info[1]))
            payload["traceback"] = self.formatException(record.exc_info)

        return json.dumps(payload, default=_json_default)


# ---------------------------------------------------------------------------
# Setup
# ---------------------------------------------------------------------------


def get_logger(name: str) -> logging.Logger:
    """Get a logger under the patient_billing namespace."""
    return logging.getLogger(f"{_LOGGER_PREFIX}.{name}")


_lock = threading.Lock()


def configure_logging(
    *,
    level: int | str = logging.INFO,
    stream: Any = None,
    handler: logging.Handler | None = None,
) -> None:
    """
    Attach the structured handler to the ``patient_billing`` logger.

    Idempotent: once the handler is attached, later calls change nothing,
    including the level.  ``handler`` replaces the default stderr stream
    handler; it is given the StructuredFormatter either way.
    """
    root = logging.getLogger(_LOGGER_PREFIX)
    with _lock:
        if any(h.get_name() == _HANDLER_NAME for h in root.handlers):
            return

        h = handler or logging.StreamHandler(stream or sys.stderr)
        h.set_name(_HANDLER_NAME)
        h.setFormatter(StructuredFormatter())
        root.addHandler(h)
        root.setLevel(level)
        root.propagate = False


def reset_logging() -> None:
    """Detach all handlers and restore stdlib defaults. FOR TESTING ONLY."""
    root = logging.getLogger(_LOGGER_PREFIX)
    with _lock:
        for h in list(root.handlers):
            root.removeHandler(h)
        root.setLevel(logging.WARNING)
        root.propagate = True
