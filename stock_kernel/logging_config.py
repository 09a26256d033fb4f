"""
Structured JSON logging for the stock kernel.

Every record under the ``stock_kernel`` logger namespace is written as one
JSON object per line:

    {"ts": ..., "level": "INFO", "logger": "stock_kernel.services.report",
     "message": "report_completed", "product_id": "42", "report_id": ...,
     "duration_ms": 12.4}

Messages are snake_case event names; data travels in ``extra=``.  Fields
bound through ``LogContext`` (product and report ids for the request being
built) are merged into every record emitted while they are bound.
"""

from __future__ import annotations

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
from collections.abc import Iterator
from contextlib import contextmanager
from contextvars import ContextVar, Token
from datetime import UTC, datetime
from decimal import Decimal
from typing import Any
from uuid import UUID

_LOGGER_PREFIX = "stock_kernel"


# ---------------------------------------------------------------------------
# Request context
# ---------------------------------------------------------------------------

_CONTEXT_VARS: dict[str, ContextVar[str | None]] = {
    name: ContextVar(f"stock_log_{name}", default=None)
    for name in ("correlation_id", "product_id", "report_id", "trace_id")
}


class LogContext:
    """Request-scoped log fields, safe across threads and asyncio tasks.

    Only the names in ``LogContext.FIELDS`` are recognised; anything else
    passed to ``set`` or ``bind`` is ignored.
    """

    FIELDS: tuple[str, ...] = tuple(_CONTEXT_VARS)

    @staticmethod
    def set(**fields: str | None) -> None:
        """Set context fields.  ``None`` values leave a field untouched."""
        for name, value in fields.items():
            var = _CONTEXT_VARS.get(name)
            if var is not None and value is not None:
                var.set(value)

    @staticmethod
    def get_all() -> dict[str, str]:
        """Bound fields only; unset fields are omitted."""
        return {
            name: value
            for name, var in _CONTEXT_VARS.items()
            if (value := var.get()) is not None
        }

    @staticmethod
    def clear() -> None:
        for var in _CONTEXT_VARS.values():
            var.set(None)

    @staticmethod
    @contextmanager
    def bind(**fields: str | None) -> Iterator[type[LogContext]]:
        """Set fields for the duration of a ``with`` block, then restore."""
        tokens: list[tuple[ContextVar[str | None], Token]] = []
        for name, value in fields.items():
            var = _CONTEXT_VARS.get(name)
            if var is not None and value is not None:
                tokens.append((var, var.set(value)))
        try:
            yield LogContext
        finally:
            for var, token in reversed(tokens):
                var.reset(token)


# ---------------------------------------------------------------------------
# JSON formatter
# ---------------------------------------------------------------------------

# Attributes every LogRecord carries; anything else came in through extra=.
_RECORD_ATTRS: frozenset[str] = frozenset(
    vars(logging.LogRecord("", 0, "", 0, "", (), None))
) | {"message", "taskName"}


def _json_default(value: Any) -> Any:
    if isinstance(value, (UUID, Decimal)):
        return str(value)
    if isinstance(value, datetime):
        return value.isoformat()
    return str(value)


class StructuredFormatter(logging.Formatter):
    """Formats each log record as a single JSON line."""

    def format(self, record: logging.LogRecord) -> str:
        payload: dict[str, Any] = {
            "ts": datetime.fromtimestamp(record.created, tz=UTC).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        payload.update(LogContext.get_all())
        for key, value in vars(record).items():
            if key not in _RECORD_ATTRS and key not in payload:
                payload[key] = value
        if record.exc_info and record.exc_info[1] is not None:
            payload.update(self._exception_fields(record))
        return json.dumps(payload, default=_json_default)

    def _exception_fields(self, record: logging.LogRecord) -> dict[str, Any]:
        exc = record.exc_info[1]
        fields: dict[str, Any] = {
            "exc_type": type(exc).__name__,
            "exc_message": str(exc),
        }
        code = getattr(exc, "code", None)
        if code is not None:
            fields["exc_code"] = code
        # Structured attributes of StockKernelError subclasses.
        for name, value in vars(exc).items():
            if not name.startswith("_") and name not in ("args", "code"):
                fields[f"exc_{name}"] = value
        fields["traceback"] = self.formatException(record.exc_info)
        return fields


# ---------------------------------------------------------------------------
# Setup
# ---------------------------------------------------------------------------

_configured = False
_lock = threading.Lock()


def get_logger(name: str) -> logging.Logger:
    """Logger named ``stock_kernel.<name>``."""
    return logging.getLogger(f"{_LOGGER_PREFIX}.{name}")


def configure_logging(
    *,
    level: int = logging.INFO,
    stream: Any = None,
    handler: logging.Handler | None = None,
) -> None:
    """Attach one JSON handler to the ``stock_kernel`` logger.

    Only the first call has any effect until ``reset_logging()``.
    """
    global _configured
    with _lock:
        if _configured:
            return
        _configured = True

    root = logging.getLogger(_LOGGER_PREFIX)
    root.setLevel(level)
    root.propagate = False

    target = handler or logging.StreamHandler(stream or sys.stderr)
    target.setFormatter(StructuredFormatter())
    root.addHandler(target)


def reset_logging() -> None:
    """Drop handlers and allow reconfiguration.  For tests."""
    global _configured
    with _lock:
        _configured = False
    root = logging.getLogger(_LOGGER_PREFIX)
    root.handlers.clear()
    root.setLevel(logging.WARNING)
