"""
Structured JSON logging for the inventory kernel.

Every ledger write runs inside ``LogContext.bind(...)`` so the lines it emits
share a correlation id, the product id and the operation name.  Lines are
rendered by ``StructuredFormatter`` as one JSON object each:

    {"ts": "...", "level": "INFO", "logger": "inventory_kernel.services.stock",
     "message": "stock_out_applied", "correlation_id": "...", "product_id": "7",
     "operation": "stock_out", "quantity": 3, "new_quantity": 9, ...}

Kernel exceptions logged with ``exc_info`` contribute their ``code`` and
public attributes as ``exc_*`` keys.
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
from collections.abc import Iterator
from contextlib import contextmanager
from contextvars import ContextVar
from datetime import UTC, datetime
from decimal import Decimal
from typing import Any

_NAMESPACE = "inventory_kernel"

_CONTEXT_FIELDS = ("correlation_id", "product_id", "operation")

_context: ContextVar[dict[str, str]] = ContextVar("inventory_log_context", default={})


class LogContext:
    """Per-call log fields, isolated per thread and per task."""

    @staticmethod
    def set(**fields: str | None) -> None:
        """Merge non-None known fields into the current context."""
        _context.set(LogContext._merged(fields))

    @staticmethod
    def get_all() -> dict[str, str]:
        return dict(_context.get())

    @staticmethod
    def clear() -> None:
        _context.set({})

    @staticmethod
    @contextmanager
    def bind(**fields: str | None) -> Iterator[type["LogContext"]]:
        """Set fields for the duration of the block, then restore the previous context."""
        token = _context.set(LogContext._merged(fields))
        try:
            yield LogContext
        finally:
            _context.reset(token)

    @staticmethod
    def _merged(fields: dict[str, str | None]) -> dict[str, str]:
        current = dict(_context.get())
        current.update(
            (k, v) for k, v in fields.items() if k in _CONTEXT_FIELDS and v is not None
        )
        return current


def _json_default(value: Any) -> Any:
    if isinstance(value, Decimal):
        return str(value)
    if isinstance(value, datetime):
        return value.isoformat()
    return str(value)


# Attributes every LogRecord carries; anything else came in through ``extra``.
_RECORD_ATTRS = frozenset(
    vars(logging.LogRecord("", 0, "", 0, "", (), None))
) | {"message", "taskName"}


class StructuredFormatter(logging.Formatter):
    """One JSON object per record: envelope, bound context, extras, exception."""

    def format(self, record: logging.LogRecord) -> str:
        line: dict[str, Any] = {
            "ts": datetime.fromtimestamp(record.created, tz=UTC).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            **_context.get(),
        }
        for key, value in vars(record).items():
            if key not in _RECORD_ATTRS:
                line.setdefault(key, value)

        if record.exc_info and record.exc_info[1] is not None:
            line.update(self._exception_fields(record.exc_info[1]))
            line["traceback"] = self.formatException(record.exc_info)

        return json.dumps(line, default=_json_default)

    @staticmethod
    def _exception_fields(exc: BaseException) -> dict[str, Any]:
        fields: dict[str, Any] = {
            "exc_type": type(exc).__name__,
            "exc_message": str(exc),
        }
        code = getattr(exc, "code", None)
        if code is not None:
            fields["exc_code"] = code
        fields.update(
            (f"exc_{name}", value)
            for name, value in vars(exc).items()
            if not name.startswith("_") and name != "code"
        )
        return fields


def get_logger(name: str) -> logging.Logger:
    """Logger ``inventory_kernel.<name>``."""
    return logging.getLogger(f"{_NAMESPACE}.{name}")


_setup_lock = threading.Lock()
_setup_done = False


def configure_logging(
    *,
    level: int = logging.INFO,
    stream: Any = None,
    handler: logging.Handler | None = None,
) -> None:
    """
    Attach a JSON handler to the ``inventory_kernel`` logger.

    Only the first call in a process has an effect.  The kernel logger stops
    propagating so host applications do not print each line twice.
    """
    global _setup_done
    with _setup_lock:
        if _setup_done:
            return
        _setup_done = True

        if handler is None:
            handler = logging.StreamHandler(stream or sys.stderr)
        handler.setFormatter(StructuredFormatter())

        kernel_logger = logging.getLogger(_NAMESPACE)
        kernel_logger.setLevel(level)
        kernel_logger.propagate = False
        kernel_logger.addHandler(handler)


def reset_logging() -> None:
    """Undo configure_logging (tests only)."""
    global _setup_done
    with _setup_lock:
        _setup_done = False
        kernel_logger = logging.getLogger(_NAMESPACE)
        kernel_logger.handlers.clear()
        kernel_logger.setLevel(logging.WARNING)
