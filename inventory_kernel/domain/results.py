"""
Tagged results for ledger write operations.

InventoryLedger never lets a domain error escape a write call as an
exception.  It returns a LedgerResult whose status names the error kind and
whose error attribute carries the typed exception with its diagnostic
values.  Callers branch on ``status``; ``unwrap()`` is there for callers
that would rather have the exception raised.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Generic, TypeVar

from inventory_kernel.exceptions import (
    InsufficientStockError,
    InvalidInputError,
    InventoryKernelError,
    ProductNotFoundError,
    StorageFailureError,
)

T = TypeVar("T")


class LedgerStatus(str, Enum):
    """Outcome of a ledger write operation."""

    APPLIED = "applied"
    NOT_FOUND = "not_found"
    INVALID_INPUT = "invalid_input"
    INSUFFICIENT_STOCK = "insufficient_stock"
    STORAGE_FAILURE = "storage_failure"

    @property
    def is_retryable(self) -> bool:
        return self is LedgerStatus.STORAGE_FAILURE


_STATUS_BY_ERROR: dict[type[InventoryKernelError], LedgerStatus] = {
    ProductNotFoundError: LedgerStatus.NOT_FOUND,
    InvalidInputError: LedgerStatus.INVALID_INPUT,
    InsufficientStockError: LedgerStatus.INSUFFICIENT_STOCK,
    StorageFailureError: LedgerStatus.STORAGE_FAILURE,
}

# Errors the ledger converts into a LedgerResult; anything else propagates.
LEDGER_ERRORS: tuple[type[InventoryKernelError], ...] = tuple(_STATUS_BY_ERROR)


def status_for(error: InventoryKernelError) -> LedgerStatus:
    """Map a ledger error to its status tag."""
    for error_type, status in _STATUS_BY_ERROR.items():
        if isinstance(error, error_type):
            return status
    raise TypeError(f"No ledger status for {type(error).__name__}")


@dataclass(frozen=True)
class LedgerResult(Generic[T]):
    """Result of a ledger write operation."""

    status: LedgerStatus
    record: T | None = None
    error: InventoryKernelError | None = None

    @classmethod
    def applied(cls, record: T) -> "LedgerResult[T]":
        return cls(status=LedgerStatus.APPLIED, record=record)

    @classmethod
    def failed(cls, error: InventoryKernelError) -> "LedgerResult[T]":
        return cls(status=status_for(error), error=error)

    @property
    def is_success(self) -> bool:
        return self.status is LedgerStatus.APPLIED

    @property
    def code(self) -> str | None:
        """Machine-readable error code, or None on success."""
        return self.error.code if self.error is not None else None

    def unwrap(self) -> T:
        """Return the record, or raise the carried error unchanged."""
        if self.error is not None:
            raise self.error
        return self.record
