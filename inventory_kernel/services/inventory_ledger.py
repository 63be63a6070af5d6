"""
InventoryLedger -- the ledger engine.

Responsibility:
    Public entry point for every stock operation.  Validates input, checks
    the product against the catalog, runs the write inside one atomic unit
    of work, and reports the outcome as a tagged LedgerResult.  Read
    operations return DTOs joined with catalog display data.

Architecture position:
    Kernel > Services.  Owns the transaction boundary: it opens
    Database.session_scope() per call and hands the session to StockService,
    ReportService, ConsistencyAuditor and the selectors, which only flush.

Invariants enforced:
    - NotFound and InvalidInput are decided before any storage access, so a
      rejected call has no side effect.
    - A stock movement and its transaction record commit together (one
      session_scope per attempt); any SQLAlchemy error rolls both back and
      surfaces as StorageFailureError.
    - Only StorageFailureError is retried, and only when
      max_storage_retries > 1.

Failure modes:
    - Write operations never raise ledger errors; they return
      LedgerResult.failed(...).  Anything outside LEDGER_ERRORS (e.g.
      ImmutabilityViolationError, programming errors) propagates.
    - Read operations raise InvalidInputError / StorageFailureError.

Audit relevance:
    Each write binds a correlation_id, product_id and operation into the
    log context and ends with ``ledger_operation_completed`` (status,
    duration_ms) or ``ledger_operation_failed``.

Usage:
    ledger = InventoryLedger(database, catalog)
    result = ledger.stock_out(42, 3, notes="order 1001")
    if result.status is LedgerStatus.INSUFFICIENT_STOCK:
        ...
"""

import time
from dataclasses import replace
from datetime import UTC, date, datetime, time as dt_time
from typing import Callable, TypeVar
from uuid import uuid4

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from inventory_kernel.catalog import CatalogLookup
from inventory_kernel.db.engine import Database
from inventory_kernel.domain.clock import Clock, SystemClock
from inventory_kernel.domain.dtos import (
    Discrepancy,
    InventoryRecord,
    InventorySummary,
    TransactionRecord,
)
from inventory_kernel.domain.results import LEDGER_ERRORS, LedgerResult
from inventory_kernel.exceptions import (
    InvalidInputError,
    ProductNotFoundError,
    StorageFailureError,
)
from inventory_kernel.logging_config import LogContext, get_logger
from inventory_kernel.models.inventory import DEFAULT_MIN_STOCK_LEVEL
from inventory_kernel.selectors.inventory_selector import InventorySelector
from inventory_kernel.selectors.transaction_selector import TransactionSelector
from inventory_kernel.services.consistency_auditor import ConsistencyAuditor
from inventory_kernel.services.report_service import ReportService, with_display
from inventory_kernel.services.retry import run_with_storage_retry
from inventory_kernel.services.stock_service import StockService
from inventory_kernel.services.validation import (
    normalize_notes,
    require_positive_quantity,
    require_product_id,
    require_threshold,
)

logger = get_logger("services.ledger")

T = TypeVar("T")

DEFAULT_RECENT_LIMIT = 50


def _describe(exc: SQLAlchemyError) -> str:
    orig = getattr(exc, "orig", None)
    return str(orig if orig is not None else exc)


def _as_utc(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value.astimezone(UTC)


def _range_start(value: date | datetime) -> datetime:
    if isinstance(value, datetime):
        return _as_utc(value)
    return datetime.combine(value, dt_time.min, tzinfo=UTC)


def _range_end(value: date | datetime) -> datetime:
    # A bare date covers the whole day
    if isinstance(value, datetime):
        return _as_utc(value)
    return datetime.combine(value, dt_time.max, tzinfo=UTC)


class InventoryLedger:
    """
    Stock ledger over an Inventory Store and a Transaction Log.

    Contract:
        Safe to call concurrently from many threads; each call uses its own
        session.  Holds no mutable state between calls.
    """

    def __init__(
        self,
        database: Database,
        catalog: CatalogLookup,
        clock: Clock | None = None,
        default_min_stock_level: int = DEFAULT_MIN_STOCK_LEVEL,
        recent_limit: int = DEFAULT_RECENT_LIMIT,
        max_storage_retries: int = 1,
        retry_backoff_seconds: float = 0.05,
        sleep: Callable[[float], None] = time.sleep,
    ):
        if not isinstance(catalog, CatalogLookup):
            raise TypeError(f"{type(catalog).__name__} does not implement CatalogLookup")
        require_threshold(default_min_stock_level)
        if recent_limit <= 0:
            raise InvalidInputError("recent_limit", recent_limit, "must be positive")
        if max_storage_retries < 1:
            raise InvalidInputError(
                "max_storage_retries", max_storage_retries, "must be at least 1"
            )

        self._database = database
        self._catalog = catalog
        self._clock = clock or SystemClock()
        self._default_min_stock_level = default_min_stock_level
        self._recent_limit = recent_limit
        self._max_storage_retries = max_storage_retries
        self._retry_backoff_seconds = retry_backoff_seconds
        self._sleep = sleep

    @property
    def database(self) -> Database:
        return self._database

    @property
    def catalog(self) -> CatalogLookup:
        return self._catalog

    # ------------------------------------------------------------------
    # Write plumbing
    # ------------------------------------------------------------------

    def _require_active(self, product_id: int) -> None:
        if not self._catalog.exists(product_id):
            raise ProductNotFoundError(product_id)

    def _attempt(self, operation: str, unit: Callable[[StockService], T]) -> T:
        try:
            with self._database.session_scope() as session:
                stock = StockService(session, self._clock, self._default_min_stock_level)
                return unit(stock)
        except SQLAlchemyError as exc:
            raise StorageFailureError(operation, _describe(exc)) from exc

    def _in_unit_of_work(self, operation: str, unit: Callable[[StockService], T]) -> T:
        return run_with_storage_retry(
            lambda: self._attempt(operation, unit),
            attempts=self._max_storage_retries,
            backoff_seconds=self._retry_backoff_seconds,
            sleep=self._sleep,
        )

    def _execute_write(
        self, operation: str, product_id: int, apply: Callable[[], T]
    ) -> LedgerResult[T]:
        with LogContext.bind(
            correlation_id=str(uuid4()),
            product_id=str(product_id),
            operation=operation,
        ):
            t0 = time.monotonic()
            try:
                require_product_id(product_id)
                result = LedgerResult.applied(apply())
            except LEDGER_ERRORS as exc:
                result = LedgerResult.failed(exc)
            except Exception:
                duration_ms = round((time.monotonic() - t0) * 1000, 2)
                logger.error(
                    "ledger_operation_failed",
                    extra={"duration_ms": duration_ms},
                    exc_info=True,
                )
                raise

            duration_ms = round((time.monotonic() - t0) * 1000, 2)
            logger.info(
                "ledger_operation_completed",
                extra={
                    "status": result.status.value,
                    "error_code": result.code,
                    "duration_ms": duration_ms,
                },
            )
            return result

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------

    def stock_in(
        self, product_id: int, quantity: int, notes: str | None = None
    ) -> LedgerResult[TransactionRecord]:
        """Receive ``quantity`` units.  Returns the IN transaction record."""

        def apply() -> TransactionRecord:
            require_positive_quantity(quantity)
            clean_notes = normalize_notes(notes)
            self._require_active(product_id)

            def unit(stock: StockService) -> TransactionRecord:
                txn, _ = stock.apply_stock_in(product_id, quantity, clean_notes)
                return TransactionSelector.to_record(txn)

            return self._with_name(self._in_unit_of_work("stock_in", unit))

        return self._execute_write("stock_in", product_id, apply)

    def stock_out(
        self, product_id: int, quantity: int, notes: str | None = None
    ) -> LedgerResult[TransactionRecord]:
        """
        Issue ``quantity`` units.

        Fails with INSUFFICIENT_STOCK (carrying available and requested)
        when fewer units are on hand; the stored quantity is unchanged.
        """

        def apply() -> TransactionRecord:
            require_positive_quantity(quantity)
            clean_notes = normalize_notes(notes)
            self._require_active(product_id)

            def unit(stock: StockService) -> TransactionRecord:
                txn, _ = stock.apply_stock_out(product_id, quantity, clean_notes)
                return TransactionSelector.to_record(txn)

            return self._with_name(self._in_unit_of_work("stock_out", unit))

        return self._execute_write("stock_out", product_id, apply)

    def set_min_threshold(
        self, product_id: int, min_stock_level: int
    ) -> LedgerResult[InventoryRecord]:
        """Set the low-stock threshold.  No transaction record is written."""

        def apply() -> InventoryRecord:
            require_threshold(min_stock_level)
            self._require_active(product_id)

            def unit(stock: StockService) -> InventoryRecord:
                item = stock.set_min_threshold(product_id, min_stock_level)
                return InventorySelector.to_record(item)

            record = self._in_unit_of_work("set_min_threshold", unit)
            return self._with_display(record)

        return self._execute_write("set_min_threshold", product_id, apply)

    def open_inventory(
        self, product_id: int, min_stock_level: int | None = None
    ) -> LedgerResult[InventoryRecord]:
        """
        Create the inventory record (quantity 0) for a catalog product.

        Idempotent: an existing record is returned unchanged.
        """

        def apply() -> InventoryRecord:
            if min_stock_level is not None:
                require_threshold(min_stock_level)
            self._require_active(product_id)

            def unit(stock: StockService) -> InventoryRecord:
                item, _ = stock.open_inventory(product_id, min_stock_level)
                return InventorySelector.to_record(item)

            record = self._in_unit_of_work("open_inventory", unit)
            return self._with_display(record)

        return self._execute_write("open_inventory", product_id, apply)

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    def _read(self, operation: str, query: Callable[[Session], T]) -> T:
        try:
            with self._database.session_scope() as session:
                return query(session)
        except SQLAlchemyError as exc:
            raise StorageFailureError(operation, _describe(exc)) from exc

    def _with_display(self, record: InventoryRecord) -> InventoryRecord:
        return with_display(record, self._catalog)

    def _with_name(self, record: TransactionRecord) -> TransactionRecord:
        return self._with_names([record])[0]

    def _with_names(self, records: list[TransactionRecord]) -> list[TransactionRecord]:
        names: dict[int, str | None] = {}
        named = []
        for record in records:
            if record.product_id not in names:
                try:
                    names[record.product_id] = self._catalog.display_info(
                        record.product_id
                    ).name
                except ProductNotFoundError:
                    names[record.product_id] = None
            named.append(replace(record, product_name=names[record.product_id]))
        return named

    def get_inventory(self, product_id: int) -> InventoryRecord | None:
        """Current record for a product (active or not), or None."""
        require_product_id(product_id)
        record = self._read(
            "get_inventory", lambda s: InventorySelector(s).get(product_id)
        )
        return self._with_display(record) if record is not None else None

    def list_inventory(self) -> list[InventoryRecord]:
        """Records of active products, ordered by product name."""
        return self._read(
            "list_inventory", lambda s: ReportService(s, self._catalog).list_inventory()
        )

    def list_low_stock(self) -> list[InventoryRecord]:
        """Active products with quantity <= threshold, lowest quantity first."""
        return self._read(
            "list_low_stock", lambda s: ReportService(s, self._catalog).list_low_stock()
        )

    def summarize(self) -> InventorySummary:
        return self._read(
            "summarize", lambda s: ReportService(s, self._catalog).summarize()
        )

    def recent_transactions(self, limit: int | None = None) -> list[TransactionRecord]:
        """
        Most recent movements, newest first.

        A missing or non-positive ``limit`` falls back to the configured
        recent_limit.
        """
        if limit is None or limit <= 0:
            limit = self._recent_limit
        records = self._read(
            "recent_transactions", lambda s: TransactionSelector(s).recent(limit)
        )
        return self._with_names(records)

    def transactions_for_product(self, product_id: int) -> list[TransactionRecord]:
        require_product_id(product_id)
        records = self._read(
            "transactions_for_product",
            lambda s: TransactionSelector(s).by_product(product_id),
        )
        return self._with_names(records)

    def transactions_between(
        self, start: date | datetime, end: date | datetime
    ) -> list[TransactionRecord]:
        """
        Movements with start <= timestamp <= end, newest first.

        Dates are whole days: ``start`` begins at midnight and ``end`` runs
        to the last microsecond of its day.  A datetime is an exact instant,
        so an ``end`` of midnight is not widened to the rest of that day;
        pass a ``date`` for that.  Naive datetimes are UTC.

        Raises:
            InvalidInputError: start is after end.
        """
        range_start = _range_start(start)
        range_end = _range_end(end)
        if range_start > range_end:
            raise InvalidInputError("start", start, f"must not be after end {end}")
        records = self._read(
            "transactions_between",
            lambda s: TransactionSelector(s).by_date_range(range_start, range_end),
        )
        return self._with_names(records)

    def verify_consistency(self) -> list[Discrepancy]:
        """Products whose stored quantity differs from their replayed log."""
        return self._read(
            "verify_consistency", lambda s: ConsistencyAuditor(s).verify()
        )

    def check_connection(self) -> bool:
        return self._database.check_connection()
