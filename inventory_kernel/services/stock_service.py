"""
StockService -- quantity mutations paired with transaction-log appends.

Responsibility:
    Applies stock movements and threshold changes to the Inventory Store and
    appends the matching StockTransaction row.  Every method flushes into
    the caller's transaction and never commits, so a quantity change and
    its log row are persisted together or not at all.

Architecture position:
    Kernel > Services.  Called by InventoryLedger inside
    Database.session_scope().

Invariants enforced:
    - quantity >= 0: stock out is a single conditional UPDATE
      (``WHERE quantity >= :requested``); the availability check and the
      decrement are one statement evaluated against the latest committed
      row, never a read followed by a separate write.
    - Paired movement: each successful stock in/out writes exactly one
      StockTransaction with the same product, direction and quantity.
    - min_stock_level >= 0 (validated by the caller; CHECK constraint as
      backstop).

Failure modes:
    - InsufficientStockError when the conditional UPDATE matches no row.
      The current quantity is re-read so the error reports what was
      actually available.
    - IntegrityError from a concurrent open of the same product is absorbed
      with a savepoint rollback; the other writer's row is used.

Audit relevance:
    The row lock taken by the UPDATE (PostgreSQL) or the write lock taken by
    BEGIN IMMEDIATE (SQLite) is held until the caller commits, so
    concurrent movements on one product serialize.
"""

from sqlalchemy import select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from inventory_kernel.domain.clock import Clock
from inventory_kernel.exceptions import InsufficientStockError
from inventory_kernel.logging_config import get_logger
from inventory_kernel.models.inventory import DEFAULT_MIN_STOCK_LEVEL, InventoryItem
from inventory_kernel.models.stock_transaction import MovementDirection, StockTransaction
from inventory_kernel.selectors.inventory_selector import InventorySelector
from inventory_kernel.services.base import BaseService

logger = get_logger("services.stock")


class StockService(BaseService[InventoryItem]):
    """Write service for stock levels and the transaction log."""

    def __init__(
        self,
        session: Session,
        clock: Clock,
        default_min_stock_level: int = DEFAULT_MIN_STOCK_LEVEL,
    ):
        super().__init__(session)
        self._clock = clock
        self._default_min_stock_level = default_min_stock_level

    def _load(self, product_id: int, for_update: bool = False) -> InventoryItem | None:
        query = select(InventoryItem).where(InventoryItem.product_id == product_id)
        if for_update:
            query = query.with_for_update()
        return self.session.execute(
            query.execution_options(populate_existing=True)
        ).scalar_one_or_none()

    def open_inventory(
        self, product_id: int, min_stock_level: int | None = None
    ) -> tuple[InventoryItem, bool]:
        """
        Ensure an inventory record exists for a product.

        Args:
            product_id: Catalog product id (already validated).
            min_stock_level: Threshold for a newly created record.  Ignored
                when the record already exists.

        Returns:
            (item, created) where created is False if the record was
            already present.
        """
        existing = self._load(product_id)
        if existing is not None:
            return existing, False

        level = (
            self._default_min_stock_level if min_stock_level is None else min_stock_level
        )
        item = InventoryItem(
            product_id=product_id,
            quantity=0,
            min_stock_level=level,
            last_updated=self._clock.now(),
        )

        # Savepoint keeps the rest of the unit of work if another writer
        # created the row first.
        savepoint = self.session.begin_nested()
        try:
            self.session.add(item)
            self.session.flush()
            savepoint.commit()
        except IntegrityError:
            savepoint.rollback()
            logger.debug(
                "inventory_open_race",
                extra={"product_id": product_id},
            )
            existing = self._load(product_id)
            if existing is None:
                raise
            return existing, False

        logger.info(
            "inventory_opened",
            extra={"product_id": product_id, "min_stock_level": level},
        )
        return item, True

    def _append(
        self,
        product_id: int,
        direction: MovementDirection,
        quantity: int,
        notes: str,
    ) -> StockTransaction:
        txn = StockTransaction(
            product_id=product_id,
            direction=direction.value,
            quantity=quantity,
            notes=notes,
            occurred_at=self._clock.now(),
        )
        self.session.add(txn)
        self.session.flush()
        return txn

    def apply_stock_in(
        self, product_id: int, quantity: int, notes: str = ""
    ) -> tuple[StockTransaction, int]:
        """
        Increment stock and append an IN movement.

        A product without an inventory record gets one (quantity 0) first,
        inside the same transaction.

        Returns:
            (transaction row, new quantity)
        """
        stmt = (
            update(InventoryItem)
            .where(InventoryItem.product_id == product_id)
            .values(
                quantity=InventoryItem.quantity + quantity,
                last_updated=self._clock.now(),
            )
            .returning(InventoryItem.quantity)
            .execution_options(synchronize_session=False)
        )
        new_quantity = self.session.execute(stmt).scalar_one_or_none()
        if new_quantity is None:
            self.open_inventory(product_id)
            new_quantity = self.session.execute(stmt).scalar_one()

        txn = self._append(product_id, MovementDirection.IN, quantity, notes)
        logger.info(
            "stock_in_applied",
            extra={
                "product_id": product_id,
                "quantity": quantity,
                "new_quantity": new_quantity,
                "transaction_id": txn.id,
            },
        )
        return txn, new_quantity

    def apply_stock_out(
        self, product_id: int, quantity: int, notes: str = ""
    ) -> tuple[StockTransaction, int]:
        """
        Decrement stock and append an OUT movement.

        Raises:
            InsufficientStockError: Fewer than ``quantity`` units on hand,
                or no inventory record at all (available=0).

        Returns:
            (transaction row, new quantity)
        """
        new_quantity = self.session.execute(
            update(InventoryItem)
            .where(InventoryItem.product_id == product_id)
            .where(InventoryItem.quantity >= quantity)
            .values(
                quantity=InventoryItem.quantity - quantity,
                last_updated=self._clock.now(),
            )
            .returning(InventoryItem.quantity)
            .execution_options(synchronize_session=False)
        ).scalar_one_or_none()

        if new_quantity is None:
            available = InventorySelector(self.session).quantity_of(product_id) or 0
            logger.warning(
                "stock_out_rejected",
                extra={
                    "product_id": product_id,
                    "available": available,
                    "requested": quantity,
                },
            )
            raise InsufficientStockError(product_id, available, quantity)

        txn = self._append(product_id, MovementDirection.OUT, quantity, notes)
        logger.info(
            "stock_out_applied",
            extra={
                "product_id": product_id,
                "quantity": quantity,
                "new_quantity": new_quantity,
                "transaction_id": txn.id,
            },
        )
        return txn, new_quantity

    def set_min_threshold(self, product_id: int, min_stock_level: int) -> InventoryItem:
        """
        Change a product's low-stock threshold.

        Opens the record with this threshold if none exists.  No movement
        is logged and last_updated is left alone.

        SELECT ... FOR UPDATE cannot lock a row that is not there yet, so a
        record opened concurrently by another writer is re-loaded under lock
        and overwritten rather than taken as is.
        """
        created = False
        item = self._load(product_id, for_update=True)
        if item is None:
            item, created = self.open_inventory(product_id, min_stock_level)
            if not created:
                item = self._load(product_id, for_update=True)

        previous = None
        if not created:
            previous = item.min_stock_level
            item.min_stock_level = min_stock_level
            self.session.flush()

        logger.info(
            "min_threshold_updated",
            extra={
                "product_id": product_id,
                "previous": previous,
                "min_stock_level": min_stock_level,
            },
        )
        return item
