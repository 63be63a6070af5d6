"""
Module: inventory_kernel.selectors.transaction_selector
Responsibility: Read-only query surface over the append-only Transaction Log.
Architecture position: Kernel > Selectors.

Invariants enforced:
    - Read-only; no locks are taken.  A query may or may not see a movement
      committed while it runs.
    - All listings are ordered newest first (occurred_at DESC, id DESC, so
      movements sharing a timestamp keep insertion order).
    - Date ranges are inclusive on both ends.

Audit relevance:
    replay_totals() is the log-replay view of stock: per product, the sum of
    +quantity for IN and -quantity for OUT.  It must equal the stored
    quantity for every product.
"""

from datetime import datetime

from sqlalchemy import case, func, select

from inventory_kernel.domain.dtos import Direction, TransactionRecord
from inventory_kernel.models.stock_transaction import MovementDirection, StockTransaction
from inventory_kernel.selectors.base import BaseSelector


class TransactionSelector(BaseSelector[StockTransaction]):
    """Selector for stock movement history."""

    _NEWEST_FIRST = (StockTransaction.occurred_at.desc(), StockTransaction.id.desc())

    @staticmethod
    def to_record(row: StockTransaction) -> TransactionRecord:
        return TransactionRecord(
            id=row.id,
            product_id=row.product_id,
            direction=Direction(row.direction),
            quantity=row.quantity,
            notes=row.notes,
            timestamp=row.occurred_at,
        )

    def recent(self, limit: int) -> list[TransactionRecord]:
        """The ``limit`` most recent movements across all products."""
        rows = self.session.execute(
            select(StockTransaction).order_by(*self._NEWEST_FIRST).limit(limit)
        ).scalars()
        return [self.to_record(row) for row in rows]

    def by_product(self, product_id: int) -> list[TransactionRecord]:
        rows = self.session.execute(
            select(StockTransaction)
            .where(StockTransaction.product_id == product_id)
            .order_by(*self._NEWEST_FIRST)
        ).scalars()
        return [self.to_record(row) for row in rows]

    def by_date_range(self, start: datetime, end: datetime) -> list[TransactionRecord]:
        """Movements with start <= occurred_at <= end."""
        rows = self.session.execute(
            select(StockTransaction)
            .where(StockTransaction.occurred_at >= start)
            .where(StockTransaction.occurred_at <= end)
            .order_by(*self._NEWEST_FIRST)
        ).scalars()
        return [self.to_record(row) for row in rows]

    def replay_totals(self) -> dict[int, int]:
        """Net replayed quantity per product that has any movement."""
        signed = case(
            (StockTransaction.direction == MovementDirection.OUT.value, -StockTransaction.quantity),
            else_=StockTransaction.quantity,
        )
        rows = self.session.execute(
            select(StockTransaction.product_id, func.sum(signed)).group_by(
                StockTransaction.product_id
            )
        ).all()
        return {product_id: int(total) for product_id, total in rows}
