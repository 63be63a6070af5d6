"""
ConsistencyAuditor -- replay the transaction log against stored stock.

Responsibility:
    For every product that has an inventory record or any movement, sums
    the log (+IN, -OUT) and compares it with the stored quantity.

Invariants enforced:
    - Replay equals store: the replayed total of a product's movements is
      its stored quantity (initial quantity is 0).

Failure modes:
    Returns discrepancies rather than raising; each one is logged as
    ``consistency_violation`` at ERROR.
"""

from sqlalchemy import select
from sqlalchemy.orm import Session

from inventory_kernel.domain.dtos import Discrepancy
from inventory_kernel.logging_config import get_logger
from inventory_kernel.models.inventory import InventoryItem
from inventory_kernel.selectors.transaction_selector import TransactionSelector

logger = get_logger("services.consistency")


class ConsistencyAuditor:
    """Compares the Inventory Store with the Transaction Log."""

    def __init__(self, session: Session):
        self._session = session

    def verify(self) -> list[Discrepancy]:
        """Every product whose stored and replayed quantities differ."""
        replayed = TransactionSelector(self._session).replay_totals()
        stored = dict(
            self._session.execute(
                select(InventoryItem.product_id, InventoryItem.quantity)
            ).all()
        )

        discrepancies = []
        for product_id in sorted(set(stored) | set(replayed)):
            stored_qty = stored.get(product_id, 0)
            replayed_qty = replayed.get(product_id, 0)
            if stored_qty != replayed_qty:
                discrepancy = Discrepancy(product_id, stored_qty, replayed_qty)
                logger.error(
                    "consistency_violation",
                    extra={
                        "product_id": product_id,
                        "stored_quantity": stored_qty,
                        "replayed_quantity": replayed_qty,
                    },
                )
                discrepancies.append(discrepancy)

        logger.info(
            "consistency_verified",
            extra={
                "products_checked": len(set(stored) | set(replayed)),
                "discrepancies": len(discrepancies),
            },
        )
        return discrepancies
