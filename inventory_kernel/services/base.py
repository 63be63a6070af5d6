"""
BaseService -- abstract base for kernel write services.

Responsibility:
    Common constructor and session contract for services that mutate the
    Inventory Store or Transaction Log.  Services flush; they never commit
    or roll back.

Invariants enforced:
    The caller (InventoryLedger, through Database.session_scope()) owns the
    transaction boundary.  Because services only flush, a quantity change and
    its transaction record always share one commit.

Failure modes:
    A subclass that commits on its own would split the unit of work and
    break the paired-movement invariant.
"""

from abc import ABC
from typing import Generic, TypeVar

from sqlalchemy.orm import Session

from inventory_kernel.db.base import Base

ModelType = TypeVar("ModelType", bound=Base)


class BaseService(ABC, Generic[ModelType]):
    """
    Abstract base class for kernel write services.

    Contract:
        Accepts a SQLAlchemy Session from the caller and persists changes
        with session.flush() inside the caller's transaction.
    """

    def __init__(self, session: Session):
        self.session = session
