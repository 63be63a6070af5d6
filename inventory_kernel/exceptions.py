"""
Typed Exception Hierarchy for the Inventory Kernel.

===============================================================================
EXCEPTION HIERARCHY
===============================================================================

All exceptions inherit from InventoryKernelError:

    InventoryKernelError (base)
    |
    +-- ProductNotFoundError
    +-- InvalidInputError
    +-- InsufficientStockError
    +-- StorageFailureError
    +-- ImmutabilityViolationError

===============================================================================
ERROR CODES - QUICK REFERENCE
===============================================================================

Code                    | When Raised                              | Retry?
------------------------|------------------------------------------|-------
NOT_FOUND               | Catalog does not know the product, or    | no
                        | the product is soft-deleted              |
INVALID_INPUT           | Non-positive quantity, negative          | no
                        | threshold, bad product id, bad range     |
INSUFFICIENT_STOCK      | StockOut request exceeds on-hand qty     | no
STORAGE_FAILURE         | Unit of work could not commit; nothing   | yes
                        | was persisted                            |
IMMUTABILITY_VIOLATION  | UPDATE/DELETE of a transaction record,   | no
                        | DELETE of an inventory row               |

===============================================================================
HANDLING PATTERNS
===============================================================================

Write operations on InventoryLedger return a LedgerResult whose ``status``
names the error kind and whose ``error`` carries the exception below, so
callers branch on the kind:

    result = ledger.stock_out(product_id, 3)
    if result.status is LedgerStatus.INSUFFICIENT_STOCK:
        notify(f"only {result.error.available} left")

``result.unwrap()`` re-raises the carried error for callers that prefer
exceptions.  Every exception stores its context as attributes; the structured
log formatter copies them into the JSON record.
"""


class InventoryKernelError(Exception):
    """
    Base exception for all inventory kernel errors.

    All subclasses carry a ``code`` class attribute for machine-readable
    identification and a ``retryable`` flag.
    """

    code: str = "INVENTORY_KERNEL_ERROR"
    retryable: bool = False


class ProductNotFoundError(InventoryKernelError):
    """Product is unknown to the catalog (or no longer active)."""

    code: str = "NOT_FOUND"

    def __init__(self, product_id: int):
        self.product_id = product_id
        super().__init__(f"Product with ID {product_id} was not found")


class InvalidInputError(InventoryKernelError):
    """Caller supplied a value the ledger cannot accept."""

    code: str = "INVALID_INPUT"

    def __init__(self, field: str, value: object, reason: str):
        self.field = field
        self.value = value
        self.reason = reason
        super().__init__(f"Invalid {field}={value!r}: {reason}")


class InsufficientStockError(InventoryKernelError):
    """StockOut requested more units than are on hand."""

    code: str = "INSUFFICIENT_STOCK"

    def __init__(self, product_id: int, available: int, requested: int):
        self.product_id = product_id
        self.available = available
        self.requested = requested
        super().__init__(
            f"Not enough stock for product {product_id}: "
            f"available={available}, requested={requested}"
        )


class StorageFailureError(InventoryKernelError):
    """
    The atomic unit of work could not commit.

    The transaction was rolled back, so no inventory or transaction-log
    state was changed.  This is the only kind a caller may retry as-is.
    """

    code: str = "STORAGE_FAILURE"
    retryable: bool = True

    def __init__(self, operation: str, detail: str):
        self.operation = operation
        self.detail = detail
        super().__init__(f"Storage failure during {operation}: {detail}")


class ImmutabilityViolationError(InventoryKernelError):
    """Attempt to modify or delete an append-only ledger row."""

    code: str = "IMMUTABILITY_VIOLATION"

    def __init__(self, entity_type: str, entity_id: str, reason: str):
        self.entity_type = entity_type
        self.entity_id = entity_id
        self.reason = reason
        super().__init__(
            f"Cannot modify {entity_type} {entity_id}: {reason}"
        )
