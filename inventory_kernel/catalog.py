"""
Catalog Lookup boundary.

The product catalog is owned by another component.  The ledger reads it
through CatalogLookup only: to confirm a product exists before touching its
stock, to price it for valuation, and to label listings.  The ledger never
writes to the catalog.

InMemoryCatalog is a thread-safe adapter for embedding the ledger next to a
catalog held in memory, and for tests.
"""

import threading
from dataclasses import dataclass, replace
from decimal import Decimal
from typing import Iterable, Protocol, runtime_checkable

from inventory_kernel.exceptions import ProductNotFoundError


@dataclass(frozen=True)
class ProductDisplay:
    """Display attributes of a product."""

    name: str
    sku: str


@runtime_checkable
class CatalogLookup(Protocol):
    """
    Read-only port onto the product catalog.

    exists() answers for active products only; soft-deleted products report
    False.  unit_price() and display_info() raise ProductNotFoundError for
    ids the catalog has never held, and keep answering for soft-deleted
    products so that history can still be labelled.
    """

    def exists(self, product_id: int) -> bool: ...

    def unit_price(self, product_id: int) -> Decimal: ...

    def display_info(self, product_id: int) -> ProductDisplay: ...

    def active_product_ids(self) -> list[int]: ...


@dataclass(frozen=True)
class CatalogProduct:
    product_id: int
    name: str
    sku: str
    unit_price: Decimal
    is_active: bool = True


class InMemoryCatalog:
    """CatalogLookup over a dict of CatalogProduct rows."""

    def __init__(self, products: Iterable[CatalogProduct] = ()):
        self._lock = threading.Lock()
        self._products: dict[int, CatalogProduct] = {}
        for product in products:
            self._products[product.product_id] = product

    def add_product(
        self,
        product_id: int,
        name: str,
        sku: str,
        unit_price: Decimal | str = Decimal("0"),
    ) -> CatalogProduct:
        product = CatalogProduct(
            product_id=product_id,
            name=name,
            sku=sku,
            unit_price=Decimal(unit_price),
        )
        with self._lock:
            self._products[product_id] = product
        return product

    def deactivate(self, product_id: int) -> None:
        """Soft-delete: the product stays known but no longer exists()."""
        self._set_active(product_id, False)

    def reactivate(self, product_id: int) -> None:
        self._set_active(product_id, True)

    def _set_active(self, product_id: int, is_active: bool) -> None:
        with self._lock:
            product = self._require(product_id)
            self._products[product_id] = replace(product, is_active=is_active)

    def _require(self, product_id: int) -> CatalogProduct:
        product = self._products.get(product_id)
        if product is None:
            raise ProductNotFoundError(product_id)
        return product

    # CatalogLookup

    def exists(self, product_id: int) -> bool:
        with self._lock:
            product = self._products.get(product_id)
        return product is not None and product.is_active

    def unit_price(self, product_id: int) -> Decimal:
        with self._lock:
            return self._require(product_id).unit_price

    def display_info(self, product_id: int) -> ProductDisplay:
        with self._lock:
            product = self._require(product_id)
        return ProductDisplay(name=product.name, sku=product.sku)

    def active_product_ids(self) -> list[int]:
        with self._lock:
            return sorted(p.product_id for p in self._products.values() if p.is_active)
