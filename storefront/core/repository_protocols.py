"""Boundary Protocols — contracts between the ordering core and the store.

Invariants:
    - Core NEVER imports from infrastructure — dependency arrows point inward only
    - All IO operations accessed through Protocol types
    - lock_and_read_product holds its lock until the enclosing unit of work ends
    - A unit of work commits only on clean exit; every other exit rolls back

Design Decisions:
    - Protocol over ABC: structural subtyping, test doubles need no inheritance
    - The store client is passed to the service at construction time (no singleton)
"""

from contextlib import AbstractAsyncContextManager
from decimal import Decimal
from typing import Protocol

from storefront.core.domain_types import (
    CustomerId, OrderHeader, OrderId, OrderLineId, ProductId, ProductSnapshot,
)


class CatalogStore(Protocol):
    """Catalog reads/writes the reservation needs — implemented by shell."""
    async def customer_exists(self, customer_id: CustomerId) -> bool: ...
    async def lock_and_read_product(
        self, product_id: ProductId,
    ) -> ProductSnapshot | None: ...
    async def decrement_product_stock(
        self, product_id: ProductId, quantity: int,
    ) -> bool: ...


class OrderLedger(Protocol):
    """Append-only order persistence — implemented by shell."""
    async def create_order_header(self, customer_id: CustomerId) -> OrderHeader: ...
    async def append_order_line(
        self,
        order_id: OrderId,
        product_id: ProductId,
        quantity: int,
        price_each: Decimal,
    ) -> OrderLineId: ...


class UnitOfWork(Protocol):
    """One all-or-nothing scope over catalog and ledger."""
    catalog: CatalogStore
    ledger: OrderLedger


class OrderStore(Protocol):
    """Store client handed to the reservation service."""
    def unit_of_work(self) -> AbstractAsyncContextManager[UnitOfWork]: ...
