"""Domain Types — identity types and immutable value objects for the ordering core.

Invariants:
    - CustomerId, ProductId, OrderId, OrderLineId wrap ints — never bare int in core logic
    - Prices are Decimal, never float
    - All value objects are frozen: the core never mutates what the store returned

Design Decisions:
    - NewType for ids: zero runtime cost, full type-checker support
    - Frozen dataclasses for values crossing the store boundary
"""

from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import NewType


# ─── Identity Types ──────────────────────────────────────────────

CustomerId = NewType("CustomerId", int)
ProductId = NewType("ProductId", int)
OrderId = NewType("OrderId", int)
OrderLineId = NewType("OrderLineId", int)

# Column ranges: ids are BIGINT, stock and qty are INTEGER
MAX_ID = 2**63 - 1
MAX_QUANTITY = 2**31 - 1


# ─── Enums ───────────────────────────────────────────────────────

class LockStrategy(str, Enum):
    """Order in which product rows are locked during a reservation."""
    SORTED = "sorted"   # ascending product id, before any line is evaluated
    INPUT = "input"     # one lock per line, in caller order


# ─── Value Types ─────────────────────────────────────────────────

@dataclass(frozen=True)
class LineRequest:
    """One requested line: quantity of a product."""
    product_id: ProductId
    quantity: int


@dataclass(frozen=True)
class ProductSnapshot:
    """Live price and stock read under the row lock."""
    product_id: ProductId
    price: Decimal
    stock: int


@dataclass(frozen=True)
class LineAllocation:
    """An accepted line with its frozen unit price."""
    product_id: ProductId
    quantity: int
    price_each: Decimal


@dataclass(frozen=True)
class OrderHeader:
    order_id: OrderId
    created_at: datetime


@dataclass(frozen=True)
class PlacedOrderLine:
    id: OrderLineId
    product_id: ProductId
    quantity: int
    price_each: Decimal


@dataclass(frozen=True)
class PlacedOrder:
    """A committed order as returned to the caller."""
    id: OrderId
    customer_id: CustomerId
    created_at: datetime
    lines: tuple[PlacedOrderLine, ...] = field(default_factory=tuple)

    @property
    def total(self) -> Decimal:
        return sum(
            (line.price_each * line.quantity for line in self.lines),
            Decimal("0"),
        )
