"""Stock Allocation — pure decisions behind a reservation: lock order and per-line acceptance.

Invariants:
    - All functions are PURE: no IO, no async, no DB
    - allocate_line never lets cumulative consumption exceed the locked stock
    - price_each always comes from the snapshot read under the lock

Design Decisions:
    - Consumption tracked per product across lines so a product repeated on
      several lines is checked against its running remainder
    - Raises typed errors: the caller is inside a unit of work that must abort
"""

from collections.abc import Mapping, Sequence

from storefront.core.domain_types import (
    LineAllocation, LineRequest, LockStrategy, ProductId, ProductSnapshot,
)
from storefront.core.errors import InsufficientStockError, ProductNotFoundError


def lock_sequence(
    lines: Sequence[LineRequest], strategy: LockStrategy,
) -> list[ProductId]:
    """Product ids to lock up front, before any line is evaluated.

    SORTED locks every distinct product in ascending id order, so two
    reservations over the same products always queue in the same order.
    INPUT locks nothing up front; each line takes its lock when reached.
    """
    if strategy == LockStrategy.SORTED:
        return sorted({line.product_id for line in lines})
    return []


def allocate_line(
    line: LineRequest,
    snapshot: ProductSnapshot | None,
    consumed: Mapping[ProductId, int],
) -> LineAllocation:
    """Accept one line against its locked snapshot or raise."""
    if snapshot is None:
        raise ProductNotFoundError(line.product_id)
    available = snapshot.stock - consumed.get(line.product_id, 0)
    if available < line.quantity:
        raise InsufficientStockError(
            line.product_id, line.quantity, max(available, 0),
        )
    return LineAllocation(
        product_id=line.product_id,
        quantity=line.quantity,
        price_each=snapshot.price,
    )
