"""Order Request Validation — structural checks run before any store access.

Invariants:
    - All functions are PURE: no IO, no async, no DB, no side effects
    - Return a Rejection on violation, None on success
    - validate_order_request chains all checks — first rejection wins
    - Ids must fit a BIGINT column, quantities and stock an INTEGER column

Design Decisions:
    - Return values (not exceptions): the service decides how a rejection surfaces
"""

from collections.abc import Sequence
from dataclasses import dataclass

from storefront.core.domain_types import MAX_ID, MAX_QUANTITY, LineRequest


@dataclass(frozen=True)
class Rejection:
    """Why a request was refused, and which field caused it."""
    field: str
    message: str


def _check_id(value: int, field: str, name: str) -> Rejection | None:
    if not 0 < value <= MAX_ID:
        return Rejection(field, f"{name} must be a positive integer <= {MAX_ID}")
    return None


def check_customer_id(customer_id: int) -> Rejection | None:
    return _check_id(customer_id, "customer_id", "customer_id")


def check_lines_present(lines: Sequence[LineRequest]) -> Rejection | None:
    if not lines:
        return Rejection("items", "order requires at least one item")
    return None


def check_line_fields(lines: Sequence[LineRequest]) -> Rejection | None:
    """Every line needs an in-range product id and quantity."""
    for index, line in enumerate(lines):
        rejection = _check_id(
            line.product_id, f"items.{index}.product_id", "product_id",
        )
        if rejection:
            return rejection
        if not 0 < line.quantity <= MAX_QUANTITY:
            return Rejection(
                f"items.{index}.qty",
                f"qty must be a positive integer <= {MAX_QUANTITY}",
            )
    return None


def validate_order_request(
    customer_id: int, lines: Sequence[LineRequest],
) -> Rejection | None:
    """Chain all request checks. Returns first rejection or None."""
    return (
        check_customer_id(customer_id)
        or check_lines_present(lines)
        or check_line_fields(lines)
    )


def check_stock_value(stock: int) -> Rejection | None:
    """Stock patch: the new value must be non-negative and fit the column."""
    if stock < 0:
        return Rejection("stock", "stock must be >= 0")
    if stock > MAX_QUANTITY:
        return Rejection("stock", f"stock must be <= {MAX_QUANTITY}")
    return None
