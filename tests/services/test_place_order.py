"""Order Placement — behaviour of the reservation transaction over the in-memory store.

Tests cover:
    - happy path: priced lines, stock decremented, order committed
    - every rejection leaves stock and ledger unchanged
    - caller line order preserved; repeated products consume cumulatively
    - price frozen at sale time
    - invalid requests never open a unit of work
    - lock conflicts retried, other store failures surfaced immediately
    - deadline expiry rolls back and surfaces StoreUnavailableError(TIMEOUT);
      one deadline spans every retry of a call
"""

import asyncio
from decimal import Decimal

import pytest

from storefront.core.domain_types import LineRequest, LockStrategy, ProductId
from storefront.core.errors import (
    CustomerNotFoundError,
    InsufficientStockError,
    InvalidRequestError,
    ProductNotFoundError,
    StoreUnavailableError,
    StoreUnavailableReason,
)
from storefront.services.place_order import OrderPlacement


def lines(*pairs: tuple[int, int]) -> list[LineRequest]:
    return [LineRequest(product_id=ProductId(p), quantity=q) for p, q in pairs]


# ─── Success ─────────────────────────────────────────────────────

async def test_order_succeeds_and_decrements_stock(placement, fake_store):
    order = await placement.create_order(1, lines((1, 3)))

    assert order.customer_id == 1
    assert len(order.lines) == 1
    line = order.lines[0]
    assert (line.product_id, line.quantity, line.price_each) == (1, 3, Decimal("10.00"))
    assert fake_store.stock_of(1) == 2
    assert len(fake_store.orders) == 1
    assert fake_store.orders[0].id == order.id


async def test_multi_line_order_total(placement, fake_store):
    order = await placement.create_order(1, lines((1, 2), (2, 4)))

    assert order.total == Decimal("30.00")
    assert fake_store.stock_of(1) == 3
    assert fake_store.stock_of(2) == 6


async def test_line_order_follows_input(placement, fake_store):
    order = await placement.create_order(1, lines((2, 1), (1, 1), (2, 2)))

    assert [(l.product_id, l.quantity) for l in order.lines] == [(2, 1), (1, 1), (2, 2)]
    assert [l["product_id"] for l in fake_store.orders[0].lines] == [2, 1, 2]


async def test_repeated_product_consumes_cumulatively(placement, fake_store):
    order = await placement.create_order(1, lines((1, 2), (1, 3)))

    assert len(order.lines) == 2
    assert fake_store.stock_of(1) == 0


async def test_price_frozen_after_later_price_change(placement, fake_store):
    order = await placement.create_order(1, lines((1, 1)))

    fake_store.products[1].price = Decimal("99.99")

    assert order.lines[0].price_each == Decimal("10.00")
    assert fake_store.orders[0].lines[0]["price_each"] == Decimal("10.00")


async def test_second_order_sees_first_orders_stock(placement, fake_store):
    await placement.create_order(1, lines((1, 3)))

    with pytest.raises(InsufficientStockError) as exc_info:
        await placement.create_order(1, lines((1, 3)))
    assert exc_info.value.available == 2


# ─── Rejections leave everything unchanged ───────────────────────

async def test_insufficient_stock_leaves_state_unchanged(placement, fake_store):
    before = fake_store.state()

    with pytest.raises(InsufficientStockError):
        await placement.create_order(1, lines((1, 10)))

    assert fake_store.state() == before
    assert fake_store.stock_of(1) == 5
    assert fake_store.orders == []


async def test_missing_product_rolls_back_earlier_lines(placement, fake_store):
    before = fake_store.state()

    with pytest.raises(ProductNotFoundError) as exc_info:
        await placement.create_order(1, lines((1, 2), (999, 1)))

    assert exc_info.value.product_id == 999
    assert fake_store.state() == before


async def test_insufficient_stock_on_last_line_rolls_back_all(placement, fake_store):
    before = fake_store.state()

    with pytest.raises(InsufficientStockError):
        await placement.create_order(1, lines((2, 5), (1, 1), (1, 5)))

    assert fake_store.state() == before


async def test_unknown_customer_rejected_without_writes(placement, fake_store):
    before = fake_store.state()

    with pytest.raises(CustomerNotFoundError) as exc_info:
        await placement.create_order(42, lines((1, 1)))

    assert exc_info.value.context.customer_id == 42
    assert fake_store.state() == before
    assert fake_store.lock_log == []


async def test_first_failing_line_decides_error_under_sorted_locks(fake_store):
    """Line order, not lock order, picks the error: line 0 is short, line 1 missing."""
    placement = OrderPlacement(fake_store, lock_strategy=LockStrategy.SORTED)

    with pytest.raises(InsufficientStockError):
        await placement.create_order(1, lines((1, 50), (999, 1)))


async def test_first_failing_line_decides_error_under_input_locks(fake_store):
    placement = OrderPlacement(fake_store, lock_strategy=LockStrategy.INPUT)

    with pytest.raises(ProductNotFoundError):
        await placement.create_order(1, lines((999, 1), (1, 50)))


# ─── Validation happens before the store ─────────────────────────

@pytest.mark.parametrize(
    ("customer_id", "requested", "field"),
    [
        (0, [(1, 1)], "customer_id"),
        (1, [], "items"),
        (1, [(0, 1)], "items.0.product_id"),
        (1, [(1, 1), (2, -1)], "items.1.qty"),
        (2**63, [(1, 1)], "customer_id"),
        (1, [(2**63, 1)], "items.0.product_id"),
        (1, [(1, 2**31)], "items.0.qty"),
    ],
)
async def test_invalid_request_never_touches_store(
    placement, fake_store, customer_id, requested, field,
):
    with pytest.raises(InvalidRequestError) as exc_info:
        await placement.create_order(customer_id, lines(*requested))

    assert exc_info.value.field == field
    assert fake_store.units_opened == 0


# ─── Locking discipline ──────────────────────────────────────────

async def test_sorted_strategy_locks_ascending_before_lines(fake_store):
    placement = OrderPlacement(fake_store, lock_strategy=LockStrategy.SORTED)

    await placement.create_order(1, lines((2, 1), (1, 1), (2, 1)))

    assert [pid for _, pid in fake_store.lock_log] == [1, 2]


async def test_input_strategy_locks_in_line_order_once_per_product(fake_store):
    placement = OrderPlacement(fake_store, lock_strategy=LockStrategy.INPUT)

    await placement.create_order(1, lines((2, 1), (1, 1), (2, 1)))

    assert [pid for _, pid in fake_store.lock_log] == [2, 1]


async def test_locks_released_after_rollback(placement, fake_store):
    with pytest.raises(InsufficientStockError):
        await placement.create_order(1, lines((1, 2), (2, 50)))

    assert not fake_store.lock_for(1).locked()
    assert not fake_store.lock_for(2).locked()


# ─── Store failures ──────────────────────────────────────────────

async def test_lock_conflict_retried_then_succeeds(fake_store):
    fake_store.conflicts_to_raise = 2
    placement = OrderPlacement(fake_store, max_attempts=3, base_delay_ms=0)

    order = await placement.create_order(1, lines((1, 1)))

    assert fake_store.units_opened == 3
    assert order.lines[0].quantity == 1
    assert fake_store.stock_of(1) == 4


async def test_lock_conflict_surfaces_after_max_attempts(fake_store):
    fake_store.conflicts_to_raise = 5
    placement = OrderPlacement(fake_store, max_attempts=2, base_delay_ms=0)
    before = fake_store.state()

    with pytest.raises(StoreUnavailableError) as exc_info:
        await placement.create_order(1, lines((1, 1)))

    assert exc_info.value.reason == StoreUnavailableReason.CONFLICT
    assert exc_info.value.retryable is True
    assert fake_store.units_opened == 2
    assert fake_store.state() == before


async def test_commit_failure_not_retried_and_nothing_committed(fake_store):
    fake_store.fail_commit = True
    placement = OrderPlacement(fake_store, max_attempts=3, base_delay_ms=0)
    before = fake_store.state()

    with pytest.raises(StoreUnavailableError) as exc_info:
        await placement.create_order(1, lines((1, 1)))

    assert exc_info.value.reason == StoreUnavailableReason.CONNECTIVITY
    assert fake_store.units_opened == 1
    assert fake_store.state() == before


async def test_deadline_expiry_rolls_back(fake_store):
    """Another holder keeps P1 locked past the deadline."""
    placement = OrderPlacement(fake_store, timeout_seconds=0.05)
    blocker = fake_store.lock_for(1)
    await blocker.acquire()
    before = fake_store.state()
    try:
        with pytest.raises(StoreUnavailableError) as exc_info:
            await placement.create_order(1, lines((2, 1), (1, 1)))
    finally:
        blocker.release()

    assert exc_info.value.reason == StoreUnavailableReason.TIMEOUT
    assert exc_info.value.context.retry_after_ms == 50
    assert fake_store.state() == before
    assert not fake_store.lock_for(2).locked()


async def test_deadline_covers_all_conflict_retries(fake_store):
    fake_store.conflicts_to_raise = 100
    placement = OrderPlacement(
        fake_store, timeout_seconds=0.1, max_attempts=100, base_delay_ms=40,
    )
    loop = asyncio.get_running_loop()
    started = loop.time()

    with pytest.raises(StoreUnavailableError) as exc_info:
        await placement.create_order(1, lines((1, 1)))

    assert exc_info.value.reason == StoreUnavailableReason.TIMEOUT
    assert loop.time() - started < 0.5
    assert fake_store.units_opened < 100
    assert fake_store.stock_of(1) == 5


async def test_backoff_grows_with_attempts(fake_store):
    placement = OrderPlacement(fake_store, base_delay_ms=100)
    first = placement._backoff(0)
    third = placement._backoff(2)
    assert 75 <= first <= 125
    assert 300 <= third <= 500


async def test_store_stays_usable_after_timeout(fake_store):
    placement = OrderPlacement(fake_store, timeout_seconds=0.05)
    blocker = fake_store.lock_for(1)
    await blocker.acquire()
    with pytest.raises(StoreUnavailableError):
        await placement.create_order(1, lines((1, 1)))
    blocker.release()
    await asyncio.sleep(0)

    order = await placement.create_order(1, lines((1, 1)))

    assert order.lines[0].quantity == 1
    assert fake_store.stock_of(1) == 4
