"""Order Placement — the stock reservation transaction, sole writer of orders.

Invariants:
    - Requests are validated before any store access (InvalidRequestError)
    - Customer check, header insert, row locks, stock decrements and line
      inserts all run inside ONE unit of work; any failure rolls all of it back
    - Price and stock are re-read under the row lock on every attempt (no caching)
    - Lines of the returned order follow the caller's input order
    - One deadline covers every attempt of a create_order call, backoff
      included; expiry rolls back and raises StoreUnavailableError(TIMEOUT)
    - Only lock conflicts (deadlock, serialization, lock timeout) are retried
      automatically; each retry starts a fresh unit of work

Design Decisions:
    - Store client injected at construction: tests pass an in-memory store
    - Lock order controlled by LockStrategy; error precedence is the same for both
    - Exponential backoff with ±25% jitter between conflict retries
"""

import asyncio
import logging
import random
from collections.abc import Sequence

from storefront.core.allocate_stock import allocate_line, lock_sequence
from storefront.core.domain_types import (
    CustomerId, LineRequest, LockStrategy, PlacedOrder, PlacedOrderLine,
    ProductId, ProductSnapshot,
)
from storefront.core.errors import (
    CustomerNotFoundError, ErrorContext, InsufficientStockError,
    InvalidRequestError, ProductNotFoundError, StoreUnavailableError,
    StoreUnavailableReason,
)
from storefront.core.repository_protocols import OrderStore
from storefront.core.validate_order import validate_order_request

logger = logging.getLogger(__name__)

_REJECTIONS = (CustomerNotFoundError, ProductNotFoundError, InsufficientStockError)


class OrderPlacement:
    """Creates orders atomically against an OrderStore."""

    def __init__(
        self,
        store: OrderStore,
        timeout_seconds: float = 10.0,
        max_attempts: int = 3,
        base_delay_ms: int = 50,
        lock_strategy: LockStrategy = LockStrategy.SORTED,
    ):
        self.store = store
        self.timeout_seconds = timeout_seconds
        self.max_attempts = max(1, max_attempts)
        self.base_delay_ms = base_delay_ms
        self.lock_strategy = lock_strategy

    async def create_order(
        self, customer_id: int, lines: Sequence[LineRequest],
    ) -> PlacedOrder:
        """Validate, then reserve stock and record the order in one unit of work."""
        rejection = validate_order_request(customer_id, lines)
        if rejection:
            raise InvalidRequestError(
                rejection.message, rejection.field,
                ErrorContext(customer_id=customer_id),
            )

        loop = asyncio.get_running_loop()
        deadline = loop.time() + self.timeout_seconds
        attempt = 0
        while True:
            try:
                order = await self._reserve_with_deadline(
                    CustomerId(customer_id), lines, deadline - loop.time(),
                )
            except _REJECTIONS as e:
                e.context.customer_id = customer_id
                logger.info(
                    f"Order rejected: {e.message}",
                    extra={"customer_id": customer_id, "error_code": e.code},
                )
                raise
            except StoreUnavailableError as e:
                e.context.customer_id = customer_id
                if not self._should_retry(e, attempt):
                    logger.error(
                        f"Order not committed: {e.message}",
                        extra={
                            "customer_id": customer_id,
                            "error_code": e.code,
                            "attempt": attempt + 1,
                        },
                    )
                    raise
                delay = self._backoff(attempt)
                logger.warning(
                    f"Lock conflict, retrying in {delay}ms",
                    extra={"customer_id": customer_id, "attempt": attempt + 1},
                )
                remaining = max(deadline - loop.time(), 0)
                await asyncio.sleep(min(delay / 1000, remaining))
                attempt += 1
                continue

            logger.info(
                f"Order placed with {len(order.lines)} line(s)",
                extra={
                    "order_id": order.id,
                    "customer_id": customer_id,
                    "line_count": len(order.lines),
                },
            )
            return order

    async def _reserve_with_deadline(
        self,
        customer_id: CustomerId,
        lines: Sequence[LineRequest],
        remaining: float,
    ) -> PlacedOrder:
        if remaining <= 0:
            raise self._deadline_exceeded(customer_id)
        try:
            return await asyncio.wait_for(
                self._reserve(customer_id, lines), remaining,
            )
        except asyncio.TimeoutError as e:
            raise self._deadline_exceeded(customer_id) from e

    def _deadline_exceeded(self, customer_id: CustomerId) -> StoreUnavailableError:
        return StoreUnavailableError(
            f"Order not committed within {self.timeout_seconds}s",
            StoreUnavailableReason.TIMEOUT,
            ErrorContext(
                customer_id=customer_id,
                retry_after_ms=int(self.timeout_seconds * 1000),
            ),
        )

    async def _reserve(
        self, customer_id: CustomerId, lines: Sequence[LineRequest],
    ) -> PlacedOrder:
        async with self.store.unit_of_work() as uow:
            if not await uow.catalog.customer_exists(customer_id):
                raise CustomerNotFoundError(customer_id)

            header = await uow.ledger.create_order_header(customer_id)

            snapshots: dict[ProductId, ProductSnapshot | None] = {}
            for product_id in lock_sequence(lines, self.lock_strategy):
                snapshots[product_id] = (
                    await uow.catalog.lock_and_read_product(product_id)
                )

            consumed: dict[ProductId, int] = {}
            placed: list[PlacedOrderLine] = []
            for line in lines:
                if line.product_id not in snapshots:
                    snapshots[line.product_id] = (
                        await uow.catalog.lock_and_read_product(line.product_id)
                    )
                allocation = allocate_line(
                    line, snapshots[line.product_id], consumed,
                )
                if not await uow.catalog.decrement_product_stock(
                    allocation.product_id, allocation.quantity,
                ):
                    raise ProductNotFoundError(allocation.product_id)
                consumed[allocation.product_id] = (
                    consumed.get(allocation.product_id, 0) + allocation.quantity
                )
                line_id = await uow.ledger.append_order_line(
                    header.order_id, allocation.product_id,
                    allocation.quantity, allocation.price_each,
                )
                placed.append(PlacedOrderLine(
                    id=line_id,
                    product_id=allocation.product_id,
                    quantity=allocation.quantity,
                    price_each=allocation.price_each,
                ))

        return PlacedOrder(
            id=header.order_id,
            customer_id=customer_id,
            created_at=header.created_at,
            lines=tuple(placed),
        )

    def _should_retry(self, error: StoreUnavailableError, attempt: int) -> bool:
        return (
            error.reason == StoreUnavailableReason.CONFLICT
            and attempt + 1 < self.max_attempts
        )

    def _backoff(self, attempt: int) -> int:
        """Exponential backoff with ±25% jitter."""
        delay = (2 ** attempt) * self.base_delay_ms
        return int(delay * random.uniform(0.75, 1.25))  # nosec B311
