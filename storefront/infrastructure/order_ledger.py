"""SQL Order Ledger — append-only writes of order headers and priced lines.

Invariants:
    - Rows are only inserted; nothing here updates or deletes
    - flush() after each insert so database-assigned ids are available
      inside the open transaction
"""

from decimal import Decimal

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from storefront.core.domain_types import (
    CustomerId, OrderHeader, OrderId, OrderLineId, ProductId,
)
from storefront.models.order import Order, OrderItem


class SqlOrderLedger:
    """Order persistence bound to one session."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def create_order_header(self, customer_id: CustomerId) -> OrderHeader:
        order = Order(customer_id=customer_id)
        self.db.add(order)
        await self.db.flush()
        return OrderHeader(order_id=OrderId(order.id), created_at=order.created_at)

    async def append_order_line(
        self,
        order_id: OrderId,
        product_id: ProductId,
        quantity: int,
        price_each: Decimal,
    ) -> OrderLineId:
        item = OrderItem(
            order_id=order_id, product_id=product_id,
            qty=quantity, price_each=price_each,
        )
        self.db.add(item)
        await self.db.flush()
        return OrderLineId(item.id)

    async def list_orders(self) -> list[Order]:
        """All orders by id, each with its items by id."""
        result = await self.db.execute(select(Order).order_by(Order.id))
        return list(result.scalars().all())
