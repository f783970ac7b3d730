"""Order Schemas — order creation request and order/line responses.

Invariants:
    - OrderCreate converts to core LineRequest values in caller order
    - Responses keep the field names of existing clients (items, qty, price_each)
"""

from datetime import datetime
from decimal import Decimal

from pydantic import BaseModel

from storefront.core.domain_types import LineRequest, PlacedOrder, ProductId
from storefront.schemas.fields import Quantity, RowId
from storefront.models.order import Order


class OrderItemIn(BaseModel):
    product_id: RowId
    qty: Quantity


class OrderCreate(BaseModel):
    customer_id: RowId
    items: list[OrderItemIn] = []

    def to_lines(self) -> list[LineRequest]:
        return [
            LineRequest(product_id=ProductId(item.product_id), quantity=item.qty)
            for item in self.items
        ]


class OrderItemResponse(BaseModel):
    id: int
    order_id: int
    product_id: int
    qty: int
    price_each: Decimal


class OrderResponse(BaseModel):
    id: int
    customer_id: int
    created_at: datetime
    items: list[OrderItemResponse]
    total: Decimal

    @classmethod
    def from_placed(cls, order: PlacedOrder) -> "OrderResponse":
        return cls(
            id=order.id,
            customer_id=order.customer_id,
            created_at=order.created_at,
            items=[
                OrderItemResponse(
                    id=line.id, order_id=order.id, product_id=line.product_id,
                    qty=line.quantity, price_each=line.price_each,
                )
                for line in order.lines
            ],
            total=order.total,
        )

    @classmethod
    def from_model(cls, order: Order) -> "OrderResponse":
        items = [
            OrderItemResponse(
                id=item.id, order_id=item.order_id, product_id=item.product_id,
                qty=item.qty, price_each=item.price_each,
            )
            for item in order.items
        ]
        return cls(
            id=order.id,
            customer_id=order.customer_id,
            created_at=order.created_at,
            items=items,
            total=sum(
                (i.price_each * i.qty for i in items), Decimal("0"),
            ),
        )
