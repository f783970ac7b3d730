"""Order ORM — append-only ledger of committed orders and their priced lines.

Invariants:
    - Order.customer_id points to an existing customer (FK)
    - OrderItem.qty > 0
    - OrderItem.price_each is a snapshot of the product price at sale time,
      never joined back to products.price
    - Rows are inserted once and never updated or deleted by the application

Design Decisions:
    - Table name order_items kept for compatibility with existing databases
    - items ordered by id: insertion order equals the caller's line order
"""

from datetime import datetime, timezone
from decimal import Decimal

from sqlalchemy import CheckConstraint, DateTime, ForeignKey, Integer, Numeric
from sqlalchemy.orm import Mapped, mapped_column, relationship

from storefront.db.base import Base, BigIntId


class Order(Base):
    """Order header."""
    __tablename__ = "orders"

    id: Mapped[int] = mapped_column(BigIntId, primary_key=True, autoincrement=True)
    customer_id: Mapped[int] = mapped_column(
        BigIntId, ForeignKey("customers.id"), nullable=False,
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )

    items: Mapped[list["OrderItem"]] = relationship(
        "OrderItem", back_populates="order",
        order_by="OrderItem.id", lazy="selectin",
    )


class OrderItem(Base):
    """One priced line of an order."""
    __tablename__ = "order_items"
    __table_args__ = (
        CheckConstraint("qty > 0", name="order_items_qty_positive"),
    )

    id: Mapped[int] = mapped_column(BigIntId, primary_key=True, autoincrement=True)
    order_id: Mapped[int] = mapped_column(
        BigIntId, ForeignKey("orders.id"), nullable=False, index=True,
    )
    product_id: Mapped[int] = mapped_column(
        BigIntId, ForeignKey("products.id"), nullable=False,
    )
    qty: Mapped[int] = mapped_column(Integer, nullable=False)
    price_each: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False)

    order: Mapped["Order"] = relationship("Order", back_populates="items")
