"""Product ORM — catalog record whose stock is consumed by orders.

Invariants:
    - stock >= 0 and price >= 0 (CHECK constraints back the application checks)
    - price is Numeric(12, 2): never a float
    - created_at is set once on insert
"""

from datetime import datetime, timezone
from decimal import Decimal

from sqlalchemy import CheckConstraint, DateTime, Integer, Numeric, String
from sqlalchemy.orm import Mapped, mapped_column

from storefront.db.base import Base, BigIntId


class Product(Base):
    """Product with live unit price and available stock."""
    __tablename__ = "products"
    __table_args__ = (
        CheckConstraint("stock >= 0", name="products_stock_non_negative"),
        CheckConstraint("price >= 0", name="products_price_non_negative"),
    )

    id: Mapped[int] = mapped_column(BigIntId, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(200), nullable=False)
    price: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False)
    stock: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )
