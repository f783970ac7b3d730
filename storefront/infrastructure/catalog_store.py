"""SQL Catalog Store — products and customers over an AsyncSession.

Invariants:
    - lock_and_read_product issues SELECT ... FOR UPDATE: the row stays locked
      until the caller's transaction ends
    - decrement_product_stock is a single relative UPDATE (stock = stock - n)
    - Methods never commit; the owner of the session decides the transaction scope
"""

import logging
from decimal import Decimal

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from storefront.core.domain_types import CustomerId, ProductId, ProductSnapshot
from storefront.models.customer import Customer
from storefront.models.product import Product

logger = logging.getLogger(__name__)


class SqlCatalogStore:
    """Catalog persistence bound to one session."""

    def __init__(self, db: AsyncSession):
        self.db = db

    # ─── Reservation primitives ─────────────────────────────────

    async def customer_exists(self, customer_id: CustomerId) -> bool:
        result = await self.db.execute(
            select(Customer.id).where(Customer.id == customer_id),
        )
        return result.scalar_one_or_none() is not None

    async def lock_and_read_product(
        self, product_id: ProductId,
    ) -> ProductSnapshot | None:
        result = await self.db.execute(
            select(Product.price, Product.stock)
            .where(Product.id == product_id)
            .with_for_update(),
        )
        row = result.one_or_none()
        if row is None:
            return None
        return ProductSnapshot(
            product_id=product_id, price=Decimal(row.price), stock=row.stock,
        )

    async def decrement_product_stock(
        self, product_id: ProductId, quantity: int,
    ) -> bool:
        result = await self.db.execute(
            update(Product)
            .where(Product.id == product_id)
            .values(stock=Product.stock - quantity)
            .execution_options(synchronize_session=False),
        )
        return result.rowcount == 1

    # ─── Catalog operations ─────────────────────────────────────

    async def create_product(
        self, name: str, price: Decimal, stock: int,
    ) -> Product:
        product = Product(name=name, price=price, stock=stock)
        self.db.add(product)
        await self.db.flush()
        return product

    async def list_products(self) -> list[Product]:
        result = await self.db.execute(select(Product).order_by(Product.id))
        return list(result.scalars().all())

    async def get_product(self, product_id: ProductId) -> Product | None:
        return await self.db.get(Product, product_id)

    async def set_product_stock(
        self, product_id: ProductId, stock: int,
    ) -> Product | None:
        """Overwrite one product's stock. Returns None if it does not exist."""
        result = await self.db.execute(
            update(Product)
            .where(Product.id == product_id)
            .values(stock=stock)
            .execution_options(synchronize_session=False),
        )
        if result.rowcount != 1:
            return None
        product = await self.db.get(Product, product_id, populate_existing=True)
        logger.info(
            f"Stock set to {stock}", extra={"product_id": product_id},
        )
        return product

    async def create_customer(self, name: str, phone: str = "") -> Customer:
        customer = Customer(name=name, phone=phone)
        self.db.add(customer)
        await self.db.flush()
        return customer

    async def list_customers(self) -> list[Customer]:
        result = await self.db.execute(select(Customer).order_by(Customer.id))
        return list(result.scalars().all())
