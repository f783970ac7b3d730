"""ORM Models — SQLAlchemy declarative models for catalog and ledger tables.

Invariants:
    - All models inherit from Base (db/base.py)
    - Order is the aggregate root of the ledger; OrderItem rows belong to one order

Design Decisions:
    - One file per entity for locality
    - All models imported here so SQLAlchemy resolves string-based relationship()
      references before any query runs
"""

from storefront.models.product import Product  # noqa: F401
from storefront.models.customer import Customer  # noqa: F401
from storefront.models.order import Order, OrderItem  # noqa: F401
