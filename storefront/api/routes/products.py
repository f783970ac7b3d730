"""Product Routes — list, create, and patch stock of catalog products.

Invariants:
    - Body shape validated by Pydantic before reaching the handler
    - PATCH /products/{id}/stock overwrites one row; it takes no part in
      order reservations and touches no other table
"""

import logging

from typing import Annotated

from fastapi import APIRouter, Depends, Path, status
from sqlalchemy.ext.asyncio import AsyncSession

from storefront.core.domain_types import MAX_ID, ProductId
from storefront.core.errors import (
    ErrorContext, InvalidRequestError, ProductNotFoundError,
)
from storefront.core.validate_order import check_stock_value
from storefront.infrastructure.catalog_store import SqlCatalogStore
from storefront.infrastructure.database import get_db
from storefront.schemas.catalog import ProductCreate, ProductResponse, StockUpdate

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/products", tags=["products"])


@router.get("", response_model=list[ProductResponse])
async def list_products(db: AsyncSession = Depends(get_db)):
    return await SqlCatalogStore(db).list_products()


@router.post(
    "", response_model=ProductResponse,
    status_code=status.HTTP_201_CREATED,
)
async def create_product(
    body: ProductCreate, db: AsyncSession = Depends(get_db),
):
    """Create a product with its initial price and stock."""
    product = await SqlCatalogStore(db).create_product(
        body.name, body.price, body.stock,
    )
    await db.commit()
    logger.info(f"Product '{product.name}' created", extra={"product_id": product.id})
    return product


@router.patch("/{product_id}/stock", response_model=ProductResponse)
async def update_stock(
    product_id: Annotated[int, Path(le=MAX_ID)],
    body: StockUpdate,
    db: AsyncSession = Depends(get_db),
):
    """Overwrite a product's stock with a non-negative value."""
    rejection = check_stock_value(body.stock)
    if rejection:
        raise InvalidRequestError(
            rejection.message, rejection.field,
            ErrorContext(product_id=product_id),
        )
    product = await SqlCatalogStore(db).set_product_stock(
        ProductId(product_id), body.stock,
    )
    if product is None:
        await db.rollback()
        raise ProductNotFoundError(product_id)
    await db.commit()
    return product
