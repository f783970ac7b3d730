"""Customer Routes — list and create customers."""

import logging

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from storefront.infrastructure.catalog_store import SqlCatalogStore
from storefront.infrastructure.database import get_db
from storefront.schemas.catalog import CustomerCreate, CustomerResponse

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/customers", tags=["customers"])


@router.get("", response_model=list[CustomerResponse])
async def list_customers(db: AsyncSession = Depends(get_db)):
    return await SqlCatalogStore(db).list_customers()


@router.post(
    "", response_model=CustomerResponse,
    status_code=status.HTTP_201_CREATED,
)
async def create_customer(
    body: CustomerCreate, db: AsyncSession = Depends(get_db),
):
    customer = await SqlCatalogStore(db).create_customer(body.name, body.phone)
    await db.commit()
    logger.info("Customer created", extra={"customer_id": customer.id})
    return customer
