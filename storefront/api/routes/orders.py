"""Order Routes — create orders through the reservation service, list the ledger.

Invariants:
    - POST /orders goes through OrderPlacement only; routes never write orders
    - Failure kinds map to HTTP via StorefrontError.http_status
      (400 invalid, 404 not found, 409 insufficient stock, 503 retryable)

Design Decisions:
    - get_order_placement is a dependency so tests can swap the store client
"""

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from storefront.config import get_settings
from storefront.infrastructure.database import get_db, get_db_manager
from storefront.infrastructure.order_ledger import SqlOrderLedger
from storefront.infrastructure.order_store import SqlOrderStore
from storefront.schemas.order import OrderCreate, OrderResponse
from storefront.services.place_order import OrderPlacement

router = APIRouter(prefix="/orders", tags=["orders"])


def get_order_placement() -> OrderPlacement:
    """FastAPI dependency — reservation service over the shared pool."""
    settings = get_settings()
    return OrderPlacement(
        SqlOrderStore(get_db_manager()),
        timeout_seconds=settings.order_timeout_seconds,
        max_attempts=settings.order_max_attempts,
        base_delay_ms=settings.order_retry_base_delay_ms,
        lock_strategy=settings.lock_strategy,
    )


@router.get("", response_model=list[OrderResponse])
async def list_orders(db: AsyncSession = Depends(get_db)):
    orders = await SqlOrderLedger(db).list_orders()
    return [OrderResponse.from_model(o) for o in orders]


@router.post(
    "", response_model=OrderResponse,
    status_code=status.HTTP_201_CREATED,
)
async def create_order(
    body: OrderCreate,
    placement: OrderPlacement = Depends(get_order_placement),
):
    """Create an order; all lines commit together or none do."""
    order = await placement.create_order(body.customer_id, body.to_lines())
    return OrderResponse.from_placed(order)
