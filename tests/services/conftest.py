"""Service test fixtures — async SQLite DB, FastAPI test client, in-memory store.

Invariants:
    - Every test gets a fresh in-memory SQLite database
    - get_db dependency overridden to use the test session factory
    - db_manager patched so the order route's store client hits the test DB
    - fake_store gives concurrency tests real per-product locks

Design Decisions:
    - SQLite in-memory: fast, no external dependency; FOR UPDATE is a no-op there,
      so lock behaviour is exercised with fake_store (and PostgreSQL when configured)
"""

from decimal import Decimal

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import (
    AsyncSession, async_sessionmaker, create_async_engine,
)

import storefront.infrastructure.database as db_module
from storefront.db.base import Base
from storefront.infrastructure.database import DatabaseSessionManager, get_db
from storefront.infrastructure.order_store import SqlOrderStore
from storefront.main import app
from storefront.models.customer import Customer
from storefront.models.product import Product
from storefront.services.place_order import OrderPlacement
from tests.services.fake_store import InMemoryOrderStore


@pytest.fixture
async def test_engine():
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:", echo=False,
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    await engine.dispose()


@pytest.fixture
async def test_session_factory(test_engine):
    return async_sessionmaker(
        test_engine, class_=AsyncSession, expire_on_commit=False,
    )


@pytest.fixture
async def test_db(test_session_factory):
    async with test_session_factory() as session:
        yield session


@pytest.fixture
def test_manager(test_engine, test_session_factory):
    """DatabaseSessionManager bound to the test engine."""
    manager = DatabaseSessionManager.__new__(DatabaseSessionManager)
    manager.engine = test_engine
    manager._session_factory = test_session_factory
    return manager


@pytest.fixture
def sql_placement(test_manager):
    return OrderPlacement(SqlOrderStore(test_manager), timeout_seconds=5.0)


@pytest.fixture
async def client(test_session_factory, test_manager):
    """FastAPI test client with DB dependency overridden."""
    async def override_get_db():
        async with test_session_factory() as session:
            yield session

    app.dependency_overrides[get_db] = override_get_db

    original_manager = db_module.db_manager
    db_module.db_manager = test_manager

    async with AsyncClient(
        transport=ASGITransport(app=app), base_url="http://test",
    ) as c:
        yield c

    app.dependency_overrides.clear()
    db_module.db_manager = original_manager


@pytest.fixture
async def seed_catalog(test_db):
    """Customer C1 and product P1 (stock 5, price 10.00)."""
    customer = Customer(name="Ada", phone="555-0100")
    product = Product(name="Widget", price=Decimal("10.00"), stock=5)
    test_db.add_all([customer, product])
    await test_db.commit()
    return {"customer_id": customer.id, "product_id": product.id}


@pytest.fixture
def fake_store():
    """C1 exists; P1 has stock 5 at 10.00; P2 has stock 10 at 2.50."""
    store = InMemoryOrderStore()
    store.add_customer(1)
    store.add_product(1, "10.00", 5)
    store.add_product(2, "2.50", 10)
    return store


@pytest.fixture
def placement(fake_store):
    return OrderPlacement(fake_store, timeout_seconds=1.0, base_delay_ms=0)
