"""SQL Order Store — store client that opens one unit of work per reservation.

Invariants:
    - catalog and ledger of a unit of work share one session and one transaction
    - Commit happens only when the unit-of-work block exits cleanly
"""

from contextlib import asynccontextmanager
from dataclasses import dataclass
from typing import AsyncGenerator

from storefront.infrastructure.catalog_store import SqlCatalogStore
from storefront.infrastructure.database import DatabaseSessionManager
from storefront.infrastructure.order_ledger import SqlOrderLedger


@dataclass
class SqlUnitOfWork:
    catalog: SqlCatalogStore
    ledger: SqlOrderLedger


class SqlOrderStore:
    """OrderStore backed by a DatabaseSessionManager."""

    def __init__(self, manager: DatabaseSessionManager):
        self.manager = manager

    @asynccontextmanager
    async def unit_of_work(self) -> AsyncGenerator[SqlUnitOfWork, None]:
        async with self.manager.transaction() as db:
            yield SqlUnitOfWork(
                catalog=SqlCatalogStore(db), ledger=SqlOrderLedger(db),
            )
