"""Database Session Manager — async connection pool, scoped transactions, health checks.

Invariants:
    - Every session auto-rolls-back on exception (no partial commits leak)
    - transaction() commits only when its block exits cleanly; any other exit
      (error, cancellation, timeout) rolls back
    - All SQLAlchemy/driver exceptions surface as StoreUnavailableError
    - Connection pool uses pool_pre_ping for stale connection detection

Design Decisions:
    - Singleton db_manager initialized on startup: FastAPI lifespan manages lifecycle
    - expire_on_commit=False: returned ORM objects stay readable after commit
    - SQLSTATE drives the conflict/timeout classification (PostgreSQL codes)
"""

import logging
from contextlib import asynccontextmanager
from typing import AsyncGenerator

from sqlalchemy import text
from sqlalchemy.exc import (
    DBAPIError, IntegrityError, OperationalError, SQLAlchemyError,
)
from sqlalchemy.ext.asyncio import (
    AsyncSession, async_sessionmaker, create_async_engine,
)

from storefront.core.errors import StoreUnavailableError, StoreUnavailableReason

logger = logging.getLogger(__name__)

# deadlock_detected, serialization_failure, lock_not_available
_CONFLICT_SQLSTATES = frozenset({"40P01", "40001", "55P03"})
# query_canceled (statement_timeout / lock_timeout expiry)
_TIMEOUT_SQLSTATES = frozenset({"57014"})


def _sqlstate(exc: DBAPIError) -> str | None:
    orig = exc.orig
    return getattr(orig, "sqlstate", None) or getattr(orig, "pgcode", None)


def map_db_error(exc: Exception) -> StoreUnavailableError:
    """Translate a store failure into the retryable StoreUnavailableError."""
    if isinstance(exc, IntegrityError):
        return StoreUnavailableError(
            "Integrity constraint violated", StoreUnavailableReason.INTEGRITY,
        )
    if isinstance(exc, DBAPIError):
        code = _sqlstate(exc)
        if code in _CONFLICT_SQLSTATES:
            return StoreUnavailableError(
                "Lock conflict, transaction rolled back",
                StoreUnavailableReason.CONFLICT,
            )
        if code in _TIMEOUT_SQLSTATES:
            return StoreUnavailableError(
                "Statement timed out", StoreUnavailableReason.TIMEOUT,
            )
        if isinstance(exc, OperationalError):
            return StoreUnavailableError(
                "Connection or operational error",
                StoreUnavailableReason.CONNECTIVITY,
            )
        return StoreUnavailableError(
            "Database driver error", StoreUnavailableReason.CONNECTIVITY,
        )
    if isinstance(exc, SQLAlchemyError):
        return StoreUnavailableError(
            "Database operation failed", StoreUnavailableReason.CONNECTIVITY,
        )
    return StoreUnavailableError(
        f"Database unreachable: {exc.__class__.__name__}",
        StoreUnavailableReason.CONNECTIVITY,
    )


class DatabaseSessionManager:
    """Manages async database sessions with pooling, rollback, and health checks."""

    def __init__(
        self,
        database_url: str,
        pool_size: int = 10,
        max_overflow: int = 5,
        pool_recycle: int = 1800,
    ):
        engine_kwargs: dict = {"pool_pre_ping": True}
        if not database_url.startswith("sqlite"):
            engine_kwargs.update(
                pool_size=pool_size,
                max_overflow=max_overflow,
                pool_recycle=pool_recycle,
            )
        self.engine = create_async_engine(database_url, **engine_kwargs)
        self._session_factory = async_sessionmaker(
            self.engine,
            class_=AsyncSession,
            expire_on_commit=False,
        )

    @asynccontextmanager
    async def session(self) -> AsyncGenerator[AsyncSession, None]:
        """Provide session with auto-rollback on exception."""
        session = self._session_factory()
        try:
            yield session
        except (SQLAlchemyError, OSError) as e:
            await session.rollback()
            logger.error(f"DB error: {e}")
            raise map_db_error(e) from e
        finally:
            await session.close()

    @asynccontextmanager
    async def transaction(self) -> AsyncGenerator[AsyncSession, None]:
        """One unit of work: commit on clean exit, roll back on every other path."""
        session = self._session_factory()
        try:
            async with session.begin():
                yield session
        except (SQLAlchemyError, OSError) as e:
            logger.warning(f"Transaction rolled back: {e}")
            raise map_db_error(e) from e
        finally:
            await session.close()

    async def health_check(self) -> bool:
        """Check database connectivity (for readiness probes)."""
        try:
            async with self.session() as db:
                await db.execute(text("SELECT 1"))
            return True
        except StoreUnavailableError as e:
            logger.error(f"DB health check failed: {e}")
            return False

    async def dispose(self) -> None:
        await self.engine.dispose()


# Singleton (initialized on startup)
db_manager: DatabaseSessionManager | None = None


def init_db(database_url: str, **kwargs) -> DatabaseSessionManager:
    global db_manager
    db_manager = DatabaseSessionManager(database_url, **kwargs)
    return db_manager


def get_db_manager() -> DatabaseSessionManager:
    if not db_manager:
        raise RuntimeError("Database not initialized")
    return db_manager


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """FastAPI dependency for database sessions."""
    async with get_db_manager().session() as session:
        yield session
