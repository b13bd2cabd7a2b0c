"""Database Session Manager — the async engine and sessions behind the resource store.

Invariants:
    - A session that raises rolls back before the error leaves session()
    - SQLAlchemy failures leave session() as StoreError, chained to the driver error
    - Postgres pools use pool_pre_ping, so stale connections are replaced

Design Decisions:
    - Module-level db_manager set by init_db(): run() builds it, readiness probe reads it
    - expire_on_commit=False: records stay readable after the precondition commit
    - SQLite URLs skip pool sizing (aiosqlite has no QueuePool)
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

from quark_rest.core.errors import StoreError

logger = logging.getLogger(__name__)

# Most specific first: IntegrityError/OperationalError are DBAPIError subclasses
_STORE_FAILURES: list[tuple[type[SQLAlchemyError], str, str]] = [
    (IntegrityError, "integrity constraint violated", "commit"),
    (OperationalError, "connection or operational error", "execute"),
    (DBAPIError, "database driver error", "query"),
    (SQLAlchemyError, "database operation failed", "session"),
]


def _store_error(e: SQLAlchemyError) -> StoreError:
    for exc_type, message, operation in _STORE_FAILURES:
        if isinstance(e, exc_type):
            return StoreError(message, operation)
    return StoreError(str(e), "session")


class DatabaseSessionManager:
    def __init__(
        self, database_url: str, pool_size: int = 20, max_overflow: int = 10,
    ):
        engine_kwargs = {}
        if not database_url.startswith("sqlite"):
            engine_kwargs.update(
                pool_size=pool_size,
                max_overflow=max_overflow,
                pool_pre_ping=True,
                pool_recycle=3600,
            )
        self.engine = create_async_engine(database_url, **engine_kwargs)
        self._session_factory = async_sessionmaker(
            self.engine, class_=AsyncSession, expire_on_commit=False,
        )

    @asynccontextmanager
    async def session(self) -> AsyncGenerator[AsyncSession, None]:
        """Session with rollback + StoreError mapping on SQLAlchemy failures."""
        session = self._session_factory()
        try:
            yield session
        except SQLAlchemyError as e:
            await session.rollback()
            logger.error(f"Resource store session failed: {e}", extra={"error_code": "STORE_ERROR"})
            raise _store_error(e) from e
        finally:
            await session.close()

    async def health_check(self) -> bool:
        """Readiness: can the store answer SELECT 1."""
        try:
            async with self.session() as db:
                await db.execute(text("SELECT 1"))
        except (StoreError, OSError) as e:
            logger.error(f"Resource store health check failed: {e}")
            return False
        return True

    async def dispose(self) -> None:
        await self.engine.dispose()


db_manager: DatabaseSessionManager | None = None


def init_db(database_url: str, **kwargs) -> DatabaseSessionManager:
    global db_manager
    db_manager = DatabaseSessionManager(database_url, **kwargs)
    return db_manager
