"""SQL Resource Store — ResourceStore backed by the `resources` table.

Invariants:
    - begin() yields a transaction and commits it on exit, whatever happened inside
    - count() filters by resource_type plus every filter key
      ("id" hits the key column, other keys are matched against attrs as strings)
    - SQLAlchemy failures surface as StoreError with the failing operation

Design Decisions:
    - Only the existence-count surface lives here: inserts/updates/deletes are
      the business handlers' job, through whatever session they choose
"""

import logging
from contextlib import asynccontextmanager
from typing import Any, AsyncGenerator

from sqlalchemy import func, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from quark_rest.config import Settings
from quark_rest.core.errors import StoreError
from quark_rest.core.resource import Resource
from quark_rest.infrastructure.database import DatabaseSessionManager, init_db
from quark_rest.models.resource_record import ResourceRecord

logger = logging.getLogger(__name__)


class SqlStoreTransaction:
    def __init__(self, session: AsyncSession):
        self.session = session

    async def count(self, resource_type: str, filter: dict[str, Any]) -> int:
        query = (
            select(func.count())
            .select_from(ResourceRecord)
            .where(ResourceRecord.resource_type == resource_type)
        )
        for key, value in filter.items():
            if key == "id":
                query = query.where(ResourceRecord.id == str(value))
            else:
                query = query.where(ResourceRecord.attrs[key].as_string() == str(value))
        try:
            result = await self.session.execute(query)
        except SQLAlchemyError as e:
            raise StoreError(str(e), "count") from e
        return result.scalar_one()

    async def commit(self) -> None:
        try:
            await self.session.commit()
        except SQLAlchemyError as e:
            raise StoreError(str(e), "commit") from e


class SqlResourceStore:
    """Hands out one session-scoped transaction per begin()."""

    def __init__(self, manager: DatabaseSessionManager):
        self.manager = manager

    @asynccontextmanager
    async def begin(self) -> AsyncGenerator[SqlStoreTransaction, None]:
        async with self.manager.session() as session:
            tx = SqlStoreTransaction(session)
            try:
                yield tx
            finally:
                await tx.commit()


def store_for_resources(
    resources: list[type[Resource]], settings: Settings,
) -> SqlResourceStore:
    manager = init_db(
        settings.database_url,
        pool_size=settings.database_pool_size,
        max_overflow=settings.database_max_overflow,
    )
    logger.info(
        f"Resource store ready for {sorted(r.resource_type for r in resources)}",
    )
    return SqlResourceStore(manager)
