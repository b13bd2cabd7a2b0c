"""Root conftest — shared fixtures: codec, in-memory SQLite resource store.

Invariants:
    - Every test gets a fresh in-memory SQLite database
    - db_manager swapped for the test manager so readiness probes see it

Design Decisions:
    - SQLite in-memory via aiosqlite: fast, no external dependency; the count
      queries use only portable SQL + JSON indexing
    - StaticPool: one shared connection, otherwise each session sees its own
      empty :memory: database
"""

import os

# Ensure tests never reach a real database
os.environ.setdefault("QUARK_DATABASE_URL", "sqlite+aiosqlite:///:memory:")

import pytest
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

import quark_rest.infrastructure.database as db_module
from quark_rest.core.endpoint import EndPoint
from quark_rest.db.base import Base
from quark_rest.infrastructure.database import DatabaseSessionManager
from quark_rest.infrastructure.resource_store import SqlResourceStore
from quark_rest.models.resource_record import ResourceRecord
from quark_rest.services.wire_codec import RestProtocol
from tests.fakes import Host, Zone


@pytest.fixture
def endpoint():
    return EndPoint(name="dns", host="dns.test", port=8080)


@pytest.fixture
def protocol(endpoint):
    return RestProtocol([Host, Zone], endpoint)


@pytest.fixture
async def test_engine():
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:", echo=False, poolclass=StaticPool,
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    await engine.dispose()


@pytest.fixture
async def test_manager(test_engine):
    manager = DatabaseSessionManager.__new__(DatabaseSessionManager)
    manager.engine = test_engine
    manager._session_factory = async_sessionmaker(
        test_engine, class_=AsyncSession, expire_on_commit=False,
    )
    original = db_module.db_manager
    db_module.db_manager = manager
    yield manager
    db_module.db_manager = original


@pytest.fixture
async def sql_store(test_manager):
    return SqlResourceStore(test_manager)


@pytest.fixture
async def seed_hosts(test_manager):
    """Insert Host 1 (web1) and Host 2 (web2), plus zone z1."""
    async with test_manager.session() as db:
        db.add_all([
            ResourceRecord(resource_type="Host", id="1", attrs={"name": "web1", "ip": "10.0.0.1"}),
            ResourceRecord(resource_type="Host", id="2", attrs={"name": "web2", "ip": ""}),
            ResourceRecord(resource_type="zone", id="z1", attrs={"ttl": 60}),
        ])
        await db.commit()
