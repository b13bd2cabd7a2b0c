"""Alembic environment — migrates the resource store schema with an async engine.

Design Decisions:
    - URL comes from Settings (QUARK_DATABASE_URL, postgres:// normalised to asyncpg);
      alembic.ini's sqlalchemy.url only applies while the setting keeps its default
    - NullPool: one connection for the migration run, nothing kept open afterwards
"""

import asyncio
from logging.config import fileConfig

from sqlalchemy import pool
from sqlalchemy.ext.asyncio import create_async_engine

from alembic import context

from quark_rest.config import Settings
from quark_rest.db.base import Base
from quark_rest.models.resource_record import ResourceRecord  # noqa: F401  registers the table

config = context.config
if config.config_file_name is not None:
    fileConfig(config.config_file_name)


def _database_url() -> str:
    url = Settings().database_url
    if url == Settings.model_fields["database_url"].default:
        return config.get_main_option("sqlalchemy.url") or url
    return url


def _configure(**kwargs) -> None:
    context.configure(target_metadata=Base.metadata, **kwargs)
    with context.begin_transaction():
        context.run_migrations()


async def _migrate_online() -> None:
    engine = create_async_engine(_database_url(), poolclass=pool.NullPool)
    async with engine.connect() as connection:
        await connection.run_sync(lambda sync_conn: _configure(connection=sync_conn))
    await engine.dispose()


if context.is_offline_mode():
    _configure(
        url=_database_url(),
        literal_binds=True,
        dialect_opts={"paramstyle": "named"},
    )
else:
    asyncio.run(_migrate_online())
