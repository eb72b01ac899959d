# alembic/env.py
# Runs migrations through the same async engine the app uses

import asyncio
from logging.config import fileConfig

from alembic import context

from memelinks.config import get_settings
from memelinks.db.base import create_engine_from_url, metadata
from memelinks.models import links_table  # noqa: F401  (registers the table)

config = context.config

if config.config_file_name is not None:
    fileConfig(config.config_file_name)

target_metadata = metadata


def _database_url() -> str:
    # sqlalchemy.url from alembic.ini or the caller wins; otherwise DB_URL
    return config.get_main_option("sqlalchemy.url") or get_settings().DB_URL


def run_migrations_offline() -> None:
    context.configure(
        url=_database_url(),
        target_metadata=target_metadata,
        literal_binds=True,
        dialect_opts={"paramstyle": "named"},
    )
    with context.begin_transaction():
        context.run_migrations()


def _run_sync_migrations(connection) -> None:
    context.configure(connection=connection, target_metadata=target_metadata)
    with context.begin_transaction():
        context.run_migrations()


async def run_migrations_online() -> None:
    engine = create_engine_from_url(_database_url())
    async with engine.connect() as connection:
        await connection.run_sync(_run_sync_migrations)
    await engine.dispose()


if context.is_offline_mode():
    run_migrations_offline()
else:
    asyncio.run(run_migrations_online())
