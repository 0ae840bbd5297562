"""Alembic environment configuration for the tenant registry.

Supports both **online** (connected) and **offline** (SQL-generation) modes.
The database URL is built from ``DatabaseSettings`` so migrations read the
same ``PROVISIONER_DB_*`` environment as the workers, unless
``ALEMBIC_DATABASE_URL`` overrides it.

Online migrations run through the asyncpg engine via ``run_sync``.
"""

from __future__ import annotations

import asyncio
import os
from logging.config import fileConfig

from alembic import context
from sqlalchemy import pool
from sqlalchemy.engine import Connection
from sqlalchemy.ext.asyncio import async_engine_from_config

from infrastructure.database.engines import build_async_url
from infrastructure.database.models import Base
from infrastructure.settings import get_database_settings
from provisioning.infrastructure.models import TenantInfrastructureModel  # noqa: F401

config = context.config

if config.config_file_name is not None:
    fileConfig(config.config_file_name)

# Target metadata for autogenerate support.
target_metadata = Base.metadata


def _get_database_url() -> str:
    """Resolve the database URL.

    Priority:
    1. ``ALEMBIC_DATABASE_URL`` environment variable.
    2. ``PROVISIONER_DB_*`` settings.
    """
    return os.environ.get("ALEMBIC_DATABASE_URL") or build_async_url(
        get_database_settings()
    )


def run_migrations_offline() -> None:
    """Run migrations in 'offline' mode.

    Calls to ``context.execute()`` emit the given string to the script output.
    """
    context.configure(
        url=_get_database_url(),
        target_metadata=target_metadata,
        literal_binds=True,
        dialect_opts={"paramstyle": "named"},
        compare_type=True,
    )

    with context.begin_transaction():
        context.run_migrations()


def _do_run_migrations(connection: Connection) -> None:
    context.configure(
        connection=connection,
        target_metadata=target_metadata,
        compare_type=True,
    )

    with context.begin_transaction():
        context.run_migrations()


async def run_migrations_online() -> None:
    """Run migrations in 'online' mode against a live database."""
    configuration = config.get_section(config.config_ini_section, {})
    configuration["sqlalchemy.url"] = _get_database_url()

    connectable = async_engine_from_config(
        configuration,
        prefix="sqlalchemy.",
        poolclass=pool.NullPool,
    )

    async with connectable.connect() as connection:
        await connection.run_sync(_do_run_migrations)

    await connectable.dispose()


if context.is_offline_mode():
    run_migrations_offline()
else:
    asyncio.run(run_migrations_online())
