"""Async SQLAlchemy engine for the tenant registry.

Every registry call is one short transaction, and a worker invocation makes
at most a handful of them, so the pool is small and never overflows.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from sqlalchemy.engine import URL
from sqlalchemy.ext.asyncio import AsyncEngine, create_async_engine

if TYPE_CHECKING:
    from infrastructure.settings import DatabaseSettings

__all__ = [
    "create_registry_engine",
    "build_async_url",
]

REGISTRY_APPLICATION_NAME = "tenant-infra-provisioner"


def create_registry_engine(settings: DatabaseSettings) -> AsyncEngine:
    """Create the engine used for registry reads and conditional writes."""
    return create_async_engine(
        build_async_url(settings),
        pool_size=settings.pool_min_connections,
        max_overflow=settings.pool_max_connections - settings.pool_min_connections,
        pool_pre_ping=True,
        connect_args={
            "server_settings": {"application_name": REGISTRY_APPLICATION_NAME}
        },
    )


def build_async_url(settings: DatabaseSettings) -> str:
    """Render a ``postgresql+asyncpg`` URL with percent-encoded credentials.

    Args:
        settings: Database connection settings

    Returns:
        The URL as a string, password included
    """
    url = URL.create(
        drivername="postgresql+asyncpg",
        username=settings.username,
        password=settings.password.get_secret_value(),
        host=settings.host,
        port=settings.port,
        database=settings.database,
    )
    return url.render_as_string(hide_password=False)
