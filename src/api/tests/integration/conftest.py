"""Integration test fixtures for registry tests.

These fixtures require a running PostgreSQL instance.
Run with: pytest -m integration
"""

import os
from collections.abc import AsyncGenerator

import pytest
import pytest_asyncio
from pydantic import SecretStr
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from infrastructure.database.engines import create_registry_engine
from infrastructure.database.models import Base
from infrastructure.settings import DatabaseSettings

# Registers the table on Base.metadata
from provisioning.infrastructure.models import TenantInfrastructureModel  # noqa: F401


@pytest.fixture(scope="session")
def integration_db_settings() -> DatabaseSettings:
    """Database settings for integration tests.

    Override with environment variables:
        PROVISIONER_DB_HOST, PROVISIONER_DB_PORT, etc.
    """
    return DatabaseSettings(
        host=os.getenv("PROVISIONER_DB_HOST", "localhost"),
        port=int(os.getenv("PROVISIONER_DB_PORT", "5432")),
        database=os.getenv("PROVISIONER_DB_DATABASE", "provisioner"),
        username=os.getenv("PROVISIONER_DB_USERNAME", "provisioner"),
        password=SecretStr(
            os.getenv("PROVISIONER_DB_PASSWORD", "provisioner_dev_password")
        ),
    )


@pytest_asyncio.fixture
async def session_factory(
    integration_db_settings: DatabaseSettings,
) -> AsyncGenerator[async_sessionmaker[AsyncSession], None]:
    """Provide a sessionmaker over a freshly created registry schema."""
    engine = create_registry_engine(integration_db_settings)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
        await conn.run_sync(Base.metadata.create_all)

    yield async_sessionmaker(engine, expire_on_commit=False, class_=AsyncSession)

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    await engine.dispose()
