"""Repository protocols (ports) for the provisioning bounded context.

The tenant registry is the system of record for the lifecycle state of
every tenant. All writes are conditional so that two workers racing on the
same tenant can never both succeed.
"""

from __future__ import annotations

from typing import Protocol, runtime_checkable

from provisioning.domain.aggregates import TenantInfrastructure
from provisioning.domain.value_objects import TenantId


@runtime_checkable
class ITenantRegistry(Protocol):
    """Repository for TenantInfrastructure persistence.

    Every write carries the version the caller read. A stale version, or an
    insert for a tenant that already has a record, is rejected atomically.
    """

    async def get(self, tenant_id: TenantId) -> TenantInfrastructure | None:
        """Retrieve the record of a tenant.

        Args:
            tenant_id: The tenant to look up

        Returns:
            The TenantInfrastructure aggregate, or None if not found
        """
        ...

    async def add(self, record: TenantInfrastructure) -> None:
        """Insert a record for a tenant that has none.

        On success ``record.version`` is set to 1.

        Args:
            record: The aggregate to insert

        Raises:
            ConflictError: If a record already exists for the tenant
        """
        ...

    async def save(self, record: TenantInfrastructure, expected_version: int) -> None:
        """Conditionally overwrite an existing record.

        On success ``record.version`` is set to ``expected_version + 1``.

        Args:
            record: The aggregate to persist
            expected_version: Version the caller read before mutating

        Raises:
            ConflictError: If the stored version no longer matches
        """
        ...

    async def remove(self, tenant_id: TenantId, expected_version: int) -> None:
        """Conditionally remove the record of a tenant.

        Args:
            tenant_id: The tenant whose record is removed
            expected_version: Version the caller read

        Raises:
            ConflictError: If the record is missing or its version changed
        """
        ...
