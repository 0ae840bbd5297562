"""PostgreSQL implementation of ITenantRegistry.

Each call runs in its own short transaction. Writes are conditional on
the version the caller read, so concurrent workers racing on one tenant
are serialised by the database rather than by in-process locks.
"""

from __future__ import annotations

from typing import Any

from sqlalchemy import delete, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from provisioning.domain.aggregates import TenantInfrastructure
from provisioning.domain.value_objects import (
    InfrastructureOperation,
    ProvisioningState,
    TenancyTier,
    TenantId,
)
from provisioning.infrastructure.models import TenantInfrastructureModel
from provisioning.infrastructure.observability import (
    DefaultTenantRegistryProbe,
    TenantRegistryProbe,
)
from provisioning.ports.exceptions import ConflictError
from provisioning.ports.repositories import ITenantRegistry


class TenantRegistry(ITenantRegistry):
    """Registry storing TenantInfrastructure aggregates in PostgreSQL."""

    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        probe: TenantRegistryProbe | None = None,
    ) -> None:
        """Initialize registry with a session factory.

        Args:
            session_factory: Sessionmaker bound to the registry database
            probe: Optional domain probe for observability
        """
        self._session_factory = session_factory
        self._probe = probe or DefaultTenantRegistryProbe()

    async def get(self, tenant_id: TenantId) -> TenantInfrastructure | None:
        """Fetch the record of a tenant.

        Args:
            tenant_id: The tenant to look up

        Returns:
            The TenantInfrastructure aggregate, or None if not found
        """
        async with self._session_factory() as session:
            model = await session.get(TenantInfrastructureModel, tenant_id.value)

        if model is None:
            self._probe.record_not_found(tenant_id.value)
            return None

        record = self._to_domain(model)
        self._probe.record_retrieved(
            tenant_id.value, record.provisioning_state.value
        )
        return record

    async def add(self, record: TenantInfrastructure) -> None:
        """Insert the record of a tenant that has none.

        Raises:
            ConflictError: If a record already exists for the tenant
        """
        model = TenantInfrastructureModel(
            tenant_id=record.tenant_id.value,
            created_at=record.created_at,
            version=1,
            **self._mutable_columns(record),
        )
        try:
            async with self._session_factory() as session, session.begin():
                session.add(model)
        except IntegrityError as e:
            self._probe.write_conflict(record.tenant_id.value, expected_version=0)
            raise ConflictError(
                f"Tenant {record.tenant_id} already has a registry record"
            ) from e

        record.version = 1
        self._probe.record_saved(
            record.tenant_id.value, record.provisioning_state.value, record.version
        )

    async def save(self, record: TenantInfrastructure, expected_version: int) -> None:
        """Overwrite the record if its stored version is ``expected_version``.

        Raises:
            ConflictError: If the stored version no longer matches
        """
        new_version = expected_version + 1
        stmt = (
            update(TenantInfrastructureModel)
            .where(
                TenantInfrastructureModel.tenant_id == record.tenant_id.value,
                TenantInfrastructureModel.version == expected_version,
            )
            .values(version=new_version, **self._mutable_columns(record))
            .execution_options(synchronize_session=False)
        )
        async with self._session_factory() as session, session.begin():
            result = await session.execute(stmt)

        if result.rowcount == 0:
            self._probe.write_conflict(record.tenant_id.value, expected_version)
            raise ConflictError(
                f"Tenant {record.tenant_id} was modified concurrently "
                f"(expected version {expected_version})"
            )

        record.version = new_version
        self._probe.record_saved(
            record.tenant_id.value, record.provisioning_state.value, new_version
        )

    async def remove(self, tenant_id: TenantId, expected_version: int) -> None:
        """Delete the record if its stored version is ``expected_version``.

        Raises:
            ConflictError: If the record is missing or its version changed
        """
        stmt = (
            delete(TenantInfrastructureModel)
            .where(
                TenantInfrastructureModel.tenant_id == tenant_id.value,
                TenantInfrastructureModel.version == expected_version,
            )
            .execution_options(synchronize_session=False)
        )
        async with self._session_factory() as session, session.begin():
            result = await session.execute(stmt)

        if result.rowcount == 0:
            self._probe.write_conflict(tenant_id.value, expected_version)
            raise ConflictError(
                f"Tenant {tenant_id} was modified concurrently "
                f"(expected version {expected_version})"
            )

        self._probe.record_removed(tenant_id.value)

    @staticmethod
    def _mutable_columns(record: TenantInfrastructure) -> dict[str, Any]:
        return {
            "tier": record.tier.value,
            "provisioning_state": record.provisioning_state.value,
            "operation": record.operation.value,
            "target_account_id": record.target_account_id,
            "template_ref": record.template_ref,
            "stack_name": record.stack_name,
            "stack_id": record.stack_id,
            "poll_attempts": record.poll_attempts,
            "last_polled_at": record.last_polled_at,
            "operation_started_at": record.operation_started_at,
            "error_detail": record.error_detail,
            "stack_outputs": dict(record.stack_outputs),
            "updated_at": record.updated_at,
        }

    @staticmethod
    def _to_domain(model: TenantInfrastructureModel) -> TenantInfrastructure:
        return TenantInfrastructure(
            tenant_id=TenantId(value=model.tenant_id),
            tier=TenancyTier(model.tier),
            provisioning_state=ProvisioningState(model.provisioning_state),
            operation=InfrastructureOperation(model.operation),
            created_at=model.created_at,
            updated_at=model.updated_at,
            target_account_id=model.target_account_id,
            template_ref=model.template_ref,
            stack_name=model.stack_name,
            stack_id=model.stack_id,
            poll_attempts=model.poll_attempts,
            last_polled_at=model.last_polled_at,
            operation_started_at=model.operation_started_at,
            error_detail=model.error_detail,
            stack_outputs=dict(model.stack_outputs or {}),
            version=model.version,
        )
