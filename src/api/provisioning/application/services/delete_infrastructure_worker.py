"""Delete worker for tenant infrastructure.

Removes shared tenants synchronously and starts the stack deletion of
dedicated tenants. Completion of a dedicated delete is observed by the
poll worker.
"""

from __future__ import annotations

from provisioning.application.cross_account import CrossAccountAccess
from provisioning.application.observability import (
    DefaultDeleteWorkerProbe,
    DeleteWorkerProbe,
)
from provisioning.application.value_objects import Clock, WorkerResult, system_clock
from provisioning.domain.aggregates import (
    PERMISSION_DENIED_DETAIL,
    TenantInfrastructure,
)
from provisioning.domain.value_objects import (
    InfrastructureOperation,
    ProvisioningState,
    TenancyTier,
    TenantId,
)
from provisioning.ports.cloud import ISharedTenantStore, IStackService
from provisioning.ports.exceptions import (
    ConflictError,
    ProvisioningPermissionError,
    StackNotFoundError,
    StackOperationError,
    TenantNotFoundError,
)
from provisioning.ports.repositories import ITenantRegistry
from shared_kernel.observability_context import ObservationContext


class DeleteInfrastructureWorker:
    """Application service behind the delete step of the lifecycle driver.

    Deleting an already DELETED tenant is a no-op success. A record whose
    previous delete submission failed may be deleted again.
    """

    def __init__(
        self,
        registry: ITenantRegistry,
        cross_account: CrossAccountAccess,
        stack_service: IStackService,
        shared_store: ISharedTenantStore,
        probe: DeleteWorkerProbe | None = None,
        clock: Clock = system_clock,
    ):
        self._registry = registry
        self._cross_account = cross_account
        self._stack_service = stack_service
        self._shared_store = shared_store
        self._probe = probe or DefaultDeleteWorkerProbe()
        self._clock = clock

    async def run(
        self,
        tenant_id: TenantId,
        context: ObservationContext | None = None,
    ) -> WorkerResult:
        """Delete the infrastructure of a tenant.

        Args:
            tenant_id: Tenant to decommission
            context: Optional observation context of the invocation

        Returns:
            ``done = True`` for shared tenants and no-op deletes,
            DEPROVISIONING while a dedicated stack deletion is in flight

        Raises:
            TenantNotFoundError: If the tenant has no record
            ConflictError: If another operation is in flight or another
                worker won the race
            ProvisioningPermissionError: If the tenant account denied access
            StackOperationError: If the stack deletion was rejected
            TransientInfraError: If cloud calls kept failing transiently
        """
        probe = self._probe.with_context(context) if context else self._probe
        cross_account = (
            self._cross_account.with_context(context) if context else self._cross_account
        )

        record = await self._registry.get(tenant_id)
        if record is None:
            probe.tenant_not_found(tenant_id.value)
            raise TenantNotFoundError(f"Tenant {tenant_id} not found")

        if (
            record.provisioning_state == ProvisioningState.DELETED
            and record.operation == InfrastructureOperation.NONE
        ):
            probe.already_deleted(tenant_id.value)
            return WorkerResult.from_record(record)

        try:
            record.ensure_can_delete()
        except ConflictError as exc:
            probe.delete_conflict(tenant_id.value, reason=str(exc))
            raise

        if record.tier == TenancyTier.SHARED:
            rows_removed = await self._shared_store.delete_tenant(tenant_id)
            await self._registry.remove(tenant_id, expected_version=record.version)
            probe.shared_tenant_removed(tenant_id.value, rows_removed=rows_removed)
            return WorkerResult.removed(tenant_id)

        if not record.has_stack:
            record.mark_deleted(self._clock())
            await self._registry.save(record, expected_version=record.version)
            probe.deleted_without_stack(tenant_id.value)
            return WorkerResult.from_record(record)

        expected_version = record.version
        record.begin_deletion(self._clock())
        await self._registry.save(record, expected_version=expected_version)

        stack_ref = record.stack_id or record.stack_name or ""
        try:
            credentials = await cross_account.credentials_for(record)
            await self._stack_service.delete_stack(stack_ref, credentials)
        except StackNotFoundError:
            record.mark_deleted(self._clock())
            await self._registry.save(record, expected_version=record.version)
            probe.deleted_without_stack(tenant_id.value)
            return WorkerResult.from_record(record)
        except ProvisioningPermissionError as exc:
            await self._fail(record, PERMISSION_DENIED_DETAIL, probe, reason=str(exc))
            raise
        except StackOperationError as exc:
            await self._fail(record, f"stack deletion failed: {exc}", probe)
            raise

        probe.stack_deletion_submitted(tenant_id.value, stack_ref=stack_ref)
        return WorkerResult.from_record(record)

    async def _fail(
        self,
        record: TenantInfrastructure,
        detail: str,
        probe: DeleteWorkerProbe,
        reason: str | None = None,
    ) -> None:
        record.submission_failed(detail, self._clock())
        await self._registry.save(record, expected_version=record.version)
        probe.delete_failed(record.tenant_id.value, error_detail=detail, reason=reason)
