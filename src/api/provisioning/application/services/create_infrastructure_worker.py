"""Create worker for tenant infrastructure.

Onboards shared tenants synchronously and starts the stack creation of
dedicated tenants. Completion of a dedicated create is observed by the
poll worker.
"""

from __future__ import annotations

from provisioning.application.cross_account import CrossAccountAccess
from provisioning.application.observability import (
    CreateWorkerProbe,
    DefaultCreateWorkerProbe,
)
from provisioning.application.value_objects import (
    Clock,
    CreateInfrastructureRequest,
    WorkerResult,
    system_clock,
)
from provisioning.domain.aggregates import (
    PERMISSION_DENIED_DETAIL,
    TenantInfrastructure,
)
from provisioning.domain.value_objects import (
    DelegatedCredentials,
    StackTag,
    TenancyTier,
    build_stack_name,
)
from provisioning.ports.cloud import ISharedTenantStore, IStackService
from provisioning.ports.exceptions import (
    ConflictError,
    ProvisioningPermissionError,
    StackAlreadyExistsError,
    StackNotFoundError,
    StackOperationError,
)
from provisioning.ports.repositories import ITenantRegistry
from shared_kernel.observability_context import ObservationContext

CREATED_BY = "tenant-infra-provisioner"


class CreateInfrastructureWorker:
    """Application service behind the create step of the lifecycle driver."""

    def __init__(
        self,
        registry: ITenantRegistry,
        cross_account: CrossAccountAccess,
        stack_service: IStackService,
        shared_store: ISharedTenantStore,
        default_template_ref: str = "dedicated-table",
        stack_name_prefix: str = "tenant",
        environment: str = "development",
        probe: CreateWorkerProbe | None = None,
        clock: Clock = system_clock,
    ):
        """Initialize CreateInfrastructureWorker with dependencies.

        Args:
            registry: Tenant registry holding the lifecycle records
            cross_account: Delegated access to tenant accounts
            stack_service: Declarative stack service
            shared_store: Store holding shared-tier tenant rows
            default_template_ref: Template used when the request names none
            stack_name_prefix: Prefix of deterministic stack names
            environment: Environment tag applied to stacks
            probe: Optional domain probe for observability
            clock: Source of the current time
        """
        self._registry = registry
        self._cross_account = cross_account
        self._stack_service = stack_service
        self._shared_store = shared_store
        self._default_template_ref = default_template_ref
        self._stack_name_prefix = stack_name_prefix
        self._environment = environment
        self._probe = probe or DefaultCreateWorkerProbe()
        self._clock = clock

    async def run(
        self,
        request: CreateInfrastructureRequest,
        context: ObservationContext | None = None,
    ) -> WorkerResult:
        """Create the infrastructure of a tenant.

        Args:
            request: Tenant, tier and (for dedicated tenants) target account
            context: Optional observation context of the invocation

        Returns:
            ``done = True`` for shared tenants, PROVISIONING for dedicated ones

        Raises:
            ConflictError: If the tenant has an operation in flight, is already
                provisioned, or another worker won the race
            ProvisioningPermissionError: If the tenant account denied access
            StackOperationError: If the stack submission was rejected
            TransientInfraError: If cloud calls kept failing transiently
        """
        probe = self._probe.with_context(context) if context else self._probe
        cross_account = (
            self._cross_account.with_context(context) if context else self._cross_account
        )
        tenant_id = request.tenant_id
        now = self._clock()

        previous = await self._registry.get(tenant_id)
        try:
            if request.tier == TenancyTier.SHARED:
                record = TenantInfrastructure.onboard_shared(tenant_id, now, previous)
            else:
                record = TenantInfrastructure.onboard_dedicated(
                    tenant_id=tenant_id,
                    target_account_id=request.target_account_id or "",
                    template_ref=request.template_ref or self._default_template_ref,
                    stack_name=build_stack_name(tenant_id, self._stack_name_prefix),
                    now=now,
                    previous=previous,
                )
        except ConflictError as exc:
            probe.create_conflict(tenant_id.value, reason=str(exc))
            raise

        if record.tier == TenancyTier.SHARED:
            await self._claim(record, previous, probe)
            try:
                await self._shared_store.put_tenant(tenant_id)
            except Exception:
                await self._release(record, previous)
                raise
            probe.shared_tenant_onboarded(tenant_id.value)
            return WorkerResult.from_record(record)

        await self._claim(record, previous, probe)
        probe.tenant_claimed(tenant_id.value, record.target_account_id or "")

        try:
            credentials = await cross_account.credentials_for(record)
            await self._submit(record, credentials, probe)
        except ProvisioningPermissionError as exc:
            await self._fail(record, PERMISSION_DENIED_DETAIL, probe, reason=str(exc))
            raise
        except StackOperationError as exc:
            await self._fail(record, f"stack submission failed: {exc}", probe)
            raise

        await self._registry.save(record, expected_version=record.version)
        return WorkerResult.from_record(record)

    async def _claim(
        self,
        record: TenantInfrastructure,
        previous: TenantInfrastructure | None,
        probe: CreateWorkerProbe,
    ) -> None:
        try:
            if previous is None:
                await self._registry.add(record)
            else:
                await self._registry.save(record, expected_version=previous.version)
        except ConflictError as exc:
            probe.create_conflict(record.tenant_id.value, reason=str(exc))
            raise

    async def _release(
        self,
        record: TenantInfrastructure,
        previous: TenantInfrastructure | None,
    ) -> None:
        """Undo a claim whose shared row could not be written."""
        if previous is None:
            await self._registry.remove(
                record.tenant_id, expected_version=record.version
            )
        else:
            await self._registry.save(previous, expected_version=record.version)

    async def _submit(
        self,
        record: TenantInfrastructure,
        credentials: DelegatedCredentials,
        probe: CreateWorkerProbe,
    ) -> None:
        stack_name = record.stack_name or ""
        try:
            stack_id = await self._stack_service.create_stack(
                name=stack_name,
                template_ref=record.template_ref or self._default_template_ref,
                tags=self._tags_for(record),
                credentials=credentials,
            )
        except StackAlreadyExistsError:
            # A previous attempt submitted the stack before crashing.
            try:
                description = await self._stack_service.describe_stack(
                    stack_name, credentials
                )
            except StackNotFoundError as exc:
                raise StackOperationError(
                    f"stack {stack_name} reported as existing but not found"
                ) from exc
            record.adopt_stack(description.stack_id, self._clock())
            probe.existing_stack_adopted(
                record.tenant_id.value, stack_name, description.stack_id
            )
            return

        record.stack_submitted(stack_id, self._clock())
        probe.stack_submitted(record.tenant_id.value, stack_name, stack_id)

    async def _fail(
        self,
        record: TenantInfrastructure,
        detail: str,
        probe: CreateWorkerProbe,
        reason: str | None = None,
    ) -> None:
        record.submission_failed(detail, self._clock())
        await self._registry.save(record, expected_version=record.version)
        probe.create_failed(record.tenant_id.value, error_detail=detail, reason=reason)

    def _tags_for(self, record: TenantInfrastructure) -> list[StackTag]:
        return [
            StackTag(key="TenantId", value=record.tenant_id.value),
            StackTag(key="TenantTier", value=record.tier.value),
            StackTag(key="Environment", value=self._environment),
            StackTag(key="CreatedBy", value=CREATED_BY),
        ]
