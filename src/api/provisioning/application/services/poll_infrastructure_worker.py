"""Poll worker for tenant infrastructure.

Each invocation observes the stack of one dedicated tenant exactly once
and applies the observation to the registry record. The lifecycle driver
re-invokes the worker on a fixed cadence until ``done`` is True; the worker
itself never sleeps between polls.
"""

from __future__ import annotations

from provisioning.application.cross_account import CrossAccountAccess
from provisioning.application.observability import (
    DefaultPollWorkerProbe,
    PollWorkerProbe,
)
from provisioning.application.value_objects import Clock, WorkerResult, system_clock
from provisioning.domain.aggregates import (
    PERMISSION_DENIED_DETAIL,
    TenantInfrastructure,
)
from provisioning.domain.stack_status import StackOutcome
from provisioning.domain.value_objects import ProvisioningState, TenancyTier, TenantId
from provisioning.ports.cloud import IStackService
from provisioning.ports.exceptions import (
    ProvisioningPermissionError,
    ProvisioningTimeoutError,
    StackNotFoundError,
    TenantNotFoundError,
)
from provisioning.ports.repositories import ITenantRegistry
from shared_kernel.observability_context import ObservationContext


class PollInfrastructureWorker:
    """Application service behind the poll step of the lifecycle driver.

    State machine, relative to the operation in flight:

        PROVISIONING   + CREATE_COMPLETE            -> ACTIVE
        PROVISIONING   + CREATE_FAILED / ROLLBACK_* -> FAILED
        DEPROVISIONING + DELETE_COMPLETE / missing  -> DELETED
        DEPROVISIONING + DELETE_FAILED              -> FAILED
        any other status                            -> unchanged, +1 attempt
        next attempt beyond max_poll_attempts       -> FAILED, timeout

    A PENDING record is one whose create worker stopped between claiming
    the tenant and recording the stack; it is resolved by stack name.
    """

    def __init__(
        self,
        registry: ITenantRegistry,
        cross_account: CrossAccountAccess,
        stack_service: IStackService,
        max_poll_attempts: int = 30,
        probe: PollWorkerProbe | None = None,
        clock: Clock = system_clock,
    ):
        """Initialize PollInfrastructureWorker with dependencies.

        Args:
            registry: Tenant registry holding the lifecycle records
            cross_account: Delegated access to tenant accounts
            stack_service: Declarative stack service
            max_poll_attempts: Poll budget of one stack operation
            probe: Optional domain probe for observability
            clock: Source of the current time
        """
        self._registry = registry
        self._cross_account = cross_account
        self._stack_service = stack_service
        self._max_poll_attempts = max_poll_attempts
        self._probe = probe or DefaultPollWorkerProbe()
        self._clock = clock

    async def run(
        self,
        tenant_id: TenantId,
        context: ObservationContext | None = None,
    ) -> WorkerResult:
        """Observe the stack of a tenant once and advance its record.

        Args:
            tenant_id: Tenant whose operation is polled
            context: Optional observation context of the invocation

        Returns:
            The record's state after this observation

        Raises:
            TenantNotFoundError: If the tenant has no record
            ProvisioningTimeoutError: If the poll budget is exhausted
            ProvisioningPermissionError: If the tenant account denied access
            ConflictError: If another worker changed the record meanwhile
            TransientInfraError: If the describe call kept failing transiently
        """
        probe = self._probe.with_context(context) if context else self._probe
        cross_account = (
            self._cross_account.with_context(context) if context else self._cross_account
        )

        record = await self._registry.get(tenant_id)
        if record is None:
            raise TenantNotFoundError(f"Tenant {tenant_id} not found")

        if record.tier == TenancyTier.SHARED or record.is_settled:
            probe.poll_skipped(tenant_id.value, record.provisioning_state.value)
            return WorkerResult.from_record(record)

        expected_version = record.version

        if record.provisioning_state != ProvisioningState.PENDING and (
            record.poll_budget_exhausted(self._max_poll_attempts)
        ):
            record.time_out(self._clock())
            await self._registry.save(record, expected_version=expected_version)
            probe.operation_timed_out(tenant_id.value, record.poll_attempts)
            raise ProvisioningTimeoutError(
                f"Tenant {tenant_id} exceeded {self._max_poll_attempts} poll attempts"
            )

        try:
            credentials = await cross_account.credentials_for(record)
        except ProvisioningPermissionError as exc:
            record.fail_operation(PERMISSION_DENIED_DETAIL, self._clock())
            await self._registry.save(record, expected_version=expected_version)
            probe.operation_failed(
                tenant_id.value, PERMISSION_DENIED_DETAIL, reason=str(exc)
            )
            raise

        if record.provisioning_state == ProvisioningState.PENDING:
            stack_ref = record.stack_name or ""
        else:
            stack_ref = record.stack_id or record.stack_name or ""

        try:
            description = await self._stack_service.describe_stack(
                stack_ref, credentials
            )
        except StackNotFoundError:
            description = None
        except ProvisioningPermissionError as exc:
            record.fail_operation(PERMISSION_DENIED_DETAIL, self._clock())
            await self._registry.save(record, expected_version=expected_version)
            probe.operation_failed(
                tenant_id.value, PERMISSION_DENIED_DETAIL, reason=str(exc)
            )
            raise

        now = self._clock()
        if record.provisioning_state == ProvisioningState.PENDING:
            if description is None:
                record.submission_interrupted(now)
                await self._registry.save(record, expected_version=expected_version)
                probe.submission_interrupted(tenant_id.value)
                return WorkerResult.from_record(record)
            record.adopt_stack(description.stack_id, now)
            probe.pending_stack_adopted(tenant_id.value, description.stack_id)

        if description is None:
            outcome = record.apply_stack_missing(now)
            status = "NOT_FOUND"
        else:
            outcome = record.apply_stack_observation(description, now)
            status = description.status

        await self._registry.save(record, expected_version=expected_version)
        probe.stack_status_observed(
            tenant_id.value,
            status=status,
            outcome=outcome.value,
            poll_attempts=record.poll_attempts,
        )
        self._report(record, outcome, probe)
        return WorkerResult.from_record(record)

    @staticmethod
    def _report(
        record: TenantInfrastructure, outcome: StackOutcome, probe: PollWorkerProbe
    ) -> None:
        if outcome == StackOutcome.COMPLETE:
            probe.operation_completed(
                record.tenant_id.value, record.provisioning_state.value
            )
        elif outcome == StackOutcome.FAILED:
            probe.operation_failed(record.tenant_id.value, record.error_detail or "")
