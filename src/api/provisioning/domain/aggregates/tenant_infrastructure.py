"""TenantInfrastructure aggregate for the provisioning context."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime

from provisioning.domain.exceptions import ConflictError, InvalidStateTransitionError
from provisioning.domain.stack_status import StackOutcome, classify
from provisioning.domain.value_objects import (
    InfrastructureOperation,
    ProvisioningState,
    StackDescription,
    TenancyTier,
    TenantId,
)

PROVISIONING_TIMEOUT_DETAIL = "provisioning timeout"
SUBMISSION_INTERRUPTED_DETAIL = "stack submission interrupted"
PERMISSION_DENIED_DETAIL = "permission denied"


@dataclass
class TenantInfrastructure:
    """Provisioning record of one tenant's infrastructure.

    The aggregate is the single place where lifecycle transitions are
    decided. Workers load it from the registry, call one transition method,
    and persist it with a conditional write on ``version``.

    Business rules:
    - ``operation`` is NONE exactly when the state is ACTIVE, DELETED or
      FAILED. The one exception is a failed delete submission, which keeps
      ``operation = DELETE`` so a retry can be told apart from a fresh delete.
    - Shared tenants never carry stack fields and never poll.
    - Poll observations only apply to PROVISIONING/DEPROVISIONING records,
      so a settled record can never move backward.
    - A FAILED record that still owns a stack must be deleted before the
      tenant can be onboarded again.
    """

    tenant_id: TenantId
    tier: TenancyTier
    provisioning_state: ProvisioningState
    operation: InfrastructureOperation
    created_at: datetime
    updated_at: datetime
    target_account_id: str | None = None
    template_ref: str | None = None
    stack_name: str | None = None
    stack_id: str | None = None
    poll_attempts: int = 0
    last_polled_at: datetime | None = None
    operation_started_at: datetime | None = None
    error_detail: str | None = None
    stack_outputs: dict[str, str] = field(default_factory=dict)
    version: int = 0

    # ------------------------------------------------------------------
    # Onboarding
    # ------------------------------------------------------------------

    @classmethod
    def onboard_shared(
        cls,
        tenant_id: TenantId,
        now: datetime,
        previous: TenantInfrastructure | None = None,
    ) -> TenantInfrastructure:
        """Create the settled record of a shared-tier tenant.

        Args:
            tenant_id: Tenant being onboarded
            now: Current time
            previous: Existing settled record being replaced, if any

        Returns:
            An ACTIVE record with no operation in flight

        Raises:
            ConflictError: If ``previous`` is not eligible for onboarding
        """
        cls._ensure_can_onboard(previous)
        return cls(
            tenant_id=tenant_id,
            tier=TenancyTier.SHARED,
            provisioning_state=ProvisioningState.ACTIVE,
            operation=InfrastructureOperation.NONE,
            created_at=previous.created_at if previous else now,
            updated_at=now,
            version=previous.version if previous else 0,
        )

    @classmethod
    def onboard_dedicated(
        cls,
        tenant_id: TenantId,
        target_account_id: str,
        template_ref: str,
        stack_name: str,
        now: datetime,
        previous: TenantInfrastructure | None = None,
    ) -> TenantInfrastructure:
        """Claim a dedicated tenant for stack creation.

        Args:
            tenant_id: Tenant being onboarded
            target_account_id: Account that will own the stack
            template_ref: Stack template reference
            stack_name: Deterministic stack name for the tenant
            now: Current time
            previous: Existing settled record being replaced, if any

        Returns:
            A PENDING record with ``operation = CREATE``

        Raises:
            ConflictError: If ``previous`` is not eligible for onboarding
            ValueError: If no target account is given
        """
        cls._ensure_can_onboard(previous)
        if not target_account_id:
            raise ValueError("Dedicated tenants require a target account id")
        return cls(
            tenant_id=tenant_id,
            tier=TenancyTier.DEDICATED,
            provisioning_state=ProvisioningState.PENDING,
            operation=InfrastructureOperation.CREATE,
            created_at=previous.created_at if previous else now,
            updated_at=now,
            target_account_id=target_account_id,
            template_ref=template_ref,
            stack_name=stack_name,
            operation_started_at=now,
            version=previous.version if previous else 0,
        )

    @staticmethod
    def _ensure_can_onboard(previous: TenantInfrastructure | None) -> None:
        if previous is None:
            return
        if previous.operation != InfrastructureOperation.NONE:
            raise ConflictError(
                f"Tenant {previous.tenant_id} has a {previous.operation} "
                "operation in flight"
            )
        if previous.provisioning_state == ProvisioningState.ACTIVE:
            raise ConflictError(f"Tenant {previous.tenant_id} is already provisioned")
        # The record is the only reference to the stack; it must be deleted first.
        if (
            previous.provisioning_state == ProvisioningState.FAILED
            and previous.has_stack
        ):
            raise ConflictError(
                f"Tenant {previous.tenant_id} still owns failed stack "
                f"{previous.stack_id}; delete it before creating again"
            )

    # ------------------------------------------------------------------
    # Creation progress
    # ------------------------------------------------------------------

    def stack_submitted(self, stack_id: str, now: datetime) -> None:
        """Record that the stack-create call was accepted."""
        self._require(
            ProvisioningState.PENDING,
            InfrastructureOperation.CREATE,
            action="record a stack submission",
        )
        self.stack_id = stack_id
        self.provisioning_state = ProvisioningState.PROVISIONING
        self.updated_at = now

    def submission_failed(self, detail: str, now: datetime) -> None:
        """Settle the record as FAILED after a rejected stack submission.

        A failed create releases the operation. A failed delete keeps
        ``operation = DELETE`` so the retry is recognisable.
        """
        if self.operation == InfrastructureOperation.NONE:
            raise InvalidStateTransitionError(
                f"Tenant {self.tenant_id} has no operation to fail"
            )
        keep_operation = self.operation == InfrastructureOperation.DELETE
        self._settle(ProvisioningState.FAILED, now, error_detail=detail)
        if keep_operation:
            self.operation = InfrastructureOperation.DELETE

    # ------------------------------------------------------------------
    # Decommissioning
    # ------------------------------------------------------------------

    @property
    def is_delete_retry(self) -> bool:
        """Whether this record is a failed delete submission awaiting retry."""
        return (
            self.provisioning_state == ProvisioningState.FAILED
            and self.operation == InfrastructureOperation.DELETE
        )

    def ensure_can_delete(self) -> None:
        """Reject a delete while another operation is in flight.

        Raises:
            ConflictError: If an operation other than a failed delete is in flight
        """
        if self.operation != InfrastructureOperation.NONE and not self.is_delete_retry:
            raise ConflictError(
                f"Tenant {self.tenant_id} has a {self.operation} operation in flight"
            )

    def begin_deletion(self, now: datetime) -> None:
        """Claim a dedicated tenant for stack deletion."""
        self.ensure_can_delete()
        if self.tier != TenancyTier.DEDICATED:
            raise InvalidStateTransitionError(
                f"Tenant {self.tenant_id} is shared and has no stack to delete"
            )
        if self.provisioning_state == ProvisioningState.DELETED:
            raise InvalidStateTransitionError(
                f"Tenant {self.tenant_id} is already deleted"
            )
        self.operation = InfrastructureOperation.DELETE
        self.provisioning_state = ProvisioningState.DEPROVISIONING
        self.poll_attempts = 0
        self.last_polled_at = None
        self.operation_started_at = now
        self.error_detail = None
        self.updated_at = now

    def mark_deleted(self, now: datetime) -> None:
        """Settle the record as DELETED.

        Only a record with no stack, or one whose stack deletion is in
        flight, may be marked DELETED directly.
        """
        if (
            self.has_stack
            and self.provisioning_state != ProvisioningState.DEPROVISIONING
        ):
            raise InvalidStateTransitionError(
                f"Tenant {self.tenant_id} still owns stack {self.stack_id}"
            )
        self._settle(ProvisioningState.DELETED, now)

    @property
    def has_stack(self) -> bool:
        """Whether a stack was ever submitted for this tenant."""
        return self.stack_id is not None

    # ------------------------------------------------------------------
    # Polling
    # ------------------------------------------------------------------

    def poll_budget_exhausted(self, max_attempts: int) -> bool:
        """Whether the next poll attempt would exceed ``max_attempts``."""
        return self.poll_attempts + 1 > max_attempts

    def time_out(self, now: datetime) -> None:
        """Settle an in-flight dedicated operation as timed out."""
        self.fail_operation(PROVISIONING_TIMEOUT_DETAIL, now)

    def fail_operation(self, detail: str, now: datetime) -> None:
        """Settle an in-flight dedicated operation as FAILED while observing it."""
        if not self._is_in_flight_dedicated():
            raise InvalidStateTransitionError(
                f"Tenant {self.tenant_id} has no operation in flight to fail"
            )
        self._settle(ProvisioningState.FAILED, now, detail)

    def adopt_stack(self, stack_id: str, now: datetime) -> None:
        """Adopt a stack whose submission was never recorded.

        Used when a worker crashed between claiming the tenant and recording
        the stack id: the stack is found by its deterministic name.
        """
        self.stack_submitted(stack_id, now)

    def submission_interrupted(self, now: datetime) -> None:
        """Settle a PENDING record whose stack never reached the stack service."""
        self._require(
            ProvisioningState.PENDING,
            InfrastructureOperation.CREATE,
            action="settle an interrupted submission",
        )
        self._settle(ProvisioningState.FAILED, now, SUBMISSION_INTERRUPTED_DETAIL)

    def apply_stack_observation(
        self, description: StackDescription, now: datetime
    ) -> StackOutcome:
        """Apply one observed stack status to the record.

        Args:
            description: Result of the describe call
            now: Current time

        Returns:
            The outcome that was applied

        Raises:
            InvalidStateTransitionError: If the record is not pollable
        """
        self._require_pollable()
        self._count_poll(now)
        outcome = classify(self.operation, description.status)

        if outcome == StackOutcome.IN_PROGRESS:
            self.updated_at = now
        elif outcome == StackOutcome.COMPLETE:
            if self.operation == InfrastructureOperation.CREATE:
                self.stack_outputs = dict(description.outputs)
                self._settle(ProvisioningState.ACTIVE, now)
            else:
                self._settle(ProvisioningState.DELETED, now)
        else:
            detail = f"stack {description.status}"
            if description.reason:
                detail = f"{detail}: {description.reason}"
            self._settle(ProvisioningState.FAILED, now, detail)
        return outcome

    def apply_stack_missing(self, now: datetime) -> StackOutcome:
        """Apply a describe call that found no stack.

        A missing stack completes a deletion but fails a creation.
        """
        self._require_pollable()
        self._count_poll(now)
        if self.operation == InfrastructureOperation.DELETE:
            self._settle(ProvisioningState.DELETED, now)
            return StackOutcome.COMPLETE
        self._settle(ProvisioningState.FAILED, now, "stack not found")
        return StackOutcome.FAILED

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    @property
    def is_settled(self) -> bool:
        """Whether the record is in a terminal state."""
        return self.provisioning_state.is_terminal

    def _is_in_flight_dedicated(self) -> bool:
        return self.tier == TenancyTier.DEDICATED and (
            self.provisioning_state.is_pollable
            or self.provisioning_state == ProvisioningState.PENDING
        )

    def _count_poll(self, now: datetime) -> None:
        self.poll_attempts += 1
        self.last_polled_at = now

    def _require_pollable(self) -> None:
        if self.tier != TenancyTier.DEDICATED or not self.provisioning_state.is_pollable:
            raise InvalidStateTransitionError(
                f"Tenant {self.tenant_id} is {self.provisioning_state} and cannot be polled"
            )

    def _require(
        self,
        state: ProvisioningState,
        operation: InfrastructureOperation,
        action: str,
    ) -> None:
        if self.provisioning_state != state or self.operation != operation:
            raise InvalidStateTransitionError(
                f"Cannot {action} for tenant {self.tenant_id} in "
                f"{self.provisioning_state}/{self.operation}"
            )

    def _settle(
        self,
        state: ProvisioningState,
        now: datetime,
        error_detail: str | None = None,
    ) -> None:
        self.provisioning_state = state
        self.operation = InfrastructureOperation.NONE
        self.error_detail = error_detail
        self.updated_at = now
