"""Application-layer value objects for the provisioning bounded context.

These describe what the lifecycle driver sends to a worker and what a
worker hands back, independent of the transport (Lambda event or HTTP).
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from datetime import UTC, datetime

from provisioning.domain.aggregates import TenantInfrastructure
from provisioning.domain.value_objects import ProvisioningState, TenancyTier, TenantId

Clock = Callable[[], datetime]


def system_clock() -> datetime:
    """Return the current UTC time."""
    return datetime.now(UTC)


@dataclass(frozen=True)
class CreateInfrastructureRequest:
    """Input of the create worker.

    ``target_account_id`` is required for DEDICATED tenants and ignored for
    SHARED ones. ``template_ref`` falls back to the configured default.
    """

    tenant_id: TenantId
    tier: TenancyTier
    target_account_id: str | None = None
    template_ref: str | None = None


@dataclass(frozen=True)
class WorkerResult:
    """Outcome of one worker invocation.

    ``done`` tells the driver to stop polling. It is True exactly when the
    record is in a terminal state.
    """

    tenant_id: str
    provisioning_state: ProvisioningState
    done: bool
    error_detail: str | None = None

    @classmethod
    def from_record(cls, record: TenantInfrastructure) -> WorkerResult:
        """Build the result describing a registry record."""
        return cls(
            tenant_id=record.tenant_id.value,
            provisioning_state=record.provisioning_state,
            done=record.is_settled,
            error_detail=record.error_detail,
        )

    @classmethod
    def removed(cls, tenant_id: TenantId) -> WorkerResult:
        """Build the result for a tenant whose record was removed."""
        return cls(
            tenant_id=tenant_id.value,
            provisioning_state=ProvisioningState.DELETED,
            done=True,
        )
