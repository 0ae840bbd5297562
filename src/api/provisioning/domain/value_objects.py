"""Value objects for the provisioning domain.

Value objects are immutable descriptors that provide type safety and
domain semantics for identifiers and lifecycle concepts.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from datetime import datetime
from enum import StrEnum

_TENANT_ID_PATTERN = re.compile(r"^[A-Za-z0-9][A-Za-z0-9-]{0,99}$")


@dataclass(frozen=True)
class TenantId:
    """Identifier for a tenant.

    Tenant ids are assigned by the onboarding layer and embedded in stack
    names, so they are restricted to letters, digits and hyphens.
    """

    value: str

    def __str__(self) -> str:
        """Return string representation."""
        return self.value

    @classmethod
    def from_string(cls, value: str) -> TenantId:
        """Create TenantId from string value.

        Args:
            value: Tenant id as supplied by the caller

        Returns:
            TenantId instance

        Raises:
            ValueError: If value is empty or contains unsupported characters
        """
        if not _TENANT_ID_PATTERN.match(value or ""):
            raise ValueError(f"Invalid TenantId: {value!r}")
        return cls(value=value)


class TenancyTier(StrEnum):
    """Tenancy model of a tenant."""

    SHARED = "SHARED"
    DEDICATED = "DEDICATED"


class InfrastructureOperation(StrEnum):
    """Operation currently in flight for a tenant."""

    CREATE = "CREATE"
    DELETE = "DELETE"
    NONE = "NONE"


class ProvisioningState(StrEnum):
    """Provisioning state visible to operators."""

    PENDING = "PENDING"
    PROVISIONING = "PROVISIONING"
    ACTIVE = "ACTIVE"
    DEPROVISIONING = "DEPROVISIONING"
    DELETED = "DELETED"
    FAILED = "FAILED"

    @property
    def is_terminal(self) -> bool:
        """Whether no operation can be in flight in this state."""
        return self in _TERMINAL_STATES

    @property
    def is_pollable(self) -> bool:
        """Whether the poll worker observes a stack in this state."""
        return self in _POLLABLE_STATES


_TERMINAL_STATES = frozenset(
    {ProvisioningState.ACTIVE, ProvisioningState.DELETED, ProvisioningState.FAILED}
)
_POLLABLE_STATES = frozenset(
    {ProvisioningState.PROVISIONING, ProvisioningState.DEPROVISIONING}
)


@dataclass(frozen=True)
class DelegatedCredentials:
    """Short-lived credentials scoped to a tenant account."""

    access_key_id: str
    secret_access_key: str = field(repr=False)
    session_token: str = field(repr=False)
    expiration: datetime

    def is_expired(self, now: datetime) -> bool:
        """Whether the credentials are no longer usable at *now*."""
        return now >= self.expiration


@dataclass(frozen=True)
class StackDescription:
    """Observed state of a declarative infrastructure stack."""

    stack_id: str
    stack_name: str
    status: str
    reason: str | None = None
    outputs: dict[str, str] = field(default_factory=dict)


@dataclass(frozen=True)
class StackTag:
    """Key/value tag applied to a provisioned stack."""

    key: str
    value: str


def build_stack_name(tenant_id: TenantId, prefix: str = "tenant") -> str:
    """Derive the deterministic stack name for a dedicated tenant.

    The same tenant always maps to the same stack name, so a resubmitted
    create collides with the existing stack instead of creating a second one.
    """
    return f"{prefix}-{tenant_id.value}-infra"
