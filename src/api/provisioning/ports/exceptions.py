"""Exceptions raised across the provisioning ports.

Adapters translate store and cloud SDK failures into these types so that
workers and entry points only ever branch on the provisioning taxonomy.
"""

from provisioning.domain.exceptions import (
    ConflictError,
    InvalidStateTransitionError,
    ProvisioningError,
)


class TenantNotFoundError(ProvisioningError):
    """Raised when no registry record exists for a tenant."""

    pass


class ProvisioningPermissionError(ProvisioningError, PermissionError):
    """Raised when delegated access to a tenant account is denied.

    Covers a missing cross-account role, a trust policy that does not admit
    the orchestrator, and credential retries that were exhausted. Never
    retried by the worker that raises it.
    """

    pass


class TransientInfraError(ProvisioningError):
    """Raised when a cloud call keeps failing for a retryable reason.

    Throttling and network failures are retried inside the call; this is
    what surfaces once the bounded retries are used up. The registry record
    is left untouched so the driver may retry the whole invocation.
    """

    pass


class ProvisioningTimeoutError(ProvisioningError, TimeoutError):
    """Raised when a stack operation exceeds its poll budget."""

    pass


class StackOperationError(ProvisioningError):
    """Raised when the stack service rejects a create or delete submission.

    Used for failures that are neither permission nor transient, such as a
    template the service refuses to validate.
    """

    pass


class StackNotFoundError(ProvisioningError):
    """Raised by the stack service when the stack does not exist."""

    pass


class StackAlreadyExistsError(ProvisioningError):
    """Raised by the stack service when a stack with the same name exists."""

    pass


__all__ = [
    "ConflictError",
    "InvalidStateTransitionError",
    "ProvisioningError",
    "ProvisioningPermissionError",
    "ProvisioningTimeoutError",
    "StackAlreadyExistsError",
    "StackNotFoundError",
    "StackOperationError",
    "TenantNotFoundError",
    "TransientInfraError",
]
