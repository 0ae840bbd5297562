"""Ports (interfaces) for the provisioning bounded context.

Ports define the contracts for the tenant registry and the cloud services
without specifying implementation details, so workers can be exercised
against in-memory fakes.
"""

from provisioning.ports.cloud import (
    ICredentialIssuer,
    ISharedTenantStore,
    IStackService,
)
from provisioning.ports.exceptions import (
    ConflictError,
    ProvisioningError,
    ProvisioningPermissionError,
    ProvisioningTimeoutError,
    StackAlreadyExistsError,
    StackNotFoundError,
    StackOperationError,
    TenantNotFoundError,
    TransientInfraError,
)
from provisioning.ports.repositories import ITenantRegistry

__all__ = [
    "ICredentialIssuer",
    "ISharedTenantStore",
    "IStackService",
    "ITenantRegistry",
    "ConflictError",
    "ProvisioningError",
    "ProvisioningPermissionError",
    "ProvisioningTimeoutError",
    "StackAlreadyExistsError",
    "StackNotFoundError",
    "StackOperationError",
    "TenantNotFoundError",
    "TransientInfraError",
]
