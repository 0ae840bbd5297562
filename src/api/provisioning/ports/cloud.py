"""Cloud service protocols (ports) for the provisioning bounded context.

These describe the external services the workers drive: the delegated
credential service, the declarative stack service and the shared tenant
store. Implementations live under ``provisioning.infrastructure.aws``.
"""

from __future__ import annotations

from typing import Protocol, runtime_checkable

from provisioning.domain.value_objects import (
    DelegatedCredentials,
    StackDescription,
    StackTag,
    TenantId,
)


@runtime_checkable
class ICredentialIssuer(Protocol):
    """Issues short-lived credentials by assuming a role in another account."""

    async def assume_role(
        self,
        role_arn: str,
        session_name: str,
        duration_seconds: int,
    ) -> DelegatedCredentials:
        """Assume ``role_arn`` and return its temporary credentials.

        Raises:
            ProvisioningPermissionError: If the role cannot be assumed
            TransientInfraError: On throttling or network failure
        """
        ...


@runtime_checkable
class IStackService(Protocol):
    """Declarative infrastructure stack operations in a tenant account."""

    async def create_stack(
        self,
        name: str,
        template_ref: str,
        tags: list[StackTag],
        credentials: DelegatedCredentials,
    ) -> str:
        """Submit a stack creation and return the new stack id.

        Raises:
            StackAlreadyExistsError: If a stack with ``name`` already exists
            ProvisioningPermissionError: If the credentials are not allowed
            TransientInfraError: If retryable failures persist
            StackOperationError: If the submission is rejected
        """
        ...

    async def delete_stack(
        self, stack_id: str, credentials: DelegatedCredentials
    ) -> None:
        """Submit a stack deletion.

        ``stack_id`` may also be the stack name.
        """
        ...

    async def describe_stack(
        self, stack_id: str, credentials: DelegatedCredentials
    ) -> StackDescription:
        """Describe the current status of a stack.

        ``stack_id`` may also be the stack name.

        Raises:
            StackNotFoundError: If the stack does not exist
        """
        ...


@runtime_checkable
class ISharedTenantStore(Protocol):
    """Store holding the rows of shared-tier tenants."""

    async def put_tenant(self, tenant_id: TenantId) -> None:
        """Insert the initial row for a shared tenant."""
        ...

    async def delete_tenant(self, tenant_id: TenantId) -> int:
        """Delete every row of a shared tenant.

        Returns:
            Number of rows removed
        """
        ...
