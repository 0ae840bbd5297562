"""Dependency wiring for the provisioning bounded context.

Each provider is a plain function so that FastAPI can resolve it with
``Depends`` and the Lambda handlers can call it directly.
"""

from __future__ import annotations

from functools import lru_cache
from typing import Annotated

from fastapi import Depends

from infrastructure.database.dependencies import get_session_factory
from infrastructure.settings import get_aws_settings, get_provisioning_settings
from provisioning.application.cross_account import CrossAccountAccess
from provisioning.application.services import (
    CreateInfrastructureWorker,
    DeleteInfrastructureWorker,
    PollInfrastructureWorker,
)
from provisioning.infrastructure.aws import (
    BotoClientFactory,
    CloudFormationStackService,
    DynamoDBSharedTenantStore,
    StsCredentialIssuer,
)
from provisioning.infrastructure.tenant_registry import TenantRegistry
from provisioning.ports.cloud import ISharedTenantStore, IStackService
from provisioning.ports.repositories import ITenantRegistry
from shared_kernel.retry import RetryConfig


@lru_cache
def get_client_factory() -> BotoClientFactory:
    """Get the cached boto3 client factory for the configured region."""
    return BotoClientFactory(region=get_aws_settings().region)


def get_tenant_registry() -> ITenantRegistry:
    """Get TenantRegistry bound to the registry database."""
    return TenantRegistry(session_factory=get_session_factory())


def get_cross_account_access() -> CrossAccountAccess:
    """Get CrossAccountAccess configured from AWS settings."""
    settings = get_aws_settings()
    return CrossAccountAccess(
        issuer=StsCredentialIssuer(get_client_factory()),
        role_name=settings.cross_account_role_name,
        duration_seconds=settings.assume_role_duration_seconds,
        retry_config=RetryConfig(
            max_retries=settings.credential_max_retries,
            base_delay=settings.credential_retry_base_delay,
        ),
    )


def _stack_retry_config() -> RetryConfig:
    settings = get_provisioning_settings()
    return RetryConfig(
        max_retries=settings.stack_max_retries,
        base_delay=settings.stack_retry_base_delay,
    )


def get_stack_service() -> IStackService:
    """Get the CloudFormation stack service."""
    return CloudFormationStackService(
        clients=get_client_factory(),
        retry_config=_stack_retry_config(),
    )


def get_shared_tenant_store() -> ISharedTenantStore:
    """Get the DynamoDB shared tenant store."""
    return DynamoDBSharedTenantStore(
        clients=get_client_factory(),
        table_name=get_aws_settings().shared_tenant_table_name,
        retry_config=_stack_retry_config(),
    )


def get_create_worker(
    registry: Annotated[ITenantRegistry, Depends(get_tenant_registry)],
    cross_account: Annotated[CrossAccountAccess, Depends(get_cross_account_access)],
    stack_service: Annotated[IStackService, Depends(get_stack_service)],
    shared_store: Annotated[ISharedTenantStore, Depends(get_shared_tenant_store)],
) -> CreateInfrastructureWorker:
    """Get CreateInfrastructureWorker with its collaborators."""
    settings = get_provisioning_settings()
    return CreateInfrastructureWorker(
        registry=registry,
        cross_account=cross_account,
        stack_service=stack_service,
        shared_store=shared_store,
        default_template_ref=settings.default_template_ref,
        stack_name_prefix=settings.stack_name_prefix,
        environment=get_aws_settings().environment,
    )


def get_delete_worker(
    registry: Annotated[ITenantRegistry, Depends(get_tenant_registry)],
    cross_account: Annotated[CrossAccountAccess, Depends(get_cross_account_access)],
    stack_service: Annotated[IStackService, Depends(get_stack_service)],
    shared_store: Annotated[ISharedTenantStore, Depends(get_shared_tenant_store)],
) -> DeleteInfrastructureWorker:
    """Get DeleteInfrastructureWorker with its collaborators."""
    return DeleteInfrastructureWorker(
        registry=registry,
        cross_account=cross_account,
        stack_service=stack_service,
        shared_store=shared_store,
    )


def get_poll_worker(
    registry: Annotated[ITenantRegistry, Depends(get_tenant_registry)],
    cross_account: Annotated[CrossAccountAccess, Depends(get_cross_account_access)],
    stack_service: Annotated[IStackService, Depends(get_stack_service)],
) -> PollInfrastructureWorker:
    """Get PollInfrastructureWorker with its collaborators."""
    return PollInfrastructureWorker(
        registry=registry,
        cross_account=cross_account,
        stack_service=stack_service,
        max_poll_attempts=get_provisioning_settings().max_poll_attempts,
    )
