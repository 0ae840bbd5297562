"""AWS adapters for the provisioning cloud ports."""

from provisioning.infrastructure.aws.clients import BotoClientFactory
from provisioning.infrastructure.aws.cloudformation_stack_service import (
    CloudFormationStackService,
)
from provisioning.infrastructure.aws.shared_tenant_table import (
    DynamoDBSharedTenantStore,
)
from provisioning.infrastructure.aws.stack_template import StackTemplateCatalog
from provisioning.infrastructure.aws.sts_credential_issuer import StsCredentialIssuer

__all__ = [
    "BotoClientFactory",
    "CloudFormationStackService",
    "DynamoDBSharedTenantStore",
    "StackTemplateCatalog",
    "StsCredentialIssuer",
]
