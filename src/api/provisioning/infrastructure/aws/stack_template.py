"""Stack templates for dedicated tenants.

A template reference names a template generator. The only template shipped
is ``dedicated-table``: one private, encrypted, pay-per-request table per
tenant with point-in-time recovery.
"""

from __future__ import annotations

from collections.abc import Callable, Mapping
from typing import Any

from provisioning.ports.exceptions import StackOperationError

DEDICATED_TABLE_TEMPLATE = "dedicated-table"

TemplateGenerator = Callable[[Mapping[str, str]], dict[str, Any]]


def tenant_table_name(tenant_id: str) -> str:
    """Return the name of a dedicated tenant's table."""
    return f"TENANT_{tenant_id}"


def dedicated_table_template(tags: Mapping[str, str]) -> dict[str, Any]:
    """Build the per-tenant table template.

    Args:
        tags: Stack tags; ``TenantId`` is required

    Returns:
        CloudFormation template as a dictionary
    """
    tenant_id = tags.get("TenantId")
    if not tenant_id:
        raise StackOperationError("dedicated-table template requires a TenantId tag")

    table_tags = [
        {"Key": key, "Value": value}
        for key, value in tags.items()
        if key in ("TenantId", "TenantTier", "CreatedBy", "Environment")
    ]
    return {
        "AWSTemplateFormatVersion": "2010-09-09",
        "Description": f"Dedicated table for tenant {tenant_id}",
        "Resources": {
            "TenantTable": {
                "Type": "AWS::DynamoDB::Table",
                "Properties": {
                    "TableName": tenant_table_name(tenant_id),
                    "AttributeDefinitions": [
                        {"AttributeName": "pk", "AttributeType": "S"},
                        {"AttributeName": "sk", "AttributeType": "S"},
                    ],
                    "KeySchema": [
                        {"AttributeName": "pk", "KeyType": "HASH"},
                        {"AttributeName": "sk", "KeyType": "RANGE"},
                    ],
                    "BillingMode": "PAY_PER_REQUEST",
                    "PointInTimeRecoverySpecification": {
                        "PointInTimeRecoveryEnabled": True,
                    },
                    "SSESpecification": {"SSEEnabled": True},
                    "Tags": table_tags,
                },
            },
        },
        "Outputs": {
            "TenantTableName": {
                "Description": "Name of the tenant table",
                "Value": {"Ref": "TenantTable"},
            },
            "TenantTableArn": {
                "Description": "ARN of the tenant table",
                "Value": {"Fn::GetAtt": ["TenantTable", "Arn"]},
            },
        },
    }


class StackTemplateCatalog:
    """Resolves template references to rendered templates."""

    def __init__(self, generators: Mapping[str, TemplateGenerator] | None = None):
        self._generators = dict(
            generators or {DEDICATED_TABLE_TEMPLATE: dedicated_table_template}
        )

    def render(self, template_ref: str, tags: Mapping[str, str]) -> dict[str, Any]:
        """Render the template named by ``template_ref``.

        Raises:
            StackOperationError: If the reference is unknown
        """
        generator = self._generators.get(template_ref)
        if generator is None:
            raise StackOperationError(f"Unknown stack template: {template_ref}")
        return generator(tags)
