"""DynamoDB implementation of ISharedTenantStore.

Shared tenants live in one table keyed by ``pk = TENANT#<id>``. Onboarding
writes the ``init`` row; removal deletes every row under the tenant's key.
"""

from __future__ import annotations

import asyncio
from collections.abc import Awaitable, Callable
from datetime import UTC, datetime
from typing import TypeVar

from boto3.dynamodb.conditions import Key
from botocore.exceptions import ClientError

from provisioning.domain.value_objects import TenantId
from provisioning.infrastructure.aws.clients import BotoClientFactory
from provisioning.infrastructure.aws.errors import (
    TRANSPORT_ERRORS,
    translate_client_error,
    translate_transport_error,
)
from provisioning.ports.cloud import ISharedTenantStore
from provisioning.ports.exceptions import TransientInfraError
from shared_kernel.retry import RetryConfig, retry_async

T = TypeVar("T")

INIT_SORT_KEY = "init"


def tenant_partition_key(tenant_id: TenantId) -> str:
    """Return the partition key of a shared tenant's rows."""
    return f"TENANT#{tenant_id.value}"


class DynamoDBSharedTenantStore(ISharedTenantStore):
    """Shared tenant rows in the orchestrator's own account."""

    def __init__(
        self,
        clients: BotoClientFactory,
        table_name: str,
        retry_config: RetryConfig,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ):
        self._clients = clients
        self._table_name = table_name
        self._retry_config = retry_config
        self._sleep = sleep

    async def put_tenant(self, tenant_id: TenantId) -> None:
        """Insert the ``init`` row of a shared tenant.

        Writing the row again is harmless, so a retried onboarding does not
        need a condition expression.
        """

        def put() -> None:
            self._table().put_item(
                Item={
                    "pk": tenant_partition_key(tenant_id),
                    "sk": INIT_SORT_KEY,
                    "tenantId": tenant_id.value,
                    "createdAt": datetime.now(UTC).isoformat(),
                }
            )

        await self._call(f"put shared tenant {tenant_id}", put)

    async def delete_tenant(self, tenant_id: TenantId) -> int:
        """Delete every row of a shared tenant and return how many were removed."""

        def delete_all() -> int:
            table = self._table()
            keys: list[dict[str, str]] = []
            query_kwargs = {
                "KeyConditionExpression": Key("pk").eq(tenant_partition_key(tenant_id)),
                "ProjectionExpression": "pk, sk",
            }
            while True:
                page = table.query(**query_kwargs)
                keys.extend(
                    {"pk": item["pk"], "sk": item["sk"]} for item in page.get("Items", [])
                )
                last_key = page.get("LastEvaluatedKey")
                if not last_key:
                    break
                query_kwargs["ExclusiveStartKey"] = last_key

            with table.batch_writer() as batch:
                for key in keys:
                    batch.delete_item(Key=key)
            return len(keys)

        return await self._call(f"delete shared tenant {tenant_id}", delete_all)

    def _table(self):
        return self._clients.resource("dynamodb").Table(self._table_name)

    async def _call(self, action: str, operation: Callable[[], T]) -> T:
        def invoke() -> T:
            try:
                return operation()
            except ClientError as exc:
                raise translate_client_error(exc, action) from exc
            except TRANSPORT_ERRORS as exc:
                raise translate_transport_error(exc, action) from exc

        return await retry_async(
            lambda: asyncio.to_thread(invoke),
            config=self._retry_config,
            retryable_exceptions=(TransientInfraError,),
            sleep=self._sleep,
        )
