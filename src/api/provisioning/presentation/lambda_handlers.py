"""Lambda entry points for the lifecycle driver.

The state-machine driver invokes one handler per step with a camelCase
event and branches on the returned ``done`` flag. Any exception is left to
propagate so the driver marks the execution as failed.

Every invocation runs in its own event loop, so registry connections are
closed before the handler returns.
"""

from __future__ import annotations

import asyncio
from collections.abc import Awaitable, Callable
from functools import cache
from typing import Any

from infrastructure.database.dependencies import close_database_connections
from infrastructure.logging import configure_logging
from infrastructure.observability import DefaultServiceLifecycleProbe
from provisioning.application.value_objects import WorkerResult
from provisioning.dependencies import (
    get_create_worker,
    get_cross_account_access,
    get_delete_worker,
    get_poll_worker,
    get_shared_tenant_store,
    get_stack_service,
    get_tenant_registry,
)
from provisioning.presentation.models import (
    CreateInfrastructureEvent,
    TenantEvent,
    WorkerResultResponse,
)
from shared_kernel.observability_context import ObservationContext


@cache
def _configure() -> None:
    configure_logging()


def _observation_context(
    context: Any, tenant_id: str, operation: str
) -> ObservationContext:
    return ObservationContext(
        request_id=getattr(context, "aws_request_id", None),
        tenant_id=tenant_id,
        operation=operation,
    )


def _invoke(
    handler: str,
    observation: ObservationContext,
    run: Callable[[], Awaitable[WorkerResult]],
) -> dict[str, Any]:
    _configure()

    async def invoke() -> WorkerResult:
        try:
            return await run()
        finally:
            await close_database_connections()

    try:
        result = asyncio.run(invoke())
    except Exception as e:
        DefaultServiceLifecycleProbe().with_context(observation).invocation_failed(
            handler, e
        )
        raise
    return WorkerResultResponse.from_result(result).model_dump(by_alias=True)


def create_infrastructure_handler(event: dict[str, Any], context: Any) -> dict[str, Any]:
    """Run the create worker for ``event``.

    Event: ``{"tenantId", "tier", "targetAccountId"?, "templateRef"?}``
    """
    request = CreateInfrastructureEvent.model_validate(event).to_request()
    worker = get_create_worker(
        registry=get_tenant_registry(),
        cross_account=get_cross_account_access(),
        stack_service=get_stack_service(),
        shared_store=get_shared_tenant_store(),
    )
    observation = _observation_context(context, request.tenant_id.value, "create")
    return _invoke(
        "create", observation, lambda: worker.run(request, context=observation)
    )


def delete_infrastructure_handler(event: dict[str, Any], context: Any) -> dict[str, Any]:
    """Run the delete worker for ``event``.

    Event: ``{"tenantId"}``
    """
    tenant_id = TenantEvent.model_validate(event).to_tenant_id()
    worker = get_delete_worker(
        registry=get_tenant_registry(),
        cross_account=get_cross_account_access(),
        stack_service=get_stack_service(),
        shared_store=get_shared_tenant_store(),
    )
    observation = _observation_context(context, tenant_id.value, "delete")
    return _invoke(
        "delete", observation, lambda: worker.run(tenant_id, context=observation)
    )


def poll_infrastructure_handler(event: dict[str, Any], context: Any) -> dict[str, Any]:
    """Run the poll worker for ``event``.

    Event: ``{"tenantId"}``
    """
    tenant_id = TenantEvent.model_validate(event).to_tenant_id()
    worker = get_poll_worker(
        registry=get_tenant_registry(),
        cross_account=get_cross_account_access(),
        stack_service=get_stack_service(),
    )
    observation = _observation_context(context, tenant_id.value, "poll")
    return _invoke(
        "poll", observation, lambda: worker.run(tenant_id, context=observation)
    )
