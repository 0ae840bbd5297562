"""HTTP routes exposing the lifecycle workers to the driver."""

from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, Request, status

from provisioning.application.services import (
    CreateInfrastructureWorker,
    DeleteInfrastructureWorker,
    PollInfrastructureWorker,
)
from provisioning.dependencies import (
    get_create_worker,
    get_delete_worker,
    get_poll_worker,
    get_tenant_registry,
)
from provisioning.domain.value_objects import TenantId
from provisioning.ports.exceptions import (
    ConflictError,
    InvalidStateTransitionError,
    ProvisioningError,
    ProvisioningPermissionError,
    ProvisioningTimeoutError,
    StackOperationError,
    TenantNotFoundError,
    TransientInfraError,
)
from provisioning.ports.repositories import ITenantRegistry
from provisioning.presentation.models import (
    CreateInfrastructureEvent,
    TenantEvent,
    TenantInfrastructureResponse,
    WorkerResultResponse,
)
from shared_kernel.observability_context import ObservationContext

router = APIRouter(
    prefix="/workers",
    tags=["workers"],
)

_STATUS_BY_ERROR: list[tuple[type[ProvisioningError], int]] = [
    (ConflictError, status.HTTP_409_CONFLICT),
    (InvalidStateTransitionError, status.HTTP_409_CONFLICT),
    (TenantNotFoundError, status.HTTP_404_NOT_FOUND),
    (ProvisioningPermissionError, status.HTTP_403_FORBIDDEN),
    (TransientInfraError, status.HTTP_503_SERVICE_UNAVAILABLE),
    (ProvisioningTimeoutError, status.HTTP_504_GATEWAY_TIMEOUT),
    (StackOperationError, status.HTTP_502_BAD_GATEWAY),
]


def _to_http_exception(error: ProvisioningError) -> HTTPException:
    for error_type, status_code in _STATUS_BY_ERROR:
        if isinstance(error, error_type):
            return HTTPException(status_code=status_code, detail=str(error))
    return HTTPException(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        detail="Provisioning failed",
    )


def _parse_tenant_id(value: str) -> TenantId:
    try:
        return TenantId.from_string(value)
    except ValueError as e:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Invalid tenant ID format: {e}",
        ) from e


def _observation_context(
    request: Request, tenant_id: TenantId, operation: str
) -> ObservationContext:
    return ObservationContext(
        request_id=request.headers.get("x-request-id"),
        tenant_id=tenant_id.value,
        operation=operation,
    )


@router.post("/create")
async def create_infrastructure(
    event: CreateInfrastructureEvent,
    request: Request,
    worker: Annotated[CreateInfrastructureWorker, Depends(get_create_worker)],
) -> WorkerResultResponse:
    """Run the create worker once.

    Returns:
        WorkerResultResponse; ``done`` is true for shared tenants

    Raises:
        HTTPException: 400 if tenant ID is invalid
        HTTPException: 409 if the tenant has an operation in flight or is active
        HTTPException: 403 if the tenant account denied access
        HTTPException: 503 if cloud calls kept failing transiently
    """
    try:
        create_request = event.to_request()
    except ValueError as e:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Invalid tenant ID format: {e}",
        ) from e

    context = _observation_context(request, create_request.tenant_id, "create")
    try:
        result = await worker.run(create_request, context=context)
    except ProvisioningError as e:
        raise _to_http_exception(e) from e
    return WorkerResultResponse.from_result(result)


@router.post("/delete")
async def delete_infrastructure(
    event: TenantEvent,
    request: Request,
    worker: Annotated[DeleteInfrastructureWorker, Depends(get_delete_worker)],
) -> WorkerResultResponse:
    """Run the delete worker once.

    Raises:
        HTTPException: 404 if the tenant has no record
        HTTPException: 409 if another operation is in flight
    """
    tenant_id = _parse_tenant_id(event.tenant_id)
    context = _observation_context(request, tenant_id, "delete")
    try:
        result = await worker.run(tenant_id, context=context)
    except ProvisioningError as e:
        raise _to_http_exception(e) from e
    return WorkerResultResponse.from_result(result)


@router.post("/poll")
async def poll_infrastructure(
    event: TenantEvent,
    request: Request,
    worker: Annotated[PollInfrastructureWorker, Depends(get_poll_worker)],
) -> WorkerResultResponse:
    """Run the poll worker once.

    Raises:
        HTTPException: 404 if the tenant has no record
        HTTPException: 504 if the poll budget is exhausted
    """
    tenant_id = _parse_tenant_id(event.tenant_id)
    context = _observation_context(request, tenant_id, "poll")
    try:
        result = await worker.run(tenant_id, context=context)
    except ProvisioningError as e:
        raise _to_http_exception(e) from e
    return WorkerResultResponse.from_result(result)


@router.get("/tenants/{tenant_id}")
async def get_tenant_infrastructure(
    tenant_id: str,
    registry: Annotated[ITenantRegistry, Depends(get_tenant_registry)],
) -> TenantInfrastructureResponse:
    """Get the registry record of a tenant.

    Raises:
        HTTPException: 400 if tenant ID is invalid
        HTTPException: 404 if the tenant has no record
    """
    tenant_id_obj = _parse_tenant_id(tenant_id)
    record = await registry.get(tenant_id_obj)
    if record is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Tenant {tenant_id} not found",
        )
    return TenantInfrastructureResponse.from_domain(record)
