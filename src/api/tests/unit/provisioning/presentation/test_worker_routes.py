"""Unit tests for the worker HTTP routes.

Workers are mocked; tests verify request parsing, response shape and the
mapping from provisioning errors to status codes.
"""

from __future__ import annotations

from unittest.mock import AsyncMock

import pytest
from fastapi import FastAPI, status
from fastapi.testclient import TestClient

from provisioning.application.services import (
    CreateInfrastructureWorker,
    DeleteInfrastructureWorker,
    PollInfrastructureWorker,
)
from provisioning.application.value_objects import WorkerResult
from provisioning.domain.aggregates import TenantInfrastructure
from provisioning.domain.value_objects import ProvisioningState, TenancyTier, TenantId
from provisioning.ports.exceptions import (
    ConflictError,
    ProvisioningPermissionError,
    ProvisioningTimeoutError,
    StackOperationError,
    TenantNotFoundError,
    TransientInfraError,
)
from provisioning.ports.repositories import ITenantRegistry
from tests.unit.provisioning.fakes import T0


@pytest.fixture
def mock_create_worker() -> AsyncMock:
    return AsyncMock(spec=CreateInfrastructureWorker)


@pytest.fixture
def mock_delete_worker() -> AsyncMock:
    return AsyncMock(spec=DeleteInfrastructureWorker)


@pytest.fixture
def mock_poll_worker() -> AsyncMock:
    return AsyncMock(spec=PollInfrastructureWorker)


@pytest.fixture
def mock_registry() -> AsyncMock:
    return AsyncMock(spec=ITenantRegistry)


@pytest.fixture
def test_client(
    mock_create_worker: AsyncMock,
    mock_delete_worker: AsyncMock,
    mock_poll_worker: AsyncMock,
    mock_registry: AsyncMock,
) -> TestClient:
    """Create TestClient with mocked dependencies."""
    from provisioning.dependencies import (
        get_create_worker,
        get_delete_worker,
        get_poll_worker,
        get_tenant_registry,
    )
    from provisioning.presentation.routes import router

    app = FastAPI()
    app.dependency_overrides[get_create_worker] = lambda: mock_create_worker
    app.dependency_overrides[get_delete_worker] = lambda: mock_delete_worker
    app.dependency_overrides[get_poll_worker] = lambda: mock_poll_worker
    app.dependency_overrides[get_tenant_registry] = lambda: mock_registry
    app.include_router(router)

    return TestClient(app)


class TestCreateRoute:
    """Tests for POST /workers/create."""

    def test_shared_tenant_returns_done(self, test_client, mock_create_worker):
        mock_create_worker.run.return_value = WorkerResult(
            tenant_id="tenant-a", provisioning_state=ProvisioningState.ACTIVE, done=True
        )

        response = test_client.post(
            "/workers/create", json={"tenantId": "tenant-a", "tier": "SHARED"}
        )

        assert response.status_code == status.HTTP_200_OK
        assert response.json() == {
            "tenantId": "tenant-a",
            "provisioningState": "ACTIVE",
            "done": True,
            "errorDetail": None,
        }
        request = mock_create_worker.run.call_args.args[0]
        assert request.tenant_id == TenantId.from_string("tenant-a")
        assert request.tier == TenancyTier.SHARED

    def test_request_id_header_reaches_context(self, test_client, mock_create_worker):
        mock_create_worker.run.return_value = WorkerResult(
            tenant_id="tenant-b",
            provisioning_state=ProvisioningState.PROVISIONING,
            done=False,
        )

        test_client.post(
            "/workers/create",
            json={"tenantId": "tenant-b", "tier": "DEDICATED", "targetAccountId": "999"},
            headers={"x-request-id": "req-42"},
        )

        context = mock_create_worker.run.call_args.kwargs["context"]
        assert context.request_id == "req-42"
        assert context.tenant_id == "tenant-b"
        assert context.operation == "create"

    def test_dedicated_without_account_is_unprocessable(
        self, test_client, mock_create_worker
    ):
        response = test_client.post(
            "/workers/create", json={"tenantId": "tenant-b", "tier": "DEDICATED"}
        )

        assert response.status_code == 422
        mock_create_worker.run.assert_not_called()

    def test_invalid_tenant_id_is_bad_request(self, test_client, mock_create_worker):
        response = test_client.post(
            "/workers/create", json={"tenantId": "tenant_a", "tier": "SHARED"}
        )

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        mock_create_worker.run.assert_not_called()


class TestErrorMapping:
    """Tests for the provisioning error to status code mapping."""

    @pytest.mark.parametrize(
        ("error", "expected_status"),
        [
            (ConflictError("in flight"), status.HTTP_409_CONFLICT),
            (TenantNotFoundError("missing"), status.HTTP_404_NOT_FOUND),
            (ProvisioningPermissionError("denied"), status.HTTP_403_FORBIDDEN),
            (TransientInfraError("throttled"), status.HTTP_503_SERVICE_UNAVAILABLE),
            (ProvisioningTimeoutError("timeout"), status.HTTP_504_GATEWAY_TIMEOUT),
            (StackOperationError("rejected"), status.HTTP_502_BAD_GATEWAY),
        ],
    )
    def test_poll_errors(self, test_client, mock_poll_worker, error, expected_status):
        mock_poll_worker.run.side_effect = error

        response = test_client.post("/workers/poll", json={"tenantId": "tenant-b"})

        assert response.status_code == expected_status
        assert response.json()["detail"] == str(error)

    def test_delete_conflict(self, test_client, mock_delete_worker):
        mock_delete_worker.run.side_effect = ConflictError("CREATE in flight")

        response = test_client.post("/workers/delete", json={"tenantId": "tenant-b"})

        assert response.status_code == status.HTTP_409_CONFLICT


class TestDeleteAndPollRoutes:
    def test_delete_returns_in_progress(self, test_client, mock_delete_worker):
        mock_delete_worker.run.return_value = WorkerResult(
            tenant_id="tenant-b",
            provisioning_state=ProvisioningState.DEPROVISIONING,
            done=False,
        )

        response = test_client.post("/workers/delete", json={"tenantId": "tenant-b"})

        assert response.status_code == status.HTTP_200_OK
        assert response.json()["provisioningState"] == "DEPROVISIONING"
        assert response.json()["done"] is False

    def test_poll_accepts_snake_case(self, test_client, mock_poll_worker):
        mock_poll_worker.run.return_value = WorkerResult(
            tenant_id="tenant-b",
            provisioning_state=ProvisioningState.FAILED,
            done=True,
            error_detail="provisioning timeout",
        )

        response = test_client.post("/workers/poll", json={"tenant_id": "tenant-b"})

        assert response.status_code == status.HTTP_200_OK
        assert response.json()["errorDetail"] == "provisioning timeout"


class TestGetTenantRoute:
    def test_returns_record(self, test_client, mock_registry):
        mock_registry.get.return_value = TenantInfrastructure.onboard_shared(
            TenantId.from_string("tenant-a"), T0
        )

        response = test_client.get("/workers/tenants/tenant-a")

        assert response.status_code == status.HTTP_200_OK
        body = response.json()
        assert body["tenantId"] == "tenant-a"
        assert body["tier"] == "SHARED"
        assert body["provisioningState"] == "ACTIVE"
        assert body["pollAttempts"] == 0

    def test_missing_record_is_not_found(self, test_client, mock_registry):
        mock_registry.get.return_value = None

        response = test_client.get("/workers/tenants/tenant-a")

        assert response.status_code == status.HTTP_404_NOT_FOUND

    def test_invalid_tenant_id_is_bad_request(self, test_client):
        response = test_client.get("/workers/tenants/tenant_a")

        assert response.status_code == status.HTTP_400_BAD_REQUEST
