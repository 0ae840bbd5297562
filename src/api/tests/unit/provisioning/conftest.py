"""Fixtures wiring the provisioning workers to in-memory fakes."""

import pytest

from provisioning.application.cross_account import CrossAccountAccess
from provisioning.application.services import (
    CreateInfrastructureWorker,
    DeleteInfrastructureWorker,
    PollInfrastructureWorker,
)
from shared_kernel.retry import RetryConfig
from tests.unit.provisioning.fakes import (
    MAX_POLL_ATTEMPTS,
    FakeCredentialIssuer,
    FakeSharedTenantStore,
    FakeStackService,
    FixedClock,
    InMemoryTenantRegistry,
)


async def _no_sleep(_delay: float) -> None:
    return None


@pytest.fixture
def clock():
    return FixedClock()


@pytest.fixture
def registry():
    return InMemoryTenantRegistry()


@pytest.fixture
def issuer():
    return FakeCredentialIssuer()


@pytest.fixture
def stacks():
    return FakeStackService()


@pytest.fixture
def shared_store():
    return FakeSharedTenantStore()


@pytest.fixture
def cross_account(issuer):
    return CrossAccountAccess(
        issuer=issuer,
        role_name="CrossAccountTenantRole",
        duration_seconds=3600,
        retry_config=RetryConfig(max_retries=3, base_delay=0.01, jitter=False),
        sleep=_no_sleep,
    )


@pytest.fixture
def create_worker(registry, cross_account, stacks, shared_store, clock):
    return CreateInfrastructureWorker(
        registry=registry,
        cross_account=cross_account,
        stack_service=stacks,
        shared_store=shared_store,
        clock=clock,
    )


@pytest.fixture
def delete_worker(registry, cross_account, stacks, shared_store, clock):
    return DeleteInfrastructureWorker(
        registry=registry,
        cross_account=cross_account,
        stack_service=stacks,
        shared_store=shared_store,
        clock=clock,
    )


@pytest.fixture
def poll_worker(registry, cross_account, stacks, clock):
    return PollInfrastructureWorker(
        registry=registry,
        cross_account=cross_account,
        stack_service=stacks,
        max_poll_attempts=MAX_POLL_ATTEMPTS,
        clock=clock,
    )
