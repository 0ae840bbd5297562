"""Delegated access to tenant-owned cloud accounts.

Every worker invocation that touches a dedicated tenant's stack obtains
fresh credentials here. Nothing is cached between invocations.
"""

from __future__ import annotations

import asyncio
from collections.abc import Awaitable, Callable

from provisioning.application.observability import (
    CrossAccountProbe,
    DefaultCrossAccountProbe,
)
from provisioning.domain.aggregates import TenantInfrastructure
from provisioning.domain.value_objects import DelegatedCredentials, TenantId
from provisioning.ports.cloud import ICredentialIssuer
from provisioning.ports.exceptions import (
    ProvisioningPermissionError,
    TransientInfraError,
)
from shared_kernel.observability_context import ObservationContext
from shared_kernel.retry import RetryConfig, retry_async

MAX_SESSION_NAME_LENGTH = 64
SESSION_NAME_PREFIX = "tenant-infra-"


def role_arn_for(target_account_id: str, role_name: str) -> str:
    """Return the ARN of the well-known cross-account role in an account."""
    return f"arn:aws:iam::{target_account_id}:role/{role_name}"


def session_name_for(tenant_id: TenantId) -> str:
    """Derive the role session name for a tenant, within the STS limit."""
    return f"{SESSION_NAME_PREFIX}{tenant_id.value}"[:MAX_SESSION_NAME_LENGTH]


class CrossAccountAccess:
    """Obtains short-lived credentials for the cross-account role.

    Transient failures are retried with exponential backoff. Once the retry
    budget is spent, or when the role cannot be assumed at all, the failure
    surfaces as ProvisioningPermissionError.
    """

    def __init__(
        self,
        issuer: ICredentialIssuer,
        role_name: str,
        duration_seconds: int,
        retry_config: RetryConfig,
        probe: CrossAccountProbe | None = None,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ):
        """Initialize CrossAccountAccess.

        Args:
            issuer: Delegated credential service
            role_name: Role name assumed in every tenant account
            duration_seconds: Lifetime of the issued credentials
            retry_config: Backoff parameters for transient failures
            probe: Optional domain probe for observability
            sleep: Awaitable sleep, injectable for tests
        """
        self._issuer = issuer
        self._role_name = role_name
        self._duration_seconds = duration_seconds
        self._retry_config = retry_config
        self._probe = probe or DefaultCrossAccountProbe()
        self._sleep = sleep

    async def assume_role(
        self, target_account_id: str, session_name: str
    ) -> DelegatedCredentials:
        """Assume the cross-account role in ``target_account_id``.

        Args:
            target_account_id: Account owning the tenant stack
            session_name: Role session name recorded in the account's audit log

        Returns:
            Freshly issued delegated credentials

        Raises:
            ProvisioningPermissionError: If the role cannot be assumed
        """
        role_arn = role_arn_for(target_account_id, self._role_name)

        def on_retry(attempt: int, delay: float, exc: Exception) -> None:
            self._probe.assume_role_retrying(
                target_account_id=target_account_id,
                attempt=attempt,
                delay=delay,
                error=str(exc),
            )

        try:
            credentials = await retry_async(
                lambda: self._issuer.assume_role(
                    role_arn=role_arn,
                    session_name=session_name,
                    duration_seconds=self._duration_seconds,
                ),
                config=self._retry_config,
                retryable_exceptions=(TransientInfraError,),
                on_retry=on_retry,
                sleep=self._sleep,
            )
        except ProvisioningPermissionError as exc:
            self._probe.assume_role_denied(target_account_id, reason=str(exc))
            raise
        except TransientInfraError as exc:
            reason = f"credentials unavailable after retries: {exc}"
            self._probe.assume_role_denied(target_account_id, reason=reason)
            raise ProvisioningPermissionError(reason) from exc

        self._probe.credentials_issued(
            target_account_id=target_account_id,
            session_name=session_name,
            expiration=credentials.expiration,
        )
        return credentials

    async def credentials_for(
        self, record: TenantInfrastructure
    ) -> DelegatedCredentials:
        """Assume the role in the account that owns a dedicated tenant's stack."""
        if not record.target_account_id:
            raise ProvisioningPermissionError(
                f"Tenant {record.tenant_id} has no target account"
            )
        return await self.assume_role(
            record.target_account_id, session_name_for(record.tenant_id)
        )

    def with_context(self, context: ObservationContext) -> CrossAccountAccess:
        """Return a copy whose probe carries ``context``."""
        return CrossAccountAccess(
            issuer=self._issuer,
            role_name=self._role_name,
            duration_seconds=self._duration_seconds,
            retry_config=self._retry_config,
            probe=self._probe.with_context(context),
            sleep=self._sleep,
        )
