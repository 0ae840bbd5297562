"""STS implementation of ICredentialIssuer."""

from __future__ import annotations

import asyncio
from typing import Any

from botocore.exceptions import ClientError

from provisioning.domain.value_objects import DelegatedCredentials
from provisioning.infrastructure.aws.clients import BotoClientFactory
from provisioning.infrastructure.aws.errors import (
    TRANSPORT_ERRORS,
    translate_client_error,
    translate_transport_error,
)
from provisioning.ports.cloud import ICredentialIssuer
from provisioning.ports.exceptions import (
    ProvisioningPermissionError,
    TransientInfraError,
)


class StsCredentialIssuer(ICredentialIssuer):
    """Assumes cross-account roles through STS.

    One attempt per call; the caller owns retries. Any failure that is not
    transient means the role cannot be assumed and is reported as a
    permission error.
    """

    def __init__(self, clients: BotoClientFactory):
        self._clients = clients

    async def assume_role(
        self,
        role_arn: str,
        session_name: str,
        duration_seconds: int,
    ) -> DelegatedCredentials:
        """Assume ``role_arn`` and return its temporary credentials."""

        def call() -> dict[str, Any]:
            sts = self._clients.client("sts")
            return sts.assume_role(
                RoleArn=role_arn,
                RoleSessionName=session_name,
                DurationSeconds=duration_seconds,
            )

        action = f"assume role {role_arn}"
        try:
            response = await asyncio.to_thread(call)
        except ClientError as exc:
            error = translate_client_error(exc, action)
            if isinstance(error, TransientInfraError):
                raise error from exc
            raise ProvisioningPermissionError(str(error)) from exc
        except TRANSPORT_ERRORS as exc:
            raise translate_transport_error(exc, action) from exc

        credentials = response["Credentials"]
        return DelegatedCredentials(
            access_key_id=credentials["AccessKeyId"],
            secret_access_key=credentials["SecretAccessKey"],
            session_token=credentials["SessionToken"],
            expiration=credentials["Expiration"],
        )
