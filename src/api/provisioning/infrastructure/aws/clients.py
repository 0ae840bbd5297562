"""Construction of boto3 clients.

Clients are built per call. Calls into a tenant account use the delegated
credentials of that call; calls against the orchestrator's own account use
the default credential chain.
"""

from __future__ import annotations

from typing import Any

import boto3
from botocore.config import Config

from provisioning.domain.value_objects import DelegatedCredentials


class BotoClientFactory:
    """Builds boto3 clients and resources for one region.

    SDK-level retries are disabled: retry policy is owned by the adapters so
    the number of attempts per invocation stays bounded and observable.
    """

    def __init__(self, region: str, config: Config | None = None):
        self._region = region
        self._config = config or Config(
            retries={"total_max_attempts": 1, "mode": "standard"},
        )

    @property
    def region(self) -> str:
        """Region every client is bound to."""
        return self._region

    def _session(self, credentials: DelegatedCredentials | None) -> boto3.session.Session:
        if credentials is None:
            return boto3.session.Session(region_name=self._region)
        return boto3.session.Session(
            aws_access_key_id=credentials.access_key_id,
            aws_secret_access_key=credentials.secret_access_key,
            aws_session_token=credentials.session_token,
            region_name=self._region,
        )

    def client(
        self, service_name: str, credentials: DelegatedCredentials | None = None
    ) -> Any:
        """Return a low-level client for ``service_name``."""
        return self._session(credentials).client(service_name, config=self._config)

    def resource(
        self, service_name: str, credentials: DelegatedCredentials | None = None
    ) -> Any:
        """Return a resource interface for ``service_name``."""
        return self._session(credentials).resource(service_name, config=self._config)
