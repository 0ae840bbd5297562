"""Domain probe for tenant registry operations.

Following Domain-Oriented Observability patterns, this probe captures
domain-significant events of the registry, most importantly lost
compare-and-swap races.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Protocol

import structlog

if TYPE_CHECKING:
    from shared_kernel.observability_context import ObservationContext


class TenantRegistryProbe(Protocol):
    """Domain probe for tenant registry operations."""

    def record_retrieved(self, tenant_id: str, provisioning_state: str) -> None:
        """Record that a tenant record was read."""
        ...

    def record_not_found(self, tenant_id: str) -> None:
        """Record that no record exists for a tenant."""
        ...

    def record_saved(
        self, tenant_id: str, provisioning_state: str, version: int
    ) -> None:
        """Record that a conditional write succeeded."""
        ...

    def record_removed(self, tenant_id: str) -> None:
        """Record that a tenant record was removed."""
        ...

    def write_conflict(self, tenant_id: str, expected_version: int) -> None:
        """Record that a conditional write lost a race."""
        ...

    def with_context(self, context: ObservationContext) -> TenantRegistryProbe:
        """Create a new probe with observation context bound."""
        ...


class DefaultTenantRegistryProbe:
    """Default implementation of TenantRegistryProbe using structlog."""

    def __init__(
        self,
        logger: structlog.stdlib.BoundLogger | None = None,
        context: ObservationContext | None = None,
    ):
        self._logger = logger or structlog.get_logger()
        self._context = context

    def _get_context_kwargs(self) -> dict[str, Any]:
        """Get context metadata as kwargs for logging."""
        if self._context is None:
            return {}
        return self._context.as_dict()

    def with_context(self, context: ObservationContext) -> DefaultTenantRegistryProbe:
        """Create a new probe with observation context bound."""
        return DefaultTenantRegistryProbe(logger=self._logger, context=context)

    def record_retrieved(self, tenant_id: str, provisioning_state: str) -> None:
        self._logger.debug(
            "tenant_record_retrieved",
            tenant_id=tenant_id,
            provisioning_state=provisioning_state,
            **self._get_context_kwargs(),
        )

    def record_not_found(self, tenant_id: str) -> None:
        self._logger.debug(
            "tenant_record_not_found",
            tenant_id=tenant_id,
            **self._get_context_kwargs(),
        )

    def record_saved(
        self, tenant_id: str, provisioning_state: str, version: int
    ) -> None:
        self._logger.info(
            "tenant_record_saved",
            tenant_id=tenant_id,
            provisioning_state=provisioning_state,
            version=version,
            **self._get_context_kwargs(),
        )

    def record_removed(self, tenant_id: str) -> None:
        self._logger.info(
            "tenant_record_removed",
            tenant_id=tenant_id,
            **self._get_context_kwargs(),
        )

    def write_conflict(self, tenant_id: str, expected_version: int) -> None:
        self._logger.warning(
            "tenant_record_write_conflict",
            tenant_id=tenant_id,
            expected_version=expected_version,
            **self._get_context_kwargs(),
        )
