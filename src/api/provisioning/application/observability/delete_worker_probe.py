"""Protocol for delete worker observability."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Protocol

import structlog

if TYPE_CHECKING:
    from shared_kernel.observability_context import ObservationContext


class DeleteWorkerProbe(Protocol):
    """Domain probe for delete worker operations."""

    def tenant_not_found(self, tenant_id: str) -> None:
        """Record that the tenant to delete has no record."""
        ...

    def already_deleted(self, tenant_id: str) -> None:
        """Record that a delete was a no-op because the tenant is DELETED."""
        ...

    def shared_tenant_removed(self, tenant_id: str, rows_removed: int) -> None:
        """Record that a shared tenant and its rows were removed."""
        ...

    def deleted_without_stack(self, tenant_id: str) -> None:
        """Record that a dedicated tenant with no stack was marked DELETED."""
        ...

    def stack_deletion_submitted(self, tenant_id: str, stack_ref: str) -> None:
        """Record that the stack-delete call was accepted."""
        ...

    def delete_conflict(self, tenant_id: str, reason: str) -> None:
        """Record that a delete was rejected because of a conflict."""
        ...

    def delete_failed(
        self, tenant_id: str, error_detail: str, reason: str | None = None
    ) -> None:
        """Record that a delete submission failed and the record is FAILED."""
        ...

    def with_context(self, context: ObservationContext) -> DeleteWorkerProbe:
        """Create a new probe with observation context bound."""
        ...


class DefaultDeleteWorkerProbe:
    """Default implementation of DeleteWorkerProbe using structlog."""

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

    def with_context(self, context: ObservationContext) -> DefaultDeleteWorkerProbe:
        """Create a new probe with observation context bound."""
        return DefaultDeleteWorkerProbe(logger=self._logger, context=context)

    def tenant_not_found(self, tenant_id: str) -> None:
        self._logger.warning(
            "tenant_not_found",
            tenant_id=tenant_id,
            **self._get_context_kwargs(),
        )

    def already_deleted(self, tenant_id: str) -> None:
        self._logger.debug(
            "already_deleted",
            tenant_id=tenant_id,
            **self._get_context_kwargs(),
        )

    def shared_tenant_removed(self, tenant_id: str, rows_removed: int) -> None:
        self._logger.info(
            "shared_tenant_removed",
            tenant_id=tenant_id,
            rows_removed=rows_removed,
            **self._get_context_kwargs(),
        )

    def deleted_without_stack(self, tenant_id: str) -> None:
        self._logger.info(
            "deleted_without_stack",
            tenant_id=tenant_id,
            **self._get_context_kwargs(),
        )

    def stack_deletion_submitted(self, tenant_id: str, stack_ref: str) -> None:
        self._logger.info(
            "stack_deletion_submitted",
            tenant_id=tenant_id,
            stack_ref=stack_ref,
            **self._get_context_kwargs(),
        )

    def delete_conflict(self, tenant_id: str, reason: str) -> None:
        self._logger.warning(
            "delete_conflict",
            tenant_id=tenant_id,
            reason=reason,
            **self._get_context_kwargs(),
        )

    def delete_failed(
        self, tenant_id: str, error_detail: str, reason: str | None = None
    ) -> None:
        self._logger.error(
            "delete_failed",
            tenant_id=tenant_id,
            error_detail=error_detail,
            **({"reason": reason} if reason else {}),
            **self._get_context_kwargs(),
        )
