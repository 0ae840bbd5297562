"""Protocol for create worker observability.

Defines the interface for domain probes that capture lifecycle events of
the create worker.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Protocol

import structlog

if TYPE_CHECKING:
    from shared_kernel.observability_context import ObservationContext


class CreateWorkerProbe(Protocol):
    """Domain probe for create worker operations."""

    def shared_tenant_onboarded(self, tenant_id: str) -> None:
        """Record that a shared tenant became ACTIVE."""
        ...

    def tenant_claimed(self, tenant_id: str, target_account_id: str) -> None:
        """Record that a dedicated tenant was claimed as PENDING."""
        ...

    def stack_submitted(self, tenant_id: str, stack_name: str, stack_id: str) -> None:
        """Record that the stack-create call was accepted."""
        ...

    def existing_stack_adopted(
        self, tenant_id: str, stack_name: str, stack_id: str
    ) -> None:
        """Record that an already-submitted stack was adopted."""
        ...

    def create_conflict(self, tenant_id: str, reason: str) -> None:
        """Record that a create was rejected because of a conflict."""
        ...

    def create_failed(
        self, tenant_id: str, error_detail: str, reason: str | None = None
    ) -> None:
        """Record that a create submission failed and the record is FAILED."""
        ...

    def with_context(self, context: ObservationContext) -> CreateWorkerProbe:
        """Create a new probe with observation context bound."""
        ...


class DefaultCreateWorkerProbe:
    """Default implementation of CreateWorkerProbe using structlog."""

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

    def with_context(self, context: ObservationContext) -> DefaultCreateWorkerProbe:
        """Create a new probe with observation context bound."""
        return DefaultCreateWorkerProbe(logger=self._logger, context=context)

    def shared_tenant_onboarded(self, tenant_id: str) -> None:
        """Record that a shared tenant became ACTIVE."""
        self._logger.info(
            "shared_tenant_onboarded",
            tenant_id=tenant_id,
            **self._get_context_kwargs(),
        )

    def tenant_claimed(self, tenant_id: str, target_account_id: str) -> None:
        """Record that a dedicated tenant was claimed as PENDING."""
        self._logger.debug(
            "tenant_claimed",
            tenant_id=tenant_id,
            target_account_id=target_account_id,
            **self._get_context_kwargs(),
        )

    def stack_submitted(self, tenant_id: str, stack_name: str, stack_id: str) -> None:
        """Record that the stack-create call was accepted."""
        self._logger.info(
            "stack_submitted",
            tenant_id=tenant_id,
            stack_name=stack_name,
            stack_id=stack_id,
            **self._get_context_kwargs(),
        )

    def existing_stack_adopted(
        self, tenant_id: str, stack_name: str, stack_id: str
    ) -> None:
        """Record that an already-submitted stack was adopted."""
        self._logger.warning(
            "existing_stack_adopted",
            tenant_id=tenant_id,
            stack_name=stack_name,
            stack_id=stack_id,
            **self._get_context_kwargs(),
        )

    def create_conflict(self, tenant_id: str, reason: str) -> None:
        """Record that a create was rejected because of a conflict."""
        self._logger.warning(
            "create_conflict",
            tenant_id=tenant_id,
            reason=reason,
            **self._get_context_kwargs(),
        )

    def create_failed(
        self, tenant_id: str, error_detail: str, reason: str | None = None
    ) -> None:
        """Record that a create submission failed and the record is FAILED."""
        self._logger.error(
            "create_failed",
            tenant_id=tenant_id,
            error_detail=error_detail,
            **({"reason": reason} if reason else {}),
            **self._get_context_kwargs(),
        )
