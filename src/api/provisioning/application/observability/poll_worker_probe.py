"""Protocol for poll worker observability.

Defines the interface for domain probes that capture each step of the
poll state machine.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Protocol

import structlog

if TYPE_CHECKING:
    from shared_kernel.observability_context import ObservationContext


class PollWorkerProbe(Protocol):
    """Domain probe for poll worker operations."""

    def poll_skipped(self, tenant_id: str, provisioning_state: str) -> None:
        """Record that a poll was a no-op for a settled or shared tenant."""
        ...

    def stack_status_observed(
        self, tenant_id: str, status: str, outcome: str, poll_attempts: int
    ) -> None:
        """Record one observed stack status."""
        ...

    def operation_completed(self, tenant_id: str, provisioning_state: str) -> None:
        """Record that a stack operation reached its success state."""
        ...

    def operation_failed(
        self, tenant_id: str, error_detail: str, reason: str | None = None
    ) -> None:
        """Record that the stack reported a failure."""
        ...

    def operation_timed_out(self, tenant_id: str, poll_attempts: int) -> None:
        """Record that the poll budget was exhausted."""
        ...

    def pending_stack_adopted(self, tenant_id: str, stack_id: str) -> None:
        """Record that a PENDING record adopted its stack by name."""
        ...

    def submission_interrupted(self, tenant_id: str) -> None:
        """Record that a PENDING record had no stack to adopt."""
        ...

    def with_context(self, context: ObservationContext) -> PollWorkerProbe:
        """Create a new probe with observation context bound."""
        ...


class DefaultPollWorkerProbe:
    """Default implementation of PollWorkerProbe using structlog."""

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

    def with_context(self, context: ObservationContext) -> DefaultPollWorkerProbe:
        """Create a new probe with observation context bound."""
        return DefaultPollWorkerProbe(logger=self._logger, context=context)

    def poll_skipped(self, tenant_id: str, provisioning_state: str) -> None:
        """Record that a poll was a no-op for a settled or shared tenant."""
        self._logger.debug(
            "poll_skipped",
            tenant_id=tenant_id,
            provisioning_state=provisioning_state,
            **self._get_context_kwargs(),
        )

    def stack_status_observed(
        self, tenant_id: str, status: str, outcome: str, poll_attempts: int
    ) -> None:
        """Record one observed stack status."""
        self._logger.debug(
            "stack_status_observed",
            tenant_id=tenant_id,
            status=status,
            outcome=outcome,
            poll_attempts=poll_attempts,
            **self._get_context_kwargs(),
        )

    def operation_completed(self, tenant_id: str, provisioning_state: str) -> None:
        """Record that a stack operation reached its success state."""
        self._logger.info(
            "operation_completed",
            tenant_id=tenant_id,
            provisioning_state=provisioning_state,
            **self._get_context_kwargs(),
        )

    def operation_failed(
        self, tenant_id: str, error_detail: str, reason: str | None = None
    ) -> None:
        """Record that the stack reported a failure."""
        self._logger.error(
            "operation_failed",
            tenant_id=tenant_id,
            error_detail=error_detail,
            **({"reason": reason} if reason else {}),
            **self._get_context_kwargs(),
        )

    def operation_timed_out(self, tenant_id: str, poll_attempts: int) -> None:
        """Record that the poll budget was exhausted."""
        self._logger.error(
            "operation_timed_out",
            tenant_id=tenant_id,
            poll_attempts=poll_attempts,
            **self._get_context_kwargs(),
        )

    def pending_stack_adopted(self, tenant_id: str, stack_id: str) -> None:
        """Record that a PENDING record adopted its stack by name."""
        self._logger.warning(
            "pending_stack_adopted",
            tenant_id=tenant_id,
            stack_id=stack_id,
            **self._get_context_kwargs(),
        )

    def submission_interrupted(self, tenant_id: str) -> None:
        """Record that a PENDING record had no stack to adopt."""
        self._logger.error(
            "submission_interrupted",
            tenant_id=tenant_id,
            **self._get_context_kwargs(),
        )
