"""Protocol for cross-account access observability."""

from __future__ import annotations

from datetime import datetime
from typing import TYPE_CHECKING, Any, Protocol

import structlog

if TYPE_CHECKING:
    from shared_kernel.observability_context import ObservationContext


class CrossAccountProbe(Protocol):
    """Domain probe for delegated credential requests."""

    def credentials_issued(
        self, target_account_id: str, session_name: str, expiration: datetime
    ) -> None:
        """Record that delegated credentials were obtained."""
        ...

    def assume_role_retrying(
        self, target_account_id: str, attempt: int, delay: float, error: str
    ) -> None:
        """Record a transient failure that will be retried."""
        ...

    def assume_role_denied(self, target_account_id: str, reason: str) -> None:
        """Record that the role could not be assumed."""
        ...

    def with_context(self, context: ObservationContext) -> CrossAccountProbe:
        """Create a new probe with observation context bound."""
        ...


class DefaultCrossAccountProbe:
    """Default implementation of CrossAccountProbe using structlog."""

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

    def with_context(self, context: ObservationContext) -> DefaultCrossAccountProbe:
        """Create a new probe with observation context bound."""
        return DefaultCrossAccountProbe(logger=self._logger, context=context)

    def credentials_issued(
        self, target_account_id: str, session_name: str, expiration: datetime
    ) -> None:
        """Record that delegated credentials were obtained."""
        self._logger.debug(
            "credentials_issued",
            target_account_id=target_account_id,
            session_name=session_name,
            expiration=expiration.isoformat(),
            **self._get_context_kwargs(),
        )

    def assume_role_retrying(
        self, target_account_id: str, attempt: int, delay: float, error: str
    ) -> None:
        """Record a transient failure that will be retried."""
        self._logger.warning(
            "assume_role_retrying",
            target_account_id=target_account_id,
            attempt=attempt,
            delay=round(delay, 3),
            error=error,
            **self._get_context_kwargs(),
        )

    def assume_role_denied(self, target_account_id: str, reason: str) -> None:
        """Record that the role could not be assumed."""
        self._logger.error(
            "assume_role_denied",
            target_account_id=target_account_id,
            reason=reason,
            **self._get_context_kwargs(),
        )
