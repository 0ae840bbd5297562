"""Observation context for domain-oriented observability.

Observation contexts collect and manage contextual metadata for instrumentation,
following the Domain Oriented Observability pattern.

See: https://martinfowler.com/articles/domain-oriented-observability.html
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any


@dataclass(frozen=True)
class ObservationContext:
    """Immutable context containing metadata for observability.

    Captures invocation-scoped metadata that should be included with all
    instrumentation events, so that every log line emitted while a worker
    handles one tenant can be correlated.

    Attributes:
        request_id: Identifier of the driver invocation (e.g. Lambda request id).
        tenant_id: Tenant the invocation operates on.
        operation: Worker operation (create, delete, poll).
        extra: Additional contextual metadata.

    Example:
        context = ObservationContext(request_id="req-123", tenant_id="tenant-b")
        probe = DefaultPollWorkerProbe().with_context(context)
    """

    request_id: str | None = None
    tenant_id: str | None = None
    operation: str | None = None
    extra: dict[str, Any] = field(default_factory=dict)

    def as_dict(self) -> dict[str, Any]:
        """Convert context to a dictionary for logging.

        Only includes non-None values to keep logs clean.
        """
        result: dict[str, Any] = {}
        if self.request_id is not None:
            result["request_id"] = self.request_id
        if self.tenant_id is not None:
            result["context_tenant_id"] = self.tenant_id
        if self.operation is not None:
            result["operation"] = self.operation
        result.update(self.extra)
        return result

    def with_operation(self, operation: str) -> ObservationContext:
        """Create a new context with the worker operation set."""
        return ObservationContext(
            request_id=self.request_id,
            tenant_id=self.tenant_id,
            operation=operation,
            extra=self.extra,
        )

    def with_extra(self, **kwargs: Any) -> ObservationContext:
        """Create a new context with additional metadata."""
        return ObservationContext(
            request_id=self.request_id,
            tenant_id=self.tenant_id,
            operation=self.operation,
            extra={**self.extra, **kwargs},
        )
