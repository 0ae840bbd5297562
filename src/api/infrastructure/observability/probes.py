"""Process-level domain probes.

Covers the registry engine lifecycle and the lifecycle of the process
hosting the workers, whether that is the HTTP app or a Lambda runtime.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Protocol

import structlog

if TYPE_CHECKING:
    from shared_kernel.observability_context import ObservationContext


class ConnectionProbe(Protocol):
    """Domain probe for the registry engine."""

    def engine_created(
        self, host: str, database: str, pool_min: int, pool_max: int
    ) -> None: ...

    def engine_disposed(self) -> None: ...

    def with_context(self, context: ObservationContext) -> ConnectionProbe: ...


class ServiceLifecycleProbe(Protocol):
    """Domain probe for process start, stop and failed handler invocations."""

    def service_started(self, entrypoint: str, version: str) -> None: ...

    def service_stopped(self, entrypoint: str) -> None: ...

    def invocation_failed(self, handler: str, error: Exception) -> None: ...

    def with_context(self, context: ObservationContext) -> ServiceLifecycleProbe: ...


class _StructlogProbe:
    def __init__(
        self,
        logger: structlog.stdlib.BoundLogger | None = None,
        context: ObservationContext | None = None,
    ):
        self._logger = logger or structlog.get_logger()
        self._context = context

    def _get_context_kwargs(self) -> dict[str, Any]:
        if self._context is None:
            return {}
        return self._context.as_dict()


class DefaultConnectionProbe(_StructlogProbe):
    """ConnectionProbe backed by structlog."""

    def with_context(self, context: ObservationContext) -> DefaultConnectionProbe:
        return DefaultConnectionProbe(logger=self._logger, context=context)

    def engine_created(
        self, host: str, database: str, pool_min: int, pool_max: int
    ) -> None:
        self._logger.info(
            "registry_engine_created",
            host=host,
            database=database,
            pool_min=pool_min,
            pool_max=pool_max,
            **self._get_context_kwargs(),
        )

    def engine_disposed(self) -> None:
        self._logger.info("registry_engine_disposed", **self._get_context_kwargs())


class DefaultServiceLifecycleProbe(_StructlogProbe):
    """ServiceLifecycleProbe backed by structlog."""

    def with_context(
        self, context: ObservationContext
    ) -> DefaultServiceLifecycleProbe:
        return DefaultServiceLifecycleProbe(logger=self._logger, context=context)

    def service_started(self, entrypoint: str, version: str) -> None:
        self._logger.info(
            "service_started",
            entrypoint=entrypoint,
            version=version,
            **self._get_context_kwargs(),
        )

    def service_stopped(self, entrypoint: str) -> None:
        self._logger.info(
            "service_stopped", entrypoint=entrypoint, **self._get_context_kwargs()
        )

    def invocation_failed(self, handler: str, error: Exception) -> None:
        """Record a handler invocation that ended with an exception.

        The exception is re-raised by the caller; this only records it.
        """
        self._logger.error(
            "handler_invocation_failed",
            handler=handler,
            error_type=type(error).__name__,
            error=str(error),
            **self._get_context_kwargs(),
        )
