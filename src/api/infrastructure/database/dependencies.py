"""Process-wide registry engine and session factory.

The tenant registry opens one short transaction per call, so consumers
receive the sessionmaker rather than a request-scoped session. Lambda
handlers run each invocation in a fresh event loop and must call
``close_database_connections`` before the loop ends.
"""

from __future__ import annotations

import threading
from dataclasses import dataclass

from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker

from infrastructure.database.engines import create_registry_engine
from infrastructure.observability import DefaultConnectionProbe
from infrastructure.settings import get_database_settings

_probe = DefaultConnectionProbe()


@dataclass(frozen=True)
class _Registry:
    engine: AsyncEngine
    sessions: async_sessionmaker[AsyncSession]


_current: _Registry | None = None
_lock = threading.Lock()


def _open() -> _Registry:
    global _current
    with _lock:
        if _current is None:
            settings = get_database_settings()
            engine = create_registry_engine(settings)
            _current = _Registry(
                engine=engine,
                sessions=async_sessionmaker(
                    engine, expire_on_commit=False, class_=AsyncSession
                ),
            )
            _probe.engine_created(
                host=settings.host,
                database=settings.database,
                pool_min=settings.pool_min_connections,
                pool_max=settings.pool_max_connections,
            )
        return _current


def get_engine() -> AsyncEngine:
    """Return the registry engine, creating it on first use."""
    current = _current or _open()
    return current.engine


def get_session_factory() -> async_sessionmaker[AsyncSession]:
    """Return the sessionmaker bound to the registry engine."""
    current = _current or _open()
    return current.sessions


async def close_database_connections() -> None:
    """Dispose the registry engine if one was created.

    The next ``get_engine`` call builds a new engine, which is what a new
    event loop needs.
    """
    global _current
    with _lock:
        current, _current = _current, None
    if current is not None:
        await current.engine.dispose()
        _probe.engine_disposed()
