"""HTTP entry point for the provisioning workers."""

from contextlib import asynccontextmanager

from fastapi import FastAPI

from infrastructure.database.dependencies import close_database_connections
from infrastructure.logging import configure_logging
from infrastructure.observability import DefaultServiceLifecycleProbe
from infrastructure.settings import get_settings
from infrastructure.version import __version__
from provisioning.presentation import routes as provisioning_routes

ENTRYPOINT = "http"


@asynccontextmanager
async def provisioner_lifespan(app: FastAPI):
    """Configure logging on startup and dispose the registry engine on shutdown."""
    configure_logging()
    probe = DefaultServiceLifecycleProbe()
    probe.service_started(entrypoint=ENTRYPOINT, version=__version__)

    yield

    await close_database_connections()
    probe.service_stopped(entrypoint=ENTRYPOINT)


settings = get_settings()

app = FastAPI(
    title=settings.app_name,
    debug=settings.debug,
    description="Creates, observes and decommissions per-tenant infrastructure",
    version=__version__,
    lifespan=provisioner_lifespan,
)

app.include_router(provisioning_routes.router)


@app.get("/health")
def health():
    """Liveness check."""
    return {"status": "ok"}
