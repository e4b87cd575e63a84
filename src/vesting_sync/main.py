"""FastAPI application hosting the static directory and sync status."""

from datetime import datetime, timezone

from fastapi import FastAPI, Request
from fastapi.responses import PlainTextResponse
from fastapi.staticfiles import StaticFiles

from vesting_sync import __version__
from vesting_sync.core.config import Settings, get_settings
from vesting_sync.services.event_sync.supervisor import SyncSupervisor


def create_app(
    settings: Settings | None = None, supervisor: SyncSupervisor | None = None
) -> FastAPI:
    """Create and configure FastAPI application."""
    settings = settings or get_settings()

    app = FastAPI(
        title=settings.app_name,
        version=__version__,
        docs_url="/docs" if settings.debug else None,
        redoc_url=None,
        openapi_url="/openapi.json" if settings.debug else None,
    )
    app.state.settings = settings
    app.state.supervisor = supervisor

    register_routes(app)

    # Registered last so the routes above take precedence
    if settings.static_dir.is_dir():
        app.mount("/", StaticFiles(directory=settings.static_dir), name="static")

    return app


def register_routes(app: FastAPI) -> None:
    """Register all application routes."""

    @app.get("/", response_class=PlainTextResponse, tags=["System"])
    async def root() -> str:
        return "Vesting grant list!"

    @app.get("/health", tags=["System"])
    async def health_check():
        """Health check endpoint for load balancers and monitoring."""
        return {
            "status": "healthy",
            "version": __version__,
            "timestamp": datetime.now(timezone.utc).isoformat(),
        }

    @app.get("/status", tags=["Sync"])
    async def sync_status(request: Request):
        """Current state of the sync loop."""
        supervisor = request.app.state.supervisor
        if supervisor is None or supervisor.scheduler is None:
            return {"state": "starting"}
        return supervisor.scheduler.status()
