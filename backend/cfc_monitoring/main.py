# backend/cfc_monitoring/main.py
import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI

from cfc_monitoring import __version__
from cfc_monitoring.api.alerts import router as alerts_router
from cfc_monitoring.api.dashboard import router as dashboard_router
from cfc_monitoring.api.envelope import ApiResponse, ok, register_error_handlers
from cfc_monitoring.api.metrics import router as metrics_router
from cfc_monitoring.api.services import router as services_router
from cfc_monitoring.config import Settings
from cfc_monitoring.container import MonitoringContainer, build_container

logger = logging.getLogger(__name__)


def configure_logging(settings: Settings) -> None:
    logging.basicConfig(
        level=getattr(logging, settings.log_level.upper(), logging.INFO),
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )


def create_app(
    settings: Settings | None = None,
    container: MonitoringContainer | None = None,
) -> FastAPI:
    """Build the FastAPI application.

    Args:
        settings: Application settings, read from the environment if omitted
        container: Pre-built components. When given, the lifespan neither
            builds nor tears them down.
    """
    settings = settings or (container.settings if container else Settings())
    configure_logging(settings)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """Application lifespan handler for startup/shutdown events."""
        owned = app.state.container is None
        if owned:
            app.state.container = build_container(settings)
            await app.state.container.startup()
        logger.info("%s started", settings.app_name)
        yield
        if owned:
            await app.state.container.shutdown()
            app.state.container = None

    app = FastAPI(title=settings.app_name, version=__version__, lifespan=lifespan)
    app.state.container = container
    register_error_handlers(app)

    # Include routers
    app.include_router(alerts_router)
    app.include_router(services_router)
    app.include_router(metrics_router)
    app.include_router(dashboard_router)

    @app.get("/health", response_model=ApiResponse)
    async def health() -> ApiResponse:
        return ok({"status": "healthy", "service": "monitoring"}, "Monitoring service is running")

    return app


app = create_app()
