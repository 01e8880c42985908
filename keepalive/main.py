"""Main FastAPI application: dashboard, stats API, and keep-alive scheduler."""
import logging
import os
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from typing import Callable, Optional

import httpx
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import FileResponse

from .config import Settings, settings, get_self_check_url
from .routers import stats_router
from .schemas.stats import HealthResponse
from .services.pinger import Pinger, default_client_factory
from .services.scheduler import SchedulerService
from .services.stats_log import Severity, StatsLog

# Configure logging
logging.basicConfig(
    level=getattr(logging, settings.log_level.upper(), logging.INFO),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)

STATIC_DIR = os.path.join(os.path.dirname(__file__), "static")


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan - startup and shutdown."""
    config: Settings = app.state.config
    stats: StatsLog = app.state.stats
    scheduler: Optional[SchedulerService] = app.state.scheduler

    logger.info(f"Pinging {config.target_url}")
    stats.record(f"Server started on port {config.port}.", Severity.INFO)

    if scheduler:
        scheduler.start()

    yield

    # Shutdown
    stats.record("Server shutting down.", Severity.WARNING)
    if scheduler:
        scheduler.stop()
    logger.info("Shutdown complete")


def create_app(
    config: Settings = settings,
    client_factory: Callable[[], httpx.AsyncClient] = default_client_factory,
    enable_scheduler: bool = True,
) -> FastAPI:
    """Create and configure the FastAPI application.

    The app owns a single StatsLog, shared by the pinger, the scheduler
    and the API routes through ``app.state``.
    """
    app = FastAPI(
        title="Keep-Alive Pinger",
        description="Keeps an idle service awake with scheduled pings",
        version="1.0.0",
        lifespan=lifespan,
    )

    stats = StatsLog()
    pinger = Pinger(stats, config.target_url, client_factory=client_factory)
    app.state.config = config
    app.state.stats = stats
    app.state.pinger = pinger
    app.state.scheduler = None
    if enable_scheduler:
        app.state.scheduler = SchedulerService(
            stats,
            pinger,
            config,
            self_check_url=get_self_check_url(config),
            client_factory=client_factory,
        )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(stats_router)

    # Health check endpoint
    @app.get("/health", response_model=HealthResponse)
    async def health_check():
        return HealthResponse(status="healthy", timestamp=datetime.now(timezone.utc))

    # Dashboard
    @app.get("/", include_in_schema=False)
    async def serve_dashboard():
        return FileResponse(os.path.join(STATIC_DIR, "index.html"))

    return app


# Create the application instance
app = create_app()


def run():
    """Run the server with uvicorn."""
    import uvicorn

    uvicorn.run(app, host=settings.host, port=settings.port)


if __name__ == "__main__":
    run()
