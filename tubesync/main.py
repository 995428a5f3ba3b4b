"""
FastAPI application entry point for the sync service.
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI

from tubesync import __version__
from tubesync.api.routes import router as api_router
from tubesync.config import get_settings
from tubesync.sync import SyncScheduler

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan handler for startup/shutdown."""
    # Startup
    settings = get_settings()
    logging.getLogger().setLevel(settings.log_level.upper())
    logger.info("Starting tubesync")
    logger.info(f"Video location: {settings.video_location or 'Not set'}")
    logger.info(f"Channels: {len(settings.channel_list)}")

    scheduler = SyncScheduler(
        config_provider=settings.to_sync_config,
        interval_hours=settings.sync_interval_hours,
    )
    app.state.scheduler = scheduler

    if settings.scheduler_enabled:
        scheduler.start(run_immediately=settings.run_on_startup)
    else:
        logger.info("Scheduler disabled (SCHEDULER_ENABLED=false); runs only on demand")

    yield

    # Shutdown
    logger.info("Shutting down tubesync")
    scheduler.stop()


# Create FastAPI app
app = FastAPI(
    title="tubesync",
    description="Mirrors recent YouTube channel uploads into a local media library",
    version=__version__,
    lifespan=lifespan,
)

# Mount API routes
app.include_router(api_router, prefix="/api")


def main():
    """Run the application with uvicorn."""
    import uvicorn
    settings = get_settings()

    uvicorn.run(
        "tubesync.main:app",
        host=settings.host,
        port=settings.port,
        reload=settings.debug,
    )


if __name__ == "__main__":
    main()
