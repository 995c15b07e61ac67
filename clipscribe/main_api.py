"""API Service entry point - FastAPI application for clipscribe."""

import logging
import logging.config
from contextlib import asynccontextmanager
from pathlib import Path

from pythonjsonlogger import jsonlogger


# A custom formatter to produce JSON logs
class JsonFormatter(jsonlogger.JsonFormatter):
    def add_fields(self, log_record, record, message_dict):
        super().add_fields(log_record, record, message_dict)
        log_record["level"] = record.levelname.lower()
        log_record["name"] = record.name
        log_record["service"] = "clipscribe"


def setup_logging():
    """
    Set up structured JSON logging for the entire application.

    The root logger and the Alembic, Uvicorn and Gunicorn loggers all write
    JSON records to stdout.
    """
    json_logger = {"handlers": ["json_handler"], "level": "INFO", "propagate": False}
    log_config = {
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": {
            "json": {
                "()": JsonFormatter,
                "format": "%(asctime)s %(name)s %(levelname)s %(message)s",
            },
        },
        "handlers": {
            "json_handler": {
                "class": "logging.StreamHandler",
                "formatter": "json",
                "stream": "ext://sys.stdout",
            },
        },
        "root": {
            "handlers": ["json_handler"],
            "level": "INFO",
        },
        "loggers": {
            name: dict(json_logger)
            for name in (
                "alembic",
                "alembic.runtime.migration",
                "uvicorn",
                "uvicorn.access",
                "uvicorn.error",
                "gunicorn",
            )
        },
    }
    logging.config.dictConfig(log_config)


# Set up logging immediately when the module is imported, BEFORE any other imports
setup_logging()

# Now import everything else that might use logging
from fastapi import FastAPI  # noqa: E402

from clipscribe import __version__  # noqa: E402
from clipscribe.api.errors import register_exception_handlers  # noqa: E402
from clipscribe.api.media_controller import router as media_router  # noqa: E402
from clipscribe.api.project_controller import router as project_router  # noqa: E402
from clipscribe.api.sync_controller import router as sync_router  # noqa: E402
from clipscribe.api.transcription_controller import (  # noqa: E402
    router as transcription_router,
)
from clipscribe.api.video_controller import (  # noqa: E402
    project_videos_router,
)
from clipscribe.api.video_controller import router as video_router  # noqa: E402
from clipscribe.config import settings  # noqa: E402
from clipscribe.database.migrations import run_migrations  # noqa: E402

# Get a logger instance for this module
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Handle application lifespan events for the API service."""
    logger.info("API SERVICE STARTUP")

    if settings.TESTING:
        logger.info("Testing mode, skipping migrations")
    else:
        logger.info("Running migrations...")
        run_migrations()
        logger.info("Migrations done")

    Path(settings.STORAGE_DIR).mkdir(parents=True, exist_ok=True)
    logger.info(f"Storage directory ready at {settings.STORAGE_DIR}")

    if not settings.DEEPGRAM_API_KEY:
        logger.warning("DEEPGRAM_API_KEY is not set, transcription requests will fail")
    if not settings.DEEPGRAM_CALLBACK_SECRET:
        logger.warning(
            "DEEPGRAM_CALLBACK_SECRET is not set, the transcription callback "
            "accepts unauthenticated requests"
        )

    logger.info("API SERVICE STARTUP COMPLETE")
    yield
    logger.info("API SERVICE SHUTDOWN COMPLETE")


def create_app() -> FastAPI:
    """Create FastAPI application for the API service."""
    app = FastAPI(
        title="clipscribe - Video Transcription API",
        description="API for video projects, transcription and interactive transcripts",
        version=__version__,
        root_path="/api",  # Tell FastAPI about the reverse proxy prefix
        lifespan=lifespan,
    )

    register_exception_handlers(app)

    # Include routers
    app.include_router(project_router, prefix="/v1")
    app.include_router(project_videos_router, prefix="/v1")
    app.include_router(video_router, prefix="/v1")
    app.include_router(sync_router, prefix="/v1")
    app.include_router(transcription_router, prefix="/v1")
    app.include_router(media_router, prefix="/v1")
    logger.info("Routers included successfully")

    @app.get("/")
    async def root():
        """Hello world endpoint."""
        return {"message": "clipscribe API Service is running"}

    @app.get("/health")
    async def health():
        """Health check endpoint."""
        return {"status": "healthy", "service": "api"}

    return app


app = create_app()
