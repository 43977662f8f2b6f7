"""
Study Tracker API

FastAPI application exposing subjects, study topics and spaced repetition
study sessions.

Run:
    uvicorn study_tracker.main:app --host 0.0.0.0 --port 8000
    # or
    study-tracker
"""

import logging
from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from study_tracker.config import settings
from study_tracker.db.base import dispose_engine, init_db
from study_tracker.middleware import setup_error_handling
from study_tracker.routers import health, study_sessions, study_topics, subjects
from study_tracker.services.scheduler import start_scheduler, stop_scheduler

logger = logging.getLogger(__name__)

LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"


def configure_logging() -> None:
    """Configure root logging from settings."""
    logging.basicConfig(
        level=getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO),
        format=LOG_FORMAT,
    )


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Create the schema and start the scheduler; undo on shutdown."""
    configure_logging()
    await init_db()
    logger.info("Database schema ready")

    if settings.SCHEDULER_ENABLED:
        start_scheduler()

    yield

    if settings.SCHEDULER_ENABLED:
        stop_scheduler()
    await dispose_engine()
    logger.info("Shutdown complete")


app = FastAPI(title=f"{settings.APP_NAME} API", lifespan=lifespan)

setup_error_handling(app, debug=settings.DEBUG)
# Must stay the outermost middleware: error responses need CORS headers too
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(health.router)
app.include_router(study_topics.router)
app.include_router(subjects.router)
app.include_router(study_sessions.router)


def run() -> None:
    """Console entry point: serve the API with uvicorn."""
    configure_logging()
    logger.info(f"Starting {settings.APP_NAME} on port {settings.PORT}")
    uvicorn.run(app, host="0.0.0.0", port=settings.PORT)


if __name__ == "__main__":
    run()
