"""
Scheduled Job Configuration

Configures the daily session materialization job using APScheduler.

Execution Context:
    The scheduler runs IN-PROCESS with FastAPI. It is started/stopped via
    FastAPI's lifespan context manager in study_tracker/main.py.

    Flow:
        uvicorn starts FastAPI -> lifespan() calls start_scheduler()
        -> APScheduler runs in the event loop -> materialize_sessions job
        shares the materialization lock with HTTP requests

Limitations:
    - Single instance only: each replica would run its own job. The
      (study_topic_id, due_date) unique constraint keeps the result
      correct, but counters are only guarded within one process.

Usage:
    # Automatic (via FastAPI lifespan in main.py):
    start_scheduler()  # On app startup
    stop_scheduler()   # On app shutdown

    # Manual trigger for testing:
    from study_tracker.services.scheduler import trigger_job_now
    trigger_job_now("materialize_sessions")
"""

import logging
from datetime import datetime, timezone

from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.cron import CronTrigger

from study_tracker.config import settings, yaml_config

logger = logging.getLogger(__name__)

MATERIALIZE_JOB_ID = "materialize_sessions"

# Global scheduler instance
scheduler = AsyncIOScheduler(timezone=timezone.utc)


async def materialize_daily_sessions() -> int:
    """Materialize today's study sessions with a dedicated database session."""
    # Deferred imports: avoid building the engine until the job first runs.
    from study_tracker.db.base import async_session_maker
    from study_tracker.services.study import StudyRepository, StudyService

    async with async_session_maker() as db:
        service = StudyService(StudyRepository(db))
        created = await service.materialize_today()

    logger.info(f"Daily materialization complete: {created} session(s) created")
    return created


def setup_scheduled_jobs() -> None:
    """Configure the scheduled jobs."""
    misfire_grace_time = yaml_config.get("scheduler", {}).get(
        "misfire_grace_time", 3600
    )

    scheduler.add_job(
        materialize_daily_sessions,
        CronTrigger(
            hour=settings.MATERIALIZE_HOUR,
            minute=settings.MATERIALIZE_MINUTE,
            timezone=timezone.utc,
        ),
        id=MATERIALIZE_JOB_ID,
        name="Daily Study Session Materialization",
        replace_existing=True,
        misfire_grace_time=misfire_grace_time,
    )

    logger.info(
        f"Scheduled jobs configured: session materialization daily at "
        f"{settings.MATERIALIZE_HOUR:02d}:{settings.MATERIALIZE_MINUTE:02d} UTC"
    )


def start_scheduler() -> None:
    """Start the scheduler and configure jobs."""
    if scheduler.running:
        logger.warning("Scheduler already running")
        return

    setup_scheduled_jobs()
    scheduler.start()
    logger.info("Scheduler started")


def stop_scheduler() -> None:
    """Stop the scheduler gracefully."""
    if not scheduler.running:
        logger.warning("Scheduler not running")
        return

    scheduler.shutdown(wait=True)
    logger.info("Scheduler stopped")


def get_scheduled_jobs() -> list[dict]:
    """Get list of scheduled jobs with their next run times."""
    jobs = []
    for job in scheduler.get_jobs():
        # Jobs added before start() have no next_run_time yet
        next_run = getattr(job, "next_run_time", None)
        jobs.append(
            {
                "id": job.id,
                "name": job.name,
                "next_run": next_run.isoformat() if next_run else None,
                "trigger": str(job.trigger),
            }
        )
    return jobs


def trigger_job_now(job_id: str) -> bool:
    """
    Manually trigger a scheduled job immediately.

    Args:
        job_id: ID of the job to trigger

    Returns:
        True if triggered successfully
    """
    job = scheduler.get_job(job_id)
    if job:
        job.modify(next_run_time=datetime.now(timezone.utc))
        logger.info(f"Manually triggered job: {job_id}")
        return True

    logger.warning(f"Job not found: {job_id}")
    return False
