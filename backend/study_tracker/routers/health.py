"""
Health Check Endpoints

Endpoints:
- GET / - Liveness probe
- GET /api/health - Basic health check
- GET /api/health/detailed - Health with database and scheduler status
"""

from fastapi import APIRouter, Depends
from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession

from study_tracker.config import settings
from study_tracker.db.base import get_db
from study_tracker.services.scheduler import get_scheduled_jobs, scheduler

router = APIRouter(tags=["health"])


@router.get("/")
async def liveness():
    """Liveness probe."""
    return {"message": "I am alive"}


@router.get("/api/health")
async def health_check():
    """
    Basic health check.

    Returns a simple status response indicating the API is running.
    """
    return {
        "status": "healthy",
        "service": settings.APP_NAME,
    }


@router.get("/api/health/detailed")
async def detailed_health_check(db: AsyncSession = Depends(get_db)):
    """
    Detailed health check with dependency status.

    Checks connectivity to the database and reports scheduled jobs.
    """
    health = {"status": "healthy", "service": settings.APP_NAME, "dependencies": {}}

    try:
        await db.execute(text("SELECT 1"))
        health["dependencies"]["database"] = {"status": "healthy"}
    except Exception as e:
        health["dependencies"]["database"] = {"status": "unhealthy", "error": str(e)}
        health["status"] = "degraded"

    health["dependencies"]["scheduler"] = {
        "status": "running" if scheduler.running else "stopped",
        "jobs": get_scheduled_jobs(),
    }

    return health
