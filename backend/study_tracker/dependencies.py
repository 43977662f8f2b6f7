"""
FastAPI Dependencies

Builds the per-request repository and study service on top of the request's
database session. All requests share the process-wide materialization lock.
"""

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from study_tracker.db.base import get_db
from study_tracker.services.study import StudyRepository, StudyService


async def get_study_repository(
    db: AsyncSession = Depends(get_db),
) -> StudyRepository:
    """Get the study repository for this request's session."""
    return StudyRepository(db)


async def get_study_service(
    repo: StudyRepository = Depends(get_study_repository),
) -> StudyService:
    """Get the study service."""
    return StudyService(repo)
