"""
Subjects API Router

Endpoints:
- GET /subjects - List subjects
- POST /subject/{subject_name} - Create a subject
- DELETE /subject/{subject_name} - Delete a subject (topics are kept)
"""

from fastapi import APIRouter, Depends

from study_tracker.dependencies import get_study_service
from study_tracker.models.base import SuccessResponse
from study_tracker.models.study import SubjectResponse
from study_tracker.services.study import StudyService

router = APIRouter(tags=["subjects"])


@router.get("/subjects", response_model=list[SubjectResponse])
async def get_subjects(
    service: StudyService = Depends(get_study_service),
) -> list[SubjectResponse]:
    """List all subjects."""
    return await service.get_study_subjects()


@router.post("/subject/{subject_name}", response_model=SuccessResponse)
async def add_subject(
    subject_name: str,
    service: StudyService = Depends(get_study_service),
) -> SuccessResponse:
    """Create a subject."""
    await service.add_subject(subject_name)
    return SuccessResponse(message=f"Subject {subject_name!r} added")


@router.delete("/subject/{subject_name}", response_model=SuccessResponse)
async def delete_subject(
    subject_name: str,
    service: StudyService = Depends(get_study_service),
) -> SuccessResponse:
    """Delete a subject. Topics filed under it are not deleted."""
    await service.delete_subject(subject_name)
    return SuccessResponse(message=f"Subject {subject_name!r} deleted")
