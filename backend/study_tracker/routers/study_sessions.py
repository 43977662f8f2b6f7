"""
Study Sessions API Router

Endpoints:
- GET /study_session/{subject_name} - Pending sessions of a subject
  (today's sessions are materialized first)
- POST /study_session/complete/{study_session_id} - Complete a session
"""

from fastapi import APIRouter, Depends

from study_tracker.dependencies import get_study_service
from study_tracker.models.base import SuccessResponse
from study_tracker.models.study import StudySessionResponse
from study_tracker.services.study import StudyService

router = APIRouter(prefix="/study_session", tags=["study_sessions"])


@router.get("/{subject_name}", response_model=list[StudySessionResponse])
async def get_study_sessions_for_subject(
    subject_name: str,
    service: StudyService = Depends(get_study_service),
) -> list[StudySessionResponse]:
    """
    List pending study sessions for a subject.

    Creates today's sessions for every due topic before reading, so the
    response always includes today's reviews.
    """
    return await service.get_study_sessions_for_subject(subject_name)


@router.post("/complete/{study_session_id}", response_model=SuccessResponse)
async def complete_study_session(
    study_session_id: int,
    service: StudyService = Depends(get_study_service),
) -> SuccessResponse:
    """
    Complete a study session.

    Counts the completion on the session's topic and removes the session.
    Returns 404 if the session does not exist.
    """
    await service.complete_study_session(study_session_id)
    return SuccessResponse(message=f"Study session {study_session_id} completed")
