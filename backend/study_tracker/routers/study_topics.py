"""
Study Topics API Router

Endpoints:
- GET /study_topics - List all study topics
- GET /study_topics_today - Topics due for review today
- POST /study_topic - Create a study topic
- DELETE /study_topic/{study_topic_id} - Delete a study topic
- GET /study_topic/subject/{subject_name} - Topics of one subject

Errors raised by the service propagate to the error handling middleware.
"""

from fastapi import APIRouter, Depends, status

from study_tracker.dependencies import get_study_service
from study_tracker.models.base import SuccessResponse
from study_tracker.models.study import StudyTopicCreate, StudyTopicResponse
from study_tracker.services.study import StudyService

router = APIRouter(tags=["study_topics"])


@router.get("/study_topics", response_model=list[StudyTopicResponse])
async def get_study_topics(
    service: StudyService = Depends(get_study_service),
) -> list[StudyTopicResponse]:
    """List all study topics."""
    return await service.get_study_topics()


@router.get("/study_topics_today", response_model=list[StudyTopicResponse])
async def get_study_topics_today(
    service: StudyService = Depends(get_study_service),
) -> list[StudyTopicResponse]:
    """
    List topics due for review today.

    Due days since creation: 0, 1, 3, 7, 21, 30, 45, 60 and every 60 after.
    """
    return await service.get_study_topics_for_today()


@router.post(
    "/study_topic",
    response_model=StudyTopicResponse,
    status_code=status.HTTP_201_CREATED,
)
async def add_study_topic(
    topic: StudyTopicCreate,
    service: StudyService = Depends(get_study_service),
) -> StudyTopicResponse:
    """Create a study topic. Its review schedule starts today."""
    return await service.add_study_topic(topic)


@router.delete("/study_topic/{study_topic_id}", response_model=SuccessResponse)
async def delete_study_topic(
    study_topic_id: int,
    service: StudyService = Depends(get_study_service),
) -> SuccessResponse:
    """Delete a study topic and its pending sessions."""
    await service.delete_study_topic(study_topic_id)
    return SuccessResponse(message=f"Study topic {study_topic_id} deleted")


@router.get(
    "/study_topic/subject/{subject_name}", response_model=list[StudyTopicResponse]
)
async def get_study_topics_for_subject(
    subject_name: str,
    service: StudyService = Depends(get_study_service),
) -> list[StudyTopicResponse]:
    """List the study topics of a subject."""
    return await service.get_study_topics_for_subject(subject_name)
