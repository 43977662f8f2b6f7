"""API models package."""

from study_tracker.models.base import StrictRequest, StrictResponse, SuccessResponse
from study_tracker.models.study import (
    StudySessionInfo,
    StudySessionResponse,
    StudyTopicCreate,
    StudyTopicResponse,
    SubjectResponse,
)

__all__ = [
    "StrictRequest",
    "StrictResponse",
    "SuccessResponse",
    "SubjectResponse",
    "StudyTopicCreate",
    "StudyTopicResponse",
    "StudySessionInfo",
    "StudySessionResponse",
]
