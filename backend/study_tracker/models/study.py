"""
Study API Models (Pydantic)

Request/response schemas for subjects, study topics and study sessions.

ARCHITECTURE NOTE:
    This file contains PYDANTIC models for API validation.
    There is a corresponding SQLAlchemy file: study_tracker/db/models.py

    Data flows: API Request → Pydantic → Service → Repository → Database
"""

from typing import Optional

from pydantic import Field

from study_tracker.models.base import StrictRequest, StrictResponse


# ===========================================
# Subjects
# ===========================================


class SubjectResponse(StrictResponse):
    """A subject, identified by its name."""

    name: str


# ===========================================
# Study Topics
# ===========================================


class StudyTopicCreate(StrictRequest):
    """
    Request to create a study topic.

    The creation date is assigned by the service (today, UTC) and is the
    anchor for the review schedule.
    """

    name: str = Field(..., description="Topic name")
    description: Optional[str] = Field(None, description="Optional description")
    subject_name: str = Field(..., description="Name of the owning subject")


class StudyTopicResponse(StrictResponse):
    """
    Study topic with its review bookkeeping.

    Dates are ISO-8601 calendar days (YYYY-MM-DD) as stored.
    """

    id: int
    name: str
    description: Optional[str] = None
    subject_name: str
    creation_date: str
    last_session_date: Optional[str] = None
    total_sessions: int = 0
    completed_sessions: int = 0


# ===========================================
# Study Sessions
# ===========================================


class StudySessionInfo(StrictResponse):
    """Pending session joined with its topic, as read from storage."""

    id: int
    due_date: str
    study_topic_name: str


class StudySessionResponse(StrictResponse):
    """Pending session as returned to clients."""

    id: int
    study_topic_name: str
    days_passed: int = Field(..., description="Days since the session fell due")
