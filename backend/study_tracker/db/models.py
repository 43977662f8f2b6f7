"""
SQLAlchemy Database Models

Tables:
- subjects: Subjects, keyed by their (case-sensitive) name
- study_topics: Topics under review, with spaced repetition bookkeeping
- study_sessions: Pending review markers, one per topic per day

Dates are stored as ISO-8601 text (YYYY-MM-DD). A malformed stored date is
tolerated by the due-topic selector, which skips the topic and logs it.

ARCHITECTURE NOTE:
    This file contains SQLALCHEMY models for database persistence.
    There is a corresponding Pydantic file: study_tracker/models/study.py

    Data flows: Service Layer → Repository → SQLAlchemy → Database
"""

from typing import List, Optional

from sqlalchemy import ForeignKey, Integer, String, Text, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from study_tracker.db.base import Base


ISO_DATE_LENGTH = 10


class Subject(Base):
    """
    A subject groups study topics.

    Topics reference their subject by name only. Deleting a subject leaves
    its topics in place.

    Attributes:
        name: Primary key. Case-sensitive subject name.
    """

    __tablename__ = "subjects"

    name: Mapped[str] = mapped_column(String(255), primary_key=True)


class StudyTopic(Base):
    """
    A topic reviewed on the fixed spaced repetition schedule.

    Attributes:
        id: Primary key, auto-incrementing integer identifier.
        name: Topic name shown to the learner.
        description: Optional free-text description.
        subject_name: Name of the owning subject (not a foreign key).
        creation_date: Day the topic was created. Immutable; the schedule
            is computed from it.
        last_session_date: Day a session was last materialized for the
            topic. Only ever moves forward.
        total_sessions: Number of sessions materialized so far.
        completed_sessions: Number of sessions completed so far. Never
            exceeds total_sessions.
        sessions: Pending sessions for this topic.
    """

    __tablename__ = "study_topics"

    id: Mapped[int] = mapped_column(primary_key=True)
    name: Mapped[str] = mapped_column(String(255))
    description: Mapped[Optional[str]] = mapped_column(Text)
    subject_name: Mapped[str] = mapped_column(String(255), index=True)

    creation_date: Mapped[str] = mapped_column(String(ISO_DATE_LENGTH))
    last_session_date: Mapped[Optional[str]] = mapped_column(String(ISO_DATE_LENGTH))

    total_sessions: Mapped[int] = mapped_column(Integer, default=0, server_default="0")
    completed_sessions: Mapped[int] = mapped_column(
        Integer, default=0, server_default="0"
    )

    sessions: Mapped[List["StudySession"]] = relationship(
        back_populates="study_topic",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )


class StudySession(Base):
    """
    A pending review of one topic on one day.

    Sessions are deleted once completed; they are not a history log.

    Attributes:
        id: Primary key, auto-incrementing integer identifier.
        study_topic_id: Topic under review.
        due_date: Day the session was materialized for.
    """

    __tablename__ = "study_sessions"
    __table_args__ = (
        UniqueConstraint(
            "study_topic_id", "due_date", name="uq_study_sessions_topic_due_date"
        ),
    )

    id: Mapped[int] = mapped_column(primary_key=True)
    study_topic_id: Mapped[int] = mapped_column(
        ForeignKey("study_topics.id", ondelete="CASCADE"), index=True
    )
    due_date: Mapped[str] = mapped_column(String(ISO_DATE_LENGTH))

    study_topic: Mapped["StudyTopic"] = relationship(back_populates="sessions")
