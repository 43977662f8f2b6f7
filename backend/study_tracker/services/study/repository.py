"""
Study Repository

Statement-level access to subjects, study topics and study sessions.

Every write commits on its own. Nothing here groups statements into a larger
transaction: callers that need several writes (materialization, completion)
issue them one by one and accept best-effort consistency between them.

Usage:
    from study_tracker.services.study import StudyRepository

    repo = StudyRepository(db_session)
    topics = await repo.get_all_topics()
"""

import logging
from contextlib import asynccontextmanager
from typing import Optional

from pydantic import ValidationError
from sqlalchemy import String, delete, func, literal, or_, select, update
from sqlalchemy.dialects.postgresql import insert
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from study_tracker.db.models import StudySession, StudyTopic, Subject
from study_tracker.middleware.error_handling import StorageError
from study_tracker.models.study import (
    StudySessionInfo,
    StudyTopicCreate,
    StudyTopicResponse,
    SubjectResponse,
)

logger = logging.getLogger(__name__)

ISO_DATE_PATTERN = r"^[0-9]{4}-[0-9]{2}-[0-9]{2}$"


class StudyRepository:
    """
    Storage collaborator for the study scheduling engine.

    Failures are logged and re-raised as StorageError so the API reports
    them uniformly as server errors.
    """

    def __init__(self, db: AsyncSession):
        """
        Initialize the repository.

        Args:
            db: Async database session
        """
        self.db = db

    @asynccontextmanager
    async def _storage_errors(self, operation: str):
        """Translate driver and row-decoding failures into StorageError."""
        try:
            yield
        except (SQLAlchemyError, ValidationError) as e:
            logger.error(f"Storage operation '{operation}' failed: {e}")
            try:
                await self.db.rollback()
            except SQLAlchemyError:
                logger.exception("Rollback after failed '%s' also failed", operation)
            raise StorageError(
                f"Storage operation '{operation}' failed",
                details={"operation": operation},
            ) from e

    # =========================================================================
    # Subjects
    # =========================================================================

    async def get_subjects(self) -> list[SubjectResponse]:
        """List all subjects ordered by name."""
        async with self._storage_errors("get_subjects"):
            result = await self.db.execute(select(Subject).order_by(Subject.name))
            return [SubjectResponse.model_validate(s) for s in result.scalars().all()]

    async def add_subject(self, subject_name: str) -> None:
        """Create a subject. Fails if the name already exists."""
        async with self._storage_errors("add_subject"):
            self.db.add(Subject(name=subject_name))
            await self.db.commit()

    async def delete_subject(self, subject_name: str) -> None:
        """Delete a subject. Its topics are left untouched."""
        async with self._storage_errors("delete_subject"):
            await self.db.execute(delete(Subject).where(Subject.name == subject_name))
            await self.db.commit()

    # =========================================================================
    # Study Topics
    # =========================================================================

    async def get_all_topics(self) -> list[StudyTopicResponse]:
        """List every study topic."""
        async with self._storage_errors("get_all_topics"):
            result = await self.db.execute(select(StudyTopic).order_by(StudyTopic.id))
            return [
                StudyTopicResponse.model_validate(t) for t in result.scalars().all()
            ]

    async def get_topics_for_subject(
        self, subject_name: str
    ) -> list[StudyTopicResponse]:
        """List the study topics of one subject."""
        async with self._storage_errors("get_topics_for_subject"):
            result = await self.db.execute(
                select(StudyTopic)
                .where(StudyTopic.subject_name == subject_name)
                .order_by(StudyTopic.id)
            )
            return [
                StudyTopicResponse.model_validate(t) for t in result.scalars().all()
            ]

    async def add_topic(
        self, info: StudyTopicCreate, creation_date: str
    ) -> StudyTopicResponse:
        """
        Insert a new study topic.

        Args:
            info: Topic fields from the request
            creation_date: ISO date the schedule is anchored to

        Returns:
            The stored topic
        """
        async with self._storage_errors("add_topic"):
            topic = StudyTopic(
                name=info.name,
                description=info.description,
                subject_name=info.subject_name,
                creation_date=creation_date,
                total_sessions=0,
                completed_sessions=0,
            )
            self.db.add(topic)
            await self.db.commit()
            await self.db.refresh(topic)
            return StudyTopicResponse.model_validate(topic)

    async def delete_topic(self, topic_id: int) -> None:
        """Delete a topic; its pending sessions go with it (FK cascade)."""
        async with self._storage_errors("delete_topic"):
            await self.db.execute(delete(StudyTopic).where(StudyTopic.id == topic_id))
            await self.db.commit()

    async def increment_total_sessions(self, topic_id: int) -> None:
        async with self._storage_errors("increment_total_sessions"):
            await self.db.execute(
                update(StudyTopic)
                .where(StudyTopic.id == topic_id)
                .values(total_sessions=StudyTopic.total_sessions + 1)
            )
            await self.db.commit()

    async def increment_completed_sessions(self, topic_id: int) -> bool:
        """
        Count one more completed session for a topic.

        The update is a no-op once completed_sessions has caught up with
        total_sessions.

        Returns:
            True if the counter moved
        """
        async with self._storage_errors("increment_completed_sessions"):
            result = await self.db.execute(
                update(StudyTopic)
                .where(
                    StudyTopic.id == topic_id,
                    StudyTopic.completed_sessions < StudyTopic.total_sessions,
                )
                .values(completed_sessions=StudyTopic.completed_sessions + 1)
            )
            await self.db.commit()
            return result.rowcount > 0

    async def set_last_session_date(self, topic_id: int, session_date: str) -> None:
        """
        Move last_session_date forward to session_date (never backwards).

        The column is compared as text, which orders correctly only for
        zero-padded ISO dates. A stored value that is not YYYY-MM-DD is
        overwritten.
        """
        async with self._storage_errors("set_last_session_date"):
            await self.db.execute(
                update(StudyTopic)
                .where(
                    StudyTopic.id == topic_id,
                    or_(
                        StudyTopic.last_session_date.is_(None),
                        StudyTopic.last_session_date < session_date,
                        ~StudyTopic.last_session_date.regexp_match(ISO_DATE_PATTERN),
                    ),
                )
                .values(last_session_date=session_date)
            )
            await self.db.commit()

    # =========================================================================
    # Study Sessions
    # =========================================================================

    async def session_exists(self, topic_id: int, due_date: str) -> bool:
        """Whether a session for (topic_id, due_date) is already stored."""
        async with self._storage_errors("session_exists"):
            result = await self.db.execute(
                select(func.count())
                .select_from(StudySession)
                .where(
                    StudySession.study_topic_id == topic_id,
                    StudySession.due_date == due_date,
                )
            )
            return (result.scalar() or 0) > 0

    async def create_session(self, topic_id: int, due_date: str) -> bool:
        """
        Insert a session for (topic_id, due_date).

        The row is selected from study_topics FOR KEY SHARE, so nothing is
        inserted once the topic has been deleted, including by a delete
        still in flight. Relies on the (study_topic_id, due_date)
        unique constraint: a conflicting insert is dropped instead of raising.

        Returns:
            True if a new row was inserted; False on a duplicate or a
            missing topic
        """
        async with self._storage_errors("create_session"):
            result = await self.db.execute(
                insert(StudySession)
                .from_select(
                    ["study_topic_id", "due_date"],
                    select(StudyTopic.id, literal(due_date, String))
                    .where(StudyTopic.id == topic_id)
                    .with_for_update(read=True, key_share=True),
                )
                .on_conflict_do_nothing(index_elements=["study_topic_id", "due_date"])
                .returning(StudySession.id)
            )
            session_id = result.scalar_one_or_none()
            await self.db.commit()
            return session_id is not None

    async def delete_session(self, session_id: int) -> None:
        async with self._storage_errors("delete_session"):
            await self.db.execute(
                delete(StudySession).where(StudySession.id == session_id)
            )
            await self.db.commit()

    async def topic_id_for_session(self, session_id: int) -> Optional[int]:
        """
        Resolve the topic a session belongs to.

        Returns:
            The topic id, or None if no session/topic pair matches
        """
        async with self._storage_errors("topic_id_for_session"):
            result = await self.db.execute(
                select(StudyTopic.id)
                .join(StudySession, StudySession.study_topic_id == StudyTopic.id)
                .where(StudySession.id == session_id)
            )
            return result.scalar_one_or_none()

    async def get_sessions_for_subject(
        self, subject_name: str
    ) -> list[StudySessionInfo]:
        """List pending sessions of a subject's topics with the topic name."""
        async with self._storage_errors("get_sessions_for_subject"):
            result = await self.db.execute(
                select(
                    StudySession.id,
                    StudySession.due_date,
                    StudyTopic.name.label("study_topic_name"),
                )
                .join(StudyTopic, StudySession.study_topic_id == StudyTopic.id)
                .where(StudyTopic.subject_name == subject_name)
                .order_by(StudySession.id)
            )
            return [StudySessionInfo(**row._mapping) for row in result.all()]
