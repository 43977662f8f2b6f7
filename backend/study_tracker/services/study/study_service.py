"""
Study Service

Public service boundary for subjects, study topics and study sessions.
Composes the due-topic selector, the session materializer and the session
completer on top of the repository.

Usage:
    from study_tracker.services.study import StudyService, StudyRepository

    service = StudyService(StudyRepository(db_session))

    # Topics on today's review schedule
    due = await service.get_study_topics_for_today()

    # Materializes today's sessions first, then lists the subject's sessions
    sessions = await service.get_study_sessions_for_subject("Maths")

    await service.complete_study_session(sessions[0].id)
"""

import asyncio
import logging
from datetime import date
from typing import Callable, Optional

from study_tracker.models.study import (
    StudySessionInfo,
    StudySessionResponse,
    StudyTopicCreate,
    StudyTopicResponse,
    SubjectResponse,
)
from study_tracker.services.study.completer import SessionCompleter
from study_tracker.services.study.due_selector import (
    days_since,
    select_due_topics,
    utc_today,
)
from study_tracker.services.study.materializer import SessionMaterializer
from study_tracker.services.study.repository import StudyRepository

logger = logging.getLogger(__name__)


class StudyService:
    """
    Scheduling facade.

    Provides:
    - Subject and topic CRUD (direct repository passthrough)
    - Today's due topics (recomputed on every call)
    - Pending sessions per subject, materialized before reading
    - Session completion
    """

    def __init__(
        self,
        repo: StudyRepository,
        lock: Optional[asyncio.Lock] = None,
        clock: Callable[[], date] = utc_today,
    ):
        """
        Initialize the study service.

        Args:
            repo: Storage collaborator
            lock: Materialization lock (defaults to the process-wide lock)
            clock: Returns the current calendar day
        """
        self.repo = repo
        self.clock = clock
        self.materializer = SessionMaterializer(repo, lock=lock, clock=clock)
        self.completer = SessionCompleter(repo)

    # =========================================================================
    # Subjects
    # =========================================================================

    async def add_subject(self, subject_name: str) -> None:
        await self.repo.add_subject(subject_name)
        logger.info(f"Added subject {subject_name!r}")

    async def delete_subject(self, subject_name: str) -> None:
        """Delete a subject. Topics referencing it are kept."""
        await self.repo.delete_subject(subject_name)
        logger.info(f"Deleted subject {subject_name!r}")

    async def get_study_subjects(self) -> list[SubjectResponse]:
        return await self.repo.get_subjects()

    # =========================================================================
    # Study Topics
    # =========================================================================

    async def add_study_topic(self, topic_info: StudyTopicCreate) -> StudyTopicResponse:
        """Create a topic whose schedule starts today."""
        topic = await self.repo.add_topic(
            topic_info, creation_date=self.clock().isoformat()
        )
        logger.info(f"Added study topic {topic.id} to subject {topic.subject_name!r}")
        return topic

    async def delete_study_topic(self, study_topic_id: int) -> None:
        await self.repo.delete_topic(study_topic_id)
        logger.info(f"Deleted study topic {study_topic_id}")

    async def get_study_topics(self) -> list[StudyTopicResponse]:
        return await self.repo.get_all_topics()

    async def get_study_topics_for_subject(
        self, subject_name: str
    ) -> list[StudyTopicResponse]:
        return await self.repo.get_topics_for_subject(subject_name)

    async def get_study_topics_for_today(self) -> list[StudyTopicResponse]:
        """Topics on the review schedule today, from a fresh full scan."""
        topics = await self.repo.get_all_topics()
        return select_due_topics(topics, self.clock())

    # =========================================================================
    # Study Sessions
    # =========================================================================

    async def materialize_today(self) -> int:
        """Create today's missing sessions. Serialized by the shared lock."""
        return await self.materializer.materialize_today()

    async def get_study_sessions_for_subject(
        self, subject_name: str
    ) -> list[StudySessionResponse]:
        """
        List pending sessions for a subject.

        Today's sessions are materialized first so a topic that fell due
        today is included.

        Raises:
            DateParseError: If a stored due date cannot be parsed
        """
        await self.materialize_today()

        sessions = await self.repo.get_sessions_for_subject(subject_name)
        today = self.clock()
        return [self._to_response(session, today) for session in sessions]

    async def complete_study_session(self, study_session_id: int) -> None:
        """
        Complete a session.

        Raises:
            StudySessionNotFoundError: If the session does not exist
        """
        await self.completer.complete_session(study_session_id)

    def _to_response(
        self, session: StudySessionInfo, today: date
    ) -> StudySessionResponse:
        return StudySessionResponse(
            id=session.id,
            study_topic_name=session.study_topic_name,
            days_passed=days_since(session.due_date, today),
        )
