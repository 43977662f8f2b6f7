"""
Session Completer

Completing a session resolves its topic, counts the completion on the topic
and deletes the session row. The three steps are committed separately: if the
delete fails after the counter moved, the session stays listed and a retry
counts it again (bounded by total_sessions).
"""

import logging

from study_tracker.middleware.error_handling import StudySessionNotFoundError
from study_tracker.services.study.repository import StudyRepository

logger = logging.getLogger(__name__)


class SessionCompleter:
    """Marks study sessions as done."""

    def __init__(self, repo: StudyRepository):
        self.repo = repo

    async def complete_session(self, session_id: int) -> int:
        """
        Complete a pending session.

        Args:
            session_id: Session to complete

        Returns:
            Id of the topic the session belonged to

        Raises:
            StudySessionNotFoundError: If no session with that id exists
        """
        topic_id = await self.repo.topic_id_for_session(session_id)
        if topic_id is None:
            raise StudySessionNotFoundError(
                f"Study session {session_id} not found",
                details={"study_session_id": session_id},
            )

        if not await self.repo.increment_completed_sessions(topic_id):
            logger.warning(
                f"Topic {topic_id} already has completed_sessions == total_sessions; "
                f"completing session {session_id} without counting it"
            )

        await self.repo.delete_session(session_id)
        logger.info(f"Completed study session {session_id} for topic {topic_id}")
        return topic_id
