"""
Session Materializer

Creates today's study sessions for every due topic, at most one per topic
per day, however many requests trigger it at once.

Materialization steps per due topic:
    1. Skip if the topic already had a session today (last_session_date)
    2. Skip if a session row for (topic, today) exists
    3. Insert the session row
    4. Move last_session_date to today
    5. Increment total_sessions

Steps 3-5 are separate writes. A failure between them leaves the topic
partially updated (e.g. a session row without the counter increment); the
next run does not repair it.

Concurrency:
    The whole scan-check-insert sequence runs under one process-wide
    asyncio.Lock. Two concurrent triggers are fully serialized, so neither
    can pass the existence check before the other's insert is committed.
    The (study_topic_id, due_date) unique constraint backs this up at the
    storage layer.
"""

import asyncio
import logging
from datetime import date
from typing import Callable, Optional

from study_tracker.services.study.due_selector import select_due_topics, utc_today
from study_tracker.services.study.repository import StudyRepository

logger = logging.getLogger(__name__)

# Created lazily so it binds to the running event loop on first use
_materialization_lock: Optional[asyncio.Lock] = None


def get_materialization_lock() -> asyncio.Lock:
    """Return the process-wide lock that serializes materialization."""
    global _materialization_lock
    if _materialization_lock is None:
        _materialization_lock = asyncio.Lock()
    return _materialization_lock


class SessionMaterializer:
    """Idempotently materializes today's sessions for the due topic set."""

    def __init__(
        self,
        repo: StudyRepository,
        lock: Optional[asyncio.Lock] = None,
        clock: Callable[[], date] = utc_today,
    ):
        """
        Initialize the materializer.

        Args:
            repo: Storage collaborator
            lock: Lock serializing runs (defaults to the process-wide lock)
            clock: Returns the current calendar day
        """
        self.repo = repo
        self.lock = lock if lock is not None else get_materialization_lock()
        self.clock = clock

    async def materialize_today(self) -> int:
        """
        Ensure every topic due today has today's session.

        Returns:
            Number of sessions created by this run
        """
        async with self.lock:
            return await self._materialize(self.clock())

    async def _materialize(self, today: date) -> int:
        today_iso = today.isoformat()

        topics = await self.repo.get_all_topics()
        due_topics = select_due_topics(topics, today)

        created = 0
        for topic in due_topics:
            if topic.last_session_date == today_iso:
                continue
            if await self.repo.session_exists(topic.id, today_iso):
                continue

            if not await self.repo.create_session(topic.id, today_iso):
                logger.warning(
                    f"No session inserted for topic {topic.id} on {today_iso} "
                    f"(already stored or topic deleted), skipping"
                )
                continue

            await self.repo.set_last_session_date(topic.id, today_iso)
            await self.repo.increment_total_sessions(topic.id)
            created += 1

        logger.info(
            f"Materialized {created} session(s) for {today_iso} "
            f"({len(due_topics)} due of {len(topics)} topics)"
        )
        return created
