"""
Shared Test Fixtures and Configuration

This module provides pytest fixtures used across unit and integration tests,
including an in-memory stand-in for the study repository.
"""

import asyncio
import os
import re
import sys
from collections import Counter
from datetime import date
from pathlib import Path
from typing import Generator, Optional
from unittest.mock import AsyncMock, MagicMock

import pytest
from dotenv import load_dotenv

# Add the backend directory to the path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

# Load .env file from project root BEFORE any fixtures run
# This ensures POSTGRES_TEST_* variables are available
_project_root = Path(__file__).parent.parent.parent
_env_file = _project_root / ".env"
if _env_file.exists():
    load_dotenv(_env_file)

from study_tracker.middleware.error_handling import StorageError  # noqa: E402
from study_tracker.models.study import (  # noqa: E402
    StudySessionInfo,
    StudyTopicCreate,
    StudyTopicResponse,
    SubjectResponse,
)


# ============================================================================
# Environment Configuration
# ============================================================================


@pytest.fixture(scope="session", autouse=True)
def setup_test_environment() -> Generator[None, None, None]:
    """
    Set up test environment variables before any tests run.

    This ensures tests run with predictable configuration, overriding
    any values from .env files to ensure test isolation.
    """
    original_env = os.environ.copy()

    test_env = {
        "POSTGRES_HOST": os.environ.get("POSTGRES_HOST", "localhost"),
        "POSTGRES_PORT": os.environ.get("POSTGRES_PORT", "5432"),
        "POSTGRES_USER": os.environ.get("POSTGRES_TEST_USER", "testuser"),
        "POSTGRES_PASSWORD": os.environ.get("POSTGRES_TEST_PASSWORD", "testpass"),
        "POSTGRES_DB": os.environ.get("POSTGRES_TEST_DB", "testdb"),
        "SCHEDULER_ENABLED": "false",
        "DEBUG": "true",
    }
    os.environ.update(test_env)

    yield

    os.environ.clear()
    os.environ.update(original_env)


# ============================================================================
# Calendar
# ============================================================================

TODAY = date(2024, 3, 15)


@pytest.fixture
def today() -> date:
    """Fixed 'today' used as the service clock."""
    return TODAY


# ============================================================================
# In-Memory Repository
# ============================================================================


ISO_DATE = re.compile(r"^[0-9]{4}-[0-9]{2}-[0-9]{2}$")


class InMemoryStudyRepository:
    """
    Dict-backed replacement for StudyRepository.

    Every method yields to the event loop once, like a remote round trip, so
    concurrent callers interleave. Session inserts are counted per
    (topic_id, due_date) key and are NOT deduplicated: the materializer
    alone must keep them unique.
    """

    def __init__(self):
        self.subjects: list[str] = []
        self.topics: dict[int, dict] = {}
        self.sessions: dict[int, dict] = {}
        self.insert_calls: Counter = Counter()
        self.fail_on: Optional[str] = None
        self._next_topic_id = 1
        self._next_session_id = 1

    async def _round_trip(self, operation: str) -> None:
        await asyncio.sleep(0)
        if self.fail_on == operation:
            raise StorageError(f"Storage operation '{operation}' failed")

    # -- seeding helpers (synchronous) --------------------------------------

    def seed_topic(
        self,
        name: str,
        creation_date: str,
        subject_name: str = "Maths",
        **fields,
    ) -> int:
        topic_id = self._next_topic_id
        self._next_topic_id += 1
        self.topics[topic_id] = {
            "id": topic_id,
            "name": name,
            "description": None,
            "subject_name": subject_name,
            "creation_date": creation_date,
            "last_session_date": None,
            "total_sessions": 0,
            "completed_sessions": 0,
            **fields,
        }
        return topic_id

    def seed_session(self, topic_id: int, due_date: str) -> int:
        session_id = self._next_session_id
        self._next_session_id += 1
        self.sessions[session_id] = {
            "id": session_id,
            "study_topic_id": topic_id,
            "due_date": due_date,
        }
        return session_id

    def sessions_for(self, topic_id: int, due_date: Optional[str] = None) -> list[dict]:
        return [
            s
            for s in self.sessions.values()
            if s["study_topic_id"] == topic_id
            and (due_date is None or s["due_date"] == due_date)
        ]

    # -- subjects ------------------------------------------------------------

    async def get_subjects(self) -> list[SubjectResponse]:
        await self._round_trip("get_subjects")
        return [SubjectResponse(name=name) for name in sorted(self.subjects)]

    async def add_subject(self, subject_name: str) -> None:
        await self._round_trip("add_subject")
        if subject_name in self.subjects:
            raise StorageError("Storage operation 'add_subject' failed")
        self.subjects.append(subject_name)

    async def delete_subject(self, subject_name: str) -> None:
        await self._round_trip("delete_subject")
        if subject_name in self.subjects:
            self.subjects.remove(subject_name)

    # -- topics --------------------------------------------------------------

    async def get_all_topics(self) -> list[StudyTopicResponse]:
        await self._round_trip("get_all_topics")
        return [StudyTopicResponse(**t) for t in self.topics.values()]

    async def get_topics_for_subject(self, subject_name: str) -> list[StudyTopicResponse]:
        await self._round_trip("get_topics_for_subject")
        return [
            StudyTopicResponse(**t)
            for t in self.topics.values()
            if t["subject_name"] == subject_name
        ]

    async def add_topic(
        self, info: StudyTopicCreate, creation_date: str
    ) -> StudyTopicResponse:
        await self._round_trip("add_topic")
        topic_id = self.seed_topic(
            info.name,
            creation_date,
            subject_name=info.subject_name,
            description=info.description,
        )
        return StudyTopicResponse(**self.topics[topic_id])

    async def delete_topic(self, topic_id: int) -> None:
        await self._round_trip("delete_topic")
        self.topics.pop(topic_id, None)
        for session in self.sessions_for(topic_id):
            del self.sessions[session["id"]]

    async def increment_total_sessions(self, topic_id: int) -> None:
        await self._round_trip("increment_total_sessions")
        if topic_id in self.topics:
            self.topics[topic_id]["total_sessions"] += 1

    async def increment_completed_sessions(self, topic_id: int) -> bool:
        await self._round_trip("increment_completed_sessions")
        topic = self.topics.get(topic_id)
        if topic is None or topic["completed_sessions"] >= topic["total_sessions"]:
            return False
        topic["completed_sessions"] += 1
        return True

    async def set_last_session_date(self, topic_id: int, session_date: str) -> None:
        await self._round_trip("set_last_session_date")
        topic = self.topics.get(topic_id)
        if topic is None:
            return
        current = topic["last_session_date"]
        if current is None or current < session_date or not ISO_DATE.match(current):
            topic["last_session_date"] = session_date

    # -- sessions ------------------------------------------------------------

    async def session_exists(self, topic_id: int, due_date: str) -> bool:
        await self._round_trip("session_exists")
        return bool(self.sessions_for(topic_id, due_date))

    async def create_session(self, topic_id: int, due_date: str) -> bool:
        await self._round_trip("create_session")
        self.insert_calls[(topic_id, due_date)] += 1
        if topic_id not in self.topics:
            return False
        self.seed_session(topic_id, due_date)
        return True

    async def delete_session(self, session_id: int) -> None:
        await self._round_trip("delete_session")
        self.sessions.pop(session_id, None)

    async def topic_id_for_session(self, session_id: int) -> Optional[int]:
        await self._round_trip("topic_id_for_session")
        session = self.sessions.get(session_id)
        if session is None or session["study_topic_id"] not in self.topics:
            return None
        return session["study_topic_id"]

    async def get_sessions_for_subject(self, subject_name: str) -> list[StudySessionInfo]:
        await self._round_trip("get_sessions_for_subject")
        return [
            StudySessionInfo(
                id=s["id"],
                due_date=s["due_date"],
                study_topic_name=self.topics[s["study_topic_id"]]["name"],
            )
            for s in self.sessions.values()
            if self.topics.get(s["study_topic_id"], {}).get("subject_name")
            == subject_name
        ]


@pytest.fixture
def fake_repo() -> InMemoryStudyRepository:
    """Provide an empty in-memory study repository."""
    return InMemoryStudyRepository()


# ============================================================================
# Mock Fixtures
# ============================================================================


@pytest.fixture
def mock_db_session() -> MagicMock:
    """
    Create a mock database session for unit testing.
    """
    mock = MagicMock()
    mock.add = MagicMock()
    mock.execute = AsyncMock()
    mock.commit = AsyncMock()
    mock.refresh = AsyncMock()
    mock.rollback = AsyncMock()
    mock.close = AsyncMock()
    return mock
