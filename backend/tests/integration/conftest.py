"""
Integration Test Fixtures

Provides fixtures for integration tests that require a running PostgreSQL.
These fixtures set up real database connections and clean up after tests.

IMPORTANT: All integration tests use the TEST database only (via POSTGRES_TEST_* env vars).
The async_test_client fixture overrides get_db so the configured application
database is never touched. A safety check fixture (verify_test_database) runs
at session start to fail fast if production credentials are detected.

Run with:
    pytest -m integration
"""

import asyncio
import os
from pathlib import Path
from typing import AsyncGenerator
from urllib.parse import quote_plus

import httpx
import pytest
import pytest_asyncio
from dotenv import load_dotenv
from fastapi import Depends
from sqlalchemy import create_engine, text
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

# Load .env file FIRST, before reading any environment variables
_project_root = Path(__file__).parent.parent.parent.parent
_env_file = _project_root / ".env"
if _env_file.exists():
    load_dotenv(_env_file)

pytestmark = pytest.mark.integration


# =============================================================================
# Safety Check - Runs before any integration tests
# =============================================================================


@pytest.fixture(scope="session", autouse=True)
def verify_test_database():
    """
    Safety check: Verify we're using test database credentials.

    Set ALLOW_PROD_DB_TESTS=1 to skip this check (for local development only).
    """
    if os.environ.get("ALLOW_PROD_DB_TESTS", "").lower() in ("1", "true", "yes"):
        return

    db_name = get_test_db_config()["db"]
    for indicator in ["studytracker", "prod", "production"]:
        assert indicator not in db_name.lower(), (
            f"SAFETY CHECK FAILED: Database name '{db_name}' looks like production! "
            "Set POSTGRES_TEST_DB environment variable or ALLOW_PROD_DB_TESTS=1."
        )


# =============================================================================
# Database Configuration
# =============================================================================


def get_test_db_config() -> dict:
    """
    Get test database configuration from environment variables.

    Priority: POSTGRES_TEST_* > POSTGRES_* > defaults
    """
    return {
        "host": os.environ.get("POSTGRES_HOST", "localhost"),
        "port": os.environ.get("POSTGRES_PORT", "5432"),
        "user": os.environ.get(
            "POSTGRES_TEST_USER", os.environ.get("POSTGRES_USER", "testuser")
        ),
        "password": os.environ.get(
            "POSTGRES_TEST_PASSWORD", os.environ.get("POSTGRES_PASSWORD", "testpass")
        ),
        "db": os.environ.get("POSTGRES_TEST_DB", os.environ.get("POSTGRES_DB", "testdb")),
    }


def get_test_db_url(async_driver: bool = True) -> str:
    """Build database URL from test config environment variables."""
    config = get_test_db_config()
    # URL-encode the password to handle special characters
    encoded_password = quote_plus(config["password"])
    driver = "postgresql+asyncpg" if async_driver else "postgresql+psycopg2"
    return f"{driver}://{config['user']}:{encoded_password}@{config['host']}:{config['port']}/{config['db']}"


@pytest.fixture(scope="session", autouse=True)
def setup_test_database():
    """
    Recreate the schema once per test session.

    Uses synchronous SQLAlchemy to avoid event loop issues.
    """
    from study_tracker.db.base import Base

    sync_engine = create_engine(get_test_db_url(async_driver=False))
    Base.metadata.drop_all(sync_engine)
    Base.metadata.create_all(sync_engine)

    yield

    sync_engine.dispose()


@pytest_asyncio.fixture(scope="function")
async def session_maker() -> AsyncGenerator[async_sessionmaker, None]:
    """
    Session factory on a fresh engine, with all tables truncated.

    A new engine per test keeps connections on the test's event loop.
    """
    test_engine = create_async_engine(get_test_db_url(async_driver=True), echo=False)
    maker = async_sessionmaker(test_engine, class_=AsyncSession, expire_on_commit=False)

    async with maker() as session:
        await session.execute(
            text("TRUNCATE TABLE study_sessions, study_topics, subjects RESTART IDENTITY CASCADE")
        )
        await session.commit()

    yield maker

    await test_engine.dispose()


@pytest_asyncio.fixture
async def db_session(session_maker) -> AsyncGenerator[AsyncSession, None]:
    """A single session on the cleaned test database."""
    async with session_maker() as session:
        yield session


@pytest_asyncio.fixture
async def async_test_client(session_maker) -> AsyncGenerator[httpx.AsyncClient, None]:
    """
    Async HTTP client wired to the test database.

    Every request gets its own session (like get_db in production) and all
    requests share one materialization lock bound to this test's loop.
    """
    from study_tracker.db.base import get_db
    from study_tracker.dependencies import get_study_repository, get_study_service
    from study_tracker.main import app
    from study_tracker.services.study import StudyRepository, StudyService

    lock = asyncio.Lock()

    async def get_test_db():
        async with session_maker() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    async def get_test_service(
        repo: StudyRepository = Depends(get_study_repository),
    ) -> StudyService:
        return StudyService(repo, lock=lock)

    app.dependency_overrides[get_db] = get_test_db
    app.dependency_overrides[get_study_service] = get_test_service

    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://test") as client:
        yield client

    app.dependency_overrides.pop(get_db, None)
    app.dependency_overrides.pop(get_study_service, None)
