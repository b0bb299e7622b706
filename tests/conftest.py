"""Pytest configuration and shared fixtures.

Usage Guide:
- For repository / sync tests: use the ``database`` fixture (fresh in-memory store)
- For raw ORM access: use ``db_session``
- For GitHub API payloads and create schemas: import factories from tests.factories
- For sync tests without network: use FakeGitHubClient from tests.fixtures.fake_github
"""

from datetime import UTC, datetime, timedelta

import pytest
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from github_activity_tracker.config import Settings
from github_activity_tracker.db.engine import Database
from github_activity_tracker.db.models import Base

# -----------------------------------------------------------------------------
# Test Timeline Constants
#
# A fixed "now" keeps retention and watermark arithmetic deterministic.
# Every activity timestamp in tests is expressed relative to NOW.
# -----------------------------------------------------------------------------

NOW = datetime(2024, 3, 1, 12, 0, 0, tzinfo=UTC)
RETENTION = timedelta(days=30)
CUTOFF = NOW - RETENTION                  # 2024-01-31T12:00:00Z
ONE_DAY_AGO = NOW - timedelta(days=1)
TWO_DAYS_AGO = NOW - timedelta(days=2)
TEN_DAYS_AGO = NOW - timedelta(days=10)
FORTY_DAYS_AGO = NOW - timedelta(days=40)

# ISO 8601 strings (for GitHub API payloads)
NOW_ISO = "2024-03-01T12:00:00Z"
ONE_DAY_AGO_ISO = "2024-02-29T12:00:00Z"
TWO_DAYS_AGO_ISO = "2024-02-28T12:00:00Z"
TEN_DAYS_AGO_ISO = "2024-02-20T12:00:00Z"
FORTY_DAYS_AGO_ISO = "2024-01-21T12:00:00Z"


# -----------------------------------------------------------------------------
# Database Fixtures
# -----------------------------------------------------------------------------
@pytest.fixture
async def test_engine():
    """Create an in-memory SQLite engine for tests.

    StaticPool keeps one connection so every session sees the same
    in-memory database. Each test gets a fresh database with all tables.
    """
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        echo=False,
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def database(test_engine) -> Database:
    """Database handle over the test engine."""
    return Database(engine=test_engine)


@pytest.fixture
async def db_session(test_engine):
    """Create an async session with auto-rollback.

    Changes are rolled back after each test to ensure isolation.
    """
    session_factory = async_sessionmaker(
        test_engine,
        class_=AsyncSession,
        expire_on_commit=False,
    )
    async with session_factory() as session:
        yield session
        await session.rollback()


# -----------------------------------------------------------------------------
# Settings Fixtures
# -----------------------------------------------------------------------------
@pytest.fixture
def settings(tmp_path) -> Settings:
    """Settings isolated from the environment, with a temp repos file."""
    return Settings(
        _env_file=None,
        github_token="test-token",
        repos_file=str(tmp_path / "config.properties"),
    )
