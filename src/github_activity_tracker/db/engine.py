"""Async SQLAlchemy engine and session management.

A ``Database`` is an explicit handle passed to every component that
touches the store. Each unit of work opens its own session, so a
connection is acquired and released around that unit on every exit path.
"""

from __future__ import annotations

from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from typing import TYPE_CHECKING, Any

from sqlalchemy import pool
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from github_activity_tracker.db.models import Base
from github_activity_tracker.logging import get_logger

if TYPE_CHECKING:
    from github_activity_tracker.config import Settings

logger = get_logger(__name__)


class Database:
    """Engine plus session factory for one persistence store.

    Usage:
        database = Database("sqlite+aiosqlite:///./github_activity.db")
        await database.create_tables()

        async with database.session() as session:
            result = await session.execute(select(Commit))

        await database.dispose()
    """

    def __init__(
        self,
        url: str | None = None,
        *,
        engine: AsyncEngine | None = None,
        echo: bool = False,
    ) -> None:
        """Initialize from a connection URL or an existing engine.

        Args:
            url: Async SQLAlchemy connection string
            engine: Pre-built engine (takes precedence over url)
            echo: Log emitted SQL

        Raises:
            ValueError: If neither url nor engine is given
        """
        if engine is None:
            if not url:
                raise ValueError("Database requires a url or an engine")
            kwargs: dict[str, Any] = {"echo": echo}
            if url.startswith("sqlite"):
                # Required for SQLite to prevent "database is locked"
                kwargs["poolclass"] = pool.NullPool
            engine = create_async_engine(url, **kwargs)

        self._engine = engine
        self._session_factory = async_sessionmaker(
            bind=engine,
            class_=AsyncSession,
            expire_on_commit=False,
            autoflush=False,
        )

    @property
    def engine(self) -> AsyncEngine:
        return self._engine

    @asynccontextmanager
    async def session(self) -> AsyncGenerator[AsyncSession, None]:
        """Open a session that commits on success and rolls back on error."""
        async with self._session_factory() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    async def create_tables(self) -> None:
        """Create all tables that do not exist yet."""
        async with self._engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)
        logger.debug("Database schema ready")

    async def drop_tables(self) -> None:
        """Drop all tables.

        WARNING: This will delete all data. Use only for testing.
        """
        async with self._engine.begin() as conn:
            await conn.run_sync(Base.metadata.drop_all)

    async def dispose(self) -> None:
        """Close all pooled connections."""
        await self._engine.dispose()


def create_database(settings: Settings) -> Database:
    """Build a Database from application settings."""
    return Database(settings.database_url, echo=settings.log_level == "DEBUG")
