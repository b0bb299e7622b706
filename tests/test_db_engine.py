"""Tests for the Database handle."""

import pytest
from sqlalchemy import inspect, select

from github_activity_tracker.db.engine import Database
from github_activity_tracker.db.models import Repository


class TestDatabase:
    def test_requires_url_or_engine(self):
        with pytest.raises(ValueError):
            Database()

    async def test_create_tables(self, tmp_path):
        database = Database(f"sqlite+aiosqlite:///{tmp_path / 'activity.db'}")
        try:
            await database.create_tables()
            async with database.engine.connect() as conn:
                tables = await conn.run_sync(lambda sync: inspect(sync).get_table_names())
        finally:
            await database.dispose()

        assert set(tables) == {"repositories", "commits", "pull_requests", "issues", "reviews"}

    async def test_session_commits_on_success(self, database):
        async with database.session() as session:
            session.add(Repository(name="prebid/prebid-server"))

        async with database.session() as session:
            names = (await session.execute(select(Repository.name))).scalars().all()
        assert names == ["prebid/prebid-server"]

    async def test_session_rolls_back_on_error(self, database):
        with pytest.raises(RuntimeError):
            async with database.session() as session:
                session.add(Repository(name="prebid/prebid-server"))
                await session.flush()
                raise RuntimeError("boom")

        async with database.session() as session:
            names = (await session.execute(select(Repository.name))).scalars().all()
        assert names == []
