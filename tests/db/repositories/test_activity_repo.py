"""Tests for the per-kind activity repositories."""

from datetime import timedelta

import pytest
from sqlalchemy.exc import IntegrityError

from github_activity_tracker.db.models import ActivityKind
from github_activity_tracker.db.repositories import (
    CommitRepository,
    PullRequestRepository,
    ReviewRepository,
    activity_repository,
)
from tests.conftest import CUTOFF, ONE_DAY_AGO, TEN_DAYS_AGO
from tests.factories import (
    make_commit,
    make_commit_create,
    make_pull_request,
    make_repository,
    make_review_create,
)


@pytest.fixture
async def repository(db_session):
    repo = make_repository(db_session)
    await db_session.flush()
    return repo


class TestReads:
    async def test_latest_timestamp(self, db_session, repository):
        repo = CommitRepository(db_session)
        assert await repo.latest_timestamp(repository.id) is None

        make_commit(db_session, repository, message="old", committed_at=TEN_DAYS_AGO)
        make_commit(db_session, repository, message="new", committed_at=ONE_DAY_AGO)
        await db_session.flush()

        assert await repo.latest_timestamp(repository.id) == ONE_DAY_AGO.replace(tzinfo=None)

    async def test_existing_key_rows_include_alternate_key(self, db_session, repository):
        make_commit(db_session, repository, message="a", sha="f" * 40)
        await db_session.flush()

        rows = await CommitRepository(db_session).existing_key_rows(repository.id)

        assert rows == [
            {
                "message": "a",
                "author": "x",
                "committed_at": ONE_DAY_AGO.replace(tzinfo=None),
                "branch": "main",
                "sha": "f" * 40,
            }
        ]

    def test_activity_repository_dispatch(self, db_session):
        assert isinstance(activity_repository(db_session, ActivityKind.REVIEW), ReviewRepository)


class TestWrites:
    async def test_bulk_insert(self, db_session, repository):
        rows = [make_commit_create(message=f"c{i}").to_row(repository.id) for i in range(3)]
        repo = CommitRepository(db_session)

        assert await repo.bulk_insert(rows) == 3
        assert await repo.count_for(repository.id) == 3
        assert await repo.bulk_insert([]) == 0

    async def test_review_id_unique_per_repository(self, db_session, repository):
        repo = ReviewRepository(db_session)
        row = make_review_create(review_id="1").to_row(repository.id)
        await repo.insert_one(row)

        with pytest.raises(IntegrityError):
            await repo.insert_one(row)

    async def test_delete_older_than_keeps_boundary(self, db_session, repository):
        make_commit(db_session, repository, message="boundary", committed_at=CUTOFF)
        make_commit(
            db_session, repository, message="expired", committed_at=CUTOFF - timedelta(seconds=1)
        )
        await db_session.flush()

        repo = CommitRepository(db_session)
        assert await repo.delete_older_than(repository.id, CUTOFF) == 1
        assert [c.message for c in await repo.list_for(repository.id)] == ["boundary"]

    async def test_collapse_duplicates_keeps_lowest_id(self, db_session, repository):
        first = make_commit(db_session, repository, message="dup")
        await db_session.flush()
        make_commit(db_session, repository, message="dup")
        make_commit(db_session, repository, message="dup", branch="develop")
        await db_session.flush()

        repo = CommitRepository(db_session)
        assert await repo.collapse_duplicates(repository.id) == 1

        remaining = await repo.list_for(repository.id)
        assert [c.branch for c in remaining] == ["main", "develop"]
        assert remaining[0].id == first.id


class TestPullRequestState:
    async def test_stored_states_and_update(self, db_session, repository):
        make_pull_request(db_session, repository, number=7, title="WIP")
        await db_session.flush()

        repo = PullRequestRepository(db_session)
        assert await repo.stored_states(repository.id) == {7: ("open", "WIP")}

        updated = await repo.update_state(repository.id, 7, state="closed", title="Done")

        assert updated == 1
        assert await repo.stored_states(repository.id) == {7: ("closed", "Done")}
