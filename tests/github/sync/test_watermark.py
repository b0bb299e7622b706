"""Tests for WatermarkTracker."""

import pytest

from github_activity_tracker.db.models import ActivityKind
from github_activity_tracker.db.repositories import RepositoryRepository, activity_repository
from github_activity_tracker.github.sync import WatermarkTracker
from tests.conftest import CUTOFF, NOW, ONE_DAY_AGO, RETENTION
from tests.factories import (
    make_commit,
    make_commit_create,
    make_issue_create,
    make_pull_request_create,
    make_review_create,
)

# One record per kind, each stamped ONE_DAY_AGO
RECORD_FACTORIES = {
    ActivityKind.COMMIT: make_commit_create,
    ActivityKind.PULL_REQUEST: make_pull_request_create,
    ActivityKind.ISSUE: make_issue_create,
    ActivityKind.REVIEW: make_review_create,
}


@pytest.fixture
async def repository_id(database) -> int:
    async with database.session() as session:
        repo, _ = await RepositoryRepository(session).get_or_create("prebid/prebid-server")
        return repo.id


@pytest.fixture
def tracker(database) -> WatermarkTracker:
    return WatermarkTracker(database, RETENTION)


async def store_one(database, repository_id: int, kind: ActivityKind) -> None:
    record = RECORD_FACTORIES[kind]()
    async with database.session() as session:
        await activity_repository(session, kind).insert_one(record.to_row(repository_id))


@pytest.mark.parametrize("kind", list(ActivityKind))
async def test_empty_store_defaults_to_retention_horizon(tracker, repository_id, kind):
    assert await tracker.latest_timestamp(repository_id, kind, NOW) == CUTOFF
    assert await tracker.effective_since(repository_id, kind, NOW) == CUTOFF


@pytest.mark.parametrize("kind", list(ActivityKind))
async def test_latest_timestamp_is_newest_stored(database, tracker, repository_id, kind):
    await store_one(database, repository_id, kind)

    assert await tracker.latest_timestamp(repository_id, kind, NOW) == ONE_DAY_AGO


@pytest.mark.parametrize("kind", list(ActivityKind))
async def test_effective_since_reaches_back_to_horizon(database, tracker, repository_id, kind):
    await store_one(database, repository_id, kind)

    assert await tracker.effective_since(repository_id, kind, NOW) == CUTOFF


async def test_kinds_are_tracked_independently(database, tracker, repository_id):
    async with database.session() as session:
        repo = await RepositoryRepository(session).get_by_id(repository_id)
        make_commit(session, repo, committed_at=ONE_DAY_AGO)

    assert await tracker.latest_timestamp(repository_id, ActivityKind.ISSUE, NOW) == CUTOFF
