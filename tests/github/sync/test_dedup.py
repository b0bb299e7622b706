"""Tests for the Deduplicator."""

import pytest

from github_activity_tracker.db.models import ActivityKind
from github_activity_tracker.db.repositories import CommitRepository, RepositoryRepository
from github_activity_tracker.github.sync import Deduplicator, natural_keys
from tests.factories import make_commit, make_commit_create, make_issue_create


@pytest.fixture
async def repository_id(database) -> int:
    async with database.session() as session:
        repo, _ = await RepositoryRepository(session).get_or_create("prebid/prebid-server")
        return repo.id


@pytest.fixture
def dedup(database) -> Deduplicator:
    return Deduplicator(database)


class TestNaturalKeys:
    def test_commit_with_sha_has_alternate_key(self):
        commit = make_commit_create(message="a", sha="f" * 40)
        keys = natural_keys(ActivityKind.COMMIT, commit.model_dump())

        assert keys[0][0] == "key"
        assert keys[1] == ("alt", "f" * 40, "main")

    def test_commit_without_sha_has_only_natural_key(self):
        commit = make_commit_create(message="a")
        assert len(natural_keys(ActivityKind.COMMIT, commit.model_dump())) == 1


class TestFilterNew:
    async def test_only_unseen_records_survive(self, database, dedup, repository_id):
        async with database.session() as session:
            repo = await RepositoryRepository(session).get_by_id(repository_id)
            make_commit(session, repo, message="a")

        existing = await dedup.existing_keys(repository_id, ActivityKind.COMMIT)
        fetched = [make_commit_create(message="a"), make_commit_create(message="b")]

        new = dedup.filter_new(fetched, existing)

        assert [c.message for c in new] == ["b"]

    def test_repeats_within_batch_are_dropped(self, dedup):
        issue = make_issue_create(number=5)
        existing: set = set()

        assert dedup.filter_new([issue, issue], existing) == [issue]
        assert existing

    def test_alternate_key_catches_reworded_commit(self, dedup):
        existing: set = set()
        first = make_commit_create(message="original", sha="c" * 40)
        amended = make_commit_create(message="reworded", sha="c" * 40)

        assert dedup.filter_new([first, amended], existing) == [first]

    def test_same_commit_on_other_branch_is_new(self, dedup):
        existing: set = set()
        main = make_commit_create(message="x", sha="c" * 40)
        develop = make_commit_create(message="x", sha="c" * 40, branch="develop")

        assert dedup.filter_new([main, develop], existing) == [main, develop]


class TestCollapse:
    async def test_collapse_all_removes_stored_duplicates(self, database, dedup, repository_id):
        async with database.session() as session:
            repo = await RepositoryRepository(session).get_by_id(repository_id)
            make_commit(session, repo, message="dup")
            make_commit(session, repo, message="dup")
            make_commit(session, repo, message="unique")

        removed = await dedup.collapse_all(repository_id)

        assert removed[ActivityKind.COMMIT] == 1
        assert removed[ActivityKind.ISSUE] == 0
        async with database.session() as session:
            assert await CommitRepository(session).count_for(repository_id) == 2
