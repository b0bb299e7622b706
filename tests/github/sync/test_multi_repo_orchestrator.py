"""Tests for MultiRepoOrchestrator."""

import asyncio
from datetime import timedelta

import pytest

from github_activity_tracker.db.models import ActivityKind
from github_activity_tracker.db.repositories import CommitRepository, RepositoryRepository
from github_activity_tracker.github.sync import MultiRepoOrchestrator
from github_activity_tracker.timeutils import isoformat_z, utc_now
from github_activity_tracker.tracked_repos import TrackedRepositories
from tests.factories import make_github_commit
from tests.fixtures.fake_github import FakeGitHubClient


class Boom(Exception):
    pass


@pytest.fixture
def fake() -> FakeGitHubClient:
    fake = FakeGitHubClient()
    fake.repo("prebid/prebid-server")
    fake.repo("prebid/Prebid.js")
    fake.fail_on["prebid/broken"] = RuntimeError("upstream exploded")
    return fake


@pytest.fixture
def tracked(tmp_path) -> TrackedRepositories:
    return TrackedRepositories(tmp_path / "config.properties")


@pytest.fixture
def orchestrator(database, fake, settings, tracked) -> MultiRepoOrchestrator:
    return MultiRepoOrchestrator(database, fake, settings, tracked)


async def test_failure_is_isolated(orchestrator):
    result = await orchestrator.sync_all(
        ["prebid/prebid-server", "prebid/broken", "prebid/Prebid.js"]
    )

    assert [r.repository for r in result.repo_results] == [
        "prebid/prebid-server",
        "prebid/broken",
        "prebid/Prebid.js",
    ]
    assert result.repos_succeeded == 2
    assert result.repos_failed == 1
    broken = result.get("prebid/broken")
    assert broken is not None
    assert broken.error == "upstream exploded"


async def test_uses_tracked_list_by_default(orchestrator, tracked, fake):
    tracked.add("prebid/Prebid.js")
    tracked.add("prebid/prebid-server")

    result = await orchestrator.sync_all()

    assert [r.repository for r in result.repo_results] == [
        "prebid/Prebid.js",
        "prebid/prebid-server",
    ]
    assert [name for (name,) in fake.calls["branches"]] == [
        "prebid/Prebid.js",
        "prebid/prebid-server",
    ]


async def test_empty_message_falls_back_to_class_name(orchestrator, fake):
    fake.fail_on["prebid/prebid-server"] = Boom()

    result = await orchestrator.sync_repository("prebid/prebid-server")

    assert result.error == "Boom"
    assert not result.success


async def test_cycles_do_not_overlap(orchestrator, fake):
    await asyncio.gather(
        orchestrator.sync_all(["prebid/prebid-server"]),
        orchestrator.sync_all(["prebid/Prebid.js"]),
    )

    assert [name for (name,) in fake.calls["branches"]] == [
        "prebid/prebid-server",
        "prebid/Prebid.js",
    ]


async def test_summary_dict(orchestrator):
    result = await orchestrator.sync_all(["prebid/prebid-server", "prebid/broken"])

    summary = result.to_dict()["summary"]
    assert summary["total_repos"] == 2
    assert summary["repos_failed"] == 1
    assert result.to_dict()["repositories"][1]["error"] == "upstream exploded"


def fail_issues_for(fake: FakeGitHubClient, name: str) -> None:
    """Make the issues stage raise for ``name`` only, after commits are written."""
    list_issues = fake.list_issues

    async def flaky(repo, *, since):
        if repo == name:
            raise Boom("issues endpoint down")
        return await list_issues(repo, since=since)

    fake.list_issues = flaky


@pytest.fixture
def recent_commits(fake) -> None:
    # The orchestrator runs against the real clock
    yesterday = isoformat_z(utc_now() - timedelta(days=1))
    fake.repo("prebid/prebid-server").commits["main"] = [
        make_github_commit(sha="a" * 40, message="Server fix", date=yesterday)
    ]
    fake.repo("prebid/Prebid.js").commits["main"] = [
        make_github_commit(sha="b" * 40, message="Client fix", date=yesterday)
    ]


async def commit_count(database, name: str) -> int:
    async with database.session() as session:
        repo = await RepositoryRepository(session).get_by_name(name)
        assert repo is not None
        return await CommitRepository(session).count_for(repo.id)


@pytest.mark.usefixtures("recent_commits")
async def test_mid_sync_failure_leaves_other_repository_rows(database, orchestrator, fake):
    fail_issues_for(fake, "prebid/prebid-server")

    result = await orchestrator.sync_all(["prebid/Prebid.js", "prebid/prebid-server"])

    assert result.get("prebid/Prebid.js").success
    assert result.get("prebid/prebid-server").error == "issues endpoint down"
    assert await commit_count(database, "prebid/Prebid.js") == 1
    # Stages that finished before the failure stay committed
    assert await commit_count(database, "prebid/prebid-server") == 1


@pytest.mark.usefixtures("recent_commits")
async def test_failed_result_keeps_completed_stage_counts(orchestrator, fake):
    fail_issues_for(fake, "prebid/prebid-server")

    result = await orchestrator.sync_repository("prebid/prebid-server")

    assert not result.success
    assert result.completed_at is not None
    assert result.kinds[ActivityKind.COMMIT].inserted == 1
    assert ActivityKind.PULL_REQUEST in result.kinds
    assert ActivityKind.ISSUE not in result.kinds
    assert result.total_inserted == 1
    assert result.to_dict()["kinds"]["commit"]["inserted"] == 1
