"""Result objects for sync operations.

Structured results provide consistent interfaces for monitoring,
error handling, and CLI/API output.
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any

from github_activity_tracker.db.models import ActivityKind


@dataclass
class KindSyncResult:
    """Outcome of one ingestion flow (one activity kind) for a repository."""

    fetched: int = 0
    """Records returned by GitHub inside the sync window."""

    new: int = 0
    """Records left after deduplication."""

    inserted: int = 0
    """Records written to the database."""

    failed: int = 0
    """Records or fetches that failed and were skipped."""

    updated: int = 0
    """Existing rows changed in place (pull request state)."""

    def to_dict(self) -> dict[str, int]:
        return {
            "fetched": self.fetched,
            "new": self.new,
            "inserted": self.inserted,
            "failed": self.failed,
            "updated": self.updated,
        }


@dataclass
class RepoSyncResult:
    """Result of syncing a single repository."""

    repository: str
    """Repository name (owner/repo)."""

    started_at: datetime
    completed_at: datetime | None = None

    kinds: dict[ActivityKind, KindSyncResult] = field(default_factory=dict)
    pruned: dict[ActivityKind, int] = field(default_factory=dict)
    collapsed: dict[ActivityKind, int] = field(default_factory=dict)

    error: str | None = None
    """Set when the sync aborted; stages after the failure did not run."""

    @property
    def success(self) -> bool:
        return self.error is None

    @property
    def total_inserted(self) -> int:
        return sum(k.inserted for k in self.kinds.values())

    @property
    def total_failed(self) -> int:
        return sum(k.failed for k in self.kinds.values())

    @property
    def duration_seconds(self) -> float:
        if self.completed_at is None:
            return 0.0
        return (self.completed_at - self.started_at).total_seconds()

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "repository": self.repository,
            "success": self.success,
            "error": self.error,
            "started_at": self.started_at.isoformat(),
            "completed_at": self.completed_at.isoformat() if self.completed_at else None,
            "duration_seconds": round(self.duration_seconds, 2),
            "pruned": {k.value: v for k, v in self.pruned.items()},
            "collapsed": {k.value: v for k, v in self.collapsed.items()},
            "kinds": {k.value: v.to_dict() for k, v in self.kinds.items()},
            "total_inserted": self.total_inserted,
            "total_failed": self.total_failed,
        }


@dataclass
class MultiRepoSyncResult:
    """Aggregate of one sync cycle over several repositories."""

    repo_results: list[RepoSyncResult] = field(default_factory=list)
    duration_seconds: float = 0.0

    @property
    def repos_succeeded(self) -> int:
        return sum(1 for r in self.repo_results if r.success)

    @property
    def repos_failed(self) -> int:
        return sum(1 for r in self.repo_results if not r.success)

    @property
    def total_inserted(self) -> int:
        return sum(r.total_inserted for r in self.repo_results)

    def get(self, repository: str) -> RepoSyncResult | None:
        for result in self.repo_results:
            if result.repository == repository:
                return result
        return None

    def to_dict(self) -> dict[str, Any]:
        return {
            "summary": {
                "total_repos": len(self.repo_results),
                "repos_succeeded": self.repos_succeeded,
                "repos_failed": self.repos_failed,
                "total_inserted": self.total_inserted,
                "duration_seconds": round(self.duration_seconds, 2),
            },
            "repositories": [r.to_dict() for r in self.repo_results],
        }
