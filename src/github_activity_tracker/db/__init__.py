"""Database module for GitHub Activity Tracker."""

from github_activity_tracker.db.engine import Database, create_database
from github_activity_tracker.db.models import (
    ACTIVITY_MODELS,
    ActivityKind,
    ActivityRecord,
    Base,
    Commit,
    Issue,
    PRState,
    PullRequest,
    Repository,
    Review,
)
from github_activity_tracker.db.repositories import (
    ActivityQueryRepository,
    ActivityRepository,
    BaseRepository,
    PullRequestRepository,
    RepositoryRepository,
    activity_repository,
)

__all__ = [
    # Models
    "ACTIVITY_MODELS",
    "ActivityKind",
    "ActivityRecord",
    "Base",
    "Commit",
    "Issue",
    "PRState",
    "PullRequest",
    "Repository",
    "Review",
    # Engine
    "Database",
    "create_database",
    # Repositories
    "ActivityQueryRepository",
    "ActivityRepository",
    "BaseRepository",
    "PullRequestRepository",
    "RepositoryRepository",
    "activity_repository",
]
