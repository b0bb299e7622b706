"""Pydantic schemas for GitHub Activity Tracker.

This module provides input validation and output serialization models.
"""

from .activity import (
    ActivityCreate,
    CommitCreate,
    IssueCreate,
    PullRequestCreate,
    ReviewCreate,
)
from .base import SchemaBase
from .github_api import (
    GitHubBranch,
    GitHubCommit,
    GitHubCommitAuthor,
    GitHubCommitDetail,
    GitHubIssue,
    GitHubPullRequest,
    GitHubRepository,
    GitHubReview,
    GitHubUser,
)
from .query import (
    ActivityFilter,
    ActivityItem,
    DateRange,
    RepositoryStats,
    build_activity_filter,
)
from .repository import (
    REPO_NAME_PATTERN,
    AddRepositoryRequest,
    RepositoryRead,
    TrackedRepositoryEntry,
    parse_repo_string,
)

__all__ = [
    # Activity rows
    "ActivityCreate",
    "CommitCreate",
    "IssueCreate",
    "PullRequestCreate",
    "ReviewCreate",
    # GitHub API
    "GitHubBranch",
    "GitHubCommit",
    "GitHubCommitAuthor",
    "GitHubCommitDetail",
    "GitHubIssue",
    "GitHubPullRequest",
    "GitHubRepository",
    "GitHubReview",
    "GitHubUser",
    # Query API
    "ActivityFilter",
    "ActivityItem",
    "DateRange",
    "RepositoryStats",
    "build_activity_filter",
    # Repository
    "REPO_NAME_PATTERN",
    "AddRepositoryRequest",
    "RepositoryRead",
    "TrackedRepositoryEntry",
    "parse_repo_string",
    # Base
    "SchemaBase",
]
