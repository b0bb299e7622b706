"""Repository pattern implementation for database access.

This module provides repository classes that encapsulate all database
access logic, providing a clean abstraction over SQLAlchemy models.
"""

from .activity import (
    ActivityRepository,
    CommitRepository,
    IssueRepository,
    PullRequestRepository,
    ReviewRepository,
    activity_repository,
)
from .base import BaseRepository
from .query import ActivityQueryRepository
from .repository import RepositoryRepository

__all__ = [
    "ActivityQueryRepository",
    "ActivityRepository",
    "BaseRepository",
    "CommitRepository",
    "IssueRepository",
    "PullRequestRepository",
    "RepositoryRepository",
    "ReviewRepository",
    "activity_repository",
]
