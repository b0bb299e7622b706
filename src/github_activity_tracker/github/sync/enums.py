"""Enums for sync operations."""

from enum import Enum


class SyncStage(str, Enum):
    """Stages of one repository sync, in execution order."""

    PRUNE = "prune"
    DEDUP_MAINTENANCE = "dedup_maintenance"
    COMMITS = "commits"
    PULL_REQUESTS = "pull_requests"
    ISSUES = "issues"
    REVIEWS = "reviews"


class OutputFormat(str, Enum):
    """Output format for CLI commands."""

    TEXT = "text"
    """Human-readable text output."""

    JSON = "json"
    """Machine-readable JSON output."""
