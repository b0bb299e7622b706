"""Pydantic schemas for Repository model and repository names."""

import re
from datetime import datetime

from pydantic import Field, field_validator

from .base import SchemaBase

REPO_NAME_PATTERN = re.compile(r"^[a-zA-Z0-9_.-]+/[a-zA-Z0-9_.-]+$")


def parse_repo_string(repo: str) -> tuple[str, str]:
    """Split an owner/repo string into its parts.

    Args:
        repo: Repository string like "prebid/prebid-server"

    Returns:
        Tuple of (owner, name)

    Raises:
        ValueError: If the string is not a valid owner/repo name
    """
    repo = repo.strip()
    if not REPO_NAME_PATTERN.match(repo):
        raise ValueError(f"Invalid repository name '{repo}': expected owner/repo")
    owner, name = repo.split("/", 1)
    return owner, name


class RepositoryRead(SchemaBase):
    """Schema for reading repository data."""

    id: int
    name: str
    created_at: datetime
    last_synced_at: datetime | None = None


class AddRepositoryRequest(SchemaBase):
    """Body of the add-repository request."""

    repo_name: str = Field(alias="repoName", min_length=1)

    @field_validator("repo_name")
    @classmethod
    def _validate_repo_name(cls, value: str) -> str:
        parse_repo_string(value)
        return value.strip()


class TrackedRepositoryEntry(SchemaBase):
    """One line of the tracked repositories file."""

    name: str
    value: str
