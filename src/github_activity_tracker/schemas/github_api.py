"""Pydantic schemas for parsing GitHub API responses.

These schemas map directly to the GitHub REST API response structure
and only declare the fields the tracker stores. Unknown fields are
ignored.
See: https://docs.github.com/en/rest
"""

from datetime import datetime
from typing import Any

from pydantic import BaseModel, Field

from github_activity_tracker.db.models import PRState

from .activity import (
    DEFAULT_REVIEW_COMMENT,
    UNKNOWN_AUTHOR,
    CommitCreate,
    IssueCreate,
    PullRequestCreate,
    ReviewCreate,
)


class GitHubUser(BaseModel):
    """GitHub user object from API responses."""

    login: str = Field(description="GitHub username")
    id: int = Field(description="GitHub user ID")
    type: str = Field(default="User", description="User type")


def _login(user: GitHubUser | None) -> str:
    # Deleted accounts come back as null
    return user.login if user is not None else UNKNOWN_AUTHOR


class GitHubRepository(BaseModel):
    """Repository object from GET /repos/{owner}/{repo}."""

    id: int = Field(description="Repository ID")
    name: str = Field(description="Repository name")
    full_name: str = Field(description="owner/repo")
    private: bool = Field(default=False, description="Whether the repository is private")
    default_branch: str = Field(default="main", description="Default branch name")
    html_url: str | None = Field(default=None, description="Repository URL")


class GitHubBranch(BaseModel):
    """Branch object from the branches endpoint."""

    name: str = Field(description="Branch name")


# ------------------------------------------------------------------------------
# Commits
# ------------------------------------------------------------------------------
class GitHubCommitAuthor(BaseModel):
    """Commit author info (from git, not GitHub user)."""

    name: str | None = Field(default=None, description="Author name")
    email: str | None = Field(default=None, description="Author email")
    date: datetime = Field(description="Commit date (UTC)")


class GitHubCommitDetail(BaseModel):
    """Nested commit detail object."""

    author: GitHubCommitAuthor = Field(description="Commit author info")
    message: str = Field(description="Commit message")


class GitHubCommit(BaseModel):
    """GitHub commit object from the commits endpoint."""

    sha: str = Field(description="Commit SHA")
    commit: GitHubCommitDetail = Field(description="Commit details")
    author: GitHubUser | None = Field(default=None, description="Linked GitHub account")

    @property
    def author_name(self) -> str:
        """Git author name, falling back to the linked GitHub login."""
        if self.commit.author.name:
            return self.commit.author.name
        return _login(self.author)

    @property
    def committed_at(self) -> datetime:
        return self.commit.author.date

    def to_commit_create(self, branch: str) -> CommitCreate:
        """Convert to a row for the branch it was listed on."""
        return CommitCreate(
            sha=self.sha,
            message=self.commit.message,
            author=self.author_name,
            committed_at=self.committed_at,
            branch=branch,
        )


# ------------------------------------------------------------------------------
# Pull requests & issues
# ------------------------------------------------------------------------------
class GitHubPullRequest(BaseModel):
    """GitHub Pull Request object from the pulls list endpoint."""

    number: int = Field(description="PR number")
    state: PRState = Field(description="PR state (open, closed)")
    title: str = Field(description="PR title")
    user: GitHubUser | None = Field(default=None, description="PR author")
    created_at: datetime = Field(description="When PR was created")
    updated_at: datetime = Field(description="Last update timestamp")
    closed_at: datetime | None = Field(default=None, description="When PR was closed")
    merged_at: datetime | None = Field(default=None, description="When PR was merged")

    def to_pull_request_create(self) -> PullRequestCreate:
        return PullRequestCreate(
            number=self.number,
            title=self.title,
            author=_login(self.user),
            state=self.state,
            created_at=self.created_at,
        )


class GitHubIssue(BaseModel):
    """Issue object from the issues endpoint.

    The issues endpoint also returns pull requests; those carry a
    ``pull_request`` object and are not issues for tracking purposes.
    """

    number: int = Field(description="Issue number")
    title: str = Field(description="Issue title")
    state: str = Field(default="open", description="Issue state")
    user: GitHubUser | None = Field(default=None, description="Issue author")
    created_at: datetime = Field(description="When the issue was opened")
    updated_at: datetime | None = Field(default=None, description="Last update timestamp")
    pull_request: dict[str, Any] | None = Field(
        default=None, description="Present when the item is a pull request"
    )

    @property
    def is_pull_request(self) -> bool:
        return self.pull_request is not None

    def to_issue_create(self) -> IssueCreate:
        return IssueCreate(
            number=self.number,
            title=self.title,
            author=_login(self.user),
            created_at=self.created_at,
        )


# ------------------------------------------------------------------------------
# Reviews
# ------------------------------------------------------------------------------
class GitHubReview(BaseModel):
    """GitHub review object from the reviews endpoint."""

    id: int = Field(description="Review ID")
    user: GitHubUser | None = Field(default=None, description="Reviewer")
    body: str | None = Field(default=None, description="Review comment")
    state: str = Field(description="Review state (APPROVED, CHANGES_REQUESTED, COMMENTED, etc.)")
    submitted_at: datetime | None = Field(default=None, description="When review was submitted")

    def to_review_create(self, pr_number: int, fallback_submitted_at: datetime) -> ReviewCreate:
        """Convert to a row, filling in the comment and time when GitHub omits them.

        Args:
            pr_number: Pull request the review belongs to
            fallback_submitted_at: Used for pending reviews with no submitted_at
        """
        return ReviewCreate(
            review_id=str(self.id),
            pr_number=pr_number,
            author=_login(self.user),
            comment=self.body or DEFAULT_REVIEW_COMMENT,
            submitted_at=self.submitted_at or fallback_submitted_at,
        )
