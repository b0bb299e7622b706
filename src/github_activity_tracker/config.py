"""Configuration settings for GitHub Activity Tracker."""

from datetime import timedelta
from functools import lru_cache
from typing import Literal

from pydantic import BaseModel, Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class RateLimitConfig(BaseModel):
    """Configuration for rate limit monitoring.

    Controls the low-water mark at which sync pauses, the safety margin
    added to every reset wait, and thresholds for health status.
    """

    low_water_mark: int = Field(
        default=20,
        ge=0,
        description="Pause before request bursts when remaining quota drops below this",
    )
    safety_margin_seconds: int = Field(
        default=5,
        ge=0,
        description="Seconds added to the reset time before resuming",
    )

    # Threshold percentages for status determination
    healthy_threshold_pct: float = Field(
        default=50.0,
        ge=0.0,
        le=100.0,
        description="% remaining above which status is HEALTHY",
    )
    warning_threshold_pct: float = Field(
        default=20.0,
        ge=0.0,
        le=100.0,
        description="% remaining above which status is WARNING (below healthy)",
    )

    track_from_headers: bool = Field(
        default=True,
        description="Passively track limits from response headers",
    )


class FetchConfig(BaseModel):
    """Configuration for page fetching and retry behavior."""

    page_size: int = Field(
        default=100,
        ge=1,
        le=100,
        description="Items requested per page (GitHub maximum is 100)",
    )
    max_retries: int = Field(
        default=5,
        ge=0,
        description="Retries per page for transient failures",
    )
    initial_backoff_seconds: float = Field(
        default=5.0,
        ge=0.0,
        description="First retry delay; doubles on each further attempt",
    )


class SyncConfig(BaseModel):
    """Configuration for repository sync behavior.

    Controls the retention horizon, concurrency limits for the
    fan-out stages, and how records are written to the database.
    """

    retention_days: int = Field(
        default=30,
        ge=1,
        description="Records older than this are pruned and never re-fetched",
    )
    review_batch_size: int = Field(
        default=5,
        ge=1,
        le=50,
        description="Pull requests whose reviews are fetched concurrently",
    )
    branch_concurrency: int = Field(
        default=4,
        ge=1,
        le=50,
        description="Branches whose commits are fetched concurrently",
    )
    insert_batch_size: int = Field(
        default=20,
        ge=1,
        le=1000,
        description="Rows per bulk insert before falling back to single inserts",
    )
    update_pull_request_state: bool = Field(
        default=True,
        description="Reflect upstream state/title changes on stored pull requests",
    )

    @property
    def retention(self) -> timedelta:
        """Get the retention horizon as a timedelta."""
        return timedelta(days=self.retention_days)


class LoggingConfig(BaseModel):
    """Configuration for logging behavior.

    Controls file logging, rotation, and output format.
    """

    log_file: str | None = Field(
        default=None,
        description="Optional path for file logging (enables rotation)",
    )
    rotation: str = Field(
        default="10 MB",
        description="When to rotate log file (e.g., '10 MB', '1 day')",
    )
    retention: str = Field(
        default="7 days",
        description="How long to keep rotated logs",
    )
    serialize: bool = Field(
        default=False,
        description="If True, output JSON format to file",
    )


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_nested_delimiter="__",
        case_sensitive=False,
        extra="ignore",
    )

    # --------------------------------------------------------------------------
    # Database
    # --------------------------------------------------------------------------
    database_url: str = Field(
        default="sqlite+aiosqlite:///./github_activity.db",
        description="Async database connection string",
    )

    # --------------------------------------------------------------------------
    # GitHub API
    # --------------------------------------------------------------------------
    github_token: str = Field(
        default="",
        description="GitHub personal access token",
    )

    # --------------------------------------------------------------------------
    # Application
    # --------------------------------------------------------------------------
    environment: Literal["development", "staging", "production"] = Field(
        default="development",
        description="Application environment",
    )
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = Field(
        default="INFO",
        description="Logging level",
    )

    # --------------------------------------------------------------------------
    # Tracked Repositories & API
    # --------------------------------------------------------------------------
    repos_file: str = Field(
        default="config.properties",
        description="File listing tracked repositories (owner/repo=owner/repo)",
    )
    api_host: str = Field(default="0.0.0.0", description="API bind address")
    api_port: int = Field(default=3000, ge=1, le=65535, description="API port")
    sync_interval_minutes: int | None = Field(
        default=None,
        ge=1,
        description="Re-run the sync cycle on this interval while serving",
    )

    # --------------------------------------------------------------------------
    # Rate Limiting & Fetching
    # --------------------------------------------------------------------------
    rate_limit: RateLimitConfig = Field(
        default_factory=RateLimitConfig,
        description="Rate limit monitoring configuration",
    )
    fetch: FetchConfig = Field(
        default_factory=FetchConfig,
        description="Page fetch and retry configuration",
    )

    # --------------------------------------------------------------------------
    # Sync Configuration
    # --------------------------------------------------------------------------
    sync: SyncConfig = Field(
        default_factory=SyncConfig,
        description="Sync behavior configuration",
    )

    # --------------------------------------------------------------------------
    # Logging Configuration
    # --------------------------------------------------------------------------
    logging: LoggingConfig = Field(
        default_factory=LoggingConfig,
        description="Logging configuration (file output, rotation)",
    )


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
