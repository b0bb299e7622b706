"""HTTP routes of the activity API.

Read routes query the store directly; ``POST /api/addRepo`` runs a full
sync of the new repository before responding.
"""

from __future__ import annotations

from collections.abc import AsyncIterator
from typing import Annotated, Any

from fastapi import APIRouter, Body, Depends, HTTPException, Query, Request
from pydantic import ValidationError
from sqlalchemy.ext.asyncio import AsyncSession

from github_activity_tracker.db.engine import Database
from github_activity_tracker.db.repositories import (
    ActivityQueryRepository,
    RepositoryRepository,
)
from github_activity_tracker.github.sync import MultiRepoOrchestrator
from github_activity_tracker.logging import get_logger
from github_activity_tracker.schemas import (
    ActivityItem,
    AddRepositoryRequest,
    RepositoryRead,
    RepositoryStats,
    TrackedRepositoryEntry,
    build_activity_filter,
)
from github_activity_tracker.timeutils import isoformat_z, utc_now
from github_activity_tracker.tracked_repos import TrackedRepositories

logger = get_logger(__name__)

router = APIRouter(prefix="/api")


# -----------------------------------------------------------------------------
# Dependencies
# -----------------------------------------------------------------------------


def get_database(request: Request) -> Database:
    return request.app.state.database


def get_tracked(request: Request) -> TrackedRepositories:
    return request.app.state.tracked


async def get_session(
    database: Annotated[Database, Depends(get_database)],
) -> AsyncIterator[AsyncSession]:
    async with database.session() as session:
        yield session


SessionDep = Annotated[AsyncSession, Depends(get_session)]
TrackedDep = Annotated[TrackedRepositories, Depends(get_tracked)]


# -----------------------------------------------------------------------------
# Repositories & activity
# -----------------------------------------------------------------------------


@router.get("/health")
async def health() -> dict[str, str]:
    return {"status": "OK", "timestamp": isoformat_z(utc_now())}


@router.get("/repositories", response_model=list[RepositoryRead])
async def list_repositories(session: SessionDep) -> list[RepositoryRead]:
    repos = await RepositoryRepository(session).list_all()
    return RepositoryRead.from_orm_list(repos)


@router.get("/repository/{repository_id}", response_model=RepositoryRead)
async def get_repository(repository_id: int, session: SessionDep) -> RepositoryRead:
    repo = await RepositoryRepository(session).get_by_id(repository_id)
    if repo is None:
        raise HTTPException(status_code=404, detail="Repository not found")
    return RepositoryRead.from_orm(repo)


@router.get("/users")
async def list_users(session: SessionDep) -> list[str]:
    return await ActivityQueryRepository(session).list_users()


@router.get("/activity", response_model=list[ActivityItem])
async def list_activity(
    session: SessionDep,
    repo: str | None = None,
    repos: str | None = None,
    username: str | None = None,
    users: str | None = None,
    date_range: Annotated[str | None, Query(alias="dateRange")] = None,
    start_date: Annotated[str | None, Query(alias="startDate")] = None,
    end_date: Annotated[str | None, Query(alias="endDate")] = None,
    limit: Annotated[int | None, Query(ge=1)] = None,
) -> list[ActivityItem]:
    """Activity of every kind, newest first."""
    try:
        filters = build_activity_filter(
            repo=repo,
            repos=repos,
            username=username,
            users=users,
            date_range=date_range,
            start_date=start_date,
            end_date=end_date,
            limit=limit,
        )
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e)) from None

    rows = await ActivityQueryRepository(session).list_activity(
        repos=filters.repos,
        users=filters.users,
        start=filters.start,
        end=filters.end,
        limit=filters.limit,
    )
    return [ActivityItem.model_validate(row) for row in rows]


@router.get("/stats/{repository_id}")
async def repository_stats(repository_id: int, session: SessionDep) -> dict[str, int]:
    counts = await ActivityQueryRepository(session).stats(repository_id)
    return RepositoryStats.from_counts(counts).model_dump(by_alias=True)


# -----------------------------------------------------------------------------
# Tracked repository management
# -----------------------------------------------------------------------------


@router.post("/addRepo")
async def add_repository(
    request: Request,
    tracked: TrackedDep,
    payload: Annotated[dict[str, Any], Body()],
) -> dict[str, Any]:
    """Track a repository and ingest it immediately.

    The repository must exist on GitHub. The response carries the stored
    repository row and the sync summary.
    """
    try:
        body = AddRepositoryRequest.model_validate(payload)
    except ValidationError:
        raise HTTPException(
            status_code=400,
            detail="Invalid repository name format. Use owner/repo.",
        ) from None

    name = body.repo_name
    database: Database = request.app.state.database
    logger.info("Adding repository {}", name)

    async with request.app.state.client_factory() as client:
        if not await client.repository_exists(name):
            raise HTTPException(status_code=404, detail=f"Repository {name} not found on GitHub")

        async with database.session() as session:
            await RepositoryRepository(session).get_or_create(name)
        tracked.add(name)

        orchestrator = MultiRepoOrchestrator(
            database, client, request.app.state.settings, tracked
        )
        async with request.app.state.sync_lock:
            sync_result = await orchestrator.sync_repository(name)

    async with database.session() as session:
        repo = await RepositoryRepository(session).get_by_name(name)

    return {
        "success": sync_result.success,
        "repository": RepositoryRead.from_orm(repo).model_dump(mode="json"),
        "sync": sync_result.to_dict(),
    }


@router.get("/repos")
async def list_tracked(tracked: TrackedDep) -> dict[str, list[TrackedRepositoryEntry]]:
    entries = [TrackedRepositoryEntry(name=key, value=value) for key, value in tracked.entries()]
    return {"repos": entries}


@router.delete("/removeRepo/{repo_name:path}")
async def remove_tracked(repo_name: str, tracked: TrackedDep) -> dict[str, str]:
    """Stop tracking a repository. Stored activity is kept."""
    if not tracked.remove(repo_name):
        raise HTTPException(status_code=404, detail=f"Repository {repo_name} is not tracked")
    return {"message": f"Repository {repo_name} removed successfully"}
