"""FastAPI application factory for the activity API."""

from __future__ import annotations

import asyncio
import contextlib
from collections.abc import AsyncIterator, Callable
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError
from starlette.exceptions import HTTPException as StarletteHTTPException

from github_activity_tracker import __version__
from github_activity_tracker.config import Settings, get_settings
from github_activity_tracker.db.engine import Database
from github_activity_tracker.github.client import GitHubClient
from github_activity_tracker.github.exceptions import GitHubClientError
from github_activity_tracker.github.sync import MultiRepoOrchestrator
from github_activity_tracker.logging import get_logger
from github_activity_tracker.tracked_repos import TrackedRepositories

from .routes import router

logger = get_logger(__name__)

ClientFactory = Callable[[], GitHubClient]


async def _periodic_sync(app: FastAPI, interval_seconds: float) -> None:
    """Re-run the full sync cycle forever, one cycle per interval."""
    while True:
        await asyncio.sleep(interval_seconds)
        try:
            async with app.state.client_factory() as client:
                orchestrator = MultiRepoOrchestrator(
                    app.state.database,
                    client,
                    app.state.settings,
                    app.state.tracked,
                )
                async with app.state.sync_lock:
                    await orchestrator.sync_all()
        except Exception:
            logger.exception("Scheduled sync cycle failed")


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    settings: Settings = app.state.settings
    task: asyncio.Task[None] | None = None
    if settings.sync_interval_minutes:
        logger.info("Scheduling sync every {} minutes", settings.sync_interval_minutes)
        task = asyncio.create_task(_periodic_sync(app, settings.sync_interval_minutes * 60))

    yield

    if task is not None:
        task.cancel()
        with contextlib.suppress(asyncio.CancelledError):
            await task
    await app.state.database.dispose()
    logger.info("Database connections closed")


def _error(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"error": message})


def create_app(
    database: Database,
    settings: Settings | None = None,
    *,
    client_factory: ClientFactory | None = None,
    tracked: TrackedRepositories | None = None,
) -> FastAPI:
    """Build the API around an explicit database handle.

    Args:
        database: Store every route reads from
        settings: Application settings (defaults to get_settings())
        client_factory: Builds a GitHub client for add-repository syncs
        tracked: Tracked repository list (defaults to settings.repos_file)
    """
    settings = settings or get_settings()

    app = FastAPI(title="GitHub Activity Tracker", version=__version__, lifespan=lifespan)
    app.state.database = database
    app.state.settings = settings
    app.state.tracked = tracked or TrackedRepositories(settings.repos_file)
    app.state.client_factory = client_factory or (
        lambda: GitHubClient(token=settings.github_token)
    )
    app.state.sync_lock = asyncio.Lock()

    @app.exception_handler(StarletteHTTPException)
    async def http_error(_request: Request, exc: StarletteHTTPException) -> JSONResponse:
        return _error(exc.status_code, str(exc.detail))

    @app.exception_handler(RequestValidationError)
    async def validation_error(_request: Request, exc: RequestValidationError) -> JSONResponse:
        first = exc.errors()[0] if exc.errors() else {}
        location = ".".join(str(part) for part in first.get("loc", ()))
        return _error(400, f"Invalid {location}: {first.get('msg', 'bad request')}")

    @app.exception_handler(SQLAlchemyError)
    async def database_error(_request: Request, exc: SQLAlchemyError) -> JSONResponse:
        logger.error("Database error: {}", exc)
        return _error(500, "Database error")

    @app.exception_handler(GitHubClientError)
    async def github_error(_request: Request, exc: GitHubClientError) -> JSONResponse:
        logger.error("GitHub error: {}", exc)
        return _error(500, "GitHub request failed")

    app.include_router(router)
    return app
