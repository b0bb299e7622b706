"""Repository for GitHub Repository model CRUD operations."""

from datetime import datetime

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from github_activity_tracker.db.models import Repository
from github_activity_tracker.timeutils import to_storage

from .base import BaseRepository


class RepositoryRepository(BaseRepository[Repository]):
    """Repository for tracked GitHub repositories."""

    def __init__(self, session: AsyncSession) -> None:
        super().__init__(session, Repository)

    async def get_by_name(self, name: str) -> Repository | None:
        """Get a repository by its owner/repo name.

        Args:
            name: Full repository name (e.g., "prebid/prebid-server")

        Returns:
            Repository or None if not found
        """
        return await self._get_by_field("name", name)

    async def list_all(self) -> list[Repository]:
        """All repositories, most recently created first."""
        stmt = select(Repository).order_by(
            Repository.created_at.desc(), Repository.id.desc()
        )
        result = await self._session.execute(stmt)
        return list(result.scalars().all())

    async def get_or_create(self, name: str) -> tuple[Repository, bool]:
        """Get existing repository or create a new one.

        Args:
            name: Full repository name

        Returns:
            Tuple of (repository, created) where created is True if new
        """
        existing = await self.get_by_name(name)
        if existing is not None:
            return existing, False

        repo = self.add(Repository(name=name))
        await self.flush()
        return repo, True

    async def update_last_synced(
        self,
        repository_id: int,
        synced_at: datetime,
    ) -> Repository | None:
        """Record when a repository last finished a sync.

        Returns:
            Updated repository or None if not found
        """
        repo = await self.get_by_id(repository_id)
        if repo is None:
            return None

        repo.last_synced_at = to_storage(synced_at)
        await self.flush()
        return repo
