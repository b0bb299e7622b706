"""Tracked repository list backed by a properties file.

The file holds one ``owner/repo=owner/repo`` entry per line. Lines
starting with ``#`` and blank lines are ignored. The file is re-read on
every call so edits made by other processes are picked up.
"""

from __future__ import annotations

from pathlib import Path

from github_activity_tracker.logging import get_logger
from github_activity_tracker.schemas.repository import parse_repo_string

logger = get_logger(__name__)


class TrackedRepositories:
    """Ordered list of repositories to sync.

    Usage:
        tracked = TrackedRepositories("config.properties")
        tracked.add("prebid/prebid-server")
        for name in tracked.load():
            ...
    """

    def __init__(self, path: str | Path) -> None:
        self._path = Path(path)

    @property
    def path(self) -> Path:
        return self._path

    def _read_lines(self) -> list[str]:
        if not self._path.exists():
            return []
        return self._path.read_text(encoding="utf-8").splitlines()

    def entries(self) -> list[tuple[str, str]]:
        """All (key, value) pairs in file order."""
        pairs: list[tuple[str, str]] = []
        for line in self._read_lines():
            stripped = line.strip()
            if not stripped or stripped.startswith("#"):
                continue
            key, sep, value = stripped.partition("=")
            pairs.append((key.strip(), value.strip() if sep else key.strip()))
        return pairs

    def load(self) -> list[str]:
        """Valid repository names, in file order, without duplicates."""
        names: list[str] = []
        for key, _value in self.entries():
            try:
                parse_repo_string(key)
            except ValueError:
                logger.warning("Ignoring invalid entry '{}' in {}", key, self._path)
                continue
            if key not in names:
                names.append(key)
        return names

    def contains(self, name: str) -> bool:
        return name in self.load()

    def add(self, name: str) -> bool:
        """Append a repository.

        Returns:
            False if it was already tracked

        Raises:
            ValueError: If name is not owner/repo
        """
        parse_repo_string(name)
        if self.contains(name):
            return False

        content = self._path.read_text(encoding="utf-8") if self._path.exists() else ""
        if content and not content.endswith("\n"):
            content += "\n"
        self._path.parent.mkdir(parents=True, exist_ok=True)
        self._path.write_text(f"{content}{name}={name}\n", encoding="utf-8")
        logger.info("Now tracking {}", name)
        return True

    def remove(self, name: str) -> bool:
        """Drop every line for a repository.

        Returns:
            True if at least one line was removed
        """
        lines = self._read_lines()
        kept = [
            line
            for line in lines
            if line.strip().startswith("#") or line.strip().partition("=")[0].strip() != name
        ]
        if len(kept) == len(lines):
            return False

        self._path.write_text("\n".join(kept) + ("\n" if kept else ""), encoding="utf-8")
        logger.info("Stopped tracking {}", name)
        return True
