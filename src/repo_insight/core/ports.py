from __future__ import annotations

from pathlib import Path
from typing import Any, Optional, Protocol

from .domain.models import Advisory, FetchedFile, RepositoryRef


class GitHubPort(Protocol):
    """Port for the Git forge REST API.

    Methods return decoded JSON payloads; conversion to domain models happens
    in core services so adapters stay thin.

    Raises:
        NotFoundError: resource absent
        RateLimitError: upstream quota exhausted
        RemoteError: any other HTTP or transport failure
    """

    async def get_repository(self, repo: RepositoryRef) -> dict[str, Any]:
        ...

    async def list_contributors(self, repo: RepositoryRef) -> list[dict[str, Any]]:
        ...

    async def list_commits(
        self,
        repo: RepositoryRef,
        *,
        limit: int,
        author: Optional[str] = None,
        since: Optional[str] = None,
        until: Optional[str] = None,
    ) -> list[dict[str, Any]]:
        """List commits, newest first. Filters are sent as query parameters."""
        ...

    async def get_commit(self, repo: RepositoryRef, sha: str) -> dict[str, Any]:
        """Fetch a single commit with stats and changed files."""
        ...

    async def get_commit_activity(self, repo: RepositoryRef, period: str) -> Any:
        """Fetch weekly or monthly commit activity statistics."""
        ...

    async def fetch_file(self, repo: RepositoryRef, path: str, branch: str) -> FetchedFile:
        """Fetch raw file content, falling back to one alternate branch on 404."""
        ...


class RegistryPort(Protocol):
    """Port for a package registry."""

    async def latest_version(self, package: str) -> str:
        """Return the latest published version of a package."""
        ...


class AdvisorySourcePort(Protocol):
    """Port for a security advisory lookup service."""

    def supports(self, ecosystem: str) -> bool:
        ...

    async def advisories(self, package: str, version: Optional[str], ecosystem: str) -> list[Advisory]:
        ...


class ReportStorePort(Protocol):
    """Port for persisting report aggregates."""

    def save(
        self,
        *,
        repo: RepositoryRef,
        kind: str,
        payload: dict[str, Any],
        directory: Optional[Path] = None,
    ) -> Path:
        """Write one report file and return its path.

        ``directory`` overrides the configured reports directory.
        """
        ...

    def load(self, *, repo: RepositoryRef, kind: str) -> Optional[dict[str, Any]]:
        ...


class ConfirmPort(Protocol):
    """User consent capability for mutating actions."""

    def __call__(self, message: str) -> bool:
        ...


class LoggerPort(Protocol):
    """Port for structured logging.

    Extra keyword arguments are attached to the record as structured fields.
    """

    def debug(self, message: str, **kwargs: Any) -> None:
        ...

    def info(self, message: str, **kwargs: Any) -> None:
        ...

    def warning(self, message: str, **kwargs: Any) -> None:
        ...

    def error(self, message: str, exc_info: bool = False, **kwargs: Any) -> None:
        ...

    def exception(self, message: str, **kwargs: Any) -> None:
        ...
