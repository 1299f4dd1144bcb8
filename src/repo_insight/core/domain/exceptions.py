"""Domain exceptions for repo_insight."""

from __future__ import annotations

from datetime import datetime


class RepoInsightError(Exception):
    """Base class for every error a pipeline surfaces to its caller."""


class ValidationError(RepoInsightError):
    """Raised for malformed input detected before any network call.

    Covers repository identifiers without an ``owner/name`` shape and
    unsupported manifest types.
    """


class ParseError(RepoInsightError):
    """Raised when manifest content cannot be read as its declared format."""

    def __init__(self, source: str, reason: str) -> None:
        self.source = source
        self.reason = reason
        super().__init__(f"Failed to parse {source}: {reason}")


class RemoteError(RepoInsightError):
    """Raised when a remote resource request fails.

    Carries the HTTP status when the server answered, the subject the request
    was about (repository slug or package name) and the resource kind.
    """

    def __init__(
        self,
        *,
        subject: str,
        resource: str,
        status: int | None = None,
        detail: str | None = None,
    ) -> None:
        self.subject = subject
        self.resource = resource
        self.status = status
        self.detail = detail
        super().__init__(self._build_message())

    def _build_message(self) -> str:
        message = f"{self.resource} request failed for {self.subject}"
        if self.status is not None:
            message += f" (HTTP {self.status})"
        if self.detail:
            message += f": {self.detail}"
        return message


class NotFoundError(RemoteError):
    """Raised when a repository, file or package does not exist."""

    def _build_message(self) -> str:
        message = f"{self.resource} not found for {self.subject}"
        if self.status is not None:
            message += f" (HTTP {self.status})"
        if self.detail:
            message += f": {self.detail}"
        return message


class RateLimitError(RemoteError):
    """Raised on HTTP 429, or 403 with an exhausted rate-limit quota.

    ``token_env`` names the setting that raises the quota, when the service
    has one.
    """

    def __init__(
        self,
        *,
        subject: str,
        resource: str,
        status: int | None = None,
        detail: str | None = None,
        reset_at: datetime | None = None,
        token_env: str | None = None,
    ) -> None:
        self.reset_at = reset_at
        self.token_env = token_env
        super().__init__(subject=subject, resource=resource, status=status, detail=detail)

    def _build_message(self) -> str:
        message = f"Rate limit exceeded while requesting {self.resource} for {self.subject}"
        if self.status is not None:
            message += f" (HTTP {self.status})"
        if self.reset_at is not None:
            message += f"; retry after {self.reset_at.isoformat()}"
        else:
            message += "; wait a few minutes and retry"
        if self.token_env:
            message += f" or set {self.token_env}"
        return message


class PipelineCancelledError(RepoInsightError):
    """Raised when a cancellation token is set between batch groups."""

    def __init__(self, completed: int, total: int) -> None:
        self.completed = completed
        self.total = total
        super().__init__(f"Pipeline cancelled after {completed}/{total} items")
