from __future__ import annotations

from typing import Any, Optional

import httpx

from ..core.domain.exceptions import NotFoundError, RemoteError
from ..core.domain.models import FetchedFile, RepositoryRef
from ..core.ports import LoggerPort
from .http import check_response, get_json


MAX_PER_PAGE = 100
USER_AGENT = "repo-insight"
TOKEN_ENV = "REPO_INSIGHT_GITHUB__TOKEN"


def fallback_branch_for(branch: str, fallback: str = "master") -> str:
    """The single alternate branch tried when a file is missing on ``branch``."""
    if branch != fallback:
        return fallback
    return "main" if fallback != "main" else "master"


class GitHubClient:
    """Async client for the GitHub REST API and raw content host."""

    def __init__(
        self,
        *,
        logger: LoggerPort,
        token: Optional[str] = None,
        api_url: str = "https://api.github.com",
        raw_url: str = "https://raw.githubusercontent.com",
        fallback_branch: str = "master",
        timeout: float = 15.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self._logger = logger
        self._token = token
        self._api_url = api_url.rstrip("/")
        self._raw_url = raw_url.rstrip("/")
        self._fallback_branch = fallback_branch
        self._timeout = timeout
        self._transport = transport

    def _client(self) -> httpx.AsyncClient:
        headers = {
            "Accept": "application/vnd.github+json",
            "X-GitHub-Api-Version": "2022-11-28",
            "User-Agent": USER_AGENT,
        }
        if self._token:
            headers["Authorization"] = f"Bearer {self._token}"
        return httpx.AsyncClient(headers=headers, timeout=self._timeout, transport=self._transport)

    def _repo_url(self, repo: RepositoryRef, suffix: str = "") -> str:
        return f"{self._api_url}/repos/{repo.owner}/{repo.name}{suffix}"

    async def get_repository(self, repo: RepositoryRef) -> dict[str, Any]:
        async with self._client() as client:
            return await get_json(
                client, self._repo_url(repo), subject=repo.slug, resource="repository", token_env=TOKEN_ENV
            )

    async def list_contributors(self, repo: RepositoryRef) -> list[dict[str, Any]]:
        async with self._client() as client:
            data = await get_json(
                client,
                self._repo_url(repo, "/contributors"),
                subject=repo.slug,
                resource="contributors",
                token_env=TOKEN_ENV,
            )
        return data or []

    async def list_commits(
        self,
        repo: RepositoryRef,
        *,
        limit: int,
        author: Optional[str] = None,
        since: Optional[str] = None,
        until: Optional[str] = None,
    ) -> list[dict[str, Any]]:
        """List up to ``limit`` commits, paging through the API as needed."""
        params: dict[str, Any] = {"per_page": min(limit, MAX_PER_PAGE)}
        if author:
            params["author"] = author
        if since:
            params["since"] = since
        if until:
            params["until"] = until

        commits: list[dict[str, Any]] = []
        page = 1
        async with self._client() as client:
            while len(commits) < limit:
                batch = await get_json(
                    client,
                    self._repo_url(repo, "/commits"),
                    subject=repo.slug,
                    resource="commit list",
                    params={**params, "page": page},
                    token_env=TOKEN_ENV,
                )
                if not batch:
                    break
                commits.extend(batch)
                if len(batch) < params["per_page"]:
                    break
                page += 1

        self._logger.debug("commit_list_fetched", type="commit_list_fetched", repository=repo.slug, pages=page)
        return commits[:limit]

    async def get_commit(self, repo: RepositoryRef, sha: str) -> dict[str, Any]:
        async with self._client() as client:
            return await get_json(
                client,
                self._repo_url(repo, f"/commits/{sha}"),
                subject=f"{repo.slug}@{sha[:7]}",
                resource="commit detail",
                token_env=TOKEN_ENV,
            )

    async def get_commit_activity(self, repo: RepositoryRef, period: str) -> Any:
        """Weekly activity or monthly participation statistics.

        GitHub answers 202 with an empty body while it computes statistics;
        that is returned as-is and treated as "no data" by callers.
        """
        suffix = "/stats/commit_activity" if period == "weekly" else "/stats/participation"
        async with self._client() as client:
            return await get_json(
                client,
                self._repo_url(repo, suffix),
                subject=repo.slug,
                resource="commit activity",
                token_env=TOKEN_ENV,
            )

    async def fetch_file(self, repo: RepositoryRef, path: str, branch: str) -> FetchedFile:
        """Fetch raw file content from ``branch``, then from one fallback branch.

        Raises:
            NotFoundError: the file is missing on both branches
        """
        fallback = fallback_branch_for(branch, self._fallback_branch)
        async with self._client() as client:
            try:
                content = await self._fetch_raw(client, repo, path, branch)
                return FetchedFile(path=path, branch=branch, content=content)
            except NotFoundError:
                self._logger.info(
                    "file_branch_fallback",
                    type="file_branch_fallback",
                    path=path,
                    branch=branch,
                    fallback=fallback,
                )

            try:
                content = await self._fetch_raw(client, repo, path, fallback)
            except NotFoundError as e:
                raise NotFoundError(
                    subject=repo.slug,
                    resource=f"file {path}",
                    status=e.status,
                    detail=f"not found on branch {branch!r} or {fallback!r}",
                ) from e
            return FetchedFile(path=path, branch=fallback, content=content)

    async def _fetch_raw(self, client: httpx.AsyncClient, repo: RepositoryRef, path: str, branch: str) -> str:
        url = f"{self._raw_url}/{repo.owner}/{repo.name}/{branch}/{path.lstrip('/')}"
        resource = f"file {path}@{branch}"
        try:
            response = await client.get(url)
        except httpx.RequestError as e:
            raise RemoteError(subject=repo.slug, resource=resource, detail=f"network error ({e})") from e
        check_response(response, subject=repo.slug, resource=resource, token_env=TOKEN_ENV)
        return response.text
