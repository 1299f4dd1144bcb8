from __future__ import annotations

from typing import Optional
from urllib.parse import quote

import httpx
from packaging.version import InvalidVersion, Version

from ..core.domain.exceptions import RemoteError
from .http import get_json


class _RegistryClient:
    resource = "registry metadata"

    def __init__(
        self,
        *,
        base_url: str,
        timeout: float = 15.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self._base_url = base_url.rstrip("/")
        self._timeout = timeout
        self._transport = transport

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(timeout=self._timeout, transport=self._transport)


class NpmRegistryClient(_RegistryClient):
    """Latest version from the npm registry ``latest`` dist-tag."""

    async def latest_version(self, package: str) -> str:
        url = f"{self._base_url}/{quote(package, safe='@')}"
        async with self._client() as client:
            data = await get_json(client, url, subject=package, resource=self.resource)

        latest = ((data or {}).get("dist-tags") or {}).get("latest")
        if not latest:
            raise RemoteError(subject=package, resource=self.resource, detail="no 'latest' dist-tag published")
        return latest


def highest_release(releases) -> Optional[str]:
    """Highest stable release among ``releases``; falls back to any release.

    Release strings that are not valid versions are ignored.
    """
    versions = []
    for raw in releases:
        try:
            versions.append(Version(raw))
        except InvalidVersion:
            continue
    stable = [v for v in versions if not v.is_prerelease and not v.is_devrelease]
    if stable:
        return str(max(stable))
    if versions:
        return str(max(versions))
    return None


class PyPIRegistryClient(_RegistryClient):
    """Latest version from the PyPI JSON API."""

    async def latest_version(self, package: str) -> str:
        url = f"{self._base_url}/{quote(package)}/json"
        async with self._client() as client:
            data = await get_json(client, url, subject=package, resource=self.resource)

        data = data or {}
        latest = highest_release((data.get("releases") or {}).keys())
        if latest is None:
            latest = (data.get("info") or {}).get("version")
        if not latest:
            raise RemoteError(subject=package, resource=self.resource, detail="no releases published")
        return latest
