from __future__ import annotations

from typing import Any, Optional
from urllib.parse import quote

import httpx

from ..core.domain.models import Advisory
from .http import get_json, post_json


OSV_ECOSYSTEMS = frozenset({"npm", "PyPI"})


def _osv_severity(vuln: dict[str, Any]) -> str:
    db_specific = vuln.get("database_specific") or {}
    if db_specific.get("severity"):
        return str(db_specific["severity"]).lower()
    for affected in vuln.get("affected") or []:
        eco_specific = affected.get("ecosystem_specific") or {}
        if eco_specific.get("severity"):
            return str(eco_specific["severity"]).lower()
    return "unknown"


def _osv_vulnerable_ranges(vuln: dict[str, Any]) -> Optional[str]:
    parts = []
    for affected in vuln.get("affected") or []:
        for rng in affected.get("ranges") or []:
            introduced = fixed = None
            for event in rng.get("events") or []:
                introduced = event.get("introduced", introduced)
                fixed = event.get("fixed", fixed)
            if introduced is None:
                continue
            parts.append(f">={introduced} <{fixed}" if fixed else f">={introduced}")
    return " || ".join(parts) or None


def advisory_from_osv(vuln: dict[str, Any]) -> Advisory:
    vuln_id = str(vuln.get("id", ""))
    return Advisory(
        id=vuln_id,
        title=vuln.get("summary") or (vuln.get("details") or "")[:120] or vuln_id,
        severity=_osv_severity(vuln),
        vulnerable_versions=_osv_vulnerable_ranges(vuln),
        url=f"https://osv.dev/vulnerability/{vuln_id}",
    )


class OsvAdvisorySource:
    """Advisory lookups through the OSV.dev query API."""

    def __init__(
        self,
        *,
        query_url: str = "https://api.osv.dev/v1/query",
        timeout: float = 15.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self._query_url = query_url
        self._timeout = timeout
        self._transport = transport

    def supports(self, ecosystem: str) -> bool:
        return ecosystem in OSV_ECOSYSTEMS

    async def advisories(self, package: str, version: Optional[str], ecosystem: str) -> list[Advisory]:
        body: dict[str, Any] = {"package": {"name": package, "ecosystem": ecosystem}}
        if version:
            body["version"] = version
        async with httpx.AsyncClient(timeout=self._timeout, transport=self._transport) as client:
            data = await post_json(client, self._query_url, body, subject=package, resource="advisory query")
        return [advisory_from_osv(v) for v in (data or {}).get("vulns") or []]


class NpmAdvisorySource:
    """Per-package advisory listing from the npm registry. Covers npm only."""

    def __init__(
        self,
        *,
        base_url: str = "https://registry.npmjs.org/-/npm/v1/security/advisories/package",
        timeout: float = 15.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self._base_url = base_url.rstrip("/")
        self._timeout = timeout
        self._transport = transport

    def supports(self, ecosystem: str) -> bool:
        return ecosystem == "npm"

    async def advisories(self, package: str, version: Optional[str], ecosystem: str) -> list[Advisory]:
        url = f"{self._base_url}/{quote(package, safe='@')}"
        async with httpx.AsyncClient(timeout=self._timeout, transport=self._transport) as client:
            data = await get_json(client, url, subject=package, resource="advisory listing")

        advisories = []
        for obj in (data or {}).get("objects") or []:
            advisories.append(
                Advisory(
                    id=str(obj.get("id", "")),
                    title=obj.get("title") or "",
                    severity=str(obj.get("severity") or "unknown").lower(),
                    vulnerable_versions=obj.get("vulnerable_versions"),
                    url=obj.get("url"),
                )
            )
        return advisories
