from __future__ import annotations

import asyncio
import re
from typing import Optional

from packaging.version import InvalidVersion, Version

from ..domain.models import DependencySpec, ResolvedDependency
from ..ports import LoggerPort, RegistryPort
from .batching import DEFAULT_BATCH_SIZE, run_in_batches


_NON_VERSION_CHARS = re.compile(r"[^0-9.]")


def normalize_version(declared: str) -> str:
    """Strip everything but digits and dots from a declared version.

    Range operators are discarded, not interpreted: ``^4.18.2`` becomes
    ``4.18.2`` and ``>=1.0,<2`` becomes ``1.02``.
    """
    return _NON_VERSION_CHARS.sub("", declared)


def _parse(version: Optional[str]) -> Optional[Version]:
    if not version:
        return None
    try:
        return Version(version)
    except InvalidVersion:
        return None


def is_outdated(declared: str, latest: Optional[str]) -> bool:
    """True iff the stripped declared version parses and sorts below latest.

    Any unparsable side yields False.
    """
    current_ver = _parse(normalize_version(declared))
    latest_ver = _parse(latest)
    if current_ver is None or latest_ver is None:
        return False
    return current_ver < latest_ver


class VersionResolver:
    """Resolves declared dependencies against a registry's latest versions."""

    def __init__(
        self,
        *,
        registry: RegistryPort,
        logger: LoggerPort,
        batch_size: int = DEFAULT_BATCH_SIZE,
    ) -> None:
        self._registry = registry
        self._logger = logger
        self._batch_size = batch_size

    async def resolve(
        self,
        deps: list[DependencySpec],
        *,
        cancel: Optional[asyncio.Event] = None,
    ) -> list[ResolvedDependency]:
        """Resolve every dependency; one result per input, in input order."""
        return await run_in_batches(
            deps,
            self._resolve_one,
            self._on_error,
            batch_size=self._batch_size,
            cancel=cancel,
            on_progress=self._on_progress,
        )

    async def _resolve_one(self, dep: DependencySpec) -> ResolvedDependency:
        latest = await self._registry.latest_version(dep.name)
        outdated = is_outdated(dep.declared_version, latest)
        if outdated:
            self._logger.info(
                "dependency_outdated",
                type="dependency_outdated",
                package=dep.name,
                current=dep.declared_version,
                latest=latest,
            )
        return ResolvedDependency(
            name=dep.name,
            declared_version=dep.declared_version,
            normalized_version=normalize_version(dep.declared_version),
            latest_version=latest,
            is_outdated=outdated,
        )

    def _on_error(self, dep: DependencySpec, exc: Exception) -> ResolvedDependency:
        self._logger.warning(
            "version_lookup_failed",
            type="version_lookup_failed",
            package=dep.name,
            error=str(exc),
        )
        return ResolvedDependency(
            name=dep.name,
            declared_version=dep.declared_version,
            normalized_version=normalize_version(dep.declared_version),
            latest_version=None,
            is_outdated=False,
            resolution_error=str(exc) or type(exc).__name__,
        )

    def _on_progress(self, done: int, total: int) -> None:
        self._logger.debug("versions_progress", type="versions_progress", done=done, total=total)
