from __future__ import annotations

import asyncio
from typing import Optional

from ..domain.models import DependencySpec, VulnerabilityReport
from ..ports import AdvisorySourcePort, LoggerPort
from .batching import DEFAULT_BATCH_SIZE, run_in_batches
from .version_resolver import normalize_version


class VulnerabilityChecker:
    """Looks up published advisories for each dependency.

    Lookup failures are recorded on the package's report with zero advisories.
    """

    def __init__(
        self,
        *,
        source: AdvisorySourcePort,
        logger: LoggerPort,
        batch_size: int = DEFAULT_BATCH_SIZE,
    ) -> None:
        self._source = source
        self._logger = logger
        self._batch_size = batch_size

    async def check(
        self,
        deps: list[DependencySpec],
        ecosystem: str,
        *,
        cancel: Optional[asyncio.Event] = None,
    ) -> Optional[list[VulnerabilityReport]]:
        """Check all dependencies.

        Returns:
            One report per dependency, or None when the advisory source does
            not cover the ecosystem
        """
        if not self._source.supports(ecosystem):
            self._logger.info(
                "vulnerability_check_skipped",
                type="vulnerability_check_skipped",
                ecosystem=ecosystem,
            )
            return None

        async def _check_one(dep: DependencySpec) -> VulnerabilityReport:
            version = normalize_version(dep.declared_version) or None
            advisories = await self._source.advisories(dep.name, version, ecosystem)
            if advisories:
                self._logger.warning(
                    "vulnerabilities_found",
                    type="vulnerabilities_found",
                    package=dep.name,
                    count=len(advisories),
                )
            return VulnerabilityReport(
                package_name=dep.name,
                advisory_count=len(advisories),
                advisories=tuple(advisories),
            )

        return await run_in_batches(
            deps,
            _check_one,
            self._on_error,
            batch_size=self._batch_size,
            cancel=cancel,
        )

    def _on_error(self, dep: DependencySpec, exc: Exception) -> VulnerabilityReport:
        self._logger.warning(
            "advisory_lookup_failed",
            type="advisory_lookup_failed",
            package=dep.name,
            error=str(exc),
        )
        return VulnerabilityReport(
            package_name=dep.name,
            advisory_count=0,
            error=str(exc) or type(exc).__name__,
        )
