from __future__ import annotations

import asyncio
from datetime import datetime, timezone
from pathlib import Path
from typing import Callable, Mapping, Optional

from ..domain.exceptions import NotFoundError
from ..domain.models import (
    AuditReport,
    AuditSummary,
    FetchedFile,
    ManifestKind,
    RepositoryRef,
)
from ..ports import AdvisorySourcePort, GitHubPort, LoggerPort, RegistryPort, ReportStorePort
from ..services import (
    VersionResolver,
    VulnerabilityChecker,
    parse_manifest,
    suggest_alternatives,
)
from ..services.batching import DEFAULT_BATCH_SIZE
from .result import SavedReport
from ...shared.to_jsonable import to_jsonable


REPORT_KIND = "audit"


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class AuditUseCase:
    """Dependency audit pipeline.

    Fetches the manifest, resolves latest versions, checks advisories,
    suggests alternatives and persists one ``<owner>-<name>-audit.json``.
    Nothing is written if the manifest cannot be fetched or parsed.
    """

    def __init__(
        self,
        *,
        github: GitHubPort,
        registries: Mapping[str, RegistryPort],
        advisory_source: AdvisorySourcePort,
        report_store: ReportStorePort,
        logger: LoggerPort,
        batch_size: int = DEFAULT_BATCH_SIZE,
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        self._github = github
        self._registries = registries
        self._advisory_source = advisory_source
        self._report_store = report_store
        self._logger = logger
        self._batch_size = batch_size
        self._clock = clock

    async def execute(
        self,
        *,
        repository: str,
        manifest_type: str = ManifestKind.PACKAGE_MANIFEST.value,
        branch: str = "main",
        output_dir: Optional[Path] = None,
        cancel: Optional[asyncio.Event] = None,
    ) -> SavedReport[AuditReport]:
        """Run the audit.

        Raises:
            ValidationError: malformed repository or unsupported manifest type
            NotFoundError: manifest absent from every candidate path
            ParseError: manifest content is not valid for its format
        """
        repo = RepositoryRef.parse(repository)
        kind = ManifestKind.from_option(manifest_type)
        self._logger.info(
            "audit_started",
            type="audit_started",
            repository=repo.slug,
            manifest=kind.value,
            branch=branch,
        )

        manifest = await self._fetch_manifest(repo, kind, branch)
        deps = parse_manifest(manifest.content, kind, source=f"{repo.slug}:{manifest.path}@{manifest.branch}")
        self._logger.info(
            "manifest_parsed",
            type="manifest_parsed",
            path=manifest.path,
            branch=manifest.branch,
            dependencies=len(deps),
        )

        resolver = VersionResolver(
            registry=self._registries[kind.ecosystem],
            logger=self._logger,
            batch_size=self._batch_size,
        )
        checker = VulnerabilityChecker(
            source=self._advisory_source,
            logger=self._logger,
            batch_size=self._batch_size,
        )

        resolved = await resolver.resolve(deps, cancel=cancel)
        vulnerabilities = await checker.check(deps, kind.ecosystem, cancel=cancel)
        alternatives = suggest_alternatives(deps)

        outdated = tuple(d.name for d in resolved if d.is_outdated)
        summary = AuditSummary(
            total_dependencies=len(deps),
            outdated_count=len(outdated),
            up_to_date_count=sum(1 for d in resolved if not d.is_outdated and d.resolution_error is None),
            vulnerable_count=sum(1 for v in vulnerabilities or () if v.advisory_count > 0),
            resolution_errors=sum(1 for d in resolved if d.resolution_error is not None),
        )

        report = AuditReport(
            subject=repo,
            generated_at=self._clock(),
            manifest_kind=kind,
            manifest_path=manifest.path,
            branch=manifest.branch,
            dependencies=tuple(deps),
            resolved=tuple(resolved),
            outdated=outdated,
            vulnerabilities=tuple(vulnerabilities) if vulnerabilities is not None else None,
            alternatives=alternatives,
            summary=summary,
        )

        path = self._report_store.save(
            repo=repo,
            kind=REPORT_KIND,
            payload=to_jsonable(report),
            directory=output_dir,
        )
        self._logger.info(
            "audit_completed",
            type="audit_completed",
            report_path=str(path),
            summary=to_jsonable(summary),
        )
        return SavedReport(report=report, path=path)

    async def _fetch_manifest(self, repo: RepositoryRef, kind: ManifestKind, branch: str) -> FetchedFile:
        tried: list[str] = []
        for path in kind.candidate_paths:
            try:
                return await self._github.fetch_file(repo, path, branch)
            except NotFoundError:
                tried.append(path)
                self._logger.info(
                    "manifest_candidate_missing",
                    type="manifest_candidate_missing",
                    path=path,
                )
        raise NotFoundError(
            subject=repo.slug,
            resource=kind.value,
            detail=f"tried {', '.join(tried)} on branch {branch!r} and its fallback",
        )
