from __future__ import annotations

import asyncio
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Callable, Optional

from ..domain.exceptions import ValidationError
from ..domain.models import CommitQuery, CommitRecord, CommitReport, RepositoryRef
from ..ports import GitHubPort, LoggerPort, ReportStorePort
from ..services.batching import DEFAULT_BATCH_SIZE, run_in_batches
from ..services.commit_analysis import commit_from_payload, filter_commits, summarize_commits
from .result import SavedReport
from ...shared.to_jsonable import to_jsonable


REPORT_KIND = "commits"


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class CommitHistoryUseCase:
    """Commit history pipeline: fetch, enrich, classify, filter, aggregate."""

    def __init__(
        self,
        *,
        github: GitHubPort,
        report_store: ReportStorePort,
        logger: LoggerPort,
        batch_size: int = DEFAULT_BATCH_SIZE,
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        self._github = github
        self._report_store = report_store
        self._logger = logger
        self._batch_size = batch_size
        self._clock = clock

    async def execute(
        self,
        *,
        repository: str,
        query: CommitQuery,
        output_dir: Optional[Path] = None,
        cancel: Optional[asyncio.Event] = None,
    ) -> SavedReport[CommitReport]:
        """Run the commit pipeline and persist the report.

        Raises:
            ValidationError: malformed repository or non-positive limit
            RemoteError: the commit list itself could not be fetched
        """
        repo = RepositoryRef.parse(repository)
        if query.limit < 1:
            raise ValidationError(f"Commit limit must be positive, got {query.limit}")

        items = await self._github.list_commits(
            repo,
            limit=query.limit,
            author=query.author,
            since=query.since,
            until=query.until,
        )
        self._logger.info(
            "commits_fetched",
            type="commits_fetched",
            repository=repo.slug,
            count=len(items),
            needs_detail=query.needs_detail,
        )

        if query.needs_detail:
            records = await self._enrich(repo, items, cancel)
        else:
            records = [commit_from_payload(item) for item in items]

        filtered = filter_commits(records, query)
        report = CommitReport(
            subject=repo,
            generated_at=self._clock(),
            query=query,
            commits=tuple(filtered),
            summary=summarize_commits(filtered),
        )

        path = self._report_store.save(
            repo=repo,
            kind=REPORT_KIND,
            payload=to_jsonable(report),
            directory=output_dir,
        )
        self._logger.info(
            "commits_completed",
            type="commits_completed",
            report_path=str(path),
            matched=len(filtered),
        )
        return SavedReport(report=report, path=path)

    async def _enrich(
        self,
        repo: RepositoryRef,
        items: list[dict[str, Any]],
        cancel: Optional[asyncio.Event],
    ) -> list[CommitRecord]:
        async def _with_detail(item: dict[str, Any]) -> CommitRecord:
            detail = await self._github.get_commit(repo, item["sha"])
            return commit_from_payload(item, detail)

        def _on_error(item: dict[str, Any], exc: Exception) -> CommitRecord:
            self._logger.warning(
                "commit_detail_failed",
                type="commit_detail_failed",
                sha=str(item.get("sha", ""))[:7],
                error=str(exc),
            )
            return commit_from_payload(item, detail_error=str(exc) or type(exc).__name__)

        return await run_in_batches(
            items,
            _with_detail,
            _on_error,
            batch_size=self._batch_size,
            cancel=cancel,
        )
