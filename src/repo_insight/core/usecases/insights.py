from __future__ import annotations

from datetime import datetime, timezone
from pathlib import Path
from typing import Callable, Optional

from ..domain.exceptions import ValidationError
from ..domain.models import InsightsReport, RepositoryRef
from ..ports import GitHubPort, LoggerPort, ReportStorePort
from ..services.repository_insights import (
    PERIODS,
    activity_from_payload,
    overview_from_payload,
    rank_contributors,
)
from .result import SavedReport
from ...shared.to_jsonable import to_jsonable


REPORT_KIND = "insights"
TOP_CONTRIBUTORS = 10


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class InsightsUseCase:
    """Repository overview, contributor impact and commit activity."""

    def __init__(
        self,
        *,
        github: GitHubPort,
        report_store: ReportStorePort,
        logger: LoggerPort,
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        self._github = github
        self._report_store = report_store
        self._logger = logger
        self._clock = clock

    async def execute(
        self,
        *,
        repository: str,
        period: str = "weekly",
        output_dir: Optional[Path] = None,
    ) -> SavedReport[InsightsReport]:
        repo = RepositoryRef.parse(repository)
        if period not in PERIODS:
            raise ValidationError(f"Unsupported period {period!r} (supported: {', '.join(PERIODS)})")

        repo_data = await self._github.get_repository(repo)
        contributors = await self._github.list_contributors(repo)
        activity = await self._github.get_commit_activity(repo, period)
        self._logger.info(
            "insights_fetched",
            type="insights_fetched",
            repository=repo.slug,
            contributors=len(contributors),
            period=period,
        )

        ranked = rank_contributors(contributors)
        report = InsightsReport(
            subject=repo,
            generated_at=self._clock(),
            overview=overview_from_payload(repo_data),
            top_contributors=tuple(ranked[:TOP_CONTRIBUTORS]),
            activity_period=period,
            activity=tuple(activity_from_payload(activity, period)),
        )

        path = self._report_store.save(
            repo=repo,
            kind=REPORT_KIND,
            payload=to_jsonable(report),
            directory=output_dir,
        )
        self._logger.info("insights_completed", type="insights_completed", report_path=str(path))
        return SavedReport(report=report, path=path)
