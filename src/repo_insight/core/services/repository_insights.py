from __future__ import annotations

from typing import Any

from ..domain.models import ActivityPoint, ContributorImpact, RepositoryOverview
from .commit_analysis import parse_timestamp


IMPACT_WEIGHT = 10
MONTHLY_WEEKS = 12

PERIODS = ("weekly", "monthly")


def overview_from_payload(data: dict[str, Any]) -> RepositoryOverview:
    license_info = data.get("license") or {}
    return RepositoryOverview(
        full_name=data.get("full_name") or data.get("name") or "",
        description=data.get("description"),
        stars=data.get("stargazers_count") or 0,
        forks=data.get("forks_count") or 0,
        open_issues=data.get("open_issues_count") or 0,
        watchers=data.get("subscribers_count"),
        created_at=parse_timestamp(data.get("created_at")),
        updated_at=parse_timestamp(data.get("updated_at")),
        default_branch=data.get("default_branch"),
        license=license_info.get("name"),
    )


def rank_contributors(contributors: list[dict[str, Any]]) -> list[ContributorImpact]:
    """Score contributors by commit count and sort highest first.

    Ties keep the API order.
    """
    scored = [
        ContributorImpact(
            username=c.get("login") or "unknown",
            avatar_url=c.get("avatar_url"),
            contributions=c.get("contributions") or 0,
            impact_score=(c.get("contributions") or 0) * IMPACT_WEIGHT,
        )
        for c in contributors
    ]
    return sorted(scored, key=lambda c: c.impact_score, reverse=True)


def activity_from_payload(payload: Any, period: str) -> list[ActivityPoint]:
    """Turn commit activity statistics into labelled points.

    Weekly data is the per-week ``total`` of ``/stats/commit_activity``;
    monthly data is the last twelve weeks of the owner's ``/stats/participation``.
    An empty payload (statistics still being computed) yields no points.
    """
    if not payload:
        return []
    if period == "weekly":
        return [
            ActivityPoint(label=f"Week {i}", commits=week.get("total") or 0)
            for i, week in enumerate(payload, start=1)
        ]
    owner_weeks = (payload.get("owner") or [])[-MONTHLY_WEEKS:]
    return [ActivityPoint(label=f"Week {i}", commits=n) for i, n in enumerate(owner_weeks, start=1)]
