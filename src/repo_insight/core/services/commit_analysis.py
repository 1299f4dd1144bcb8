"""Commit classification, filtering and aggregation.

Everything here is pure: records in, records or summaries out.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Any, Optional

from ..domain.models import (
    CommitQuery,
    CommitRecord,
    CommitStats,
    CommitSummary,
    CommitType,
    TypeShare,
)


@dataclass(frozen=True)
class ClassificationRule:
    """A commit type with the headline prefixes and substrings that select it."""
    commit_type: CommitType
    prefixes: tuple[str, ...] = ()
    keywords: tuple[str, ...] = ()

    def matches(self, headline: str) -> bool:
        return headline.startswith(self.prefixes) or any(k in headline for k in self.keywords)


# Evaluated in order; the first matching rule wins.
CLASSIFICATION_RULES: tuple[ClassificationRule, ...] = (
    ClassificationRule(CommitType.FEATURE, prefixes=("feat",), keywords=("feature",)),
    ClassificationRule(CommitType.BUGFIX, prefixes=("fix",), keywords=("bug",)),
    ClassificationRule(CommitType.DOCS, prefixes=("docs",), keywords=("documentation",)),
    ClassificationRule(CommitType.REFACTOR, prefixes=("refactor",)),
    ClassificationRule(CommitType.TEST, prefixes=("test",)),
    ClassificationRule(CommitType.MERGE, keywords=("merge",)),
)

CONFLICT_KEYWORDS: tuple[str, ...] = ("conflict", "resolve", "merge", "fix merge", "resolve conflict")

_TYPE_ORDER = {rule.commit_type: i for i, rule in enumerate(CLASSIFICATION_RULES)}
_TYPE_ORDER[CommitType.OTHER] = len(CLASSIFICATION_RULES)


def headline_of(message: str) -> str:
    return message.split("\n", 1)[0].strip()


def classify_commit(message: str) -> CommitType:
    """Derive the commit type from the lower-cased first line of a message."""
    headline = headline_of(message).lower()
    for rule in CLASSIFICATION_RULES:
        if rule.matches(headline):
            return rule.commit_type
    return CommitType.OTHER


def is_conflict_message(message: str) -> bool:
    lowered = message.lower()
    return any(keyword in lowered for keyword in CONFLICT_KEYWORDS)


def parse_timestamp(value: Optional[str]) -> Optional[datetime]:
    if not value:
        return None
    try:
        return datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError:
        return None


def commit_from_payload(
    item: dict[str, Any],
    detail: Optional[dict[str, Any]] = None,
    detail_error: Optional[str] = None,
) -> CommitRecord:
    """Build a CommitRecord from a commit list entry and optional detail payload."""
    commit = item.get("commit") or {}
    git_author = commit.get("author") or {}
    account = item.get("author") or {}
    message = commit.get("message") or ""

    stats = None
    files: tuple[str, ...] = ()
    if detail is not None:
        changed = detail.get("files") or []
        files = tuple(f.get("filename", "") for f in changed)
        raw_stats = detail.get("stats")
        if raw_stats:
            stats = CommitStats(
                additions=raw_stats.get("additions") or 0,
                deletions=raw_stats.get("deletions") or 0,
                total=raw_stats.get("total") or 0,
                files_changed=len(changed),
            )

    return CommitRecord(
        sha=item.get("sha", ""),
        author_login=account.get("login") or git_author.get("name") or "unknown",
        author_name=git_author.get("name"),
        author_email=git_author.get("email"),
        author_date=parse_timestamp(git_author.get("date")),
        headline=headline_of(message),
        message=message,
        commit_type=classify_commit(message),
        stats=stats,
        files=files,
        detail_fetched=detail is not None,
        detail_error=detail_error,
        url=item.get("html_url"),
    )


def _matches_author(record: CommitRecord, author: str) -> bool:
    wanted = author.casefold()
    if record.author_login.casefold() == wanted:
        return True
    if record.author_email and record.author_email.casefold() == wanted:
        return True
    return record.author_name == author


def filter_commits(records: list[CommitRecord], query: CommitQuery) -> list[CommitRecord]:
    """Apply author, file, conflict and type filters, in that order.

    Filters combine with AND. File and conflict filters exclude commits whose
    detail was not fetched.
    """
    filtered = records

    if query.author:
        filtered = [r for r in filtered if _matches_author(r, query.author)]

    if query.file:
        fragment = query.file.lower()
        filtered = [
            r for r in filtered
            if r.detail_fetched and any(fragment in path.lower() for path in r.files)
        ]

    if query.conflicts:
        filtered = [r for r in filtered if r.detail_fetched and is_conflict_message(r.message)]

    if query.commit_type:
        token = query.commit_type.lower()
        filtered = [r for r in filtered if r.headline.lower().startswith(token)]

    return filtered


def summarize_commits(records: list[CommitRecord]) -> CommitSummary:
    """Aggregate counts, type shares, change totals and the date range."""
    total = len(records)

    counts: dict[CommitType, int] = {}
    for r in records:
        counts[r.commit_type] = counts.get(r.commit_type, 0) + 1

    breakdown = tuple(
        TypeShare(
            commit_type=commit_type,
            count=count,
            percentage=round(count / total * 100, 1),
        )
        for commit_type, count in sorted(counts.items(), key=lambda kv: (-kv[1], _TYPE_ORDER[kv[0]]))
    )

    with_stats = [r.stats for r in records if r.detail_fetched and r.stats is not None]
    dates = [r.author_date for r in records if r.author_date is not None]

    return CommitSummary(
        total_commits=total,
        unique_authors=len({r.author_login for r in records}),
        type_breakdown=breakdown,
        total_additions=sum(s.additions for s in with_stats),
        total_deletions=sum(s.deletions for s in with_stats),
        total_files_changed=sum(s.files_changed for s in with_stats),
        earliest=min(dates) if dates else None,
        latest=max(dates) if dates else None,
    )
