"""CLI output formatting utilities for human-readable display."""

from __future__ import annotations

from datetime import datetime

from ..core.domain.models import (
    AuditReport,
    CommitRecord,
    CommitReport,
    CommitType,
    InsightsReport,
    UpdateOutcome,
)


CONSOLE_CONTRIBUTORS = 5


def _truncate(text: str, width: int) -> str:
    if len(text) > width:
        return text[: width - 3] + "..."
    return text


def _date(value: datetime | None) -> str:
    return value.strftime("%Y-%m-%d") if value else "N/A"


def _header(lines: list[str], title: str) -> None:
    lines.append("=" * 80)
    lines.append(title)
    lines.append("=" * 80)


def _section(lines: list[str], title: str) -> None:
    lines.append("\n" + "-" * 80)
    lines.append(title)
    lines.append("-" * 80)


def format_audit_report(report: AuditReport) -> str:
    """Format a dependency audit for human-readable CLI output.

    Args:
        report: Audit aggregate

    Returns:
        Formatted string for display
    """
    lines: list[str] = []
    _header(lines, "DEPENDENCY AUDIT")
    lines.append(f"\nRepository: {report.subject.slug}")
    lines.append(f"Manifest: {report.manifest_path} (branch: {report.branch})")
    lines.append(f"Generated: {report.generated_at.isoformat()}")

    _section(lines, "OUTDATED PACKAGES")
    outdated = [d for d in report.resolved if d.is_outdated]
    if outdated:
        lines.append(f"{'Package':<35} {'Current':<20} {'Latest':<20}")
        for dep in outdated:
            lines.append(
                f"{_truncate(dep.name, 35):<35} {_truncate(dep.declared_version, 20):<20} {dep.latest_version or 'N/A':<20}"
            )
    else:
        lines.append("All dependencies are up to date.")

    failed = [d for d in report.resolved if d.resolution_error]
    if failed:
        lines.append(f"\nLookup failures ({len(failed)}):")
        for dep in failed:
            lines.append(f"  {dep.name}: {dep.resolution_error}")

    _section(lines, "VULNERABILITIES")
    if report.vulnerabilities is None:
        lines.append(f"Not checked: no advisory source for {report.manifest_kind.ecosystem}.")
    else:
        vulnerable = [v for v in report.vulnerabilities if v.advisory_count > 0]
        if not vulnerable:
            lines.append("No known vulnerabilities found.")
        for vuln in vulnerable:
            lines.append(f"\n{vuln.package_name}: {vuln.advisory_count} advisory(ies)")
            for adv in vuln.advisories:
                lines.append(f"  - [{adv.severity.upper()}] {adv.title} ({adv.id})")
        errored = [v for v in report.vulnerabilities if v.error]
        if errored:
            lines.append(f"\nAdvisory lookup failures ({len(errored)}):")
            for vuln in errored:
                lines.append(f"  {vuln.package_name}: {vuln.error}")

    if report.alternatives:
        _section(lines, "SUGGESTED ALTERNATIVES")
        for name, alternatives in report.alternatives.items():
            lines.append(f"\n{name}:")
            for alt in alternatives:
                lines.append(f"  - {alt.name}: {alt.description}")

    summary = report.summary
    _section(lines, "SUMMARY")
    lines.append(f"Total dependencies: {summary.total_dependencies}")
    lines.append(f"Outdated: {summary.outdated_count}")
    lines.append(f"Up to date: {summary.up_to_date_count}")
    lines.append(f"Vulnerable: {summary.vulnerable_count}")
    if summary.resolution_errors:
        lines.append(f"Lookup errors: {summary.resolution_errors}")

    lines.append("\n" + "=" * 80)
    return "\n".join(lines)


def format_update_outcome(outcome: UpdateOutcome) -> str:
    if not outcome.confirmed:
        return "No packages updated."
    lines = [f"Simulated update of {len(outcome.updates)} package(s):"]
    for dep in outcome.updates:
        lines.append(f"  {dep.name}: {dep.declared_version} -> {dep.latest_version}")
    lines.append("No files were changed.")
    return "\n".join(lines)


def _commit_row(record: CommitRecord, show_stats: bool) -> str:
    row = (
        f"{record.short_sha:<8} {record.commit_type.value:<9} "
        f"{_truncate(record.author_login, 20):<20} {_date(record.author_date):<10} "
        f"{_truncate(record.headline, 40):<40}"
    )
    if show_stats:
        if record.stats is not None:
            row += f" +{record.stats.additions}/-{record.stats.deletions} ({record.stats.files_changed} files)"
        elif record.detail_error:
            row += " (stats unavailable)"
    return row


def format_commit_tree(records: list[CommitRecord]) -> str:
    """Group commits by type as an indented tree."""
    grouped: dict[CommitType, list[CommitRecord]] = {}
    for r in records:
        grouped.setdefault(r.commit_type, []).append(r)

    lines: list[str] = []
    types = list(grouped)
    for i, commit_type in enumerate(types):
        last_group = i == len(types) - 1
        lines.append(f"{'└──' if last_group else '├──'} {commit_type.value} ({len(grouped[commit_type])})")
        prefix = "    " if last_group else "│   "
        items = grouped[commit_type]
        for j, r in enumerate(items):
            branch = "└──" if j == len(items) - 1 else "├──"
            lines.append(f"{prefix}{branch} {r.short_sha} {_truncate(r.headline, 60)}")
    return "\n".join(lines)


def format_commit_report(report: CommitReport) -> str:
    """Format commit history for human-readable CLI output."""
    lines: list[str] = []
    _header(lines, "COMMIT HISTORY")
    lines.append(f"\nRepository: {report.subject.slug}")
    lines.append(f"Commits: {len(report.commits)}")

    if not report.commits:
        lines.append("\nNo commits matched the given filters.")
        lines.append("\n" + "=" * 80)
        return "\n".join(lines)

    _section(lines, "COMMITS")
    lines.append(f"{'SHA':<8} {'Type':<9} {'Author':<20} {'Date':<10} {'Message':<40}")
    for record in report.commits:
        lines.append(_commit_row(record, report.query.show_stats))

    _section(lines, "BY TYPE")
    lines.append(format_commit_tree(list(report.commits)))

    summary = report.summary
    _section(lines, "SUMMARY")
    lines.append(f"Total commits: {summary.total_commits}")
    lines.append(f"Unique authors: {summary.unique_authors}")
    if summary.earliest and summary.latest:
        lines.append(f"Date range: {_date(summary.earliest)} to {_date(summary.latest)}")
    for share in summary.type_breakdown:
        lines.append(f"  {share.commit_type.value:<9} {share.count:>5} ({share.percentage}%)")
    if report.query.show_stats:
        lines.append(
            f"Changes: +{summary.total_additions} -{summary.total_deletions} "
            f"in {summary.total_files_changed} files"
        )

    lines.append("\n" + "=" * 80)
    return "\n".join(lines)


def format_insights_report(report: InsightsReport) -> str:
    """Format repository insights for human-readable CLI output."""
    ov = report.overview
    watchers = f"{ov.watchers:,}" if ov.watchers is not None else "N/A"
    lines: list[str] = []
    _header(lines, "REPOSITORY INSIGHTS")
    lines.append(f"\nRepository: {ov.full_name}")
    if ov.description:
        lines.append(f"Description: {ov.description}")
    lines.append(f"Stars: {ov.stars:,} | Forks: {ov.forks:,} | Open issues: {ov.open_issues:,} | Watchers: {watchers}")
    lines.append(f"Created: {_date(ov.created_at)} | Updated: {_date(ov.updated_at)}")
    lines.append(f"Default branch: {ov.default_branch or 'N/A'} | License: {ov.license or 'N/A'}")

    _section(lines, "TOP CONTRIBUTORS")
    if report.top_contributors:
        lines.append(f"{'#':>3} {'Username':<30} {'Commits':>10} {'Impact':>10}")
        for rank, c in enumerate(report.top_contributors[:CONSOLE_CONTRIBUTORS], 1):
            lines.append(f"{rank:>3} {_truncate(c.username, 30):<30} {c.contributions:>10,} {c.impact_score:>10,}")
    else:
        lines.append("No contributor data available.")

    _section(lines, f"{report.activity_period.upper()} ACTIVITY")
    if report.activity:
        peak = max(p.commits for p in report.activity) or 1
        for point in report.activity:
            bar = "#" * round(point.commits / peak * 40)
            lines.append(f"{point.label:<10} {point.commits:>5} {bar}")
    else:
        lines.append("No activity data available yet.")

    lines.append("\n" + "=" * 80)
    return "\n".join(lines)
