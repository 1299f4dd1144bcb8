from __future__ import annotations

import asyncio
import re
from datetime import datetime, timezone
from pathlib import Path

from .config import AppConfig, with_runtime
from .container import Container
from ..core.domain.exceptions import ValidationError
from ..core.domain.models import CommitQuery, CommitReport, InsightsReport
from ..core.ports import ConfirmPort
from ..core.usecases.result import AuditRun, SavedReport


def make_run_id(command: str, repository: str) -> str:
    """Log file stem for one invocation, e.g. ``audit-octo-demo-20240101T000000Z``."""
    stem = re.sub(r"[^A-Za-z0-9_.-]+", "-", repository.strip()).strip("-") or "unknown"
    stamp = datetime.now(timezone.utc).strftime("%Y%m%dT%H%M%SZ")
    return f"{command}-{stem}-{stamp}"


def _create_container(config: AppConfig | None = None) -> Container:
    """Create and initialize a container.

    Args:
        config: Optional config. If None, loads from environment variables.

    Returns:
        Initialized container instance
    """
    container = Container()

    if config is None:
        config = AppConfig()

    container.config.from_pydantic(config)
    container.init_resources()

    return container


def _prepare(config: AppConfig | None, command: str, repository: str) -> AppConfig:
    config = config if config is not None else AppConfig()
    if config.runtime.run_id:
        return config
    return with_runtime(config, run_id=make_run_id(command, repository))


def audit(
    repository: str,
    *,
    manifest_type: str | None = None,
    branch: str | None = None,
    output: Path | str | None = None,
    auto_update: bool = False,
    confirm: ConfirmPort | None = None,
    cancel: asyncio.Event | None = None,
    config: AppConfig | None = None,
) -> AuditRun:
    """Audit the dependencies declared in a repository manifest.

    Args:
        repository: ``owner/name`` identifier
        manifest_type: ``package.json`` or ``requirements.txt`` (default from config)
        branch: Branch to read the manifest from (default from config)
        output: Directory for the JSON report (default: configured reports dir)
        auto_update: Offer the simulated update of outdated packages afterwards
        confirm: Consent callback, required with ``auto_update``
        cancel: Event that stops the pipeline before its next batch
        config: Optional config for testing. If None, loads from env vars.

    Returns:
        The saved audit report and, with ``auto_update``, the update outcome

    Raises:
        RepoInsightError: validation, fetch or parse failure
    """
    if auto_update and confirm is None:
        raise ValidationError("auto_update requires a confirm callable")

    config = _prepare(config, "audit", repository)
    container = _create_container(config)
    try:
        uc = container.audit_uc()
        saved = asyncio.run(
            uc.execute(
                repository=repository,
                manifest_type=manifest_type or config.audit.default_manifest,
                branch=branch or config.audit.default_branch,
                output_dir=Path(output) if output is not None else None,
                cancel=cancel,
            )
        )
        update = None
        if auto_update:
            update = container.update_uc(confirm=confirm).execute(saved.report)
        return AuditRun(saved=saved, update=update)
    finally:
        container.shutdown_resources()


def commits(
    repository: str,
    *,
    limit: int | None = None,
    author: str | None = None,
    since: str | None = None,
    until: str | None = None,
    file: str | None = None,
    conflicts: bool = False,
    commit_type: str | None = None,
    stats: bool = False,
    output: Path | str | None = None,
    cancel: asyncio.Event | None = None,
    config: AppConfig | None = None,
) -> SavedReport[CommitReport]:
    """Explore, classify and summarize a repository's commit history.

    ``author``, ``since`` and ``until`` are sent to the API; ``file``,
    ``conflicts`` and ``commit_type`` filter locally. ``file``, ``conflicts``
    and ``stats`` fetch per-commit detail.
    """
    config = _prepare(config, "commits", repository)
    query = CommitQuery(
        limit=limit if limit is not None else config.commits.default_limit,
        author=author,
        since=since,
        until=until,
        file=file,
        conflicts=conflicts,
        commit_type=commit_type,
        show_stats=stats,
    )
    container = _create_container(config)
    try:
        uc = container.commits_uc()
        return asyncio.run(
            uc.execute(
                repository=repository,
                query=query,
                output_dir=Path(output) if output is not None else None,
                cancel=cancel,
            )
        )
    finally:
        container.shutdown_resources()


def insights(
    repository: str,
    *,
    period: str = "weekly",
    output: Path | str | None = None,
    config: AppConfig | None = None,
) -> SavedReport[InsightsReport]:
    """Repository overview, top contributors and weekly or monthly activity."""
    config = _prepare(config, "insights", repository)
    container = _create_container(config)
    try:
        uc = container.insights_uc()
        return asyncio.run(
            uc.execute(
                repository=repository,
                period=period,
                output_dir=Path(output) if output is not None else None,
            )
        )
    finally:
        container.shutdown_resources()
