from __future__ import annotations

import json
from pathlib import Path

import typer
from dotenv import load_dotenv

from . import main as facade
from .config import AppConfig, with_runtime
from .cli_formatter import (
    format_audit_report,
    format_commit_report,
    format_insights_report,
    format_update_outcome,
)
from ..core.domain.exceptions import RepoInsightError, ValidationError
from ..shared.to_jsonable import to_jsonable

load_dotenv()

app = typer.Typer(add_completion=False, no_args_is_help=True)


def _config(command: str, repository: str, verbose: bool) -> AppConfig:
    return with_runtime(
        AppConfig(),
        run_id=facade.make_run_id(command, repository),
        console_output=True if verbose else None,
    )


def _fail(e: RepoInsightError) -> typer.Exit:
    typer.echo(f"Error: {e}", err=True)
    return typer.Exit(code=2 if isinstance(e, ValidationError) else 1)


def _echo_json(payload) -> None:
    typer.echo(json.dumps(to_jsonable(payload), ensure_ascii=False, indent=2))


def _confirm_on_stderr(message: str) -> bool:
    # stdout carries the report only
    return typer.confirm(message, err=True)


@app.command()
def audit(
    repository: str = typer.Argument(..., help="Repository as owner/name"),
    manifest_type: str | None = typer.Option(None, "--type", "-t", help="package.json or requirements.txt"),
    branch: str | None = typer.Option(None, "--branch", "-b", help="Branch to read the manifest from"),
    output: Path | None = typer.Option(None, "--output", "-o", help="Directory for the JSON report"),
    auto_update: bool = typer.Option(False, "--auto-update", help="Offer to update outdated packages (simulated)"),
    json_output: bool = typer.Option(False, "--json", help="Output report as JSON"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Mirror structured logs to stderr"),
):
    """Audit a repository's dependencies: outdated versions, advisories, alternatives."""
    config = _config("audit", repository, verbose)
    try:
        run = facade.audit(
            repository,
            manifest_type=manifest_type,
            branch=branch,
            output=output,
            auto_update=auto_update,
            confirm=_confirm_on_stderr,
            config=config,
        )
    except RepoInsightError as e:
        raise _fail(e)

    if json_output:
        _echo_json(run.report)
    else:
        typer.echo(format_audit_report(run.report))
        typer.echo(f"Report saved: {run.path}")
    if run.update is not None:
        typer.echo(format_update_outcome(run.update), err=json_output)


@app.command()
def commits(
    repository: str = typer.Argument(..., help="Repository as owner/name"),
    limit: int | None = typer.Option(None, "--limit", "-n", help="Number of commits to fetch"),
    author: str | None = typer.Option(None, "--author", "-a", help="Author login or email"),
    since: str | None = typer.Option(None, "--since", help="ISO-8601 lower date bound"),
    until: str | None = typer.Option(None, "--until", help="ISO-8601 upper date bound"),
    file: str | None = typer.Option(None, "--file", "-f", help="Only commits touching paths containing this text"),
    conflicts: bool = typer.Option(False, "--conflicts", help="Only conflict-resolution commits"),
    commit_type: str | None = typer.Option(None, "--type", "-t", help="Only commits whose headline starts with this token"),
    stats: bool = typer.Option(False, "--stats", help="Fetch and show per-commit change stats"),
    output: Path | None = typer.Option(None, "--output", "-o", help="Directory for the JSON report"),
    json_output: bool = typer.Option(False, "--json", help="Output report as JSON"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Mirror structured logs to stderr"),
):
    """Explore commit history with classification, filters and a summary."""
    config = _config("commits", repository, verbose)
    try:
        saved = facade.commits(
            repository,
            limit=limit,
            author=author,
            since=since,
            until=until,
            file=file,
            conflicts=conflicts,
            commit_type=commit_type,
            stats=stats,
            output=output,
            config=config,
        )
    except RepoInsightError as e:
        raise _fail(e)

    if json_output:
        _echo_json(saved.report)
    else:
        typer.echo(format_commit_report(saved.report))
        typer.echo(f"Report saved: {saved.path}")


@app.command()
def insights(
    repository: str = typer.Argument(..., help="Repository as owner/name"),
    period: str = typer.Option("weekly", "--period", "-p", help="weekly or monthly"),
    output: Path | None = typer.Option(None, "--output", "-o", help="Directory for the JSON report"),
    json_output: bool = typer.Option(False, "--json", help="Output report as JSON"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Mirror structured logs to stderr"),
):
    """Show repository overview, top contributors and commit activity."""
    config = _config("insights", repository, verbose)
    try:
        saved = facade.insights(repository, period=period, output=output, config=config)
    except RepoInsightError as e:
        raise _fail(e)

    if json_output:
        _echo_json(saved.report)
    else:
        typer.echo(format_insights_report(saved.report))
        typer.echo(f"Report saved: {saved.path}")


if __name__ == "__main__":
    app()
