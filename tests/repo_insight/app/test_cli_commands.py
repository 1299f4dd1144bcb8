import json

import pytest
from typer.testing import CliRunner

from repo_insight.app.cli import app


runner = CliRunner()


@pytest.fixture
def home(tmp_path, monkeypatch):
    monkeypatch.setenv("REPO_INSIGHT_DIRECTORIES__HOME", str(tmp_path))
    return tmp_path


def test_cli_audit_prints_report(home, fake_network_container):
    result = runner.invoke(app, ["audit", "octo/demo"])

    assert result.exit_code == 0, result.output
    assert "DEPENDENCY AUDIT" in result.output
    assert "express" in result.output
    assert "Report saved:" in result.output
    assert (home / "reports" / "octo-demo-audit.json").exists()


def test_cli_audit_json(home, fake_network_container):
    result = runner.invoke(app, ["audit", "octo/demo", "--json"])

    assert result.exit_code == 0
    data = json.loads(result.stdout)
    assert data["outdated"] == ["express"]
    assert data["summary"]["total_dependencies"] == 3


def test_cli_audit_auto_update_prompts(home, fake_network_container):
    result = runner.invoke(app, ["audit", "octo/demo", "--auto-update"], input="y\n")

    assert result.exit_code == 0
    assert "Update 1 outdated package(s) in octo/demo?" in result.output
    assert "Simulated update of 1 package(s)" in result.output
    assert "express: ^4.17.0 -> 4.18.2" in result.output


def test_cli_audit_auto_update_json_keeps_stdout_parseable(home, fake_network_container):
    result = runner.invoke(app, ["audit", "octo/demo", "--auto-update", "--json"], input="y\n")

    assert result.exit_code == 0
    data = json.loads(result.stdout)
    assert data["outdated"] == ["express"]
    assert "Update 1 outdated package(s) in octo/demo?" in result.stderr
    assert "Simulated update of 1 package(s)" in result.stderr


def test_cli_invalid_repository_exits_2(home, fake_network_container):
    result = runner.invoke(app, ["audit", "octo"])

    assert result.exit_code == 2
    assert "Error:" in result.output
    assert "owner/name" in result.output


def test_cli_unsupported_manifest_exits_2(home, fake_network_container):
    result = runner.invoke(app, ["audit", "octo/demo", "--type", "Gemfile"])

    assert result.exit_code == 2
    assert "Unsupported dependency file type" in result.output


def test_cli_missing_repository_exits_1(home, fake_network_container):
    result = runner.invoke(app, ["insights", "octo/missing"])

    assert result.exit_code == 1
    assert "Error: repository not found for octo/missing (HTTP 404)" in result.output


def test_cli_commits_with_stats(home, fake_network_container):
    result = runner.invoke(app, ["commits", "octo/demo", "--stats", "--limit", "10"])

    assert result.exit_code == 0, result.output
    assert "COMMIT HISTORY" in result.output
    assert "a1b2c3d" in result.output
    assert "+10/-2" in result.output
    assert "└── bugfix (1)" in result.output


def test_cli_commits_json_filters(home, fake_network_container):
    result = runner.invoke(app, ["commits", "octo/demo", "--author", "bob", "--json"])

    assert result.exit_code == 0
    data = json.loads(result.stdout)
    assert [c["sha"] for c in data["commits"]] == ["b2c3d4e5f6a1"]
    assert data["query"]["author"] == "bob"


def test_cli_insights(home, fake_network_container):
    result = runner.invoke(app, ["insights", "octo/demo"])

    assert result.exit_code == 0, result.output
    assert "REPOSITORY INSIGHTS" in result.output
    assert "alice" in result.output
    assert "WEEKLY ACTIVITY" in result.output


def test_cli_insights_bad_period_exits_2(home, fake_network_container):
    result = runner.invoke(app, ["insights", "octo/demo", "--period", "yearly"])

    assert result.exit_code == 2
