"""End-to-end tests of the public facade over a fake network."""
import json

import pytest

import repo_insight
from repo_insight.app.config import with_runtime
from repo_insight.app.main import make_run_id
from repo_insight.core.domain.exceptions import NotFoundError, ValidationError
from repo_insight.core.domain.models import CommitType


def test_audit_end_to_end(app_config, fake_network_container, tmp_path):
    run = repo_insight.audit("octo/demo", config=app_config)

    report = run.report
    assert report.manifest_path == "package.json"
    assert report.branch == "main"
    assert report.outdated == ("express",)
    assert report.summary.total_dependencies == 3
    assert report.summary.vulnerable_count == 1
    assert list(report.alternatives) == ["express", "moment"]
    assert run.update is None

    assert run.path == tmp_path / "reports" / "octo-demo-audit.json"
    saved = json.loads(run.path.read_text(encoding="utf-8"))
    assert saved["subject"] == {"owner": "octo", "name": "demo"}
    assert saved["vulnerabilities"][0]["advisories"][0]["id"] == "GHSA-qw6h-vgh9-j6wx"

    log_files = list((tmp_path / "logs").glob("audit-octo-demo-*.jsonl"))
    assert len(log_files) == 1
    events = [json.loads(line)["message"] for line in log_files[0].read_text(encoding="utf-8").splitlines()]
    assert events[0] == "audit_started"
    assert "audit_completed" in events


def test_audit_output_dir_and_auto_update(app_config, fake_network_container, tmp_path):
    prompts = []

    run = repo_insight.audit(
        "octo/demo",
        output=tmp_path / "out",
        auto_update=True,
        confirm=lambda message: prompts.append(message) or True,
        config=app_config,
    )

    assert run.path == tmp_path / "out" / "octo-demo-audit.json"
    assert run.update.confirmed is True
    assert [d.name for d in run.update.updates] == ["express"]
    assert len(prompts) == 1


def test_audit_auto_update_requires_confirm(app_config):
    with pytest.raises(ValidationError, match="confirm"):
        repo_insight.audit("octo/demo", auto_update=True, config=app_config)


def test_audit_missing_manifest(app_config, fake_network_container, tmp_path):
    with pytest.raises(NotFoundError):
        repo_insight.audit("octo/demo", manifest_type="requirements.txt", config=app_config)

    assert not (tmp_path / "reports" / "octo-demo-audit.json").exists()


def test_commits_end_to_end(app_config, fake_network_container):
    saved = repo_insight.commits("octo/demo", stats=True, config=app_config)

    report = saved.report
    assert [c.commit_type for c in report.commits] == [CommitType.FEATURE, CommitType.BUGFIX]
    assert report.summary.total_additions == 11
    assert report.summary.unique_authors == 2
    assert saved.path.name == "octo-demo-commits.json"


def test_commits_type_filter(app_config, fake_network_container):
    saved = repo_insight.commits("octo/demo", commit_type="fix", config=app_config)

    assert [c.short_sha for c in saved.report.commits] == ["b2c3d4e"]


def test_insights_end_to_end(app_config, fake_network_container):
    saved = repo_insight.insights("octo/demo", config=app_config)

    report = saved.report
    assert report.overview.stars == 42
    assert [c.username for c in report.top_contributors] == ["alice", "bob"]
    assert [p.commits for p in report.activity] == [2, 7]
    assert saved.path.name == "octo-demo-insights.json"


def test_explicit_run_id_is_kept(app_config, fake_network_container, tmp_path):
    config = with_runtime(app_config, run_id="fixed-run")

    repo_insight.insights("octo/demo", config=config)

    assert (tmp_path / "logs" / "fixed-run.jsonl").exists()


def test_make_run_id_sanitizes_repository():
    run_id = make_run_id("audit", "https://github.com/octo/demo")

    assert run_id.startswith("audit-https-github.com-octo-demo-")
    assert "/" not in run_id and ":" not in run_id
