"""Tests for commit classification, filtering and aggregation."""
from datetime import datetime, timezone

import pytest

from repo_insight.core.domain.models import CommitQuery, CommitType
from repo_insight.core.services.commit_analysis import (
    classify_commit,
    commit_from_payload,
    filter_commits,
    is_conflict_message,
    summarize_commits,
)

from fakes import commit_detail, commit_payload


@pytest.mark.parametrize("message,expected", [
    ("fix: null pointer in parser", CommitType.BUGFIX),
    ("feat: add login", CommitType.FEATURE),
    ("Add feature flag support", CommitType.FEATURE),
    ("Handle bug in cache", CommitType.BUGFIX),
    ("docs: update README", CommitType.DOCS),
    ("Improve documentation", CommitType.DOCS),
    ("refactor: split module", CommitType.REFACTOR),
    ("test: cover edge case", CommitType.TEST),
    ("Merge pull request #12 from octo/branch", CommitType.MERGE),
    ("Bump version", CommitType.OTHER),
    ("", CommitType.OTHER),
])
def test_classify_commit(message, expected):
    assert classify_commit(message) is expected


def test_classification_precedence_and_headline_only():
    # feature rule is evaluated before bugfix and merge
    assert classify_commit("feat: fix bug when merging") is CommitType.FEATURE
    assert classify_commit("fix: merge helper") is CommitType.BUGFIX
    # only the first line is considered
    assert classify_commit("Bump version\n\nfeat: hidden in body") is CommitType.OTHER
    assert classify_commit("FIX: Upper case prefix") is CommitType.BUGFIX


def test_is_conflict_message_checks_full_message():
    assert is_conflict_message("Update deps\n\nResolve conflict in package.json")
    assert not is_conflict_message("Update deps")


def test_commit_from_payload_with_detail():
    record = commit_from_payload(
        commit_payload("abcdef1234567", "fix: thing\n\nlong body", date="2024-03-01T10:00:00Z"),
        commit_detail(["src/a.py", "README.md"], additions=5, deletions=2),
    )

    assert record.short_sha == "abcdef1"
    assert record.author_login == "octocat"
    assert record.headline == "fix: thing"
    assert record.commit_type is CommitType.BUGFIX
    assert record.author_date == datetime(2024, 3, 1, 10, 0, tzinfo=timezone.utc)
    assert record.files == ("src/a.py", "README.md")
    assert record.stats.additions == 5
    assert record.stats.total == 7
    assert record.stats.files_changed == 2
    assert record.detail_fetched is True


def test_commit_from_payload_without_account_falls_back_to_git_name():
    record = commit_from_payload(commit_payload("abc", "chore", login=None, name="Jane Dev"))

    assert record.author_login == "Jane Dev"
    assert record.detail_fetched is False
    assert record.stats is None


def _records():
    return [
        commit_from_payload(commit_payload("1", "fix: parser", login="alice"), commit_detail(["src/parser.py"])),
        commit_from_payload(commit_payload("2", "feat: cli", login="alice"), commit_detail(["src/cli.py"])),
        commit_from_payload(commit_payload("3", "fix: cli flag", login="bob"), commit_detail(["src/CLI.py"])),
        commit_from_payload(commit_payload("4", "Merge branch main; resolve conflict", login="alice"),
                            commit_detail(["src/cli.py"])),
        commit_from_payload(commit_payload("5", "fix: docs link", login="alice", email="ALICE@example.com")),
    ]


def test_filters_individually():
    records = _records()

    assert [r.sha for r in filter_commits(records, CommitQuery(author="ALICE"))] == ["1", "2", "4", "5"]
    assert [r.sha for r in filter_commits(records, CommitQuery(author="alice@example.com"))] == ["5"]
    # detail-less commit 5 is excluded by the file filter
    assert [r.sha for r in filter_commits(records, CommitQuery(file="cli"))] == ["2", "3", "4"]
    assert [r.sha for r in filter_commits(records, CommitQuery(conflicts=True))] == ["4"]
    assert [r.sha for r in filter_commits(records, CommitQuery(commit_type="FIX"))] == ["1", "3", "5"]


def test_filters_combine_as_intersection():
    records = _records()
    combined = CommitQuery(author="alice", file="cli", commit_type="fix")

    together = {r.sha for r in filter_commits(records, combined)}
    separately = (
        {r.sha for r in filter_commits(records, CommitQuery(author="alice"))}
        & {r.sha for r in filter_commits(records, CommitQuery(file="cli"))}
        & {r.sha for r in filter_commits(records, CommitQuery(commit_type="fix"))}
    )

    assert together == separately == set()
    assert {r.sha for r in filter_commits(records, CommitQuery(author="bob", file="cli", commit_type="fix"))} == {"3"}


def test_summarize_commits():
    records = [
        commit_from_payload(commit_payload("1", "fix: a", login="alice", date="2024-01-02T00:00:00Z"),
                            commit_detail(["a"], additions=3, deletions=1)),
        commit_from_payload(commit_payload("2", "fix: b", login="bob", date="2024-01-05T00:00:00Z"),
                            commit_detail(["b", "c"], additions=2, deletions=2)),
        commit_from_payload(commit_payload("3", "feat: c", login="alice", date="2024-01-01T00:00:00Z")),
    ]

    summary = summarize_commits(records)

    assert summary.total_commits == 3
    assert summary.unique_authors == 2
    assert [(s.commit_type, s.count, s.percentage) for s in summary.type_breakdown] == [
        (CommitType.BUGFIX, 2, 66.7),
        (CommitType.FEATURE, 1, 33.3),
    ]
    assert summary.total_additions == 5
    assert summary.total_deletions == 3
    assert summary.total_files_changed == 3
    assert summary.earliest == datetime(2024, 1, 1, tzinfo=timezone.utc)
    assert summary.latest == datetime(2024, 1, 5, tzinfo=timezone.utc)


def test_summarize_ties_follow_rule_order_and_empty_input():
    records = [
        commit_from_payload(commit_payload("1", "Bump")),
        commit_from_payload(commit_payload("2", "docs: x")),
        commit_from_payload(commit_payload("3", "feat: y")),
    ]

    breakdown = summarize_commits(records).type_breakdown

    assert [s.commit_type for s in breakdown] == [CommitType.FEATURE, CommitType.DOCS, CommitType.OTHER]

    empty = summarize_commits([])
    assert empty.total_commits == 0
    assert empty.type_breakdown == ()
    assert empty.earliest is None
