from datetime import datetime, timezone

import pytest

from repo_insight.core.domain.exceptions import (
    NotFoundError,
    ParseError,
    RateLimitError,
    RemoteError,
    ValidationError,
)
from repo_insight.core.domain.models import CommitQuery, ManifestKind, RepositoryRef


def test_repository_ref_parse():
    ref = RepositoryRef.parse("expressjs/express")

    assert ref.owner == "expressjs"
    assert ref.name == "express"
    assert ref.slug == "expressjs/express"
    assert ref.url == "https://github.com/expressjs/express"
    assert ref.file_stem == "expressjs-express"


@pytest.mark.parametrize("identifier", [
    "https://github.com/expressjs/express",
    "https://github.com/expressjs/express.git",
    "git@github.com:expressjs/express.git",
    "  expressjs/express  ",
])
def test_repository_ref_parse_urls(identifier):
    assert RepositoryRef.parse(identifier) == RepositoryRef("expressjs", "express")


@pytest.mark.parametrize("identifier", ["express", "a/b/c", "/express", "expressjs/", "", "https://github.com/only"])
def test_repository_ref_rejects_malformed(identifier):
    with pytest.raises(ValidationError, match="owner/name"):
        RepositoryRef.parse(identifier)


def test_manifest_kind_from_option():
    assert ManifestKind.from_option("package.json") is ManifestKind.PACKAGE_MANIFEST
    assert ManifestKind.from_option("requirements.txt") is ManifestKind.PINNED_LIST

    with pytest.raises(ValidationError, match="Unsupported dependency file type"):
        ManifestKind.from_option("Gemfile")


def test_manifest_kind_ecosystem_and_candidates():
    assert ManifestKind.PACKAGE_MANIFEST.ecosystem == "npm"
    assert ManifestKind.PINNED_LIST.ecosystem == "PyPI"
    assert ManifestKind.PACKAGE_MANIFEST.candidate_paths[0] == "package.json"
    assert ManifestKind.PINNED_LIST.candidate_paths == (
        "requirements.txt",
        "requirements/requirements.txt",
        "requirements/base.txt",
    )


def test_commit_query_needs_detail():
    assert CommitQuery().needs_detail is False
    assert CommitQuery(author="octocat", commit_type="fix").needs_detail is False
    assert CommitQuery(file="src/").needs_detail is True
    assert CommitQuery(conflicts=True).needs_detail is True
    assert CommitQuery(show_stats=True).needs_detail is True


def test_error_messages_name_subject_resource_and_status():
    err = RemoteError(subject="octo/demo", resource="commit list", status=500, detail="Server Error")
    assert str(err) == "commit list request failed for octo/demo (HTTP 500): Server Error"

    missing = NotFoundError(subject="octo/demo", resource="file package.json", status=404)
    assert str(missing) == "file package.json not found for octo/demo (HTTP 404)"
    assert isinstance(missing, RemoteError)

    parse = ParseError("package.json", "invalid JSON")
    assert str(parse) == "Failed to parse package.json: invalid JSON"


def test_rate_limit_error_suggests_waiting():
    reset = datetime(2024, 1, 1, 12, 0, tzinfo=timezone.utc)
    err = RateLimitError(
        subject="octo/demo",
        resource="repository",
        status=403,
        reset_at=reset,
        token_env="REPO_INSIGHT_GITHUB__TOKEN",
    )

    assert "retry after 2024-01-01T12:00:00+00:00" in str(err)
    assert "REPO_INSIGHT_GITHUB__TOKEN" in str(err)

    no_reset = RateLimitError(subject="octo/demo", resource="repository", status=429)
    assert "wait a few minutes" in str(no_reset)
    assert "or set" not in str(no_reset)
