from __future__ import annotations

import re
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum

from .exceptions import ValidationError


_GITHUB_URL_RE = re.compile(r"^(?:https?://github\.com/|git@github\.com:)(.+?)/?$")


@dataclass(frozen=True)
class RepositoryRef:
    """Repository identity on the Git forge.

    Parsed from an ``owner/name`` identifier. GitHub HTTPS and SSH URLs are
    accepted as well and reduced to the same two parts.
    """
    owner: str
    name: str

    @classmethod
    def parse(cls, identifier: str) -> "RepositoryRef":
        raw = (identifier or "").strip()
        match = _GITHUB_URL_RE.match(raw)
        if match:
            raw = match.group(1)
        if raw.endswith(".git"):
            raw = raw[:-4]

        parts = raw.split("/")
        if len(parts) != 2 or not parts[0] or not parts[1]:
            raise ValidationError(
                f"Invalid repository identifier {identifier!r}. Use owner/name format."
            )
        return cls(owner=parts[0], name=parts[1])

    @property
    def slug(self) -> str:
        """Returns owner/name format."""
        return f"{self.owner}/{self.name}"

    @property
    def url(self) -> str:
        """Returns GitHub HTTPS URL."""
        return f"https://github.com/{self.slug}"

    @property
    def file_stem(self) -> str:
        """Returns owner-name, used to name report files."""
        return self.slug.replace("/", "-")


class ManifestKind(str, Enum):
    """Supported dependency manifest formats, keyed by their file name."""

    PACKAGE_MANIFEST = "package.json"
    PINNED_LIST = "requirements.txt"

    @classmethod
    def from_option(cls, value: str) -> "ManifestKind":
        for kind in cls:
            if kind.value == value:
                return kind
        supported = ", ".join(k.value for k in cls)
        raise ValidationError(f"Unsupported dependency file type: {value!r} (supported: {supported})")

    @property
    def ecosystem(self) -> str:
        return "npm" if self is ManifestKind.PACKAGE_MANIFEST else "PyPI"

    @property
    def candidate_paths(self) -> tuple[str, ...]:
        """Paths tried in order when looking the manifest up in a repository."""
        if self is ManifestKind.PACKAGE_MANIFEST:
            return ("package.json", "frontend/package.json", "backend/package.json")
        return ("requirements.txt", "requirements/requirements.txt", "requirements/base.txt")


@dataclass(frozen=True)
class FetchedFile:
    path: str
    branch: str
    content: str


@dataclass(frozen=True)
class DependencySpec:
    name: str
    declared_version: str
    dev: bool = False


@dataclass(frozen=True)
class ResolvedDependency:
    """A dependency joined with its registry lookup.

    ``is_outdated`` is fixed at construction time; either ``latest_version``
    or ``resolution_error`` is populated.
    """
    name: str
    declared_version: str
    normalized_version: str
    latest_version: str | None
    is_outdated: bool
    resolution_error: str | None = None


@dataclass(frozen=True)
class Advisory:
    id: str
    title: str
    severity: str
    vulnerable_versions: str | None = None
    url: str | None = None


@dataclass(frozen=True)
class VulnerabilityReport:
    package_name: str
    advisory_count: int
    advisories: tuple[Advisory, ...] = ()
    error: str | None = None


@dataclass(frozen=True)
class Alternative:
    name: str
    description: str


class CommitType(str, Enum):
    FEATURE = "feature"
    BUGFIX = "bugfix"
    DOCS = "docs"
    REFACTOR = "refactor"
    TEST = "test"
    MERGE = "merge"
    OTHER = "other"


@dataclass(frozen=True)
class CommitStats:
    additions: int
    deletions: int
    total: int
    files_changed: int


@dataclass(frozen=True)
class CommitRecord:
    sha: str
    author_login: str
    author_name: str | None
    author_email: str | None
    author_date: datetime | None
    headline: str
    message: str
    commit_type: CommitType
    stats: CommitStats | None = None
    files: tuple[str, ...] = ()
    detail_fetched: bool = False
    detail_error: str | None = None
    url: str | None = None
    short_sha: str = field(init=False)

    def __post_init__(self) -> None:
        object.__setattr__(self, "short_sha", self.sha[:7])


@dataclass(frozen=True)
class CommitQuery:
    """Fetch and filter options for the commit pipeline."""
    limit: int = 50
    author: str | None = None
    since: str | None = None
    until: str | None = None
    file: str | None = None
    conflicts: bool = False
    commit_type: str | None = None
    show_stats: bool = False

    @property
    def needs_detail(self) -> bool:
        """Per-commit detail is only fetched when a filter or display needs it."""
        return bool(self.file or self.conflicts or self.show_stats)


@dataclass(frozen=True)
class TypeShare:
    commit_type: CommitType
    count: int
    percentage: float


@dataclass(frozen=True)
class CommitSummary:
    total_commits: int
    unique_authors: int
    type_breakdown: tuple[TypeShare, ...]
    total_additions: int
    total_deletions: int
    total_files_changed: int
    earliest: datetime | None
    latest: datetime | None


@dataclass(frozen=True)
class AuditSummary:
    total_dependencies: int
    outdated_count: int
    up_to_date_count: int
    vulnerable_count: int
    resolution_errors: int


@dataclass(frozen=True)
class AuditReport:
    subject: RepositoryRef
    generated_at: datetime
    manifest_kind: ManifestKind
    manifest_path: str
    branch: str
    dependencies: tuple[DependencySpec, ...]
    resolved: tuple[ResolvedDependency, ...]
    outdated: tuple[str, ...]
    vulnerabilities: tuple[VulnerabilityReport, ...] | None
    alternatives: dict[str, tuple[Alternative, ...]]
    summary: AuditSummary


@dataclass(frozen=True)
class CommitReport:
    subject: RepositoryRef
    generated_at: datetime
    query: CommitQuery
    commits: tuple[CommitRecord, ...]
    summary: CommitSummary


@dataclass(frozen=True)
class RepositoryOverview:
    full_name: str
    description: str | None
    stars: int
    forks: int
    open_issues: int
    watchers: int | None
    created_at: datetime | None
    updated_at: datetime | None
    default_branch: str | None
    license: str | None


@dataclass(frozen=True)
class ContributorImpact:
    username: str
    avatar_url: str | None
    contributions: int
    impact_score: int


@dataclass(frozen=True)
class ActivityPoint:
    label: str
    commits: int


@dataclass(frozen=True)
class InsightsReport:
    subject: RepositoryRef
    generated_at: datetime
    overview: RepositoryOverview
    top_contributors: tuple[ContributorImpact, ...]
    activity_period: str
    activity: tuple[ActivityPoint, ...]


@dataclass
class UpdateOutcome:
    """Result of the auto-update step. Updates are simulated only."""
    confirmed: bool
    simulated: bool = True
    updates: list[ResolvedDependency] = field(default_factory=list)
