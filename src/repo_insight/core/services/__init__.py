from __future__ import annotations

from .batching import run_in_batches
from .manifest_parser import parse_manifest
from .version_resolver import VersionResolver, is_outdated, normalize_version
from .vulnerability_checker import VulnerabilityChecker
from .alternatives import suggest_alternatives
from .commit_analysis import classify_commit, filter_commits, summarize_commits

__all__ = [
    "run_in_batches",
    "parse_manifest",
    "VersionResolver",
    "is_outdated",
    "normalize_version",
    "VulnerabilityChecker",
    "suggest_alternatives",
    "classify_commit",
    "filter_commits",
    "summarize_commits",
]
