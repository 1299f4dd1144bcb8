from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Generic, Optional, TypeVar

from ..domain.models import AuditReport, UpdateOutcome


R = TypeVar("R")


@dataclass(frozen=True)
class SavedReport(Generic[R]):
    """A report aggregate together with the file it was written to."""
    report: R
    path: Path


@dataclass(frozen=True)
class AuditRun:
    """Outcome of ``repo_insight.audit``: the saved audit plus the optional update step."""
    saved: SavedReport[AuditReport]
    update: Optional[UpdateOutcome] = None

    @property
    def report(self) -> AuditReport:
        return self.saved.report

    @property
    def path(self) -> Path:
        return self.saved.path
