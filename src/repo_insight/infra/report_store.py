from __future__ import annotations

import json
from pathlib import Path
from typing import Optional

from ..core.domain.models import RepositoryRef


class ReportStore:
    """JSON report files named ``<owner>-<name>-<kind>.json``."""

    def __init__(self, *, reports_dir: Path) -> None:
        self._reports_dir = reports_dir

    @staticmethod
    def file_name(repo: RepositoryRef, kind: str) -> str:
        return f"{repo.file_stem}-{kind}.json"

    def save(
        self,
        *,
        repo: RepositoryRef,
        kind: str,
        payload: dict,
        directory: Optional[Path] = None,
    ) -> Path:
        target_dir = Path(directory) if directory is not None else self._reports_dir
        target_dir.mkdir(parents=True, exist_ok=True)
        fp = target_dir / self.file_name(repo, kind)
        fp.write_text(json.dumps(payload, ensure_ascii=False, indent=2), encoding="utf-8")
        return fp

    def load(self, *, repo: RepositoryRef, kind: str) -> Optional[dict]:
        fp = self._reports_dir / self.file_name(repo, kind)
        if not fp.exists():
            return None
        return json.loads(fp.read_text(encoding="utf-8"))
