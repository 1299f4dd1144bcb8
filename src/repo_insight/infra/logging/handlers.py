from __future__ import annotations

import logging
import sys
from logging import Handler
from pathlib import Path

from .formatters import JSONFormatter, HumanReadableFormatter


def build_json_file_handler(path: Path, level: int = logging.INFO, run_id: str | None = None) -> Handler:
    """Append JSON lines to ``path``, creating its directory.

    Args:
        path: Path to log file (.jsonl)
        level: Logging level
        run_id: Attached to every record when set
    """
    path.parent.mkdir(parents=True, exist_ok=True)
    h = logging.FileHandler(path, encoding="utf-8", mode="a")
    h.setLevel(level)
    h.setFormatter(JSONFormatter(run_id=run_id))
    return h


def build_human_console_handler(level: int = logging.INFO) -> Handler:
    # stderr keeps stdout clean for --json output
    h = logging.StreamHandler(sys.stderr)
    h.setLevel(level)
    h.setFormatter(HumanReadableFormatter())
    return h
