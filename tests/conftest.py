import sys
from pathlib import Path
import pytest
from helpers import mark_by_dir


@pytest.fixture(autouse=True)
def _ensure_src_on_syspath():
    # Add project src/ to sys.path for src-layout imports
    root = Path(__file__).resolve().parents[1]
    src_path = root / "src"
    if str(src_path) not in sys.path:
        sys.path.insert(0, str(src_path))
    yield


@pytest.fixture(autouse=True)
def _isolate_env(monkeypatch):
    # A developer's REPO_INSIGHT_* variables must not leak into tests
    import os
    for key in list(os.environ):
        if key.startswith("REPO_INSIGHT_"):
            monkeypatch.delenv(key, raising=False)


TESTS = Path(__file__).parent

def pytest_collection_modifyitems(config, items):
    # Mark tests by directory structure
    mark_by_dir(items, TESTS / "repo_insight" / "core", pytest.mark.unit)
    mark_by_dir(items, TESTS / "repo_insight" / "infra", pytest.mark.integration)
    mark_by_dir(items, TESTS / "repo_insight" / "app", pytest.mark.e2e)
    mark_by_dir(items, TESTS / "repo_insight" / "shared", pytest.mark.unit)
