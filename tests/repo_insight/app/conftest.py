"""Shared fixtures for app-level tests: a fake GitHub/npm/OSV network."""
import json

import httpx
import pytest

from repo_insight.app import main as facade
from repo_insight.app.config import AppConfig, DirectoryConfig
from repo_insight.app.container import Container


PACKAGE_JSON = {
    "name": "demo",
    "dependencies": {"express": "^4.17.0", "moment": "2.29.4"},
    "devDependencies": {"jest": "29.7.0"},
}

NPM_LATEST = {"express": "4.18.2", "moment": "2.29.4", "jest": "29.7.0"}

COMMITS = [
    {
        "sha": "a1b2c3d4e5f6",
        "html_url": "https://github.com/octo/demo/commit/a1b2c3d4e5f6",
        "commit": {"message": "feat: add audit", "author": {"name": "Alice", "email": "alice@example.com", "date": "2024-01-03T00:00:00Z"}},
        "author": {"login": "alice"},
    },
    {
        "sha": "b2c3d4e5f6a1",
        "html_url": "https://github.com/octo/demo/commit/b2c3d4e5f6a1",
        "commit": {"message": "fix: null pointer in parser", "author": {"name": "Bob", "email": "bob@example.com", "date": "2024-01-02T00:00:00Z"}},
        "author": {"login": "bob"},
    },
]

DETAILS = {
    "a1b2c3d4e5f6": {"stats": {"additions": 10, "deletions": 2, "total": 12}, "files": [{"filename": "src/audit.py"}]},
    "b2c3d4e5f6a1": {"stats": {"additions": 1, "deletions": 1, "total": 2}, "files": [{"filename": "src/parser.py"}]},
}


def fake_network(request: httpx.Request) -> httpx.Response:
    host, path = request.url.host, request.url.path

    if host == "raw.githubusercontent.com":
        if path == "/octo/demo/main/package.json":
            return httpx.Response(200, text=json.dumps(PACKAGE_JSON))
        return httpx.Response(404, text="404: Not Found")

    if host == "api.github.com":
        if path == "/repos/octo/demo":
            return httpx.Response(200, json={
                "full_name": "octo/demo",
                "description": "Demo repository",
                "stargazers_count": 42,
                "forks_count": 3,
                "open_issues_count": 1,
                "subscribers_count": 5,
                "created_at": "2020-01-01T00:00:00Z",
                "updated_at": "2024-01-01T00:00:00Z",
                "default_branch": "main",
                "license": {"name": "MIT License"},
            })
        if path == "/repos/octo/demo/contributors":
            return httpx.Response(200, json=[
                {"login": "bob", "contributions": 5},
                {"login": "alice", "contributions": 20},
            ])
        if path == "/repos/octo/demo/commits":
            return httpx.Response(200, json=COMMITS[: int(request.url.params.get("per_page", 30))])
        if path.startswith("/repos/octo/demo/commits/"):
            return httpx.Response(200, json=DETAILS[path.rsplit("/", 1)[1]])
        if path == "/repos/octo/demo/stats/commit_activity":
            return httpx.Response(200, json=[{"total": 2, "week": 1}, {"total": 7, "week": 2}])
        return httpx.Response(404, json={"message": "Not Found"})

    if host == "registry.npmjs.org":
        name = path.lstrip("/")
        if name in NPM_LATEST:
            return httpx.Response(200, json={"dist-tags": {"latest": NPM_LATEST[name]}})
        return httpx.Response(404, json={"error": "Not found"})

    if host == "api.osv.dev":
        body = json.loads(request.content)
        if body["package"]["name"] == "express":
            return httpx.Response(200, json={"vulns": [{
                "id": "GHSA-qw6h-vgh9-j6wx",
                "summary": "express XSS via response.redirect()",
                "database_specific": {"severity": "LOW"},
            }]})
        return httpx.Response(200, json={})

    return httpx.Response(500)


@pytest.fixture
def app_config(tmp_path) -> AppConfig:
    return AppConfig(directories=DirectoryConfig(home=tmp_path))


@pytest.fixture
def fake_network_container(monkeypatch):
    """Route every container-built HTTP client through ``fake_network``."""
    created = []

    def _create_container(config=None):
        container = Container()
        container.http_transport.override(httpx.MockTransport(fake_network))
        container.config.from_pydantic(config if config is not None else AppConfig())
        container.init_resources()
        created.append(container)
        return container

    monkeypatch.setattr(facade, "_create_container", _create_container)
    return created
