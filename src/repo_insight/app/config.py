from __future__ import annotations

from pathlib import Path
from typing import Literal

from platformdirs import PlatformDirs
from pydantic import BaseModel, ConfigDict, Field, computed_field
from pydantic_settings import BaseSettings, SettingsConfigDict


APP_NAME = "repo_insight"


def _default_home() -> Path:
    """Get default home directory using platformdirs."""
    return Path(PlatformDirs(appname=APP_NAME, appauthor=False).user_data_dir)


class _Section(BaseModel):
    # Sections are read through the root settings' env prefix only.
    model_config = ConfigDict(frozen=True, extra="forbid")


class DirectoryConfig(_Section):
    """Directory configuration with computed paths."""

    home: Path = Field(
        default_factory=_default_home,
        description="Base directory for all repo_insight data",
    )

    @computed_field
    @property
    def reports_dir(self) -> Path:
        """Default directory for JSON reports."""
        path = self.home / "reports"
        path.mkdir(parents=True, exist_ok=True)
        return path

    @computed_field
    @property
    def logs_dir(self) -> Path:
        """Directory for structured run logs."""
        path = self.home / "logs"
        path.mkdir(parents=True, exist_ok=True)
        return path


class GitHubConfig(_Section):
    """GitHub API access."""

    token: str | None = Field(
        default=None,
        description="GitHub personal access token (raises the API rate limit)",
    )

    api_url: str = Field(default="https://api.github.com")

    raw_url: str = Field(default="https://raw.githubusercontent.com")

    fallback_branch: str = Field(
        default="master",
        description="Branch tried when a file is missing on the requested branch",
    )

    timeout: float = Field(default=15.0, description="Per-request timeout in seconds")


class RegistryConfig(_Section):
    """Package registries and advisory sources."""

    npm_url: str = Field(default="https://registry.npmjs.org")

    pypi_url: str = Field(default="https://pypi.org/pypi")

    osv_url: str = Field(default="https://api.osv.dev/v1/query")

    npm_advisory_url: str = Field(
        default="https://registry.npmjs.org/-/npm/v1/security/advisories/package",
    )

    advisory_provider: Literal["osv", "npm"] = Field(
        default="osv",
        description="Advisory source: osv (npm and PyPI) or npm (npm only)",
    )

    timeout: float = Field(default=15.0, description="Per-request timeout in seconds")


class AuditConfig(_Section):
    """Dependency audit defaults."""

    batch_size: int = Field(
        default=5,
        ge=1,
        description="Concurrent lookups per batch; batches run one after another",
    )

    default_manifest: str = Field(default="package.json")

    default_branch: str = Field(default="main")


class CommitsConfig(_Section):
    """Commit history defaults."""

    default_limit: int = Field(default=50, ge=1)


class LoggingConfig(_Section):
    """Structured logging."""

    level: str = Field(default="INFO")

    console_output: bool = Field(default=False)

    logger_name: str = Field(default="repo_insight")


class RuntimeConfig(_Section):
    """Per-invocation values set by the CLI or facade."""

    run_id: str | None = Field(
        default=None,
        description="Names the JSONL log file; no file log when unset",
    )


class AppConfig(BaseSettings):
    """Root application configuration.

    All configuration is loaded from environment variables with REPO_INSIGHT_ prefix.
    Use double underscore for nested config: REPO_INSIGHT_GITHUB__TOKEN

    Example env vars:
        export REPO_INSIGHT_GITHUB__TOKEN=ghp_xxxxxxxxxxxxx
        export REPO_INSIGHT_REGISTRY__ADVISORY_PROVIDER=npm
        export REPO_INSIGHT_AUDIT__BATCH_SIZE=5
        export REPO_INSIGHT_DIRECTORIES__HOME=/custom/path
        export REPO_INSIGHT_LOGGING__LEVEL=DEBUG
    """

    model_config = SettingsConfigDict(
        env_prefix="REPO_INSIGHT_",
        env_nested_delimiter="__",
        frozen=True,
        extra="forbid",
    )

    directories: DirectoryConfig = Field(default_factory=DirectoryConfig)
    github: GitHubConfig = Field(default_factory=GitHubConfig)
    registry: RegistryConfig = Field(default_factory=RegistryConfig)
    audit: AuditConfig = Field(default_factory=AuditConfig)
    commits: CommitsConfig = Field(default_factory=CommitsConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)
    runtime: RuntimeConfig = Field(default_factory=RuntimeConfig)


def with_runtime(config: AppConfig, *, run_id: str | None, console_output: bool | None = None) -> AppConfig:
    """Copy of ``config`` carrying per-invocation runtime values."""
    update: dict = {"runtime": RuntimeConfig(run_id=run_id)}
    if console_output is not None:
        update["logging"] = config.logging.model_copy(update={"console_output": console_output})
    return config.model_copy(update=update)
