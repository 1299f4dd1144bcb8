from __future__ import annotations

from dependency_injector import containers, providers

from ..core.usecases.audit import AuditUseCase
from ..core.usecases.commits import CommitHistoryUseCase
from ..core.usecases.insights import InsightsUseCase
from ..core.usecases.update import UpdatePackagesUseCase
from ..infra.advisory_sources import NpmAdvisorySource, OsvAdvisorySource
from ..infra.github_client import GitHubClient
from ..infra.logging import RunLogger
from ..infra.registry_client import NpmRegistryClient, PyPIRegistryClient
from ..infra.report_store import ReportStore


class Container(containers.DeclarativeContainer):
    """DI container; config is loaded with ``config.from_pydantic(AppConfig())``."""

    config = providers.Configuration()

    # None selects httpx's default network transport
    http_transport = providers.Object(None)

    # Logger (Resource: manages lifecycle with init/shutdown)
    logger = providers.Resource(
        RunLogger,
        run_id=config.runtime.run_id,
        logs_dir=config.directories.logs_dir,
        logger_name=config.logging.logger_name,
        console_output=config.logging.console_output,
        level=config.logging.level,
    )

    # Remote clients
    github = providers.Singleton(
        GitHubClient,
        logger=logger,
        token=config.github.token,
        api_url=config.github.api_url,
        raw_url=config.github.raw_url,
        fallback_branch=config.github.fallback_branch,
        timeout=config.github.timeout,
        transport=http_transport,
    )

    npm_registry = providers.Singleton(
        NpmRegistryClient,
        base_url=config.registry.npm_url,
        timeout=config.registry.timeout,
        transport=http_transport,
    )

    pypi_registry = providers.Singleton(
        PyPIRegistryClient,
        base_url=config.registry.pypi_url,
        timeout=config.registry.timeout,
        transport=http_transport,
    )

    # Keyed by ManifestKind.ecosystem
    registries = providers.Dict(
        npm=npm_registry,
        PyPI=pypi_registry,
    )

    advisory_source = providers.Selector(
        config.registry.advisory_provider,
        osv=providers.Singleton(
            OsvAdvisorySource,
            query_url=config.registry.osv_url,
            timeout=config.registry.timeout,
            transport=http_transport,
        ),
        npm=providers.Singleton(
            NpmAdvisorySource,
            base_url=config.registry.npm_advisory_url,
            timeout=config.registry.timeout,
            transport=http_transport,
        ),
    )

    report_store = providers.Singleton(
        ReportStore,
        reports_dir=config.directories.reports_dir,
    )

    # Use cases
    audit_uc = providers.Factory(
        AuditUseCase,
        github=github,
        registries=registries,
        advisory_source=advisory_source,
        report_store=report_store,
        logger=logger,
        batch_size=config.audit.batch_size,
    )

    commits_uc = providers.Factory(
        CommitHistoryUseCase,
        github=github,
        report_store=report_store,
        logger=logger,
        batch_size=config.audit.batch_size,
    )

    insights_uc = providers.Factory(
        InsightsUseCase,
        github=github,
        report_store=report_store,
        logger=logger,
    )

    # confirm is supplied per call: container.update_uc(confirm=...)
    update_uc = providers.Factory(
        UpdatePackagesUseCase,
        logger=logger,
    )
