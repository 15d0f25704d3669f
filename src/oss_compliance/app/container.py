from __future__ import annotations

from typing import Optional

from dependency_injector import containers, providers

from .config import AppConfig
from ..core.ports import TextAnalyzerPort
from ..core.services import (
    DescriptionRater,
    InternalReferenceScanner,
    JsonExtractor,
    LicenseAnalyzer,
    ManifestAnalyzer,
    RateLimitTracker,
    RepositoryProbes,
    SbomAnalyzer,
    SummaryStore,
    ValidationOrchestrator,
)
from ..core.usecases.validate import ValidateUseCase
from ..core.usecases.export_sbom import ExportSbomUseCase
from ..core.usecases.clear_cache import ClearCacheUseCase
from ..core.usecases.rate_limit import RateLimitUseCase
from ..infra.github_client import GitHubClient
from ..infra.sbom_cache import SbomCache
from ..infra.sbom_exporter import SbomExporter
from ..infra.cache import Cache
from ..infra.llm import build_text_analyzer
from ..infra.logging import ValidationLogger


def _build_scanner(
    *,
    analyzer: Optional[TextAnalyzerPort],
    json_extractor: JsonExtractor,
) -> Optional[InternalReferenceScanner]:
    if analyzer is None:
        return None
    return InternalReferenceScanner(analyzer=analyzer, json_extractor=json_extractor)


class Container(containers.DeclarativeContainer):
    """DI container with Pydantic BaseSettings support."""

    config = providers.Configuration(pydantic_settings=[AppConfig()])

    # Logger (Resource: manages lifecycle with init/shutdown)
    logger = providers.Resource(
        ValidationLogger,
        run_label=config.runtime.run_label,
        logs_dir=config.directories.logs_dir,
        logger_name=config.logging.logger_name,
        console_output=config.logging.console_output,
        level=config.logging.level,
    )

    # Single owner of the rate-limit snapshot, shared by client and orchestrator
    rate_limits = providers.Singleton(RateLimitTracker)

    github = providers.Singleton(
        GitHubClient,
        rate_limits=rate_limits,
        logger=logger,
        token=config.github.token,
        api_base=config.github.api_base,
        user_agent=config.github.user_agent,
        accept=config.github.accept,
        timeout_seconds=config.github.timeout_seconds,
        max_retries=config.github.max_retries,
        backoff_base_seconds=config.github.backoff_base_seconds,
    )

    sbom_cache = providers.Singleton(
        SbomCache,
        cache_dir=config.directories.cache_dir,
        ttl_hours=config.cache.sbom_ttl_hours,
        enabled=config.cache.enabled,
    )

    cache = providers.Singleton(
        Cache,
        sbom_cache=sbom_cache,
        logger=logger,
    )

    sbom_exporter = providers.Singleton(
        SbomExporter,
        exports_dir=config.directories.exports_dir,
    )

    text_analyzer = providers.Singleton(
        build_text_analyzer,
        provider=config.llm.provider_name,
        model=config.llm.model_name,
        api_key=config.llm.api_key,
        logger=logger,
    )

    # Domain services
    json_extractor = providers.Singleton(JsonExtractor)

    summary_store = providers.Singleton(SummaryStore)

    license_analyzer = providers.Factory(
        LicenseAnalyzer,
        github=github,
        logger=logger,
    )

    sbom_analyzer = providers.Factory(
        SbomAnalyzer,
        github=github,
        logger=logger,
        cache=sbom_cache,
    )

    manifest_analyzer = providers.Factory(
        ManifestAnalyzer,
        github=github,
        logger=logger,
    )

    description_rater = providers.Factory(
        DescriptionRater,
        analyzer=text_analyzer,
        json_extractor=json_extractor,
        logger=logger,
    )

    internal_reference_scanner = providers.Factory(
        _build_scanner,
        analyzer=text_analyzer,
        json_extractor=json_extractor,
    )

    probes = providers.Factory(
        RepositoryProbes,
        github=github,
        logger=logger,
        ownership_property_names=config.probes.ownership_property_names,
        max_retries=config.github.probe_max_retries,
        scanner=internal_reference_scanner,
    )

    validation_orchestrator = providers.Factory(
        ValidationOrchestrator,
        github=github,
        rate_limits=rate_limits,
        store=summary_store,
        logger=logger,
        license_analyzer=license_analyzer,
        sbom_analyzer=sbom_analyzer,
        manifest_analyzer=manifest_analyzer,
        description_rater=description_rater,
        probes=probes,
        low_water_mark=config.rate_limit.low_water_mark,
        parallel_threshold=config.rate_limit.parallel_threshold,
        start_delay_seconds=config.probes.start_delay_seconds,
        inter_probe_delay_seconds=config.probes.inter_probe_delay_seconds,
    )

    # Use cases
    validate_uc = providers.Singleton(
        ValidateUseCase,
        orchestrator=validation_orchestrator,
    )

    export_sbom_uc = providers.Factory(
        ExportSbomUseCase,
        sbom_analyzer=sbom_analyzer,
        exporter=sbom_exporter,
    )

    clear_cache_uc = providers.Factory(
        ClearCacheUseCase,
        cache=cache,
    )

    rate_limit_uc = providers.Factory(
        RateLimitUseCase,
        github=github,
    )
