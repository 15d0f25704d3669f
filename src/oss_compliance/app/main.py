from __future__ import annotations

import asyncio
from pathlib import Path
from typing import Awaitable, Callable, TypeVar

from .config import AppConfig
from .container import Container
from ..core.domain.models import RateLimitInfo, ValidationSummary

T = TypeVar("T")


def _create_container(config: AppConfig | None = None) -> Container:
    """Create and initialize a container.

    Args:
        config: Optional config. If None, loads from environment variables.

    Returns:
        Initialized container instance
    """
    container = Container()

    if config is None:
        config = AppConfig()

    container.config.from_pydantic(config)
    container.init_resources()

    return container


def with_github_token(config: AppConfig, token: str | None) -> AppConfig:
    """Copy of ``config`` with the GitHub token replaced (when given)."""
    if not token:
        return config
    return config.model_copy(update={"github": config.github.model_copy(update={"token": token})})


def _run(config: AppConfig | None, fn: Callable[[Container], Awaitable[T]]) -> T:
    container = _create_container(config)

    async def main() -> T:
        try:
            return await fn(container)
        finally:
            await container.github().aclose()

    try:
        return asyncio.run(main())
    finally:
        container.shutdown_resources()


def validate(
    url: str,
    *,
    github_token: str | None = None,
    include_deferred: bool = True,
    config: AppConfig | None = None,
) -> ValidationSummary:
    """Validate a GitHub repository against the compliance requirements.

    Args:
        url: Repository URL, e.g. https://github.com/owner/repo
        github_token: GitHub token override (optional, otherwise from config/env)
        include_deferred: Also run the security/ownership/telemetry/internal-reference probes
        config: Optional config for testing. If None, loads from env vars.

    Returns:
        Final validation summary

    Raises:
        ComplianceCheckError: If the run aborts (bad URL, repository not found,
            rate limit exhausted, authentication required, GitHub unreachable)
    """
    config = with_github_token(config or AppConfig(), github_token)

    async def go(container: Container) -> ValidationSummary:
        return await container.validate_uc().execute(url=url, include_deferred=include_deferred)

    return _run(config, go)


def export_sbom(url: str, *, config: AppConfig | None = None) -> Path | None:
    """Export the repository's raw SBOM to ``<exports_dir>/<owner>-<repo>-sbom.json``.

    Returns:
        Written path, or None when no SBOM is available
    """
    async def go(container: Container) -> Path | None:
        return await container.export_sbom_uc().execute(url=url)

    return _run(config, go)


def rate_limit(config: AppConfig | None = None) -> RateLimitInfo | None:
    """Return the current GitHub core rate-limit snapshot."""
    async def go(container: Container) -> RateLimitInfo | None:
        return await container.rate_limit_uc().execute()

    return _run(config, go)


def clear(config: AppConfig | None = None) -> None:
    """Clear all caches.

    Args:
        config: Optional config for testing. If None, loads from env vars.
    """
    container = _create_container(config)
    try:
        container.clear_cache_uc().execute()
    finally:
        container.shutdown_resources()
