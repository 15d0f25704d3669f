from __future__ import annotations

from pathlib import Path

from platformdirs import PlatformDirs
from pydantic import Field, computed_field
from pydantic_settings import BaseSettings, SettingsConfigDict


APP_NAME = "oss_compliance"


def _default_home() -> Path:
    """Get default home directory using platformdirs."""
    return Path(PlatformDirs(appname=APP_NAME, appauthor=False).user_cache_dir)


class DirectoryConfig(BaseSettings):
    """Directory configuration with computed paths."""

    model_config = SettingsConfigDict(env_prefix="OSS_COMPLIANCE_DIRECTORIES__")

    home: Path = Field(
        default_factory=_default_home,
        description="Base directory for all oss_compliance data",
    )

    @computed_field
    @property
    def cache_dir(self) -> Path:
        """Cache directory for SBOM analyses."""
        path = self.home / "cache"
        path.mkdir(parents=True, exist_ok=True)
        return path

    @computed_field
    @property
    def logs_dir(self) -> Path:
        """Logs directory for per-run JSONL logs."""
        path = self.home / "logs"
        path.mkdir(parents=True, exist_ok=True)
        return path

    @computed_field
    @property
    def exports_dir(self) -> Path:
        """Directory for exported SBOM files."""
        path = self.home / "exports"
        path.mkdir(parents=True, exist_ok=True)
        return path


class GitHubConfig(BaseSettings):
    """GitHub API configuration."""

    model_config = SettingsConfigDict(env_prefix="OSS_COMPLIANCE_GITHUB__")

    token: str | None = Field(
        default=None,
        description="GitHub personal access token (optional; raises the rate limit)",
    )

    api_base: str = Field(default="https://api.github.com", description="GitHub REST API base URL")

    user_agent: str = Field(default="oss-compliance-checker", description="User-Agent header value")

    accept: str = Field(default="application/vnd.github+json", description="Accept header value")

    timeout_seconds: float = Field(default=15.0, gt=0, description="Per-request timeout")

    max_retries: int = Field(default=2, ge=0, description="Retries for 403 and network failures")

    backoff_base_seconds: float = Field(
        default=1.0,
        ge=0,
        description="Backoff base; the wait after attempt n is base * 2**n",
    )

    probe_max_retries: int = Field(default=1, ge=0, description="Retries used by the deferred probes")


class RateLimitConfig(BaseSettings):
    """Rate-limit thresholds."""

    model_config = SettingsConfigDict(env_prefix="OSS_COMPLIANCE_RATE_LIMIT__")

    low_water_mark: int = Field(
        default=15,
        ge=0,
        description="Below this many remaining requests, deferred checks are skipped",
    )

    parallel_threshold: int = Field(
        default=100,
        ge=0,
        description="With at least this many remaining requests, deferred checks run in parallel",
    )


class ProbeConfig(BaseSettings):
    """Deferred probe settings."""

    model_config = SettingsConfigDict(env_prefix="OSS_COMPLIANCE_PROBES__")

    start_delay_seconds: float = Field(default=0.1, ge=0, description="Wait before the deferred phase")

    inter_probe_delay_seconds: float = Field(
        default=1.0,
        ge=0,
        description="Wait between probes when they run sequentially",
    )

    ownership_property_names: tuple[str, ...] = Field(
        default=("ownership-name", "ownership_name", "owner"),
        description="Custom repository property names that identify an owner",
    )


class CacheConfig(BaseSettings):
    """SBOM cache settings."""

    model_config = SettingsConfigDict(env_prefix="OSS_COMPLIANCE_CACHE__")

    enabled: bool = Field(default=True, description="Cache SBOM analyses on disk")

    sbom_ttl_hours: float = Field(default=24, gt=0, description="SBOM cache entry lifetime")


class LLMConfig(BaseSettings):
    """LLM configuration."""

    model_config = SettingsConfigDict(env_prefix="OSS_COMPLIANCE_LLM__")

    api_key: str | None = Field(
        default=None,
        description="LLM API key; without it the LLM-backed checks are skipped",
    )

    provider_name: str = Field(
        default="openai",
        description="LLM provider (openai, anthropic)",
    )

    model_name: str = Field(
        default="gpt-4o-mini",
        description="LLM model name",
    )


class LoggingConfig(BaseSettings):
    """Logging configuration."""

    model_config = SettingsConfigDict(env_prefix="OSS_COMPLIANCE_LOGGING__")

    level: str = Field(default="INFO", description="Log level")

    console_output: bool = Field(default=False, description="Also log to stderr")

    logger_name: str = Field(default="oss_compliance", description="stdlib logger name")


class RuntimeConfig(BaseSettings):
    """Per-invocation settings."""

    model_config = SettingsConfigDict(env_prefix="OSS_COMPLIANCE_RUNTIME__")

    run_label: str | None = Field(
        default=None,
        description="When set, structured logs go to <logs_dir>/<run_label>.jsonl",
    )


class AppConfig(BaseSettings):
    """Root application configuration.

    All configuration is loaded from environment variables with OSS_COMPLIANCE_ prefix.
    Use double underscore for nested config: OSS_COMPLIANCE_GITHUB__TOKEN

    Example env vars:
        # Optional, but unauthenticated runs only get 60 requests/hour
        export OSS_COMPLIANCE_GITHUB__TOKEN=ghp_xxxxxxxxxxxxx

        # Enables description rating and internal-reference scan
        export OSS_COMPLIANCE_LLM__API_KEY=sk-xxxxxxxxxxxxx
        export OSS_COMPLIANCE_LLM__PROVIDER_NAME=openai
        export OSS_COMPLIANCE_LLM__MODEL_NAME=gpt-4o-mini

        export OSS_COMPLIANCE_RATE_LIMIT__LOW_WATER_MARK=15
        export OSS_COMPLIANCE_DIRECTORIES__HOME=/custom/path
    """

    model_config = SettingsConfigDict(
        env_prefix="OSS_COMPLIANCE_",
        env_nested_delimiter="__",
        frozen=True,
        extra="forbid",
    )

    directories: DirectoryConfig = Field(default_factory=DirectoryConfig)
    github: GitHubConfig = Field(default_factory=GitHubConfig)
    rate_limit: RateLimitConfig = Field(default_factory=RateLimitConfig)
    probes: ProbeConfig = Field(default_factory=ProbeConfig)
    cache: CacheConfig = Field(default_factory=CacheConfig)
    llm: LLMConfig = Field(default_factory=LLMConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)
    runtime: RuntimeConfig = Field(default_factory=RuntimeConfig)
