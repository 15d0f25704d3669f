from __future__ import annotations

import json
from dataclasses import dataclass, field
from typing import Any, Optional, Protocol

from .domain.models import RateLimitInfo, SbomAnalysis


@dataclass(frozen=True)
class ApiResponse:
    """Transport-neutral view of one GitHub API response.

    Header names are lowercased.
    """
    status_code: int
    text: str
    url: str
    headers: dict[str, str] = field(default_factory=dict)

    @property
    def ok(self) -> bool:
        return 200 <= self.status_code < 300

    def json(self) -> Any:
        return json.loads(self.text)


class GitHubPort(Protocol):
    """Port for read-only GitHub REST calls.

    Implementations own authentication, retry/backoff and rate-limit
    bookkeeping so callers only see final responses.
    """

    def api_url(self, path: str) -> str:
        """Absolute API URL for ``path`` (e.g. ``/repos/o/r``)."""
        ...

    async def request(self, url: str, *, max_retries: Optional[int] = None) -> ApiResponse:
        """GET ``url`` and return the final response, whatever its status.

        Raises:
            AuthenticationRequiredError: On 401
            RateLimitExceededError: When still rate-limited after the last retry
            GitHubConnectionError: When every attempt failed at the network level
        """
        ...

    async def get_json(self, url: str, *, max_retries: Optional[int] = None) -> Any:
        """GET ``url`` and decode JSON, raising a ``GitHubApiError`` for non-2xx."""
        ...

    async def fetch_rate_limit(self) -> Optional[RateLimitInfo]:
        """Current core quota, or None when it cannot be determined."""
        ...


class TextAnalyzerPort(Protocol):
    """Port for the external text-analysis capability (an LLM)."""

    async def analyze(self, prompt: str) -> str:
        """Return the raw model text; expected to contain one JSON object."""
        ...


class SbomCachePort(Protocol):
    """Port for the expiring SBOM analysis cache."""

    def get(self, owner: str, repo: str) -> Optional[SbomAnalysis]:
        ...

    def set(self, owner: str, repo: str, analysis: SbomAnalysis) -> None:
        ...

    def clear(self) -> int:
        """Remove every entry and return how many were removed."""
        ...


class CachePort(Protocol):
    """Port for cache management."""

    def clear_all(self) -> None:
        """Clear all application caches."""
        ...


class SbomExporterPort(Protocol):
    def export(self, *, owner: str, repo: str, raw: Any) -> Any:
        """Write the raw SBOM payload and return where it went."""
        ...


class LoggerPort(Protocol):
    """Port for structured logging.

    Keyword fields are attached to the record as structured data.
    """

    def debug(self, message: str, **kwargs: Any) -> None:
        ...

    def info(self, message: str, **kwargs: Any) -> None:
        ...

    def warning(self, message: str, **kwargs: Any) -> None:
        ...

    def error(self, message: str, exc_info: bool = False, **kwargs: Any) -> None:
        ...

    def exception(self, message: str, **kwargs: Any) -> None:
        ...
