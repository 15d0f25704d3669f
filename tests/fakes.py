"""Port-level fakes shared by the test suite."""
from __future__ import annotations

import json
from typing import Any, Optional

from oss_compliance.core.domain.exceptions import api_error_for
from oss_compliance.core.domain.models import RateLimitInfo, SbomAnalysis
from oss_compliance.core.ports import ApiResponse

API = "https://api.github.com"


class FakeGitHub:
    """GitHubPort fake keyed by API path.

    Unknown paths answer 404. A route may hold an exception instance, which
    is raised on every call.
    """

    def __init__(self, rate_limit: Optional[RateLimitInfo] = None) -> None:
        self.routes: dict[str, Any] = {}
        self.calls: list[str] = []
        self.max_retries_seen: list[Optional[int]] = []
        self.rate_limit = rate_limit

    def api_url(self, path: str) -> str:
        return f"{API}/{path.lstrip('/')}"

    def add(self, path: str, body: Any = None, *, status: int = 200, text: Optional[str] = None) -> "FakeGitHub":
        if text is None:
            text = json.dumps(body if body is not None else {})
        self.routes[self.api_url(path)] = (status, text)
        return self

    def fail(self, path: str, exc: BaseException) -> "FakeGitHub":
        self.routes[self.api_url(path)] = exc
        return self

    async def request(self, url: str, *, max_retries: Optional[int] = None) -> ApiResponse:
        self.calls.append(url)
        self.max_retries_seen.append(max_retries)
        route = self.routes.get(url)
        if route is None:
            return ApiResponse(status_code=404, text='{"message": "Not Found"}', url=url)
        if isinstance(route, BaseException):
            raise route
        status, text = route
        return ApiResponse(status_code=status, text=text, url=url)

    async def get_json(self, url: str, *, max_retries: Optional[int] = None) -> Any:
        response = await self.request(url, max_retries=max_retries)
        if not response.ok:
            raise api_error_for(response.status_code, url, response.text)
        return response.json()

    async def fetch_rate_limit(self) -> Optional[RateLimitInfo]:
        return self.rate_limit


class FakeLogger:
    """LoggerPort fake recording (level, event, fields)."""

    def __init__(self) -> None:
        self.records: list[tuple[str, str, dict]] = []

    def events(self, level: Optional[str] = None) -> list[str]:
        return [m for lv, m, _ in self.records if level is None or lv == level]

    def debug(self, message: str, **kwargs) -> None:
        self.records.append(("debug", message, kwargs))

    def info(self, message: str, **kwargs) -> None:
        self.records.append(("info", message, kwargs))

    def warning(self, message: str, **kwargs) -> None:
        self.records.append(("warning", message, kwargs))

    def error(self, message: str, exc_info: bool = False, **kwargs) -> None:
        self.records.append(("error", message, kwargs))

    def exception(self, message: str, **kwargs) -> None:
        self.records.append(("exception", message, kwargs))


class FakeTextAnalyzer:
    """TextAnalyzerPort fake answering from a queue (exceptions are raised)."""

    def __init__(self, *responses: Any) -> None:
        self._responses = list(responses)
        self.prompts: list[str] = []

    async def analyze(self, prompt: str) -> str:
        self.prompts.append(prompt)
        response = self._responses.pop(0) if len(self._responses) > 1 else self._responses[0]
        if isinstance(response, BaseException):
            raise response
        return response


class FakeSbomCache:
    def __init__(self) -> None:
        self.entries: dict[tuple[str, str], SbomAnalysis] = {}

    def get(self, owner: str, repo: str) -> Optional[SbomAnalysis]:
        return self.entries.get((owner, repo))

    def set(self, owner: str, repo: str, analysis: SbomAnalysis) -> None:
        self.entries[(owner, repo)] = analysis

    def clear(self) -> int:
        n = len(self.entries)
        self.entries.clear()
        return n


class RecordingSleep:
    """Stand-in for asyncio.sleep that returns immediately."""

    def __init__(self) -> None:
        self.delays: list[float] = []

    async def __call__(self, delay: float) -> None:
        self.delays.append(delay)


def make_orchestrator(github, *, tracker=None, store=None, analyzer=None, sleep=None, logger=None, **kwargs):
    """ValidationOrchestrator wired with real services over ``github``."""
    from oss_compliance.core.services import (
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

    logger = logger or FakeLogger()
    extractor = JsonExtractor()
    scanner = InternalReferenceScanner(analyzer=analyzer, json_extractor=extractor) if analyzer else None
    return ValidationOrchestrator(
        github=github,
        rate_limits=tracker or RateLimitTracker(),
        store=store or SummaryStore(),
        logger=logger,
        license_analyzer=LicenseAnalyzer(github=github, logger=logger),
        sbom_analyzer=SbomAnalyzer(github=github, logger=logger),
        manifest_analyzer=ManifestAnalyzer(github=github, logger=logger),
        description_rater=DescriptionRater(analyzer=analyzer, json_extractor=extractor, logger=logger),
        probes=RepositoryProbes(github=github, logger=logger, scanner=scanner),
        sleep=sleep or RecordingSleep(),
        **kwargs,
    )
