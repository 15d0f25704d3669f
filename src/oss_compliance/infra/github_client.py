from __future__ import annotations

import asyncio
from typing import Any, Awaitable, Callable, Optional

import httpx

from ..core.domain.exceptions import (
    AuthenticationRequiredError,
    ComplianceCheckError,
    GitHubConnectionError,
    RateLimitExceededError,
    api_error_for,
)
from ..core.domain.models import RateLimitInfo
from ..core.ports import ApiResponse, LoggerPort
from ..core.services.rate_limits import RateLimitTracker
from .retry import RetryPolicy, with_retry

DEFAULT_API_BASE = "https://api.github.com"
DEFAULT_USER_AGENT = "oss-compliance-checker"
DEFAULT_ACCEPT = "application/vnd.github+json"


class GitHubClient:
    """Rate-aware GitHub REST client on ``httpx.AsyncClient``.

    - Sends ``Accept``/``User-Agent`` (and a bearer token when configured)
    - Retries 403 responses and transport errors with exponential backoff
    - Records ``X-RateLimit-*`` of every response into the shared tracker
    """

    def __init__(
        self,
        *,
        rate_limits: RateLimitTracker,
        logger: LoggerPort,
        token: Optional[str] = None,
        api_base: str = DEFAULT_API_BASE,
        user_agent: str = DEFAULT_USER_AGENT,
        accept: str = DEFAULT_ACCEPT,
        timeout_seconds: float = 15.0,
        max_retries: int = 2,
        backoff_base_seconds: float = 1.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep,
    ) -> None:
        self._rate_limits = rate_limits
        self._logger = logger
        self._api_base = api_base.rstrip("/")
        self._max_retries = max_retries
        self._backoff_base = backoff_base_seconds
        self._sleep = sleep

        headers = {"Accept": accept, "User-Agent": user_agent}
        if token:
            headers["Authorization"] = f"Bearer {token}"
        self._client = httpx.AsyncClient(
            headers=headers,
            timeout=timeout_seconds,
            transport=transport,
            follow_redirects=True,
        )

    async def __aenter__(self) -> "GitHubClient":
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._client.aclose()

    def api_url(self, path: str) -> str:
        if path.startswith(("http://", "https://")):
            return path
        return f"{self._api_base}/{path.lstrip('/')}"

    def _record(self, response: httpx.Response) -> None:
        self._rate_limits.update(RateLimitInfo.from_headers(response.headers))

    async def request(self, url: str, *, max_retries: Optional[int] = None) -> ApiResponse:
        policy = RetryPolicy(
            max_retries=self._max_retries if max_retries is None else max_retries,
            base_delay=self._backoff_base,
        )
        attempts = 0

        async def attempt() -> httpx.Response:
            nonlocal attempts
            attempts += 1
            response = await self._client.get(url)
            self._record(response)
            return response

        def on_retry(n: int, delay: float, outcome: Any) -> None:
            reason = f"status {outcome.status_code}" if isinstance(outcome, httpx.Response) else repr(outcome)
            self._logger.warning("github_retry", url=url, attempt=n + 1, delay_seconds=delay, reason=reason)

        try:
            response = await with_retry(
                attempt,
                policy,
                retry_on=(httpx.RequestError,),
                should_retry=lambda r: r.status_code == 403,
                sleep=self._sleep,
                on_retry=on_retry,
            )
        except httpx.RequestError as e:
            self._logger.error("github_unreachable", url=url, attempts=attempts, error=repr(e))
            raise GitHubConnectionError(url, attempts) from e

        result = ApiResponse(
            status_code=response.status_code,
            text=response.text,
            url=url,
            headers={k.lower(): v for k, v in response.headers.items()},
        )
        self._logger.debug("github_response", url=url, status_code=result.status_code, attempts=attempts)

        if result.status_code == 401:
            raise AuthenticationRequiredError(url)
        if result.status_code == 403 and self._is_rate_limited(result):
            reset = result.headers.get("x-ratelimit-reset")
            raise RateLimitExceededError(url, reset=int(reset) if reset and reset.isdigit() else None)
        return result

    @staticmethod
    def _is_rate_limited(response: ApiResponse) -> bool:
        return response.headers.get("x-ratelimit-remaining") == "0" or "rate limit" in response.text.lower()

    async def get_json(self, url: str, *, max_retries: Optional[int] = None) -> Any:
        response = await self.request(url, max_retries=max_retries)
        if not response.ok:
            reset = response.headers.get("x-ratelimit-reset")
            raise api_error_for(
                response.status_code,
                url,
                response.text,
                reset=int(reset) if reset and reset.isdigit() else None,
            )
        return response.json()

    async def fetch_rate_limit(self) -> Optional[RateLimitInfo]:
        """Read ``/rate_limit``. Failures are logged and give None."""
        url = self.api_url("/rate_limit")
        try:
            response = await self.request(url, max_retries=0)
            if not response.ok:
                return None
            info = RateLimitInfo.from_payload(response.json())
        except (ComplianceCheckError, ValueError) as e:
            self._logger.warning("rate_limit_check_failed", error=str(e))
            return None
        self._rate_limits.update(info)
        if info is not None:
            self._logger.info("rate_limit_checked", limit=info.limit, remaining=info.remaining, reset=info.reset)
        return info
