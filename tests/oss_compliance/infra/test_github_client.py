"""GitHubClient tests against httpx.MockTransport."""
import httpx
import pytest

from fakes import FakeLogger, RecordingSleep
from oss_compliance.core.domain.exceptions import (
    AuthenticationRequiredError,
    GitHubApiError,
    GitHubConnectionError,
    RateLimitExceededError,
    RepositoryNotFoundError,
)
from oss_compliance.core.services import LicenseAnalyzer, RateLimitTracker
from oss_compliance.infra.github_client import GitHubClient

RATE_HEADERS = {"X-RateLimit-Limit": "5000", "X-RateLimit-Remaining": "4321", "X-RateLimit-Reset": "1700000000"}


def _client(handler, *, tracker=None, sleep=None, logger=None, **kwargs):
    return GitHubClient(
        rate_limits=tracker or RateLimitTracker(),
        logger=logger or FakeLogger(),
        transport=httpx.MockTransport(handler),
        sleep=sleep or RecordingSleep(),
        **kwargs,
    )


class TestRequest:
    async def test_sends_headers_and_token(self):
        seen = []

        def handler(request):
            seen.append(request)
            return httpx.Response(200, json={})

        async with _client(handler, token="ghp_test") as client:
            await client.request(client.api_url("/repos/acme/widget"))

        request = seen[0]
        assert str(request.url) == "https://api.github.com/repos/acme/widget"
        assert request.headers["Authorization"] == "Bearer ghp_test"
        assert request.headers["Accept"] == "application/vnd.github+json"
        assert request.headers["User-Agent"] == "oss-compliance-checker"

    async def test_no_token_no_authorization_header(self):
        seen = []

        def handler(request):
            seen.append(request)
            return httpx.Response(200, json={})

        async with _client(handler) as client:
            await client.request(client.api_url("/rate_limit"))

        assert "Authorization" not in seen[0].headers

    async def test_403_retried_with_backoff(self):
        statuses = iter([403, 403, 200])
        sleep = RecordingSleep()
        logger = FakeLogger()

        def handler(request):
            return httpx.Response(next(statuses), text="forbidden")

        async with _client(handler, sleep=sleep, logger=logger) as client:
            response = await client.request(client.api_url("/repos/acme/widget"))

        assert response.status_code == 200
        assert sleep.delays == [1.0, 2.0]
        assert logger.events("warning") == ["github_retry", "github_retry"]

    async def test_plain_403_returned_after_retries(self):
        sleep = RecordingSleep()

        def handler(request):
            return httpx.Response(403, text="forbidden")

        async with _client(handler, sleep=sleep) as client:
            response = await client.request(client.api_url("/repos/acme/widget"))

        assert response.status_code == 403
        assert len(sleep.delays) == 2

    async def test_rate_limited_403_raises_with_reset(self):
        def handler(request):
            return httpx.Response(
                403,
                text='{"message": "API rate limit exceeded"}',
                headers={"X-RateLimit-Remaining": "0", "X-RateLimit-Reset": "1700000000", "X-RateLimit-Limit": "60"},
            )

        async with _client(handler) as client:
            with pytest.raises(RateLimitExceededError) as excinfo:
                await client.request(client.api_url("/repos/acme/widget"))

        assert excinfo.value.reset == 1700000000
        assert "rate limit" in excinfo.value.user_message

    async def test_transport_errors_exhaust_into_connection_error(self):
        attempts = []
        sleep = RecordingSleep()

        def handler(request):
            attempts.append(request)
            raise httpx.ConnectError("connection refused", request=request)

        async with _client(handler, sleep=sleep) as client:
            with pytest.raises(GitHubConnectionError) as excinfo:
                await client.request(client.api_url("/repos/acme/widget"))

        assert excinfo.value.attempts == 3
        assert len(attempts) == 3
        assert sleep.delays == [1.0, 2.0]

    async def test_transport_error_then_success(self):
        calls = []

        def handler(request):
            calls.append(request)
            if len(calls) == 1:
                raise httpx.ReadTimeout("slow", request=request)
            return httpx.Response(200, json={"ok": True})

        async with _client(handler) as client:
            response = await client.request(client.api_url("/repos/acme/widget"))

        assert response.json() == {"ok": True}

    @pytest.mark.parametrize(
        "error",
        [
            lambda request: httpx.TooManyRedirects("loop", request=request),
            lambda request: httpx.DecodingError("bad gzip", request=request),
        ],
        ids=["redirect-loop", "bad-encoding"],
    )
    async def test_non_transport_request_errors_are_wrapped(self, error):
        sleep = RecordingSleep()

        def handler(request):
            raise error(request)

        async with _client(handler, sleep=sleep) as client:
            with pytest.raises(GitHubConnectionError) as excinfo:
                await client.request(client.api_url("/repos/acme/widget"))

        assert excinfo.value.attempts == 3
        assert sleep.delays == [1.0, 2.0]

    async def test_redirect_loop_license_check_degrades(self):
        def handler(request):
            raise httpx.TooManyRedirects("loop", request=request)

        async with _client(handler) as client:
            analyzer = LicenseAnalyzer(github=client, logger=FakeLogger())
            check = await analyzer.check(client.api_url("/repos/acme/widget/contents/LICENSE"))

        assert check.is_valid is False
        assert check.message == "Error analyzing license file"

    async def test_401_raises_without_retry(self):
        sleep = RecordingSleep()

        def handler(request):
            return httpx.Response(401, json={"message": "Bad credentials"})

        async with _client(handler, sleep=sleep) as client:
            with pytest.raises(AuthenticationRequiredError):
                await client.request(client.api_url("/repos/acme/widget"))

        assert sleep.delays == []

    async def test_max_retries_override(self):
        sleep = RecordingSleep()

        def handler(request):
            return httpx.Response(403, text="forbidden")

        async with _client(handler, sleep=sleep) as client:
            await client.request(client.api_url("/repos/acme/widget"), max_retries=0)

        assert sleep.delays == []

    async def test_records_rate_limit_headers(self):
        tracker = RateLimitTracker()

        def handler(request):
            return httpx.Response(200, json={}, headers=RATE_HEADERS)

        async with _client(handler, tracker=tracker) as client:
            await client.request(client.api_url("/repos/acme/widget"))

        assert tracker.remaining() == 4321
        assert tracker.latest.limit == 5000

    async def test_404_is_returned_not_raised(self):
        def handler(request):
            return httpx.Response(404, json={"message": "Not Found"})

        async with _client(handler) as client:
            response = await client.request(client.api_url("/repos/acme/nope"))

        assert response.status_code == 404
        assert response.ok is False


class TestGetJson:
    async def test_decodes_body(self):
        def handler(request):
            return httpx.Response(200, json={"full_name": "acme/widget"})

        async with _client(handler) as client:
            payload = await client.get_json(client.api_url("/repos/acme/widget"))

        assert payload["full_name"] == "acme/widget"

    async def test_404_raises_not_found(self):
        def handler(request):
            return httpx.Response(404, json={"message": "Not Found"})

        async with _client(handler) as client:
            with pytest.raises(RepositoryNotFoundError) as excinfo:
                await client.get_json(client.api_url("/repos/acme/nope"))

        assert "404" in excinfo.value.user_message

    async def test_500_raises_retryable_api_error(self):
        def handler(request):
            return httpx.Response(500, text="oops")

        async with _client(handler) as client:
            with pytest.raises(GitHubApiError) as excinfo:
                await client.get_json(client.api_url("/repos/acme/widget"))

        assert excinfo.value.status_code == 500
        assert excinfo.value.retryable is True


class TestFetchRateLimit:
    async def test_reads_core_quota(self):
        tracker = RateLimitTracker()

        def handler(request):
            assert request.url.path == "/rate_limit"
            return httpx.Response(200, json={"resources": {"core": {"limit": 60, "remaining": 7, "reset": 1700000000}}})

        async with _client(handler, tracker=tracker) as client:
            info = await client.fetch_rate_limit()

        assert info.remaining == 7
        assert tracker.remaining() == 7

    async def test_failure_gives_none(self):
        def handler(request):
            raise httpx.ConnectError("down", request=request)

        async with _client(handler) as client:
            assert await client.fetch_rate_limit() is None


def test_api_url_keeps_absolute_urls():
    client = _client(lambda request: httpx.Response(200), api_base="https://ghe.example.com/api/v3/")

    assert client.api_url("/repos/a/b") == "https://ghe.example.com/api/v3/repos/a/b"
    assert client.api_url("https://raw.githubusercontent.com/a/b/main/LICENSE") == (
        "https://raw.githubusercontent.com/a/b/main/LICENSE"
    )
