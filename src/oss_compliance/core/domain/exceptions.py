"""Domain exceptions for oss_compliance."""

from __future__ import annotations

from datetime import datetime, timezone


class ComplianceCheckError(Exception):
    """Base class for errors that abort a validation run.

    ``retryable`` tells the caller whether trying again later can help
    (transient or quota problems) or whether the input must change.
    """

    retryable: bool = False

    @property
    def user_message(self) -> str:
        return str(self)


class InvalidRepoUrlError(ComplianceCheckError):
    """Raised when a string is not a GitHub repository URL."""

    def __init__(self, url: str) -> None:
        self.url = url
        super().__init__(f"Invalid GitHub repository URL: {url!r}")

    @property
    def user_message(self) -> str:
        return "Please enter a valid GitHub repository URL (https://github.com/<owner>/<repo>)."


_STATUS_MESSAGES = {
    401: "Repository not found or inaccessible. Please verify the URL is correct and the repository is public.",
    403: "Access forbidden (403). Please try again in a few minutes.",
    404: "Repository not found (404). Please check that the URL is correct and the repository exists.",
    500: "GitHub server error (500). Please try again later.",
}


class GitHubApiError(ComplianceCheckError):
    """Non-success response from the GitHub REST API."""

    def __init__(self, status_code: int, url: str, message: str | None = None) -> None:
        self.status_code = status_code
        self.url = url
        if message is None:
            message = f"GitHub API error: {status_code} ({url})"
        super().__init__(message)

    @property
    def retryable(self) -> bool:  # type: ignore[override]
        return self.status_code == 403 or self.status_code >= 500

    @property
    def user_message(self) -> str:
        key = 500 if self.status_code >= 500 else self.status_code
        return _STATUS_MESSAGES.get(key, f"GitHub API error: {self.status_code}")


class RepositoryNotFoundError(GitHubApiError):
    def __init__(self, url: str, message: str | None = None) -> None:
        super().__init__(404, url, message)


class AuthenticationRequiredError(GitHubApiError):
    """401 from GitHub. Token refresh is not attempted."""

    def __init__(self, url: str, message: str | None = None) -> None:
        super().__init__(401, url, message or f"Authentication required ({url})")


class RateLimitExceededError(GitHubApiError):
    """Request quota is exhausted; carries the reset time when known."""

    def __init__(self, url: str, reset: int | None = None) -> None:
        self.reset = reset
        super().__init__(403, url, f"GitHub API rate limit exceeded ({url})")

    @property
    def retryable(self) -> bool:  # type: ignore[override]
        return True

    @property
    def reset_at(self) -> datetime | None:
        if self.reset is None:
            return None
        return datetime.fromtimestamp(self.reset, tz=timezone.utc)

    @property
    def user_message(self) -> str:
        base = "GitHub API rate limit exceeded. Please try again later."
        if self.reset_at is not None:
            base += f" Limit resets at approximately {self.reset_at:%H:%M:%S} UTC."
        return base


class GitHubConnectionError(ComplianceCheckError):
    """Network-level failure that persisted through every retry."""

    retryable = True

    def __init__(self, url: str, attempts: int) -> None:
        self.url = url
        self.attempts = attempts
        super().__init__(f"Could not reach GitHub after {attempts} attempts ({url})")

    @property
    def user_message(self) -> str:
        return "The GitHub API is temporarily unavailable. Please try again in a few minutes."


def api_error_for(status_code: int, url: str, body: str = "", reset: int | None = None) -> GitHubApiError:
    """Map a non-success status to the matching exception type."""
    if status_code == 404:
        return RepositoryNotFoundError(url)
    if status_code == 401:
        return AuthenticationRequiredError(url)
    if status_code == 403 and "rate limit" in body.lower():
        return RateLimitExceededError(url, reset=reset)
    return GitHubApiError(status_code, url)
