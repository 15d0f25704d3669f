from __future__ import annotations

from typing import Optional

from ..domain.models import RateLimitInfo
from ..ports import GitHubPort


class RateLimitUseCase:
    """Reports the current GitHub core quota without consuming it."""

    def __init__(self, *, github: GitHubPort) -> None:
        self._github = github

    async def execute(self) -> Optional[RateLimitInfo]:
        return await self._github.fetch_rate_limit()
