from __future__ import annotations

from typing import Optional

from ..domain.models import RateLimitInfo


class RateLimitTracker:
    """Process-wide holder of the latest GitHub quota snapshot.

    Every update replaces the previous snapshot; no history is kept.
    """

    def __init__(self) -> None:
        self._latest: Optional[RateLimitInfo] = None

    @property
    def latest(self) -> Optional[RateLimitInfo]:
        return self._latest

    def update(self, info: Optional[RateLimitInfo]) -> None:
        if info is not None:
            self._latest = info

    def remaining(self) -> Optional[int]:
        return self._latest.remaining if self._latest is not None else None

    def is_below(self, threshold: int) -> bool:
        """True only when a snapshot exists and its remaining quota is under ``threshold``."""
        remaining = self.remaining()
        return remaining is not None and remaining < threshold

    def reset(self) -> None:
        self._latest = None
