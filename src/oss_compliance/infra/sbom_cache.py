from __future__ import annotations

import json
import re
import time
from pathlib import Path
from typing import Callable, Optional

from ..core.domain.models import SbomAnalysis

_UNSAFE = re.compile(r"[^A-Za-z0-9_.-]")


class SbomCache:
    """File-backed SBOM analysis cache.

    One JSON file per repository, keyed ``sbom_{owner}_{repo}`` and holding
    ``{"data": ..., "timestamp": <epoch ms>}``. Entries older than the TTL and
    unreadable entries are misses.
    """

    def __init__(
        self,
        *,
        cache_dir: Path,
        ttl_hours: float = 24,
        enabled: bool = True,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self._dir = cache_dir / "sbom"
        self._ttl_ms = ttl_hours * 60 * 60 * 1000
        self._enabled = enabled
        self._clock = clock

    @staticmethod
    def key(owner: str, repo: str) -> str:
        return f"sbom_{owner.lower()}_{repo.lower()}"

    def _path(self, owner: str, repo: str) -> Path:
        return self._dir / f"{_UNSAFE.sub('_', self.key(owner, repo))}.json"

    def _now_ms(self) -> int:
        return int(self._clock() * 1000)

    def get(self, owner: str, repo: str) -> Optional[SbomAnalysis]:
        if not self._enabled:
            return None
        path = self._path(owner, repo)
        try:
            entry = json.loads(path.read_text(encoding="utf-8"))
            timestamp = int(entry.get("timestamp") or 0)
            data = entry["data"]
        except (OSError, ValueError, TypeError, KeyError, AttributeError):
            return None
        if self._now_ms() - timestamp >= self._ttl_ms:
            return None
        try:
            return SbomAnalysis.from_dict(data)
        except (KeyError, TypeError, ValueError, AttributeError):
            return None

    def set(self, owner: str, repo: str, analysis: SbomAnalysis) -> None:
        if not self._enabled:
            return
        self._dir.mkdir(parents=True, exist_ok=True)
        entry = {"data": analysis.to_dict(), "timestamp": self._now_ms()}
        self._path(owner, repo).write_text(json.dumps(entry, ensure_ascii=False), encoding="utf-8")

    def clear(self) -> int:
        if not self._dir.exists():
            return 0
        removed = 0
        for path in self._dir.glob("sbom_*.json"):
            path.unlink(missing_ok=True)
            removed += 1
        return removed
