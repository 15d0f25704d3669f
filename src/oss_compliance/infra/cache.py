from __future__ import annotations

from ..core.ports import LoggerPort, SbomCachePort


class Cache:
    def __init__(self, *, sbom_cache: SbomCachePort, logger: LoggerPort) -> None:
        self._sbom_cache = sbom_cache
        self._logger = logger

    def clear_all(self) -> None:
        removed = self._sbom_cache.clear()
        self._logger.info("cache_cleared", sbom_entries=removed)
