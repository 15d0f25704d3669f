from __future__ import annotations

from pathlib import Path
from typing import Optional

from ..domain.url import parse_github_url
from ..ports import SbomExporterPort
from ..services import SbomAnalyzer


class ExportSbomUseCase:
    def __init__(
        self,
        *,
        sbom_analyzer: SbomAnalyzer,
        exporter: SbomExporterPort,
    ) -> None:
        self._sbom_analyzer = sbom_analyzer
        self._exporter = exporter

    async def execute(self, *, url: str) -> Optional[Path]:
        """Write the repository's raw SBOM to ``<owner>-<repo>-sbom.json``.

        Returns:
            Path of the written file, or None when the repository exposes no SBOM
        """
        owner, repo = parse_github_url(url)
        analysis = await self._sbom_analyzer.analyze(owner, repo)
        if analysis.raw_sbom_data is None:
            return None
        return self._exporter.export(owner=owner, repo=repo, raw=analysis.raw_sbom_data)
