from __future__ import annotations

import json
from pathlib import Path
from typing import Any


def sbom_filename(owner: str, repo: str) -> str:
    return f"{owner}-{repo}-sbom.json"


class SbomExporter:
    """Writes raw SBOM payloads as pretty-printed JSON files."""

    def __init__(self, *, exports_dir: Path) -> None:
        self._exports_dir = exports_dir

    def export(self, *, owner: str, repo: str, raw: Any) -> Path:
        self._exports_dir.mkdir(parents=True, exist_ok=True)
        path = self._exports_dir / sbom_filename(owner, repo)
        path.write_text(json.dumps(raw, indent=2, ensure_ascii=False), encoding="utf-8")
        return path
