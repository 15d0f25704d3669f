from __future__ import annotations

import re
from typing import Any, Iterable, Mapping, Optional, Sequence

from ..domain.exceptions import api_error_for
from ..domain.models import (
    InternalReferenceScan,
    OwnershipProperty,
    RepoFile,
    SecurityFeatures,
    TelemetryCheck,
)
from ..ports import ApiResponse, GitHubPort, LoggerPort
from .content import decode_content_body
from .rating import InternalReferenceScanner

TELEMETRY_FILE_RE = re.compile(
    r"(telemetry|analytics|tracking|tracker|mixpanel|amplitude|posthog|"
    r"appinsights|applicationinsights|google-analytics|gtag|heap-?io)",
    re.IGNORECASE,
)
CODEQL_WORKFLOW_RE = re.compile(r"codeql", re.IGNORECASE)


def _enabled(section: Any) -> Optional[bool]:
    if isinstance(section, Mapping) and isinstance(section.get("status"), str):
        return section["status"] == "enabled"
    return None


def find_telemetry_files(paths: Iterable[str]) -> list[str]:
    """Paths whose file name looks like analytics/telemetry code or config."""
    return [p for p in paths if TELEMETRY_FILE_RE.search(p.rsplit("/", 1)[-1])]


class RepositoryProbes:
    """The deferred, best-effort repository checks.

    Each probe raises on failure; the orchestrator turns that into a
    placeholder result.
    """

    def __init__(
        self,
        *,
        github: GitHubPort,
        logger: LoggerPort,
        ownership_property_names: Sequence[str] = ("ownership-name", "ownership_name", "owner"),
        max_retries: Optional[int] = None,
        scanner: Optional[InternalReferenceScanner] = None,
    ) -> None:
        self._github = github
        self._logger = logger
        self._ownership_property_names = tuple(n.lower() for n in ownership_property_names)
        self._max_retries = max_retries
        self._scanner = scanner

    @property
    def can_scan_internal_references(self) -> bool:
        return self._scanner is not None

    async def _get(self, path: str) -> ApiResponse:
        return await self._github.request(self._github.api_url(path), max_retries=self._max_retries)

    async def security_features(self, owner: str, repo: str, repo_payload: Mapping[str, Any]) -> SecurityFeatures:
        analysis = repo_payload.get("security_and_analysis") or {}
        secret_scanning = _enabled(analysis.get("secret_scanning"))
        dependabot = _enabled(analysis.get("dependabot_security_updates"))

        if secret_scanning is None:
            response = await self._get(f"/repos/{owner}/{repo}/secret-scanning/alerts?per_page=1")
            secret_scanning = response.ok

        if dependabot is None:
            response = await self._get(f"/repos/{owner}/{repo}/automated-security-fixes")
            dependabot = bool(response.ok and response.json().get("enabled"))

        codeql = await self._codeql_enabled(owner, repo)
        features = SecurityFeatures(
            secret_scanning_enabled=secret_scanning,
            dependabot_security_updates_enabled=dependabot,
            codeql_enabled=codeql,
        )
        self._logger.info(
            "security_features_checked",
            secret_scanning=features.secret_scanning_enabled,
            dependabot=features.dependabot_security_updates_enabled,
            codeql=features.codeql_enabled,
        )
        return features

    async def _codeql_enabled(self, owner: str, repo: str) -> bool:
        response = await self._get(f"/repos/{owner}/{repo}/code-scanning/default-setup")
        if response.ok and response.json().get("state") == "configured":
            return True

        response = await self._get(f"/repos/{owner}/{repo}/contents/.github/workflows")
        if not response.ok:
            return False
        listing = response.json()
        if not isinstance(listing, list):
            return False
        return any(
            isinstance(item, Mapping) and CODEQL_WORKFLOW_RE.search(str(item.get("name", "")))
            for item in listing
        )

    async def telemetry(
        self, owner: str, repo: str, *, branch: str, root_files: Sequence[RepoFile]
    ) -> TelemetryCheck:
        response = await self._get(f"/repos/{owner}/{repo}/git/trees/{branch}?recursive=1")
        if response.ok:
            tree = response.json().get("tree") or []
            paths = [str(e["path"]) for e in tree if isinstance(e, Mapping) and e.get("type") == "blob" and e.get("path")]
        else:
            self._logger.debug("tree_unavailable", owner=owner, repo=repo, status_code=response.status_code)
            paths = [f.path for f in root_files if f.type == "file"]

        found = find_telemetry_files(paths)
        return TelemetryCheck(contains_telemetry=bool(found), telemetry_files=tuple(found))

    async def ownership(self, owner: str, repo: str) -> OwnershipProperty:
        response = await self._get(f"/repos/{owner}/{repo}/properties/values")
        if response.status_code == 404:
            return OwnershipProperty(exists=False)
        if not response.ok:
            raise api_error_for(response.status_code, response.url, response.text)

        values = response.json()
        for item in values if isinstance(values, list) else []:
            if not isinstance(item, Mapping):
                continue
            prop_name = str(item.get("property_name", ""))
            value = item.get("value")
            if isinstance(value, list):
                value = ", ".join(str(v) for v in value)
            if prop_name.lower() in self._ownership_property_names and value:
                return OwnershipProperty(exists=True, name=str(value), property_name=prop_name)
        return OwnershipProperty(exists=False)

    async def internal_references(self, owner: str, repo: str, *, description: str) -> InternalReferenceScan:
        if self._scanner is None:
            raise RuntimeError("no text analyzer configured")
        response = await self._get(f"/repos/{owner}/{repo}/readme")
        readme = decode_content_body(response.text) if response.ok else ""
        scan = await self._scanner.scan(owner=owner, repo=repo, description=description, readme=readme)
        self._logger.info("internal_references_scanned", contains_internal_refs=scan.contains_internal_refs, issue_count=len(scan.issues))
        return scan
