from __future__ import annotations

import json
from collections import Counter
from typing import Any, Mapping, Optional

from ..domain.exceptions import ComplianceCheckError
from ..domain.licenses import classify_copyleft
from ..domain.models import DependencyAnalysis, DependencyLicense, SbomAnalysis
from ..ports import GitHubPort, LoggerPort, SbomCachePort
from .content import fetch_text


def process_sbom(payload: Any) -> SbomAnalysis:
    """Turn a dependency-graph SBOM document into counts.

    Malformed documents give an empty analysis that still carries the raw
    payload.
    """
    document = payload.get("sbom", payload) if isinstance(payload, Mapping) else None
    packages = document.get("packages") if isinstance(document, Mapping) else None
    if not isinstance(packages, list):
        return SbomAnalysis(raw_sbom_data=payload)

    breakdown: Counter[str] = Counter()
    dependencies: list[DependencyLicense] = []
    for pkg in packages:
        if not isinstance(pkg, Mapping):
            pkg = {}
        concluded = pkg.get("licenseConcluded")
        license_name = concluded if isinstance(concluded, str) and concluded else "Unknown"
        breakdown[license_name] += 1
        if pkg.get("name"):
            dependencies.append(
                DependencyLicense(
                    name=str(pkg["name"]),
                    license=license_name,
                    version=str(pkg.get("versionInfo") or "unknown"),
                )
            )

    return SbomAnalysis(
        mit_count=breakdown.get("MIT", 0),
        sbom_dependencies_count=len(packages),
        license_breakdown=dict(breakdown),
        dependencies=tuple(dependencies),
        raw_sbom_data=payload,
    )


def _copyleft_lists(entries: list[tuple[str, str]]) -> tuple[tuple[str, ...], tuple[str, ...]]:
    gpl: list[str] = []
    agpl: list[str] = []
    for name, license_name in entries:
        bucket = classify_copyleft(license_name)
        if bucket == "gpl":
            gpl.append(f"{name}: {license_name}")
        elif bucket == "agpl":
            agpl.append(f"{name}: {license_name}")
    return tuple(gpl), tuple(agpl)


def dependency_analysis_from_sbom(
    sbom: SbomAnalysis,
    *,
    dependencies_count: Optional[int] = None,
    dev_dependencies_count: Optional[int] = None,
) -> DependencyAnalysis:
    gpl, agpl = _copyleft_lists([(d.name, d.license) for d in sbom.dependencies])
    return DependencyAnalysis(
        total=sbom.sbom_dependencies_count,
        gpl_dependencies=gpl,
        agpl_dependencies=agpl,
        dependencies_count=dependencies_count,
        dev_dependencies_count=dev_dependencies_count,
        mit_count=sbom.mit_count,
        sbom_dependencies_count=sbom.sbom_dependencies_count,
        license_breakdown=dict(sbom.license_breakdown),
        source="sbom",
        raw_sbom_data=sbom.raw_sbom_data,
    )


def analyze_lockfile(content: Mapping[str, Any]) -> DependencyAnalysis:
    """Dependency licensing from a ``package-lock.json`` document."""
    packages = content.get("packages") or content.get("dependencies") or {}
    if not isinstance(packages, Mapping):
        packages = {}

    entries: list[tuple[str, str]] = []
    breakdown: Counter[str] = Counter()
    for key, info in packages.items():
        if key == "":
            continue
        info = info if isinstance(info, Mapping) else {}
        if isinstance(info.get("license"), str):
            license_name = info["license"]
        elif isinstance(info.get("licenses"), list):
            license_name = ", ".join(
                str(item.get("type", item)) if isinstance(item, Mapping) else str(item)
                for item in info["licenses"]
            )
        else:
            license_name = ""
        license_name = license_name or "Unknown"
        breakdown[license_name] += 1
        entries.append((key.replace("node_modules/", ""), license_name))

    gpl, agpl = _copyleft_lists(entries)
    return DependencyAnalysis(
        total=len(entries),
        gpl_dependencies=gpl,
        agpl_dependencies=agpl,
        mit_count=breakdown.get("MIT", 0),
        license_breakdown=dict(breakdown),
        source="lockfile",
    )


def count_package_json(content: Mapping[str, Any]) -> tuple[int, int]:
    """``(dependencies, devDependencies)`` counts from a ``package.json`` document."""
    deps = content.get("dependencies")
    dev = content.get("devDependencies")
    return (
        len(deps) if isinstance(deps, Mapping) else 0,
        len(dev) if isinstance(dev, Mapping) else 0,
    )


class SbomAnalyzer:
    """Fetches and summarizes the dependency-graph SBOM of a repository.

    A 404 (no dependency graph), any other failure and malformed documents
    all give ``SbomAnalysis.empty()``. Only successful fetches are cached.
    """

    def __init__(
        self,
        *,
        github: GitHubPort,
        logger: LoggerPort,
        cache: Optional[SbomCachePort] = None,
        max_retries: Optional[int] = None,
    ) -> None:
        self._github = github
        self._logger = logger
        self._cache = cache
        self._max_retries = max_retries

    async def analyze(self, owner: str, repo: str) -> SbomAnalysis:
        if self._cache is not None:
            cached = self._cache.get(owner, repo)
            if cached is not None:
                self._logger.info("sbom_cache_hit", owner=owner, repo=repo)
                return cached

        url = self._github.api_url(f"/repos/{owner}/{repo}/dependency-graph/sbom")
        try:
            response = await self._github.request(url, max_retries=self._max_retries)
        except ComplianceCheckError as e:
            self._logger.warning("sbom_fetch_failed", owner=owner, repo=repo, error=str(e))
            return SbomAnalysis.empty()

        if response.status_code == 404:
            self._logger.info("sbom_unavailable", owner=owner, repo=repo)
            return SbomAnalysis.empty()
        if not response.ok:
            self._logger.warning("sbom_fetch_failed", owner=owner, repo=repo, status_code=response.status_code)
            return SbomAnalysis.empty()

        try:
            payload = response.json()
        except ValueError:
            self._logger.warning("sbom_malformed", owner=owner, repo=repo)
            return SbomAnalysis.empty()

        try:
            analysis = process_sbom(payload)
        except (TypeError, AttributeError, ValueError) as e:
            self._logger.warning("sbom_malformed", owner=owner, repo=repo, error=repr(e))
            return SbomAnalysis.empty()
        self._logger.info(
            "sbom_analyzed",
            owner=owner,
            repo=repo,
            sbom_dependencies_count=analysis.sbom_dependencies_count,
            mit_count=analysis.mit_count,
        )
        if self._cache is not None and analysis.available:
            self._cache.set(owner, repo, analysis)
        return analysis


class ManifestAnalyzer:
    """Fetches ``package.json`` / ``package-lock.json`` and analyzes them.

    Failures return None so the caller can leave the fields out.
    """

    def __init__(self, *, github: GitHubPort, logger: LoggerPort) -> None:
        self._github = github
        self._logger = logger

    async def _load_json(self, url: str) -> Optional[Mapping[str, Any]]:
        try:
            text = await fetch_text(self._github, url)
        except ComplianceCheckError as e:
            self._logger.warning("manifest_fetch_failed", url=url, error=str(e))
            return None
        if text is None:
            return None
        try:
            content = json.loads(text)
        except json.JSONDecodeError:
            self._logger.warning("manifest_malformed", url=url)
            return None
        return content if isinstance(content, Mapping) else None

    async def package_json_counts(self, url: str) -> Optional[tuple[int, int]]:
        content = await self._load_json(url)
        return count_package_json(content) if content is not None else None

    async def lockfile_analysis(self, url: str) -> Optional[DependencyAnalysis]:
        content = await self._load_json(url)
        return analyze_lockfile(content) if content is not None else None
