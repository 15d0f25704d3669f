from __future__ import annotations

import asyncio
from dataclasses import dataclass, field, replace
from typing import Any, Awaitable, Callable, Mapping, Optional, Sequence

from ..domain.exceptions import ComplianceCheckError, RateLimitExceededError
from ..domain.models import (
    DependencyAnalysis,
    RepoFile,
    Requirement,
    ResultPatch,
    ValidationResult,
    ValidationSummary,
)
from ..domain.requirements import (
    DEFAULT_REQUIREMENTS,
    DEFERRED_CHECKS,
    DEPENDENCY_ANALYSIS,
    INTERNAL_REFERENCES_CHECK,
    OWNERSHIP_PROPERTY_CHECK,
    SECURITY_FEATURES_CHECK,
    TELEMETRY_CHECK,
)
from ..domain.url import parse_github_url
from ..ports import GitHubPort, LoggerPort
from . import results
from .license_analyzer import LicenseAnalyzer
from .presence_checker import FilePresenceChecker
from .probes import RepositoryProbes
from .rate_limits import RateLimitTracker
from .rating import DescriptionRater
from .sbom_analyzer import ManifestAnalyzer, SbomAnalyzer, dependency_analysis_from_sbom
from .summary_store import SummaryStore

Sleep = Callable[[float], Awaitable[None]]

LOW_QUOTA_NOTICE = (
    "GitHub API rate limit is low ({remaining} of {limit} requests remaining). "
    "Detailed checks will be skipped."
)
DEFERRED_SKIPPED_NOTICE = "Detailed checks were skipped to conserve GitHub API rate limit."


@dataclass
class RunContext:
    """What the initial phase learned, handed to the deferred phase."""
    generation: int
    owner: str
    repo: str
    branch: str
    repo_payload: Mapping[str, Any]
    root_files: list[RepoFile]
    summary: ValidationSummary
    skip_deferred: bool = False
    notices: list[str] = field(default_factory=list)


@dataclass(frozen=True)
class _Probe:
    requirement: Requirement
    run: Callable[[], Awaitable[Any]]
    to_result: Callable[[Any], ValidationResult]


class ValidationOrchestrator:
    """Runs one repository validation in two phases.

    ``run_initial`` does the blocking checks (listing, file presence, license,
    dependencies, description) and publishes a summary; only its failures
    abort the run. ``run_deferred`` runs the best-effort probes and patches
    one result key per probe into the published summary.
    """

    def __init__(
        self,
        *,
        github: GitHubPort,
        rate_limits: RateLimitTracker,
        store: SummaryStore,
        logger: LoggerPort,
        license_analyzer: LicenseAnalyzer,
        sbom_analyzer: SbomAnalyzer,
        manifest_analyzer: ManifestAnalyzer,
        description_rater: DescriptionRater,
        probes: RepositoryProbes,
        requirements: Sequence[Requirement] = DEFAULT_REQUIREMENTS,
        low_water_mark: int = 15,
        parallel_threshold: int = 100,
        start_delay_seconds: float = 0.1,
        inter_probe_delay_seconds: float = 1.0,
        sleep: Sleep = asyncio.sleep,
    ) -> None:
        self._github = github
        self._rate_limits = rate_limits
        self._store = store
        self._logger = logger
        self._license_analyzer = license_analyzer
        self._sbom_analyzer = sbom_analyzer
        self._manifest_analyzer = manifest_analyzer
        self._description_rater = description_rater
        self._probes = probes
        self._requirements = tuple(requirements)
        self._low_water_mark = low_water_mark
        self._parallel_threshold = parallel_threshold
        self._start_delay = start_delay_seconds
        self._inter_probe_delay = inter_probe_delay_seconds
        self._sleep = sleep

    async def run_initial(self, url: str) -> RunContext:
        """Phase 1.

        Raises:
            InvalidRepoUrlError: Bad URL
            RateLimitExceededError: No quota left before any data was fetched
            GitHubApiError: Repository or listing fetch failed
            GitHubConnectionError: GitHub unreachable
        """
        owner, repo = parse_github_url(url)
        generation = self._store.begin()
        self._logger.info("run_started", owner=owner, repo=repo, generation=generation)

        try:
            return await self._run_initial(generation, owner, repo)
        except ComplianceCheckError as e:
            self._logger.error(
                "run_failed",
                owner=owner,
                repo=repo,
                error=str(e),
                error_type=type(e).__name__,
                retryable=e.retryable,
            )
            raise

    async def _run_initial(self, generation: int, owner: str, repo: str) -> RunContext:
        notices: list[str] = []
        skip_deferred = await self._preflight(owner, repo, notices)

        repo_payload = await self._github.get_json(self._github.api_url(f"/repos/{owner}/{repo}"))
        listing = await self._github.get_json(self._github.api_url(f"/repos/{owner}/{repo}/contents"))
        root_files = [RepoFile.from_api(item) for item in listing if isinstance(item, Mapping)] if isinstance(listing, list) else []
        branch = str(repo_payload.get("default_branch") or "main")
        self._logger.info("repo_fetched", owner=owner, repo=repo, file_count=len(root_files), branch=branch)

        checker = FilePresenceChecker(github=self._github, logger=self._logger, owner=owner, repo=repo, branch=branch)
        found: dict[str, tuple[ValidationResult, Optional[RepoFile]]] = {}
        for req in self._requirements:
            result, match = await checker.check(req, root_files)
            if req.path == "LICENSE" and match is not None:
                check = await self._license_analyzer.check(self._content_url(owner, repo, result, match))
                result = results.with_license_check(result, req, check)
            found[req.path] = (result, match)

        analysis = await self._dependency_analysis(owner, repo, found)
        result_map = {path: result for path, (result, _) in found.items()}
        package_json = found.get("package.json")
        if package_json is not None and package_json[1] is not None and analysis is not None:
            req = next(r for r in self._requirements if r.path == "package.json")
            result_map["package.json"] = results.with_dependency_analysis(package_json[0], req, analysis)
        result_map[DEPENDENCY_ANALYSIS] = results.dependency_summary(analysis)

        rating = await self._description_rater.rate(repo_payload.get("description"))

        summary = ValidationSummary(
            repo_name=str(repo_payload.get("full_name") or f"{owner}/{repo}"),
            repo_url=str(repo_payload.get("html_url") or f"https://github.com/{owner}/{repo}"),
            owner=owner,
            repo=repo,
            results=result_map,
            description_rating=rating,
            notices=tuple(notices),
        )
        self._store.publish(generation, summary)
        self._logger.info(
            "initial_summary_published",
            owner=owner,
            repo=repo,
            missing_required=summary.missing_required,
            missing_recommended=summary.missing_recommended,
        )
        return RunContext(
            generation=generation,
            owner=owner,
            repo=repo,
            branch=branch,
            repo_payload=repo_payload,
            root_files=root_files,
            summary=summary,
            skip_deferred=skip_deferred,
            notices=notices,
        )

    async def _preflight(self, owner: str, repo: str, notices: list[str]) -> bool:
        """Check quota before the listing fetch. Returns True when Phase 2 should be skipped."""
        info = await self._github.fetch_rate_limit()
        if info is None:
            return False
        if info.remaining <= 0:
            raise RateLimitExceededError(self._github.api_url(f"/repos/{owner}/{repo}"), reset=info.reset)
        if info.remaining < self._low_water_mark:
            self._logger.warning("rate_limit_low", remaining=info.remaining, limit=info.limit, reset=info.reset)
            notices.append(LOW_QUOTA_NOTICE.format(remaining=info.remaining, limit=info.limit))
            return True
        return False

    def _content_url(self, owner: str, repo: str, result: ValidationResult, match: RepoFile) -> str:
        source_repo = ".github" if result.location == "org" else repo
        return self._github.api_url(f"/repos/{owner}/{source_repo}/contents/{match.path}")

    async def _dependency_analysis(
        self,
        owner: str,
        repo: str,
        found: Mapping[str, tuple[ValidationResult, Optional[RepoFile]]],
    ) -> Optional[DependencyAnalysis]:
        def repo_file(path: str) -> Optional[RepoFile]:
            entry = found.get(path)
            if entry is None or entry[1] is None or entry[0].location != "repo":
                return None
            return entry[1]

        counts: Optional[tuple[int, int]] = None
        package_json = repo_file("package.json")
        if package_json is not None:
            counts = await self._manifest_analyzer.package_json_counts(
                self._github.api_url(f"/repos/{owner}/{repo}/contents/{package_json.path}")
            )
        deps_count, dev_count = counts if counts is not None else (None, None)

        sbom = await self._sbom_analyzer.analyze(owner, repo)
        if sbom.available:
            return dependency_analysis_from_sbom(sbom, dependencies_count=deps_count, dev_dependencies_count=dev_count)

        lockfile = repo_file("package-lock.json")
        if lockfile is not None:
            analysis = await self._manifest_analyzer.lockfile_analysis(
                self._github.api_url(f"/repos/{owner}/{repo}/contents/{lockfile.path}")
            )
            if analysis is not None:
                return replace(analysis, dependencies_count=deps_count, dev_dependencies_count=dev_count)

        if counts is not None:
            return DependencyAnalysis(
                total=deps_count + dev_count,
                dependencies_count=deps_count,
                dev_dependencies_count=dev_count,
                source="manifest",
            )
        return None

    def _deferred_probes(self, ctx: RunContext) -> list[_Probe]:
        checks = {req.path: req for req in DEFERRED_CHECKS}
        probes = [
            _Probe(
                checks[SECURITY_FEATURES_CHECK],
                lambda: self._probes.security_features(ctx.owner, ctx.repo, ctx.repo_payload),
                results.security_features,
            ),
            _Probe(
                checks[OWNERSHIP_PROPERTY_CHECK],
                lambda: self._probes.ownership(ctx.owner, ctx.repo),
                results.ownership,
            ),
        ]
        if self._probes.can_scan_internal_references:
            probes.append(
                _Probe(
                    checks[INTERNAL_REFERENCES_CHECK],
                    lambda: self._probes.internal_references(
                        ctx.owner, ctx.repo, description=str(ctx.repo_payload.get("description") or "")
                    ),
                    results.internal_references,
                )
            )
        probes.append(
            _Probe(
                checks[TELEMETRY_CHECK],
                lambda: self._probes.telemetry(ctx.owner, ctx.repo, branch=ctx.branch, root_files=ctx.root_files),
                results.telemetry,
            )
        )
        return probes

    async def run_deferred(self, ctx: RunContext) -> Optional[ValidationSummary]:
        """Phase 2. Never raises for probe failures.

        Returns:
            The store snapshot after the phase, or None if this run was
            superseded
        """
        if not self._store.is_current(ctx.generation):
            return None
        if ctx.skip_deferred:
            self._logger.info("deferred_skipped", owner=ctx.owner, repo=ctx.repo, reason="preflight")
            return self._store.snapshot()

        await self._sleep(self._start_delay)
        if not self._store.is_current(ctx.generation):
            return None
        if self._rate_limits.is_below(self._low_water_mark):
            self._logger.warning(
                "deferred_skipped",
                owner=ctx.owner,
                repo=ctx.repo,
                reason="rate_limit",
                remaining=self._rate_limits.remaining(),
            )
            self._store.add_notice(ctx.generation, DEFERRED_SKIPPED_NOTICE)
            return self._store.snapshot()

        probes = self._deferred_probes(ctx)
        remaining = self._rate_limits.remaining()
        parallel = remaining is not None and remaining >= self._parallel_threshold
        self._logger.info("deferred_started", owner=ctx.owner, repo=ctx.repo, parallel=parallel, probe_count=len(probes))

        if parallel:
            outcomes = await asyncio.gather(*(p.run() for p in probes), return_exceptions=True)
            for probe, outcome in zip(probes, outcomes):
                self._patch(ctx, probe, outcome)
        else:
            for index, probe in enumerate(probes):
                if index:
                    await self._sleep(self._inter_probe_delay)
                if not self._store.is_current(ctx.generation):
                    return None
                try:
                    outcome = await probe.run()
                except Exception as e:
                    outcome = e
                self._patch(ctx, probe, outcome)

        if not self._store.is_current(ctx.generation):
            return None
        self._logger.info("deferred_finished", owner=ctx.owner, repo=ctx.repo)
        return self._store.snapshot()

    def _patch(self, ctx: RunContext, probe: _Probe, outcome: Any) -> None:
        req = probe.requirement
        if isinstance(outcome, BaseException):
            self._logger.warning(
                "probe_failed",
                check=req.path,
                error=str(outcome),
                error_type=type(outcome).__name__,
            )
            result = results.probe_failed(req)
        else:
            result = probe.to_result(outcome)
            self._logger.info("probe_completed", check=req.path, status=result.status)

        if not self._store.apply(ResultPatch(generation=ctx.generation, path=req.path, result=result)):
            self._logger.debug("stale_patch_dropped", check=req.path, generation=ctx.generation)
