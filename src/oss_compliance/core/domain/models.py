from __future__ import annotations

from dataclasses import dataclass, field, replace
from datetime import datetime, timezone
from typing import Any, Literal, Mapping

from .licenses import is_flagged_license

Status = Literal["success", "warning", "error"]
Location = Literal["repo", "org", "none"]
Rating = Literal["great", "good", "poor", "missing"]

RATINGS: tuple[str, ...] = ("great", "good", "poor", "missing")


@dataclass(frozen=True)
class Requirement:
    """A well-known file (or pseudo-check) the repository is validated against.

    ``kind="check"`` entries have no filesystem path; they reserve a slot in
    the result map that deferred probes fill in.
    """
    path: str
    required: bool
    description: str
    kind: Literal["file", "check"] = "file"


@dataclass(frozen=True)
class RepoFile:
    name: str
    path: str
    type: str  # "file" | "dir"
    size: int | None = None
    download_url: str | None = None

    @classmethod
    def from_api(cls, item: Mapping[str, Any]) -> "RepoFile":
        return cls(
            name=str(item.get("name", "")),
            path=str(item.get("path", "")),
            type=str(item.get("type", "file")),
            size=item.get("size"),
            download_url=item.get("download_url"),
        )


@dataclass(frozen=True)
class RateLimitInfo:
    limit: int
    remaining: int
    reset: int  # epoch seconds

    @property
    def reset_at(self) -> datetime:
        return datetime.fromtimestamp(self.reset, tz=timezone.utc)

    @classmethod
    def from_headers(cls, headers: Mapping[str, str]) -> "RateLimitInfo | None":
        """Parse ``X-RateLimit-*`` headers (keys compared case-insensitively)."""
        lowered = {k.lower(): v for k, v in headers.items()}
        try:
            return cls(
                limit=int(lowered["x-ratelimit-limit"]),
                remaining=int(lowered["x-ratelimit-remaining"]),
                reset=int(lowered["x-ratelimit-reset"]),
            )
        except (KeyError, ValueError):
            return None

    @classmethod
    def from_payload(cls, payload: Mapping[str, Any]) -> "RateLimitInfo | None":
        """Parse the body of ``GET /rate_limit``."""
        core = (payload.get("resources") or {}).get("core") or payload.get("rate")
        if not isinstance(core, Mapping):
            return None
        try:
            return cls(limit=int(core["limit"]), remaining=int(core["remaining"]), reset=int(core["reset"]))
        except (KeyError, TypeError, ValueError):
            return None


@dataclass(frozen=True)
class LicenseCheck:
    is_valid: bool
    message: str
    license_name: str | None = None
    copyright_holder: str | None = None


@dataclass(frozen=True)
class DependencyLicense:
    name: str
    license: str
    version: str


@dataclass(frozen=True)
class SbomAnalysis:
    """Output of the SBOM analyzer.

    ``license_breakdown`` counts always sum to ``sbom_dependencies_count``.
    """
    mit_count: int = 0
    sbom_dependencies_count: int = 0
    license_breakdown: dict[str, int] = field(default_factory=dict)
    dependencies: tuple[DependencyLicense, ...] = ()
    raw_sbom_data: Any = None

    @classmethod
    def empty(cls) -> "SbomAnalysis":
        return cls()

    @property
    def available(self) -> bool:
        return self.sbom_dependencies_count > 0

    def to_dict(self) -> dict[str, Any]:
        return {
            "mit_count": self.mit_count,
            "sbom_dependencies_count": self.sbom_dependencies_count,
            "license_breakdown": dict(self.license_breakdown),
            "dependencies": [
                {"name": d.name, "license": d.license, "version": d.version} for d in self.dependencies
            ],
            "raw_sbom_data": self.raw_sbom_data,
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "SbomAnalysis":
        deps = tuple(
            DependencyLicense(name=d["name"], license=d["license"], version=d.get("version", "unknown"))
            for d in data.get("dependencies") or []
        )
        return cls(
            mit_count=int(data.get("mit_count", 0)),
            sbom_dependencies_count=int(data.get("sbom_dependencies_count", 0)),
            license_breakdown={str(k): int(v) for k, v in (data.get("license_breakdown") or {}).items()},
            dependencies=deps,
            raw_sbom_data=data.get("raw_sbom_data"),
        )


@dataclass(frozen=True)
class DependencyAnalysis:
    """Aggregate dependency-license picture for one result entry.

    Counts of GPL/AGPL dependencies are derived from the lists so they can
    never disagree.
    """
    total: int = 0
    gpl_dependencies: tuple[str, ...] = ()
    agpl_dependencies: tuple[str, ...] = ()
    dependencies_count: int | None = None
    dev_dependencies_count: int | None = None
    mit_count: int | None = None
    sbom_dependencies_count: int | None = None
    license_breakdown: dict[str, int] | None = None
    source: Literal["sbom", "lockfile", "manifest", "none"] = "none"
    raw_sbom_data: Any = None

    @property
    def gpl_count(self) -> int:
        return len(self.gpl_dependencies)

    @property
    def agpl_count(self) -> int:
        return len(self.agpl_dependencies)

    @property
    def flagged_licenses(self) -> list[str]:
        return [name for name in (self.license_breakdown or {}) if is_flagged_license(name)]

    @property
    def has_copyleft(self) -> bool:
        return bool(self.gpl_dependencies or self.agpl_dependencies or self.flagged_licenses)

    def to_dict(self) -> dict[str, Any]:
        return {
            "total": self.total,
            "gpl_count": self.gpl_count,
            "agpl_count": self.agpl_count,
            "gpl_dependencies": list(self.gpl_dependencies),
            "agpl_dependencies": list(self.agpl_dependencies),
            "dependencies_count": self.dependencies_count,
            "dev_dependencies_count": self.dev_dependencies_count,
            "mit_count": self.mit_count,
            "sbom_dependencies_count": self.sbom_dependencies_count,
            "license_breakdown": self.license_breakdown,
            "has_copyleft": self.has_copyleft,
            "source": self.source,
        }


@dataclass(frozen=True)
class DescriptionRating:
    text: str
    rating: Rating
    feedback: str | None = None


@dataclass(frozen=True)
class SecurityFeatures:
    secret_scanning_enabled: bool
    dependabot_security_updates_enabled: bool
    codeql_enabled: bool

    @property
    def all_enabled(self) -> bool:
        return self.secret_scanning_enabled and self.dependabot_security_updates_enabled and self.codeql_enabled

    @property
    def any_enabled(self) -> bool:
        return self.secret_scanning_enabled or self.dependabot_security_updates_enabled or self.codeql_enabled


@dataclass(frozen=True)
class TelemetryCheck:
    contains_telemetry: bool
    telemetry_files: tuple[str, ...] = ()


@dataclass(frozen=True)
class OwnershipProperty:
    exists: bool
    name: str | None = None
    property_name: str | None = None


@dataclass(frozen=True)
class InternalReferenceScan:
    contains_internal_refs: bool
    issues: tuple[str, ...] = ()


@dataclass(frozen=True)
class ValidationResult:
    exists: bool
    message: str
    status: Status
    location: Location = "none"
    file_url: str | None = None
    pr_url: str | None = None
    license_check: LicenseCheck | None = None
    dependency_analysis: DependencyAnalysis | None = None
    security_features: SecurityFeatures | None = None
    telemetry_check: TelemetryCheck | None = None
    ownership_property: OwnershipProperty | None = None
    internal_references: tuple[str, ...] | None = None


@dataclass(frozen=True)
class ValidationSummary:
    """Immutable snapshot of one validation run.

    Missing counters are computed from ``results`` so they always agree with
    the entries they describe.
    """
    repo_name: str
    repo_url: str
    owner: str
    repo: str
    results: Mapping[str, ValidationResult] = field(default_factory=dict)
    description_rating: DescriptionRating | None = None
    notices: tuple[str, ...] = ()

    @property
    def missing_required(self) -> int:
        return sum(1 for r in self.results.values() if r.status == "error")

    @property
    def missing_recommended(self) -> int:
        return sum(1 for r in self.results.values() if r.status == "warning" and r.location == "none")

    def with_result(self, path: str, result: ValidationResult) -> "ValidationSummary":
        results = dict(self.results)
        results[path] = result
        return replace(self, results=results)

    def with_notice(self, notice: str) -> "ValidationSummary":
        return replace(self, notices=self.notices + (notice,))

    def ordered_results(self) -> list[tuple[str, ValidationResult]]:
        """Results in display priority: dependency-analysis, LICENSE, then alphabetical."""
        def key(item: tuple[str, ValidationResult]) -> tuple[int, str]:
            path = item[0]
            if path == "dependency-analysis":
                return (0, "")
            if path == "LICENSE":
                return (1, "")
            return (2, path)

        return sorted(self.results.items(), key=key)


@dataclass(frozen=True)
class ResultPatch:
    """One deferred check outcome, tagged with the run that produced it."""
    generation: int
    path: str
    result: ValidationResult
