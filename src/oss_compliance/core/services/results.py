"""Factories for ValidationResult.

Status is always derived here from what was observed, never passed in by
callers.
"""

from __future__ import annotations

from urllib.parse import quote

from ..domain.models import (
    DependencyAnalysis,
    InternalReferenceScan,
    LicenseCheck,
    OwnershipProperty,
    Requirement,
    SecurityFeatures,
    TelemetryCheck,
    ValidationResult,
)

GITHUB_WEB = "https://github.com"


def file_url(owner: str, repo: str, path: str, branch: str = "main") -> str:
    return f"{GITHUB_WEB}/{owner}/{repo}/blob/{branch}/{path}"


def org_file_url(owner: str, path: str) -> str:
    return f"{GITHUB_WEB}/{owner}/.github/blob/main/{path}"


def new_file_url(owner: str, repo: str, path: str, branch: str = "main") -> str:
    """GitHub "create new file" page prefilled with ``path``."""
    return f"{GITHUB_WEB}/{owner}/{repo}/new/{branch}?filename={quote(path, safe='')}&value="


def found_in_repo(req: Requirement, *, owner: str, repo: str, path: str, branch: str = "main") -> ValidationResult:
    return ValidationResult(
        exists=True,
        message=f"{req.description} found in repository",
        status="success",
        location="repo",
        file_url=file_url(owner, repo, path, branch),
    )


def found_in_org(req: Requirement, *, owner: str, path: str) -> ValidationResult:
    return ValidationResult(
        exists=True,
        message=f"{req.description} found in organization .github repo",
        status="success",
        location="org",
        file_url=org_file_url(owner, path),
    )


def missing(req: Requirement, *, owner: str, repo: str, branch: str = "main") -> ValidationResult:
    if req.required:
        return ValidationResult(
            exists=False,
            message=f"Required {req.description} is missing",
            status="error",
            location="none",
            pr_url=new_file_url(owner, repo, req.path, branch),
        )
    return ValidationResult(
        exists=False,
        message=f"Recommended {req.description} is missing",
        status="warning",
        location="none",
        pr_url=new_file_url(owner, repo, req.path, branch),
    )


def with_license_check(base: ValidationResult, req: Requirement, check: LicenseCheck) -> ValidationResult:
    """Fold a license analysis into a found-file result."""
    if check.is_valid:
        message, status = base.message, base.status
    else:
        message, status = f"{req.description} found but missing GitHub copyright notice", "warning"
    return ValidationResult(
        exists=base.exists,
        message=message,
        status=status,
        location=base.location,
        file_url=base.file_url,
        pr_url=base.pr_url,
        license_check=check,
    )


def with_dependency_analysis(
    base: ValidationResult, req: Requirement, analysis: DependencyAnalysis
) -> ValidationResult:
    """Fold dependency licensing into a found-manifest result."""
    if analysis.has_copyleft:
        message, status = f"{req.description} found with dependencies that require license review", "warning"
    else:
        message, status = base.message, base.status
    return ValidationResult(
        exists=base.exists,
        message=message,
        status=status,
        location=base.location,
        file_url=base.file_url,
        pr_url=base.pr_url,
        dependency_analysis=analysis,
    )


def dependency_summary(analysis: DependencyAnalysis | None) -> ValidationResult:
    """The ``dependency-analysis`` entry."""
    if analysis is None or analysis.source == "none":
        return ValidationResult(
            exists=False,
            message="No dependency data available",
            status="success",
            location="none",
            dependency_analysis=analysis,
        )
    return ValidationResult(
        exists=True,
        message="Dependency analysis completed",
        status="warning" if analysis.has_copyleft else "success",
        location="repo",
        dependency_analysis=analysis,
    )


def security_features(features: SecurityFeatures) -> ValidationResult:
    if features.all_enabled:
        message, status = "All security features are enabled", "success"
    elif features.any_enabled:
        message, status = "Some security features are enabled, but not all", "warning"
    else:
        message, status = "No security features are enabled", "warning"
    return ValidationResult(
        exists=True,
        message=message,
        status=status,
        location="repo",
        security_features=features,
    )


def ownership(prop: OwnershipProperty) -> ValidationResult:
    return ValidationResult(
        exists=True,
        message=(
            f"Ownership property found: {prop.name}" if prop.exists
            else "No ownership property set for this repository"
        ),
        status="success" if prop.exists else "warning",
        location="repo",
        ownership_property=prop,
    )


def internal_references(scan: InternalReferenceScan) -> ValidationResult:
    return ValidationResult(
        exists=True,
        message=(
            "Found potential internal references or confidential information" if scan.contains_internal_refs
            else "No internal references or confidential information detected"
        ),
        status="warning" if scan.contains_internal_refs else "success",
        location="repo",
        internal_references=scan.issues,
    )


def telemetry(check: TelemetryCheck) -> ValidationResult:
    return ValidationResult(
        exists=True,
        message=(
            "Telemetry/analytics files found in repository" if check.contains_telemetry
            else "No telemetry or analytics files detected"
        ),
        status="warning" if check.contains_telemetry else "success",
        location="repo",
        telemetry_check=check,
    )


def probe_failed(req: Requirement) -> ValidationResult:
    """Placeholder for a deferred check that raised."""
    return ValidationResult(
        exists=False,
        message=f"Unable to check {req.description.lower()}",
        status="warning",
        location="repo",
    )
