"""CLI output formatting utilities for human-readable display."""

from __future__ import annotations

from typing import Any

from ..core.domain.models import RateLimitInfo, ValidationResult, ValidationSummary
from ..shared.to_jsonable import to_jsonable

_STATUS_MARK = {"success": "[ok]", "warning": "[warn]", "error": "[missing]"}


def summary_to_dict(summary: ValidationSummary, *, include_raw_sbom: bool = False) -> dict[str, Any]:
    """JSON-ready view of a summary, results in display order.

    The raw SBOM payload is left out unless asked for.
    """
    exclude = frozenset() if include_raw_sbom else frozenset({"raw_sbom_data"})
    data = {
        "repo_name": summary.repo_name,
        "repo_url": summary.repo_url,
        "owner": summary.owner,
        "repo": summary.repo,
        "missing_required": summary.missing_required,
        "missing_recommended": summary.missing_recommended,
        "description_rating": to_jsonable(summary.description_rating, exclude),
        "notices": list(summary.notices),
        "results": {},
    }
    for path, result in summary.ordered_results():
        entry = to_jsonable(result, exclude)
        if result.dependency_analysis is not None:
            entry["dependency_analysis"] = result.dependency_analysis.to_dict()
            if include_raw_sbom:
                entry["dependency_analysis"]["raw_sbom_data"] = to_jsonable(result.dependency_analysis.raw_sbom_data)
        data["results"][path] = entry
    return data


def _detail_lines(result: ValidationResult) -> list[str]:
    lines: list[str] = []
    if result.license_check is not None:
        lc = result.license_check
        if lc.license_name:
            lines.append(f"license: {lc.license_name}")
        if lc.copyright_holder:
            lines.append(f"copyright holder: {lc.copyright_holder}")
        if lc.is_valid:
            lines.append(f"notice: {lc.message}")
    if result.dependency_analysis is not None:
        da = result.dependency_analysis
        lines.append(f"dependencies: {da.total} (source: {da.source})")
        if da.dependencies_count is not None:
            lines.append(f"package.json: {da.dependencies_count} deps, {da.dev_dependencies_count} dev deps")
        if da.license_breakdown:
            top = sorted(da.license_breakdown.items(), key=lambda kv: (-kv[1], kv[0]))[:8]
            lines.append("licenses: " + ", ".join(f"{name} ({count})" for name, count in top))
        for dep in (*da.gpl_dependencies, *da.agpl_dependencies):
            lines.append(f"review: {dep}")
        for name in da.flagged_licenses:
            if name.lower() == "unknown":
                lines.append(f"review: {da.license_breakdown[name]} dependencies with unknown license")
    if result.security_features is not None:
        sf = result.security_features
        lines.append(
            "secret scanning: {}, dependabot security updates: {}, codeql: {}".format(
                "on" if sf.secret_scanning_enabled else "off",
                "on" if sf.dependabot_security_updates_enabled else "off",
                "on" if sf.codeql_enabled else "off",
            )
        )
    if result.telemetry_check is not None and result.telemetry_check.telemetry_files:
        lines.extend(f"telemetry: {f}" for f in result.telemetry_check.telemetry_files)
    if result.internal_references:
        lines.extend(f"issue: {i}" for i in result.internal_references)
    if result.pr_url:
        lines.append(f"create: {result.pr_url}")
    elif result.file_url:
        lines.append(f"view: {result.file_url}")
    return lines


def format_summary(summary: ValidationSummary) -> str:
    """Format a validation summary for human-readable CLI output.

    Args:
        summary: Validation summary

    Returns:
        Formatted string for display
    """
    lines = []
    lines.append("=" * 80)
    lines.append(f"COMPLIANCE REPORT: {summary.repo_name}")
    lines.append("=" * 80)
    lines.append(f"\nRepository: {summary.repo_url}")
    lines.append(
        f"Missing required: {summary.missing_required} | Missing recommended: {summary.missing_recommended}"
    )

    rating = summary.description_rating
    if rating is not None:
        lines.append(f"Description: {rating.rating.upper()}")
        if rating.feedback:
            lines.append(f"  {rating.feedback}")

    for notice in summary.notices:
        lines.append(f"Notice: {notice}")

    lines.append("\n" + "-" * 80)
    lines.append("CHECKS")
    lines.append("-" * 80)

    for path, result in summary.ordered_results():
        mark = _STATUS_MARK.get(result.status, result.status)
        lines.append(f"\n{mark} {path}: {result.message}")
        for detail in _detail_lines(result):
            lines.append(f"    {detail}")

    lines.append("\n" + "=" * 80)

    return "\n".join(lines)


def format_rate_limit(info: RateLimitInfo | None) -> str:
    if info is None:
        return "Rate limit information unavailable."
    return (
        f"GitHub API: {info.remaining}/{info.limit} requests remaining, "
        f"resets at {info.reset_at:%Y-%m-%d %H:%M:%S} UTC"
    )
