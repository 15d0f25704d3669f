from __future__ import annotations

from ..domain.exceptions import ComplianceCheckError
from ..domain.licenses import classify_license_text, find_copyright_holder, find_github_notice
from ..domain.models import LicenseCheck
from ..ports import GitHubPort, LoggerPort
from .content import fetch_text


class LicenseAnalyzer:
    """Checks a LICENSE file for the GitHub copyright notice.

    Never raises: fetch and parse problems become an invalid ``LicenseCheck``.
    """

    def __init__(self, *, github: GitHubPort, logger: LoggerPort) -> None:
        self._github = github
        self._logger = logger

    def analyze_text(self, text: str) -> LicenseCheck:
        license_name = classify_license_text(text)
        holder = find_copyright_holder(text)
        notice = find_github_notice(text)
        if notice is None:
            return LicenseCheck(
                is_valid=False,
                message="License does not contain GitHub copyright notice",
                license_name=license_name,
                copyright_holder=holder,
            )
        return LicenseCheck(is_valid=True, message=notice, license_name=license_name, copyright_holder=holder)

    async def check(self, url: str) -> LicenseCheck:
        """Fetch ``url`` (contents API or raw) and analyze it."""
        try:
            text = await fetch_text(self._github, url)
        except ComplianceCheckError as e:
            self._logger.warning("license_fetch_failed", url=url, error=str(e))
            return LicenseCheck(is_valid=False, message="Error analyzing license file")

        if text is None:
            return LicenseCheck(is_valid=False, message="Could not retrieve license content")

        check = self.analyze_text(text)
        self._logger.info(
            "license_analyzed",
            url=url,
            is_valid=check.is_valid,
            license_name=check.license_name,
        )
        return check
