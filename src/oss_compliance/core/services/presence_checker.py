from __future__ import annotations

from typing import Iterable, Optional, Sequence

from ..domain.exceptions import ComplianceCheckError
from ..domain.models import RepoFile, Requirement, ValidationResult
from ..ports import GitHubPort, LoggerPort
from . import results


def find_file(files: Iterable[RepoFile], path: str) -> Optional[RepoFile]:
    """Case-insensitive exact match on ``path`` (no globbing)."""
    wanted = path.lower()
    for f in files:
        if f.path.lower() == wanted or f.name.lower() == wanted:
            return f
    return None


class FilePresenceChecker:
    """Decides per requirement whether the file exists in the repo root or in
    the organization ``.github`` repository.

    The organization listing is fetched at most once per checker instance;
    any failure while fetching it counts as "not found in org".
    """

    def __init__(self, *, github: GitHubPort, logger: LoggerPort, owner: str, repo: str, branch: str = "main") -> None:
        self._github = github
        self._logger = logger
        self._owner = owner
        self._repo = repo
        self._branch = branch
        self._org_files: Optional[list[RepoFile]] = None

    @property
    def owner(self) -> str:
        return self._owner

    async def org_files(self) -> list[RepoFile]:
        if self._org_files is None:
            self._org_files = await self._load_org_files()
        return self._org_files

    async def _load_org_files(self) -> list[RepoFile]:
        url = self._github.api_url(f"/repos/{self._owner}/.github/contents")
        try:
            response = await self._github.request(url)
            if not response.ok:
                self._logger.debug("org_fallback_unavailable", owner=self._owner, status_code=response.status_code)
                return []
            payload = response.json()
        except (ComplianceCheckError, ValueError) as e:
            self._logger.warning("org_fallback_failed", owner=self._owner, error=str(e))
            return []
        if not isinstance(payload, list):
            return []
        return [RepoFile.from_api(item) for item in payload if isinstance(item, dict)]

    async def check(self, req: Requirement, repo_files: Sequence[RepoFile]) -> tuple[ValidationResult, Optional[RepoFile]]:
        """Check one requirement.

        Returns:
            The result plus the matched file (None when absent everywhere),
            so callers can run content analyzers on it.
        """
        match = find_file(repo_files, req.path)
        if match is not None:
            result = results.found_in_repo(
                req, owner=self._owner, repo=self._repo, path=match.path, branch=self._branch
            )
        else:
            match = find_file(await self.org_files(), req.path)
            if match is not None:
                result = results.found_in_org(req, owner=self._owner, path=match.path)
            else:
                result = results.missing(req, owner=self._owner, repo=self._repo, branch=self._branch)

        self._logger.debug(
            "requirement_checked",
            path=req.path,
            status=result.status,
            location=result.location,
        )
        return result, match
