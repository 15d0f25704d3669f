from __future__ import annotations

import re

from .exceptions import InvalidRepoUrlError

_GITHUB_URL_RE = re.compile(r"github\.com/([^/]+)/([^/]+)", re.IGNORECASE)


def parse_github_url(url: str) -> tuple[str, str]:
    """Extract ``(owner, repo)`` from a GitHub URL.

    A trailing ``.git`` is stripped, as is any query string or fragment
    glued to the repo segment.

    Raises:
        InvalidRepoUrlError: If the string does not contain ``github.com/<owner>/<repo>``
    """
    match = _GITHUB_URL_RE.search(url.strip())
    if match is None:
        raise InvalidRepoUrlError(url)
    owner, repo = match.group(1), match.group(2)
    repo = re.split(r"[?#]", repo, maxsplit=1)[0]
    if repo.endswith(".git"):
        repo = repo[: -len(".git")]
    if not owner or not repo:
        raise InvalidRepoUrlError(url)
    return owner, repo
