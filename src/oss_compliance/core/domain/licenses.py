"""License classification rules shared by every analyzer.

``is_flagged_license`` is the one rule for "requires legal review". The SBOM
breakdown and the lockfile lists both go through it.
"""

from __future__ import annotations

import re
from typing import Literal

Copyleft = Literal["agpl", "gpl", "unknown"]

GITHUB_NOTICE_RE = re.compile(r"[^.!?]*(?:GitHub|GitHub, Inc|GitHub Inc)[^.!?]*[.!?]", re.IGNORECASE)
COPYRIGHT_RE = re.compile(r"Copyright(?:\s+\(c\))?\s+(?:\d{4}(?:-\d{4})?)\s+([^\n.]+)", re.IGNORECASE)

_GNU_TITLES = (
    ("GNU Affero General Public License", "AGPL-3.0"),
    ("GNU Lesser General Public License", "LGPL"),
    ("GNU General Public License", "GPL"),
)


def is_flagged_license(name: str) -> bool:
    """Return True when a dependency license needs legal review.

    Flagged: contains "gpl" but not "lgpl", contains "agpl", or is exactly
    "unknown" (all case-insensitive).
    """
    lowered = name.lower()
    return ("gpl" in lowered and "lgpl" not in lowered) or "agpl" in lowered or lowered == "unknown"


def classify_copyleft(name: str) -> Copyleft | None:
    """Bucket a flagged license. AGPL is reported only as AGPL."""
    if not is_flagged_license(name):
        return None
    lowered = name.lower()
    if "agpl" in lowered:
        return "agpl"
    if lowered == "unknown":
        return "unknown"
    return "gpl"


def classify_license_text(text: str) -> str:
    """Guess the license family from a LICENSE file body."""
    if "MIT License" in text:
        return "MIT"
    if "Apache License" in text:
        return "Apache"
    if "BSD" in text:
        return "BSD"
    # GNU licenses cite each other in their bodies; the title comes first.
    gnu = [(text.find(title), family) for title, family in _GNU_TITLES if title in text]
    if gnu:
        family = min(gnu)[1]
        if family != "GPL":
            return family
        if "version 3" in text:
            return "GPL-3.0"
        if "version 2" in text:
            return "GPL-2.0"
        return "GPL"
    if "Mozilla Public License" in text:
        return "MPL"
    return "Unknown"


def find_github_notice(text: str) -> str | None:
    """First sentence mentioning GitHub, trimmed."""
    match = GITHUB_NOTICE_RE.search(text)
    return match.group(0).strip() if match else None


def find_copyright_holder(text: str) -> str | None:
    match = COPYRIGHT_RE.search(text)
    return match.group(1).strip() if match else None
