from __future__ import annotations

import base64
import binascii
import json
from typing import Optional

from ..ports import ApiResponse, GitHubPort


def decode_content_body(text: str) -> str:
    """Decode a contents-API body.

    JSON envelopes with base64 ``content`` are decoded; anything else is
    treated as the raw file text.
    """
    try:
        envelope = json.loads(text)
    except json.JSONDecodeError:
        return text
    if isinstance(envelope, dict) and isinstance(envelope.get("content"), str):
        if envelope.get("encoding", "base64") != "base64":
            return envelope["content"]
        try:
            return base64.b64decode(envelope["content"]).decode("utf-8", errors="replace")
        except (binascii.Error, ValueError):
            return text
    return text


async def fetch_text(github: GitHubPort, url: str, *, max_retries: Optional[int] = None) -> Optional[str]:
    """Fetch a file and return its decoded text, or None for non-2xx."""
    response: ApiResponse = await github.request(url, max_retries=max_retries)
    if not response.ok:
        return None
    return decode_content_body(response.text)
