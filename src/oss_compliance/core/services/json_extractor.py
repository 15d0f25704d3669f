from __future__ import annotations

import json
from typing import Any, Optional


class JsonExtractor:
    """Domain service for extracting JSON from text-analyzer responses.

    Handles JSON objects that may be wrapped in markdown fences or prose.
    """

    def extract(self, text: str) -> str:
        """Extract the outermost JSON object from text.

        Args:
            text: Raw text potentially containing JSON

        Returns:
            Extracted JSON string (re-serialized), or the original text if
            no parseable object is found
        """
        start = text.find('{')
        end = text.rfind('}')

        if start == -1 or end == -1 or end <= start:
            return text

        try:
            parsed = json.loads(text[start:end + 1])
            return json.dumps(parsed, ensure_ascii=False)
        except json.JSONDecodeError:
            return text

    def parse_object(self, text: str) -> Optional[dict[str, Any]]:
        """Like ``extract`` but returns the decoded dict, or None."""
        try:
            parsed = json.loads(self.extract(text))
        except json.JSONDecodeError:
            return None
        return parsed if isinstance(parsed, dict) else None
