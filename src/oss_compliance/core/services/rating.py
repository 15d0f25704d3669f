from __future__ import annotations

from typing import Optional

from ..domain.models import RATINGS, DescriptionRating, InternalReferenceScan
from ..domain.prompt import build_description_prompt, build_internal_reference_prompt
from ..ports import LoggerPort, TextAnalyzerPort
from .json_extractor import JsonExtractor


class DescriptionRater:
    """Rates a repository description through the text analyzer.

    An empty description is rated ``missing`` without calling the analyzer.
    Analyzer errors and unusable answers return None (rating omitted).
    """

    def __init__(
        self,
        *,
        analyzer: Optional[TextAnalyzerPort],
        json_extractor: JsonExtractor,
        logger: LoggerPort,
    ) -> None:
        self._analyzer = analyzer
        self._json_extractor = json_extractor
        self._logger = logger

    async def rate(self, description: Optional[str]) -> Optional[DescriptionRating]:
        text = (description or "").strip()
        if not text:
            return DescriptionRating(
                text="Repository has no description",
                rating="missing",
                feedback="Add a clear description explaining the purpose of this repository",
            )
        if self._analyzer is None:
            return None

        try:
            raw = await self._analyzer.analyze(build_description_prompt(description=text))
        except Exception as e:
            self._logger.warning("description_rating_failed", error=str(e))
            return None

        parsed = self._json_extractor.parse_object(raw)
        rating = str(parsed.get("rating", "")).strip().lower() if parsed else ""
        if rating not in RATINGS:
            self._logger.warning("description_rating_unparsable", raw_text=raw)
            return None

        feedback = parsed.get("feedback") if parsed else None
        self._logger.info("description_rated", rating=rating)
        return DescriptionRating(
            text=text,
            rating=rating,  # type: ignore[arg-type]
            feedback=str(feedback) if feedback is not None else None,
        )


class InternalReferenceScanner:
    """Asks the text analyzer whether README/description leak internal details.

    Raises when the analyzer is unavailable or its answer is unusable, so the
    caller records the check as failed instead of as clean.
    """

    def __init__(self, *, analyzer: TextAnalyzerPort, json_extractor: JsonExtractor) -> None:
        self._analyzer = analyzer
        self._json_extractor = json_extractor

    async def scan(self, *, owner: str, repo: str, description: str, readme: str) -> InternalReferenceScan:
        raw = await self._analyzer.analyze(
            build_internal_reference_prompt(owner=owner, repo=repo, description=description, readme=readme)
        )
        parsed = self._json_extractor.parse_object(raw)
        if parsed is None or not isinstance(parsed.get("containsInternalRefs"), bool):
            raise ValueError("text analyzer returned no containsInternalRefs verdict")

        issues = parsed.get("issues") or []
        if not isinstance(issues, list):
            issues = [issues]
        return InternalReferenceScan(
            contains_internal_refs=parsed["containsInternalRefs"],
            issues=tuple(str(i) for i in issues),
        )
