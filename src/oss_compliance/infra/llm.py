from __future__ import annotations

import asyncio
from typing import Optional

from .llm_adapters import get_adapter
from ..core.ports import LoggerPort


class LLMTextAnalyzer:
    """Text analyzer backed by a hosted LLM.

    The provider SDKs are synchronous, so each call runs in a worker thread.
    """

    def __init__(self, *, provider: str, model: str, api_key: str, logger: LoggerPort) -> None:
        self._provider = provider
        self._model = model
        self._api_key = api_key
        self._logger = logger

    async def analyze(self, prompt: str) -> str:
        return await asyncio.to_thread(self._call, prompt)

    def _call(self, prompt: str) -> str:
        self._logger.info(
            "llm_input",
            provider=self._provider,
            model=self._model,
            prompt_len=len(prompt),
        )

        adapter = get_adapter(self._provider, self._model, self._api_key)
        resp = adapter.complete(prompt)
        text = resp.text

        usage = resp.usage
        if usage is not None:
            self._logger.info(
                "llm_usage",
                provider=self._provider,
                model=self._model,
                input_tokens=usage.input_tokens,
                output_tokens=usage.output_tokens,
                total_tokens=usage.total_tokens,
            )

        self._logger.info(
            "llm_output",
            provider=self._provider,
            model=self._model,
            raw_text_len=len(text),
            raw_text=text,
        )
        return text


def build_text_analyzer(
    *,
    provider: str,
    model: str,
    api_key: Optional[str],
    logger: LoggerPort,
) -> Optional[LLMTextAnalyzer]:
    """Analyzer for the configured provider, or None when no API key is set."""
    if not api_key:
        logger.info("llm_disabled", reason="no_api_key")
        return None
    return LLMTextAnalyzer(provider=provider, model=model, api_key=api_key, logger=logger)
