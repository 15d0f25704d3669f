from __future__ import annotations

from typing import Protocol, runtime_checkable

from .types import LLMResponse


@runtime_checkable
class JsonCompletionAdapter(Protocol):
    """Minimal interface for a single-prompt completion that answers in JSON."""

    def complete(self, prompt: str, *, max_output_tokens: int = 800) -> LLMResponse:
        """Run one prompt and return normalized text + token usage."""
        raise NotImplementedError
