from __future__ import annotations

from .anthropic_adapter import AnthropicJsonAdapter
from .interface import JsonCompletionAdapter
from .openai_adapter import OpenAIJsonAdapter


def get_adapter(provider: str, model: str, api_key: str) -> JsonCompletionAdapter:
    """Factory that returns an adapter for the requested provider/model."""
    if provider == "openai":
        return OpenAIJsonAdapter(model, api_key)
    if provider == "anthropic":
        return AnthropicJsonAdapter(model, api_key)
    raise ValueError("provider must be 'openai' or 'anthropic'")
