from .types import Provider, TokenUsage, LLMResponse
from .interface import JsonCompletionAdapter
from .openai_adapter import OpenAIJsonAdapter
from .anthropic_adapter import AnthropicJsonAdapter
from .factory import get_adapter

__all__ = [
    "Provider",
    "TokenUsage",
    "LLMResponse",
    "JsonCompletionAdapter",
    "OpenAIJsonAdapter",
    "AnthropicJsonAdapter",
    "get_adapter",
]
