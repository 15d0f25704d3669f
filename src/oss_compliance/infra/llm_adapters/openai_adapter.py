from __future__ import annotations

from openai import OpenAI

from .types import LLMResponse, TokenUsage


class OpenAIJsonAdapter:
    """OpenAI Chat Completions adapter (gpt-4o-mini, gpt-4o, etc.).

    - Requests ``response_format={"type": "json_object"}``
    - The prompt is sent as a single user message
    """

    def __init__(self, model: str, api_key: str) -> None:
        self.model = model
        self._client = OpenAI(api_key=api_key)

    def complete(self, prompt: str, *, max_output_tokens: int = 800) -> LLMResponse:
        response = self._client.chat.completions.create(
            model=self.model,
            messages=[
                {"role": "system", "content": "You answer with a single JSON object."},
                {"role": "user", "content": prompt},
            ],
            response_format={"type": "json_object"},
            max_completion_tokens=max_output_tokens,
        )
        text = ""
        if response.choices:
            text = response.choices[0].message.content or ""

        usage = None
        u = response.usage
        if u is not None:
            iu = u.prompt_tokens
            ou = u.completion_tokens
            tt = u.total_tokens if u.total_tokens is not None else (iu or 0) + (ou or 0)
            usage = TokenUsage(input_tokens=iu, output_tokens=ou, total_tokens=tt)
        return LLMResponse(text=text, usage=usage)
