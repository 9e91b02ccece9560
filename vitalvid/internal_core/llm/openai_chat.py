from __future__ import annotations

from typing import Optional

from openai import OpenAI, OpenAIError

from .base import LLMError, TextGenerator


class OpenAIChatGenerator(TextGenerator):
    def __init__(
        self,
        api_key: str,
        model: str = "gpt-4",
        *,
        base_url: Optional[str] = None,
        timeout_sec: float = 60.0,
        client: Optional[OpenAI] = None,
    ):
        if client is None and not api_key:
            raise LLMError("OPENAI_KEY_MISSING", "OPENAI_API_KEY is not set", "openai")
        self._model = model
        self._client = client or OpenAI(api_key=api_key, base_url=base_url, timeout=timeout_sec)

    def name(self) -> str:
        return "openai"

    def generate(
        self,
        system_prompt: str,
        user_prompt: str,
        *,
        max_tokens: int = 500,
        temperature: float = 0.7,
    ) -> str:
        try:
            completion = self._client.chat.completions.create(
                model=self._model,
                messages=[
                    {"role": "system", "content": system_prompt},
                    {"role": "user", "content": user_prompt},
                ],
                max_tokens=int(max_tokens),
                temperature=float(temperature),
            )
        except OpenAIError as exc:
            raise LLMError("OPENAI_REQUEST_FAILED", str(exc), self.name()) from exc

        if not completion.choices:
            raise LLMError("OPENAI_EMPTY_CHOICES", "completion returned no choices", self.name())
        return (completion.choices[0].message.content or "").strip()
