from __future__ import annotations

from abc import ABC, abstractmethod


class LLMError(RuntimeError):
    def __init__(self, code: str, message: str, provider_name: str):
        super().__init__(message)
        self.code = code
        self.message = message
        self.provider_name = provider_name


class TextGenerator(ABC):
    @abstractmethod
    def generate(
        self,
        system_prompt: str,
        user_prompt: str,
        *,
        max_tokens: int = 500,
        temperature: float = 0.7,
    ) -> str: ...

    @abstractmethod
    def name(self) -> str: ...
