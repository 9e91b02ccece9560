from __future__ import annotations

from .base import TextGenerator


class MockTextGenerator(TextGenerator):
    def __init__(self, reply: str = "") -> None:
        self._reply = reply
        self._counter = 0

    def generate(
        self,
        system_prompt: str,
        user_prompt: str,
        *,
        max_tokens: int = 500,
        temperature: float = 0.7,
    ) -> str:
        self._counter += 1
        if self._reply:
            return self._reply
        return f"(mock) simulated narration {self._counter}."

    def name(self) -> str:
        return "mock"
