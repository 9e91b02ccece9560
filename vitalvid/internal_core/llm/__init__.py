from __future__ import annotations

from .base import LLMError, TextGenerator
from .llama_cpp_chat import LlamaCppGenerator
from .mock import MockTextGenerator
from .openai_chat import OpenAIChatGenerator

__all__ = [
    "LLMError",
    "LlamaCppGenerator",
    "MockTextGenerator",
    "OpenAIChatGenerator",
    "TextGenerator",
]
