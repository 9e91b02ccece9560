from __future__ import annotations

from pathlib import Path
from typing import Any

from .base import LLMError, TextGenerator


class LlamaCppGenerator(TextGenerator):
    """
    Local GGUF text generation through `llama_cpp`.

    The model is loaded lazily on first use and kept for the process lifetime.
    """

    def __init__(
        self,
        model_path: str,
        *,
        chat_format: str = "gemma",
        n_ctx: int = 2048,
        n_gpu_layers: int = -1,
    ):
        self._model_path = model_path
        self._chat_format = chat_format
        self._n_ctx = int(n_ctx)
        self._n_gpu_layers = int(n_gpu_layers)
        self._llm: Any = None

    def name(self) -> str:
        return "llama_cpp"

    def _load(self) -> Any:
        if self._llm is not None:
            return self._llm
        if not self._model_path or not Path(self._model_path).exists():
            raise LLMError(
                "LLAMA_MODEL_MISSING",
                f"GGUF model not found: {self._model_path or '(unset)'}; set VITALVID_LLAMA_CPP_MODEL",
                self.name(),
            )
        try:
            from llama_cpp import Llama  # type: ignore
        except Exception as exc:
            raise LLMError("LLAMA_IMPORT_FAILED", f"llama_cpp import failed: {exc}", self.name()) from exc

        llm_kwargs: dict[str, Any] = {
            "model_path": self._model_path,
            "n_ctx": self._n_ctx,
            "n_gpu_layers": self._n_gpu_layers,
            "verbose": False,
            "chat_format": self._chat_format,
        }
        try:
            self._llm = Llama(**llm_kwargs)
        except TypeError as exc:
            # Older llama_cpp builds do not accept chat_format.
            if "chat_format" not in str(exc):
                raise LLMError("LLAMA_INIT_FAILED", str(exc), self.name()) from exc
            llm_kwargs.pop("chat_format", None)
            try:
                self._llm = Llama(**llm_kwargs)
            except Exception as retry_exc:
                raise LLMError("LLAMA_INIT_FAILED", str(retry_exc), self.name()) from retry_exc
        except Exception as exc:
            raise LLMError("LLAMA_INIT_FAILED", str(exc), self.name()) from exc
        return self._llm

    def generate(
        self,
        system_prompt: str,
        user_prompt: str,
        *,
        max_tokens: int = 500,
        temperature: float = 0.7,
    ) -> str:
        llm = self._load()
        try:
            resp = llm.create_chat_completion(
                messages=[
                    {"role": "system", "content": system_prompt},
                    {"role": "user", "content": user_prompt},
                ],
                temperature=float(temperature),
                max_tokens=int(max_tokens),
                stop=["<end_of_turn>", "</s>"],
            )
            raw = str(resp["choices"][0]["message"]["content"] or "")
        except Exception as exc:
            raise LLMError("LLAMA_CALL_FAILED", str(exc), self.name()) from exc
        return raw.strip()
