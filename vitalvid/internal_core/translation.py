from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Sequence

import requests

from .shisa_http import error_detail, shisa_post


class TranslationError(RuntimeError):
    def __init__(self, code: str, message: str):
        super().__init__(message)
        self.code = code
        self.message = message


class Translator(ABC):
    @abstractmethod
    def translate(self, text: str, *, source_lang: str = "ja", target_lang: str = "en") -> str: ...

    def translate_many(
        self, texts: Sequence[str], *, source_lang: str = "ja", target_lang: str = "en"
    ) -> list[str]:
        return [
            self.translate(text, source_lang=source_lang, target_lang=target_lang)
            for text in texts
        ]


class ShisaTranslator(Translator):
    def __init__(self, api_key: str, api_base: str, *, timeout_sec: float = 30.0):
        self._api_key = api_key
        self._url = f"{api_base.rstrip('/')}/translate"
        self._timeout_sec = float(timeout_sec)

    def translate(self, text: str, *, source_lang: str = "ja", target_lang: str = "en") -> str:
        if source_lang == target_lang or not str(text or "").strip():
            return text
        try:
            response = shisa_post(
                self._url,
                self._api_key,
                timeout_sec=self._timeout_sec,
                json_body={"text": text, "source_lang": source_lang, "target_lang": target_lang},
            )
        except requests.RequestException as exc:
            raise TranslationError("TRANSLATION_REQUEST_FAILED", str(exc)) from exc

        if not response.ok:
            raise TranslationError(
                "TRANSLATION_HTTP_ERROR", f"Translation API error: {error_detail(response)}"
            )
        try:
            payload = response.json()
        except ValueError as exc:
            raise TranslationError("TRANSLATION_INVALID_RESPONSE", "response is not JSON") from exc
        if not isinstance(payload, dict):
            raise TranslationError("TRANSLATION_INVALID_RESPONSE", "response is not an object")
        translated = payload.get("translated_text") or payload.get("text")
        if not translated:
            raise TranslationError("TRANSLATION_EMPTY_OUTPUT", "translation returned no text")
        return str(translated)
