from __future__ import annotations

"""
Shisa AI speech endpoints (OpenAI-compatible audio API).

Design intent:
- Raise `SpeechError` with a stable code; callers decide on degradation.
- Never log transcript text or audio bytes.
"""

import mimetypes

import requests

from ..shisa_http import error_detail, shisa_post
from .base import SpeechError, SpeechToText, TextToSpeech


class ShisaASRProvider(SpeechToText):
    def __init__(self, api_key: str, api_base: str, *, model: str = "whisper-1", timeout_sec: float = 30.0):
        self._api_key = api_key
        self._url = f"{api_base.rstrip('/')}/audio/transcriptions"
        self._model = model
        self._timeout_sec = float(timeout_sec)

    def name(self) -> str:
        return "shisa_asr"

    def transcribe(self, audio: bytes, *, filename: str = "audio.webm", language: str = "ja") -> str:
        if not audio:
            raise SpeechError("ASR_EMPTY_AUDIO", "audio payload is empty", self.name())
        mime_type, _ = mimetypes.guess_type(filename)
        try:
            response = shisa_post(
                self._url,
                self._api_key,
                timeout_sec=self._timeout_sec,
                files={"file": (filename, audio, mime_type or "audio/webm")},
                data={"model": self._model, "language": language},
            )
        except requests.Timeout as exc:
            raise SpeechError("ASR_TIMEOUT", str(exc), self.name()) from exc
        except requests.RequestException as exc:
            raise SpeechError("ASR_REQUEST_FAILED", str(exc), self.name()) from exc

        if not response.ok:
            raise SpeechError("ASR_HTTP_ERROR", f"ASR API error: {error_detail(response)}", self.name())
        try:
            payload = response.json()
        except ValueError as exc:
            raise SpeechError("ASR_INVALID_RESPONSE", "ASR response is not JSON", self.name()) from exc
        text = str(payload.get("text") or "").strip() if isinstance(payload, dict) else ""
        if not text:
            raise SpeechError("ASR_EMPTY_OUTPUT", "ASR returned empty text", self.name())
        return text


class ShisaTTSProvider(TextToSpeech):
    def __init__(self, api_key: str, api_base: str, *, model: str = "tts-1", timeout_sec: float = 30.0):
        self._api_key = api_key
        self._url = f"{api_base.rstrip('/')}/audio/speech"
        self._model = model
        self._timeout_sec = float(timeout_sec)

    def name(self) -> str:
        return "shisa_tts"

    def synthesize(
        self,
        text: str,
        *,
        voice: str = "ja-JP-1",
        speed: float = 1.0,
        pitch: float = 1.0,
    ) -> bytes:
        if not str(text or "").strip():
            raise SpeechError("TTS_EMPTY_TEXT", "text is empty", self.name())
        # The speech endpoint has no pitch control; the value is accepted for interface parity.
        try:
            response = shisa_post(
                self._url,
                self._api_key,
                timeout_sec=self._timeout_sec,
                json_body={
                    "model": self._model,
                    "input": text,
                    "voice": voice,
                    "speed": float(speed),
                },
            )
        except requests.Timeout as exc:
            raise SpeechError("TTS_TIMEOUT", str(exc), self.name()) from exc
        except requests.RequestException as exc:
            raise SpeechError("TTS_REQUEST_FAILED", str(exc), self.name()) from exc

        if not response.ok:
            raise SpeechError("TTS_HTTP_ERROR", f"TTS API error: {error_detail(response)}", self.name())
        if not response.content:
            raise SpeechError("TTS_EMPTY_OUTPUT", "TTS returned no audio", self.name())
        return response.content
