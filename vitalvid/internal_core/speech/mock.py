from __future__ import annotations

from .base import SpeechToText, TextToSpeech


class MockSpeechToText(SpeechToText):
    def __init__(self, transcript: str = "(mock) simulated question.") -> None:
        self._transcript = transcript

    def transcribe(self, audio: bytes, *, filename: str = "audio.webm", language: str = "ja") -> str:
        return self._transcript

    def name(self) -> str:
        return "mock"


class MockTextToSpeech(TextToSpeech):
    def synthesize(
        self,
        text: str,
        *,
        voice: str = "ja-JP-1",
        speed: float = 1.0,
        pitch: float = 1.0,
    ) -> bytes:
        return b"ID3mock" + text.encode("utf-8")[:32]

    def name(self) -> str:
        return "mock"
