from __future__ import annotations

from abc import ABC, abstractmethod


class SpeechError(RuntimeError):
    def __init__(self, code: str, message: str, provider_name: str):
        super().__init__(message)
        self.code = code
        self.message = message
        self.provider_name = provider_name


class SpeechToText(ABC):
    @abstractmethod
    def transcribe(self, audio: bytes, *, filename: str = "audio.webm", language: str = "ja") -> str: ...

    @abstractmethod
    def name(self) -> str: ...


class TextToSpeech(ABC):
    @abstractmethod
    def synthesize(
        self,
        text: str,
        *,
        voice: str = "ja-JP-1",
        speed: float = 1.0,
        pitch: float = 1.0,
    ) -> bytes: ...

    @abstractmethod
    def name(self) -> str: ...
