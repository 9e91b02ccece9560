from __future__ import annotations

from .base import SpeechError, SpeechToText, TextToSpeech
from .mock import MockSpeechToText, MockTextToSpeech
from .shisa import ShisaASRProvider, ShisaTTSProvider

__all__ = [
    "MockSpeechToText",
    "MockTextToSpeech",
    "ShisaASRProvider",
    "ShisaTTSProvider",
    "SpeechError",
    "SpeechToText",
    "TextToSpeech",
]
