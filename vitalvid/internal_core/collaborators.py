from __future__ import annotations

"""
Resolve external collaborators once from configuration.

Design intent:
- Each optional capability is either a provider instance or None.
- Request handlers check presence; they never read the environment.
"""

import logging
from dataclasses import dataclass
from typing import Optional

from .config import AppConfig
from .llm import LlamaCppGenerator, MockTextGenerator, OpenAIChatGenerator, TextGenerator
from .media import MediaRenderer, MulmoCliRenderer, mulmo_cli_available
from .speech import ShisaASRProvider, ShisaTTSProvider, SpeechToText, TextToSpeech
from .translation import ShisaTranslator, Translator

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Collaborators:
    text_generator: Optional[TextGenerator]
    speech_to_text: Optional[SpeechToText]
    text_to_speech: Optional[TextToSpeech]
    translator: Optional[Translator]
    media_renderer: Optional[MediaRenderer]

    def availability(self) -> dict[str, bool]:
        return {
            "text_generation": self.text_generator is not None,
            "speech_to_text": self.speech_to_text is not None,
            "text_to_speech": self.text_to_speech is not None,
            "translation": self.translator is not None,
            "media_rendering": self.media_renderer is not None,
        }


def _build_text_generator(config: AppConfig) -> Optional[TextGenerator]:
    if config.llm_backend == "mock":
        return MockTextGenerator()
    if config.llm_backend == "llama_cpp":
        if config.llama_cpp is None:
            logger.warning("collaborator_unavailable name=text_generation reason=llama_cpp_model_missing")
            return None
        return LlamaCppGenerator(
            config.llama_cpp.model_path,
            chat_format=config.llama_cpp.chat_format,
            n_ctx=config.llama_cpp.n_ctx,
            n_gpu_layers=config.llama_cpp.n_gpu_layers,
        )
    if config.openai is None:
        logger.warning("collaborator_unavailable name=text_generation reason=openai_key_missing")
        return None
    return OpenAIChatGenerator(
        config.openai.api_key,
        config.openai.model,
        base_url=config.openai.base_url,
    )


def build_collaborators(config: AppConfig) -> Collaborators:
    speech_to_text: Optional[SpeechToText] = None
    text_to_speech: Optional[TextToSpeech] = None
    translator: Optional[Translator] = None
    if config.shisa is not None:
        speech_to_text = ShisaASRProvider(
            config.shisa.api_key,
            config.shisa.api_base,
            model=config.shisa.asr_model,
            timeout_sec=config.http_timeout_sec,
        )
        text_to_speech = ShisaTTSProvider(
            config.shisa.api_key,
            config.shisa.api_base,
            model=config.shisa.tts_model,
            timeout_sec=config.http_timeout_sec,
        )
        if config.translation_enabled:
            translator = ShisaTranslator(
                config.shisa.api_key,
                config.shisa.api_base,
                timeout_sec=config.http_timeout_sec,
            )
    else:
        logger.info("collaborator_unavailable name=speech,translation reason=shisa_key_missing")

    media_renderer: Optional[MediaRenderer] = None
    if config.media.command.strip():
        available, reason = mulmo_cli_available(config.media.command)
        if not available:
            # Renderer stays wired; calls fall back to text once they fail.
            logger.warning("media_renderer_unavailable reason=%s", reason)
        media_renderer = MulmoCliRenderer(config.media.command, timeout_sec=config.media.timeout_sec)

    return Collaborators(
        text_generator=_build_text_generator(config),
        speech_to_text=speech_to_text,
        text_to_speech=text_to_speech,
        translator=translator,
        media_renderer=media_renderer,
    )
