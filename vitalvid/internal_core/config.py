from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Literal, Optional

LLMBackend = Literal["openai", "llama_cpp", "mock"]

_LLM_BACKENDS: set[str] = {"openai", "llama_cpp", "mock"}


def _project_root() -> Path:
    # vitalvid/internal_core/config.py -> vitalvid -> repo root
    return Path(__file__).resolve().parents[2]


def _getenv_str(name: str, default: str) -> str:
    value = os.getenv(name)
    return default if value is None else value


def _getenv_opt_str(name: str) -> Optional[str]:
    value = os.getenv(name)
    if value is None:
        return None
    value = value.strip()
    return value or None


def _getenv_int(name: str, default: int) -> int:
    value = os.getenv(name)
    if value is None or value == "":
        return default
    return int(value)


def _getenv_bool(name: str, default: bool) -> bool:
    value = os.getenv(name)
    if value is None or value == "":
        return default
    return value.strip().lower() in {"1", "true", "t", "yes", "y", "on"}


def _getenv_float(name: str, default: float) -> float:
    value = os.getenv(name)
    if value is None or value == "":
        return default
    return float(value)


def _resolve_existing_path_or_empty(candidates: list[Path]) -> str:
    for candidate in candidates:
        try:
            resolved = candidate.expanduser().resolve()
        except Exception:
            continue
        if resolved.exists():
            return str(resolved)
    return ""


@dataclass(frozen=True)
class OpenAISettings:
    api_key: str
    model: str
    base_url: Optional[str] = None


@dataclass(frozen=True)
class ShisaSettings:
    api_key: str
    api_base: str
    asr_model: str
    tts_model: str


@dataclass(frozen=True)
class LlamaCppSettings:
    model_path: str
    chat_format: str
    n_ctx: int
    n_gpu_layers: int


@dataclass(frozen=True)
class MediaSettings:
    command: str
    timeout_sec: int
    output_dir: str

    def output_dir_path(self, repo_root: Path) -> Path:
        return (repo_root / self.output_dir).resolve()


@dataclass(frozen=True)
class AppConfig:
    llm_backend: LLMBackend
    openai: Optional[OpenAISettings]
    shisa: Optional[ShisaSettings]
    llama_cpp: Optional[LlamaCppSettings]
    media: MediaSettings
    locale: str
    log_level: str
    max_tokens_narration: int
    max_tokens_answer: int
    temperature: float
    http_timeout_sec: float
    translation_enabled: bool

    @property
    def speech_available(self) -> bool:
        return self.shisa is not None

    @property
    def translation_available(self) -> bool:
        return self.shisa is not None and self.translation_enabled


def _load_openai() -> Optional[OpenAISettings]:
    api_key = _getenv_opt_str("OPENAI_API_KEY")
    if api_key is None:
        return None
    return OpenAISettings(
        api_key=api_key,
        model=_getenv_str("VITALVID_OPENAI_MODEL", "gpt-4"),
        base_url=_getenv_opt_str("OPENAI_BASE_URL"),
    )


def _load_shisa() -> Optional[ShisaSettings]:
    api_key = _getenv_opt_str("SHISA_API_KEY")
    if api_key is None:
        return None
    return ShisaSettings(
        api_key=api_key,
        api_base=_getenv_str("SHISA_API_BASE", "https://api.shisa.ai/v1").rstrip("/"),
        asr_model=_getenv_str("VITALVID_ASR_MODEL", "whisper-1"),
        tts_model=_getenv_str("VITALVID_TTS_MODEL", "tts-1"),
    )


def _load_llama_cpp(project_root: Path) -> Optional[LlamaCppSettings]:
    model_path = _getenv_str("VITALVID_LLAMA_CPP_MODEL", "").strip()
    if model_path:
        model_path = _resolve_existing_path_or_empty([Path(model_path)])
    else:
        model_path = _resolve_existing_path_or_empty(
            [project_root / "models" / "model.gguf", project_root / "model.gguf"]
        )
    if not model_path:
        return None
    return LlamaCppSettings(
        model_path=model_path,
        chat_format=_getenv_str("VITALVID_LLAMA_CPP_CHAT_FORMAT", "gemma"),
        n_ctx=_getenv_int("VITALVID_LLAMA_CPP_N_CTX", 2048),
        n_gpu_layers=_getenv_int("VITALVID_LLAMA_CPP_N_GPU_LAYERS", -1),
    )


def _resolve_llm_backend(raw: str) -> LLMBackend:
    backend = raw.strip().lower()
    if backend not in _LLM_BACKENDS:
        raise ValueError(
            f"VITALVID_LLM_BACKEND must be one of {sorted(_LLM_BACKENDS)}, got {raw!r}"
        )
    return backend  # type: ignore[return-value]


def load_config() -> AppConfig:
    project_root = _project_root()
    return AppConfig(
        llm_backend=_resolve_llm_backend(_getenv_str("VITALVID_LLM_BACKEND", "openai")),
        openai=_load_openai(),
        shisa=_load_shisa(),
        llama_cpp=_load_llama_cpp(project_root),
        media=MediaSettings(
            command=_getenv_str("VITALVID_MEDIA_COMMAND", "npx mulmo"),
            timeout_sec=_getenv_int("VITALVID_MEDIA_TIMEOUT_SEC", 60),
            output_dir=_getenv_str("VITALVID_OUTPUT_DIR", "public/videos"),
        ),
        locale=_getenv_str("VITALVID_LOCALE", "ja"),
        log_level=_getenv_str("VITALVID_LOG_LEVEL", "INFO"),
        max_tokens_narration=_getenv_int("VITALVID_MAX_TOKENS_NARRATION", 500),
        max_tokens_answer=_getenv_int("VITALVID_MAX_TOKENS_ANSWER", 300),
        temperature=_getenv_float("VITALVID_TEMPERATURE", 0.7),
        http_timeout_sec=_getenv_float("VITALVID_HTTP_TIMEOUT_SEC", 30.0),
        translation_enabled=_getenv_bool("VITALVID_TRANSLATION", True),
    )
