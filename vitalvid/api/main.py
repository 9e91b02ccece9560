from __future__ import annotations

"""
HTTP surface for the VitalVid dashboard backend.

Design intent:
- Keep API orchestration thin and typed.
- Delegate risk logic to `vitalvid.risk` and prompt text to `vitalvid.narration`.
- Fall back to text-only narration when media rendering fails.
"""

import base64
import binascii
import logging
import mimetypes
import time
from contextlib import asynccontextmanager
from pathlib import Path
from typing import Any, AsyncIterator, Literal

from fastapi import FastAPI, HTTPException, Query
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import FileResponse
from pydantic import BaseModel, Field

from vitalvid.internal_core.collaborators import Collaborators, build_collaborators
from vitalvid.internal_core.config import AppConfig, load_config
from vitalvid.internal_core.llm import LLMError
from vitalvid.internal_core.logging_setup import configure_logging
from vitalvid.internal_core.media import MediaRenderError
from vitalvid.internal_core.speech import SpeechError
from vitalvid.internal_core.translation import TranslationError
from vitalvid.narration.prompts import (
    NARRATION_SYSTEM_PROMPT,
    build_narration_prompt,
    build_qa_system_prompt,
    build_script_prompt,
)
from vitalvid.narration.script import build_media_script
from vitalvid.risk.evaluator import evaluate, evaluate_panel, resolve_locale, worst_tier
from vitalvid.risk.models import RiskEvaluation, UnknownMetric, UnsupportedLocale
from vitalvid.risk.panel import PRESET_NAMES, BloodPanel, UnknownPreset, load_preset
from vitalvid.risk.tables import SUPPORTED_LOCALES


class BloodPanelInput(BaseModel):
    ldl: float = Field(ge=0.0, allow_inf_nan=False)
    hdl: float = Field(ge=0.0, allow_inf_nan=False)
    glucose: float = Field(ge=0.0, allow_inf_nan=False)
    triglyceride: float = Field(ge=0.0, allow_inf_nan=False)
    ldl_hdl_ratio: float | None = Field(default=None, ge=0.0, allow_inf_nan=False)

    def to_panel(self) -> BloodPanel:
        return BloodPanel.create(
            ldl=self.ldl,
            hdl=self.hdl,
            glucose=self.glucose,
            triglyceride=self.triglyceride,
            ldl_hdl_ratio=self.ldl_hdl_ratio,
        )


class BloodPanelOut(BaseModel):
    ldl: float
    hdl: float
    ldl_hdl_ratio: float
    glucose: float
    triglyceride: float


class RiskEvaluationOut(BaseModel):
    metric_name: str
    metric_value: float
    risk_level: Literal["normal", "warning", "danger"]
    target_value: float
    recommendations: list[str] = Field(default_factory=list)


class EvaluateRequest(BaseModel):
    metric: str = Field(min_length=1, max_length=64)
    value: float = Field(allow_inf_nan=False)
    locale: str | None = Field(default=None, max_length=8)


class PanelEvaluateRequest(BloodPanelInput):
    locale: str | None = Field(default=None, max_length=8)


class PanelEvaluationResponse(BaseModel):
    panel: BloodPanelOut
    evaluations: dict[str, RiskEvaluationOut] = Field(default_factory=dict)
    overall_risk_level: Literal["normal", "warning", "danger"]


class PresetListResponse(BaseModel):
    presets: list[str] = Field(default_factory=list)


class NarrationPromptRequest(BaseModel):
    metric: str = Field(min_length=1, max_length=64)
    value: float = Field(allow_inf_nan=False)
    panel: BloodPanelInput | None = None
    locale: str | None = Field(default=None, max_length=8)


class NarrationPromptResponse(BaseModel):
    evaluation: RiskEvaluationOut
    system_prompt: str
    narration_prompt: str
    script_prompt: str | None = None


class GenerateVideoRequest(BaseModel):
    metric: str = Field(min_length=1, max_length=64)
    value: float = Field(allow_inf_nan=False)
    panel: BloodPanelInput
    locale: str | None = Field(default=None, max_length=8)


class GenerateVideoResponse(BaseModel):
    success: bool
    evaluation: RiskEvaluationOut
    narration_text: str = ""
    media_url: str | None = None
    fallback_text: str | None = None
    error: str | None = None
    debug: dict[str, Any] = Field(default_factory=dict)


class VoiceQARequest(BaseModel):
    audio_b64: str = Field(min_length=1)
    filename: str = Field(default="question.webm", min_length=1, max_length=255)
    context: str | None = Field(default=None, max_length=8000)
    language: str = Field(default="ja", min_length=2, max_length=16)
    translate_to: str | None = Field(default=None, min_length=2, max_length=16)


class VoiceQAResponse(BaseModel):
    success: bool
    question: str
    answer: str
    answer_audio_url: str | None = None
    translated_answer: str | None = None
    debug: dict[str, Any] = Field(default_factory=dict)


class CapabilitiesResponse(BaseModel):
    capabilities: dict[str, bool] = Field(default_factory=dict)
    llm_backend: str
    locales: list[str] = Field(default_factory=list)


_FALLBACK_MESSAGES: dict[str, str] = {
    "ja": "動画生成は現在利用できません。テキスト解説をご覧ください。",
    "en": "Video generation is currently unavailable. Please read the text explanation instead.",
}


@asynccontextmanager
async def _lifespan(_: FastAPI) -> AsyncIterator[None]:
    config = _get_config()
    configure_logging(config.log_level)
    logger.info(
        "startup llm_backend=%s capabilities=%s",
        config.llm_backend,
        _get_collaborators().availability(),
    )
    yield


app = FastAPI(title="vitalvid backend service", lifespan=_lifespan)
logger = logging.getLogger(__name__)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


def _get_config() -> AppConfig:
    existing = getattr(app.state, "config", None)
    if isinstance(existing, AppConfig):
        return existing
    created = load_config()
    setattr(app.state, "config", created)
    return created


def _get_collaborators() -> Collaborators:
    existing = getattr(app.state, "collaborators", None)
    if isinstance(existing, Collaborators):
        return existing
    created = build_collaborators(_get_config())
    setattr(app.state, "collaborators", created)
    return created


def _get_output_dir() -> Path:
    configured = getattr(app.state, "output_dir", None)
    if configured:
        base_dir = Path(str(configured)).expanduser()
    else:
        base_dir = _get_config().media.output_dir_path(Path(__file__).resolve().parents[2])
    resolved = base_dir.resolve()
    resolved.mkdir(parents=True, exist_ok=True)
    return resolved


def _media_url(path: Path, output_dir: Path) -> str:
    return f"/files/media?path={path.relative_to(output_dir).as_posix()}"


def _timestamp_ms() -> int:
    return int(time.time() * 1000)


def _resolve_request_locale(raw: str | None) -> str:
    try:
        return resolve_locale(raw or _get_config().locale)
    except UnsupportedLocale as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc


def _evaluate_or_400(metric: str, value: float, locale: str) -> RiskEvaluation:
    try:
        return evaluate(metric, value, locale=locale)
    except UnknownMetric as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc


def _panel_or_400(payload: BloodPanelInput) -> BloodPanel:
    try:
        return payload.to_panel()
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc


def _evaluation_out(evaluation: RiskEvaluation) -> RiskEvaluationOut:
    return RiskEvaluationOut(**evaluation.to_dict())


def _panel_out(panel: BloodPanel) -> BloodPanelOut:
    return BloodPanelOut(**panel.to_dict())


@app.get("/healthz")
async def healthz() -> dict[str, str]:
    return {"status": "ok"}


@app.get("/capabilities", response_model=CapabilitiesResponse)
async def capabilities() -> CapabilitiesResponse:
    return CapabilitiesResponse(
        capabilities=_get_collaborators().availability(),
        llm_backend=_get_config().llm_backend,
        locales=list(SUPPORTED_LOCALES),
    )


@app.get("/presets", response_model=PresetListResponse)
async def list_presets() -> PresetListResponse:
    return PresetListResponse(presets=list(PRESET_NAMES))


@app.get("/presets/{name}", response_model=BloodPanelOut)
async def get_preset(name: str) -> BloodPanelOut:
    try:
        panel = load_preset(name)
    except UnknownPreset as exc:
        raise HTTPException(status_code=404, detail=str(exc)) from exc
    return _panel_out(panel)


@app.post("/evaluate", response_model=RiskEvaluationOut)
async def evaluate_metric(payload: EvaluateRequest) -> RiskEvaluationOut:
    locale = _resolve_request_locale(payload.locale)
    return _evaluation_out(_evaluate_or_400(payload.metric, payload.value, locale))


@app.post("/evaluate/panel", response_model=PanelEvaluationResponse)
async def evaluate_blood_panel(payload: PanelEvaluateRequest) -> PanelEvaluationResponse:
    locale = _resolve_request_locale(payload.locale)
    panel = _panel_or_400(payload)
    evaluations = evaluate_panel(panel, locale=locale)
    return PanelEvaluationResponse(
        panel=_panel_out(panel),
        evaluations={
            identifier.value: _evaluation_out(item) for identifier, item in evaluations.items()
        },
        overall_risk_level=worst_tier(evaluations.values()).value,
    )


@app.post("/narration/prompt", response_model=NarrationPromptResponse)
async def narration_prompt(payload: NarrationPromptRequest) -> NarrationPromptResponse:
    locale = _resolve_request_locale(payload.locale)
    evaluation = _evaluate_or_400(payload.metric, payload.value, locale)
    script_prompt = None
    if payload.panel is not None:
        script_prompt = build_script_prompt(evaluation, _panel_or_400(payload.panel), locale=locale)
    return NarrationPromptResponse(
        evaluation=_evaluation_out(evaluation),
        system_prompt=NARRATION_SYSTEM_PROMPT[locale],
        narration_prompt=build_narration_prompt(evaluation, locale=locale),
        script_prompt=script_prompt,
    )


@app.post("/generate-video", response_model=GenerateVideoResponse)
async def generate_video(payload: GenerateVideoRequest) -> GenerateVideoResponse:
    locale = _resolve_request_locale(payload.locale)
    evaluation = _evaluate_or_400(payload.metric, payload.value, locale)
    _panel_or_400(payload.panel)

    collaborators = _get_collaborators()
    config = _get_config()
    generator = collaborators.text_generator
    if generator is None:
        raise HTTPException(
            status_code=503,
            detail="Text generation is not configured (set OPENAI_API_KEY or VITALVID_LLM_BACKEND).",
        )

    try:
        started = time.perf_counter()
        try:
            narration_text = generator.generate(
                NARRATION_SYSTEM_PROMPT[locale],
                build_narration_prompt(evaluation, locale=locale),
                max_tokens=config.max_tokens_narration,
                temperature=config.temperature,
            )
        except LLMError as exc:
            logger.warning(
                "narration_generation_failed provider=%s code=%s", exc.provider_name, exc.code
            )
            raise HTTPException(status_code=502, detail=f"Narration generation failed: {exc.message}") from exc
        llm_ms = int((time.perf_counter() - started) * 1000)

        output_dir = _get_output_dir()
        stamp = _timestamp_ms()
        metric_key = evaluation.metric.value
        script_path = build_media_script(evaluation, narration_text, locale=locale).write(
            output_dir / f"mulmo-{metric_key}-{stamp}.json"
        )
        debug: dict[str, Any] = {
            "text_generator": generator.name(),
            "llm_ms": llm_ms,
            "script_file": script_path.name,
        }

        renderer = collaborators.media_renderer
        if renderer is None:
            debug["media"] = "not_configured"
            return _fallback_video_response(evaluation, narration_text, locale, debug)

        try:
            media_path = renderer.render(script_path, output_dir)
        except MediaRenderError as exc:
            logger.warning(
                "media_render_failed provider=%s code=%s detail=%s",
                exc.provider_name,
                exc.code,
                exc.message[:200],
            )
            debug["media"] = "failed"
            debug["media_error_code"] = exc.code
            return _fallback_video_response(evaluation, narration_text, locale, debug)

        debug["media"] = renderer.name()
        return GenerateVideoResponse(
            success=True,
            evaluation=_evaluation_out(evaluation),
            narration_text=narration_text,
            media_url=_media_url(media_path, output_dir),
            debug=debug,
        )
    except HTTPException:
        raise
    except Exception as exc:
        logger.exception("generate_video_failed metric=%s", evaluation.metric.value)
        raise HTTPException(status_code=500, detail="Video generation failed.") from exc


def _fallback_video_response(
    evaluation: RiskEvaluation,
    narration_text: str,
    locale: str,
    debug: dict[str, Any],
) -> GenerateVideoResponse:
    return GenerateVideoResponse(
        success=True,
        evaluation=_evaluation_out(evaluation),
        narration_text=narration_text,
        media_url=None,
        fallback_text=narration_text,
        error=_FALLBACK_MESSAGES[locale],
        debug=debug,
    )


@app.post("/voice-qa", response_model=VoiceQAResponse)
async def voice_qa(payload: VoiceQARequest) -> VoiceQAResponse:
    try:
        audio = base64.b64decode(payload.audio_b64, validate=True)
    except (binascii.Error, ValueError) as exc:
        raise HTTPException(status_code=400, detail="audio_b64 is not valid base64.") from exc
    if not audio:
        raise HTTPException(status_code=400, detail="Audio payload is empty.")

    collaborators = _get_collaborators()
    config = _get_config()
    if collaborators.speech_to_text is None:
        raise HTTPException(status_code=503, detail="Speech recognition is not configured (set SHISA_API_KEY).")
    if collaborators.text_generator is None:
        raise HTTPException(
            status_code=503,
            detail="Text generation is not configured (set OPENAI_API_KEY or VITALVID_LLM_BACKEND).",
        )

    language = payload.language.strip().lower()
    prompt_locale = language if language in SUPPORTED_LOCALES else resolve_locale(config.locale)
    filename = Path(payload.filename).name or "question.webm"
    debug: dict[str, Any] = {"audio_bytes": len(audio)}

    try:
        try:
            question = collaborators.speech_to_text.transcribe(audio, filename=filename, language=language)
        except SpeechError as exc:
            logger.warning("transcription_failed provider=%s code=%s", exc.provider_name, exc.code)
            raise HTTPException(status_code=502, detail=f"Speech recognition failed: {exc.message}") from exc

        try:
            answer = collaborators.text_generator.generate(
                build_qa_system_prompt(payload.context, locale=prompt_locale),
                question,
                max_tokens=config.max_tokens_answer,
                temperature=config.temperature,
            )
        except LLMError as exc:
            logger.warning("answer_generation_failed provider=%s code=%s", exc.provider_name, exc.code)
            raise HTTPException(status_code=502, detail=f"Answer generation failed: {exc.message}") from exc

        answer_audio_url = _synthesize_answer_audio(collaborators, answer, debug)
        translated_answer = _translate_answer(collaborators, answer, language, payload.translate_to, debug)

        return VoiceQAResponse(
            success=True,
            question=question,
            answer=answer,
            answer_audio_url=answer_audio_url,
            translated_answer=translated_answer,
            debug=debug,
        )
    except HTTPException:
        raise
    except Exception as exc:
        logger.exception("voice_qa_failed")
        raise HTTPException(status_code=500, detail="Voice Q&A processing failed.") from exc


def _synthesize_answer_audio(collaborators: Collaborators, answer: str, debug: dict[str, Any]) -> str | None:
    tts = collaborators.text_to_speech
    if tts is None:
        debug["tts"] = "not_configured"
        return None
    try:
        audio = tts.synthesize(answer, voice="ja-JP-1", speed=1.0, pitch=1.0)
    except SpeechError as exc:
        logger.warning("tts_failed provider=%s code=%s", exc.provider_name, exc.code)
        debug["tts"] = "failed"
        debug["tts_error_code"] = exc.code
        return None

    output_dir = _get_output_dir()
    audio_path = output_dir / f"qa-answer-{_timestamp_ms()}.mp3"
    audio_path.write_bytes(audio)
    debug["tts"] = tts.name()
    return _media_url(audio_path, output_dir)


def _translate_answer(
    collaborators: Collaborators,
    answer: str,
    source_lang: str,
    target_lang: str | None,
    debug: dict[str, Any],
) -> str | None:
    if not target_lang:
        return None
    translator = collaborators.translator
    if translator is None:
        debug["translation"] = "not_configured"
        return None
    try:
        translated = translator.translate(answer, source_lang=source_lang, target_lang=target_lang)
    except TranslationError as exc:
        logger.warning("translation_failed code=%s", exc.code)
        debug["translation"] = "failed"
        return None
    debug["translation"] = "ok"
    return translated


@app.get("/files/media")
async def get_media_file(path: str = Query(default="")) -> FileResponse:
    normalized = str(path or "").strip()
    if not normalized:
        raise HTTPException(status_code=400, detail="path is required.")

    output_dir = _get_output_dir()
    resolved_path = (output_dir / normalized).resolve()
    if not resolved_path.is_relative_to(output_dir):
        raise HTTPException(status_code=400, detail="path must stay inside the media output directory.")
    if not resolved_path.is_file():
        raise HTTPException(status_code=404, detail=f"Media file not found: {normalized}")

    media_type, _ = mimetypes.guess_type(str(resolved_path))
    return FileResponse(
        path=str(resolved_path),
        filename=resolved_path.name,
        media_type=media_type or "application/octet-stream",
    )
