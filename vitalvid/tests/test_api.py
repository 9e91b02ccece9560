import base64
import json

import pytest
from fastapi.testclient import TestClient

from vitalvid.api.main import app
from vitalvid.internal_core.llm import MockTextGenerator
from vitalvid.internal_core.speech import MockSpeechToText, MockTextToSpeech
from vitalvid.internal_core.translation import Translator

_DANGER_PANEL = {"ldl": 180, "hdl": 35, "glucose": 140, "triglyceride": 250}


class _UpperTranslator(Translator):
    def __init__(self) -> None:
        self.calls = []

    def translate(self, text: str, *, source_lang: str = "ja", target_lang: str = "en") -> str:
        self.calls.append((source_lang, target_lang))
        return f"[{target_lang}] {text}"


def test_healthz_and_presets(install_state) -> None:
    install_state()
    client = TestClient(app)

    assert client.get("/healthz").json() == {"status": "ok"}
    assert client.get("/presets").json() == {"presets": ["healthy", "warning", "danger"]}

    warning = client.get("/presets/Warning")
    assert warning.status_code == 200
    body = warning.json()
    assert body["ldl"] == 140
    assert body["ldl_hdl_ratio"] == pytest.approx(2.8)


def test_capabilities_reflect_injected_collaborators(install_state) -> None:
    install_state(text_generator=MockTextGenerator(), speech_to_text=MockSpeechToText())
    response = TestClient(app).get("/capabilities")
    assert response.status_code == 200
    body = response.json()
    assert body["llm_backend"] == "mock"
    assert body["locales"] == ["ja", "en"]
    assert body["capabilities"]["text_generation"] is True
    assert body["capabilities"]["speech_to_text"] is True
    assert body["capabilities"]["media_rendering"] is False


def test_evaluate_returns_wire_format(install_state) -> None:
    install_state()
    response = TestClient(app).post("/evaluate", json={"metric": "glucose", "value": 140})

    assert response.status_code == 200
    body = response.json()
    assert set(body) == {"metric_name", "metric_value", "risk_level", "target_value", "recommendations"}
    assert body["metric_name"] == "血糖値 (Glucose)"
    assert body["risk_level"] == "danger"
    assert body["target_value"] == 100
    assert body["recommendations"][0] == "すぐに医師に相談してください"


def test_evaluate_english_locale(install_state) -> None:
    install_state()
    response = TestClient(app).post("/evaluate", json={"metric": "hdl", "value": 45, "locale": "EN"})
    assert response.status_code == 200
    assert response.json()["metric_name"] == "HDL Cholesterol (HDL-C)"
    assert response.json()["risk_level"] == "warning"


def test_evaluate_panel_reports_worst_tier(install_state) -> None:
    install_state()
    response = TestClient(app).post("/evaluate/panel", json=_DANGER_PANEL)

    assert response.status_code == 200
    body = response.json()
    assert body["overall_risk_level"] == "danger"
    assert list(body["evaluations"]) == ["ldl_hdl_ratio", "glucose", "hdl", "triglyceride"]
    assert body["panel"]["ldl_hdl_ratio"] == pytest.approx(180 / 35)


def test_narration_prompt_includes_script_prompt_when_panel_given(install_state) -> None:
    install_state()
    client = TestClient(app)

    bare = client.post("/narration/prompt", json={"metric": "triglyceride", "value": 180})
    assert bare.status_code == 200
    assert bare.json()["script_prompt"] is None
    assert "1. アルコール摂取を減らす" in bare.json()["narration_prompt"]

    full = client.post(
        "/narration/prompt",
        json={"metric": "triglyceride", "value": 250, "panel": _DANGER_PANEL},
    )
    assert full.status_code == 200
    assert "- 中性脂肪: 250.0 mg/dL" in full.json()["script_prompt"]


def test_generate_video_renders_media(install_state, media_dir, writing_renderer) -> None:
    renderer = writing_renderer
    install_state(
        text_generator=MockTextGenerator("食後に軽く歩きましょう。"),
        media_renderer=renderer,
    )
    client = TestClient(app)
    response = client.post(
        "/generate-video",
        json={"metric": "glucose", "value": 140, "panel": _DANGER_PANEL},
    )

    assert response.status_code == 200
    body = response.json()
    assert body["success"] is True
    assert body["narration_text"] == "食後に軽く歩きましょう。"
    assert body["fallback_text"] is None
    assert body["debug"]["media"] == "writing_renderer"
    assert body["media_url"].startswith("/files/media?path=mulmo-glucose-")

    script_path, output_path = renderer.calls[0]
    assert output_path == media_dir.resolve()
    document = json.loads(script_path.read_text(encoding="utf-8"))
    assert document["beats"][-1] == {"text": "食後に軽く歩きましょう。"}

    media = client.get(body["media_url"])
    assert media.status_code == 200
    assert media.content == b"ID3rendered"


def test_generate_video_falls_back_to_text_without_renderer(install_state) -> None:
    install_state(text_generator=MockTextGenerator("説明テキスト"))
    response = TestClient(app).post(
        "/generate-video",
        json={"metric": "hdl", "value": 35, "panel": _DANGER_PANEL},
    )

    assert response.status_code == 200
    body = response.json()
    assert body["success"] is True
    assert body["media_url"] is None
    assert body["fallback_text"] == "説明テキスト"
    assert body["error"] == "動画生成は現在利用できません。テキスト解説をご覧ください。"
    assert body["debug"]["media"] == "not_configured"
    assert body["evaluation"]["risk_level"] == "danger"


def test_voice_qa_round_trip_with_audio_and_translation(install_state) -> None:
    translator = _UpperTranslator()
    install_state(
        text_generator=MockTextGenerator("野菜から食べましょう。"),
        speech_to_text=MockSpeechToText("血糖値を下げるには?"),
        text_to_speech=MockTextToSpeech(),
        translator=translator,
    )
    client = TestClient(app)
    response = client.post(
        "/voice-qa",
        json={
            "audio_b64": base64.b64encode(b"webm-bytes").decode("ascii"),
            "context": "血糖値は140です。",
            "translate_to": "en",
        },
    )

    assert response.status_code == 200
    body = response.json()
    assert body["question"] == "血糖値を下げるには?"
    assert body["answer"] == "野菜から食べましょう。"
    assert body["translated_answer"] == "[en] 野菜から食べましょう。"
    assert translator.calls == [("ja", "en")]
    assert body["debug"]["tts"] == "mock"
    assert body["debug"]["translation"] == "ok"

    audio = client.get(body["answer_audio_url"])
    assert audio.status_code == 200
    assert audio.content.startswith(b"ID3mock")


def test_voice_qa_without_tts_or_translator_still_answers(install_state) -> None:
    install_state(
        text_generator=MockTextGenerator("回答です。"),
        speech_to_text=MockSpeechToText(),
    )
    response = TestClient(app).post(
        "/voice-qa",
        json={"audio_b64": base64.b64encode(b"x").decode("ascii"), "translate_to": "en"},
    )

    assert response.status_code == 200
    body = response.json()
    assert body["answer_audio_url"] is None
    assert body["translated_answer"] is None
    assert body["debug"]["tts"] == "not_configured"
    assert body["debug"]["translation"] == "not_configured"
