import subprocess
import sys
from pathlib import Path
from types import SimpleNamespace

import pytest
import requests
from openai import OpenAIError

from vitalvid.internal_core import shisa_http
from vitalvid.internal_core.llm import LLMError, LlamaCppGenerator, OpenAIChatGenerator
from vitalvid.internal_core.media import MediaRenderError, MulmoCliRenderer, expected_audio_path
from vitalvid.internal_core.media import mulmo_cli
from vitalvid.internal_core.speech import ShisaASRProvider, ShisaTTSProvider, SpeechError
from vitalvid.internal_core.translation import ShisaTranslator, TranslationError


class _FakeResponse:
    def __init__(self, status_code=200, payload=None, content=b"", text=""):
        self.status_code = status_code
        self.ok = status_code < 400
        self.reason = "OK" if self.ok else "Bad Request"
        self._payload = payload
        self.content = content
        self.text = text

    def json(self):
        if self._payload is None:
            raise ValueError("no json")
        return self._payload


def _capture_post(monkeypatch, response):
    calls = []

    def fake_post(url, **kwargs):
        calls.append((url, kwargs))
        if isinstance(response, Exception):
            raise response
        return response

    monkeypatch.setattr(shisa_http.requests, "post", fake_post)
    return calls


def test_asr_posts_multipart_and_returns_trimmed_text(monkeypatch) -> None:
    calls = _capture_post(monkeypatch, _FakeResponse(payload={"text": "  血糖値について教えて  "}))
    asr = ShisaASRProvider("key", "https://shisa.example/v1/", timeout_sec=5)

    text = asr.transcribe(b"\x1a\x45", filename="question.webm", language="ja")

    assert text == "血糖値について教えて"
    url, kwargs = calls[0]
    assert url == "https://shisa.example/v1/audio/transcriptions"
    assert kwargs["headers"] == {"Authorization": "Bearer key"}
    assert kwargs["files"]["file"][0] == "question.webm"
    assert kwargs["data"] == {"model": "whisper-1", "language": "ja"}
    assert kwargs["timeout"] == 5.0


@pytest.mark.parametrize(
    "response, code",
    [
        (requests.Timeout("slow"), "ASR_TIMEOUT"),
        (requests.ConnectionError("down"), "ASR_REQUEST_FAILED"),
        (_FakeResponse(status_code=500, text="boom"), "ASR_HTTP_ERROR"),
        (_FakeResponse(payload=None), "ASR_INVALID_RESPONSE"),
        (_FakeResponse(payload={"text": " "}), "ASR_EMPTY_OUTPUT"),
    ],
)
def test_asr_failures_have_stable_codes(monkeypatch, response, code) -> None:
    _capture_post(monkeypatch, response)
    with pytest.raises(SpeechError) as excinfo:
        ShisaASRProvider("key", "https://shisa.example/v1").transcribe(b"audio")
    assert excinfo.value.code == code
    assert excinfo.value.provider_name == "shisa_asr"


def test_asr_rejects_empty_audio_without_calling_out(monkeypatch) -> None:
    calls = _capture_post(monkeypatch, _FakeResponse(payload={"text": "x"}))
    with pytest.raises(SpeechError) as excinfo:
        ShisaASRProvider("key", "https://shisa.example/v1").transcribe(b"")
    assert excinfo.value.code == "ASR_EMPTY_AUDIO"
    assert calls == []


def test_tts_posts_json_and_returns_audio_bytes(monkeypatch) -> None:
    calls = _capture_post(monkeypatch, _FakeResponse(content=b"ID3audio"))
    tts = ShisaTTSProvider("key", "https://shisa.example/v1")

    audio = tts.synthesize("こんにちは", speed=1.2)

    assert audio == b"ID3audio"
    url, kwargs = calls[0]
    assert url == "https://shisa.example/v1/audio/speech"
    assert kwargs["json"] == {"model": "tts-1", "input": "こんにちは", "voice": "ja-JP-1", "speed": 1.2}


def test_tts_failures(monkeypatch) -> None:
    tts = ShisaTTSProvider("key", "https://shisa.example/v1")
    with pytest.raises(SpeechError) as excinfo:
        tts.synthesize("  ")
    assert excinfo.value.code == "TTS_EMPTY_TEXT"

    _capture_post(monkeypatch, _FakeResponse(status_code=401, text="unauthorized"))
    with pytest.raises(SpeechError) as excinfo:
        tts.synthesize("hello")
    assert excinfo.value.code == "TTS_HTTP_ERROR"
    assert "401" in excinfo.value.message

    _capture_post(monkeypatch, _FakeResponse(content=b""))
    with pytest.raises(SpeechError) as excinfo:
        tts.synthesize("hello")
    assert excinfo.value.code == "TTS_EMPTY_OUTPUT"


def test_translator_reads_either_response_field(monkeypatch) -> None:
    translator = ShisaTranslator("key", "https://shisa.example/v1")

    calls = _capture_post(monkeypatch, _FakeResponse(payload={"translated_text": "Hello"}))
    assert translator.translate("こんにちは") == "Hello"
    assert calls[0][0] == "https://shisa.example/v1/translate"
    assert calls[0][1]["json"] == {"text": "こんにちは", "source_lang": "ja", "target_lang": "en"}

    _capture_post(monkeypatch, _FakeResponse(payload={"text": "Thanks"}))
    assert translator.translate_many(["ありがとう"]) == ["Thanks"]


def test_translator_short_circuits_and_reports_errors(monkeypatch) -> None:
    translator = ShisaTranslator("key", "https://shisa.example/v1")
    calls = _capture_post(monkeypatch, _FakeResponse(payload={"translated_text": "x"}))
    assert translator.translate("same", source_lang="en", target_lang="en") == "same"
    assert translator.translate("") == ""
    assert calls == []

    _capture_post(monkeypatch, _FakeResponse(payload={"translated_text": ""}))
    with pytest.raises(TranslationError) as excinfo:
        translator.translate("こんにちは")
    assert excinfo.value.code == "TRANSLATION_EMPTY_OUTPUT"

    _capture_post(monkeypatch, requests.ConnectionError("down"))
    with pytest.raises(TranslationError) as excinfo:
        translator.translate("こんにちは")
    assert excinfo.value.code == "TRANSLATION_REQUEST_FAILED"


def _fake_openai_client(create):
    return SimpleNamespace(chat=SimpleNamespace(completions=SimpleNamespace(create=create)))


def test_openai_generator_sends_both_prompts() -> None:
    seen = {}

    def create(**kwargs):
        seen.update(kwargs)
        message = SimpleNamespace(content="  解説です。 ")
        return SimpleNamespace(choices=[SimpleNamespace(message=message)])

    generator = OpenAIChatGenerator("sk-test", "gpt-4", client=_fake_openai_client(create))
    assert generator.generate("system", "user", max_tokens=123, temperature=0.2) == "解説です。"
    assert seen["model"] == "gpt-4"
    assert seen["messages"] == [
        {"role": "system", "content": "system"},
        {"role": "user", "content": "user"},
    ]
    assert seen["max_tokens"] == 123


def test_openai_generator_maps_failures() -> None:
    def broken(**kwargs):
        raise OpenAIError("quota exceeded")

    with pytest.raises(LLMError) as excinfo:
        OpenAIChatGenerator("sk-test", client=_fake_openai_client(broken)).generate("s", "u")
    assert excinfo.value.code == "OPENAI_REQUEST_FAILED"

    empty = OpenAIChatGenerator("sk-test", client=_fake_openai_client(lambda **_: SimpleNamespace(choices=[])))
    with pytest.raises(LLMError) as excinfo:
        empty.generate("s", "u")
    assert excinfo.value.code == "OPENAI_EMPTY_CHOICES"

    with pytest.raises(LLMError) as excinfo:
        OpenAIChatGenerator("")
    assert excinfo.value.code == "OPENAI_KEY_MISSING"


def test_llama_cpp_generator_retries_without_chat_format(monkeypatch, tmp_path) -> None:
    model = tmp_path / "tiny.gguf"
    model.write_bytes(b"GGUF")
    init_kwargs = []

    class FakeLlama:
        def __init__(self, **kwargs):
            init_kwargs.append(kwargs)
            if "chat_format" in kwargs:
                raise TypeError("unexpected keyword argument 'chat_format'")

        def create_chat_completion(self, **kwargs):
            return {"choices": [{"message": {"content": " local reply "}}]}

    monkeypatch.setitem(sys.modules, "llama_cpp", SimpleNamespace(Llama=FakeLlama))
    generator = LlamaCppGenerator(str(model))

    assert generator.generate("s", "u") == "local reply"
    assert generator.generate("s", "u") == "local reply"
    assert len(init_kwargs) == 2
    assert "chat_format" not in init_kwargs[1]


def test_llama_cpp_generator_requires_model_file(tmp_path) -> None:
    with pytest.raises(LLMError) as excinfo:
        LlamaCppGenerator(str(tmp_path / "missing.gguf")).generate("s", "u")
    assert excinfo.value.code == "LLAMA_MODEL_MISSING"


def _script(tmp_path: Path) -> Path:
    script = tmp_path / "mulmo-glucose-1.json"
    script.write_text("{}", encoding="utf-8")
    return script


def test_mulmo_renderer_invokes_cli_and_returns_audio(monkeypatch, tmp_path) -> None:
    script = _script(tmp_path)
    out_dir = tmp_path / "out"
    commands = []

    def fake_run(cmd, **kwargs):
        commands.append((cmd, kwargs))
        out_dir.mkdir(parents=True, exist_ok=True)
        expected_audio_path(script, out_dir).write_bytes(b"ID3")
        return subprocess.CompletedProcess(cmd, 0, stdout="", stderr="")

    monkeypatch.setattr(mulmo_cli.subprocess, "run", fake_run)
    produced = MulmoCliRenderer("npx mulmo", timeout_sec=60).render(script, out_dir)

    assert produced == out_dir / "mulmo-glucose-1_en.mp3"
    cmd, kwargs = commands[0]
    assert cmd == ["npx", "mulmo", "audio", str(script), "-o", str(out_dir)]
    assert kwargs["timeout"] == 60


def test_mulmo_renderer_failure_codes(monkeypatch, tmp_path) -> None:
    script = _script(tmp_path)
    renderer = MulmoCliRenderer("npx mulmo", timeout_sec=1)

    def timeout(cmd, **kwargs):
        raise subprocess.TimeoutExpired(cmd, 1)

    monkeypatch.setattr(mulmo_cli.subprocess, "run", timeout)
    with pytest.raises(MediaRenderError) as excinfo:
        renderer.render(script, tmp_path)
    assert excinfo.value.code == "MEDIA_TIMEOUT"

    monkeypatch.setattr(
        mulmo_cli.subprocess,
        "run",
        lambda cmd, **kwargs: subprocess.CompletedProcess(cmd, 1, stdout="", stderr="mulmo: bad script"),
    )
    with pytest.raises(MediaRenderError) as excinfo:
        renderer.render(script, tmp_path)
    assert excinfo.value.code == "MEDIA_EXIT_NONZERO"
    assert excinfo.value.message == "mulmo: bad script"

    monkeypatch.setattr(
        mulmo_cli.subprocess,
        "run",
        lambda cmd, **kwargs: subprocess.CompletedProcess(cmd, 0, stdout="", stderr=""),
    )
    with pytest.raises(MediaRenderError) as excinfo:
        renderer.render(script, tmp_path)
    assert excinfo.value.code == "MEDIA_OUTPUT_MISSING"

    with pytest.raises(MediaRenderError) as excinfo:
        renderer.render(tmp_path / "absent.json", tmp_path)
    assert excinfo.value.code == "MEDIA_SCRIPT_MISSING"


def test_mulmo_cli_availability_checks_path(monkeypatch) -> None:
    assert mulmo_cli.mulmo_cli_available("") == (False, "missing VITALVID_MEDIA_COMMAND")
    monkeypatch.setattr(mulmo_cli.shutil, "which", lambda name: None)
    ok, reason = mulmo_cli.mulmo_cli_available("npx mulmo")
    assert ok is False
    assert "npx" in reason
