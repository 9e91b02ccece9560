from pathlib import Path

import pytest

from vitalvid.api.main import app
from vitalvid.internal_core.collaborators import Collaborators
from vitalvid.internal_core.config import AppConfig, MediaSettings
from vitalvid.internal_core.media import MediaRenderer, expected_audio_path


def _test_config() -> AppConfig:
    return AppConfig(
        llm_backend="mock",
        openai=None,
        shisa=None,
        llama_cpp=None,
        media=MediaSettings(command="npx mulmo", timeout_sec=60, output_dir="public/videos"),
        locale="ja",
        log_level="INFO",
        max_tokens_narration=500,
        max_tokens_answer=300,
        temperature=0.7,
        http_timeout_sec=30.0,
        translation_enabled=True,
    )


class WritingRenderer(MediaRenderer):
    def __init__(self) -> None:
        self.calls: list[tuple[Path, Path]] = []

    def render(self, script_path: Path, output_path: Path) -> Path:
        self.calls.append((script_path, output_path))
        produced = expected_audio_path(script_path, output_path)
        produced.write_bytes(b"ID3rendered")
        return produced

    def name(self) -> str:
        return "writing_renderer"


@pytest.fixture
def media_dir(tmp_path) -> Path:
    return tmp_path / "media"


@pytest.fixture
def install_state(media_dir):
    """Inject config, collaborators and output dir into `app.state`; cleared after the test."""

    def _install(**collaborators) -> None:
        values = {
            "text_generator": None,
            "speech_to_text": None,
            "text_to_speech": None,
            "translator": None,
            "media_renderer": None,
        }
        values.update(collaborators)
        app.state.config = _test_config()
        app.state.collaborators = Collaborators(**values)
        app.state.output_dir = str(media_dir)

    yield _install
    for key in ("config", "collaborators", "output_dir"):
        if hasattr(app.state, key):
            delattr(app.state, key)


@pytest.fixture
def writing_renderer() -> WritingRenderer:
    return WritingRenderer()
