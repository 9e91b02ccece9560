from __future__ import annotations

import shlex
import shutil
import subprocess
from pathlib import Path
from typing import Tuple

from .base import MediaRenderError, MediaRenderer


def mulmo_cli_available(command: str) -> Tuple[bool, str]:
    parts = shlex.split(command or "")
    if not parts:
        return False, "missing VITALVID_MEDIA_COMMAND"
    if shutil.which(parts[0]) is None:
        return False, f"executable not found on PATH: {parts[0]}"
    return True, ""


def expected_audio_path(script_path: Path, output_path: Path, *, lang: str = "en") -> Path:
    # `mulmo audio -o <dir>` writes <dir>/<script stem>_<lang>.mp3
    return output_path / f"{script_path.stem}_{lang}.mp3"


class MulmoCliRenderer(MediaRenderer):
    def __init__(self, command: str = "npx mulmo", timeout_sec: int = 60, mode: str = "audio"):
        self._command = shlex.split(command or "")
        self._timeout_sec = int(timeout_sec)
        self._mode = mode

    def name(self) -> str:
        return "mulmo_cli"

    def render(self, script_path: Path, output_path: Path) -> Path:
        if not self._command:
            raise MediaRenderError("MEDIA_COMMAND_MISSING", "media command is not configured", self.name())
        if not script_path.exists():
            raise MediaRenderError("MEDIA_SCRIPT_MISSING", f"script not found: {script_path}", self.name())

        cmd = [*self._command, self._mode, str(script_path), "-o", str(output_path)]
        try:
            res = subprocess.run(
                cmd,
                stdout=subprocess.PIPE,
                stderr=subprocess.PIPE,
                text=True,
                timeout=self._timeout_sec,
            )
        except subprocess.TimeoutExpired as exc:
            raise MediaRenderError(
                "MEDIA_TIMEOUT", f"renderer timed out after {self._timeout_sec}s", self.name()
            ) from exc
        except OSError as exc:
            raise MediaRenderError("MEDIA_EXEC_FAILED", str(exc), self.name()) from exc

        if res.returncode != 0:
            msg = (res.stderr or "").strip() or f"exit_code={res.returncode}"
            if len(msg) > 200:
                msg = msg[:200] + "…"
            raise MediaRenderError("MEDIA_EXIT_NONZERO", msg, self.name())

        produced = expected_audio_path(script_path, output_path)
        if not produced.is_file():
            raise MediaRenderError("MEDIA_OUTPUT_MISSING", f"audio file was not created: {produced}", self.name())
        return produced
