from __future__ import annotations

from .base import MediaRenderError, MediaRenderer
from .mulmo_cli import MulmoCliRenderer, expected_audio_path, mulmo_cli_available

__all__ = [
    "MediaRenderError",
    "MediaRenderer",
    "MulmoCliRenderer",
    "expected_audio_path",
    "mulmo_cli_available",
]
