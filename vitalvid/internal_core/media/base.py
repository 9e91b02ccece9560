from __future__ import annotations

from abc import ABC, abstractmethod
from pathlib import Path


class MediaRenderError(RuntimeError):
    def __init__(self, code: str, message: str, provider_name: str):
        super().__init__(message)
        self.code = code
        self.message = message
        self.provider_name = provider_name


class MediaRenderer(ABC):
    @abstractmethod
    def render(self, script_path: Path, output_path: Path) -> Path:
        """Render the script document and return the produced media file."""

    @abstractmethod
    def name(self) -> str: ...
