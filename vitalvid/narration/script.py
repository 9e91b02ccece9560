from __future__ import annotations

import json
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from vitalvid.risk.evaluator import resolve_locale
from vitalvid.risk.models import RiskEvaluation

SCRIPT_FORMAT_VERSION = "1.0"


@dataclass(frozen=True)
class MediaScript:
    title: str
    beats: tuple[str, ...]

    def to_document(self) -> dict[str, Any]:
        return {
            "$mulmocast": {"version": SCRIPT_FORMAT_VERSION},
            "title": self.title,
            "beats": [{"text": text} for text in self.beats],
        }

    def write(self, path: Path) -> Path:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(json.dumps(self.to_document(), ensure_ascii=False, indent=2), encoding="utf-8")
        return path


def build_media_script(evaluation: RiskEvaluation, narration_text: str, *, locale: str = "ja") -> MediaScript:
    name = evaluation.metric_name
    if resolve_locale(locale) == "en":
        title = f"Understanding your {name}"
        beats = [
            f"Hello. Today we will explain your {name}.",
            f"Your {name} is {evaluation.metric_value}. The target value is {evaluation.target_value}.",
        ]
    else:
        title = f"{name}の解説"
        beats = [
            f"こんにちは。今日はあなたの{name}について解説します。",
            f"あなたの{name}は{evaluation.metric_value}です。目標値は{evaluation.target_value}です。",
        ]

    narration = str(narration_text or "").strip()
    if narration:
        beats.append(narration)
    return MediaScript(title=title, beats=tuple(beats))
