from __future__ import annotations

"""
Prompt text for the external text-generation collaborator.

Design intent:
- Pure string formatting over an evaluation record; no I/O.
- Keep tier framing and numbered guidance identical across entry points.
"""

from collections.abc import Sequence

from vitalvid.risk.evaluator import resolve_locale
from vitalvid.risk.models import RiskEvaluation, RiskTier
from vitalvid.risk.panel import BloodPanel


class MalformedEvaluation(ValueError):
    """Raised when a prompt is requested for an evaluation that is not well-formed."""


NARRATION_SYSTEM_PROMPT: dict[str, str] = {
    "ja": "あなたは精密栄養学の専門家として、血液検査結果を優しく分かりやすく解説します。",
    "en": (
        "You are a precision-nutrition expert. Explain blood test results gently and clearly."
    ),
}

_QA_SYSTEM_PROMPT: dict[str, str] = {
    "ja": "あなたは精密栄養学の専門家です。\n血液検査や健康に関する質問に、優しく分かりやすく答えます。",
    "en": (
        "You are a precision-nutrition expert.\n"
        "Answer questions about blood tests and health gently and clearly."
    ),
}

_QA_CONTEXT_HEADER: dict[str, str] = {
    "ja": "現在のコンテキスト:",
    "en": "Current context:",
}

_TIER_LABELS: dict[str, dict[RiskTier, str]] = {
    "ja": {
        RiskTier.NORMAL: "正常範囲",
        RiskTier.WARNING: "注意が必要",
        RiskTier.DANGER: "要改善",
    },
    "en": {
        RiskTier.NORMAL: "within normal range",
        RiskTier.WARNING: "needs attention",
        RiskTier.DANGER: "needs improvement",
    },
}

_TIER_SENTENCES: dict[str, dict[RiskTier, str]] = {
    "ja": {
        RiskTier.NORMAL: "これは正常範囲内です。素晴らしい状態を維持していますね。",
        RiskTier.WARNING: "これは少し注意が必要なレベルです。改善の余地があります。",
        RiskTier.DANGER: "これは要改善のレベルです。健康リスクが高まっている可能性があります。",
    },
    "en": {
        RiskTier.NORMAL: "This is within normal range. You are maintaining an excellent condition.",
        RiskTier.WARNING: "This level needs attention. There is room for improvement.",
        RiskTier.DANGER: (
            "This level needs improvement. Your health risk may be increasing."
        ),
    },
}

# (ratio, glucose, triglyceride) labels; LDL/HDL read the same in both locales.
_PANEL_LABELS: dict[str, tuple[str, str, str]] = {
    "ja": ("LH比", "血糖値", "中性脂肪"),
    "en": ("LH ratio", "Glucose", "Triglyceride"),
}


def tier_label(tier: RiskTier, *, locale: str = "ja") -> str:
    return _TIER_LABELS[resolve_locale(locale)][_checked_tier(tier)]


def build_narration_prompt(evaluation: RiskEvaluation, *, locale: str = "ja") -> str:
    resolved = resolve_locale(locale)
    tier = _checked_tier(getattr(evaluation, "risk_level", None))
    numbered = _numbered(_checked_recommendations(evaluation))
    sentence = _TIER_SENTENCES[resolved][tier]

    if resolved == "en":
        return (
            f"Your {evaluation.metric_name} is {evaluation.metric_value}.\n\n"
            f"{sentence}\n\n"
            f"The target value is {evaluation.target_value}.\n\n"
            "As actions for improvement, we recommend the following:\n"
            f"{numbered}\n\n"
            "Putting these into practice can be expected to improve your health. "
            "Let's work on it together!"
        )
    return (
        f"あなたの{evaluation.metric_name}は{evaluation.metric_value}です。\n\n"
        f"{sentence}\n\n"
        f"目標値は{evaluation.target_value}です。\n\n"
        "改善のためのアクションとして、以下をお勧めします:\n"
        f"{numbered}\n\n"
        "これらを実践することで、健康状態の改善が期待できます。一緒に頑張りましょう!"
    )


def build_script_prompt(evaluation: RiskEvaluation, panel: BloodPanel, *, locale: str = "ja") -> str:
    """
    Ask the text generator for a 4-6 scene JSON video script.

    The whole panel is embedded so the narration can relate the target
    metric to the other readings.
    """

    resolved = resolve_locale(locale)
    tier = _checked_tier(getattr(evaluation, "risk_level", None))
    recommendations = "\n".join(_checked_recommendations(evaluation))
    label = _TIER_LABELS[resolved][tier]
    name = evaluation.metric_name
    value = evaluation.metric_value

    if resolved == "en":
        return (
            "As a precision-nutrition expert, generate a video script in mulmocast format "
            "that explains blood test results.\n\n"
            f"[Target metric]\n{name}: {value}\n\n"
            f"[Risk level]\n{label}\n\n"
            f"[Target value]\n{evaluation.target_value}\n\n"
            f"[Improvement actions]\n{recommendations}\n\n"
            f"[Full blood test data]\n{_panel_lines(panel, resolved)}\n\n"
            "Generate a roughly 60-second explainer video script in the mulmocast JSON format below.\n\n"
            "Requirements:\n"
            "1. Explain gently and clearly\n"
            "2. Make the meaning of the numbers and their health impact clear\n"
            "3. Present concrete improvement actions\n"
            "4. Include visual elements (charts, highlighted numbers)\n"
            "5. Keep a positive, encouraging tone\n\n"
            f"mulmocast JSON format example:\n{_script_example(evaluation, resolved)}\n\n"
            "Generate a complete JSON with 4-6 scenes in the format above. "
            "Return only the JSON, with no other explanation."
        )
    return (
        "あなたは精密栄養学の専門家として、血液検査結果を解説する動画スクリプトをmulmocast形式で生成します。\n\n"
        f"【対象指標】\n{name}: {value}\n\n"
        f"【リスクレベル】\n{label}\n\n"
        f"【目標値】\n{evaluation.target_value}\n\n"
        f"【改善アクション】\n{recommendations}\n\n"
        f"【全体の血液検査データ】\n{_panel_lines(panel, resolved)}\n\n"
        "以下のmulmocast JSONフォーマットで、60秒程度の解説動画スクリプトを生成してください。\n\n"
        "要件:\n"
        "1. 日本語で優しく、分かりやすく説明\n"
        "2. 数値の意味と健康への影響を明確に\n"
        "3. 具体的な改善アクションを提示\n"
        "4. 視覚的な要素(グラフ、数値強調)を含む\n"
        "5. 前向きで励ますトーン\n\n"
        f"mulmocast JSONフォーマット例:\n{_script_example(evaluation, resolved)}\n\n"
        "上記の形式で、4-6個のシーンを含む完全なJSONを生成してください。JSONのみを返し、他の説明は不要です。"
    )


def build_qa_system_prompt(context: str | None = None, *, locale: str = "ja") -> str:
    resolved = resolve_locale(locale)
    prompt = _QA_SYSTEM_PROMPT[resolved]
    normalized = str(context or "").strip()
    if not normalized:
        return prompt
    return f"{prompt}\n\n\n{_QA_CONTEXT_HEADER[resolved]}\n{normalized}"


def _checked_tier(tier: object) -> RiskTier:
    if isinstance(tier, RiskTier):
        return tier
    try:
        return RiskTier(tier)
    except ValueError:
        raise MalformedEvaluation(f"Unknown risk level: {tier!r}") from None


def _checked_recommendations(evaluation: RiskEvaluation) -> list[str]:
    recommendations = getattr(evaluation, "recommendations", None)
    if isinstance(recommendations, (str, bytes)) or not isinstance(recommendations, Sequence):
        raise MalformedEvaluation("recommendations must be a sequence of strings")
    return [str(item) for item in recommendations]


def _numbered(items: Sequence[str]) -> str:
    return "\n".join(f"{idx}. {item}" for idx, item in enumerate(items, start=1))


def _panel_lines(panel: BloodPanel, locale: str) -> str:
    ratio_label, glucose_label, triglyceride_label = _PANEL_LABELS[locale]
    return "\n".join(
        [
            f"- LDL: {panel.ldl} mg/dL",
            f"- HDL: {panel.hdl} mg/dL",
            f"- {ratio_label}: {panel.ldl_hdl_ratio:.2f}",
            f"- {glucose_label}: {panel.glucose} mg/dL",
            f"- {triglyceride_label}: {panel.triglyceride} mg/dL",
        ]
    )


def _script_example(evaluation: RiskEvaluation, locale: str) -> str:
    name = evaluation.metric_name
    value = evaluation.metric_value
    tier = _checked_tier(evaluation.risk_level).value
    if locale == "en":
        title = f"Understanding your {name}"
        subtitle = "Let's make sense of your health data"
        opening = f"Hello. Today we will explain your {name}."
        reading = f"Your {name} is {value}."
    else:
        title = f"{name}の解説"
        subtitle = "あなたの健康データを理解しましょう"
        opening = f"こんにちは。今日はあなたの{name}について解説します。"
        reading = f"あなたの{name}は{value}です。"
    return (
        "{\n"
        '  "version": "1.0",\n'
        f'  "title": "{title}",\n'
        '  "scenes": [\n'
        "    {\n"
        '      "duration": 5,\n'
        f'      "narration": "{opening}",\n'
        '      "visuals": {\n'
        '        "type": "title",\n'
        f'        "text": "{title}",\n'
        f'        "subtitle": "{subtitle}"\n'
        "      }\n"
        "    },\n"
        "    {\n"
        '      "duration": 8,\n'
        f'      "narration": "{reading}",\n'
        '      "visuals": {\n'
        '        "type": "metric_display",\n'
        f'        "value": {value},\n'
        f'        "label": "{name}",\n'
        f'        "riskLevel": "{tier}"\n'
        "      }\n"
        "    }\n"
        "  ],\n"
        '  "voice": {\n'
        f'    "language": "{locale}",\n'
        '    "style": "friendly"\n'
        "  }\n"
        "}"
    )
