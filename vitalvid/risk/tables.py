from __future__ import annotations

"""
Static threshold and guidance tables for blood panel metrics.

Bands are walked in order; the first band whose limit the value satisfies
wins, otherwise the rule's fallback tier applies. `ascending_is_worse` means
larger values are riskier (limit is an upper bound); `descending_is_worse`
means smaller values are riskier (limit is a lower bound).
"""

from dataclasses import dataclass
from typing import Literal

from .models import MetricIdentifier, RiskTier

Direction = Literal["ascending_is_worse", "descending_is_worse"]

SUPPORTED_LOCALES: tuple[str, ...] = ("ja", "en")
DEFAULT_LOCALE = "ja"


@dataclass(frozen=True)
class Band:
    limit: float
    inclusive: bool
    tier: RiskTier


@dataclass(frozen=True)
class MetricRule:
    direction: Direction
    bands: tuple[Band, ...]
    fallback_tier: RiskTier
    target_value: float


METRIC_RULES: dict[MetricIdentifier, MetricRule] = {
    MetricIdentifier.LDL_HDL_RATIO: MetricRule(
        direction="ascending_is_worse",
        bands=(
            Band(limit=2.0, inclusive=True, tier=RiskTier.NORMAL),
            Band(limit=2.5, inclusive=True, tier=RiskTier.WARNING),
        ),
        fallback_tier=RiskTier.DANGER,
        target_value=2.0,
    ),
    MetricIdentifier.GLUCOSE: MetricRule(
        direction="ascending_is_worse",
        bands=(
            Band(limit=100, inclusive=False, tier=RiskTier.NORMAL),
            Band(limit=126, inclusive=False, tier=RiskTier.WARNING),
        ),
        fallback_tier=RiskTier.DANGER,
        target_value=100,
    ),
    MetricIdentifier.HDL: MetricRule(
        direction="descending_is_worse",
        bands=(
            Band(limit=60, inclusive=True, tier=RiskTier.NORMAL),
            Band(limit=40, inclusive=True, tier=RiskTier.WARNING),
        ),
        fallback_tier=RiskTier.DANGER,
        target_value=60,
    ),
    MetricIdentifier.TRIGLYCERIDE: MetricRule(
        direction="ascending_is_worse",
        bands=(
            Band(limit=150, inclusive=False, tier=RiskTier.NORMAL),
            Band(limit=200, inclusive=False, tier=RiskTier.WARNING),
        ),
        fallback_tier=RiskTier.DANGER,
        target_value=150,
    ),
}


DISPLAY_NAMES: dict[str, dict[MetricIdentifier, str]] = {
    "ja": {
        MetricIdentifier.LDL_HDL_RATIO: "LH比 (LH Ratio)",
        MetricIdentifier.GLUCOSE: "血糖値 (Glucose)",
        MetricIdentifier.HDL: "HDLコレステロール (HDL-C)",
        MetricIdentifier.TRIGLYCERIDE: "中性脂肪 (Triglyceride)",
    },
    "en": {
        MetricIdentifier.LDL_HDL_RATIO: "LH Ratio",
        MetricIdentifier.GLUCOSE: "Glucose",
        MetricIdentifier.HDL: "HDL Cholesterol (HDL-C)",
        MetricIdentifier.TRIGLYCERIDE: "Triglyceride",
    },
}


# Danger lists open with physician escalation in every locale.
RECOMMENDATIONS: dict[str, dict[MetricIdentifier, dict[RiskTier, tuple[str, ...]]]] = {
    "ja": {
        MetricIdentifier.LDL_HDL_RATIO: {
            RiskTier.NORMAL: (
                "現在の食生活を維持してください",
                "定期的な運動を続けましょう",
                "年1回の健康診断を受けましょう",
            ),
            RiskTier.WARNING: (
                "青魚(サバ、イワシ)を週3回食べる",
                "トランス脂肪酸を避ける",
                "有酸素運動を週150分実施",
                "ストレス管理を心がける",
            ),
            RiskTier.DANGER: (
                "医師に相談してください",
                "飽和脂肪酸の摂取を減らす",
                "オメガ3脂肪酸を積極的に摂取",
                "毎日30分以上の有酸素運動",
                "禁煙・節酒",
            ),
        },
        MetricIdentifier.GLUCOSE: {
            RiskTier.NORMAL: (
                "現在の食生活を維持してください",
                "定期的な運動を続けましょう",
            ),
            RiskTier.WARNING: (
                "糖質の摂取タイミングを見直す",
                "食物繊維を先に食べる(ベジファースト)",
                "食後30分以内に軽い運動",
                "精製糖質を減らす",
            ),
            RiskTier.DANGER: (
                "すぐに医師に相談してください",
                "糖質制限を検討",
                "毎食後の血糖値測定",
                "薬物療法の可能性について医師と相談",
            ),
        },
        MetricIdentifier.HDL: {
            RiskTier.NORMAL: (
                "良好な状態です。現在の生活習慣を維持しましょう",
            ),
            RiskTier.WARNING: (
                "有酸素運動を増やす",
                "オリーブオイルなど良質な脂質を摂取",
                "禁煙(喫煙者の場合)",
            ),
            RiskTier.DANGER: (
                "医師に相談してください",
                "運動習慣の確立",
                "食事療法の見直し",
                "薬物療法の検討",
            ),
        },
        MetricIdentifier.TRIGLYCERIDE: {
            RiskTier.NORMAL: (
                "現在の食生活を維持してください",
            ),
            RiskTier.WARNING: (
                "アルコール摂取を減らす",
                "糖質・脂質の過剰摂取を避ける",
                "オメガ3脂肪酸を摂取",
                "定期的な運動",
            ),
            RiskTier.DANGER: (
                "医師に相談してください",
                "アルコール制限",
                "糖質制限食の検討",
                "運動療法の開始",
                "薬物療法の検討",
            ),
        },
    },
    "en": {
        MetricIdentifier.LDL_HDL_RATIO: {
            RiskTier.NORMAL: (
                "Keep up your current eating habits",
                "Continue exercising regularly",
                "Get a health check-up once a year",
            ),
            RiskTier.WARNING: (
                "Eat oily fish (mackerel, sardines) three times a week",
                "Avoid trans fats",
                "Get 150 minutes of aerobic exercise per week",
                "Keep stress under control",
            ),
            RiskTier.DANGER: (
                "Consult a physician",
                "Reduce saturated fat intake",
                "Actively include omega-3 fatty acids",
                "Do at least 30 minutes of aerobic exercise every day",
                "Stop smoking and drink in moderation",
            ),
        },
        MetricIdentifier.GLUCOSE: {
            RiskTier.NORMAL: (
                "Keep up your current eating habits",
                "Continue exercising regularly",
            ),
            RiskTier.WARNING: (
                "Review the timing of your carbohydrate intake",
                "Eat fiber first (vegetables before carbohydrates)",
                "Take light exercise within 30 minutes after meals",
                "Cut down on refined carbohydrates",
            ),
            RiskTier.DANGER: (
                "Consult a physician as soon as possible",
                "Consider restricting carbohydrates",
                "Measure blood glucose after every meal",
                "Discuss the possibility of medication with your physician",
            ),
        },
        MetricIdentifier.HDL: {
            RiskTier.NORMAL: (
                "You are in good shape. Keep up your current lifestyle",
            ),
            RiskTier.WARNING: (
                "Increase aerobic exercise",
                "Choose healthy fats such as olive oil",
                "Quit smoking (if you smoke)",
            ),
            RiskTier.DANGER: (
                "Consult a physician",
                "Build a regular exercise habit",
                "Review your diet plan",
                "Consider medication",
            ),
        },
        MetricIdentifier.TRIGLYCERIDE: {
            RiskTier.NORMAL: (
                "Keep up your current eating habits",
            ),
            RiskTier.WARNING: (
                "Reduce alcohol intake",
                "Avoid excess sugar and fat",
                "Include omega-3 fatty acids",
                "Exercise regularly",
            ),
            RiskTier.DANGER: (
                "Consult a physician",
                "Limit alcohol",
                "Consider a low-carbohydrate diet",
                "Start an exercise program",
                "Consider medication",
            ),
        },
    },
}
