from __future__ import annotations

"""
Resolve a single lab reading into a risk evaluation.

Design intent:
- One generic resolver walks the per-metric band tables.
- Evaluation is pure and total over finite values; only the metric is checked.
"""

from typing import TYPE_CHECKING, Any, Iterable

from .models import MetricIdentifier, RiskEvaluation, RiskTier, UnknownMetric, UnsupportedLocale
from .tables import (
    DEFAULT_LOCALE,
    DISPLAY_NAMES,
    METRIC_RULES,
    RECOMMENDATIONS,
    SUPPORTED_LOCALES,
    Band,
    MetricRule,
)

if TYPE_CHECKING:
    from .panel import BloodPanel

__all__ = [
    "MetricIdentifier",
    "RiskEvaluation",
    "RiskTier",
    "UnknownMetric",
    "UnsupportedLocale",
    "evaluate",
    "evaluate_panel",
    "parse_metric",
    "resolve_tier",
    "worst_tier",
]


def parse_metric(metric: Any) -> MetricIdentifier:
    if isinstance(metric, MetricIdentifier):
        return metric
    if not isinstance(metric, str):
        raise UnknownMetric(metric)
    try:
        return MetricIdentifier(metric)
    except ValueError:
        raise UnknownMetric(metric) from None


def resolve_locale(locale: str | None) -> str:
    resolved = (locale or DEFAULT_LOCALE).strip().lower()
    if resolved not in SUPPORTED_LOCALES:
        raise UnsupportedLocale(resolved, SUPPORTED_LOCALES)
    return resolved


def resolve_tier(rule: MetricRule, value: float) -> RiskTier:
    for band in rule.bands:
        if _satisfies(rule, band, value):
            return band.tier
    return rule.fallback_tier


def _satisfies(rule: MetricRule, band: Band, value: float) -> bool:
    if rule.direction == "ascending_is_worse":
        return value <= band.limit if band.inclusive else value < band.limit
    return value >= band.limit if band.inclusive else value > band.limit


def evaluate(metric: MetricIdentifier | str, value: float, *, locale: str = DEFAULT_LOCALE) -> RiskEvaluation:
    identifier = parse_metric(metric)
    resolved_locale = resolve_locale(locale)
    rule = METRIC_RULES[identifier]
    tier = resolve_tier(rule, value)
    return RiskEvaluation(
        metric=identifier,
        metric_name=DISPLAY_NAMES[resolved_locale][identifier],
        metric_value=value,
        risk_level=tier,
        target_value=rule.target_value,
        recommendations=RECOMMENDATIONS[resolved_locale][identifier][tier],
    )


def evaluate_panel(panel: "BloodPanel", *, locale: str = DEFAULT_LOCALE) -> dict[MetricIdentifier, RiskEvaluation]:
    return {
        identifier: evaluate(identifier, panel.value_for(identifier), locale=locale)
        for identifier in MetricIdentifier
    }


def worst_tier(evaluations: Iterable[RiskEvaluation]) -> RiskTier:
    worst = RiskTier.NORMAL
    for item in evaluations:
        if item.risk_level.severity > worst.severity:
            worst = item.risk_level
    return worst
