"""
Risk evaluation boundary for VitalVid backend.

Design intent:
- Map a single lab reading to a tier, a target and ordered guidance.
- Keep thresholds in data tables walked by one resolver.
- Always escalate danger-tier readings to a physician.
"""

from .evaluator import (
    MetricIdentifier,
    RiskEvaluation,
    RiskTier,
    UnknownMetric,
    UnsupportedLocale,
    evaluate,
    evaluate_panel,
    worst_tier,
)
from .panel import PRESET_NAMES, BloodPanel, UnknownPreset, load_preset

__all__ = [
    "BloodPanel",
    "MetricIdentifier",
    "PRESET_NAMES",
    "RiskEvaluation",
    "RiskTier",
    "UnknownMetric",
    "UnknownPreset",
    "UnsupportedLocale",
    "evaluate",
    "evaluate_panel",
    "load_preset",
    "worst_tier",
]
