from __future__ import annotations

"""
Typed risk contracts shared by the evaluator, prompt builders and API.

Design intent:
- Keep metric and tier vocabularies closed.
- Serialize evaluations to the dashboard wire format without extra keys.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any


class MetricIdentifier(str, Enum):
    LDL_HDL_RATIO = "ldl_hdl_ratio"
    GLUCOSE = "glucose"
    HDL = "hdl"
    TRIGLYCERIDE = "triglyceride"


class RiskTier(str, Enum):
    NORMAL = "normal"
    WARNING = "warning"
    DANGER = "danger"

    @property
    def severity(self) -> int:
        return _TIER_SEVERITY[self.value]


_TIER_SEVERITY = {"normal": 0, "warning": 1, "danger": 2}


class UnknownMetric(ValueError):
    """Raised when a metric identifier is outside the supported set."""

    def __init__(self, metric: Any):
        self.metric = metric
        supported = ", ".join(item.value for item in MetricIdentifier)
        super().__init__(f"Unknown metric type: {metric!r} (supported: {supported})")


class UnsupportedLocale(ValueError):
    def __init__(self, locale: str, supported: tuple[str, ...]):
        self.locale = locale
        super().__init__(f"Unsupported locale: {locale!r} (supported: {', '.join(supported)})")


@dataclass(frozen=True)
class RiskEvaluation:
    metric: MetricIdentifier
    metric_name: str
    metric_value: float
    risk_level: RiskTier
    target_value: float
    recommendations: tuple[str, ...]

    def to_dict(self) -> dict[str, Any]:
        return {
            "metric_name": self.metric_name,
            "metric_value": self.metric_value,
            "risk_level": self.risk_level.value,
            "target_value": self.target_value,
            "recommendations": list(self.recommendations),
        }
