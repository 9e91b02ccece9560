from __future__ import annotations

import math
from dataclasses import asdict, dataclass
from typing import Any

from .models import MetricIdentifier


class UnknownPreset(KeyError):
    def __init__(self, name: str):
        self.name = name
        super().__init__(f"Unknown preset: {name!r} (available: {', '.join(PRESET_NAMES)})")

    def __str__(self) -> str:
        return str(self.args[0])


def derive_ratio(ldl: float, hdl: float) -> float | None:
    if hdl is None or ldl is None or hdl <= 0:
        return None
    return ldl / hdl


@dataclass(frozen=True)
class BloodPanel:
    ldl: float
    hdl: float
    ldl_hdl_ratio: float
    glucose: float
    triglyceride: float

    def __post_init__(self) -> None:
        derived = derive_ratio(self.ldl, self.hdl)
        if derived is not None and not math.isclose(self.ldl_hdl_ratio, derived, rel_tol=1e-9):
            raise ValueError(
                f"ldl_hdl_ratio={self.ldl_hdl_ratio} does not match ldl/hdl={derived:.6f}"
            )

    @classmethod
    def create(
        cls,
        *,
        ldl: float,
        hdl: float,
        glucose: float,
        triglyceride: float,
        ldl_hdl_ratio: float | None = None,
    ) -> "BloodPanel":
        # Ratio is only caller-supplied when HDL cannot divide.
        ratio = derive_ratio(ldl, hdl)
        if ratio is None:
            ratio = 0.0 if ldl_hdl_ratio is None else float(ldl_hdl_ratio)
        return cls(
            ldl=ldl,
            hdl=hdl,
            ldl_hdl_ratio=ratio,
            glucose=glucose,
            triglyceride=triglyceride,
        )

    def value_for(self, metric: MetricIdentifier) -> float:
        return getattr(self, MetricIdentifier(metric).value)

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


_PRESETS: dict[str, dict[str, float]] = {
    "healthy": {"ldl": 100, "hdl": 65, "glucose": 90, "triglyceride": 100},
    "warning": {"ldl": 140, "hdl": 50, "glucose": 110, "triglyceride": 180},
    "danger": {"ldl": 180, "hdl": 35, "glucose": 140, "triglyceride": 250},
}

PRESET_NAMES: tuple[str, ...] = tuple(_PRESETS)


def load_preset(name: str) -> BloodPanel:
    values = _PRESETS.get(str(name or "").strip().lower())
    if values is None:
        raise UnknownPreset(str(name))
    return BloodPanel.create(**values)
