from __future__ import annotations

from dataclasses import dataclass
from types import MappingProxyType
from typing import Mapping


@dataclass(frozen=True)
class TierConfig:
    key: str
    label: str
    hex: str


TIER_CONFIGS: Mapping[str, TierConfig] = MappingProxyType(
    {
        "trusted": TierConfig(key="trusted", label="Trusted", hex="#16a34a"),
        "stable": TierConfig(key="stable", label="Stable", hex="#2563eb"),
        "elevated_risk": TierConfig(key="elevated_risk", label="Elevated Risk", hex="#d97706"),
        "critical": TierConfig(key="critical", label="Critical", hex="#dc2626"),
    }
)


def get_tier(score: float) -> str:
    if score >= 80:
        return "trusted"
    if score >= 65:
        return "stable"
    if score >= 50:
        return "elevated_risk"
    return "critical"


def tier_for_score(score: float) -> TierConfig:
    return TIER_CONFIGS[get_tier(score)]
