from __future__ import annotations

import math
from typing import Mapping, Sequence

from ..config import DRIFT_THRESHOLD, STABILITY_MIN_RUNS, STABILITY_TOLERANCE
from ..schemas import DriftResult, StabilityResult
from .errors import ConfigurationInconsistency

SIGNIFICANT_DRIFT_MULTIPLIER = 1.5


def _mean(values: Sequence[float]) -> float:
    if not values:
        return 0.0
    return sum(values) / len(values)


def _population_variance(values: Sequence[float]) -> float:
    center = _mean(values)
    return sum((x - center) ** 2 for x in values) / len(values)


def drift(current: float, previous: float | None, threshold: float = DRIFT_THRESHOLD) -> DriftResult:
    if previous is None:
        return DriftResult(has_drift=False, delta=0, direction="none", severity="none")

    delta = current - previous
    magnitude = abs(delta)

    direction = "none"
    if delta > 0:
        direction = "improved"
    elif delta < 0:
        direction = "declined"

    severity = "none"
    if magnitude > threshold * SIGNIFICANT_DRIFT_MULTIPLIER:
        severity = "significant"
    elif magnitude > threshold:
        severity = "moderate"

    return DriftResult(
        has_drift=magnitude > threshold,
        delta=delta,
        direction=direction,
        severity=severity,
    )


def dimension_drift(
    current: Mapping[str, float],
    previous: Mapping[str, float] | None,
    threshold: float = DRIFT_THRESHOLD,
) -> dict[str, DriftResult]:
    """Per-dimension drift, only for keys present in both snapshots."""
    if previous is None:
        return {}
    return {
        key: drift(value, previous[key], threshold)
        for key, value in current.items()
        if previous.get(key) is not None
    }


def stability(
    completed_scores: Sequence[float],
    tolerance: float = STABILITY_TOLERANCE,
    min_runs: int = STABILITY_MIN_RUNS,
) -> StabilityResult:
    """
    Variance-based confidence over the most recent completed runs (oldest first).
    Never stable before `min_runs` completed runs exist.
    """
    if min_runs < 1:
        raise ConfigurationInconsistency(f"Stability needs at least one run, got min_runs={min_runs}")
    if len(completed_scores) < min_runs:
        return StabilityResult(is_stable=False, variance=None, stability_status="provisional")

    recent = [float(s) for s in completed_scores[-min_runs:]]
    variance = _population_variance(recent)
    is_stable = variance < tolerance
    return StabilityResult(
        is_stable=is_stable,
        variance=math.floor(variance * 100 + 0.5) / 100,
        stability_status="stable" if is_stable else "provisional",
    )
