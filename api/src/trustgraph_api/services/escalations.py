from __future__ import annotations

import datetime as dt

from ..schemas import DriftResult, Escalation
from .lifecycle import is_expired

ESCALATION_SCORE_THRESHOLD = 50
SIGNIFICANT_DRIFT_DELTA = 15


def _fmt(value: float) -> str:
    return f"{round(float(value), 1):g}"


def low_score_escalation(overall: float, module: str = "sys") -> Escalation | None:
    if overall >= ESCALATION_SCORE_THRESHOLD:
        return None
    if overall < 30:
        severity = "critical"
    elif overall < 40:
        severity = "high"
    else:
        severity = "medium"
    subject = "TrustSys assessment" if module == "sys" else "TrustOrg survey"
    return Escalation(
        trigger="low_score",
        severity=severity,
        reason=f"{subject} score below threshold ({_fmt(overall)} < {ESCALATION_SCORE_THRESHOLD})",
    )


def drift_escalation(result: DriftResult) -> Escalation | None:
    magnitude = abs(result.delta)
    if magnitude <= SIGNIFICANT_DRIFT_DELTA:
        return None
    if magnitude > 25:
        severity = "critical"
    elif magnitude > 20:
        severity = "high"
    else:
        severity = "medium"
    direction = "declined" if result.delta < 0 else "improved"
    return Escalation(
        trigger="significant_drift",
        severity=severity,
        reason=(
            f"Significant drift detected: score {direction} by {_fmt(magnitude)} points "
            f"(threshold: {SIGNIFICANT_DRIFT_DELTA})"
        ),
    )


def overdue_escalation(
    last_completed_at: dt.datetime | None,
    frequency_days: int | None,
    now: dt.datetime | None = None,
) -> Escalation | None:
    if not is_expired(last_completed_at, frequency_days, now):
        return None
    return Escalation(
        trigger="overdue",
        severity="high",
        reason=f"Assessment overdue for reassessment (policy: every {frequency_days} days)",
    )


def evaluate_escalations(
    *,
    overall: float | None,
    drift_result: DriftResult | None = None,
    module: str = "sys",
    last_completed_at: dt.datetime | None = None,
    frequency_days: int | None = None,
    now: dt.datetime | None = None,
) -> list[Escalation]:
    found = [
        low_score_escalation(overall, module) if overall is not None else None,
        drift_escalation(drift_result) if drift_result is not None else None,
        overdue_escalation(last_completed_at, frequency_days, now),
    ]
    return [item for item in found if item is not None]
