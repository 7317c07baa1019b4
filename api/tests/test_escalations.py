from __future__ import annotations

import datetime as dt

import pytest

from trustgraph_api.services.drift import drift
from trustgraph_api.services.escalations import (
    drift_escalation,
    evaluate_escalations,
    low_score_escalation,
    overdue_escalation,
)


@pytest.mark.parametrize(
    ("overall", "severity"),
    [(50, None), (49, "medium"), (40, "medium"), (39, "high"), (30, "high"), (29, "critical")],
)
def test_low_score_severity(overall: float, severity: str | None) -> None:
    result = low_score_escalation(overall)

    if severity is None:
        assert result is None
    else:
        assert result is not None
        assert result.trigger == "low_score"
        assert result.severity == severity


def test_low_score_reason_names_module() -> None:
    assert low_score_escalation(45, "sys").reason == "TrustSys assessment score below threshold (45 < 50)"
    assert low_score_escalation(45, "org").reason.startswith("TrustOrg survey")


@pytest.mark.parametrize(
    ("current", "previous", "severity"),
    [(75, 60, None), (84, 68, "medium"), (40, 61, "high"), (30, 56, "critical")],
)
def test_drift_escalation_severity(current: float, previous: float, severity: str | None) -> None:
    result = drift_escalation(drift(current, previous))

    if severity is None:
        assert result is None
    else:
        assert result is not None
        assert result.severity == severity


def test_drift_escalation_reason_mentions_direction() -> None:
    result = drift_escalation(drift(40, 61))

    assert result is not None
    assert "declined by 21 points" in result.reason


def test_overdue_uses_injected_clock() -> None:
    completed = dt.datetime(2026, 3, 1, tzinfo=dt.timezone.utc)

    assert overdue_escalation(completed, 30, completed + dt.timedelta(days=10)) is None
    result = overdue_escalation(completed, 30, completed + dt.timedelta(days=31))
    assert result is not None
    assert result.trigger == "overdue"
    assert "every 30 days" in result.reason


def test_evaluate_escalations_collects_in_order() -> None:
    completed = dt.datetime(2026, 3, 1, tzinfo=dt.timezone.utc)

    found = evaluate_escalations(
        overall=35,
        drift_result=drift(35, 60),
        last_completed_at=completed,
        frequency_days=30,
        now=completed + dt.timedelta(days=45),
    )

    assert [e.trigger for e in found] == ["low_score", "significant_drift", "overdue"]
    assert [e.severity for e in found] == ["high", "high", "high"]


def test_healthy_run_has_no_escalations() -> None:
    assert evaluate_escalations(overall=72, drift_result=drift(72, 70)) == []
