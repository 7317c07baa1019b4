from __future__ import annotations

import datetime as dt

import pytest

from trustgraph_api.services.errors import StaleTransition
from trustgraph_api.services.lifecycle import (
    LIFECYCLE_STATUSES,
    TRANSITIONS,
    can_transition,
    days_until_due,
    due_date,
    is_expired,
    is_reassessment,
    lifecycle_config,
    next_version_number,
    require_transition,
    stability_badge,
)

COMPLETED_AT = dt.datetime(2026, 1, 10, 9, 0, tzinfo=dt.timezone.utc)


def test_transition_table_covers_every_status() -> None:
    assert set(TRANSITIONS) == set(LIFECYCLE_STATUSES)
    for targets in TRANSITIONS.values():
        assert set(targets) <= set(LIFECYCLE_STATUSES)


@pytest.mark.parametrize(
    ("from_status", "to_status", "allowed"),
    [
        ("not_started", "in_progress", True),
        ("in_progress", "completed", True),
        ("completed", "stable", True),
        ("completed", "expired", True),
        ("stable", "expired", True),
        ("expired", "in_progress", True),
        ("stable", "in_progress", True),
        ("stable", "completed", False),
        ("not_started", "completed", False),
        ("expired", "stable", False),
        ("in_progress", "in_progress", False),
    ],
)
def test_can_transition(from_status: str, to_status: str, allowed: bool) -> None:
    assert can_transition(from_status, to_status) is allowed


def test_require_transition_raises_stale_transition() -> None:
    with pytest.raises(StaleTransition) as excinfo:
        require_transition("stable", "completed")

    assert excinfo.value.from_status == "stable"
    assert excinfo.value.to_status == "completed"


def test_reassessment_starts_a_new_version() -> None:
    assert is_reassessment("expired", "in_progress") is True
    assert is_reassessment("not_started", "in_progress") is False
    assert next_version_number(None) == 1
    assert next_version_number(3) == 4


def test_expiry_with_injected_clock() -> None:
    before_due = COMPLETED_AT + dt.timedelta(days=89, hours=23)
    after_due = COMPLETED_AT + dt.timedelta(days=90, seconds=1)

    assert due_date(COMPLETED_AT, 90) == COMPLETED_AT + dt.timedelta(days=90)
    assert is_expired(COMPLETED_AT, 90, before_due) is False
    assert is_expired(COMPLETED_AT, 90, COMPLETED_AT + dt.timedelta(days=90)) is False
    assert is_expired(COMPLETED_AT, 90, after_due) is True


def test_expiry_without_cadence_never_expires() -> None:
    far_future = COMPLETED_AT + dt.timedelta(days=3650)

    assert is_expired(None, 90, far_future) is False
    assert is_expired(COMPLETED_AT, None, far_future) is False
    assert is_expired(COMPLETED_AT, 0, far_future) is False
    assert days_until_due(COMPLETED_AT, None, far_future) is None


def test_naive_timestamps_are_treated_as_utc() -> None:
    naive = COMPLETED_AT.replace(tzinfo=None)

    assert is_expired(naive, 30, COMPLETED_AT + dt.timedelta(days=31)) is True


def test_days_until_due_rounds_up_and_goes_negative() -> None:
    assert days_until_due(COMPLETED_AT, 30, COMPLETED_AT) == 30
    assert days_until_due(COMPLETED_AT, 30, COMPLETED_AT + dt.timedelta(days=10, hours=1)) == 20
    assert days_until_due(COMPLETED_AT, 30, COMPLETED_AT + dt.timedelta(days=35)) == -5


def test_lifecycle_config_buttons_follow_module() -> None:
    org = lifecycle_config("not_started", "org")
    sys_cfg = lifecycle_config("not_started", "sys")

    assert org.buttons[0].label == "Start Survey"
    assert sys_cfg.buttons[0].label == "Start Assessment"
    assert org.warning is None


def test_expired_config_carries_warning() -> None:
    cfg = lifecycle_config("expired", "sys")

    assert cfg.badge_label == "Expired"
    assert cfg.warning is not None
    assert [b.action for b in cfg.buttons] == ["reassess", "view_results", "history"]
    assert cfg.buttons[0].variant == "warning"


def test_stability_badge_labels() -> None:
    assert stability_badge("stable")["label"] == "Stable"
    assert stability_badge("provisional")["label"] == "Provisional"
