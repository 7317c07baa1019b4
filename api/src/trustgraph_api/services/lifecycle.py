from __future__ import annotations

import datetime as dt
import math
from types import MappingProxyType
from typing import Mapping

from ..schemas import LifecycleButton, LifecycleConfigOut
from .errors import StaleTransition

LIFECYCLE_STATUSES: tuple[str, ...] = ("not_started", "in_progress", "completed", "stable", "expired")

# in_progress reached from completed/stable/expired is a re-assessment: a new run, not a mutation.
TRANSITIONS: Mapping[str, tuple[str, ...]] = MappingProxyType(
    {
        "not_started": ("in_progress",),
        "in_progress": ("completed",),
        "completed": ("stable", "expired", "in_progress"),
        "stable": ("expired", "in_progress"),
        "expired": ("in_progress",),
    }
)

REASSESSMENT_SOURCES = frozenset({"completed", "stable", "expired"})

BADGE_LABELS: Mapping[str, str] = MappingProxyType(
    {
        "not_started": "Not Started",
        "in_progress": "In Progress",
        "completed": "Completed",
        "stable": "Stable",
        "expired": "Expired",
    }
)

EXPIRED_WARNING = "Trust status expired. Reassessment required."

SECONDS_PER_DAY = 86400


def _utcnow() -> dt.datetime:
    return dt.datetime.now(dt.timezone.utc)


def _as_utc(value: dt.datetime) -> dt.datetime:
    if value.tzinfo is None:
        return value.replace(tzinfo=dt.timezone.utc)
    return value.astimezone(dt.timezone.utc)


def allowed_next(status: str) -> tuple[str, ...]:
    return TRANSITIONS.get(status, ())


def can_transition(from_status: str, to_status: str) -> bool:
    return to_status in TRANSITIONS.get(from_status, ())


def require_transition(from_status: str, to_status: str) -> None:
    if not can_transition(from_status, to_status):
        raise StaleTransition(from_status, to_status)


def is_reassessment(from_status: str, to_status: str) -> bool:
    return to_status == "in_progress" and from_status in REASSESSMENT_SOURCES


def next_version_number(current_version: int | None) -> int:
    return 1 if current_version is None else current_version + 1


def due_date(last_completed_at: dt.datetime | None, frequency_days: int | None) -> dt.datetime | None:
    if last_completed_at is None or not frequency_days or frequency_days <= 0:
        return None
    return _as_utc(last_completed_at) + dt.timedelta(days=frequency_days)


def is_expired(
    last_completed_at: dt.datetime | None,
    frequency_days: int | None,
    now: dt.datetime | None = None,
) -> bool:
    due = due_date(last_completed_at, frequency_days)
    if due is None:
        return False
    reference = _as_utc(now) if now is not None else _utcnow()
    return reference > due


def days_until_due(
    last_completed_at: dt.datetime | None,
    frequency_days: int | None,
    now: dt.datetime | None = None,
) -> int | None:
    """Whole days until reassessment is due; negative when overdue, None without a cadence."""
    due = due_date(last_completed_at, frequency_days)
    if due is None:
        return None
    reference = _as_utc(now) if now is not None else _utcnow()
    return math.ceil((due - reference).total_seconds() / SECONDS_PER_DAY)


def _buttons(status: str, module: str) -> list[LifecycleButton]:
    start_label = "Start Survey" if module == "org" else "Start Assessment"
    reassess_label = "Re-Survey" if module == "org" else "Re-Assess"

    if status == "not_started":
        rows = [(start_label, "start", "primary")]
    elif status == "in_progress":
        rows = [
            ("Continue", "continue", "primary"),
            ("Manage", "manage", "secondary"),
            ("Delete", "delete", "destructive"),
        ]
    elif status == "completed":
        rows = [
            ("View Results", "view_results", "primary"),
            (reassess_label, "reassess", "secondary"),
            ("Manage", "manage", "secondary"),
            ("History", "history", "secondary"),
        ]
    elif status == "stable":
        rows = [
            ("View Results", "view_results", "primary"),
            (reassess_label, "reassess", "secondary"),
            ("History", "history", "secondary"),
        ]
    elif status == "expired":
        rows = [
            (reassess_label, "reassess", "warning"),
            ("View Results", "view_results", "secondary"),
            ("History", "history", "secondary"),
        ]
    else:
        rows = []
    return [LifecycleButton(label=label, action=action, variant=variant) for label, action, variant in rows]


def lifecycle_config(status: str, module: str) -> LifecycleConfigOut:
    if status not in BADGE_LABELS:
        raise ValueError(f"Unsupported lifecycle status: {status}")
    return LifecycleConfigOut(
        status=status,
        badge_label=BADGE_LABELS[status],
        buttons=_buttons(status, module),
        warning=EXPIRED_WARNING if status == "expired" else None,
    )


def stability_badge(stability_status: str) -> dict[str, str]:
    if stability_status == "stable":
        return {"label": "Stable", "tooltip": "Confidence threshold met: 3 or more consistent runs"}
    return {"label": "Provisional", "tooltip": "Use with caution: fewer than 3 consistent runs"}
