from __future__ import annotations

from dataclasses import dataclass
from types import MappingProxyType
from typing import Mapping

from ..schemas import DriverEntry, ExecSummaryOut, PriorityEntry, SummaryInputs
from .tiers import get_tier

DIMENSION_KEYS: tuple[str, ...] = ("transparency", "inclusion", "confidence", "explainability", "risk")

DIMENSION_LABELS: Mapping[str, str] = MappingProxyType(
    {
        "transparency": "Transparency",
        "inclusion": "Inclusion",
        "confidence": "Confidence",
        "explainability": "Explainability",
        "risk": "Risk",
    }
)

STRENGTH_FLOOR = 75
WATCH_FLOOR = 60
TREND_DEADBAND = 3

WHY_TEMPLATES: Mapping[str, Mapping[str, str]] = MappingProxyType(
    {
        "transparency": {
            "strength": "Decision context is visible enough for people to execute with confidence.",
            "watch": "Decision context is uneven; some teams act with clarity, others fill gaps with assumptions.",
            "weak": "Low visibility into decisions is likely creating friction, rumours, and slower execution.",
        },
        "inclusion": {
            "strength": "People feel able to contribute and challenge, reducing hidden risk.",
            "watch": "Participation is uneven; some voices dominate and dissent may be filtered.",
            "weak": "Low psychological safety likely suppresses challenge and delays surfacing problems.",
        },
        "confidence": {
            "strength": "Leadership intent and follow-through are credible, supporting pace.",
            "watch": "Follow-through is inconsistent, creating pockets of scepticism.",
            "weak": "Low confidence in leadership follow-through is likely reducing pace and engagement.",
        },
        "explainability": {
            "strength": "Understanding of how decisions are made is strong enough to sustain trust.",
            "watch": "Some decisions feel opaque, especially where AI or complexity is involved.",
            "weak": "Opaque decisions (especially AI-supported) are likely undermining trust and adoption.",
        },
        "risk": {
            "strength": "Controls and escalation are strong enough to prevent avoidable exposure.",
            "watch": "Controls exist but enforcement is inconsistent across teams or workflows.",
            "weak": "Risk controls are too weak; exposure may be rising without visibility or escalation.",
        },
    }
)


@dataclass(frozen=True)
class PriorityPack:
    title: str
    rationale: str
    probes: tuple[str, ...]


PRIORITY_PACKS: Mapping[str, PriorityPack] = MappingProxyType(
    {
        "transparency": PriorityPack(
            title="Increase decision transparency where it matters",
            rationale="Low transparency creates rumours, slows decisions, and reduces adoption.",
            probes=(
                "Where do people feel decisions are made without clear reasons?",
                "What information is consistently missing at the point of execution?",
                "Which decisions need a published 'why / trade-offs / owner' note?",
            ),
        ),
        "inclusion": PriorityPack(
            title="Raise psychological safety and inclusion signals",
            rationale="Low inclusion suppresses challenge and hides risk until late.",
            probes=(
                "Where do people avoid speaking up, and why?",
                "Which groups feel least heard in planning and review?",
                "Are dissenting views recorded and addressed or ignored?",
            ),
        ),
        "confidence": PriorityPack(
            title="Rebuild confidence in leadership follow-through",
            rationale="Low confidence reduces pace and increases silent disengagement.",
            probes=(
                "Which promises or priorities feel repeatedly broken?",
                "Where is execution drifting from stated strategy?",
                "Do teams believe feedback leads to change?",
            ),
        ),
        "explainability": PriorityPack(
            title="Improve explainability and human understanding",
            rationale="Low explainability makes AI-driven decisions brittle and hard to trust.",
            probes=(
                "Which outputs feel like black boxes to teams?",
                "Where is the 'reason / evidence / confidence' missing?",
                "Who is accountable when AI output is wrong?",
            ),
        ),
        "risk": PriorityPack(
            title="Strengthen governance controls and escalation",
            rationale="Low risk control increases operational and regulatory exposure.",
            probes=(
                "Where can risky decisions ship without review?",
                "Are escalation paths clear when confidence is low?",
                "Is monitoring continuous or periodic and manual?",
            ),
        ),
    }
)

HEADLINE_TEMPLATES: Mapping[str, str] = MappingProxyType(
    {
        "trusted": "TrustGraph is strong and resilient: your main advantage is {strong}, with attention needed on {weak}.",
        "stable": "TrustGraph is broadly stable: performance is supported by {strong}, but {weak} is the main constraint.",
        "elevated_risk": "TrustGraph is under strain: {weak} is pulling overall trust down and will limit performance unless addressed.",
        "critical": "TrustGraph is fragile: multiple trust drivers are failing, with {weak} the most urgent exposure.",
    }
)

POSTURE_TEMPLATES: Mapping[str, Mapping[str, str]] = MappingProxyType(
    {
        "org": {
            "reactive": (
                "Governance posture is reactive: controls and explainability aren't strong enough "
                "to reliably prevent avoidable risk."
            ),
            "proactive": (
                "Governance posture is proactive: oversight and explainability are strong enough "
                "to support safe autonomy."
            ),
            "developing": (
                "Governance posture is developing: foundations are present, but consistency "
                "and enforcement need strengthening."
            ),
        },
        "sys": {
            "reactive": (
                "System assurance posture is reactive: evaluation and monitoring aren't strong enough "
                "to reliably prevent avoidable risk."
            ),
            "proactive": (
                "System assurance posture is proactive: evaluation, monitoring, and auditability are "
                "strong enough to support safe autonomy."
            ),
            "developing": (
                "System assurance posture is developing: foundations are present, but consistency "
                "and enforcement need strengthening."
            ),
        },
    }
)


@dataclass(frozen=True)
class _DimEntry:
    key: str
    score: float
    severity: str

    @property
    def label(self) -> str:
        return DIMENSION_LABELS[self.key]


def _fmt(value: float) -> str:
    value = round(float(value), 1)
    return str(int(value)) if value.is_integer() else str(value)


def get_status(response_count: int, min_threshold: int) -> str:
    if response_count < min_threshold:
        return "insufficient_data"
    if response_count < min_threshold * 2:
        return "provisional"
    return "stable"


def get_severity(score: float) -> str:
    if score >= STRENGTH_FLOOR:
        return "strength"
    if score >= WATCH_FLOOR:
        return "watch"
    return "weak"


def _driver(entry: _DimEntry) -> DriverEntry:
    return DriverEntry(
        key=entry.key,
        label=entry.label,
        score=entry.score,
        severity=entry.severity,
        why=WHY_TEMPLATES[entry.key][entry.severity],
    )


def pick_drivers(entries: list[_DimEntry]) -> list[DriverEntry]:
    ascending = sorted(entries, key=lambda d: d.score)
    descending = sorted(entries, key=lambda d: -d.score)

    chosen = [d for d in ascending if d.severity in ("weak", "watch")][:2]
    taken = {d.key for d in chosen}
    remaining = [d for d in descending if d.key not in taken]

    extra = next((d for d in remaining if d.score >= STRENGTH_FLOOR), None)
    if extra is None:
        extra = next((d for d in remaining if d.severity == "watch"), None)
    if extra is None and remaining:
        extra = remaining[0]
    if extra is not None:
        chosen.append(extra)

    return [_driver(d) for d in chosen]


def make_headline(*, tier: str, status: str, drivers: list[DriverEntry]) -> str:
    weakest = next((d for d in drivers if d.severity in ("weak", "watch")), None)
    strongest = next((d for d in drivers if d.severity == "strength"), None)
    if strongest is None and drivers:
        strongest = drivers[-1]

    headline = HEADLINE_TEMPLATES[tier].format(
        weak=weakest.label if weakest else "multiple areas",
        strong=strongest.label if strongest else "relative strengths",
    )
    if status == "insufficient_data":
        headline = f"Early signal: {headline}"
    return headline


def posture_kind(risk: float, explainability: float) -> str:
    if risk >= STRENGTH_FLOOR and explainability >= STRENGTH_FLOOR:
        return "proactive"
    if risk < WATCH_FLOOR and explainability < WATCH_FLOOR:
        return "reactive"
    return "developing"


def make_posture(module: str, risk: float, explainability: float) -> str:
    return POSTURE_TEMPLATES[module][posture_kind(risk, explainability)]


def make_confidence_note(status: str, response_count: int, min_threshold: int) -> str:
    if status == "insufficient_data":
        plural = "" if response_count == 1 else "s"
        return (
            f"This is an early signal based on {response_count} response{plural}. "
            f"Results become more reliable at {min_threshold}+ responses."
        )
    if status == "provisional":
        return (
            f"Based on {response_count} responses. Directionally useful; "
            "expect some movement as more responses arrive."
        )
    return (
        f"Based on {response_count} responses. Stable enough to act on; "
        "track changes over time to confirm impact."
    )


def make_trend_note(
    score: float,
    dimensions: Mapping[str, float],
    previous_score: float | None,
    previous_dimensions: Mapping[str, float] | None,
) -> str | None:
    if previous_score is None:
        return None

    delta = score - previous_score
    if abs(delta) < TREND_DEADBAND:
        note = "Stable vs last snapshot."
    elif delta > 0:
        note = f"Improving (+{_fmt(delta)}) vs last snapshot."
    else:
        note = f"Declining ({_fmt(delta)}) vs last snapshot."

    if previous_dimensions:
        largest_key: str | None = None
        largest_move = 0.0
        for key in DIMENSION_KEYS:
            if key not in previous_dimensions or key not in dimensions:
                continue
            move = abs(dimensions[key] - previous_dimensions[key])
            if move > largest_move:
                largest_move = move
                largest_key = key
        if largest_key is not None and largest_move >= TREND_DEADBAND:
            dim_delta = dimensions[largest_key] - previous_dimensions[largest_key]
            direction = "up" if dim_delta > 0 else "down"
            note += f" Largest shift: {DIMENSION_LABELS[largest_key]} ({direction} {_fmt(abs(dim_delta))})."

    return note


def build_summary(inputs: SummaryInputs) -> ExecSummaryOut:
    """
    Deterministic executive narrative for one snapshot: response-adequacy
    status, tier, drivers, priorities, posture, and an optional trend note.
    """
    status = get_status(inputs.response_count, inputs.min_response_threshold)
    tier = get_tier(inputs.score)
    dims = inputs.dimensions.model_dump()

    entries = [_DimEntry(key=key, score=dims[key], severity=get_severity(dims[key])) for key in DIMENSION_KEYS]
    drivers = pick_drivers(entries)

    weakest_two = sorted(entries, key=lambda d: d.score)[:2]
    priorities = [
        PriorityEntry(
            title=PRIORITY_PACKS[d.key].title,
            rationale=PRIORITY_PACKS[d.key].rationale,
            probes=list(PRIORITY_PACKS[d.key].probes),
        )
        for d in weakest_two
    ]

    return ExecSummaryOut(
        status=status,
        tier=tier,
        headline=make_headline(tier=tier, status=status, drivers=drivers),
        posture=make_posture(inputs.module, dims["risk"], dims["explainability"]),
        primary_drivers=drivers,
        priorities=priorities,
        confidence_note=make_confidence_note(status, inputs.response_count, inputs.min_response_threshold),
        trend_note=make_trend_note(inputs.score, dims, inputs.previous_score, inputs.previous_dimensions),
    )
