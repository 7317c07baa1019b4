from __future__ import annotations

import math
from dataclasses import dataclass
from types import MappingProxyType
from typing import Iterable, Literal, Mapping

from .errors import ConfigurationInconsistency

AnswerType = Literal["enum_maturity", "boolean"]

QUESTION_BANK_VERSION = "v1"

DIMENSIONS: tuple[str, ...] = (
    "Transparency",
    "Explainability",
    "Human Oversight",
    "Risk Controls",
    "Accountability",
)

MATURITY_LEVELS: tuple[str, ...] = ("none", "ad_hoc", "defined", "enforced", "automated")

MATURITY_LABELS: Mapping[str, str] = MappingProxyType(
    {
        "none": "None",
        "ad_hoc": "Ad-hoc",
        "defined": "Defined",
        "enforced": "Enforced",
        "automated": "Automated",
    }
)

EVIDENCE_TYPES: tuple[str, ...] = (
    "link",
    "document_ref",
    "ticket_ref",
    "policy_ref",
    "runbook_ref",
    "log_ref",
)

WEIGHT_TOLERANCE = 1e-9


@dataclass(frozen=True)
class Question:
    id: str
    dimension: str
    control: str
    prompt: str
    answer_type: AnswerType
    weight: float


def _q(
    qid: str,
    dimension: str,
    control: str,
    prompt: str,
    weight: float,
    answer_type: AnswerType = "enum_maturity",
) -> Question:
    return Question(
        id=qid,
        dimension=dimension,
        control=control,
        prompt=prompt,
        answer_type=answer_type,
        weight=weight,
    )


QUESTIONS: tuple[Question, ...] = (
    # Transparency
    _q("TXS_TRAN_01", "Transparency", "System purpose documented", "System purpose documented?", 0.20),
    _q(
        "TXS_TRAN_02",
        "Transparency",
        "Data sources documented",
        "Data sources documented (inputs, datasets, RAG corpora)?",
        0.20,
    ),
    _q(
        "TXS_TRAN_03",
        "Transparency",
        "Known limitations documented",
        "Known limitations documented (failure modes, edge cases)?",
        0.20,
    ),
    _q(
        "TXS_TRAN_04",
        "Transparency",
        "User disclosures exist",
        "User disclosures exist (what it is, what it isn't, when to trust it)?",
        0.20,
    ),
    _q(
        "TXS_TRAN_05",
        "Transparency",
        "Change log exists",
        "Change log exists for model/prompt/data updates?",
        0.20,
    ),
    # Explainability
    _q(
        "TXS_EXPL_01",
        "Explainability",
        "Traceable reasoning artifacts",
        "Produces traceable reasoning artifacts (citations, sources, rationale) where applicable?",
        0.20,
    ),
    _q(
        "TXS_EXPL_02",
        "Explainability",
        "RAG grounding implemented",
        "RAG grounding implemented (citations required, fallback when missing)?",
        0.20,
        answer_type="boolean",
    ),
    _q(
        "TXS_EXPL_03",
        "Explainability",
        "Output confidence signal",
        'Output confidence/uncertainty signal present (e.g., confidence score, "insufficient info")?',
        0.20,
    ),
    _q(
        "TXS_EXPL_04",
        "Explainability",
        "Evaluation suite exists",
        "Evaluation suite exists (golden set / regression tests) for accuracy/grounding?",
        0.20,
    ),
    _q(
        "TXS_EXPL_05",
        "Explainability",
        "Explainability accessible to users",
        "Explainability accessible to target users (not just engineers)?",
        0.20,
    ),
    # Human Oversight
    _q(
        "TXS_HO_01",
        "Human Oversight",
        "Human-in-the-loop for high-risk",
        "Human-in-the-loop required for high-risk actions?",
        0.25,
    ),
    _q(
        "TXS_HO_02",
        "Human Oversight",
        "Escalation path exists",
        "Clear escalation path exists (when uncertain / policy violation / risk)?",
        0.20,
    ),
    _q(
        "TXS_HO_03",
        "Human Oversight",
        "Pause/kill-switch capability",
        "Ability to pause/kill-switch system quickly?",
        0.20,
        answer_type="boolean",
    ),
    _q(
        "TXS_HO_04",
        "Human Oversight",
        "Access control exists",
        "Access control exists (who can run/admin/change prompts/tools)?",
        0.20,
    ),
    _q(
        "TXS_HO_05",
        "Human Oversight",
        "Monitoring supports intervention",
        "Monitoring supports operator intervention (alerts, dashboards)?",
        0.15,
    ),
    # Risk Controls
    _q(
        "TXS_RISK_01",
        "Risk Controls",
        "Threat model / risk assessment",
        "Threat model or risk assessment exists (documented)?",
        0.20,
    ),
    _q(
        "TXS_RISK_02",
        "Risk Controls",
        "Data protection controls",
        "Data protection controls (PII filtering, retention, encryption) implemented?",
        0.20,
    ),
    _q(
        "TXS_RISK_03",
        "Risk Controls",
        "Tool/action sandboxing",
        "Tool/action sandboxing (least privilege, scoped credentials) implemented?",
        0.20,
    ),
    _q(
        "TXS_RISK_04",
        "Risk Controls",
        "Abuse prevention",
        "Abuse prevention (prompt injection defense, jailbreak checks, policy filters)?",
        0.20,
    ),
    _q(
        "TXS_RISK_05",
        "Risk Controls",
        "Incident response playbook",
        "Incident response playbook for model/system failures?",
        0.20,
    ),
    # Accountability
    _q(
        "TXS_ACC_01",
        "Accountability",
        "System owner named",
        "System owner named (role/person/team) + responsibilities documented?",
        0.20,
    ),
    _q(
        "TXS_ACC_02",
        "Accountability",
        "Audit logging enabled",
        "Audit logging enabled for inputs/outputs/actions (where permissible)?",
        0.25,
    ),
    _q(
        "TXS_ACC_03",
        "Accountability",
        "Versioning with rollback",
        "Versioning of prompts/models/tools with rollback path?",
        0.20,
    ),
    _q(
        "TXS_ACC_04",
        "Accountability",
        "Third-party dependency inventory",
        "Third-party dependency inventory (models, APIs, plugins) maintained?",
        0.15,
    ),
    _q(
        "TXS_ACC_05",
        "Accountability",
        "Compliance mapping",
        "Compliance mapping done (AI Act / ISO / SOC2 / sector rules) where relevant?",
        0.20,
    ),
)


def validate_question_bank(
    questions: Iterable[Question],
    dimensions: Iterable[str] = DIMENSIONS,
) -> None:
    """
    Fails loudly on a malformed bank: duplicate ids, unknown dimensions or
    answer types, non-positive weights, or per-dimension weights not closing to 1.0.
    """
    questions = list(questions)
    dimensions = tuple(dimensions)

    seen: set[str] = set()
    totals: dict[str, float] = {dim: 0.0 for dim in dimensions}
    for q in questions:
        if q.id in seen:
            raise ConfigurationInconsistency(f"Duplicate question id: {q.id}")
        seen.add(q.id)
        if q.dimension not in totals:
            raise ConfigurationInconsistency(f"{q.id}: unknown dimension {q.dimension!r}")
        if q.answer_type not in ("enum_maturity", "boolean"):
            raise ConfigurationInconsistency(f"{q.id}: unknown answer type {q.answer_type!r}")
        if q.weight <= 0:
            raise ConfigurationInconsistency(f"{q.id}: weight must be positive")
        totals[q.dimension] += q.weight

    for dim, total in totals.items():
        if not math.isclose(total, 1.0, rel_tol=0.0, abs_tol=WEIGHT_TOLERANCE):
            raise ConfigurationInconsistency(
                f"Weights for dimension {dim!r} sum to {total:.6f}, expected 1.0"
            )


validate_question_bank(QUESTIONS)

QUESTIONS_BY_ID: Mapping[str, Question] = MappingProxyType({q.id: q for q in QUESTIONS})


def questions_for_dimension(dimension: str) -> tuple[Question, ...]:
    return tuple(q for q in QUESTIONS if q.dimension == dimension)
