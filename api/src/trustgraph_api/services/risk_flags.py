from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, Mapping, Sequence

from ..schemas import Answer, RiskFlagItem
from .errors import ConfigurationInconsistency
from .question_bank import QUESTIONS, QUESTIONS_BY_ID, Question
from .scoring import score_answered


@dataclass(frozen=True)
class RiskRule:
    code: str
    label: str
    description: str
    question_id: str
    # Fires when the normalized score is strictly below this floor.
    floor: float


RISK_RULES: tuple[RiskRule, ...] = (
    RiskRule(
        code="NO_KILL_SWITCH",
        label="No kill switch",
        description="The system lacks a verified kill-switch or pause capability.",
        question_id="TXS_HO_03",
        floor=1.0,
    ),
    RiskRule(
        code="WEAK_AUDIT_LOGGING",
        label="Weak audit logging",
        description="Audit logging maturity is below 'defined', meaning logs may be incomplete or inconsistent.",
        question_id="TXS_ACC_02",
        floor=0.5,
    ),
    RiskRule(
        code="WEAK_TOOL_SANDBOX",
        label="Weak tool sandboxing",
        description="Tool/action sandboxing maturity is below 'enforced', creating privilege escalation risk.",
        question_id="TXS_RISK_03",
        floor=0.75,
    ),
    RiskRule(
        code="NO_THREAT_MODEL",
        label="No threat model",
        description="No threat model or risk assessment exists for this system.",
        question_id="TXS_RISK_01",
        floor=0.25,
    ),
)


def validate_risk_rules(rules: Iterable[RiskRule]) -> None:
    seen: set[str] = set()
    for rule in rules:
        if rule.code in seen:
            raise ConfigurationInconsistency(f"Duplicate risk rule code: {rule.code}")
        seen.add(rule.code)
        if rule.question_id not in QUESTIONS_BY_ID:
            raise ConfigurationInconsistency(f"Risk rule {rule.code} references unknown question {rule.question_id}")
        if not 0.0 < rule.floor <= 1.0:
            raise ConfigurationInconsistency(f"Risk rule {rule.code} floor must be in (0, 1]")


validate_risk_rules(RISK_RULES)


def _flag(rule: RiskRule) -> RiskFlagItem:
    return RiskFlagItem(code=rule.code, label=rule.label, description=rule.description, source="computed")


def evaluate_risk(
    answers: Mapping[str, Answer],
    *,
    evidence_cap_enabled: bool = False,
    rules: Sequence[RiskRule] = RISK_RULES,
    questions: Sequence[Question] = QUESTIONS,
) -> list[RiskFlagItem]:
    """Computed flags in rule-table order. An unanswered control counts as failing its rule."""
    scores = score_answered(answers, evidence_cap_enabled=evidence_cap_enabled, questions=questions)
    flags: list[RiskFlagItem] = []
    for rule in rules:
        value = scores.get(rule.question_id)
        if value is None or value < rule.floor:
            flags.append(_flag(rule))
    return flags


def merge_flags(computed: Sequence[RiskFlagItem], previous: Sequence[RiskFlagItem]) -> list[RiskFlagItem]:
    admin = [flag for flag in previous if flag.source == "admin"]
    fresh = [flag.model_copy(update={"source": "computed"}) for flag in computed]
    return fresh + [flag.model_copy() for flag in admin]
