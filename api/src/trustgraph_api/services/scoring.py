from __future__ import annotations

import math
from types import MappingProxyType
from typing import Mapping, Sequence

from ..schemas import Answer, Evidence, ScoreResult
from .errors import IncompleteAnswers, InvalidAnswerShape
from .question_bank import DIMENSIONS, QUESTIONS, Question

MATURITY_SCORES: Mapping[str, float] = MappingProxyType(
    {
        "none": 0.0,
        "ad_hoc": 0.25,
        "defined": 0.5,
        "enforced": 0.75,
        "automated": 1.0,
    }
)

STRONG_EVIDENCE_TYPES = frozenset({"link", "ticket_ref", "log_ref", "runbook_ref", "policy_ref"})
NO_EVIDENCE_CAP = 0.4
WEAK_EVIDENCE_CAP = 0.6


def clamp01(value: float | int | None) -> float:
    if value is None:
        return 0.0
    return max(0.0, min(1.0, float(value)))


def round_score(value: float) -> int:
    # Half-up on the 0..100 domain; built-in round() is half-to-even.
    return max(0, min(100, math.floor(float(value) + 0.5)))


def evidence_cap(evidence: Evidence | None) -> float:
    """
    Upper bound on a question score given its supporting evidence. Only applied
    when the evidence cap policy is enabled; evidence is audit metadata otherwise.
    """
    if evidence is None:
        return NO_EVIDENCE_CAP
    has_pointer = bool(evidence.pointer and evidence.pointer.strip())
    if evidence.type in STRONG_EVIDENCE_TYPES and has_pointer:
        return 1.0
    return WEAK_EVIDENCE_CAP


def base_score(question: Question, answer: Answer) -> float:
    if answer.maturity is not None and answer.boolean is not None:
        raise InvalidAnswerShape(question.id, "answer populates both maturity and boolean")

    if question.answer_type == "boolean":
        if answer.boolean is None:
            raise InvalidAnswerShape(question.id, "boolean question requires a boolean answer")
        return 1.0 if answer.boolean else 0.0

    if answer.maturity is None:
        raise InvalidAnswerShape(question.id, "maturity question requires a maturity level")
    return MATURITY_SCORES[answer.maturity]


def normalize_answer(question: Question, answer: Answer, *, evidence_cap_enabled: bool = False) -> float:
    value = base_score(question, answer)
    if evidence_cap_enabled:
        value = min(value, evidence_cap(answer.evidence))
    return clamp01(value)


def _check_known_ids(answers: Mapping[str, Answer], questions: Sequence[Question]) -> None:
    known = {q.id for q in questions}
    for qid in sorted(answers):
        if qid not in known:
            raise InvalidAnswerShape(qid, "unknown question id")


def missing_question_ids(answers: Mapping[str, Answer], questions: Sequence[Question] = QUESTIONS) -> list[str]:
    return [q.id for q in questions if answers.get(q.id) is None]


def require_complete(answers: Mapping[str, Answer], questions: Sequence[Question] = QUESTIONS) -> None:
    missing = missing_question_ids(answers, questions)
    if missing:
        raise IncompleteAnswers(missing)


def score_answered(
    answers: Mapping[str, Answer],
    *,
    evidence_cap_enabled: bool = False,
    questions: Sequence[Question] = QUESTIONS,
) -> dict[str, float]:
    """Normalized score for every answered bank question, in bank order."""
    _check_known_ids(answers, questions)
    scores: dict[str, float] = {}
    for q in questions:
        answer = answers.get(q.id)
        if answer is None:
            continue
        scores[q.id] = normalize_answer(q, answer, evidence_cap_enabled=evidence_cap_enabled)
    return scores


def normalize_answers(
    answers: Mapping[str, Answer],
    *,
    evidence_cap_enabled: bool = False,
    questions: Sequence[Question] = QUESTIONS,
) -> dict[str, float]:
    require_complete(answers, questions)
    return score_answered(answers, evidence_cap_enabled=evidence_cap_enabled, questions=questions)


def dimension_score(
    question_scores: Mapping[str, float],
    dimension: str,
    questions: Sequence[Question] = QUESTIONS,
) -> int:
    total = 0.0
    for q in questions:
        if q.dimension != dimension:
            continue
        total += question_scores[q.id] * q.weight
    return round_score(total * 100.0)


def overall_score(dimension_scores: Mapping[str, float]) -> int:
    values = [float(dimension_scores[dim]) for dim in DIMENSIONS]
    return round_score(sum(values) / len(values))


def score(
    answers: Mapping[str, Answer],
    *,
    evidence_cap_enabled: bool = False,
    questions: Sequence[Question] = QUESTIONS,
) -> ScoreResult:
    question_scores = normalize_answers(answers, evidence_cap_enabled=evidence_cap_enabled, questions=questions)
    dimension_scores = {dim: dimension_score(question_scores, dim, questions) for dim in DIMENSIONS}
    return ScoreResult(dimension_scores=dimension_scores, overall=overall_score(dimension_scores))
