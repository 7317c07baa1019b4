from __future__ import annotations

import dataclasses
import math

import pytest

from conftest import build_answers
from trustgraph_api.schemas import Answer, Evidence
from trustgraph_api.services.errors import ConfigurationInconsistency, IncompleteAnswers, InvalidAnswerShape
from trustgraph_api.services.question_bank import (
    DIMENSIONS,
    MATURITY_LEVELS,
    QUESTIONS,
    QUESTIONS_BY_ID,
    validate_question_bank,
)
from trustgraph_api.services.recommendations import recommend
from trustgraph_api.services.risk_flags import evaluate_risk
from trustgraph_api.services.scoring import dimension_score, normalize_answers, round_score, score
from trustgraph_api.services.tiers import get_tier


def test_reference_bank_weights_close_per_dimension() -> None:
    assert len(QUESTIONS) == 25
    for dim in DIMENSIONS:
        total = sum(q.weight for q in QUESTIONS if q.dimension == dim)
        assert math.isclose(total, 1.0, abs_tol=1e-9), dim


def test_bank_with_broken_weights_is_rejected() -> None:
    broken = list(QUESTIONS)
    broken[0] = dataclasses.replace(broken[0], weight=0.3)
    with pytest.raises(ConfigurationInconsistency, match="Transparency"):
        validate_question_bank(broken)


def test_bank_with_duplicate_ids_is_rejected() -> None:
    with pytest.raises(ConfigurationInconsistency, match="Duplicate"):
        validate_question_bank([*QUESTIONS, QUESTIONS[0]])


def test_round_score_is_half_up() -> None:
    assert round_score(62.5) == 63
    assert round_score(49.5) == 50
    assert round_score(49.4999) == 49
    assert round_score(-3) == 0
    assert round_score(140) == 100


def test_all_defined_scores_fifty_everywhere(maturity_bank) -> None:
    answers = build_answers("defined", questions=maturity_bank)

    result = score(answers, questions=maturity_bank)

    assert result.dimension_scores == {dim: 50 for dim in DIMENSIONS}
    assert result.overall == 50
    assert get_tier(result.overall) == "elevated_risk"
    assert recommend(answers, questions=maturity_bank) == []


def test_extremes_on_reference_bank() -> None:
    best = score(build_answers("automated", True))
    worst = score(build_answers("none", False))

    assert best.overall == 100
    assert set(best.dimension_scores.values()) == {100}
    assert worst.overall == 0
    assert set(worst.dimension_scores.values()) == {0}


def test_boolean_answers_map_to_zero_or_one() -> None:
    yes = normalize_answers(build_answers("defined", True))
    no = normalize_answers(build_answers("defined", False))

    assert yes["TXS_HO_03"] == 1.0
    assert no["TXS_HO_03"] == 0.0
    assert yes["TXS_HO_01"] == no["TXS_HO_01"] == 0.5


def test_weighted_dimension_score() -> None:
    answers = build_answers(
        "none",
        False,
        TXS_HO_01=Answer(maturity="automated"),
        TXS_HO_05=Answer(maturity="automated"),
    )
    # 1.0 * 0.25 + 1.0 * 0.15
    assert score(answers).dimension_scores["Human Oversight"] == 40


def test_raising_one_answer_never_lowers_its_dimension() -> None:
    for question in QUESTIONS:
        if question.answer_type != "enum_maturity":
            continue
        previous = -1
        for level in MATURITY_LEVELS:
            answers = build_answers("defined", True, **{question.id: Answer(maturity=level)})
            current = dimension_score(normalize_answers(answers), question.dimension)
            assert current >= previous, (question.id, level)
            previous = current


def test_scoring_is_deterministic() -> None:
    answers = build_answers("ad_hoc", False, TXS_RISK_03=Answer(maturity="enforced"))

    first = (score(answers), evaluate_risk(answers), recommend(answers))
    for _ in range(5):
        assert (score(answers), evaluate_risk(answers), recommend(answers)) == first


def test_missing_answers_raise_with_ids() -> None:
    answers = build_answers()
    del answers["TXS_ACC_05"]
    del answers["TXS_TRAN_01"]

    with pytest.raises(IncompleteAnswers) as excinfo:
        score(answers)

    assert excinfo.value.missing_question_ids == ["TXS_TRAN_01", "TXS_ACC_05"]


@pytest.mark.parametrize(
    ("question_id", "answer", "reason"),
    [
        ("TXS_TRAN_01", Answer(boolean=True), "maturity question requires"),
        ("TXS_HO_03", Answer(maturity="defined"), "boolean question requires"),
        ("TXS_TRAN_01", Answer(maturity="defined", boolean=True), "both"),
    ],
)
def test_mismatched_answer_shape_is_rejected(question_id: str, answer: Answer, reason: str) -> None:
    answers = build_answers(**{question_id: answer})

    with pytest.raises(InvalidAnswerShape, match=reason) as excinfo:
        score(answers)

    assert excinfo.value.question_id == question_id


def test_unknown_question_id_is_rejected() -> None:
    answers = build_answers()
    answers["TXS_BOGUS_01"] = Answer(maturity="defined")

    with pytest.raises(InvalidAnswerShape, match="unknown question id"):
        score(answers)


def test_evidence_does_not_change_score_by_default() -> None:
    bare = build_answers("automated", True)
    documented = {
        qid: answer.model_copy(update={"evidence": Evidence(type="link", pointer="https://wiki/x")})
        for qid, answer in bare.items()
    }

    assert score(bare) == score(documented)


def test_evidence_cap_when_enabled() -> None:
    bare = build_answers("automated", True)
    weak = {
        qid: answer.model_copy(update={"evidence": Evidence(type="document_ref", pointer="Policy v2")})
        for qid, answer in bare.items()
    }
    strong = {
        qid: answer.model_copy(update={"evidence": Evidence(type="ticket_ref", pointer="SEC-1042")})
        for qid, answer in bare.items()
    }

    assert score(bare, evidence_cap_enabled=True).overall == 40
    assert score(weak, evidence_cap_enabled=True).overall == 60
    assert score(strong, evidence_cap_enabled=True).overall == 100


def test_strong_evidence_type_without_pointer_is_weak() -> None:
    answers = build_answers(
        "automated",
        True,
        TXS_ACC_02=Answer(maturity="automated", evidence=Evidence(type="log_ref", pointer="  ")),
    )

    scores = normalize_answers(answers, evidence_cap_enabled=True)

    assert scores["TXS_ACC_02"] == 0.6
    assert QUESTIONS_BY_ID["TXS_ACC_02"].dimension == "Accountability"
