from __future__ import annotations

import dataclasses
from typing import Callable

import pytest
from fastapi.testclient import TestClient

from trustgraph_api.main import app
from trustgraph_api.schemas import Answer
from trustgraph_api.services.question_bank import QUESTIONS, Question


def build_answers(
    maturity: str = "defined",
    boolean: bool = True,
    questions: tuple[Question, ...] = QUESTIONS,
    **overrides: Answer,
) -> dict[str, Answer]:
    answers: dict[str, Answer] = {}
    for q in questions:
        if q.answer_type == "boolean":
            answers[q.id] = Answer(boolean=boolean)
        else:
            answers[q.id] = Answer(maturity=maturity)
    answers.update(overrides)
    return answers


def as_payload(answers: dict[str, Answer]) -> dict[str, dict]:
    return {qid: answer.model_dump(exclude_none=True) for qid, answer in answers.items()}


@pytest.fixture
def client() -> TestClient:
    with TestClient(app) as c:
        yield c


@pytest.fixture
def maturity_bank() -> tuple[Question, ...]:
    """Reference bank with every question answered on the maturity scale."""
    return tuple(dataclasses.replace(q, answer_type="enum_maturity") for q in QUESTIONS)


@pytest.fixture
def answers_factory() -> Callable[..., dict[str, Answer]]:
    return build_answers
