from __future__ import annotations


class AssessmentError(ValueError):
    """Base class for engine failures surfaced to callers."""


class IncompleteAnswers(AssessmentError):
    def __init__(self, missing_question_ids: list[str]) -> None:
        self.missing_question_ids = list(missing_question_ids)
        super().__init__(
            f"Missing responses for {len(self.missing_question_ids)} question(s): "
            + ", ".join(self.missing_question_ids)
        )


class InvalidAnswerShape(AssessmentError):
    def __init__(self, question_id: str, reason: str) -> None:
        self.question_id = question_id
        self.reason = reason
        super().__init__(f"{question_id}: {reason}")


class ConfigurationInconsistency(AssessmentError):
    """Question bank or rule tables are internally inconsistent."""


class StaleTransition(AssessmentError):
    def __init__(self, from_status: str, to_status: str) -> None:
        self.from_status = from_status
        self.to_status = to_status
        super().__init__(f"Transition not allowed: {from_status} -> {to_status}")
