from __future__ import annotations

import datetime as dt
from typing import Literal

from pydantic import BaseModel, Field

MaturityLevel = Literal["none", "ad_hoc", "defined", "enforced", "automated"]
EvidenceType = Literal["link", "document_ref", "ticket_ref", "policy_ref", "runbook_ref", "log_ref"]
FlagSource = Literal["computed", "admin"]
Priority = Literal["high", "med"]
DriftDirection = Literal["improved", "declined", "none"]
DriftSeverity = Literal["none", "moderate", "significant"]
StabilityStatus = Literal["provisional", "stable"]
LifecycleStatus = Literal["not_started", "in_progress", "completed", "stable", "expired"]
ModuleKind = Literal["org", "sys"]
TierKey = Literal["trusted", "stable", "elevated_risk", "critical"]
DataStatus = Literal["insufficient_data", "provisional", "stable"]
Severity = Literal["strength", "watch", "weak"]
DimensionKey = Literal["transparency", "inclusion", "confidence", "explainability", "risk"]
EscalationTrigger = Literal["low_score", "significant_drift", "overdue"]
EscalationSeverity = Literal["medium", "high", "critical"]


class APIModel(BaseModel):
    model_config = {"from_attributes": True}


# ---------------------------------------------------------------------------
# Answers and question bank
# ---------------------------------------------------------------------------


class Evidence(BaseModel):
    type: EvidenceType
    pointer: str = Field(default="", max_length=2000)
    note: str | None = Field(default=None, max_length=2000)


class Answer(BaseModel):
    maturity: MaturityLevel | None = None
    boolean: bool | None = None
    evidence: Evidence | None = None


class QuestionOut(APIModel):
    id: str
    dimension: str
    control: str
    prompt: str
    answer_type: Literal["enum_maturity", "boolean"]
    weight: float


class QuestionBankOut(BaseModel):
    version: str
    dimensions: list[str]
    maturity_levels: list[str]
    questions: list[QuestionOut]


# ---------------------------------------------------------------------------
# Engine outputs
# ---------------------------------------------------------------------------


class ScoreResult(BaseModel):
    dimension_scores: dict[str, int]
    overall: int


class RiskFlagItem(BaseModel):
    code: str = Field(min_length=1, max_length=80)
    label: str = Field(min_length=1, max_length=200)
    description: str = Field(default="", max_length=2000)
    source: FlagSource = "computed"


class Recommendation(BaseModel):
    question_id: str
    dimension: str
    control: str
    priority: Priority
    recommendation: str


class DriftResult(BaseModel):
    has_drift: bool
    delta: float
    direction: DriftDirection
    severity: DriftSeverity


class StabilityResult(BaseModel):
    is_stable: bool
    variance: float | None
    stability_status: StabilityStatus


class Escalation(BaseModel):
    trigger: EscalationTrigger
    severity: EscalationSeverity
    reason: str


# ---------------------------------------------------------------------------
# Run scoring pass
# ---------------------------------------------------------------------------


class RunScoreRequest(BaseModel):
    answers: dict[str, Answer]
    previous_flags: list[RiskFlagItem] = Field(default_factory=list)
    previous_overall: float | None = Field(default=None, ge=0, le=100)
    previous_dimensions: dict[str, float] | None = None
    completed_overall_history: list[float] = Field(default_factory=list)


class RunScoreOut(BaseModel):
    dimension_scores: dict[str, int]
    overall_score: int
    risk_flags: list[RiskFlagItem]
    recommendations: list[Recommendation]
    drift: DriftResult
    dimension_drift: dict[str, DriftResult]
    drift_from_previous: float | None
    stability: StabilityResult
    stability_status: StabilityStatus
    variance_last3: float | None
    escalations: list[Escalation]


# ---------------------------------------------------------------------------
# Request bodies for the standalone operations
# ---------------------------------------------------------------------------


class AnswersIn(BaseModel):
    answers: dict[str, Answer]


class RiskFlagsIn(BaseModel):
    answers: dict[str, Answer]
    previous_flags: list[RiskFlagItem] = Field(default_factory=list)


class DriftIn(BaseModel):
    current: float = Field(ge=0, le=100)
    previous: float | None = Field(default=None, ge=0, le=100)
    current_dimensions: dict[str, float] | None = None
    previous_dimensions: dict[str, float] | None = None
    threshold: float | None = Field(default=None, gt=0)


class DriftOut(BaseModel):
    drift: DriftResult
    dimension_drift: dict[str, DriftResult]


class StabilityIn(BaseModel):
    scores: list[float] = Field(default_factory=list)
    tolerance: float | None = Field(default=None, gt=0)
    min_runs: int | None = Field(default=None, ge=1)


class TransitionIn(BaseModel):
    from_status: LifecycleStatus
    to_status: LifecycleStatus


class TransitionOut(BaseModel):
    from_status: LifecycleStatus
    to_status: LifecycleStatus
    allowed_next: list[LifecycleStatus]


class ExpiryIn(BaseModel):
    last_completed_at: dt.datetime | None = None
    frequency_days: int | None = None
    now: dt.datetime | None = None


class ExpiryOut(BaseModel):
    is_expired: bool
    days_until_due: int | None
    due_date: dt.datetime | None
    escalation: Escalation | None = None


class LifecycleButton(BaseModel):
    label: str
    action: str
    variant: Literal["primary", "secondary", "destructive", "warning"]


class LifecycleConfigOut(BaseModel):
    status: LifecycleStatus
    badge_label: str
    buttons: list[LifecycleButton]
    warning: str | None = None


# ---------------------------------------------------------------------------
# Executive summary
# ---------------------------------------------------------------------------


class DimensionRecord(BaseModel):
    transparency: float = Field(ge=0, le=100)
    inclusion: float = Field(ge=0, le=100)
    confidence: float = Field(ge=0, le=100)
    explainability: float = Field(ge=0, le=100)
    risk: float = Field(ge=0, le=100)


class SummaryInputs(BaseModel):
    module: ModuleKind
    score: float = Field(ge=0, le=100)
    response_count: int = Field(ge=0)
    min_response_threshold: int = Field(ge=1)
    dimensions: DimensionRecord
    previous_score: float | None = Field(default=None, ge=0, le=100)
    previous_dimensions: dict[DimensionKey, float] | None = None


class DriverEntry(BaseModel):
    key: DimensionKey
    label: str
    score: float
    severity: Severity
    why: str


class PriorityEntry(BaseModel):
    title: str
    rationale: str
    probes: list[str]


class ExecSummaryOut(BaseModel):
    status: DataStatus
    tier: TierKey
    headline: str
    posture: str
    primary_drivers: list[DriverEntry]
    priorities: list[PriorityEntry]
    confidence_note: str
    trend_note: str | None = None


class HealthOut(BaseModel):
    ok: bool
    service: str
    question_bank_version: str
