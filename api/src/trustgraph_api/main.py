from __future__ import annotations

import logging
from typing import Annotated

from fastapi import Depends, FastAPI, HTTPException, status

from .config import EngineConfig, get_engine_config
from .log import get_logger, log_with_context
from .schemas import (
    AnswersIn,
    DriftIn,
    DriftOut,
    ExecSummaryOut,
    ExpiryIn,
    ExpiryOut,
    HealthOut,
    LifecycleConfigOut,
    LifecycleStatus,
    ModuleKind,
    QuestionBankOut,
    QuestionOut,
    Recommendation,
    RiskFlagItem,
    RiskFlagsIn,
    RunScoreOut,
    RunScoreRequest,
    ScoreResult,
    StabilityIn,
    StabilityResult,
    SummaryInputs,
    TransitionIn,
    TransitionOut,
)
from .services.drift import dimension_drift, drift, stability
from .services.errors import (
    AssessmentError,
    ConfigurationInconsistency,
    IncompleteAnswers,
    InvalidAnswerShape,
    StaleTransition,
)
from .services.escalations import overdue_escalation
from .services.executive_summary import build_summary
from .services.lifecycle import (
    allowed_next,
    days_until_due,
    due_date,
    is_expired,
    lifecycle_config,
    require_transition,
)
from .services.question_bank import DIMENSIONS, MATURITY_LEVELS, QUESTION_BANK_VERSION, QUESTIONS
from .services.recommendations import recommend
from .services.risk_flags import evaluate_risk, merge_flags
from .services.run_scoring import score_run
from .services.scoring import score

logger = get_logger(__name__)

app = FastAPI(
    title="TrustGraph Assessment API",
    version="0.1.0",
    description=(
        "Stateless request handlers over the deterministic assessment intelligence engine: "
        "scoring, risk flags, recommendations, drift, stability, lifecycle and executive summaries. "
        "Callers own persistence and supply prior run state in each request."
    ),
)


def _http_error(exc: AssessmentError) -> HTTPException:
    if isinstance(exc, IncompleteAnswers):
        return HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail={"error": str(exc), "missing": exc.missing_question_ids},
        )
    if isinstance(exc, InvalidAnswerShape):
        return HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail={"error": str(exc), "question_id": exc.question_id},
        )
    if isinstance(exc, StaleTransition):
        return HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail={"error": str(exc), "from_status": exc.from_status, "to_status": exc.to_status},
        )
    return HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc))


def _rejected(operation: str, exc: AssessmentError) -> HTTPException:
    log_with_context(logger, logging.INFO, "request rejected", operation=operation, error=type(exc).__name__)
    return _http_error(exc)


def engine_config() -> EngineConfig:
    try:
        return get_engine_config()
    except ConfigurationInconsistency as exc:
        logger.error("engine misconfigured: %s", exc)
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=str(exc)) from exc


@app.get("/health", response_model=HealthOut)
def health() -> HealthOut:
    return HealthOut(ok=True, service="trustgraph-api", question_bank_version=QUESTION_BANK_VERSION)


@app.get("/v1/question-bank", response_model=QuestionBankOut)
def get_question_bank() -> QuestionBankOut:
    return QuestionBankOut(
        version=QUESTION_BANK_VERSION,
        dimensions=list(DIMENSIONS),
        maturity_levels=list(MATURITY_LEVELS),
        questions=[QuestionOut.model_validate(q) for q in QUESTIONS],
    )


@app.post("/v1/runs/score", response_model=RunScoreOut)
def post_run_score(
    payload: RunScoreRequest,
    config: Annotated[EngineConfig, Depends(engine_config)],
) -> RunScoreOut:
    try:
        result = score_run(
            payload,
            drift_threshold=config.drift_threshold,
            stability_tolerance=config.stability_tolerance,
            stability_min_runs=config.stability_min_runs,
            evidence_cap_enabled=config.evidence_cap_enabled,
        )
    except AssessmentError as exc:
        raise _rejected("run_score", exc) from exc

    log_with_context(
        logger,
        logging.INFO,
        "run scored",
        overall=result.overall_score,
        stability=result.stability_status,
        escalations=len(result.escalations),
    )
    return result


@app.post("/v1/scores", response_model=ScoreResult)
def post_scores(
    payload: AnswersIn,
    config: Annotated[EngineConfig, Depends(engine_config)],
) -> ScoreResult:
    try:
        return score(payload.answers, evidence_cap_enabled=config.evidence_cap_enabled)
    except AssessmentError as exc:
        raise _rejected("score", exc) from exc


@app.post("/v1/risk-flags", response_model=list[RiskFlagItem])
def post_risk_flags(
    payload: RiskFlagsIn,
    config: Annotated[EngineConfig, Depends(engine_config)],
) -> list[RiskFlagItem]:
    try:
        computed = evaluate_risk(payload.answers, evidence_cap_enabled=config.evidence_cap_enabled)
    except AssessmentError as exc:
        raise _rejected("risk_flags", exc) from exc
    return merge_flags(computed, payload.previous_flags)


@app.post("/v1/recommendations", response_model=list[Recommendation])
def post_recommendations(
    payload: AnswersIn,
    config: Annotated[EngineConfig, Depends(engine_config)],
) -> list[Recommendation]:
    try:
        return recommend(payload.answers, evidence_cap_enabled=config.evidence_cap_enabled)
    except AssessmentError as exc:
        raise _rejected("recommendations", exc) from exc


@app.post("/v1/drift", response_model=DriftOut)
def post_drift(
    payload: DriftIn,
    config: Annotated[EngineConfig, Depends(engine_config)],
) -> DriftOut:
    threshold = payload.threshold if payload.threshold is not None else config.drift_threshold
    per_dimension = {}
    if payload.current_dimensions is not None:
        per_dimension = dimension_drift(payload.current_dimensions, payload.previous_dimensions, threshold)
    return DriftOut(
        drift=drift(payload.current, payload.previous, threshold),
        dimension_drift=per_dimension,
    )


@app.post("/v1/stability", response_model=StabilityResult)
def post_stability(
    payload: StabilityIn,
    config: Annotated[EngineConfig, Depends(engine_config)],
) -> StabilityResult:
    return stability(
        payload.scores,
        payload.tolerance if payload.tolerance is not None else config.stability_tolerance,
        payload.min_runs if payload.min_runs is not None else config.stability_min_runs,
    )


@app.post("/v1/lifecycle/transitions", response_model=TransitionOut)
def post_transition(payload: TransitionIn) -> TransitionOut:
    try:
        require_transition(payload.from_status, payload.to_status)
    except StaleTransition as exc:
        raise _rejected("lifecycle_transition", exc) from exc
    return TransitionOut(
        from_status=payload.from_status,
        to_status=payload.to_status,
        allowed_next=list(allowed_next(payload.from_status)),
    )


@app.post("/v1/lifecycle/expiry", response_model=ExpiryOut)
def post_expiry(payload: ExpiryIn) -> ExpiryOut:
    return ExpiryOut(
        is_expired=is_expired(payload.last_completed_at, payload.frequency_days, payload.now),
        days_until_due=days_until_due(payload.last_completed_at, payload.frequency_days, payload.now),
        due_date=due_date(payload.last_completed_at, payload.frequency_days),
        escalation=overdue_escalation(payload.last_completed_at, payload.frequency_days, payload.now),
    )


@app.get("/v1/lifecycle/{module}/{lifecycle_status}", response_model=LifecycleConfigOut)
def get_lifecycle_config(module: ModuleKind, lifecycle_status: LifecycleStatus) -> LifecycleConfigOut:
    return lifecycle_config(lifecycle_status, module)


@app.post("/v1/executive-summary", response_model=ExecSummaryOut)
def post_executive_summary(payload: SummaryInputs) -> ExecSummaryOut:
    return build_summary(payload)
