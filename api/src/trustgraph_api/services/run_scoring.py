from __future__ import annotations

import logging

from ..config import DRIFT_THRESHOLD, STABILITY_MIN_RUNS, STABILITY_TOLERANCE
from ..log import get_logger, log_with_context
from ..schemas import RunScoreOut, RunScoreRequest
from .drift import dimension_drift, drift, stability
from .escalations import evaluate_escalations
from .recommendations import recommend
from .risk_flags import evaluate_risk, merge_flags
from .scoring import score

logger = get_logger(__name__)


def score_run(
    request: RunScoreRequest,
    *,
    drift_threshold: float = DRIFT_THRESHOLD,
    stability_tolerance: float = STABILITY_TOLERANCE,
    stability_min_runs: int = STABILITY_MIN_RUNS,
    evidence_cap_enabled: bool = False,
) -> RunScoreOut:
    """
    One full scoring pass for a run. Every derived field is produced or the
    pass raises; callers persist the result as a unit.
    """
    scores = score(request.answers, evidence_cap_enabled=evidence_cap_enabled)
    computed_flags = evaluate_risk(request.answers, evidence_cap_enabled=evidence_cap_enabled)
    flags = merge_flags(computed_flags, request.previous_flags)
    recommendations = recommend(request.answers, evidence_cap_enabled=evidence_cap_enabled)

    overall_drift = drift(scores.overall, request.previous_overall, drift_threshold)
    per_dimension = dimension_drift(scores.dimension_scores, request.previous_dimensions, drift_threshold)

    history = [*request.completed_overall_history, scores.overall]
    stability_result = stability(history, stability_tolerance, stability_min_runs)

    escalations = evaluate_escalations(
        overall=scores.overall,
        drift_result=overall_drift if request.previous_overall is not None else None,
    )

    log_with_context(
        logger,
        logging.DEBUG,
        "run scored",
        overall=scores.overall,
        computed_flags=len(computed_flags),
        admin_flags=len(flags) - len(computed_flags),
        recommendations=len(recommendations),
        stability=stability_result.stability_status,
    )

    return RunScoreOut(
        dimension_scores=scores.dimension_scores,
        overall_score=scores.overall,
        risk_flags=flags,
        recommendations=recommendations,
        drift=overall_drift,
        dimension_drift=per_dimension,
        drift_from_previous=overall_drift.delta if request.previous_overall is not None else None,
        stability=stability_result,
        stability_status=stability_result.stability_status,
        variance_last3=stability_result.variance,
        escalations=escalations,
    )
