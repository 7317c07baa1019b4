from __future__ import annotations

import datetime as dt
import json
from pathlib import Path

ROOT = Path(__file__).resolve().parents[1]
OUT_PATH = ROOT / "reports" / "question_bank_check.json"


def _check(name: str, passed: bool, evidence: object) -> dict:
    return {"name": name, "passed": bool(passed), "evidence": evidence}


def main() -> int:
    # Importing the service modules runs their load-time validation.
    try:
        from trustgraph_api.services.question_bank import DIMENSIONS, QUESTION_BANK_VERSION, QUESTIONS
        from trustgraph_api.services.recommendations import RECOMMENDATION_TEXT
        from trustgraph_api.services.risk_flags import RISK_RULES
    except ValueError as exc:
        report = {
            "generated_at": dt.datetime.now(dt.timezone.utc).isoformat(),
            "status": "FAIL",
            "error": str(exc),
        }
        print(json.dumps(report, indent=2))
        return 1

    totals = {dim: round(sum(q.weight for q in QUESTIONS if q.dimension == dim), 9) for dim in DIMENSIONS}
    counts = {dim: sum(1 for q in QUESTIONS if q.dimension == dim) for dim in DIMENSIONS}
    bank_ids = {q.id for q in QUESTIONS}

    checks = [
        _check("weights_close_per_dimension", all(v == 1.0 for v in totals.values()), totals),
        _check("questions_per_dimension", all(n > 0 for n in counts.values()), counts),
        _check("recommendation_templates", set(RECOMMENDATION_TEXT) == bank_ids, len(RECOMMENDATION_TEXT)),
        _check(
            "risk_rules_reference_bank",
            all(rule.question_id in bank_ids for rule in RISK_RULES),
            {rule.code: rule.question_id for rule in RISK_RULES},
        ),
    ]

    passed = all(c["passed"] for c in checks)
    report = {
        "generated_at": dt.datetime.now(dt.timezone.utc).isoformat(),
        "question_bank_version": QUESTION_BANK_VERSION,
        "status": "PASS" if passed else "FAIL",
        "checks": checks,
    }
    OUT_PATH.parent.mkdir(parents=True, exist_ok=True)
    OUT_PATH.write_text(json.dumps(report, indent=2), encoding="utf-8")
    print(json.dumps(report, indent=2))
    return 0 if passed else 1


if __name__ == "__main__":
    raise SystemExit(main())
