from __future__ import annotations

import os
from dataclasses import dataclass

from .services.errors import ConfigurationInconsistency

DRIFT_THRESHOLD = 10.0
STABILITY_TOLERANCE = 25.0
STABILITY_MIN_RUNS = 3


@dataclass(frozen=True)
class EngineConfig:
    drift_threshold: float
    stability_tolerance: float
    stability_min_runs: int
    evidence_cap_enabled: bool
    log_level: str


def _env_flag(name: str, default: str = "false") -> bool:
    return os.getenv(name, default).strip().lower() in {"1", "true", "yes"}


def validate_engine_config(config: EngineConfig) -> None:
    if config.drift_threshold <= 0:
        raise ConfigurationInconsistency("TRUSTGRAPH_DRIFT_THRESHOLD must be positive")
    if config.stability_tolerance <= 0:
        raise ConfigurationInconsistency("TRUSTGRAPH_STABILITY_TOLERANCE must be positive")
    if config.stability_min_runs < 1:
        raise ConfigurationInconsistency("TRUSTGRAPH_STABILITY_MIN_RUNS must be at least 1")


def get_engine_config() -> EngineConfig:
    config = EngineConfig(
        drift_threshold=float(os.getenv("TRUSTGRAPH_DRIFT_THRESHOLD", str(DRIFT_THRESHOLD))),
        stability_tolerance=float(os.getenv("TRUSTGRAPH_STABILITY_TOLERANCE", str(STABILITY_TOLERANCE))),
        stability_min_runs=int(os.getenv("TRUSTGRAPH_STABILITY_MIN_RUNS", str(STABILITY_MIN_RUNS))),
        evidence_cap_enabled=_env_flag("TRUSTGRAPH_EVIDENCE_CAP"),
        log_level=os.getenv("TRUSTGRAPH_LOG_LEVEL", "INFO").strip().upper(),
    )
    validate_engine_config(config)
    return config
