from __future__ import annotations

import pytest

from trustgraph_api.config import DRIFT_THRESHOLD, STABILITY_MIN_RUNS, get_engine_config
from trustgraph_api.services.errors import ConfigurationInconsistency


def test_defaults_without_environment(monkeypatch: pytest.MonkeyPatch) -> None:
    for name in (
        "TRUSTGRAPH_DRIFT_THRESHOLD",
        "TRUSTGRAPH_STABILITY_TOLERANCE",
        "TRUSTGRAPH_STABILITY_MIN_RUNS",
        "TRUSTGRAPH_EVIDENCE_CAP",
    ):
        monkeypatch.delenv(name, raising=False)

    config = get_engine_config()

    assert config.drift_threshold == DRIFT_THRESHOLD
    assert config.stability_min_runs == STABILITY_MIN_RUNS
    assert config.evidence_cap_enabled is False


@pytest.mark.parametrize(
    ("name", "value"),
    [
        ("TRUSTGRAPH_STABILITY_MIN_RUNS", "0"),
        ("TRUSTGRAPH_DRIFT_THRESHOLD", "0"),
        ("TRUSTGRAPH_DRIFT_THRESHOLD", "-5"),
        ("TRUSTGRAPH_STABILITY_TOLERANCE", "0"),
    ],
)
def test_out_of_range_settings_are_rejected(monkeypatch: pytest.MonkeyPatch, name: str, value: str) -> None:
    monkeypatch.setenv(name, value)

    with pytest.raises(ConfigurationInconsistency, match=name):
        get_engine_config()
