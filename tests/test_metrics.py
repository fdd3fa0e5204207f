"""
test_metrics.py — society summaries and trajectory statistics.
"""

import pytest

from strata_engine.analysis.metrics import (
    max_population_drift,
    society_summary,
    summary_statistics,
    trust_in_government,
)
from strata_engine.core.integrator import calculate_next_time_step
from strata_engine.core.parameters import EngineParams
from strata_engine.core.state import Snapshot
from strata_engine.systems.crime_classifier import CrimeLevel


def _trajectory(snapshot, settings, ticks):
    out = [snapshot]
    for tick in range(ticks):
        out.append(calculate_next_time_step(out[-1], settings, tick))
    return out


def test_baseline_summary(baseline):
    s = society_summary(baseline)
    assert s.tick == 0
    assert s.population_total == pytest.approx(1.0)
    assert s.tertiary_education == pytest.approx(32.05)
    assert s.gdp_per_capita == pytest.approx(39250.0)
    assert s.poverty_rate == pytest.approx(44.3)
    assert s.crime_level is CrimeLevel.HIGH
    assert s.trust_in_government == pytest.approx(0.38)


def test_summary_dict_uses_label(baseline):
    data = society_summary(baseline, tick=4).to_dict()
    assert data["crime_level"] == "high"
    assert data["tick"] == 4
    assert data["trust_in_government"] == pytest.approx(0.40)


def test_summary_rejects_empty_and_unpopulated(baseline):
    with pytest.raises(ValueError, match="empty"):
        society_summary(Snapshot())
    ghost = Snapshot({"ghost": baseline["class3"].copy_with(population=0.0)})
    with pytest.raises(ValueError, match="zero total population"):
        society_summary(ghost)


def test_trust_is_bounded():
    assert trust_in_government(0) == pytest.approx(0.38)
    assert trust_in_government(100) == pytest.approx(0.88)
    assert trust_in_government(1000) == 0.9
    assert trust_in_government(-5) == pytest.approx(0.38)
    assert trust_in_government(10, EngineParams(trust_growth=0.0)) == pytest.approx(0.38)


def test_summary_statistics(baseline, mock_settings):
    trajectory = _trajectory(baseline, mock_settings, 10)
    stats = summary_statistics(trajectory)
    assert stats["n_ticks"] == 10
    assert stats["initial_gdp_per_capita"] == pytest.approx(39250.0)
    assert stats["final_gdp_per_capita"] > stats["initial_gdp_per_capita"]
    assert stats["final_poverty_rate"] < stats["initial_poverty_rate"]
    assert stats["max_population_drift"] < 1e-9
    assert stats["final_trust_in_government"] == pytest.approx(0.43)
    shares = [v for k, v in stats.items() if k.startswith("crime_share_")]
    assert len(shares) == len(CrimeLevel)
    assert sum(shares) == pytest.approx(1.0)


def test_summary_statistics_edge_cases(baseline):
    assert summary_statistics([]) == {"n_ticks": 0}
    stats = summary_statistics([baseline], start_tick=20)
    assert stats["n_ticks"] == 0
    assert stats["initial_poverty_rate"] == stats["final_poverty_rate"]
    assert stats["final_trust_in_government"] == pytest.approx(0.48)
    assert stats["final_crime_level"] == "high"


def test_population_drift(baseline):
    assert max_population_drift([]) == 0.0
    skewed = baseline.replace_class(
        "class1", baseline["class1"].copy_with(population=0.15)
    )
    assert max_population_drift([baseline, skewed]) == pytest.approx(0.1)
