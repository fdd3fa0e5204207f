"""
test_transitions.py — per-class transition functions.
"""

import pytest

from strata_engine.core.parameters import EngineParams
from strata_engine.core.state import SocialIndicators
from strata_engine.core.transitions import (
    economic_growth,
    next_education,
    next_fertility,
    next_gdp_per_capita,
    next_job_access,
    next_population,
    next_poverty_rate,
    next_social_indicators,
    next_wealth,
    socioeconomic_effect,
)


def test_population_rule():
    assert next_population(0.3, 2.5, 0.01, 0.001, 0.0) == pytest.approx(0.307471)
    # reservation drains population slightly
    assert next_population(0.3, 2.5, 0.01, 0.001, 5.0) < next_population(
        0.3, 2.5, 0.01, 0.001, 0.0
    )


def test_fertility_rule_and_band():
    assert next_fertility(2.5, 0.5, 0.0) == pytest.approx(2.35)
    assert next_fertility(3.8, 0.0, 0.0) == 2.8
    assert next_fertility(1.6, 0.9, 0.0) == 1.8
    wide = EngineParams(fertility_min=1.0, fertility_max=5.0)
    assert next_fertility(3.8, 0.0, 0.0, wide) == pytest.approx(3.8)


def test_education_without_metrics_uses_percentage_only_boost():
    # boost = 10 * 0.025
    boost = 0.25
    improvement = (0.1 + boost * 1.5) * 0.5 ** 1.05
    dropout = 0.02 * max(0.4, 1 - boost * 0.6)
    expected = 50.0 + (improvement - dropout)
    assert next_education(50.0, 0.4, 10.0, 0.02, 0.5) == pytest.approx(expected)


def test_education_minimum_movement():
    # tiny improvement still moves by at least 0.01
    assert next_education(99.0, 0.0, 0.0, 0.0, 0.0) == pytest.approx(99.01)
    # dropout beats improvement: loses at least 0.005
    assert next_education(100.0, 0.0, 0.0, 0.05, 0.0) == pytest.approx(99.95)
    assert next_education(100.0, 0.0, 0.0, 0.001, 0.0) == pytest.approx(99.995)


def test_education_is_clamped():
    assert next_education(99.995, 0.0, 0.0, 0.0, 0.0) == 100.0
    assert next_education(0.001, 0.0, 0.0, 1.0, 0.0) == 0.0
    # out-of-range input stays real-valued and clamped
    assert next_education(120.0, 0.0, 0.0, 0.0, 0.0) == 100.0


def test_education_responds_to_reservation(baseline):
    m = baseline["class5"]
    without = next_education(2.0, 0.05, 0.0, 0.03, 0.5, m, 1)
    with_res = next_education(2.0, 0.05, 3.0, 0.03, 0.5, m, 1)
    assert with_res > without


def test_job_access_without_metrics():
    growth = 0.5
    improvement = (max(0.1, growth * 0.3)) * 0.5 ** 1.1 * 1.4
    expected = 50.0 + (improvement - 0.02)
    assert next_job_access(50.0, growth, 0.0, 0.02) == pytest.approx(expected)


def test_job_access_gated_by_tertiary_education(baseline):
    educated = baseline["class1"]
    # edu multiplier for class1 = 1 + 0.95 * 1.1 > 1.4
    base = next_job_access(50.0, 0.1, 0.0, 0.0, None, 0)
    gated = next_job_access(50.0, 0.1, 0.0, 0.0, educated, 0)
    assert gated > base
    assert 0.0 <= next_job_access(99.999, 10.0, 0.0, 0.0, educated, 0) <= 100.0


def test_wealth_is_literal_accumulator():
    assert next_wealth(0.35, 150000.0, 0.1, 105000.0) == pytest.approx(-89999.65)
    assert next_wealth(1.0, 100.0, 0.5, 10.0) == pytest.approx(41.0)


def test_gdp_rule():
    assert next_gdp_per_capita(1000.0, 0.05, 2.0, 1.0) == pytest.approx(1200.0)
    assert next_gdp_per_capita(1000.0, 0.05, 1.0, 0.0) == pytest.approx(1050.0)


def test_poverty_rule_and_floor():
    assert next_poverty_rate(50.0, 0.0, 0.1, 50.0, 50.0) == pytest.approx(47.45)
    assert next_poverty_rate(1.2, 100.0, 0.1, 50.0, 50.0) == 1.0
    assert next_poverty_rate(30.0, 0.0, 0.0, 0.0, 0.0) == pytest.approx(30.0)


def test_social_indicators_rule():
    result = next_social_indicators(SocialIndicators(65.0, 30.0, 45.0), 0.5, 1.0)
    assert result.life_expectancy == pytest.approx(71.5)
    assert result.infant_mortality == pytest.approx(27.3)
    assert result.maternal_mortality == pytest.approx(45.0 * (1 - 0.15 * 45.0 / 70.0))


def test_social_indicators_bounds():
    result = next_social_indicators(SocialIndicators(84.0, 3.0, 4.0), 1.0, 100.0)
    assert result.life_expectancy == 85.0
    assert result.infant_mortality == 2.0
    assert result.maternal_mortality == 3.0


def test_social_indicators_unchanged_without_effect():
    start = SocialIndicators(65.0, 30.0, 45.0)
    assert next_social_indicators(start, 0.5, 0.0) == start


def test_socioeconomic_blend():
    assert socioeconomic_effect(40.0, 50.0, 30.0) == pytest.approx(0.52)
    assert socioeconomic_effect(100.0, 100.0, 0.0) == pytest.approx(1.0)


def test_economic_growth_ramp():
    assert economic_growth(0.0, 0.0, 0) == pytest.approx(0.03)
    assert economic_growth(0.0, 0.0, 5) == pytest.approx(0.045)
    assert economic_growth(100.0, 100.0, 10) == pytest.approx(0.24)
    assert economic_growth(100.0, 100.0, 50) == pytest.approx(0.24)
