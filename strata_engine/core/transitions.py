"""
Per-class transition functions.

Each function maps a metric's current value plus this tick's effect terms to
its next value.  None of them looks at another class: the orchestrator can
evaluate classes in any order.

  pop'   = pop + pop*b*0.01 - pop*d*0.01 + mig*0.001 - pop*res*0.001
  fert'  = clip(fert * (1 + 0.12*res - 0.12*socio), 1.8, 2.8)
  edu'   = edu ± max(floor, |(base + 1.5*boost)*gap^1.05 - dropout_eff|)
  job'   = job ± max(floor, |(base + 1.5*boost)*gap^1.1*edu_mult - unemp_eff|)
  w'     = w + income*savings - consumption
  gdp'   = gdp * (1 + g * res_mult * (1 + enhanced))
  pov'   = max(1, pov * (1 - reduction))

Power bases are clamped at 0 so out-of-range inputs stay real-valued.
"""

from __future__ import annotations

from typing import Optional

import numpy as np

from .parameters import EngineParams
from .policy import reservation_impact
from .state import ClassMetrics, SocialIndicators

_DEFAULT_PARAMS = EngineParams()

# Minimum visible movement per tick for education and job access.
_MIN_GAIN = 0.01
_MIN_LOSS = 0.005


def _step_toward(current: float, improvement: float, drag: float) -> float:
    """Apply net improvement with a guaranteed minimum movement, clipped to [0, 100]."""
    if improvement > drag:
        updated = current + max(_MIN_GAIN, improvement - drag)
    else:
        updated = current - max(_MIN_LOSS, drag - improvement)
    return float(np.clip(updated, 0.0, 100.0))


def _gap(current: float, exponent: float) -> float:
    return max(0.0, (100.0 - current) / 100.0) ** exponent


# --------------------------------------------------------------------------- #
# Effect terms                                                                 #
# --------------------------------------------------------------------------- #


def socioeconomic_effect(tertiary: float, job_access: float, poverty_rate: float) -> float:
    """Weighted blend: 40% tertiary education, 30% job access, 30% non-poverty."""
    return (
        tertiary / 100.0 * 0.4
        + job_access / 100.0 * 0.3
        + (1.0 - poverty_rate / 100.0) * 0.3
    )


def economic_growth(
    tertiary: float,
    job_access: float,
    tick: int,
    params: EngineParams = _DEFAULT_PARAMS,
) -> float:
    """Per-tick growth rate; accelerates with education and job access and
    ramps in over the first ``params.growth_ramp`` ticks."""
    ramp = min(1.0, max(0.0, tick) / params.growth_ramp)
    return (
        params.base_growth
        * (1.0 + tertiary / 100.0)
        * (1.0 + job_access / 100.0)
        * (1.0 + ramp)
    )


# --------------------------------------------------------------------------- #
# Transitions                                                                  #
# --------------------------------------------------------------------------- #


def next_population(
    population: float,
    birth_rate: float,
    death_rate: float,
    migration: float,
    reservation: float,
) -> float:
    """Unnormalised next population share."""
    return (
        population
        + population * birth_rate * 0.01
        - population * death_rate * 0.01
        + migration * 0.001
        - population * reservation * 0.001
    )


def next_fertility(
    rate: float,
    socio: float,
    reservation: float,
    params: EngineParams = _DEFAULT_PARAMS,
) -> float:
    """Fertility falls with socioeconomic progress, clamped to a sustainable band."""
    updated = rate * (1.0 + reservation * 0.12 - socio * 0.12)
    return float(np.clip(updated, params.fertility_min, params.fertility_max))


def next_education(
    current: float,
    investment: float,
    reservation: float,
    dropout: float,
    unemployment: float,
    metrics: Optional[ClassMetrics] = None,
    tick: int = 0,
    params: EngineParams = _DEFAULT_PARAMS,
) -> float:
    """Next access percentage for one education tier.

    Args:
        current:      Current access in [0, 100].
        investment:   Public investment rate for this tier.
        reservation:  Raw reservation input fed to reservation_impact().
        dropout:      Baseline dropout rate.
        unemployment: Unemployment proxy; does not enter the education rule.
        metrics:      Full class metrics for gap scaling, or None.
        tick:         Current tick index.
        params:       Engine constants.

    Returns:
        Updated access percentage in [0, 100].
    """
    boost = reservation_impact(metrics, reservation, tick, params)
    base = max(0.1, investment * 0.25)
    improvement = (base + boost * 1.5) * _gap(current, 1.05)
    effective_dropout = dropout * max(0.4, 1.0 - boost * 0.6)
    return _step_toward(current, improvement, effective_dropout)


def next_job_access(
    current: float,
    growth: float,
    reservation: float,
    unemployment: float,
    metrics: Optional[ClassMetrics] = None,
    tick: int = 0,
    params: EngineParams = _DEFAULT_PARAMS,
) -> float:
    """Next job-access percentage.

    Same shape as next_education, scaled by an education multiplier (>= 1.4)
    tied to the class's own tertiary education.
    """
    boost = reservation_impact(metrics, reservation, tick, params)
    tertiary = metrics.education.tertiary if metrics is not None else 0.0
    education_mult = max(1.4, 1.0 + tertiary / 100.0 * 1.1)
    base = max(0.1, growth * 0.3)
    improvement = (base + boost * 1.5) * _gap(current, 1.1) * education_mult
    effective_unemployment = unemployment * max(0.4, 1.0 - boost * 0.5)
    return _step_toward(current, improvement, effective_unemployment)


def next_wealth(
    wealth: float,
    income: float,
    savings_rate: float,
    consumption: float,
) -> float:
    """Literal accumulator: wealth + income * savings_rate - consumption."""
    return wealth + income * savings_rate - consumption


def next_gdp_per_capita(
    gdp: float,
    growth: float,
    reservation_multiplier: float,
    enhanced_multiplier: float,
) -> float:
    return gdp * (1.0 + growth * reservation_multiplier * (1.0 + enhanced_multiplier))


def next_poverty_rate(
    rate: float,
    reservation: float,
    growth: float,
    tertiary: float,
    job_access: float,
    params: EngineParams = _DEFAULT_PARAMS,
) -> float:
    """Multiplicative poverty reduction, floored at ``params.poverty_floor``."""
    reduction = (
        reservation * 0.03
        + growth * 0.06
        + tertiary / 100.0 * 0.04
        + job_access / 100.0 * 0.05
    )
    return float(np.clip(rate * (1.0 - reduction), params.poverty_floor, 100.0))


def next_social_indicators(
    indicators: SocialIndicators,
    socio: float,
    reservation: float,
    params: EngineParams = _DEFAULT_PARAMS,
) -> SocialIndicators:
    """Life expectancy approaches its ceiling; mortalities decay toward floors."""
    factor = socio * reservation
    le = indicators.life_expectancy
    im = indicators.infant_mortality
    mm = indicators.maternal_mortality
    le_max = params.life_expectancy_max

    return SocialIndicators(
        life_expectancy=min(le_max, le * (1.0 + factor * 0.2 * ((le_max - le) / 20.0))),
        infant_mortality=max(
            params.infant_mortality_min, im * (1.0 - factor * 0.3 * (im / 50.0))
        ),
        maternal_mortality=max(
            params.maternal_mortality_min, mm * (1.0 - factor * 0.3 * (mm / 70.0))
        ),
    )
