"""
Time-step orchestrator.

Pipeline per tick:
  1. For every class (in tier order), resolve the policy effect.
  2. Compute economic growth and the socioeconomic blend.
  3. Apply every transition function to build the next ClassMetrics.
  4. Clamp negative raw populations to 0 and renormalise so Σ population = 1.
  5. Return a new Snapshot with exactly the input's keys, in the same order.

calculate_next_time_step is a pure function of (snapshot, settings, tick,
params); the input snapshot is never mutated.
"""

from __future__ import annotations

import logging
from typing import Dict, Optional, Tuple

from .parameters import EngineParams
from .policy import PolicyEffect, ReservationSettings, resolve_policy_effect
from .state import ClassMetrics, Education, Snapshot
from .transitions import (
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

logger = logging.getLogger("strata_engine.integrator")

_DEFAULT_PARAMS = EngineParams()

# (investment, reservation weight, dropout) per education tier
_EDUCATION_TIERS: Dict[str, Tuple[float, float, float]] = {
    "primary": (0.07, 0.12, 0.01),
    "secondary": (0.06, 0.11, 0.02),
    "tertiary": (0.05, 0.10, 0.03),
}


def _advance_class(
    metrics: ClassMetrics,
    effect: PolicyEffect,
    tick: int,
    params: EngineParams,
) -> Tuple[float, ClassMetrics]:
    """Compute (raw next population, next metrics with population left as is)."""
    edu = metrics.education
    total = effect.total
    res_mult = effect.reservation_multiplier
    enhanced = effect.enhanced_multiplier

    socio = socioeconomic_effect(edu.tertiary, metrics.job_access, metrics.poverty_rate)
    growth = economic_growth(edu.tertiary, metrics.job_access, tick, params)

    raw_population = next_population(
        metrics.population, metrics.fertility, 0.01, 0.001, total * 0.01
    )

    tiers = {}
    for tier, (investment, weight, dropout) in _EDUCATION_TIERS.items():
        tiers[tier] = next_education(
            getattr(edu, tier),
            (investment + effect.education_boost) * res_mult,
            total * weight,
            dropout,
            1.0 - socio,
            metrics,
            tick,
            params,
        )

    job = next_job_access(
        metrics.job_access,
        growth * res_mult * 1.2,
        total * 0.10,
        0.05 * (1.0 - socio),
        metrics,
        tick,
        params,
    )

    consumption_share = 0.7 - (0.1 if effect.needs_enhanced_support else 0.0)
    wealth = next_wealth(
        metrics.wealth,
        metrics.gdp_per_capita,
        0.2 * socio * res_mult * (1.0 + enhanced),
        metrics.gdp_per_capita * consumption_share,
    )
    if params.wealth_floor is not None:
        wealth = max(params.wealth_floor, wealth)

    updated = ClassMetrics(
        population=metrics.population,
        fertility=next_fertility(metrics.fertility, socio, total * 0.001, params),
        education=Education(**tiers),
        job_access=job,
        wealth=wealth,
        gdp_per_capita=next_gdp_per_capita(
            metrics.gdp_per_capita, growth, res_mult, enhanced
        ),
        poverty_rate=next_poverty_rate(
            metrics.poverty_rate, total, growth, edu.tertiary, metrics.job_access, params
        ),
        social_indicators=next_social_indicators(
            metrics.social_indicators, socio, total * 0.03, params
        ),
    )
    return raw_population, updated


def calculate_next_time_step(
    snapshot: Snapshot,
    settings: ReservationSettings,
    tick: int,
    params: Optional[EngineParams] = None,
) -> Snapshot:
    """Advance every class by one tick.

    Args:
        snapshot: Current society state.
        settings: Reservation configuration; invalid values are clamped, not rejected.
        tick:     Index of the tick being computed.
        params:   Engine constants (defaults to the reference parameterisation).

    Returns:
        New Snapshot with the same keys in the same order and Σ population = 1.
    """
    params = params or _DEFAULT_PARAMS
    if len(snapshot) == 0:
        return Snapshot()

    top = snapshot.top_tier
    raw: Dict[str, float] = {}
    advanced: Dict[str, ClassMetrics] = {}
    for key, metrics in snapshot.items():
        effect = resolve_policy_effect(
            metrics, settings, key, tick, key == top, params
        )
        raw_population, updated = _advance_class(metrics, effect, tick, params)
        raw[key] = max(0.0, raw_population)
        advanced[key] = updated
        logger.debug(
            f"tick {tick} {key}: total effect {effect.total:.4f} "
            f"(reservation {effect.reservation:.2f}, ews {effect.ews:.2f}, "
            f"enhanced {effect.enhanced_multiplier:.3f})"
        )

    population_sum = sum(raw.values())
    assert population_sum > 0.0, "total population collapsed to zero"

    return Snapshot(
        (key, advanced[key].copy_with(population=raw[key] / population_sum))
        for key in snapshot
    )


step = calculate_next_time_step


def multi_step(
    snapshot: Snapshot,
    settings: ReservationSettings,
    n_ticks: int,
    start_tick: int = 0,
    params: Optional[EngineParams] = None,
) -> Snapshot:
    """Fold calculate_next_time_step over ticks start_tick .. start_tick + n_ticks - 1.

    Raises:
        ValueError: If n_ticks is negative.
    """
    if n_ticks < 0:
        raise ValueError(f"n_ticks must be >= 0, got {n_ticks}")
    current = snapshot
    for tick in range(start_tick, start_tick + n_ticks):
        current = calculate_next_time_step(current, settings, tick, params)
    return current
