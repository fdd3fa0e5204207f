"""
Society-wide metrics.

Rolls per-class metrics into population-weighted aggregates for display and
computes summary statistics over a trajectory of snapshots.  Read side only:
nothing here feeds back into the engine.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass
from typing import Any, Dict, List, Optional

import numpy as np

from ..core.parameters import EngineParams
from ..core.state import Snapshot
from ..systems.crime_classifier import (
    CrimeLevel,
    CrimeThresholds,
    aggregate_crime_level,
    classify_snapshot,
    crime_distribution,
)

_DEFAULT_PARAMS = EngineParams()


@dataclass(frozen=True)
class SocietySummary:
    """Flat, population-weighted view of one snapshot.

    Attributes:
        tick:                 Tick the snapshot belongs to.
        population_total:     Σ population (1.0 for engine output).
        fertility:            Weighted mean fertility.
        tertiary_education:   Weighted mean tertiary access (%).
        job_access:           Weighted mean job access (%).
        wealth:               Weighted mean wealth.
        poverty_rate:         Weighted mean poverty rate (%).
        gdp_per_capita:       Weighted mean GDP per capita.
        life_expectancy:      Weighted mean life expectancy (years).
        infant_mortality:     Weighted mean infant mortality.
        crime_level:          Population-weighted most common crime level.
        trust_in_government:  Bounded proxy in [0, 1].
    """

    tick: int
    population_total: float
    fertility: float
    tertiary_education: float
    job_access: float
    wealth: float
    poverty_rate: float
    gdp_per_capita: float
    life_expectancy: float
    infant_mortality: float
    crime_level: CrimeLevel
    trust_in_government: float

    def to_dict(self) -> Dict[str, Any]:
        """Serialise for display; crime level as its label."""
        data = asdict(self)
        data["crime_level"] = self.crime_level.label
        return data


def trust_in_government(tick: int, params: EngineParams = _DEFAULT_PARAMS) -> float:
    """Trust proxy: rises linearly from the baseline and saturates at the ceiling."""
    raw = params.trust_baseline + params.trust_growth * max(0, tick)
    return float(np.clip(raw, 0.0, params.trust_ceiling))


def society_summary(
    snapshot: Snapshot,
    tick: int = 0,
    params: Optional[EngineParams] = None,
    thresholds: Optional[CrimeThresholds] = None,
) -> SocietySummary:
    """Population-weighted summary of a snapshot.

    Args:
        snapshot:   Snapshot to summarise.
        tick:       Tick index (drives the trust proxy).
        params:     Engine constants.
        thresholds: Crime classifier thresholds.

    Returns:
        SocietySummary.

    Raises:
        ValueError: If the snapshot is empty or has zero total population.
    """
    params = params or _DEFAULT_PARAMS
    thresholds = thresholds or CrimeThresholds()
    if len(snapshot) == 0:
        raise ValueError("Cannot summarise an empty snapshot")

    classes = list(snapshot.values())
    weights = np.array([m.population for m in classes], dtype=np.float64)
    if weights.sum() <= 0.0:
        raise ValueError("Cannot summarise a snapshot with zero total population")

    def weighted(values: List[float]) -> float:
        return float(np.average(np.array(values, dtype=np.float64), weights=weights))

    levels = classify_snapshot(snapshot, thresholds)
    return SocietySummary(
        tick=tick,
        population_total=float(weights.sum()),
        fertility=weighted([m.fertility for m in classes]),
        tertiary_education=weighted([m.education.tertiary for m in classes]),
        job_access=weighted([m.job_access for m in classes]),
        wealth=weighted([m.wealth for m in classes]),
        poverty_rate=weighted([m.poverty_rate for m in classes]),
        gdp_per_capita=weighted([m.gdp_per_capita for m in classes]),
        life_expectancy=weighted(
            [m.social_indicators.life_expectancy for m in classes]
        ),
        infant_mortality=weighted(
            [m.social_indicators.infant_mortality for m in classes]
        ),
        crime_level=aggregate_crime_level(
            levels, {key: m.population for key, m in snapshot.items()}
        ),
        trust_in_government=trust_in_government(tick, params),
    )


# --------------------------------------------------------------------------- #
# Trajectory statistics                                                        #
# --------------------------------------------------------------------------- #


def max_population_drift(trajectory: List[Snapshot]) -> float:
    """Largest |Σ population − 1| seen along a trajectory."""
    if not trajectory:
        return 0.0
    return float(max(abs(s.population_total() - 1.0) for s in trajectory))


def summary_statistics(
    trajectory: List[Snapshot],
    params: Optional[EngineParams] = None,
    start_tick: int = 0,
) -> Dict[str, Any]:
    """Summary statistics for a trajectory.

    Args:
        trajectory: Snapshots in tick order; trajectory[0] is at start_tick.
        params:     Engine constants.
        start_tick: Tick index of the first snapshot.

    Returns:
        Dictionary with initial/final aggregates, drift and crime shares.
        Only n_ticks is present for an empty trajectory.
    """
    if not trajectory:
        return {"n_ticks": 0}
    params = params or _DEFAULT_PARAMS

    summaries = [
        society_summary(s, start_tick + i, params) for i, s in enumerate(trajectory)
    ]
    first, last = summaries[0], summaries[-1]
    shares = crime_distribution([s.crime_level for s in summaries])
    stats: Dict[str, Any] = {
        "n_ticks": len(trajectory) - 1,
        "initial_gdp_per_capita": first.gdp_per_capita,
        "final_gdp_per_capita": last.gdp_per_capita,
        "initial_poverty_rate": first.poverty_rate,
        "final_poverty_rate": last.poverty_rate,
        "initial_tertiary_education": first.tertiary_education,
        "final_tertiary_education": last.tertiary_education,
        "initial_job_access": first.job_access,
        "final_job_access": last.job_access,
        "initial_life_expectancy": first.life_expectancy,
        "final_life_expectancy": last.life_expectancy,
        "mean_poverty_rate": float(np.mean([s.poverty_rate for s in summaries])),
        "max_population_drift": max_population_drift(trajectory),
        "final_crime_level": last.crime_level.label,
        "final_trust_in_government": last.trust_in_government,
    }
    for level, share in shares.items():
        stats[f"crime_share_{level.name.lower()}"] = share
    return stats
