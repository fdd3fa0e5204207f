"""
Invariant validation suite for the Strata engine.

All checks use assert statements exclusively.  Run directly:

    python -m strata_engine.analysis.validation

Exit code 0 means all checks passed.

Checks:
  1. Determinism
  2. Population conservation
  3. Bounds over 200 ticks
  4. Monotonic reservation response
  5. Creamy-layer zeroing
  6. No double benefit
  7. Baseline idempotence
  8. No-policy growth
"""

from __future__ import annotations

from typing import Callable, List, Optional, Tuple

from ..core.baseline import get_initial_conditions
from ..core.integrator import calculate_next_time_step, multi_step
from ..core.parameters import EngineParams
from ..core.policy import EwsSettings, ReservationSettings
from ..core.state import Snapshot

_TOLERANCE = 1e-9


# --------------------------------------------------------------------------- #
# Helpers                                                                       #
# --------------------------------------------------------------------------- #


def _settings(
    reservations: Optional[dict] = None,
    cap: Optional[float] = None,
    ews: float = 0.0,
    all_eligible: bool = False,
) -> ReservationSettings:
    return ReservationSettings(
        class_reservations=reservations or {},
        total_reservation_cap=cap,
        ews_settings=EwsSettings(percentage=ews, all_classes_eligible=all_eligible),
    )


def assert_snapshot_invariants(
    snapshot: Snapshot,
    params: Optional[EngineParams] = None,
    check_fertility: bool = True,
) -> None:
    """Assert every bound the engine guarantees for its own output.

    Args:
        snapshot:        Engine output (not a raw baseline).
        params:          Engine constants the snapshot was produced with.
        check_fertility: Skip the fertility band for snapshots that were not
                         produced by the engine (the baseline sits outside it).
    """
    params = params or EngineParams()
    total = snapshot.population_total()
    assert abs(total - 1.0) < _TOLERANCE, f"population sums to {total}"
    for key, m in snapshot.items():
        for tier in ("primary", "secondary", "tertiary"):
            value = getattr(m.education, tier)
            assert 0.0 <= value <= 100.0, f"{key}.education.{tier} = {value}"
        assert 0.0 <= m.job_access <= 100.0, f"{key}.job_access = {m.job_access}"
        assert m.poverty_rate >= params.poverty_floor, (
            f"{key}.poverty_rate = {m.poverty_rate}"
        )
        if check_fertility:
            assert params.fertility_min <= m.fertility <= params.fertility_max, (
                f"{key}.fertility = {m.fertility}"
            )
        soc = m.social_indicators
        assert soc.life_expectancy <= params.life_expectancy_max, (
            f"{key}.life_expectancy = {soc.life_expectancy}"
        )
        assert soc.infant_mortality >= params.infant_mortality_min
        assert soc.maternal_mortality >= params.maternal_mortality_min
        assert m.gdp_per_capita > 0.0


# --------------------------------------------------------------------------- #
# Checks                                                                       #
# --------------------------------------------------------------------------- #


def check_determinism() -> None:
    """Identical inputs must give identical snapshots."""
    settings = _settings({"class2": 20, "class3": 15, "class4": 10, "class5": 5}, 50, 10)
    a = multi_step(get_initial_conditions(), settings, 25)
    b = multi_step(get_initial_conditions(), settings, 25)
    assert a.to_dict() == b.to_dict(), "identical inputs produced different outputs"


def check_population_conservation() -> None:
    """Σ population is 1 after every tick, whatever the settings."""
    configs = [
        _settings(),
        _settings({"class4": 40, "class5": 35}, 75, 15),
        _settings({"class1": 100, "class5": 100}, None, 100, True),
        _settings({"class3": -50}, -10, -5),
    ]
    for settings in configs:
        snapshot = get_initial_conditions()
        for tick in range(20):
            snapshot = calculate_next_time_step(snapshot, settings, tick)
            total = snapshot.population_total()
            assert abs(total - 1.0) < _TOLERANCE, (
                f"population sums to {total} at tick {tick}"
            )


def check_bounds_long_horizon() -> None:
    """All guaranteed bounds hold for every tick up to 200, under several policies."""
    configs = [
        _settings(),
        _settings({"class4": 40, "class5": 35}, 75, 15),
        _settings({"class2": 10, "class3": 15, "class4": 20, "class5": 5}, 50, 10, True),
        _settings({"class2": 20, "class3": 15, "class4": 10, "class5": 5}, 50, 10),
    ]
    for settings in configs:
        snapshot = get_initial_conditions()
        for tick in range(201):
            snapshot = calculate_next_time_step(snapshot, settings, tick)
            assert_snapshot_invariants(snapshot)


def check_monotonic_reservation_response() -> None:
    """More reservation never lowers next-tick tertiary education or job access."""
    baseline = get_initial_conditions()
    for key in ("class3", "class4", "class5"):
        zero = calculate_next_time_step(baseline, _settings(), 1)[key]
        previous = zero
        for pct in (5, 10, 20, 40, 80):
            current = calculate_next_time_step(baseline, _settings({key: pct}), 1)[key]
            assert current.education.tertiary >= zero.education.tertiary
            assert current.job_access >= zero.job_access
            assert current.education.tertiary >= previous.education.tertiary
            previous = current


def check_creamy_layer_zeroing() -> None:
    """A class at 95% of the creamy threshold gains nothing from reservation."""
    params = EngineParams()
    gdp = params.creamy_layer_threshold * params.creamy_buffer
    baseline = get_initial_conditions()
    snapshot = baseline.replace_class(
        "class3", baseline["class3"].copy_with(gdp_per_capita=gdp)
    )
    without = calculate_next_time_step(snapshot, _settings(), 1)["class3"]
    with_res = calculate_next_time_step(snapshot, _settings({"class3": 50}), 1)["class3"]
    assert abs(with_res.education.tertiary - without.education.tertiary) < 1e-12
    assert abs(with_res.job_access - without.job_access) < 1e-12


def check_no_double_benefit() -> None:
    """EWS never changes the outcome of a class that already holds a reservation."""
    reserved = {"class4": 15}
    with_ews = calculate_next_time_step(
        get_initial_conditions(), _settings(reserved, 50, 10, True), 1
    )["class4"]
    without_ews = calculate_next_time_step(
        get_initial_conditions(), _settings(reserved, 50, 0, True), 1
    )["class4"]
    # other classes draw EWS, so only the normalised population share may differ
    assert with_ews.copy_with(population=0.0) == without_ews.copy_with(population=0.0), (
        "reserved class drew an EWS benefit"
    )


def check_baseline_idempotence() -> None:
    assert get_initial_conditions() == get_initial_conditions()
    assert get_initial_conditions().to_dict() == get_initial_conditions().to_dict()


def check_no_policy_growth() -> None:
    """Without any policy, every class's GDP per capita grows over 10 ticks."""
    baseline = get_initial_conditions()
    final = multi_step(baseline, _settings(), 10)
    for key in baseline:
        assert final[key].gdp_per_capita > baseline[key].gdp_per_capita, (
            f"{key} GDP did not grow"
        )


CHECKS: List[Tuple[str, Callable[[], None]]] = [
    ("1. Determinism", check_determinism),
    ("2. Population conservation", check_population_conservation),
    ("3. Bounds over 200 ticks", check_bounds_long_horizon),
    ("4. Monotonic reservation response", check_monotonic_reservation_response),
    ("5. Creamy-layer zeroing", check_creamy_layer_zeroing),
    ("6. No double benefit", check_no_double_benefit),
    ("7. Baseline idempotence", check_baseline_idempotence),
    ("8. No-policy growth", check_no_policy_growth),
]


def run_all_checks() -> List[str]:
    """Execute every check.

    Returns:
        Names of the checks that ran, in order.

    Raises:
        AssertionError: On the first failure, prefixed with the check's name.
    """
    for name, fn in CHECKS:
        try:
            fn()
        except AssertionError as exc:
            raise AssertionError(f"{name}: {exc}") from exc
    return [name for name, _ in CHECKS]


if __name__ == "__main__":
    run_all_checks()
