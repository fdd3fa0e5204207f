"""
test_scenario_loader.py — YAML scenario loading and conversion.
"""

import textwrap

import pytest

from strata_engine.core.parameters import EngineParams
from strata_engine.core.policy import ReservationSettings
from strata_engine.scenario_loader import (
    build_initial_snapshot,
    build_params,
    build_settings,
    get_scenario_by_name,
    list_scenarios,
    load_scenario_config,
)


def _write(tmp_path, body):
    path = tmp_path / "scenarios.yaml"
    path.write_text(textwrap.dedent(body))
    return path


def test_bundled_scenarios_load():
    config = load_scenario_config()
    names = [name for name, _ in list_scenarios(config)]
    assert names == [
        "no_policy",
        "balanced_reservation",
        "targeted_reservation",
        "long_horizon",
        "creamy_layer",
    ]


def test_build_settings_from_bundled_scenario(mock_settings):
    config = load_scenario_config()
    assert build_settings(get_scenario_by_name(config, "no_policy")) == ReservationSettings.none()
    balanced = build_settings(get_scenario_by_name(config, "balanced_reservation"))
    assert balanced == mock_settings
    targeted = build_settings(get_scenario_by_name(config, "targeted_reservation"))
    assert targeted.class_reservations == {"class4": 40.0, "class5": 35.0}
    assert targeted.total_reservation_cap == 75.0
    assert targeted.ews_settings.percentage == 15.0


def test_overrides_are_applied(baseline):
    scenario = get_scenario_by_name(load_scenario_config(), "creamy_layer")
    snapshot = build_initial_snapshot(scenario)
    assert snapshot["class2"].gdp_per_capita == 60000.0
    assert snapshot["class2"].education == baseline["class2"].education
    assert snapshot["class1"] == baseline["class1"]
    assert build_initial_snapshot({"name": "plain"}) == baseline


def test_nested_override(tmp_path):
    path = _write(tmp_path, """
        scenarios:
          - name: healthier
            settings: {}
            overrides:
              class5:
                socialIndicators:
                  lifeExpectancy: 70
    """)
    scenario = get_scenario_by_name(load_scenario_config(path), "healthier")
    m = build_initial_snapshot(scenario)["class5"]
    assert m.social_indicators.life_expectancy == 70.0
    assert m.social_indicators.infant_mortality == 50.0


def test_unknown_override_class():
    with pytest.raises(ValueError, match="unknown class 'class9'"):
        build_initial_snapshot({"name": "x", "overrides": {"class9": {"wealth": 1}}})


def test_build_params(tmp_path):
    assert build_params({"name": "x"}) == EngineParams()
    params = build_params({"name": "x", "params": {"base_growth": 0.05, "wealth_floor": 0}})
    assert params.base_growth == 0.05
    assert params.wealth_floor == 0
    with pytest.warns(UserWarning, match="Unknown EngineParams fields"):
        params = build_params({"name": "x", "params": {"growth": 1.0}})
    assert params == EngineParams()


def test_missing_file(tmp_path):
    with pytest.raises(FileNotFoundError, match="Config not found"):
        load_scenario_config(tmp_path / "missing.yaml")


@pytest.mark.parametrize(
    "body, message",
    [
        ("foo: 1\n", "must include a 'scenarios' list"),
        ("scenarios: {a: 1}\n", "must be a list"),
        ("scenarios:\n  - ticks: 3\n", "must have a 'name'"),
        ("scenarios:\n  - {name: a, settings: {}}\n  - {name: a, settings: {}}\n", "Duplicate"),
        ("scenarios:\n  - {name: a, ticks: -1, settings: {}}\n", "invalid ticks"),
    ],
)
def test_invalid_configs(tmp_path, body, message):
    path = _write(tmp_path, body)
    with pytest.raises(ValueError, match=message):
        load_scenario_config(path)


def test_scenario_without_settings_warns(tmp_path):
    path = _write(tmp_path, """
        scenarios:
          - name: bare
            ticks: 2
    """)
    with pytest.warns(UserWarning, match="no 'settings' section"):
        config = load_scenario_config(path)
    assert build_settings(get_scenario_by_name(config, "bare")) == ReservationSettings.none()


def test_unknown_scenario_name():
    with pytest.raises(ValueError, match="not found"):
        get_scenario_by_name(load_scenario_config(), "utopia")
