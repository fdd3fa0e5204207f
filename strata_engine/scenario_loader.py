"""
scenario_loader.py — Scenario configuration loader for the Strata engine.

Loads YAML scenario files and converts each scenario into the objects the
engine consumes.

Public API:
    load_scenario_config(path)          -> raw config dict
    get_scenario_by_name(config, name)  -> scenario dict
    list_scenarios(config)              -> list of (name, description) tuples
    build_settings(scenario)            -> ReservationSettings
    build_params(scenario)              -> EngineParams
    build_initial_snapshot(scenario)    -> Snapshot (baseline + overrides)
"""

from __future__ import annotations

import warnings
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional, Tuple, Union

import yaml

from .core.baseline import get_initial_conditions
from .core.parameters import EngineParams
from .core.policy import ReservationSettings
from .core.state import ClassMetrics, Snapshot

DEFAULT_SCENARIO_PATH = Path(__file__).with_name("scenarios.yaml")


# ─────────────────────────────────────────────────────────────────────────── #
# YAML loading + validation                                                    #
# ─────────────────────────────────────────────────────────────────────────── #

def load_scenario_config(
    config_path: Union[str, Path, None] = None,
) -> Dict[str, Any]:
    """Load and validate a scenario configuration YAML file.

    Args:
        config_path: Path to the YAML file; the bundled scenarios when None.

    Raises:
        FileNotFoundError: If the file does not exist.
        ValueError:        If the file is not a valid scenario config.
    """
    path = Path(config_path) if config_path is not None else DEFAULT_SCENARIO_PATH
    if not path.exists():
        raise FileNotFoundError(f"Config not found: {path.resolve()}")

    with open(path, "r") as f:
        config = yaml.safe_load(f)

    if not isinstance(config, dict) or "scenarios" not in config:
        raise ValueError("Config must include a 'scenarios' list.")
    if not isinstance(config["scenarios"], list):
        raise ValueError("'scenarios' must be a list.")

    seen = set()
    for scenario in config["scenarios"]:
        if not isinstance(scenario, dict) or "name" not in scenario:
            raise ValueError("Each scenario must have a 'name' field.")
        if scenario["name"] in seen:
            raise ValueError(f"Duplicate scenario name '{scenario['name']}'.")
        seen.add(scenario["name"])
        ticks = scenario.get("ticks", 0)
        if not isinstance(ticks, int) or ticks < 0:
            raise ValueError(
                f"Scenario '{scenario['name']}' has invalid ticks: {ticks!r}"
            )
        if "settings" not in scenario:
            warnings.warn(
                f"Scenario '{scenario['name']}' has no 'settings' section; "
                f"running without policy."
            )

    return config


def get_scenario_by_name(config: Dict[str, Any], name: str) -> Dict[str, Any]:
    """Retrieve a scenario dict by name."""
    for scenario in config["scenarios"]:
        if scenario["name"] == name:
            return scenario
    available = [s["name"] for s in config["scenarios"]]
    raise ValueError(f"Scenario '{name}' not found. Available: {available}")


def list_scenarios(config: Dict[str, Any]) -> List[Tuple[str, str]]:
    """Return list of (name, description) for all scenarios."""
    return [
        (s["name"], str(s.get("description", "")).strip())
        for s in config["scenarios"]
    ]


# ─────────────────────────────────────────────────────────────────────────── #
# Scenario → engine objects                                                    #
# ─────────────────────────────────────────────────────────────────────────── #

def build_settings(scenario: Dict[str, Any]) -> ReservationSettings:
    """Reservation settings of a scenario (no policy when absent)."""
    return ReservationSettings.from_dict(scenario.get("settings") or {})


def build_params(scenario: Dict[str, Any]) -> EngineParams:
    """
    Convert a scenario's 'params' section to an EngineParams instance.

    Fields not present fall back to EngineParams defaults; unknown fields are
    dropped with a warning.
    """
    kwargs: Dict[str, Any] = dict(scenario.get("params") or {})

    valid_fields = set(EngineParams.__dataclass_fields__.keys())
    unknown = set(kwargs.keys()) - valid_fields
    if unknown:
        warnings.warn(f"Unknown EngineParams fields ignored: {sorted(unknown)}")
        for k in unknown:
            del kwargs[k]

    return EngineParams(**kwargs)


def _merge(base: Dict[str, Any], patch: Mapping[str, Any]) -> Dict[str, Any]:
    merged = dict(base)
    for key, value in patch.items():
        if isinstance(value, Mapping) and isinstance(merged.get(key), dict):
            merged[key] = _merge(merged[key], value)
        else:
            merged[key] = value
    return merged


def build_initial_snapshot(
    scenario: Dict[str, Any],
    base: Optional[Snapshot] = None,
) -> Snapshot:
    """Baseline snapshot with the scenario's per-class overrides applied.

    Args:
        scenario: Scenario dict.
        base:     Snapshot to start from; get_initial_conditions() when None.

    Raises:
        ValueError: If an override names an unknown class or yields invalid metrics.
    """
    snapshot = base if base is not None else get_initial_conditions()
    overrides = scenario.get("overrides") or {}
    for key, patch in overrides.items():
        if key not in snapshot:
            raise ValueError(
                f"Override for unknown class '{key}'. Available: {snapshot.tiers}"
            )
        metrics = ClassMetrics.from_dict(_merge(snapshot[key].to_dict(), patch))
        snapshot = snapshot.replace_class(key, metrics)
    return snapshot
