"""Core engine: parameters, state, baseline, policy, transitions and orchestrator."""
from .parameters import EngineParams
from .state import ClassMetrics, Education, Snapshot, SocialIndicators
from .baseline import BASELINE_TABLE, get_initial_conditions
from .policy import (
    EwsSettings,
    PolicyEffect,
    ReservationSettings,
    reservation_impact,
    resolve_policy_effect,
)
from .integrator import calculate_next_time_step, multi_step, step

__all__ = [
    "EngineParams",
    "ClassMetrics",
    "Education",
    "Snapshot",
    "SocialIndicators",
    "BASELINE_TABLE",
    "get_initial_conditions",
    "EwsSettings",
    "PolicyEffect",
    "ReservationSettings",
    "reservation_impact",
    "resolve_policy_effect",
    "calculate_next_time_step",
    "multi_step",
    "step",
]
