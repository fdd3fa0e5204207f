"""
Strata — multi-class social policy simulation engine.

A deterministic time-step simulation of a society's class structure under
reservation, EWS and cap policy levers.  The engine is a pure fold over tick
indices; sessions and runners sit on top of it.

Public API:
    get_initial_conditions   — baseline snapshot
    calculate_next_time_step — advance a snapshot by one tick
    society_summary          — population-weighted display summary
    EngineParams             — immutable constant pack
    ClassMetrics, Snapshot   — state containers
    ReservationSettings      — policy configuration
    SimulationSession        — caller-owned session
    SimulationRunner         — high-level trajectory runner
"""

from .core.parameters import EngineParams
from .core.state import ClassMetrics, Education, Snapshot, SocialIndicators
from .core.baseline import BASELINE_TABLE, get_initial_conditions
from .core.policy import (
    EwsSettings,
    PolicyEffect,
    ReservationSettings,
    reservation_impact,
    resolve_policy_effect,
)
from .core.integrator import calculate_next_time_step, multi_step, step
from .systems.crime_classifier import CrimeLevel, CrimeThresholds, classify_crime
from .systems.quota import QuotaReport, remaining_general_quota, validate_settings
from .analysis.metrics import SocietySummary, society_summary, summary_statistics
from .analysis.logging import SnapshotLogger
from .simulation.session import SimulationSession
from .simulation.runner import SimulationRunner

__version__ = "1.0.0"

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
    "CrimeLevel",
    "CrimeThresholds",
    "classify_crime",
    "QuotaReport",
    "remaining_general_quota",
    "validate_settings",
    "SocietySummary",
    "society_summary",
    "summary_statistics",
    "SnapshotLogger",
    "SimulationSession",
    "SimulationRunner",
]
