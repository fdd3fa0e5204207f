"""
Simulation runner.

Provides SimulationRunner — a high-level driver that seeds a session, runs
the tick loop for N ticks, and collects the full trajectory.

Usage:
    from strata_engine.core.policy import EwsSettings, ReservationSettings
    from strata_engine.simulation.runner import SimulationRunner

    settings = ReservationSettings(
        class_reservations={"class4": 40, "class5": 35},
        total_reservation_cap=75,
        ews_settings=EwsSettings(percentage=15),
    )
    trajectory = SimulationRunner().run(settings=settings, n_ticks=20)
"""

from __future__ import annotations

import logging
from typing import Dict, List, Optional

from ..core.baseline import get_initial_conditions
from ..core.parameters import EngineParams
from ..core.policy import ReservationSettings
from ..core.state import Snapshot
from .session import SimulationSession

logger = logging.getLogger("strata_engine.runner")


class SimulationRunner:
    """Runs a simulation from an initial snapshot for N ticks.

    Attributes:
        params:        Engine constants.
        default_ticks: Tick count used when run() is called without one.
    """

    def __init__(
        self,
        params: Optional[EngineParams] = None,
        default_ticks: int = 20,
    ) -> None:
        if default_ticks < 0:
            raise ValueError(f"default_ticks must be >= 0, got {default_ticks}")
        self.params: EngineParams = params if params is not None else EngineParams()
        self.default_ticks: int = default_ticks

    def run(
        self,
        initial: Optional[Snapshot] = None,
        settings: Optional[ReservationSettings] = None,
        n_ticks: Optional[int] = None,
        settings_schedule: Optional[Dict[int, ReservationSettings]] = None,
    ) -> List[Snapshot]:
        """Run the simulation and return the full trajectory.

        Args:
            initial:           Starting snapshot; baseline when None.
            settings:          Reservation settings in force from tick 0.
            n_ticks:           Number of ticks; defaults to default_ticks.
            settings_schedule: Optional tick -> settings; each entry replaces
                               the settings before that tick is computed and
                               stays in force until the next entry.

        Returns:
            Snapshots including the initial one (length n_ticks + 1).

        Raises:
            ValueError: If n_ticks is negative.
        """
        n_ticks = n_ticks if n_ticks is not None else self.default_ticks
        if n_ticks < 0:
            raise ValueError(f"n_ticks must be >= 0, got {n_ticks}")

        session = SimulationSession(
            settings=settings,
            params=self.params,
            snapshot=initial if initial is not None else get_initial_conditions(),
        )
        schedule = settings_schedule or {}

        trajectory: List[Snapshot] = [session.snapshot]
        for _ in range(n_ticks):
            if session.tick in schedule:
                logger.info(f"tick {session.tick}: applying scheduled settings")
                session.update_settings(schedule[session.tick])
            trajectory.append(session.advance())

        logger.info(f"run finished after {n_ticks} ticks")
        return trajectory

    def run_headless(
        self,
        initial: Optional[Snapshot] = None,
        settings: Optional[ReservationSettings] = None,
        n_ticks: Optional[int] = None,
    ) -> Snapshot:
        """Run without storing the trajectory; return only the final snapshot."""
        n_ticks = n_ticks if n_ticks is not None else self.default_ticks
        session = SimulationSession(
            settings=settings,
            params=self.params,
            snapshot=initial if initial is not None else get_initial_conditions(),
        )
        return session.advance_many(n_ticks)
