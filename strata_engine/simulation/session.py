"""
Caller-owned simulation session.

A session owns everything one running simulation needs: the current
snapshot, the reservation settings, the tick counter and the engine
parameters.  The engine stays a pure function; the session is the only place
that remembers anything between ticks.

Per-tick protocol:
    hooks(before, before) → calculate_next_time_step → hooks(before, after)

Independent sessions share no state and can run side by side.  Calls against
one session must be sequenced: each tick's output is the next tick's input.
"""

from __future__ import annotations

import logging
from typing import Callable, List, Optional

from ..analysis.metrics import SocietySummary, society_summary
from ..core.baseline import get_initial_conditions
from ..core.integrator import calculate_next_time_step
from ..core.parameters import EngineParams
from ..core.policy import ReservationSettings
from ..core.state import Snapshot
from ..systems.quota import QuotaReport, validate_settings

logger = logging.getLogger("strata_engine.session")

# Type alias for pre/post-step hooks:  hook(snapshot_before, snapshot_after) -> None
StepHook = Callable[[Snapshot, Snapshot], None]


class SimulationSession:
    """Holds one simulation's state and advances it tick by tick.

    Attributes:
        params: Engine constants used for every tick.
    """

    def __init__(
        self,
        settings: Optional[ReservationSettings] = None,
        params: Optional[EngineParams] = None,
        snapshot: Optional[Snapshot] = None,
        pre_step_hooks: Optional[List[StepHook]] = None,
        post_step_hooks: Optional[List[StepHook]] = None,
    ) -> None:
        """Initialise the session.

        Args:
            settings:        Reservation settings (defaults to no policy).
            params:          Engine constants.
            snapshot:        Starting snapshot; if omitted, call initialise()
                             before advancing.
            pre_step_hooks:  Callables invoked with (before, before).
            post_step_hooks: Callables invoked with (before, after).
        """
        self.params: EngineParams = params or EngineParams()
        self._settings: ReservationSettings = settings or ReservationSettings.none()
        self._pre_hooks: List[StepHook] = list(pre_step_hooks or [])
        self._post_hooks: List[StepHook] = list(post_step_hooks or [])
        self._initial: Optional[Snapshot] = snapshot
        self._snapshot: Optional[Snapshot] = snapshot
        self._tick: int = 0
        if snapshot is not None:
            self._check_settings(self._settings)

    @classmethod
    def from_baseline(
        cls,
        settings: Optional[ReservationSettings] = None,
        params: Optional[EngineParams] = None,
    ) -> "SimulationSession":
        """Session seeded with get_initial_conditions()."""
        return cls(settings=settings, params=params, snapshot=get_initial_conditions())

    # ------------------------------------------------------------------ #
    # Lifecycle                                                            #
    # ------------------------------------------------------------------ #

    def initialise(self, snapshot: Snapshot) -> None:
        """Set the starting snapshot and reset the tick counter."""
        self._initial = snapshot
        self._snapshot = snapshot
        self._tick = 0
        self._check_settings(self._settings)

    def reset(self) -> None:
        """Return to the starting snapshot at tick 0.

        Raises:
            RuntimeError: If the session has not been initialised.
        """
        self._require_initialised()
        self._snapshot = self._initial
        self._tick = 0
        logger.info("session reset to tick 0")

    # ------------------------------------------------------------------ #
    # Settings                                                             #
    # ------------------------------------------------------------------ #

    @property
    def settings(self) -> ReservationSettings:
        return self._settings

    def update_settings(self, settings: ReservationSettings) -> QuotaReport:
        """Replace the settings used from the next tick on.

        Invalid settings are accepted (the engine clamps them) but each
        problem is logged as a warning.

        Returns:
            The QuotaReport for the new settings.
        """
        self._settings = settings
        return self._check_settings(settings)

    def _check_settings(self, settings: ReservationSettings) -> QuotaReport:
        keys = self._snapshot.keys() if self._snapshot is not None else None
        report = validate_settings(settings, keys)
        for message in report.messages:
            logger.warning(f"invalid reservation settings: {message}")
        return report

    # ------------------------------------------------------------------ #
    # Tick                                                                 #
    # ------------------------------------------------------------------ #

    def advance(self) -> Snapshot:
        """Advance the simulation by one tick.

        Returns:
            The new snapshot.

        Raises:
            RuntimeError: If the session has not been initialised.
        """
        before = self._require_initialised()

        for hook in self._pre_hooks:
            hook(before, before)

        after = calculate_next_time_step(before, self._settings, self._tick, self.params)

        for hook in self._post_hooks:
            hook(before, after)

        self._snapshot = after
        self._tick += 1
        return after

    def advance_many(self, n_ticks: int) -> Snapshot:
        """Advance n_ticks times and return the final snapshot.

        Raises:
            ValueError: If n_ticks is negative.
        """
        if n_ticks < 0:
            raise ValueError(f"n_ticks must be >= 0, got {n_ticks}")
        snapshot = self._require_initialised()
        for _ in range(n_ticks):
            snapshot = self.advance()
        return snapshot

    # ------------------------------------------------------------------ #
    # State access                                                         #
    # ------------------------------------------------------------------ #

    @property
    def snapshot(self) -> Snapshot:
        """Current snapshot.

        Raises:
            RuntimeError: If the session has not been initialised.
        """
        return self._require_initialised()

    @property
    def tick(self) -> int:
        """Number of ticks advanced since initialisation or reset."""
        return self._tick

    def summary(self) -> SocietySummary:
        """Population-weighted summary of the current snapshot."""
        return society_summary(self._require_initialised(), self._tick, self.params)

    def register_pre_hook(self, hook: StepHook) -> None:
        self._pre_hooks.append(hook)

    def register_post_hook(self, hook: StepHook) -> None:
        self._post_hooks.append(hook)

    def _require_initialised(self) -> Snapshot:
        if self._snapshot is None:
            raise RuntimeError(
                "Session not initialised. Call initialise(snapshot) first."
            )
        return self._snapshot
