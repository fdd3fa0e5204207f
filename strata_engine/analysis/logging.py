"""
Tick-stamped snapshot history.

SnapshotLogger keeps the snapshots of a run next to the tick each one belongs
to, so a caller can dump the history as JSON-ready dicts or pull one metric
out as a series, either per class or as a population-weighted society value.
"""

from __future__ import annotations

from typing import Any, Dict, List, Optional

from ..core.parameters import EngineParams
from ..core.state import Snapshot
from .metrics import society_summary

_CLASS_FIELDS = (
    "population",
    "fertility",
    "primary",
    "secondary",
    "tertiary",
    "job_access",
    "wealth",
    "gdp_per_capita",
    "poverty_rate",
    "life_expectancy",
    "infant_mortality",
    "maternal_mortality",
)

_AGGREGATE_FIELDS = (
    "fertility",
    "tertiary_education",
    "job_access",
    "wealth",
    "poverty_rate",
    "gdp_per_capita",
    "life_expectancy",
    "infant_mortality",
    "trust_in_government",
)


class SnapshotLogger:
    """History of (tick, snapshot) pairs for one run.

    Hook it onto a session to capture every tick's output:

        log = SnapshotLogger()
        session.register_post_hook(lambda before, after: log.record(after))

    The stored tick matters for aggregate_series(): trust in government is a
    function of the tick, not of the snapshot.

    Attributes:
        max_records: History length kept in memory; None keeps the whole run.
    """

    def __init__(self, max_records: Optional[int] = None) -> None:
        """
        Args:
            max_records: Keep only the most recent max_records ticks; the
                         oldest tick is dropped when a new one arrives.
        """
        if max_records is not None and max_records <= 0:
            raise ValueError(
                f"max_records must be > 0 or None, got {max_records}"
            )
        self.max_records: Optional[int] = max_records
        self._records: List[Snapshot] = []
        self._ticks: List[int] = []

    def record(self, snapshot: Snapshot, tick: Optional[int] = None) -> None:
        """Store one tick of the run.

        Args:
            snapshot: Snapshot to record.
            tick:     Tick index; defaults to one past the last recorded tick.
        """
        if tick is None:
            tick = self._ticks[-1] + 1 if self._ticks else 0
        self._records.append(snapshot)
        self._ticks.append(tick)
        if self.max_records is not None and len(self._records) > self.max_records:
            self._records.pop(0)
            self._ticks.pop(0)

    def records(self) -> List[Snapshot]:
        """Stored snapshots, oldest first."""
        return list(self._records)

    def ticks(self) -> List[int]:
        return list(self._ticks)

    def clear(self) -> None:
        """Forget the whole history."""
        self._records = []
        self._ticks = []

    def __len__(self) -> int:
        return len(self._records)

    def to_dicts(self) -> List[Dict[str, Any]]:
        """Serialise all records as {"tick": ..., "classes": Snapshot.to_dict()}."""
        return [
            {"tick": tick, "classes": snapshot.to_dict()}
            for tick, snapshot in zip(self._ticks, self._records)
        ]

    def aggregate_series(
        self, params: Optional[EngineParams] = None
    ) -> Dict[str, List[float]]:
        """Time-series of each population-weighted aggregate.

        Returns:
            Dictionary mapping aggregate name to list of values.
        """
        series: Dict[str, List[float]] = {name: [] for name in _AGGREGATE_FIELDS}
        for tick, snapshot in zip(self._ticks, self._records):
            summary = society_summary(snapshot, tick, params)
            for name in _AGGREGATE_FIELDS:
                series[name].append(getattr(summary, name))
        return series

    def class_series(self, class_key: str) -> Dict[str, List[float]]:
        """Time-series of every metric for one class.

        Args:
            class_key: Key of the class in the recorded snapshots.

        Returns:
            Dictionary mapping metric name to list of values.

        Raises:
            KeyError: If the class is absent from the recorded snapshots.
        """
        if not self._records:
            return {name: [] for name in _CLASS_FIELDS}
        if class_key not in self._records[0]:
            raise KeyError(
                f"class {class_key!r} not recorded (classes: {self._records[0].tiers})"
            )
        rows = [s[class_key].to_array() for s in self._records]
        return {
            name: [float(row[i]) for row in rows]
            for i, name in enumerate(_CLASS_FIELDS)
        }
