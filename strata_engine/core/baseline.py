"""
Baseline parameter table.

Five reference classes ordered from the highest socioeconomic tier (class1)
to the lowest (class5).  The table is pure data; get_initial_conditions()
builds a fresh Snapshot from it on every call.
"""

from __future__ import annotations

from typing import Any, Dict, Mapping, Optional

from .state import ClassMetrics, Snapshot

BASELINE_TABLE: Dict[str, Dict[str, Any]] = {
    "class1": {
        "population": 0.05,
        "fertility": 1.6,
        "education": {"primary": 100.0, "secondary": 98.0, "tertiary": 95.0},
        "jobAccess": 90.0,
        "wealth": 0.35,
        "gdpPerCapita": 150000.0,
        "povertyRate": 1.0,
        "socialIndicators": {
            "lifeExpectancy": 82.0,
            "infantMortality": 2.0,
            "maternalMortality": 5.0,
        },
    },
    "class2": {
        "population": 0.15,
        "fertility": 1.8,
        "education": {"primary": 95.0, "secondary": 85.0, "tertiary": 65.0},
        "jobAccess": 75.0,
        "wealth": 0.25,
        "gdpPerCapita": 80000.0,
        "povertyRate": 10.0,
        "socialIndicators": {
            "lifeExpectancy": 78.0,
            "infantMortality": 5.0,
            "maternalMortality": 10.0,
        },
    },
    "class3": {
        "population": 0.30,
        "fertility": 2.5,
        "education": {"primary": 85.0, "secondary": 70.0, "tertiary": 40.0},
        "jobAccess": 50.0,
        "wealth": 0.20,
        "gdpPerCapita": 40000.0,
        "povertyRate": 30.0,
        "socialIndicators": {
            "lifeExpectancy": 72.0,
            "infantMortality": 15.0,
            "maternalMortality": 25.0,
        },
    },
    "class4": {
        "population": 0.35,
        "fertility": 3.2,
        "education": {"primary": 70.0, "secondary": 45.0, "tertiary": 15.0},
        "jobAccess": 25.0,
        "wealth": 0.15,
        "gdpPerCapita": 20000.0,
        "povertyRate": 60.0,
        "socialIndicators": {
            "lifeExpectancy": 65.0,
            "infantMortality": 30.0,
            "maternalMortality": 45.0,
        },
    },
    "class5": {
        "population": 0.15,
        "fertility": 3.8,
        "education": {"primary": 50.0, "secondary": 20.0, "tertiary": 2.0},
        "jobAccess": 5.0,
        "wealth": 0.05,
        "gdpPerCapita": 5000.0,
        "povertyRate": 85.0,
        "socialIndicators": {
            "lifeExpectancy": 58.0,
            "infantMortality": 50.0,
            "maternalMortality": 70.0,
        },
    },
}


def get_initial_conditions(
    labels: Optional[Mapping[str, str]] = None,
) -> Snapshot:
    """Return the baseline snapshot.

    Args:
        labels: Optional mapping from reference key (class1..class5) to the
                key the caller wants in the snapshot, e.g. generated class
                names.  Unmapped keys keep their reference name.

    Returns:
        A new Snapshot in tier order.

    Raises:
        ValueError: If labels maps two classes onto the same key.
    """
    labels = labels or {}
    return Snapshot(
        (labels.get(key, key), ClassMetrics.from_dict(row))
        for key, row in BASELINE_TABLE.items()
    )
