"""
Crime classifier.

Maps a class's poverty rate and tertiary-education access to a discrete crime
label using deterministic thresholds.  Pure function of the metrics; it never
feeds back into the engine.

Crime taxonomy (ordered by severity):

  VERY_LOW   — little poverty
  LOW        — some poverty, adequate education
  MEDIUM     — a fifth in poverty or thin tertiary access
  HIGH       — widespread poverty or very low tertiary access
  VERY_HIGH  — mass poverty combined with almost no tertiary access

The ladder is checked from the most severe label down and the first match is
returned.  With the default thresholds the baseline classes come out as
very low, low, medium, high and very high from class1 to class5.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import IntEnum, unique
from typing import Dict, List, Mapping, Optional

from ..core.state import ClassMetrics, Snapshot


@unique
class CrimeLevel(IntEnum):
    """Ordered crime levels (higher integer = more severe)."""

    VERY_LOW = 0
    LOW = 1
    MEDIUM = 2
    HIGH = 3
    VERY_HIGH = 4

    @property
    def label(self) -> str:
        """Display label, e.g. "very high"."""
        return self.name.lower().replace("_", " ")


@dataclass(frozen=True)
class CrimeThresholds:
    """Threshold parameters for the crime classifier.

    Poverty thresholds are lower bounds, tertiary thresholds are upper bounds.

    Attributes:
        very_high_poverty:  Poverty at or above which VERY_HIGH is possible.
        very_high_tertiary: Tertiary access below which VERY_HIGH is possible.
        high_poverty:       Poverty threshold for HIGH.
        high_tertiary:      Tertiary threshold for HIGH.
        medium_poverty:     Poverty threshold for MEDIUM.
        medium_tertiary:    Tertiary threshold for MEDIUM.
        low_poverty:        Poverty threshold for LOW.
    """

    very_high_poverty: float = 75.0
    very_high_tertiary: float = 10.0
    high_poverty: float = 45.0
    high_tertiary: float = 20.0
    medium_poverty: float = 20.0
    medium_tertiary: float = 40.0
    low_poverty: float = 5.0

    def __post_init__(self) -> None:
        """Validate ranges and ladder ordering."""
        for name, value in self.__dict__.items():
            if not 0.0 <= value <= 100.0:
                raise ValueError(
                    f"CrimeThresholds.{name} must be in [0, 100], got {value}"
                )
        poverty = [self.very_high_poverty, self.high_poverty,
                   self.medium_poverty, self.low_poverty]
        if poverty != sorted(poverty, reverse=True):
            raise ValueError(
                f"Poverty thresholds must decrease with severity, got {poverty}"
            )
        tertiary = [self.very_high_tertiary, self.high_tertiary, self.medium_tertiary]
        if tertiary != sorted(tertiary):
            raise ValueError(
                f"Tertiary thresholds must increase as severity falls, got {tertiary}"
            )


_DEFAULT_THRESHOLDS = CrimeThresholds()


def classify_crime(
    poverty_rate: float,
    tertiary: float,
    thresholds: CrimeThresholds = _DEFAULT_THRESHOLDS,
) -> CrimeLevel:
    """Return the most severe crime label matching the inputs.

    Args:
        poverty_rate: Poverty rate in percent.
        tertiary:     Tertiary education access in percent.
        thresholds:   Classifier thresholds.

    Returns:
        CrimeLevel.
    """
    if (
        poverty_rate >= thresholds.very_high_poverty
        and tertiary < thresholds.very_high_tertiary
    ):
        return CrimeLevel.VERY_HIGH

    if poverty_rate >= thresholds.high_poverty or tertiary < thresholds.high_tertiary:
        return CrimeLevel.HIGH

    if poverty_rate >= thresholds.medium_poverty or tertiary < thresholds.medium_tertiary:
        return CrimeLevel.MEDIUM

    if poverty_rate >= thresholds.low_poverty:
        return CrimeLevel.LOW

    return CrimeLevel.VERY_LOW


def classify_class(
    metrics: ClassMetrics,
    thresholds: CrimeThresholds = _DEFAULT_THRESHOLDS,
) -> CrimeLevel:
    return classify_crime(metrics.poverty_rate, metrics.education.tertiary, thresholds)


def classify_snapshot(
    snapshot: Snapshot,
    thresholds: CrimeThresholds = _DEFAULT_THRESHOLDS,
) -> Dict[str, CrimeLevel]:
    """Classify every class in a snapshot, keeping tier order."""
    return {key: classify_class(m, thresholds) for key, m in snapshot.items()}


def aggregate_crime_level(
    levels: Mapping[str, CrimeLevel],
    weights: Optional[Mapping[str, float]] = None,
) -> CrimeLevel:
    """Most common level across classes.

    Args:
        levels:  Class key -> CrimeLevel.
        weights: Optional class key -> weight (e.g. population share).
                 Unweighted counting when omitted.

    Returns:
        Level with the largest total weight; ties go to the more severe level.
        VERY_LOW for an empty mapping.
    """
    if not levels:
        return CrimeLevel.VERY_LOW
    totals: Dict[CrimeLevel, float] = {level: 0.0 for level in CrimeLevel}
    for key, level in levels.items():
        totals[level] += 1.0 if weights is None else float(weights.get(key, 0.0))
    return max(CrimeLevel, key=lambda level: (totals[level], int(level)))


def crime_distribution(levels: List[CrimeLevel]) -> Dict[CrimeLevel, float]:
    """Fraction of entries at each crime level."""
    if not levels:
        return {level: 0.0 for level in CrimeLevel}
    n = len(levels)
    counts: Dict[CrimeLevel, int] = {level: 0 for level in CrimeLevel}
    for level in levels:
        counts[level] += 1
    return {level: count / n for level, count in counts.items()}
