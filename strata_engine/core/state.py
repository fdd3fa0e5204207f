"""
State containers for the Strata simulation engine.

Three tiers of immutable state:
  - Education / SocialIndicators : grouped per-class sub-metrics
  - ClassMetrics                 : one social class at one tick
  - Snapshot                     : ordered mapping class key -> ClassMetrics

Snapshot key order is tier order (highest tier first).  Class keys are opaque
labels; nothing in the engine derives a key from a position.

Serialised form uses the reference camelCase field names (jobAccess,
gdpPerCapita, ...), so snapshots round-trip through JSON/YAML unchanged.
"""

from __future__ import annotations

import math
from collections.abc import Mapping
from dataclasses import dataclass, replace
from typing import Any, Dict, Iterable, Iterator, List, Tuple, Union

import numpy as np
from numpy.typing import NDArray


def _check_finite(owner: str, fields: Dict[str, float]) -> None:
    for name, value in fields.items():
        if not math.isfinite(value):
            raise ValueError(f"{owner}.{name} must be finite, got {value}")


def _check_percentages(owner: str, fields: Dict[str, float]) -> None:
    for name, value in fields.items():
        if not (0.0 <= value <= 100.0):
            raise ValueError(f"{owner}.{name} must be in [0, 100], got {value}")


# --------------------------------------------------------------------------- #
# Per-class sub-metrics                                                        #
# --------------------------------------------------------------------------- #


@dataclass(frozen=True)
class Education:
    """Access to each education tier, as percentages in [0, 100]."""

    primary: float
    secondary: float
    tertiary: float

    def __post_init__(self) -> None:
        fields = {
            "primary": self.primary,
            "secondary": self.secondary,
            "tertiary": self.tertiary,
        }
        _check_finite("Education", fields)
        _check_percentages("Education", fields)

    def to_dict(self) -> Dict[str, float]:
        return {
            "primary": self.primary,
            "secondary": self.secondary,
            "tertiary": self.tertiary,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, float]) -> "Education":
        return cls(
            primary=float(data["primary"]),
            secondary=float(data["secondary"]),
            tertiary=float(data["tertiary"]),
        )


@dataclass(frozen=True)
class SocialIndicators:
    """Health outcomes of one class.

    Attributes:
        life_expectancy:    Years at birth.
        infant_mortality:   Deaths per 1000 live births.
        maternal_mortality: Deaths per 100000 live births (index scale).
    """

    life_expectancy: float
    infant_mortality: float
    maternal_mortality: float

    def __post_init__(self) -> None:
        fields = {
            "life_expectancy": self.life_expectancy,
            "infant_mortality": self.infant_mortality,
            "maternal_mortality": self.maternal_mortality,
        }
        _check_finite("SocialIndicators", fields)
        for name, value in fields.items():
            if value < 0.0:
                raise ValueError(f"SocialIndicators.{name} must be >= 0, got {value}")

    def to_dict(self) -> Dict[str, float]:
        return {
            "lifeExpectancy": self.life_expectancy,
            "infantMortality": self.infant_mortality,
            "maternalMortality": self.maternal_mortality,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, float]) -> "SocialIndicators":
        return cls(
            life_expectancy=float(_pick(data, "lifeExpectancy", "life_expectancy")),
            infant_mortality=float(_pick(data, "infantMortality", "infant_mortality")),
            maternal_mortality=float(
                _pick(data, "maternalMortality", "maternal_mortality")
            ),
        )


# --------------------------------------------------------------------------- #
# Class state                                                                  #
# --------------------------------------------------------------------------- #


@dataclass(frozen=True)
class ClassMetrics:
    """Immutable state of a single social class at one tick.

    Attributes:
        population:        Share of total population in [0, 1].
        fertility:         Children per woman (> 0).
        education:         Primary/secondary/tertiary access.
        job_access:        Formal job access in [0, 100].
        wealth:            Wealth accumulator (not a bounded share).
        gdp_per_capita:    Income in currency units (> 0).
        poverty_rate:      Share below the poverty line in [0, 100].
        social_indicators: Life expectancy and mortality rates.
    """

    population: float
    fertility: float
    education: Education
    job_access: float
    wealth: float
    gdp_per_capita: float
    poverty_rate: float
    social_indicators: SocialIndicators

    def __post_init__(self) -> None:
        """Reject any out-of-range values at construction time.

        wealth and gdp_per_capita compound without bound, so long runs may
        carry them to ±inf (and wealth to NaN once income and consumption
        both overflow); they are not checked for finiteness.
        """
        scalars = {
            "population": self.population,
            "fertility": self.fertility,
            "job_access": self.job_access,
            "poverty_rate": self.poverty_rate,
        }
        _check_finite("ClassMetrics", scalars)
        if not (0.0 <= self.population <= 1.0):
            raise ValueError(
                f"ClassMetrics.population must be in [0, 1], got {self.population}"
            )
        if self.fertility <= 0.0:
            raise ValueError(
                f"ClassMetrics.fertility must be > 0, got {self.fertility}"
            )
        if self.gdp_per_capita <= 0.0:
            raise ValueError(
                f"ClassMetrics.gdp_per_capita must be > 0, got {self.gdp_per_capita}"
            )
        _check_percentages(
            "ClassMetrics",
            {"job_access": self.job_access, "poverty_rate": self.poverty_rate},
        )

    def copy_with(self, **kwargs: Any) -> "ClassMetrics":
        """Return a new ClassMetrics with selected fields overridden."""
        return replace(self, **kwargs)

    def to_array(self) -> NDArray[np.float64]:
        """Return the twelve scalar metrics as a float64 array.

        Order: population, fertility, primary, secondary, tertiary,
        job_access, wealth, gdp_per_capita, poverty_rate, life_expectancy,
        infant_mortality, maternal_mortality.
        """
        edu = self.education
        soc = self.social_indicators
        return np.array(
            [
                self.population, self.fertility,
                edu.primary, edu.secondary, edu.tertiary,
                self.job_access, self.wealth, self.gdp_per_capita,
                self.poverty_rate,
                soc.life_expectancy, soc.infant_mortality, soc.maternal_mortality,
            ],
            dtype=np.float64,
        )

    def to_dict(self) -> Dict[str, Any]:
        """Serialise to a plain dictionary using camelCase keys."""
        return {
            "population": self.population,
            "fertility": self.fertility,
            "education": self.education.to_dict(),
            "jobAccess": self.job_access,
            "wealth": self.wealth,
            "gdpPerCapita": self.gdp_per_capita,
            "povertyRate": self.poverty_rate,
            "socialIndicators": self.social_indicators.to_dict(),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ClassMetrics":
        """Deserialise from a dictionary with camelCase or snake_case keys."""
        return cls(
            population=float(data["population"]),
            fertility=float(data["fertility"]),
            education=Education.from_dict(data["education"]),
            job_access=float(_pick(data, "jobAccess", "job_access")),
            wealth=float(data["wealth"]),
            gdp_per_capita=float(_pick(data, "gdpPerCapita", "gdp_per_capita")),
            poverty_rate=float(_pick(data, "povertyRate", "poverty_rate")),
            social_indicators=SocialIndicators.from_dict(
                _pick(data, "socialIndicators", "social_indicators")
            ),
        )


def _pick(data: Dict[str, Any], camel: str, snake: str) -> Any:
    if camel in data:
        return data[camel]
    if snake in data:
        return data[snake]
    raise KeyError(camel)


# --------------------------------------------------------------------------- #
# Snapshot                                                                     #
# --------------------------------------------------------------------------- #


class Snapshot(Mapping):
    """Immutable, ordered mapping from class key to ClassMetrics.

    Equality is structural (same keys, same metrics), so two snapshots built
    from the same data compare equal.
    """

    __slots__ = ("_classes",)

    def __init__(
        self,
        classes: Union[
            Mapping, Iterable[Tuple[str, ClassMetrics]], None
        ] = None,
    ) -> None:
        items = classes.items() if isinstance(classes, Mapping) else (classes or ())
        built: Dict[str, ClassMetrics] = {}
        for key, metrics in items:
            if not isinstance(key, str) or not key:
                raise ValueError(f"Class keys must be non-empty strings, got {key!r}")
            if not isinstance(metrics, ClassMetrics):
                raise ValueError(
                    f"Snapshot[{key!r}] must be ClassMetrics, got {type(metrics).__name__}"
                )
            if key in built:
                raise ValueError(f"Duplicate class key {key!r}")
            built[key] = metrics
        object.__setattr__(self, "_classes", built)

    def __setattr__(self, name: str, value: Any) -> None:
        raise AttributeError("Snapshot is immutable")

    def __getitem__(self, key: str) -> ClassMetrics:
        return self._classes[key]

    def __iter__(self) -> Iterator[str]:
        return iter(self._classes)

    def __len__(self) -> int:
        return len(self._classes)

    def __repr__(self) -> str:
        return f"Snapshot({list(self._classes)})"

    # ------------------------------------------------------------------ #
    # Tier order                                                           #
    # ------------------------------------------------------------------ #

    @property
    def tiers(self) -> List[str]:
        """Class keys from highest to lowest tier."""
        return list(self._classes)

    @property
    def top_tier(self) -> str:
        """Key of the highest tier.

        Raises:
            ValueError: If the snapshot is empty.
        """
        if not self._classes:
            raise ValueError("Empty snapshot has no top tier")
        return next(iter(self._classes))

    @property
    def bottom_tier(self) -> str:
        """Key of the lowest tier.

        Raises:
            ValueError: If the snapshot is empty.
        """
        if not self._classes:
            raise ValueError("Empty snapshot has no bottom tier")
        return next(reversed(self._classes))

    # ------------------------------------------------------------------ #
    # Helpers                                                              #
    # ------------------------------------------------------------------ #

    def population_total(self) -> float:
        """Sum of population shares across all classes."""
        return float(sum(m.population for m in self._classes.values()))

    def replace_class(self, key: str, metrics: ClassMetrics) -> "Snapshot":
        """Return a new snapshot with one class's metrics swapped out.

        Raises:
            KeyError: If key is not present.
        """
        if key not in self._classes:
            raise KeyError(key)
        updated = dict(self._classes)
        updated[key] = metrics
        return Snapshot(updated)

    def to_dict(self) -> Dict[str, Dict[str, Any]]:
        """Serialise to an ordered plain dictionary."""
        return {key: m.to_dict() for key, m in self._classes.items()}

    @classmethod
    def from_dict(cls, data: Dict[str, Dict[str, Any]]) -> "Snapshot":
        """Deserialise from a plain dictionary, keeping key order."""
        return cls((key, ClassMetrics.from_dict(value)) for key, value in data.items())
