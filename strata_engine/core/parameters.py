"""
Engine parameters for the Strata multi-class simulation.

All constants that shape the policy resolver and the transition rules live
in one immutable, validated pack so that a session can swap the whole
parameterisation at once:

  - creamy layer        = poverty_line_gdp * creamy_multiplier
  - enhanced support    = poverty_line_gdp * enhanced_support_multiple
  - helper creamy gate  = helper_creamy_threshold (second, steeper cutoff)

The defaults reproduce the reference parameterisation exactly.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from typing import TYPE_CHECKING, Any, Dict, Optional

if TYPE_CHECKING:
    from .state import Snapshot


@dataclass(frozen=True)
class EngineParams:
    """Immutable, fully validated engine constants."""

    # ------------------------------------------------------------------ #
    # Income thresholds                                                    #
    # ------------------------------------------------------------------ #
    poverty_line_gdp: float = 5000.0
    """GDP per capita of the lowest tier at baseline (> 0)."""

    creamy_multiplier: float = 8.0
    """Creamy-layer threshold as a multiple of the poverty line (> 0)."""

    creamy_buffer: float = 0.95
    """Fraction of the creamy threshold at which reservation is withdrawn (0, 1]."""

    enhanced_support_multiple: float = 2.5
    """Enhanced-support threshold as a multiple of the poverty line (> 0)."""

    enhanced_support_coeff: float = 2.8
    """Scale of the enhanced-support multiplier (>= 0)."""

    enhanced_support_exponent: float = 1.1
    """Curvature of the enhanced-support multiplier (> 0)."""

    # ------------------------------------------------------------------ #
    # Generational amplification helper                                    #
    # ------------------------------------------------------------------ #
    helper_creamy_threshold: float = 25000.0
    """GDP scale of the helper's own creamy cutoff (> 0)."""

    helper_creamy_cutoff: float = 0.6
    """GDP ratio at or above which the helper yields zero (> 0)."""

    helper_creamy_exponent: float = 3.5
    """Decay exponent of the helper's creamy reduction (> 0)."""

    generational_ramp: float = 15.0
    """Ticks over which the generational boost ramps linearly (> 0)."""

    generational_cap: float = 2.5
    """Upper bound of the generational boost (>= 0)."""

    # ------------------------------------------------------------------ #
    # Economic growth                                                      #
    # ------------------------------------------------------------------ #
    base_growth: float = 0.03
    """Base per-tick growth rate before education/job scaling (> 0)."""

    growth_ramp: float = 10.0
    """Ticks over which growth ramps in (> 0)."""

    # ------------------------------------------------------------------ #
    # Metric bounds                                                        #
    # ------------------------------------------------------------------ #
    fertility_min: float = 1.8
    fertility_max: float = 2.8

    life_expectancy_max: float = 85.0
    """Societal maximum life expectancy in years."""

    infant_mortality_min: float = 2.0
    maternal_mortality_min: float = 3.0

    poverty_floor: float = 1.0
    """Poverty is never fully eliminated (>= 0)."""

    wealth_floor: Optional[float] = None
    """Optional lower bound applied to wealth after each tick (None = literal accumulator)."""

    # ------------------------------------------------------------------ #
    # Trust-in-government proxy (read side only)                           #
    # ------------------------------------------------------------------ #
    trust_baseline: float = 0.38
    trust_growth: float = 0.005
    trust_ceiling: float = 0.9

    def __post_init__(self) -> None:
        """Validate every parameter against its admissible range."""
        strictly_positive_scalars = {
            "poverty_line_gdp": self.poverty_line_gdp,
            "creamy_multiplier": self.creamy_multiplier,
            "enhanced_support_multiple": self.enhanced_support_multiple,
            "enhanced_support_exponent": self.enhanced_support_exponent,
            "helper_creamy_threshold": self.helper_creamy_threshold,
            "helper_creamy_cutoff": self.helper_creamy_cutoff,
            "helper_creamy_exponent": self.helper_creamy_exponent,
            "generational_ramp": self.generational_ramp,
            "base_growth": self.base_growth,
            "growth_ramp": self.growth_ramp,
            "fertility_min": self.fertility_min,
            "life_expectancy_max": self.life_expectancy_max,
        }
        for name, value in strictly_positive_scalars.items():
            if value <= 0.0:
                raise ValueError(f"{name} must be > 0, got {value}")

        non_negative_scalars = {
            "enhanced_support_coeff": self.enhanced_support_coeff,
            "generational_cap": self.generational_cap,
            "infant_mortality_min": self.infant_mortality_min,
            "maternal_mortality_min": self.maternal_mortality_min,
            "poverty_floor": self.poverty_floor,
            "trust_baseline": self.trust_baseline,
            "trust_growth": self.trust_growth,
        }
        for name, value in non_negative_scalars.items():
            if value < 0.0:
                raise ValueError(f"{name} must be >= 0, got {value}")

        if not 0.0 < self.creamy_buffer <= 1.0:
            raise ValueError(
                f"creamy_buffer must be in (0, 1], got {self.creamy_buffer}"
            )

        if self.fertility_max < self.fertility_min:
            raise ValueError(
                f"fertility_max ({self.fertility_max}) must be >= "
                f"fertility_min ({self.fertility_min})"
            )

        if self.poverty_floor > 100.0:
            raise ValueError(
                f"poverty_floor must be <= 100, got {self.poverty_floor}"
            )

        if not self.trust_baseline <= self.trust_ceiling <= 1.0:
            raise ValueError(
                f"trust_ceiling must be in [trust_baseline, 1], got {self.trust_ceiling}"
            )

    # ------------------------------------------------------------------ #
    # Derived thresholds                                                   #
    # ------------------------------------------------------------------ #

    @property
    def creamy_layer_threshold(self) -> float:
        """GDP per capita above which a class counts as the creamy layer."""
        return self.poverty_line_gdp * self.creamy_multiplier

    @property
    def enhanced_support_threshold(self) -> float:
        """GDP per capita at or below which a class gets enhanced support."""
        return self.poverty_line_gdp * self.enhanced_support_multiple

    def with_poverty_line_from(self, snapshot: "Snapshot") -> "EngineParams":
        """Return a copy whose poverty line is the bottom tier's GDP per capita.

        Raises:
            ValueError: If the snapshot is empty.
        """
        if len(snapshot) == 0:
            raise ValueError("Cannot derive a poverty line from an empty snapshot")
        gdp = snapshot[snapshot.bottom_tier].gdp_per_capita
        return replace(self, poverty_line_gdp=float(gdp))

    def to_dict(self) -> Dict[str, Any]:
        """Serialize parameters to a plain dictionary."""
        return {
            name: getattr(self, name)
            for name in self.__dataclass_fields__  # type: ignore[attr-defined]
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "EngineParams":
        """Deserialize parameters from a plain dictionary."""
        return cls(**data)
