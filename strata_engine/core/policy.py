"""
Policy effect resolver.

Turns the user's reservation configuration into per-class effect terms for
one tick:

  reservation  = class_reservations[key]            (0 for creamy layer)
  ews          = pct * (1 - gdp / creamy)           (only if reservation == 0)
  enhanced     = 2.8 * gap^1.1                      (gdp <= 2.5 * poverty line)
  total        = (reservation + ews) * (1 + enhanced)

and provides the generational amplification helper used inside the
education and job-access transitions, which applies its own, steeper
creamy-layer cutoff on top of the one above.

Everything here is pure and total: out-of-range percentages are clamped to
[0, 100], missing reservations default to 0, and missing metrics degrade
the helper to a percentage-only effect.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import Any, Dict, Mapping, Optional

import numpy as np

from .parameters import EngineParams
from .state import ClassMetrics

_DEFAULT_PARAMS = EngineParams()


def _clamp_percentage(value: float) -> float:
    """Clamp a configured percentage to [0, 100]; NaN counts as 0."""
    value = float(value)
    if math.isnan(value):
        return 0.0
    return float(np.clip(value, 0.0, 100.0))


# --------------------------------------------------------------------------- #
# Settings                                                                     #
# --------------------------------------------------------------------------- #


@dataclass(frozen=True)
class EwsSettings:
    """Economically Weaker Section quota.

    Attributes:
        percentage:           EWS share of the general quota.
        all_classes_eligible: Extend eligibility beyond the top tier and the
                              classes below the creamy layer.
    """

    percentage: float = 0.0
    all_classes_eligible: bool = False

    def to_dict(self) -> Dict[str, Any]:
        return {
            "percentage": self.percentage,
            "allClassesEligible": self.all_classes_eligible,
        }

    @classmethod
    def from_dict(cls, data: Optional[Mapping[str, Any]]) -> "EwsSettings":
        data = data or {}
        eligible = data.get("allClassesEligible", data.get("all_classes_eligible", False))
        return cls(
            percentage=float(data.get("percentage", 0.0)),
            all_classes_eligible=bool(eligible),
        )


@dataclass(frozen=True)
class ReservationSettings:
    """User-configurable policy levers for one simulation run.

    The engine accepts any values here; range and quota checks belong to
    systems.quota.validate_settings.

    Attributes:
        class_reservations:    Class key -> reservation percentage.
        total_reservation_cap: Cap on the sum of reservations; None = no cap.
        ews_settings:          EWS quota configuration.
    """

    class_reservations: Dict[str, float] = field(default_factory=dict)
    total_reservation_cap: Optional[float] = None
    ews_settings: EwsSettings = field(default_factory=EwsSettings)

    def __post_init__(self) -> None:
        object.__setattr__(
            self,
            "class_reservations",
            {str(k): float(v) for k, v in dict(self.class_reservations).items()},
        )
        if self.total_reservation_cap is not None:
            object.__setattr__(
                self, "total_reservation_cap", float(self.total_reservation_cap)
            )

    @property
    def effective_cap(self) -> float:
        """Configured cap, or 100 when no cap is set."""
        if self.total_reservation_cap is None:
            return 100.0
        return self.total_reservation_cap

    @classmethod
    def none(cls) -> "ReservationSettings":
        """No reservations, no cap, EWS at 0%."""
        return cls()

    def copy_with(self, **kwargs: Any) -> "ReservationSettings":
        """Return new settings with selected fields overridden."""
        current = {
            "class_reservations": dict(self.class_reservations),
            "total_reservation_cap": self.total_reservation_cap,
            "ews_settings": self.ews_settings,
        }
        current.update(kwargs)
        return ReservationSettings(**current)

    def to_dict(self) -> Dict[str, Any]:
        """Serialise using the reference camelCase keys."""
        return {
            "classReservations": dict(self.class_reservations),
            "totalReservationCap": self.total_reservation_cap,
            "ewsSettings": self.ews_settings.to_dict(),
        }

    @classmethod
    def from_dict(cls, data: Optional[Mapping[str, Any]]) -> "ReservationSettings":
        """Deserialise from camelCase or snake_case keys."""
        data = data or {}
        reservations = data.get("classReservations", data.get("class_reservations"))
        cap = data.get("totalReservationCap", data.get("total_reservation_cap"))
        ews = data.get("ewsSettings", data.get("ews_settings"))
        return cls(
            class_reservations=dict(reservations or {}),
            total_reservation_cap=cap,
            ews_settings=EwsSettings.from_dict(ews),
        )


# --------------------------------------------------------------------------- #
# Per-class policy effect                                                      #
# --------------------------------------------------------------------------- #


@dataclass(frozen=True)
class PolicyEffect:
    """Resolved policy terms for one class at one tick.

    Attributes:
        reservation:            Reservation after creamy-layer exclusion.
        ews:                    EWS top-up (0 when reserved or ineligible).
        enhanced_multiplier:    Extra support for very-low-income classes.
        total:                  (reservation + ews) * (1 + enhanced_multiplier).
    """

    reservation: float
    ews: float
    enhanced_multiplier: float
    total: float

    @property
    def needs_enhanced_support(self) -> bool:
        return self.enhanced_multiplier > 0.0

    @property
    def reservation_multiplier(self) -> float:
        """Scale applied to investment and growth terms."""
        if self.total <= 0.0:
            return 1.0
        return 1.0 + self.total / 100.0 * (1.0 + self.enhanced_multiplier)

    @property
    def education_boost(self) -> float:
        """Additive investment boost for enhanced-support classes."""
        return 0.1 if self.needs_enhanced_support else 0.0


def enhanced_support_multiplier(
    gdp_per_capita: float, params: EngineParams = _DEFAULT_PARAMS
) -> float:
    """Enhanced-support multiplier for classes at or below the support threshold."""
    threshold = params.enhanced_support_threshold
    if gdp_per_capita > threshold:
        return 0.0
    support_gap = max(0.0, (threshold - gdp_per_capita) / threshold)
    return params.enhanced_support_coeff * support_gap ** params.enhanced_support_exponent


def ews_effect(
    metrics: ClassMetrics,
    settings: ReservationSettings,
    is_top_tier: bool,
    params: EngineParams = _DEFAULT_PARAMS,
) -> float:
    """EWS top-up for a class that holds no reservation.

    Eligible if all classes are eligible, the class is the top tier, or its
    GDP per capita is below the creamy-layer threshold.  The benefit shrinks
    linearly with income and is 0 at or above the threshold.
    """
    creamy = params.creamy_layer_threshold
    gdp = metrics.gdp_per_capita
    eligible = (
        settings.ews_settings.all_classes_eligible
        or is_top_tier
        or gdp < creamy
    )
    if not eligible:
        return 0.0
    percentage = _clamp_percentage(settings.ews_settings.percentage)
    return max(0.0, percentage * (1.0 - gdp / creamy))


def resolve_policy_effect(
    metrics: ClassMetrics,
    settings: ReservationSettings,
    class_key: str,
    tick: int = 0,
    is_top_tier: bool = False,
    params: EngineParams = _DEFAULT_PARAMS,
) -> PolicyEffect:
    """Compute the policy effect for one class.

    Args:
        metrics:     The class's current metrics.
        settings:    Reservation configuration (not validated here).
        class_key:   Key of the class in the snapshot.
        tick:        Current tick index (kept for interface symmetry; the
                     time-dependent part lives in reservation_impact).
        is_top_tier: Whether the class is the snapshot's highest tier.
        params:      Engine constants.

    Returns:
        PolicyEffect with all intermediate terms.
    """
    creamy = params.creamy_layer_threshold
    gdp = metrics.gdp_per_capita

    reservation = _clamp_percentage(settings.class_reservations.get(class_key, 0.0))
    if gdp >= creamy * params.creamy_buffer:
        reservation = 0.0

    # A reserved class never also draws EWS.
    ews = 0.0
    if reservation == 0.0:
        ews = ews_effect(metrics, settings, is_top_tier, params)

    enhanced = enhanced_support_multiplier(gdp, params)
    total = (reservation + ews) * (1.0 + enhanced)
    return PolicyEffect(
        reservation=reservation,
        ews=ews,
        enhanced_multiplier=enhanced,
        total=total,
    )


# --------------------------------------------------------------------------- #
# Generational amplification helper                                            #
# --------------------------------------------------------------------------- #


def reservation_impact(
    metrics: Optional[ClassMetrics],
    percentage: float,
    tick: int,
    params: EngineParams = _DEFAULT_PARAMS,
) -> float:
    """Amplified reservation boost used by the education and job transitions.

    Larger education/job gaps give proportionally larger effects, a
    generational boost ramps in over time, tertiary education raises the
    employment multiplier, and a steep creamy cutoff removes the effect
    entirely for richer classes.

    Args:
        metrics:    Class metrics, or None for the percentage-only fallback.
        percentage: Raw reservation input in percentage points.
        tick:       Current tick index.
        params:     Engine constants.

    Returns:
        Non-negative boost term.
    """
    if metrics is None:
        return percentage * 0.025

    tertiary = metrics.education.tertiary
    job = metrics.job_access

    base = percentage * 0.03
    education_gap = max(0.0, (100.0 - tertiary) / 100.0) ** 1.05
    job_gap = max(0.0, (100.0 - job) / 100.0) ** 1.05
    progressive = max(base * 1.3, base * (education_gap + job_gap))

    generational = min(max(0.0, tick) / params.generational_ramp, params.generational_cap)
    employment = max(1.4, 1.0 + tertiary / 100.0)

    ratio = metrics.gdp_per_capita / params.helper_creamy_threshold
    if ratio >= params.helper_creamy_cutoff:
        creamy_reduction = 0.0
    else:
        creamy_reduction = max(0.0, 1.0 - ratio ** params.helper_creamy_exponent)

    return progressive * (1.0 + generational) * employment * creamy_reduction
