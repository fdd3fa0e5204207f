"""
Reservation quota checks.

Runs when settings are edited, before they reach the engine:

  total reservation       = Σ class_reservations
  effective cap           = total_reservation_cap or 100
  remaining general quota = 100 - cap          (cap set)
                          = 100 - total        (no cap)

validate_settings() reports problems as user-facing messages instead of
raising; the engine itself tolerates invalid settings.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterable, List, Optional, Tuple

from ..core.policy import EwsSettings, ReservationSettings


def total_reservation(settings: ReservationSettings) -> float:
    return float(sum(settings.class_reservations.values()))


def remaining_general_quota(settings: ReservationSettings) -> float:
    """Share left for the general quota (and thus the EWS ceiling), never below 0."""
    if settings.total_reservation_cap is not None:
        remaining = 100.0 - settings.total_reservation_cap
    else:
        remaining = 100.0 - total_reservation(settings)
    return max(0.0, remaining)


@dataclass(frozen=True)
class QuotaReport:
    """Outcome of validating a ReservationSettings instance.

    Attributes:
        total_reservation:       Sum of class reservations.
        effective_cap:           Cap in force (100 when unset).
        remaining_general_quota: Upper bound for the EWS percentage.
        messages:                Human-readable problems; empty when valid.
    """

    total_reservation: float
    effective_cap: float
    remaining_general_quota: float
    messages: Tuple[str, ...] = field(default_factory=tuple)

    @property
    def is_valid(self) -> bool:
        return not self.messages


def validate_settings(
    settings: ReservationSettings,
    class_keys: Optional[Iterable[str]] = None,
) -> QuotaReport:
    """Check settings against the quota rules.

    Args:
        settings:   Settings to check.
        class_keys: Known class keys; when given, reservations for other keys
                    are reported.

    Returns:
        QuotaReport listing every violation found.
    """
    messages: List[str] = []
    total = total_reservation(settings)
    cap = settings.effective_cap
    remaining = remaining_general_quota(settings)

    if settings.total_reservation_cap is not None and not (
        0.0 <= settings.total_reservation_cap <= 100.0
    ):
        messages.append(
            f"Total reservation cap must be between 0% and 100%, "
            f"got {settings.total_reservation_cap:g}%"
        )

    for key, value in settings.class_reservations.items():
        if value < 0.0:
            messages.append(f"Reservation for {key} cannot be negative ({value:g}%)")
        elif value > 100.0:
            messages.append(f"Reservation for {key} cannot exceed 100% ({value:g}%)")

    if class_keys is not None:
        known = set(class_keys)
        for key in settings.class_reservations:
            if key not in known:
                messages.append(f"Reservation set for unknown class {key!r}")

    if total > cap:
        messages.append(
            f"Total reservations ({total:g}%) exceed the cap of {cap:g}%"
        )

    ews = settings.ews_settings.percentage
    if ews < 0.0:
        messages.append(f"EWS percentage cannot be negative ({ews:g}%)")
    elif ews > remaining:
        messages.append(
            f"EWS percentage ({ews:g}%) exceeds the remaining general quota "
            f"of {remaining:g}%"
        )

    return QuotaReport(
        total_reservation=total,
        effective_cap=cap,
        remaining_general_quota=remaining,
        messages=tuple(messages),
    )


def clamp_settings(settings: ReservationSettings) -> ReservationSettings:
    """Return settings with percentages in [0, 100] and EWS trimmed to the remaining quota.

    Reservation totals over the cap are left alone; which class to cut is a
    user decision.
    """
    reservations = {
        key: min(100.0, max(0.0, value))
        for key, value in settings.class_reservations.items()
    }
    cap = settings.total_reservation_cap
    if cap is not None:
        cap = min(100.0, max(0.0, cap))
    clamped = ReservationSettings(
        class_reservations=reservations,
        total_reservation_cap=cap,
        ews_settings=settings.ews_settings,
    )
    ews = min(remaining_general_quota(clamped), max(0.0, settings.ews_settings.percentage))
    return clamped.copy_with(
        ews_settings=EwsSettings(
            percentage=ews,
            all_classes_eligible=settings.ews_settings.all_classes_eligible,
        )
    )
