"""Shared fixtures for the Strata engine tests."""

import os
import sys

import pytest

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from strata_engine.core.baseline import get_initial_conditions  # noqa: E402
from strata_engine.core.policy import EwsSettings, ReservationSettings  # noqa: E402


def make_settings(reservations=None, cap=None, ews=0.0, all_eligible=False):
    return ReservationSettings(
        class_reservations=reservations or {},
        total_reservation_cap=cap,
        ews_settings=EwsSettings(percentage=ews, all_classes_eligible=all_eligible),
    )


@pytest.fixture
def baseline():
    return get_initial_conditions()


@pytest.fixture
def no_policy():
    return ReservationSettings.none()


@pytest.fixture
def mock_settings():
    """Reservations for every class below the top tier, within a 50% cap."""
    return make_settings({"class2": 10, "class3": 15, "class4": 20, "class5": 5}, 50, 10)


@pytest.fixture
def long_horizon_settings():
    return make_settings({"class2": 20, "class3": 15, "class4": 10, "class5": 5}, 50, 10)
