"""
Unit tests for the per-property lock registry.
"""

from __future__ import annotations

import pytest

from booking_engine.services import calendar_lock
from booking_engine.services.calendar_lock import get_property_lock


@pytest.mark.unit
def test_same_property_shares_one_lock() -> None:
    assert get_property_lock(9001) is get_property_lock(9001)
    assert get_property_lock(9001) is not get_property_lock(9002)


@pytest.mark.unit
def test_registry_grows_only_with_new_properties() -> None:
    before = len(calendar_lock._property_locks)

    for _ in range(3):
        get_property_lock(9101)
        get_property_lock(9102)

    assert len(calendar_lock._property_locks) == before + 2
