"""
Unit tests for the booking lifecycle state machine.
"""

from __future__ import annotations

import pytest

from booking_engine.domain.bookings import (
    ACTIVE_STATUSES,
    EARNING_STATUSES,
    BookingStatus,
    ensure_transition,
)
from booking_engine.errors import InvalidTransitionError


@pytest.mark.unit
@pytest.mark.parametrize(
    "current,target",
    [
        (BookingStatus.PENDING, BookingStatus.CONFIRMED),
        (BookingStatus.PENDING, BookingStatus.CANCELLED),
        (BookingStatus.CONFIRMED, BookingStatus.COMPLETED),
        (BookingStatus.CONFIRMED, BookingStatus.CANCELLED),
    ],
)
def test_allowed_transitions(current: BookingStatus, target: BookingStatus) -> None:
    ensure_transition(1, current, target)


@pytest.mark.unit
@pytest.mark.parametrize(
    "current,target",
    [
        (BookingStatus.PENDING, BookingStatus.COMPLETED),
        (BookingStatus.CONFIRMED, BookingStatus.PENDING),
        (BookingStatus.CANCELLED, BookingStatus.CONFIRMED),
        (BookingStatus.CANCELLED, BookingStatus.CANCELLED),
        (BookingStatus.COMPLETED, BookingStatus.CANCELLED),
    ],
)
def test_rejected_transitions(current: BookingStatus, target: BookingStatus) -> None:
    """Test that terminal states stay terminal and PENDING cannot skip to COMPLETED."""
    with pytest.raises(InvalidTransitionError) as exc_info:
        ensure_transition(7, current, target)

    assert exc_info.value.details == {
        "booking_id": 7,
        "current_status": current.value,
        "target_status": target.value,
    }


@pytest.mark.unit
def test_only_pending_and_confirmed_hold_dates() -> None:
    assert ACTIVE_STATUSES == {BookingStatus.PENDING, BookingStatus.CONFIRMED}


@pytest.mark.unit
def test_pending_bookings_do_not_earn() -> None:
    assert BookingStatus.PENDING not in EARNING_STATUSES
    assert EARNING_STATUSES == {BookingStatus.CONFIRMED, BookingStatus.COMPLETED}
