"""
Integration tests for the availability resolver.

Covers the fixed check order: past date, stay length, advance booking, capacity,
then booking conflicts before host blocks.
"""

from __future__ import annotations

from datetime import date
from typing import Callable

import pytest
from sqlalchemy.engine import Engine

from booking_engine.domain.intervals import DateInterval
from booking_engine.errors import (
    AdvanceBookingError,
    CapacityError,
    DateBlockedError,
    DateConflictError,
    NotFoundError,
    PastDateError,
    StayLengthError,
)
from booking_engine.services.availability import check_availability
from booking_engine.services.bookings import cancel_booking, create_booking
from booking_engine.services.calendar_store import add_block


def jan(start: int, end: int) -> DateInterval:
    return DateInterval(date(2025, 1, start), date(2025, 1, end))


@pytest.mark.integration
def test_free_range_is_available(test_engine: Engine, property_id: int, today: date) -> None:
    result = check_availability(test_engine, property_id, jan(10, 15), 2, today=today)

    assert result.available is True
    assert result.nights == 5
    assert result.instant_book is False
    assert result.to_dict()["check_in"] == "2025-01-10"


@pytest.mark.integration
def test_instant_book_flag_comes_from_property(
    test_engine: Engine, make_property: Callable[..., int], today: date
) -> None:
    pid = make_property(2, instant_book_enabled=True)

    result = check_availability(test_engine, pid, jan(10, 15), 2, today=today)

    assert result.instant_book is True


@pytest.mark.integration
def test_overlapping_booking_is_reported_with_its_range(
    test_engine: Engine, property_id: int, today: date
) -> None:
    create_booking(test_engine, property_id, "guest-1", jan(10, 15), 2, today=today)

    with pytest.raises(DateConflictError) as exc_info:
        check_availability(test_engine, property_id, jan(12, 14), 2, today=today)

    assert exc_info.value.details["conflicting"] == {
        "check_in": "2025-01-10",
        "check_out": "2025-01-15",
    }


@pytest.mark.integration
def test_back_to_back_stay_is_available(test_engine: Engine, property_id: int, today: date) -> None:
    """Test that checking in on another stay's check-out day is allowed."""
    create_booking(test_engine, property_id, "guest-1", jan(10, 15), 2, today=today)

    result = check_availability(test_engine, property_id, jan(15, 18), 2, today=today)

    assert result.available is True


@pytest.mark.integration
def test_cancelled_booking_frees_its_dates(
    test_engine: Engine, property_id: int, today: date
) -> None:
    booking = create_booking(test_engine, property_id, "guest-1", jan(10, 15), 2, today=today)
    cancel_booking(test_engine, booking.id, actor="guest-1")

    result = check_availability(test_engine, property_id, jan(10, 15), 2, today=today)

    assert result.available is True


@pytest.mark.integration
def test_blocked_dates_are_reported_with_reason(
    test_engine: Engine, property_id: int, today: date
) -> None:
    add_block(test_engine, property_id, jan(13, 14), "maintenance", host_id="host-1")

    with pytest.raises(DateBlockedError) as exc_info:
        check_availability(test_engine, property_id, jan(10, 15), 2, today=today)

    assert exc_info.value.details["reason"] == "maintenance"


@pytest.mark.integration
def test_booking_conflict_is_reported_before_block(
    test_engine: Engine, property_id: int, today: date
) -> None:
    create_booking(test_engine, property_id, "guest-1", jan(10, 12), 2, today=today)
    add_block(test_engine, property_id, jan(12, 14), "owner stay", host_id="host-1")

    with pytest.raises(DateConflictError):
        check_availability(test_engine, property_id, jan(11, 14), 2, today=today)


@pytest.mark.integration
def test_past_date_wins_over_calendar_conflict(
    test_engine: Engine, property_id: int, today: date
) -> None:
    """Test that a request that is both past and booked is reported as past."""
    create_booking(test_engine, property_id, "guest-1", jan(10, 15), 2, today=today)

    with pytest.raises(PastDateError):
        check_availability(test_engine, property_id, jan(10, 15), 2, today=date(2025, 1, 11))


@pytest.mark.integration
def test_check_in_today_is_allowed(test_engine: Engine, property_id: int) -> None:
    result = check_availability(test_engine, property_id, jan(10, 12), 1, today=date(2025, 1, 10))

    assert result.available is True


@pytest.mark.integration
def test_stay_length_bounds(
    test_engine: Engine, make_property: Callable[..., int], today: date
) -> None:
    pid = make_property(3, min_stay_nights=3, max_stay_nights=7)

    with pytest.raises(StayLengthError) as too_short:
        check_availability(test_engine, pid, jan(10, 12), 2, today=today)
    with pytest.raises(StayLengthError) as too_long:
        check_availability(test_engine, pid, jan(1, 9), 2, today=today)

    assert too_short.value.details["min_nights"] == 3
    assert too_long.value.details["nights"] == 8
    assert check_availability(test_engine, pid, jan(10, 13), 2, today=today).nights == 3


@pytest.mark.integration
def test_stay_length_is_checked_before_capacity(
    test_engine: Engine, make_property: Callable[..., int], today: date
) -> None:
    pid = make_property(4, min_stay_nights=3, max_guests=2)

    with pytest.raises(StayLengthError):
        check_availability(test_engine, pid, jan(10, 11), 5, today=today)


@pytest.mark.integration
def test_advance_booking_ceiling(
    test_engine: Engine, make_property: Callable[..., int], today: date
) -> None:
    pid = make_property(5, advance_booking_days=30)

    with pytest.raises(AdvanceBookingError) as exc_info:
        check_availability(test_engine, pid, jan(10, 12), 2, today=today)

    assert exc_info.value.details["latest_check_in"] == "2024-12-31"
    assert check_availability(
        test_engine, pid, DateInterval(date(2024, 12, 31), date(2025, 1, 2)), 2, today=today
    ).available


@pytest.mark.integration
def test_guest_capacity(test_engine: Engine, property_id: int, today: date) -> None:
    with pytest.raises(CapacityError):
        check_availability(test_engine, property_id, jan(10, 12), 5, today=today)

    assert check_availability(test_engine, property_id, jan(10, 12), 4, today=today).available


@pytest.mark.integration
def test_unknown_and_inactive_properties_are_not_found(
    test_engine: Engine, make_property: Callable[..., int], today: date
) -> None:
    pid = make_property(6, is_active=False)

    with pytest.raises(NotFoundError):
        check_availability(test_engine, pid, jan(10, 12), 2, today=today)
    with pytest.raises(NotFoundError):
        check_availability(test_engine, 404, jan(10, 12), 2, today=today)
