"""
Availability resolver.

Decides whether a property can be booked for a date range. The checks run in a
fixed order and stop at the first failure, so a request for past dates is never
reported as "already booked".
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, timedelta
from typing import Any, Optional

import structlog
from sqlalchemy.engine import Connection, Engine

from booking_engine.db.readers.blocks import blocks_overlapping
from booking_engine.db.readers.bookings import active_bookings_overlapping
from booking_engine.db.readers.properties import get_property
from booking_engine.domain.intervals import DateInterval
from booking_engine.domain.properties import CatalogProperty
from booking_engine.errors import (
    AdvanceBookingError,
    BookingEngineError,
    CapacityError,
    DateBlockedError,
    DateConflictError,
    NotFoundError,
    PastDateError,
    StayLengthError,
)
from booking_engine.metrics import availability_checks
from booking_engine.utils.datetime import utc_today

logger = structlog.get_logger(__name__)


@dataclass(frozen=True)
class AvailabilityResult:
    property_id: int
    interval: DateInterval
    guest_count: int
    nights: int
    instant_book: bool
    available: bool = True

    def to_dict(self) -> dict[str, Any]:
        return {
            "property_id": self.property_id,
            "available": self.available,
            **self.interval.to_dict(),
            "nights": self.nights,
            "guest_count": self.guest_count,
            "instant_book": self.instant_book,
        }


def check_policy(
    prop: CatalogProperty, interval: DateInterval, guest_count: int, today: date
) -> None:
    """
    Validate the stay against the property's booking policy.

    Order: past date, stay length, advance-booking ceiling, guest capacity.

    Raises:
        PastDateError, StayLengthError, AdvanceBookingError, CapacityError
    """
    pricing = prop.pricing

    if interval.start < today:
        raise PastDateError(interval.start, today)

    if not pricing.min_stay_nights <= interval.nights <= pricing.max_stay_nights:
        raise StayLengthError(interval.nights, pricing.min_stay_nights, pricing.max_stay_nights)

    if pricing.advance_booking_days is not None:
        latest_start = today + timedelta(days=pricing.advance_booking_days)
        if interval.start > latest_start:
            raise AdvanceBookingError(interval.start, latest_start, pricing.advance_booking_days)

    if guest_count > prop.max_guests:
        raise CapacityError(guest_count, prop.max_guests)


def check_calendar(conn: Connection, property_id: int, interval: DateInterval) -> None:
    """
    Validate that no active booking and no host block intersects ``interval``.

    Raises:
        DateConflictError: Names the first conflicting booking's range
        DateBlockedError: Names the first overlapping block and its reason
    """
    booked = active_bookings_overlapping(conn, property_id, interval)
    if booked:
        raise DateConflictError(interval, booked[0].interval)

    blocked = blocks_overlapping(conn, property_id, interval)
    if blocked:
        raise DateBlockedError(interval, blocked[0].interval, blocked[0].reason)


def evaluate(
    conn: Connection,
    prop: CatalogProperty,
    interval: DateInterval,
    guest_count: int,
    today: date,
) -> AvailabilityResult:
    """Run the full ordered check against an open connection."""
    check_policy(prop, interval, guest_count, today)
    check_calendar(conn, prop.id, interval)
    return AvailabilityResult(
        property_id=prop.id,
        interval=interval,
        guest_count=guest_count,
        nights=interval.nights,
        instant_book=prop.pricing.instant_book_enabled,
    )


def load_bookable_property(conn: Connection, property_id: int) -> CatalogProperty:
    """
    Fetch a property and make sure it accepts bookings.

    Raises:
        NotFoundError: Unknown or inactive property
    """
    prop = get_property(conn, property_id)
    if prop is None:
        raise NotFoundError(f"Property {property_id} not found", property_id=property_id)
    if not prop.is_active:
        raise NotFoundError(
            "Property is not available for booking", property_id=property_id
        )
    return prop


def check_availability(
    engine: Engine,
    property_id: int,
    interval: DateInterval,
    guest_count: int,
    today: Optional[date] = None,
) -> AvailabilityResult:
    """
    Determine whether ``interval`` can be booked for ``guest_count`` guests.

    Args:
        engine: SQLAlchemy engine
        property_id: Property to check
        interval: Requested stay
        guest_count: Number of guests
        today: Reference day (defaults to the current UTC day)

    Returns:
        AvailabilityResult: Available, with the property's instant-book flag

    Raises:
        BookingEngineError: The specific rule that rejected the request
    """
    today = today or utc_today()
    try:
        with engine.connect() as conn:
            prop = load_bookable_property(conn, property_id)
            result = evaluate(conn, prop, interval, guest_count, today)
    except BookingEngineError as e:
        availability_checks.labels(result=e.code).inc()
        logger.info(
            "availability_rejected",
            property_id=property_id,
            code=e.code,
            **interval.to_dict(),
        )
        raise

    availability_checks.labels(result="available").inc()
    return result
