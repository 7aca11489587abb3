"""
Read-only projections of a property's calendar.

Month grids and monthly stats are recomputed from bookings, blocks and the
pricing configuration on every call and never stored.
"""

from __future__ import annotations

import calendar
from datetime import date, timedelta
from decimal import ROUND_HALF_UP, Decimal
from typing import Optional

from dateutil.relativedelta import relativedelta
from sqlalchemy.engine import Engine

from booking_engine.db.readers.blocks import blocks_overlapping
from booking_engine.db.readers.bookings import active_bookings_overlapping, bookings_overlapping
from booking_engine.db.readers.properties import get_property
from booking_engine.domain.bookings import EARNING_STATUSES, BookingRecord, BookingStatus
from booking_engine.domain.calendar import BlockRecord, CalendarDayCell, CellStatus, MonthlyStats
from booking_engine.domain.intervals import DateInterval, intersection
from booking_engine.domain.pricing import nightly_price
from booking_engine.errors import NotFoundError
from booking_engine.services.calendar_store import ensure_host
from booking_engine.utils.datetime import utc_today

GRID_DAYS = 42  # 6 weeks

_CELL_STATUS = {
    BookingStatus.PENDING: CellStatus.PENDING,
    BookingStatus.CONFIRMED: CellStatus.CONFIRMED,
}


def month_interval(year: int, month: int) -> DateInterval:
    first = date(year, month, 1)
    return DateInterval(first, first + relativedelta(months=1))


def grid_interval(year: int, month: int) -> DateInterval:
    """The 42-day window starting on the Sunday on or before the 1st of the month."""
    first = date(year, month, 1)
    # weekday(): Monday=0 .. Sunday=6
    start = first - timedelta(days=(first.weekday() + 1) % 7)
    return DateInterval(start, start + timedelta(days=GRID_DAYS))


def _index_by_day(
    records: list[BookingRecord] | list[BlockRecord], window: DateInterval
) -> dict[date, BookingRecord | BlockRecord]:
    by_day: dict[date, BookingRecord | BlockRecord] = {}
    for record in records:
        visible = intersection(record.interval, window)
        if visible is None:
            continue
        for day in visible.days():
            by_day.setdefault(day, record)
    return by_day


def build_month(
    engine: Engine,
    property_id: int,
    year: int,
    month: int,
    today: Optional[date] = None,
    host_id: Optional[str] = None,
) -> list[CalendarDayCell]:
    """
    Build the 6-week month grid for a property.

    Days covered by an active booking show the booking's status; days covered
    only by a block show as blocked; every other day is available. Past days
    are never bookable, so their ``is_available`` is False.

    Args:
        engine: SQLAlchemy engine
        property_id: Property to render
        year: Calendar year
        month: Month number, 1-12
        today: Reference day (defaults to the current UTC day)
        host_id: Viewing host; checked against the owner when given

    Returns:
        list[CalendarDayCell]: 42 cells, Sunday-first, including leading and
        trailing days of the adjacent months

    Raises:
        NotFoundError: No such property, or not owned by ``host_id``
    """
    today = today or utc_today()
    window = grid_interval(year, month)

    # One read transaction so bookings and blocks come from the same snapshot
    with engine.begin() as conn:
        prop = get_property(conn, property_id)
        if prop is None:
            raise NotFoundError(f"Property {property_id} not found", property_id=property_id)
        ensure_host(prop.host_id, host_id, property_id)
        booked = active_bookings_overlapping(conn, property_id, window)
        blocked = blocks_overlapping(conn, property_id, window)

    booking_days = _index_by_day(booked, window)
    block_days = _index_by_day(blocked, window)
    check_out_days = {booking.interval.end for booking in booked}
    price = nightly_price(prop.pricing)

    cells = []
    for day in window.days():
        booking = booking_days.get(day)
        block = block_days.get(day)

        if isinstance(booking, BookingRecord):
            status = _CELL_STATUS[booking.status]
        elif block is not None:
            status = CellStatus.BLOCKED
        else:
            status = CellStatus.AVAILABLE

        cells.append(
            CalendarDayCell(
                date=day,
                status=status,
                is_available=status is CellStatus.AVAILABLE and day >= today,
                price=price,
                is_current_month=day.month == month,
                is_today=day == today,
                is_check_in_day=isinstance(booking, BookingRecord)
                and booking.interval.start == day,
                is_check_out_day=day in check_out_days,
                booking_id=booking.id if isinstance(booking, BookingRecord) else None,
                guest_label=booking.guest_label if isinstance(booking, BookingRecord) else None,
                block_reason=(
                    block.reason
                    if isinstance(block, BlockRecord) and status is CellStatus.BLOCKED
                    else None
                ),
            )
        )
    return cells


def monthly_stats(
    engine: Engine,
    property_id: int,
    year: int,
    month: int,
    host_id: Optional[str] = None,
) -> MonthlyStats:
    """
    Earnings and occupancy of a property for one month.

    Only CONFIRMED and COMPLETED bookings count. Earnings and booking count are
    attributed to the month of check-in; booked nights are the nights falling
    inside the month, so a stay spanning two months splits its nights.

    Args:
        engine: SQLAlchemy engine
        property_id: Property to report on
        year: Calendar year
        month: Month number, 1-12
        host_id: Viewing host; checked against the owner when given

    Returns:
        MonthlyStats: occupancy_rate is a percentage with one decimal place

    Raises:
        NotFoundError: No such property, or not owned by ``host_id``
    """
    period = month_interval(year, month)
    days_in_month = calendar.monthrange(year, month)[1]

    with engine.begin() as conn:
        prop = get_property(conn, property_id)
        if prop is None:
            raise NotFoundError(f"Property {property_id} not found", property_id=property_id)
        ensure_host(prop.host_id, host_id, property_id)
        earning = bookings_overlapping(conn, property_id, period, EARNING_STATUSES)

    checked_in = [b for b in earning if period.start <= b.interval.start < period.end]
    total_earnings = sum((b.total_amount for b in checked_in), Decimal("0"))

    booked_nights = 0
    for booking in earning:
        inside = intersection(booking.interval, period)
        if inside is not None:
            booked_nights += inside.nights

    occupancy = (Decimal(booked_nights) * 100 / days_in_month).quantize(
        Decimal("0.1"), rounding=ROUND_HALF_UP
    )

    return MonthlyStats(
        year=year,
        month=month,
        total_earnings=total_earnings,
        booking_count=len(checked_in),
        booked_nights=booked_nights,
        days_in_month=days_in_month,
        occupancy_rate=occupancy,
        currency=prop.pricing.currency,
    )
