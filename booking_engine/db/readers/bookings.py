from datetime import date
from typing import Any, Iterable, Optional

from sqlalchemy import select
from sqlalchemy.engine import Connection

from booking_engine.domain.bookings import ACTIVE_STATUSES, BookingRecord, BookingStatus
from booking_engine.domain.intervals import DateInterval
from booking_engine.domain.pricing import round_money
from booking_engine.models.bookings import Booking

bookings = Booking.__table__


def row_to_booking(row: Any) -> BookingRecord:
    """Build a BookingRecord from a bookings row mapping."""
    return BookingRecord(
        id=row.id,
        property_id=row.property_id,
        guest_id=row.guest_id,
        guest_label=row.guest_label,
        interval=DateInterval(row.check_in, row.check_out),
        guest_count=row.guest_count,
        status=BookingStatus(row.status),
        nights=row.nights,
        base_amount=round_money(row.base_amount, row.currency),
        cleaning_fee=round_money(row.cleaning_fee, row.currency),
        service_fee=round_money(row.service_fee, row.currency),
        taxes=round_money(row.taxes, row.currency),
        security_deposit=round_money(row.security_deposit, row.currency),
        total_amount=round_money(row.total_amount, row.currency),
        paid_amount=round_money(row.paid_amount, row.currency),
        currency=row.currency,
        idempotency_key=row.idempotency_key,
        special_requests=row.special_requests,
        guest_notes=row.guest_notes,
        created_at=row.created_at,
        confirmed_at=row.confirmed_at,
        completed_at=row.completed_at,
        cancelled_at=row.cancelled_at,
        cancelled_by=row.cancelled_by,
        cancellation_reason=row.cancellation_reason,
    )


def get_booking(
    conn: Connection, booking_id: int, for_update: bool = False
) -> Optional[BookingRecord]:
    """
    Fetch a single booking by ID.

    Args:
        conn (Connection): An active SQLAlchemy database connection.
        booking_id (int): Booking ID.
        for_update (bool): Take a row lock for a status transition.

    Returns:
        Optional[BookingRecord]: The booking or None if not found.
    """
    stmt = select(bookings).where(bookings.c.id == booking_id)
    if for_update:
        stmt = stmt.with_for_update()
    row = conn.execute(stmt).fetchone()
    return row_to_booking(row) if row else None


def get_booking_by_idempotency_key(conn: Connection, key: str) -> Optional[BookingRecord]:
    row = conn.execute(select(bookings).where(bookings.c.idempotency_key == key)).fetchone()
    return row_to_booking(row) if row else None


def bookings_overlapping(
    conn: Connection,
    property_id: int,
    interval: DateInterval,
    statuses: Iterable[BookingStatus],
) -> list[BookingRecord]:
    """
    Return bookings of ``property_id`` in ``statuses`` whose range intersects ``interval``.

    Uses the half-open overlap predicate (check_in < end AND check_out > start)
    so a stay checking out on the day another checks in is not a conflict.
    """
    result = conn.execute(
        select(bookings)
        .where(bookings.c.property_id == property_id)
        .where(bookings.c.status.in_([s.value for s in statuses]))
        .where(bookings.c.check_in < interval.end)
        .where(bookings.c.check_out > interval.start)
        .order_by(bookings.c.check_in, bookings.c.id)
    )
    return [row_to_booking(row) for row in result]


def active_bookings_overlapping(
    conn: Connection, property_id: int, interval: DateInterval
) -> list[BookingRecord]:
    """Return all PENDING/CONFIRMED bookings of a property intersecting ``interval``."""
    return bookings_overlapping(conn, property_id, interval, ACTIVE_STATUSES)


def list_bookings(
    conn: Connection,
    property_id: Optional[int] = None,
    guest_id: Optional[str] = None,
    status: Optional[BookingStatus] = None,
    limit: int = 20,
    offset: int = 0,
) -> list[BookingRecord]:
    """
    List bookings newest first, optionally filtered.

    Args:
        conn (Connection): SQLAlchemy DB connection.
        property_id (Optional[int]): Only bookings of this property.
        guest_id (Optional[str]): Only bookings made by this guest.
        status (Optional[BookingStatus]): Only bookings in this status.
        limit (int): Page size.
        offset (int): Page offset.

    Returns:
        list[BookingRecord]: Matching bookings.
    """
    stmt = select(bookings)
    if property_id is not None:
        stmt = stmt.where(bookings.c.property_id == property_id)
    if guest_id is not None:
        stmt = stmt.where(bookings.c.guest_id == guest_id)
    if status is not None:
        stmt = stmt.where(bookings.c.status == status.value)

    stmt = stmt.order_by(bookings.c.created_at.desc(), bookings.c.id.desc())
    result = conn.execute(stmt.limit(limit).offset(offset))
    return [row_to_booking(row) for row in result]


def confirmed_bookings_checked_out_by(conn: Connection, today: date) -> list[BookingRecord]:
    """Return CONFIRMED bookings whose check-out day is on or before ``today``."""
    result = conn.execute(
        select(bookings)
        .where(bookings.c.status == BookingStatus.CONFIRMED.value)
        .where(bookings.c.check_out <= today)
        .order_by(bookings.c.property_id, bookings.c.check_in)
    )
    return [row_to_booking(row) for row in result]
