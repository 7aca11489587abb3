from typing import Any, Optional

from sqlalchemy import insert, update
from sqlalchemy.engine import Connection

from booking_engine.domain.bookings import BookingStatus
from booking_engine.models.bookings import Booking
from booking_engine.utils.datetime import utc_now


def insert_booking(conn: Connection, row: dict[str, Any]) -> int:
    """
    Insert a new booking row.

    The caller must hold the property's calendar lock and have re-validated
    availability in the same transaction.

    Args:
        conn (Connection): SQLAlchemy DB connection (within transaction).
        row (dict): Column values, including the price snapshot.

    Returns:
        int: The new booking ID.
    """
    now = utc_now()
    values = {"created_at": now, "updated_at": now, **row}
    result = conn.execute(insert(Booking).values(**values))
    return int(result.inserted_primary_key[0])


def update_booking_status(
    conn: Connection,
    booking_id: int,
    status: BookingStatus,
    expected: Optional[BookingStatus] = None,
    **fields: Any,
) -> bool:
    """
    Move a booking to ``status`` and set any extra columns.

    Args:
        conn (Connection): SQLAlchemy DB connection.
        booking_id (int): Booking ID.
        status (BookingStatus): New status.
        expected (Optional[BookingStatus]): Only update if the row is still in this status.
        **fields: Extra columns (e.g. cancelled_at, cancelled_by).

    Returns:
        bool: True if a row was updated.
    """
    stmt = update(Booking).where(Booking.id == booking_id)
    if expected is not None:
        stmt = stmt.where(Booking.status == expected.value)

    result = conn.execute(stmt.values(status=status.value, updated_at=utc_now(), **fields))
    return result.rowcount == 1
