from datetime import datetime
from typing import Iterable, Optional

from sqlalchemy import delete, insert
from sqlalchemy.engine import Connection

from booking_engine.domain.intervals import DateInterval
from booking_engine.models.blocks import BlockedRange
from booking_engine.utils.datetime import utc_now


def insert_block(
    conn: Connection,
    property_id: int,
    interval: DateInterval,
    reason: str,
    created_by: str,
    created_at: Optional[datetime] = None,
) -> int:
    """
    Insert a blocked range.

    Args:
        conn (Connection): SQLAlchemy DB connection.
        property_id (int): Catalog property ID.
        interval (DateInterval): Blocked [start, end) range.
        reason (str): Host-supplied reason.
        created_by (str): Host ID.
        created_at (Optional[datetime]): Kept from the original block when splitting.

    Returns:
        int: The new block ID.
    """
    result = conn.execute(
        insert(BlockedRange).values(
            property_id=property_id,
            start_date=interval.start,
            end_date=interval.end,
            reason=reason,
            created_by=created_by,
            created_at=created_at or utc_now(),
        )
    )
    return int(result.inserted_primary_key[0])


def delete_blocks(conn: Connection, block_ids: Iterable[int]) -> None:
    ids = list(block_ids)
    if not ids:
        return
    conn.execute(delete(BlockedRange).where(BlockedRange.id.in_(ids)))
