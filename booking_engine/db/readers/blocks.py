from typing import Any, Optional

from sqlalchemy import select
from sqlalchemy.engine import Connection

from booking_engine.domain.calendar import BlockRecord
from booking_engine.domain.intervals import DateInterval
from booking_engine.models.blocks import BlockedRange

blocked_ranges = BlockedRange.__table__


def row_to_block(row: Any) -> BlockRecord:
    """Build a BlockRecord from a blocked_ranges row mapping."""
    return BlockRecord(
        id=row.id,
        property_id=row.property_id,
        interval=DateInterval(row.start_date, row.end_date),
        reason=row.reason,
        created_by=row.created_by,
        created_at=row.created_at,
    )


def blocks_overlapping(
    conn: Connection, property_id: int, interval: DateInterval
) -> list[BlockRecord]:
    """Return the property's blocks that share at least one day with ``interval``."""
    result = conn.execute(
        select(blocked_ranges)
        .where(blocked_ranges.c.property_id == property_id)
        .where(blocked_ranges.c.start_date < interval.end)
        .where(blocked_ranges.c.end_date > interval.start)
        .order_by(blocked_ranges.c.start_date)
    )
    return [row_to_block(row) for row in result]


def blocks_touching(
    conn: Connection, property_id: int, interval: DateInterval
) -> list[BlockRecord]:
    """Return blocks that overlap ``interval`` or end/start exactly at its edges."""
    result = conn.execute(
        select(blocked_ranges)
        .where(blocked_ranges.c.property_id == property_id)
        .where(blocked_ranges.c.start_date <= interval.end)
        .where(blocked_ranges.c.end_date >= interval.start)
        .order_by(blocked_ranges.c.start_date)
    )
    return [row_to_block(row) for row in result]


def list_blocks(conn: Connection, property_id: int) -> list[BlockRecord]:
    result = conn.execute(
        select(blocked_ranges)
        .where(blocked_ranges.c.property_id == property_id)
        .order_by(blocked_ranges.c.start_date)
    )
    return [row_to_block(row) for row in result]


def get_block(conn: Connection, block_id: int) -> Optional[BlockRecord]:
    row = conn.execute(select(blocked_ranges).where(blocked_ranges.c.id == block_id)).fetchone()
    return row_to_block(row) if row else None
