"""
Calendar store: the authoritative per-property set of active bookings and host blocks.

Queries here read committed state in a short transaction. Block mutations go
through calendar_write so they serialize with booking inserts on the same
property.
"""

from __future__ import annotations

from typing import Optional

import structlog
from sqlalchemy.engine import Engine

from booking_engine.db.readers import blocks as block_readers
from booking_engine.db.readers import bookings as booking_readers
from booking_engine.db.readers.properties import get_property
from booking_engine.db.writers.blocks import delete_blocks, insert_block
from booking_engine.domain.bookings import BookingRecord
from booking_engine.domain.calendar import BlockRecord
from booking_engine.domain.intervals import DateInterval, contains, merge, subtract
from booking_engine.errors import BookingEngineError, ConflictError, NotFoundError
from booking_engine.metrics import block_mutations
from booking_engine.services.calendar_lock import calendar_write

logger = structlog.get_logger(__name__)


def active_bookings_overlapping(
    engine: Engine, property_id: int, interval: DateInterval
) -> list[BookingRecord]:
    """Return all PENDING/CONFIRMED bookings of the property intersecting ``interval``."""
    with engine.connect() as conn:
        return booking_readers.active_bookings_overlapping(conn, property_id, interval)


def blocks_overlapping(
    engine: Engine, property_id: int, interval: DateInterval
) -> list[BlockRecord]:
    with engine.connect() as conn:
        return block_readers.blocks_overlapping(conn, property_id, interval)


def list_blocks(
    engine: Engine, property_id: int, host_id: Optional[str] = None
) -> list[BlockRecord]:
    """
    List the property's blocks in date order.

    Raises:
        NotFoundError: ``host_id`` given and the property is missing or not theirs
    """
    with engine.connect() as conn:
        if host_id is not None:
            prop = get_property(conn, property_id)
            if prop is None:
                raise NotFoundError(f"Property {property_id} not found", property_id=property_id)
            ensure_host(prop.host_id, host_id, property_id)
        return block_readers.list_blocks(conn, property_id)


def ensure_host(owner_id: str, host_id: Optional[str], property_id: int) -> None:
    """Reject ``host_id`` unless it owns the property. None means an internal caller."""
    if host_id is not None and host_id != owner_id:
        raise NotFoundError(
            "Property not found or access denied", property_id=property_id
        )


def add_block(
    engine: Engine,
    property_id: int,
    interval: DateInterval,
    reason: str,
    host_id: str,
) -> BlockRecord:
    """
    Block ``interval`` on the property's calendar.

    Existing blocks that overlap or touch the new range are merged into one block
    carrying the new reason, so a property's blocks stay disjoint.

    Args:
        engine: SQLAlchemy engine
        property_id: Property to block
        interval: Range to block
        reason: Why the dates are unavailable (e.g. "maintenance")
        host_id: Host performing the change; must own the property

    Returns:
        BlockRecord: The stored (possibly merged) block

    Raises:
        ConflictError: An active booking overlaps the range
        NotFoundError: Property missing or not owned by ``host_id``
    """
    try:
        with calendar_write(engine, property_id, "add_block") as (conn, prop):
            ensure_host(prop.host_id, host_id, property_id)

            booked = booking_readers.active_bookings_overlapping(conn, property_id, interval)
            if booked:
                raise ConflictError(
                    "Cannot block dates that are already booked",
                    requested=interval.to_dict(),
                    conflicting=booked[0].interval.to_dict(),
                    booking_id=booked[0].id,
                )

            touching = block_readers.blocks_touching(conn, property_id, interval)
            merged = interval
            for block in touching:
                merged = merge(merged, block.interval)
            delete_blocks(conn, [block.id for block in touching])

            block_id = insert_block(conn, property_id, merged, reason, host_id)
            stored = block_readers.get_block(conn, block_id)
            if stored is None:
                raise NotFoundError(f"Block {block_id} not found", block_id=block_id)
    except BookingEngineError as e:
        block_mutations.labels(operation="add", status=e.code).inc()
        raise

    block_mutations.labels(operation="add", status="success").inc()
    logger.info(
        "block_added",
        property_id=property_id,
        block_id=stored.id,
        merged_count=len(touching),
        **merged.to_dict(),
    )
    return stored


def remove_block(
    engine: Engine,
    property_id: int,
    interval: DateInterval,
    host_id: Optional[str] = None,
) -> list[BlockRecord]:
    """
    Unblock ``interval``.

    The range must lie inside one stored block. Removing a sub-range splits that
    block: the remaining days before and after stay blocked with the original
    reason, giving zero, one or two blocks.

    Args:
        engine: SQLAlchemy engine
        property_id: Property to unblock
        interval: Range to unblock
        host_id: Host performing the change; checked against the owner when given

    Returns:
        list[BlockRecord]: The blocks left in place of the original one

    Raises:
        NotFoundError: No block covers ``interval``, or the property is missing
    """
    try:
        with calendar_write(engine, property_id, "remove_block") as (conn, prop):
            ensure_host(prop.host_id, host_id, property_id)

            candidates = block_readers.blocks_overlapping(conn, property_id, interval)
            covering = next((b for b in candidates if contains(b.interval, interval)), None)
            if covering is None:
                raise NotFoundError(
                    "No blocked range covers the requested dates",
                    property_id=property_id,
                    requested=interval.to_dict(),
                )

            delete_blocks(conn, [covering.id])
            remaining_ids = [
                insert_block(
                    conn,
                    property_id,
                    piece,
                    covering.reason,
                    covering.created_by,
                    created_at=covering.created_at,
                )
                for piece in subtract(covering.interval, interval)
            ]
            remaining = [block_readers.get_block(conn, block_id) for block_id in remaining_ids]
    except BookingEngineError as e:
        block_mutations.labels(operation="remove", status=e.code).inc()
        raise

    block_mutations.labels(operation="remove", status="success").inc()
    logger.info(
        "block_removed",
        property_id=property_id,
        block_id=covering.id,
        remaining_count=len(remaining_ids),
        **interval.to_dict(),
    )
    return [block for block in remaining if block is not None]
