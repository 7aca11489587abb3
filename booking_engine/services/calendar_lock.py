"""
Per-property write serialization for the calendar.

Strategy:
- One threading.Lock per property ID, created lazily under a registry lock
- Writes to different properties never share a lock
- Inside the lock, every write runs in a single transaction that first takes
  SELECT ... FOR UPDATE on the property row, so separate worker processes on
  PostgreSQL serialize on the same property as well
- Reads never take these locks
- Locks are never evicted: the registry holds one per property ever written,
  so it grows with the catalog rather than with traffic
"""

from __future__ import annotations

import threading
import time
from contextlib import contextmanager
from typing import Iterator, Optional

import structlog
from sqlalchemy.engine import Connection, Engine

from booking_engine.config import LOCK_TIMEOUT_SECONDS
from booking_engine.db.readers.properties import get_property
from booking_engine.domain.properties import CatalogProperty
from booking_engine.errors import CalendarBusyError, NotFoundError
from booking_engine.metrics import calendar_lock_hold, calendar_lock_wait

logger = structlog.get_logger(__name__)

_property_locks: dict[int, threading.Lock] = {}
_registry_lock = threading.Lock()


def get_property_lock(property_id: int) -> threading.Lock:
    """
    Return the lock guarding ``property_id``'s calendar, creating it on first use.

    Args:
        property_id: Catalog property ID

    Returns:
        threading.Lock: The same lock object for every call with this ID
    """
    with _registry_lock:
        lock = _property_locks.get(property_id)
        if lock is None:
            lock = threading.Lock()
            _property_locks[property_id] = lock
        return lock


@contextmanager
def calendar_write(
    engine: Engine,
    property_id: int,
    operation: str,
    timeout: Optional[float] = None,
) -> Iterator[tuple[Connection, CatalogProperty]]:
    """
    Hold ``property_id``'s calendar for one atomic check-then-act write.

    Yields an open transaction and the property's row-locked catalog snapshot.
    The transaction commits when the block exits normally and rolls back on any
    exception, so an aborted write leaves no partial state.

    Args:
        engine: SQLAlchemy engine
        property_id: Property whose calendar is mutated
        operation: Operation name, used for metrics and logs
        timeout: Seconds to wait for the lock (defaults to LOCK_TIMEOUT_SECONDS)

    Raises:
        CalendarBusyError: Lock not acquired within the timeout
        NotFoundError: Property does not exist

    Example:
        >>> with calendar_write(engine, 42, "add_block") as (conn, prop):
        ...     insert_block(conn, prop.id, interval, "maintenance", "host-1")
    """
    wait = LOCK_TIMEOUT_SECONDS if timeout is None else timeout
    lock = get_property_lock(property_id)

    started = time.monotonic()
    if not lock.acquire(timeout=wait):
        logger.warning(
            "calendar_lock_timeout", property_id=property_id, operation=operation, timeout=wait
        )
        raise CalendarBusyError(property_id, wait)

    acquired = time.monotonic()
    calendar_lock_wait.observe(acquired - started)
    try:
        with engine.begin() as conn:
            prop = get_property(conn, property_id, for_update=True)
            if prop is None:
                raise NotFoundError(
                    f"Property {property_id} not found", property_id=property_id
                )
            yield conn, prop
    finally:
        lock.release()
        calendar_lock_hold.labels(operation=operation).observe(time.monotonic() - acquired)
