"""
Booking transaction coordinator.

The only code path that inserts bookings or changes their status. Every write
re-validates availability and commits inside the property's calendar lock, so
of two overlapping requests racing each other at most one succeeds and the
other gets DateConflictError.

Lifecycle:
    PENDING -> CONFIRMED -> COMPLETED
    PENDING | CONFIRMED -> CANCELLED
"""

from __future__ import annotations

from datetime import date
from decimal import Decimal
from typing import Any, Callable, Optional

import structlog
from sqlalchemy.engine import Connection, Engine
from sqlalchemy.exc import IntegrityError

from booking_engine.db.readers import bookings as booking_readers
from booking_engine.db.readers.properties import get_property
from booking_engine.db.writers.bookings import insert_booking, update_booking_status
from booking_engine.domain.bookings import BookingRecord, BookingStatus, ensure_transition
from booking_engine.domain.intervals import DateInterval
from booking_engine.domain.pricing import PriceBreakdown, compute_price
from booking_engine.domain.properties import CatalogProperty
from booking_engine.errors import (
    BookingEngineError,
    ConflictError,
    DateConflictError,
    NotFoundError,
)
from booking_engine.metrics import (
    booking_rejections,
    booking_transitions,
    bookings_created,
    idempotent_replays,
)
from booking_engine.services.availability import evaluate, load_bookable_property
from booking_engine.services.calendar_lock import calendar_write
from booking_engine.utils.datetime import utc_now, utc_today

logger = structlog.get_logger(__name__)

# Recorded as the canceller when the payment processor cancels; never a caller identity
SYSTEM_ACTOR = "system"

DEFAULT_CANCELLATION_REASON = "Cancelled by user"

OVERLAP_CONSTRAINT = "bookings_no_overlap_per_property"
IDEMPOTENCY_CONSTRAINT = "bookings_idempotency_key_key"


def _constraint_name(exc: IntegrityError) -> str:
    """Best-effort name of the constraint behind an IntegrityError."""
    orig = getattr(exc, "orig", None)
    diag = getattr(orig, "diag", None)
    name = getattr(diag, "constraint_name", None) if diag is not None else None
    if name:
        return str(name)

    message = str(orig).lower()
    if OVERLAP_CONSTRAINT in message or "exclusion constraint" in message:
        return OVERLAP_CONSTRAINT
    if "idempotency_key" in message:
        return IDEMPOTENCY_CONSTRAINT
    return ""


def _replay(
    existing: BookingRecord,
    property_id: int,
    guest_id: str,
    interval: DateInterval,
    guest_count: int,
) -> BookingRecord:
    """
    Answer a retried createBooking from the booking its idempotency key created.

    Raises:
        ConflictError: The key was already used for a different request
    """
    same_request = (
        existing.property_id == property_id
        and existing.guest_id == guest_id
        and existing.interval == interval
        and existing.guest_count == guest_count
    )
    if not same_request:
        raise ConflictError(
            "Idempotency key was already used for a different booking request",
            booking_id=existing.id,
        )

    idempotent_replays.inc()
    logger.info("booking_replayed", booking_id=existing.id, property_id=property_id)
    return existing


def _snapshot_row(
    prop: CatalogProperty,
    guest_id: str,
    interval: DateInterval,
    guest_count: int,
    price: PriceBreakdown,
    status: BookingStatus,
    now: Any,
    **extra: Any,
) -> dict[str, Any]:
    return {
        "property_id": prop.id,
        "guest_id": guest_id,
        "check_in": interval.start,
        "check_out": interval.end,
        "guest_count": guest_count,
        "status": status.value,
        "nights": price.nights,
        "base_amount": price.base_total,
        "cleaning_fee": price.cleaning_fee,
        "service_fee": price.service_fee,
        "taxes": price.taxes,
        "security_deposit": price.security_deposit,
        "total_amount": price.total,
        "paid_amount": Decimal("0"),
        "currency": price.currency,
        "confirmed_at": now if status is BookingStatus.CONFIRMED else None,
        **extra,
    }


def create_booking(
    engine: Engine,
    property_id: int,
    guest_id: str,
    interval: DateInterval,
    guest_count: int,
    idempotency_key: Optional[str] = None,
    guest_label: Optional[str] = None,
    special_requests: Optional[str] = None,
    guest_notes: Optional[str] = None,
    today: Optional[date] = None,
) -> BookingRecord:
    """
    Create a booking after validating and pricing the stay.

    Steps:
    1. Run the availability check (fails fast without taking the lock)
    2. Price the stay from the property's current configuration
    3. Under the property's calendar lock, re-validate and insert in one
       transaction; the price is recomputed if the configuration changed
       in between
    4. Start in CONFIRMED when the property allows instant booking, else PENDING

    Args:
        engine: SQLAlchemy engine
        property_id: Property to book
        guest_id: Guest making the booking (from the identity provider)
        interval: Requested stay
        guest_count: Number of guests
        idempotency_key: Client token; a retry with the same key returns the
            booking the first call created
        guest_label: Display name shown on calendar cells
        special_requests: Free text for the host
        guest_notes: Message to the host
        today: Reference day (defaults to the current UTC day)

    Returns:
        BookingRecord: The stored booking with its price snapshot

    Raises:
        BookingEngineError: The availability error, verbatim, or DateConflictError
            when a concurrent booking won the race
    """
    today = today or utc_today()

    try:
        with engine.connect() as conn:
            if idempotency_key:
                existing = booking_readers.get_booking_by_idempotency_key(conn, idempotency_key)
                if existing is not None:
                    return _replay(existing, property_id, guest_id, interval, guest_count)

            prop = load_bookable_property(conn, property_id)
            evaluate(conn, prop, interval, guest_count, today)
        price = compute_price(interval, prop.pricing)

        with calendar_write(engine, property_id, "create_booking") as (conn, locked):
            if idempotency_key:
                existing = booking_readers.get_booking_by_idempotency_key(conn, idempotency_key)
                if existing is not None:
                    return _replay(existing, property_id, guest_id, interval, guest_count)

            if not locked.is_active:
                raise NotFoundError(
                    "Property is not available for booking", property_id=property_id
                )
            evaluate(conn, locked, interval, guest_count, today)
            if locked.pricing != prop.pricing:
                price = compute_price(interval, locked.pricing)

            status = (
                BookingStatus.CONFIRMED
                if locked.pricing.instant_book_enabled
                else BookingStatus.PENDING
            )
            row = _snapshot_row(
                locked,
                guest_id,
                interval,
                guest_count,
                price,
                status,
                utc_now(),
                guest_label=guest_label,
                idempotency_key=idempotency_key,
                special_requests=special_requests,
                guest_notes=guest_notes,
            )
            booking_id = insert_booking(conn, row)
            booking = booking_readers.get_booking(conn, booking_id)
    except IntegrityError as e:
        constraint = _constraint_name(e)
        if constraint == IDEMPOTENCY_CONSTRAINT and idempotency_key:
            # Another process inserted with the same key first
            with engine.connect() as conn:
                existing = booking_readers.get_booking_by_idempotency_key(conn, idempotency_key)
            if existing is not None:
                return _replay(existing, property_id, guest_id, interval, guest_count)
        if constraint == OVERLAP_CONSTRAINT:
            booking_rejections.labels(code=DateConflictError.code).inc()
            raise DateConflictError(interval) from e
        raise
    except BookingEngineError as e:
        booking_rejections.labels(code=e.code).inc()
        logger.info(
            "booking_rejected",
            property_id=property_id,
            guest_id=guest_id,
            code=e.code,
            **interval.to_dict(),
        )
        raise

    if booking is None:
        raise NotFoundError(f"Booking {booking_id} not found", booking_id=booking_id)

    bookings_created.labels(status=booking.status.value).inc()
    logger.info(
        "booking_created",
        booking_id=booking.id,
        property_id=property_id,
        guest_id=guest_id,
        status=booking.status.value,
        nights=booking.nights,
        total_amount=str(booking.total_amount),
        currency=booking.currency,
        **interval.to_dict(),
    )
    return booking


def _host_of(conn: Connection, property_id: int) -> Optional[str]:
    prop = get_property(conn, property_id)
    return prop.host_id if prop else None


def get_booking(
    engine: Engine, booking_id: int, viewer_id: Optional[str] = None
) -> BookingRecord:
    """
    Fetch a booking by ID.

    Args:
        engine: SQLAlchemy engine
        booking_id: Booking to fetch
        viewer_id: Caller; must be the booking's guest or its property's host when given

    Raises:
        NotFoundError: No such booking, or ``viewer_id`` may not see it
    """
    with engine.connect() as conn:
        booking = booking_readers.get_booking(conn, booking_id)
        if booking is not None and viewer_id is not None:
            if viewer_id not in (booking.guest_id, _host_of(conn, booking.property_id)):
                booking = None
    if booking is None:
        raise NotFoundError(f"Booking {booking_id} not found", booking_id=booking_id)
    return booking


def list_bookings(
    engine: Engine,
    property_id: Optional[int] = None,
    guest_id: Optional[str] = None,
    status: Optional[BookingStatus] = None,
    limit: int = 20,
    offset: int = 0,
    viewer_id: Optional[str] = None,
) -> list[BookingRecord]:
    """
    List bookings newest first.

    When ``viewer_id`` is given, a property filter requires the viewer to host
    that property; otherwise the guest filter must be the viewer.

    Raises:
        NotFoundError: ``viewer_id`` may not see the requested bookings
    """
    with engine.connect() as conn:
        if viewer_id is not None:
            if property_id is not None:
                if _host_of(conn, property_id) != viewer_id:
                    raise NotFoundError(
                        "Property not found or access denied", property_id=property_id
                    )
            elif guest_id != viewer_id:
                raise NotFoundError("Bookings not found or access denied", guest_id=guest_id)
        return booking_readers.list_bookings(
            conn,
            property_id=property_id,
            guest_id=guest_id,
            status=status,
            limit=limit,
            offset=offset,
        )


def _transition(
    engine: Engine,
    booking_id: int,
    target: BookingStatus,
    operation: str,
    authorize: Optional[Callable[[BookingRecord, CatalogProperty], None]] = None,
    **fields: Any,
) -> BookingRecord:
    """
    Move a booking to ``target`` under its property's calendar lock.

    The booking is re-read with a row lock inside the transaction, so the
    transition is checked against the latest committed status.
    """
    booking = get_booking(engine, booking_id)

    with calendar_write(engine, booking.property_id, operation) as (conn, prop):
        current = booking_readers.get_booking(conn, booking_id, for_update=True)
        if current is None:
            raise NotFoundError(f"Booking {booking_id} not found", booking_id=booking_id)
        if authorize is not None:
            authorize(current, prop)

        ensure_transition(current.id, current.status, target)
        update_booking_status(conn, booking_id, target, expected=current.status, **fields)
        updated = booking_readers.get_booking(conn, booking_id)

    if updated is None:
        raise NotFoundError(f"Booking {booking_id} not found", booking_id=booking_id)

    booking_transitions.labels(from_status=current.status.value, to_status=target.value).inc()
    logger.info(
        "booking_status_changed",
        booking_id=booking_id,
        property_id=updated.property_id,
        from_status=current.status.value,
        to_status=target.value,
    )
    return updated


def confirm_booking(
    engine: Engine, booking_id: int, host_id: Optional[str] = None
) -> BookingRecord:
    """
    Confirm a PENDING booking (host approval or successful payment).

    Args:
        engine: SQLAlchemy engine
        booking_id: Booking to confirm
        host_id: Approving host, checked against the property owner. None is
            reserved for the payment processor and other internal callers.

    Raises:
        NotFoundError: No such booking, or ``host_id`` does not own its property
        InvalidTransitionError: Booking is not PENDING
    """

    def authorize(booking: BookingRecord, prop: CatalogProperty) -> None:
        if host_id is not None and host_id != prop.host_id:
            raise NotFoundError("Booking not found or unauthorized", booking_id=booking.id)

    return _transition(
        engine,
        booking_id,
        BookingStatus.CONFIRMED,
        "confirm_booking",
        authorize=authorize,
        confirmed_at=utc_now(),
    )


def cancel_booking(
    engine: Engine,
    booking_id: int,
    actor: Optional[str] = None,
    reason: Optional[str] = None,
) -> BookingRecord:
    """
    Cancel a PENDING or CONFIRMED booking.

    The record is kept for audit; only its status and cancellation metadata
    change. Refunds are the payment processor's job.

    Args:
        engine: SQLAlchemy engine
        booking_id: Booking to cancel
        actor: The booking's guest or its property's host. None means the
            payment processor, recorded as SYSTEM_ACTOR.
        reason: Shown to the other party

    Raises:
        NotFoundError: No such booking, or actor is neither its guest nor its host
        InvalidTransitionError: Booking is CANCELLED or COMPLETED
    """

    def authorize(booking: BookingRecord, prop: CatalogProperty) -> None:
        if actor is not None and actor not in (booking.guest_id, prop.host_id):
            raise NotFoundError(
                "Booking not found or unauthorized", booking_id=booking.id
            )

    return _transition(
        engine,
        booking_id,
        BookingStatus.CANCELLED,
        "cancel_booking",
        authorize=authorize,
        cancelled_at=utc_now(),
        cancelled_by=actor if actor is not None else SYSTEM_ACTOR,
        cancellation_reason=reason or DEFAULT_CANCELLATION_REASON,
    )


def complete_finished_bookings(engine: Engine, today: Optional[date] = None) -> int:
    """
    Mark every CONFIRMED booking whose check-out day has arrived as COMPLETED.

    Bookings cancelled between the scan and the update are skipped.

    Args:
        engine: SQLAlchemy engine
        today: Reference day (defaults to the current UTC day)

    Returns:
        int: Number of bookings completed
    """
    today = today or utc_today()
    with engine.connect() as conn:
        due = booking_readers.confirmed_bookings_checked_out_by(conn, today)

    completed = 0
    for booking in due:
        try:
            _transition(
                engine,
                booking.id,
                BookingStatus.COMPLETED,
                "complete_booking",
                completed_at=utc_now(),
            )
            completed += 1
        except BookingEngineError as e:
            logger.warning(
                "booking_completion_skipped", booking_id=booking.id, code=e.code
            )

    logger.info("bookings_completed", count=completed, scanned=len(due), today=today.isoformat())
    return completed
