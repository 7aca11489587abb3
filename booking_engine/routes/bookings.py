from datetime import date
from typing import Optional

import structlog
from fastapi import APIRouter, Depends, Header, HTTPException, Query, status
from sqlalchemy.engine import Engine

from booking_engine.dependencies import get_current_user_id, get_db_engine, get_today
from booking_engine.domain.bookings import BookingRecord, BookingStatus
from booking_engine.errors import BookingEngineError
from booking_engine.routes._booking_helpers import interval_or_422, raise_http_error
from booking_engine.schemas.bookings import (
    BookingCancelPayload,
    BookingCreatePayload,
    BookingListResponse,
    BookingResponse,
    CompletionResponse,
)
from booking_engine.services.bookings import (
    cancel_booking,
    complete_finished_bookings,
    confirm_booking,
    create_booking,
    get_booking,
    list_bookings,
)

logger = structlog.get_logger(__name__)
router = APIRouter()


def _response(booking: BookingRecord) -> BookingResponse:
    return BookingResponse(**booking.to_dict())


@router.post("/bookings", status_code=status.HTTP_201_CREATED, response_model=BookingResponse)
def create_booking_endpoint(
    payload: BookingCreatePayload,
    engine: Engine = Depends(get_db_engine),
    today: date = Depends(get_today),
    guest_id: str = Depends(get_current_user_id),
    idempotency_key: Optional[str] = Header(None, alias="Idempotency-Key"),
) -> BookingResponse:
    """
    Book a property for the authenticated guest.

    Starts PENDING, or CONFIRMED when the property allows instant booking.
    Resending the same Idempotency-Key returns the booking the first request
    created instead of booking twice.

    Returns:
        BookingResponse: The booking and its frozen price breakdown
    """
    interval = interval_or_422(payload.check_in, payload.check_out)
    try:
        booking = create_booking(
            engine,
            property_id=payload.property_id,
            guest_id=guest_id,
            interval=interval,
            guest_count=payload.guests,
            idempotency_key=idempotency_key,
            guest_label=payload.guest_label,
            special_requests=payload.special_requests,
            guest_notes=payload.message,
            today=today,
        )
        return _response(booking)

    except BookingEngineError as e:
        raise_http_error(e)
    except HTTPException:
        raise
    except Exception as e:
        logger.exception(
            "booking_creation_failed", property_id=payload.property_id, error=str(e)
        )
        raise HTTPException(status_code=500, detail="Internal server error")


@router.get("/bookings", response_model=BookingListResponse)
def list_bookings_endpoint(
    property_id: Optional[int] = Query(None, description="Only bookings of this property"),
    guest_id: Optional[str] = Query(None, description="Only bookings of this guest"),
    status_filter: Optional[BookingStatus] = Query(None, alias="status"),
    limit: int = Query(20, ge=1, le=100),
    offset: int = Query(0, ge=0),
    engine: Engine = Depends(get_db_engine),
    user_id: str = Depends(get_current_user_id),
) -> BookingListResponse:
    """
    List bookings, newest first.

    Without a property or guest filter, returns the caller's own bookings.
    Filtering by property is for that property's host; filtering by another
    guest returns 404.
    """
    try:
        if property_id is None and guest_id is None:
            guest_id = user_id

        bookings = list_bookings(
            engine,
            property_id=property_id,
            guest_id=guest_id,
            status=status_filter,
            limit=limit,
            offset=offset,
            viewer_id=user_id,
        )
        items = [_response(booking) for booking in bookings]
        return BookingListResponse(bookings=items, total=len(items))

    except BookingEngineError as e:
        raise_http_error(e)
    except HTTPException:
        raise
    except Exception as e:
        logger.exception("booking_list_failed", error=str(e))
        raise HTTPException(status_code=500, detail="Internal server error")


@router.post("/bookings/complete", response_model=CompletionResponse)
def complete_bookings_endpoint(
    engine: Engine = Depends(get_db_engine),
    today: date = Depends(get_today),
) -> CompletionResponse:
    """
    Mark confirmed stays whose check-out day has arrived as COMPLETED.

    Meant for a scheduler; scripts/complete_stays.py does the same from cron.
    """
    try:
        return CompletionResponse(completed=complete_finished_bookings(engine, today=today))

    except Exception as e:
        logger.exception("booking_completion_failed", error=str(e))
        raise HTTPException(status_code=500, detail="Internal server error")


@router.get("/bookings/{booking_id}", response_model=BookingResponse)
def get_booking_endpoint(
    booking_id: int,
    engine: Engine = Depends(get_db_engine),
    user_id: str = Depends(get_current_user_id),
) -> BookingResponse:
    """Fetch a single booking. Visible to its guest and its property's host."""
    try:
        return _response(get_booking(engine, booking_id, viewer_id=user_id))

    except BookingEngineError as e:
        raise_http_error(e)
    except HTTPException:
        raise
    except Exception as e:
        logger.exception("booking_fetch_failed", booking_id=booking_id, error=str(e))
        raise HTTPException(status_code=500, detail="Internal server error")


@router.post("/bookings/{booking_id}/confirm", response_model=BookingResponse)
def confirm_booking_endpoint(
    booking_id: int,
    engine: Engine = Depends(get_db_engine),
    host_id: str = Depends(get_current_user_id),
) -> BookingResponse:
    """
    Approve a PENDING booking as the property's host.

    Returns 404 if the caller does not host the property and 409 if the booking
    is not PENDING. Payment-driven confirmation calls the service directly.
    """
    try:
        return _response(confirm_booking(engine, booking_id, host_id=host_id))

    except BookingEngineError as e:
        raise_http_error(e)
    except HTTPException:
        raise
    except Exception as e:
        logger.exception("booking_confirm_failed", booking_id=booking_id, error=str(e))
        raise HTTPException(status_code=500, detail="Internal server error")


@router.post("/bookings/{booking_id}/cancel", response_model=BookingResponse)
def cancel_booking_endpoint(
    booking_id: int,
    payload: Optional[BookingCancelPayload] = None,
    engine: Engine = Depends(get_db_engine),
    actor: str = Depends(get_current_user_id),
) -> BookingResponse:
    """
    Cancel a PENDING or CONFIRMED booking as its guest or host.

    The booking is kept with status CANCELLED. Returns 409 for completed or
    already-cancelled bookings.
    """
    try:
        reason = payload.reason if payload else None
        return _response(cancel_booking(engine, booking_id, actor=actor, reason=reason))

    except BookingEngineError as e:
        raise_http_error(e)
    except HTTPException:
        raise
    except Exception as e:
        logger.exception("booking_cancel_failed", booking_id=booking_id, error=str(e))
        raise HTTPException(status_code=500, detail="Internal server error")
