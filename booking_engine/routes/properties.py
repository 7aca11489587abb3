from datetime import date

import structlog
from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.engine import Engine

from booking_engine.db.writers.properties import upsert_property
from booking_engine.dependencies import get_db_engine, get_today
from booking_engine.domain.pricing import compute_price
from booking_engine.errors import BookingEngineError
from booking_engine.routes._booking_helpers import interval_or_422, raise_http_error
from booking_engine.schemas.properties import (
    AvailabilityResponse,
    PriceBreakdownResponse,
    PropertyUpsertPayload,
    QuotePayload,
)
from booking_engine.services.availability import check_availability, load_bookable_property

logger = structlog.get_logger(__name__)
router = APIRouter()


@router.put("/properties/{property_id}", status_code=status.HTTP_200_OK)
def upsert_property_endpoint(
    property_id: int,
    payload: PropertyUpsertPayload,
    engine: Engine = Depends(get_db_engine),
) -> dict[str, str]:
    """
    Create or update a property's catalog snapshot.

    Called by the property catalog whenever a listing's pricing or booking
    policy changes. Existing bookings keep their own price snapshot.

    Args:
        property_id: Catalog property ID
        payload: Full catalog snapshot of the property

    Returns:
        dict: Message confirming the upsert
    """
    try:
        with engine.begin() as conn:
            upsert_property(conn, property_id, payload.model_dump())

        return {"message": f"Property {property_id} saved"}

    except HTTPException:
        raise
    except Exception as e:
        logger.exception("property_upsert_failed", property_id=property_id, error=str(e))
        raise HTTPException(status_code=500, detail="Internal server error")


@router.get("/properties/{property_id}/availability", response_model=AvailabilityResponse)
def availability_endpoint(
    property_id: int,
    check_in: date = Query(..., description="First night of the stay"),
    check_out: date = Query(..., description="Departure day"),
    guests: int = Query(1, ge=1, description="Number of guests"),
    engine: Engine = Depends(get_db_engine),
    today: date = Depends(get_today),
) -> AvailabilityResponse:
    """
    Check whether a property can be booked for a date range.

    Returns 200 with the instant-book flag when available. Each rejection
    reason has its own error code in the response detail.
    """
    interval = interval_or_422(check_in, check_out)
    try:
        result = check_availability(engine, property_id, interval, guests, today=today)
        return AvailabilityResponse(**result.to_dict())

    except BookingEngineError as e:
        raise_http_error(e)
    except HTTPException:
        raise
    except Exception as e:
        logger.exception("availability_check_failed", property_id=property_id, error=str(e))
        raise HTTPException(status_code=500, detail="Internal server error")


@router.post("/properties/{property_id}/quote", response_model=PriceBreakdownResponse)
def quote_endpoint(
    property_id: int,
    payload: QuotePayload,
    engine: Engine = Depends(get_db_engine),
) -> PriceBreakdownResponse:
    """
    Price a stay without booking it.

    Uses the same calculation that createBooking snapshots, so the quote equals
    the booking total while the property's configuration is unchanged.
    """
    interval = interval_or_422(payload.check_in, payload.check_out)
    try:
        with engine.connect() as conn:
            prop = load_bookable_property(conn, property_id)
        breakdown = compute_price(interval, prop.pricing)
        return PriceBreakdownResponse(**breakdown.to_dict())

    except BookingEngineError as e:
        raise_http_error(e)
    except HTTPException:
        raise
    except Exception as e:
        logger.exception("quote_failed", property_id=property_id, error=str(e))
        raise HTTPException(status_code=500, detail="Internal server error")
