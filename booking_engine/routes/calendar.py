from datetime import date

import structlog
from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.engine import Engine

from booking_engine.dependencies import get_current_user_id, get_db_engine, get_today
from booking_engine.errors import BookingEngineError
from booking_engine.routes._booking_helpers import (
    interval_or_422,
    raise_http_error,
    validate_month_or_422,
)
from booking_engine.schemas.calendar import (
    BlockCreatePayload,
    BlockListResponse,
    BlockResponse,
    CalendarDayResponse,
    CalendarMonthResponse,
    MonthlyStatsResponse,
)
from booking_engine.services.calendar_store import add_block, list_blocks, remove_block
from booking_engine.services.calendar_view import build_month, monthly_stats

logger = structlog.get_logger(__name__)
router = APIRouter()


@router.get("/properties/{property_id}/blocks", response_model=BlockListResponse)
def list_blocks_endpoint(
    property_id: int,
    engine: Engine = Depends(get_db_engine),
    host_id: str = Depends(get_current_user_id),
) -> BlockListResponse:
    """List the property's blocked ranges in date order. Host only."""
    try:
        blocks = list_blocks(engine, property_id, host_id=host_id)
        return BlockListResponse(blocks=[BlockResponse(**b.to_dict()) for b in blocks])

    except BookingEngineError as e:
        raise_http_error(e)
    except HTTPException:
        raise
    except Exception as e:
        logger.exception("block_list_failed", property_id=property_id, error=str(e))
        raise HTTPException(status_code=500, detail="Internal server error")


@router.post(
    "/properties/{property_id}/blocks",
    status_code=status.HTTP_201_CREATED,
    response_model=BlockResponse,
)
def add_block_endpoint(
    property_id: int,
    payload: BlockCreatePayload,
    engine: Engine = Depends(get_db_engine),
    host_id: str = Depends(get_current_user_id),
) -> BlockResponse:
    """
    Block dates on a property's calendar. Host only.

    Blocks that overlap or touch the new range are merged into it, so the
    response may cover more days than were requested. Returns 409 if an active
    booking overlaps the range.
    """
    interval = interval_or_422(payload.check_in, payload.check_out)
    try:
        block = add_block(engine, property_id, interval, payload.reason, host_id=host_id)
        return BlockResponse(**block.to_dict())

    except BookingEngineError as e:
        raise_http_error(e)
    except HTTPException:
        raise
    except Exception as e:
        logger.exception("block_add_failed", property_id=property_id, error=str(e))
        raise HTTPException(status_code=500, detail="Internal server error")


@router.delete("/properties/{property_id}/blocks", response_model=BlockListResponse)
def remove_block_endpoint(
    property_id: int,
    check_in: date = Query(..., description="First day to unblock"),
    check_out: date = Query(..., description="Day after the last day to unblock"),
    engine: Engine = Depends(get_db_engine),
    host_id: str = Depends(get_current_user_id),
) -> BlockListResponse:
    """
    Unblock dates. Host only.

    The range must lie inside a single block. Unblocking the middle of a block
    leaves the days on either side blocked; those remaining pieces are returned.
    """
    interval = interval_or_422(check_in, check_out)
    try:
        remaining = remove_block(engine, property_id, interval, host_id=host_id)
        return BlockListResponse(blocks=[BlockResponse(**b.to_dict()) for b in remaining])

    except BookingEngineError as e:
        raise_http_error(e)
    except HTTPException:
        raise
    except Exception as e:
        logger.exception("block_remove_failed", property_id=property_id, error=str(e))
        raise HTTPException(status_code=500, detail="Internal server error")


@router.get("/properties/{property_id}/calendar", response_model=CalendarMonthResponse)
def calendar_month_endpoint(
    property_id: int,
    year: int = Query(..., description="Calendar year"),
    month: int = Query(..., description="Calendar month, 1-12"),
    engine: Engine = Depends(get_db_engine),
    today: date = Depends(get_today),
    host_id: str = Depends(get_current_user_id),
) -> CalendarMonthResponse:
    """
    Return the 42-day grid for a month, starting on the Sunday on or before the 1st.

    Host only: the grid shows guest names and booking IDs.

    Example:
        >>> GET /properties/7/calendar?year=2025&month=1
        {"property_id": 7, "year": 2025, "month": 1, "days": [{"date": "2024-12-29", ...}]}
    """
    validate_month_or_422(year, month)
    try:
        cells = build_month(engine, property_id, year, month, today=today, host_id=host_id)
        return CalendarMonthResponse(
            property_id=property_id,
            year=year,
            month=month,
            days=[CalendarDayResponse(**cell.to_dict()) for cell in cells],
        )

    except BookingEngineError as e:
        raise_http_error(e)
    except HTTPException:
        raise
    except Exception as e:
        logger.exception("calendar_build_failed", property_id=property_id, error=str(e))
        raise HTTPException(status_code=500, detail="Internal server error")


@router.get("/properties/{property_id}/stats", response_model=MonthlyStatsResponse)
def monthly_stats_endpoint(
    property_id: int,
    year: int = Query(..., description="Calendar year"),
    month: int = Query(..., description="Calendar month, 1-12"),
    engine: Engine = Depends(get_db_engine),
    host_id: str = Depends(get_current_user_id),
) -> MonthlyStatsResponse:
    """Earnings, booking count and occupancy for one month of a property. Host only."""
    validate_month_or_422(year, month)
    try:
        stats = monthly_stats(engine, property_id, year, month, host_id=host_id)
        return MonthlyStatsResponse(property_id=property_id, **stats.to_dict())

    except BookingEngineError as e:
        raise_http_error(e)
    except HTTPException:
        raise
    except Exception as e:
        logger.exception("monthly_stats_failed", property_id=property_id, error=str(e))
        raise HTTPException(status_code=500, detail="Internal server error")
