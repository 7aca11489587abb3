"""
Internal helper functions for booking and calendar route handlers.

Translates engine errors into HTTP errors so each rule violation keeps its own
status code and structured detail.
"""

from __future__ import annotations

from datetime import date
from typing import NoReturn

from fastapi import HTTPException, status

from booking_engine.domain.intervals import DateInterval
from booking_engine.errors import (
    AdvanceBookingError,
    BookingEngineError,
    CalendarBusyError,
    CapacityError,
    ConflictError,
    DateBlockedError,
    DateConflictError,
    InvalidIntervalError,
    InvalidTransitionError,
    NotFoundError,
    PastDateError,
    StayLengthError,
)

ERROR_STATUS_CODES: dict[type[BookingEngineError], int] = {
    InvalidIntervalError: status.HTTP_422_UNPROCESSABLE_ENTITY,
    PastDateError: status.HTTP_422_UNPROCESSABLE_ENTITY,
    StayLengthError: status.HTTP_422_UNPROCESSABLE_ENTITY,
    AdvanceBookingError: status.HTTP_422_UNPROCESSABLE_ENTITY,
    CapacityError: status.HTTP_422_UNPROCESSABLE_ENTITY,
    DateConflictError: status.HTTP_409_CONFLICT,
    DateBlockedError: status.HTTP_409_CONFLICT,
    ConflictError: status.HTTP_409_CONFLICT,
    InvalidTransitionError: status.HTTP_409_CONFLICT,
    NotFoundError: status.HTTP_404_NOT_FOUND,
    CalendarBusyError: status.HTTP_503_SERVICE_UNAVAILABLE,
}


def raise_http_error(error: BookingEngineError) -> NoReturn:
    """
    Re-raise an engine error as an HTTPException.

    Args:
        error: The engine error

    Raises:
        HTTPException: With the mapped status code and the error's dict as detail
    """
    status_code = ERROR_STATUS_CODES.get(type(error), status.HTTP_400_BAD_REQUEST)
    headers = {"Retry-After": "1"} if error.retryable else None
    raise HTTPException(status_code=status_code, detail=error.to_dict(), headers=headers) from error


def interval_or_422(check_in: date, check_out: date) -> DateInterval:
    """
    Build a DateInterval from request dates, raise 422 if check_out <= check_in.

    Raises:
        HTTPException: 422 for an empty or inverted range
    """
    try:
        return DateInterval(check_in, check_out)
    except InvalidIntervalError as e:
        raise_http_error(e)


def validate_month_or_422(year: int, month: int) -> None:
    """
    Validate a calendar year/month pair, raise 422 if out of range.

    Raises:
        HTTPException: 422 if month is not 1-12 or year is outside 1-9998
    """
    if not 1 <= month <= 12 or not 1 <= year <= 9998:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail=f"Invalid month {year}-{month:02d}",
        )
