"""
Error taxonomy for the booking and availability engine.

Every business-rule failure is a distinct exception type with a stable ``code``
and a ``details`` dict carrying enough context (the conflicting interval, the
violated bound) for a caller to render a precise message. None of these are
retried internally. ``CalendarBusyError`` is the only transient failure.
"""

from __future__ import annotations

from datetime import date
from typing import Any, Optional


def _interval_dict(interval: Any) -> dict[str, str]:
    return {"check_in": interval.start.isoformat(), "check_out": interval.end.isoformat()}


class BookingEngineError(Exception):
    """Base class for all engine errors."""

    code = "booking_engine_error"
    retryable = False

    def __init__(self, message: str, **details: Any) -> None:
        super().__init__(message)
        self.message = message
        self.details = details

    def to_dict(self) -> dict[str, Any]:
        return {"code": self.code, "message": self.message, "details": self.details}


class InvalidIntervalError(BookingEngineError):
    code = "invalid_interval"

    def __init__(self, start: date, end: date) -> None:
        super().__init__(
            "Check-out date must be after check-in date",
            check_in=start.isoformat(),
            check_out=end.isoformat(),
        )


class PastDateError(BookingEngineError):
    code = "past_date"

    def __init__(self, start: date, today: date) -> None:
        super().__init__(
            f"Check-in date {start.isoformat()} is in the past",
            check_in=start.isoformat(),
            today=today.isoformat(),
        )


class StayLengthError(BookingEngineError):
    code = "stay_length"

    def __init__(self, nights: int, min_nights: int, max_nights: int) -> None:
        if nights < min_nights:
            message = f"Minimum stay is {min_nights} nights, requested {nights}"
        else:
            message = f"Maximum stay is {max_nights} nights, requested {nights}"
        super().__init__(message, nights=nights, min_nights=min_nights, max_nights=max_nights)


class AdvanceBookingError(BookingEngineError):
    code = "advance_booking"

    def __init__(self, start: date, latest_start: date, advance_booking_days: int) -> None:
        super().__init__(
            f"Bookings open at most {advance_booking_days} days in advance",
            check_in=start.isoformat(),
            latest_check_in=latest_start.isoformat(),
            advance_booking_days=advance_booking_days,
        )


class CapacityError(BookingEngineError):
    code = "capacity"

    def __init__(self, guest_count: int, max_guests: int) -> None:
        super().__init__(
            f"Number of guests ({guest_count}) exceeds property limit of {max_guests}",
            guest_count=guest_count,
            max_guests=max_guests,
        )


class DateConflictError(BookingEngineError):
    code = "date_conflict"

    def __init__(self, requested: Any, conflicting: Optional[Any] = None) -> None:
        details: dict[str, Any] = {"requested": _interval_dict(requested)}
        message = "Property is not available for the selected dates"
        if conflicting is not None:
            details["conflicting"] = _interval_dict(conflicting)
            message = (
                f"{message} (already booked {conflicting.start.isoformat()}"
                f" to {conflicting.end.isoformat()})"
            )
        super().__init__(message, **details)


class DateBlockedError(BookingEngineError):
    code = "date_blocked"

    def __init__(self, requested: Any, blocked: Any, reason: Optional[str] = None) -> None:
        super().__init__(
            "The host has blocked some of the selected dates",
            requested=_interval_dict(requested),
            blocked=_interval_dict(blocked),
            reason=reason,
        )


class ConflictError(BookingEngineError):
    """A host block or an idempotent replay collides with existing state."""

    code = "conflict"


class InvalidTransitionError(BookingEngineError):
    code = "invalid_transition"

    def __init__(self, booking_id: int, current: str, target: str) -> None:
        super().__init__(
            f"Booking {booking_id} cannot move from {current} to {target}",
            booking_id=booking_id,
            current_status=current,
            target_status=target,
        )


class NotFoundError(BookingEngineError):
    code = "not_found"


class CalendarBusyError(BookingEngineError):
    """The property's calendar lock could not be acquired in time."""

    code = "calendar_busy"
    retryable = True

    def __init__(self, property_id: int, timeout: float) -> None:
        super().__init__(
            f"Calendar for property {property_id} is busy, retry with the same idempotency key",
            property_id=property_id,
            timeout_seconds=timeout,
        )
