"""Booking records and their lifecycle."""

from __future__ import annotations

import enum
from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from typing import Any, Optional

from booking_engine.domain.intervals import DateInterval
from booking_engine.errors import InvalidTransitionError


class BookingStatus(str, enum.Enum):
    PENDING = "PENDING"
    CONFIRMED = "CONFIRMED"
    CANCELLED = "CANCELLED"
    COMPLETED = "COMPLETED"


# Statuses that hold dates on the calendar
ACTIVE_STATUSES = frozenset({BookingStatus.PENDING, BookingStatus.CONFIRMED})

# Statuses that count towards earnings and occupancy
EARNING_STATUSES = frozenset({BookingStatus.CONFIRMED, BookingStatus.COMPLETED})

ALLOWED_TRANSITIONS: dict[BookingStatus, frozenset[BookingStatus]] = {
    BookingStatus.PENDING: frozenset({BookingStatus.CONFIRMED, BookingStatus.CANCELLED}),
    BookingStatus.CONFIRMED: frozenset({BookingStatus.COMPLETED, BookingStatus.CANCELLED}),
    BookingStatus.CANCELLED: frozenset(),
    BookingStatus.COMPLETED: frozenset(),
}


def ensure_transition(booking_id: int, current: BookingStatus, target: BookingStatus) -> None:
    """
    Raise InvalidTransitionError unless ``current -> target`` is a legal move.

    CANCELLED and COMPLETED are terminal.
    """
    if target not in ALLOWED_TRANSITIONS[current]:
        raise InvalidTransitionError(booking_id, current.value, target.value)


@dataclass(frozen=True)
class BookingRecord:
    id: int
    property_id: int
    guest_id: str
    interval: DateInterval
    guest_count: int
    status: BookingStatus
    nights: int
    base_amount: Decimal
    cleaning_fee: Decimal
    service_fee: Decimal
    taxes: Decimal
    security_deposit: Decimal
    total_amount: Decimal
    paid_amount: Decimal
    currency: str
    created_at: datetime
    guest_label: Optional[str] = None
    idempotency_key: Optional[str] = None
    special_requests: Optional[str] = None
    guest_notes: Optional[str] = None
    confirmed_at: Optional[datetime] = None
    completed_at: Optional[datetime] = None
    cancelled_at: Optional[datetime] = None
    cancelled_by: Optional[str] = None
    cancellation_reason: Optional[str] = None

    @property
    def is_active(self) -> bool:
        return self.status in ACTIVE_STATUSES

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "property_id": self.property_id,
            "guest_id": self.guest_id,
            "guest_label": self.guest_label,
            **self.interval.to_dict(),
            "guest_count": self.guest_count,
            "status": self.status.value,
            "nights": self.nights,
            "base_amount": self.base_amount,
            "cleaning_fee": self.cleaning_fee,
            "service_fee": self.service_fee,
            "taxes": self.taxes,
            "security_deposit": self.security_deposit,
            "total_amount": self.total_amount,
            "paid_amount": self.paid_amount,
            "currency": self.currency,
            "special_requests": self.special_requests,
            "guest_notes": self.guest_notes,
            "created_at": self.created_at,
            "confirmed_at": self.confirmed_at,
            "completed_at": self.completed_at,
            "cancelled_at": self.cancelled_at,
            "cancelled_by": self.cancelled_by,
            "cancellation_reason": self.cancellation_reason,
        }
