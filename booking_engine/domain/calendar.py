"""Host blocks and the derived month-grid view types."""

from __future__ import annotations

import enum
from dataclasses import asdict, dataclass
from datetime import date, datetime
from decimal import Decimal
from typing import Any, Optional

from booking_engine.domain.intervals import DateInterval


@dataclass(frozen=True)
class BlockRecord:
    id: int
    property_id: int
    interval: DateInterval
    reason: str
    created_by: str
    created_at: datetime

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "property_id": self.property_id,
            **self.interval.to_dict(),
            "reason": self.reason,
            "created_by": self.created_by,
            "created_at": self.created_at,
        }


class CellStatus(str, enum.Enum):
    AVAILABLE = "available"
    PENDING = "pending"
    CONFIRMED = "confirmed"
    BLOCKED = "blocked"


@dataclass(frozen=True)
class CalendarDayCell:
    """One day of the month grid. Derived on every read, never stored."""

    date: date
    status: CellStatus
    is_available: bool
    price: Decimal
    is_current_month: bool
    is_today: bool
    is_check_in_day: bool = False
    is_check_out_day: bool = False
    booking_id: Optional[int] = None
    guest_label: Optional[str] = None
    block_reason: Optional[str] = None

    def to_dict(self) -> dict[str, Any]:
        data = asdict(self)
        data["status"] = self.status.value
        return data


@dataclass(frozen=True)
class MonthlyStats:
    year: int
    month: int
    total_earnings: Decimal
    booking_count: int
    booked_nights: int
    days_in_month: int
    occupancy_rate: Decimal
    currency: str

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)
