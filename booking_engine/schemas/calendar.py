import datetime as dt
from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, Field


class BlockCreatePayload(BaseModel):
    """
    Schema for blocking a date range. A single night is check_out = check_in + 1.
    """

    check_in: dt.date = Field(..., description="First blocked day")
    check_out: dt.date = Field(..., description="Day after the last blocked day")
    reason: str = Field("Blocked by host", min_length=1, description="Why the dates are blocked")


class BlockResponse(BaseModel):
    id: int
    property_id: int
    check_in: dt.date
    check_out: dt.date
    reason: str
    created_by: str
    created_at: dt.datetime


class BlockListResponse(BaseModel):
    blocks: list[BlockResponse]


class CalendarDayResponse(BaseModel):
    date: dt.date
    status: str
    is_available: bool
    price: Decimal
    is_current_month: bool
    is_today: bool
    is_check_in_day: bool
    is_check_out_day: bool
    booking_id: Optional[int] = None
    guest_label: Optional[str] = None
    block_reason: Optional[str] = None


class CalendarMonthResponse(BaseModel):
    property_id: int
    year: int
    month: int
    days: list[CalendarDayResponse]


class MonthlyStatsResponse(BaseModel):
    property_id: int
    year: int
    month: int
    total_earnings: Decimal
    booking_count: int
    booked_nights: int
    days_in_month: int
    occupancy_rate: Decimal
    currency: str
