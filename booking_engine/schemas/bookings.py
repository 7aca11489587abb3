from datetime import date, datetime
from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, Field


class BookingCreatePayload(BaseModel):
    """
    Schema for creating a booking. The guest is the authenticated caller.
    """

    property_id: int = Field(..., description="Property to book")
    check_in: date = Field(..., description="First night of the stay")
    check_out: date = Field(..., description="Departure day (not a night of the stay)")
    guests: int = Field(..., ge=1, le=20, description="Number of guests")
    guest_label: Optional[str] = Field(None, description="Name shown on the host calendar")
    special_requests: Optional[str] = Field(None, description="Requests for the host")
    message: Optional[str] = Field(None, description="Message to the host")


class BookingCancelPayload(BaseModel):
    reason: Optional[str] = Field(None, description="Why the booking is being cancelled")


class BookingResponse(BaseModel):
    id: int
    property_id: int
    guest_id: str
    guest_label: Optional[str] = None
    check_in: date
    check_out: date
    guest_count: int
    status: str
    nights: int
    base_amount: Decimal
    cleaning_fee: Decimal
    service_fee: Decimal
    taxes: Decimal
    security_deposit: Decimal
    total_amount: Decimal
    paid_amount: Decimal
    currency: str
    special_requests: Optional[str] = None
    guest_notes: Optional[str] = None
    created_at: datetime
    confirmed_at: Optional[datetime] = None
    completed_at: Optional[datetime] = None
    cancelled_at: Optional[datetime] = None
    cancelled_by: Optional[str] = None
    cancellation_reason: Optional[str] = None


class BookingListResponse(BaseModel):
    bookings: list[BookingResponse]
    total: int


class CompletionResponse(BaseModel):
    completed: int
