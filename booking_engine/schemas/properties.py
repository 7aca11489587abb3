from datetime import date, time
from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, Field, model_validator

from booking_engine.config import CURRENCY, DEFAULT_SERVICE_FEE_RATE, DEFAULT_TAX_RATE


class PropertyUpsertPayload(BaseModel):
    """
    Schema for the property catalog feed. Defaults follow the catalog's own defaults.
    """

    host_id: str = Field(..., description="Owning host's user ID")
    title: Optional[str] = Field(None, description="Listing title")
    max_guests: int = Field(..., ge=1, description="Maximum number of guests")
    is_active: bool = Field(True, description="Whether the property accepts bookings")

    base_price: Decimal = Field(..., gt=0, description="Price per night")
    cleaning_fee: Decimal = Field(Decimal("0"), ge=0, description="One-off cleaning fee")
    security_deposit: Decimal = Field(Decimal("0"), ge=0, description="Authorized, not charged")
    service_fee_rate: Decimal = Field(DEFAULT_SERVICE_FEE_RATE, ge=0, le=1)
    tax_rate: Decimal = Field(DEFAULT_TAX_RATE, ge=0, le=1)
    currency: str = Field(CURRENCY, min_length=3, max_length=3)

    min_stay_nights: int = Field(1, ge=1, description="Minimum stay must be at least 1 night")
    max_stay_nights: int = Field(365, ge=1, description="Maximum stay must be at least 1 night")
    advance_booking_days: Optional[int] = Field(
        None, ge=0, description="How far ahead bookings open; null for no limit"
    )
    check_in_time: time = Field(time(15, 0), description="Check-in time (HH:MM)")
    check_out_time: time = Field(time(11, 0), description="Check-out time (HH:MM)")
    instant_book_enabled: bool = Field(False, description="Confirm bookings without approval")

    @model_validator(mode="after")
    def check_stay_bounds(self) -> "PropertyUpsertPayload":
        if self.max_stay_nights < self.min_stay_nights:
            raise ValueError("max_stay_nights must be greater than or equal to min_stay_nights")
        self.currency = self.currency.upper()
        return self


class QuotePayload(BaseModel):
    check_in: date = Field(..., description="First night of the stay")
    check_out: date = Field(..., description="Departure day (not a night of the stay)")


class AvailabilityResponse(BaseModel):
    property_id: int
    available: bool
    check_in: str
    check_out: str
    nights: int
    guest_count: int
    instant_book: bool


class PriceBreakdownResponse(BaseModel):
    nights: int
    nightly_rate: Decimal
    base_total: Decimal
    cleaning_fee: Decimal
    service_fee: Decimal
    taxes: Decimal
    total: Decimal
    security_deposit: Decimal
    currency: str
