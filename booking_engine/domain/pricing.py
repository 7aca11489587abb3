"""
Per-stay price computation.

All amounts are ``Decimal`` in the currency's major unit. Each derived fee is
rounded to the currency's minor unit on its own before summing, so the
breakdown always adds up exactly to ``total``.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass, field
from datetime import time
from decimal import ROUND_HALF_UP, Decimal
from typing import Any, Optional

from booking_engine.config import CURRENCY, DEFAULT_SERVICE_FEE_RATE, DEFAULT_TAX_RATE
from booking_engine.domain.intervals import DateInterval

# Currencies whose minor unit is not 1/100
_MINOR_UNIT_EXPONENTS = {
    "BHD": 3,
    "JOD": 3,
    "JPY": 0,
    "KRW": 0,
    "KWD": 3,
    "OMR": 3,
}


def minor_unit(currency: str) -> Decimal:
    """Smallest representable amount, e.g. Decimal("0.01") for AED (one fils)."""
    return Decimal(1).scaleb(-_MINOR_UNIT_EXPONENTS.get(currency.upper(), 2))


def round_money(amount: Decimal, currency: str) -> Decimal:
    return amount.quantize(minor_unit(currency), rounding=ROUND_HALF_UP)


@dataclass(frozen=True)
class PropertyPricingConfig:
    base_price_per_night: Decimal
    cleaning_fee: Decimal = Decimal("0")
    security_deposit: Decimal = Decimal("0")
    service_fee_rate: Decimal = DEFAULT_SERVICE_FEE_RATE
    tax_rate: Decimal = DEFAULT_TAX_RATE
    min_stay_nights: int = 1
    max_stay_nights: int = 365
    # None means no advance-booking ceiling
    advance_booking_days: Optional[int] = None
    check_in_time: time = time(15, 0)
    check_out_time: time = time(11, 0)
    instant_book_enabled: bool = False
    currency: str = field(default=CURRENCY)


@dataclass(frozen=True)
class PriceBreakdown:
    nights: int
    nightly_rate: Decimal
    base_total: Decimal
    cleaning_fee: Decimal
    service_fee: Decimal
    taxes: Decimal
    total: Decimal
    # Authorized separately, never part of total
    security_deposit: Decimal
    currency: str

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


def compute_price(interval: DateInterval, config: PropertyPricingConfig) -> PriceBreakdown:
    """
    Compute the full-stay breakdown for ``interval`` under ``config``.

    Pure and deterministic: identical inputs always yield identical output,
    which is what lets bookings snapshot their price at creation.

    Args:
        interval: Validated stay range
        config: Pricing configuration of the property

    Returns:
        PriceBreakdown with base_total + cleaning_fee + service_fee + taxes == total
    """
    currency = config.currency
    nightly_rate = round_money(config.base_price_per_night, currency)
    base_total = nightly_rate * interval.nights
    cleaning_fee = round_money(config.cleaning_fee, currency)
    service_fee = round_money(base_total * config.service_fee_rate, currency)
    taxes = round_money(base_total * config.tax_rate, currency)

    return PriceBreakdown(
        nights=interval.nights,
        nightly_rate=nightly_rate,
        base_total=base_total,
        cleaning_fee=cleaning_fee,
        service_fee=service_fee,
        taxes=taxes,
        total=base_total + cleaning_fee + service_fee + taxes,
        security_deposit=round_money(config.security_deposit, currency),
        currency=currency,
    )


def nightly_price(config: PropertyPricingConfig) -> Decimal:
    """Per-night rate shown on calendar cells."""
    return round_money(config.base_price_per_night, config.currency)
