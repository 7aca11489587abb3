"""
Unit tests for stay price computation.
"""

from __future__ import annotations

from datetime import date
from decimal import Decimal

import pytest

from booking_engine.domain.intervals import DateInterval
from booking_engine.domain.pricing import (
    PropertyPricingConfig,
    compute_price,
    minor_unit,
    nightly_price,
    round_money,
)


@pytest.fixture
def config() -> PropertyPricingConfig:
    return PropertyPricingConfig(
        base_price_per_night=Decimal("500"),
        cleaning_fee=Decimal("100"),
        security_deposit=Decimal("1000"),
        service_fee_rate=Decimal("0.15"),
        tax_rate=Decimal("0.05"),
        currency="AED",
    )


@pytest.mark.unit
def test_five_night_stay_breakdown(config: PropertyPricingConfig) -> None:
    """Test the worked example: 5 nights at 500 with 100 cleaning, 15% fee, 5% tax."""
    breakdown = compute_price(DateInterval(date(2025, 1, 10), date(2025, 1, 15)), config)

    assert breakdown.nights == 5
    assert breakdown.nightly_rate == Decimal("500.00")
    assert breakdown.base_total == Decimal("2500.00")
    assert breakdown.cleaning_fee == Decimal("100.00")
    assert breakdown.service_fee == Decimal("375.00")
    assert breakdown.taxes == Decimal("125.00")
    assert breakdown.total == Decimal("3100.00")
    assert breakdown.security_deposit == Decimal("1000.00")
    assert breakdown.currency == "AED"


@pytest.mark.unit
def test_security_deposit_is_not_part_of_total(config: PropertyPricingConfig) -> None:
    breakdown = compute_price(DateInterval(date(2025, 1, 10), date(2025, 1, 11)), config)

    assert breakdown.total == (
        breakdown.base_total + breakdown.cleaning_fee + breakdown.service_fee + breakdown.taxes
    )
    assert breakdown.total == Decimal("700.00")


@pytest.mark.unit
def test_each_fee_is_rounded_independently() -> None:
    """Test that fees are rounded half-up to fils before summing."""
    config = PropertyPricingConfig(
        base_price_per_night=Decimal("333.33"),
        service_fee_rate=Decimal("0.125"),
        tax_rate=Decimal("0.05"),
        currency="AED",
    )

    breakdown = compute_price(DateInterval(date(2025, 3, 1), date(2025, 3, 4)), config)

    assert breakdown.base_total == Decimal("999.99")
    # 999.99 * 0.125 = 124.99875 -> 125.00
    assert breakdown.service_fee == Decimal("125.00")
    # 999.99 * 0.05 = 49.9995 -> 50.00
    assert breakdown.taxes == Decimal("50.00")
    assert breakdown.total == Decimal("1174.99")


@pytest.mark.unit
def test_compute_price_is_deterministic(config: PropertyPricingConfig) -> None:
    interval = DateInterval(date(2025, 2, 1), date(2025, 2, 8))

    assert compute_price(interval, config) == compute_price(interval, config)


@pytest.mark.unit
def test_zero_decimal_currency_rounds_to_whole_units() -> None:
    config = PropertyPricingConfig(
        base_price_per_night=Decimal("10000"),
        service_fee_rate=Decimal("0.155"),
        tax_rate=Decimal("0"),
        currency="JPY",
    )

    breakdown = compute_price(DateInterval(date(2025, 3, 1), date(2025, 3, 2)), config)

    assert breakdown.service_fee == Decimal("1550")
    assert breakdown.total == Decimal("11550")


@pytest.mark.unit
def test_minor_units() -> None:
    assert minor_unit("AED") == Decimal("0.01")
    assert minor_unit("kwd") == Decimal("0.001")
    assert minor_unit("JPY") == Decimal("1")
    assert round_money(Decimal("2.345"), "AED") == Decimal("2.35")


@pytest.mark.unit
def test_nightly_price_matches_breakdown_rate(config: PropertyPricingConfig) -> None:
    breakdown = compute_price(DateInterval(date(2025, 1, 1), date(2025, 1, 2)), config)

    assert nightly_price(config) == breakdown.nightly_rate


@pytest.mark.unit
def test_defaults_follow_catalog_defaults() -> None:
    config = PropertyPricingConfig(base_price_per_night=Decimal("100"))

    assert config.min_stay_nights == 1
    assert config.max_stay_nights == 365
    assert config.advance_booking_days is None
    assert config.instant_book_enabled is False
    assert config.check_in_time.hour == 15
    assert config.check_out_time.hour == 11
