from typing import Any, Optional

from sqlalchemy import select
from sqlalchemy.engine import Connection

from booking_engine.domain.pricing import PropertyPricingConfig, round_money
from booking_engine.domain.properties import CatalogProperty
from booking_engine.models.properties import Property


def row_to_property(row: Any) -> CatalogProperty:
    """Build a CatalogProperty from a properties row mapping."""
    return CatalogProperty(
        id=row.id,
        host_id=row.host_id,
        title=row.title,
        max_guests=row.max_guests,
        is_active=row.is_active,
        pricing=PropertyPricingConfig(
            base_price_per_night=round_money(row.base_price, row.currency),
            cleaning_fee=round_money(row.cleaning_fee, row.currency),
            security_deposit=round_money(row.security_deposit, row.currency),
            service_fee_rate=row.service_fee_rate,
            tax_rate=row.tax_rate,
            min_stay_nights=row.min_stay_nights,
            max_stay_nights=row.max_stay_nights,
            advance_booking_days=row.advance_booking_days,
            check_in_time=row.check_in_time,
            check_out_time=row.check_out_time,
            instant_book_enabled=row.instant_book_enabled,
            currency=row.currency,
        ),
    )


def get_property(
    conn: Connection, property_id: int, for_update: bool = False
) -> Optional[CatalogProperty]:
    """
    Fetch a property's catalog snapshot.

    Args:
        conn (Connection): An active SQLAlchemy database connection.
        property_id (int): Catalog property ID.
        for_update (bool): Take a row lock (SELECT ... FOR UPDATE). Writers use
            this to serialize calendar mutations across processes.

    Returns:
        Optional[CatalogProperty]: The property, or None if it does not exist.
    """
    stmt = select(Property.__table__).where(Property.id == property_id)
    if for_update:
        stmt = stmt.with_for_update()
    row = conn.execute(stmt).fetchone()
    return row_to_property(row) if row else None
