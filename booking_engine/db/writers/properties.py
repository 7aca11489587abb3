from typing import Any

import structlog
from sqlalchemy.engine import Connection

from booking_engine.db.writers._upsert import upsert_with_distinct_check
from booking_engine.models.properties import Property
from booking_engine.utils.datetime import utc_now

logger = structlog.get_logger(__name__)

CATALOG_COLUMNS = [
    "host_id",
    "title",
    "max_guests",
    "is_active",
    "base_price",
    "cleaning_fee",
    "security_deposit",
    "service_fee_rate",
    "tax_rate",
    "currency",
    "min_stay_nights",
    "max_stay_nights",
    "advance_booking_days",
    "check_in_time",
    "check_out_time",
    "instant_book_enabled",
]


def upsert_property(conn: Connection, property_id: int, data: dict[str, Any]) -> None:
    """
    Insert or update a property's catalog snapshot, only writing if a value changed.

    Existing bookings keep their own price snapshot, so a changed config only
    affects bookings created afterwards.

    Args:
        conn (Connection): SQLAlchemy DB connection.
        property_id (int): Catalog property ID.
        data (dict): Values for every column in CATALOG_COLUMNS.
    """
    now = utc_now()
    row = {"id": property_id, **{col: data[col] for col in CATALOG_COLUMNS}}
    row["created_at"] = now
    row["updated_at"] = now

    upsert_with_distinct_check(
        conn=conn,
        table=Property,
        rows=[row],
        conflict_column="id",
        distinct_columns=CATALOG_COLUMNS,
    )

    logger.info("property_upserted", property_id=property_id)
