from sqlalchemy import Boolean, Column, DateTime, Integer, Numeric, String, Time, text
from sqlalchemy.sql import func

from booking_engine.models.base import Base


class Property(Base):
    """
    ORM model for the property catalog snapshot the engine books against.

    Rows are written by the catalog feed (PUT /properties/{id}) and only read by
    the engine. The row also serves as the per-property lock target: writers
    take SELECT ... FOR UPDATE on it before touching the calendar.
    """

    __tablename__ = "properties"

    id = Column(Integer, primary_key=True, autoincrement=False)  # Catalog property ID
    host_id = Column(String, nullable=False, index=True)
    title = Column(String, nullable=True)
    max_guests = Column(Integer, nullable=False)
    is_active = Column(Boolean, nullable=False, server_default=text("TRUE"))

    base_price = Column(Numeric(14, 3), nullable=False)
    cleaning_fee = Column(Numeric(14, 3), nullable=False, server_default=text("0"))
    security_deposit = Column(Numeric(14, 3), nullable=False, server_default=text("0"))
    service_fee_rate = Column(Numeric(6, 4), nullable=False)
    tax_rate = Column(Numeric(6, 4), nullable=False)
    currency = Column(String(3), nullable=False)

    min_stay_nights = Column(Integer, nullable=False, server_default=text("1"))
    max_stay_nights = Column(Integer, nullable=False, server_default=text("365"))
    advance_booking_days = Column(Integer, nullable=True)  # NULL = no ceiling
    check_in_time = Column(Time, nullable=False)
    check_out_time = Column(Time, nullable=False)
    instant_book_enabled = Column(Boolean, nullable=False, server_default=text("FALSE"))

    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False
    )
