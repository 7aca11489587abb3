from sqlalchemy import (
    CheckConstraint,
    Column,
    Date,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    Numeric,
    String,
    Text,
)
from sqlalchemy.sql import func

from booking_engine.models.base import Base


class Booking(Base):
    """
    ORM model for guest bookings.

    Each row holds the stay range as a half-open [check_in, check_out) pair and a
    frozen snapshot of the price breakdown computed at creation time. Rows are
    never deleted; cancellation only changes status.

    On PostgreSQL the migration adds an exclusion constraint
    (bookings_no_overlap_per_property) so two PENDING/CONFIRMED bookings of the
    same property can never overlap, even if a writer bypasses the lock.
    """

    __tablename__ = "bookings"
    __table_args__ = (
        CheckConstraint("check_out > check_in", name="ck_bookings_interval"),
        Index("ix_bookings_property_range", "property_id", "check_in", "check_out"),
    )

    id = Column(Integer, primary_key=True, autoincrement=True)
    property_id = Column(
        Integer, ForeignKey("properties.id", ondelete="CASCADE"), nullable=False, index=True
    )
    guest_id = Column(String, nullable=False, index=True)
    guest_label = Column(String, nullable=True)
    check_in = Column(Date, nullable=False)
    check_out = Column(Date, nullable=False)
    guest_count = Column(Integer, nullable=False)
    status = Column(String(16), nullable=False, index=True)

    # Price snapshot, stored at the currency's minor unit (3 places covers KWD and BHD)
    nights = Column(Integer, nullable=False)
    base_amount = Column(Numeric(14, 3), nullable=False)
    cleaning_fee = Column(Numeric(14, 3), nullable=False)
    service_fee = Column(Numeric(14, 3), nullable=False)
    taxes = Column(Numeric(14, 3), nullable=False)
    security_deposit = Column(Numeric(14, 3), nullable=False)
    total_amount = Column(Numeric(14, 3), nullable=False)
    paid_amount = Column(Numeric(14, 3), nullable=False)
    currency = Column(String(3), nullable=False)

    idempotency_key = Column(String, nullable=True, unique=True)
    special_requests = Column(Text, nullable=True)
    guest_notes = Column(Text, nullable=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False
    )
    confirmed_at = Column(DateTime(timezone=True), nullable=True)
    completed_at = Column(DateTime(timezone=True), nullable=True)
    cancelled_at = Column(DateTime(timezone=True), nullable=True)
    cancelled_by = Column(String, nullable=True)
    cancellation_reason = Column(String, nullable=True)
