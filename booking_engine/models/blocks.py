from sqlalchemy import CheckConstraint, Column, Date, DateTime, ForeignKey, Index, Integer, String
from sqlalchemy.sql import func

from booking_engine.models.base import Base


class BlockedRange(Base):
    """
    ORM model for host-imposed blocks.

    A block covers [start_date, end_date) like a booking does. The writers keep
    one property's blocks disjoint and non-adjacent by merging on insert.
    """

    __tablename__ = "blocked_ranges"
    __table_args__ = (
        CheckConstraint("end_date > start_date", name="ck_blocked_ranges_interval"),
        Index("ix_blocked_ranges_property_range", "property_id", "start_date", "end_date"),
    )

    id = Column(Integer, primary_key=True, autoincrement=True)
    property_id = Column(
        Integer, ForeignKey("properties.id", ondelete="CASCADE"), nullable=False, index=True
    )
    start_date = Column(Date, nullable=False)
    end_date = Column(Date, nullable=False)
    reason = Column(String, nullable=False)
    created_by = Column(String, nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
