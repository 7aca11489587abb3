"""Create properties, bookings and blocked_ranges

Revision ID: 3f1c2a9b7d10
Revises:
Create Date: 2025-01-06 10:12:31.418205

"""

import sqlalchemy as sa

from alembic import op  # type: ignore[attr-defined]

# revision identifiers, used by Alembic.
revision = "3f1c2a9b7d10"
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    """Upgrade schema."""
    op.create_table(
        "properties",
        sa.Column("id", sa.Integer(), autoincrement=False, nullable=False),
        sa.Column("host_id", sa.String(), nullable=False),
        sa.Column("title", sa.String(), nullable=True),
        sa.Column("max_guests", sa.Integer(), nullable=False),
        sa.Column("is_active", sa.Boolean(), server_default=sa.text("TRUE"), nullable=False),
        sa.Column("base_price", sa.Numeric(14, 3), nullable=False),
        sa.Column("cleaning_fee", sa.Numeric(14, 3), server_default=sa.text("0"), nullable=False),
        sa.Column(
            "security_deposit", sa.Numeric(14, 3), server_default=sa.text("0"), nullable=False
        ),
        sa.Column("service_fee_rate", sa.Numeric(6, 4), nullable=False),
        sa.Column("tax_rate", sa.Numeric(6, 4), nullable=False),
        sa.Column("currency", sa.String(3), nullable=False),
        sa.Column("min_stay_nights", sa.Integer(), server_default=sa.text("1"), nullable=False),
        sa.Column("max_stay_nights", sa.Integer(), server_default=sa.text("365"), nullable=False),
        sa.Column("advance_booking_days", sa.Integer(), nullable=True),
        sa.Column("check_in_time", sa.Time(), nullable=False),
        sa.Column("check_out_time", sa.Time(), nullable=False),
        sa.Column(
            "instant_book_enabled", sa.Boolean(), server_default=sa.text("FALSE"), nullable=False
        ),
        sa.Column(
            "created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False
        ),
        sa.Column(
            "updated_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False
        ),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_properties_host_id", "properties", ["host_id"])

    op.create_table(
        "bookings",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("property_id", sa.Integer(), nullable=False),
        sa.Column("guest_id", sa.String(), nullable=False),
        sa.Column("guest_label", sa.String(), nullable=True),
        sa.Column("check_in", sa.Date(), nullable=False),
        sa.Column("check_out", sa.Date(), nullable=False),
        sa.Column("guest_count", sa.Integer(), nullable=False),
        sa.Column("status", sa.String(16), nullable=False),
        sa.Column("nights", sa.Integer(), nullable=False),
        sa.Column("base_amount", sa.Numeric(14, 3), nullable=False),
        sa.Column("cleaning_fee", sa.Numeric(14, 3), nullable=False),
        sa.Column("service_fee", sa.Numeric(14, 3), nullable=False),
        sa.Column("taxes", sa.Numeric(14, 3), nullable=False),
        sa.Column("security_deposit", sa.Numeric(14, 3), nullable=False),
        sa.Column("total_amount", sa.Numeric(14, 3), nullable=False),
        sa.Column("paid_amount", sa.Numeric(14, 3), nullable=False),
        sa.Column("currency", sa.String(3), nullable=False),
        sa.Column("idempotency_key", sa.String(), nullable=True),
        sa.Column("special_requests", sa.Text(), nullable=True),
        sa.Column("guest_notes", sa.Text(), nullable=True),
        sa.Column(
            "created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False
        ),
        sa.Column(
            "updated_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False
        ),
        sa.Column("confirmed_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("completed_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("cancelled_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("cancelled_by", sa.String(), nullable=True),
        sa.Column("cancellation_reason", sa.String(), nullable=True),
        sa.CheckConstraint("check_out > check_in", name="ck_bookings_interval"),
        sa.ForeignKeyConstraint(["property_id"], ["properties.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("idempotency_key", name="bookings_idempotency_key_key"),
    )
    op.create_index("ix_bookings_property_id", "bookings", ["property_id"])
    op.create_index("ix_bookings_guest_id", "bookings", ["guest_id"])
    op.create_index("ix_bookings_status", "bookings", ["status"])
    op.create_index(
        "ix_bookings_property_range", "bookings", ["property_id", "check_in", "check_out"]
    )

    op.create_table(
        "blocked_ranges",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("property_id", sa.Integer(), nullable=False),
        sa.Column("start_date", sa.Date(), nullable=False),
        sa.Column("end_date", sa.Date(), nullable=False),
        sa.Column("reason", sa.String(), nullable=False),
        sa.Column("created_by", sa.String(), nullable=False),
        sa.Column(
            "created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False
        ),
        sa.CheckConstraint("end_date > start_date", name="ck_blocked_ranges_interval"),
        sa.ForeignKeyConstraint(["property_id"], ["properties.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_blocked_ranges_property_id", "blocked_ranges", ["property_id"])
    op.create_index(
        "ix_blocked_ranges_property_range",
        "blocked_ranges",
        ["property_id", "start_date", "end_date"],
    )

    # Last line of defence against double booking: two active bookings of the
    # same property may not share a night, whatever path wrote them.
    if op.get_bind().dialect.name == "postgresql":
        op.execute("CREATE EXTENSION IF NOT EXISTS btree_gist")
        op.execute(
            """
            ALTER TABLE bookings
            ADD CONSTRAINT bookings_no_overlap_per_property
            EXCLUDE USING gist (
                property_id WITH =,
                daterange(check_in, check_out, '[)') WITH &&
            )
            WHERE (status IN ('PENDING', 'CONFIRMED'))
            """
        )


def downgrade() -> None:
    """Downgrade schema."""
    op.drop_table("blocked_ranges")
    op.drop_table("bookings")
    op.drop_table("properties")
