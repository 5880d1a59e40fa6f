from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

revision = "0001_initial"
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    schedule_rule = postgresql.ENUM(
        "standard", "first_sunday_of_month", name="schedulerule", create_type=False
    )
    schedule_rule.create(op.get_bind(), checkfirst=True)
    capacity_class = postgresql.ENUM(
        "standard", "pottery_wheel", name="capacityclass", create_type=False
    )
    capacity_class.create(op.get_bind(), checkfirst=True)

    op.create_table(
        "courses",
        sa.Column("id", sa.String(length=128), primary_key=True),
        sa.Column("title", sa.String(length=255), nullable=False),
        sa.Column("description", sa.Text()),
        sa.Column("capacity", sa.Integer()),
        sa.Column("schedule_rule", schedule_rule, nullable=False, server_default="standard"),
        sa.Column("capacity_class", capacity_class, nullable=False, server_default="standard"),
        sa.Column("is_active", sa.Boolean(), server_default=sa.true()),
        sa.CheckConstraint("capacity IS NULL OR capacity > 0", name="ck_course_capacity_positive"),
    )

    op.create_table(
        "course_schedule",
        sa.Column("id", sa.String(length=36), primary_key=True),
        sa.Column("course_id", sa.String(length=128), sa.ForeignKey("courses.id", ondelete="CASCADE")),
        sa.Column("day_of_week", sa.Integer(), nullable=False),
        sa.Column("start_time", sa.String(length=8), nullable=False),
        sa.Column("end_time", sa.String(length=8), nullable=False),
        sa.Column("is_active", sa.Boolean(), server_default=sa.true()),
        sa.CheckConstraint("day_of_week BETWEEN 0 AND 6", name="ck_course_schedule_day_of_week"),
    )
    op.create_index("ix_course_schedule_course_id", "course_schedule", ["course_id"])

    op.create_table(
        "first_sunday_schedule",
        sa.Column("id", sa.String(length=36), primary_key=True),
        sa.Column("course_id", sa.String(length=128), sa.ForeignKey("courses.id", ondelete="CASCADE")),
        sa.Column("start_time", sa.String(length=8), nullable=False),
        sa.Column("end_time", sa.String(length=8), nullable=False),
        sa.Column("is_active", sa.Boolean(), server_default=sa.true()),
    )
    op.create_index("ix_first_sunday_schedule_course_id", "first_sunday_schedule", ["course_id"])

    op.create_table(
        "date_overrides",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("course_id", sa.String(length=128), sa.ForeignKey("courses.id", ondelete="CASCADE")),
        sa.Column("override_date", sa.Date(), nullable=False),
        sa.Column("is_available", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.UniqueConstraint("course_id", "override_date", name="uq_date_override_course_date"),
    )
    op.create_index("ix_date_overrides_override_date", "date_overrides", ["override_date"])

    op.create_table(
        "date_override_time_slots",
        sa.Column("id", sa.String(length=36), primary_key=True),
        sa.Column("override_id", sa.Integer(), sa.ForeignKey("date_overrides.id", ondelete="CASCADE")),
        sa.Column("start_time", sa.String(length=8), nullable=False),
        sa.Column("end_time", sa.String(length=8), nullable=False),
        sa.Column("is_active", sa.Boolean(), server_default=sa.true()),
    )
    op.create_index(
        "ix_date_override_time_slots_override_id", "date_override_time_slots", ["override_id"]
    )

    booking_status = postgresql.ENUM(
        "pending", "confirmed", "completed", "cancelled", name="bookingstatus", create_type=False
    )
    booking_status.create(op.get_bind(), checkfirst=True)

    op.create_table(
        "bookings",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("course_id", sa.String(length=128), sa.ForeignKey("courses.id", ondelete="CASCADE")),
        sa.Column("slot_reference_id", sa.String(length=36), nullable=False),
        sa.Column("booking_date", sa.Date(), nullable=False),
        sa.Column("start_time", sa.String(length=8), nullable=False),
        sa.Column("end_time", sa.String(length=8), nullable=False),
        sa.Column("participants", sa.Integer(), nullable=False, server_default="1"),
        sa.Column("status", booking_status, server_default="confirmed"),
        sa.Column("customer_name", sa.String(length=255), nullable=False),
        sa.Column("customer_email", sa.String(length=255), nullable=False),
        sa.Column("notes", sa.Text()),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column("cancelled_at", sa.DateTime(timezone=True)),
        sa.Column("cancelled_by", sa.String(length=64)),
        sa.CheckConstraint("participants >= 1", name="ck_booking_participants_positive"),
    )
    op.create_index("ix_booking_slot_date", "bookings", ["slot_reference_id", "booking_date"])

    waitlist_status = postgresql.ENUM(
        "pending", "notified", "converted", "cancelled", name="waitliststatus", create_type=False
    )
    waitlist_status.create(op.get_bind(), checkfirst=True)

    op.create_table(
        "waitlist",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("course_id", sa.String(length=128), sa.ForeignKey("courses.id", ondelete="CASCADE")),
        sa.Column("customer_name", sa.String(length=255), nullable=False),
        sa.Column("customer_email", sa.String(length=255), nullable=False),
        sa.Column("participants", sa.Integer(), nullable=False, server_default="1"),
        sa.Column("participant_names", sa.Text()),
        sa.Column("auto_book", sa.Boolean(), server_default=sa.false()),
        sa.Column("status", waitlist_status, server_default="pending"),
        sa.Column("converted_booking_id", sa.Integer(), sa.ForeignKey("bookings.id", ondelete="SET NULL")),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column("notified_at", sa.DateTime(timezone=True)),
        sa.Column("converted_at", sa.DateTime(timezone=True)),
    )
    op.create_index("ix_waitlist_course_id", "waitlist", ["course_id"])


def downgrade() -> None:
    op.drop_index("ix_waitlist_course_id", table_name="waitlist")
    op.drop_table("waitlist")
    op.drop_index("ix_booking_slot_date", table_name="bookings")
    op.drop_table("bookings")
    op.drop_index("ix_date_override_time_slots_override_id", table_name="date_override_time_slots")
    op.drop_table("date_override_time_slots")
    op.drop_index("ix_date_overrides_override_date", table_name="date_overrides")
    op.drop_table("date_overrides")
    op.drop_index("ix_first_sunday_schedule_course_id", table_name="first_sunday_schedule")
    op.drop_table("first_sunday_schedule")
    op.drop_index("ix_course_schedule_course_id", table_name="course_schedule")
    op.drop_table("course_schedule")
    op.drop_table("courses")
    for name in ("waitliststatus", "bookingstatus", "capacityclass", "schedulerule"):
        postgresql.ENUM(name=name).drop(op.get_bind(), checkfirst=True)
