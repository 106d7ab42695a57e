"""create timetable entries

Revision ID: 20261016_0001
Revises:
Create Date: 2026-10-16 00:00:00.000000

"""
from alembic import op
import sqlalchemy as sa

revision = "20261016_0001"
down_revision = None
branch_labels = None
depends_on = None

DAY_OF_WEEK = ("monday", "tuesday", "wednesday", "thursday", "friday", "saturday", "sunday")
PERIOD_TYPE = (
    "regular_class",
    "lab_session",
    "practical",
    "break",
    "lunch",
    "assembly",
    "exam",
    "special_event",
    "sports",
    "club_activity",
    "study_period",
    "office_hours",
    "other",
)
ENTRY_STATUS = ("draft", "published", "active", "archived", "cancelled")
PRIORITY_LEVEL = ("low", "normal", "high", "urgent")
RECURRENCE_TYPE = ("none", "daily", "weekly", "monthly", "custom")
SCHEDULED_STATUS_CLAUSE = "status IN ('draft', 'published', 'active')"


def upgrade() -> None:
    op.create_table(
        "timetable_entries",
        sa.Column("id", sa.String(length=36), primary_key=True, nullable=False),
        sa.Column("school_id", sa.String(length=36), nullable=False),
        sa.Column("academic_year", sa.String(length=20), nullable=False),
        sa.Column("grade_level", sa.String(length=50), nullable=False),
        sa.Column("section", sa.String(length=20), nullable=True),
        sa.Column("class_id", sa.String(length=120), nullable=False),
        sa.Column("subject_id", sa.String(length=36), nullable=False),
        sa.Column("subject_name", sa.String(length=100), nullable=False),
        sa.Column("teacher_id", sa.String(length=36), nullable=False),
        sa.Column("teacher_name", sa.String(length=100), nullable=False),
        sa.Column("day_of_week", sa.Enum(*DAY_OF_WEEK, name="day_of_week"), nullable=False),
        sa.Column("start_time", sa.String(length=5), nullable=False),
        sa.Column("end_time", sa.String(length=5), nullable=False),
        sa.Column("duration_minutes", sa.Integer(), nullable=False),
        sa.Column("period_number", sa.Integer(), nullable=True),
        sa.Column("period_type", sa.Enum(*PERIOD_TYPE, name="period_type"), nullable=False),
        sa.Column("room_id", sa.String(length=36), nullable=True),
        sa.Column("room_name", sa.String(length=100), nullable=True),
        sa.Column("room_capacity", sa.Integer(), nullable=True),
        sa.Column("room_type", sa.String(length=50), nullable=True),
        sa.Column("equipment_required", sa.JSON(), nullable=False),
        sa.Column("expected_students", sa.Integer(), nullable=True),
        sa.Column("status", sa.Enum(*ENTRY_STATUS, name="timetable_entry_status"), nullable=False),
        sa.Column("is_cancelled", sa.Boolean(), nullable=False, server_default=sa.text("false")),
        sa.Column("cancellation_reason", sa.Text(), nullable=True),
        sa.Column("priority_level", sa.Enum(*PRIORITY_LEVEL, name="priority_level"), nullable=False),
        sa.Column("is_fixed", sa.Boolean(), nullable=False, server_default=sa.text("false")),
        sa.Column("recurrence_type", sa.Enum(*RECURRENCE_TYPE, name="recurrence_type"), nullable=False),
        sa.Column("recurrence_end_date", sa.DateTime(timezone=True), nullable=True),
        sa.Column("has_conflicts", sa.Boolean(), nullable=False, server_default=sa.text("false")),
        sa.Column("conflict_details", sa.JSON(), nullable=False),
        sa.Column("actual_students", sa.Integer(), nullable=True),
        sa.Column("attendance_marked", sa.Boolean(), nullable=False, server_default=sa.text("false")),
        sa.Column("average_attendance_rate", sa.Float(), nullable=True),
        sa.Column("created_by", sa.String(length=36), nullable=True),
        sa.Column("updated_by", sa.String(length=36), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=True),
    )
    op.create_index(
        "uq_timetable_entries_class_day_start",
        "timetable_entries",
        ["school_id", "academic_year", "grade_level", "section", "day_of_week", "start_time"],
        unique=True,
        sqlite_where=sa.text(SCHEDULED_STATUS_CLAUSE),
        postgresql_where=sa.text(SCHEDULED_STATUS_CLAUSE),
    )
    op.create_index("ix_timetable_entries_school_year", "timetable_entries", ["school_id", "academic_year"])
    op.create_index(
        "ix_timetable_entries_teacher_day_year",
        "timetable_entries",
        ["teacher_id", "day_of_week", "academic_year"],
    )
    op.create_index(
        "ix_timetable_entries_room_day_year",
        "timetable_entries",
        ["room_id", "day_of_week", "academic_year"],
    )
    op.create_index(
        "ix_timetable_entries_class_section_day_year",
        "timetable_entries",
        ["class_id", "section", "day_of_week", "academic_year"],
    )
    op.create_index("ix_timetable_entries_status_year", "timetable_entries", ["status", "academic_year"])


def downgrade() -> None:
    op.drop_index("ix_timetable_entries_status_year", table_name="timetable_entries")
    op.drop_index("ix_timetable_entries_class_section_day_year", table_name="timetable_entries")
    op.drop_index("ix_timetable_entries_room_day_year", table_name="timetable_entries")
    op.drop_index("ix_timetable_entries_teacher_day_year", table_name="timetable_entries")
    op.drop_index("ix_timetable_entries_school_year", table_name="timetable_entries")
    op.drop_index("uq_timetable_entries_class_day_start", table_name="timetable_entries")
    op.drop_table("timetable_entries")
    bind = op.get_bind()
    for enum_name in ("recurrence_type", "priority_level", "timetable_entry_status", "period_type", "day_of_week"):
        sa.Enum(name=enum_name).drop(bind, checkfirst=True)
