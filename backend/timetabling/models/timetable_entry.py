import uuid
from datetime import datetime
from enum import Enum

from sqlalchemy import (
    Boolean,
    DateTime,
    Enum as SAEnum,
    Float,
    Index,
    Integer,
    JSON,
    String,
    Text,
    text,
)
from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy.sql import func

from timetabling.db.base import Base


class DayOfWeek(str, Enum):
    monday = "monday"
    tuesday = "tuesday"
    wednesday = "wednesday"
    thursday = "thursday"
    friday = "friday"
    saturday = "saturday"
    sunday = "sunday"


# Indexed by datetime.weekday().
WEEKDAY_ORDER: list[DayOfWeek] = [
    DayOfWeek.monday,
    DayOfWeek.tuesday,
    DayOfWeek.wednesday,
    DayOfWeek.thursday,
    DayOfWeek.friday,
    DayOfWeek.saturday,
    DayOfWeek.sunday,
]


class PeriodType(str, Enum):
    regular_class = "regular_class"
    lab_session = "lab_session"
    practical = "practical"
    break_ = "break"
    lunch = "lunch"
    assembly = "assembly"
    exam = "exam"
    special_event = "special_event"
    sports = "sports"
    club_activity = "club_activity"
    study_period = "study_period"
    office_hours = "office_hours"
    other = "other"


class EntryStatus(str, Enum):
    draft = "draft"
    published = "published"
    active = "active"
    archived = "archived"
    cancelled = "cancelled"


# Statuses that still occupy a slot for conflict purposes.
NON_TERMINAL_STATUSES = (EntryStatus.draft, EntryStatus.published, EntryStatus.active)


class RecurrenceType(str, Enum):
    none = "none"
    daily = "daily"
    weekly = "weekly"
    monthly = "monthly"
    custom = "custom"


class PriorityLevel(str, Enum):
    low = "low"
    normal = "normal"
    high = "high"
    urgent = "urgent"


PRIORITY_RANK: dict[PriorityLevel, int] = {
    PriorityLevel.urgent: 3,
    PriorityLevel.high: 2,
    PriorityLevel.normal: 1,
    PriorityLevel.low: 0,
}


SCHEDULED_STATUS_CLAUSE = "status IN ('draft', 'published', 'active')"


def _enum_values(enum_cls: type[Enum]) -> list[str]:
    return [member.value for member in enum_cls]


class TimetableEntryRecord(Base):
    __tablename__ = "timetable_entries"
    __table_args__ = (
        # Cancelled and archived rows release their start time.
        Index(
            "uq_timetable_entries_class_day_start",
            "school_id",
            "academic_year",
            "grade_level",
            "section",
            "day_of_week",
            "start_time",
            unique=True,
            sqlite_where=text(SCHEDULED_STATUS_CLAUSE),
            postgresql_where=text(SCHEDULED_STATUS_CLAUSE),
        ),
        Index("ix_timetable_entries_school_year", "school_id", "academic_year"),
        Index("ix_timetable_entries_teacher_day_year", "teacher_id", "day_of_week", "academic_year"),
        Index("ix_timetable_entries_room_day_year", "room_id", "day_of_week", "academic_year"),
        Index("ix_timetable_entries_class_section_day_year", "class_id", "section", "day_of_week", "academic_year"),
        Index("ix_timetable_entries_status_year", "status", "academic_year"),
    )

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))

    school_id: Mapped[str] = mapped_column(String(36), nullable=False)
    academic_year: Mapped[str] = mapped_column(String(20), nullable=False)
    grade_level: Mapped[str] = mapped_column(String(50), nullable=False)
    section: Mapped[str | None] = mapped_column(String(20), nullable=True)
    class_id: Mapped[str] = mapped_column(String(120), nullable=False)

    subject_id: Mapped[str] = mapped_column(String(36), nullable=False)
    subject_name: Mapped[str] = mapped_column(String(100), nullable=False)
    teacher_id: Mapped[str] = mapped_column(String(36), nullable=False)
    teacher_name: Mapped[str] = mapped_column(String(100), nullable=False)

    day_of_week: Mapped[DayOfWeek] = mapped_column(SAEnum(DayOfWeek, name="day_of_week", values_callable=_enum_values), nullable=False)
    start_time: Mapped[str] = mapped_column(String(5), nullable=False)
    end_time: Mapped[str] = mapped_column(String(5), nullable=False)
    duration_minutes: Mapped[int] = mapped_column(Integer, nullable=False)
    period_number: Mapped[int | None] = mapped_column(Integer, nullable=True)
    period_type: Mapped[PeriodType] = mapped_column(
        SAEnum(PeriodType, name="period_type", values_callable=_enum_values), nullable=False, default=PeriodType.regular_class
    )

    room_id: Mapped[str | None] = mapped_column(String(36), nullable=True)
    room_name: Mapped[str | None] = mapped_column(String(100), nullable=True)
    room_capacity: Mapped[int | None] = mapped_column(Integer, nullable=True)
    room_type: Mapped[str | None] = mapped_column(String(50), nullable=True)
    equipment_required: Mapped[list[dict]] = mapped_column(JSON, nullable=False, default=list)
    expected_students: Mapped[int | None] = mapped_column(Integer, nullable=True)

    status: Mapped[EntryStatus] = mapped_column(
        SAEnum(EntryStatus, name="timetable_entry_status", values_callable=_enum_values), nullable=False, default=EntryStatus.draft
    )
    is_cancelled: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    cancellation_reason: Mapped[str | None] = mapped_column(Text, nullable=True)

    priority_level: Mapped[PriorityLevel] = mapped_column(
        SAEnum(PriorityLevel, name="priority_level", values_callable=_enum_values), nullable=False, default=PriorityLevel.normal
    )
    is_fixed: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    recurrence_type: Mapped[RecurrenceType] = mapped_column(
        SAEnum(RecurrenceType, name="recurrence_type", values_callable=_enum_values), nullable=False, default=RecurrenceType.weekly
    )
    recurrence_end_date: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)

    has_conflicts: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    conflict_details: Mapped[list[dict]] = mapped_column(JSON, nullable=False, default=list)

    actual_students: Mapped[int | None] = mapped_column(Integer, nullable=True)
    attendance_marked: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    average_attendance_rate: Mapped[float | None] = mapped_column(Float, nullable=True)

    created_by: Mapped[str | None] = mapped_column(String(36), nullable=True)
    updated_by: Mapped[str | None] = mapped_column(String(36), nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now())
    updated_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), onupdate=func.now())
