from __future__ import annotations

from datetime import datetime
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from timetabling.models.timetable_entry import (
    NON_TERMINAL_STATUSES,
    DayOfWeek,
    EntryStatus,
    PeriodType,
    PriorityLevel,
    RecurrenceType,
)
from timetabling.services.time_utils import TIME_PATTERN, parse_time


def _check_time(value: str) -> str:
    if not TIME_PATTERN.match(value):
        raise ValueError("Time must be in HH:MM 24-hour format")
    return value


class EquipmentRequirement(BaseModel):
    equipment_id: str = Field(min_length=1, max_length=36)
    equipment_name: str = Field(min_length=1, max_length=100)
    quantity: int = Field(default=1, ge=1, le=1000)


class ConflictDetailEntry(BaseModel):
    conflict_type: str = Field(min_length=1, max_length=50)
    description: str
    severity: Literal["low", "medium", "high"]
    resolution: str | None = None


class TimetableEntryCreate(BaseModel):
    school_id: str = Field(min_length=1, max_length=36)
    academic_year: str = Field(min_length=1, max_length=20)
    grade_level: str = Field(min_length=1, max_length=50)
    section: str | None = Field(default=None, max_length=20)
    class_id: str = Field(min_length=1, max_length=120)
    subject_id: str = Field(min_length=1, max_length=36)
    subject_name: str = Field(min_length=1, max_length=100)
    teacher_id: str = Field(min_length=1, max_length=36)
    teacher_name: str = Field(min_length=1, max_length=100)

    day_of_week: DayOfWeek
    start_time: str
    end_time: str
    duration_minutes: int | None = Field(default=None, ge=1, le=24 * 60)
    period_number: int | None = Field(default=None, ge=1, le=24)
    period_type: PeriodType = PeriodType.regular_class

    room_id: str | None = Field(default=None, max_length=36)
    room_name: str | None = Field(default=None, max_length=100)
    room_capacity: int | None = Field(default=None, ge=1)
    room_type: str | None = Field(default=None, max_length=50)
    equipment_required: list[EquipmentRequirement] = Field(default_factory=list)
    expected_students: int | None = Field(default=None, ge=0)

    priority_level: PriorityLevel = PriorityLevel.normal
    is_fixed: bool = False
    recurrence_type: RecurrenceType = RecurrenceType.weekly
    recurrence_end_date: datetime | None = None

    @field_validator("start_time", "end_time")
    @classmethod
    def validate_time(cls, value: str) -> str:
        return _check_time(value)

    @model_validator(mode="after")
    def validate_timing(self) -> "TimetableEntryCreate":
        start = parse_time(self.start_time)
        end = parse_time(self.end_time)
        if end <= start:
            raise ValueError("end_time must be after start_time")
        if self.duration_minutes is None:
            self.duration_minutes = end - start
        elif self.duration_minutes != end - start:
            raise ValueError("duration_minutes must equal the minutes between start_time and end_time")
        return self

    @property
    def start_minute(self) -> int:
        return parse_time(self.start_time)

    @property
    def end_minute(self) -> int:
        return parse_time(self.end_time)


class TimetableEntry(TimetableEntryCreate):
    id: str
    status: EntryStatus = EntryStatus.draft
    is_cancelled: bool = False
    cancellation_reason: str | None = None
    has_conflicts: bool = False
    conflict_details: list[ConflictDetailEntry] = Field(default_factory=list)
    actual_students: int | None = None
    attendance_marked: bool = False
    average_attendance_rate: float | None = None
    created_by: str | None = None
    updated_by: str | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None

    model_config = ConfigDict(from_attributes=True)

    @property
    def is_schedulable(self) -> bool:
        return self.status in NON_TERMINAL_STATUSES


class TimetableEntryUpdate(BaseModel):
    subject_name: str | None = Field(default=None, min_length=1, max_length=100)
    teacher_id: str | None = Field(default=None, min_length=1, max_length=36)
    teacher_name: str | None = Field(default=None, min_length=1, max_length=100)
    day_of_week: DayOfWeek | None = None
    start_time: str | None = None
    end_time: str | None = None
    period_number: int | None = Field(default=None, ge=1, le=24)
    period_type: PeriodType | None = None
    room_id: str | None = Field(default=None, max_length=36)
    room_name: str | None = Field(default=None, max_length=100)
    room_capacity: int | None = Field(default=None, ge=1)
    room_type: str | None = Field(default=None, max_length=50)
    equipment_required: list[EquipmentRequirement] | None = None
    expected_students: int | None = Field(default=None, ge=0)
    priority_level: PriorityLevel | None = None
    is_fixed: bool | None = None
    recurrence_type: RecurrenceType | None = None
    recurrence_end_date: datetime | None = None

    @field_validator("start_time", "end_time")
    @classmethod
    def validate_time(cls, value: str | None) -> str | None:
        if value is None:
            return value
        return _check_time(value)


class BulkCreateRequest(BaseModel):
    entries: list[TimetableEntryCreate] = Field(min_length=1, max_length=500)


class BulkCreateResult(BaseModel):
    created: list[TimetableEntry]
    errors: list[str]


class CancelEntryRequest(BaseModel):
    reason: str = Field(min_length=1, max_length=500)


class TodayEntry(BaseModel):
    entry: TimetableEntry
    in_progress: bool
    upcoming: bool
    minutes_until_start: int


class TodayOverview(BaseModel):
    day_of_week: DayOfWeek
    total_entries: int
    in_progress: int
    upcoming: int
    entries: list[TodayEntry]
