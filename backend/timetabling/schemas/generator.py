from __future__ import annotations

from pydantic import BaseModel, Field, field_validator, model_validator

from timetabling.core.config import get_settings
from timetabling.models.timetable_entry import DayOfWeek, PriorityLevel
from timetabling.schemas.timetable import TimetableEntry
from timetabling.services.time_utils import TIME_PATTERN, parse_time


def _default_working_days() -> list[DayOfWeek]:
    return [DayOfWeek(day) for day in get_settings().schedule_working_days]


def _default_day_start() -> str:
    return get_settings().schedule_day_start


def _default_day_end() -> str:
    return get_settings().schedule_day_end


def _default_break_minutes() -> int:
    return get_settings().schedule_break_minutes


def _default_max_periods() -> int:
    return get_settings().schedule_max_periods_per_day


class LunchBreak(BaseModel):
    start_time: str
    end_time: str

    @field_validator("start_time", "end_time")
    @classmethod
    def validate_time(cls, value: str) -> str:
        if not TIME_PATTERN.match(value):
            raise ValueError("Time must be in HH:MM 24-hour format")
        return value

    @model_validator(mode="after")
    def validate_time_order(self) -> "LunchBreak":
        if parse_time(self.end_time) <= parse_time(self.start_time):
            raise ValueError("Lunch break end time must be after start time")
        return self


class SubjectRequirement(BaseModel):
    subject_id: str = Field(min_length=1, max_length=36)
    subject_name: str = Field(min_length=1, max_length=100)
    teacher_id: str = Field(min_length=1, max_length=36)
    teacher_name: str = Field(min_length=1, max_length=100)
    periods_per_week: int = Field(ge=1, le=60)
    duration_minutes: int = Field(ge=5, le=480)
    priority_level: PriorityLevel = PriorityLevel.normal
    room_id: str | None = Field(default=None, max_length=36)
    room_name: str | None = Field(default=None, max_length=100)


class GenerationConstraints(BaseModel):
    # Informational only; slot search is bounded by the day window.
    max_periods_per_day: int = Field(default_factory=_default_max_periods, ge=1, le=24)
    break_duration_minutes: int = Field(default_factory=_default_break_minutes, ge=0, le=240)
    lunch_break: LunchBreak | None = None
    working_days: list[DayOfWeek] = Field(default_factory=_default_working_days, min_length=1, max_length=7)
    start_time: str = Field(default_factory=_default_day_start)
    end_time: str = Field(default_factory=_default_day_end)

    @field_validator("start_time", "end_time")
    @classmethod
    def validate_time(cls, value: str) -> str:
        if not TIME_PATTERN.match(value):
            raise ValueError("Time must be in HH:MM 24-hour format")
        return value

    @field_validator("working_days")
    @classmethod
    def validate_unique_days(cls, value: list[DayOfWeek]) -> list[DayOfWeek]:
        if len(set(value)) != len(value):
            raise ValueError("working_days must not repeat a day")
        return value

    @model_validator(mode="after")
    def validate_day_window(self) -> "GenerationConstraints":
        if parse_time(self.end_time) <= parse_time(self.start_time):
            raise ValueError("end_time must be after start_time")
        return self

    @property
    def day_start_minute(self) -> int:
        return parse_time(self.start_time)

    @property
    def day_end_minute(self) -> int:
        return parse_time(self.end_time)


class GenerateTimetableRequest(BaseModel):
    school_id: str = Field(min_length=1, max_length=36)
    academic_year: str = Field(min_length=1, max_length=20)
    grade_level: str = Field(min_length=1, max_length=50)
    section: str | None = Field(default=None, max_length=20)
    subjects: list[SubjectRequirement] = Field(min_length=1, max_length=100)
    constraints: GenerationConstraints = Field(default_factory=GenerationConstraints)

    @property
    def class_id(self) -> str:
        return class_id_for(self.school_id, self.grade_level, self.section)


class Shortfall(BaseModel):
    subject_name: str
    scheduled: int
    required: int


class GenerationResult(BaseModel):
    created: list[TimetableEntry] = Field(default_factory=list)
    shortfalls: list[Shortfall] = Field(default_factory=list)


def class_id_for(school_id: str, grade_level: str, section: str | None) -> str:
    suffix = f"-{section}" if section else ""
    return f"{school_id}-{grade_level}{suffix}"
