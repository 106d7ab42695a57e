from __future__ import annotations

from datetime import date

from pydantic import BaseModel, Field


class StatisticsScope(BaseModel):
    school_id: str = Field(min_length=1, max_length=36)
    academic_year: str | None = Field(default=None, max_length=20)
    grade_level: str | None = Field(default=None, max_length=50)
    section: str | None = Field(default=None, max_length=20)


class TimetableStatistics(BaseModel):
    total_entries: int
    published_entries: int
    active_entries: int
    conflicts_count: int
    utilization_rate: float
    average_periods_per_day: float
    teacher_workload: dict[str, int] = Field(default_factory=dict)
    room_utilization: dict[str, int] = Field(default_factory=dict)


class DashboardPeriod(BaseModel):
    academic_year: str | None = None
    start_date: date | None = None
    end_date: date | None = None


class DashboardAlerts(BaseModel):
    conflicts_count: int
    unpublished_entries: int


class DashboardOverview(BaseModel):
    summary: TimetableStatistics
    period: DashboardPeriod
    alerts: DashboardAlerts
