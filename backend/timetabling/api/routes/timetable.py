from __future__ import annotations

from datetime import date, datetime
from typing import Literal

from fastapi import APIRouter, Depends, Header, Query, Response, status
from pydantic import BaseModel, Field

from timetabling.api.deps import get_timetable_service
from timetabling.models.timetable_entry import DayOfWeek
from timetabling.schemas.conflict import ConflictReport
from timetabling.schemas.generator import GenerateTimetableRequest, GenerationResult
from timetabling.schemas.statistics import (
    DashboardOverview,
    DashboardPeriod,
    StatisticsScope,
    TimetableStatistics,
)
from timetabling.schemas.timetable import (
    BulkCreateRequest,
    BulkCreateResult,
    CancelEntryRequest,
    TimetableEntry,
    TimetableEntryCreate,
    TimetableEntryUpdate,
    TodayOverview,
)
from timetabling.services.timetable_service import TimetableService

router = APIRouter()

DEFAULT_ACTOR = "api"


class RecordConflictRequest(BaseModel):
    conflict_type: str = Field(min_length=1, max_length=50)
    description: str = Field(min_length=1, max_length=500)
    severity: Literal["low", "medium", "high"] = "high"


class ResolveConflictRequest(BaseModel):
    resolution: str = Field(min_length=1, max_length=500)


class AttendanceRequest(BaseModel):
    attendance_count: int = Field(ge=0)


def get_actor(x_actor_id: str | None = Header(default=None)) -> str:
    return (x_actor_id or "").strip() or DEFAULT_ACTOR


# Static paths are registered before "/{entry_id}" so they are not captured by it.


@router.post("", response_model=TimetableEntry, status_code=status.HTTP_201_CREATED)
def create_entry(
    payload: TimetableEntryCreate,
    actor: str = Depends(get_actor),
    service: TimetableService = Depends(get_timetable_service),
) -> TimetableEntry:
    return service.create_entry(payload, actor)


@router.post("/bulk", response_model=BulkCreateResult, status_code=status.HTTP_201_CREATED)
def bulk_create_entries(
    payload: BulkCreateRequest,
    actor: str = Depends(get_actor),
    service: TimetableService = Depends(get_timetable_service),
) -> BulkCreateResult:
    return service.bulk_create(payload.entries, actor)


@router.post("/conflicts/check", response_model=ConflictReport)
def check_conflicts(
    payload: TimetableEntryCreate,
    service: TimetableService = Depends(get_timetable_service),
) -> ConflictReport:
    return service.conflict_report(payload)


@router.post("/generate", response_model=GenerationResult, status_code=status.HTTP_201_CREATED)
def generate_timetable(
    payload: GenerateTimetableRequest,
    timeout_seconds: float | None = Query(default=None, gt=0, le=600),
    service: TimetableService = Depends(get_timetable_service),
) -> GenerationResult:
    return service.generate_timetable(payload, timeout_seconds=timeout_seconds)


@router.get("/statistics/overview", response_model=TimetableStatistics)
def statistics_overview(
    school_id: str = Query(min_length=1, max_length=36),
    academic_year: str | None = Query(default=None, max_length=20),
    grade_level: str | None = Query(default=None, max_length=50),
    section: str | None = Query(default=None, max_length=20),
    service: TimetableService = Depends(get_timetable_service),
) -> TimetableStatistics:
    scope = StatisticsScope(
        school_id=school_id,
        academic_year=academic_year,
        grade_level=grade_level,
        section=section,
    )
    return service.get_statistics(scope)


@router.get("/dashboard/overview", response_model=DashboardOverview)
def dashboard_overview(
    school_id: str = Query(min_length=1, max_length=36),
    academic_year: str | None = Query(default=None, max_length=20),
    start_date: date | None = None,
    end_date: date | None = None,
    service: TimetableService = Depends(get_timetable_service),
) -> DashboardOverview:
    return service.dashboard_overview(
        StatisticsScope(school_id=school_id, academic_year=academic_year),
        DashboardPeriod(academic_year=academic_year, start_date=start_date, end_date=end_date),
    )


@router.get("/today/overview", response_model=TodayOverview)
def today_overview(
    school_id: str = Query(min_length=1, max_length=36),
    service: TimetableService = Depends(get_timetable_service),
) -> TodayOverview:
    return service.today_overview(school_id, datetime.now())


@router.get("/class/{class_id}", response_model=list[TimetableEntry])
def class_timetable(
    class_id: str,
    academic_year: str | None = Query(default=None, max_length=20),
    grade_level: str | None = Query(default=None, max_length=50),
    section: str | None = Query(default=None, max_length=20),
    day: DayOfWeek | None = None,
    limit: int | None = Query(default=None, ge=1, le=500),
    offset: int | None = Query(default=None, ge=0),
    service: TimetableService = Depends(get_timetable_service),
) -> list[TimetableEntry]:
    return service.class_timetable(
        class_id,
        academic_year=academic_year,
        grade_level=grade_level,
        section=section,
        day=day,
        limit=limit,
        offset=offset,
    )


@router.get("/teacher/{teacher_id}", response_model=list[TimetableEntry])
def teacher_timetable(
    teacher_id: str,
    academic_year: str | None = Query(default=None, max_length=20),
    day: DayOfWeek | None = None,
    limit: int | None = Query(default=None, ge=1, le=500),
    offset: int | None = Query(default=None, ge=0),
    service: TimetableService = Depends(get_timetable_service),
) -> list[TimetableEntry]:
    return service.teacher_timetable(teacher_id, academic_year=academic_year, day=day, limit=limit, offset=offset)


@router.get("/room/{room_id}", response_model=list[TimetableEntry])
def room_timetable(
    room_id: str,
    academic_year: str | None = Query(default=None, max_length=20),
    day: DayOfWeek | None = None,
    limit: int | None = Query(default=None, ge=1, le=500),
    offset: int | None = Query(default=None, ge=0),
    service: TimetableService = Depends(get_timetable_service),
) -> list[TimetableEntry]:
    return service.room_timetable(room_id, academic_year=academic_year, day=day, limit=limit, offset=offset)


@router.get("/{entry_id}", response_model=TimetableEntry)
def get_entry(
    entry_id: str,
    service: TimetableService = Depends(get_timetable_service),
) -> TimetableEntry:
    return service.get_entry(entry_id)


@router.put("/{entry_id}", response_model=TimetableEntry)
def update_entry(
    entry_id: str,
    payload: TimetableEntryUpdate,
    actor: str = Depends(get_actor),
    service: TimetableService = Depends(get_timetable_service),
) -> TimetableEntry:
    return service.update_entry(entry_id, payload, actor)


@router.delete("/{entry_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_entry(
    entry_id: str,
    service: TimetableService = Depends(get_timetable_service),
) -> Response:
    service.delete_entry(entry_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.put("/{entry_id}/publish", response_model=TimetableEntry)
def publish_entry(
    entry_id: str,
    service: TimetableService = Depends(get_timetable_service),
) -> TimetableEntry:
    return service.publish_entry(entry_id)


@router.put("/{entry_id}/activate", response_model=TimetableEntry)
def activate_entry(
    entry_id: str,
    service: TimetableService = Depends(get_timetable_service),
) -> TimetableEntry:
    return service.activate_entry(entry_id)


@router.put("/{entry_id}/cancel", response_model=TimetableEntry)
def cancel_entry(
    entry_id: str,
    payload: CancelEntryRequest,
    service: TimetableService = Depends(get_timetable_service),
) -> TimetableEntry:
    return service.cancel_entry(entry_id, payload.reason)


@router.post("/{entry_id}/conflicts", response_model=TimetableEntry)
def record_conflict(
    entry_id: str,
    payload: RecordConflictRequest,
    service: TimetableService = Depends(get_timetable_service),
) -> TimetableEntry:
    return service.record_conflict(entry_id, payload.conflict_type, payload.description, payload.severity)


@router.put("/{entry_id}/conflicts/{index}/resolve", response_model=TimetableEntry)
def resolve_conflict(
    entry_id: str,
    index: int,
    payload: ResolveConflictRequest,
    service: TimetableService = Depends(get_timetable_service),
) -> TimetableEntry:
    return service.resolve_conflict(entry_id, index, payload.resolution)


@router.put("/{entry_id}/attendance", response_model=TimetableEntry)
def mark_attendance(
    entry_id: str,
    payload: AttendanceRequest,
    service: TimetableService = Depends(get_timetable_service),
) -> TimetableEntry:
    return service.mark_attendance(entry_id, payload.attendance_count)
