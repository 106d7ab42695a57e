from __future__ import annotations

import logging
import time
import uuid
from datetime import datetime
from typing import Literal

from timetabling.core.config import get_settings
from timetabling.core.exceptions import (
    AppError,
    InvalidTimeRangeError,
    ResourceNotFoundError,
    ScheduleConflictError,
    UniqueConstraintViolation,
)
from timetabling.models.timetable_entry import WEEKDAY_ORDER, DayOfWeek
from timetabling.schemas.conflict import Conflict, ConflictReport
from timetabling.schemas.generator import GenerateTimetableRequest, GenerationResult
from timetabling.schemas.statistics import (
    DashboardAlerts,
    DashboardOverview,
    DashboardPeriod,
    StatisticsScope,
    TimetableStatistics,
)
from timetabling.schemas.timetable import (
    BulkCreateResult,
    TimetableEntry,
    TimetableEntryCreate,
    TimetableEntryUpdate,
    TodayEntry,
    TodayOverview,
)
from timetabling.services import entry_lifecycle
from timetabling.services.conflict_service import ConflictService
from timetabling.services.entry_store import EntryStore
from timetabling.services.generation_lock import generation_lock
from timetabling.services.generator import TimetableGenerator
from timetabling.services.statistics import compute_statistics
from timetabling.services.time_utils import parse_time

logger = logging.getLogger(__name__)

# Changing any of these re-runs conflict detection on update.
SCHEDULING_FIELDS = {"day_of_week", "start_time", "end_time", "room_id", "teacher_id"}
CLEARABLE_FIELDS = {
    "period_number",
    "room_id",
    "room_name",
    "room_capacity",
    "room_type",
    "expected_students",
    "recurrence_end_date",
}


def _unique_conflict(entry: TimetableEntry) -> Conflict:
    return Conflict(
        conflict_type="unique_conflict",
        description=(
            f"Class already has an entry starting at {entry.start_time} on "
            f"{entry.day_of_week.value.capitalize()}."
        ),
    )


class TimetableService:
    def __init__(self, store: EntryStore, *, generator: TimetableGenerator | None = None) -> None:
        self.store = store
        self.conflicts = ConflictService(store)
        self.generator = generator or TimetableGenerator(store)

    # -- single entries -------------------------------------------------

    def get_entry(self, entry_id: str) -> TimetableEntry:
        entry = self.store.get(entry_id)
        if entry is None:
            raise ResourceNotFoundError("Timetable entry", entry_id)
        return entry

    def create_entry(self, payload: TimetableEntryCreate, created_by: str) -> TimetableEntry:
        entry = TimetableEntry(
            id=str(uuid.uuid4()),
            **payload.model_dump(),
            created_by=created_by,
            updated_by=created_by,
        )
        conflicts = self.conflicts.detect_conflicts(entry)
        if conflicts:
            raise ScheduleConflictError(conflicts)
        try:
            saved = self.store.create(entry)
        except UniqueConstraintViolation as exc:
            raise ScheduleConflictError([_unique_conflict(entry)]) from exc

        logger.info(
            "Created timetable entry for %s on %s at %s",
            saved.subject_name,
            saved.day_of_week.value,
            saved.start_time,
        )
        return saved

    def bulk_create(self, entries: list[TimetableEntryCreate], created_by: str) -> BulkCreateResult:
        created: list[TimetableEntry] = []
        errors: list[str] = []
        for payload in entries:
            try:
                created.append(self.create_entry(payload, created_by))
            except AppError as exc:
                errors.append(f"Entry {payload.subject_name}: {exc.message}")

        if errors:
            logger.warning("Bulk creation completed with %d errors: %s", len(errors), errors)
        logger.info("Bulk created %d timetable entries", len(created))
        return BulkCreateResult(created=created, errors=errors)

    def update_entry(self, entry_id: str, changes: TimetableEntryUpdate, updated_by: str) -> TimetableEntry:
        current = self.get_entry(entry_id)
        data = changes.model_dump(exclude_unset=True)

        start_time = data.get("start_time") or current.start_time
        end_time = data.get("end_time") or current.end_time
        start, end = parse_time(start_time), parse_time(end_time)
        if end <= start:
            raise InvalidTimeRangeError(start_time, end_time)

        merged = current.model_dump()
        merged.update({key: value for key, value in data.items() if value is not None or key in CLEARABLE_FIELDS})
        merged.update(start_time=start_time, end_time=end_time, duration_minutes=end - start, updated_by=updated_by)
        updated = TimetableEntry.model_validate(merged)

        if SCHEDULING_FIELDS & data.keys():
            conflicts = self.conflicts.detect_conflicts(updated)
            if conflicts:
                raise ScheduleConflictError(conflicts)

        try:
            saved = self.store.update(updated)
        except UniqueConstraintViolation as exc:
            raise ScheduleConflictError([_unique_conflict(updated)]) from exc
        logger.info("Updated timetable entry %s", entry_id)
        return saved

    def delete_entry(self, entry_id: str) -> None:
        entry = self.get_entry(entry_id)
        entry_lifecycle.ensure_deletable(entry)
        self.store.delete(entry_id)
        logger.info("Deleted timetable entry %s", entry_id)

    def publish_entry(self, entry_id: str) -> TimetableEntry:
        saved = self.store.update(entry_lifecycle.publish(self.get_entry(entry_id)))
        logger.info("Published timetable entry %s", entry_id)
        return saved

    def activate_entry(self, entry_id: str) -> TimetableEntry:
        saved = self.store.update(entry_lifecycle.activate(self.get_entry(entry_id)))
        logger.info("Activated timetable entry %s", entry_id)
        return saved

    def cancel_entry(self, entry_id: str, reason: str) -> TimetableEntry:
        saved = self.store.update(entry_lifecycle.cancel(self.get_entry(entry_id), reason))
        logger.info("Cancelled timetable entry %s: %s", entry_id, reason)
        return saved

    def record_conflict(
        self,
        entry_id: str,
        conflict_type: str,
        description: str,
        severity: Literal["low", "medium", "high"],
    ) -> TimetableEntry:
        entry = entry_lifecycle.add_conflict(self.get_entry(entry_id), conflict_type, description, severity)
        return self.store.update(entry)

    def resolve_conflict(self, entry_id: str, index: int, resolution: str) -> TimetableEntry:
        entry = entry_lifecycle.resolve_conflict(self.get_entry(entry_id), index, resolution)
        return self.store.update(entry)

    def mark_attendance(self, entry_id: str, attendance_count: int) -> TimetableEntry:
        entry = entry_lifecycle.mark_attendance(self.get_entry(entry_id), attendance_count)
        return self.store.update(entry)

    # -- listings -------------------------------------------------------

    def class_timetable(
        self,
        class_id: str,
        *,
        academic_year: str | None = None,
        grade_level: str | None = None,
        section: str | None = None,
        day: DayOfWeek | None = None,
        limit: int | None = None,
        offset: int | None = None,
    ) -> list[TimetableEntry]:
        return self.store.query(
            class_id=class_id,
            academic_year=academic_year,
            grade_level=grade_level,
            section=section,
            day=day,
            limit=limit,
            offset=offset,
        )

    def teacher_timetable(
        self,
        teacher_id: str,
        *,
        academic_year: str | None = None,
        day: DayOfWeek | None = None,
        limit: int | None = None,
        offset: int | None = None,
    ) -> list[TimetableEntry]:
        return self.store.query(
            teacher_id=teacher_id, academic_year=academic_year, day=day, limit=limit, offset=offset
        )

    def room_timetable(
        self,
        room_id: str,
        *,
        academic_year: str | None = None,
        day: DayOfWeek | None = None,
        limit: int | None = None,
        offset: int | None = None,
    ) -> list[TimetableEntry]:
        return self.store.query(room_id=room_id, academic_year=academic_year, day=day, limit=limit, offset=offset)

    # -- scheduling -----------------------------------------------------

    def check_conflicts(self, candidate: TimetableEntryCreate) -> list[Conflict]:
        return self.conflicts.detect_conflicts(candidate)

    def conflict_report(self, candidate: TimetableEntryCreate) -> ConflictReport:
        return self.conflicts.report(candidate)

    def generate_timetable(
        self,
        request: GenerateTimetableRequest,
        *,
        timeout_seconds: float | None = None,
    ) -> GenerationResult:
        deadline = None if timeout_seconds is None else time.monotonic() + timeout_seconds
        if not get_settings().generation_serialize_per_class:
            return self.generator.generate(request, deadline=deadline)
        with generation_lock(request.school_id, request.academic_year, request.class_id):
            return self.generator.generate(request, deadline=deadline)

    def get_statistics(self, scope: StatisticsScope) -> TimetableStatistics:
        entries = self.store.query(
            school_id=scope.school_id,
            academic_year=scope.academic_year,
            grade_level=scope.grade_level,
            section=scope.section,
        )
        return compute_statistics(entries)

    def dashboard_overview(self, scope: StatisticsScope, period: DashboardPeriod) -> DashboardOverview:
        """School-wide summary plus the counts that need attention.

        The period is echoed back; entries are weekly and carry no dates to filter on.
        """
        summary = self.get_statistics(scope)
        return DashboardOverview(
            summary=summary,
            period=period,
            alerts=DashboardAlerts(
                conflicts_count=summary.conflicts_count,
                unpublished_entries=summary.total_entries - summary.published_entries,
            ),
        )

    def today_overview(self, school_id: str, now: datetime) -> TodayOverview:
        today = WEEKDAY_ORDER[now.weekday()]
        entries = self.store.query(school_id=school_id, day=today)
        rows = [
            TodayEntry(
                entry=entry,
                in_progress=entry_lifecycle.is_in_progress(entry, now),
                upcoming=entry_lifecycle.is_upcoming(entry, now),
                minutes_until_start=entry_lifecycle.minutes_until_start(entry, now),
            )
            for entry in entries
            if not entry.is_cancelled
        ]
        return TodayOverview(
            day_of_week=today,
            total_entries=len(rows),
            in_progress=sum(1 for row in rows if row.in_progress),
            upcoming=sum(1 for row in rows if row.upcoming),
            entries=rows,
        )
