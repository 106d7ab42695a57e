from __future__ import annotations

import logging
import time
import uuid
from typing import Callable

from timetabling.core.exceptions import UniqueConstraintViolation
from timetabling.models.timetable_entry import PRIORITY_RANK, DayOfWeek, EntryStatus
from timetabling.schemas.generator import (
    GenerateTimetableRequest,
    GenerationResult,
    Shortfall,
    SubjectRequirement,
)
from timetabling.schemas.timetable import TimetableEntry
from timetabling.services.conflict_service import ConflictService
from timetabling.services.entry_store import EntryStore
from timetabling.services.slot_finder import Interval, find_available_slots
from timetabling.services.time_utils import parse_time

logger = logging.getLogger(__name__)

SYSTEM_ACTOR = "system"


def priority_order(subjects: list[SubjectRequirement]) -> list[SubjectRequirement]:
    # sorted() is stable, so equal priorities keep request order.
    return sorted(subjects, key=lambda subject: PRIORITY_RANK[subject.priority_level], reverse=True)


class TimetableGenerator:
    """Greedy weekly schedule builder.

    Subjects are placed in priority order, days in request order, slots in
    first-fit order. Each accepted entry is written to the store before the
    next candidate is checked, so later candidates see earlier placements.
    There is no backtracking: a subject that cannot be fully placed is
    reported as a shortfall and the run moves on.
    """

    def __init__(
        self,
        store: EntryStore,
        *,
        clock: Callable[[], float] = time.monotonic,
        id_factory: Callable[[], str] = lambda: str(uuid.uuid4()),
    ) -> None:
        self.store = store
        self.conflicts = ConflictService(store)
        self.clock = clock
        self.id_factory = id_factory

    def generate(self, request: GenerateTimetableRequest, *, deadline: float | None = None) -> GenerationResult:
        constraints = request.constraints
        lunch_break = None
        if constraints.lunch_break is not None:
            lunch_break = Interval(
                parse_time(constraints.lunch_break.start_time),
                parse_time(constraints.lunch_break.end_time),
            )

        result = GenerationResult()
        for subject in priority_order(request.subjects):
            if deadline is not None and self.clock() >= deadline:
                logger.warning(
                    "Generation deadline reached before scheduling %s for class %s",
                    subject.subject_name,
                    request.class_id,
                )
                result.shortfalls.append(
                    Shortfall(subject_name=subject.subject_name, scheduled=0, required=subject.periods_per_week)
                )
                continue

            scheduled = 0
            for day in constraints.working_days:
                if scheduled >= subject.periods_per_week:
                    break
                created = self._schedule_day(request, subject, day, lunch_break, subject.periods_per_week - scheduled)
                result.created.extend(created)
                scheduled += len(created)

            if scheduled < subject.periods_per_week:
                logger.warning(
                    "Could not schedule all %d periods for %s. Only %d scheduled.",
                    subject.periods_per_week,
                    subject.subject_name,
                    scheduled,
                )
                result.shortfalls.append(
                    Shortfall(
                        subject_name=subject.subject_name,
                        scheduled=scheduled,
                        required=subject.periods_per_week,
                    )
                )

        logger.info(
            "Generated timetable for class %s with %d entries (%d shortfalls)",
            request.class_id,
            len(result.created),
            len(result.shortfalls),
        )
        return result

    def _schedule_day(
        self,
        request: GenerateTimetableRequest,
        subject: SubjectRequirement,
        day: DayOfWeek,
        lunch_break: Interval | None,
        remaining: int,
    ) -> list[TimetableEntry]:
        constraints = request.constraints
        existing = self.store.find_by_class(request.class_id, request.section, day, request.academic_year)
        slots = find_available_slots(
            existing,
            constraints.day_start_minute,
            constraints.day_end_minute,
            subject.duration_minutes,
            constraints.break_duration_minutes,
            lunch_break,
        )

        created: list[TimetableEntry] = []
        for slot in slots:
            if len(created) >= remaining:
                break
            candidate = self._build_candidate(request, subject, day, slot)
            conflicts = self.conflicts.detect_conflicts(candidate)
            if conflicts:
                logger.debug(
                    "Skipping %s %s-%s for %s: %s",
                    day.value,
                    slot.start_time,
                    slot.end_time,
                    subject.subject_name,
                    ", ".join(conflict.conflict_type for conflict in conflicts),
                )
                continue
            try:
                created.append(self.store.create(candidate))
            except UniqueConstraintViolation:
                # Another writer took the slot after our check.
                logger.warning(
                    "Slot %s %s for class %s was taken concurrently; skipping",
                    day.value,
                    slot.start_time,
                    request.class_id,
                )
        return created

    def _build_candidate(
        self,
        request: GenerateTimetableRequest,
        subject: SubjectRequirement,
        day: DayOfWeek,
        slot: Interval,
    ) -> TimetableEntry:
        return TimetableEntry(
            id=self.id_factory(),
            school_id=request.school_id,
            academic_year=request.academic_year,
            grade_level=request.grade_level,
            section=request.section,
            class_id=request.class_id,
            subject_id=subject.subject_id,
            subject_name=subject.subject_name,
            teacher_id=subject.teacher_id,
            teacher_name=subject.teacher_name,
            day_of_week=day,
            start_time=slot.start_time,
            end_time=slot.end_time,
            duration_minutes=subject.duration_minutes,
            room_id=subject.room_id,
            room_name=subject.room_name,
            priority_level=subject.priority_level,
            status=EntryStatus.draft,
            created_by=SYSTEM_ACTOR,
            updated_by=SYSTEM_ACTOR,
        )
