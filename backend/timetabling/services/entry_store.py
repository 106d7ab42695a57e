from __future__ import annotations

import logging
from typing import Protocol

from sqlalchemy import case, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from timetabling.core.exceptions import ResourceNotFoundError, UniqueConstraintViolation
from timetabling.models.timetable_entry import (
    NON_TERMINAL_STATUSES,
    WEEKDAY_ORDER,
    DayOfWeek,
    TimetableEntryRecord,
)
from timetabling.schemas.timetable import TimetableEntry

logger = logging.getLogger(__name__)

DAY_INDEX: dict[DayOfWeek, int] = {day: index for index, day in enumerate(WEEKDAY_ORDER)}


def unique_key(entry: TimetableEntry) -> tuple:
    """Slot key held by draft, published and active entries only."""
    return (
        entry.school_id,
        entry.academic_year,
        entry.grade_level,
        entry.section,
        entry.day_of_week,
        entry.start_time,
    )


class EntryLookup(Protocol):
    """Read side used by conflict detection. Returns non-terminal entries only."""

    def find_by_teacher(self, teacher_id: str, day: DayOfWeek, academic_year: str) -> list[TimetableEntry]: ...

    def find_by_room(self, room_id: str, day: DayOfWeek, academic_year: str) -> list[TimetableEntry]: ...

    def find_by_class(
        self, class_id: str, section: str | None, day: DayOfWeek, academic_year: str
    ) -> list[TimetableEntry]: ...


class EntryStore(EntryLookup, Protocol):
    def create(self, entry: TimetableEntry) -> TimetableEntry: ...

    def get(self, entry_id: str) -> TimetableEntry | None: ...

    def update(self, entry: TimetableEntry) -> TimetableEntry: ...

    def delete(self, entry_id: str) -> None: ...

    def find_by_class_all_days(
        self, class_id: str, section: str | None, academic_year: str
    ) -> list[TimetableEntry]: ...

    def query(
        self,
        *,
        school_id: str | None = None,
        academic_year: str | None = None,
        grade_level: str | None = None,
        section: str | None = None,
        class_id: str | None = None,
        teacher_id: str | None = None,
        room_id: str | None = None,
        day: DayOfWeek | None = None,
        limit: int | None = None,
        offset: int | None = None,
    ) -> list[TimetableEntry]: ...


def _schedule_order(entry: TimetableEntry) -> tuple[int, str]:
    return DAY_INDEX[entry.day_of_week], entry.start_time


class InMemoryEntryStore:
    """Dict-backed store. Every write is visible to the next read."""

    def __init__(self, entries: list[TimetableEntry] | None = None) -> None:
        self._entries: dict[str, TimetableEntry] = {}
        for entry in entries or []:
            self.create(entry)

    def __len__(self) -> int:
        return len(self._entries)

    def _check_unique(self, entry: TimetableEntry) -> None:
        if entry.status not in NON_TERMINAL_STATUSES:
            return
        key = unique_key(entry)
        for existing in self._active():
            if existing.id != entry.id and unique_key(existing) == key:
                raise UniqueConstraintViolation(key)

    def create(self, entry: TimetableEntry) -> TimetableEntry:
        self._check_unique(entry)
        stored = entry.model_copy(deep=True)
        self._entries[stored.id] = stored
        return stored.model_copy(deep=True)

    def get(self, entry_id: str) -> TimetableEntry | None:
        entry = self._entries.get(entry_id)
        return entry.model_copy(deep=True) if entry else None

    def update(self, entry: TimetableEntry) -> TimetableEntry:
        if entry.id not in self._entries:
            raise ResourceNotFoundError("Timetable entry", entry.id)
        self._check_unique(entry)
        self._entries[entry.id] = entry.model_copy(deep=True)
        return entry.model_copy(deep=True)

    def delete(self, entry_id: str) -> None:
        self._entries.pop(entry_id, None)

    def _active(self) -> list[TimetableEntry]:
        return [entry for entry in self._entries.values() if entry.status in NON_TERMINAL_STATUSES]

    def find_by_teacher(self, teacher_id: str, day: DayOfWeek, academic_year: str) -> list[TimetableEntry]:
        return [
            entry.model_copy(deep=True)
            for entry in self._active()
            if entry.teacher_id == teacher_id and entry.day_of_week == day and entry.academic_year == academic_year
        ]

    def find_by_room(self, room_id: str, day: DayOfWeek, academic_year: str) -> list[TimetableEntry]:
        return [
            entry.model_copy(deep=True)
            for entry in self._active()
            if entry.room_id == room_id and entry.day_of_week == day and entry.academic_year == academic_year
        ]

    def find_by_class(
        self, class_id: str, section: str | None, day: DayOfWeek, academic_year: str
    ) -> list[TimetableEntry]:
        return [
            entry.model_copy(deep=True)
            for entry in self._active()
            if entry.class_id == class_id
            and entry.section == section
            and entry.day_of_week == day
            and entry.academic_year == academic_year
        ]

    def find_by_class_all_days(
        self, class_id: str, section: str | None, academic_year: str
    ) -> list[TimetableEntry]:
        matches = [
            entry.model_copy(deep=True)
            for entry in self._active()
            if entry.class_id == class_id and entry.section == section and entry.academic_year == academic_year
        ]
        return sorted(matches, key=_schedule_order)

    def query(
        self,
        *,
        school_id: str | None = None,
        academic_year: str | None = None,
        grade_level: str | None = None,
        section: str | None = None,
        class_id: str | None = None,
        teacher_id: str | None = None,
        room_id: str | None = None,
        day: DayOfWeek | None = None,
        limit: int | None = None,
        offset: int | None = None,
    ) -> list[TimetableEntry]:
        filters = {
            "school_id": school_id,
            "academic_year": academic_year,
            "grade_level": grade_level,
            "section": section,
            "class_id": class_id,
            "teacher_id": teacher_id,
            "room_id": room_id,
            "day_of_week": day,
        }
        matches = [
            entry.model_copy(deep=True)
            for entry in self._entries.values()
            if all(value is None or getattr(entry, name) == value for name, value in filters.items())
        ]
        matches.sort(key=_schedule_order)
        start = offset or 0
        end = start + limit if limit else None
        return matches[start:end]


class SqlAlchemyEntryStore:
    """Store backed by the ``timetable_entries`` table. Each write commits immediately."""

    def __init__(self, db: Session) -> None:
        self.db = db

    @staticmethod
    def _to_entry(record: TimetableEntryRecord) -> TimetableEntry:
        return TimetableEntry.model_validate(record)

    @staticmethod
    def _day_order():
        return case(
            *[(TimetableEntryRecord.day_of_week == day, index) for index, day in enumerate(WEEKDAY_ORDER)],
            else_=len(WEEKDAY_ORDER),
        )

    def _find(self, *conditions) -> list[TimetableEntry]:
        stmt = (
            select(TimetableEntryRecord)
            .where(*conditions, TimetableEntryRecord.status.in_(NON_TERMINAL_STATUSES))
            .order_by(self._day_order(), TimetableEntryRecord.start_time)
        )
        return [self._to_entry(record) for record in self.db.scalars(stmt)]

    def _check_unique(self, entry: TimetableEntry) -> None:
        if entry.status not in NON_TERMINAL_STATUSES:
            return
        # Sectionless rows compare NULL to NULL, which the unique constraint does not cover.
        section_clause = (
            TimetableEntryRecord.section.is_(None)
            if entry.section is None
            else TimetableEntryRecord.section == entry.section
        )
        stmt = select(TimetableEntryRecord.id).where(
            TimetableEntryRecord.school_id == entry.school_id,
            TimetableEntryRecord.academic_year == entry.academic_year,
            TimetableEntryRecord.grade_level == entry.grade_level,
            section_clause,
            TimetableEntryRecord.day_of_week == entry.day_of_week,
            TimetableEntryRecord.start_time == entry.start_time,
            TimetableEntryRecord.status.in_(NON_TERMINAL_STATUSES),
            TimetableEntryRecord.id != entry.id,
        )
        if self.db.scalar(stmt.limit(1)) is not None:
            raise UniqueConstraintViolation(unique_key(entry))

    def _commit(self, entry: TimetableEntry) -> None:
        try:
            self.db.commit()
        except IntegrityError as exc:
            self.db.rollback()
            logger.warning("Unique constraint rejected timetable entry %s", entry.id)
            raise UniqueConstraintViolation(unique_key(entry)) from exc

    def create(self, entry: TimetableEntry) -> TimetableEntry:
        self._check_unique(entry)
        record = TimetableEntryRecord(**entry.model_dump(exclude={"created_at", "updated_at"}))
        self.db.add(record)
        self._commit(entry)
        self.db.refresh(record)
        return self._to_entry(record)

    def get(self, entry_id: str) -> TimetableEntry | None:
        record = self.db.get(TimetableEntryRecord, entry_id)
        return self._to_entry(record) if record else None

    def update(self, entry: TimetableEntry) -> TimetableEntry:
        record = self.db.get(TimetableEntryRecord, entry.id)
        if record is None:
            raise ResourceNotFoundError("Timetable entry", entry.id)
        self._check_unique(entry)
        for field, value in entry.model_dump(exclude={"id", "created_at", "updated_at"}).items():
            setattr(record, field, value)
        self._commit(entry)
        self.db.refresh(record)
        return self._to_entry(record)

    def delete(self, entry_id: str) -> None:
        record = self.db.get(TimetableEntryRecord, entry_id)
        if record is None:
            return
        self.db.delete(record)
        self.db.commit()

    def find_by_teacher(self, teacher_id: str, day: DayOfWeek, academic_year: str) -> list[TimetableEntry]:
        return self._find(
            TimetableEntryRecord.teacher_id == teacher_id,
            TimetableEntryRecord.day_of_week == day,
            TimetableEntryRecord.academic_year == academic_year,
        )

    def find_by_room(self, room_id: str, day: DayOfWeek, academic_year: str) -> list[TimetableEntry]:
        return self._find(
            TimetableEntryRecord.room_id == room_id,
            TimetableEntryRecord.day_of_week == day,
            TimetableEntryRecord.academic_year == academic_year,
        )

    def find_by_class(
        self, class_id: str, section: str | None, day: DayOfWeek, academic_year: str
    ) -> list[TimetableEntry]:
        return self._find(
            TimetableEntryRecord.class_id == class_id,
            TimetableEntryRecord.section.is_(None) if section is None else TimetableEntryRecord.section == section,
            TimetableEntryRecord.day_of_week == day,
            TimetableEntryRecord.academic_year == academic_year,
        )

    def find_by_class_all_days(
        self, class_id: str, section: str | None, academic_year: str
    ) -> list[TimetableEntry]:
        return self._find(
            TimetableEntryRecord.class_id == class_id,
            TimetableEntryRecord.section.is_(None) if section is None else TimetableEntryRecord.section == section,
            TimetableEntryRecord.academic_year == academic_year,
        )

    def query(
        self,
        *,
        school_id: str | None = None,
        academic_year: str | None = None,
        grade_level: str | None = None,
        section: str | None = None,
        class_id: str | None = None,
        teacher_id: str | None = None,
        room_id: str | None = None,
        day: DayOfWeek | None = None,
        limit: int | None = None,
        offset: int | None = None,
    ) -> list[TimetableEntry]:
        stmt = select(TimetableEntryRecord)
        filters = [
            (TimetableEntryRecord.school_id, school_id),
            (TimetableEntryRecord.academic_year, academic_year),
            (TimetableEntryRecord.grade_level, grade_level),
            (TimetableEntryRecord.section, section),
            (TimetableEntryRecord.class_id, class_id),
            (TimetableEntryRecord.teacher_id, teacher_id),
            (TimetableEntryRecord.room_id, room_id),
            (TimetableEntryRecord.day_of_week, day),
        ]
        for column, value in filters:
            if value is not None:
                stmt = stmt.where(column == value)
        stmt = stmt.order_by(self._day_order(), TimetableEntryRecord.start_time)
        if offset:
            stmt = stmt.offset(offset)
        if limit:
            stmt = stmt.limit(limit)
        return [self._to_entry(record) for record in self.db.scalars(stmt)]
