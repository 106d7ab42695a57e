from __future__ import annotations

from datetime import datetime
from typing import Literal

from timetabling.core.exceptions import PreconditionFailedError
from timetabling.models.timetable_entry import WEEKDAY_ORDER, EntryStatus
from timetabling.schemas.timetable import ConflictDetailEntry, TimetableEntry

UPCOMING_WINDOW_MINUTES = 60

TERMINAL_STATUSES = (EntryStatus.archived, EntryStatus.cancelled)


def _minute_of_day(now: datetime) -> int:
    return now.hour * 60 + now.minute


def is_today(entry: TimetableEntry, now: datetime) -> bool:
    return WEEKDAY_ORDER[now.weekday()] == entry.day_of_week


def is_in_progress(entry: TimetableEntry, now: datetime) -> bool:
    if not is_today(entry, now):
        return False
    return entry.start_minute <= _minute_of_day(now) <= entry.end_minute


def is_upcoming(entry: TimetableEntry, now: datetime) -> bool:
    if not is_today(entry, now):
        return False
    remaining = entry.start_minute - _minute_of_day(now)
    return 0 < remaining <= UPCOMING_WINDOW_MINUTES


def minutes_until_start(entry: TimetableEntry, now: datetime) -> int:
    """Minutes from ``now`` to the entry's start on the same day; negative once started."""
    return entry.start_minute - _minute_of_day(now)


def has_room_conflict(entry: TimetableEntry) -> bool:
    return any(
        detail.conflict_type == "room_conflict" and detail.severity == "high"
        for detail in entry.conflict_details
    )


def has_teacher_conflict(entry: TimetableEntry) -> bool:
    return any(
        detail.conflict_type == "teacher_conflict" and detail.severity == "high"
        for detail in entry.conflict_details
    )


def utilization_efficiency(entry: TimetableEntry) -> float:
    if not entry.expected_students or not entry.room_capacity:
        return 0.0
    return (entry.expected_students / entry.room_capacity) * 100


def _require_status(entry: TimetableEntry, allowed: tuple[EntryStatus, ...], action: str) -> None:
    if entry.status not in allowed:
        raise PreconditionFailedError(f"Cannot {action} a timetable entry with status {entry.status.value}")


def publish(entry: TimetableEntry) -> TimetableEntry:
    _require_status(entry, (EntryStatus.draft,), "publish")
    return entry.model_copy(update={"status": EntryStatus.published})


def activate(entry: TimetableEntry) -> TimetableEntry:
    _require_status(entry, (EntryStatus.published,), "activate")
    return entry.model_copy(update={"status": EntryStatus.active})


def cancel(entry: TimetableEntry, reason: str) -> TimetableEntry:
    if entry.status in TERMINAL_STATUSES:
        raise PreconditionFailedError(f"Cannot cancel a timetable entry with status {entry.status.value}")
    return entry.model_copy(
        update={
            "status": EntryStatus.cancelled,
            "is_cancelled": True,
            "cancellation_reason": reason,
        }
    )


def ensure_deletable(entry: TimetableEntry) -> None:
    if entry.status == EntryStatus.active:
        raise PreconditionFailedError("Cannot delete an active timetable entry")


def add_conflict(
    entry: TimetableEntry,
    conflict_type: str,
    description: str,
    severity: Literal["low", "medium", "high"],
) -> TimetableEntry:
    details = [detail.model_copy() for detail in entry.conflict_details]
    details.append(ConflictDetailEntry(conflict_type=conflict_type, description=description, severity=severity))
    return entry.model_copy(update={"conflict_details": details, "has_conflicts": True})


def resolve_conflict(entry: TimetableEntry, index: int, resolution: str) -> TimetableEntry:
    if not 0 <= index < len(entry.conflict_details):
        raise PreconditionFailedError(f"Conflict index {index} is out of range")
    details = [detail.model_copy() for detail in entry.conflict_details]
    details[index] = details[index].model_copy(update={"resolution": resolution})
    unresolved = [detail for detail in details if not detail.resolution]
    return entry.model_copy(update={"conflict_details": details, "has_conflicts": bool(unresolved)})


def mark_attendance(entry: TimetableEntry, attendance_count: int) -> TimetableEntry:
    update: dict = {"actual_students": attendance_count, "attendance_marked": True}
    if entry.expected_students:
        update["average_attendance_rate"] = (attendance_count / entry.expected_students) * 100
    return entry.model_copy(update=update)
