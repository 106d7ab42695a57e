from datetime import datetime

import pytest

from timetabling.core.exceptions import PreconditionFailedError
from timetabling.models import DayOfWeek, EntryStatus
from timetabling.services import entry_lifecycle

# 2026-10-12 is a Monday.
MONDAY_0830 = datetime(2026, 10, 12, 8, 30)
MONDAY_0930 = datetime(2026, 10, 12, 9, 30)
TUESDAY_0930 = datetime(2026, 10, 13, 9, 30)


def test_time_helpers(make_entry):
    entry = make_entry("e1", start="09:00", end="10:00")

    assert entry_lifecycle.is_today(entry, MONDAY_0830)
    assert not entry_lifecycle.is_today(entry, TUESDAY_0930)

    assert entry_lifecycle.is_upcoming(entry, MONDAY_0830)
    assert not entry_lifecycle.is_in_progress(entry, MONDAY_0830)
    assert entry_lifecycle.minutes_until_start(entry, MONDAY_0830) == 30

    assert entry_lifecycle.is_in_progress(entry, MONDAY_0930)
    assert not entry_lifecycle.is_upcoming(entry, MONDAY_0930)
    assert not entry_lifecycle.is_in_progress(entry, TUESDAY_0930)


def test_in_progress_includes_both_ends(make_entry):
    entry = make_entry("e1", start="09:00", end="10:00")
    assert entry_lifecycle.is_in_progress(entry, datetime(2026, 10, 12, 9, 0))
    assert entry_lifecycle.is_in_progress(entry, datetime(2026, 10, 12, 10, 0))


def test_upcoming_window_is_one_hour(make_entry):
    entry = make_entry("e1", start="10:00", end="11:00")
    assert entry_lifecycle.is_upcoming(entry, datetime(2026, 10, 12, 9, 0))
    assert not entry_lifecycle.is_upcoming(entry, datetime(2026, 10, 12, 8, 59))


def test_publish_activate_cancel(make_entry):
    entry = make_entry("e1")

    published = entry_lifecycle.publish(entry)
    assert published.status == EntryStatus.published
    assert entry.status == EntryStatus.draft

    active = entry_lifecycle.activate(published)
    assert active.status == EntryStatus.active

    cancelled = entry_lifecycle.cancel(active, "Teacher on leave")
    assert cancelled.status == EntryStatus.cancelled
    assert cancelled.is_cancelled is True
    assert cancelled.cancellation_reason == "Teacher on leave"


def test_invalid_transitions_are_rejected(make_entry):
    entry = make_entry("e1")
    with pytest.raises(PreconditionFailedError):
        entry_lifecycle.activate(entry)
    with pytest.raises(PreconditionFailedError):
        entry_lifecycle.publish(entry_lifecycle.publish(entry))
    with pytest.raises(PreconditionFailedError):
        entry_lifecycle.cancel(entry_lifecycle.cancel(entry, "x"), "again")
    with pytest.raises(PreconditionFailedError):
        entry_lifecycle.cancel(make_entry("e2", status=EntryStatus.archived), "x")


def test_active_entries_cannot_be_deleted(make_entry):
    entry_lifecycle.ensure_deletable(make_entry("e1"))
    with pytest.raises(PreconditionFailedError, match="active"):
        entry_lifecycle.ensure_deletable(make_entry("e2", status=EntryStatus.active))


def test_conflict_bookkeeping(make_entry):
    entry = make_entry("e1")
    entry = entry_lifecycle.add_conflict(entry, "room_conflict", "Room double booked", "high")
    entry = entry_lifecycle.add_conflict(entry, "teacher_conflict", "Teacher busy", "medium")

    assert entry.has_conflicts is True
    assert entry_lifecycle.has_room_conflict(entry)
    # Only high severity counts.
    assert not entry_lifecycle.has_teacher_conflict(entry)

    entry = entry_lifecycle.resolve_conflict(entry, 0, "Moved to Room 102")
    assert entry.conflict_details[0].resolution == "Moved to Room 102"
    assert entry.has_conflicts is True

    entry = entry_lifecycle.resolve_conflict(entry, 1, "Swapped teacher")
    assert entry.has_conflicts is False

    with pytest.raises(PreconditionFailedError):
        entry_lifecycle.resolve_conflict(entry, 5, "nope")


def test_attendance_and_utilization(make_entry):
    entry = make_entry("e1", expected_students=40, room_capacity=50)
    assert entry_lifecycle.utilization_efficiency(entry) == 80.0

    marked = entry_lifecycle.mark_attendance(entry, 30)
    assert marked.attendance_marked is True
    assert marked.actual_students == 30
    assert marked.average_attendance_rate == 75.0

    no_expectation = entry_lifecycle.mark_attendance(make_entry("e2"), 12)
    assert no_expectation.average_attendance_rate is None
    assert entry_lifecycle.utilization_efficiency(make_entry("e3")) == 0.0


def test_day_index_matches_weekday(make_entry):
    sunday = make_entry("e1", day=DayOfWeek.sunday)
    assert entry_lifecycle.is_today(sunday, datetime(2026, 10, 18, 12, 0))
