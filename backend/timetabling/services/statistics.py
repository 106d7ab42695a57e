from __future__ import annotations

from collections import Counter
from typing import Iterable

from timetabling.core.config import get_settings
from timetabling.models.timetable_entry import EntryStatus
from timetabling.schemas.statistics import TimetableStatistics
from timetabling.schemas.timetable import TimetableEntry

UNKNOWN_ROOM = "Unknown"


def compute_statistics(
    entries: Iterable[TimetableEntry],
    *,
    days_per_week: int | None = None,
    periods_per_day: int | None = None,
) -> TimetableStatistics:
    """Aggregate an already-scoped entry collection.

    The denominators default to the configured 5 days x 8 periods and are
    not derived from any generation request.
    """
    settings = get_settings()
    days = days_per_week or settings.statistics_days_per_week
    periods = periods_per_day or settings.statistics_periods_per_day

    items = list(entries)
    total = len(items)
    possible_slots = days * periods
    utilization = (total / possible_slots) * 100 if total and possible_slots else 0.0

    per_day = Counter(entry.day_of_week for entry in items)
    average_per_day = sum(per_day.values()) / days if days else 0.0

    teacher_workload = Counter(entry.teacher_name for entry in items)
    room_utilization = Counter(entry.room_name or UNKNOWN_ROOM for entry in items if entry.room_id)

    return TimetableStatistics(
        total_entries=total,
        published_entries=sum(1 for entry in items if entry.status == EntryStatus.published),
        active_entries=sum(1 for entry in items if entry.status == EntryStatus.active),
        conflicts_count=sum(1 for entry in items if entry.has_conflicts),
        utilization_rate=round(utilization, 2),
        average_periods_per_day=round(average_per_day, 2),
        teacher_workload=dict(teacher_workload),
        room_utilization=dict(room_utilization),
    )
