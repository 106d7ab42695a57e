from timetabling.models import DayOfWeek, EntryStatus
from timetabling.services.statistics import compute_statistics


def test_empty_collection():
    stats = compute_statistics([])
    assert stats.total_entries == 0
    assert stats.utilization_rate == 0.0
    assert stats.average_periods_per_day == 0.0
    assert stats.teacher_workload == {}
    assert stats.room_utilization == {}


def test_counts_and_rates(make_entry):
    entries = [
        make_entry("e1", status=EntryStatus.published),
        make_entry("e2", start="10:00", end="11:00", status=EntryStatus.active, has_conflicts=True),
        make_entry("e3", day=DayOfWeek.tuesday, teacher_id="t2", teacher_name="Mr. Das", room_name=None),
        make_entry("e4", day=DayOfWeek.wednesday, teacher_id="t2", teacher_name="Mr. Das", room_id=None, room_name=None),
    ]
    stats = compute_statistics(entries)

    assert stats.total_entries == 4
    assert stats.published_entries == 1
    assert stats.active_entries == 1
    assert stats.conflicts_count == 1
    # 4 of 5 x 8 possible periods.
    assert stats.utilization_rate == 10.0
    assert stats.average_periods_per_day == 0.8
    assert stats.teacher_workload == {"Ms. Rao": 2, "Mr. Das": 2}
    # Unnamed rooms are grouped; entries without a room are not counted.
    assert stats.room_utilization == {"Room 101": 2, "Unknown": 1}


def test_denominators_can_be_overridden(make_entry):
    entries = [make_entry("e1"), make_entry("e2", start="10:00", end="11:00")]
    stats = compute_statistics(entries, days_per_week=1, periods_per_day=3)
    assert stats.utilization_rate == 66.67
    assert stats.average_periods_per_day == 2.0
