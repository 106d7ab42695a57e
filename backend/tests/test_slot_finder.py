from timetabling.services.slot_finder import Interval, find_available_slots
from timetabling.services.time_utils import parse_time


class _Busy:
    def __init__(self, start: str, end: str):
        self.start_minute = parse_time(start)
        self.end_minute = parse_time(end)


def _times(slots):
    return [(slot.start_time, slot.end_time) for slot in slots]


def test_empty_day_yields_single_slot_at_day_start():
    slots = find_available_slots([], parse_time("08:00"), parse_time("15:00"), 45, 15)
    assert _times(slots) == [("08:00", "08:45")]


def test_one_candidate_per_gap_between_entries():
    existing = [_Busy("09:00", "10:00"), _Busy("11:00", "12:00")]
    slots = find_available_slots(existing, parse_time("08:00"), parse_time("13:00"), 30, 15)
    # 08:00 gap, 10:15 gap, after 12:15.
    assert _times(slots) == [("08:00", "08:30"), ("10:15", "10:45"), ("12:15", "12:45")]


def test_gap_before_entry_must_also_fit_the_break():
    # 08:00-09:00 is 60 minutes; 45 + 15 fits exactly, 50 + 15 does not.
    existing = [_Busy("09:00", "10:00")]
    assert _times(find_available_slots(existing, 480, 720, 45, 15))[0] == ("08:00", "08:45")
    assert _times(find_available_slots(existing, 480, 720, 50, 15))[0] == ("10:15", "11:05")


def test_unsorted_input_is_handled():
    existing = [_Busy("11:00", "12:00"), _Busy("09:00", "10:00")]
    slots = find_available_slots(existing, 480, 780, 30, 15)
    assert _times(slots)[0] == ("08:00", "08:30")


def test_three_entry_day_has_no_room_left():
    existing = [_Busy("08:00", "08:30"), _Busy("08:30", "09:00"), _Busy("09:00", "09:30")]
    assert find_available_slots(existing, parse_time("08:00"), parse_time("09:00"), 30, 0) == []


def test_window_shorter_than_duration_is_empty():
    assert find_available_slots([], parse_time("08:00"), parse_time("08:30"), 45, 15) == []


def test_slots_never_pass_day_end():
    existing = [_Busy("14:30", "15:00")]
    slots = find_available_slots(existing, parse_time("08:00"), parse_time("09:00"), 45, 15)
    assert _times(slots) == [("08:00", "08:45")]
    for slot in slots:
        assert slot.end <= parse_time("09:00")


def test_candidates_overlapping_lunch_are_dropped_not_shifted():
    lunch = Interval(parse_time("12:00"), parse_time("12:45"))
    existing = [_Busy("08:00", "11:45")]
    slots = find_available_slots(existing, parse_time("08:00"), parse_time("15:00"), 45, 15, lunch)
    # The only candidate (12:00) overlaps lunch.
    assert slots == []


def test_candidates_touching_lunch_are_kept():
    lunch = Interval(parse_time("12:00"), parse_time("12:45"))
    existing = [_Busy("08:00", "10:45")]
    slots = find_available_slots(existing, parse_time("08:00"), parse_time("15:00"), 60, 0, lunch)
    assert _times(slots) == [("10:45", "11:45")]


def test_interval_properties():
    slot = Interval(parse_time("09:05"), parse_time("09:50"))
    assert slot.start_time == "09:05"
    assert slot.end_time == "09:50"
    assert slot.duration == 45
