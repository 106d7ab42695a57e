from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, Protocol

from timetabling.services.time_utils import format_time, overlaps


class TimedEntry(Protocol):
    @property
    def start_minute(self) -> int: ...

    @property
    def end_minute(self) -> int: ...


@dataclass(frozen=True)
class Interval:
    start: int
    end: int

    @property
    def start_time(self) -> str:
        return format_time(self.start)

    @property
    def end_time(self) -> str:
        return format_time(self.end)

    @property
    def duration(self) -> int:
        return self.end - self.start


def find_available_slots(
    existing_entries: Iterable[TimedEntry],
    day_start: int,
    day_end: int,
    duration: int,
    gap: int,
    lunch_break: Interval | None = None,
) -> list[Interval]:
    """First-fit free intervals of ``duration`` minutes for one day.

    One candidate per gap, taken at the start of the gap. A gap before an
    existing entry must also leave ``gap`` minutes before that entry starts.
    Nothing is emitted past ``day_end``. Candidates overlapping
    ``lunch_break`` are dropped, never shifted or split.
    """
    candidates: list[Interval] = []
    cursor = day_start

    for entry in sorted(existing_entries, key=lambda item: item.start_minute):
        if entry.start_minute - cursor >= duration + gap and cursor + duration <= day_end:
            candidates.append(Interval(cursor, cursor + duration))
        cursor = max(cursor, entry.end_minute + gap)

    if day_end - cursor >= duration:
        candidates.append(Interval(cursor, cursor + duration))

    if lunch_break is None:
        return candidates
    return [
        slot for slot in candidates
        if not overlaps(slot.start, slot.end, lunch_break.start, lunch_break.end)
    ]
