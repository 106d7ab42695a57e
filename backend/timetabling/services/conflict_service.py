from typing import List

from timetabling.schemas.conflict import Conflict, ConflictReport, ResolutionAction
from timetabling.schemas.timetable import TimetableEntry, TimetableEntryCreate
from timetabling.services.entry_store import EntryLookup
from timetabling.services.time_utils import overlaps


def class_label(grade_level: str, section: str | None) -> str:
    return f"{grade_level}-{section}" if section else grade_level


class ConflictService:
    """Checks a candidate entry against a lookup of existing non-terminal entries.

    Axes are evaluated independently in the order teacher, room, class, and
    every overlapping entry on an axis yields its own ``Conflict``.
    """

    def __init__(self, lookup: EntryLookup):
        self.lookup = lookup

    def detect_conflicts(self, candidate: TimetableEntryCreate) -> List[Conflict]:
        conflicts: List[Conflict] = []
        start, end = candidate.start_minute, candidate.end_minute
        own_id = getattr(candidate, "id", None)

        def clashes(other: TimetableEntry) -> bool:
            if own_id is not None and other.id == own_id:
                return False
            return overlaps(start, end, other.start_minute, other.end_minute)

        for other in self.lookup.find_by_teacher(candidate.teacher_id, candidate.day_of_week, candidate.academic_year):
            if clashes(other):
                conflicts.append(Conflict(
                    conflict_type="teacher_conflict",
                    description=(
                        f"Teacher {candidate.teacher_name} is already scheduled for "
                        f"{other.subject_name} during this time."
                    ),
                    conflicting_entry_id=other.id,
                ))

        # No room, no room clash.
        if candidate.room_id:
            for other in self.lookup.find_by_room(candidate.room_id, candidate.day_of_week, candidate.academic_year):
                if clashes(other):
                    conflicts.append(Conflict(
                        conflict_type="room_conflict",
                        description=(
                            f"Room {candidate.room_name or candidate.room_id} is already booked for "
                            f"{other.subject_name} during this time."
                        ),
                        conflicting_entry_id=other.id,
                    ))

        class_entries = self.lookup.find_by_class(
            candidate.class_id, candidate.section, candidate.day_of_week, candidate.academic_year
        )
        for other in class_entries:
            if clashes(other):
                conflicts.append(Conflict(
                    conflict_type="class_conflict",
                    description=(
                        f"Class {class_label(candidate.grade_level, candidate.section)} already has "
                        f"{other.subject_name} scheduled during this time."
                    ),
                    conflicting_entry_id=other.id,
                ))

        return conflicts

    def generate_resolutions(self, conflict: Conflict, candidate: TimetableEntryCreate) -> List[ResolutionAction]:
        slot = {
            "day_of_week": candidate.day_of_week.value,
            "start_time": candidate.start_time,
            "end_time": candidate.end_time,
        }
        resolutions = []
        if conflict.conflict_type == "room_conflict":
             resolutions.append(ResolutionAction(
                 action_type="change_room",
                 description="Find a free room for this time",
                 conflicting_entry_id=conflict.conflicting_entry_id,
                 parameters={**slot, "room_id": candidate.room_id}
             ))

        if conflict.conflict_type in ("teacher_conflict", "class_conflict", "unique_conflict"):
             resolutions.append(ResolutionAction(
                 action_type="move_slot",
                 description="Move to a different time slot",
                 conflicting_entry_id=conflict.conflicting_entry_id,
                 parameters=dict(slot)
             ))

        return resolutions

    def report(self, candidate: TimetableEntryCreate) -> ConflictReport:
        conflicts = self.detect_conflicts(candidate)
        resolutions: List[ResolutionAction] = []
        for conflict in conflicts:
            resolutions.extend(self.generate_resolutions(conflict, candidate))
        return ConflictReport(
            has_conflicts=bool(conflicts),
            conflicts=conflicts,
            suggested_resolutions=resolutions,
        )


def detect_conflicts(candidate: TimetableEntryCreate, lookup: EntryLookup) -> List[Conflict]:
    return ConflictService(lookup).detect_conflicts(candidate)
