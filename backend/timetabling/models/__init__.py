from timetabling.models.timetable_entry import (  # noqa: F401
    DayOfWeek,
    EntryStatus,
    PeriodType,
    PriorityLevel,
    RecurrenceType,
    TimetableEntryRecord,
)
