"""Generate a demo week for two sections of one grade.

Run:
  PYTHONPATH=backend python scripts/seed_demo_timetable.py
"""

from __future__ import annotations

import os

from timetabling.core.config import get_settings
from timetabling.core.logging import setup_logging
from timetabling.db.bootstrap import ensure_runtime_schema_compatibility
from timetabling.db.session import SessionLocal
from timetabling.schemas.generator import GenerateTimetableRequest, GenerationResult
from timetabling.services.entry_store import SqlAlchemyEntryStore
from timetabling.services.timetable_service import TimetableService

SCHOOL_ID = os.getenv("DEMO_SCHOOL_ID", "demo-school")
ACADEMIC_YEAR = os.getenv("DEMO_ACADEMIC_YEAR", "2026-2027")
GRADE_LEVEL = "8"
SECTIONS = ["A", "B"]

SUBJECTS = [
    {
        "subject_id": "math",
        "subject_name": "Mathematics",
        "teacher_id": "teacher-math",
        "teacher_name": "Anita Kulkarni",
        "periods_per_week": 5,
        "duration_minutes": 45,
        "priority_level": "high",
    },
    {
        "subject_id": "sci",
        "subject_name": "Science",
        "teacher_id": "teacher-sci",
        "teacher_name": "Ravi Menon",
        "periods_per_week": 4,
        "duration_minutes": 45,
        "room_id": "lab-1",
        "room_name": "Science Lab",
    },
    {
        "subject_id": "eng",
        "subject_name": "English",
        "teacher_id": "teacher-eng",
        "teacher_name": "Sara Thomas",
        "periods_per_week": 4,
        "duration_minutes": 45,
    },
    {
        "subject_id": "pe",
        "subject_name": "Physical Education",
        "teacher_id": "teacher-pe",
        "teacher_name": "Vikram Singh",
        "periods_per_week": 2,
        "duration_minutes": 60,
        "priority_level": "low",
        "room_id": "ground",
        "room_name": "Playground",
    },
]


def _print_result(section: str, result: GenerationResult) -> None:
    print(f"Section {section}: {len(result.created)} entries")
    for entry in result.created:
        print(f"  {entry.day_of_week.value:<9} {entry.start_time}-{entry.end_time} {entry.subject_name}")
    for shortfall in result.shortfalls:
        print(f"  shortfall: {shortfall.subject_name} {shortfall.scheduled}/{shortfall.required}")


def main() -> None:
    setup_logging(environment=get_settings().environment)
    ensure_runtime_schema_compatibility()

    db = SessionLocal()
    try:
        service = TimetableService(SqlAlchemyEntryStore(db))
        for section in SECTIONS:
            request = GenerateTimetableRequest(
                school_id=SCHOOL_ID,
                academic_year=ACADEMIC_YEAR,
                grade_level=GRADE_LEVEL,
                section=section,
                subjects=SUBJECTS,
                constraints={"lunch_break": {"start_time": "12:00", "end_time": "12:45"}},
            )
            _print_result(section, service.generate_timetable(request))
    finally:
        db.close()


if __name__ == "__main__":
    main()
