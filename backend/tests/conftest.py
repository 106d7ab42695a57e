import pytest
from fastapi.testclient import TestClient  # calls FastAPI routes in-process, no real server
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from timetabling import main
from timetabling.api.deps import get_db
from timetabling.db.base import Base
from timetabling.models import DayOfWeek
from timetabling.schemas.timetable import TimetableEntry
from timetabling.services.entry_store import InMemoryEntryStore, SqlAlchemyEntryStore
from timetabling.services.generation_lock import clear_generation_locks


@pytest.fixture()
def engine():
    # One shared in-memory database per test.
    engine = create_engine(
        "sqlite+pysqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    yield engine
    engine.dispose()


@pytest.fixture()
def db_session(engine):
    TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)
    db = TestingSessionLocal()
    try:
        yield db
    finally:
        db.close()


@pytest.fixture()
def sql_store(db_session):
    return SqlAlchemyEntryStore(db_session)


@pytest.fixture()
def memory_store():
    return InMemoryEntryStore()


@pytest.fixture()
def client(engine, monkeypatch):
    clear_generation_locks()
    # Tables already exist on the test engine; skip the file-backed bootstrap.
    monkeypatch.setattr(main, "ensure_runtime_schema_compatibility", lambda: None)
    TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

    def override_get_db():
        db = TestingSessionLocal()
        try:
            yield db
        finally:
            db.close()

    main.app.dependency_overrides[get_db] = override_get_db

    with TestClient(main.app) as test_client:
        yield test_client

    main.app.dependency_overrides.clear()
    clear_generation_locks()


def _make_entry(
    entry_id: str,
    *,
    start: str = "09:00",
    end: str = "10:00",
    day: DayOfWeek = DayOfWeek.monday,
    teacher_id: str = "t1",
    teacher_name: str = "Ms. Rao",
    room_id: str | None = "r1",
    room_name: str | None = "Room 101",
    grade_level: str = "5",
    section: str | None = "A",
    subject_name: str = "Mathematics",
    school_id: str = "s1",
    academic_year: str = "2026-2027",
    **extra,
) -> TimetableEntry:
    suffix = f"-{section}" if section else ""
    return TimetableEntry(
        id=entry_id,
        school_id=school_id,
        academic_year=academic_year,
        grade_level=grade_level,
        section=section,
        class_id=f"{school_id}-{grade_level}{suffix}",
        subject_id=f"sub-{subject_name.lower()}",
        subject_name=subject_name,
        teacher_id=teacher_id,
        teacher_name=teacher_name,
        day_of_week=day,
        start_time=start,
        end_time=end,
        room_id=room_id,
        room_name=room_name,
        **extra,
    )


def _entry_payload(**overrides) -> dict:
    payload = {
        "school_id": "s1",
        "academic_year": "2026-2027",
        "grade_level": "5",
        "section": "A",
        "class_id": "s1-5-A",
        "subject_id": "sub-math",
        "subject_name": "Mathematics",
        "teacher_id": "t1",
        "teacher_name": "Ms. Rao",
        "day_of_week": "monday",
        "start_time": "09:00",
        "end_time": "10:00",
        "room_id": "r1",
        "room_name": "Room 101",
    }
    payload.update(overrides)
    return payload


@pytest.fixture()
def make_entry():
    return _make_entry


@pytest.fixture()
def entry_payload():
    return _entry_payload
