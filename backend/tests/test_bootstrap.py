import pytest
from sqlalchemy import create_engine, text
from sqlalchemy.pool import StaticPool

from timetabling.db import bootstrap


def _raise_error(message: str):
    raise RuntimeError(message)


def _memory_engine():
    return create_engine(
        "sqlite+pysqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )


def test_runtime_schema_bootstrap_raises_on_validation_failure(monkeypatch):
    monkeypatch.setattr(bootstrap.Base.metadata, "create_all", lambda bind: None)
    monkeypatch.setattr(
        bootstrap,
        "_assert_required_columns",
        lambda: _raise_error("missing required schema"),
    )

    with pytest.raises(RuntimeError, match="Runtime schema compatibility bootstrap failed"):
        bootstrap.ensure_runtime_schema_compatibility()


def test_runtime_schema_bootstrap_creates_a_complete_schema(monkeypatch):
    engine = _memory_engine()
    monkeypatch.setattr(bootstrap, "engine", engine)

    bootstrap.ensure_runtime_schema_compatibility()

    with engine.connect() as connection:
        columns = {row[1] for row in connection.execute(text("PRAGMA table_info(timetable_entries)"))}
    assert bootstrap.REQUIRED_COLUMNS["timetable_entries"] <= columns


def test_runtime_schema_bootstrap_rejects_table_without_attendance_columns(monkeypatch):
    engine = _memory_engine()
    with engine.begin() as connection:
        attendance = {"actual_students", "attendance_marked", "average_attendance_rate"}
        required = sorted(bootstrap.REQUIRED_COLUMNS["timetable_entries"] - attendance)
        connection.execute(text(f"CREATE TABLE timetable_entries ({', '.join(f'{name} TEXT' for name in required)})"))
    monkeypatch.setattr(bootstrap, "engine", engine)

    with pytest.raises(RuntimeError) as exc_info:
        bootstrap.ensure_runtime_schema_compatibility()
    assert "timetable_entries.actual_students" in str(exc_info.value.__cause__)
