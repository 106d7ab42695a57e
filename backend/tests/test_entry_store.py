import pytest
from sqlalchemy.exc import IntegrityError

from timetabling.core.exceptions import ResourceNotFoundError, UniqueConstraintViolation
from timetabling.models import DayOfWeek, EntryStatus, TimetableEntryRecord
from timetabling.services.entry_store import InMemoryEntryStore, SqlAlchemyEntryStore


@pytest.fixture(params=["memory", "sql"])
def store(request, db_session):
    return InMemoryEntryStore() if request.param == "memory" else SqlAlchemyEntryStore(db_session)


def test_round_trip_preserves_fields(store, make_entry):
    entry = make_entry(
        "e1",
        equipment_required=[{"equipment_id": "p1", "equipment_name": "Projector", "quantity": 2}],
        priority_level="high",
    )
    store.create(entry)
    loaded = store.get("e1")

    assert loaded.equipment_required[0].equipment_name == "Projector"
    assert loaded.priority_level.value == "high"
    assert loaded.day_of_week == DayOfWeek.monday
    assert store.get("missing") is None


def test_finders_skip_terminal_entries(store, make_entry):
    store.create(make_entry("live"))
    store.create(make_entry("gone", start="11:00", end="12:00", status=EntryStatus.cancelled, is_cancelled=True))
    store.create(make_entry("old", start="13:00", end="14:00", status=EntryStatus.archived))

    assert [entry.id for entry in store.find_by_teacher("t1", DayOfWeek.monday, "2026-2027")] == ["live"]
    assert [entry.id for entry in store.find_by_room("r1", DayOfWeek.monday, "2026-2027")] == ["live"]
    assert [entry.id for entry in store.find_by_class("s1-5-A", "A", DayOfWeek.monday, "2026-2027")] == ["live"]
    # Listing queries return every status.
    assert len(store.query(school_id="s1")) == 3


def test_find_by_class_matches_section_exactly(store, make_entry):
    store.create(make_entry("with-section"))
    store.create(make_entry("no-section", section=None, grade_level="5", start="11:00", end="12:00"))

    assert [entry.id for entry in store.find_by_class("s1-5", None, DayOfWeek.monday, "2026-2027")] == ["no-section"]
    assert [entry.id for entry in store.find_by_class("s1-5-A", "A", DayOfWeek.monday, "2026-2027")] == ["with-section"]


def test_find_by_class_all_days_orders_by_day_then_time(store, make_entry):
    store.create(make_entry("fri", day=DayOfWeek.friday, start="08:00", end="09:00"))
    store.create(make_entry("mon-late", start="11:00", end="12:00"))
    store.create(make_entry("mon-early", start="08:00", end="09:00"))

    entries = store.find_by_class_all_days("s1-5-A", "A", "2026-2027")
    assert [entry.id for entry in entries] == ["mon-early", "mon-late", "fri"]


def test_unique_key_is_enforced(store, make_entry):
    store.create(make_entry("e1"))
    with pytest.raises(UniqueConstraintViolation):
        store.create(make_entry("e2", end="09:30", teacher_id="t2"))


def test_unique_key_is_enforced_without_section(store, make_entry):
    store.create(make_entry("e1", section=None))
    with pytest.raises(UniqueConstraintViolation):
        store.create(make_entry("e2", section=None, teacher_id="t2"))


def test_update_and_delete(store, make_entry):
    created = store.create(make_entry("e1"))
    store.update(created.model_copy(update={"status": EntryStatus.published}))
    assert store.get("e1").status == EntryStatus.published

    store.delete("e1")
    assert store.get("e1") is None
    # Deleting twice is a no-op.
    store.delete("e1")


def test_update_rejects_taken_start_time(store, make_entry):
    store.create(make_entry("e1"))
    second = store.create(make_entry("e2", start="10:00", end="11:00"))
    with pytest.raises(UniqueConstraintViolation):
        store.update(second.model_copy(update={"start_time": "09:00", "end_time": "09:45", "duration_minutes": 45}))


def test_memory_store_returns_copies(make_entry):
    store = InMemoryEntryStore([make_entry("e1")])
    loaded = store.get("e1")
    loaded.subject_name = "Changed"
    assert store.get("e1").subject_name == "Mathematics"


def test_terminal_entries_release_the_unique_key(store, make_entry):
    store.create(make_entry("old", status=EntryStatus.cancelled, is_cancelled=True))
    store.create(make_entry("older", status=EntryStatus.archived))

    created = store.create(make_entry("new"))
    assert created.id == "new"
    with pytest.raises(UniqueConstraintViolation):
        store.create(make_entry("dup", teacher_id="t2"))


def test_cancelling_a_duplicate_start_is_allowed(store, make_entry):
    store.create(make_entry("e1"))
    cancelled = store.create(make_entry("e0", status=EntryStatus.cancelled, is_cancelled=True))
    # Terminal rows are never checked against the key.
    store.update(cancelled.model_copy(update={"cancellation_reason": "Merged"}))
    assert store.get("e0").cancellation_reason == "Merged"


def test_update_of_unknown_entry_raises(store, make_entry):
    with pytest.raises(ResourceNotFoundError):
        store.update(make_entry("ghost"))
    assert store.get("ghost") is None


def test_partial_unique_index_guards_scheduled_rows_only(db_session, make_entry):
    def record(entry_id, status):
        entry = make_entry(entry_id, status=status)
        return TimetableEntryRecord(**entry.model_dump(exclude={"created_at", "updated_at"}))

    db_session.add_all([record("a", EntryStatus.cancelled), record("b", EntryStatus.archived), record("c", EntryStatus.draft)])
    db_session.commit()

    db_session.add(record("d", EntryStatus.published))
    with pytest.raises(IntegrityError):
        db_session.commit()
    db_session.rollback()
