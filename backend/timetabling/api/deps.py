from collections.abc import Generator

from fastapi import Depends
from sqlalchemy.orm import Session

from timetabling.db.session import SessionLocal
from timetabling.services.entry_store import SqlAlchemyEntryStore
from timetabling.services.timetable_service import TimetableService


def get_db() -> Generator[Session, None, None]:
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def get_timetable_service(db: Session = Depends(get_db)) -> TimetableService:
    return TimetableService(SqlAlchemyEntryStore(db))
