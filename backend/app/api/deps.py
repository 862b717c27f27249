from collections.abc import Generator

from fastapi import Depends
from sqlalchemy.orm import Session

from app.core.config import get_settings
from app.db.session import SessionLocal
from app.services.elective_tracker import ElectiveTracker
from app.services.school_data import SchoolDataStore
from app.services.suggestion_engine import SuggestionEngine


def get_db() -> Generator[Session, None, None]:
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def get_store(db: Session = Depends(get_db)) -> SchoolDataStore:
    return SchoolDataStore(db, get_settings())


def get_elective_tracker(store: SchoolDataStore = Depends(get_store)) -> ElectiveTracker:
    return ElectiveTracker(store, get_settings())


def get_suggestion_engine(store: SchoolDataStore = Depends(get_store)) -> SuggestionEngine:
    return SuggestionEngine(store, get_settings())
