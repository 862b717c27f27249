import os
import tempfile
from pathlib import Path

# The app reads DATABASE_URL at import time; point it at a throwaway SQLite file.
os.environ["DATABASE_URL"] = f"sqlite+pysqlite:///{Path(tempfile.gettempdir()) / 'lesson_planner_test.db'}"

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from app.api.deps import get_db
from app.core.config import Settings
from app.db.base import Base
from app.main import app
from app.models import Lesson, ScheduleItem, SchoolClass, Teacher, TeacherAssignment
from app.services.elective_tracker import ElectiveTracker
from app.services.school_data import SchoolDataStore
from app.services.suggestion_engine import SuggestionEngine


class SchoolBuilder:
    """Commits rows straight into the test database."""

    def __init__(self, db):
        self.db = db

    def _save(self, item):
        self.db.add(item)
        self.db.commit()
        self.db.refresh(item)
        return item

    def school_class(self, grade=5, section="A", school_type="Ortaokul"):
        return self._save(SchoolClass(grade=grade, section=section, school_type=school_type))

    def lesson(self, name, grade=5, weekly_hours=2, mandatory=False, school_type="Ortaokul"):
        return self._save(
            Lesson(
                name=name,
                grade=grade,
                weekly_hours=weekly_hours,
                is_mandatory=mandatory,
                school_type=school_type,
            )
        )

    def teacher(self, name, subject=None):
        return self._save(Teacher(name=name, subject=subject))

    def assign(self, teacher, lesson, school_class):
        return self._save(
            TeacherAssignment(teacher_id=teacher.id, lesson_id=lesson.id, class_id=school_class.id)
        )

    def slot(self, school_class, teacher, lesson, day, period):
        return self._save(
            ScheduleItem(
                class_id=school_class.id,
                teacher_id=teacher.id,
                lesson_id=lesson.id,
                day_of_week=day,
                time_slot=period,
            )
        )


@pytest.fixture()
def engine():
    engine = create_engine(
        "sqlite+pysqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    yield engine
    engine.dispose()


@pytest.fixture()
def session_factory(engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture()
def db_session(session_factory):
    db = session_factory()
    try:
        yield db
    finally:
        db.close()


@pytest.fixture()
def settings():
    return Settings(_env_file=None, database_url="sqlite+pysqlite://")


@pytest.fixture()
def store(db_session, settings):
    return SchoolDataStore(db_session, settings)


@pytest.fixture()
def tracker(store, settings):
    return ElectiveTracker(store, settings)


@pytest.fixture()
def suggestion_engine(store, settings):
    return SuggestionEngine(store, settings)


@pytest.fixture()
def school(db_session):
    return SchoolBuilder(db_session)


@pytest.fixture()
def elective_fixture(school):
    """Grade 5 middle school with one elective already placed in 5/A.

    5/A still needs Drama, Music Workshop and Robotics. Burak teaches 5/C in
    the same period 5/A has Mathematics, so pairing him with 5/A conflicts.
    """
    class_a = school.school_class(grade=5, section="A")
    class_b = school.school_class(grade=5, section="B")
    class_c = school.school_class(grade=5, section="C")
    class_6 = school.school_class(grade=6, section="A")

    mathematics = school.lesson("Mathematics", weekly_hours=4, mandatory=True)
    chess = school.lesson("Chess")
    drama = school.lesson("Drama")
    music = school.lesson("Music Workshop")
    robotics = school.lesson("Robotics")
    chess_6 = school.lesson("Chess", grade=6)
    debate = school.lesson("Debate", school_type="Anadolu Lisesi")

    ayse = school.teacher("Ayse", subject="Chess")
    burak = school.teacher("Burak", subject="Drama")
    cem = school.teacher("Cem", subject="Mathematics")
    deniz = school.teacher("Deniz")
    ece = school.teacher("Ece", subject="Robotics")

    school.assign(cem, mathematics, class_a)
    school.assign(ayse, chess, class_a)
    school.assign(deniz, drama, class_b)
    school.assign(burak, drama, class_c)

    school.slot(class_a, cem, mathematics, day=1, period=1)
    school.slot(class_a, ayse, chess, day=1, period=2)
    school.slot(class_c, burak, drama, day=1, period=1)

    return {
        "classes": {"5A": class_a, "5B": class_b, "5C": class_c, "6A": class_6},
        "lessons": {
            "mathematics": mathematics,
            "chess": chess,
            "drama": drama,
            "music": music,
            "robotics": robotics,
            "chess_6": chess_6,
            "debate": debate,
        },
        "teachers": {"ayse": ayse, "burak": burak, "cem": cem, "deniz": deniz, "ece": ece},
    }


@pytest.fixture()
def client(session_factory):
    def override_get_db():
        db = session_factory()
        try:
            yield db
        finally:
            db.close()

    app.dependency_overrides[get_db] = override_get_db

    with TestClient(app) as test_client:
        yield test_client

    app.dependency_overrides.clear()
