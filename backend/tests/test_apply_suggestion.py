from unittest.mock import MagicMock

from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError

from app.models import TeacherAssignment
from app.models.elective_status import ElectiveStatus
from app.services.school_data import SchoolDataStore
from app.services.suggestion_engine import SuggestionEngine


def assignment_count(db_session, **filters):
    query = select(func.count(TeacherAssignment.id))
    for column, value in filters.items():
        query = query.where(getattr(TeacherAssignment, column) == value)
    return db_session.execute(query).scalar_one()


def test_apply_creates_assignment_once(suggestion_engine, db_session, elective_fixture):
    class_id = elective_fixture["classes"]["5A"].id
    top = suggestion_engine.generate_suggestions(class_id)[0]

    assert suggestion_engine.apply_suggestion(top.id) is True
    assert suggestion_engine.apply_suggestion(top.id) is False

    assert (
        assignment_count(db_session, class_id=class_id, lesson_id=top.lesson_id, teacher_id=top.teacher_id)
        == 1
    )


def test_applied_suggestion_leaves_the_cache_listing(suggestion_engine, elective_fixture):
    class_id = elective_fixture["classes"]["5A"].id
    top = suggestion_engine.generate_suggestions(class_id)[0]

    suggestion_engine.apply_suggestion(top.id)

    remaining = suggestion_engine.get_cached_suggestions(class_id)
    assert top.id not in {item.id for item in remaining}
    assert len(remaining) == 4


def test_apply_unknown_or_invalid_id_fails(suggestion_engine, db_session, elective_fixture):
    before = assignment_count(db_session)

    assert suggestion_engine.apply_suggestion(9999) is False
    assert suggestion_engine.apply_suggestion(0) is False
    assert suggestion_engine.apply_suggestion(None) is False

    assert assignment_count(db_session) == before


def test_lost_race_does_not_create_assignment(suggestion_engine, store, db_session, monkeypatch, elective_fixture):
    top = suggestion_engine.generate_suggestions(elective_fixture["classes"]["5A"].id)[0]
    before = assignment_count(db_session)
    # Another writer flipped the flag between our read and our update.
    monkeypatch.setattr(store, "mark_suggestion_applied", lambda suggestion_id: False)

    assert suggestion_engine.apply_suggestion(top.id) is False
    assert assignment_count(db_session) == before


def test_status_reflects_applied_suggestion(suggestion_engine, tracker, elective_fixture):
    class_id = elective_fixture["classes"]["5A"].id
    assert tracker.update_elective_status(class_id).missing_electives == 2

    suggestions = suggestion_engine.generate_suggestions(class_id)
    by_lesson = {}
    for item in suggestions:
        by_lesson.setdefault(item.lesson_name, item)
    assert suggestion_engine.apply_suggestion(by_lesson["Drama"].id)
    assert suggestion_engine.apply_suggestion(by_lesson["Robotics"].id)

    status = tracker.update_elective_status(class_id)
    assert status.assigned_electives == 3
    assert status.missing_electives == 0
    assert status.status == ElectiveStatus.complete


def test_store_error_during_apply_rolls_back(settings):
    store = MagicMock(spec=SchoolDataStore)
    store.get_suggestion.return_value = MagicMock(is_applied=False, teacher_id=1, lesson_id=2, class_id=3)
    store.mark_suggestion_applied.return_value = True
    store.create_assignment.side_effect = IntegrityError("INSERT INTO teacher_assignments", {}, Exception("duplicate"))

    assert SuggestionEngine(store, settings).apply_suggestion(7) is False
    store.rollback.assert_called_once()
    store.commit.assert_not_called()
