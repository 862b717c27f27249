from __future__ import annotations

from collections import defaultdict
from collections.abc import Iterable
from datetime import datetime, timezone

from sqlalchemy import case, delete, func, select, update
from sqlalchemy.orm import Session

from app.core.config import Settings, get_settings
from app.models.elective_status import ElectiveAssignmentStatus, ElectiveStatus
from app.models.elective_suggestion import ElectiveSuggestion
from app.models.lesson import Lesson
from app.models.schedule_item import ScheduleItem
from app.models.school_class import SchoolClass
from app.models.teacher import Teacher
from app.models.teacher_assignment import TeacherAssignment
from app.services.conflict_service import Slot
from app.services.workload import weekly_hour_limit


def is_valid_id(value: object) -> bool:
    return isinstance(value, int) and not isinstance(value, bool) and value > 0


class SchoolDataStore:
    """Read/write access to the school tables used by the elective engines.

    Wraps a single request-scoped ``Session``. Methods only flush; callers
    decide when to ``commit`` or ``rollback``.
    """

    def __init__(self, db: Session, settings: Settings | None = None) -> None:
        self.db = db
        self.settings = settings or get_settings()

    def commit(self) -> None:
        self.db.commit()

    def rollback(self) -> None:
        self.db.rollback()

    # -- classes -----------------------------------------------------------

    def get_class(self, class_id: int) -> SchoolClass | None:
        return self.db.get(SchoolClass, class_id)

    def list_class_ids(self, school_type: str | None = None) -> list[int]:
        query = select(SchoolClass.id).order_by(SchoolClass.grade, SchoolClass.section, SchoolClass.id)
        if school_type is not None:
            query = query.where(SchoolClass.school_type == school_type)
        return list(self.db.execute(query).scalars())

    def class_count(self) -> int:
        return self.db.execute(select(func.count(SchoolClass.id))).scalar_one()

    # -- lessons and teachers ----------------------------------------------

    def get_lesson(self, lesson_id: int) -> Lesson | None:
        return self.db.get(Lesson, lesson_id)

    def elective_lessons(self, grade: int, school_type: str) -> list[Lesson]:
        query = (
            select(Lesson)
            .where(
                Lesson.grade == grade,
                Lesson.school_type == school_type,
                Lesson.is_mandatory.is_(False),
            )
            .order_by(Lesson.name, Lesson.id)
        )
        return list(self.db.execute(query).scalars())

    def get_teacher(self, teacher_id: int) -> Teacher | None:
        return self.db.get(Teacher, teacher_id)

    def list_teachers(self) -> list[Teacher]:
        return list(self.db.execute(select(Teacher).order_by(Teacher.name, Teacher.id)).scalars())

    def teachers_by_taught_lesson_name(self, lesson_names: Iterable[str]) -> dict[str, set[int]]:
        names = sorted(set(lesson_names))
        if not names:
            return {}
        rows = self.db.execute(
            select(Lesson.name, TeacherAssignment.teacher_id)
            .join(Lesson, Lesson.id == TeacherAssignment.lesson_id)
            .where(Lesson.name.in_(names))
            .distinct()
        ).all()
        taught: dict[str, set[int]] = defaultdict(set)
        for lesson_name, teacher_id in rows:
            taught[lesson_name].add(teacher_id)
        return dict(taught)

    def weekly_hour_limit(self, school_type: str | None) -> int:
        return weekly_hour_limit(school_type, self.settings)

    # -- assignments -------------------------------------------------------

    def assigned_lesson_ids(self, class_id: int) -> set[int]:
        rows = self.db.execute(
            select(TeacherAssignment.lesson_id).where(TeacherAssignment.class_id == class_id)
        ).scalars()
        return set(rows)

    def count_assigned_electives(self, class_id: int) -> int:
        return self.db.execute(
            select(func.count(TeacherAssignment.id))
            .join(Lesson, Lesson.id == TeacherAssignment.lesson_id)
            .where(TeacherAssignment.class_id == class_id, Lesson.is_mandatory.is_(False))
        ).scalar_one()

    def assigned_elective_names(self, class_id: int) -> list[str]:
        rows = self.db.execute(
            select(Lesson.name)
            .join(TeacherAssignment, TeacherAssignment.lesson_id == Lesson.id)
            .where(TeacherAssignment.class_id == class_id, Lesson.is_mandatory.is_(False))
            .order_by(Lesson.name)
        ).scalars()
        return list(rows)

    def teacher_hours(self) -> dict[int, int]:
        rows = self.db.execute(
            select(TeacherAssignment.teacher_id, func.coalesce(func.sum(Lesson.weekly_hours), 0))
            .join(Lesson, Lesson.id == TeacherAssignment.lesson_id)
            .group_by(TeacherAssignment.teacher_id)
        ).all()
        return {teacher_id: int(hours or 0) for teacher_id, hours in rows}

    def teacher_hours_for(self, teacher_id: int) -> int:
        hours = self.db.execute(
            select(func.coalesce(func.sum(Lesson.weekly_hours), 0))
            .select_from(TeacherAssignment)
            .join(Lesson, Lesson.id == TeacherAssignment.lesson_id)
            .where(TeacherAssignment.teacher_id == teacher_id)
        ).scalar_one()
        return int(hours or 0)

    def lesson_assignment_counts(self, lesson_ids: Iterable[int]) -> dict[int, int]:
        ids = sorted(set(lesson_ids))
        if not ids:
            return {}
        rows = self.db.execute(
            select(TeacherAssignment.lesson_id, func.count(TeacherAssignment.id))
            .where(TeacherAssignment.lesson_id.in_(ids))
            .group_by(TeacherAssignment.lesson_id)
        ).all()
        return {lesson_id: count for lesson_id, count in rows}

    def lesson_assignment_count(self, lesson_id: int) -> int:
        return self.db.execute(
            select(func.count(TeacherAssignment.id)).where(TeacherAssignment.lesson_id == lesson_id)
        ).scalar_one()

    def create_assignment(self, *, teacher_id: int, lesson_id: int, class_id: int) -> TeacherAssignment:
        assignment = TeacherAssignment(teacher_id=teacher_id, lesson_id=lesson_id, class_id=class_id)
        self.db.add(assignment)
        self.db.flush()
        return assignment

    # -- schedule ----------------------------------------------------------

    def class_slots(self, class_id: int) -> set[Slot]:
        rows = self.db.execute(
            select(ScheduleItem.day_of_week, ScheduleItem.time_slot).where(ScheduleItem.class_id == class_id)
        ).all()
        return {(day, period) for day, period in rows}

    def teacher_slots(self, teacher_ids: Iterable[int]) -> dict[int, set[Slot]]:
        ids = sorted(set(teacher_ids))
        if not ids:
            return {}
        rows = self.db.execute(
            select(ScheduleItem.teacher_id, ScheduleItem.day_of_week, ScheduleItem.time_slot).where(
                ScheduleItem.teacher_id.in_(ids)
            )
        ).all()
        slots: dict[int, set[Slot]] = defaultdict(set)
        for teacher_id, day, period in rows:
            slots[teacher_id].add((day, period))
        return dict(slots)

    # -- elective status ---------------------------------------------------

    def get_elective_status(self, class_id: int) -> tuple[ElectiveAssignmentStatus, SchoolClass] | None:
        row = self.db.execute(
            select(ElectiveAssignmentStatus, SchoolClass)
            .join(SchoolClass, SchoolClass.id == ElectiveAssignmentStatus.class_id)
            .where(ElectiveAssignmentStatus.class_id == class_id)
        ).first()
        if row is None:
            return None
        return row[0], row[1]

    def list_elective_statuses(
        self,
        status: ElectiveStatus | None = None,
    ) -> list[tuple[ElectiveAssignmentStatus, SchoolClass]]:
        query = select(ElectiveAssignmentStatus, SchoolClass).join(
            SchoolClass, SchoolClass.id == ElectiveAssignmentStatus.class_id
        )
        if status is not None:
            query = query.where(ElectiveAssignmentStatus.status == status)
        if status == ElectiveStatus.incomplete:
            query = query.order_by(
                ElectiveAssignmentStatus.missing_electives.desc(),
                SchoolClass.grade,
                SchoolClass.section,
            )
        else:
            query = query.order_by(SchoolClass.grade, SchoolClass.section)
        return [(item, school_class) for item, school_class in self.db.execute(query).all()]

    def incomplete_class_ids(self) -> list[int]:
        rows = self.db.execute(
            select(ElectiveAssignmentStatus.class_id)
            .where(ElectiveAssignmentStatus.status == ElectiveStatus.incomplete)
            .order_by(ElectiveAssignmentStatus.class_id)
        ).scalars()
        return list(rows)

    def upsert_elective_status(
        self,
        *,
        class_id: int,
        grade: int,
        required: int,
        assigned: int,
        missing: int,
        status: ElectiveStatus,
    ) -> ElectiveAssignmentStatus:
        record = self.db.execute(
            select(ElectiveAssignmentStatus).where(ElectiveAssignmentStatus.class_id == class_id)
        ).scalar_one_or_none()
        if record is None:
            record = ElectiveAssignmentStatus(class_id=class_id)
            self.db.add(record)
        record.grade = grade
        record.required_electives = required
        record.assigned_electives = assigned
        record.missing_electives = missing
        record.status = status
        record.last_updated = datetime.now(tz=timezone.utc)
        self.db.flush()
        return record

    def status_aggregates(self) -> dict[str, float | int | None]:
        status_column = ElectiveAssignmentStatus.status
        row = self.db.execute(
            select(
                func.count(ElectiveAssignmentStatus.id).label("total"),
                func.sum(case((status_column == ElectiveStatus.complete, 1), else_=0)).label("complete"),
                func.sum(case((status_column == ElectiveStatus.incomplete, 1), else_=0)).label("incomplete"),
                func.sum(case((status_column == ElectiveStatus.over_assigned, 1), else_=0)).label("over_assigned"),
                func.sum(ElectiveAssignmentStatus.missing_electives).label("total_missing"),
                func.avg(ElectiveAssignmentStatus.assigned_electives).label("average_assigned"),
            )
        ).one()
        return dict(row._mapping)

    def elective_distribution(self) -> list[tuple[str, int]]:
        rows = self.db.execute(
            select(Lesson.name, func.count(TeacherAssignment.id).label("assignment_count"))
            .join(TeacherAssignment, TeacherAssignment.lesson_id == Lesson.id)
            .join(ElectiveAssignmentStatus, ElectiveAssignmentStatus.class_id == TeacherAssignment.class_id)
            .where(Lesson.is_mandatory.is_(False))
            .group_by(Lesson.id, Lesson.name)
            .order_by(func.count(TeacherAssignment.id).desc(), Lesson.name)
        ).all()
        return [(name, count) for name, count in rows]

    # -- suggestion cache --------------------------------------------------

    def get_suggestion(self, suggestion_id: int) -> ElectiveSuggestion | None:
        return self.db.get(ElectiveSuggestion, suggestion_id)

    def applied_suggestion_pairs(self, class_id: int) -> set[tuple[int, int]]:
        rows = self.db.execute(
            select(ElectiveSuggestion.lesson_id, ElectiveSuggestion.teacher_id).where(
                ElectiveSuggestion.class_id == class_id,
                ElectiveSuggestion.is_applied.is_(True),
            )
        ).all()
        return {(lesson_id, teacher_id) for lesson_id, teacher_id in rows}

    def delete_unapplied_suggestions(self, class_id: int | None = None) -> int:
        statement = delete(ElectiveSuggestion).where(ElectiveSuggestion.is_applied.is_(False))
        if class_id is not None:
            statement = statement.where(ElectiveSuggestion.class_id == class_id)
        result = self.db.execute(statement)
        return result.rowcount or 0

    def upsert_suggestion(
        self,
        *,
        class_id: int,
        lesson_id: int,
        teacher_id: int,
        score: float,
        reasoning: str,
    ) -> ElectiveSuggestion | None:
        record = self.db.execute(
            select(ElectiveSuggestion).where(
                ElectiveSuggestion.class_id == class_id,
                ElectiveSuggestion.lesson_id == lesson_id,
                ElectiveSuggestion.teacher_id == teacher_id,
            )
        ).scalar_one_or_none()
        if record is not None and record.is_applied:
            return None
        if record is None:
            record = ElectiveSuggestion(
                class_id=class_id,
                lesson_id=lesson_id,
                teacher_id=teacher_id,
                is_applied=False,
            )
            self.db.add(record)
        record.suggestion_score = score
        record.reasoning = reasoning
        self.db.flush()
        return record

    def cached_suggestions(
        self,
        class_id: int,
    ) -> list[tuple[ElectiveSuggestion, str, str, SchoolClass]]:
        rows = self.db.execute(
            select(ElectiveSuggestion, Lesson.name, Teacher.name, SchoolClass)
            .join(Lesson, Lesson.id == ElectiveSuggestion.lesson_id)
            .join(Teacher, Teacher.id == ElectiveSuggestion.teacher_id)
            .join(SchoolClass, SchoolClass.id == ElectiveSuggestion.class_id)
            .where(ElectiveSuggestion.class_id == class_id, ElectiveSuggestion.is_applied.is_(False))
            .order_by(
                ElectiveSuggestion.suggestion_score.desc(),
                ElectiveSuggestion.lesson_id,
                ElectiveSuggestion.teacher_id,
            )
        ).all()
        return [(item, lesson_name, teacher_name, school_class) for item, lesson_name, teacher_name, school_class in rows]

    def mark_suggestion_applied(self, suggestion_id: int) -> bool:
        """Flip ``is_applied`` only if it is still false; True when this call won."""
        result = self.db.execute(
            update(ElectiveSuggestion)
            .where(ElectiveSuggestion.id == suggestion_id, ElectiveSuggestion.is_applied.is_(False))
            .values(is_applied=True)
        )
        return result.rowcount == 1
