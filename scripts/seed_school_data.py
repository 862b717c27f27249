"""Seed a small middle school with electives, teachers and a partial timetable.

Run:
  PYTHONPATH=backend python scripts/seed_school_data.py
"""

from __future__ import annotations

import os

from sqlalchemy import func, select

from app.db.bootstrap import ensure_runtime_schema_compatibility
from app.db.session import SessionLocal
from app.models.lesson import Lesson
from app.models.schedule_item import ScheduleItem
from app.models.school_class import SchoolClass
from app.models.teacher import Teacher
from app.models.teacher_assignment import TeacherAssignment

SCHOOL_TYPE = os.getenv("SEED_SCHOOL_TYPE", "Ortaokul").strip() or "Ortaokul"
MOCK_EMAIL_DOMAIN = os.getenv("SEED_MOCK_EMAIL_DOMAIN", "school.edu").strip().lower() or "school.edu"

GRADES = [5, 6, 7, 8]
SECTIONS = ["A", "B", "C"]

MANDATORY_LESSONS = {
    "Turkish": 6,
    "Mathematics": 5,
    "Science": 4,
    "Social Studies": 3,
    "English": 3,
}
ELECTIVE_LESSONS = {
    "Chess": 2,
    "Drama": 2,
    "Robotics": 2,
    "Music Workshop": 2,
    "Journalism": 2,
}

TEACHERS = [
    ("Ayse Yilmaz", "Turkish"),
    ("Mehmet Kaya", "Mathematics"),
    ("Zeynep Demir", "Science"),
    ("Ali Celik", "Social Studies"),
    ("Elif Sahin", "English"),
    ("Can Aydin", "Chess"),
    ("Selin Arslan", "Drama"),
    ("Emre Ozturk", "Robotics"),
    ("Deniz Koc", None),
]


def _email_for(name: str) -> str:
    local = name.lower().replace(" ", ".")
    return f"{local}@{MOCK_EMAIL_DOMAIN}"


def upsert_classes(session) -> list[SchoolClass]:
    classes: list[SchoolClass] = []
    for grade in GRADES:
        for section in SECTIONS:
            school_class = session.execute(
                select(SchoolClass).where(
                    SchoolClass.school_type == SCHOOL_TYPE,
                    SchoolClass.grade == grade,
                    SchoolClass.section == section,
                )
            ).scalar_one_or_none()
            if school_class is None:
                school_class = SchoolClass(school_type=SCHOOL_TYPE, grade=grade, section=section)
                session.add(school_class)
            classes.append(school_class)
    session.flush()
    return classes


def upsert_lessons(session) -> dict[tuple[int, str], Lesson]:
    lessons: dict[tuple[int, str], Lesson] = {}
    catalog = [(name, hours, True) for name, hours in MANDATORY_LESSONS.items()]
    catalog += [(name, hours, False) for name, hours in ELECTIVE_LESSONS.items()]
    for grade in GRADES:
        for name, hours, mandatory in catalog:
            lesson = session.execute(
                select(Lesson).where(
                    Lesson.school_type == SCHOOL_TYPE,
                    Lesson.grade == grade,
                    Lesson.name == name,
                )
            ).scalar_one_or_none()
            if lesson is None:
                lesson = Lesson(name=name, grade=grade, school_type=SCHOOL_TYPE)
                session.add(lesson)
            lesson.weekly_hours = hours
            lesson.is_mandatory = mandatory
            lessons[(grade, name)] = lesson
    session.flush()
    return lessons


def upsert_teachers(session) -> dict[str, Teacher]:
    teachers: dict[str, Teacher] = {}
    for name, subject in TEACHERS:
        teacher = session.execute(select(Teacher).where(Teacher.name == name)).scalar_one_or_none()
        if teacher is None:
            teacher = Teacher(name=name)
            session.add(teacher)
        teacher.subject = subject
        teacher.email = _email_for(name)
        teachers[subject or name] = teacher
    session.flush()
    return teachers


def seed_assignments(session, classes, lessons, teachers) -> None:
    """Mandatory lessons everywhere; section A also gets its first elective."""
    for school_class in classes:
        wanted = [(name, teachers[name]) for name in MANDATORY_LESSONS]
        if school_class.section == "A":
            wanted.append(("Chess", teachers["Chess"]))
        for period, (lesson_name, teacher) in enumerate(wanted, start=1):
            lesson = lessons[(school_class.grade, lesson_name)]
            exists = session.execute(
                select(TeacherAssignment.id).where(
                    TeacherAssignment.teacher_id == teacher.id,
                    TeacherAssignment.lesson_id == lesson.id,
                    TeacherAssignment.class_id == school_class.id,
                )
            ).scalar_one_or_none()
            if exists is None:
                session.add(
                    TeacherAssignment(teacher_id=teacher.id, lesson_id=lesson.id, class_id=school_class.id)
                )

            # One weekly slot per lesson; day follows the grade so teachers do not overlap.
            day = GRADES.index(school_class.grade) + 1
            time_slot = (period - 1) * len(SECTIONS) + SECTIONS.index(school_class.section) + 1
            slot = session.execute(
                select(ScheduleItem).where(
                    ScheduleItem.class_id == school_class.id,
                    ScheduleItem.day_of_week == day,
                    ScheduleItem.time_slot == time_slot,
                )
            ).scalar_one_or_none()
            if slot is None:
                session.add(
                    ScheduleItem(
                        class_id=school_class.id,
                        teacher_id=teacher.id,
                        lesson_id=lesson.id,
                        day_of_week=day,
                        time_slot=time_slot,
                    )
                )
    session.flush()


def main() -> None:
    ensure_runtime_schema_compatibility()
    with SessionLocal() as session:
        classes = upsert_classes(session)
        lessons = upsert_lessons(session)
        teachers = upsert_teachers(session)
        seed_assignments(session, classes, lessons, teachers)

        session.commit()

        class_count = session.execute(select(func.count(SchoolClass.id))).scalar_one()
        lesson_count = session.execute(select(func.count(Lesson.id))).scalar_one()
        teacher_count = session.execute(select(func.count(Teacher.id))).scalar_one()
        assignment_count = session.execute(select(func.count(TeacherAssignment.id))).scalar_one()

    print("School data seeded successfully.")
    print("")
    print(f"School type: {SCHOOL_TYPE}")
    print(f"Classes: {class_count}")
    print(f"Lessons: {lesson_count}")
    print(f"Teachers: {teacher_count}")
    print(f"Teacher assignments: {assignment_count}")


if __name__ == "__main__":
    main()
