from __future__ import annotations

import logging

from sqlalchemy import inspect

from app.db.base import Base
from app.db.session import engine
import app.models  # noqa: F401

logger = logging.getLogger(__name__)

REQUIRED_COLUMNS: dict[str, set[str]] = {
    "classes": {"id", "school_type", "grade", "section"},
    "lessons": {"id", "name", "grade", "weekly_hours", "is_mandatory", "school_type"},
    "teachers": {"id", "name", "subject"},
    "teacher_assignments": {"id", "teacher_id", "lesson_id", "class_id"},
    "schedule_items": {"id", "class_id", "teacher_id", "day_of_week", "time_slot"},
    "elective_assignment_status": {
        "id",
        "class_id",
        "required_electives",
        "assigned_electives",
        "missing_electives",
        "status",
        "last_updated",
    },
    "elective_suggestions": {
        "id",
        "class_id",
        "lesson_id",
        "teacher_id",
        "suggestion_score",
        "reasoning",
        "is_applied",
    },
}


def missing_schema_items(connection) -> tuple[list[str], dict[str, list[str]]]:
    inspector = inspect(connection)
    table_names = set(inspector.get_table_names())
    missing_tables = sorted(name for name in REQUIRED_COLUMNS if name not in table_names)
    missing_columns: dict[str, list[str]] = {}
    for table_name, required in REQUIRED_COLUMNS.items():
        if table_name not in table_names:
            continue
        existing = {item["name"] for item in inspector.get_columns(table_name)}
        missing = sorted(required - existing)
        if missing:
            missing_columns[table_name] = missing
    return missing_tables, missing_columns


def _assert_required_columns() -> None:
    with engine.begin() as connection:
        missing_tables, missing_columns = missing_schema_items(connection)
    if missing_tables:
        raise RuntimeError(f"Missing required tables: {', '.join(missing_tables)}")
    if missing_columns:
        flattened = [f"{table}.{column}" for table, columns in missing_columns.items() for column in columns]
        raise RuntimeError(f"Missing required columns: {', '.join(flattened)}")


def ensure_runtime_schema_compatibility() -> None:
    try:
        Base.metadata.create_all(bind=engine)
        _assert_required_columns()
    except Exception as exc:  # pragma: no cover - runtime environment dependent
        logger.exception("Runtime schema compatibility bootstrap failed")
        raise RuntimeError("Runtime schema compatibility bootstrap failed") from exc
