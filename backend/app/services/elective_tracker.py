from __future__ import annotations

import logging
from typing import Literal

from sqlalchemy.exc import SQLAlchemyError

from app.core.config import Settings, get_settings
from app.core.exceptions import AppError, ResourceNotFoundError
from app.models.elective_status import ElectiveAssignmentStatus, ElectiveStatus
from app.models.school_class import SchoolClass
from app.schemas.elective import (
    ElectiveDistributionEntry,
    ElectiveStatisticsOut,
    ElectiveStatusOut,
    IncompleteAssignmentOut,
    StatusRefreshSummary,
)
from app.services.school_data import SchoolDataStore, is_valid_id
from app.services.suggestion_scoring import round_half_up

logger = logging.getLogger(__name__)


def classify_electives(assigned: int, required: int) -> tuple[int, ElectiveStatus]:
    missing = max(0, required - assigned)
    if assigned == required:
        return missing, ElectiveStatus.complete
    if assigned < required:
        return missing, ElectiveStatus.incomplete
    return missing, ElectiveStatus.over_assigned


def missing_severity(missing: int) -> Literal["warning", "critical"]:
    return "critical" if missing >= 2 else "warning"


def _status_out(record: ElectiveAssignmentStatus, school_class: SchoolClass) -> ElectiveStatusOut:
    return ElectiveStatusOut(
        class_id=record.class_id,
        class_name=school_class.display_name,
        grade=school_class.grade,
        required_electives=record.required_electives,
        assigned_electives=record.assigned_electives,
        missing_electives=record.missing_electives,
        status=record.status,
        last_updated=record.last_updated,
    )


class ElectiveTracker:
    """Keeps ``elective_assignment_status`` in line with live assignments."""

    def __init__(self, store: SchoolDataStore, settings: Settings | None = None) -> None:
        self.store = store
        self.settings = settings or get_settings()

    @property
    def required_electives(self) -> int:
        return self.settings.elective_required_count

    def update_elective_status(self, class_id: int) -> ElectiveStatusOut | None:
        if not is_valid_id(class_id):
            return None

        school_class = self.store.get_class(class_id)
        if school_class is None:
            raise ResourceNotFoundError("Class", class_id)

        assigned = self.store.count_assigned_electives(class_id)
        required = self.required_electives
        missing, status = classify_electives(assigned, required)

        record = self.store.upsert_elective_status(
            class_id=class_id,
            grade=school_class.grade,
            required=required,
            assigned=assigned,
            missing=missing,
            status=status,
        )
        self.store.commit()
        return _status_out(record, school_class)

    def get_elective_status_for_class(self, class_id: int) -> ElectiveStatusOut | None:
        if not is_valid_id(class_id):
            return None
        found = self.store.get_elective_status(class_id)
        if found is None:
            return None
        record, school_class = found
        return _status_out(record, school_class)

    def get_all_elective_statuses(self) -> list[ElectiveStatusOut]:
        return [_status_out(record, school_class) for record, school_class in self.store.list_elective_statuses()]

    def get_incomplete_assignments(self) -> list[IncompleteAssignmentOut]:
        items: list[IncompleteAssignmentOut] = []
        for record, school_class in self.store.list_elective_statuses(ElectiveStatus.incomplete):
            items.append(
                IncompleteAssignmentOut(
                    class_id=record.class_id,
                    class_name=school_class.display_name,
                    grade=school_class.grade,
                    missing_count=record.missing_electives,
                    severity=missing_severity(record.missing_electives),
                    assigned_electives=self.store.assigned_elective_names(record.class_id),
                )
            )
        return items

    def get_elective_statistics(self) -> ElectiveStatisticsOut:
        aggregates = self.store.status_aggregates()
        total = int(aggregates.get("total") or 0)
        complete = int(aggregates.get("complete") or 0)
        average = float(aggregates.get("average_assigned") or 0)
        return ElectiveStatisticsOut(
            total_classes=total,
            complete_classes=complete,
            incomplete_classes=int(aggregates.get("incomplete") or 0),
            over_assigned_classes=int(aggregates.get("over_assigned") or 0),
            total_missing_assignments=int(aggregates.get("total_missing") or 0),
            average_electives_per_class=round_half_up(average, 2),
            completion_percentage=int(round_half_up(complete / total * 100)) if total else 0,
        )

    def get_completion_percentage(self) -> int:
        return self.get_elective_statistics().completion_percentage

    def get_elective_distribution(self) -> list[ElectiveDistributionEntry]:
        rows = self.store.elective_distribution()
        total = sum(count for _, count in rows)
        return [
            ElectiveDistributionEntry(
                lesson_name=name,
                assignment_count=count,
                percentage=int(round_half_up(count / total * 100)) if total else 0,
            )
            for name, count in rows
        ]

    def refresh_all_elective_statuses(self, school_type: str | None = None) -> StatusRefreshSummary:
        summary = StatusRefreshSummary()
        for class_id in self.store.list_class_ids(school_type):
            try:
                self.update_elective_status(class_id)
            except (AppError, SQLAlchemyError):
                self.store.rollback()
                logger.warning("Elective status refresh failed for class %s", class_id, exc_info=True)
                summary.failed += 1
                summary.failed_class_ids.append(class_id)
                continue
            summary.refreshed += 1
        logger.info(
            "Elective statuses refreshed: %s ok, %s failed",
            summary.refreshed,
            summary.failed,
        )
        return summary
