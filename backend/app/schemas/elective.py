from __future__ import annotations

from datetime import datetime
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

from app.models.elective_status import ElectiveStatus


class ElectiveStatusOut(BaseModel):
    class_id: int
    class_name: str
    grade: int
    required_electives: int
    assigned_electives: int
    missing_electives: int
    status: ElectiveStatus
    last_updated: datetime | None = None

    model_config = ConfigDict(from_attributes=True)


class IncompleteAssignmentOut(BaseModel):
    class_id: int
    class_name: str
    grade: int
    missing_count: int
    severity: Literal["warning", "critical"]
    assigned_electives: list[str] = Field(default_factory=list)


class ElectiveStatisticsOut(BaseModel):
    total_classes: int = 0
    complete_classes: int = 0
    incomplete_classes: int = 0
    over_assigned_classes: int = 0
    total_missing_assignments: int = 0
    average_electives_per_class: float = 0.0
    completion_percentage: int = 0


class CompletionOut(BaseModel):
    completion_percentage: int


class ElectiveDistributionEntry(BaseModel):
    lesson_name: str
    assignment_count: int
    percentage: int


class StatusRefreshSummary(BaseModel):
    refreshed: int = 0
    failed: int = 0
    failed_class_ids: list[int] = Field(default_factory=list)
