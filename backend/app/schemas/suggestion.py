from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

from app.core.config import MAX_SUGGESTION_RESULTS, Settings


class SuggestionCriteria(BaseModel):
    """Scoring switches for one generation pass.

    Immutable; use :meth:`merged` to apply caller overrides field by field.
    """

    model_config = ConfigDict(frozen=True)

    prefer_low_workload: bool = True
    prefer_popular: bool = True
    avoid_conflicts: bool = True
    max_suggestions: int = Field(default=10, ge=1, le=MAX_SUGGESTION_RESULTS)

    @classmethod
    def from_settings(cls, settings: Settings) -> "SuggestionCriteria":
        return cls(max_suggestions=settings.suggestion_max_results)

    def merged(self, overrides: "SuggestionCriteriaOverrides | None") -> "SuggestionCriteria":
        if overrides is None:
            return self
        values = self.model_dump()
        values.update(overrides.model_dump(exclude_none=True))
        return SuggestionCriteria(**values)


class SuggestionCriteriaOverrides(BaseModel):
    prefer_low_workload: bool | None = None
    prefer_popular: bool | None = None
    avoid_conflicts: bool | None = None
    max_suggestions: int | None = Field(default=None, ge=1, le=MAX_SUGGESTION_RESULTS)


class ElectiveSuggestionOut(BaseModel):
    id: int
    class_id: int
    lesson_id: int
    teacher_id: int
    suggestion_score: float
    reasoning: str | None = None
    is_applied: bool = False
    created_at: datetime | None = None
    lesson_name: str
    teacher_name: str
    class_name: str
    grade: int


class SuggestionScoreOut(BaseModel):
    class_id: int
    lesson_id: int
    teacher_id: int
    score: float


class ApplySuggestionOut(BaseModel):
    success: bool


class SuggestionCacheRefreshOut(BaseModel):
    classes_refreshed: int
