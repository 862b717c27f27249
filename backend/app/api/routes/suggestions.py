from fastapi import APIRouter, Body, Depends, Query

from app.api.deps import get_suggestion_engine
from app.schemas.suggestion import (
    ApplySuggestionOut,
    ElectiveSuggestionOut,
    SuggestionCacheRefreshOut,
    SuggestionCriteriaOverrides,
    SuggestionScoreOut,
)
from app.services.suggestion_engine import SuggestionEngine

router = APIRouter()


@router.post("/classes/{class_id}/generate", response_model=list[ElectiveSuggestionOut])
def generate_suggestions(
    class_id: int,
    criteria: SuggestionCriteriaOverrides | None = Body(default=None),
    engine: SuggestionEngine = Depends(get_suggestion_engine),
) -> list[ElectiveSuggestionOut]:
    return engine.generate_suggestions(class_id, criteria)


@router.get("/classes/{class_id}", response_model=list[ElectiveSuggestionOut])
def list_cached_suggestions(
    class_id: int,
    engine: SuggestionEngine = Depends(get_suggestion_engine),
) -> list[ElectiveSuggestionOut]:
    return engine.get_cached_suggestions(class_id)


@router.get("/score", response_model=SuggestionScoreOut)
def score_suggestion(
    class_id: int = Query(...),
    lesson_id: int = Query(...),
    teacher_id: int = Query(...),
    prefer_low_workload: bool | None = Query(default=None),
    prefer_popular: bool | None = Query(default=None),
    avoid_conflicts: bool | None = Query(default=None),
    engine: SuggestionEngine = Depends(get_suggestion_engine),
) -> SuggestionScoreOut:
    overrides = SuggestionCriteriaOverrides(
        prefer_low_workload=prefer_low_workload,
        prefer_popular=prefer_popular,
        avoid_conflicts=avoid_conflicts,
    )
    score = engine.score_suggestion(class_id, lesson_id, teacher_id, overrides)
    return SuggestionScoreOut(class_id=class_id, lesson_id=lesson_id, teacher_id=teacher_id, score=score)


@router.post("/{suggestion_id}/apply", response_model=ApplySuggestionOut)
def apply_suggestion(
    suggestion_id: int,
    engine: SuggestionEngine = Depends(get_suggestion_engine),
) -> ApplySuggestionOut:
    return ApplySuggestionOut(success=engine.apply_suggestion(suggestion_id))


@router.post("/refresh", response_model=SuggestionCacheRefreshOut)
def refresh_suggestion_cache(engine: SuggestionEngine = Depends(get_suggestion_engine)) -> SuggestionCacheRefreshOut:
    return SuggestionCacheRefreshOut(classes_refreshed=engine.refresh_suggestion_cache())
