from fastapi import APIRouter, Depends, HTTPException, Query, status

from app.api.deps import get_elective_tracker
from app.schemas.elective import (
    CompletionOut,
    ElectiveDistributionEntry,
    ElectiveStatisticsOut,
    ElectiveStatusOut,
    IncompleteAssignmentOut,
    StatusRefreshSummary,
)
from app.services.elective_tracker import ElectiveTracker

router = APIRouter()


@router.get("/status", response_model=list[ElectiveStatusOut])
def list_elective_statuses(tracker: ElectiveTracker = Depends(get_elective_tracker)) -> list[ElectiveStatusOut]:
    return tracker.get_all_elective_statuses()


@router.post("/status/refresh", response_model=StatusRefreshSummary)
def refresh_elective_statuses(
    school_type: str | None = Query(default=None, max_length=100),
    tracker: ElectiveTracker = Depends(get_elective_tracker),
) -> StatusRefreshSummary:
    return tracker.refresh_all_elective_statuses(school_type)


@router.get("/status/{class_id}", response_model=ElectiveStatusOut)
def get_elective_status(
    class_id: int,
    tracker: ElectiveTracker = Depends(get_elective_tracker),
) -> ElectiveStatusOut:
    result = tracker.get_elective_status_for_class(class_id)
    if result is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Elective status not computed for class")
    return result


@router.post("/status/{class_id}", response_model=ElectiveStatusOut)
def update_elective_status(
    class_id: int,
    tracker: ElectiveTracker = Depends(get_elective_tracker),
) -> ElectiveStatusOut:
    result = tracker.update_elective_status(class_id)
    if result is None:
        raise HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail="Invalid class id")
    return result


@router.get("/incomplete", response_model=list[IncompleteAssignmentOut])
def list_incomplete_assignments(
    tracker: ElectiveTracker = Depends(get_elective_tracker),
) -> list[IncompleteAssignmentOut]:
    return tracker.get_incomplete_assignments()


@router.get("/statistics", response_model=ElectiveStatisticsOut)
def elective_statistics(tracker: ElectiveTracker = Depends(get_elective_tracker)) -> ElectiveStatisticsOut:
    return tracker.get_elective_statistics()


@router.get("/completion", response_model=CompletionOut)
def elective_completion(tracker: ElectiveTracker = Depends(get_elective_tracker)) -> CompletionOut:
    return CompletionOut(completion_percentage=tracker.get_completion_percentage())


@router.get("/distribution", response_model=list[ElectiveDistributionEntry])
def elective_distribution(
    tracker: ElectiveTracker = Depends(get_elective_tracker),
) -> list[ElectiveDistributionEntry]:
    return tracker.get_elective_distribution()
