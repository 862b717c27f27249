"""Scoring formula shared by per-pair scoring and batched generation.

Every term is computed from a :class:`ScoreFactors` snapshot so the two code
paths cannot drift apart.
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal

from app.schemas.suggestion import SuggestionCriteria

BASE_SCORE = 20.0
WORKLOAD_WEIGHT = 30.0
POPULARITY_WEIGHT = 25.0
CONFLICT_PENALTY = 60.0
NO_CONFLICT_BONUS = 15.0
SUBJECT_MATCH_BONUS = 10.0
MAX_SCORE = 100.0

LOW_WORKLOAD_THRESHOLD = 70.0
HIGH_WORKLOAD_THRESHOLD = 90.0


@dataclass(frozen=True)
class ScoreFactors:
    workload_percentage: float
    popularity_percentage: float
    has_conflict: bool
    subject_match: bool


def round_half_up(value: float, digits: int = 0) -> float:
    """Round .5 away from zero instead of to the nearest even digit."""
    quantum = Decimal(1).scaleb(-digits)
    return float(Decimal(str(value)).quantize(quantum, rounding=ROUND_HALF_UP))


def subject_matches(subject: str | None, lesson_name: str | None) -> bool:
    """Case-insensitive substring relation in either direction."""
    subject_lower = (subject or "").lower()
    lesson_lower = (lesson_name or "").lower()
    if not subject_lower or not lesson_lower:
        return False
    return subject_lower in lesson_lower or lesson_lower in subject_lower


def popularity_percentage(assignment_count: int | None, total_classes: int | None) -> float:
    classes = total_classes or 1
    return min(100.0, (assignment_count or 0) / classes * 100)


def compute_score(factors: ScoreFactors, criteria: SuggestionCriteria) -> float:
    score = BASE_SCORE

    if criteria.prefer_low_workload:
        score += max(0.0, WORKLOAD_WEIGHT - factors.workload_percentage * WORKLOAD_WEIGHT / 100)

    if criteria.prefer_popular:
        score += factors.popularity_percentage * POPULARITY_WEIGHT / 100

    if criteria.avoid_conflicts:
        score += -CONFLICT_PENALTY if factors.has_conflict else NO_CONFLICT_BONUS

    if factors.subject_match:
        score += SUBJECT_MATCH_BONUS

    score = max(0.0, min(MAX_SCORE, score))
    return round_half_up(score, 2)


def build_reasoning(teacher_name: str, lesson_name: str, factors: ScoreFactors, score: float) -> str:
    parts = [f"{teacher_name} is recommended for {lesson_name}."]
    workload = int(round_half_up(factors.workload_percentage))
    if factors.workload_percentage < LOW_WORKLOAD_THRESHOLD:
        parts.append(f"Teacher workload is low ({workload}%).")
    elif factors.workload_percentage > HIGH_WORKLOAD_THRESHOLD:
        parts.append(f"Teacher workload is high ({workload}%).")
    if factors.has_conflict:
        parts.append("There is a risk of a schedule conflict.")
    else:
        parts.append("No schedule conflicts found.")
    if factors.subject_match:
        parts.append("Teacher subject matches the lesson.")
    parts.append(f"Score: {score:g}/100")
    return " ".join(parts)
