from __future__ import annotations

import logging
from dataclasses import dataclass

from sqlalchemy.exc import SQLAlchemyError

from app.core.config import Settings, get_settings
from app.core.exceptions import AppError, ResourceNotFoundError
from app.models.lesson import Lesson
from app.models.school_class import SchoolClass
from app.models.teacher import Teacher
from app.schemas.suggestion import (
    ElectiveSuggestionOut,
    SuggestionCriteria,
    SuggestionCriteriaOverrides,
)
from app.services.conflict_service import has_schedule_conflict
from app.services.school_data import SchoolDataStore, is_valid_id
from app.services.suggestion_scoring import (
    ScoreFactors,
    build_reasoning,
    compute_score,
    popularity_percentage,
    subject_matches,
)
from app.services.workload import workload_percentage

logger = logging.getLogger(__name__)

# Worst-case stand-ins used when a scoring lookup fails.
FALLBACK_WORKLOAD = 100.0
FALLBACK_POPULARITY = 0.0
FALLBACK_CONFLICT = True


@dataclass(frozen=True)
class RankedCandidate:
    lesson: Lesson
    teacher: Teacher
    factors: ScoreFactors
    score: float


class SuggestionEngine:
    """Ranks (lesson, teacher) candidates for classes short of electives.

    ``generate_suggestions`` prefetches everything it needs with a fixed
    number of queries and scores pairs in memory; ``score_suggestion`` looks
    up one pair directly. Both feed :func:`compute_score`.
    """

    def __init__(self, store: SchoolDataStore, settings: Settings | None = None) -> None:
        self.store = store
        self.settings = settings or get_settings()

    def resolve_criteria(
        self,
        criteria: SuggestionCriteria | SuggestionCriteriaOverrides | None = None,
    ) -> SuggestionCriteria:
        if isinstance(criteria, SuggestionCriteria):
            return criteria
        return SuggestionCriteria.from_settings(self.settings).merged(criteria)

    # -- generation --------------------------------------------------------

    def generate_suggestions(
        self,
        class_id: int,
        criteria: SuggestionCriteria | SuggestionCriteriaOverrides | None = None,
    ) -> list[ElectiveSuggestionOut]:
        if not is_valid_id(class_id):
            return []

        try:
            school_class = self.store.get_class(class_id)
        except SQLAlchemyError:
            logger.exception("Class lookup failed while generating suggestions for class %s", class_id)
            return []
        if school_class is None:
            raise ResourceNotFoundError("Class", class_id)

        effective = self.resolve_criteria(criteria)
        try:
            ranked = self.rank_candidates(school_class, effective)
            self._cache_candidates(school_class.id, ranked)
            self.store.commit()
            return self.get_cached_suggestions(class_id)
        except SQLAlchemyError:
            self.store.rollback()
            logger.exception("Suggestion generation failed for class %s", class_id)
            return []

    def rank_candidates(self, school_class: SchoolClass, criteria: SuggestionCriteria) -> list[RankedCandidate]:
        lessons = self._unassigned_electives(school_class)
        if not lessons:
            return []

        teachers = self.store.list_teachers()
        if not teachers:
            return []
        teachers_by_id = {teacher.id: teacher for teacher in teachers}
        # Applied pairs keep their own row and are not ranked again.
        applied = self.store.applied_suggestion_pairs(school_class.id)
        taught = self.store.teachers_by_taught_lesson_name(lesson.name for lesson in lessons)

        candidates_by_lesson = {
            lesson.id: self._candidate_teacher_ids(lesson, teachers, taught) for lesson in lessons
        }
        candidate_teacher_ids = set().union(*candidates_by_lesson.values())

        workloads = self._prefetch_workloads(school_class)
        popularity = self._prefetch_popularity([lesson.id for lesson in lessons])
        conflicts = self._prefetch_conflicts(school_class.id, candidate_teacher_ids)

        ranked: list[RankedCandidate] = []
        for lesson in lessons:
            for teacher_id in candidates_by_lesson[lesson.id]:
                if (lesson.id, teacher_id) in applied:
                    continue
                teacher = teachers_by_id[teacher_id]
                factors = ScoreFactors(
                    workload_percentage=FALLBACK_WORKLOAD if workloads is None else workloads.get(teacher_id, 0.0),
                    popularity_percentage=FALLBACK_POPULARITY if popularity is None else popularity.get(lesson.id, 0.0),
                    has_conflict=FALLBACK_CONFLICT if conflicts is None else conflicts.get(teacher_id, False),
                    subject_match=subject_matches(teacher.subject, lesson.name),
                )
                score = compute_score(factors, criteria)
                if score > 0:
                    ranked.append(RankedCandidate(lesson=lesson, teacher=teacher, factors=factors, score=score))

        ranked.sort(key=lambda item: (-item.score, item.lesson.id, item.teacher.id))
        return ranked[: criteria.max_suggestions]

    def _unassigned_electives(self, school_class: SchoolClass) -> list[Lesson]:
        electives = self.store.elective_lessons(school_class.grade, school_class.school_type)
        if not electives:
            return []
        assigned = self.store.assigned_lesson_ids(school_class.id)
        return [lesson for lesson in electives if lesson.id not in assigned]

    @staticmethod
    def _candidate_teacher_ids(
        lesson: Lesson,
        teachers: list[Teacher],
        taught: dict[str, set[int]],
    ) -> list[int]:
        previously_taught = taught.get(lesson.name, set())
        matched = [
            teacher.id
            for teacher in teachers
            if teacher.id in previously_taught or subject_matches(teacher.subject, lesson.name)
        ]
        if matched:
            return matched
        return [teacher.id for teacher in teachers]

    def _prefetch_workloads(self, school_class: SchoolClass) -> dict[int, float] | None:
        limit = self.store.weekly_hour_limit(school_class.school_type)
        try:
            hours = self.store.teacher_hours()
        except SQLAlchemyError:
            logger.exception("Teacher workload prefetch failed; assuming full workloads")
            return None
        return {teacher_id: workload_percentage(value, limit) for teacher_id, value in hours.items()}

    def _prefetch_popularity(self, lesson_ids: list[int]) -> dict[int, float] | None:
        try:
            counts = self.store.lesson_assignment_counts(lesson_ids)
            total_classes = self.store.class_count()
        except SQLAlchemyError:
            logger.exception("Lesson popularity prefetch failed; treating lessons as unpopular")
            return None
        return {lesson_id: popularity_percentage(counts.get(lesson_id, 0), total_classes) for lesson_id in lesson_ids}

    def _prefetch_conflicts(self, class_id: int, teacher_ids: set[int]) -> dict[int, bool] | None:
        try:
            class_slots = self.store.class_slots(class_id)
            slots_by_teacher = self.store.teacher_slots(teacher_ids)
        except SQLAlchemyError:
            logger.exception("Schedule prefetch failed for class %s; assuming conflicts", class_id)
            return None
        return {
            teacher_id: has_schedule_conflict(class_slots, slots_by_teacher.get(teacher_id, ()))
            for teacher_id in teacher_ids
        }

    def _cache_candidates(self, class_id: int, ranked: list[RankedCandidate]) -> None:
        self.store.delete_unapplied_suggestions(class_id)
        for candidate in ranked:
            self.store.upsert_suggestion(
                class_id=class_id,
                lesson_id=candidate.lesson.id,
                teacher_id=candidate.teacher.id,
                score=candidate.score,
                reasoning=build_reasoning(
                    candidate.teacher.name,
                    candidate.lesson.name,
                    candidate.factors,
                    candidate.score,
                ),
            )

    # -- single pair scoring -----------------------------------------------

    def score_suggestion(
        self,
        class_id: int,
        lesson_id: int,
        teacher_id: int,
        criteria: SuggestionCriteria | SuggestionCriteriaOverrides | None = None,
    ) -> float:
        if not all(is_valid_id(value) for value in (class_id, lesson_id, teacher_id)):
            return 0.0

        effective = self.resolve_criteria(criteria)
        try:
            school_class = self.store.get_class(class_id)
            lesson = self.store.get_lesson(lesson_id)
            teacher = self.store.get_teacher(teacher_id)
        except SQLAlchemyError:
            logger.exception("Lookup failed while scoring class %s lesson %s teacher %s", class_id, lesson_id, teacher_id)
            return 0.0
        if school_class is None or lesson is None or teacher is None:
            return 0.0

        return compute_score(self.pair_factors(school_class, lesson, teacher), effective)

    def pair_factors(self, school_class: SchoolClass, lesson: Lesson, teacher: Teacher) -> ScoreFactors:
        return ScoreFactors(
            workload_percentage=self._teacher_workload(teacher.id, school_class.school_type),
            popularity_percentage=self._lesson_popularity(lesson.id),
            has_conflict=self._schedule_conflict(school_class.id, teacher.id),
            subject_match=subject_matches(teacher.subject, lesson.name),
        )

    def _teacher_workload(self, teacher_id: int, school_type: str) -> float:
        limit = self.store.weekly_hour_limit(school_type)
        try:
            hours = self.store.teacher_hours_for(teacher_id)
        except SQLAlchemyError:
            logger.exception("Workload lookup failed for teacher %s; assuming full workload", teacher_id)
            return FALLBACK_WORKLOAD
        return workload_percentage(hours, limit)

    def _lesson_popularity(self, lesson_id: int) -> float:
        try:
            count = self.store.lesson_assignment_count(lesson_id)
            total_classes = self.store.class_count()
        except SQLAlchemyError:
            logger.exception("Popularity lookup failed for lesson %s", lesson_id)
            return FALLBACK_POPULARITY
        return popularity_percentage(count, total_classes)

    def _schedule_conflict(self, class_id: int, teacher_id: int) -> bool:
        try:
            class_slots = self.store.class_slots(class_id)
            teacher_slots = self.store.teacher_slots([teacher_id]).get(teacher_id, set())
        except SQLAlchemyError:
            logger.exception("Schedule lookup failed for class %s teacher %s; assuming conflict", class_id, teacher_id)
            return FALLBACK_CONFLICT
        return has_schedule_conflict(class_slots, teacher_slots)

    # -- cache -------------------------------------------------------------

    def get_cached_suggestions(self, class_id: int) -> list[ElectiveSuggestionOut]:
        if not is_valid_id(class_id):
            return []
        return [
            ElectiveSuggestionOut(
                id=item.id,
                class_id=item.class_id,
                lesson_id=item.lesson_id,
                teacher_id=item.teacher_id,
                suggestion_score=item.suggestion_score,
                reasoning=item.reasoning,
                is_applied=item.is_applied,
                created_at=item.created_at,
                lesson_name=lesson_name,
                teacher_name=teacher_name,
                class_name=school_class.display_name,
                grade=school_class.grade,
            )
            for item, lesson_name, teacher_name, school_class in self.store.cached_suggestions(class_id)
        ]

    def apply_suggestion(self, suggestion_id: int) -> bool:
        if not is_valid_id(suggestion_id):
            return False

        try:
            suggestion = self.store.get_suggestion(suggestion_id)
            if suggestion is None or suggestion.is_applied:
                return False
            teacher_id, lesson_id, class_id = suggestion.teacher_id, suggestion.lesson_id, suggestion.class_id
            if not self.store.mark_suggestion_applied(suggestion_id):
                self.store.rollback()
                return False
            self.store.create_assignment(teacher_id=teacher_id, lesson_id=lesson_id, class_id=class_id)
            self.store.commit()
        except SQLAlchemyError:
            self.store.rollback()
            logger.exception("Applying suggestion %s failed", suggestion_id)
            return False

        logger.info(
            "Applied suggestion %s: teacher %s -> lesson %s for class %s",
            suggestion_id,
            teacher_id,
            lesson_id,
            class_id,
        )
        return True

    def refresh_suggestion_cache(self) -> int:
        try:
            removed = self.store.delete_unapplied_suggestions()
            self.store.commit()
            class_ids = self.store.incomplete_class_ids()
        except SQLAlchemyError:
            self.store.rollback()
            logger.exception("Suggestion cache refresh aborted before regeneration")
            return 0

        refreshed = 0
        for class_id in class_ids:
            try:
                self.generate_suggestions(class_id)
            except (AppError, SQLAlchemyError):
                self.store.rollback()
                logger.warning("Suggestion refresh failed for class %s", class_id, exc_info=True)
                continue
            refreshed += 1
        logger.info("Suggestion cache rebuilt: %s stale rows removed, %s classes regenerated", removed, refreshed)
        return refreshed
