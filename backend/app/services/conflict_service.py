from __future__ import annotations

from collections.abc import Iterable

# (day_of_week, time_slot)
Slot = tuple[int, int]


def has_schedule_conflict(class_slots: Iterable[Slot], teacher_slots: Iterable[Slot]) -> bool:
    class_set = set(class_slots)
    if not class_set:
        return False
    return not class_set.isdisjoint(teacher_slots)
