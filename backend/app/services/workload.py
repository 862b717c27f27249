from __future__ import annotations

from app.core.config import Settings
from app.core.exceptions import ConfigurationError


def weekly_hour_limit(school_type: str | None, settings: Settings) -> int:
    normalized = (school_type or "").strip()
    limit = settings.weekly_hour_limits.get(normalized, settings.default_weekly_hour_limit)
    if limit < 1:
        raise ConfigurationError(f"Weekly hour limit for school type '{normalized}' must be positive")
    return limit


def workload_percentage(assigned_hours: float | None, weekly_limit: int) -> float:
    if weekly_limit <= 0:
        return 100.0
    percentage = (assigned_hours or 0) / weekly_limit * 100
    return min(100.0, max(0.0, percentage))
