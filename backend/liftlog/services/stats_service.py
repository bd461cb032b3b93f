# liftlog/services/stats_service.py
from __future__ import annotations

import logging
import re
from datetime import date, datetime, time, timedelta, timezone
from typing import Optional

from pydantic import TypeAdapter
from sqlalchemy.orm import Session

from liftlog.cache import keys
from liftlog.cache.store import CacheStore
from liftlog.errors import InvalidInput
from liftlog.repositories.stats_repo import StatsRepository
from liftlog.schemas.stats import ExerciseProgress, PersonalRecord, WeeklySummary, WorkoutHistory
from liftlog.services.cache_aside import CacheAside

logger = logging.getLogger(__name__)

DEFAULT_PROGRESS_DAYS = 30
MAX_PROGRESS_DAYS = 365
DEFAULT_HISTORY_LIMIT = 20
MAX_HISTORY_LIMIT = 100

_WEEK_RE = re.compile(r"^(\d{4})-W(\d{1,2})$")

_prs_adapter = TypeAdapter(list[PersonalRecord])
_weekly_adapter = TypeAdapter(WeeklySummary)
_progress_adapter = TypeAdapter(ExerciseProgress)


def _first_monday(year: int) -> date:
    jan1 = date(year, 1, 1)
    return jan1 - timedelta(days=jan1.weekday())


def parse_week(week: Optional[str], *, today: Optional[date] = None) -> tuple[int, int]:
    """'YYYY-Wnn' -> (year, week). Empty means the week containing today."""
    if not week:
        today = today or datetime.now(timezone.utc).date()
        # same arithmetic as week_bounds, so the window always holds today
        year = today.year
        if today < _first_monday(year + 1):
            return year, (today - _first_monday(year)).days // 7 + 1
        return year + 1, 1
    m = _WEEK_RE.match(week.strip())
    if not m:
        raise InvalidInput("invalid week format, expected YYYY-Wnn")
    year, num = int(m.group(1)), int(m.group(2))
    if not 1 <= num <= 53:
        raise InvalidInput("week number must be between 1 and 53")
    # week 53 of the last representable year would end past date.max
    if not date.min.year <= year < date.max.year:
        raise InvalidInput(f"week year must be between {date.min.year} and {date.max.year - 1}")
    return year, num


def week_bounds(year: int, week: int) -> tuple[datetime, datetime]:
    """
    Monday-start bounds [start, end) for `week` counted from the Monday on or
    before Jan 1 of `year`.
    """
    start = _first_monday(year) + timedelta(weeks=week - 1)
    end = start + timedelta(days=7)
    return (
        datetime.combine(start, time.min, tzinfo=timezone.utc),
        datetime.combine(end, time.min, tzinfo=timezone.utc),
    )


def format_week(year: int, week: int) -> str:
    return f"{year:04d}-W{week:02d}"


def parse_period(period: Optional[str]) -> int:
    """'<n>d' -> n for 0 < n <= 365; anything else quietly means 30."""
    if not period or not period.endswith("d"):
        return DEFAULT_PROGRESS_DAYS
    try:
        days = int(period[:-1])
    except ValueError:
        return DEFAULT_PROGRESS_DAYS
    if 0 < days <= MAX_PROGRESS_DAYS:
        return days
    return DEFAULT_PROGRESS_DAYS


class StatsService(CacheAside):
    def __init__(self, db: Session, cache: CacheStore):
        super().__init__(cache)
        self.stats = StatsRepository(db)

    def get_personal_records(self, user_id: int) -> list[PersonalRecord]:
        key = keys.user_prs_key(user_id)
        cached = self.cache_load(key, _prs_adapter)
        if cached is not None:
            return cached
        prs = self.stats.personal_records(user_id)
        self.cache_store(key, _prs_adapter, prs, keys.TTL_USER_PRS)
        return prs

    def get_workout_history(self, user_id: int, limit: Optional[int] = None, offset: Optional[int] = None) -> WorkoutHistory:
        # always live; pages shift on every completion
        if limit is None or not 0 < limit <= MAX_HISTORY_LIMIT:
            limit = DEFAULT_HISTORY_LIMIT
        if offset is None or offset < 0:
            offset = 0
        workouts, total = self.stats.workout_history(user_id, limit=limit, offset=offset)
        return WorkoutHistory(workouts=workouts, total=total, limit=limit, offset=offset)

    def get_weekly_summary(self, user_id: int, week: Optional[str] = None) -> WeeklySummary:
        year, num = parse_week(week)
        label = format_week(year, num)
        key = keys.weekly_summary_key(user_id, label)
        cached = self.cache_load(key, _weekly_adapter)
        if cached is not None:
            return cached

        start, end = week_bounds(year, num)
        agg = self.stats.weekly_aggregate(user_id, start, end)
        summary = WeeklySummary(
            week=label,
            start_date=start.date(),
            end_date=end.date(),
            total_workouts=agg.total_workouts,
            total_exercises=agg.total_exercises,
            total_volume=agg.total_volume,
            workouts=agg.workouts,
        )
        # no invalidation hook: a completion shows up once this expires
        self.cache_store(key, _weekly_adapter, summary, keys.TTL_WEEKLY_SUMMARY)
        return summary

    def get_exercise_progress(self, user_id: int, exercise_name: str, period: Optional[str] = None) -> ExerciseProgress:
        days = parse_period(period)
        key = keys.exercise_progress_key(user_id, exercise_name)
        cached = self.cache_load(key, _progress_adapter)
        if cached is not None:
            return cached

        since = datetime.now(timezone.utc) - timedelta(days=days)
        points = self.stats.exercise_progress(user_id, exercise_name, since)
        progress = ExerciseProgress(exercise_name=exercise_name, days=days, data_points=points)
        self.cache_store(key, _progress_adapter, progress, keys.TTL_EXERCISE_PROGRESS)
        return progress
