# liftlog/cache/keys.py
"""Cache key templates and their TTLs, one place for every cached aggregate."""
from __future__ import annotations
from datetime import timedelta

KEY_ACTIVE_WORKOUT = "active_workout:user:{user_id}"
KEY_USER_PRS = "prs:user:{user_id}"
KEY_WEEKLY_SUMMARY = "weekly:user:{user_id}:week:{week}"
KEY_EXERCISE_PROGRESS = "progress:user:{user_id}:exercise:{name}"

TTL_ACTIVE_WORKOUT = timedelta(hours=24)
TTL_USER_PRS = timedelta(hours=1)
TTL_WEEKLY_SUMMARY = timedelta(days=7)
TTL_EXERCISE_PROGRESS = timedelta(hours=1)


def active_workout_key(user_id: int) -> str:
    return KEY_ACTIVE_WORKOUT.format(user_id=user_id)


def user_prs_key(user_id: int) -> str:
    return KEY_USER_PRS.format(user_id=user_id)


def weekly_summary_key(user_id: int, week: str) -> str:
    """`week` is the canonical `YYYY-Wnn` label."""
    return KEY_WEEKLY_SUMMARY.format(user_id=user_id, week=week)


def exercise_progress_key(user_id: int, exercise_name: str) -> str:
    return KEY_EXERCISE_PROGRESS.format(user_id=user_id, name=exercise_name)
