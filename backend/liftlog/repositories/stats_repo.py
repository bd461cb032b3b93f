# liftlog/repositories/stats_repo.py
"""Read-only aggregates over completed workouts. Volume = coalesce(weight, 0) * reps."""
from __future__ import annotations
from dataclasses import dataclass
from datetime import datetime

from sqlalchemy import select, func, distinct
from sqlalchemy.orm import Session

from liftlog.models import Exercise, ExerciseSet, WorkoutSession, WorkoutStatus
from liftlog.repositories.base import BaseRepository
from liftlog.schemas.stats import PersonalRecord, ProgressDataPoint, WorkoutInWeek, WorkoutSummary

_volume = func.coalesce(ExerciseSet.weight, 0) * ExerciseSet.reps
_completed = WorkoutSession.status == WorkoutStatus.completed.value

@dataclass(slots=True)
class WeeklyAggregate:
    total_workouts: int
    total_exercises: int
    total_volume: float
    workouts: list[WorkoutInWeek]

class StatsRepository(BaseRepository[WorkoutSession]):
    def __init__(self, db: Session):
        super().__init__(db)

    def personal_records(self, user_id: int) -> list[PersonalRecord]:
        """Best completed session per exercise by volume, newest completion wins ties."""
        stmt = (
            select(
                Exercise.name,
                WorkoutSession.completed_at,
                func.max(ExerciseSet.weight),
                func.max(ExerciseSet.reps),
                func.max(_volume),
            )
            .join(WorkoutSession, Exercise.workout_session_id == WorkoutSession.id)
            .join(ExerciseSet, ExerciseSet.exercise_id == Exercise.id)
            .where(WorkoutSession.user_id == user_id, _completed)
            .group_by(Exercise.name, WorkoutSession.completed_at)
        )
        with self.store_errors("personal_records"):
            rows = self.db.execute(stmt).all()

        best: dict[str, PersonalRecord] = {}
        for name, completed_at, max_weight, max_reps, max_volume in rows:
            pr = PersonalRecord(
                exercise_name=name,
                max_weight=max_weight,
                max_reps=max_reps,
                max_volume=max_volume,
                achieved_at=completed_at,
            )
            cur = best.get(name)
            if cur is None or (pr.max_volume or 0, pr.achieved_at) > (cur.max_volume or 0, cur.achieved_at):
                best[name] = pr
        return [best[name] for name in sorted(best)]

    def workout_history(self, user_id: int, *, limit: int, offset: int) -> tuple[list[WorkoutSummary], int]:
        count_stmt = select(func.count()).select_from(WorkoutSession).where(WorkoutSession.user_id == user_id, _completed)
        stmt = (
            select(
                WorkoutSession.id,
                WorkoutSession.name,
                WorkoutSession.completed_at,
                func.count(distinct(Exercise.id)),
                func.count(ExerciseSet.id),
                func.coalesce(func.sum(_volume), 0),
            )
            .outerjoin(Exercise, Exercise.workout_session_id == WorkoutSession.id)
            .outerjoin(ExerciseSet, ExerciseSet.exercise_id == Exercise.id)
            .where(WorkoutSession.user_id == user_id, _completed)
            .group_by(WorkoutSession.id, WorkoutSession.name, WorkoutSession.completed_at)
            .order_by(WorkoutSession.completed_at.desc(), WorkoutSession.id.desc())
            .limit(limit)
            .offset(offset)
        )
        with self.store_errors("workout_history"):
            total = self.db.execute(count_stmt).scalar_one()
            rows = self.db.execute(stmt).all()
        items = [
            WorkoutSummary(
                id=wid,
                name=name,
                completed_at=completed_at,
                exercise_count=n_ex,
                total_sets=n_sets,
                total_volume=float(volume),
            )
            for wid, name, completed_at, n_ex, n_sets, volume in rows
        ]
        return items, total

    def weekly_aggregate(self, user_id: int, start: datetime, end: datetime) -> WeeklyAggregate:
        """Completed workouts with start <= completed_at < end."""
        window = (
            WorkoutSession.user_id == user_id,
            _completed,
            WorkoutSession.completed_at >= start,
            WorkoutSession.completed_at < end,
        )
        totals_stmt = (
            select(
                func.count(distinct(WorkoutSession.id)),
                func.count(distinct(Exercise.id)),
                func.coalesce(func.sum(_volume), 0),
            )
            .select_from(WorkoutSession)
            .outerjoin(Exercise, Exercise.workout_session_id == WorkoutSession.id)
            .outerjoin(ExerciseSet, ExerciseSet.exercise_id == Exercise.id)
            .where(*window)
        )
        list_stmt = (
            select(WorkoutSession.id, WorkoutSession.name, WorkoutSession.completed_at)
            .where(*window)
            .order_by(WorkoutSession.completed_at.asc())
        )
        with self.store_errors("weekly_aggregate"):
            n_workouts, n_exercises, volume = self.db.execute(totals_stmt).one()
            rows = self.db.execute(list_stmt).all()
        workouts = [
            # Sunday = 0, matching postgres EXTRACT(DOW)
            WorkoutInWeek(id=wid, name=name, completed_at=completed_at, day_of_week=completed_at.isoweekday() % 7)
            for wid, name, completed_at in rows
        ]
        return WeeklyAggregate(
            total_workouts=n_workouts,
            total_exercises=n_exercises,
            total_volume=float(volume),
            workouts=workouts,
        )

    def exercise_progress(self, user_id: int, exercise_name: str, since: datetime) -> list[ProgressDataPoint]:
        day = func.date(WorkoutSession.completed_at).label("workout_date")
        stmt = (
            select(day, func.max(ExerciseSet.weight), func.max(ExerciseSet.reps), func.sum(_volume))
            .select_from(Exercise)
            .join(WorkoutSession, Exercise.workout_session_id == WorkoutSession.id)
            .join(ExerciseSet, ExerciseSet.exercise_id == Exercise.id)
            .where(
                WorkoutSession.user_id == user_id,
                _completed,
                Exercise.name == exercise_name,
                WorkoutSession.completed_at >= since,
            )
            .group_by(day)
            .order_by(day.asc())
        )
        with self.store_errors("exercise_progress"):
            rows = self.db.execute(stmt).all()
        return [
            ProgressDataPoint(date=d, max_weight=max_weight, max_reps=max_reps, volume=float(volume or 0))
            for d, max_weight, max_reps, volume in rows
        ]
