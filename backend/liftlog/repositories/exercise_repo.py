from __future__ import annotations
from sqlalchemy import select, func
from sqlalchemy.orm import selectinload
from liftlog.errors import NotFound
from liftlog.models import Exercise
from liftlog.repositories.base import BaseRepository

class ExerciseRepository(BaseRepository[Exercise]):

    # READS
    def list_exercises_for_session(self, session_id: int) -> list[Exercise]:
        stmt = (
            select(Exercise)
            .where(Exercise.workout_session_id == session_id)
            .options(selectinload(Exercise.sets))
            .order_by(Exercise.order_index.asc())
        )
        with self.store_errors("list_exercises_for_session"):
            return list(self.db.execute(stmt).scalars().all())

    def get_exercise_by_id(self, exercise_id: int) -> Exercise:
        stmt = select(Exercise).where(Exercise.id == exercise_id).options(selectinload(Exercise.sets))
        with self.store_errors("get_exercise_by_id"):
            ex = self.db.execute(stmt).scalar_one_or_none()
        if ex is None:
            raise NotFound("Exercise not found")
        return ex

    def next_order_index(self, session_id: int) -> int:
        with self.store_errors("next_order_index"):
            max_idx = self.db.execute(
                select(func.max(Exercise.order_index)).where(Exercise.workout_session_id == session_id)
            ).scalar_one()
        return 0 if max_idx is None else max_idx + 1

    # WRITES
    def create_exercise(self, session_id: int, *, name: str, order_index: int) -> Exercise:
        ex = Exercise(workout_session_id=session_id, name=name, order_index=order_index)
        with self.store_errors("create_exercise"):
            return self.add_and_refresh(ex)

    def rename_exercise(self, exercise_id: int, *, name: str) -> Exercise:
        ex = self.get_exercise_by_id(exercise_id)
        with self.store_errors("rename_exercise"):
            ex.name = name
            self.db.commit()
            self.db.refresh(ex)
        return ex

    def delete_exercise(self, exercise_id: int) -> None:
        ex = self.get_exercise_by_id(exercise_id)
        with self.store_errors("delete_exercise"):
            self.db.delete(ex)
            self.db.commit()
