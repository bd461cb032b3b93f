from __future__ import annotations
from typing import Optional
from sqlalchemy import select, delete
from liftlog.models import ExerciseSet
from liftlog.repositories.base import BaseRepository

class SetRepository(BaseRepository[ExerciseSet]):

    def list_sets_for_exercise(self, exercise_id: int) -> list[ExerciseSet]:
        stmt = select(ExerciseSet).where(ExerciseSet.exercise_id == exercise_id).order_by(ExerciseSet.set_number.asc())
        with self.store_errors("list_sets_for_exercise"):
            return list(self.db.execute(stmt).scalars().all())

    def create_set(
        self,
        exercise_id: int,
        *,
        set_number: int,
        reps: int,
        weight: Optional[float],
        is_bodyweight: bool,
    ) -> ExerciseSet:
        s = ExerciseSet(
            exercise_id=exercise_id,
            set_number=set_number,
            reps=reps,
            weight=None if is_bodyweight else weight,
            is_bodyweight=is_bodyweight,
        )
        with self.store_errors("create_set"):
            return self.add_and_refresh(s)

    def delete_sets_for_exercise(self, exercise_id: int) -> None:
        with self.store_errors("delete_sets_for_exercise"):
            self.db.execute(
                delete(ExerciseSet)
                .where(ExerciseSet.exercise_id == exercise_id)
            )
            self.db.commit()
