# liftlog/services/workout_service.py
"""
Workout session lifecycle: active -> completed (terminal), or deleted.

Only active sessions accept exercise/set writes. Every write that can change
the user's active-workout view re-reads the whole session from the database
and overwrites the cache entry; cached blobs are never patched in place.
"""
from __future__ import annotations

import logging
from typing import Optional, Sequence

from pydantic import TypeAdapter
from sqlalchemy.orm import Session

from liftlog.cache import keys
from liftlog.cache.store import CacheStore
from liftlog.errors import Forbidden, InvalidState, NotFound, StoreError
from liftlog.models import WorkoutSession, WorkoutStatus
from liftlog.repositories.exercise_repo import ExerciseRepository
from liftlog.repositories.set_repo import SetRepository
from liftlog.repositories.workout_repo import WorkoutRepository
from liftlog.schemas.exercise_set import ExerciseRead, SetInput
from liftlog.schemas.workout import WorkoutRead
from liftlog.services.cache_aside import CacheAside

logger = logging.getLogger(__name__)

_workout_adapter = TypeAdapter(WorkoutRead)


class WorkoutService(CacheAside):
    def __init__(self, db: Session, cache: CacheStore):
        super().__init__(cache)
        self.workouts = WorkoutRepository(db)
        self.exercises = ExerciseRepository(db)
        self.sets = SetRepository(db)

    # READS
    def get_workout(self, workout_id: int) -> WorkoutRead:
        return WorkoutRead.model_validate(self.workouts.get_session_by_id(workout_id))

    def get_active_workout(self, user_id: int) -> Optional[WorkoutRead]:
        key = keys.active_workout_key(user_id)
        cached = self.cache_load(key, _workout_adapter)
        if cached is not None:
            return cached

        sess = self.workouts.get_active_session_for_user(user_id)
        if sess is None:
            # not cached: a negative entry would hide a workout started right after
            return None
        workout = WorkoutRead.model_validate(sess)
        self._cache_active(workout)
        return workout

    # LIFECYCLE
    def start_workout(self, user_id: int, name: str) -> WorkoutRead:
        workout = WorkoutRead.model_validate(self.workouts.create_session(user_id, name=name))
        logger.info("user=%s started workout=%s", user_id, workout.id)
        self._cache_active(workout)
        return workout

    def complete_workout(self, user_id: int, workout_id: int) -> WorkoutRead:
        self.workouts.complete_session(workout_id, user_id=user_id)
        logger.info("user=%s completed workout=%s", user_id, workout_id)
        # PRs only ever come from completed sessions
        self.cache_invalidate(keys.active_workout_key(user_id), keys.user_prs_key(user_id))
        return self.get_workout(workout_id)

    def delete_workout(self, user_id: int, workout_id: int) -> None:
        sess = self.workouts.get_session_by_id(workout_id)
        if sess.user_id != user_id:
            raise Forbidden("Not allowed for this workout")
        was_active = sess.status == WorkoutStatus.active.value
        self.workouts.delete_session(workout_id)
        logger.info("user=%s deleted workout=%s", user_id, workout_id)
        if was_active:
            self.cache_invalidate(keys.active_workout_key(user_id))

    # EXERCISES
    def add_exercise(self, user_id: int, workout_id: int, name: str, sets: Sequence[SetInput]) -> ExerciseRead:
        self._get_mutable(user_id, workout_id)

        order_index = self.exercises.next_order_index(workout_id)
        exercise = self.exercises.create_exercise(workout_id, name=name, order_index=order_index)
        self._create_sets(exercise.id, sets)

        result = ExerciseRead.model_validate(self.exercises.get_exercise_by_id(exercise.id))
        self._recache_workout(user_id, workout_id)
        return result

    def update_exercise(
        self,
        user_id: int,
        workout_id: int,
        exercise_id: int,
        name: Optional[str] = None,
        sets: Optional[Sequence[SetInput]] = None,
    ) -> ExerciseRead:
        self._get_mutable(user_id, workout_id)
        self._get_owned_exercise(workout_id, exercise_id)

        if name:
            self.exercises.rename_exercise(exercise_id, name=name)
        if sets:
            # full replace, numbering restarts at 1
            self.sets.delete_sets_for_exercise(exercise_id)
            self._create_sets(exercise_id, sets)

        result = ExerciseRead.model_validate(self.exercises.get_exercise_by_id(exercise_id))
        self._recache_workout(user_id, workout_id)
        return result

    def delete_exercise(self, user_id: int, workout_id: int, exercise_id: int) -> None:
        self._get_mutable(user_id, workout_id)
        self._get_owned_exercise(workout_id, exercise_id)
        self.exercises.delete_exercise(exercise_id)
        self._recache_workout(user_id, workout_id)

    # helpers
    def _get_mutable(self, user_id: int, workout_id: int) -> WorkoutSession:
        sess = self.workouts.get_session_by_id(workout_id)
        if sess.user_id != user_id:
            raise Forbidden("Not allowed for this workout")
        if sess.status != WorkoutStatus.active.value:
            raise InvalidState("Workout is not active")
        return sess

    def _get_owned_exercise(self, workout_id: int, exercise_id: int):
        exercise = self.exercises.get_exercise_by_id(exercise_id)
        if exercise.workout_session_id != workout_id:
            raise Forbidden("Exercise does not belong to this workout")
        return exercise

    def _create_sets(self, exercise_id: int, sets: Sequence[SetInput]) -> None:
        # a failure part way leaves the earlier sets in place
        for number, s in enumerate(sets, start=1):
            self.sets.create_set(
                exercise_id,
                set_number=number,
                reps=s.reps,
                weight=s.weight,
                is_bodyweight=s.is_bodyweight,
            )

    def _recache_workout(self, user_id: int, workout_id: int) -> None:
        try:
            workout = WorkoutRead.model_validate(self.workouts.get_session_by_id(workout_id))
        except (NotFound, StoreError) as e:
            # the write itself committed; drop the entry rather than leave it stale
            logger.warning("re-read of workout=%s failed after write: %s", workout_id, e)
            self.cache_invalidate(keys.active_workout_key(user_id))
            return
        if workout.status == WorkoutStatus.active.value:
            self._cache_active(workout)

    def _cache_active(self, workout: WorkoutRead) -> None:
        self.cache_store(keys.active_workout_key(workout.user_id), _workout_adapter, workout, keys.TTL_ACTIVE_WORKOUT)
