from liftlog.models.workout_session import WorkoutSession, WorkoutStatus
from liftlog.models.exercise_set import Exercise, ExerciseSet

__all__ = ["WorkoutSession", "WorkoutStatus", "Exercise", "ExerciseSet"]
