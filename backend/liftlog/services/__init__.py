from liftlog.services.stats_service import StatsService
from liftlog.services.workout_service import WorkoutService

__all__ = ["StatsService", "WorkoutService"]
