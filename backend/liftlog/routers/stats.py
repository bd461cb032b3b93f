from fastapi import APIRouter, Depends, Query
from liftlog.deps.auth import get_current_user_id
from liftlog.deps.services import get_stats_service
from liftlog.schemas.stats import ExerciseProgress, PersonalRecords, WeeklySummary, WorkoutHistory
from liftlog.services.stats_service import StatsService

router = APIRouter(prefix="/stats", tags=["stats"])

@router.get("/prs", response_model=PersonalRecords)
def personal_records(
    svc: StatsService = Depends(get_stats_service),
    user_id: int = Depends(get_current_user_id),
):
    return PersonalRecords(prs=svc.get_personal_records(user_id))

@router.get("/history", response_model=WorkoutHistory)
def workout_history(
    svc: StatsService = Depends(get_stats_service),
    user_id: int = Depends(get_current_user_id),
    # out-of-range values fall back to defaults in the service instead of 400
    limit: int | None = Query(None),
    offset: int | None = Query(None),
):
    return svc.get_workout_history(user_id, limit=limit, offset=offset)

@router.get("/weekly", response_model=WeeklySummary)
def weekly_summary(
    svc: StatsService = Depends(get_stats_service),
    user_id: int = Depends(get_current_user_id),
    week: str | None = Query(None, description="ISO week, e.g. 2024-W07"),
):
    return svc.get_weekly_summary(user_id, week)

@router.get("/progress/{exercise_name}", response_model=ExerciseProgress)
def exercise_progress(
    exercise_name: str,
    svc: StatsService = Depends(get_stats_service),
    user_id: int = Depends(get_current_user_id),
    period: str | None = Query(None, description="day window, e.g. 90d"),
):
    return svc.get_exercise_progress(user_id, exercise_name, period)
