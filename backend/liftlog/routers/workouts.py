from fastapi import APIRouter, Depends, status
from liftlog.deps.auth import get_current_user_id
from liftlog.deps.services import get_workout_service
from liftlog.errors import Forbidden
from liftlog.schemas.workout import ActiveWorkoutResponse, WorkoutCreate, WorkoutRead
from liftlog.services.workout_service import WorkoutService

router = APIRouter(prefix="/workouts", tags=["workouts"])

@router.post("", response_model=WorkoutRead, status_code=status.HTTP_201_CREATED)
def start_workout(
    payload: WorkoutCreate,
    svc: WorkoutService = Depends(get_workout_service),
    user_id: int = Depends(get_current_user_id),
):
    return svc.start_workout(user_id, payload.name)

# declared before /{workout_id} so "active" isn't parsed as an id
@router.get("/active", response_model=ActiveWorkoutResponse)
def get_active_workout(
    svc: WorkoutService = Depends(get_workout_service),
    user_id: int = Depends(get_current_user_id),
):
    return ActiveWorkoutResponse(workout=svc.get_active_workout(user_id))

@router.get("/{workout_id}", response_model=WorkoutRead)
def get_workout(
    workout_id: int,
    svc: WorkoutService = Depends(get_workout_service),
    user_id: int = Depends(get_current_user_id),
):
    workout = svc.get_workout(workout_id)
    if workout.user_id != user_id:
        raise Forbidden("Not allowed for this workout")
    return workout

@router.post("/{workout_id}/complete", response_model=WorkoutRead)
def complete_workout(
    workout_id: int,
    svc: WorkoutService = Depends(get_workout_service),
    user_id: int = Depends(get_current_user_id),
):
    return svc.complete_workout(user_id, workout_id)

@router.delete("/{workout_id}")
def delete_workout(
    workout_id: int,
    svc: WorkoutService = Depends(get_workout_service),
    user_id: int = Depends(get_current_user_id),
):
    svc.delete_workout(user_id, workout_id)
    return {"message": "Workout deleted"}
