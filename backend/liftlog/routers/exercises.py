from fastapi import APIRouter, Depends, status
from liftlog.deps.auth import get_current_user_id
from liftlog.deps.services import get_workout_service
from liftlog.schemas.exercise_set import ExerciseCreate, ExerciseRead, ExerciseUpdate
from liftlog.services.workout_service import WorkoutService

router = APIRouter(prefix="/workouts", tags=["exercises"])

@router.post("/{workout_id}/exercises", response_model=ExerciseRead, status_code=status.HTTP_201_CREATED)
def add_exercise(
    workout_id: int,
    payload: ExerciseCreate,
    svc: WorkoutService = Depends(get_workout_service),
    user_id: int = Depends(get_current_user_id),
):
    return svc.add_exercise(user_id, workout_id, payload.name, payload.sets)

@router.put("/{workout_id}/exercises/{exercise_id}", response_model=ExerciseRead)
def update_exercise(
    workout_id: int,
    exercise_id: int,
    payload: ExerciseUpdate,
    svc: WorkoutService = Depends(get_workout_service),
    user_id: int = Depends(get_current_user_id),
):
    return svc.update_exercise(user_id, workout_id, exercise_id, name=payload.name, sets=payload.sets)

@router.delete("/{workout_id}/exercises/{exercise_id}")
def delete_exercise(
    workout_id: int,
    exercise_id: int,
    svc: WorkoutService = Depends(get_workout_service),
    user_id: int = Depends(get_current_user_id),
):
    svc.delete_exercise(user_id, workout_id, exercise_id)
    return {"message": "Exercise deleted"}
