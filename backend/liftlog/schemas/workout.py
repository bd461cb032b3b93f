from typing import Annotated
from datetime import datetime
from pydantic import BaseModel, Field, field_validator

from liftlog.schemas.exercise_set import ExerciseRead

DEFAULT_WORKOUT_NAME = "Workout"

# Name: trimmed, up to 120 chars
NameStr = Annotated[str, Field(max_length=120)]

class WorkoutCreate(BaseModel):
    name: NameStr | None = Field(default=None, validate_default=True)

    @field_validator("name")
    @classmethod
    def default_name(cls, v: str | None) -> str:
        if v is None or not v.strip():
            return DEFAULT_WORKOUT_NAME
        return v.strip()

class WorkoutRead(BaseModel):
    id: int
    user_id: int
    name: str
    status: str
    started_at: datetime
    completed_at: datetime | None = None
    created_at: datetime
    updated_at: datetime
    exercises: list[ExerciseRead] = []

    model_config = {"from_attributes": True}

class ActiveWorkoutResponse(BaseModel):
    workout: WorkoutRead | None = None
