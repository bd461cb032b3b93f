from typing import Annotated
from datetime import datetime
from pydantic import BaseModel, Field, field_validator, model_validator

# Keep max length via Field
ExerciseStr = Annotated[str, Field(max_length=120)]
PosInt = Annotated[int, Field(ge=1)]
PosFloat = Annotated[float, Field(gt=0)]

class SetInput(BaseModel):
    reps: PosInt
    weight: PosFloat | None = None
    is_bodyweight: bool = False

    @model_validator(mode="after")
    def weight_matches_bodyweight(self) -> "SetInput":
        if self.is_bodyweight:
            # bodyweight sets never carry a weight, whatever the client sent
            self.weight = None
        elif self.weight is None:
            raise ValueError("weight must be greater than 0 for non-bodyweight sets")
        return self

class ExerciseCreate(BaseModel):
    name: ExerciseStr
    sets: list[SetInput] = Field(min_length=1)

    @field_validator("name")
    @classmethod
    def name_non_blank(cls, v: str) -> str:
        v2 = v.strip()
        if not v2:
            raise ValueError("exercise name is required")
        return v2

class ExerciseUpdate(BaseModel):
    # blank name / empty sets = leave unchanged
    name: ExerciseStr | None = None
    sets: list[SetInput] | None = None

    @field_validator("name")
    @classmethod
    def strip_name(cls, v: str | None) -> str | None:
        if v is None:
            return None
        return v.strip() or None

class SetRead(BaseModel):
    id: int
    exercise_id: int
    set_number: int
    reps: int
    weight: float | None = None
    is_bodyweight: bool
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}

class ExerciseRead(BaseModel):
    id: int
    workout_session_id: int
    name: str
    order_index: int
    created_at: datetime
    updated_at: datetime
    sets: list[SetRead] = []

    model_config = {"from_attributes": True}
