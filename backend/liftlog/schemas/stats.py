import datetime as dt
from pydantic import BaseModel

class PersonalRecord(BaseModel):
    exercise_name: str
    max_weight: float | None = None
    max_reps: int
    max_volume: float | None = None
    achieved_at: dt.datetime

class WorkoutSummary(BaseModel):
    id: int
    name: str
    completed_at: dt.datetime
    exercise_count: int
    total_sets: int
    total_volume: float

class WorkoutHistory(BaseModel):
    workouts: list[WorkoutSummary]
    total: int
    limit: int
    offset: int

class WorkoutInWeek(BaseModel):
    id: int
    name: str
    completed_at: dt.datetime
    day_of_week: int  # 0 = Sunday

class WeeklySummary(BaseModel):
    week: str
    start_date: dt.date
    end_date: dt.date
    total_workouts: int
    total_exercises: int
    total_volume: float
    workouts: list[WorkoutInWeek]

class ProgressDataPoint(BaseModel):
    date: dt.date
    max_weight: float | None = None
    max_reps: int
    volume: float

class ExerciseProgress(BaseModel):
    exercise_name: str
    days: int
    data_points: list[ProgressDataPoint]

class PersonalRecords(BaseModel):
    prs: list[PersonalRecord]
