from pydantic import Field, field_validator
from typing import Optional, List
from datetime import datetime

from fittrack.models.workout_log import DifficultyEnum, MoodEnum
from fittrack.schemas.common import CamelModel


class ExerciseEntry(CamelModel):
    name: str = Field(min_length=1)
    sets: int = Field(default=0, ge=0)
    reps: int = Field(default=0, ge=0)
    weight: float = Field(default=0, ge=0)
    duration: float = Field(default=0, ge=0, description="Minutes")
    notes: Optional[str] = None


class WorkoutLogCreate(CamelModel):
    workout_name: str
    exercises: List[ExerciseEntry] = []
    duration: float = Field(gt=0, description="Total workout duration in minutes")
    calories_burned: float = Field(default=0, ge=0)
    difficulty: DifficultyEnum = DifficultyEnum.moderate
    mood: MoodEnum = MoodEnum.good
    notes: Optional[str] = None
    completed_at: Optional[datetime] = None

    @field_validator("workout_name")
    @classmethod
    def workout_name_not_blank(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("Workout name is required")
        return value


class WorkoutLogResponse(CamelModel):
    id: int
    user_id: int
    workout_name: str
    exercises: List[ExerciseEntry] = []
    duration: float
    calories_burned: float
    difficulty: DifficultyEnum
    mood: MoodEnum
    notes: Optional[str] = None
    completed_at: datetime
    created_at: Optional[datetime] = None


class StreakResponse(CamelModel):
    current: int = 0
    longest: int = 0


class LogWorkoutResponse(CamelModel):
    success: bool = True
    message: str = "Workout logged successfully!"
    workout: WorkoutLogResponse
    streak: Optional[StreakResponse] = None
    # True, если тренировка сохранена, а стрик обновить не удалось
    streak_stale: bool = False


class WorkoutStatsBody(CamelModel):
    total_workouts: int
    workouts_this_week: int
    total_calories: float
    total_hours: str
    streak: StreakResponse


class WorkoutStatsResponse(CamelModel):
    success: bool = True
    stats: WorkoutStatsBody
    recent_workouts: List[WorkoutLogResponse]


class Pagination(CamelModel):
    page: int
    limit: int
    total: int
    pages: int


class WorkoutHistoryResponse(CamelModel):
    success: bool = True
    workouts: List[WorkoutLogResponse]
    pagination: Pagination


class WorkoutDetailResponse(CamelModel):
    success: bool = True
    workout: WorkoutLogResponse
