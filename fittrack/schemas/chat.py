from pydantic import field_validator
from typing import Optional, List
from datetime import datetime

from fittrack.models.chat_message import ChatRoleEnum
from fittrack.schemas.common import CamelModel


class ChatMessageRequest(CamelModel):
    message: str

    @field_validator("message")
    @classmethod
    def message_not_blank(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("Message cannot be empty")
        return value


class ChatReplyResponse(CamelModel):
    success: bool = True
    message: str
    timestamp: datetime


class ChatHistoryItem(CamelModel):
    role: ChatRoleEnum
    content: str
    timestamp: datetime


class ChatHistoryResponse(CamelModel):
    success: bool = True
    history: List[ChatHistoryItem]
    count: int


class ClearHistoryResponse(CamelModel):
    success: bool = True
    message: str = "Chat history cleared"
    deleted_count: int


class ProfileSnapshotResponse(CamelModel):
    fitness_level: str
    fitness_goal: str
    equipment: List[str]
    workout_duration: int
    injuries: List[str]
    weekly_workouts: int


class WorkoutPlanResponse(CamelModel):
    success: bool = True
    workout_plan: str
    user_profile: ProfileSnapshotResponse


class ExerciseRecommendationRequest(CamelModel):
    muscle_group: str
    equipment: Optional[str] = None
    difficulty: Optional[str] = None

    @field_validator("muscle_group")
    @classmethod
    def muscle_group_not_blank(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("Please specify a muscle group")
        return value


class ExerciseFilters(CamelModel):
    muscle_group: str
    equipment: str
    difficulty: str


class ExerciseRecommendationResponse(CamelModel):
    success: bool = True
    exercises: str
    filters: ExerciseFilters
