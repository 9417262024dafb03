from fastapi import APIRouter, Depends, Query

from fittrack.core.dependencies import get_current_user, get_engagement_engine
from fittrack.models.user import User
from fittrack.schemas.chat import (
    ChatMessageRequest,
    ChatReplyResponse,
    ChatHistoryItem,
    ChatHistoryResponse,
    ClearHistoryResponse,
    ProfileSnapshotResponse,
    WorkoutPlanResponse,
    ExerciseRecommendationRequest,
    ExerciseRecommendationResponse,
    ExerciseFilters,
)
from fittrack.services.engagement_engine import EngagementEngine

router = APIRouter(tags=["chat"])


@router.post("/message", response_model=ChatReplyResponse)
async def send_message(
    request: ChatMessageRequest,
    current_user: User = Depends(get_current_user),
    engine: EngagementEngine = Depends(get_engagement_engine),
):
    """Сообщение AI-тренеру с учетом профиля и последних 20 реплик"""
    reply, timestamp = await engine.send_chat_message(current_user.id, request.message)
    return ChatReplyResponse(message=reply, timestamp=timestamp)


@router.post("/workout-plan", response_model=WorkoutPlanResponse)
async def workout_plan(
    current_user: User = Depends(get_current_user),
    engine: EngagementEngine = Depends(get_engagement_engine),
):
    plan, profile = await engine.generate_workout_plan(current_user.id)
    return WorkoutPlanResponse(
        workout_plan=plan,
        user_profile=ProfileSnapshotResponse(
            fitness_level=profile.fitness_level,
            fitness_goal=profile.fitness_goal,
            equipment=profile.equipment,
            workout_duration=profile.workout_duration,
            injuries=profile.injuries,
            weekly_workouts=profile.weekly_workouts,
        ),
    )


@router.post("/exercises", response_model=ExerciseRecommendationResponse)
async def exercise_recommendations(
    request: ExerciseRecommendationRequest,
    current_user: User = Depends(get_current_user),
    engine: EngagementEngine = Depends(get_engagement_engine),
):
    exercises, equipment, difficulty = await engine.recommend_exercises(
        request.muscle_group, request.equipment, request.difficulty
    )
    return ExerciseRecommendationResponse(
        exercises=exercises,
        filters=ExerciseFilters(
            muscle_group=request.muscle_group,
            equipment=equipment,
            difficulty=difficulty,
        ),
    )


@router.get("/history", response_model=ChatHistoryResponse)
async def get_chat_history(
    limit: int = Query(50, ge=1, le=500),
    current_user: User = Depends(get_current_user),
    engine: EngagementEngine = Depends(get_engagement_engine),
):
    """Переписка в хронологическом порядке"""
    messages = await engine.get_chat_history(current_user.id, limit)
    history = [
        ChatHistoryItem(role=m.role, content=m.content, timestamp=m.created_at)
        for m in messages
    ]
    return ChatHistoryResponse(history=history, count=len(history))


@router.delete("/history", response_model=ClearHistoryResponse)
async def clear_chat_history(
    current_user: User = Depends(get_current_user),
    engine: EngagementEngine = Depends(get_engagement_engine),
):
    deleted = await engine.clear_chat_history(current_user.id)
    return ClearHistoryResponse(deleted_count=deleted)
