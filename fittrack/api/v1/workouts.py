from fastapi import APIRouter, Depends, Query, status

from fittrack.core.dependencies import get_current_user, get_engagement_engine
from fittrack.models.user import User
from fittrack.schemas.common import MessageResponse
from fittrack.schemas.workout_log import (
    WorkoutLogCreate,
    WorkoutLogResponse,
    LogWorkoutResponse,
    WorkoutStatsResponse,
    WorkoutStatsBody,
    WorkoutHistoryResponse,
    WorkoutDetailResponse,
    StreakResponse,
    Pagination,
)
from fittrack.services.engagement_engine import EngagementEngine

router = APIRouter(tags=["workouts"])


@router.post("/log", response_model=LogWorkoutResponse, status_code=status.HTTP_201_CREATED)
async def log_workout(
    payload: WorkoutLogCreate,
    current_user: User = Depends(get_current_user),
    engine: EngagementEngine = Depends(get_engagement_engine),
):
    """Записать выполненную тренировку и обновить стрик"""
    result = await engine.log_workout(current_user.id, payload)

    return LogWorkoutResponse(
        workout=WorkoutLogResponse.model_validate(result.workout),
        streak=StreakResponse(**result.streak.to_dict()) if result.streak else None,
        streak_stale=result.streak_stale,
    )


@router.get("/history", response_model=WorkoutHistoryResponse)
async def get_history(
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=100),
    current_user: User = Depends(get_current_user),
    engine: EngagementEngine = Depends(get_engagement_engine),
):
    """История тренировок, от новых к старым"""
    result = await engine.get_history(current_user.id, page, limit)

    return WorkoutHistoryResponse(
        workouts=[WorkoutLogResponse.model_validate(w) for w in result.workouts],
        pagination=Pagination(
            page=result.page,
            limit=result.limit,
            total=result.total,
            pages=result.pages,
        ),
    )


@router.get("/stats", response_model=WorkoutStatsResponse)
async def get_stats(
    current_user: User = Depends(get_current_user),
    engine: EngagementEngine = Depends(get_engagement_engine),
):
    stats, streak = await engine.get_stats(current_user.id)

    return WorkoutStatsResponse(
        stats=WorkoutStatsBody(
            total_workouts=stats.total_workouts,
            workouts_this_week=stats.workouts_this_week,
            total_calories=stats.total_calories,
            total_hours=stats.total_hours,
            streak=StreakResponse(**streak.to_dict()),
        ),
        recent_workouts=[WorkoutLogResponse.model_validate(w) for w in stats.recent_workouts],
    )


@router.get("/{workout_id}", response_model=WorkoutDetailResponse)
async def get_workout(
    workout_id: int,
    current_user: User = Depends(get_current_user),
    engine: EngagementEngine = Depends(get_engagement_engine),
):
    workout = await engine.get_workout(current_user.id, workout_id)
    return WorkoutDetailResponse(workout=WorkoutLogResponse.model_validate(workout))


@router.delete("/{workout_id}", response_model=MessageResponse)
async def delete_workout(
    workout_id: int,
    current_user: User = Depends(get_current_user),
    engine: EngagementEngine = Depends(get_engagement_engine),
):
    """Удалить тренировку. Чужой id неотличим от несуществующего (404)"""
    await engine.delete_workout(current_user.id, workout_id)
    return MessageResponse(message="Workout deleted successfully")
