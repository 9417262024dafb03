"""
Оркестратор журнала тренировок и AI-чата.

Единственный компонент с побочными эффектами: пишет тренировки, стрик
и переписку. Расчеты (стрик, статистика, контекст) делегируются чистым
функциям соседних модулей.
"""

import asyncio
import logging
import math
from dataclasses import dataclass
from datetime import datetime, timezone, tzinfo
from typing import Awaitable, Callable, List, Optional, Tuple
from zoneinfo import ZoneInfo

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from fittrack.core.config import settings
from fittrack.core.errors import DependencyError, FitTrackError, NotFoundError, StorageError, ValidationError
from fittrack.models.chat_message import ChatMessage
from fittrack.models.workout_log import WorkoutLog, WorkoutLogExercise
from fittrack.repositories.chat_message_repository import ChatMessageRepository
from fittrack.repositories.user_repository import UserRepository
from fittrack.repositories.workout_log_repository import WorkoutLogRepository
from fittrack.schemas.workout_log import WorkoutLogCreate
from fittrack.services.ai_service import AIService, ai_service
from fittrack.services.chat_context import CHAT_CONTEXT_LIMIT, ProfileSnapshot, build_context
from fittrack.services.stats_aggregator import StatsAggregator, WorkoutStats
from fittrack.services.streak_calculator import (
    EMPTY_STREAK,
    BackdatedPolicy,
    StreakState,
    advance,
    as_aware,
    is_backdated,
    replay,
)

logger = logging.getLogger(__name__)

StreakTransition = Callable[[StreakState], Awaitable[StreakState]]


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass
class LoggedWorkout:
    workout: WorkoutLog
    streak: Optional[StreakState]
    streak_stale: bool = False


@dataclass
class WorkoutPage:
    workouts: List[WorkoutLog]
    page: int
    limit: int
    total: int

    @property
    def pages(self) -> int:
        return math.ceil(self.total / self.limit) if self.limit else 0


class EngagementEngine:
    def __init__(
        self,
        db: AsyncSession,
        ai: AIService = ai_service,
        clock: Callable[[], datetime] = utcnow,
        tz: Optional[tzinfo] = None,
        backdated_policy: Optional[BackdatedPolicy] = None,
        recompute_streak_on_delete: Optional[bool] = None,
        streak_retries: Optional[int] = None,
        ai_timeout: Optional[float] = None,
    ):
        self.db = db
        self.users = UserRepository(db)
        self.workouts = WorkoutLogRepository(db)
        self.messages = ChatMessageRepository(db)
        self.ai = ai
        self.clock = clock
        self.tz = tz or ZoneInfo(settings.TIMEZONE)
        self.backdated_policy = BackdatedPolicy(backdated_policy or settings.BACKDATED_STREAK_POLICY)
        self.recompute_streak_on_delete = (
            settings.RECOMPUTE_STREAK_ON_DELETE
            if recompute_streak_on_delete is None
            else recompute_streak_on_delete
        )
        self.streak_retries = max(1, streak_retries or settings.STREAK_UPDATE_RETRIES)
        self.ai_timeout = ai_timeout or settings.AI_TIMEOUT_SECONDS
        self.stats = StatsAggregator(self.workouts, self.tz, settings.RECENT_WORKOUTS_LIMIT)

    # ==========================
    # ТРЕНИРОВКИ
    # ==========================

    async def log_workout(self, user_id: int, payload: WorkoutLogCreate) -> LoggedWorkout:
        now = self.clock()
        completed_at = as_aware(payload.completed_at or now).astimezone(timezone.utc)

        workout = WorkoutLog(
            user_id=user_id,
            workout_name=payload.workout_name,
            duration=payload.duration,
            calories_burned=payload.calories_burned or 0,
            difficulty=payload.difficulty,
            mood=payload.mood,
            notes=payload.notes or "",
            completed_at=completed_at,
            created_at=now,
            exercises=[
                WorkoutLogExercise(position=i, **exercise.model_dump())
                for i, exercise in enumerate(payload.exercises)
            ],
        )

        try:
            workout = await self.workouts.add(workout)
        except SQLAlchemyError as e:
            await self.db.rollback()
            logger.exception("Log workout error for user %s", user_id)
            raise StorageError(detail=str(e))

        workout_id = workout.id
        # Сохраненная тренировка не должна экспайриться при откате транзакции стрика
        self.db.expunge(workout)

        # Тренировка уже сохранена: сбой стрика не должен превращаться в ошибку запроса
        try:
            streak = await self._write_streak(
                user_id, lambda state: self._next_streak(user_id, state, completed_at, now)
            )
        except SQLAlchemyError:
            await self.db.rollback()
            logger.exception("Streak update failed for user %s, workout %s kept", user_id, workout_id)
            streak = None

        return LoggedWorkout(workout=workout, streak=streak, streak_stale=streak is None)

    async def _next_streak(
        self,
        user_id: int,
        state: StreakState,
        completed_at: datetime,
        now: datetime,
    ) -> StreakState:
        if self.backdated_policy == BackdatedPolicy.recompute and is_backdated(state, completed_at, self.tz):
            return await self._replayed_streak(user_id, state, now)
        return advance(state, completed_at, now, self.tz)

    async def _replayed_streak(self, user_id: int, state: StreakState, now: datetime) -> StreakState:
        timestamps = await self.workouts.completion_times(user_id)
        return replay(timestamps, now, self.tz, floor=state)

    async def _write_streak(self, user_id: int, transition: StreakTransition) -> Optional[StreakState]:
        """Read-modify-write стрика с проверкой версии и повтором при конфликте.

        None, если пользователя нет или все попытки проиграли гонку.
        """
        for attempt in range(1, self.streak_retries + 1):
            loaded = await self.users.get_streak(user_id)
            if loaded is None:
                logger.warning("User %s not found while updating streak", user_id)
                return None

            state, version = loaded
            new_state = await transition(state)
            if new_state == state:
                return state

            if await self.users.compare_and_set_streak(user_id, version, new_state):
                return new_state

            logger.info("Streak version conflict for user %s (attempt %d)", user_id, attempt)

        logger.warning("Streak update for user %s gave up after %d attempts", user_id, self.streak_retries)
        return None

    async def get_stats(self, user_id: int) -> Tuple[WorkoutStats, StreakState]:
        stats = await self.stats.collect(user_id, self.clock())
        loaded = await self.users.get_streak(user_id)

        streak = loaded[0] if loaded else EMPTY_STREAK
        return stats, streak

    async def get_history(self, user_id: int, page: int = 1, limit: int = 20) -> WorkoutPage:
        if page < 1 or limit < 1:
            raise ValidationError("Page and limit must be positive integers")
        workouts, total = await self.workouts.list_page(user_id, page, limit)
        return WorkoutPage(workouts=workouts, page=page, limit=limit, total=total)

    async def get_workout(self, user_id: int, workout_id: int) -> WorkoutLog:
        workout = await self.workouts.get_for_user(user_id, workout_id)
        if workout is None:
            raise NotFoundError("Workout not found")
        return workout

    async def delete_workout(self, user_id: int, workout_id: int) -> None:
        deleted = await self.workouts.delete_for_user(user_id, workout_id)
        if not deleted:
            raise NotFoundError("Workout not found")

        if not self.recompute_streak_on_delete:
            return

        now = self.clock()
        try:
            await self._write_streak(user_id, lambda state: self._replayed_streak(user_id, state, now))
        except SQLAlchemyError:
            await self.db.rollback()
            logger.exception("Streak recompute after delete failed for user %s", user_id)

    # ==========================
    # AI-ЧАТ
    # ==========================

    async def _call_ai(self, coro: Awaitable[str]) -> str:
        try:
            return await asyncio.wait_for(coro, timeout=self.ai_timeout)
        except asyncio.TimeoutError:
            logger.error("AI call exceeded %ss", self.ai_timeout)
            raise DependencyError(detail="Timed out waiting for AI response")
        except DependencyError as e:
            logger.error("AI Error: %s", e.detail)
            raise
        except FitTrackError:
            raise
        except Exception as e:
            # Ответ AI недоверенный: любой сбой клиента считается сбоем зависимости
            logger.exception("AI call failed")
            raise DependencyError(detail=f"{type(e).__name__}: {e}")

    async def _load_user_profile(self, user_id: int) -> ProfileSnapshot:
        user = await self.users.get_by_id(user_id)
        if user is None:
            raise NotFoundError("User not found")
        return ProfileSnapshot.from_user(user)

    async def send_chat_message(self, user_id: int, message: str) -> Tuple[str, datetime]:
        """Ответ тренера. Обе реплики сохраняются только после успешного ответа AI."""
        if not message or not message.strip():
            raise ValidationError("Message cannot be empty")

        profile = await self._load_user_profile(user_id)
        history = await self.messages.recent(user_id, CHAT_CONTEXT_LIMIT)
        logger.info("Chat history length for user %s: %d", user_id, len(history))

        turns = build_context(history, message, profile)
        reply = await self._call_ai(self.ai.chat(turns))

        now = self.clock()
        try:
            await self.messages.add_exchange(user_id, message, reply, now)
        except SQLAlchemyError as e:
            await self.db.rollback()
            logger.exception("Saving chat exchange failed for user %s", user_id)
            raise StorageError(detail=str(e))

        return reply, now

    async def get_chat_history(self, user_id: int, limit: int = 50) -> List[ChatMessage]:
        messages = await self.messages.recent(user_id, limit)
        messages.reverse()
        return messages

    async def clear_chat_history(self, user_id: int) -> int:
        return await self.messages.clear(user_id)

    async def generate_workout_plan(self, user_id: int) -> Tuple[str, ProfileSnapshot]:
        profile = await self._load_user_profile(user_id)
        profile = ProfileSnapshot(
            fitness_level=profile.fitness_level or "beginner",
            fitness_goal=profile.fitness_goal or "maintenance",
            equipment=profile.equipment or ["bodyweight"],
            workout_duration=profile.workout_duration or 30,
            injuries=profile.injuries,
            weekly_workouts=profile.weekly_workouts or 3,
        )
        plan = await self._call_ai(self.ai.generate_workout_plan(profile))
        return plan, profile

    async def recommend_exercises(
        self,
        muscle_group: str,
        equipment: Optional[str] = None,
        difficulty: Optional[str] = None,
    ) -> Tuple[str, str, str]:
        equipment = equipment or "bodyweight"
        difficulty = difficulty or "intermediate"
        exercises = await self._call_ai(self.ai.recommend_exercises(muscle_group, equipment, difficulty))
        return exercises, equipment, difficulty
