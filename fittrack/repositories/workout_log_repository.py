from datetime import datetime
from typing import List, Optional, Sequence, Tuple

from sqlalchemy import select, func
from sqlalchemy.ext.asyncio import AsyncSession

from fittrack.models.workout_log import WorkoutLog


class WorkoutLogRepository:
    def __init__(self, db: AsyncSession):
        self.db = db

    async def add(self, workout: WorkoutLog) -> WorkoutLog:
        self.db.add(workout)
        await self.db.commit()
        await self.db.refresh(workout, attribute_names=["exercises"])
        return workout

    async def get_for_user(self, user_id: int, workout_id: int) -> Optional[WorkoutLog]:
        result = await self.db.execute(
            select(WorkoutLog).where(
                WorkoutLog.id == workout_id,
                WorkoutLog.user_id == user_id,
            )
        )
        return result.scalar_one_or_none()

    async def delete_for_user(self, user_id: int, workout_id: int) -> bool:
        """Удалить тренировку владельца. False, если id не найден у этого пользователя."""
        workout = await self.get_for_user(user_id, workout_id)
        if workout is None:
            return False
        await self.db.delete(workout)
        await self.db.commit()
        return True

    async def list_page(self, user_id: int, page: int, limit: int) -> Tuple[List[WorkoutLog], int]:
        total = await self.count(user_id)
        result = await self.db.execute(
            select(WorkoutLog)
            .where(WorkoutLog.user_id == user_id)
            .order_by(WorkoutLog.completed_at.desc(), WorkoutLog.id.desc())
            .offset((page - 1) * limit)
            .limit(limit)
        )
        return list(result.scalars().all()), total

    async def recent(self, user_id: int, limit: int) -> Sequence[WorkoutLog]:
        result = await self.db.execute(
            select(WorkoutLog)
            .where(WorkoutLog.user_id == user_id)
            .order_by(WorkoutLog.completed_at.desc(), WorkoutLog.id.desc())
            .limit(limit)
        )
        return result.scalars().all()

    async def completion_times(self, user_id: int) -> List[datetime]:
        result = await self.db.execute(
            select(WorkoutLog.completed_at).where(WorkoutLog.user_id == user_id)
        )
        return list(result.scalars().all())

    async def count(self, user_id: int) -> int:
        result = await self.db.execute(
            select(func.count(WorkoutLog.id)).where(WorkoutLog.user_id == user_id)
        )
        return result.scalar_one()

    async def count_between(self, user_id: int, start: datetime, end: datetime) -> int:
        result = await self.db.execute(
            select(func.count(WorkoutLog.id)).where(
                WorkoutLog.user_id == user_id,
                WorkoutLog.completed_at >= start,
                WorkoutLog.completed_at <= end,
            )
        )
        return result.scalar_one()

    async def totals(self, user_id: int) -> Tuple[int, float, float]:
        """(количество, сумма калорий, сумма минут) одним агрегатным запросом."""
        result = await self.db.execute(
            select(
                func.count(WorkoutLog.id),
                func.coalesce(func.sum(WorkoutLog.calories_burned), 0),
                func.coalesce(func.sum(WorkoutLog.duration), 0),
            ).where(WorkoutLog.user_id == user_id)
        )
        count, calories, minutes = result.one()
        return count, calories, minutes
