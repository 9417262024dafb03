from typing import Optional

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from fittrack.models.user import User
from fittrack.services.streak_calculator import StreakState


class UserRepository:
    def __init__(self, db: AsyncSession):
        self.db = db

    async def get_by_id(self, user_id: int) -> Optional[User]:
        result = await self.db.execute(select(User).where(User.id == user_id))
        return result.scalar_one_or_none()

    async def get_streak(self, user_id: int) -> Optional[tuple]:
        """(StreakState, version) из БД минуя identity map, None если пользователя нет."""
        result = await self.db.execute(
            select(
                User.streak_current,
                User.streak_longest,
                User.streak_last_workout,
                User.streak_version,
            ).where(User.id == user_id)
        )
        row = result.one_or_none()
        if row is None:
            return None

        current, longest, last_workout, version = row
        state = StreakState(
            current=current or 0,
            longest=longest or 0,
            last_workout=last_workout,
        )
        return state, version or 0

    async def compare_and_set_streak(
        self,
        user_id: int,
        expected_version: int,
        state: StreakState,
    ) -> bool:
        """Записать стрик, только если версия не изменилась с момента чтения."""
        result = await self.db.execute(
            update(User)
            .where(User.id == user_id, User.streak_version == expected_version)
            .values(
                streak_current=state.current,
                streak_longest=state.longest,
                streak_last_workout=state.last_workout,
                streak_version=expected_version + 1,
            )
            .execution_options(synchronize_session=False)
        )
        await self.db.commit()
        return result.rowcount == 1
