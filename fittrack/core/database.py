import logging

from fittrack.core.config import settings
from fittrack.core.base import Base
from fittrack.core.db import engine

# Регистрируем все модели в metadata
from fittrack.models.user import User  # noqa: F401
from fittrack.models.workout_log import WorkoutLog, WorkoutLogExercise  # noqa: F401
from fittrack.models.chat_message import ChatMessage  # noqa: F401

logger = logging.getLogger(__name__)


async def init_database():
    """Инициализация базы данных"""
    async with engine.begin() as conn:
        if settings.RESET_DATABASE:
            logger.warning("RESET_DATABASE=true - пересоздаем БД")
            await conn.run_sync(Base.metadata.drop_all)

        await conn.run_sync(Base.metadata.create_all)
        logger.info("Таблицы БД созданы/проверены")
