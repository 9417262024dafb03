"""
Общие фикстуры для тестов FitTrack backend.

Стратегия:
- БД: SQLite в памяти (aiosqlite) с теми же моделями, что и в проде.
- Внешний AI-сервис заменяется на AsyncMock(spec=AIService).
- Время берется из FrozenClock, чтобы проверять границы календарных дней.
- Тестовое FastAPI-приложение создается без lifespan (нет подключения к Postgres);
  get_db / get_engagement_engine / get_current_user подменяются через dependency_overrides.
"""

import pytest
from datetime import datetime, timezone
from typing import AsyncGenerator
from unittest.mock import AsyncMock

from fastapi import FastAPI
from httpx import AsyncClient, ASGITransport
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from fittrack.api.router import api_router
from fittrack.core.base import Base
from fittrack.core.db import get_db
from fittrack.core.dependencies import get_current_user, get_engagement_engine
from fittrack.core.handlers import register_exception_handlers
from fittrack.models.user import User, FitnessLevelEnum, FitnessGoalEnum
from fittrack.services.ai_service import AIService
from fittrack.services.engagement_engine import EngagementEngine
from fittrack.services.streak_calculator import BackdatedPolicy


# ---------------------------------------------------------------------------
# Вспомогательные функции
# ---------------------------------------------------------------------------

class FrozenClock:
    """Управляемые часы для EngagementEngine."""

    def __init__(self, now: datetime):
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def set(self, *args) -> datetime:
        self.now = datetime(*args, tzinfo=timezone.utc)
        return self.now


def create_test_app() -> FastAPI:
    """Тестовое FastAPI-приложение без lifespan."""
    test_app = FastAPI(title="FitTrack Test App")
    register_exception_handlers(test_app)
    test_app.include_router(api_router, prefix="/api")
    return test_app


def make_engine(session, ai, clock, **overrides) -> EngagementEngine:
    options = dict(
        tz=timezone.utc,
        backdated_policy=BackdatedPolicy.ignore,
        recompute_streak_on_delete=False,
        streak_retries=3,
        ai_timeout=5.0,
    )
    options.update(overrides)
    return EngagementEngine(session, ai=ai, clock=clock, **options)


# ---------------------------------------------------------------------------
# БД
# ---------------------------------------------------------------------------

@pytest.fixture
async def db_engine():
    engine = create_async_engine(
        "sqlite+aiosqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
async def session(db_engine) -> AsyncGenerator[AsyncSession, None]:
    session_factory = async_sessionmaker(db_engine, class_=AsyncSession, expire_on_commit=False)
    async with session_factory() as session:
        yield session


@pytest.fixture
async def user(session) -> User:
    """Пользователь с частично заполненным профилем."""
    user = User(
        id=1,
        name="Alex",
        email="alex@example.com",
        fitness_level=FitnessLevelEnum.beginner,
        fitness_goal=FitnessGoalEnum.muscle_gain,
        equipment=["dumbbells", "resistance-bands"],
        workout_duration=45,
        injuries=None,
        weekly_workouts=4,
    )
    session.add(user)
    await session.commit()
    return user


@pytest.fixture
async def other_user(session) -> User:
    """Второй пользователь с пустым профилем."""
    user = User(id=2, name="Sam", email="sam@example.com")
    session.add(user)
    await session.commit()
    return user


# ---------------------------------------------------------------------------
# Сервисы
# ---------------------------------------------------------------------------

@pytest.fixture
def clock() -> FrozenClock:
    return FrozenClock(datetime(2024, 1, 1, 9, 0, tzinfo=timezone.utc))


@pytest.fixture
def fake_ai() -> AsyncMock:
    """Мокированный AI-сервис: по умолчанию отвечает фиксированным текстом."""
    ai = AsyncMock(spec=AIService)
    ai.chat.return_value = "Let's get moving! 💪"
    ai.generate_workout_plan.return_value = "Day 1: Push\nDay 2: Pull"
    ai.recommend_exercises.return_value = "1. Push-ups\n2. Dips"
    return ai


@pytest.fixture
def engine(session, fake_ai, clock) -> EngagementEngine:
    return make_engine(session, fake_ai, clock)


@pytest.fixture
def engine_factory(session, fake_ai, clock):
    """EngagementEngine с переопределенными настройками (политики стрика, таймаут AI)."""
    def factory(**overrides) -> EngagementEngine:
        return make_engine(session, fake_ai, clock, **overrides)
    return factory


# ---------------------------------------------------------------------------
# HTTP-клиенты
# ---------------------------------------------------------------------------

@pytest.fixture
async def client(session, engine) -> AsyncGenerator[AsyncClient, None]:
    """Клиент без авторизации: get_current_user работает по-настоящему."""
    app = create_test_app()
    app.dependency_overrides[get_db] = lambda: session
    app.dependency_overrides[get_engagement_engine] = lambda: engine
    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test",
    ) as ac:
        yield ac


@pytest.fixture
async def user_client(session, engine, user) -> AsyncGenerator[AsyncClient, None]:
    """Клиент, аутентифицированный как user (id=1)."""
    app = create_test_app()
    app.dependency_overrides[get_db] = lambda: session
    app.dependency_overrides[get_engagement_engine] = lambda: engine
    app.dependency_overrides[get_current_user] = lambda: user
    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test",
    ) as ac:
        yield ac


@pytest.fixture
async def other_client(session, engine, other_user) -> AsyncGenerator[AsyncClient, None]:
    """Клиент, аутентифицированный как other_user (id=2)."""
    app = create_test_app()
    app.dependency_overrides[get_db] = lambda: session
    app.dependency_overrides[get_engagement_engine] = lambda: engine
    app.dependency_overrides[get_current_user] = lambda: other_user
    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test",
    ) as ac:
        yield ac
