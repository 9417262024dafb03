import enum
from sqlalchemy import Column, Integer, String, Enum, JSON, DateTime
from sqlalchemy.orm import relationship
from fittrack.core.base import Base
from datetime import datetime, timezone


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class FitnessLevelEnum(str, enum.Enum):
    beginner = "beginner"
    intermediate = "intermediate"
    advanced = "advanced"


class FitnessGoalEnum(str, enum.Enum):
    weight_loss = "weight-loss"
    muscle_gain = "muscle-gain"
    maintenance = "maintenance"
    endurance = "endurance"
    flexibility = "flexibility"


class User(Base):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String, nullable=False)
    email = Column(String, unique=True, nullable=False)

    # Профиль и предпочтения: только чтение со стороны журнала тренировок
    fitness_level = Column(Enum(FitnessLevelEnum, values_callable=lambda e: [m.value for m in e]), nullable=True)
    fitness_goal = Column(Enum(FitnessGoalEnum, values_callable=lambda e: [m.value for m in e]), nullable=True)
    weekly_workouts = Column(Integer, nullable=True)
    equipment = Column(JSON, nullable=True)
    workout_duration = Column(Integer, nullable=True)
    injuries = Column(JSON, nullable=True)

    # Стрик. streak_version растет при каждой записи (optimistic locking)
    streak_current = Column(Integer, default=0, nullable=False)
    streak_longest = Column(Integer, default=0, nullable=False)
    streak_last_workout = Column(DateTime(timezone=True), nullable=True)
    streak_version = Column(Integer, default=0, nullable=False)

    created_at = Column(DateTime(timezone=True), default=utcnow)

    workout_logs = relationship("WorkoutLog", back_populates="user", cascade="all, delete")
    chat_messages = relationship("ChatMessage", back_populates="user", cascade="all, delete")
