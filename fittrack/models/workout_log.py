import enum
from sqlalchemy import Column, Integer, String, DateTime, ForeignKey, Float, Enum, Index
from sqlalchemy.orm import relationship
from fittrack.core.base import Base
from fittrack.models.user import utcnow


class DifficultyEnum(str, enum.Enum):
    easy = "easy"
    moderate = "moderate"
    hard = "hard"
    very_hard = "very-hard"


class MoodEnum(str, enum.Enum):
    great = "great"
    good = "good"
    okay = "okay"
    tired = "tired"
    exhausted = "exhausted"


def _enum_values(enum_cls):
    return [m.value for m in enum_cls]


class WorkoutLog(Base):
    __tablename__ = "workout_logs"
    __table_args__ = (
        Index("ix_workout_logs_user_completed", "user_id", "completed_at"),
    )

    id = Column(Integer, primary_key=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    workout_name = Column(String, nullable=False)
    duration = Column(Float, nullable=False)
    calories_burned = Column(Float, default=0, nullable=False)
    difficulty = Column(Enum(DifficultyEnum, values_callable=_enum_values), default=DifficultyEnum.moderate, nullable=False)
    mood = Column(Enum(MoodEnum, values_callable=_enum_values), default=MoodEnum.good, nullable=False)
    notes = Column(String, default="", nullable=False)
    completed_at = Column(DateTime(timezone=True), default=utcnow, nullable=False)
    created_at = Column(DateTime(timezone=True), default=utcnow, nullable=False)

    user = relationship("User", back_populates="workout_logs")
    exercises = relationship(
        "WorkoutLogExercise",
        back_populates="workout_log",
        cascade="all, delete-orphan",
        order_by="WorkoutLogExercise.position",
        lazy="selectin",
    )


class WorkoutLogExercise(Base):
    __tablename__ = "workout_log_exercises"

    id = Column(Integer, primary_key=True)
    workout_log_id = Column(Integer, ForeignKey("workout_logs.id", ondelete="CASCADE"), nullable=False, index=True)
    position = Column(Integer, nullable=False)
    name = Column(String, nullable=False)
    sets = Column(Integer, default=0, nullable=False)
    reps = Column(Integer, default=0, nullable=False)
    weight = Column(Float, default=0, nullable=False)
    duration = Column(Float, default=0, nullable=False)
    notes = Column(String, nullable=True)

    workout_log = relationship("WorkoutLog", back_populates="exercises")
