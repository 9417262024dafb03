from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone, tzinfo
from decimal import Decimal, ROUND_HALF_UP
from typing import List, Optional, Sequence

from fittrack.models.workout_log import WorkoutLog
from fittrack.repositories.workout_log_repository import WorkoutLogRepository
from fittrack.services.streak_calculator import as_aware


@dataclass
class WorkoutStats:
    total_workouts: int = 0
    workouts_this_week: int = 0
    total_calories: float = 0
    total_minutes: float = 0
    recent_workouts: List[WorkoutLog] = field(default_factory=list)

    @property
    def total_hours(self) -> str:
        return minutes_to_hours(self.total_minutes)


def minutes_to_hours(minutes: Optional[float]) -> str:
    """Минуты -> часы строкой с одним знаком, округление half-up ("0.0" для пустой истории)."""
    hours = Decimal(str(minutes or 0)) / Decimal(60)
    return str(hours.quantize(Decimal("0.1"), rounding=ROUND_HALF_UP))


def start_of_week(now: datetime, tz: tzinfo) -> datetime:
    """Полночь последнего воскресенья (включительно) в часовом поясе tz."""
    local_now = as_aware(now).astimezone(tz)
    # weekday(): понедельник=0 ... воскресенье=6
    days_since_sunday = (local_now.weekday() + 1) % 7
    sunday = local_now.date() - timedelta(days=days_since_sunday)
    return datetime(sunday.year, sunday.month, sunday.day, tzinfo=tz)


def compute_stats(
    events: Sequence[WorkoutLog],
    now: datetime,
    tz: tzinfo = timezone.utc,
    recent_limit: int = 5,
) -> WorkoutStats:
    """Статистика по уже загруженным тренировкам (без обращения к БД)."""
    now = as_aware(now)
    week_start = start_of_week(now, tz)

    stats = WorkoutStats()
    for event in events:
        completed_at = as_aware(event.completed_at)
        stats.total_workouts += 1
        stats.total_calories += event.calories_burned or 0
        stats.total_minutes += event.duration or 0
        if week_start <= completed_at <= now:
            stats.workouts_this_week += 1

    stats.recent_workouts = sorted(
        events, key=lambda e: as_aware(e.completed_at), reverse=True
    )[:recent_limit]
    return stats


class StatsAggregator:
    """Та же статистика, но count/sum выполняются в БД."""

    def __init__(self, workouts: WorkoutLogRepository, tz: tzinfo = timezone.utc, recent_limit: int = 5):
        self.workouts = workouts
        self.tz = tz
        self.recent_limit = recent_limit

    async def collect(self, user_id: int, now: datetime) -> WorkoutStats:
        now = as_aware(now).astimezone(timezone.utc)
        week_start = start_of_week(now, self.tz).astimezone(timezone.utc)
        total, calories, minutes = await self.workouts.totals(user_id)
        this_week = await self.workouts.count_between(user_id, week_start, now)
        recent = await self.workouts.recent(user_id, self.recent_limit)

        return WorkoutStats(
            total_workouts=total,
            workouts_this_week=this_week,
            total_calories=calories,
            total_minutes=minutes,
            recent_workouts=list(recent),
        )
