"""
Расчет стрика: количество подряд идущих календарных дней с тренировкой.

Все функции чистые: текущее время и часовой пояс передаются явно,
сохранение состояния остается на вызывающей стороне.
"""

import enum
from dataclasses import dataclass
from datetime import datetime, date, timezone, tzinfo
from typing import Iterable, Optional


class BackdatedPolicy(str, enum.Enum):
    # Тренировка раньше последнего засчитанного дня не меняет стрик
    ignore = "ignore"
    # Стрик пересчитывается по всей истории (делает оркестратор)
    recompute = "recompute"


@dataclass(frozen=True)
class StreakState:
    current: int = 0
    longest: int = 0
    last_workout: Optional[datetime] = None

    @property
    def is_empty(self) -> bool:
        return self.last_workout is None

    def to_dict(self) -> dict:
        return {"current": self.current, "longest": self.longest}


EMPTY_STREAK = StreakState()


def as_aware(value: datetime) -> datetime:
    # Наивные datetime из БД считаем UTC
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def local_date(value: datetime, tz: tzinfo) -> date:
    return as_aware(value).astimezone(tz).date()


def calendar_days_between(later: datetime, earlier: datetime, tz: tzinfo) -> int:
    """Разница в календарных днях (полночь в tz), а не в прошедших 24-часовых интервалах."""
    return (local_date(later, tz) - local_date(earlier, tz)).days


def is_backdated(state: StreakState, completed_at: datetime, tz: tzinfo) -> bool:
    if state.is_empty:
        return False
    return calendar_days_between(completed_at, state.last_workout, tz) < 0


def advance(
    state: StreakState,
    completed_at: datetime,
    now: datetime,
    tz: tzinfo = timezone.utc,
) -> StreakState:
    """Следующее состояние стрика после новой тренировки.

    Время завершения из будущего обрезается до now. Тренировка раньше
    последнего засчитанного дня оставляет состояние без изменений;
    политику пересчета для таких записей применяет оркестратор.
    """
    completed_at = min(as_aware(completed_at), as_aware(now))

    if state.is_empty:
        return StreakState(current=1, longest=max(1, state.longest), last_workout=completed_at)

    days_diff = calendar_days_between(completed_at, state.last_workout, tz)

    if days_diff <= 0:
        return state

    if days_diff == 1:
        current = state.current + 1
        return StreakState(
            current=current,
            longest=max(current, state.longest),
            last_workout=completed_at,
        )

    # Пропуск двух и более дней: стрик начинается заново
    return StreakState(
        current=1,
        longest=max(1, state.longest),
        last_workout=completed_at,
    )


def replay(
    timestamps: Iterable[datetime],
    now: datetime,
    tz: tzinfo = timezone.utc,
    floor: StreakState = EMPTY_STREAK,
) -> StreakState:
    """Пересчитать стрик по всей истории тренировок.

    longest не опускается ниже floor.longest: рекорд не убывает.
    """
    state = EMPTY_STREAK
    for ts in sorted(as_aware(t) for t in timestamps):
        state = advance(state, ts, now, tz)

    if floor.longest > state.longest:
        state = StreakState(
            current=state.current,
            longest=floor.longest,
            last_workout=state.last_workout,
        )
    return state
