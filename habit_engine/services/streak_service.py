# habit_engine/services/streak_service.py

import logging
from datetime import date, timedelta
from typing import Dict, Iterable, List, Mapping, Optional, Tuple

from habit_engine.core.models import Habit, StreakSnapshot, WindowCounts, DayStatus
from habit_engine.core.schedule import is_planned, planned_days
from habit_engine.database.ledger import CompletionLedger, StoreError
from habit_engine.utils.datetime_utils import add_days, iter_days

logger = logging.getLogger(__name__)

# ===== ЧИСТЫЕ ВЫЧИСЛЕНИЯ =====

def current_streak(habit: Habit, completions: Mapping[date, bool], today: date) -> int:
    """Текущая серия: идём назад от today включительно.

    Незапланированные дни пропускаются и серию не прерывают,
    первый запланированный невыполненный день её обрывает.
    """
    count = 0
    day = today
    while day >= habit.created_on:
        if is_planned(habit.schedule, day):
            if completions.get(day) is not True:
                break
            count += 1
        day -= timedelta(days=1)
    return count


def longest_streak(habit: Habit, completions: Mapping[date, bool], start: date, end: date) -> int:
    """Самая длинная серия в окне [start, end], один линейный проход"""
    best = 0
    run = 0
    for day in iter_days(max(start, habit.created_on), end):
        if not is_planned(habit.schedule, day):
            continue
        if completions.get(day) is True:
            run += 1
            best = max(best, run)
        else:
            run = 0
    return best


def window_counts(habit: Habit, completions: Mapping[date, bool], window_days: int, today: date) -> WindowCounts:
    """Запланированные и выполненные дни в окне [today - window_days + 1, today]"""
    if window_days < 0:
        raise ValueError("window_days не может быть отрицательным")
    if window_days == 0:
        return WindowCounts()

    start = add_days(today, -(window_days - 1))
    days = planned_days(habit, start, today)
    completed = sum(1 for d in days if completions.get(d) is True)
    return WindowCounts(planned=len(days), completed=completed)


def total_completions(habit: Habit, completions: Mapping[date, bool], today: date) -> int:
    return sum(
        1 for d, value in completions.items()
        if value is True and habit.created_on <= d <= today
    )

# ===== СЕРВИС =====

class StreakService:
    """
    Серии и статистика привычек

    Все значения пересчитываются из журнала при каждом запросе,
    кэшированного состояния серий нет. Методы поднимают StoreError,
    если журнал недоступен; safe_snapshot вместо этого возвращает
    нейтральный снимок.
    """

    def __init__(self, ledger: CompletionLedger, default_window_days: int = 30):
        self.ledger = ledger
        self.default_window_days = default_window_days

    async def _history(self, habit: Habit, since: date, today: date) -> Dict[date, bool]:
        since = max(since, habit.created_on)
        if since > today:
            return {}
        history = await self.ledger.history(habit.habit_id, since)
        return {d: v for d, v in history.items() if d <= today}

    async def compute_current_streak(self, habit: Habit, today: date) -> int:
        history = await self._history(habit, habit.created_on, today)
        return current_streak(habit, history, today)

    async def compute_longest_streak(self, habit: Habit, today: date, since: Optional[date] = None) -> int:
        start = since or habit.created_on
        history = await self._history(habit, start, today)
        return longest_streak(habit, history, start, today)

    async def today_status(self, habit: Habit, today: date) -> Tuple[bool, int]:
        """(выполнена ли сегодня, текущая серия) за одно чтение журнала"""
        history = await self._history(habit, habit.created_on, today)
        return history.get(today) is True, current_streak(habit, history, today)

    async def window_counts(self, habit: Habit, window_days: int, today: date) -> WindowCounts:
        if window_days < 0:
            raise ValueError("window_days не может быть отрицательным")
        if window_days == 0:
            return WindowCounts()
        start = add_days(today, -(window_days - 1))
        history = await self._history(habit, start, today)
        return window_counts(habit, history, window_days, today)

    async def weekly_counts(self, habit: Habit, today: date) -> WindowCounts:
        """Запланировано и выполнено за последние 7 дней"""
        return await self.window_counts(habit, 7, today)

    async def success_rate(self, habit: Habit, window_days: int, today: date) -> float:
        return (await self.window_counts(habit, window_days, today)).rate

    async def snapshot(self, habit: Habit, today: date, window_days: Optional[int] = None) -> StreakSnapshot:
        """Полный снимок по всей истории привычки за один проход чтения"""
        window = self.default_window_days if window_days is None else window_days
        history = await self._history(habit, habit.created_on, today)

        return StreakSnapshot(
            current=current_streak(habit, history, today),
            longest=longest_streak(habit, history, habit.created_on, today),
            total_completions=total_completions(habit, history, today),
            success_rate=window_counts(habit, history, window, today).rate,
            window_days=window
        )

    async def safe_snapshot(self, habit: Habit, today: date, window_days: Optional[int] = None) -> StreakSnapshot:
        """Снимок, который никогда не роняет экран: при ошибке журнала - нейтральный"""
        window = self.default_window_days if window_days is None else window_days
        try:
            return await self.snapshot(habit, today, window)
        except StoreError as e:
            logger.warning(f"⚠️ Журнал недоступен для {habit.habit_id}, возвращаем нейтральный снимок: {e}")
            return StreakSnapshot.neutral(window)

    async def completion_calendar(self, habit: Habit, days: int, today: date) -> List[DayStatus]:
        """Календарь за последние days дней, от старых к новым"""
        if days <= 0:
            return []
        start = add_days(today, -(days - 1))
        history = await self._history(habit, start, today)
        return [
            DayStatus(
                day=d,
                planned=d >= habit.created_on and is_planned(habit.schedule, d),
                completed=history.get(d) is True
            )
            for d in iter_days(start, today)
        ]

    async def last_completed_day(self, habits: Iterable[Habit], today: date, lookback_days: int) -> Optional[date]:
        """Последний день с отметкой выполнения среди привычек в пределах lookback_days"""
        start = add_days(today, -(lookback_days - 1))
        latest: Optional[date] = None
        for habit in habits:
            history = await self._history(habit, start, today)
            completed = [d for d, value in history.items() if value is True]
            if completed and (latest is None or max(completed) > latest):
                latest = max(completed)
        return latest
