# habit_engine/core/schedule.py
"""
Предикат расписания: запланирована ли привычка на конкретный день.

Предикат знает только о расписании. Граница даты создания привычки
накладывается вызывающим кодом (см. is_active_on).
"""

from datetime import date
from typing import Iterable, List

from habit_engine.core.models import Habit, Schedule, DailySchedule, WeeklySchedule, ScheduleConfigError
from habit_engine.utils.datetime_utils import weekday_of, iter_days


def is_planned(schedule: Schedule, day: date) -> bool:
    """Запланирован ли день по расписанию"""
    if isinstance(schedule, DailySchedule):
        return True
    if isinstance(schedule, WeeklySchedule):
        return weekday_of(day) in schedule.days
    raise ScheduleConfigError(f"Неизвестное расписание: {schedule!r}")


def is_active_on(habit: Habit, day: date) -> bool:
    """Запланирован ли день с учётом даты создания привычки"""
    return day >= habit.created_on and is_planned(habit.schedule, day)


def planned_days(habit: Habit, start: date, end: date) -> List[date]:
    """Запланированные дни привычки в диапазоне [start, end], по возрастанию"""
    start = max(start, habit.created_on)
    return [d for d in iter_days(start, end) if is_planned(habit.schedule, d)]


def sort_by_time_hint(habits: Iterable[Habit]) -> List[Habit]:
    """Сортировка по подсказке времени: утро, день, вечер, точное время, в любое время.

    Сортировка устойчивая, исходный порядок сохраняется внутри одной группы.
    """
    return sorted(habits, key=lambda h: h.time_hint.sort_key)
