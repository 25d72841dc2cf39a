from .models import (
    ValidationError,
    ScheduleConfigError,
    TimeOfDay,
    TimeHint,
    DailySchedule,
    WeeklySchedule,
    Schedule,
    schedule_from_dict,
    Goal,
    Habit,
    WindowCounts,
    StreakSnapshot,
    DayStatus,
    AgendaItem,
    GoalSummary,
)
from .schedule import is_planned, is_active_on, planned_days, sort_by_time_hint

__all__ = [
    'ValidationError',
    'ScheduleConfigError',
    'TimeOfDay',
    'TimeHint',
    'DailySchedule',
    'WeeklySchedule',
    'Schedule',
    'schedule_from_dict',
    'Goal',
    'Habit',
    'WindowCounts',
    'StreakSnapshot',
    'DayStatus',
    'AgendaItem',
    'GoalSummary',
    'is_planned',
    'is_active_on',
    'planned_days',
    'sort_by_time_hint',
]
