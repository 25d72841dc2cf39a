from .streak_service import StreakService, current_streak, longest_streak, window_counts
from .toggle_service import ToggleService, KeyedLock, InvalidDate
from .agenda_service import AgendaService, dedupe_habits
from .focus_service import select_primary_goal, rank_goals, build_goal_summaries
from .engine import HabitEngine

__all__ = [
    'StreakService',
    'current_streak',
    'longest_streak',
    'window_counts',
    'ToggleService',
    'KeyedLock',
    'InvalidDate',
    'AgendaService',
    'dedupe_habits',
    'select_primary_goal',
    'rank_goals',
    'build_goal_summaries',
    'HabitEngine',
]
