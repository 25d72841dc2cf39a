# habit_engine/services/focus_service.py
"""
Выбор основной цели для главного экрана.

Чистая функция ранжирования над уже посчитанными сводками целей,
ввода-вывода здесь нет.
"""

from datetime import date
from typing import AbstractSet, List, Mapping, Optional, Sequence, Tuple

from habit_engine.core.models import Goal, Habit, GoalSummary
from habit_engine.core.schedule import is_active_on


def _rank_key(indexed: Tuple[int, GoalSummary]) -> tuple:
    index, summary = indexed
    last = summary.last_interaction
    return (
        0 if summary.pending > 0 else 1,         # есть невыполненные привычки на сегодня
        0 if last is not None else 1,
        -last.toordinal() if last is not None else 0,  # недавняя активность выше
        -summary.active_habits,                  # больше привычек выше
        summary.goal.created_on,                 # раньше созданная выше
        index,
    )


def rank_goals(summaries: Sequence[GoalSummary]) -> List[GoalSummary]:
    """Цели от наиболее к наименее приоритетной"""
    return [summary for _, summary in sorted(enumerate(summaries), key=_rank_key)]


def select_primary_goal(summaries: Sequence[GoalSummary], preferred_goal_id: Optional[str] = None) -> Optional[str]:
    """Идентификатор основной цели или None, если целей нет.

    Закреплённая пользователем цель выигрывает, пока она существует.
    """
    if not summaries:
        return None

    if preferred_goal_id is not None:
        if any(s.goal_id == preferred_goal_id for s in summaries):
            return preferred_goal_id

    return rank_goals(summaries)[0].goal_id


def build_goal_summaries(goals: Sequence[Goal],
                         habits_by_goal: Mapping[str, Sequence[Habit]],
                         completed_today: AbstractSet[str],
                         today: date,
                         last_interaction: Optional[Mapping[str, date]] = None) -> List[GoalSummary]:
    """Сводки целей из готовых данных: привычки по целям и id выполненных сегодня"""
    last_interaction = last_interaction or {}
    summaries = []
    for goal in goals:
        habits = list(habits_by_goal.get(goal.goal_id, ()))
        due = [h for h in habits if is_active_on(h, today)]
        summaries.append(GoalSummary(
            goal=goal,
            active_habits=len(habits),
            scheduled_today=len(due),
            completed_today=sum(1 for h in due if h.habit_id in completed_today),
            last_interaction=last_interaction.get(goal.goal_id)
        ))
    return summaries
