# habit_engine/services/agenda_service.py

import asyncio
import logging
from datetime import date
from typing import Iterable, List, Optional

from habit_engine.core.models import Habit, AgendaItem, GoalSummary
from habit_engine.core.schedule import is_active_on, sort_by_time_hint
from habit_engine.database.catalog import HabitCatalog
from habit_engine.database.ledger import StoreError
from habit_engine.services.streak_service import StreakService

logger = logging.getLogger(__name__)


def dedupe_habits(habits: Iterable[Habit]) -> List[Habit]:
    """Убрать повторы по habit_id, первое вхождение сохраняется"""
    seen = set()
    unique = []
    for habit in habits:
        if habit.habit_id in seen:
            continue
        seen.add(habit.habit_id)
        unique.append(habit)
    return unique


class AgendaService:
    """
    Повестка дня для дашборда

    Две формы вызова - по цели и по привычкам без цели - и объединённый
    вид, в котором каждая привычка встречается ровно один раз.
    """

    def __init__(self, catalog: HabitCatalog, streaks: StreakService):
        self.catalog = catalog
        self.streaks = streaks

    async def _item(self, habit: Habit, today: date) -> AgendaItem:
        try:
            completed, streak = await self.streaks.today_status(habit, today)
        except StoreError as e:
            logger.warning(f"⚠️ Журнал недоступен для {habit.habit_id}, строка повестки без статистики: {e}")
            return AgendaItem(habit=habit, completed=False, streak=0, degraded=True)
        return AgendaItem(habit=habit, completed=completed, streak=streak)

    async def scheduled_today(self, habits: Iterable[Habit], today: date) -> List[AgendaItem]:
        """Привычки, запланированные на today (и созданные не позже), со статусом и серией"""
        due = [h for h in sort_by_time_hint(dedupe_habits(habits)) if is_active_on(h, today)]
        return list(await asyncio.gather(*(self._item(h, today) for h in due)))

    async def for_goal(self, goal_id: str, today: date) -> List[AgendaItem]:
        return await self.scheduled_today(await self.catalog.habits_for_goal(goal_id), today)

    async def standalone(self, today: date) -> List[AgendaItem]:
        return await self.scheduled_today(await self.catalog.standalone_habits(), today)

    async def combined_habits(self) -> List[Habit]:
        """Привычки всех целей (в порядке создания целей), затем привычки без цели"""
        habits: List[Habit] = []
        for goal in await self.catalog.list_goals():
            habits.extend(await self.catalog.habits_for_goal(goal.goal_id))
        habits.extend(await self.catalog.standalone_habits())
        return dedupe_habits(habits)

    async def combined(self, today: date) -> List[AgendaItem]:
        return await self.scheduled_today(await self.combined_habits(), today)

    async def agenda(self, goal_id: Optional[str], today: date) -> List[AgendaItem]:
        """Повестка цели или, без goal_id, объединённая повестка"""
        if goal_id is None:
            return await self.combined(today)
        return await self.for_goal(goal_id, today)

    async def pending_count(self, goal_id: Optional[str], today: date) -> int:
        items = await self.agenda(goal_id, today)
        return sum(1 for item in items if not item.completed)

    async def goal_summaries(self, today: date, lookback_days: int) -> List[GoalSummary]:
        """Сводки по всем целям в порядке создания"""
        summaries = []
        for goal in await self.catalog.list_goals():
            habits = dedupe_habits(await self.catalog.habits_for_goal(goal.goal_id))
            agenda = await self.scheduled_today(habits, today)
            try:
                last_interaction = await self.streaks.last_completed_day(habits, today, lookback_days)
            except StoreError as e:
                logger.warning(f"⚠️ Не удалось определить последнюю активность цели {goal.goal_id}: {e}")
                last_interaction = None
            summaries.append(GoalSummary.from_agenda(goal, habits, agenda, last_interaction))
        return summaries
