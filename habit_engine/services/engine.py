# habit_engine/services/engine.py
"""
Habit Engine - фасад для экранов приложения

Собирает журнал, серии, переключение, повестку и выбор основной цели
в один объект. Каталог и хранилище передаются явно, глобального
состояния нет.
"""

import logging
from datetime import date, datetime
from typing import Callable, List, Optional, Union

from habit_engine.config import EngineConfig, config as default_config
from habit_engine.core.models import Habit, AgendaItem, GoalSummary, StreakSnapshot, DayStatus, WindowCounts
from habit_engine.core.schedule import is_active_on
from habit_engine.database.catalog import HabitCatalog
from habit_engine.database.ledger import LedgerStore, CompletionLedger
from habit_engine.services.agenda_service import AgendaService
from habit_engine.services.focus_service import select_primary_goal
from habit_engine.services.streak_service import StreakService
from habit_engine.services.toggle_service import ToggleService, InvalidDate
from habit_engine.utils.datetime_utils import day_key, parse_day_key, today as calendar_today

logger = logging.getLogger(__name__)

Clock = Callable[[], date]


class HabitEngine:
    """Планирование привычек и учёт выполнения"""

    def __init__(self, catalog: HabitCatalog, store: LedgerStore,
                 config: Optional[EngineConfig] = None, clock: Optional[Clock] = None):
        self.config = config or default_config
        self.catalog = catalog
        self.ledger = CompletionLedger(store)
        self._clock = clock or (lambda: calendar_today(self.config.timezone))

        self.streaks = StreakService(self.ledger, default_window_days=self.config.stats.success_window_days)
        self.toggles = ToggleService(self.ledger)
        self.agendas = AgendaService(catalog, self.streaks)

        logger.debug(f"HabitEngine создан, часовой пояс {self.config.timezone_name}")

    def today(self) -> date:
        return self._clock()

    def is_due_today(self, habit: Habit) -> bool:
        return is_active_on(habit, self.today())

    async def streak_of(self, habit: Habit, window_days: Optional[int] = None) -> StreakSnapshot:
        """Снимок серии; при недоступном журнале нейтральный снимок с degraded=True"""
        return await self.streaks.safe_snapshot(habit, self.today(), window_days)

    async def toggle(self, habit_id: str, day: Union[date, datetime, str, None] = None) -> bool:
        """Переключить отметку за day (по умолчанию сегодня) и вернуть новое состояние.

        datetime сводится к дню в часовом поясе движка, строка разбирается как YYYY-MM-DD.

        InvalidDate для будущего или нераспознанного дня, StoreError при
        сбое записи - оба пробрасываются.
        """
        if day is None:
            target = self.today()
        elif isinstance(day, datetime):
            # Момент времени переводится в день календаря пользователя
            target = day_key(day, self.config.timezone)
        else:
            try:
                target = parse_day_key(day)
            except (TypeError, ValueError):
                raise InvalidDate(f"Неверный ключ дня: {day!r}")

        return await self.toggles.toggle_completion(habit_id, target, self.today())

    async def todays_agenda(self, goal_id: Optional[str] = None) -> List[AgendaItem]:
        return await self.agendas.agenda(goal_id, self.today())

    async def standalone_agenda(self) -> List[AgendaItem]:
        return await self.agendas.standalone(self.today())

    async def pending_count(self, goal_id: Optional[str] = None) -> int:
        return await self.agendas.pending_count(goal_id, self.today())

    async def goal_summaries(self) -> List[GoalSummary]:
        return await self.agendas.goal_summaries(self.today(), self.config.stats.activity_lookback_days)

    async def select_primary_goal(self, preferred_goal_id: Optional[str] = None) -> Optional[str]:
        summaries = await self.goal_summaries()
        return select_primary_goal(summaries, preferred_goal_id)

    async def completion_calendar(self, habit: Habit, days: Optional[int] = None) -> List[DayStatus]:
        days = self.config.stats.calendar_days if days is None else days
        return await self.streaks.completion_calendar(habit, days, self.today())

    async def window_counts(self, habit: Habit, window_days: int) -> WindowCounts:
        return await self.streaks.window_counts(habit, window_days, self.today())
