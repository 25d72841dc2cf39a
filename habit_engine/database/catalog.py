# habit_engine/database/catalog.py
"""
Каталог целей и привычек (только чтение).

Создание и удаление целей и привычек выполняет внешний компонент;
движку нужен лишь доступ на чтение.
"""

import asyncio
from abc import ABC, abstractmethod
from typing import Dict, Iterable, List, Optional

from habit_engine.core.models import Goal, Habit


class HabitCatalog(ABC):
    """Источник записей Habit и Goal"""

    @abstractmethod
    async def list_goals(self) -> List[Goal]:
        """Цели в порядке создания"""
        ...

    @abstractmethod
    async def list_habits(self) -> List[Habit]:
        ...

    @abstractmethod
    async def habits_for_goal(self, goal_id: str) -> List[Habit]:
        ...

    @abstractmethod
    async def standalone_habits(self) -> List[Habit]:
        """Привычки без цели"""
        ...

    async def get_habit(self, habit_id: str) -> Optional[Habit]:
        for habit in await self.list_habits():
            if habit.habit_id == habit_id:
                return habit
        return None


class InMemoryCatalog(HabitCatalog):
    """Каталог в памяти; порядок вставки сохраняется"""

    def __init__(self, goals: Iterable[Goal] = (), habits: Iterable[Habit] = ()):
        self._goals: Dict[str, Goal] = {}
        self._habits: Dict[str, Habit] = {}
        for goal in goals:
            self.add_goal(goal)
        for habit in habits:
            self.add_habit(habit)

    def add_goal(self, goal: Goal) -> None:
        self._goals[goal.goal_id] = goal

    def add_habit(self, habit: Habit) -> None:
        self._habits[habit.habit_id] = habit

    async def list_goals(self) -> List[Goal]:
        await asyncio.sleep(0)
        # Порядок создания: по дате, при равенстве - порядок добавления
        return sorted(self._goals.values(), key=lambda g: g.created_on)

    async def list_habits(self) -> List[Habit]:
        await asyncio.sleep(0)
        return list(self._habits.values())

    async def habits_for_goal(self, goal_id: str) -> List[Habit]:
        await asyncio.sleep(0)
        return [h for h in self._habits.values() if h.goal_id == goal_id]

    async def standalone_habits(self) -> List[Habit]:
        await asyncio.sleep(0)
        return [h for h in self._habits.values() if h.goal_id is None]

    async def get_habit(self, habit_id: str) -> Optional[Habit]:
        await asyncio.sleep(0)
        return self._habits.get(habit_id)
