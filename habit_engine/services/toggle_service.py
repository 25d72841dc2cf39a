# habit_engine/services/toggle_service.py

import asyncio
import logging
from contextlib import asynccontextmanager
from datetime import date
from typing import AsyncIterator, Dict, Hashable, Tuple

from habit_engine.database.ledger import CompletionLedger

logger = logging.getLogger(__name__)


class InvalidDate(ValueError):
    """Попытка отметить будущий день или нераспознанный ключ дня"""
    pass


class KeyedLock:
    """Набор asyncio.Lock по ключу; неиспользуемые блокировки удаляются"""

    def __init__(self):
        self._locks: Dict[Hashable, asyncio.Lock] = {}
        self._waiters: Dict[Hashable, int] = {}

    @asynccontextmanager
    async def hold(self, key: Hashable) -> AsyncIterator[None]:
        lock = self._locks.setdefault(key, asyncio.Lock())
        self._waiters[key] = self._waiters.get(key, 0) + 1
        try:
            async with lock:
                yield
        finally:
            self._waiters[key] -= 1
            if self._waiters[key] == 0:
                del self._waiters[key]
                del self._locks[key]

    def __len__(self) -> int:
        return len(self._locks)


class ToggleService:
    """
    Единственная точка изменения журнала

    Переключение сериализуется по ключу (habit_id, день): два быстрых
    нажатия подряд дают две последовательные инверсии, а не две записи
    поверх одного устаревшего чтения. Разные ключи не блокируют друг друга.
    """

    def __init__(self, ledger: CompletionLedger):
        self.ledger = ledger
        self.locks = KeyedLock()

    async def toggle_completion(self, habit_id: str, target_day: date, today: date) -> bool:
        """Инвертировать отметку выполнения и вернуть новое состояние.

        StoreError при записи пробрасывается вызывающему без изменений.
        """
        if target_day > today:
            raise InvalidDate(f"Нельзя отметить будущий день {target_day} (сегодня {today})")

        key: Tuple[str, date] = (habit_id, target_day)
        async with self.locks.hold(key):
            current = await self.ledger.get(habit_id, target_day)
            new_state = current is not True
            await self.ledger.set(habit_id, target_day, new_state)

        logger.info(f"✅ Привычка {habit_id} за {target_day}: {'выполнена' if new_state else 'не выполнена'}")
        return new_state
