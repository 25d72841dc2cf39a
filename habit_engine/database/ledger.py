#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Habit Engine - Completion Ledger
Интерфейс внешнего хранилища выполнений, эталонная реализация в памяти
и тонкий адаптер, через который движок читает и пишет журнал
"""

import asyncio
import logging
from abc import ABC, abstractmethod
from datetime import date
from typing import Dict, List, Optional, Tuple

logger = logging.getLogger(__name__)

# ===== EXCEPTIONS =====

class StoreError(Exception):
    """Базовое исключение для ошибок хранилища журнала"""
    pass

class StoreReadError(StoreError):
    """Ошибка чтения из хранилища"""
    pass

class StoreWriteError(StoreError):
    """Ошибка записи в хранилище"""
    pass

class StoreCorruptionError(StoreError):
    """Повреждение данных хранилища"""
    pass

# ===== STORE INTERFACE =====

class LedgerStore(ABC):
    """Хранилище булевых отметок выполнения по (habit_id, день).

    Отсутствие записи означает «не выполнено» и ошибкой не является.
    """

    @abstractmethod
    async def get(self, habit_id: str, day: date) -> Optional[bool]:
        ...

    @abstractmethod
    async def set(self, habit_id: str, day: date, value: bool) -> None:
        ...

    @abstractmethod
    async def list_since(self, habit_id: str, from_day: date) -> List[Tuple[date, bool]]:
        """Записи с днём >= from_day по возрастанию дня; пропуски допустимы"""
        ...

class InMemoryLedgerStore(LedgerStore):
    """Эталонное хранилище в памяти (тесты, встраивание)"""

    def __init__(self, initial: Optional[Dict[str, Dict[date, bool]]] = None):
        self._data: Dict[str, Dict[date, bool]] = {
            habit_id: dict(days) for habit_id, days in (initial or {}).items()
        }

    async def get(self, habit_id: str, day: date) -> Optional[bool]:
        await asyncio.sleep(0)
        return self._data.get(habit_id, {}).get(day)

    async def set(self, habit_id: str, day: date, value: bool) -> None:
        await asyncio.sleep(0)
        self._data.setdefault(habit_id, {})[day] = bool(value)

    async def list_since(self, habit_id: str, from_day: date) -> List[Tuple[date, bool]]:
        await asyncio.sleep(0)
        days = self._data.get(habit_id, {})
        return sorted((d, v) for d, v in days.items() if d >= from_day)

    def snapshot(self) -> Dict[str, Dict[date, bool]]:
        """Копия содержимого (для проверок в тестах)"""
        return {habit_id: dict(days) for habit_id, days in self._data.items()}

# ===== ACCESSOR =====

class CompletionLedger:
    """Адаптер над внешним хранилищем.

    Любая ошибка хранилища приводится к StoreError: чтение - StoreReadError,
    запись - StoreWriteError. Результаты list_since нормализуются
    (фильтр по нижней границе, сортировка по возрастанию).
    """

    def __init__(self, store: LedgerStore):
        self.store = store

    async def get(self, habit_id: str, day: date) -> Optional[bool]:
        try:
            value = await self.store.get(habit_id, day)
        except StoreError:
            raise
        except Exception as e:
            logger.error(f"Ledger read failed for {habit_id} @ {day}: {e}")
            raise StoreReadError(f"Не удалось прочитать отметку {habit_id} за {day}: {e}") from e
        return None if value is None else bool(value)

    async def is_completed(self, habit_id: str, day: date) -> bool:
        return await self.get(habit_id, day) is True

    async def set(self, habit_id: str, day: date, value: bool) -> None:
        try:
            await self.store.set(habit_id, day, bool(value))
        except StoreError:
            raise
        except Exception as e:
            logger.error(f"Ledger write failed for {habit_id} @ {day}: {e}")
            raise StoreWriteError(f"Не удалось записать отметку {habit_id} за {day}: {e}") from e
        logger.debug(f"Ledger set {habit_id} @ {day} -> {value}")

    async def list_since(self, habit_id: str, from_day: date) -> List[Tuple[date, bool]]:
        try:
            rows = await self.store.list_since(habit_id, from_day)
        except StoreError:
            raise
        except Exception as e:
            logger.error(f"Ledger scan failed for {habit_id} since {from_day}: {e}")
            raise StoreReadError(f"Не удалось прочитать историю {habit_id}: {e}") from e
        return sorted((d, bool(v)) for d, v in rows if d >= from_day)

    async def history(self, habit_id: str, from_day: date) -> Dict[date, bool]:
        """История как словарь день -> отметка"""
        return dict(await self.list_since(habit_id, from_day))
