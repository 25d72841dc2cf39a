#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Habit Engine
Планирование привычек, учёт выполнения и расчёт серий
"""

from .core.models import (
    ValidationError,
    ScheduleConfigError,
    TimeOfDay,
    TimeHint,
    DailySchedule,
    WeeklySchedule,
    Goal,
    Habit,
    StreakSnapshot,
    AgendaItem,
    GoalSummary,
)
from .database import (
    StoreError,
    StoreReadError,
    StoreWriteError,
    LedgerStore,
    InMemoryLedgerStore,
    JsonLedgerStore,
    HabitCatalog,
    InMemoryCatalog,
)
from .services import HabitEngine, InvalidDate

__version__ = "1.0.0"

__all__ = [
    'ValidationError',
    'ScheduleConfigError',
    'TimeOfDay',
    'TimeHint',
    'DailySchedule',
    'WeeklySchedule',
    'Goal',
    'Habit',
    'StreakSnapshot',
    'AgendaItem',
    'GoalSummary',
    'StoreError',
    'StoreReadError',
    'StoreWriteError',
    'LedgerStore',
    'InMemoryLedgerStore',
    'JsonLedgerStore',
    'HabitCatalog',
    'InMemoryCatalog',
    'HabitEngine',
    'InvalidDate',
]
