import pytest
from datetime import date
from typing import Optional

from habit_engine.config import load_config
from habit_engine.core.models import Goal, Habit, DailySchedule, TimeHint
from habit_engine.database.catalog import InMemoryCatalog
from habit_engine.database.ledger import LedgerStore, InMemoryLedgerStore
from habit_engine.services.engine import HabitEngine

# Среда
TODAY = date(2024, 1, 10)

CONFIG_ENV = [
    'ENVIRONMENT', 'HABIT_TIMEZONE', 'DATA_DIR', 'BACKUP_DIR', 'LOG_DIR',
    'BACKUP_INTERVAL_HOURS', 'MAX_BACKUPS', 'AUTO_BACKUP',
    'SUCCESS_WINDOW_DAYS', 'CALENDAR_DAYS', 'ACTIVITY_LOOKBACK_DAYS',
    'LOG_LEVEL', 'LOG_TO_FILE', 'LOG_FORMAT',
]


class FailingStore(LedgerStore):
    """Хранилище, которое падает на чтении и/или записи"""

    def __init__(self, fail_reads: bool = True, fail_writes: bool = True):
        self.inner = InMemoryLedgerStore()
        self.fail_reads = fail_reads
        self.fail_writes = fail_writes

    async def get(self, habit_id, day):
        if self.fail_reads:
            raise OSError("disk unavailable")
        return await self.inner.get(habit_id, day)

    async def set(self, habit_id, day, value):
        if self.fail_writes:
            raise OSError("disk full")
        await self.inner.set(habit_id, day, value)

    async def list_since(self, habit_id, from_day):
        if self.fail_reads:
            raise OSError("disk unavailable")
        return await self.inner.list_since(habit_id, from_day)


@pytest.fixture
def clean_env(monkeypatch):
    for key in CONFIG_ENV:
        monkeypatch.delenv(key, raising=False)
    return monkeypatch


@pytest.fixture
def engine_config(clean_env):
    return load_config()


@pytest.fixture
def habit_factory():
    def make(habit_id: str, created_on: date = date(2024, 1, 1), schedule=None,
             goal_id: Optional[str] = None, time_hint: Optional[TimeHint] = None) -> Habit:
        return Habit(
            habit_id=habit_id,
            title=f"Habit {habit_id}",
            created_on=created_on,
            schedule=schedule or DailySchedule(),
            goal_id=goal_id,
            time_hint=time_hint or TimeHint()
        )
    return make


@pytest.fixture
def goal_factory():
    def make(goal_id: str, created_on: date = date(2024, 1, 1)) -> Goal:
        return Goal(goal_id=goal_id, title=f"Goal {goal_id}", created_on=created_on)
    return make


@pytest.fixture
def catalog():
    return InMemoryCatalog()


@pytest.fixture
def store():
    return InMemoryLedgerStore()


@pytest.fixture
def engine(catalog, store, engine_config):
    return HabitEngine(catalog, store, config=engine_config, clock=lambda: TODAY)
