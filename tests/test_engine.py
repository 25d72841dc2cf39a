import pytest
from datetime import date

from habit_engine.core.models import WeeklySchedule
from habit_engine.services.engine import HabitEngine
from habit_engine.utils.datetime_utils import today as calendar_today

from tests.conftest import TODAY, FailingStore

pytestmark = pytest.mark.asyncio


async def test_streak_of(engine, store, habit_factory):
    habit = habit_factory("h1", created_on=date(2024, 1, 1))
    for d in (6, 7, 8, 9):
        await store.set("h1", date(2024, 1, d), True)
    await store.set("h1", date(2024, 1, 3), True)

    snapshot = await engine.streak_of(habit)
    assert snapshot.current == 0
    assert snapshot.longest == 4
    assert snapshot.total_completions == 5
    assert snapshot.window_days == 30
    assert snapshot.success_rate == pytest.approx(5 / 10)

    await engine.toggle("h1")
    snapshot = await engine.streak_of(habit, window_days=7)
    assert snapshot.current == 5
    assert snapshot.longest == 5
    assert snapshot.success_rate == pytest.approx(5 / 7)


async def test_streak_of_degrades_on_read_error(catalog, engine_config, habit_factory):
    engine = HabitEngine(catalog, FailingStore(), config=engine_config, clock=lambda: TODAY)

    snapshot = await engine.streak_of(habit_factory("h1"))

    assert snapshot.degraded
    assert snapshot.to_dict() == {
        "current": 0,
        "longest": 0,
        "total_completions": 0,
        "success_rate": 0.0,
        "window_days": 30,
        "degraded": True,
    }


async def test_completion_calendar_defaults_to_config(engine, habit_factory):
    habit = habit_factory("h1", created_on=date(2024, 1, 1))
    await engine.toggle("h1")

    calendar = await engine.completion_calendar(habit)

    assert len(calendar) == engine.config.stats.calendar_days
    assert calendar[-1].day == TODAY
    assert calendar[-1].completed
    assert sum(1 for c in calendar if c.planned) == 10

    assert len(await engine.completion_calendar(habit, days=3)) == 3


async def test_window_counts(engine, habit_factory):
    habit = habit_factory("h1", schedule=WeeklySchedule.of("mon", "wed", "fri"))
    await engine.toggle("h1", date(2024, 1, 8))

    counts = await engine.window_counts(habit, 7)

    assert (counts.planned, counts.completed) == (3, 1)
    with pytest.raises(ValueError):
        await engine.window_counts(habit, -1)


async def test_default_clock_uses_configured_timezone(catalog, store, engine_config, habit_factory):
    engine = HabitEngine(catalog, store, config=engine_config)

    assert engine.today() == calendar_today(engine_config.timezone)
    assert engine.is_due_today(habit_factory("h1", created_on=date(2024, 1, 1)))
