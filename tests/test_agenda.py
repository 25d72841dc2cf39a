import pytest
from datetime import date

from habit_engine.core.models import WeeklySchedule, TimeHint
from habit_engine.database.catalog import InMemoryCatalog
from habit_engine.database.ledger import InMemoryLedgerStore
from habit_engine.services.agenda_service import dedupe_habits
from habit_engine.services.engine import HabitEngine

from tests.conftest import TODAY, FailingStore

pytestmark = pytest.mark.asyncio

WEEKEND = WeeklySchedule.of("sat", "sun")


class LeakyCatalog(InMemoryCatalog):
    """Каталог, ошибочно отдающий привязанные к цели привычки как самостоятельные"""

    async def standalone_habits(self):
        return await self.list_habits()


async def test_weekend_habit_is_not_due_on_wednesday(engine, catalog, store, habit_factory):
    habit = habit_factory("weekend", schedule=WEEKEND)
    catalog.add_habit(habit)
    await store.set("weekend", TODAY, False)

    assert not engine.is_due_today(habit)
    assert await engine.todays_agenda() == []
    assert await engine.pending_count() == 0

    await store.set("weekend", TODAY, True)
    assert await engine.pending_count() == 0


async def test_combined_agenda_has_no_duplicates(engine_config, goal_factory, habit_factory):
    catalog = LeakyCatalog(
        goals=[goal_factory("g1")],
        habits=[habit_factory("linked", goal_id="g1"), habit_factory("solo")]
    )
    engine = HabitEngine(catalog, InMemoryLedgerStore(), config=engine_config, clock=lambda: TODAY)

    agenda = await engine.todays_agenda()

    assert [item.habit_id for item in agenda] == ["linked", "solo"]
    assert await engine.pending_count() == 2


async def test_combined_agenda_order(engine, catalog, goal_factory, habit_factory):
    catalog.add_goal(goal_factory("late-goal", created_on=date(2024, 1, 5)))
    catalog.add_goal(goal_factory("early-goal", created_on=date(2024, 1, 1)))
    catalog.add_habit(habit_factory("solo"))
    catalog.add_habit(habit_factory("from-late", goal_id="late-goal"))
    catalog.add_habit(habit_factory("from-early", goal_id="early-goal"))

    agenda = await engine.todays_agenda()

    assert [item.habit_id for item in agenda] == ["from-early", "from-late", "solo"]


async def test_agenda_is_ordered_by_time_hint(engine, catalog, habit_factory):
    catalog.add_habit(habit_factory("anytime"))
    catalog.add_habit(habit_factory("evening", time_hint=TimeHint("evening")))
    catalog.add_habit(habit_factory("morning", time_hint=TimeHint("morning")))

    agenda = await engine.standalone_agenda()

    assert [item.habit_id for item in agenda] == ["morning", "evening", "anytime"]


async def test_goal_agenda_and_pending_count(engine, catalog, store, goal_factory, habit_factory):
    catalog.add_goal(goal_factory("g1"))
    catalog.add_goal(goal_factory("g2"))
    catalog.add_habit(habit_factory("a", goal_id="g1"))
    catalog.add_habit(habit_factory("b", goal_id="g1"))
    catalog.add_habit(habit_factory("weekend", goal_id="g1", schedule=WEEKEND))
    catalog.add_habit(habit_factory("c", goal_id="g2"))
    catalog.add_habit(habit_factory("future", goal_id="g1", created_on=date(2024, 1, 11)))

    await store.set("a", date(2024, 1, 9), True)
    await engine.toggle("a")

    agenda = await engine.todays_agenda("g1")

    assert [(item.habit_id, item.completed, item.streak) for item in agenda] == [
        ("a", True, 2),
        ("b", False, 0),
    ]
    assert await engine.pending_count("g1") == 1
    assert await engine.pending_count("g2") == 1
    assert await engine.pending_count() == 2


async def test_agenda_degrades_when_ledger_is_unreadable(catalog, engine_config, goal_factory, habit_factory):
    catalog.add_goal(goal_factory("g1"))
    catalog.add_habit(habit_factory("a", goal_id="g1"))
    engine = HabitEngine(catalog, FailingStore(), config=engine_config, clock=lambda: TODAY)

    agenda = await engine.todays_agenda()

    assert len(agenda) == 1
    assert agenda[0].degraded
    assert agenda[0].completed is False
    assert agenda[0].streak == 0

    summaries = await engine.goal_summaries()
    assert summaries[0].last_interaction is None
    assert summaries[0].scheduled_today == 1


async def test_goal_summaries(engine, catalog, store, goal_factory, habit_factory):
    catalog.add_goal(goal_factory("g1"))
    catalog.add_goal(goal_factory("g2", created_on=date(2024, 1, 2)))
    catalog.add_habit(habit_factory("daily", goal_id="g1"))
    catalog.add_habit(habit_factory("weekend", goal_id="g1", schedule=WEEKEND))
    await store.set("weekend", date(2024, 1, 7), True)
    await engine.toggle("daily")

    summaries = await engine.goal_summaries()

    assert [s.goal_id for s in summaries] == ["g1", "g2"]
    g1, g2 = summaries
    assert (g1.active_habits, g1.scheduled_today, g1.completed_today, g1.pending) == (2, 1, 1, 0)
    assert g1.last_interaction == TODAY
    assert (g2.active_habits, g2.scheduled_today, g2.pending) == (0, 0, 0)
    assert g2.last_interaction is None


async def test_dedupe_keeps_first_occurrence(habit_factory):
    first = habit_factory("h1", goal_id="g1")
    habits = dedupe_habits([first, habit_factory("h2"), habit_factory("h1")])
    assert [h.habit_id for h in habits] == ["h1", "h2"]
    assert habits[0] is first
