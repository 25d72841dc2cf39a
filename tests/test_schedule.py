from datetime import date

from habit_engine.core.models import DailySchedule, WeeklySchedule, TimeHint
from habit_engine.core.schedule import is_planned, is_active_on, planned_days, sort_by_time_hint
from habit_engine.utils.datetime_utils import iter_days


def test_daily_is_planned_every_day():
    assert all(is_planned(DailySchedule(), d) for d in iter_days(date(2024, 1, 1), date(2024, 1, 14)))


def test_weekly_is_planned_on_listed_days_only():
    schedule = WeeklySchedule.of("mon", "wed", "fri")
    week = list(iter_days(date(2024, 1, 1), date(2024, 1, 7)))
    assert [is_planned(schedule, d) for d in week] == [True, False, True, False, True, False, False]


def test_nothing_is_active_before_creation(habit_factory):
    habit = habit_factory("h1", created_on=date(2024, 1, 5))
    assert not is_active_on(habit, date(2024, 1, 4))
    assert is_active_on(habit, date(2024, 1, 5))


def test_planned_days_respects_creation_and_schedule(habit_factory):
    habit = habit_factory("h1", created_on=date(2024, 1, 3), schedule=WeeklySchedule.of("mon", "wed", "fri"))
    days = planned_days(habit, date(2024, 1, 1), date(2024, 1, 21))
    assert days[0] == date(2024, 1, 3)
    assert len(days) == 8


def test_sort_by_time_hint(habit_factory):
    habits = [
        habit_factory("anytime"),
        habit_factory("late", time_hint=TimeHint("specific", "21:00")),
        habit_factory("evening", time_hint=TimeHint("evening")),
        habit_factory("early", time_hint=TimeHint("specific", "08:00")),
        habit_factory("morning", time_hint=TimeHint("morning")),
        habit_factory("afternoon", time_hint=TimeHint("afternoon")),
        habit_factory("anytime-2"),
    ]
    ordered = [h.habit_id for h in sort_by_time_hint(habits)]
    assert ordered == ["morning", "afternoon", "evening", "early", "late", "anytime", "anytime-2"]
