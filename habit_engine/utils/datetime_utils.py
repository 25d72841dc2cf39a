# habit_engine/utils/datetime_utils.py
"""
Нормализация календаря: перевод моментов времени в ключи дней
в локальном календаре пользователя.

Все остальные компоненты работают только с ключами дней (datetime.date),
а не с «сырыми» временными метками.
"""

from datetime import datetime, date, timedelta, tzinfo
from enum import Enum
from typing import Iterator, Union

import pytz

DayKey = date

DEFAULT_TZ = pytz.utc


class Weekday(Enum):
    """Дни недели в формате, в котором их хранит приложение"""
    MON = "mon"
    TUE = "tue"
    WED = "wed"
    THU = "thu"
    FRI = "fri"
    SAT = "sat"
    SUN = "sun"


class DayOrder(Enum):
    """Результат сравнения двух дней"""
    BEFORE = "before"
    SAME = "same"
    AFTER = "after"


# date.weekday(): понедельник = 0
_WEEKDAYS = list(Weekday)


def _resolve_tz(timezone: Union[str, tzinfo, None]):
    if timezone is None:
        return DEFAULT_TZ
    if isinstance(timezone, str):
        return pytz.timezone(timezone)
    return timezone


def day_key(timestamp: Union[datetime, float, int], timezone=None) -> DayKey:
    """Ключ дня для момента времени в заданном часовом поясе.

    Наивный datetime считается моментом в UTC, число - unix-временем в секундах.
    """
    tz = _resolve_tz(timezone)
    if isinstance(timestamp, (int, float)):
        moment = datetime.fromtimestamp(timestamp, tz=pytz.utc)
    elif timestamp.tzinfo is None:
        moment = pytz.utc.localize(timestamp)
    else:
        moment = timestamp
    return moment.astimezone(tz).date()


def today(timezone=None) -> DayKey:
    """Сегодняшний день в календаре пользователя"""
    tz = _resolve_tz(timezone)
    return datetime.now(tz).date()


def weekday_of(day: DayKey) -> Weekday:
    return _WEEKDAYS[day.weekday()]


def add_days(day: DayKey, n: int) -> DayKey:
    return day + timedelta(days=n)


def compare(left: DayKey, right: DayKey) -> DayOrder:
    if left < right:
        return DayOrder.BEFORE
    if left > right:
        return DayOrder.AFTER
    return DayOrder.SAME


def parse_day_key(value: Union[str, date, datetime]) -> DayKey:
    """Разбор ключа дня из ISO-строки YYYY-MM-DD.

    datetime сводится к своей дате без пересчёта часового пояса.
    """
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    return date.fromisoformat(value)


def format_day_key(day: DayKey) -> str:
    return day.isoformat()


def iter_days(start: DayKey, end: DayKey) -> Iterator[DayKey]:
    """Дни от start до end включительно, по возрастанию"""
    current = start
    while current <= end:
        yield current
        current += timedelta(days=1)
