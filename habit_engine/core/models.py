#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Habit Engine - Core Data Models
Модели привычек, целей и производных снимков статистики с валидацией
"""

import re
from datetime import date
from typing import Dict, List, Optional, Union, Any, FrozenSet, Iterable, Tuple
from dataclasses import dataclass, field
from enum import Enum

from habit_engine.utils.datetime_utils import Weekday, parse_day_key, format_day_key


# ===== ENUMS =====

class TimeOfDay(Enum):
    """Подсказка времени выполнения (только для отображения)"""
    MORNING = "morning"
    AFTERNOON = "afternoon"
    EVENING = "evening"
    SPECIFIC = "specific"
    ANYTIME = "anytime"

# Порядок отображения в повестке дня
TIME_OF_DAY_ORDER = {
    TimeOfDay.MORNING: 1,
    TimeOfDay.AFTERNOON: 2,
    TimeOfDay.EVENING: 3,
    TimeOfDay.SPECIFIC: 4,
    TimeOfDay.ANYTIME: 5,
}

# ===== VALIDATION HELPERS =====

class ValidationError(Exception):
    """Ошибка валидации данных"""
    pass

class ScheduleConfigError(ValidationError):
    """Некорректное расписание привычки (например, пустой набор дней недели)"""
    pass

_HHMM = re.compile(r"^([01]\d|2[0-3]):[0-5]\d$")

def validate_text(text: str, min_length: int = 1, max_length: int = 200, field_name: str = "text") -> str:
    """Валидация текстовых полей"""
    if not isinstance(text, str):
        raise ValidationError(f"{field_name} должен быть строкой")

    text = text.strip()
    if len(text) < min_length:
        raise ValidationError(f"{field_name} должен содержать минимум {min_length} символов")

    if len(text) > max_length:
        raise ValidationError(f"{field_name} должен содержать максимум {max_length} символов")

    return text

def _coerce_day(value: Union[date, str], field_name: str) -> date:
    try:
        return parse_day_key(value)
    except (TypeError, ValueError):
        raise ValidationError(f"Неверный формат даты {field_name}: {value!r}")

def _coerce_weekday(token: Union[Weekday, str]) -> Weekday:
    if isinstance(token, Weekday):
        return token
    try:
        return Weekday(str(token).strip().lower()[:3])
    except ValueError:
        raise ScheduleConfigError(f"Неизвестный день недели: {token!r}")

# ===== SCHEDULE =====

@dataclass(frozen=True)
class DailySchedule:
    """Привычка запланирована на каждый календарный день"""

    def to_dict(self) -> Dict[str, Any]:
        return {"type": "daily"}

@dataclass(frozen=True)
class WeeklySchedule:
    """Привычка запланирована ровно на указанные дни недели"""
    days: FrozenSet[Weekday]

    def __post_init__(self):
        if isinstance(self.days, (str, Weekday)):
            raise ScheduleConfigError("days должен быть набором дней недели, а не одним значением")

        days = frozenset(_coerce_weekday(d) for d in self.days)
        if not days:
            raise ScheduleConfigError("Еженедельное расписание должно содержать хотя бы один день")

        object.__setattr__(self, "days", days)

    @classmethod
    def of(cls, *days: Union[Weekday, str]) -> "WeeklySchedule":
        return cls(days=frozenset(days))

    def to_dict(self) -> Dict[str, Any]:
        order = list(Weekday)
        return {
            "type": "weekly",
            "days": [d.value for d in sorted(self.days, key=order.index)]
        }

Schedule = Union[DailySchedule, WeeklySchedule]

def schedule_from_dict(data: Dict[str, Any]) -> Schedule:
    """Десериализация расписания"""
    kind = data.get("type")
    if kind == "daily":
        return DailySchedule()
    if kind == "weekly":
        return WeeklySchedule(days=frozenset(data.get("days") or ()))
    raise ScheduleConfigError(f"Неизвестный тип расписания: {kind!r}")

@dataclass(frozen=True)
class TimeHint:
    """Рекомендуемое время выполнения; не влияет на то, запланирован ли день"""
    kind: TimeOfDay = TimeOfDay.ANYTIME
    at: Optional[str] = None  # HH:MM для SPECIFIC

    def __post_init__(self):
        kind = self.kind
        if not isinstance(kind, TimeOfDay):
            try:
                kind = TimeOfDay(kind)
            except ValueError:
                raise ScheduleConfigError(f"Неизвестная подсказка времени: {self.kind!r}")
            object.__setattr__(self, "kind", kind)

        if kind == TimeOfDay.SPECIFIC:
            if not self.at or not _HHMM.match(self.at):
                raise ScheduleConfigError(f"Время должно быть в формате HH:MM, получено {self.at!r}")
        elif self.at is not None:
            raise ScheduleConfigError("Точное время допускается только для подсказки 'specific'")

    @property
    def sort_key(self) -> Tuple[int, str]:
        return TIME_OF_DAY_ORDER[self.kind], self.at or ""

    @property
    def label(self) -> str:
        return self.at if self.kind == TimeOfDay.SPECIFIC else self.kind.value

    def to_dict(self) -> Dict[str, Any]:
        return {"kind": self.kind.value, "at": self.at}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "TimeHint":
        return cls(kind=data.get("kind", TimeOfDay.ANYTIME.value), at=data.get("at"))

# ===== CORE MODELS =====

@dataclass
class Goal:
    """Цель (только для чтения; создаётся внешним каталогом)"""
    goal_id: str
    title: str
    created_on: date

    def __post_init__(self):
        self.title = validate_text(self.title, field_name="title")
        self.created_on = _coerce_day(self.created_on, "created_on")

    def to_dict(self) -> Dict[str, Any]:
        return {
            "goal_id": self.goal_id,
            "title": self.title,
            "created_on": format_day_key(self.created_on)
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Goal":
        return cls(goal_id=data["goal_id"], title=data["title"], created_on=data["created_on"])

@dataclass
class Habit:
    """Привычка с расписанием повторения"""
    habit_id: str
    title: str
    created_on: date
    schedule: Schedule = field(default_factory=DailySchedule)
    goal_id: Optional[str] = None
    time_hint: TimeHint = field(default_factory=TimeHint)

    def __post_init__(self):
        self.title = validate_text(self.title, field_name="title")
        self.created_on = _coerce_day(self.created_on, "created_on")

        if not isinstance(self.schedule, (DailySchedule, WeeklySchedule)):
            raise ScheduleConfigError(f"Неизвестное расписание: {self.schedule!r}")

        if not isinstance(self.time_hint, TimeHint):
            raise ScheduleConfigError(f"Неверная подсказка времени: {self.time_hint!r}")

    @property
    def is_standalone(self) -> bool:
        """Привычка не привязана к цели"""
        return self.goal_id is None

    def to_dict(self) -> Dict[str, Any]:
        """Сериализация в словарь"""
        return {
            "habit_id": self.habit_id,
            "title": self.title,
            "created_on": format_day_key(self.created_on),
            "schedule": self.schedule.to_dict(),
            "goal_id": self.goal_id,
            "time_hint": self.time_hint.to_dict()
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Habit":
        """Десериализация из словаря"""
        try:
            return cls(
                habit_id=data["habit_id"],
                title=data["title"],
                created_on=data["created_on"],
                schedule=schedule_from_dict(data.get("schedule") or {"type": "daily"}),
                goal_id=data.get("goal_id"),
                time_hint=TimeHint.from_dict(data.get("time_hint") or {})
            )
        except KeyError as e:
            raise ValidationError(f"Не удалось загрузить привычку: отсутствует поле {e}")

# ===== DERIVED VIEWS =====

@dataclass(frozen=True)
class WindowCounts:
    """Запланированные и выполненные дни в окне"""
    planned: int = 0
    completed: int = 0

    @property
    def rate(self) -> float:
        """Доля выполненных запланированных дней, 0 при пустом окне"""
        if self.planned <= 0:
            return 0.0
        return min(self.completed / self.planned, 1.0)

@dataclass(frozen=True)
class StreakSnapshot:
    """Снимок серии; всегда вычисляется заново из журнала, не сохраняется"""
    current: int = 0
    longest: int = 0
    total_completions: int = 0
    success_rate: float = 0.0
    window_days: int = 0
    degraded: bool = False

    @classmethod
    def neutral(cls, window_days: int = 0) -> "StreakSnapshot":
        """Нейтральный снимок для случая, когда журнал недоступен"""
        return cls(window_days=window_days, degraded=True)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "current": self.current,
            "longest": self.longest,
            "total_completions": self.total_completions,
            "success_rate": round(self.success_rate, 4),
            "window_days": self.window_days,
            "degraded": self.degraded
        }

@dataclass(frozen=True)
class DayStatus:
    """Ячейка календаря выполнения"""
    day: date
    planned: bool
    completed: bool

    def to_dict(self) -> Dict[str, Any]:
        return {"date": format_day_key(self.day), "planned": self.planned, "completed": self.completed}

@dataclass(frozen=True)
class AgendaItem:
    """Строка повестки дня"""
    habit: Habit
    completed: bool
    streak: int
    degraded: bool = False

    @property
    def habit_id(self) -> str:
        return self.habit.habit_id

    def to_dict(self) -> Dict[str, Any]:
        return {
            "habit": self.habit.to_dict(),
            "completed": self.completed,
            "streak": self.streak,
            "degraded": self.degraded
        }

@dataclass(frozen=True)
class GoalSummary:
    """Сводка по цели на сегодня"""
    goal: Goal
    active_habits: int
    scheduled_today: int
    completed_today: int
    last_interaction: Optional[date] = None

    @property
    def goal_id(self) -> str:
        return self.goal.goal_id

    @property
    def pending(self) -> int:
        return max(self.scheduled_today - self.completed_today, 0)

    @classmethod
    def from_agenda(cls, goal: Goal, habits: Iterable[Habit], agenda: List[AgendaItem],
                    last_interaction: Optional[date] = None) -> "GoalSummary":
        return cls(
            goal=goal,
            active_habits=len(list(habits)),
            scheduled_today=len(agenda),
            completed_today=sum(1 for item in agenda if item.completed),
            last_interaction=last_interaction
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "goal_id": self.goal_id,
            "title": self.goal.title,
            "active_habits": self.active_habits,
            "scheduled_today": self.scheduled_today,
            "completed_today": self.completed_today,
            "pending": self.pending,
            "last_interaction": format_day_key(self.last_interaction) if self.last_interaction else None
        }
