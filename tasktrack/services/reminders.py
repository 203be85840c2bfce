from datetime import datetime, timedelta
from typing import Union
from ..core.constants import TimeUnit, UNIT_LABELS

_MINUTES_PER_UNIT = {
    TimeUnit.MINUTES.value: 1,
    TimeUnit.HOURS.value: 60,
    TimeUnit.DAYS.value: 24 * 60,
}


def _unit_value(unit: Union[TimeUnit, str]) -> str:
    return unit.value if isinstance(unit, TimeUnit) else str(unit)


def to_minutes(value: int, unit: Union[TimeUnit, str]) -> int:
    return value * _MINUTES_PER_UNIT.get(_unit_value(unit), 0)


def to_timedelta(value: int, unit: Union[TimeUnit, str]) -> timedelta:
    return timedelta(minutes=to_minutes(value, unit))


def format_reminder(value: int, unit: Union[TimeUnit, str]) -> str:
    labels = UNIT_LABELS[_unit_value(unit)]
    label = labels["singular"] if value == 1 else labels["plural"]
    return f"{value} {label} prima"


def calculate_reminder_time(due_date: datetime, value: int, unit: Union[TimeUnit, str]) -> datetime:
    return due_date - to_timedelta(value, unit)


def should_trigger(
    due_date: datetime,
    value: int,
    unit: Union[TimeUnit, str],
    now: datetime,
    tolerance_minutes: int = 5
) -> bool:
    """True when now falls within tolerance of the reminder's fire time."""
    reminder_time = calculate_reminder_time(due_date, value, unit)
    return abs(now - reminder_time) <= timedelta(minutes=tolerance_minutes)
