"""
Slot generation for a single working day.

A working day [start, end) is cut into fixed-width slots labelled "HH:MM".
Every slot lies wholly inside the window, so a window that is not a multiple
of the granularity leaves its tail unused. 09:00-18:00 at 30 minutes gives
18 slots, 09:00 through 17:30.
"""

import re

from .errors import InvalidScheduleConfiguration
from .types import DaySchedule

DEFAULT_GRANULARITY_MINUTES = 30

_TIME_OF_DAY_PATTERN = re.compile(r'^(\d{1,2}):(\d{2})$')


def parse_time_of_day(value: str) -> tuple[int, int]:
    """Parse "HH:MM" into (hour, minute)."""
    match = _TIME_OF_DAY_PATTERN.match(value.strip()) if isinstance(value, str) else None
    if match is None:
        raise InvalidScheduleConfiguration(f'Malformed time of day: {value!r}.')

    hour, minute = int(match.group(1)), int(match.group(2))
    if hour > 23 or minute > 59:
        raise InvalidScheduleConfiguration(f'Time of day out of range: {value!r}.')

    return hour, minute


def time_of_day_to_minutes(value: str) -> int:
    hour, minute = parse_time_of_day(value)
    return hour * 60 + minute


def format_time_of_day(hour: int, minute: int) -> str:
    return f'{hour:02d}:{minute:02d}'


def minutes_to_time_of_day(total_minutes: int) -> str:
    return format_time_of_day(total_minutes // 60, total_minutes % 60)


def validate_day_schedule(day_schedule: DaySchedule) -> None:
    """Raise InvalidScheduleConfiguration for a working day that cannot produce slots safely."""
    if not day_schedule.is_working_day:
        return

    start = time_of_day_to_minutes(day_schedule.start_time)
    end = time_of_day_to_minutes(day_schedule.end_time)
    if start >= end:
        raise InvalidScheduleConfiguration(
            f'Working day must end after it starts, got {day_schedule.start_time}-{day_schedule.end_time}.'
        )


def generate_slots(day_schedule: DaySchedule, granularity_minutes: int = DEFAULT_GRANULARITY_MINUTES) -> list[str]:
    if granularity_minutes <= 0:
        raise ValueError(f'granularity_minutes must be positive, got {granularity_minutes}')

    if not day_schedule.is_working_day:
        return []

    hour, minute = parse_time_of_day(day_schedule.start_time)
    end_minutes = time_of_day_to_minutes(day_schedule.end_time)

    slots: list[str] = []
    while hour * 60 + minute + granularity_minutes <= end_minutes:
        slots.append(format_time_of_day(hour, minute))
        minute += granularity_minutes
        while minute >= 60:
            minute -= 60
            hour += 1

    return slots


def snap_to_grid(total_minutes: int, origin_minutes: int, granularity_minutes: int) -> int:
    """Truncate a minute-of-day onto the slot grid that starts at origin_minutes."""
    offset = total_minutes - origin_minutes
    return origin_minutes + (offset // granularity_minutes) * granularity_minutes
