from dataclasses import dataclass
from datetime import date, datetime


@dataclass(frozen=True)
class DaySchedule:
    """One weekday of a mechanic's schedule. Times are "HH:MM" strings."""
    start_time: str
    end_time: str
    is_working_day: bool = True


# Keyed by day of week, Sunday = 0.
WeeklySchedule = dict[int, DaySchedule]


@dataclass(frozen=True)
class AppointmentRecord:
    id: int | None
    mechanic_id: int
    scheduled_time: datetime
    status: str
    client_id: int | None = None
    notes: str | None = None
    completion_notes: str | None = None


@dataclass(frozen=True)
class BusyOverride:
    mechanic_id: int
    is_busy: bool
    busy_until: datetime | None = None
    reason: str | None = None
    updated_at: datetime | None = None


@dataclass(frozen=True)
class Slot:
    time: str
    available: bool

    def to_dict(self) -> dict:
        return {'time': self.time, 'available': self.available}


def day_of_week(target_date: date) -> int:
    """Day index with Sunday = 0 and Saturday = 6."""
    return target_date.isoweekday() % 7
