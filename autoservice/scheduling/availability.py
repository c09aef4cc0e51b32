"""
Availability of a mechanic for one calendar day.

Combines the weekly schedule, the busy override and the appointment ledger:

1. look up the day's schedule (Sunday = 0); missing or day off -> no slots
2. broken working-day configuration -> no slots (fail closed, logged)
3. active busy override -> no slots, or with "intersect" mode only the
   slots before busy_until are dropped on the override's last day
4. generate the slot grid
5. mark every slot held by a pending/confirmed/in-progress appointment
6. return all slots, available or not, in ascending order
"""

import logging
from collections.abc import Iterable
from datetime import date

from .busy import blocks_whole_day, busy_until_minutes, is_override_active
from .errors import InvalidScheduleConfiguration
from .slots import (
    DEFAULT_GRANULARITY_MINUTES,
    generate_slots,
    minutes_to_time_of_day,
    snap_to_grid,
    time_of_day_to_minutes,
    validate_day_schedule,
)
from .status import occupies_slot
from .types import AppointmentRecord, BusyOverride, Slot, WeeklySchedule, day_of_week

logger = logging.getLogger(__name__)

WHOLE_DAY = 'whole_day'
INTERSECT = 'intersect'
BUSY_OVERRIDE_MODES = (WHOLE_DAY, INTERSECT)

MINUTES_PER_DAY = 24 * 60


def compute_day_slots(
    schedule: WeeklySchedule,
    busy_override: BusyOverride | None,
    appointments: Iterable[AppointmentRecord],
    target_date: date,
    granularity_minutes: int = DEFAULT_GRANULARITY_MINUTES,
    busy_override_mode: str = WHOLE_DAY,
) -> list[Slot]:
    day_schedule = schedule.get(day_of_week(target_date))
    if day_schedule is None or not day_schedule.is_working_day:
        return []

    try:
        validate_day_schedule(day_schedule)
    except InvalidScheduleConfiguration as exc:
        logger.warning('Offering no slots on %s: %s', target_date.isoformat(), exc)
        return []

    if is_override_active(busy_override, target_date):
        if busy_override_mode == WHOLE_DAY or blocks_whole_day(busy_override, target_date):
            return []
        cutoff = busy_until_minutes(busy_override)
        candidates = [
            slot_time
            for slot_time in generate_slots(day_schedule, granularity_minutes)
            if time_of_day_to_minutes(slot_time) >= cutoff
        ]
    else:
        candidates = generate_slots(day_schedule, granularity_minutes)

    booked = get_booked_times(
        appointments,
        target_date,
        origin_minutes=time_of_day_to_minutes(day_schedule.start_time),
        granularity_minutes=granularity_minutes,
    )

    return [Slot(time=slot_time, available=slot_time not in booked) for slot_time in candidates]


def get_booked_times(
    appointments: Iterable[AppointmentRecord],
    target_date: date,
    origin_minutes: int,
    granularity_minutes: int,
) -> set[str]:
    """Slot labels on target_date held by appointments that still occupy their slot."""
    booked: set[str] = set()

    for appointment in appointments:
        if not occupies_slot(appointment.status):
            continue
        if appointment.scheduled_time.date() != target_date:
            continue

        minute_of_day = appointment.scheduled_time.hour * 60 + appointment.scheduled_time.minute
        snapped = snap_to_grid(minute_of_day, origin_minutes, granularity_minutes)
        if 0 <= snapped < MINUTES_PER_DAY:
            booked.add(minutes_to_time_of_day(snapped))

    return booked


class AvailabilityResolver:
    """Reads a mechanic's schedule, override and ledger afresh on every call."""

    def __init__(
        self,
        store,
        granularity_minutes: int = DEFAULT_GRANULARITY_MINUTES,
        busy_override_mode: str = WHOLE_DAY,
    ) -> None:
        if granularity_minutes <= 0:
            raise ValueError(f'granularity_minutes must be positive, got {granularity_minutes}')
        if busy_override_mode not in BUSY_OVERRIDE_MODES:
            raise ValueError(f'busy_override_mode must be one of {BUSY_OVERRIDE_MODES}, got {busy_override_mode!r}')

        self.store = store
        self.granularity_minutes = granularity_minutes
        self.busy_override_mode = busy_override_mode

    def resolve(self, mechanic_id: int, target_date: date) -> list[Slot]:
        schedule = self.store.get_working_hours(mechanic_id)
        busy_override = self.store.get_busy_override(mechanic_id)
        appointments = self.store.list_appointments(mechanic_id, target_date)

        return compute_day_slots(
            schedule,
            busy_override,
            appointments,
            target_date,
            granularity_minutes=self.granularity_minutes,
            busy_override_mode=self.busy_override_mode,
        )
