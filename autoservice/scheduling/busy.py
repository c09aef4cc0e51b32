from datetime import date, datetime, time, timedelta

from .errors import InvalidBusyOverride
from .types import BusyOverride


def build_busy_override(
    mechanic_id: int,
    is_busy: bool,
    busy_until: datetime | None,
    reason: str | None,
    now: datetime,
    min_minutes: int,
) -> BusyOverride:
    """
    Validate a busy-status update and produce the row that replaces the current one.

    A busy mechanic must name the moment the override ends, at least
    min_minutes from now. Clearing the status drops the end time and reason.
    """
    if not is_busy:
        return BusyOverride(mechanic_id=mechanic_id, is_busy=False, updated_at=now)

    if busy_until is None:
        raise InvalidBusyOverride('busy_until is required when marking a mechanic as busy.')

    if busy_until - now < timedelta(minutes=min_minutes):
        raise InvalidBusyOverride(f'Busy status must last at least {min_minutes} minutes.')

    normalized_reason = (reason or '').strip() or None
    return BusyOverride(
        mechanic_id=mechanic_id,
        is_busy=True,
        busy_until=busy_until,
        reason=normalized_reason,
        updated_at=now,
    )


def is_override_active(override: BusyOverride | None, target_date: date) -> bool:
    """
    True when the override's window [.., busy_until) reaches into target_date.

    An override that ended earlier on target_date still counts as active, so
    in whole_day mode it blocks that entire day.
    """
    if override is None or not override.is_busy:
        return False

    if override.busy_until is None:
        return True

    return override.busy_until > datetime.combine(target_date, time.min)


def blocks_whole_day(override: BusyOverride, target_date: date) -> bool:
    """For an active override, whether target_date is fully inside its window."""
    if override.busy_until is None:
        return True
    return override.busy_until.date() > target_date


def busy_until_minutes(override: BusyOverride) -> int:
    """Minute-of-day at which the override ends, rounded up to a whole minute."""
    busy_until = override.busy_until
    minutes = busy_until.hour * 60 + busy_until.minute
    if busy_until.second or busy_until.microsecond:
        minutes += 1
    return minutes
