from datetime import datetime, timedelta

from .errors import CancellationTooLate, InvalidStatusTransition
from .types import AppointmentRecord

PENDING = 'pending'
CONFIRMED = 'confirmed'
IN_PROGRESS = 'in_progress'
COMPLETED = 'completed'
CANCELLED = 'cancelled'

APPOINTMENT_STATUSES = (PENDING, CONFIRMED, IN_PROGRESS, COMPLETED, CANCELLED)

ALLOWED_TRANSITIONS = {
    PENDING: frozenset({CONFIRMED, CANCELLED}),
    CONFIRMED: frozenset({IN_PROGRESS, CANCELLED}),
    IN_PROGRESS: frozenset({COMPLETED}),
    COMPLETED: frozenset(),
    CANCELLED: frozenset(),
}

# Statuses whose appointment holds its slot.
OCCUPYING_STATUSES = frozenset({PENDING, CONFIRMED, IN_PROGRESS})

# SQL predicate matching OCCUPYING_STATUSES, used by the partial unique index.
OCCUPYING_STATUS_CLAUSE = 'status IN ({})'.format(
    ', '.join(f"'{status}'" for status in APPOINTMENT_STATUSES if status in OCCUPYING_STATUSES)
)


def normalize_status(value: str) -> str:
    normalized = (value or '').strip().lower()
    if normalized not in ALLOWED_TRANSITIONS:
        raise InvalidStatusTransition(f'Unknown appointment status: {value!r}.')
    return normalized


def occupies_slot(status: str | None) -> bool:
    return (status or '').strip().lower() in OCCUPYING_STATUSES


def ensure_transition(current: str, new: str) -> None:
    current = normalize_status(current)
    new = normalize_status(new)

    if new not in ALLOWED_TRANSITIONS[current]:
        raise InvalidStatusTransition(f'Cannot move an appointment from {current} to {new}.')


def ensure_client_can_cancel(appointment: AppointmentRecord, now: datetime, notice_hours: int) -> None:
    """Clients may cancel only while the appointment is at least notice_hours away."""
    ensure_transition(appointment.status, CANCELLED)

    if appointment.scheduled_time - now < timedelta(hours=notice_hours):
        raise CancellationTooLate(
            f'Appointments can only be cancelled at least {notice_hours} hours in advance.'
        )
