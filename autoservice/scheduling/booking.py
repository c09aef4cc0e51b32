import logging
from datetime import datetime

from .availability import AvailabilityResolver
from .errors import SlotConflict, SlotNotOffered
from .slots import format_time_of_day
from .types import AppointmentRecord

logger = logging.getLogger(__name__)


class BookingGuard:
    """
    Pre-checks a booking against freshly resolved availability before writing it.

    The check and the insert are not atomic. Two clients can both see a slot
    as free; the store's unique index on (mechanic_id, scheduled_time) rejects
    the second insert, and the store reports that as SlotConflict too.
    """

    def __init__(self, store, resolver: AvailabilityResolver) -> None:
        self.store = store
        self.resolver = resolver

    def try_book(
        self,
        mechanic_id: int,
        requested_time: datetime,
        client_id: int | None = None,
        notes: str | None = None,
    ) -> AppointmentRecord:
        requested_time = requested_time.replace(second=0, microsecond=0)
        slot_time = format_time_of_day(requested_time.hour, requested_time.minute)

        slots = self.resolver.resolve(mechanic_id, requested_time.date())
        slot = next((candidate for candidate in slots if candidate.time == slot_time), None)

        if slot is None:
            raise SlotNotOffered(
                f'{requested_time.date().isoformat()} {slot_time} is not an available time for this mechanic.'
            )
        if not slot.available:
            raise SlotConflict('This time is already booked.')

        appointment = self.store.create_appointment(
            mechanic_id=mechanic_id,
            scheduled_time=requested_time,
            client_id=client_id,
            notes=notes,
        )
        logger.info(
            'Booked appointment %s for mechanic %s at %s',
            appointment.id,
            mechanic_id,
            requested_time.isoformat(),
        )
        return appointment
