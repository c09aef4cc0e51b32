"""Error taxonomy of the scheduling core."""


class SchedulingError(Exception):
    """Base class for every scheduling failure."""


class DependencyUnavailable(SchedulingError):
    """A working-hours, busy-status or appointment read or write failed."""


class SlotConflict(SchedulingError):
    """The requested slot is already occupied by another appointment."""


class SlotNotOffered(SchedulingError):
    """The requested time is not one of the provider's slots for that day."""


class InvalidScheduleConfiguration(SchedulingError):
    """A working day has malformed times or does not end after it starts."""


class InvalidBusyOverride(SchedulingError):
    pass


class InvalidStatusTransition(SchedulingError):
    pass


class CancellationTooLate(SchedulingError):
    pass


class AppointmentNotFound(SchedulingError):
    pass
