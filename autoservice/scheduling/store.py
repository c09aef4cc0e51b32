"""SQL-backed access to working hours, busy status and the appointment ledger."""

import logging
from collections.abc import Iterable
from datetime import date, datetime, time, timedelta

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from autoservice.models.appointment import Appointment
from autoservice.models.busy_status import MechanicBusyStatus
from autoservice.models.working_hours import WorkingHours

from .errors import AppointmentNotFound, DependencyUnavailable, SlotConflict
from .status import OCCUPYING_STATUSES, PENDING
from .types import AppointmentRecord, BusyOverride, DaySchedule, WeeklySchedule

logger = logging.getLogger(__name__)


def to_appointment_record(appointment: Appointment) -> AppointmentRecord:
    return AppointmentRecord(
        id=appointment.id,
        mechanic_id=appointment.mechanic_id,
        scheduled_time=appointment.scheduled_time,
        status=appointment.status,
        client_id=appointment.client_id,
        notes=appointment.notes,
        completion_notes=appointment.completion_notes,
    )


class SqlScheduleStore:
    """
    Store reads and writes used by the scheduling core.

    Every database failure, including a statement or pool timeout, is raised
    as DependencyUnavailable. Nothing here substitutes default data.
    """

    def __init__(self, db: Session) -> None:
        self.db = db

    # ── Working hours ─────────────────────────────────────────────────────

    def get_working_hours(self, mechanic_id: int) -> WeeklySchedule:
        try:
            rows = self.db.query(WorkingHours).filter(WorkingHours.mechanic_id == mechanic_id).all()
        except SQLAlchemyError as exc:
            raise DependencyUnavailable('Working hours could not be loaded.') from exc

        return {
            row.day_of_week: DaySchedule(
                start_time=row.start_time,
                end_time=row.end_time,
                is_working_day=bool(row.is_working_day),
            )
            for row in rows
        }

    def save_working_hours(self, mechanic_id: int, schedule: WeeklySchedule) -> WeeklySchedule:
        try:
            existing = {
                row.day_of_week: row
                for row in self.db.query(WorkingHours).filter(WorkingHours.mechanic_id == mechanic_id).all()
            }
            for day, day_schedule in schedule.items():
                row = existing.get(day)
                if row is None:
                    row = WorkingHours(mechanic_id=mechanic_id, day_of_week=day)
                    self.db.add(row)
                row.start_time = day_schedule.start_time
                row.end_time = day_schedule.end_time
                row.is_working_day = day_schedule.is_working_day
            self.db.commit()
        except SQLAlchemyError as exc:
            self.db.rollback()
            raise DependencyUnavailable('Working hours could not be saved.') from exc

        logger.info('Updated working hours for mechanic %s (%d days)', mechanic_id, len(schedule))
        return self.get_working_hours(mechanic_id)

    # ── Busy status ───────────────────────────────────────────────────────

    def get_busy_override(self, mechanic_id: int) -> BusyOverride | None:
        try:
            row = self.db.get(MechanicBusyStatus, mechanic_id)
        except SQLAlchemyError as exc:
            raise DependencyUnavailable('Busy status could not be loaded.') from exc

        if row is None:
            return None

        return BusyOverride(
            mechanic_id=row.mechanic_id,
            is_busy=bool(row.is_busy),
            busy_until=row.busy_until,
            reason=row.busy_reason,
            updated_at=row.updated_at,
        )

    def save_busy_override(self, override: BusyOverride) -> BusyOverride:
        """Replace the mechanic's busy status; the previous value is not kept."""
        try:
            row = self.db.get(MechanicBusyStatus, override.mechanic_id)
            if row is None:
                row = MechanicBusyStatus(mechanic_id=override.mechanic_id)
                self.db.add(row)
            row.is_busy = override.is_busy
            row.busy_until = override.busy_until
            row.busy_reason = override.reason
            if override.updated_at is not None:
                row.updated_at = override.updated_at
            self.db.commit()
        except SQLAlchemyError as exc:
            self.db.rollback()
            raise DependencyUnavailable('Busy status could not be saved.') from exc

        logger.info('Mechanic %s busy=%s until %s', override.mechanic_id, override.is_busy, override.busy_until)
        return self.get_busy_override(override.mechanic_id)

    # ── Appointments ──────────────────────────────────────────────────────

    def list_appointments(self, mechanic_id: int, target_date: date) -> list[AppointmentRecord]:
        """Appointments on target_date that still hold their slot."""
        day_start = datetime.combine(target_date, time.min)
        return self.list_appointments_between(
            mechanic_id,
            day_start,
            day_start + timedelta(days=1),
            statuses=OCCUPYING_STATUSES,
        )

    def list_appointments_between(
        self,
        mechanic_id: int,
        start: datetime,
        end: datetime,
        statuses: Iterable[str] | None = None,
    ) -> list[AppointmentRecord]:
        try:
            query = self.db.query(Appointment).filter(
                Appointment.mechanic_id == mechanic_id,
                Appointment.scheduled_time >= start,
                Appointment.scheduled_time < end,
            )
            if statuses is not None:
                query = query.filter(Appointment.status.in_(list(statuses)))
            rows = query.order_by(Appointment.scheduled_time.asc(), Appointment.id.asc()).all()
        except SQLAlchemyError as exc:
            raise DependencyUnavailable('Appointments could not be loaded.') from exc

        return [to_appointment_record(row) for row in rows]

    def get_appointment(self, appointment_id: int) -> AppointmentRecord | None:
        try:
            row = self.db.get(Appointment, appointment_id)
        except SQLAlchemyError as exc:
            raise DependencyUnavailable('Appointment could not be loaded.') from exc

        return to_appointment_record(row) if row is not None else None

    def create_appointment(
        self,
        mechanic_id: int,
        scheduled_time: datetime,
        client_id: int | None = None,
        notes: str | None = None,
    ) -> AppointmentRecord:
        appointment = Appointment(
            mechanic_id=mechanic_id,
            client_id=client_id,
            scheduled_time=scheduled_time,
            notes=notes,
            status=PENDING,
        )

        try:
            self.db.add(appointment)
            self.db.commit()
            self.db.refresh(appointment)
        except IntegrityError as exc:
            self.db.rollback()
            logger.info('Rejected concurrent booking for mechanic %s at %s', mechanic_id, scheduled_time.isoformat())
            raise SlotConflict('This time is already booked.') from exc
        except SQLAlchemyError as exc:
            self.db.rollback()
            raise DependencyUnavailable('Appointment could not be saved.') from exc

        return to_appointment_record(appointment)

    def update_appointment_status(
        self,
        appointment_id: int,
        status: str,
        completion_notes: str | None = None,
    ) -> AppointmentRecord:
        try:
            appointment = self.db.get(Appointment, appointment_id)
            if appointment is None:
                raise AppointmentNotFound('Appointment not found.')

            appointment.status = status
            if completion_notes is not None:
                appointment.completion_notes = completion_notes
            self.db.commit()
            self.db.refresh(appointment)
        except IntegrityError as exc:
            self.db.rollback()
            raise SlotConflict('This time is already booked.') from exc
        except SQLAlchemyError as exc:
            self.db.rollback()
            raise DependencyUnavailable('Appointment could not be updated.') from exc

        return to_appointment_record(appointment)
