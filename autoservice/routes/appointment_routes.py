import logging
from datetime import date, datetime, time, timedelta

from fastapi import APIRouter, Depends, HTTPException, Query, status
from pydantic import BaseModel, field_validator
from sqlalchemy.orm import Session

from autoservice.core import config
from autoservice.routes import common
from autoservice.scheduling.booking import BookingGuard
from autoservice.scheduling.errors import AppointmentNotFound, SchedulingError
from autoservice.scheduling.status import (
    APPOINTMENT_STATUSES,
    CANCELLED,
    OCCUPYING_STATUSES,
    ensure_client_can_cancel,
    ensure_transition,
)
from autoservice.scheduling.store import SqlScheduleStore
from autoservice.scheduling.types import AppointmentRecord

router = APIRouter(tags=['appointments'])

logger = logging.getLogger(__name__)

MAX_APPOINTMENT_NOTES_LENGTH = 600
MAX_LISTING_RANGE_DAYS = 62


def _normalize_notes(value: str | None) -> str | None:
    if value is None:
        return None

    normalized = value.strip()
    if not normalized:
        return None

    if len(normalized) > MAX_APPOINTMENT_NOTES_LENGTH:
        raise ValueError(f'Notes must be {MAX_APPOINTMENT_NOTES_LENGTH} characters or fewer.')

    return normalized


class CreateAppointmentRequest(BaseModel):
    mechanic_id: int
    scheduled_time: datetime
    client_id: int | None = None
    notes: str | None = None

    @field_validator('scheduled_time')
    @classmethod
    def validate_scheduled_time(cls, value: datetime) -> datetime:
        return common.to_local_naive(value).replace(second=0, microsecond=0)

    @field_validator('notes')
    @classmethod
    def validate_notes(cls, value: str | None) -> str | None:
        return _normalize_notes(value)


class UpdateAppointmentStatusRequest(BaseModel):
    status: str
    completion_notes: str | None = None

    @field_validator('status')
    @classmethod
    def validate_status(cls, value: str) -> str:
        normalized = value.strip().lower()
        if normalized not in APPOINTMENT_STATUSES:
            raise ValueError('Invalid appointment status.')
        return normalized

    @field_validator('completion_notes')
    @classmethod
    def validate_completion_notes(cls, value: str | None) -> str | None:
        return _normalize_notes(value)


class CancelAppointmentRequest(BaseModel):
    client_id: int


class AppointmentResponse(BaseModel):
    id: int
    mechanic_id: int
    client_id: int | None = None
    scheduled_time: datetime
    status: str
    notes: str | None = None
    completion_notes: str | None = None


def to_appointment_response(appointment: AppointmentRecord) -> AppointmentResponse:
    return AppointmentResponse(
        id=appointment.id,
        mechanic_id=appointment.mechanic_id,
        client_id=appointment.client_id,
        scheduled_time=appointment.scheduled_time,
        status=appointment.status,
        notes=appointment.notes,
        completion_notes=appointment.completion_notes,
    )


def validate_booking_window(scheduled_time: datetime, now: datetime) -> None:
    if scheduled_time <= now:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail='Appointments must be scheduled in the future.',
        )

    if scheduled_time.date() > now.date() + timedelta(days=config.BOOKING_HORIZON_DAYS):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f'Appointments can only be booked within the next {config.BOOKING_HORIZON_DAYS} days.',
        )


def load_appointment(store: SqlScheduleStore, appointment_id: int) -> AppointmentRecord:
    appointment = store.get_appointment(appointment_id)
    if appointment is None:
        raise AppointmentNotFound('Appointment not found.')
    return appointment


@router.get('', response_model=list[AppointmentResponse])
def list_appointments(
    mechanic_id: int = Query(...),
    start_date: date = Query(...),
    end_date: date = Query(...),
    include_inactive: bool = Query(default=False),
    db: Session = Depends(common.get_db),
):
    if end_date < start_date:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail='end_date must not be before start_date.',
        )

    if (end_date - start_date).days > MAX_LISTING_RANGE_DAYS:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f'Date range must not exceed {MAX_LISTING_RANGE_DAYS} days.',
        )

    common.ensure_database_ready()

    try:
        appointments = SqlScheduleStore(db).list_appointments_between(
            mechanic_id,
            datetime.combine(start_date, time.min),
            datetime.combine(end_date + timedelta(days=1), time.min),
            statuses=None if include_inactive else OCCUPYING_STATUSES,
        )
    except SchedulingError as exc:
        raise common.to_http_exception(exc) from exc

    return [to_appointment_response(appointment) for appointment in appointments]


@router.post('', response_model=AppointmentResponse, status_code=status.HTTP_201_CREATED)
def create_appointment(data: CreateAppointmentRequest, db: Session = Depends(common.get_db)):
    validate_booking_window(data.scheduled_time, common.local_now())

    common.ensure_database_ready()

    store = SqlScheduleStore(db)
    guard = BookingGuard(store, common.build_resolver(store))
    try:
        appointment = guard.try_book(
            data.mechanic_id,
            data.scheduled_time,
            client_id=data.client_id,
            notes=data.notes,
        )
    except SchedulingError as exc:
        raise common.to_http_exception(exc) from exc

    return to_appointment_response(appointment)


@router.patch('/{appointment_id}/status', response_model=AppointmentResponse)
def update_appointment_status(
    appointment_id: int,
    data: UpdateAppointmentStatusRequest,
    db: Session = Depends(common.get_db),
):
    common.ensure_database_ready()

    store = SqlScheduleStore(db)
    try:
        appointment = load_appointment(store, appointment_id)
        ensure_transition(appointment.status, data.status)
        updated = store.update_appointment_status(appointment_id, data.status, data.completion_notes)
    except SchedulingError as exc:
        raise common.to_http_exception(exc) from exc

    logger.info('Appointment %s moved from %s to %s', appointment_id, appointment.status, updated.status)
    return to_appointment_response(updated)


@router.post('/{appointment_id}/cancel', response_model=AppointmentResponse)
def cancel_appointment(
    appointment_id: int,
    data: CancelAppointmentRequest,
    db: Session = Depends(common.get_db),
):
    common.ensure_database_ready()

    store = SqlScheduleStore(db)
    try:
        appointment = load_appointment(store, appointment_id)
        if appointment.client_id != data.client_id:
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail='Only the client who booked this appointment can cancel it.',
            )

        ensure_client_can_cancel(appointment, common.local_now(), config.CANCELLATION_NOTICE_HOURS)
        cancelled = store.update_appointment_status(appointment_id, CANCELLED)
    except SchedulingError as exc:
        raise common.to_http_exception(exc) from exc

    logger.info('Appointment %s cancelled by client %s', appointment_id, data.client_id)
    return to_appointment_response(cancelled)
