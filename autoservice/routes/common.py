from datetime import datetime

from fastapi import HTTPException, status
from sqlalchemy.exc import SQLAlchemyError

from autoservice.core import config
from autoservice.database import SessionLocal, ensure_appointment_schema, ensure_schedule_schema
from autoservice.scheduling.availability import AvailabilityResolver
from autoservice.scheduling.errors import (
    AppointmentNotFound,
    CancellationTooLate,
    DependencyUnavailable,
    InvalidBusyOverride,
    InvalidScheduleConfiguration,
    InvalidStatusTransition,
    SchedulingError,
    SlotConflict,
    SlotNotOffered,
)
from autoservice.scheduling.store import SqlScheduleStore

DATABASE_UNAVAILABLE_DETAIL = 'Database unavailable. Verify DATABASE_URL and Postgres credentials.'

ERROR_STATUS_CODES = {
    DependencyUnavailable: status.HTTP_503_SERVICE_UNAVAILABLE,
    SlotConflict: status.HTTP_409_CONFLICT,
    AppointmentNotFound: status.HTTP_404_NOT_FOUND,
    SlotNotOffered: status.HTTP_400_BAD_REQUEST,
    InvalidScheduleConfiguration: status.HTTP_400_BAD_REQUEST,
    InvalidBusyOverride: status.HTTP_400_BAD_REQUEST,
    InvalidStatusTransition: status.HTTP_400_BAD_REQUEST,
    CancellationTooLate: status.HTTP_400_BAD_REQUEST,
}


def ensure_database_ready() -> None:
    try:
        ensure_schedule_schema()
        ensure_appointment_schema()
    except SQLAlchemyError as exc:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail=DATABASE_UNAVAILABLE_DETAIL,
        ) from exc


def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def local_now() -> datetime:
    return datetime.now()


def to_local_naive(value: datetime) -> datetime:
    # Times are stored as naive server-local datetimes.
    if value.tzinfo is None:
        return value
    return value.astimezone().replace(tzinfo=None)


def to_http_exception(exc: SchedulingError) -> HTTPException:
    status_code = ERROR_STATUS_CODES.get(type(exc), status.HTTP_400_BAD_REQUEST)
    detail = DATABASE_UNAVAILABLE_DETAIL if isinstance(exc, DependencyUnavailable) else str(exc)
    return HTTPException(status_code=status_code, detail=detail)


def build_resolver(store: SqlScheduleStore) -> AvailabilityResolver:
    return AvailabilityResolver(
        store,
        granularity_minutes=config.SLOT_GRANULARITY_MINUTES,
        busy_override_mode=config.BUSY_OVERRIDE_MODE,
    )
