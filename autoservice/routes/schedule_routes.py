from datetime import datetime

from fastapi import APIRouter, Depends, HTTPException, Query, status
from pydantic import BaseModel, field_validator
from sqlalchemy.orm import Session

from autoservice.core import config
from autoservice.routes import common
from autoservice.scheduling.busy import build_busy_override
from autoservice.scheduling.errors import InvalidScheduleConfiguration, SchedulingError
from autoservice.scheduling.slots import parse_time_of_day, validate_day_schedule
from autoservice.scheduling.store import SqlScheduleStore
from autoservice.scheduling.types import DaySchedule

router = APIRouter(tags=['schedule'])

MAX_BUSY_REASON_LENGTH = 300


class WorkingHoursDay(BaseModel):
    day_of_week: int
    start_time: str
    end_time: str
    is_working_day: bool

    @field_validator('day_of_week')
    @classmethod
    def validate_day_of_week(cls, value: int) -> int:
        if not 0 <= value <= 6:
            raise ValueError('day_of_week must be between 0 (Sunday) and 6 (Saturday).')
        return value

    @field_validator('start_time', 'end_time')
    @classmethod
    def validate_time_of_day(cls, value: str) -> str:
        try:
            hour, minute = parse_time_of_day(value)
        except InvalidScheduleConfiguration as exc:
            raise ValueError(str(exc)) from exc
        return f'{hour:02d}:{minute:02d}'


class UpdateWorkingHoursRequest(BaseModel):
    mechanic_id: int
    days: list[WorkingHoursDay]

    @field_validator('days')
    @classmethod
    def validate_unique_days(cls, value: list[WorkingHoursDay]) -> list[WorkingHoursDay]:
        seen = [day.day_of_week for day in value]
        if len(seen) != len(set(seen)):
            raise ValueError('Each day of the week may appear only once.')
        return value


class SetBusyStatusRequest(BaseModel):
    mechanic_id: int
    is_busy: bool
    busy_until: datetime | None = None
    busy_reason: str | None = None

    @field_validator('busy_reason')
    @classmethod
    def validate_busy_reason(cls, value: str | None) -> str | None:
        if value is None:
            return None

        normalized = value.strip()
        if not normalized:
            return None

        if len(normalized) > MAX_BUSY_REASON_LENGTH:
            raise ValueError(f'Reason must be {MAX_BUSY_REASON_LENGTH} characters or fewer.')

        return normalized


class BusyStatusResponse(BaseModel):
    mechanic_id: int
    is_busy: bool
    busy_until: datetime | None = None
    busy_reason: str | None = None
    updated_at: datetime | None = None


def to_working_hours_response(schedule: dict[int, DaySchedule]) -> list[WorkingHoursDay]:
    return [
        WorkingHoursDay(
            day_of_week=day,
            start_time=day_schedule.start_time,
            end_time=day_schedule.end_time,
            is_working_day=day_schedule.is_working_day,
        )
        for day, day_schedule in sorted(schedule.items())
    ]


@router.get('/working-hours', response_model=list[WorkingHoursDay])
def get_working_hours(
    mechanic_id: int = Query(...),
    db: Session = Depends(common.get_db),
):
    common.ensure_database_ready()

    try:
        schedule = SqlScheduleStore(db).get_working_hours(mechanic_id)
    except SchedulingError as exc:
        raise common.to_http_exception(exc) from exc

    return to_working_hours_response(schedule)


@router.put('/working-hours', response_model=list[WorkingHoursDay])
def update_working_hours(data: UpdateWorkingHoursRequest, db: Session = Depends(common.get_db)):
    schedule = {
        day.day_of_week: DaySchedule(
            start_time=day.start_time,
            end_time=day.end_time,
            is_working_day=day.is_working_day,
        )
        for day in data.days
    }

    for day, day_schedule in schedule.items():
        try:
            validate_day_schedule(day_schedule)
        except InvalidScheduleConfiguration as exc:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail=f'Day {day}: {exc}',
            ) from exc

    common.ensure_database_ready()

    try:
        saved = SqlScheduleStore(db).save_working_hours(data.mechanic_id, schedule)
    except SchedulingError as exc:
        raise common.to_http_exception(exc) from exc

    return to_working_hours_response(saved)


@router.get('/busy-status', response_model=BusyStatusResponse)
def get_busy_status(
    mechanic_id: int = Query(...),
    db: Session = Depends(common.get_db),
):
    common.ensure_database_ready()

    try:
        override = SqlScheduleStore(db).get_busy_override(mechanic_id)
    except SchedulingError as exc:
        raise common.to_http_exception(exc) from exc

    if override is None:
        return BusyStatusResponse(mechanic_id=mechanic_id, is_busy=False)

    return BusyStatusResponse(
        mechanic_id=override.mechanic_id,
        is_busy=override.is_busy,
        busy_until=override.busy_until,
        busy_reason=override.reason,
        updated_at=override.updated_at,
    )


@router.post('/busy-status', response_model=BusyStatusResponse)
def set_busy_status(data: SetBusyStatusRequest, db: Session = Depends(common.get_db)):
    busy_until = common.to_local_naive(data.busy_until) if data.busy_until else None

    try:
        override = build_busy_override(
            mechanic_id=data.mechanic_id,
            is_busy=data.is_busy,
            busy_until=busy_until,
            reason=data.busy_reason,
            now=common.local_now(),
            min_minutes=config.MIN_BUSY_MINUTES,
        )
    except SchedulingError as exc:
        raise common.to_http_exception(exc) from exc

    common.ensure_database_ready()

    try:
        saved = SqlScheduleStore(db).save_busy_override(override)
    except SchedulingError as exc:
        raise common.to_http_exception(exc) from exc

    return BusyStatusResponse(
        mechanic_id=saved.mechanic_id,
        is_busy=saved.is_busy,
        busy_until=saved.busy_until,
        busy_reason=saved.reason,
        updated_at=saved.updated_at,
    )
