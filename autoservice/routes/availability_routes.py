from datetime import date, datetime, timedelta

from fastapi import APIRouter, Depends, HTTPException, Query, status
from pydantic import BaseModel
from sqlalchemy.orm import Session

from autoservice.core import config
from autoservice.routes import common
from autoservice.scheduling.errors import SchedulingError
from autoservice.scheduling.store import SqlScheduleStore
from autoservice.scheduling.types import Slot

router = APIRouter(tags=['availability'])


class SlotResponse(BaseModel):
    time: str
    available: bool


class CalendarDayResponse(BaseModel):
    date: date
    total_slots: int
    available_slots: int


def validate_requested_date(target_date: date, today: date) -> None:
    if target_date < today:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail='Availability can only be requested for today or later.',
        )

    if target_date > today + timedelta(days=config.BOOKING_HORIZON_DAYS):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f'Availability is only published {config.BOOKING_HORIZON_DAYS} days ahead.',
        )


def drop_elapsed_slots(slots: list[Slot], target_date: date, now: datetime) -> list[Slot]:
    if target_date != now.date():
        return slots
    current = now.strftime('%H:%M')
    return [slot for slot in slots if slot.time > current]


@router.get('/{mechanic_id}', response_model=list[SlotResponse])
def get_availability(
    mechanic_id: int,
    target_date: date = Query(..., alias='date'),
    available_only: bool = Query(default=False),
    db: Session = Depends(common.get_db),
):
    now = common.local_now()
    validate_requested_date(target_date, now.date())

    common.ensure_database_ready()

    resolver = common.build_resolver(SqlScheduleStore(db))
    try:
        slots = resolver.resolve(mechanic_id, target_date)
    except SchedulingError as exc:
        raise common.to_http_exception(exc) from exc

    slots = drop_elapsed_slots(slots, target_date, now)
    if available_only:
        slots = [slot for slot in slots if slot.available]

    return [SlotResponse(time=slot.time, available=slot.available) for slot in slots]


@router.get('/{mechanic_id}/calendar', response_model=list[CalendarDayResponse])
def get_availability_calendar(
    mechanic_id: int,
    days: int = Query(default=14, ge=1),
    db: Session = Depends(common.get_db),
):
    common.ensure_database_ready()

    now = common.local_now()
    days = min(days, config.BOOKING_HORIZON_DAYS + 1)
    resolver = common.build_resolver(SqlScheduleStore(db))

    calendar: list[CalendarDayResponse] = []
    try:
        for offset in range(days):
            current_day = now.date() + timedelta(days=offset)
            slots = drop_elapsed_slots(resolver.resolve(mechanic_id, current_day), current_day, now)
            calendar.append(
                CalendarDayResponse(
                    date=current_day,
                    total_slots=len(slots),
                    available_slots=sum(1 for slot in slots if slot.available),
                )
            )
    except SchedulingError as exc:
        raise common.to_http_exception(exc) from exc

    return calendar
