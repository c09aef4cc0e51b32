from datetime import datetime

import pytest
from fastapi import HTTPException
from pydantic import ValidationError

from autoservice.routes.schedule_routes import (
    SetBusyStatusRequest,
    UpdateWorkingHoursRequest,
    WorkingHoursDay,
    get_busy_status,
    get_working_hours,
    set_busy_status,
    update_working_hours,
)

from conftest import MECHANIC_ID

NOW = datetime(2026, 1, 5, 9, 0)


@pytest.fixture(autouse=True)
def fixed_clock(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr('autoservice.routes.common.ensure_database_ready', lambda: None)
    monkeypatch.setattr('autoservice.routes.common.local_now', lambda: NOW)


def test_working_hours_day_normalizes_time_strings() -> None:
    day = WorkingHoursDay(day_of_week=1, start_time=' 9:00 ', end_time='18:00', is_working_day=True)

    assert day.start_time == '09:00'


@pytest.mark.parametrize(
    'payload',
    [
        {'day_of_week': 7, 'start_time': '09:00', 'end_time': '18:00', 'is_working_day': True},
        {'day_of_week': 1, 'start_time': '9am', 'end_time': '18:00', 'is_working_day': True},
        {'day_of_week': 1, 'start_time': '09:00', 'end_time': '24:30', 'is_working_day': True},
    ],
)
def test_working_hours_day_rejects_invalid_values(payload: dict) -> None:
    with pytest.raises(ValidationError):
        WorkingHoursDay(**payload)


def test_update_working_hours_request_rejects_duplicate_days() -> None:
    day = {'day_of_week': 1, 'start_time': '09:00', 'end_time': '18:00', 'is_working_day': True}

    with pytest.raises(ValidationError):
        UpdateWorkingHoursRequest(mechanic_id=MECHANIC_ID, days=[day, day])


def test_update_working_hours_saves_and_returns_sorted_days(schedule_db) -> None:
    request = UpdateWorkingHoursRequest(
        mechanic_id=MECHANIC_ID,
        days=[
            {'day_of_week': 6, 'start_time': '10:00', 'end_time': '15:00', 'is_working_day': True},
            {'day_of_week': 1, 'start_time': '09:00', 'end_time': '18:00', 'is_working_day': True},
        ],
    )

    saved = update_working_hours(request, db=schedule_db)

    assert [day.day_of_week for day in saved] == [1, 6]
    assert get_working_hours(mechanic_id=MECHANIC_ID, db=schedule_db) == saved


def test_update_working_hours_rejects_day_ending_before_start(schedule_db) -> None:
    request = UpdateWorkingHoursRequest(
        mechanic_id=MECHANIC_ID,
        days=[{'day_of_week': 2, 'start_time': '18:00', 'end_time': '09:00', 'is_working_day': True}],
    )

    with pytest.raises(HTTPException) as exception_info:
        update_working_hours(request, db=schedule_db)

    assert exception_info.value.status_code == 400
    assert exception_info.value.detail.startswith('Day 2:')


def test_update_working_hours_accepts_inverted_times_on_day_off(schedule_db) -> None:
    request = UpdateWorkingHoursRequest(
        mechanic_id=MECHANIC_ID,
        days=[{'day_of_week': 0, 'start_time': '00:00', 'end_time': '00:00', 'is_working_day': False}],
    )

    saved = update_working_hours(request, db=schedule_db)

    assert saved[0].is_working_day is False


def test_get_busy_status_defaults_to_free(schedule_db) -> None:
    busy_status = get_busy_status(mechanic_id=MECHANIC_ID, db=schedule_db)

    assert busy_status.is_busy is False
    assert busy_status.busy_until is None


def test_set_busy_status_persists_override(schedule_db) -> None:
    request = SetBusyStatusRequest(
        mechanic_id=MECHANIC_ID,
        is_busy=True,
        busy_until=datetime(2026, 1, 5, 14, 0),
        busy_reason='  Waiting for parts ',
    )

    saved = set_busy_status(request, db=schedule_db)

    assert saved.is_busy is True
    assert saved.busy_until == datetime(2026, 1, 5, 14, 0)
    assert saved.busy_reason == 'Waiting for parts'
    assert get_busy_status(mechanic_id=MECHANIC_ID, db=schedule_db).is_busy is True


def test_set_busy_status_rejects_short_override(schedule_db) -> None:
    request = SetBusyStatusRequest(mechanic_id=MECHANIC_ID, is_busy=True, busy_until=datetime(2026, 1, 5, 9, 5))

    with pytest.raises(HTTPException) as exception_info:
        set_busy_status(request, db=schedule_db)

    assert exception_info.value.status_code == 400
    assert exception_info.value.detail == 'Busy status must last at least 15 minutes.'


def test_set_busy_status_clears_previous_override(schedule_db) -> None:
    set_busy_status(
        SetBusyStatusRequest(mechanic_id=MECHANIC_ID, is_busy=True, busy_until=datetime(2026, 1, 6, 9, 0)),
        db=schedule_db,
    )

    cleared = set_busy_status(SetBusyStatusRequest(mechanic_id=MECHANIC_ID, is_busy=False), db=schedule_db)

    assert cleared.is_busy is False
    assert cleared.busy_until is None
