import pytest

from autoservice.scheduling.errors import InvalidScheduleConfiguration
from autoservice.scheduling.slots import (
    generate_slots,
    parse_time_of_day,
    snap_to_grid,
    time_of_day_to_minutes,
    validate_day_schedule,
)
from autoservice.scheduling.types import DaySchedule


def test_generate_slots_covers_working_day_half_open() -> None:
    slots = generate_slots(DaySchedule('09:00', '18:00', True), 30)

    assert len(slots) == 18
    assert slots[0] == '09:00'
    assert slots[-1] == '17:30'
    assert '18:00' not in slots


def test_generate_slots_returns_nothing_on_day_off() -> None:
    assert generate_slots(DaySchedule('09:00', '18:00', False), 30) == []


def test_generate_slots_returns_nothing_when_start_equals_end() -> None:
    assert generate_slots(DaySchedule('10:00', '10:00', True), 30) == []


@pytest.mark.parametrize(
    ('start', 'end', 'granularity'),
    [
        ('09:00', '18:00', 30),
        ('08:15', '12:00', 15),
        ('09:00', '17:59', 60),
        ('07:45', '16:10', 45),
        ('00:00', '23:59', 30),
    ],
)
def test_generate_slots_count_and_spacing(start: str, end: str, granularity: int) -> None:
    slots = generate_slots(DaySchedule(start, end, True), granularity)
    minutes = [time_of_day_to_minutes(slot) for slot in slots]

    assert len(slots) == (time_of_day_to_minutes(end) - time_of_day_to_minutes(start)) // granularity
    assert all(later - earlier == granularity for earlier, later in zip(minutes, minutes[1:]))
    assert minutes == sorted(set(minutes))


def test_generate_slots_carries_minutes_into_hour() -> None:
    slots = generate_slots(DaySchedule('09:45', '11:15', True), 30)

    assert slots == ['09:45', '10:15', '10:45']


def test_generate_slots_drops_partial_tail_slot() -> None:
    slots = generate_slots(DaySchedule('09:00', '10:45', True), 30)

    assert slots == ['09:00', '09:30', '10:00']


def test_generate_slots_is_idempotent() -> None:
    day = DaySchedule('09:00', '12:00', True)

    assert generate_slots(day, 30) == generate_slots(day, 30)


def test_generate_slots_rejects_non_positive_granularity() -> None:
    with pytest.raises(ValueError):
        generate_slots(DaySchedule('09:00', '12:00', True), 0)


@pytest.mark.parametrize('value', ['9', '25:00', '10:60', 'ab:cd', '', '10-00'])
def test_parse_time_of_day_rejects_malformed_values(value: str) -> None:
    with pytest.raises(InvalidScheduleConfiguration):
        parse_time_of_day(value)


def test_parse_time_of_day_accepts_single_digit_hour() -> None:
    assert parse_time_of_day('9:05') == (9, 5)


def test_validate_day_schedule_rejects_inverted_working_day() -> None:
    with pytest.raises(InvalidScheduleConfiguration):
        validate_day_schedule(DaySchedule('18:00', '09:00', True))


def test_validate_day_schedule_ignores_times_of_day_off() -> None:
    validate_day_schedule(DaySchedule('18:00', '09:00', False))


def test_snap_to_grid_uses_day_start_as_origin() -> None:
    # Grid 09:15, 09:45, 10:15 ...; 09:50 belongs to the 09:45 slot.
    assert snap_to_grid(9 * 60 + 50, 9 * 60 + 15, 30) == 9 * 60 + 45
