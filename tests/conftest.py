import os

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

os.environ.setdefault('DATABASE_URL', 'sqlite://')

from autoservice.database import Base  # noqa: E402
from autoservice.models.appointment import Appointment  # noqa: E402
from autoservice.models.busy_status import MechanicBusyStatus  # noqa: E402
from autoservice.models.working_hours import WorkingHours  # noqa: E402
from autoservice.scheduling.store import SqlScheduleStore  # noqa: E402
from autoservice.scheduling.types import DaySchedule  # noqa: E402

MECHANIC_ID = 7

TABLES = [WorkingHours.__table__, MechanicBusyStatus.__table__, Appointment.__table__]


def weekday_schedule() -> dict[int, DaySchedule]:
    """Monday to Friday 09:00-18:00, weekend off."""
    schedule = {day: DaySchedule('09:00', '18:00', True) for day in range(1, 6)}
    schedule[6] = DaySchedule('10:00', '15:00', False)
    schedule[0] = DaySchedule('00:00', '00:00', False)
    return schedule


@pytest.fixture
def schedule_db():
    engine = create_engine('sqlite:///:memory:')
    testing_session_local = sessionmaker(autocommit=False, autoflush=False, bind=engine)
    Base.metadata.create_all(bind=engine, tables=TABLES)

    db = testing_session_local()
    try:
        yield db
    finally:
        db.close()
        Base.metadata.drop_all(bind=engine, tables=TABLES)


@pytest.fixture
def store(schedule_db) -> SqlScheduleStore:
    return SqlScheduleStore(schedule_db)


@pytest.fixture
def weekday_store(store: SqlScheduleStore) -> SqlScheduleStore:
    store.save_working_hours(MECHANIC_ID, weekday_schedule())
    return store
