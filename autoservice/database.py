from threading import Lock

from sqlalchemy import create_engine, inspect, text
from sqlalchemy.orm import declarative_base, sessionmaker

from autoservice.core import config
from autoservice.scheduling.status import OCCUPYING_STATUS_CLAUSE


def _engine_options(database_url: str) -> dict:
    timeout = config.STORE_TIMEOUT_SECONDS

    if database_url.startswith("sqlite"):
        return {"connect_args": {"timeout": timeout, "check_same_thread": False}}

    options: dict = {"pool_pre_ping": True, "pool_timeout": timeout}
    if database_url.startswith("postgresql"):
        options["connect_args"] = {
            "connect_timeout": max(1, int(timeout)),
            "options": f"-c statement_timeout={int(timeout * 1000)}",
        }
    return options


engine = create_engine(config.DATABASE_URL, **_engine_options(config.DATABASE_URL))

SessionLocal = sessionmaker(
    autocommit=False,
    autoflush=False,
    bind=engine,
)

Base = declarative_base()

_schema_lock = Lock()
_appointment_schema_checked = False
_schedule_schema_checked = False


def ensure_appointment_schema() -> None:
    global _appointment_schema_checked

    if _appointment_schema_checked:
        return

    with _schema_lock:
        if _appointment_schema_checked:
            return

        inspector = inspect(engine)

        if 'appointments' not in inspector.get_table_names():
            _appointment_schema_checked = True
            return

        existing_columns = {column['name'] for column in inspector.get_columns('appointments')}
        migration_steps = [
            ('client_id', 'ALTER TABLE appointments ADD COLUMN client_id INTEGER'),
            ('notes', 'ALTER TABLE appointments ADD COLUMN notes VARCHAR'),
            ('completion_notes', 'ALTER TABLE appointments ADD COLUMN completion_notes VARCHAR'),
        ]

        with engine.begin() as connection:
            for column_name, statement in migration_steps:
                if column_name not in existing_columns:
                    connection.execute(text(statement))
            # Earlier index also held completed rows.
            connection.execute(text('DROP INDEX IF EXISTS uq_appointments_mechanic_slot'))
            connection.execute(
                text(
                    'CREATE UNIQUE INDEX IF NOT EXISTS uq_appointments_mechanic_active_slot '
                    f'ON appointments(mechanic_id, scheduled_time) WHERE {OCCUPYING_STATUS_CLAUSE}'
                )
            )
            connection.execute(
                text('CREATE INDEX IF NOT EXISTS idx_appointments_mechanic_time ON appointments(mechanic_id, scheduled_time)')
            )

        _appointment_schema_checked = True


def ensure_schedule_schema() -> None:
    global _schedule_schema_checked

    if _schedule_schema_checked:
        return

    with _schema_lock:
        if _schedule_schema_checked:
            return

        inspector = inspect(engine)

        if 'working_hours' not in inspector.get_table_names():
            _schedule_schema_checked = True
            return

        with engine.begin() as connection:
            connection.execute(
                text(
                    'CREATE UNIQUE INDEX IF NOT EXISTS uq_working_hours_mechanic_day '
                    'ON working_hours(mechanic_id, day_of_week)'
                )
            )

        _schedule_schema_checked = True
