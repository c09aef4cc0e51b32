"""Appointment model definitions."""

from datetime import datetime

from sqlalchemy import Column, DateTime, Index, Integer, String, text
from autoservice.database import Base
from autoservice.scheduling.status import OCCUPYING_STATUS_CLAUSE


class Appointment(Base):
    """A client's booking of one slot in a mechanic's calendar."""
    __tablename__ = "appointments"
    __table_args__ = (
        # Appointments that hold their slot may not share a (mechanic, start) pair.
        Index(
            "uq_appointments_mechanic_active_slot",
            "mechanic_id",
            "scheduled_time",
            unique=True,
            sqlite_where=text(OCCUPYING_STATUS_CLAUSE),
            postgresql_where=text(OCCUPYING_STATUS_CLAUSE),
        ),
    )

    id = Column(Integer, primary_key=True)
    mechanic_id = Column(Integer, nullable=False, index=True)
    client_id = Column(Integer)
    scheduled_time = Column(DateTime, nullable=False)
    status = Column(String, nullable=False, default="pending")  # pending/confirmed/in_progress/completed/cancelled
    notes = Column(String)
    completion_notes = Column(String)
    created_at = Column(DateTime, default=datetime.now)
