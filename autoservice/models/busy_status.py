"""Busy status model definitions."""

from datetime import datetime

from sqlalchemy import Boolean, Column, DateTime, Integer, String
from autoservice.database import Base


class MechanicBusyStatus(Base):
    """Manually declared unavailability; a single row per mechanic."""
    __tablename__ = "mechanic_busy_status"

    mechanic_id = Column(Integer, primary_key=True)
    is_busy = Column(Boolean, default=False, nullable=False)
    busy_until = Column(DateTime)
    busy_reason = Column(String)
    updated_at = Column(DateTime, default=datetime.now, onupdate=datetime.now)
