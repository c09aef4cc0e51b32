"""Working hours model definitions."""

from sqlalchemy import Boolean, Column, Integer, String, UniqueConstraint
from autoservice.database import Base


class WorkingHours(Base):
    """One day of a mechanic's weekly schedule."""
    __tablename__ = "working_hours"
    __table_args__ = (
        UniqueConstraint("mechanic_id", "day_of_week", name="uq_working_hours_mechanic_day"),
    )

    id = Column(Integer, primary_key=True)
    mechanic_id = Column(Integer, nullable=False, index=True)
    day_of_week = Column(Integer, nullable=False)  # 0 = Sunday
    start_time = Column(String(5), nullable=False)
    end_time = Column(String(5), nullable=False)
    is_working_day = Column(Boolean, default=True, nullable=False)
