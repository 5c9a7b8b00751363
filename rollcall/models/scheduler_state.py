# rollcall/models/scheduler_state.py
from sqlalchemy import Column, Date, Integer

from rollcall.models.base import Base


class SchedulerState(Base):
    """Single row holding the date of the last completed time-driven run."""

    __tablename__ = "scheduler_state"

    id = Column(Integer, primary_key=True)
    last_run_date = Column(Date, nullable=True)
