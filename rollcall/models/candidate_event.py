# rollcall/models/candidate_event.py
from datetime import datetime
from enum import Enum

from sqlalchemy import Boolean, Column, Date, DateTime, Integer, String
from sqlalchemy.orm import relationship

from rollcall.models.base import Base


class EventStatus(str, Enum):
    UNSET = "UNSET"
    AWAITING = "AWAITING"
    READY = "READY"
    SCHEDULED = "SCHEDULED"
    SUPERSEDED = "SUPERSEDED"
    CANCELLED = "CANCELLED"
    FAILED_DURATION = "FAILED_DURATION"
    NOT_ENOUGH_RESPONSES = "NOT_ENOUGH_RESPONSES"


class CandidateEvent(Base):
    """
    One candidate date that the roster is polled about.

    Responses hang off it as AvailabilityResponse rows (one per cell).
    """

    __tablename__ = "candidate_events"

    id = Column(Integer, primary_key=True, index=True)

    event_date = Column(Date, nullable=False, unique=True, index=True)

    # Store status as a simple string; EventStatus is still used in Python
    status = Column(
        String(32),
        nullable=False,
        default=EventStatus.UNSET.value,
    )

    # Filled in when the weekly selector picks this date
    scheduled_start = Column(DateTime, nullable=True)
    scheduled_end = Column(DateTime, nullable=True)
    all_day = Column(Boolean, nullable=False, default=False)

    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(
        DateTime,
        default=datetime.utcnow,
        onupdate=datetime.utcnow,
        nullable=False,
    )

    responses = relationship(
        "AvailabilityResponse",
        back_populates="candidate_event",
        cascade="all, delete-orphan",
    )
