# rollcall/models/availability_response.py
from datetime import datetime

from sqlalchemy import Column, DateTime, ForeignKey, Integer, String, UniqueConstraint
from sqlalchemy.orm import relationship

from rollcall.models.base import Base


class AvailabilityResponse(Base):
    """
    Raw text a participant typed for a candidate date, e.g. "y", "?",
    "18-22" or "19:30".

    `participant_name` is free text rather than a foreign key: cells for
    names that are not on the roster are kept but ignored by the engine.
    """

    __tablename__ = "availability_responses"
    __table_args__ = (
        UniqueConstraint("candidate_event_id", "participant_name", name="uq_response_cell"),
    )

    id = Column(Integer, primary_key=True, index=True)

    candidate_event_id = Column(
        Integer,
        ForeignKey("candidate_events.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )

    participant_name = Column(String(255), nullable=False)
    raw_text = Column(String(255), nullable=False, default="")

    updated_at = Column(
        DateTime,
        default=datetime.utcnow,
        onupdate=datetime.utcnow,
        nullable=False,
    )

    candidate_event = relationship("CandidateEvent", back_populates="responses")
