# rollcall/models/participant.py
from datetime import datetime

from sqlalchemy import Boolean, Column, DateTime, Integer, String

from rollcall.models.base import Base


class Participant(Base):
    """
    One roster member.

    `name` is the key used by response cells; `contact_handle` is the
    opaque id used for chat mentions when `allow_mention` is set.
    """

    __tablename__ = "participants"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(255), nullable=False, unique=True)
    contact_handle = Column(String(255), nullable=True)
    allow_mention = Column(Boolean, nullable=False, default=True)

    # Roster order (column order in the original sheet)
    position = Column(Integer, nullable=False, default=0)

    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
