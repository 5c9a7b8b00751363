# rollcall/schemas/roster.py
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


class RosterMember(BaseModel):
    """Immutable view of a Participant, loaded fresh for every run."""

    model_config = ConfigDict(frozen=True, from_attributes=True)

    name: str
    contact_handle: Optional[str] = None
    allow_mention: bool = True


class ParticipantCreate(BaseModel):
    name: str = Field(min_length=1)
    contact_handle: Optional[str] = None
    allow_mention: bool = True
    position: Optional[int] = None

    @field_validator("name")
    def strip_name(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("name must not be blank")
        return v
