# rollcall/models/__init__.py
from rollcall.models.base import Base  # noqa: F401

from rollcall.models.participant import Participant  # noqa: F401
from rollcall.models.candidate_event import CandidateEvent, EventStatus  # noqa: F401
from rollcall.models.availability_response import AvailabilityResponse  # noqa: F401
from rollcall.models.scheduler_state import SchedulerState  # noqa: F401
