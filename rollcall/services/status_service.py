# rollcall/services/status_service.py
from datetime import date
from typing import Mapping, Optional, Sequence

from rollcall.config import SchedulingConfig
from rollcall.models.candidate_event import EventStatus
from rollcall.schemas.roster import RosterMember
from rollcall.services.response_parser_service import ResponseKind, parse_row


def classify_row(
    cells: Mapping[str, Optional[str]],
    roster: Sequence[RosterMember],
    candidate_date: date,
    config: SchedulingConfig,
) -> EventStatus:
    """
    Pipeline label for one date row, based only on who has answered.

    - any NO                      -> CANCELLED
    - everyone YES or a time      -> READY
    - someone answered, not ready -> AWAITING
    - nobody answered             -> UNSET (clears a stale label)

    Cells for names outside the roster are ignored. Whether a usable time
    actually exists is decided later by the intersection / subgroup search.
    """
    if not roster:
        return EventStatus.UNSET

    parsed = parse_row(cells, roster, candidate_date, config)

    if any(p.kind == ResponseKind.NO for p in parsed.values()):
        return EventStatus.CANCELLED

    ready_count = sum(1 for p in parsed.values() if p.counts_as_ready)
    answered_count = sum(1 for p in parsed.values() if not p.is_blank)

    if ready_count == len(roster):
        return EventStatus.READY
    if answered_count > 0:
        return EventStatus.AWAITING
    return EventStatus.UNSET


def next_status(current: EventStatus, classified: EventStatus) -> EventStatus:
    """
    Transition applied after a response edit.

    SUPERSEDED is sticky; SCHEDULED only gives way to a cancellation;
    everything else follows the classifier.
    """
    current = EventStatus(current)

    if current == EventStatus.SUPERSEDED:
        return current
    if current == EventStatus.SCHEDULED:
        return EventStatus.CANCELLED if classified == EventStatus.CANCELLED else current
    return classified


def is_open(status: EventStatus) -> bool:
    """Rows the time-driven run may still schedule, supersede or fail."""
    return EventStatus(status) not in (
        EventStatus.SCHEDULED,
        EventStatus.SUPERSEDED,
        EventStatus.CANCELLED,
    )
