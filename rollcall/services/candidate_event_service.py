# rollcall/services/candidate_event_service.py
from datetime import date, timedelta
from typing import Dict, Iterable, List, Mapping, Optional, Tuple

from sqlalchemy import func
from sqlalchemy.orm import Session

from rollcall.config import SchedulingConfig
from rollcall.logging_config import get_logger
from rollcall.models.availability_response import AvailabilityResponse
from rollcall.models.candidate_event import CandidateEvent, EventStatus
from rollcall.models.participant import Participant
from rollcall.schemas.roster import RosterMember
from rollcall.services.status_service import classify_row, next_status

logger = get_logger(__name__, "api")


def load_roster(db: Session) -> List[RosterMember]:
    """Roster in sheet order (position, then id), as immutable snapshots."""
    participants = (
        db.query(Participant)
        .order_by(Participant.position.asc(), Participant.id.asc())
        .all()
    )
    return [RosterMember.model_validate(p) for p in participants]


def create_participant(
    db: Session,
    *,
    name: str,
    contact_handle: Optional[str] = None,
    allow_mention: bool = True,
    position: Optional[int] = None,
) -> Participant:
    if db.query(Participant).filter_by(name=name).first():
        raise ValueError(f"Participant '{name}' already exists")

    if position is None:
        position = (db.query(func.max(Participant.position)).scalar() or 0) + 1

    participant = Participant(
        name=name,
        contact_handle=contact_handle,
        allow_mention=allow_mention,
        position=position,
    )
    db.add(participant)
    db.commit()
    db.refresh(participant)
    return participant


def create_candidate_event(db: Session, *, event_date: date) -> CandidateEvent:
    if db.query(CandidateEvent).filter_by(event_date=event_date).first():
        raise ValueError(f"A candidate event for {event_date.isoformat()} already exists")

    event = CandidateEvent(event_date=event_date, status=EventStatus.UNSET.value)
    db.add(event)
    db.commit()
    db.refresh(event)
    return event


def generate_future_candidate_events(
    db: Session,
    *,
    start_date: date,
    days: int,
    weekdays: Optional[Iterable[int]] = None,
) -> List[CandidateEvent]:
    """
    Make sure a row exists for every date in [start_date, start_date + days).

    - `weekdays` limits generation to those weekday numbers (0=MON..6=SUN)
    - Existing rows are left untouched; only missing dates are created

    Returns the newly created rows.
    """
    if days <= 0:
        raise ValueError("days must be positive")

    allowed = set(weekdays) if weekdays is not None else set(range(7))
    if not allowed <= set(range(7)):
        raise ValueError("weekdays must be between 0 (MON) and 6 (SUN)")

    end_date = start_date + timedelta(days=days)
    existing = {
        d
        for (d,) in db.query(CandidateEvent.event_date).filter(
            CandidateEvent.event_date >= start_date,
            CandidateEvent.event_date < end_date,
        )
    }

    created: List[CandidateEvent] = []
    current = start_date
    while current < end_date:
        if current.weekday() in allowed and current not in existing:
            event = CandidateEvent(event_date=current, status=EventStatus.UNSET.value)
            db.add(event)
            created.append(event)
        current += timedelta(days=1)

    db.commit()
    for event in created:
        db.refresh(event)

    logger.info("Generated %d candidate events from %s", len(created), start_date)
    return created


def get_candidate_event(db: Session, event_id: int) -> Optional[CandidateEvent]:
    return db.query(CandidateEvent).filter_by(id=event_id).first()


def row_cells(event: CandidateEvent) -> Dict[str, str]:
    """participant name -> raw text, for every stored cell of the row."""
    return {r.participant_name: r.raw_text for r in event.responses}


def record_responses(
    db: Session,
    event: CandidateEvent,
    cells: Mapping[str, Optional[str]],
) -> Dict[str, str]:
    """
    Write response cells for one row.

    Behavior:
    - A cell for an existing (row, name) pair is overwritten
    - A blank / None value clears the cell
    - Names that are not on the roster are stored as-is (stray columns)

    Returns the row's cells after the write.
    """
    existing = {r.participant_name: r for r in event.responses}

    for name, raw in cells.items():
        name = name.strip()
        if not name:
            raise ValueError("participant name must not be blank")
        text = (raw or "").strip()
        response = existing.get(name)

        if not text:
            if response is not None:
                # delete-orphan cascade removes the row on commit
                event.responses.remove(response)
                del existing[name]
            continue

        if response is None:
            response = AvailabilityResponse(participant_name=name, raw_text=text)
            event.responses.append(response)
            existing[name] = response
        else:
            response.raw_text = text

    db.commit()
    db.refresh(event)
    return row_cells(event)


def apply_row_edit(
    db: Session,
    event: CandidateEvent,
    cells: Mapping[str, Optional[str]],
    config: SchedulingConfig,
) -> Tuple[EventStatus, EventStatus]:
    """
    Edit-driven trigger: store the edited cells and refresh the row status.

    Runs locally only (no webhook calls), so it is safe to call on every
    edit. Returns (previous_status, new_status).
    """
    previous = EventStatus(event.status)
    current_cells = record_responses(db, event, cells)

    roster = load_roster(db)
    classified = classify_row(current_cells, roster, event.event_date, config)
    new = next_status(previous, classified)

    if new != previous:
        event.status = new.value
        if previous == EventStatus.SCHEDULED:
            clear_schedule(event)
        db.commit()
        db.refresh(event)
        logger.info("Row %s: %s -> %s", event.event_date, previous.value, new.value)

    return previous, new


def clear_schedule(event: CandidateEvent) -> None:
    event.scheduled_start = None
    event.scheduled_end = None
    event.all_day = False


def load_candidate_window(db: Session, *, start_date: date, end_date: date) -> List[CandidateEvent]:
    return (
        db.query(CandidateEvent)
        .filter(
            CandidateEvent.event_date >= start_date,
            CandidateEvent.event_date <= end_date,
        )
        .order_by(CandidateEvent.event_date.asc())
        .all()
    )
