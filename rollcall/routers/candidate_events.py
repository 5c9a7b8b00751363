# rollcall/routers/candidate_events.py
from datetime import date
from typing import Any, Dict, List, Optional

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel, field_validator
from sqlalchemy.orm import Session

from rollcall.config import SchedulingConfig, get_scheduling_config
from rollcall.db.session import get_db
from rollcall.models.candidate_event import CandidateEvent
from rollcall.services.candidate_event_service import (
    apply_row_edit,
    create_candidate_event,
    generate_future_candidate_events,
    get_candidate_event,
    load_roster,
    row_cells,
)
from rollcall.services.response_parser_service import parse_row
from rollcall.services.subgroup_service import find_optimal_combination

router = APIRouter(prefix="/candidate-events", tags=["candidate-events"])


class CandidateEventCreate(BaseModel):
    event_date: date


class GeneratePayload(BaseModel):
    start_date: date
    days: int = 14
    weekdays: Optional[List[int]] = None

    @field_validator("days")
    def validate_days(cls, v: int) -> int:
        if v <= 0:
            raise ValueError("days must be positive")
        return v


class ResponsesPayload(BaseModel):
    # participant name -> raw cell text ("y", "n", "?", "18-22", "" to clear)
    responses: Dict[str, Optional[str]]


def _event_json(event: CandidateEvent) -> Dict[str, Any]:
    return {
        "id": event.id,
        "event_date": event.event_date.isoformat(),
        "status": event.status,
        "all_day": event.all_day,
        "scheduled_start": event.scheduled_start.isoformat() if event.scheduled_start else None,
        "scheduled_end": event.scheduled_end.isoformat() if event.scheduled_end else None,
        "responses": row_cells(event),
    }


def _get_or_404(db: Session, event_id: int) -> CandidateEvent:
    event = get_candidate_event(db, event_id)
    if not event:
        raise HTTPException(status_code=404, detail="CandidateEvent not found")
    return event


@router.post("")
def create_event(
    payload: CandidateEventCreate,
    db: Session = Depends(get_db),
) -> Dict[str, Any]:
    try:
        event = create_candidate_event(db, event_date=payload.event_date)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return _event_json(event)


@router.post("/generate")
def generate_events(
    payload: GeneratePayload,
    db: Session = Depends(get_db),
) -> Dict[str, Any]:
    """
    Create the missing date rows for the next `days` days, optionally only
    on some weekdays (0=MON..6=SUN). Existing rows are left alone.
    """
    try:
        created = generate_future_candidate_events(
            db,
            start_date=payload.start_date,
            days=payload.days,
            weekdays=payload.weekdays,
        )
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))

    return {
        "created": [_event_json(e) for e in created],
    }


@router.get("/{event_id}")
def get_event(event_id: int, db: Session = Depends(get_db)) -> Dict[str, Any]:
    return _event_json(_get_or_404(db, event_id))


@router.put("/{event_id}/responses")
def update_responses(
    event_id: int,
    payload: ResponsesPayload,
    db: Session = Depends(get_db),
    config: SchedulingConfig = Depends(get_scheduling_config),
) -> Dict[str, Any]:
    """
    Edit-driven trigger: store the edited cells and refresh the row status.

    This only touches the database; no notification goes out from here.
    """
    event = _get_or_404(db, event_id)

    try:
        previous, _ = apply_row_edit(db, event, payload.responses, config)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))

    data = _event_json(event)
    data["previous_status"] = previous.value
    return data


@router.get("/{event_id}/optimal-combination")
def get_optimal_combination(
    event_id: int,
    db: Session = Depends(get_db),
    config: SchedulingConfig = Depends(get_scheduling_config),
) -> Dict[str, Any]:
    """
    Preview the largest group that could meet on this date and who is
    restricting the full roster. Nothing is written.
    """
    event = _get_or_404(db, event_id)
    roster = load_roster(db)

    responses = parse_row(row_cells(event), roster, event.event_date, config)
    combination = find_optimal_combination(responses, roster, event.event_date, config)
    intersection = combination.intersection

    return {
        "event_id": event.id,
        "event_date": event.event_date.isoformat(),
        "roster_size": len(roster),
        "participants": list(combination.participants),
        "restricting_participants": list(combination.restricting_participants),
        "duration_hours": combination.duration_hours,
        "intersection": {
            "kind": intersection.kind.value,
            "start": intersection.start.isoformat() if intersection.start else None,
            "end": intersection.end.isoformat() if intersection.end else None,
        },
    }
