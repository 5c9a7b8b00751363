# rollcall/routers/participants.py
from typing import Any, Dict, List

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from rollcall.db.session import get_db
from rollcall.models.participant import Participant
from rollcall.schemas.roster import ParticipantCreate
from rollcall.services.candidate_event_service import create_participant

router = APIRouter(prefix="/participants", tags=["participants"])


def _participant_json(p: Participant) -> Dict[str, Any]:
    return {
        "id": p.id,
        "name": p.name,
        "contact_handle": p.contact_handle,
        "allow_mention": p.allow_mention,
        "position": p.position,
    }


@router.post("")
def add_participant(
    payload: ParticipantCreate,
    db: Session = Depends(get_db),
) -> Dict[str, Any]:
    """Add one member to the roster (appended at the end unless a position is given)."""
    try:
        participant = create_participant(
            db,
            name=payload.name,
            contact_handle=payload.contact_handle,
            allow_mention=payload.allow_mention,
            position=payload.position,
        )
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))

    return _participant_json(participant)


@router.get("")
def list_participants(db: Session = Depends(get_db)) -> List[Dict[str, Any]]:
    participants = (
        db.query(Participant)
        .order_by(Participant.position.asc(), Participant.id.asc())
        .all()
    )
    return [_participant_json(p) for p in participants]
