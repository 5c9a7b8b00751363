# rollcall/services/run_state_service.py
from datetime import date
from typing import Optional

from sqlalchemy.orm import Session

from rollcall.models.scheduler_state import SchedulerState


def get_last_run_date(db: Session) -> Optional[date]:
    state = db.get(SchedulerState, 1)
    return state.last_run_date if state else None


def record_run(db: Session, run_date: date) -> None:
    state = db.get(SchedulerState, 1)
    if state is None:
        state = SchedulerState(id=1)
        db.add(state)
    state.last_run_date = run_date
    db.commit()
