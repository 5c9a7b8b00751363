# rollcall/routers/scheduler.py
from datetime import date
from typing import Any, Dict, Optional

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from rollcall.config import ConfigurationError, SchedulingConfig, get_scheduling_config
from rollcall.db.session import get_db
from rollcall.services.processing_service import RosterNotConfiguredError, run_scheduling_pass
from rollcall.services.run_state_service import get_last_run_date
from rollcall.services.webhook_client import WebhookClient, get_optional_webhook_client

router = APIRouter(prefix="/scheduler", tags=["scheduler"])


@router.post("/run")
def run_scheduler(
    today: Optional[date] = None,
    db: Session = Depends(get_db),
    config: SchedulingConfig = Depends(get_scheduling_config),
    webhook_client: Optional[WebhookClient] = Depends(get_optional_webhook_client),
) -> Dict[str, Any]:
    """
    Time-driven trigger: process every candidate date in the look-ahead
    window, schedule at most one event per ISO week and send the resulting
    notifications.

    `today` can be pinned for replays / tests; defaults to the server date.
    """
    run_date = today or date.today()

    try:
        summary = run_scheduling_pass(db, config, today=run_date, webhook_client=webhook_client)
    except ConfigurationError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except RosterNotConfiguredError as e:
        raise HTTPException(status_code=409, detail=str(e))

    return {
        "run_date": summary.run_date.isoformat(),
        "scheduled": [d.isoformat() for d in summary.scheduled],
        "status_changes": {d.isoformat(): s.value for d, s in summary.status_changes.items()},
        "reminders": summary.reminders,
        "restriction_notices": summary.restriction_notices,
        "notifications_total": summary.notifications_total,
        "notifications_sent": summary.notifications_sent,
    }


@router.get("/last-run")
def last_run(db: Session = Depends(get_db)) -> Dict[str, Any]:
    last = get_last_run_date(db)
    return {"last_run_date": last.isoformat() if last else None}
