# rollcall/services/processing_service.py
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, timedelta
from typing import Dict, List, Optional

from sqlalchemy.orm import Session

from rollcall.config import SchedulingConfig
from rollcall.logging_config import get_logger
from rollcall.models.candidate_event import CandidateEvent, EventStatus
from rollcall.schemas.roster import RosterMember
from rollcall.services.candidate_event_service import (
    clear_schedule,
    load_candidate_window,
    load_roster,
    row_cells,
)
from rollcall.services.intersection_service import IntersectionKind
from rollcall.services.notification_service import (
    MessageSender,
    build_reminders,
    build_scheduled_notice,
    dispatch_notifications,
    render_reminder,
    render_restriction,
    render_scheduled,
)
from rollcall.services.run_state_service import record_run
from rollcall.services.week_selector_service import (
    WeekRow,
    WeekWinner,
    group_by_week,
    select_weekly_winner,
)

logger = get_logger(__name__, "scheduler")

# Rows that expire into NOT_ENOUGH_RESPONSES once their date has passed
_EXPIRING_STATUSES = (EventStatus.UNSET, EventStatus.AWAITING, EventStatus.READY)


class RosterNotConfiguredError(RuntimeError):
    """No participants: nothing can be scheduled, the run is aborted."""


@dataclass
class RunSummary:
    run_date: date
    scheduled: List[date] = field(default_factory=list)
    status_changes: Dict[date, EventStatus] = field(default_factory=dict)
    reminders: int = 0
    restriction_notices: int = 0
    notifications_total: int = 0
    notifications_sent: int = 0

    def count(self, status: EventStatus) -> int:
        return sum(1 for s in self.status_changes.values() if s == status)


def _week_row(event: CandidateEvent) -> WeekRow:
    return WeekRow(
        event_date=event.event_date,
        cells=row_cells(event),
        status=EventStatus(event.status),
    )


def _set_status(db: Session, event: CandidateEvent, status: EventStatus, summary: RunSummary) -> None:
    # Committed one row at a time; earlier writes survive a later failure
    previous = event.status
    event.status = status.value
    if status != EventStatus.SCHEDULED and previous == EventStatus.SCHEDULED.value:
        clear_schedule(event)
    db.commit()
    summary.status_changes[event.event_date] = status
    logger.info("Row %s: %s -> %s", event.event_date, previous, status.value)


def _apply_winner(db: Session, event: CandidateEvent, winner: WeekWinner, summary: RunSummary) -> None:
    intersection = winner.intersection
    if intersection.kind == IntersectionKind.ALL_DAY:
        event.all_day = True
        event.scheduled_start = None
        event.scheduled_end = None
    else:
        event.all_day = False
        event.scheduled_start = intersection.start
        event.scheduled_end = intersection.end
    _set_status(db, event, EventStatus.SCHEDULED, summary)
    summary.scheduled.append(event.event_date)


def expire_past_rows(db: Session, *, today: date, summary: RunSummary) -> None:
    """Open rows whose date has gone by without an event."""
    past = (
        db.query(CandidateEvent)
        .filter(
            CandidateEvent.event_date < today,
            CandidateEvent.status.in_([s.value for s in _EXPIRING_STATUSES]),
        )
        .order_by(CandidateEvent.event_date.asc())
        .all()
    )
    for event in past:
        _set_status(db, event, EventStatus.NOT_ENOUGH_RESPONSES, summary)


def run_scheduling_pass(
    db: Session,
    config: SchedulingConfig,
    *,
    today: date,
    webhook_client: Optional[MessageSender] = None,
) -> RunSummary:
    """
    Time-driven run over [today, today + LOOKAHEAD_DAYS].

    Flow:
    1. Validate thresholds and load the roster (abort before any write if
       either is missing).
    2. Expire past open rows to NOT_ENOUGH_RESPONSES.
    3. For each ISO week in the window, let the weekly selector pick at most
       one date and write every resulting status change.
    4. Build scheduled / reminder / restriction messages and send them
       through the webhook, one by one.
    5. Remember today's date as the last run.
    """
    config.validate()

    roster: List[RosterMember] = load_roster(db)
    if not roster:
        logger.error("Scheduling run for %s aborted: roster is empty", today)
        raise RosterNotConfiguredError("No participants configured; add a roster first")

    summary = RunSummary(run_date=today)
    expire_past_rows(db, today=today, summary=summary)

    # Load whole ISO weeks so an event already scheduled earlier in the
    # current week still blocks a second one.
    horizon = today + timedelta(days=config.lookahead_days)
    window_start = today - timedelta(days=today.weekday())
    window_end = horizon + timedelta(days=6 - horizon.weekday())

    events = {
        e.event_date: e
        for e in load_candidate_window(db, start_date=window_start, end_date=window_end)
        if e.event_date <= horizon or EventStatus(e.status) == EventStatus.SCHEDULED
    }
    rows = [
        _week_row(e)
        for e in events.values()
        if e.event_date >= today or EventStatus(e.status) == EventStatus.SCHEDULED
    ]

    messages: List[str] = []
    open_rows: List[WeekRow] = []

    for (year, week), week_rows in group_by_week(rows).items():
        decision = select_weekly_winner(week_rows, roster, config)
        logger.debug(
            "Week %d-W%02d: %d rows, %d status updates, %d restriction notices",
            year,
            week,
            len(week_rows),
            len(decision.status_updates),
            len(decision.restriction_notices),
        )

        for row in week_rows:
            status = decision.status_updates.get(row.event_date)
            if status is None:
                continue
            event = events[row.event_date]
            if decision.winner is not None and row.event_date == decision.winner.event_date:
                _apply_winner(db, event, decision.winner, summary)
            else:
                _set_status(db, event, status, summary)

        if decision.winner is not None:
            notice = build_scheduled_notice(
                decision.winner.event_date, decision.winner.intersection, config
            )
            messages.append(render_scheduled(notice))

        for restriction in decision.restriction_notices:
            messages.append(render_restriction(restriction, roster))
        summary.restriction_notices += len(decision.restriction_notices)

        open_rows.extend(
            WeekRow(
                event_date=row.event_date,
                cells=row.cells,
                status=decision.status_updates.get(row.event_date, row.status),
            )
            for row in week_rows
            if row.event_date >= today
        )

    reminders = build_reminders(open_rows, roster, config)
    messages.extend(render_reminder(r) for r in reminders)
    summary.reminders = len(reminders)
    summary.notifications_total = len(messages)

    if webhook_client is None:
        if messages:
            logger.warning("No webhook client configured; %d notifications not sent", len(messages))
    else:
        summary.notifications_sent = dispatch_notifications(webhook_client, messages)

    record_run(db, today)

    logger.info(
        "Run %s done: %d scheduled, %d superseded, %d failed on duration, %d/%d notifications sent",
        today,
        len(summary.scheduled),
        summary.count(EventStatus.SUPERSEDED),
        summary.count(EventStatus.FAILED_DURATION),
        summary.notifications_sent,
        summary.notifications_total,
    )
    return summary
