# rollcall/services/week_selector_service.py
from dataclasses import dataclass, field
from datetime import date
from typing import Dict, Iterable, List, Mapping, Optional, Sequence, Tuple

from rollcall.config import SchedulingConfig
from rollcall.logging_config import get_logger
from rollcall.models.candidate_event import EventStatus
from rollcall.schemas.roster import RosterMember
from rollcall.services.intersection_service import IntersectionResult, intersect_responses
from rollcall.services.response_parser_service import parse_row
from rollcall.services.status_service import classify_row, is_open
from rollcall.services.subgroup_service import find_optimal_combination

logger = get_logger(__name__, "scheduler")

WeekKey = Tuple[int, int]


@dataclass(frozen=True)
class WeekRow:
    event_date: date
    cells: Mapping[str, Optional[str]]
    status: EventStatus = EventStatus.UNSET


@dataclass(frozen=True)
class WeekWinner:
    event_date: date
    intersection: IntersectionResult


@dataclass(frozen=True)
class RestrictionNotice:
    event_date: date
    restricting_participants: Tuple[str, ...]
    participants: Tuple[str, ...]
    duration_hours: float


@dataclass
class WeeklyDecision:
    winner: Optional[WeekWinner] = None
    status_updates: Dict[date, EventStatus] = field(default_factory=dict)
    restriction_notices: List[RestrictionNotice] = field(default_factory=list)


def week_key(d: date) -> WeekKey:
    iso = d.isocalendar()
    return iso[0], iso[1]


def group_by_week(rows: Iterable[WeekRow]) -> Dict[WeekKey, List[WeekRow]]:
    """Group rows by ISO (year, week), each group sorted by date."""
    weeks: Dict[WeekKey, List[WeekRow]] = {}
    for row in rows:
        weeks.setdefault(week_key(row.event_date), []).append(row)
    for week_rows in weeks.values():
        week_rows.sort(key=lambda r: r.event_date)
    return dict(sorted(weeks.items()))


def select_weekly_winner(
    rows: Sequence[WeekRow],
    roster: Sequence[RosterMember],
    config: SchedulingConfig,
) -> WeeklyDecision:
    """
    Pick at most one date to schedule within a single ISO week.

    Only READY rows (everyone answered YES or a time) compete. The winner
    is the row whose full-roster intersection is strictly the longest and
    reaches MIN_EVENT_DURATION_HOURS; ALL_DAY counts as 24h and ties keep
    the earliest date.

    Outcome:
      - winner                 -> SCHEDULED, every other row of the week
                                  (unless CANCELLED / SCHEDULED) -> SUPERSEDED
      - week already scheduled -> open rows -> SUPERSEDED
      - no winner              -> short READY rows -> FAILED_DURATION,
                                  other open rows follow the classifier
    Separately, every open row the full roster cannot schedule (AWAITING or
    READY but short) gets a subgroup search, whatever the week's outcome;
    a qualifying smaller group yields a RestrictionNotice.
    """
    decision = WeeklyDecision()
    ordered = sorted(rows, key=lambda r: r.event_date)

    classified: Dict[date, EventStatus] = {}
    full_roster: Dict[date, IntersectionResult] = {}

    for row in ordered:
        if not is_open(row.status):
            continue
        classified[row.event_date] = classify_row(row.cells, roster, row.event_date, config)
        full_roster[row.event_date] = intersect_responses(
            parse_row(row.cells, roster, row.event_date, config).values(),
            row.event_date,
            min_duration_hours=config.min_consideration_duration_hours,
        )

    already_scheduled = any(EventStatus(r.status) == EventStatus.SCHEDULED for r in ordered)

    best: Optional[WeekWinner] = None
    if not already_scheduled:
        for row in ordered:
            if classified.get(row.event_date) != EventStatus.READY:
                continue
            intersection = full_roster[row.event_date]
            if intersection.duration_hours < config.min_event_duration_hours:
                continue
            if best is None or intersection.duration_hours > best.intersection.duration_hours:
                best = WeekWinner(row.event_date, intersection)

    decision.winner = best

    for row in ordered:
        if row.event_date not in classified:
            continue
        current = EventStatus(row.status)
        label = classified[row.event_date]

        if best is not None and row.event_date == best.event_date:
            new_status = EventStatus.SCHEDULED
        elif label == EventStatus.CANCELLED:
            new_status = EventStatus.CANCELLED
        elif best is not None or already_scheduled:
            new_status = EventStatus.SUPERSEDED
        elif label == EventStatus.READY:
            # READY but nobody-wins means the full roster was too short
            new_status = EventStatus.FAILED_DURATION
        else:
            new_status = label

        if new_status != current:
            decision.status_updates[row.event_date] = new_status

    for row in ordered:
        if row.event_date not in classified:
            continue
        if classified[row.event_date] not in (EventStatus.AWAITING, EventStatus.READY):
            continue
        if full_roster[row.event_date].duration_hours >= config.min_event_duration_hours:
            continue

        combination = find_optimal_combination(
            parse_row(row.cells, roster, row.event_date, config),
            roster,
            row.event_date,
            config,
        )
        if combination.qualifies and len(combination.participants) < len(roster):
            decision.restriction_notices.append(
                RestrictionNotice(
                    event_date=row.event_date,
                    restricting_participants=combination.restricting_participants,
                    participants=combination.participants,
                    duration_hours=combination.duration_hours,
                )
            )

    if best is not None:
        logger.info(
            "Week %s-W%02d: scheduling %s (%.2fh)",
            *week_key(best.event_date),
            best.event_date,
            best.intersection.duration_hours,
        )

    return decision
