# tests/test_week_selector_service.py
from datetime import date

from rollcall.config import SchedulingConfig
from rollcall.models.candidate_event import EventStatus
from rollcall.schemas.roster import RosterMember
from rollcall.services.intersection_service import IntersectionKind
from rollcall.services.week_selector_service import (
    WeekRow,
    group_by_week,
    select_weekly_winner,
    week_key,
)

CONFIG = SchedulingConfig(
    min_event_duration_hours=4,
    min_consideration_duration_hours=2,
    player_combination_threshold_percentage=0.6,
)
ROSTER = [RosterMember(name=n) for n in ("A", "B", "C", "D")]

MON = date(2025, 1, 6)
TUE = date(2025, 1, 7)
WED = date(2025, 1, 8)
THU = date(2025, 1, 9)

ALL_YES = {"A": "y", "B": "y", "C": "y", "D": "y"}


def test_group_by_week_uses_iso_weeks():
    rows = [
        WeekRow(date(2025, 1, 12), {}),  # Sunday, week 2
        WeekRow(date(2025, 1, 13), {}),  # Monday, week 3
        WeekRow(MON, {}),
        WeekRow(date(2024, 12, 30), {}),  # ISO week 1 of 2025
    ]
    weeks = group_by_week(rows)

    assert list(weeks) == [(2025, 1), (2025, 2), (2025, 3)]
    assert [r.event_date for r in weeks[(2025, 2)]] == [MON, date(2025, 1, 12)]
    assert week_key(date(2024, 12, 30)) == (2025, 1)


def test_all_day_beats_partial_window():
    rows = [
        WeekRow(TUE, {"A": "y", "B": "y", "C": "y", "D": "18-21"}, EventStatus.READY),
        WeekRow(THU, ALL_YES, EventStatus.READY),
    ]
    # make Tuesday long enough to be a valid candidate on its own
    config = SchedulingConfig(min_event_duration_hours=3, min_consideration_duration_hours=2)

    decision = select_weekly_winner(rows, ROSTER, config)

    assert decision.winner.event_date == THU
    assert decision.winner.intersection.kind == IntersectionKind.ALL_DAY
    assert decision.status_updates == {
        THU: EventStatus.SCHEDULED,
        TUE: EventStatus.SUPERSEDED,
    }


def test_longest_window_wins_and_ties_keep_earliest_date():
    rows = [
        WeekRow(MON, {"A": "y", "B": "y", "C": "y", "D": "14-19"}, EventStatus.READY),
        WeekRow(TUE, {"A": "y", "B": "y", "C": "y", "D": "12-18"}, EventStatus.READY),
        WeekRow(THU, {"A": "y", "B": "y", "C": "y", "D": "10-16"}, EventStatus.READY),
    ]
    decision = select_weekly_winner(rows, ROSTER, CONFIG)

    assert decision.winner.event_date == TUE
    assert decision.status_updates[MON] == EventStatus.SUPERSEDED
    assert decision.status_updates[THU] == EventStatus.SUPERSEDED


def test_winner_supersedes_awaiting_rows_but_not_cancelled_ones():
    rows = [
        WeekRow(MON, {"A": "y"}, EventStatus.AWAITING),
        WeekRow(TUE, ALL_YES, EventStatus.READY),
        WeekRow(WED, {"A": "n"}, EventStatus.CANCELLED),
        WeekRow(THU, {}, EventStatus.UNSET),
    ]
    decision = select_weekly_winner(rows, ROSTER, CONFIG)

    assert decision.winner.event_date == TUE
    assert decision.status_updates == {
        TUE: EventStatus.SCHEDULED,
        MON: EventStatus.SUPERSEDED,
        THU: EventStatus.SUPERSEDED,
    }


def test_short_ready_rows_fail_on_duration_when_nothing_wins():
    rows = [
        WeekRow(TUE, {"A": "y", "B": "y", "C": "y", "D": "18-20"}, EventStatus.READY),
        WeekRow(THU, {"A": "y", "B": "?"}, EventStatus.AWAITING),
    ]
    decision = select_weekly_winner(rows, ROSTER, CONFIG)

    assert decision.winner is None
    assert decision.status_updates == {TUE: EventStatus.FAILED_DURATION}


def test_restriction_notice_for_short_row():
    rows = [WeekRow(TUE, {"A": "y", "B": "y", "C": "y", "D": "18-20"}, EventStatus.READY)]
    decision = select_weekly_winner(rows, ROSTER, CONFIG)

    assert len(decision.restriction_notices) == 1
    notice = decision.restriction_notices[0]
    assert notice.event_date == TUE
    assert notice.restricting_participants == ("D",)
    assert notice.participants == ("A", "B", "C")
    assert notice.duration_hours == 24


def test_superseded_short_row_still_gets_restriction_notice():
    rows = [
        WeekRow(MON, ALL_YES, EventStatus.READY),
        WeekRow(WED, {"A": "y", "B": "y", "C": "y", "D": "18-20"}, EventStatus.READY),
    ]
    decision = select_weekly_winner(rows, ROSTER, CONFIG)

    assert decision.winner.event_date == MON
    assert decision.status_updates == {
        MON: EventStatus.SCHEDULED,
        WED: EventStatus.SUPERSEDED,
    }
    assert [n.event_date for n in decision.restriction_notices] == [WED]
    assert decision.restriction_notices[0].restricting_participants == ("D",)


def test_no_restriction_notice_when_nobody_qualifies():
    rows = [WeekRow(TUE, {"A": "y", "B": "18-19", "C": "18-19", "D": "18-19"}, EventStatus.READY)]
    decision = select_weekly_winner(rows, ROSTER, CONFIG)

    assert decision.restriction_notices == []
    assert decision.status_updates == {TUE: EventStatus.FAILED_DURATION}


def test_week_with_existing_event_gets_no_second_one():
    rows = [
        WeekRow(MON, ALL_YES, EventStatus.SCHEDULED),
        WeekRow(THU, ALL_YES, EventStatus.READY),
    ]
    decision = select_weekly_winner(rows, ROSTER, CONFIG)

    assert decision.winner is None
    assert decision.status_updates == {THU: EventStatus.SUPERSEDED}


def test_classifier_is_source_of_truth_for_stale_labels():
    rows = [
        # stored label is stale: everyone has answered since
        WeekRow(TUE, ALL_YES, EventStatus.AWAITING),
        # stored label is stale: someone said no since
        WeekRow(THU, {"A": "y", "B": "n"}, EventStatus.AWAITING),
    ]
    decision = select_weekly_winner(rows, ROSTER, CONFIG)

    assert decision.winner.event_date == TUE
    assert decision.status_updates[THU] == EventStatus.CANCELLED


def test_superseded_rows_are_left_alone():
    rows = [WeekRow(TUE, ALL_YES, EventStatus.SUPERSEDED)]
    decision = select_weekly_winner(rows, ROSTER, CONFIG)

    assert decision.winner is None
    assert decision.status_updates == {}
