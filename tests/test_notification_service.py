# tests/test_notification_service.py
from datetime import date, datetime

import requests

from rollcall.config import SchedulingConfig
from rollcall.models.candidate_event import EventStatus
from rollcall.schemas.roster import RosterMember
from rollcall.services.intersection_service import IntersectionKind, IntersectionResult
from rollcall.services.notification_service import (
    build_reminders,
    build_scheduled_notice,
    dispatch_notifications,
    mention,
    render_reminder,
    render_restriction,
    render_scheduled,
)
from rollcall.services.week_selector_service import RestrictionNotice, WeekRow

TUE = date(2025, 1, 7)
CONFIG = SchedulingConfig(reminder_threshold_percentage=0.5, event_title="Board games")
ROSTER = [
    RosterMember(name="A", contact_handle="111", allow_mention=True),
    RosterMember(name="B", contact_handle="222", allow_mention=False),
    RosterMember(name="C"),
    RosterMember(name="D", contact_handle="444"),
]


class FakeWebhookClient:
    def __init__(self, fail_on=()):
        self.sent = []
        self.fail_on = set(fail_on)

    def send_message(self, content: str) -> int:
        if content in self.fail_on:
            raise requests.ConnectionError("boom")
        self.sent.append(content)
        return 204


def test_mention_respects_preference():
    assert mention(ROSTER[0]) == "<@111>"
    assert mention(ROSTER[1]) == "B"
    assert mention(ROSTER[2]) == "C"


def test_reminder_groups_maybe_and_missing():
    rows = [WeekRow(TUE, {"A": "y", "B": "?", "C": "18-22"}, EventStatus.AWAITING)]

    reminders = build_reminders(rows, ROSTER, CONFIG)

    assert len(reminders) == 1
    assert reminders[0].maybe_mentions == ("B",)
    assert reminders[0].missing_mentions == ("<@444>",)

    text = render_reminder(reminders[0])
    assert "No response yet: <@444>" in text
    assert "maybe: B" in text


def test_no_reminder_below_threshold_or_for_other_statuses():
    below = WeekRow(TUE, {"A": "y"}, EventStatus.AWAITING)
    ready = WeekRow(TUE, {"A": "y", "B": "y", "C": "y", "D": "y"}, EventStatus.READY)

    assert build_reminders([below, ready], ROSTER, CONFIG) == []


def test_malformed_answer_is_grouped_with_maybe():
    rows = [WeekRow(TUE, {"A": "y", "B": "y", "C": "later", "D": ""}, EventStatus.AWAITING)]
    reminder = build_reminders(rows, ROSTER, CONFIG)[0]
    assert reminder.maybe_mentions == ("C",)
    assert reminder.missing_mentions == ("<@444>",)


def test_scheduled_message_for_window_and_all_day():
    window = IntersectionResult(
        IntersectionKind.WINDOW, datetime(2025, 1, 7, 18, 0), datetime(2025, 1, 7, 22, 30)
    )
    text = render_scheduled(build_scheduled_notice(TUE, window, CONFIG))
    assert "Board games" in text
    assert "(18:00-22:30)" in text

    all_day = build_scheduled_notice(TUE, IntersectionResult(IntersectionKind.ALL_DAY), CONFIG)
    assert all_day.all_day
    assert all_day.start is None
    assert "all day" in render_scheduled(all_day)


def test_scheduled_message_includes_link():
    config = SchedulingConfig(event_link="https://example.com/table")
    notice = build_scheduled_notice(TUE, IntersectionResult(IntersectionKind.ALL_DAY), config)
    assert render_scheduled(notice).endswith("https://example.com/table")


def test_restriction_message_names_restricting_participants():
    notice = RestrictionNotice(TUE, ("A", "C"), ("B", "D"), 5.0)
    text = render_restriction(notice, ROSTER)
    assert "2 of 4" in text
    assert "5.0h" in text
    assert "<@111>, C" in text


def test_dispatch_isolates_failures():
    client = FakeWebhookClient(fail_on={"second"})

    delivered = dispatch_notifications(client, ["first", "second", "third"])

    assert delivered == 2
    assert client.sent == ["first", "third"]


class BrokenSender:
    def __init__(self):
        self.sent = []

    def send_message(self, content: str) -> int:
        if content == "first":
            raise RuntimeError("sender misconfigured")
        self.sent.append(content)
        return 200


def test_dispatch_survives_non_http_sender_errors():
    client = BrokenSender()

    delivered = dispatch_notifications(client, ["first", "second"])

    assert delivered == 1
    assert client.sent == ["second"]
