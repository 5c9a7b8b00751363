# rollcall/services/notification_service.py
from dataclasses import dataclass
from datetime import date, datetime
from typing import Iterable, List, Optional, Protocol, Sequence, Tuple

from rollcall.config import SchedulingConfig
from rollcall.logging_config import get_logger
from rollcall.models.candidate_event import EventStatus
from rollcall.schemas.roster import RosterMember
from rollcall.services.intersection_service import IntersectionKind, IntersectionResult
from rollcall.services.response_parser_service import parse_row
from rollcall.services.week_selector_service import RestrictionNotice, WeekRow

logger = get_logger(__name__, "notifications")


class MessageSender(Protocol):
    def send_message(self, content: str) -> int: ...


@dataclass(frozen=True)
class EventScheduledNotice:
    event_date: date
    start: Optional[datetime]
    end: Optional[datetime]
    all_day: bool
    title: str
    link: Optional[str] = None


@dataclass(frozen=True)
class ReminderNotice:
    event_date: date
    maybe_mentions: Tuple[str, ...]
    missing_mentions: Tuple[str, ...]


def mention(member: RosterMember) -> str:
    """Chat mention when the participant allows it, plain name otherwise."""
    if member.allow_mention and member.contact_handle:
        return f"<@{member.contact_handle}>"
    return member.name


def build_scheduled_notice(
    event_date: date,
    intersection: IntersectionResult,
    config: SchedulingConfig,
) -> EventScheduledNotice:
    all_day = intersection.kind == IntersectionKind.ALL_DAY
    return EventScheduledNotice(
        event_date=event_date,
        start=None if all_day else intersection.start,
        end=None if all_day else intersection.end,
        all_day=all_day,
        title=config.event_title,
        link=config.event_link,
    )


def build_reminders(
    rows: Iterable[WeekRow],
    roster: Sequence[RosterMember],
    config: SchedulingConfig,
) -> List[ReminderNotice]:
    """
    Nudge the stragglers of rows that are close to ready.

    Only AWAITING rows whose share of YES / time answers reaches
    REMINDER_THRESHOLD_PERCENTAGE get a reminder. The rest of the roster is
    split into "answered maybe / unclear" and "no response yet".
    """
    if not roster:
        return []

    reminders: List[ReminderNotice] = []
    for row in sorted(rows, key=lambda r: r.event_date):
        if EventStatus(row.status) != EventStatus.AWAITING:
            continue

        parsed = parse_row(row.cells, roster, row.event_date, config)
        ready = sum(1 for p in parsed.values() if p.counts_as_ready)
        if ready / len(roster) < config.reminder_threshold_percentage:
            continue

        maybe: List[str] = []
        missing: List[str] = []
        for member in roster:
            response = parsed[member.name]
            if response.counts_as_ready:
                continue
            if response.is_blank:
                missing.append(mention(member))
            else:
                maybe.append(mention(member))

        if maybe or missing:
            reminders.append(
                ReminderNotice(
                    event_date=row.event_date,
                    maybe_mentions=tuple(maybe),
                    missing_mentions=tuple(missing),
                )
            )

    return reminders


def _format_date(d: date) -> str:
    return d.strftime("%A %d %B %Y")


def render_scheduled(notice: EventScheduledNotice) -> str:
    if notice.all_day:
        when = "all day"
    else:
        when = f"{notice.start:%H:%M}-{notice.end:%H:%M}"
    text = f"{notice.title} is on for {_format_date(notice.event_date)} ({when})."
    if notice.link:
        text += f"\n{notice.link}"
    return text


def render_reminder(notice: ReminderNotice) -> str:
    lines = [f"Almost there for {_format_date(notice.event_date)}!"]
    if notice.missing_mentions:
        lines.append("No response yet: " + ", ".join(notice.missing_mentions))
    if notice.maybe_mentions:
        lines.append("Please firm up your maybe: " + ", ".join(notice.maybe_mentions))
    return "\n".join(lines)


def render_restriction(notice: RestrictionNotice, roster: Sequence[RosterMember]) -> str:
    by_name = {m.name: m for m in roster}
    blamed = [mention(by_name[n]) if n in by_name else n for n in notice.restricting_participants]

    lines = [
        f"{_format_date(notice.event_date)} is too short with everyone, but "
        f"{len(notice.participants)} of {len(roster)} could play for "
        f"{notice.duration_hours:.1f}h."
    ]
    if blamed:
        lines.append("Can you stretch your window? " + ", ".join(blamed))
    return "\n".join(lines)


def dispatch_notifications(client: MessageSender, messages: Iterable[str]) -> int:
    """
    Send each message on its own; a failed send is logged and the next
    message still goes out. Returns how many were delivered.
    """
    delivered = 0
    for content in messages:
        try:
            client.send_message(content)
        except Exception:
            logger.exception("Webhook delivery failed for message: %.60s", content)
            continue
        delivered += 1
    return delivered
