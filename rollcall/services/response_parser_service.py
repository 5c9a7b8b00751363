# rollcall/services/response_parser_service.py
import enum
import re
from dataclasses import dataclass
from datetime import date, datetime, time, timedelta
from typing import Dict, Mapping, Optional, Sequence

from rollcall.config import SchedulingConfig
from rollcall.schemas.roster import RosterMember

# H, H:MM or H:MM:SS
_TIME_PATTERN = r"(\d{1,2})(?::(\d{1,2})(?::(\d{1,2}))?)?"
_SINGLE_TIME_RE = re.compile(rf"^{_TIME_PATTERN}$")
_RANGE_RE = re.compile(rf"^{_TIME_PATTERN}\s*-\s*{_TIME_PATTERN}$")


class ResponseKind(str, enum.Enum):
    YES = "YES"
    NO = "NO"
    UNKNOWN = "UNKNOWN"
    TIME_RANGE = "TIME_RANGE"
    MALFORMED = "MALFORMED"


@dataclass(frozen=True)
class ParsedResponse:
    kind: ResponseKind
    start: Optional[datetime] = None
    end: Optional[datetime] = None
    raw: str = ""

    @property
    def duration_hours(self) -> Optional[float]:
        if self.kind != ResponseKind.TIME_RANGE:
            return None
        return (self.end - self.start).total_seconds() / 3600

    @property
    def is_blank(self) -> bool:
        return self.kind == ResponseKind.UNKNOWN and not self.raw

    @property
    def counts_as_ready(self) -> bool:
        """YES or a concrete time range: the participant has committed."""
        return self.kind in (ResponseKind.YES, ResponseKind.TIME_RANGE)


def start_of_day(candidate_date: date) -> datetime:
    return datetime.combine(candidate_date, time.min)


def end_of_day(candidate_date: date) -> datetime:
    # 23:59:59.999, the last instant a same-day window may reach
    return datetime.combine(candidate_date, time(23, 59, 59, 999000))


def _to_time(hour: str, minute: Optional[str], second: Optional[str]) -> Optional[time]:
    h = int(hour)
    m = int(minute) if minute is not None else 0
    s = int(second) if second is not None else 0
    if not (0 <= h <= 23 and 0 <= m <= 59 and 0 <= s <= 59):
        return None
    return time(h, m, s)


def parse_response(
    text: Optional[str],
    candidate_date: date,
    config: SchedulingConfig,
) -> ParsedResponse:
    """
    Classify one raw response cell for `candidate_date`.

    - blank                   -> UNKNOWN
    - yes / no / maybe token  -> YES / NO / UNKNOWN
    - "18-22", "9:30-13:00"   -> TIME_RANGE on the candidate date
    - "18", "19:30"           -> TIME_RANGE lasting SHORT_EVENT_WARNING_HOURS
                                 (clamped to the end of the day)
    - anything else           -> MALFORMED

    Never raises; malformed input is a classification, not an error.
    """
    normalized = (text or "").strip().lower()

    if not normalized:
        return ParsedResponse(ResponseKind.UNKNOWN)
    if normalized == config.yes_token:
        return ParsedResponse(ResponseKind.YES, raw=normalized)
    if normalized == config.no_token:
        return ParsedResponse(ResponseKind.NO, raw=normalized)
    if normalized == config.maybe_token:
        return ParsedResponse(ResponseKind.UNKNOWN, raw=normalized)

    range_match = _RANGE_RE.match(normalized)
    if range_match:
        groups = range_match.groups()
        start_t = _to_time(*groups[:3])
        end_t = _to_time(*groups[3:])
        if start_t is None or end_t is None or start_t >= end_t:
            return ParsedResponse(ResponseKind.MALFORMED, raw=normalized)
        return ParsedResponse(
            ResponseKind.TIME_RANGE,
            start=datetime.combine(candidate_date, start_t),
            end=datetime.combine(candidate_date, end_t),
            raw=normalized,
        )

    single_match = _SINGLE_TIME_RE.match(normalized)
    if single_match:
        start_t = _to_time(*single_match.groups())
        if start_t is None:
            return ParsedResponse(ResponseKind.MALFORMED, raw=normalized)
        start = datetime.combine(candidate_date, start_t)
        end = min(
            start + timedelta(hours=config.short_event_warning_hours),
            end_of_day(candidate_date),
        )
        return ParsedResponse(ResponseKind.TIME_RANGE, start=start, end=end, raw=normalized)

    return ParsedResponse(ResponseKind.MALFORMED, raw=normalized)


def parse_row(
    cells: Mapping[str, Optional[str]],
    roster: Sequence[RosterMember],
    candidate_date: date,
    config: SchedulingConfig,
) -> Dict[str, ParsedResponse]:
    """
    Parse the cells of a date row for roster participants only, in roster
    order. Missing cells are treated as blank; stray names are dropped.
    """
    return {
        member.name: parse_response(cells.get(member.name), candidate_date, config)
        for member in roster
    }
