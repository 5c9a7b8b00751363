# rollcall/services/intersection_service.py
import enum
from dataclasses import dataclass
from datetime import date, datetime
from typing import Iterable, Optional

from rollcall.logging_config import get_logger
from rollcall.services.response_parser_service import (
    ParsedResponse,
    ResponseKind,
    end_of_day,
    start_of_day,
)

logger = get_logger(__name__, "scheduler")

ALL_DAY_HOURS = 24.0


class IntersectionKind(str, enum.Enum):
    ALL_DAY = "ALL_DAY"
    WINDOW = "WINDOW"
    INFEASIBLE = "INFEASIBLE"


@dataclass(frozen=True)
class IntersectionResult:
    kind: IntersectionKind
    start: Optional[datetime] = None
    end: Optional[datetime] = None

    @property
    def duration_hours(self) -> float:
        if self.kind == IntersectionKind.ALL_DAY:
            return ALL_DAY_HOURS
        if self.kind == IntersectionKind.INFEASIBLE:
            return 0.0
        return (self.end - self.start).total_seconds() / 3600

    @property
    def is_feasible(self) -> bool:
        return self.kind != IntersectionKind.INFEASIBLE


INFEASIBLE = IntersectionResult(IntersectionKind.INFEASIBLE)


def intersect_responses(
    responses: Iterable[ParsedResponse],
    candidate_date: date,
    *,
    min_duration_hours: float,
) -> IntersectionResult:
    """
    Common window for exactly this group of responses on `candidate_date`.

    - NO or MALFORMED anywhere -> INFEASIBLE (the group cannot meet)
    - only YES                 -> ALL_DAY
    - no ranges, some UNKNOWN  -> the whole day as a WINDOW
    - ranges                   -> [latest start, earliest end], INFEASIBLE if
                                  empty or shorter than `min_duration_hours`
    """
    window_start = start_of_day(candidate_date)
    window_end = end_of_day(candidate_date)
    narrowed = False
    all_yes = True
    seen = 0

    for response in responses:
        seen += 1
        if response.kind in (ResponseKind.NO, ResponseKind.MALFORMED):
            return INFEASIBLE
        if response.kind == ResponseKind.UNKNOWN:
            all_yes = False
        elif response.kind == ResponseKind.TIME_RANGE:
            narrowed = True
            window_start = max(window_start, response.start)
            window_end = min(window_end, response.end)

    if seen == 0:
        return INFEASIBLE

    if not narrowed and all_yes:
        return IntersectionResult(IntersectionKind.ALL_DAY)

    if window_start >= window_end:
        return INFEASIBLE

    result = IntersectionResult(IntersectionKind.WINDOW, window_start, window_end)
    if result.duration_hours < min_duration_hours:
        logger.debug(
            "Window %s-%s on %s is below %.2fh",
            window_start.time(),
            window_end.time(),
            candidate_date,
            min_duration_hours,
        )
        return INFEASIBLE

    return result
