# rollcall/services/subgroup_service.py
import math
from dataclasses import dataclass, field
from datetime import date
from itertools import combinations
from typing import Iterator, Mapping, Sequence, Tuple

from rollcall.config import SchedulingConfig
from rollcall.logging_config import get_logger
from rollcall.schemas.roster import RosterMember
from rollcall.services.intersection_service import (
    INFEASIBLE,
    IntersectionResult,
    intersect_responses,
)
from rollcall.services.response_parser_service import ParsedResponse, ResponseKind

logger = get_logger(__name__, "scheduler")


@dataclass(frozen=True)
class OptimalCombination:
    participants: Tuple[str, ...] = ()
    intersection: IntersectionResult = INFEASIBLE
    restricting_participants: Tuple[str, ...] = field(default_factory=tuple)

    @property
    def duration_hours(self) -> float:
        return self.intersection.duration_hours

    @property
    def qualifies(self) -> bool:
        return bool(self.participants)


def minimum_group_size(roster_size: int, threshold_percentage: float) -> int:
    return math.ceil(roster_size * threshold_percentage)


def find_restricting_participants(
    responses: Mapping[str, ParsedResponse],
    min_event_duration_hours: float,
) -> Tuple[str, ...]:
    """
    Participants whose own time range is shorter than the event minimum.

    YES / NO / UNKNOWN answers never restrict: only a concrete window can
    be too short on its own.
    """
    return tuple(
        name
        for name, response in responses.items()
        if response.kind == ResponseKind.TIME_RANGE
        and response.duration_hours < min_event_duration_hours
    )


def iter_subsets(names: Sequence[str], size: int) -> Iterator[Tuple[str, ...]]:
    """Fixed-size subsets in ascending index order (deterministic)."""
    return combinations(names, size)


def find_optimal_combination(
    responses: Mapping[str, ParsedResponse],
    roster: Sequence[RosterMember],
    candidate_date: date,
    config: SchedulingConfig,
) -> OptimalCombination:
    """
    Largest group of participants that can still meet for
    MIN_EVENT_DURATION_HOURS on `candidate_date`.

    Strategy:
      - Full roster already long enough -> everyone, nothing to blame
      - Otherwise drop the restricting participants and try every subset,
        from the biggest pool down to ceil(roster * threshold)
      - The first qualifying subset (largest size, earliest in roster
        order) wins; if none qualifies the result is empty

    `responses` must be keyed by roster name (see parse_row). It is only
    read, never modified.
    """
    names = [member.name for member in roster if member.name in responses]
    min_event = config.min_event_duration_hours
    min_consideration = config.min_consideration_duration_hours

    restricting = find_restricting_participants(
        {name: responses[name] for name in names}, min_event
    )

    if not names:
        return OptimalCombination(restricting_participants=restricting)

    full = intersect_responses(
        (responses[name] for name in names),
        candidate_date,
        min_duration_hours=min_consideration,
    )
    if full.duration_hours >= min_event:
        return OptimalCombination(participants=tuple(names), intersection=full)

    pool = [name for name in names if name not in restricting]
    min_size = max(
        1, minimum_group_size(len(roster), config.player_combination_threshold_percentage)
    )

    if len(pool) < min_size:
        logger.debug(
            "%s: only %d non-restricting participants, need %d",
            candidate_date,
            len(pool),
            min_size,
        )
        return OptimalCombination(restricting_participants=restricting)

    for size in range(len(pool), min_size - 1, -1):
        for subset in iter_subsets(pool, size):
            intersection = intersect_responses(
                (responses[name] for name in subset),
                candidate_date,
                min_duration_hours=min_consideration,
            )
            if intersection.duration_hours >= min_event:
                logger.debug(
                    "%s: %d/%d participants can meet for %.2fh",
                    candidate_date,
                    size,
                    len(roster),
                    intersection.duration_hours,
                )
                return OptimalCombination(
                    participants=subset,
                    intersection=intersection,
                    restricting_participants=restricting,
                )

    return OptimalCombination(restricting_participants=restricting)
