"""Court assignment strategies.

Assignment only fills ``Match.court_id``; it never changes who plays whom.
Each active court hosts at most one match per round, so when a round has
more matches than courts the surplus keeps ``court_id=None`` and waits for
a court to free up.
"""

# Padel Pairing
# Copyright (C) 2025  Padel Pairing developers
#
# This program is free software: you can redistribute it and/or modify
# it under the terms of the GNU General Public License as published by
# the Free Software Foundation, either version 3 of the License, or
# (at your option) any later version.
#
# This program is distributed in the hope that it will be useful,
# but WITHOUT ANY WARRANTY; without even the implied warranty of
# MERCHANTABILITY or FITNESS FOR A PARTICULAR PURPOSE.  See the
# GNU General Public License for more details.
#
# You should have received a copy of the GNU General Public License
# along with this program.  If not, see <http://www.gnu.org/licenses/>.

import random
from collections import defaultdict
from dataclasses import replace
from typing import Callable, Dict, Iterable, List, Optional, Sequence, Union

from padelpairing.exceptions import InsufficientCourtsError
from padelpairing.models.enums import CourtStrategy
from padelpairing.models.match import Match
from padelpairing.models.participant import Court
from padelpairing.tournament.validation import ValidationResult
from padelpairing.type_hints import CourtUsage
from padelpairing.utils import make_rng, setup_logger

logger = setup_logger(__name__)

CourtOrdering = Callable[
    [List[Court], Sequence[Match], Optional[int], random.Random], List[Court]
]


def get_court_usage_stats(matches: Iterable[Match]) -> CourtUsage:
    """Count how many matches each court has hosted."""
    usage: CourtUsage = {}
    for match in matches:
        if match.court_id:
            usage[match.court_id] = usage.get(match.court_id, 0) + 1
    return usage


def get_least_used_courts(courts: Sequence[Court], usage: CourtUsage) -> List[Court]:
    """Courts sorted by usage ascending; equal usage keeps the input order."""
    return sorted(courts, key=lambda court: usage.get(court.id, 0))


def _balanced_order(
    courts: List[Court],
    history: Sequence[Match],
    round_number: Optional[int],
    rng: random.Random,
) -> List[Court]:
    ordered = sorted(courts, key=lambda c: c.id)
    if round_number and ordered:
        shift = (round_number - 1) % len(ordered)
        ordered = ordered[shift:] + ordered[:shift]
    return get_least_used_courts(ordered, get_court_usage_stats(history))


def _sequential_order(
    courts: List[Court],
    history: Sequence[Match],
    round_number: Optional[int],
    rng: random.Random,
) -> List[Court]:
    return sorted(courts, key=lambda c: c.id)


def _random_order(
    courts: List[Court],
    history: Sequence[Match],
    round_number: Optional[int],
    rng: random.Random,
) -> List[Court]:
    ordered = sorted(courts, key=lambda c: c.id)
    rng.shuffle(ordered)
    return ordered


COURT_STRATEGIES: Dict[CourtStrategy, CourtOrdering] = {
    CourtStrategy.BALANCED: _balanced_order,
    CourtStrategy.SEQUENTIAL: _sequential_order,
    CourtStrategy.RANDOM: _random_order,
}


def assign_courts(
    matches: Sequence[Match],
    courts: Sequence[Court],
    strategy: CourtStrategy = CourtStrategy.BALANCED,
    previous_matches: Optional[Sequence[Match]] = None,
    round_number: Optional[int] = None,
    rng: Union[None, int, random.Random] = None,
) -> List[Match]:
    """Assign active courts to the matches of one round.

    Args:
        matches: Matches of the round, in priority order
        courts: All courts of the venue; inactive ones are ignored
        strategy: How courts are ordered before being handed out
        previous_matches: Earlier matches, used by ``balanced`` to favour
            the least used courts
        round_number: Round being assigned, rotates ``balanced`` ties
        rng: Seed or generator for ``random``

    Returns:
        Copies of ``matches`` with ``court_id`` set (None for surplus matches)

    Raises:
        InsufficientCourtsError: If there is no active court
    """
    active = [c for c in courts if c.is_active]
    if not active:
        logger.error("Court assignment requested without any active court")
        raise InsufficientCourtsError("No active courts available for assignment")

    strategy = CourtStrategy(strategy)
    order = COURT_STRATEGIES[strategy]
    ordered = order(active, previous_matches or [], round_number, make_rng(rng))

    assigned: List[Match] = []
    for i, match in enumerate(matches):
        court_id = ordered[i].id if i < len(ordered) else None
        assigned.append(replace(match, court_id=court_id))

    waiting = len(matches) - len(ordered)
    if waiting > 0:
        logger.warning(
            f"{waiting} matches wait for a court: {len(matches)} matches, "
            f"{len(ordered)} active courts"
        )
    logger.debug(
        f"Assigned {min(len(matches), len(ordered))} courts using {strategy.value}"
    )
    return assigned


def validate_court_assignments(
    matches: Sequence[Match], courts: Sequence[Court]
) -> ValidationResult:
    """Check courts exist, are active and host one match per round."""
    result = ValidationResult()
    by_id = {court.id: court for court in courts}
    booked: Dict[Optional[int], set] = defaultdict(set)

    for match in matches:
        if match.court_id is None:
            result.add_warning(f"Match {match.id} has no court assigned")
            continue
        court = by_id.get(match.court_id)
        if court is None:
            result.add_error(f"Match {match.id} uses unknown court {match.court_id}")
            continue
        if not court.is_active:
            result.add_error(f"Match {match.id} uses inactive court {court.id}")
        if match.court_id in booked[match.round_number]:
            result.add_error(
                f"Court {match.court_id} is double-booked in round {match.round_number}"
            )
        booked[match.round_number].add(match.court_id)

    return result
