"""Swiss-system pairing.

Round 1 has no standings to go by, so the field is ordered by skill level
(or shuffled) and paired with the configured method:

- ``slide``: position ``i`` meets ``i + n/2``
- ``fold``: position ``i`` meets ``n - 1 - i``
- ``accelerated``: the field is split into a virtual top and bottom half and
  each half is slide-paired on its own, so strong teams meet early

From round 2 units are ranked by standing and paired top-down with the
nearest-ranked opponent they have not met. A bounded backtracking search
revises a greedy choice only when keeping it would leave someone unpaired.
When no rematch-free round exists the no-rematch rule is relaxed for the
lowest-ranked units first, two at a time.
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

import math
import random
from dataclasses import dataclass, field
from typing import (
    Callable,
    Dict,
    Iterable,
    List,
    Optional,
    Sequence,
    Set,
    Tuple,
    Union,
)

from padelpairing.constants import (
    ACCELERATED_ROUNDS,
    MAX_PAIRING_STEPS,
    MAX_SWISS_ROUNDS,
    MIN_SWISS_ROUNDS,
    MIN_TEAMS,
    SMALL_FIELD_SIZE,
    SMALL_FIELD_SWISS_ROUNDS,
)
from padelpairing.exceptions import UnresolvablePairingError
from padelpairing.models.enums import PairingMethod
from padelpairing.models.match import Match
from padelpairing.models.pairing_history import PairingHistory
from padelpairing.models.participant import Participant, Team
from padelpairing.models.standing import Standing
from padelpairing.tournament.standings import rank_teams
from padelpairing.tournament.teams import (
    has_skill_levels,
    make_match,
    rank_by_skill,
    require_teams,
    resolve_units,
)
from padelpairing.tournament.validation import ValidationResult
from padelpairing.type_hints import UnitPairing
from padelpairing.utils import make_rng, setup_logger

logger = setup_logger(__name__)


@dataclass
class SwissRoundConfig:
    """Inputs for pairing one Swiss round.

    Attributes:
        round_number: Round to pair (1-indexed)
        participants: Checked-in participants
        standings: Current standings (ignored for round 1)
        previous_matches: Every earlier match, for rematch avoidance
        pairing_method: Round-1 method; ``accelerated`` also shapes the
            following rounds
        teams: Fixed doubles teams, overrides reconstruction
        previous_bye_ids: Team or player ids that already had a bye
        allow_repeat_pairings: Relax the no-rematch rule when needed
        seed: Seed or generator for the round-1 shuffle
        round_id: Id written onto the generated matches
    """

    round_number: int
    participants: List[Participant]
    standings: List[Standing] = field(default_factory=list)
    previous_matches: List[Match] = field(default_factory=list)
    pairing_method: PairingMethod = PairingMethod.SLIDE
    teams: Optional[List[Team]] = None
    previous_bye_ids: List[str] = field(default_factory=list)
    allow_repeat_pairings: bool = True
    seed: Union[None, int, random.Random] = None
    round_id: str = ""


@dataclass
class SwissPairingResult:
    """Pairings of one Swiss round.

    Attributes:
        matches: New matches, higher-ranked unit in slot 1
        byes: Units sitting out with a bye
        repeat_pairings: ``(team1_id, team2_id)`` of every accepted rematch
    """

    matches: List[Match] = field(default_factory=list)
    byes: List[Team] = field(default_factory=list)
    repeat_pairings: List[Tuple[str, str]] = field(default_factory=list)

    @property
    def bye_ids(self) -> List[str]:
        return [team.id for team in self.byes]


# ========== Round counts ==========


def calculate_swiss_rounds(unit_count: int) -> int:
    """Recommended Swiss round count: ``ceil(log2 n)`` clamped to 5..7."""
    if unit_count < SMALL_FIELD_SIZE:
        return SMALL_FIELD_SWISS_ROUNDS
    calculated = math.ceil(math.log2(unit_count))
    return min(max(calculated, MIN_SWISS_ROUNDS), MAX_SWISS_ROUNDS)


def has_played_before(team_a: Team, team_b: Team, matches: Iterable[Match]) -> bool:
    return any(match.opposes(team_a, team_b) for match in matches)


# ========== Round 1 ==========


def _slide(units: Sequence[Team]) -> List[Tuple[Team, Team]]:
    half = len(units) // 2
    return [(units[i], units[i + half]) for i in range(half)]


def _fold(units: Sequence[Team]) -> List[Tuple[Team, Team]]:
    n = len(units)
    return [(units[i], units[n - 1 - i]) for i in range(n // 2)]


def _top_half_size(unit_count: int) -> int:
    """Size of the virtual top group, rounded up to an even count."""
    top = unit_count // 2
    return top + 1 if top % 2 else top


def _accelerated(units: Sequence[Team]) -> List[Tuple[Team, Team]]:
    top = _top_half_size(len(units))
    return _slide(units[:top]) + _slide(units[top:])


RoundOneMethod = Callable[[Sequence[Team]], List[Tuple[Team, Team]]]

ROUND_ONE_METHODS: Dict[PairingMethod, RoundOneMethod] = {
    PairingMethod.SLIDE: _slide,
    PairingMethod.FOLD: _fold,
    PairingMethod.ACCELERATED: _accelerated,
}


def _initial_order(
    units: List[Team], participants: Sequence[Participant], rng: random.Random
) -> List[Team]:
    if has_skill_levels(participants):
        return rank_by_skill(units, participants)
    shuffled = list(units)
    rng.shuffle(shuffled)
    return shuffled


# ========== Rounds 2+ ==========


def _search_pairings(
    ranked: Sequence[Team], history: PairingHistory, relaxed_from: int
) -> Optional[List[UnitPairing]]:
    """Depth-first pairing over ranked units.

    Candidates are tried nearest-ranked first, so the first complete
    solution equals the greedy one whenever greedy does not deadlock. Units
    ranked at or below ``relaxed_from`` may rematch each other, but an
    unplayed opponent is still preferred. Returns None when no pairing exists
    or the step budget runs out.
    """
    n = len(ranked)
    used = [False] * n
    pairs: List[UnitPairing] = []
    steps = 0

    def allowed(i: int, j: int) -> bool:
        if not history.have_played(ranked[i], ranked[j]):
            return True
        return i >= relaxed_from and j >= relaxed_from

    def search() -> bool:
        nonlocal steps
        first = next((i for i in range(n) if not used[i]), None)
        if first is None:
            return True
        used[first] = True
        candidates = [
            j for j in range(first + 1, n) if not used[j] and allowed(first, j)
        ]
        candidates.sort(
            key=lambda j: (history.have_played(ranked[first], ranked[j]), j)
        )
        for j in candidates:
            steps += 1
            if steps > MAX_PAIRING_STEPS:
                break
            used[j] = True
            pairs.append((first, j))
            if search():
                return True
            pairs.pop()
            used[j] = False
        used[first] = False
        return False

    return pairs if search() else None


def _pair_ranked(
    ranked: List[Team], history: PairingHistory, allow_repeats: bool
) -> List[Tuple[Team, Team]]:
    n = len(ranked)
    result = _search_pairings(ranked, history, relaxed_from=n)
    relaxed = 0
    while result is None and allow_repeats and relaxed < n:
        relaxed = min(relaxed + 2, n)
        logger.warning(
            f"No rematch-free pairing, relaxing the {relaxed} lowest-ranked units"
        )
        result = _search_pairings(ranked, history, relaxed_from=n - relaxed)

    if result is None:
        logger.error(f"Unable to pair {n} units without rematches")
        raise UnresolvablePairingError(
            f"No valid pairing exists for {n} units"
            + ("" if allow_repeats else " without repeat pairings")
        )
    return [(ranked[i], ranked[j]) for i, j in result]


def _pair_later_round(
    ranked: List[Team],
    history: PairingHistory,
    method: PairingMethod,
    round_number: int,
    allow_repeats: bool,
) -> List[Tuple[Team, Team]]:
    if method == PairingMethod.ACCELERATED and round_number <= ACCELERATED_ROUNDS:
        top = _top_half_size(len(ranked))
        try:
            return _pair_ranked(ranked[:top], history, False) + _pair_ranked(
                ranked[top:], history, False
            )
        except UnresolvablePairingError:
            logger.info(
                "Accelerated groups cannot be paired apart, pairing the full field"
            )
    return _pair_ranked(ranked, history, allow_repeats)


# ========== Byes ==========


def _had_bye(unit: Team, previous_bye_ids: Set[str]) -> bool:
    return unit.id in previous_bye_ids or any(
        pid in previous_bye_ids for pid in unit.player_ids
    )


def select_bye(ranked: Sequence[Team], previous_bye_ids: Iterable[str]) -> Team:
    """Lowest-ranked unit without a bye yet, else the lowest-ranked unit."""
    previous = set(previous_bye_ids)
    for unit in reversed(ranked):
        if not _had_bye(unit, previous):
            return unit
    return ranked[-1]


# ========== Entry point ==========


def generate_swiss_round(
    config: SwissRoundConfig, is_doubles: bool = True
) -> SwissPairingResult:
    """Pair one Swiss round.

    Args:
        config: Round inputs
        is_doubles: Pair doubles teams instead of single players

    Returns:
        SwissPairingResult with the new matches, the bye (if the field is odd)
        and every rematch that had to be accepted

    Raises:
        InsufficientParticipantsError: If fewer than two units are available
        TeamFormationError: If doubles teams cannot be formed
        UnresolvablePairingError: If the round cannot be paired
    """
    units = resolve_units(
        config.participants, is_doubles, config.teams, config.previous_matches
    )
    require_teams(units, MIN_TEAMS, is_doubles)
    method = PairingMethod(config.pairing_method)

    if config.round_number <= 1:
        ranked = _initial_order(units, config.participants, make_rng(config.seed))
    else:
        ranked = rank_teams(units, config.standings)

    result = SwissPairingResult()
    if len(ranked) % 2:
        bye = select_bye(ranked, config.previous_bye_ids)
        ranked.remove(bye)
        result.byes.append(bye)
        logger.info(f"Round {config.round_number}: bye for {bye}")

    history = PairingHistory.from_matches(config.previous_matches)
    if config.round_number <= 1:
        pairs = ROUND_ONE_METHODS[method](ranked)
    else:
        pairs = _pair_later_round(
            ranked,
            history,
            method,
            config.round_number,
            config.allow_repeat_pairings,
        )

    for team_a, team_b in pairs:
        if history.have_played(team_a, team_b):
            result.repeat_pairings.append((team_a.id, team_b.id))
            logger.warning(
                f"Round {config.round_number}: repeat pairing {team_a} vs {team_b}"
            )
        else:
            logger.debug(f"Round {config.round_number}: {team_a} vs {team_b}")
        result.matches.append(
            make_match(
                team_a,
                team_b,
                round_number=config.round_number,
                round_id=config.round_id,
            )
        )

    logger.info(
        f"Paired Swiss round {config.round_number} ({method.value}): "
        f"{len(result.matches)} matches, {len(result.byes)} byes"
    )
    return result


def validate_swiss_round(
    matches: Sequence[Match], previous_matches: Sequence[Match]
) -> ValidationResult:
    """Check nobody plays twice in the round; rematches are warnings."""
    result = ValidationResult()
    appearances: Dict[str, int] = {}
    for match in matches:
        for player_id in match.player_ids:
            appearances[player_id] = appearances.get(player_id, 0) + 1
    for player_id, count in appearances.items():
        if count > 1:
            result.add_error(
                f"Player {player_id} appears {count} times in the round"
            )

    history = PairingHistory.from_matches(previous_matches)
    for match in matches:
        if match.has_both_teams and history.have_played(match.team1, match.team2):
            result.add_warning(f"{match.team1} and {match.team2} have played before")
    return result
