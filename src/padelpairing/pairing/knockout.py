"""Knockout bracket generation (single and double elimination).

Brackets are built in three steps:

1. A full skeleton of :class:`BracketPosition` rows is laid out for the
   power-of-two bracket, each slot recording the upstream position and
   outcome that fills it.
2. Seeds are placed in standard bracket order, empty slots become dead.
3. Dead slots are collapsed: a position with one dead slot passes its live
   entrant straight through (walkover), a position with two dead slots
   disappears. Upstream links are then derived from the surviving feeds and
   the arena is re-indexed.

Only positions that will really be played survive, so every remaining
position gets a :class:`Match` row (except the conditional bracket reset).
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
from typing import Dict, List, Optional, Sequence, Tuple, Union

from padelpairing.constants import (
    BRACKET_MATCH_ID,
    BRACKET_RESET_ROUND_NAME,
    GRAND_FINAL_ROUND_NAME,
    LOSERS_ROUND_NAME,
    MIN_PARTICIPANTS,
    MIN_TEAMS,
    ROUND_NAMES,
    TEAM_ID_SEPARATOR,
    THIRD_PLACE_ROUND_NAME,
)
from padelpairing.exceptions import InvalidConfigurationError
from padelpairing.models.bracket import Bracket, BracketPosition, Feed
from padelpairing.models.enums import BracketType, SeedingMethod, TournamentType
from padelpairing.models.match import Match
from padelpairing.models.participant import Participant, Team
from padelpairing.tournament.teams import (
    form_teams,
    rank_by_skill,
    require_participants,
    require_teams,
)
from padelpairing.tournament.validation import ValidationResult
from padelpairing.type_hints import LOSER, WINNER
from padelpairing.utils import make_rng, setup_logger

logger = setup_logger(__name__)


class _Dead:
    """Marker for a slot that can never be filled."""

    def __repr__(self) -> str:
        return "DEAD"


class _Open:
    """Marker for a round-1 slot whose team is not known yet (Monrad skeleton)."""

    def __repr__(self) -> str:
        return "OPEN"


DEAD = _Dead()
OPEN = _Open()

SlotState = Union[Team, Feed, _Dead, _Open]


# ========== Bracket arithmetic ==========


def calculate_bracket_size(team_count: int) -> int:
    """Next power of two at or above ``team_count`` (at least 2)."""
    size = 2
    while size < team_count:
        size *= 2
    return size


def calculate_bye_count(team_count: int) -> int:
    return calculate_bracket_size(team_count) - team_count


def calculate_knockout_rounds(team_count: int) -> int:
    return calculate_bracket_size(team_count).bit_length() - 1


def is_power_of_two(value: int) -> bool:
    return value >= 2 and value & (value - 1) == 0


def get_round_name(round_number: int, total_rounds: int) -> str:
    """Name a main-bracket round by the number of teams still in it."""
    remaining = 2 ** (total_rounds - round_number + 1)
    return ROUND_NAMES.get(remaining, f"Round of {remaining}")


def bracket_order(size: int) -> List[int]:
    """Seed numbers in slot order for a power-of-two bracket.

    Each expansion step replaces seed ``s`` with the pair ``(s, 2n + 1 - s)``
    where ``n`` is the current length, so seed 1 and seed 2 can only meet in
    the final and the top seeds face the bottom ones first::

        >>> bracket_order(8)
        [1, 8, 4, 5, 2, 7, 3, 6]
    """
    if not is_power_of_two(size):
        raise InvalidConfigurationError(
            f"Bracket size must be a power of two, got {size}"
        )
    order = [1, 2]
    while len(order) < size:
        total = 2 * len(order) + 1
        order = [seed for s in order for seed in (s, total - s)]
    return order


# ========== Seeding ==========


def _resolve_manual_order(
    teams: Sequence[Team], seed_order: Sequence[str]
) -> List[Team]:
    """Order teams by explicit seed ids (team ids or any member id).

    Teams not named in ``seed_order`` keep their input order after the named
    ones.
    """
    remaining = list(teams)
    ordered: List[Team] = []
    for entry in seed_order:
        members = set(entry.split(TEAM_ID_SEPARATOR))
        match = next(
            (t for t in remaining if t.id == entry or members & set(t.player_ids)),
            None,
        )
        if match is None:
            raise InvalidConfigurationError(f"Seed {entry} does not match any team")
        remaining.remove(match)
        ordered.append(match)
    return ordered + remaining


def seed_teams(
    teams: Sequence[Team],
    participants: Sequence[Participant] = (),
    seeding: SeedingMethod = SeedingMethod.RANKED,
    seed_order: Optional[Sequence[str]] = None,
    rng: Union[None, int, random.Random] = None,
) -> List[Team]:
    """Order teams from seed 1 downwards.

    ``ranked`` sorts by average member skill level (strongest first, stable
    for ties and unrated teams), ``random`` shuffles with ``rng`` and
    ``manual`` follows ``seed_order``.
    """
    seeding = SeedingMethod(seeding)
    if seeding == SeedingMethod.MANUAL:
        return _resolve_manual_order(teams, seed_order or [])
    if seeding == SeedingMethod.RANDOM:
        shuffled = list(teams)
        make_rng(rng).shuffle(shuffled)
        return shuffled
    return rank_by_skill(teams, participants)


# ========== Skeleton ==========


class _ArenaBuilder:
    """Lays out raw bracket positions before dead slots are collapsed."""

    def __init__(self, tournament_id: str):
        self.tournament_id = tournament_id
        self.positions: List[BracketPosition] = []
        self._lookup: Dict[Tuple[BracketType, int, int], BracketPosition] = {}

    def add(
        self,
        bracket_type: BracketType,
        round_number: int,
        position: int,
        round_name: str,
        is_conditional: bool = False,
    ) -> BracketPosition:
        prefix = f"{self.tournament_id}-" if self.tournament_id else ""
        row = BracketPosition(
            index=len(self.positions),
            match_id=BRACKET_MATCH_ID.format(
                prefix=prefix,
                bracket=bracket_type.value,
                round=round_number,
                position=position,
            ),
            bracket_type=bracket_type,
            round_number=round_number,
            position=position,
            round_name=round_name,
            is_conditional=is_conditional,
        )
        self.positions.append(row)
        self._lookup[(bracket_type, round_number, position)] = row
        return row

    def at(
        self, bracket_type: BracketType, round_number: int, position: int
    ) -> BracketPosition:
        return self._lookup[(bracket_type, round_number, position)]

    @staticmethod
    def link(
        source: BracketPosition, outcome: str, target: BracketPosition, slot: int
    ) -> None:
        feed = Feed(source.index, outcome)
        if slot == 1:
            target.team1_from = feed
        else:
            target.team2_from = feed

    def link_pair(
        self,
        bracket_type: BracketType,
        round_number: int,
        position: int,
        outcome: str,
        target: BracketPosition,
    ) -> None:
        """Feed ``target`` from positions ``2p`` (slot 1) and ``2p + 1`` (slot 2)."""
        upper = self.at(bracket_type, round_number, 2 * position)
        lower = self.at(bracket_type, round_number, 2 * position + 1)
        self.link(upper, outcome, target, 1)
        self.link(lower, outcome, target, 2)

    def main_bracket(self, bracket_size: int) -> int:
        """Add every main round; winners feed slot 1 from even positions, 2 from odd."""
        total_rounds = bracket_size.bit_length() - 1
        for round_number in range(1, total_rounds + 1):
            name = get_round_name(round_number, total_rounds)
            for position in range(bracket_size >> round_number):
                row = self.add(BracketType.MAIN, round_number, position, name)
                if round_number > 1:
                    self.link_pair(
                        BracketType.MAIN, round_number - 1, position, WINNER, row
                    )
        return total_rounds

    def third_place(self, total_rounds: int) -> None:
        row = self.add(BracketType.THIRD_PLACE, 1, 0, THIRD_PLACE_ROUND_NAME)
        self.link_pair(BracketType.MAIN, total_rounds - 1, 0, LOSER, row)

    def losers_bracket(self, bracket_size: int, total_rounds: int) -> int:
        """Add the losers bracket and return its round count ``2(k - 1)``.

        Odd losers rounds pair survivors among themselves (round 1 pairs main
        round-1 losers), even rounds bring in the losers of main round
        ``m + 1`` in reversed order so rematches are pushed back.
        """
        losers_rounds = 2 * (total_rounds - 1)
        for round_number in range(1, losers_rounds + 1):
            level = (round_number + 1) // 2
            count = bracket_size >> (level + 1)
            name = LOSERS_ROUND_NAME.format(number=round_number)
            for position in range(count):
                row = self.add(BracketType.LOSERS, round_number, position, name)
                if round_number == 1:
                    self.link_pair(BracketType.MAIN, 1, position, LOSER, row)
                elif round_number % 2 == 0:
                    survivor = self.at(BracketType.LOSERS, round_number - 1, position)
                    dropped = self.at(
                        BracketType.MAIN, round_number // 2 + 1, count - 1 - position
                    )
                    self.link(survivor, WINNER, row, 1)
                    self.link(dropped, LOSER, row, 2)
                else:
                    self.link_pair(
                        BracketType.LOSERS, round_number - 1, position, WINNER, row
                    )
        return losers_rounds

    def grand_final(self, total_rounds: int, losers_rounds: int) -> None:
        final = self.add(BracketType.GRAND_FINAL, 1, 0, GRAND_FINAL_ROUND_NAME)
        self.link(self.at(BracketType.MAIN, total_rounds, 0), WINNER, final, 1)
        if losers_rounds:
            self.link(self.at(BracketType.LOSERS, losers_rounds, 0), WINNER, final, 2)
        else:
            self.link(self.at(BracketType.MAIN, total_rounds, 0), LOSER, final, 2)
        reset = self.add(
            BracketType.GRAND_FINAL, 2, 0, BRACKET_RESET_ROUND_NAME, is_conditional=True
        )
        self.link(final, WINNER, reset, 1)
        self.link(final, LOSER, reset, 2)


# ========== Collapse ==========


def _collapse(
    positions: List[BracketPosition], entrants: Dict[Tuple[int, int], SlotState]
) -> Tuple[List[BracketPosition], Dict[int, List[Optional[Team]]]]:
    """Remove walkovers and empty positions, then derive links and re-index.

    ``positions`` must be in dependency order (every feed points backwards).
    Returns the surviving positions and, keyed by their new index, the teams
    already known for each slot.
    """
    outcomes: Dict[Tuple[int, str], SlotState] = {}
    kept: List[BracketPosition] = []
    known: Dict[int, List[Optional[Team]]] = {}

    for row in positions:
        states: List[SlotState] = []
        for slot in (1, 2):
            feed = row.feed(slot)
            if feed is None:
                states.append(entrants.get((row.index, slot), OPEN))
            else:
                states.append(outcomes[(feed.index, feed.outcome)])

        live = [state for state in states if state is not DEAD]
        if len(live) == 2:
            row.team1_from = states[0] if isinstance(states[0], Feed) else None
            row.team2_from = states[1] if isinstance(states[1], Feed) else None
            row.winner_to = row.winner_slot = row.loser_to = row.loser_slot = None
            kept.append(row)
            known[row.index] = [s if isinstance(s, Team) else None for s in states]
            outcomes[(row.index, WINNER)] = Feed(row.index, WINNER)
            outcomes[(row.index, LOSER)] = Feed(row.index, LOSER)
            continue

        outcomes[(row.index, WINNER)] = live[0] if live else DEAD
        outcomes[(row.index, LOSER)] = DEAD
        if live and isinstance(live[0], Team):
            logger.debug(f"{live[0]} advances from {row.match_id} without playing")

    by_index = {row.index: row for row in kept}
    for row in kept:
        for slot in (1, 2):
            feed = row.feed(slot)
            if feed is None:
                continue
            source = by_index[feed.index]
            if feed.outcome == WINNER:
                source.winner_to, source.winner_slot = row.index, slot
            else:
                source.loser_to, source.loser_slot = row.index, slot

    remap = {row.index: new for new, row in enumerate(kept)}
    teams_by_new: Dict[int, List[Optional[Team]]] = {}
    for row in kept:
        teams_by_new[remap[row.index]] = known[row.index]
        row.index = remap[row.index]
        if row.winner_to is not None:
            row.winner_to = remap[row.winner_to]
        if row.loser_to is not None:
            row.loser_to = remap[row.loser_to]
        if row.team1_from is not None:
            row.team1_from = Feed(remap[row.team1_from.index], row.team1_from.outcome)
        if row.team2_from is not None:
            row.team2_from = Feed(remap[row.team2_from.index], row.team2_from.outcome)
    return kept, teams_by_new


def _place_seeds(
    builder: _ArenaBuilder, seeds: Sequence[Team], bracket_size: int
) -> Tuple[Dict[Tuple[int, int], SlotState], List[str]]:
    """Map round-1 slots to seeded teams; missing seeds become dead slots."""
    entrants: Dict[Tuple[int, int], SlotState] = {}
    byes: List[str] = []
    order = bracket_order(bracket_size)
    for position in range(bracket_size // 2):
        row = builder.at(BracketType.MAIN, 1, position)
        seed_a, seed_b = order[2 * position], order[2 * position + 1]
        team_a = seeds[seed_a - 1] if seed_a <= len(seeds) else None
        team_b = seeds[seed_b - 1] if seed_b <= len(seeds) else None
        entrants[(row.index, 1)] = team_a or DEAD
        entrants[(row.index, 2)] = team_b or DEAD
        if team_a is None and team_b is not None:
            byes.append(team_b.id)
        elif team_b is None and team_a is not None:
            byes.append(team_a.id)
    return entrants, byes


def _ordered_for_collapse(positions: List[BracketPosition]) -> List[BracketPosition]:
    section = {
        BracketType.MAIN: 0,
        BracketType.THIRD_PLACE: 1,
        BracketType.LOSERS: 2,
        BracketType.GRAND_FINAL: 3,
    }
    return sorted(
        positions, key=lambda p: (section[p.bracket_type], p.round_number, p.position)
    )


def _materialize(
    tournament_id: str,
    tournament_type: TournamentType,
    bracket_size: int,
    seeds: Sequence[Team],
    byes: List[str],
    positions: List[BracketPosition],
    known: Dict[int, List[Optional[Team]]],
) -> Bracket:
    bracket = Bracket(
        tournament_id=tournament_id,
        tournament_type=tournament_type,
        bracket_size=bracket_size,
        total_byes=len(byes),
        positions=positions,
        seeds=list(seeds),
        bye_ids=byes,
    )
    for row in positions:
        if row.is_conditional:
            continue
        team1, team2 = known[row.index]
        bracket.matches[row.match_id] = Match(
            id=row.match_id,
            round_number=row.round_number,
            team1=team1,
            team2=team2,
        )
    return bracket


def _build(
    seeds: Sequence[Team],
    bracket_size: int,
    tournament_type: TournamentType,
    bronze_match: bool,
    tournament_id: str,
    open_slots: bool = False,
) -> Bracket:
    builder = _ArenaBuilder(tournament_id)
    total_rounds = builder.main_bracket(bracket_size)

    if tournament_type == TournamentType.KNOCKOUT_DOUBLE:
        losers_rounds = builder.losers_bracket(bracket_size, total_rounds)
        builder.grand_final(total_rounds, losers_rounds)
    elif bronze_match:
        if total_rounds >= 2:
            builder.third_place(total_rounds)
        else:
            logger.info("Third-place match skipped: the bracket has no semifinals")

    if open_slots:
        entrants: Dict[Tuple[int, int], SlotState] = {}
        byes: List[str] = []
    else:
        entrants, byes = _place_seeds(builder, seeds, bracket_size)

    positions, known = _collapse(_ordered_for_collapse(builder.positions), entrants)
    return _materialize(
        tournament_id, tournament_type, bracket_size, seeds, byes, positions, known
    )


# ========== Public generators ==========


def _prepare_seeds(
    participants: Sequence[Participant],
    teams: Optional[Sequence[Team]],
    is_doubles: bool,
    seeding: SeedingMethod,
    seed_order: Optional[Sequence[str]],
    rng: Union[None, int, random.Random],
) -> List[Team]:
    if teams is None:
        units = form_teams(participants, is_doubles)
        require_participants(units, MIN_PARTICIPANTS)
    else:
        # playoff qualifiers arrive as teams, a two-team final is enough
        units = list(teams)
        require_teams(units, MIN_TEAMS, is_doubles)
    return seed_teams(units, participants, seeding, seed_order, rng)


def generate_knockout_bracket(
    participants: Sequence[Participant],
    seeding: SeedingMethod = SeedingMethod.RANKED,
    seed_order: Optional[Sequence[str]] = None,
    is_doubles: bool = True,
    bronze_match: bool = False,
    tournament_id: str = "",
    rng: Union[None, int, random.Random] = None,
    teams: Optional[Sequence[Team]] = None,
) -> Bracket:
    """Generate a single-elimination bracket.

    Args:
        participants: Checked-in participants (also the skill source for
            ranked seeding)
        seeding: How seeds are ordered
        seed_order: Team or player ids in seed order, for manual seeding
        is_doubles: Merge participants into teams of two first
        bronze_match: Add a third-place match between the semifinal losers
        tournament_id: Prefix for the generated match ids
        rng: Seed or generator for random seeding
        teams: Pre-formed teams, skips team formation

    Returns:
        Bracket with every real position and its match row. Teams with a bye
        are already placed in their round-2 slot.

    Raises:
        InsufficientParticipantsError: If fewer than four players are checked
            in, or fewer than two pre-formed teams are given
        TeamFormationError: If doubles teams cannot be formed
    """
    seeds = _prepare_seeds(participants, teams, is_doubles, seeding, seed_order, rng)
    bracket_size = calculate_bracket_size(len(seeds))
    bracket = _build(
        seeds, bracket_size, TournamentType.KNOCKOUT_SINGLE, bronze_match, tournament_id
    )
    logger.info(
        f"Generated single-elimination bracket: {len(seeds)} teams, size "
        f"{bracket_size}, {bracket.total_byes} byes, {bracket.total_matches} matches"
    )
    return bracket


def generate_double_elimination_bracket(
    participants: Sequence[Participant],
    seeding: SeedingMethod = SeedingMethod.RANKED,
    seed_order: Optional[Sequence[str]] = None,
    is_doubles: bool = True,
    tournament_id: str = "",
    rng: Union[None, int, random.Random] = None,
    teams: Optional[Sequence[Team]] = None,
) -> Bracket:
    """Generate a double-elimination bracket.

    Main-bracket losers drop into a losers bracket of ``2(k - 1)`` rounds; a
    loss there eliminates. The grand final puts the main-bracket champion in
    slot 1 against the losers-bracket champion in slot 2. The bracket-reset
    position is created up front but flagged conditional and gets no match
    row until the losers-bracket champion wins the grand final.
    """
    seeds = _prepare_seeds(participants, teams, is_doubles, seeding, seed_order, rng)
    bracket_size = calculate_bracket_size(len(seeds))
    bracket = _build(
        seeds, bracket_size, TournamentType.KNOCKOUT_DOUBLE, False, tournament_id
    )
    logger.info(
        f"Generated double-elimination bracket: {len(seeds)} teams, size "
        f"{bracket_size}, {bracket.total_byes} byes, {bracket.total_matches} matches"
    )
    return bracket


def generate_bracket_skeleton(
    bracket_size: int, tournament_id: str = "", bronze_match: bool = False
) -> Bracket:
    """Single-elimination bracket of ``bracket_size`` with every team slot empty.

    Used when the entrants are only known later (Monrad knockout phase); fill
    it with :func:`seed_bracket`.
    """
    if not is_power_of_two(bracket_size):
        raise InvalidConfigurationError(
            f"Bracket size must be a power of two, got {bracket_size}"
        )
    return _build(
        [],
        bracket_size,
        TournamentType.KNOCKOUT_SINGLE,
        bronze_match,
        tournament_id,
        open_slots=True,
    )


def seed_bracket(bracket: Bracket, seeds: Sequence[Team]) -> Bracket:
    """Write seeds into the round-1 slots of a skeleton bracket.

    Returns a new bracket; ``seeds`` must fill every slot.
    """
    if len(seeds) != bracket.bracket_size:
        raise InvalidConfigurationError(
            f"Bracket of size {bracket.bracket_size} needs exactly that many "
            f"seeds, got {len(seeds)}"
        )
    seeded = bracket.copy()
    order = bracket_order(bracket.bracket_size)
    for row in seeded.positions_in(BracketType.MAIN, 1):
        match = seeded.match_at(row)
        match.team1 = seeds[order[2 * row.position] - 1]
        match.team2 = seeds[order[2 * row.position + 1] - 1]
    seeded.seeds = list(seeds)
    return seeded


# ========== Inspection ==========


def get_bye_teams(bracket: Bracket) -> List[str]:
    """Ids of the teams that skip main round 1."""
    return list(bracket.bye_ids)


def validate_bracket(bracket: Bracket) -> ValidationResult:
    """Check the arena is consistent: indices, two-way links and match rows."""
    result = ValidationResult()
    for expected, row in enumerate(bracket.positions):
        if row.index != expected:
            result.add_error(
                f"Position {row.match_id} has index {row.index}, expected {expected}"
            )

    for row in bracket.positions:
        for slot in (1, 2):
            feed = row.feed(slot)
            if feed is None:
                continue
            source = bracket.positions[feed.index]
            target, target_slot = (
                (source.winner_to, source.winner_slot)
                if feed.outcome == WINNER
                else (source.loser_to, source.loser_slot)
            )
            if (target, target_slot) != (row.index, slot):
                result.add_error(
                    f"{row.match_id} slot {slot} is fed by {source.match_id} "
                    "but the link is not mirrored"
                )
        if not row.is_conditional and row.match_id not in bracket.matches:
            result.add_error(f"Position {row.match_id} has no match row")

    finals = [p for p in bracket.positions_in(BracketType.MAIN) if p.winner_to is None]
    if bracket.tournament_type == TournamentType.KNOCKOUT_SINGLE and len(finals) != 1:
        result.add_error(f"Expected one final, found {len(finals)}")
    return result
