"""Monrad hybrid tournaments.

A Monrad tournament runs a Swiss qualification phase and then cuts the field
to a single-elimination bracket. Generation is a two-step write: the whole
structure is created up front (Swiss round 1 paired, later Swiss rounds as
empty placeholders, the knockout bracket with empty slots), and the bracket
is seeded from the final Swiss standings with :func:`seed_monrad_knockout`
once the qualification phase is over.
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
from dataclasses import dataclass, field, replace
from typing import List, Optional, Sequence, Union

from padelpairing.constants import (
    MAX_MONRAD_SWISS_ROUNDS,
    MIN_MONRAD_SWISS_ROUNDS,
    MIN_PARTICIPANTS,
    MONRAD_MIN_ADVANCE_RATIO,
)
from padelpairing.exceptions import InvalidConfigurationError
from padelpairing.models.bracket import Bracket
from padelpairing.models.enums import ParticipantStatus, PairingMethod
from padelpairing.models.match import Match, Round
from padelpairing.models.participant import Participant, Team
from padelpairing.models.standing import Standing
from padelpairing.pairing.knockout import (
    generate_bracket_skeleton,
    is_power_of_two,
    seed_bracket,
)
from padelpairing.pairing.swiss import SwissRoundConfig, generate_swiss_round
from padelpairing.tournament.standings import StandingsCalculator, rank_teams
from padelpairing.tournament.teams import require_participants, resolve_units
from padelpairing.utils import generate_id, setup_logger

logger = setup_logger(__name__)


@dataclass
class MonradConfig:
    """Monrad settings; missing values are derived from the field size.

    Attributes:
        swiss_rounds: Qualification rounds, defaults to ``ceil(log2 n)``
        final_bracket_size: Units advancing to the knockout, defaults to the
            largest power of two not above ``n / 2``
        pairing_method: Swiss round-1 pairing method
    """

    swiss_rounds: Optional[int] = None
    final_bracket_size: Optional[int] = None
    pairing_method: PairingMethod = PairingMethod.SLIDE


@dataclass
class MonradTournament:
    """Both phases of a Monrad tournament.

    Attributes:
        phase1: Swiss rounds; round 1 is paired, later rounds are pending
            placeholders without matches
        phase2: Knockout bracket, team slots empty until seeded
        swiss_rounds: Resolved qualification round count
        final_bracket_size: Resolved knockout size
        teams: Pairing units of the tournament
    """

    phase1: List[Round]
    phase2: Bracket
    swiss_rounds: int
    final_bracket_size: int
    teams: List[Team] = field(default_factory=list)

    @property
    def is_seeded(self) -> bool:
        return bool(self.phase2.seeds)


def default_swiss_rounds(unit_count: int) -> int:
    rounds = math.ceil(math.log2(max(unit_count, 2)))
    return min(max(rounds, MIN_MONRAD_SWISS_ROUNDS), MAX_MONRAD_SWISS_ROUNDS)


def default_final_bracket_size(unit_count: int) -> int:
    """Largest power of two not above half the field (at least 2)."""
    size = 2
    while size * 2 <= unit_count / 2:
        size *= 2
    return size


def calculate_monrad_config(unit_count: int) -> MonradConfig:
    """Recommended settings by field size.

    Up to 16 units play 3 Swiss rounds into a bracket of 4 or 8, up to 32
    play 4 rounds into 8 or 16, up to 64 play 5 rounds into 16 or 32 and
    bigger fields play 6 rounds into at most 64.
    """
    if unit_count <= 16:
        rounds, size = 3, 8 if unit_count >= 8 else 4
    elif unit_count <= 32:
        rounds, size = 4, 16 if unit_count >= 16 else 8
    elif unit_count <= 64:
        rounds, size = 5, 32 if unit_count >= 32 else 16
    else:
        rounds = 6
        size = min(64, 2 ** math.floor(math.log2(unit_count / 2)))
    return MonradConfig(swiss_rounds=rounds, final_bracket_size=size)


def validate_monrad_config(
    swiss_rounds: int, final_bracket_size: int, unit_count: int
) -> List[str]:
    """Check resolved Monrad settings against the field.

    Returns:
        Warnings for settings that are legal but unusual

    Raises:
        InvalidConfigurationError: If the round count is out of range, the
            bracket size is not a power of two or exceeds the field
    """
    if not MIN_MONRAD_SWISS_ROUNDS <= swiss_rounds <= MAX_MONRAD_SWISS_ROUNDS:
        raise InvalidConfigurationError(
            f"Monrad Swiss rounds must be between {MIN_MONRAD_SWISS_ROUNDS} and "
            f"{MAX_MONRAD_SWISS_ROUNDS}, got {swiss_rounds}"
        )
    if final_bracket_size < 2 or not is_power_of_two(final_bracket_size):
        raise InvalidConfigurationError(
            f"Final bracket size {final_bracket_size} must be a power of two "
            "of at least 2"
        )
    if final_bracket_size > unit_count:
        raise InvalidConfigurationError(
            f"Final bracket size {final_bracket_size} cannot exceed the "
            f"{unit_count} teams taking part"
        )

    warnings = []
    if final_bracket_size < unit_count * MONRAD_MIN_ADVANCE_RATIO:
        share = round(final_bracket_size / unit_count * 100)
        warnings.append(
            f"Only {final_bracket_size} of {unit_count} teams ({share}%) "
            "advance to the knockout"
        )
    return warnings


def _participants_from_standings(standings: Sequence[Standing]) -> List[Participant]:
    return [
        Participant(id=s.user_id, status=ParticipantStatus.CHECKED_IN)
        for s in StandingsCalculator().rank_standings(standings)
    ]


def generate_monrad_tournament(
    config: MonradConfig,
    initial_standings: Sequence[Standing],
    previous_matches: Sequence[Match] = (),
    is_doubles: bool = True,
    participants: Optional[Sequence[Participant]] = None,
    tournament_id: str = "",
    seed: Union[None, int, random.Random] = None,
    teams: Optional[Sequence[Team]] = None,
) -> MonradTournament:
    """Create the structure of a Monrad tournament.

    Args:
        config: Monrad settings
        initial_standings: Starting standings; also the participant source
            when ``participants`` is omitted
        previous_matches: Earlier matches, used for team reconstruction and
            rematch avoidance
        is_doubles: Pair doubles teams
        participants: Checked-in participants
        tournament_id: Owning tournament
        seed: Seed or generator for the round-1 shuffle
        teams: Pre-formed doubles teams

    Returns:
        MonradTournament with Swiss round 1 paired and an empty bracket

    Raises:
        InsufficientParticipantsError: If fewer than four players take part
        InvalidConfigurationError: If the settings do not fit the field
    """
    if participants is None:
        participants = _participants_from_standings(initial_standings)
    units = resolve_units(participants, is_doubles, teams, previous_matches)
    require_participants(units, MIN_PARTICIPANTS)

    unit_count = len(units)
    swiss_rounds = config.swiss_rounds or default_swiss_rounds(unit_count)
    bracket_size = config.final_bracket_size or default_final_bracket_size(unit_count)
    for warning in validate_monrad_config(swiss_rounds, bracket_size, unit_count):
        logger.warning(warning)

    first = Round(
        id=generate_id("round"), tournament_id=tournament_id, round_number=1
    )
    pairing = generate_swiss_round(
        SwissRoundConfig(
            round_number=1,
            participants=list(participants),
            standings=list(initial_standings),
            previous_matches=list(previous_matches),
            pairing_method=config.pairing_method,
            teams=units,
            seed=seed,
            round_id=first.id,
        ),
        is_doubles=is_doubles,
    )
    first.matches = pairing.matches
    first.bye_ids = pairing.bye_ids

    phase1 = [first] + [
        Round(
            id=generate_id("round"),
            tournament_id=tournament_id,
            round_number=number,
        )
        for number in range(2, swiss_rounds + 1)
    ]
    phase2 = generate_bracket_skeleton(bracket_size, tournament_id=tournament_id)

    logger.info(
        f"Generated Monrad tournament for {unit_count} teams: {swiss_rounds} "
        f"Swiss rounds, top {bracket_size} to the knockout"
    )
    return MonradTournament(
        phase1=phase1,
        phase2=phase2,
        swiss_rounds=swiss_rounds,
        final_bracket_size=bracket_size,
        teams=list(units),
    )


def get_knockout_qualifiers(
    tournament: MonradTournament,
    final_standings: Sequence[Standing],
    teams: Optional[Sequence[Team]] = None,
) -> List[Team]:
    """Top ``final_bracket_size`` units by final Swiss rank, best first."""
    units = list(teams) if teams is not None else tournament.teams
    ranked = rank_teams(units, final_standings)
    return ranked[: tournament.final_bracket_size]


def seed_monrad_knockout(
    tournament: MonradTournament,
    final_standings: Sequence[Standing],
    teams: Optional[Sequence[Team]] = None,
) -> MonradTournament:
    """Fill the knockout bracket from the final Swiss standings.

    Returns a new tournament whose bracket has the qualifiers in its round-1
    slots, seeded by Swiss rank.

    Raises:
        InvalidConfigurationError: If fewer units than bracket slots exist
    """
    qualifiers = get_knockout_qualifiers(tournament, final_standings, teams)
    bracket = seed_bracket(tournament.phase2, qualifiers)
    logger.info(
        f"Seeded Monrad knockout with {len(qualifiers)} qualifiers: "
        + ", ".join(team.id for team in qualifiers)
    )
    return replace(tournament, phase2=bracket)


def has_qualified_for_knockout(user_id: str, qualifiers: Sequence[Standing]) -> bool:
    return any(q.user_id == user_id for q in qualifiers)


def get_qualification_cutoff(qualifiers: Sequence[Standing]) -> float:
    """Points of the last qualifier, the minimum needed to advance."""
    if not qualifiers:
        return 0
    return qualifiers[-1].points
