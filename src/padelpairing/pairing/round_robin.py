"""Round-robin pairing by the circle method, with optional groups."""

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

from dataclasses import dataclass, field
from typing import Dict, List, Optional, Sequence

from padelpairing.constants import GROUP_NAMES, MIN_TEAMS, TEAM_ID_SEPARATOR
from padelpairing.exceptions import (
    InvalidConfigurationError,
    InvalidTournamentStateError,
)
from padelpairing.models.bracket import Bracket, TournamentGroup
from padelpairing.models.enums import SeedingMethod
from padelpairing.models.match import Match, Round
from padelpairing.models.pairing_history import PairingHistory
from padelpairing.models.participant import Participant, Team
from padelpairing.models.standing import Standing
from padelpairing.pairing.knockout import generate_knockout_bracket
from padelpairing.tournament.standings import rank_teams
from padelpairing.tournament.teams import (
    form_teams,
    has_skill_levels,
    make_match,
    rank_by_skill,
    require_teams,
)
from padelpairing.utils import generate_id, setup_logger

logger = setup_logger(__name__)


@dataclass
class GroupStage:
    """Groups and merged rounds of a grouped round-robin.

    Attributes:
        groups: One record per group, in group order
        rounds: Rounds merged across groups by round number
        teams: Every team of the stage, for resolving the ids in ``groups``
    """

    groups: List[TournamentGroup] = field(default_factory=list)
    rounds: List[Round] = field(default_factory=list)
    teams: List[Team] = field(default_factory=list)

    @property
    def matches(self) -> List[Match]:
        return [m for r in self.rounds for m in r.matches]


def calculate_round_robin_rounds(team_count: int) -> int:
    """``n - 1`` rounds for an even field, ``n`` for an odd one."""
    if team_count < MIN_TEAMS:
        return 0
    return team_count - 1 if team_count % 2 == 0 else team_count


def circle_pairings(entries: Sequence[Optional[Team]], round_index: int):
    """Pairs of one circle-method round.

    The first entry stays fixed while the others rotate one step per round.
    ``entries`` must have an even length; a ``None`` entry is the bye.
    """
    fixed, rest = entries[0], list(entries[1:])
    shift = round_index % len(rest) if rest else 0
    rotated = rest[len(rest) - shift :] + rest[: len(rest) - shift]
    arrangement = [fixed] + rotated
    size = len(arrangement)
    return [(arrangement[i], arrangement[size - 1 - i]) for i in range(size // 2)]


def generate_round_robin(
    participants: Sequence[Participant],
    is_doubles: bool = True,
    tournament_id: str = "",
    teams: Optional[Sequence[Team]] = None,
    group_number: Optional[int] = None,
) -> List[Round]:
    """Generate every round of a round-robin.

    Args:
        participants: Checked-in participants
        is_doubles: Merge participants into teams of two first
        tournament_id: Owning tournament, copied onto the rounds
        teams: Pre-formed teams; skips team formation when given
        group_number: Tag written onto every match (grouped round-robins)

    Returns:
        Rounds numbered from 1, each with ``floor(n / 2)`` matches

    Raises:
        InsufficientParticipantsError: If fewer than two teams take part
        TeamFormationError: If doubles teams cannot be formed
    """
    teams = list(teams) if teams is not None else form_teams(participants, is_doubles)
    require_teams(teams, MIN_TEAMS, is_doubles)

    entries: List[Optional[Team]] = list(teams)
    if len(entries) % 2:
        entries.append(None)

    rounds: List[Round] = []
    for index in range(len(entries) - 1):
        round_number = index + 1
        round_data = Round(
            id=generate_id("round"),
            tournament_id=tournament_id,
            round_number=round_number,
        )
        for team_a, team_b in circle_pairings(entries, index):
            if team_a is None or team_b is None:
                round_data.bye_ids.append((team_a or team_b).id)
                continue
            round_data.matches.append(
                make_match(
                    team_a,
                    team_b,
                    round_number=round_number,
                    round_id=round_data.id,
                    group_number=group_number,
                )
            )
        rounds.append(round_data)

    logger.info(
        f"Generated round-robin for {len(teams)} teams: {len(rounds)} rounds, "
        f"{sum(len(r.matches) for r in rounds)} matches"
    )
    return rounds


def distribute_into_groups(teams: Sequence[Team], group_count: int) -> List[List[Team]]:
    """Snake seeding: A B C C B A A B C ... keeps group strength balanced."""
    groups: List[List[Team]] = [[] for _ in range(group_count)]
    for index, team in enumerate(teams):
        row, column = divmod(index, group_count)
        target = column if row % 2 == 0 else group_count - 1 - column
        groups[target].append(team)
    return groups


def generate_round_robin_with_groups(
    participants: Sequence[Participant],
    group_count: int,
    top_per_group: int,
    is_doubles: bool = True,
    tournament_id: str = "",
    teams: Optional[Sequence[Team]] = None,
) -> GroupStage:
    """Split the field into balanced groups and play a round-robin in each.

    Teams are seeded by skill when any skill level is known, then dealt into
    groups in snake order. Rounds of different groups sharing a round number
    are merged into one :class:`Round`.

    Raises:
        InsufficientParticipantsError: If fewer than two teams take part
        InvalidConfigurationError: If a group would have fewer than two teams
            or ``top_per_group`` exceeds the smallest group
    """
    teams = list(teams) if teams is not None else form_teams(participants, is_doubles)
    require_teams(teams, MIN_TEAMS, is_doubles)

    if group_count < 1 or group_count > len(teams) // MIN_TEAMS:
        raise InvalidConfigurationError(
            f"{group_count} groups is not possible with {len(teams)} teams"
        )
    if group_count > len(GROUP_NAMES):
        raise InvalidConfigurationError(
            f"At most {len(GROUP_NAMES)} groups are supported"
        )

    if has_skill_levels(participants):
        teams = rank_by_skill(teams, participants)
    buckets = distribute_into_groups(teams, group_count)

    smallest = min(len(bucket) for bucket in buckets)
    if top_per_group < 1 or top_per_group > smallest:
        raise InvalidConfigurationError(
            f"top_per_group must be between 1 and {smallest}, got {top_per_group}"
        )

    stage = GroupStage(teams=list(teams))
    merged: Dict[int, Round] = {}
    for index, bucket in enumerate(buckets):
        group_number = index + 1
        stage.groups.append(
            TournamentGroup(
                id=generate_id("group"),
                group_name=GROUP_NAMES[index],
                group_number=group_number,
                participant_ids=[team.id for team in bucket],
                top_advance=top_per_group,
            )
        )
        group_rounds = generate_round_robin(
            participants,
            is_doubles,
            tournament_id=tournament_id,
            teams=bucket,
            group_number=group_number,
        )
        for group_round in group_rounds:
            target = merged.get(group_round.round_number)
            if target is None:
                target = Round(
                    id=generate_id("round"),
                    tournament_id=tournament_id,
                    round_number=group_round.round_number,
                )
                merged[group_round.round_number] = target
            for match in group_round.matches:
                match.round_id = target.id
                target.matches.append(match)
            target.bye_ids.extend(group_round.bye_ids)

    stage.rounds = [merged[number] for number in sorted(merged)]
    logger.info(
        f"Generated {group_count} groups "
        f"({', '.join(str(len(b)) for b in buckets)} teams), "
        f"{len(stage.rounds)} merged rounds"
    )
    return stage


def _team_lookup(teams: Optional[Sequence[Team]]) -> Dict[str, Team]:
    return {team.id: team for team in teams or []}


def select_group_qualifiers(
    groups: Sequence[TournamentGroup],
    standings: Sequence[Standing],
    teams: Optional[Sequence[Team]] = None,
) -> List[Team]:
    """Cross-seed the qualifiers of every group.

    All group winners come first (in group order), then all runners-up, and
    so on, so teams from the same group meet as late as possible.
    """
    lookup = _team_lookup(teams)
    ranked_groups: List[List[Team]] = []
    for group in groups:
        group_teams = [
            lookup.get(team_id) or Team.from_ids(team_id.split(TEAM_ID_SEPARATOR))
            for team_id in group.participant_ids
        ]
        ranked_groups.append(rank_teams(group_teams, standings)[: group.top_advance])

    qualifiers: List[Team] = []
    deepest = max((len(ranked) for ranked in ranked_groups), default=0)
    for place in range(deepest):
        for ranked in ranked_groups:
            if place < len(ranked):
                qualifiers.append(ranked[place])
    return qualifiers


def generate_group_playoff(
    stage: GroupStage,
    standings: Sequence[Standing],
    matches: Sequence[Match],
    bronze_match: bool = False,
    tournament_id: str = "",
) -> Bracket:
    """Build the knockout bracket that follows the group stage.

    Args:
        stage: Group stage returned by :func:`generate_round_robin_with_groups`
        standings: Standings after the last group match
        matches: Current state of the group matches
        bronze_match: Add a third-place match
        tournament_id: Owning tournament

    Raises:
        InvalidTournamentStateError: If a group match has not finished yet
    """
    played = PairingHistory.from_matches(m for m in matches if m.is_finished)
    unfinished = [
        m.id for m in stage.matches if not played.have_played(m.team1, m.team2)
    ]
    if unfinished:
        raise InvalidTournamentStateError(
            f"Group stage is not complete: {len(unfinished)} matches still open"
        )

    qualifiers = select_group_qualifiers(stage.groups, standings, stage.teams)
    logger.info(f"{len(qualifiers)} teams qualified for the playoff")
    return generate_knockout_bracket(
        [],
        seeding=SeedingMethod.MANUAL,
        seed_order=[team.id for team in qualifiers],
        bronze_match=bronze_match,
        tournament_id=tournament_id,
        teams=qualifiers,
    )


def get_bye_teams_for_round(rounds: Sequence[Round], round_number: int) -> List[str]:
    for round_data in rounds:
        if round_data.round_number == round_number:
            return list(round_data.bye_ids)
    return []
