"""Team formation and match construction helpers."""

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

from typing import Dict, Iterable, List, Optional, Sequence

from padelpairing.constants import DOUBLES_TEAM_SIZE
from padelpairing.exceptions import InsufficientParticipantsError, TeamFormationError
from padelpairing.models.match import Match
from padelpairing.models.participant import Participant, Team, checked_in
from padelpairing.utils import generate_id, setup_logger

logger = setup_logger(__name__)


def has_skill_levels(participants: Iterable[Participant]) -> bool:
    return any(p.skill_level is not None for p in participants)


def team_skill(team: Team, skills: Dict[str, Optional[float]]) -> Optional[float]:
    """Average known skill level of the team members, None if none is known."""
    known = [skills[pid] for pid in team.player_ids if skills.get(pid) is not None]
    if not known:
        return None
    return sum(known) / len(known)


def rank_by_skill(
    teams: Sequence[Team], participants: Iterable[Participant]
) -> List[Team]:
    """Stable sort of teams by skill level, strongest first.

    Teams without any known skill level keep their input order after every
    rated team.
    """
    skills = {p.id: p.skill_level for p in participants}

    def key(indexed):
        index, team = indexed
        skill = team_skill(team, skills)
        return (skill is None, -(skill or 0.0), index)

    return [team for _, team in sorted(enumerate(teams), key=key)]


def form_teams(
    participants: Sequence[Participant], is_doubles: bool = True
) -> List[Team]:
    """Merge participants into the units that are paired.

    Only checked-in participants are used. Singles entrants become one-player
    teams. Doubles players are paired sequentially in list order, or, when any
    skill level is known, sorted by skill (ties by id) and paired strongest
    with weakest so teams come out balanced.

    Raises:
        TeamFormationError: If doubles is requested with an odd player count
    """
    participants = checked_in(participants)
    if not is_doubles:
        return [Team.single(p.id) for p in participants]

    if len(participants) % DOUBLES_TEAM_SIZE:
        logger.error(f"Cannot form doubles teams from {len(participants)} players")
        raise TeamFormationError(
            f"Doubles needs an even number of players, got {len(participants)}"
        )

    if has_skill_levels(participants):
        ordered = sorted(
            participants,
            key=lambda p: (
                -(p.skill_level if p.skill_level is not None else float("-inf")),
                p.id,
            ),
        )
        n = len(ordered)
        teams = [Team(ordered[i].id, ordered[n - 1 - i].id) for i in range(n // 2)]
    else:
        teams = [
            Team(participants[i].id, participants[i + 1].id)
            for i in range(0, len(participants), DOUBLES_TEAM_SIZE)
        ]

    logger.debug(f"Formed {len(teams)} doubles teams")
    return teams


def reconstruct_teams(
    matches: Iterable[Match], participant_ids: Optional[Iterable[str]] = None
) -> List[Team]:
    """Rebuild doubles partnerships from earlier matches.

    The latest match a player appears in decides their partner. When
    ``participant_ids`` is given, teams with a member outside that set are
    dropped.
    """
    allowed = set(participant_ids) if participant_ids is not None else None
    ordered = sorted(matches, key=lambda m: m.round_number or 0)

    partner_team: Dict[str, Team] = {}
    for match in ordered:
        for team in (match.team1, match.team2):
            if team is None or team.is_singles:
                continue
            for player_id in team.player_ids:
                partner_team[player_id] = team

    teams: List[Team] = []
    seen = set()
    for team in partner_team.values():
        if team.key in seen:
            continue
        if any(partner_team.get(pid) != team for pid in team.player_ids):
            continue
        if allowed is not None and not allowed.issuperset(team.player_ids):
            continue
        seen.add(team.key)
        teams.append(team)
    return teams


def resolve_units(
    participants: Sequence[Participant],
    is_doubles: bool,
    teams: Optional[Sequence[Team]] = None,
    previous_matches: Optional[Iterable[Match]] = None,
) -> List[Team]:
    """Work out the pairing units for a round.

    Singles uses one unit per participant. Doubles prefers explicit ``teams``,
    then partnerships rebuilt from ``previous_matches``; players not covered
    by either are merged into new teams.
    """
    participants = checked_in(participants)
    if not is_doubles:
        return form_teams(participants, is_doubles=False)
    if teams:
        return list(teams)

    participant_ids = [p.id for p in participants]
    units = reconstruct_teams(previous_matches or [], participant_ids)
    covered = {pid for team in units for pid in team.player_ids}
    leftovers = [p for p in participants if p.id not in covered]
    if leftovers:
        if units:
            logger.info(f"Forming new teams for {len(leftovers)} unpartnered players")
        units.extend(form_teams(leftovers, is_doubles=True))
    return units


def require_teams(teams: Sequence[Team], minimum: int, is_doubles: bool) -> None:
    """Raise ``InsufficientParticipantsError`` when too few units are present."""
    if len(teams) >= minimum:
        return
    size = DOUBLES_TEAM_SIZE if is_doubles else 1
    logger.error(f"Only {len(teams)} teams available, {minimum} required")
    raise InsufficientParticipantsError(
        f"At least {minimum} teams ({minimum * size} players) are required, "
        f"got {len(teams)}",
        required=minimum * size,
        available=len(teams) * size,
    )


def require_participants(teams: Sequence[Team], minimum: int) -> None:
    """Raise ``InsufficientParticipantsError`` when the teams hold too few players."""
    players = {pid for team in teams for pid in team.player_ids}
    if len(players) >= minimum:
        return
    logger.error(f"Only {len(players)} players available, {minimum} required")
    raise InsufficientParticipantsError(
        f"At least {minimum} checked-in players are required, got {len(players)}",
        required=minimum,
        available=len(players),
    )


def make_match(
    team1: Optional[Team],
    team2: Optional[Team],
    round_number: Optional[int] = None,
    round_id: str = "",
    group_number: Optional[int] = None,
    match_id: Optional[str] = None,
) -> Match:
    return Match(
        id=match_id or generate_id("match"),
        round_id=round_id,
        round_number=round_number,
        team1=team1,
        team2=team2,
        group_number=group_number,
    )
