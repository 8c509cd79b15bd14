"""Bracket progression: moving teams through a knockout bracket.

After a bracket match finishes, :func:`advance_winner` writes the winner
into the slot its position feeds and, in double elimination, drops the loser
into the losers bracket. The grand final is the one special case: when the
losers-bracket champion (slot 2) wins it, both finalists have lost once and
the conditional bracket-reset match is created.
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

from dataclasses import dataclass, field, replace
from typing import Iterable, List, Optional

from padelpairing.exceptions import InvalidTournamentStateError
from padelpairing.models.bracket import Bracket, BracketPosition
from padelpairing.models.enums import BracketType, MatchStatus, TournamentType
from padelpairing.models.match import Match
from padelpairing.models.participant import Team
from padelpairing.type_hints import TeamSlot
from padelpairing.utils import setup_logger

logger = setup_logger(__name__)


@dataclass
class ProgressionResult:
    """Outcome of advancing one bracket match.

    Attributes:
        next_match_id: Match the winner moved into, None when the winner's
            run ends here (final, or grand final won by the main champion)
        next_bracket_position: Position of ``next_match_id``
        loser_match_id: Match the loser dropped into, None when eliminated
        is_complete: Every deciding match of the bracket has finished
        updated_matches: Rows that changed, the finished match first
        bracket: New bracket with the progression applied
    """

    next_match_id: Optional[str] = None
    next_bracket_position: Optional[BracketPosition] = None
    loser_match_id: Optional[str] = None
    is_complete: bool = False
    updated_matches: List[Match] = field(default_factory=list)
    bracket: Optional[Bracket] = None


def _winning_slot(
    match: Match, winner_ids: Iterable[str], loser_ids: Iterable[str]
) -> TeamSlot:
    winner_key = frozenset(winner_ids)
    loser_key = frozenset(loser_ids)
    if match.team1.key == winner_key and match.team2.key == loser_key:
        slot = 1
    elif match.team2.key == winner_key and match.team1.key == loser_key:
        slot = 2
    else:
        raise InvalidTournamentStateError(
            f"Teams {sorted(winner_key)} / {sorted(loser_key)} did not play "
            f"match {match.id}"
        )
    recorded = match.resolved_winner()
    if recorded is not None and recorded != slot:
        raise InvalidTournamentStateError(
            f"Match {match.id} records team {recorded} as winner, not team {slot}"
        )
    return slot


def _place(bracket: Bracket, target_index: int, slot: TeamSlot, team: Team) -> Match:
    position = bracket.positions[target_index]
    match = bracket.match_at(position)
    current = match.team(slot)
    if current is not None and current.key != team.key:
        raise InvalidTournamentStateError(
            f"Slot {slot} of {match.id} is already taken by {current}"
        )
    if slot == 1:
        match.team1 = team
    else:
        match.team2 = team
    logger.debug(f"{team} moves into {match.id} slot {slot}")
    return match


def _position_resolved(bracket: Bracket, position: BracketPosition) -> bool:
    match = bracket.match_at(position)
    if match is not None:
        return match.is_finished
    if not position.is_conditional or position.team1_from is None:
        return False
    # an inactive reset is settled once the grand final went to slot 1
    source = bracket.positions[position.team1_from.index]
    source_match = bracket.match_at(source)
    return (
        source_match is not None
        and source_match.is_finished
        and source_match.resolved_winner() == 1
    )


def is_bracket_complete(bracket: Bracket) -> bool:
    terminals = bracket.terminal_positions
    return bool(terminals) and all(_position_resolved(bracket, p) for p in terminals)


def get_champion(bracket: Bracket) -> Optional[Team]:
    """Winner of the bracket, once it is complete."""
    if not is_bracket_complete(bracket):
        return None
    if bracket.tournament_type == TournamentType.KNOCKOUT_DOUBLE:
        deciders = bracket.positions_in(BracketType.GRAND_FINAL)
        for position in reversed(deciders):
            match = bracket.match_at(position)
            if match is not None and match.is_finished:
                return match.winning_team()
        return None
    finals = [
        p for p in bracket.positions_in(BracketType.MAIN) if p.winner_to is None
    ]
    match = bracket.match_at(finals[-1]) if finals else None
    return match.winning_team() if match else None


def advance_winner(
    bracket: Bracket,
    match_id: str,
    winner_ids: Iterable[str],
    loser_ids: Iterable[str],
    tournament_type: Optional[TournamentType] = None,
    match: Optional[Match] = None,
) -> ProgressionResult:
    """Advance the winner (and route the loser) of a finished bracket match.

    Args:
        bracket: Current bracket; it is not modified
        match_id: Id of the finished match
        winner_ids: Player ids of the winning team
        loser_ids: Player ids of the losing team
        tournament_type: Expected bracket type, checked when given
        match: The finished match as stored by the caller; replaces the
            bracket's copy of the row when given

    Returns:
        ProgressionResult with the new bracket

    Raises:
        InvalidTournamentStateError: If the match is unknown, not finished, was
            not played by the given teams, or the bracket type does not match
    """
    if tournament_type is not None:
        tournament_type = TournamentType(tournament_type)
        if tournament_type != bracket.tournament_type:
            raise InvalidTournamentStateError(
                f"Bracket is {bracket.tournament_type.value}, "
                f"not {tournament_type.value}"
            )

    bracket = bracket.copy()
    position = bracket.position_for_match(match_id)
    if position is None:
        logger.error(f"Match {match_id} is not part of the bracket")
        raise InvalidTournamentStateError(
            f"Match {match_id} is not part of the bracket"
        )

    if match is not None:
        if match.id != match_id:
            raise InvalidTournamentStateError(
                f"Match row {match.id} does not belong to {match_id}"
            )
        bracket.matches[match_id] = replace(match)
    current = bracket.matches.get(match_id)
    if current is None:
        raise InvalidTournamentStateError(f"Match {match_id} has not been scheduled")
    if not current.is_finished:
        raise InvalidTournamentStateError(
            f"Match {match_id} is {current.status.value}, it must be completed "
            "or forfeited before advancing"
        )
    if not current.has_both_teams:
        raise InvalidTournamentStateError(f"Match {match_id} is missing a team")

    slot = _winning_slot(current, winner_ids, loser_ids)
    current.winner_team = slot
    winner = current.team(slot)
    loser = current.team(3 - slot)
    result = ProgressionResult(updated_matches=[current], bracket=bracket)

    reset = None
    if position.winner_to is not None:
        target = bracket.positions[position.winner_to]
        if target.is_conditional:
            reset = target
        else:
            result.updated_matches.append(
                _place(bracket, target.index, position.winner_slot, winner)
            )
            result.next_match_id = target.match_id
            result.next_bracket_position = target

    if reset is not None:
        if slot == 2:
            reset_match = Match(
                id=reset.match_id,
                round_number=reset.round_number,
                team1=winner,
                team2=loser,
                status=MatchStatus.PENDING,
            )
            bracket.matches[reset.match_id] = reset_match
            result.updated_matches.append(reset_match)
            result.next_match_id = reset.match_id
            result.next_bracket_position = reset
            result.loser_match_id = reset.match_id
            logger.info(
                f"{winner} won the grand final from the losers bracket, "
                f"bracket reset {reset.match_id} scheduled"
            )
    elif position.loser_to is not None:
        target = bracket.positions[position.loser_to]
        result.updated_matches.append(
            _place(bracket, target.index, position.loser_slot, loser)
        )
        result.loser_match_id = target.match_id

    result.is_complete = is_bracket_complete(bracket)
    logger.info(
        f"Advanced {winner} from {match_id} to {result.next_match_id or 'nothing'}, "
        f"{loser} to {result.loser_match_id or 'elimination'}"
    )
    if result.is_complete:
        logger.info(f"Bracket {bracket.tournament_id or ''} complete".strip())
    return result


def apply_results(bracket: Bracket, matches: Iterable[Match]) -> Bracket:
    """Replay finished matches into a bracket.

    Matches that do not belong to the bracket, are unfinished, or were
    already advanced are skipped. Positions are walked in index order, which
    is the order their results become available in.

    Raises:
        InvalidTournamentStateError: If a finished bracket match has no winner
    """
    by_id = {m.id: m for m in matches}
    bracket = bracket.copy()
    for position in bracket.positions:
        played = by_id.get(position.match_id)
        current = bracket.match_at(position)
        if played is None or current is None or not played.is_finished:
            continue
        if current.is_finished:
            continue
        winner = played.winning_team()
        loser = played.losing_team()
        if winner is None or loser is None:
            raise InvalidTournamentStateError(
                f"Knockout match {played.id} finished without a winner"
            )
        bracket = advance_winner(
            bracket,
            played.id,
            winner.player_ids,
            loser.player_ids,
            match=played,
        ).bracket
    return bracket
