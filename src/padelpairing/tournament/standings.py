"""Standings calculation for tournaments.

This module folds finished matches into per-participant standings and ranks
them with a deterministic tie-break chain.
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

from dataclasses import replace
from typing import Dict, Iterable, List, Optional, Sequence, Tuple

from padelpairing.exceptions import InvalidTournamentStateError, StandingNotFoundError
from padelpairing.models.match import Match
from padelpairing.models.enums import MatchStatus
from padelpairing.models.participant import Team
from padelpairing.models.standing import Standing
from padelpairing.models.tournament_config import TournamentConfig
from padelpairing.utils import setup_logger

logger = setup_logger(__name__)

WIN = "win"
DRAW = "draw"
LOSS = "loss"


def standing_sort_key(standing: Standing) -> Tuple[float, int, int, str]:
    """Points desc, games difference desc, games won desc, then user id asc."""
    return (
        -standing.points,
        -standing.games_diff,
        -standing.games_won,
        standing.user_id,
    )


def team_sort_key(
    team: Team, standings_by_id: Dict[str, Standing]
) -> Tuple[float, int, int, str]:
    """Rank key for a pairing unit, summing the standings of its members.

    Members without a standing count as zero, which is what a late entrant
    who has not played yet looks like.
    """
    points = 0.0
    games_diff = 0
    games_won = 0
    for player_id in team.player_ids:
        standing = standings_by_id.get(player_id)
        if standing is None:
            continue
        points += standing.points
        games_diff += standing.games_diff
        games_won += standing.games_won
    return (-points, -games_diff, -games_won, team.id)


def rank_teams(teams: Iterable[Team], standings: Sequence[Standing]) -> List[Team]:
    """Order teams by their aggregated standing, best first."""
    by_id = {s.user_id: s for s in standings}
    return sorted(teams, key=lambda team: team_sort_key(team, by_id))


class StandingsCalculator:
    """Applies match results to running standings.

    The calculator keeps no state: every method takes the current standings
    and returns new :class:`Standing` objects, leaving its inputs untouched.
    """

    def update_standings_for_match(
        self,
        match: Match,
        standings: Sequence[Standing],
        config: Optional[TournamentConfig] = None,
    ) -> List[Standing]:
        """Fold a single finished match into the standings.

        Args:
            match: A completed or forfeited match with both teams assigned
            standings: Current standings snapshot
            config: Points scheme, defaults to ``TournamentConfig()``

        Returns:
            New, re-ranked standings list

        Raises:
            InvalidTournamentStateError: If the match has not finished, has no
                scores although it was played, or has no decisive result
            StandingNotFoundError: If a player of the match has no standing
        """
        config = config or TournamentConfig()
        by_id = {s.user_id: replace(s) for s in standings}
        self._apply_match(match, by_id, config)
        return self.rank_standings(by_id.values())

    def calculate_standings(
        self,
        tournament_id: str,
        matches: Iterable[Match],
        config: Optional[TournamentConfig] = None,
        participant_ids: Optional[Iterable[str]] = None,
        bye_ids: Optional[Iterable[str]] = None,
    ) -> List[Standing]:
        """Recompute standings from scratch.

        Args:
            tournament_id: Tournament the standings belong to
            matches: Every match of the tournament; unfinished ones are skipped
            config: Points scheme, defaults to ``TournamentConfig()``
            participant_ids: Participants to create standings for. When omitted
                every player appearing in a finished match gets one.
            bye_ids: One entry per bye awarded (a player may appear repeatedly)

        Returns:
            Ranked standings
        """
        config = config or TournamentConfig()
        finished = [m for m in matches if m.is_finished and m.has_both_teams]

        if participant_ids is None:
            ids: List[str] = []
            for match in finished:
                for player_id in match.player_ids:
                    if player_id not in ids:
                        ids.append(player_id)
            for player_id in bye_ids or []:
                if player_id not in ids:
                    ids.append(player_id)
        else:
            ids = list(participant_ids)

        by_id = {
            user_id: Standing(tournament_id=tournament_id, user_id=user_id)
            for user_id in ids
        }
        for match in finished:
            self._apply_match(match, by_id, config)

        standings = self.rank_standings(by_id.values())
        if bye_ids:
            standings = self.apply_bye(standings, bye_ids, config)

        logger.debug(
            f"Recomputed standings for {len(standings)} participants "
            f"from {len(finished)} finished matches"
        )
        return standings

    def apply_bye(
        self,
        standings: Sequence[Standing],
        user_ids: Iterable[str],
        config: Optional[TournamentConfig] = None,
    ) -> List[Standing]:
        """Credit a full win's points to bye recipients.

        Match counters are left alone since no match was played, which keeps
        ``matches_played = won + drawn + lost`` intact.
        """
        config = config or TournamentConfig()
        by_id = {s.user_id: replace(s) for s in standings}
        for user_id in user_ids:
            standing = by_id.get(user_id)
            if standing is None:
                logger.error(f"Bye awarded to {user_id} who has no standing")
                raise StandingNotFoundError(user_id)
            standing.points += config.points_per_win
            logger.debug(f"Bye credited to {user_id}: +{config.points_per_win}")
        return self.rank_standings(by_id.values())

    def rank_standings(self, standings: Iterable[Standing]) -> List[Standing]:
        """Sort standings and write 1-based ranks.

        The sort has no random component, so ranking an unchanged list again
        gives the same order.
        """
        ranked = sorted((replace(s) for s in standings), key=standing_sort_key)
        for rank, standing in enumerate(ranked, 1):
            standing.rank = rank
        return ranked

    def get_top_players(
        self, standings: Sequence[Standing], count: int
    ) -> List[Standing]:
        return self.rank_standings(standings)[: max(count, 0)]

    def get_player_rank(
        self, user_id: str, standings: Sequence[Standing]
    ) -> Optional[int]:
        for standing in self.rank_standings(standings):
            if standing.user_id == user_id:
                return standing.rank
        return None

    def is_tournament_complete(self, matches: Sequence[Match]) -> bool:
        """A tournament is complete when it has matches and all of them finished."""
        return bool(matches) and all(m.is_finished for m in matches)

    # ========== Internals ==========

    def _apply_match(
        self, match: Match, by_id: Dict[str, Standing], config: TournamentConfig
    ) -> None:
        team1_result, team2_result = self._match_outcome(match)
        team1_score = match.team1_score or 0
        team2_score = match.team2_score or 0

        for player_id in match.player_ids:
            if player_id not in by_id:
                logger.error(
                    f"Match {match.id} references {player_id} who has no standing"
                )
                raise StandingNotFoundError(player_id)

        for player_id in match.team1.player_ids:
            self._record(
                by_id[player_id], team1_result, team1_score, team2_score, config
            )
        for player_id in match.team2.player_ids:
            self._record(
                by_id[player_id], team2_result, team2_score, team1_score, config
            )

        logger.debug(
            f"Applied match {match.id}: {match.team1} {team1_score}-{team2_score} "
            f"{match.team2}"
        )

    def _match_outcome(self, match: Match) -> Tuple[str, str]:
        if not match.is_finished:
            raise InvalidTournamentStateError(
                f"Match {match.id} is {match.status.value}, results can only be "
                "applied once it is completed or forfeited"
            )
        if not match.has_both_teams:
            raise InvalidTournamentStateError(
                f"Match {match.id} does not have both teams assigned"
            )
        if match.status == MatchStatus.COMPLETED and (
            match.team1_score is None or match.team2_score is None
        ):
            raise InvalidTournamentStateError(
                f"Match {match.id} is completed but has no scores"
            )

        winner = match.resolved_winner()
        if winner == 1:
            return WIN, LOSS
        if winner == 2:
            return LOSS, WIN
        if match.status == MatchStatus.COMPLETED and (
            match.is_draw or match.team1_score == match.team2_score
        ):
            return DRAW, DRAW
        raise InvalidTournamentStateError(
            f"Forfeited match {match.id} has no winning team"
        )

    @staticmethod
    def _record(
        standing: Standing,
        result: str,
        games_for: int,
        games_against: int,
        config: TournamentConfig,
    ) -> None:
        standing.matches_played += 1
        standing.games_won += games_for
        standing.games_lost += games_against
        if result == WIN:
            standing.matches_won += 1
            standing.points += config.points_per_win
        elif result == DRAW:
            standing.matches_drawn += 1
            standing.points += config.points_per_draw
        else:
            standing.matches_lost += 1
            standing.points += config.points_per_loss
