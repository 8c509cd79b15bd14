"""Round generation for every tournament format.

:class:`TournamentEngine` is the entry point a caller uses between rounds:
it checks the requested round does not exist yet, dispatches to the format's
generator, credits Swiss byes and hands out courts. It keeps no state
between calls, everything it needs is passed in.
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
from dataclasses import dataclass, field, replace
from datetime import datetime
from typing import Callable, Dict, List, Optional, Sequence, Union

from padelpairing.constants import TEAM_ID_SEPARATOR
from padelpairing.exceptions import InvalidTournamentStateError
from padelpairing.models.bracket import Bracket
from padelpairing.models.enums import CourtStrategy, TournamentType
from padelpairing.models.match import Match, Round
from padelpairing.models.participant import Court, Participant, Team, checked_in
from padelpairing.models.standing import Standing
from padelpairing.models.tournament_config import TournamentConfig
from padelpairing.pairing.knockout import (
    generate_bracket_skeleton,
    generate_double_elimination_bracket,
    generate_knockout_bracket,
)
from padelpairing.pairing.monrad import (
    MonradConfig,
    MonradTournament,
    default_final_bracket_size,
    default_swiss_rounds,
    generate_monrad_tournament,
    seed_monrad_knockout,
    validate_monrad_config,
)
from padelpairing.pairing.round_robin import (
    generate_group_playoff,
    generate_round_robin,
    generate_round_robin_with_groups,
)
from padelpairing.pairing.swiss import (
    SwissRoundConfig,
    calculate_swiss_rounds,
    generate_swiss_round,
)
from padelpairing.tournament.courts import assign_courts
from padelpairing.tournament.progression import apply_results, is_bracket_complete
from padelpairing.tournament.schedule import schedule_round
from padelpairing.tournament.standings import StandingsCalculator
from padelpairing.tournament.teams import resolve_units
from padelpairing.utils import generate_id, setup_logger

logger = setup_logger(__name__)


@dataclass
class RoundPlan:
    """Everything the caller persists for a newly generated round.

    Attributes:
        round: The round with its matches
        matches: Matches of the round, courts assigned
        byes: Team ids sitting out this round
        bracket: Current bracket for knockout phases, None otherwise
        warnings: Non-blocking issues (court shortage, accepted rematches)
        standings: Standings with this round's byes credited
    """

    round: Round
    matches: List[Match] = field(default_factory=list)
    byes: List[str] = field(default_factory=list)
    bracket: Optional[Bracket] = None
    warnings: List[str] = field(default_factory=list)
    standings: List[Standing] = field(default_factory=list)


@dataclass
class RoundRequest:
    """Inputs of one ``generate_next_round`` call, shared by the generators."""

    tournament_type: TournamentType
    participants: List[Participant]
    round_number: int
    previous_matches: List[Match]
    standings: List[Standing]
    config: TournamentConfig
    is_doubles: bool = True
    bracket: Optional[Bracket] = None
    seed: Union[None, int, random.Random] = None
    teams: Optional[List[Team]] = None
    previous_bye_ids: Optional[List[str]] = None


@dataclass
class RoundDraft:
    """Pairings produced by a format generator, before courts are assigned."""

    matches: List[Match]
    byes: List[Team] = field(default_factory=list)
    credit_byes: bool = False
    bracket: Optional[Bracket] = None
    warnings: List[str] = field(default_factory=list)


RoundGenerator = Callable[[RoundRequest], RoundDraft]


class TournamentEngine:
    """Generates rounds for round-robin, Swiss, knockout and Monrad events.

    Args:
        tournament_id: Id copied onto the generated rounds and brackets
        calculator: Standings calculator used to credit byes
    """

    def __init__(
        self,
        tournament_id: str = "",
        calculator: Optional[StandingsCalculator] = None,
    ):
        self.tournament_id = tournament_id
        self.calculator = calculator or StandingsCalculator()
        self._generators: Dict[TournamentType, RoundGenerator] = {
            TournamentType.ROUND_ROBIN: self._round_robin_round,
            TournamentType.SWISS: self._swiss_round,
            TournamentType.KNOCKOUT_SINGLE: self._knockout_round,
            TournamentType.KNOCKOUT_DOUBLE: self._knockout_round,
            TournamentType.MONRAD: self._monrad_round,
        }

    def generate_next_round(
        self,
        tournament_type: TournamentType,
        participants: Sequence[Participant],
        round_number: int,
        previous_matches: Sequence[Match],
        standings: Sequence[Standing],
        courts: Sequence[Court],
        court_strategy: CourtStrategy = CourtStrategy.BALANCED,
        config: Optional[TournamentConfig] = None,
        bracket: Optional[Bracket] = None,
        seed: Union[None, int, random.Random] = None,
        is_doubles: bool = True,
        teams: Optional[Sequence[Team]] = None,
        previous_bye_ids: Optional[Sequence[str]] = None,
        starts_at: Optional[datetime] = None,
    ) -> RoundPlan:
        """Generate round ``round_number`` of a tournament.

        Args:
            tournament_type: Format of the tournament
            participants: Every participant; only checked-in ones are paired
            round_number: Round to generate, one past the latest existing round
            previous_matches: Every match generated so far, with results
            standings: Current standings
            courts: Courts of the venue
            court_strategy: How courts are handed out
            config: Points scheme and format settings
            bracket: Bracket returned with the previous round (knockout
                phases after their first round)
            seed: Seed or generator for shuffles and random seeding
            is_doubles: Pair doubles teams
            teams: Fixed doubles teams
            previous_bye_ids: Swiss bye recipients so far; derived from the
                rounds a unit sat out when omitted
            starts_at: When given, the round's time window is filled in

        Returns:
            RoundPlan for the caller to persist

        Raises:
            InvalidTournamentStateError: If the round already exists, the
                previous round is unfinished or the format has no such round
            InsufficientParticipantsError: If too few units are checked in
            InsufficientCourtsError: If no court is active
        """
        tournament_type = TournamentType(tournament_type)
        config = config or TournamentConfig(type=tournament_type)
        previous_matches = list(previous_matches)
        self._check_round_is_new(round_number, previous_matches)

        request = RoundRequest(
            tournament_type=tournament_type,
            participants=checked_in(participants),
            round_number=round_number,
            previous_matches=previous_matches,
            standings=list(standings),
            config=config,
            is_doubles=is_doubles,
            bracket=bracket,
            seed=seed,
            teams=list(teams) if teams is not None else None,
            previous_bye_ids=(
                list(previous_bye_ids) if previous_bye_ids is not None else None
            ),
        )
        logger.info(
            f"Generating {tournament_type.value} round {round_number} for "
            f"{len(request.participants)} checked-in participants"
        )
        draft = self._generators[tournament_type](request)

        round_data = Round(
            id=generate_id("round"),
            tournament_id=self.tournament_id,
            round_number=round_number,
            bye_ids=[team.id for team in draft.byes],
        )
        matches = [
            replace(match, round_id=round_data.id, round_number=round_number)
            for match in draft.matches
        ]
        matches = assign_courts(
            matches,
            courts,
            court_strategy,
            previous_matches=previous_matches,
            round_number=round_number,
            rng=seed,
        )
        round_data.matches = matches

        warnings = list(draft.warnings)
        active_courts = len([c for c in courts if c.is_active])
        if len(matches) > active_courts:
            warnings.append(
                f"{len(matches) - active_courts} of {len(matches)} matches wait "
                "for a free court"
            )

        bracket_out = draft.bracket
        if bracket_out is not None:
            for match in matches:
                if match.id in bracket_out.matches:
                    bracket_out.matches[match.id] = replace(match)

        new_standings = self.calculator.rank_standings(request.standings)
        if draft.credit_byes and draft.byes:
            new_standings = self._credit_byes(request, new_standings, draft.byes)

        if starts_at is not None:
            round_data = schedule_round(
                round_data,
                starts_at,
                config.match_duration_minutes,
                max(active_courts, 1),
            )

        logger.info(
            f"Round {round_number} ready: {len(matches)} matches, "
            f"{len(draft.byes)} byes, {len(warnings)} warnings"
        )
        return RoundPlan(
            round=round_data,
            matches=list(round_data.matches),
            byes=list(round_data.bye_ids),
            bracket=bracket_out,
            warnings=warnings,
            standings=new_standings,
        )

    # ========== Guards ==========

    def _check_round_is_new(
        self, round_number: int, previous_matches: Sequence[Match]
    ) -> None:
        if round_number < 1:
            raise InvalidTournamentStateError(
                f"Round numbers start at 1, got {round_number}"
            )
        existing = sorted({m.round_number for m in previous_matches if m.round_number})
        if round_number in existing:
            logger.error(f"Round {round_number} already has matches")
            raise InvalidTournamentStateError(
                f"Round {round_number} has already been generated"
            )
        latest = existing[-1] if existing else 0
        if round_number == 1 and previous_matches:
            raise InvalidTournamentStateError(
                "The tournament has already started, round 1 cannot be generated"
            )
        if round_number != latest + 1:
            raise InvalidTournamentStateError(
                f"Next round is {latest + 1}, cannot generate round {round_number}"
            )
        unfinished = [
            m.id
            for m in previous_matches
            if m.round_number == latest and not m.is_finished
        ]
        if unfinished:
            raise InvalidTournamentStateError(
                f"Round {latest} still has {len(unfinished)} unfinished matches"
            )

    # ========== Round robin ==========

    def _round_robin_round(self, request: RoundRequest) -> RoundDraft:
        settings = request.config.format_settings
        if settings.groups > 1:
            return self._group_round(request)

        rounds = generate_round_robin(
            request.participants,
            request.is_doubles,
            self.tournament_id,
            teams=request.teams,
        )
        if request.round_number > len(rounds):
            raise InvalidTournamentStateError(
                f"The round-robin has only {len(rounds)} rounds"
            )
        chosen = rounds[request.round_number - 1]
        return RoundDraft(
            matches=chosen.matches,
            byes=[
                Team.from_ids(team_id.split(TEAM_ID_SEPARATOR))
                for team_id in chosen.bye_ids
            ],
        )

    def _group_round(self, request: RoundRequest) -> RoundDraft:
        settings = request.config.format_settings
        stage = generate_round_robin_with_groups(
            request.participants,
            settings.groups,
            settings.top_per_group,
            request.is_doubles,
            self.tournament_id,
            teams=request.teams,
        )
        group_rounds = len(stage.rounds)
        if request.round_number <= group_rounds:
            chosen = stage.rounds[request.round_number - 1]
            lookup = {team.id: team for team in stage.teams}
            return RoundDraft(
                matches=chosen.matches,
                byes=[lookup[team_id] for team_id in chosen.bye_ids],
            )
        if not settings.playoffs:
            raise InvalidTournamentStateError(
                f"The group stage has only {group_rounds} rounds and no playoff"
            )
        if request.round_number == group_rounds + 1:
            bracket = generate_group_playoff(
                stage,
                request.standings,
                request.previous_matches,
                bronze_match=settings.bronze_match,
                tournament_id=self.tournament_id,
            )
            return self._bracket_wave(bracket, request)
        return self._continue_bracket(request)

    # ========== Swiss ==========

    def _swiss_round(self, request: RoundRequest) -> RoundDraft:
        units = resolve_units(
            request.participants,
            request.is_doubles,
            request.teams,
            request.previous_matches,
        )
        total = request.config.format_settings.rounds or calculate_swiss_rounds(
            len(units)
        )
        if request.round_number > total:
            raise InvalidTournamentStateError(
                f"The Swiss tournament has only {total} rounds"
            )
        return self._pair_swiss(request, units)

    def _pair_swiss(self, request: RoundRequest, units: List[Team]) -> RoundDraft:
        result = generate_swiss_round(
            SwissRoundConfig(
                round_number=request.round_number,
                participants=request.participants,
                standings=request.standings,
                previous_matches=request.previous_matches,
                pairing_method=request.config.format_settings.pairing_method,
                teams=units,
                previous_bye_ids=self._previous_byes(request, units),
                seed=request.seed,
            ),
            is_doubles=request.is_doubles,
        )
        warnings = [
            f"Repeat pairing accepted: {team1} vs {team2}"
            for team1, team2 in result.repeat_pairings
        ]
        return RoundDraft(
            matches=result.matches,
            byes=result.byes,
            credit_byes=True,
            warnings=warnings,
        )

    @staticmethod
    def _previous_byes(request: RoundRequest, units: Sequence[Team]) -> List[str]:
        """Units absent from an earlier round are taken to have had its bye."""
        if request.previous_bye_ids is not None:
            return list(request.previous_bye_ids)
        byes: List[str] = []
        numbers = sorted(
            {m.round_number for m in request.previous_matches if m.round_number}
        )
        for number in numbers:
            playing = {
                pid
                for m in request.previous_matches
                if m.round_number == number
                for pid in m.player_ids
            }
            for unit in units:
                if not any(pid in playing for pid in unit.player_ids):
                    byes.append(unit.id)
        return byes

    def _credit_byes(
        self,
        request: RoundRequest,
        standings: List[Standing],
        byes: Sequence[Team],
    ) -> List[Standing]:
        known = {s.user_id for s in standings}
        missing = [
            Standing(tournament_id=self.tournament_id, user_id=p.id)
            for p in request.participants
            if p.id not in known
        ]
        player_ids = [pid for team in byes for pid in team.player_ids]
        return self.calculator.apply_bye(
            standings + missing, player_ids, request.config
        )

    # ========== Knockout ==========

    def _knockout_round(self, request: RoundRequest) -> RoundDraft:
        if request.round_number > 1:
            return self._continue_bracket(request)

        settings = request.config.format_settings
        if request.tournament_type == TournamentType.KNOCKOUT_DOUBLE:
            bracket = generate_double_elimination_bracket(
                request.participants,
                seeding=settings.seeding,
                seed_order=list(settings.seed_order) or None,
                is_doubles=request.is_doubles,
                tournament_id=self.tournament_id,
                rng=request.seed,
                teams=request.teams,
            )
        else:
            bracket = generate_knockout_bracket(
                request.participants,
                seeding=settings.seeding,
                seed_order=list(settings.seed_order) or None,
                is_doubles=request.is_doubles,
                bronze_match=settings.bronze_match,
                tournament_id=self.tournament_id,
                rng=request.seed,
                teams=request.teams,
            )
        draft = self._bracket_wave(bracket, request)
        # bye teams whose next match is already ready play in this wave
        playing = {pid for match in draft.matches for pid in match.player_ids}
        lookup = {team.id: team for team in bracket.seeds}
        draft.byes = [
            lookup[team_id]
            for team_id in bracket.bye_ids
            if not playing.intersection(lookup[team_id].player_ids)
        ]
        return draft

    def _continue_bracket(self, request: RoundRequest) -> RoundDraft:
        if request.bracket is None:
            raise InvalidTournamentStateError(
                f"Round {request.round_number} needs the bracket returned with "
                "the previous round"
            )
        bracket = apply_results(request.bracket, request.previous_matches)
        return self._bracket_wave(bracket, request)

    def _bracket_wave(self, bracket: Bracket, request: RoundRequest) -> RoundDraft:
        """Collect every bracket match that can be played now."""
        scheduled = {m.id for m in request.previous_matches}
        ready: List[Match] = []
        for position in bracket.positions:
            match = bracket.match_at(position)
            if (
                match is None
                or match.id in scheduled
                or match.is_finished
                or not match.has_both_teams
            ):
                continue
            ready.append(match)

        if not ready:
            if is_bracket_complete(bracket):
                raise InvalidTournamentStateError("The bracket is already complete")
            raise InvalidTournamentStateError(
                "No bracket match is ready, results are still missing"
            )
        logger.debug(
            f"Bracket wave {request.round_number}: "
            + ", ".join(match.id for match in ready)
        )
        return RoundDraft(matches=ready, bracket=bracket)

    # ========== Monrad ==========

    def _monrad_round(self, request: RoundRequest) -> RoundDraft:
        settings = request.config.format_settings
        units = resolve_units(
            request.participants,
            request.is_doubles,
            request.teams,
            request.previous_matches,
        )
        monrad = MonradConfig(
            swiss_rounds=settings.initial_rounds,
            final_bracket_size=settings.bracket_size,
            pairing_method=settings.pairing_method,
        )
        swiss_rounds = monrad.swiss_rounds or default_swiss_rounds(len(units))

        if request.round_number == 1:
            tournament = generate_monrad_tournament(
                monrad,
                request.standings,
                request.previous_matches,
                is_doubles=request.is_doubles,
                participants=request.participants,
                tournament_id=self.tournament_id,
                seed=request.seed,
                teams=units,
            )
            first = tournament.phase1[0]
            lookup = {team.id: team for team in tournament.teams}
            return RoundDraft(
                matches=first.matches,
                byes=[lookup[team_id] for team_id in first.bye_ids],
                credit_byes=True,
                bracket=tournament.phase2,
            )
        if request.round_number <= swiss_rounds:
            draft = self._pair_swiss(request, units)
            draft.bracket = request.bracket
            return draft
        if request.round_number == swiss_rounds + 1:
            return self._seed_monrad_bracket(request, monrad, units, swiss_rounds)
        return self._continue_bracket(request)

    def _seed_monrad_bracket(
        self,
        request: RoundRequest,
        monrad: MonradConfig,
        units: List[Team],
        swiss_rounds: int,
    ) -> RoundDraft:
        bracket_size = monrad.final_bracket_size or default_final_bracket_size(
            len(units)
        )
        warnings = validate_monrad_config(swiss_rounds, bracket_size, len(units))
        skeleton = request.bracket or generate_bracket_skeleton(
            bracket_size, tournament_id=self.tournament_id
        )
        tournament = MonradTournament(
            phase1=[],
            phase2=skeleton,
            swiss_rounds=swiss_rounds,
            final_bracket_size=skeleton.bracket_size,
            teams=units,
        )
        seeded = seed_monrad_knockout(tournament, request.standings)
        draft = self._bracket_wave(seeded.phase2, request)
        draft.warnings.extend(warnings)
        return draft
