"""Tournament Simulator - plays complete padel tournaments with random results.

The simulator creates a field of checked-in players with skill levels,
asks :class:`~padelpairing.tournament.engine.TournamentEngine` for every
round, invents results that favour the stronger team and folds them into the
standings, exactly as a caller of the library would. Everything random is
drawn from one seeded generator, so a seed always replays the same event.
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
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple

from padelpairing.constants import DOUBLES_TEAM_SIZE
from padelpairing.models.bracket import Bracket
from padelpairing.models.enums import (
    CourtStrategy,
    MatchStatus,
    ParticipantStatus,
    TournamentType,
)
from padelpairing.models.match import Match, Round
from padelpairing.models.participant import Court, Participant, Team
from padelpairing.models.standing import Standing
from padelpairing.models.tournament_config import FormatSettings, TournamentConfig
from padelpairing.pairing.monrad import default_swiss_rounds
from padelpairing.pairing.round_robin import calculate_round_robin_rounds
from padelpairing.pairing.swiss import calculate_swiss_rounds
from padelpairing.tournament.courts import validate_court_assignments
from padelpairing.tournament.engine import TournamentEngine
from padelpairing.tournament.progression import (
    apply_results,
    get_champion,
    is_bracket_complete,
)
from padelpairing.tournament.standings import StandingsCalculator, rank_teams
from padelpairing.tournament.teams import reconstruct_teams
from padelpairing.utils import setup_logger

logger = setup_logger(__name__)

KNOCKOUT_TYPES = (TournamentType.KNOCKOUT_SINGLE, TournamentType.KNOCKOUT_DOUBLE)
GAMES_PER_SET = 6
ROUND_LIMIT = 128


class SkillDistribution(Enum):
    """How player skill levels are spread over the configured range."""

    UNIFORM = "uniform"
    NORMAL = "normal"
    CLUB = "club"


class ResultPattern(Enum):
    """How match results relate to team strength."""

    REALISTIC = "realistic"
    PREDICTABLE = "predictable"
    UPSET_FRIENDLY = "upset_friendly"
    RANDOM = "random"


@dataclass
class SimulationConfig:
    """Configuration for the tournament simulator."""

    tournament_type: TournamentType = TournamentType.SWISS
    num_players: int = 16
    is_doubles: bool = True
    num_courts: int = 4
    skill_distribution: SkillDistribution = SkillDistribution.NORMAL
    skill_range: Tuple[float, float] = (1.0, 7.0)
    result_pattern: ResultPattern = ResultPattern.REALISTIC
    draw_rate: float = 0.0
    forfeit_rate: float = 0.0
    no_show_rate: float = 0.0
    seed: Optional[int] = None
    court_strategy: CourtStrategy = CourtStrategy.BALANCED
    format_settings: FormatSettings = field(default_factory=FormatSettings)

    @property
    def tournament_config(self) -> TournamentConfig:
        return TournamentConfig(
            type=self.tournament_type, format_settings=self.format_settings
        )


@dataclass
class SimulationReport:
    """Everything produced while playing one simulated tournament."""

    config: SimulationConfig
    participants: List[Participant] = field(default_factory=list)
    rounds: List[Round] = field(default_factory=list)
    matches: List[Match] = field(default_factory=list)
    standings: List[Standing] = field(default_factory=list)
    bracket: Optional[Bracket] = None
    champion: Optional[Team] = None
    warnings: List[str] = field(default_factory=list)
    court_errors: List[str] = field(default_factory=list)

    @property
    def total_rounds(self) -> int:
        return len(self.rounds)

    @property
    def total_matches(self) -> int:
        return len(self.matches)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "tournament_type": self.config.tournament_type.value,
            "seed": self.config.seed,
            "participants": [p.to_dict() for p in self.participants],
            "rounds": [r.to_dict() for r in self.rounds],
            "standings": [s.to_dict() for s in self.standings],
            "bracket": self.bracket.to_dict() if self.bracket else None,
            "champion": self.champion.to_list() if self.champion else None,
            "warnings": list(self.warnings),
            "court_errors": list(self.court_errors),
        }


class PlayerFactory:
    """Creates the simulated field."""

    def __init__(self, config: SimulationConfig, rng: random.Random):
        self.config = config
        self.random = rng

    def create_participants(self) -> List[Participant]:
        participants = []
        for number in range(1, self.config.num_players + 1):
            skill = round(self._generate_skill(), 2)
            participants.append(
                Participant(
                    id=f"P{number:03d}",
                    skill_level=skill,
                    status=self._generate_status(),
                    name=f"{self._level_name(skill)}-{number:03d}",
                )
            )
        logger.info(
            f"Created {len(participants)} players with "
            f"{self.config.skill_distribution.value} skill distribution"
        )
        return participants

    def _generate_status(self) -> ParticipantStatus:
        if self.random.random() < self.config.no_show_rate:
            return ParticipantStatus.NO_SHOW
        return ParticipantStatus.CHECKED_IN

    def _generate_skill(self) -> float:
        low, high = self.config.skill_range
        if self.config.skill_distribution == SkillDistribution.UNIFORM:
            return self.random.uniform(low, high)
        if self.config.skill_distribution == SkillDistribution.CLUB:
            base = self.random.choice([2.0, 3.0, 3.5, 4.0, 5.0])
            return max(low, min(high, base + self.random.uniform(-0.25, 0.25)))
        mean = (low + high) / 2
        std_dev = (high - low) / 6
        return max(low, min(high, self.random.gauss(mean, std_dev)))

    @staticmethod
    def _level_name(skill: float) -> str:
        if skill < 2.5:
            return "Beginner"
        if skill < 4.0:
            return "Intermediate"
        if skill < 5.5:
            return "Advanced"
        return "Pro"


class ResultSimulator:
    """Invents results for padel matches.

    A result is a best-of-three-sets match reported as total games won by
    each team, which is what the standings tie-breaks count.
    """

    def __init__(self, config: SimulationConfig, rng: random.Random):
        self.config = config
        self.random = rng

    def play(
        self, match: Match, skills: Dict[str, float], allow_draw: bool = True
    ) -> Match:
        """Return a finished copy of ``match``."""
        if self.random.random() < self.config.forfeit_rate:
            return replace(
                match,
                status=MatchStatus.FORFEITED,
                winner_team=self.random.choice([1, 2]),
            )

        if allow_draw and self.random.random() < self.config.draw_rate:
            games = self.random.randint(GAMES_PER_SET, 2 * GAMES_PER_SET)
            return replace(
                match,
                status=MatchStatus.COMPLETED,
                team1_score=games,
                team2_score=games,
                is_draw=True,
            )

        team1_wins = self.random.random() < self._team1_win_probability(
            match, skills
        )
        winner_games, loser_games = self._games()
        team1_score, team2_score = (
            (winner_games, loser_games) if team1_wins else (loser_games, winner_games)
        )
        return replace(
            match,
            status=MatchStatus.COMPLETED,
            team1_score=team1_score,
            team2_score=team2_score,
            winner_team=1 if team1_wins else 2,
        )

    def _team1_win_probability(self, match: Match, skills: Dict[str, float]) -> float:
        if self.config.result_pattern == ResultPattern.RANDOM:
            return 0.5
        diff = self._strength(match.team1, skills) - self._strength(match.team2, skills)
        if self.config.result_pattern == ResultPattern.PREDICTABLE:
            scale = 0.5
        elif self.config.result_pattern == ResultPattern.UPSET_FRIENDLY:
            scale = 4.0
        else:
            scale = 1.5
        probability = 1.0 / (1.0 + math.exp(-diff / scale))
        return max(0.02, min(0.98, probability))

    @staticmethod
    def _strength(team: Team, skills: Dict[str, float]) -> float:
        levels = [skills.get(pid, 0.0) for pid in team.player_ids]
        return sum(levels) / len(levels)

    def _games(self) -> Tuple[int, int]:
        """Games for winner and loser over two or three sets."""
        winner = loser = 0
        sets = [True, True] if self.random.random() < 0.6 else [True, False, True]
        for winner_takes_set in sets:
            beaten = self.random.randint(0, GAMES_PER_SET - 2)
            if winner_takes_set:
                winner += GAMES_PER_SET
                loser += beaten
            else:
                winner += beaten
                loser += GAMES_PER_SET
        return winner, loser


class TournamentSimulator:
    """Plays a full tournament through the public engine API."""

    def __init__(self, config: SimulationConfig):
        self.config = config
        self.random = (
            random.Random(config.seed) if config.seed is not None else random.Random()
        )
        self.engine = TournamentEngine(tournament_id="sim")
        self.calculator = StandingsCalculator()
        self.results = ResultSimulator(config, self.random)

    def create_courts(self) -> List[Court]:
        return [
            Court(id=f"court-{number}", name=f"Court {number}")
            for number in range(1, self.config.num_courts + 1)
        ]

    def run(self) -> SimulationReport:
        """Play every round until the format is finished."""
        config = self.config
        tournament_config = config.tournament_config
        report = SimulationReport(config=config)
        report.participants = PlayerFactory(config, self.random).create_participants()
        courts = self.create_courts()

        eligible = [p for p in report.participants if p.is_checked_in]
        if config.is_doubles and len(eligible) % DOUBLES_TEAM_SIZE:
            # doubles needs an even field, the last arrival is turned away
            eligible[-1].status = ParticipantStatus.NO_SHOW
            eligible = eligible[:-1]
        skills = {p.id: p.skill_level or 0.0 for p in eligible}
        standings = self.calculator.calculate_standings(
            "sim", [], tournament_config, participant_ids=[p.id for p in eligible]
        )

        bracket: Optional[Bracket] = None
        round_number = 0
        while not self._finished(round_number, eligible, bracket, report.matches):
            round_number += 1
            if round_number > ROUND_LIMIT:
                raise RuntimeError(f"Simulation did not finish in {ROUND_LIMIT} rounds")

            plan = self.engine.generate_next_round(
                config.tournament_type,
                report.participants,
                round_number,
                report.matches,
                standings,
                courts,
                court_strategy=config.court_strategy,
                config=tournament_config,
                bracket=bracket,
                seed=self.random,
                is_doubles=config.is_doubles,
            )
            report.warnings.extend(plan.warnings)
            bracket = plan.bracket if plan.bracket is not None else bracket
            standings = plan.standings

            allow_draw = not self._is_bracket_round(plan.matches, plan.bracket)
            played = []
            for match in plan.matches:
                result = self.results.play(match, skills, allow_draw=allow_draw)
                standings = self.calculator.update_standings_for_match(
                    result, standings, tournament_config
                )
                played.append(result)
            report.matches.extend(played)
            report.rounds.append(replace(plan.round, matches=played))
            logger.info(f"Simulated round {round_number}: {len(played)} matches")

        report.standings = standings
        if bracket is not None:
            bracket = apply_results(bracket, report.matches)
            report.champion = get_champion(bracket)
        else:
            units = self._units(eligible, report.matches)
            ranked = rank_teams(units, standings)
            report.champion = ranked[0] if ranked else None
        report.bracket = bracket
        report.court_errors = validate_court_assignments(report.matches, courts).errors

        logger.info(
            f"Simulation finished after {report.total_rounds} rounds and "
            f"{report.total_matches} matches, champion {report.champion}"
        )
        return report

    # ========== Completion ==========

    def _units(self, eligible: List[Participant], matches: List[Match]) -> List[Team]:
        if not self.config.is_doubles:
            return [Team.single(p.id) for p in eligible]
        return reconstruct_teams(matches, [p.id for p in eligible])

    def _unit_count(self, eligible: List[Participant]) -> int:
        if self.config.is_doubles:
            return len(eligible) // DOUBLES_TEAM_SIZE
        return len(eligible)

    def _group_rounds(self, eligible: List[Participant]) -> int:
        settings = self.config.format_settings
        largest = math.ceil(self._unit_count(eligible) / max(settings.groups, 1))
        return calculate_round_robin_rounds(largest)

    @staticmethod
    def _is_bracket_round(matches: List[Match], bracket: Optional[Bracket]) -> bool:
        """Knockout matches need a winner, so no draws are simulated for them."""
        if bracket is None:
            return False
        return any(match.id in bracket.matches for match in matches)

    def _finished(
        self,
        played_rounds: int,
        eligible: List[Participant],
        bracket: Optional[Bracket],
        matches: List[Match],
    ) -> bool:
        settings = self.config.format_settings
        kind = self.config.tournament_type

        def bracket_done() -> bool:
            return (
                bracket is not None
                and bool(bracket.seeds)
                and is_bracket_complete(apply_results(bracket, matches))
            )

        if kind in KNOCKOUT_TYPES:
            return bracket_done()
        if kind == TournamentType.SWISS:
            unit_count = self._unit_count(eligible)
            total = settings.rounds or calculate_swiss_rounds(unit_count)
            return played_rounds >= total
        if kind == TournamentType.MONRAD:
            swiss_rounds = settings.initial_rounds or default_swiss_rounds(
                self._unit_count(eligible)
            )
            return played_rounds > swiss_rounds and bracket_done()
        group_rounds = self._group_rounds(eligible)
        if settings.groups > 1 and settings.playoffs:
            return played_rounds > group_rounds and bracket_done()
        return played_rounds >= group_rounds
