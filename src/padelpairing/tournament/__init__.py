"""Standings, bracket progression, courts and round scheduling.

The round engine is imported from :mod:`padelpairing.tournament.engine`.
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

from padelpairing.tournament.courts import (
    assign_courts,
    get_court_usage_stats,
    get_least_used_courts,
    validate_court_assignments,
)
from padelpairing.tournament.progression import (
    ProgressionResult,
    advance_winner,
    apply_results,
    get_champion,
    is_bracket_complete,
)
from padelpairing.tournament.schedule import schedule_round, schedule_rounds
from padelpairing.tournament.standings import StandingsCalculator, rank_teams
from padelpairing.tournament.teams import form_teams
from padelpairing.tournament.validation import (
    ValidationResult,
    validate_tournament_start,
)

__all__ = [
    "StandingsCalculator",
    "rank_teams",
    "form_teams",
    "advance_winner",
    "apply_results",
    "get_champion",
    "is_bracket_complete",
    "ProgressionResult",
    "assign_courts",
    "get_court_usage_stats",
    "get_least_used_courts",
    "validate_court_assignments",
    "schedule_round",
    "schedule_rounds",
    "validate_tournament_start",
    "ValidationResult",
]
