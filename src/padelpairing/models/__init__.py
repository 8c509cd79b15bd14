"""Core data types of the pairing engine."""

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

from padelpairing.models.bracket import (
    Bracket,
    BracketPosition,
    Feed,
    TournamentGroup,
)
from padelpairing.models.enums import (
    BracketType,
    CourtStatus,
    CourtStrategy,
    MatchStatus,
    PairingMethod,
    ParticipantStatus,
    RoundStatus,
    SeedingMethod,
    TournamentType,
)
from padelpairing.models.match import Match, Round
from padelpairing.models.pairing_history import PairingHistory
from padelpairing.models.participant import Court, Participant, Team, checked_in
from padelpairing.models.standing import Standing
from padelpairing.models.tournament_config import FormatSettings, TournamentConfig

__all__ = [
    "Bracket",
    "BracketPosition",
    "BracketType",
    "Court",
    "CourtStatus",
    "CourtStrategy",
    "Feed",
    "FormatSettings",
    "Match",
    "MatchStatus",
    "PairingHistory",
    "PairingMethod",
    "Participant",
    "ParticipantStatus",
    "Round",
    "RoundStatus",
    "SeedingMethod",
    "Standing",
    "Team",
    "TournamentConfig",
    "TournamentGroup",
    "TournamentType",
    "checked_in",
]
