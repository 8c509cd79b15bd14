"""Closed enumerations shared across the engine."""

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

from enum import Enum


class ParticipantStatus(str, Enum):
    REGISTERED = "registered"
    CHECKED_IN = "checked_in"
    NO_SHOW = "no_show"
    DISQUALIFIED = "disqualified"


class MatchStatus(str, Enum):
    PENDING = "pending"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"
    FORFEITED = "forfeited"

    @property
    def is_finished(self) -> bool:
        return self in (MatchStatus.COMPLETED, MatchStatus.FORFEITED)


class RoundStatus(str, Enum):
    PENDING = "pending"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"


class CourtStatus(str, Enum):
    ACTIVE = "active"
    INACTIVE = "inactive"


class TournamentType(str, Enum):
    ROUND_ROBIN = "round_robin"
    SWISS = "swiss"
    KNOCKOUT_SINGLE = "knockout_single"
    KNOCKOUT_DOUBLE = "knockout_double"
    MONRAD = "monrad"


class BracketType(str, Enum):
    """Section of a knockout bracket a position belongs to."""

    MAIN = "main"
    LOSERS = "losers"
    THIRD_PLACE = "third_place"
    GRAND_FINAL = "grand_final"


class PairingMethod(str, Enum):
    """Swiss round-1 pairing method."""

    SLIDE = "slide"
    FOLD = "fold"
    ACCELERATED = "accelerated"


class CourtStrategy(str, Enum):
    BALANCED = "balanced"
    SEQUENTIAL = "sequential"
    RANDOM = "random"


class SeedingMethod(str, Enum):
    RANDOM = "random"
    RANKED = "ranked"
    MANUAL = "manual"
