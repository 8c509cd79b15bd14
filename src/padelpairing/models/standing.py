"""Data model for a participant's standing."""

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

from dataclasses import dataclass
from typing import Any, Dict, Optional


@dataclass
class Standing:
    """Running standing of a single participant.

    Attributes:
        tournament_id: Owning tournament
        user_id: Participant id
        matches_played: Always ``matches_won + matches_drawn + matches_lost``
        matches_won: Matches won
        matches_drawn: Matches drawn
        matches_lost: Matches lost
        games_won: Games scored across all matches
        games_lost: Games conceded across all matches
        points: Standings points, never decreases as results are folded in
        fair_play_points: Optional fair-play tally carried for the caller
        rank: 1-based rank, written only by the standings calculator
    """

    tournament_id: str
    user_id: str
    matches_played: int = 0
    matches_won: int = 0
    matches_drawn: int = 0
    matches_lost: int = 0
    games_won: int = 0
    games_lost: int = 0
    points: float = 0
    fair_play_points: Optional[float] = None
    rank: Optional[int] = None

    @property
    def games_diff(self) -> int:
        return self.games_won - self.games_lost

    def to_dict(self) -> Dict[str, Any]:
        """Serialize standing to dictionary."""
        return {
            "tournament_id": self.tournament_id,
            "user_id": self.user_id,
            "matches_played": self.matches_played,
            "matches_won": self.matches_won,
            "matches_drawn": self.matches_drawn,
            "matches_lost": self.matches_lost,
            "games_won": self.games_won,
            "games_lost": self.games_lost,
            "games_diff": self.games_diff,
            "points": self.points,
            "fair_play_points": self.fair_play_points,
            "rank": self.rank,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Standing":
        """Deserialize standing from dictionary (``games_diff`` is derived)."""
        return cls(
            tournament_id=data.get("tournament_id", ""),
            user_id=data["user_id"],
            matches_played=data.get("matches_played", 0),
            matches_won=data.get("matches_won", 0),
            matches_drawn=data.get("matches_drawn", 0),
            matches_lost=data.get("matches_lost", 0),
            games_won=data.get("games_won", 0),
            games_lost=data.get("games_lost", 0),
            points=data.get("points", 0),
            fair_play_points=data.get("fair_play_points"),
            rank=data.get("rank"),
        )
