"""Data models for matches and rounds."""

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
from datetime import datetime
from typing import Any, Dict, List, Optional

from padelpairing.models.enums import MatchStatus, RoundStatus
from padelpairing.models.participant import Team


def _team_from_data(data: Optional[List[str]]) -> Optional[Team]:
    if not data:
        return None
    return Team.from_ids(data)


@dataclass
class Match:
    """A single match between two teams.

    Attributes:
        id: Match id
        round_id: Owning round id (may be empty until the caller persists it)
        round_number: Round number the match was generated for
        court_id: Assigned court, or None while waiting for a court
        team1: First team, None while a knockout slot is undetermined
        team2: Second team, None while a knockout slot is undetermined
        team1_score: Games won by team 1
        team2_score: Games won by team 2
        winner_team: 1, 2 or None
        is_draw: True when the match ended level
        status: Lifecycle status
        group_number: Round-robin group the match belongs to, if any
    """

    id: str
    round_id: str = ""
    round_number: Optional[int] = None
    court_id: Optional[str] = None
    team1: Optional[Team] = None
    team2: Optional[Team] = None
    team1_score: Optional[int] = None
    team2_score: Optional[int] = None
    winner_team: Optional[int] = None
    is_draw: bool = False
    status: MatchStatus = MatchStatus.PENDING
    group_number: Optional[int] = None

    @property
    def is_finished(self) -> bool:
        return self.status.is_finished

    @property
    def has_both_teams(self) -> bool:
        return self.team1 is not None and self.team2 is not None

    @property
    def player_ids(self) -> List[str]:
        ids: List[str] = []
        for team in (self.team1, self.team2):
            if team is not None:
                ids.extend(team.player_ids)
        return ids

    def team(self, slot: int) -> Optional[Team]:
        return self.team1 if slot == 1 else self.team2

    def resolved_winner(self) -> Optional[int]:
        """Return the winning slot, deriving it from scores when unset."""
        if self.winner_team in (1, 2):
            return self.winner_team
        if self.is_draw or self.team1_score is None or self.team2_score is None:
            return None
        if self.team1_score > self.team2_score:
            return 1
        if self.team2_score > self.team1_score:
            return 2
        return None

    def winning_team(self) -> Optional[Team]:
        slot = self.resolved_winner()
        return self.team(slot) if slot else None

    def losing_team(self) -> Optional[Team]:
        slot = self.resolved_winner()
        return self.team(3 - slot) if slot else None

    def opposes(self, team_a: Team, team_b: Team) -> bool:
        """Check whether the two teams faced each other in this match."""
        if not self.has_both_teams:
            return False
        keys = {self.team1.key, self.team2.key}
        return keys == {team_a.key, team_b.key}

    def to_dict(self) -> Dict[str, Any]:
        """Serialize match to dictionary."""
        return {
            "id": self.id,
            "round_id": self.round_id,
            "round_number": self.round_number,
            "court_id": self.court_id,
            "team1": self.team1.to_list() if self.team1 else None,
            "team2": self.team2.to_list() if self.team2 else None,
            "team1_score": self.team1_score,
            "team2_score": self.team2_score,
            "winner_team": self.winner_team,
            "is_draw": self.is_draw,
            "status": self.status.value,
            "group_number": self.group_number,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Match":
        """Deserialize match from dictionary."""
        return cls(
            id=data["id"],
            round_id=data.get("round_id", ""),
            round_number=data.get("round_number"),
            court_id=data.get("court_id"),
            team1=_team_from_data(data.get("team1")),
            team2=_team_from_data(data.get("team2")),
            team1_score=data.get("team1_score"),
            team2_score=data.get("team2_score"),
            winner_team=data.get("winner_team"),
            is_draw=data.get("is_draw", False),
            status=MatchStatus(data.get("status", "pending")),
            group_number=data.get("group_number"),
        )


@dataclass
class Round:
    """Container for all data related to a single tournament round.

    Attributes:
        id: Round id
        tournament_id: Owning tournament
        round_number: Round number (1-indexed)
        status: Lifecycle status of the round
        matches: Matches owned by the round
        bye_ids: Team ids that sit out this round with a bye
        starts_at: Optional start of the time window, see
            :mod:`padelpairing.tournament.schedule`
        ends_at: Optional end of the time window
    """

    id: str
    tournament_id: str
    round_number: int
    status: RoundStatus = RoundStatus.PENDING
    matches: List[Match] = field(default_factory=list)
    bye_ids: List[str] = field(default_factory=list)
    starts_at: Optional[datetime] = None
    ends_at: Optional[datetime] = None

    @property
    def is_complete(self) -> bool:
        """A round is complete when it has matches and all of them finished."""
        return bool(self.matches) and all(m.is_finished for m in self.matches)

    def to_dict(self) -> Dict[str, Any]:
        """Serialize round to dictionary."""
        return {
            "id": self.id,
            "tournament_id": self.tournament_id,
            "round_number": self.round_number,
            "status": self.status.value,
            "matches": [m.to_dict() for m in self.matches],
            "bye_ids": list(self.bye_ids),
            "starts_at": self.starts_at.isoformat() if self.starts_at else None,
            "ends_at": self.ends_at.isoformat() if self.ends_at else None,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Round":
        """Deserialize round from dictionary."""
        starts_at = data.get("starts_at")
        ends_at = data.get("ends_at")
        return cls(
            id=data["id"],
            tournament_id=data.get("tournament_id", ""),
            round_number=data["round_number"],
            status=RoundStatus(data.get("status", "pending")),
            matches=[Match.from_dict(m) for m in data.get("matches", [])],
            bye_ids=list(data.get("bye_ids", [])),
            starts_at=datetime.fromisoformat(starts_at) if starts_at else None,
            ends_at=datetime.fromisoformat(ends_at) if ends_at else None,
        )
