"""Data models for knockout brackets.

A bracket is an arena of :class:`BracketPosition` rows addressed by integer
index. Links between positions are indices, never object references, so rows
for rounds that have not been played yet exist and can be persisted before
their teams are known.
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

import copy
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from padelpairing.models.enums import BracketType, TournamentType
from padelpairing.models.match import Match
from padelpairing.models.participant import Team
from padelpairing.type_hints import Outcome


@dataclass(frozen=True)
class Feed:
    """Upstream source of a slot: the outcome of the position at ``index``."""

    index: int
    outcome: Outcome

    def to_dict(self) -> Dict[str, Any]:
        return {"index": self.index, "outcome": self.outcome}

    @classmethod
    def from_dict(cls, data: Optional[Dict[str, Any]]) -> Optional["Feed"]:
        if not data:
            return None
        return cls(index=data["index"], outcome=data["outcome"])


@dataclass
class BracketPosition:
    """A slot in a knockout bracket that holds one match.

    Attributes:
        index: Arena address of this position
        match_id: Id of the match played at this position
        bracket_type: Section of the bracket
        round_number: Round inside the section (1-indexed)
        position: Position inside the round (0-indexed)
        round_name: Human readable round label
        winner_to: Index of the position the winner moves to (None = terminal)
        winner_slot: Team slot (1 or 2) the winner takes downstream
        loser_to: Index of the position the loser drops to (None = eliminated)
        loser_slot: Team slot (1 or 2) the loser takes downstream
        team1_from: Upstream feed of the team 1 slot (None = seeded directly)
        team2_from: Upstream feed of the team 2 slot (None = seeded directly)
        is_conditional: Only played when a condition is met (bracket reset)
    """

    index: int
    match_id: str
    bracket_type: BracketType
    round_number: int
    position: int
    round_name: str = ""
    winner_to: Optional[int] = None
    winner_slot: Optional[int] = None
    loser_to: Optional[int] = None
    loser_slot: Optional[int] = None
    team1_from: Optional[Feed] = None
    team2_from: Optional[Feed] = None
    is_conditional: bool = False

    @property
    def is_terminal(self) -> bool:
        return self.winner_to is None and self.loser_to is None

    def feed(self, slot: int) -> Optional[Feed]:
        return self.team1_from if slot == 1 else self.team2_from

    def to_dict(self) -> Dict[str, Any]:
        return {
            "index": self.index,
            "match_id": self.match_id,
            "bracket_type": self.bracket_type.value,
            "round_number": self.round_number,
            "position": self.position,
            "round_name": self.round_name,
            "winner_to": self.winner_to,
            "winner_slot": self.winner_slot,
            "loser_to": self.loser_to,
            "loser_slot": self.loser_slot,
            "team1_from": self.team1_from.to_dict() if self.team1_from else None,
            "team2_from": self.team2_from.to_dict() if self.team2_from else None,
            "is_conditional": self.is_conditional,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "BracketPosition":
        return cls(
            index=data["index"],
            match_id=data["match_id"],
            bracket_type=BracketType(data["bracket_type"]),
            round_number=data["round_number"],
            position=data["position"],
            round_name=data.get("round_name", ""),
            winner_to=data.get("winner_to"),
            winner_slot=data.get("winner_slot"),
            loser_to=data.get("loser_to"),
            loser_slot=data.get("loser_slot"),
            team1_from=Feed.from_dict(data.get("team1_from")),
            team2_from=Feed.from_dict(data.get("team2_from")),
            is_conditional=data.get("is_conditional", False),
        )


@dataclass
class Bracket:
    """Complete knockout bracket: progression arena plus its match rows.

    Attributes:
        tournament_id: Owning tournament
        tournament_type: Single or double elimination
        bracket_size: Power-of-two slot count of the main bracket
        total_byes: Main-bracket slots without an entrant
        positions: Arena of bracket positions, ``positions[i].index == i``
        matches: Match rows keyed by match id; a conditional position has no
            row until it is activated
        seeds: Entrants in seed order (seed 1 first)
        bye_ids: Ids of the teams that skip round 1 of the main bracket
    """

    tournament_id: str
    tournament_type: TournamentType
    bracket_size: int
    total_byes: int = 0
    positions: List[BracketPosition] = field(default_factory=list)
    matches: Dict[str, Match] = field(default_factory=dict)
    seeds: List[Team] = field(default_factory=list)
    bye_ids: List[str] = field(default_factory=list)

    # ========== Lookups ==========

    def position_for_match(self, match_id: str) -> Optional[BracketPosition]:
        for position in self.positions:
            if position.match_id == match_id:
                return position
        return None

    def match_at(self, position: BracketPosition) -> Optional[Match]:
        return self.matches.get(position.match_id)

    def positions_in(
        self, bracket_type: BracketType, round_number: Optional[int] = None
    ) -> List[BracketPosition]:
        """Positions of one bracket section, optionally limited to a round."""
        found = [
            p
            for p in self.positions
            if p.bracket_type == bracket_type
            and (round_number is None or p.round_number == round_number)
        ]
        return sorted(found, key=lambda p: (p.round_number, p.position))

    def rounds(self, bracket_type: BracketType = BracketType.MAIN) -> List[int]:
        return sorted({p.round_number for p in self.positions_in(bracket_type)})

    def round_matches(
        self, round_number: int, bracket_type: BracketType = BracketType.MAIN
    ) -> List[Match]:
        """Match rows of one round in position order."""
        matches = []
        for position in self.positions_in(bracket_type, round_number):
            match = self.match_at(position)
            if match is not None:
                matches.append(match)
        return matches

    @property
    def terminal_positions(self) -> List[BracketPosition]:
        """Positions with no downstream link (final, third place, bracket reset)."""
        return [p for p in self.positions if p.is_terminal]

    @property
    def total_matches(self) -> int:
        return len(self.matches)

    def copy(self) -> "Bracket":
        return copy.deepcopy(self)

    # ========== Serialization ==========

    def to_dict(self) -> Dict[str, Any]:
        """Serialize bracket to dictionary."""
        return {
            "tournament_id": self.tournament_id,
            "tournament_type": self.tournament_type.value,
            "bracket_size": self.bracket_size,
            "total_byes": self.total_byes,
            "positions": [p.to_dict() for p in self.positions],
            "matches": [m.to_dict() for m in self.matches.values()],
            "seeds": [team.to_list() for team in self.seeds],
            "bye_ids": list(self.bye_ids),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Bracket":
        """Deserialize bracket from dictionary."""
        matches = [Match.from_dict(m) for m in data.get("matches", [])]
        return cls(
            tournament_id=data.get("tournament_id", ""),
            tournament_type=TournamentType(data["tournament_type"]),
            bracket_size=data["bracket_size"],
            total_byes=data.get("total_byes", 0),
            positions=[BracketPosition.from_dict(p) for p in data.get("positions", [])],
            matches={m.id: m for m in matches},
            seeds=[Team.from_ids(ids) for ids in data.get("seeds", [])],
            bye_ids=list(data.get("bye_ids", [])),
        )


@dataclass
class TournamentGroup:
    """Round-robin group with the playoff qualification rule.

    Attributes:
        id: Group id
        group_name: Letter name (A, B, C, ...)
        group_number: 1-based group number
        participant_ids: Team ids of the group in seed order
        top_advance: Number of teams advancing to the playoff
    """

    id: str
    group_name: str
    group_number: int
    participant_ids: List[str] = field(default_factory=list)
    top_advance: int = 2

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "group_name": self.group_name,
            "group_number": self.group_number,
            "participant_ids": list(self.participant_ids),
            "top_advance": self.top_advance,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "TournamentGroup":
        return cls(
            id=data["id"],
            group_name=data["group_name"],
            group_number=data["group_number"],
            participant_ids=list(data.get("participant_ids", [])),
            top_advance=data.get("top_advance", 2),
        )
