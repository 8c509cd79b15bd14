"""Data models for participants, doubles teams and courts."""

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
from typing import Any, Dict, Iterable, List, Optional, Sequence, Tuple

from padelpairing.constants import TEAM_ID_SEPARATOR
from padelpairing.models.enums import CourtStatus, ParticipantStatus


@dataclass
class Participant:
    """A registered tournament participant.

    Attributes:
        id: Participant (user) id, also used as the standings key
        skill_level: Optional rating used for seeding; higher is stronger
        status: Registration status, only ``checked_in`` players are paired
        name: Display name, informational only
    """

    id: str
    skill_level: Optional[float] = None
    status: ParticipantStatus = ParticipantStatus.REGISTERED
    name: Optional[str] = None

    @property
    def is_checked_in(self) -> bool:
        return self.status == ParticipantStatus.CHECKED_IN

    def to_dict(self) -> Dict[str, Any]:
        """Serialize participant to dictionary."""
        return {
            "id": self.id,
            "skill_level": self.skill_level,
            "status": self.status.value,
            "name": self.name,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Participant":
        """Deserialize participant from dictionary."""
        return cls(
            id=data["id"],
            skill_level=data.get("skill_level"),
            status=ParticipantStatus(data.get("status", "registered")),
            name=data.get("name"),
        )


def checked_in(participants: Iterable[Participant]) -> List[Participant]:
    """Filter participants down to the ones eligible for pairing."""
    return [p for p in participants if p.is_checked_in]


@dataclass(frozen=True)
class Team:
    """Ordered pair of participant ids playing as one unit.

    Singles entrants are represented with the same id in both slots, which
    keeps every match shaped as team-versus-team.
    """

    player1_id: str
    player2_id: str

    @classmethod
    def single(cls, player_id: str) -> "Team":
        return cls(player_id, player_id)

    @classmethod
    def from_ids(cls, ids: Sequence[str]) -> "Team":
        """Build a team from one or two ids (a one-element list is singles)."""
        ids = list(ids)
        if len(ids) == 1:
            return cls.single(ids[0])
        if len(ids) != 2:
            raise ValueError(f"A team needs one or two player ids, got {ids}")
        return cls(ids[0], ids[1])

    @property
    def is_singles(self) -> bool:
        return self.player1_id == self.player2_id

    @property
    def player_ids(self) -> Tuple[str, ...]:
        """Distinct member ids in slot order."""
        if self.is_singles:
            return (self.player1_id,)
        return (self.player1_id, self.player2_id)

    @property
    def id(self) -> str:
        return TEAM_ID_SEPARATOR.join(self.player_ids)

    @property
    def key(self) -> frozenset:
        """Order-independent identity, so (a, b) and (b, a) are the same team."""
        return frozenset(self.player_ids)

    def has_player(self, player_id: str) -> bool:
        return player_id in self.player_ids

    def to_list(self) -> List[str]:
        return [self.player1_id, self.player2_id]

    def __str__(self) -> str:
        return self.id


@dataclass
class Court:
    """A playing court, only used for assignment strategies."""

    id: str
    name: Optional[str] = None
    status: CourtStatus = CourtStatus.ACTIVE

    @property
    def is_active(self) -> bool:
        return self.status == CourtStatus.ACTIVE

    def to_dict(self) -> Dict[str, Any]:
        return {"id": self.id, "name": self.name, "status": self.status.value}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Court":
        return cls(
            id=data["id"],
            name=data.get("name"),
            status=CourtStatus(data.get("status", "active")),
        )
