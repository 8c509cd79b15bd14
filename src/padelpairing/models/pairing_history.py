"""Pairing history used to prevent rematches."""

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
from typing import Any, Dict, Iterable, Set

from padelpairing.models.match import Match
from padelpairing.models.participant import Team


@dataclass
class PairingHistory:
    """Tracks historical pairings to prevent repeat matches.

    Attributes:
        previous_matches: One ``frozenset({team_a.key, team_b.key})`` entry
            for each two teams that have already been drawn against each other
    """

    previous_matches: Set[frozenset] = field(default_factory=set)

    @classmethod
    def from_matches(cls, matches: Iterable[Match]) -> "PairingHistory":
        """Build the history from every match that has two teams assigned."""
        history = cls()
        for match in matches:
            if match.has_both_teams:
                history.add_pairing(match.team1, match.team2)
        return history

    def add_pairing(self, team_a: Team, team_b: Team) -> None:
        """Record that two teams have been paired."""
        self.previous_matches.add(frozenset({team_a.key, team_b.key}))

    def have_played(self, team_a: Team, team_b: Team) -> bool:
        """Check if two teams have previously played each other."""
        return frozenset({team_a.key, team_b.key}) in self.previous_matches

    def to_dict(self) -> Dict[str, Any]:
        """Serialize pairing history to dictionary."""
        return {
            "previous_matches": [
                [sorted(team_key) for team_key in pair]
                for pair in self.previous_matches
            ],
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "PairingHistory":
        """Deserialize pairing history from dictionary."""
        return cls(
            previous_matches=set(
                frozenset(frozenset(map(str, team)) for team in pair)
                for pair in data.get("previous_matches", [])
            ),
        )
