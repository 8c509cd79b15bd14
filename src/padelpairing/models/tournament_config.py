"""Tournament configuration models."""

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
from typing import Any, Dict, Optional, Tuple

from padelpairing.constants import (
    DEFAULT_MATCH_DURATION_MINUTES,
    DEFAULT_POINTS_PER_DRAW,
    DEFAULT_POINTS_PER_LOSS,
    DEFAULT_POINTS_PER_WIN,
)
from padelpairing.models.enums import PairingMethod, SeedingMethod, TournamentType


@dataclass(frozen=True)
class FormatSettings:
    """Format-specific settings.

    Attributes:
        groups: Round-robin group count (1 = single group)
        top_per_group: Teams per group advancing to the playoff
        playoffs: Whether group play is followed by a knockout
        seeding: Knockout seeding method
        seed_order: Explicit team/player order for manual seeding
        bronze_match: Play a third-place match in single elimination
        rounds: Number of Swiss rounds
        pairing_method: Swiss pairing method
        initial_rounds: Monrad Swiss-phase rounds
        bracket_size: Monrad knockout size
    """

    groups: int = 1
    top_per_group: int = 2
    playoffs: bool = False
    seeding: SeedingMethod = SeedingMethod.RANKED
    seed_order: Tuple[str, ...] = ()
    bronze_match: bool = False
    rounds: Optional[int] = None
    pairing_method: PairingMethod = PairingMethod.SLIDE
    initial_rounds: Optional[int] = None
    bracket_size: Optional[int] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "groups": self.groups,
            "top_per_group": self.top_per_group,
            "playoffs": self.playoffs,
            "seeding": self.seeding.value,
            "seed_order": list(self.seed_order),
            "bronze_match": self.bronze_match,
            "rounds": self.rounds,
            "pairing_method": self.pairing_method.value,
            "initial_rounds": self.initial_rounds,
            "bracket_size": self.bracket_size,
        }

    @classmethod
    def from_dict(cls, data: Optional[Dict[str, Any]]) -> "FormatSettings":
        data = data or {}
        return cls(
            groups=data.get("groups", 1),
            top_per_group=data.get("top_per_group", 2),
            playoffs=data.get("playoffs", False),
            seeding=SeedingMethod(data.get("seeding", "ranked")),
            seed_order=tuple(data.get("seed_order") or ()),
            bronze_match=data.get("bronze_match", False),
            rounds=data.get("rounds"),
            pairing_method=PairingMethod(data.get("pairing_method", "slide")),
            initial_rounds=data.get("initial_rounds"),
            bracket_size=data.get("bracket_size"),
        )


@dataclass(frozen=True)
class TournamentConfig:
    """Immutable configuration settings for a tournament.

    Attributes:
        type: Tournament format
        points_per_win: Points credited for a win (and for a Swiss bye)
        points_per_draw: Points credited for a draw
        points_per_loss: Points credited for a loss
        match_duration_minutes: Slot length used for round time windows
        format_settings: Format-specific settings
    """

    type: TournamentType = TournamentType.ROUND_ROBIN
    points_per_win: float = DEFAULT_POINTS_PER_WIN
    points_per_draw: float = DEFAULT_POINTS_PER_DRAW
    points_per_loss: float = DEFAULT_POINTS_PER_LOSS
    match_duration_minutes: int = DEFAULT_MATCH_DURATION_MINUTES
    format_settings: FormatSettings = field(default_factory=FormatSettings)

    def to_dict(self) -> Dict[str, Any]:
        """Serialize configuration to dictionary."""
        return {
            "type": self.type.value,
            "points_per_win": self.points_per_win,
            "points_per_draw": self.points_per_draw,
            "points_per_loss": self.points_per_loss,
            "match_duration_minutes": self.match_duration_minutes,
            "format_settings": self.format_settings.to_dict(),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "TournamentConfig":
        """Deserialize configuration from dictionary."""
        return cls(
            type=TournamentType(data.get("type", "round_robin")),
            points_per_win=data.get("points_per_win", DEFAULT_POINTS_PER_WIN),
            points_per_draw=data.get("points_per_draw", DEFAULT_POINTS_PER_DRAW),
            points_per_loss=data.get("points_per_loss", DEFAULT_POINTS_PER_LOSS),
            match_duration_minutes=data.get(
                "match_duration_minutes", DEFAULT_MATCH_DURATION_MINUTES
            ),
            format_settings=FormatSettings.from_dict(data.get("format_settings")),
        )
