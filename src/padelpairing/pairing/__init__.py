"""Pairing generators for every tournament format."""

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

from padelpairing.pairing.knockout import (
    bracket_order,
    calculate_bracket_size,
    calculate_bye_count,
    calculate_knockout_rounds,
    generate_bracket_skeleton,
    generate_double_elimination_bracket,
    generate_knockout_bracket,
    get_bye_teams,
    get_round_name,
    seed_bracket,
    validate_bracket,
)
from padelpairing.pairing.monrad import (
    MonradConfig,
    MonradTournament,
    calculate_monrad_config,
    generate_monrad_tournament,
    get_qualification_cutoff,
    has_qualified_for_knockout,
    seed_monrad_knockout,
    validate_monrad_config,
)
from padelpairing.pairing.round_robin import (
    GroupStage,
    calculate_round_robin_rounds,
    generate_group_playoff,
    generate_round_robin,
    generate_round_robin_with_groups,
    get_bye_teams_for_round,
    select_group_qualifiers,
)
from padelpairing.pairing.swiss import (
    SwissPairingResult,
    SwissRoundConfig,
    calculate_swiss_rounds,
    generate_swiss_round,
    has_played_before,
    validate_swiss_round,
)

__all__ = [
    "generate_round_robin",
    "generate_round_robin_with_groups",
    "select_group_qualifiers",
    "generate_group_playoff",
    "calculate_round_robin_rounds",
    "get_bye_teams_for_round",
    "GroupStage",
    "SwissRoundConfig",
    "SwissPairingResult",
    "generate_swiss_round",
    "calculate_swiss_rounds",
    "has_played_before",
    "validate_swiss_round",
    "generate_knockout_bracket",
    "generate_double_elimination_bracket",
    "generate_bracket_skeleton",
    "seed_bracket",
    "bracket_order",
    "calculate_bracket_size",
    "calculate_bye_count",
    "calculate_knockout_rounds",
    "get_round_name",
    "get_bye_teams",
    "validate_bracket",
    "MonradConfig",
    "MonradTournament",
    "generate_monrad_tournament",
    "seed_monrad_knockout",
    "calculate_monrad_config",
    "validate_monrad_config",
    "has_qualified_for_knockout",
    "get_qualification_cutoff",
]
