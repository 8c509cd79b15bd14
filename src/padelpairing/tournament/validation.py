"""Pre-start validation of a tournament field."""

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

import math
from dataclasses import dataclass, field
from typing import List, Sequence

from padelpairing.constants import DOUBLES_TEAM_SIZE, MIN_PARTICIPANTS
from padelpairing.models.enums import ParticipantStatus
from padelpairing.models.participant import Court, Participant, checked_in
from padelpairing.utils import setup_logger

logger = setup_logger(__name__)


@dataclass
class ValidationResult:
    """Outcome of a validation pass.

    Errors block the operation, warnings are informational only.
    """

    valid: bool = True
    errors: List[str] = field(default_factory=list)
    warnings: List[str] = field(default_factory=list)

    def add_error(self, message: str) -> None:
        self.errors.append(message)
        self.valid = False

    def add_warning(self, message: str) -> None:
        self.warnings.append(message)


def validate_tournament_start(
    participants: Sequence[Participant],
    courts: Sequence[Court],
    is_doubles: bool = True,
) -> ValidationResult:
    """Check that a tournament can start with the current field and courts.

    Args:
        participants: Every registered participant, checked in or not
        courts: Courts of the venue
        is_doubles: Whether players are merged into teams of two

    Returns:
        ValidationResult with blocking errors and non-blocking warnings
    """
    result = ValidationResult()
    eligible = checked_in(participants)
    team_size = DOUBLES_TEAM_SIZE if is_doubles else 1
    team_count = len(eligible) // team_size

    if len(eligible) < MIN_PARTICIPANTS:
        result.add_error(
            f"At least {MIN_PARTICIPANTS} checked-in players are required, "
            f"got {len(eligible)}"
        )
    if is_doubles and len(eligible) % DOUBLES_TEAM_SIZE:
        result.add_error(
            f"Doubles needs an even number of checked-in players, got {len(eligible)}"
        )

    active_courts = [c for c in courts if c.is_active]
    if not active_courts:
        result.add_error("At least one active court is required")
    else:
        needed = math.ceil(team_count / 2)
        if len(active_courts) < needed:
            result.add_warning(
                f"{len(active_courts)} active courts for {needed} matches per round, "
                "some teams will wait for a free court"
            )

    pending = [p for p in participants if p.status == ParticipantStatus.REGISTERED]
    if pending:
        result.add_warning(
            f"{len(pending)} registered participants have not checked in and "
            "will not be paired"
        )

    for warning in result.warnings:
        logger.warning(warning)
    if not result.valid:
        logger.info(f"Tournament cannot start: {'; '.join(result.errors)}")
    return result
