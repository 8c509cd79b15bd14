"""Round time windows.

Rounds are played in waves: with ``c`` courts a round of ``m`` matches needs
``ceil(m / c)`` consecutive slots of ``match_duration_minutes``. This is slot
arithmetic only, courts are not booked against a calendar.
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

import math
from dataclasses import replace
from datetime import datetime
from typing import List, Sequence

from dateutil.relativedelta import relativedelta

from padelpairing.constants import DEFAULT_MATCH_DURATION_MINUTES
from padelpairing.exceptions import InsufficientCourtsError
from padelpairing.models.match import Round
from padelpairing.utils import setup_logger

logger = setup_logger(__name__)


def count_waves(match_count: int, court_count: int) -> int:
    """Number of consecutive slots needed to play ``match_count`` matches."""
    if court_count < 1:
        raise InsufficientCourtsError(
            "At least one court is needed to schedule a round"
        )
    return math.ceil(match_count / court_count)


def schedule_round(
    round_data: Round,
    starts_at: datetime,
    match_duration_minutes: int = DEFAULT_MATCH_DURATION_MINUTES,
    court_count: int = 1,
) -> Round:
    """Return a copy of ``round_data`` with its time window filled in.

    Args:
        round_data: Round to schedule
        starts_at: Start of the first wave
        match_duration_minutes: Length of one slot
        court_count: Courts playing in parallel

    Returns:
        New Round with ``starts_at`` and ``ends_at`` set
    """
    waves = count_waves(len(round_data.matches), court_count)
    ends_at = starts_at + relativedelta(minutes=waves * match_duration_minutes)
    logger.debug(
        f"Round {round_data.round_number}: {waves} waves from "
        f"{starts_at.isoformat()} to {ends_at.isoformat()}"
    )
    return replace(round_data, starts_at=starts_at, ends_at=ends_at)


def schedule_rounds(
    rounds: Sequence[Round],
    starts_at: datetime,
    match_duration_minutes: int = DEFAULT_MATCH_DURATION_MINUTES,
    court_count: int = 1,
    break_minutes: int = 0,
) -> List[Round]:
    """Schedule rounds back to back, with an optional break between them."""
    scheduled: List[Round] = []
    cursor = starts_at
    for round_data in sorted(rounds, key=lambda r: r.round_number):
        timed = schedule_round(round_data, cursor, match_duration_minutes, court_count)
        scheduled.append(timed)
        cursor = timed.ends_at + relativedelta(minutes=break_minutes)
    return scheduled
