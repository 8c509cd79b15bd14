"""Type hints used in Padel Pairing."""

from typing import Dict, Literal, Tuple

# Team slot inside a match
TeamSlot = Literal[1, 2]

# Outcome routed out of a bracket position
Outcome = Literal["winner", "loser"]
WINNER: Outcome = "winner"
LOSER: Outcome = "loser"

# A pair of team indices inside a ranked unit list
UnitPairing = Tuple[int, int]

# Court usage counts keyed by court id
CourtUsage = Dict[str, int]

#  LocalWords:  UnitPairing
