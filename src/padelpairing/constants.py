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

# --- Points scheme defaults ---
DEFAULT_POINTS_PER_WIN = 3
DEFAULT_POINTS_PER_DRAW = 1
DEFAULT_POINTS_PER_LOSS = 0
DEFAULT_MATCH_DURATION_MINUTES = 90

# --- Team sizes ---
DOUBLES_TEAM_SIZE = 2
SINGLES_TEAM_SIZE = 1
TEAM_ID_SEPARATOR = "+"

# Minimum number of teams (or singles entrants) a round can be paired with
MIN_TEAMS = 2
# Knockout, Monrad and the tournament start need this many checked-in players
MIN_PARTICIPANTS = 4

# --- Swiss ---
MIN_SWISS_ROUNDS = 5
MAX_SWISS_ROUNDS = 7
SMALL_FIELD_SWISS_ROUNDS = 3
SMALL_FIELD_SIZE = 4
# Accelerated pairing keeps the virtual top/bottom split for this many rounds
ACCELERATED_ROUNDS = 2
# Upper bound on backtracking steps before the pairer falls back to relaxation
MAX_PAIRING_STEPS = 20000

# --- Monrad ---
MIN_MONRAD_SWISS_ROUNDS = 1
MAX_MONRAD_SWISS_ROUNDS = 7
# Warn when fewer than this share of the field reaches the knockout
MONRAD_MIN_ADVANCE_RATIO = 0.25

# --- Knockout round names, keyed by teams remaining ---
ROUND_NAMES = {
    2: "Final",
    4: "Semifinals",
    8: "Quarterfinals",
    16: "Round of 16",
    32: "Round of 32",
    64: "Round of 64",
}
THIRD_PLACE_ROUND_NAME = "Third Place"
GRAND_FINAL_ROUND_NAME = "Grand Final"
BRACKET_RESET_ROUND_NAME = "Grand Final Reset"
LOSERS_ROUND_NAME = "Losers Round {number}"

# --- Group names ---
GROUP_NAMES = "ABCDEFGHIJKLMNOPQRSTUVWXYZ"

# --- Match id templates for bracket positions ---
BRACKET_MATCH_ID = "{prefix}{bracket}-r{round}-p{position}"
