"""Exceptions for use in Padel Pairing"""

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


# ========== Base Application Exception ==========


class PadelPairingException(Exception):
    """Base exception for all Padel Pairing errors.

    Every engine failure inherits from this class, so callers can map the
    whole family to a single error response when they do not care about the
    specific kind.
    """

    pass


# ========== Pairing Exceptions ==========


class PairingException(PadelPairingException):
    """Base exception for pairing-related errors."""

    pass


class InsufficientParticipantsError(PairingException):
    """Raised when fewer than the format's minimum participants are checked in."""

    def __init__(self, message: str, required: int = 0, available: int = 0):
        super().__init__(message)
        self.required = required
        self.available = available


class UnresolvablePairingError(PairingException):
    """Raised when a Swiss round cannot be paired even after relaxing rematches."""

    pass


class TeamFormationError(PairingException):
    """Raised when checked-in players cannot be merged into doubles teams."""

    pass


# ========== Tournament Exceptions ==========


class TournamentException(PadelPairingException):
    """Base exception for tournament-related errors."""

    pass


class InvalidTournamentStateError(TournamentException):
    """Raised when the supplied tournament state does not allow the operation.

    Typical causes are regenerating a round that already exists or advancing
    a bracket from a match that has not finished.
    """

    pass


class InsufficientCourtsError(TournamentException):
    """Raised when no active court is available for a round."""

    pass


# ========== Standings Exceptions ==========


class StandingsException(PadelPairingException):
    """Base exception for standings errors."""

    pass


class StandingNotFoundError(StandingsException):
    """Raised when a match references a participant absent from the standings."""

    def __init__(self, user_id: str):
        super().__init__(f"No standing found for participant {user_id}")
        self.user_id = user_id


# ========== Configuration Exceptions ==========


class ConfigurationException(PadelPairingException):
    """Base exception for configuration errors."""

    pass


class InvalidConfigurationError(ConfigurationException):
    """Raised when format settings are inconsistent (bracket size, groups...)."""

    pass
