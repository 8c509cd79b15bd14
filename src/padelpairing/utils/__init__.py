"""Shared helpers for Padel Pairing: logging setup and id generation."""

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

import logging
import random
import uuid
from typing import Optional, Union

LOGGER_NAMESPACE = "padelpairing"
LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def setup_logger(name: str, level: Optional[int] = None) -> logging.Logger:
    """Return a module logger living under the ``padelpairing`` namespace.

    Args:
        name: Usually ``__name__`` of the calling module
        level: Optional level override for this logger

    Returns:
        A configured :class:`logging.Logger`. The package logger gets a
        ``NullHandler`` so library users decide where records go.
    """
    package_logger = logging.getLogger(LOGGER_NAMESPACE)
    if not package_logger.handlers:
        package_logger.addHandler(logging.NullHandler())

    if name != LOGGER_NAMESPACE and not name.startswith(f"{LOGGER_NAMESPACE}."):
        name = f"{LOGGER_NAMESPACE}.{name}"

    logger = logging.getLogger(name)
    if level is not None:
        logger.setLevel(level)
    return logger


def enable_console_logging(level: int = logging.INFO) -> logging.Handler:
    """Attach a stream handler to the package logger (used by the CLI)."""
    package_logger = logging.getLogger(LOGGER_NAMESPACE)
    handler = logging.StreamHandler()
    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    package_logger.addHandler(handler)
    package_logger.setLevel(level)
    return handler


def generate_id(prefix: str = "") -> str:
    """Generate a unique identifier, optionally prefixed (``round-3f2a...``)."""
    unique = uuid.uuid4().hex
    return f"{prefix}-{unique}" if prefix else unique


def make_rng(seed: Union[None, int, random.Random] = None) -> random.Random:
    """Return a ``random.Random`` for ``seed``, passing existing instances through.

    Every shuffle in the engine draws from an explicit generator so identical
    inputs produce identical pairings.
    """
    if isinstance(seed, random.Random):
        return seed
    return random.Random(seed)
