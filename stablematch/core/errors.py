"""Error types raised by the matching library and its scripts."""
from __future__ import annotations

from typing import Optional


class StableMatchError(Exception):
    """Base class for all stablematch errors."""


class UsageError(StableMatchError, ValueError):
    """Bad caller input: missing or malformed size, bad config values."""


class InvalidPreferenceList(StableMatchError, ValueError):
    """A preference table row is not a permutation of ``[0, n)``."""

    def __init__(self, message: str, side: Optional[str] = None,
                 index: Optional[int] = None):
        super().__init__(message)
        self.side = side
        self.index = index


class InvariantViolation(StableMatchError, RuntimeError):
    """The engine reached a state that valid input can never produce."""
