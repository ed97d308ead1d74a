# /// script
# requires-python = ">=3.12"
# dependencies = []
# ///
"""Typed errors raised by the scoring engine.

Every rejected command raises one of these before any state changes.
``error_code`` is the machine-readable value surfaced by the command
surface.
"""

from __future__ import annotations


class ScoringError(Exception):
    """Base exception for rejected scoring commands."""

    error_code = "SCORING_ERROR"

    def __init__(self, message: str, details: list[str] | None = None):
        self.details = details or []
        super().__init__(message)


class InvalidGameState(ScoringError):
    """Raised when a command is not valid for the session's status."""

    error_code = "INVALID_GAME_STATE"


class BatterMismatch(ScoringError):
    """Raised when the supplied batter is not the one due up."""

    error_code = "BATTER_MISMATCH"

    def __init__(self, message: str, expected: str | None = None,
                 got: str | None = None):
        self.expected = expected
        self.got = got
        super().__init__(message)


class InvalidAdvancement(ScoringError):
    """Raised when an advancement proposal breaks base-occupancy rules."""

    error_code = "INVALID_ADVANCEMENT"


class LineupInvalid(ScoringError):
    """Raised when a starting lineup fails validation at game start."""

    error_code = "LINEUP_INVALID"


class PersistenceFailure(ScoringError):
    """Raised when the persistence port rejects a commit.

    The in-memory session keeps its previous committed state, so the caller
    may retry the same command.
    """

    error_code = "PERSISTENCE_FAILURE"


class PersistError(Exception):
    """Raised by persistence adapters when a write cannot be completed."""

    def __init__(self, message: str, game_id: str | None = None):
        self.game_id = game_id
        super().__init__(message)
