"""Domain exceptions for the cultivation RPG.

Each carries the message shown to the player. The dispatcher and session
translate them into error-styled messages; none of them end the process.
"""
from __future__ import annotations


class GameError(Exception):
    """Base class for all expected, player-facing failures."""

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class ValidationError(GameError):
    """Request rejected by a rule check (resources, quantity, ownership, turn)."""


class NotFoundError(GameError):
    """A referenced document (listing, player, sect) does not exist."""


class ConflictError(GameError):
    """A transaction precondition no longer holds, usually due to another session."""


class PersistenceError(GameError):
    """The store could not be read or written."""


SAVE_FAILED = "Failed to save your progress. Check connection."
