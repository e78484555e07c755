"""
Errors - Rejection kinds and engine exceptions.

Rejections are values, not exceptions: a validator hands back a Rejection
describing why an action is illegal and the state is left untouched.
Exceptions are reserved for states that should be unreachable.
"""

from __future__ import annotations
from dataclasses import dataclass
from enum import Enum


class RejectionKind(Enum):
    """Classified reasons an action can be refused."""
    PHASE_MISMATCH = "PHASE_MISMATCH"
    OUT_OF_TURN = "OUT_OF_TURN"
    INSUFFICIENT_RESOURCE = "INSUFFICIENT_RESOURCE"
    INVALID_TARGET = "INVALID_TARGET"
    ALREADY_RESOLVED = "ALREADY_RESOLVED"
    EMPTY_POOL = "EMPTY_POOL"


@dataclass(frozen=True)
class Rejection:
    """Why an action was refused."""
    kind: RejectionKind
    message: str

    def __str__(self) -> str:
        return f"{self.kind.value}: {self.message}"


class EsopWarsError(Exception):
    """Base exception for the package."""


class InvariantViolation(EsopWarsError, RuntimeError):
    """
    Raised by a handler when the state it was given is impossible.

    Handlers only run on validated actions, so this always signals a
    programming error rather than a gameplay outcome.
    """


class SessionNotFoundError(EsopWarsError, LookupError):
    """Raised when a session id is unknown or has ended."""

    def __init__(self, session_id: str):
        self.session_id = session_id
        super().__init__(f"Session {session_id} not found")


class HistoryError(EsopWarsError, ValueError):
    """Raised when a session's history cannot be rewound or replayed as asked."""
