"""
Session Module - Drives live ESOP Wars games.

A session represents one play-through:
- Created when a host starts a game
- Holds the committed state and its history
- Serializes every submission through one GameLoop
- Dropped from memory when the host ends it

Sessions are in-memory only. The GameState document is the only thing
needed to resume one.
"""

from .manager import SessionManager, Session, SessionState, HistoryEntry
from .game_loop import GameLoop, TickResult, replay, DEFAULT_BID_WINDOW

__all__ = [
    "SessionManager",
    "Session",
    "SessionState",
    "HistoryEntry",
    "GameLoop",
    "TickResult",
    "replay",
    "DEFAULT_BID_WINDOW",
]
