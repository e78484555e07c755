"""
Session Manager - Creates and manages game sessions.

LIFECYCLE:
1. Host creates a session -> initial state built from the card catalog
2. During the game:
   - Teams submit actions through the session's GameLoop
   - The loop validates, applies, settles phases, and commits
   - Bots play their seats through the same pipeline
   - Every committed snapshot is broadcast to subscribers
3. Game reaches the winner phase -> session is marked game over
4. Host ends the session -> removed from memory

PERSISTENCE RULES:
- Sessions live in memory only
- A session is fully described by its GameState document plus history
- Nothing outside the state is needed to resume a game
"""

from __future__ import annotations
import logging
import time
import uuid
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable

from ..bots import BotPolicy, EsopBot, PERSONALITIES
from ..engine_core.action import Action
from ..engine_core.config import GameConfig
from ..engine_core.errors import SessionNotFoundError
from ..engine_core.state import GameState
from ..games.esop_wars import setup_esop_wars_game

logger = logging.getLogger("esopwars.session")

Subscriber = Callable[[GameState, "list[str]"], None]


class SessionState(Enum):
    """State of a game session."""
    ACTIVE = "active"  # Game in progress
    GAME_OVER = "game_over"  # Winner phase reached
    ABANDONED = "abandoned"  # Ended before the winner phase


@dataclass(frozen=True)
class HistoryEntry:
    """One committed action and the state it produced."""
    action: Action
    state: GameState
    changes: tuple[str, ...] = ()


@dataclass
class Session:
    """
    An in-memory game session.

    Contains:
    - The initial and current canonical game state
    - The committed history, addressable by action counter
    - Bots for automated seats
    - Broadcast subscribers and the open bid deadline

    The session is dropped from memory when it ends.
    """
    session_id: str
    initial_state: GameState
    created_at: float

    status: SessionState = SessionState.ACTIVE
    game_state: GameState | None = None
    history: list[HistoryEntry] = field(default_factory=list)

    # Seats played by bots, by team slot
    bots: dict[int, BotPolicy] = field(default_factory=dict)

    # Driver bookkeeping
    bid_deadline: float | None = None
    subscribers: list[Subscriber] = field(default_factory=list)
    last_activity: float = 0.0

    metadata: dict[str, Any] = field(default_factory=dict)

    def __post_init__(self):
        if self.game_state is None:
            self.game_state = self.initial_state
        if not self.last_activity:
            self.last_activity = self.created_at

    def is_active(self) -> bool:
        """Check if session is still accepting actions."""
        return self.status is SessionState.ACTIVE

    def human_slots(self) -> list[int]:
        return [t.slot for t in self.game_state.teams if t.slot not in self.bots]

    def snapshot(self, action_counter: int) -> GameState | None:
        """The committed state whose action counter matches, if any."""
        if self.initial_state.action_counter == action_counter:
            return self.initial_state
        for entry in self.history:
            if entry.state.action_counter == action_counter:
                return entry.state
        return None


class SessionManager:
    """
    Manages game sessions.

    Responsibilities:
    - Create sessions with their bots
    - Track active sessions
    - Clean up finished and idle sessions

    No persistence - sessions are in-memory only.
    """

    def __init__(self, clock: Callable[[], float] = time.time):
        self._sessions: dict[str, Session] = {}
        self._clock = clock

    def create_session(
        self,
        team_count: int = 5,
        bot_slots: tuple[int, ...] | list[int] = (),
        random_seed: int | None = None,
        config: GameConfig | None = None,
        personalities: dict[int, str] | None = None,
        bots: dict[int, BotPolicy] | None = None,
    ) -> Session:
        """
        Create a new game session.

        Args:
            team_count: Number of teams (2-5)
            bot_slots: Seats played by EsopBot
            random_seed: Seed for every shuffle and bot decision
            config: Rules for the session
            personalities: Personality name per bot slot (default: cycles the presets)
            bots: Explicit policies per slot, overriding bot_slots

        Returns:
            New Session in the registration phase
        """
        session_id = str(uuid.uuid4())
        if bots is None:
            bots = self._default_bots(bot_slots, random_seed, personalities or {})
        state = setup_esop_wars_game(
            team_count=team_count,
            bot_slots=tuple(sorted(bots)),
            random_seed=random_seed,
            config=config,
            game_id=session_id,
        )
        session = Session(
            session_id=session_id,
            initial_state=state,
            created_at=self._clock(),
            bots=dict(bots),
        )
        self._sessions[session_id] = session
        logger.info(
            "Created session %s with %d teams (%d bots)",
            session_id, team_count, len(bots),
        )
        return session

    def _default_bots(
        self,
        bot_slots,
        random_seed: int | None,
        personalities: dict[int, str],
    ) -> dict[int, BotPolicy]:
        names = list(PERSONALITIES.keys())
        bots: dict[int, BotPolicy] = {}
        for i, slot in enumerate(sorted(bot_slots)):
            name = personalities.get(slot, names[i % len(names)])
            if name not in PERSONALITIES:
                raise ValueError(f"Unknown personality: {name}. Available: {names}")
            seed = None if random_seed is None else random_seed + slot
            bots[slot] = EsopBot(personality=PERSONALITIES[name], seed=seed)
        return bots

    def add_session(self, session: Session) -> Session:
        """Track a session built elsewhere (e.g. restored from a document)."""
        self._sessions[session.session_id] = session
        return session

    def get_session(self, session_id: str) -> Session:
        """Get a session by ID, raising SessionNotFoundError if unknown."""
        session = self._sessions.get(session_id)
        if session is None:
            raise SessionNotFoundError(session_id)
        return session

    def end_session(self, session_id: str, reason: str = "completed") -> Session:
        """
        End a session and drop it from memory.

        This is called when:
        - The host closes a finished game
        - The host abandons a game
        - Cleanup finds it idle
        """
        session = self._sessions.pop(session_id, None)
        if session is None:
            raise SessionNotFoundError(session_id)
        if session.game_state.is_game_over:
            session.status = SessionState.GAME_OVER
        else:
            session.status = SessionState.ABANDONED
        session.subscribers.clear()
        session.bid_deadline = None
        logger.info("Ended session %s (%s)", session_id, reason)
        return session

    def list_sessions(self) -> list[Session]:
        return list(self._sessions.values())

    def list_active_sessions(self) -> list[str]:
        """List IDs of active sessions."""
        return [
            sid for sid, session in self._sessions.items()
            if session.is_active()
        ]

    def cleanup_stale_sessions(self, max_age_seconds: int = 3600) -> list[str]:
        """
        Remove sessions idle for longer than max_age_seconds.

        Called periodically to free memory. Returns the removed ids.
        """
        now = self._clock()
        stale = [
            sid for sid, session in self._sessions.items()
            if now - session.last_activity > max_age_seconds
        ]
        for session_id in stale:
            self.end_session(session_id, reason="stale")
        return stale
