"""
Game Loop - The single-writer driver of one session.

The loop:
1. A team (human or bot) submits an action
2. The reducer validates it against the committed state
3. Accepted actions are applied and the phase is settled
4. The new state is committed to history and broadcast
5. Bots and driver steps run until the game waits on a human

All submissions pass through one lock, so arrival order at the lock is
the only order that matters. Bid windows are the driver's concern: when
one elapses, tick() injects the closing action.
"""

from __future__ import annotations
import logging
import threading
import time
from dataclasses import dataclass, field
from typing import Callable, Iterable, TYPE_CHECKING

from ..engine_core.action import Action, ActionResult
from ..engine_core.errors import HistoryError
from ..engine_core.queries import current_card, is_players_turn
from ..engine_core.reducer import Reducer
from ..engine_core.state import GameState, Phase, BIDDING_PHASES, InvestmentStep
from ..engine_core.validators import validate
from .manager import HistoryEntry, SessionState

if TYPE_CHECKING:
    from .manager import Session, Subscriber

logger = logging.getLogger("esopwars.session")

DEFAULT_BID_WINDOW = 20.0

# Driver steps each phase may be waiting on, tried in order.
_SYSTEM_STEPS: dict[Phase, tuple[Callable[[], Action], ...]] = {
    Phase.MARKET: (Action.draw_market_card, Action.apply_market_effects),
    Phase.INVESTMENT: (
        Action.resolve_investment_conflicts,
        Action.resolve_conflict_bids,
        Action.finalize_investments,
    ),
    Phase.EXIT: (Action.draw_exit,),
}


@dataclass
class TickResult:
    """What a deadline check did."""
    expired: bool
    result: ActionResult | None = None
    bot_results: list[ActionResult] = field(default_factory=list)


class GameLoop:
    """
    The main game loop driver.

    Usage:
        loop = GameLoop(session)

        result = loop.submit(Action.place_bid(0, 4))
        if not result.success:
            show_error(result.error_code, result.error)

        # Let bots and the driver catch up
        loop.run_bots()

        # Called periodically by the server
        loop.tick()
    """

    def __init__(
        self,
        session: Session,
        reducer: Reducer | None = None,
        clock: Callable[[], float] = time.monotonic,
        bid_window: float = DEFAULT_BID_WINDOW,
    ):
        self.session = session
        self.reducer = reducer or Reducer()
        self.clock = clock
        self.bid_window = bid_window
        self._lock = threading.RLock()
        with self._lock:
            self._refresh_deadline()

    @property
    def state(self) -> GameState:
        return self.session.game_state

    # =========================================================================
    # Serialization point
    # =========================================================================

    def submit(self, action: Action) -> ActionResult:
        """
        Validate and apply one action against the committed state.

        Rejections leave the session untouched.
        """
        with self._lock:
            if not self.session.is_active():
                return ActionResult.failure(
                    f"Session is {self.session.status.value}", "SESSION_CLOSED"
                )
            result = self.reducer.apply(self.session.game_state, action)
            if not result.success:
                logger.info(
                    "Session %s rejected %s from %s: %s",
                    self.session.session_id, action.action_type.value,
                    action.actor, result.rejection,
                )
                return result
            self._commit(action, result)
            return result

    def _commit(self, action: Action, result: ActionResult):
        new_state = result.new_state
        self.session.game_state = new_state
        self.session.history.append(
            HistoryEntry(action=action, state=new_state, changes=tuple(result.state_changes))
        )
        self.session.last_activity = time.time()
        logger.debug(
            "Session %s committed #%d %s",
            self.session.session_id, new_state.action_counter, action.action_type.value,
        )
        if new_state.is_game_over:
            self.session.status = SessionState.GAME_OVER
            logger.info("Session %s finished", self.session.session_id)
        self._refresh_deadline()
        self._notify(new_state, list(result.state_changes))

    def _notify(self, state: GameState, changes: list[str]):
        for callback in list(self.session.subscribers):
            try:
                callback(state, changes)
            except Exception:
                logger.exception("Subscriber failed in session %s", self.session.session_id)

    def subscribe(self, callback: Subscriber) -> Callable[[], None]:
        """
        Register a broadcast hook for committed snapshots.

        Returns a function that removes the hook.
        """
        with self._lock:
            self.session.subscribers.append(callback)

        def unsubscribe():
            with self._lock:
                if callback in self.session.subscribers:
                    self.session.subscribers.remove(callback)

        return unsubscribe

    # =========================================================================
    # Bid windows
    # =========================================================================

    def _bidding_open(self, state: GameState) -> bool:
        if state.phase in BIDDING_PHASES:
            return current_card(state) is not None
        if state.phase is Phase.INVESTMENT and state.investment_step is InvestmentStep.BIDDING:
            return self._closable_conflict(state) is not None
        return False

    def _closable_conflict(self, state: GameState) -> int | None:
        for conflict in sorted(state.conflicts, key=lambda c: c.target):
            if conflict.bids and not conflict.closed and not conflict.resolved:
                return conflict.target
        return None

    def _refresh_deadline(self):
        """Restart the bid window after every commit while bidding is open."""
        if self._bidding_open(self.session.game_state):
            self.session.bid_deadline = self.clock() + self.bid_window
        else:
            self.session.bid_deadline = None

    def _closing_action(self, state: GameState) -> Action | None:
        if state.phase in BIDDING_PHASES:
            return Action.close_bidding() if state.current_bid else Action.skip_card()
        target = self._closable_conflict(state)
        return Action.close_conflict(target) if target is not None else None

    def tick(self, now: float | None = None) -> TickResult:
        """
        Close the open bidding window if its deadline has passed.

        Closing awards the card (or conflict) to the leading bid, or skips
        the card when nobody bid. Bots get to react to the new state.
        """
        with self._lock:
            deadline = self.session.bid_deadline
            now = self.clock() if now is None else now
            if deadline is None or now < deadline or not self.session.is_active():
                return TickResult(expired=False)
            action = self._closing_action(self.session.game_state)
            if action is None:
                self.session.bid_deadline = None
                return TickResult(expired=True)
            logger.info(
                "Session %s bid window elapsed, injecting %s",
                self.session.session_id, action.action_type.value,
            )
            result = self.submit(action)
            return TickResult(expired=True, result=result, bot_results=self.run_bots())

    # =========================================================================
    # Bots and driver steps
    # =========================================================================

    def advance_system(self) -> ActionResult | None:
        """
        Perform the next driver step the current phase is waiting on.

        Covers market draws and resolution, investment resolution and
        the exit draw. Returns None when the phase is waiting on teams.
        """
        with self._lock:
            state = self.session.game_state
            for make_action in _SYSTEM_STEPS.get(state.phase, ()):
                action = make_action()
                if validate(state, action) is None:
                    return self.submit(action)
            return None

    def _bot_step(self) -> ActionResult | None:
        state = self.session.game_state
        for slot, bot in sorted(self.session.bots.items()):
            action = bot.decide(state, slot)
            if action is None:
                continue
            result = self.submit(action)
            if result.success:
                logger.debug(
                    "Session %s bot %d played %s",
                    self.session.session_id, slot, action.action_type.value,
                )
                return result
            logger.warning(
                "Session %s bot %d proposed a rejected action: %s",
                self.session.session_id, slot, result.rejection,
            )
        return None

    def _close_idle_bidding(self) -> ActionResult | None:
        """Close a bidding window nobody but bots can still bid in."""
        state = self.session.game_state
        if not self._bidding_open(state):
            return None
        if any(is_players_turn(state, slot) for slot in self.session.human_slots()):
            return None
        action = self._closing_action(state)
        return self.submit(action) if action is not None else None

    def run_bots(self, max_steps: int = 2000) -> list[ActionResult]:
        """
        Let bots and the driver act until the game waits on a human.

        Each step is one bot action, or failing that one driver step, or
        failing that the close of a window only bots could bid in.
        """
        results: list[ActionResult] = []
        with self._lock:
            for _ in range(max_steps):
                if not self.session.is_active():
                    break
                result = self._bot_step() or self.advance_system() or self._close_idle_bidding()
                if result is None or not result.success:
                    break
                results.append(result)
        return results

    def play_out(self, max_steps: int = 10_000) -> GameState:
        """
        Run the game as far as it can go without waiting on the clock.

        Open bid windows are closed immediately once bots are done, so a
        game with only bot seats plays through to the winner phase.
        """
        with self._lock:
            steps = 0
            while self.session.is_active() and steps < max_steps:
                progressed = self.run_bots(max_steps=max_steps - steps)
                steps += len(progressed)
                if not self.session.is_active():
                    break
                forced = self.tick(now=float("inf"))
                if forced.result is not None and forced.result.success:
                    steps += 1 + len(forced.bot_results)
                    continue
                if not progressed:
                    break
            return self.session.game_state

    # =========================================================================
    # History
    # =========================================================================

    def undo(self, action_counter: int) -> GameState:
        """
        Rewind the session to the committed state at action_counter.

        Later history is discarded. Raises HistoryError if no such state
        was committed.
        """
        with self._lock:
            target = self.session.snapshot(action_counter)
            if target is None:
                raise HistoryError(f"No committed state at action {action_counter}")
            self.session.history = [
                entry for entry in self.session.history
                if entry.state.action_counter <= action_counter
            ]
            self.session.game_state = target
            self.session.status = (
                SessionState.GAME_OVER if target.is_game_over else SessionState.ACTIVE
            )
            logger.info("Session %s rewound to action %d", self.session.session_id, action_counter)
            self._refresh_deadline()
            self._notify(target, [f"Rewound to action {action_counter}"])
            return target


def replay(
    initial: GameState,
    actions: Iterable[Action],
    reducer: Reducer | None = None,
) -> GameState:
    """
    Rebuild a state by applying actions in order.

    Raises HistoryError if any action is rejected along the way.
    """
    reducer = reducer or Reducer()
    state = initial
    for index, action in enumerate(actions):
        result = reducer.apply(state, action)
        if not result.success:
            raise HistoryError(
                f"Action {index} ({action.action_type.value}) rejected on replay: {result.rejection}"
            )
        state = result.new_state
    return state
