"""
Action System - Actions, payloads, and results.

Actions represent:
1. Team actions (register, draft, bid, wildcard, invest, drop)
2. System actions issued by the session driver (close bidding, draw
   market and exit cards, resolve investment conflicts)

All state changes flow through actions.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from .state import SetupDeck, WildcardChoice
from .errors import Rejection


class ActionType(Enum):
    """Types of actions in the system."""
    # Registration and setup
    REGISTER_TEAM = "register_team"
    DROP_CARD = "drop_card"
    DRAW_CARD = "draw_card"
    SKIP_DRAW = "skip_draw"
    LOCK_SETUP = "lock_setup"

    # Auction and secondary hire
    PLACE_BID = "place_bid"
    CLOSE_BIDDING = "close_bidding"
    SKIP_CARD = "skip_card"

    # Market round
    SELECT_WILDCARD = "select_wildcard"
    DRAW_MARKET_CARD = "draw_market_card"
    APPLY_MARKET_EFFECTS = "apply_market_effects"

    # Investment
    DECLARE_INVESTMENT = "declare_investment"
    RESOLVE_INVESTMENT_CONFLICTS = "resolve_investment_conflicts"
    PLACE_INVESTMENT_BID = "place_investment_bid"
    PASS_INVESTMENT_BID = "pass_investment_bid"
    CLOSE_CONFLICT = "close_conflict"
    RESOLVE_CONFLICT_BIDS = "resolve_conflict_bids"
    FINALIZE_INVESTMENTS = "finalize_investments"

    # Secondary and exit
    DROP_EMPLOYEE = "drop_employee"
    DRAW_EXIT = "draw_exit"


# Actions only the session driver may issue (actor is None).
SYSTEM_ACTIONS = frozenset({
    ActionType.CLOSE_BIDDING,
    ActionType.SKIP_CARD,
    ActionType.DRAW_MARKET_CARD,
    ActionType.APPLY_MARKET_EFFECTS,
    ActionType.RESOLVE_INVESTMENT_CONFLICTS,
    ActionType.CLOSE_CONFLICT,
    ActionType.RESOLVE_CONFLICT_BIDS,
    ActionType.FINALIZE_INVESTMENTS,
    ActionType.DRAW_EXIT,
})


@dataclass(frozen=True)
class ActionPayload:
    """
    Payload for an action - contains the action parameters.

    Different action types use different fields.
    This is a generic container; validation happens in validators.py.
    """
    # Registration
    name: str | None = None
    problem_statement: str | None = None

    # Setup draft
    card_id: int | None = None
    deck: SetupDeck | None = None
    segment_id: int | None = None
    idea_id: int | None = None

    # Bids
    amount: float | None = None

    # Wildcard (None is a pass)
    choice: WildcardChoice | None = None

    # Investment target slot (None is a pass)
    target: int | None = None

    # Secondary drop
    employee_id: int | None = None


@dataclass(frozen=True)
class Action:
    """
    A complete action to be applied to the game state.

    actor is the acting team's slot, or None for the session driver.
    Actions are:
    - Logged for replay
    - Validated before application
    - Applied atomically by the reducer
    """
    action_type: ActionType
    actor: int | None = None
    payload: ActionPayload = field(default_factory=ActionPayload)
    timestamp: float | None = None
    action_id: str | None = None

    @property
    def is_system(self) -> bool:
        return self.action_type in SYSTEM_ACTIONS

    @classmethod
    def register_team(cls, team: int, name: str, problem_statement: str = "") -> Action:
        """Factory for team registration."""
        return cls(
            action_type=ActionType.REGISTER_TEAM,
            actor=team,
            payload=ActionPayload(name=name, problem_statement=problem_statement),
        )

    @classmethod
    def drop_card(cls, team: int, card_id: int) -> Action:
        return cls(ActionType.DROP_CARD, team, ActionPayload(card_id=card_id))

    @classmethod
    def draw_card(cls, team: int, deck: SetupDeck) -> Action:
        return cls(ActionType.DRAW_CARD, team, ActionPayload(deck=deck))

    @classmethod
    def skip_draw(cls, team: int) -> Action:
        return cls(ActionType.SKIP_DRAW, team)

    @classmethod
    def lock_setup(cls, team: int, segment_id: int, idea_id: int) -> Action:
        """Factory for locking a segment and idea pair."""
        return cls(
            action_type=ActionType.LOCK_SETUP,
            actor=team,
            payload=ActionPayload(segment_id=segment_id, idea_id=idea_id),
        )

    @classmethod
    def place_bid(cls, team: int, amount: float) -> Action:
        """Factory for a bid on the current employee card."""
        return cls(ActionType.PLACE_BID, team, ActionPayload(amount=amount))

    @classmethod
    def close_bidding(cls) -> Action:
        return cls(ActionType.CLOSE_BIDDING)

    @classmethod
    def skip_card(cls) -> Action:
        return cls(ActionType.SKIP_CARD)

    @classmethod
    def select_wildcard(cls, team: int, choice: WildcardChoice | None) -> Action:
        """Factory for a wildcard selection; a None choice passes."""
        return cls(ActionType.SELECT_WILDCARD, team, ActionPayload(choice=choice))

    @classmethod
    def draw_market_card(cls) -> Action:
        return cls(ActionType.DRAW_MARKET_CARD)

    @classmethod
    def apply_market_effects(cls) -> Action:
        return cls(ActionType.APPLY_MARKET_EFFECTS)

    @classmethod
    def declare_investment(cls, team: int, target: int | None) -> Action:
        """Factory for an investment declaration; a None target passes."""
        return cls(ActionType.DECLARE_INVESTMENT, team, ActionPayload(target=target))

    @classmethod
    def resolve_investment_conflicts(cls) -> Action:
        return cls(ActionType.RESOLVE_INVESTMENT_CONFLICTS)

    @classmethod
    def place_investment_bid(cls, team: int, amount: float) -> Action:
        return cls(ActionType.PLACE_INVESTMENT_BID, team, ActionPayload(amount=amount))

    @classmethod
    def pass_investment_bid(cls, team: int) -> Action:
        return cls(ActionType.PASS_INVESTMENT_BID, team)

    @classmethod
    def close_conflict(cls, target: int) -> Action:
        return cls(ActionType.CLOSE_CONFLICT, None, ActionPayload(target=target))

    @classmethod
    def resolve_conflict_bids(cls) -> Action:
        return cls(ActionType.RESOLVE_CONFLICT_BIDS)

    @classmethod
    def finalize_investments(cls) -> Action:
        return cls(ActionType.FINALIZE_INVESTMENTS)

    @classmethod
    def drop_employee(cls, team: int, employee_id: int) -> Action:
        return cls(ActionType.DROP_EMPLOYEE, team, ActionPayload(employee_id=employee_id))

    @classmethod
    def draw_exit(cls) -> Action:
        return cls(ActionType.DRAW_EXIT)


@dataclass
class ActionResult:
    """
    Result of applying an action.

    Contains:
    - Whether action succeeded
    - New state (if succeeded)
    - The rejection (if failed)
    - Human-readable changes for the UI
    """
    success: bool
    new_state: Any | None = None  # GameState
    error: str | None = None
    error_code: str | None = None
    rejection: Rejection | None = None

    # For UI/presentation
    state_changes: list[str] = field(default_factory=list)

    @classmethod
    def failure(cls, error: str, error_code: str | None = None) -> ActionResult:
        """Create a failure result."""
        return cls(success=False, error=error, error_code=error_code)

    @classmethod
    def rejected(cls, rejection: Rejection) -> ActionResult:
        """Create a failure result from a validator rejection."""
        return cls(
            success=False,
            error=rejection.message,
            error_code=rejection.kind.value,
            rejection=rejection,
        )

    @classmethod
    def success_with_state(
        cls,
        state: Any,
        changes: list[str] | None = None,
    ) -> ActionResult:
        """Create a success result with new state."""
        return cls(
            success=True,
            new_state=state,
            state_changes=changes or [],
        )
