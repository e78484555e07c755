"""
Bot Policy - Interface for bot decision-making.

A BotPolicy looks at a game state from one team's seat and returns the
action that team should submit, or None to wait. Bots go through the same
validation as humans: a policy may only return actions the validators
accept.
"""

from __future__ import annotations
import random
from abc import ABC, abstractmethod
from typing import TYPE_CHECKING

from ..engine_core.action import Action, ActionType
from ..engine_core.action_generator import legal_actions

if TYPE_CHECKING:
    from ..engine_core.state import GameState

_BID_TYPES = (ActionType.PLACE_BID, ActionType.PLACE_INVESTMENT_BID)


def _is_leading(state: GameState, team: int, action: Action) -> bool:
    """Whether a bid would only raise the team's own leading bid."""
    if action.action_type is ActionType.PLACE_BID:
        return state.current_bid is not None and state.current_bid.team == team
    if action.action_type is ActionType.PLACE_INVESTMENT_BID:
        for conflict in state.conflicts:
            leader = conflict.leading_bid
            if team in conflict.claimants and leader is not None and leader.team == team:
                return True
    return False


class BotPolicy(ABC):
    """
    Abstract base class for bot policies.

    A policy defines how a bot selects actions.
    Implementations can range from simple heuristics
    to complex search algorithms.
    """

    @abstractmethod
    def decide(self, state: GameState, team: int) -> Action | None:
        """
        Choose the next action for a team.

        Args:
            state: Current game state
            team: Slot of the team the bot plays

        Returns:
            A legal action, or None if the team should wait
        """

    def candidates(self, state: GameState, team: int) -> list[Action]:
        """Legal actions, minus bids that would only outbid the team itself."""
        return [
            a for a in legal_actions(state, team)
            if a.action_type not in _BID_TYPES or not _is_leading(state, team, a)
        ]

    def get_name(self) -> str:
        """Get the bot's name/identifier."""
        return self.__class__.__name__


class RandomPolicy(BotPolicy):
    """
    Random policy - selects actions uniformly at random.

    The draw is seeded by the policy seed, the action counter and the seat,
    so the same state always yields the same choice.

    Used for:
    - Testing
    - Baseline comparison
    """

    def __init__(self, seed: int | None = None):
        self.seed = seed if seed is not None else random.randrange(2**32)

    def decide(self, state: GameState, team: int) -> Action | None:
        actions = self.candidates(state, team)
        if not actions:
            return None
        rng = random.Random(f"{self.seed}:{state.action_counter}:{team}")
        return rng.choice(actions)


class FirstLegalPolicy(BotPolicy):
    """
    First-legal policy - always selects the first legal action.

    Used for:
    - Deterministic testing
    - Baseline comparison
    """

    def decide(self, state: GameState, team: int) -> Action | None:
        actions = self.candidates(state, team)
        return actions[0] if actions else None
