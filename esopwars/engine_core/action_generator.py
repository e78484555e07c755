"""
Action Generator - Generates legal actions from a game state.

The action generator is used by:
1. Bots to enumerate possible moves
2. UI to show available actions
3. The session driver to find the system step a phase is waiting on

Design: candidates are generated per phase and filtered through the same
validators the reducer uses, so a generated action is always legal.
Bid amounts are whole ESOP percentages.
"""

from __future__ import annotations
import math
from dataclasses import dataclass

from .action import Action
from .queries import get_team, current_card, open_conflict_for, investment_targets
from .state import GameState, Phase, SetupDeck, WildcardChoice, InvestmentStep
from .validators import validate


@dataclass
class ActionGenerator:
    """
    Generates legal actions for one actor.

    max_bids caps how many raise amounts are offered per bidding window.
    """
    max_bids: int | None = None

    def generate(self, state: GameState, team: int | None) -> list[Action]:
        """
        Generate all legal actions for a team, or for the driver when team is None.

        Returns a list of fully-specified Action objects.
        """
        if state.is_game_over:
            return []
        if team is None:
            candidates = self._system_candidates(state)
        else:
            candidates = self._team_candidates(state, team)
        return [a for a in candidates if validate(state, a) is None]

    def _team_candidates(self, state: GameState, team: int) -> list[Action]:
        current = get_team(state, team)
        if current is None:
            return []
        phase = state.phase
        if phase is Phase.REGISTRATION:
            return [Action.register_team(team, current.name)]
        if phase is Phase.SETUP:
            return self._setup_candidates(state, team)
        if phase in (Phase.AUCTION, Phase.SECONDARY_HIRE):
            leading = state.current_bid.amount if state.current_bid else 0.0
            return [Action.place_bid(team, a) for a in self._bid_amounts(leading, current.esop_remaining)]
        if phase is Phase.WILDCARD:
            return [Action.select_wildcard(team, c) for c in (None, *WildcardChoice)]
        if phase is Phase.INVESTMENT:
            return self._investment_candidates(state, team)
        if phase is Phase.SECONDARY_DROP:
            return [Action.drop_employee(team, e.id) for e in current.employees]
        return []

    def _setup_candidates(self, state: GameState, team: int) -> list[Action]:
        current = state.teams[team]
        actions = [Action.drop_card(team, c.id) for c in current.setup_hand]
        actions.extend(Action.draw_card(team, deck) for deck in SetupDeck)
        actions.append(Action.skip_draw(team))
        segments = [c for c in current.setup_hand if c.kind is SetupDeck.SEGMENT]
        ideas = [c for c in current.setup_hand if c.kind is SetupDeck.IDEA]
        actions.extend(
            Action.lock_setup(team, segment.id, idea.id)
            for segment in segments
            for idea in ideas
        )
        return actions

    def _investment_candidates(self, state: GameState, team: int) -> list[Action]:
        if state.investment_step is InvestmentStep.DECLARE:
            actions = [Action.declare_investment(team, None)]
            actions.extend(Action.declare_investment(team, t) for t in investment_targets(state, team))
            return actions
        conflict = open_conflict_for(state, team)
        if conflict is None:
            return []
        leader = conflict.leading_bid
        leading = leader.amount if leader else 0.0
        actions = [Action.pass_investment_bid(team)]
        actions.extend(
            Action.place_investment_bid(team, a)
            for a in self._bid_amounts(leading, state.teams[team].esop_remaining)
        )
        return actions

    def _bid_amounts(self, leading: float, available: float) -> list[float]:
        """Whole-percent raises above the leading bid, up to what the team holds."""
        amounts = [float(a) for a in range(math.floor(leading) + 1, math.floor(available) + 1)]
        if self.max_bids is not None:
            amounts = amounts[:self.max_bids]
        return amounts

    def _system_candidates(self, state: GameState) -> list[Action]:
        phase = state.phase
        if phase in (Phase.AUCTION, Phase.SECONDARY_HIRE):
            if current_card(state) is None:
                return []
            return [Action.close_bidding(), Action.skip_card()]
        if phase is Phase.MARKET:
            return [Action.draw_market_card(), Action.apply_market_effects()]
        if phase is Phase.INVESTMENT:
            actions = [
                Action.resolve_investment_conflicts(),
                Action.resolve_conflict_bids(),
                Action.finalize_investments(),
            ]
            actions.extend(Action.close_conflict(c.target) for c in state.conflicts)
            return actions
        if phase is Phase.EXIT:
            return [Action.draw_exit()]
        return []


def legal_actions(state: GameState, team: int | None) -> list[Action]:
    """Convenience function to generate legal actions."""
    return ActionGenerator().generate(state, team)


def is_legal(state: GameState, action: Action) -> bool:
    """Check if an action is legal in the current state."""
    return validate(state, action) is None
