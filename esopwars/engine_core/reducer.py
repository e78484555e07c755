"""
Reducer - Applies actions to game state.

The reducer is the single point of state mutation.
All state changes must go through apply_action().

Design principles:
- Pure function: (state, action) -> new_state
- Validates before applying
- Returns ActionResult with success/failure
- Settles the phase after every accepted action
"""

from __future__ import annotations
import logging
from dataclasses import dataclass
from typing import Callable

from . import handlers
from .action import Action, ActionType, ActionResult
from .phases import settle
from .queries import current_card, get_winners
from .state import GameState, Phase
from .validators import validate

logger = logging.getLogger("esopwars.reducer")

Handler = Callable[[GameState, Action], "tuple[GameState, list[str]]"]


@dataclass
class Reducer:
    """
    Reducer applies actions to game state.

    Stateless - all state is in GameState.
    With auto_advance off, the caller drives advance_phase itself.
    """
    auto_advance: bool = True

    def apply(self, state: GameState, action: Action) -> ActionResult:
        """
        Apply an action to the game state.

        Returns ActionResult with new state or the rejection.
        """
        rejection = validate(state, action)
        if rejection:
            logger.debug("Rejected %s from %s: %s", action.action_type.value, action.actor, rejection)
            return ActionResult.rejected(rejection)

        handler = self._get_handler(action.action_type)
        new_state, changes = handler(state, action)
        new_state = new_state._copy_with(action_counter=state.action_counter + 1)

        if self.auto_advance:
            settled = settle(new_state)
            if settled.step_index != new_state.step_index:
                logger.info(
                    "Game %s: %s -> %s",
                    state.game_id, new_state.phase.value, settled.phase.value,
                )
                changes.append(f"Phase advanced to {settled.phase.value}")
                if settled.phase is Phase.WINNER:
                    changes.extend(self._winner_lines(settled))
            new_state = settled

        return ActionResult.success_with_state(new_state, changes)

    def _get_handler(self, action_type: ActionType) -> Handler:
        """Get the handler function for an action type."""
        return _HANDLERS[action_type]

    def _winner_lines(self, state: GameState) -> list[str]:
        winners = get_winners(state)
        if winners is None:
            return []
        lines = []
        if winners.founder:
            lines.append(f"Best founder: {winners.founder.name}")
        if winners.employer:
            lines.append(f"Best employer: {winners.employer.name}")
        return lines


# =============================================================================
# Action handlers
# =============================================================================

def _name(state: GameState, slot: int | None) -> str:
    return state.teams[slot].name if slot is not None else "system"


def _handle_register_team(state, action):
    p = action.payload
    new_state = handlers.register_team(state, action.actor, p.name, p.problem_statement or "")
    return new_state, [f"Team {action.actor} registered as {new_state.teams[action.actor].name}"]


def _handle_drop_card(state, action):
    card = state.teams[action.actor].find_setup_card(action.payload.card_id)
    new_state = handlers.drop_card(state, action.actor, action.payload.card_id)
    return new_state, [f"{_name(state, action.actor)} discarded {card.name}"]


def _handle_draw_card(state, action):
    new_state = handlers.draw_card(state, action.actor, action.payload.deck)
    return new_state, [f"{_name(state, action.actor)} drew a {action.payload.deck.value} card"]


def _handle_skip_draw(state, action):
    return handlers.skip_draw(state, action.actor), [f"{_name(state, action.actor)} skipped drawing"]


def _handle_lock_setup(state, action):
    p = action.payload
    new_state = handlers.lock_setup(state, action.actor, p.segment_id, p.idea_id)
    team = new_state.teams[action.actor]
    changes = [f"{team.name} locked {team.locked_segment.name} / {team.locked_idea.name}"]
    if team.setup_bonus:
        changes.append(
            f"{team.name} gains +{team.setup_bonus.modifier} {team.setup_bonus.category}"
        )
    return new_state, changes


def _handle_place_bid(state, action):
    new_state = handlers.place_bid(state, action.actor, action.payload.amount)
    card = current_card(state)
    return new_state, [
        f"{_name(state, action.actor)} bid {new_state.current_bid.amount}% for {card.name}"
    ]


def _handle_close_bidding(state, action):
    card = current_card(state)
    bid = state.current_bid
    if state.phase is Phase.AUCTION:
        new_state = handlers.close_bidding(state)
    else:
        new_state = handlers.close_secondary_bidding(state)
    return new_state, [f"{_name(state, bid.team)} hired {card.name} for {bid.amount}%"]


def _handle_skip_card(state, action):
    card = current_card(state)
    if state.phase is Phase.AUCTION:
        new_state = handlers.skip_card(state)
    else:
        new_state = handlers.skip_secondary_card(state)
    return new_state, [f"{card.name} was passed over"]


def _handle_select_wildcard(state, action):
    choice = action.payload.choice
    new_state = handlers.select_wildcard(state, action.actor, choice)
    label = choice.value if choice else "no wildcard"
    return new_state, [f"{_name(state, action.actor)} chose {label}"]


def _handle_draw_market_card(state, action):
    new_state = handlers.draw_market_card(state)
    return new_state, [f"Market event: {new_state.active_market_card.name}"]


def _handle_apply_market_effects(state, action):
    new_state = handlers.resolve_market(state)
    changes = []
    for row in new_state.round_performance:
        line = f"{_name(new_state, row.team)}: {row.previous_valuation:,} -> {row.new_valuation:,}"
        if row.leader_bonus:
            line += " (market leader)"
        changes.append(line)
    return new_state, changes


def _handle_declare_investment(state, action):
    target = action.payload.target
    new_state = handlers.declare_investment(state, action.actor, target)
    label = f"invests in {_name(state, target)}" if target is not None else "passes on investing"
    return new_state, [f"{_name(state, action.actor)} {label}"]


def _handle_resolve_investment_conflicts(state, action):
    new_state = handlers.resolve_investment_conflicts(state)
    if not new_state.conflicts:
        return new_state, ["No investment conflicts"]
    return new_state, [
        f"Conflict over {_name(state, c.target)}: "
        + ", ".join(_name(state, s) for s in c.claimants)
        for c in new_state.conflicts
    ]


def _handle_place_investment_bid(state, action):
    new_state = handlers.place_investment_bid(state, action.actor, action.payload.amount)
    return new_state, [f"{_name(state, action.actor)} bid {action.payload.amount}% in a conflict"]


def _handle_pass_investment_bid(state, action):
    new_state = handlers.pass_investment_bid(state, action.actor)
    return new_state, [f"{_name(state, action.actor)} passed in a conflict"]


def _handle_close_conflict(state, action):
    new_state = handlers.close_conflict(state, action.payload.target)
    return new_state, [f"Bidding closed for {_name(state, action.payload.target)}"]


def _handle_resolve_conflict_bids(state, action):
    new_state = handlers.resolve_conflict_bids(state)
    changes = []
    for conflict in new_state.conflicts:
        if conflict.winner is None:
            changes.append(f"Nobody won the conflict over {_name(state, conflict.target)}")
        else:
            changes.append(
                f"{_name(state, conflict.winner)} won the conflict over {_name(state, conflict.target)}"
            )
    return new_state, changes


def _handle_finalize_investments(state, action):
    new_state = handlers.finalize_investments(state)
    changes = [
        f"{t.name} invested {t.investment_amount:,} in {_name(new_state, t.invested_in)}"
        for t in new_state.teams
        if t.invested_in is not None and state.teams[t.slot].invested_in is None
    ]
    return new_state, changes or ["No investments made"]


def _handle_drop_employee(state, action):
    hired = state.teams[action.actor].get_employee(action.payload.employee_id)
    new_state = handlers.drop_employee(state, action.actor, action.payload.employee_id)
    return new_state, [f"{_name(state, action.actor)} released {hired.card.name}"]


def _handle_draw_exit(state, action):
    new_state = handlers.draw_exit(state)
    card = new_state.exit_card
    return new_state, [f"Exit: {card.name} at {card.multiplier}x"]


_HANDLERS: dict[ActionType, Handler] = {
    ActionType.REGISTER_TEAM: _handle_register_team,
    ActionType.DROP_CARD: _handle_drop_card,
    ActionType.DRAW_CARD: _handle_draw_card,
    ActionType.SKIP_DRAW: _handle_skip_draw,
    ActionType.LOCK_SETUP: _handle_lock_setup,
    ActionType.PLACE_BID: _handle_place_bid,
    ActionType.CLOSE_BIDDING: _handle_close_bidding,
    ActionType.SKIP_CARD: _handle_skip_card,
    ActionType.SELECT_WILDCARD: _handle_select_wildcard,
    ActionType.DRAW_MARKET_CARD: _handle_draw_market_card,
    ActionType.APPLY_MARKET_EFFECTS: _handle_apply_market_effects,
    ActionType.DECLARE_INVESTMENT: _handle_declare_investment,
    ActionType.RESOLVE_INVESTMENT_CONFLICTS: _handle_resolve_investment_conflicts,
    ActionType.PLACE_INVESTMENT_BID: _handle_place_investment_bid,
    ActionType.PASS_INVESTMENT_BID: _handle_pass_investment_bid,
    ActionType.CLOSE_CONFLICT: _handle_close_conflict,
    ActionType.RESOLVE_CONFLICT_BIDS: _handle_resolve_conflict_bids,
    ActionType.FINALIZE_INVESTMENTS: _handle_finalize_investments,
    ActionType.DROP_EMPLOYEE: _handle_drop_employee,
    ActionType.DRAW_EXIT: _handle_draw_exit,
}

_missing = set(ActionType) - set(_HANDLERS)
if _missing:
    raise RuntimeError(f"No handler for action types: {sorted(a.value for a in _missing)}")


def apply_action(state: GameState, action: Action) -> ActionResult:
    """Convenience function to apply an action with a default reducer."""
    return Reducer().apply(state, action)
