"""
Phase Controller - Decides when a phase is over and what the next one sets up.

advance_phase is a no-op unless the current phase is complete, so it is
safe to call after every action. settle() keeps advancing until a phase
is reached that still needs input, which is how a wildcard round where
nobody holds a wildcard is skipped automatically.
"""

from __future__ import annotations
from typing import Callable

from .handlers import (
    deal_setup_hands, start_auction, apply_wildcards, start_market_round,
    start_investment, populate_secondary_pool,
)
from .queries import is_phase_complete
from .state import GameState, Phase, PHASE_SEQUENCE

PhaseHook = Callable[[GameState], GameState]


def _unchanged(state: GameState) -> GameState:
    return state


def _start_wildcard_round(state: GameState) -> GameState:
    return state._copy_with(wildcard_selections={})


def _start_secondary_drop(state: GameState) -> GameState:
    return state._copy_with(dropped_employees=(), secondary_pool_populated=False)


# Run when a phase is entered.
_ON_ENTER: dict[Phase, PhaseHook] = {
    Phase.REGISTRATION: _unchanged,
    Phase.SETUP: deal_setup_hands,
    Phase.AUCTION: start_auction,
    Phase.WILDCARD: _start_wildcard_round,
    Phase.MARKET: start_market_round,
    Phase.INVESTMENT: start_investment,
    Phase.SECONDARY_DROP: _start_secondary_drop,
    Phase.SECONDARY_HIRE: populate_secondary_pool,
    Phase.EXIT: _unchanged,
    Phase.WINNER: _unchanged,
}

# Run when a phase is left.
_ON_EXIT: dict[Phase, PhaseHook] = {
    Phase.REGISTRATION: _unchanged,
    Phase.SETUP: lambda s: s._copy_with(setup_turn=None),
    Phase.AUCTION: lambda s: s._copy_with(current_bid=None),
    Phase.WILDCARD: apply_wildcards,
    Phase.MARKET: _unchanged,
    Phase.INVESTMENT: _unchanged,
    Phase.SECONDARY_DROP: _unchanged,
    Phase.SECONDARY_HIRE: lambda s: s._copy_with(current_bid=None),
    Phase.EXIT: _unchanged,
    Phase.WINNER: _unchanged,
}

for _hooks in (_ON_ENTER, _ON_EXIT):
    _missing = set(Phase) - set(_hooks)
    if _missing:
        raise RuntimeError(f"No phase hook for: {sorted(p.value for p in _missing)}")


def advance_phase(state: GameState) -> GameState:
    """
    Move to the next step of the schedule if the current phase is complete.

    Returns the state unchanged otherwise, and always on the terminal
    winner phase.
    """
    if state.phase is Phase.WINNER or not is_phase_complete(state):
        return state
    state = _ON_EXIT[state.phase](state)
    state = state._copy_with(step_index=state.step_index + 1)
    return _ON_ENTER[state.phase](state)


def settle(state: GameState) -> GameState:
    """Advance through every phase that is already complete."""
    for _ in range(len(PHASE_SEQUENCE)):
        advanced = advance_phase(state)
        if advanced.step_index == state.step_index:
            return advanced
        state = advanced
    return state
