"""Exit handler."""

from __future__ import annotations

from ..errors import InvariantViolation
from ..randomness import state_rng
from ..state import GameState


def draw_exit(state: GameState) -> GameState:
    """Pick one exit card uniformly and multiply every active valuation by it."""
    if not state.exit_deck:
        raise InvariantViolation("The exit deck is empty")
    card = state_rng(state, "exit").choice(state.exit_deck)
    teams = [
        t.with_changes(pre_exit_valuation=t.valuation, valuation=round(t.valuation * card.multiplier))
        if t.is_active else t
        for t in state.teams
    ]
    return state.with_teams(teams)._copy_with(exit_card=card)
