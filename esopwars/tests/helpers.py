"""
Shared helpers for driving a game to a given phase.
"""

from ..engine_core.action import Action
from ..engine_core.queries import can_hire
from ..engine_core.reducer import apply_action
from ..engine_core.state import GameState, HiredEmployee, Phase, PHASE_SEQUENCE, SetupDeck


def play(state: GameState, *actions: Action) -> GameState:
    """Apply actions in order, failing the test on the first rejection."""
    for action in actions:
        result = apply_action(state, action)
        assert result.success, f"{action.action_type.value} rejected: {result.error}"
        state = result.new_state
    return state


def register_all(state: GameState) -> GameState:
    for team in state.teams:
        state = play(state, Action.register_team(team.slot, f"Startup {team.slot}"))
    return state


def lock_all(state: GameState) -> GameState:
    """Lock each team's first segment and idea; the auction opens after the last one."""
    for team in state.teams:
        hand = state.teams[team.slot].setup_hand
        segment = next(c for c in hand if c.kind is SetupDeck.SEGMENT)
        idea = next(c for c in hand if c.kind is SetupDeck.IDEA)
        state = play(state, Action.lock_setup(team.slot, segment.id, idea.id))
    return state


def staff_all(state: GameState, amount: float = 1.0) -> GameState:
    """Hand each card to the first team with room until the auction closes."""
    while state.phase is Phase.AUCTION:
        team = next(t for t in state.teams if can_hire(t, state.config))
        state = play(state, Action.place_bid(team.slot, amount), Action.close_bidding())
    return state


def at_step(state: GameState, phase: Phase, occurrence: int = 0, **changes) -> GameState:
    """Copy of a state moved to the nth occurrence of a phase in the schedule."""
    indices = [i for i, p in enumerate(PHASE_SEQUENCE) if p is phase]
    return state._copy_with(step_index=indices[occurrence], **changes)


def hire(state: GameState, slot: int, *cards, amount: float = 1.0) -> GameState:
    """Put cards straight onto a roster, charging their ESOP."""
    team = state.teams[slot]
    employees = team.employees + tuple(
        HiredEmployee(card=card, bid_amount=amount, esop_cost=amount, team=slot) for card in cards
    )
    return state.with_team(team.with_changes(
        employees=employees,
        esop_remaining=team.esop_remaining - amount * len(cards),
        is_complete=len(employees) >= state.config.hire_cap,
    ))


def run_to_secondary(state: GameState) -> GameState:
    """From the first wildcard round, pass on everything up to the secondary drop."""
    slots = [t.slot for t in state.teams if t.is_active]
    state = play(state, *(Action.select_wildcard(slot, None) for slot in slots))
    state = play(state, Action.draw_market_card(), Action.apply_market_effects())
    state = play(state, *(Action.declare_investment(slot, None) for slot in slots))
    return play(state, Action.resolve_investment_conflicts(), Action.finalize_investments())
