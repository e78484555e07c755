"""
Secondary market handlers.

Every team releases one employee, then the released employees and the
reserve are auctioned back. The pool rotates past skipped cards; a whole
rotation without a hire disqualifies any team that is still short, which
guarantees the sub-phase ends.
"""

from __future__ import annotations

from ..errors import InvariantViolation
from ..queries import current_card, all_teams_staffed
from ..randomness import state_rng
from ..state import GameState, DroppedEmployee
from .auction import award_employee


def drop_employee(state: GameState, team: int, employee_id: int) -> GameState:
    """Release an employee into the dropped pool and refund part of its cost."""
    config = state.config
    current = state.teams[team]
    hired = current.get_employee(employee_id)
    if hired is None:
        raise InvariantViolation(f"Employee {employee_id} is not on {current.name}'s roster")
    refund = config.round_esop(hired.esop_cost * config.drop_refund_ratio)
    forfeited = config.round_esop(hired.esop_cost - refund)
    new_state = state.with_team(current.with_changes(
        employees=tuple(e for e in current.employees if e.id != employee_id),
        esop_remaining=config.round_esop(current.esop_remaining + refund),
        forfeited_esop=config.round_esop(current.forfeited_esop + forfeited),
        dropped_employee_id=employee_id,
        is_complete=False,
    ))
    return new_state._copy_with(
        dropped_employees=state.dropped_employees + (DroppedEmployee(hired.card, team),),
    )


def populate_secondary_pool(state: GameState) -> GameState:
    """Merge dropped and reserve employees into one shuffled pool, once."""
    if state.secondary_pool_populated:
        return state
    pool = [d.employee for d in state.dropped_employees] + list(state.reserve_employees)
    state_rng(state, "secondary-pool").shuffle(pool)
    state = state._copy_with(
        secondary_pool=tuple(pool),
        dropped_employees=(),
        reserve_employees=(),
        secondary_pool_populated=True,
        secondary_misses=0,
        current_card_index=0,
        current_bid=None,
    )
    return _disqualify_if_stuck(state)


def close_secondary_bidding(state: GameState) -> GameState:
    card = current_card(state)
    bid = state.current_bid
    if card is None or bid is None:
        raise InvariantViolation("close_bidding needs a card and a leading bid")
    state = award_employee(state, card, bid)
    winner = state.teams[bid.team]
    state = state.with_team(winner.with_changes(secondary_hires=winner.secondary_hires + 1))

    index = state.current_card_index
    pool = state.secondary_pool[:index] + state.secondary_pool[index + 1:]
    state = state._copy_with(
        secondary_pool=pool,
        current_card_index=index % len(pool) if pool else 0,
        current_bid=None,
        secondary_misses=0,
    )
    return _disqualify_if_stuck(state)


def skip_secondary_card(state: GameState) -> GameState:
    pool_size = len(state.secondary_pool)
    state = state._copy_with(
        current_card_index=(state.current_card_index + 1) % pool_size if pool_size else 0,
        current_bid=None,
        secondary_misses=state.secondary_misses + 1,
    )
    return _disqualify_if_stuck(state)


def _disqualify_if_stuck(state: GameState) -> GameState:
    """Disqualify short teams once the pool can no longer staff them."""
    if all_teams_staffed(state):
        return state
    exhausted = not state.secondary_pool or state.secondary_misses >= len(state.secondary_pool)
    if not exhausted:
        return state
    cap = state.config.hire_cap
    teams = [
        t.with_changes(is_disqualified=True)
        if t.is_active and t.employee_count < cap else t
        for t in state.teams
    ]
    return state.with_teams(teams)._copy_with(current_bid=None)
