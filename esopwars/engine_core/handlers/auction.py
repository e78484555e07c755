"""
Auction handlers.

Cards are auctioned one at a time in deck order. A won card leaves the
deck; a skipped card stays behind the cursor. The auction ends when the
deck is exhausted or every active team is staffed, and any team still
short of a full roster is disqualified at that point.
"""

from __future__ import annotations

from ..errors import InvariantViolation
from ..queries import current_card, effective_esop_cost, auction_finished
from ..state import GameState, Bid, EmployeeCard, HiredEmployee


def start_auction(state: GameState) -> GameState:
    state = state._copy_with(current_card_index=0, current_bid=None)
    return _close_auction_if_done(state)


def place_bid(state: GameState, team: int, amount: float) -> GameState:
    bid = Bid(team=team, amount=state.config.round_esop(amount), sequence=state.action_counter)
    return state._copy_with(current_bid=bid)


def award_employee(state: GameState, card: EmployeeCard, bid: Bid) -> GameState:
    """Put a card on the winning team's roster and charge its ESOP."""
    config = state.config
    team = state.teams[bid.team]
    cost = effective_esop_cost(team, bid.amount, config)
    remaining = config.round_esop(team.esop_remaining - cost)
    if remaining < 0:
        raise InvariantViolation(f"{team.name} would be left with negative ESOP")
    employees = team.employees + (
        HiredEmployee(card=card, bid_amount=bid.amount, esop_cost=cost, team=team.slot),
    )
    return state.with_team(team.with_changes(
        employees=employees,
        esop_remaining=remaining,
        is_complete=len(employees) >= config.hire_cap,
    ))


def close_bidding(state: GameState) -> GameState:
    """Award the current card to the leading bid and move on."""
    card = current_card(state)
    bid = state.current_bid
    if card is None or bid is None:
        raise InvariantViolation("close_bidding needs a card and a leading bid")
    state = award_employee(state, card, bid)
    index = state.current_card_index
    deck = state.employee_deck[:index] + state.employee_deck[index + 1:]
    state = state._copy_with(employee_deck=deck, current_bid=None)
    return _close_auction_if_done(state)


def skip_card(state: GameState) -> GameState:
    state = state._copy_with(
        current_card_index=state.current_card_index + 1,
        current_bid=None,
    )
    return _close_auction_if_done(state)


def _close_auction_if_done(state: GameState) -> GameState:
    if not auction_finished(state):
        return state
    cap = state.config.hire_cap
    teams = [
        t.with_changes(is_disqualified=True)
        if t.is_active and t.employee_count < cap else t
        for t in state.teams
    ]
    return state.with_teams(teams)._copy_with(current_bid=None)
