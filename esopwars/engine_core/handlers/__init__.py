"""
Phase handlers - Pure state transitions, one module per phase family.

Handlers assume the action was already validated. They never check
legality and raise InvariantViolation only for states that should be
unreachable.
"""

from .registration import register_team, deal_setup_hands, drop_card, draw_card, skip_draw, lock_setup
from .auction import place_bid, award_employee, close_bidding, skip_card, start_auction
from .wildcard import select_wildcard, apply_wildcards
from .market import (
    draw_market_card, apply_market_effects, apply_wildcard_modifiers,
    apply_market_leader_bonus, resolve_market, start_market_round,
)
from .investment import (
    start_investment, declare_investment, resolve_investment_conflicts,
    place_investment_bid, pass_investment_bid, close_conflict,
    resolve_conflict_bids, finalize_investments,
)
from .secondary import (
    drop_employee, populate_secondary_pool, close_secondary_bidding, skip_secondary_card,
)
from .exit import draw_exit

__all__ = [
    "register_team", "deal_setup_hands", "drop_card", "draw_card", "skip_draw", "lock_setup",
    "place_bid", "award_employee", "close_bidding", "skip_card", "start_auction",
    "select_wildcard", "apply_wildcards",
    "draw_market_card", "apply_market_effects", "apply_wildcard_modifiers",
    "apply_market_leader_bonus", "resolve_market", "start_market_round",
    "start_investment", "declare_investment", "resolve_investment_conflicts",
    "place_investment_bid", "pass_investment_bid", "close_conflict",
    "resolve_conflict_bids", "finalize_investments",
    "drop_employee", "populate_secondary_pool", "close_secondary_bidding", "skip_secondary_card",
    "draw_exit",
]
