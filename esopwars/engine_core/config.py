"""
Game Config - Tunable constants for one session.

The config travels inside GameState so that validators and handlers stay
pure functions of the state, and a persisted document carries the rules
it was played under.
"""

from __future__ import annotations
from dataclasses import dataclass


@dataclass(frozen=True)
class GameConfig:
    """Numeric rules of a session. All defaults match the standard game."""

    # Economy
    initial_esop: float = 12.0  # Equity pool per team, in percent
    initial_valuation: int = 20_000_000
    esop_precision: int = 2  # Decimals equity amounts are rounded to

    # Hiring
    hire_cap: int = 3
    ops_discount: float = 0.0  # ESOP discount once a team holds an Ops hire
    drop_refund_ratio: float = 1.0  # Share of ESOP cost restored on a drop

    # Setup draft
    setup_draw_budget: int = 3
    setup_segments_dealt: int = 1
    setup_ideas_dealt: int = 4

    # Market
    skill_growth_factor: float = 0.1
    market_leader_bonus: float = 0.20

    # Category perks, applied during market resolution
    sales_synergy_min: int = 2  # Sales hires needed for the synergy bonus
    sales_synergy_bonus: float = 0.05  # Added to the growth rate
    scaling_card: str = "Rapid Scaling"
    engineering_scaling_bonus: float = 0.05  # Per Engineering hire under the scaling card
    crash_card: str = "Market Crash"
    crash_shield_ratio: float = 0.25  # Share of negative modifiers a Finance hire absorbs in a crash
    soft_skill_shield_ratio: float = 0.5  # Share of soft-skill penalties a Product hire absorbs

    # Investment
    investment_amount: int = 500_000
    investor_equity: float = 0.10

    # Registration
    max_name_length: int = 30
    max_problem_length: int = 100

    def round_esop(self, amount: float) -> float:
        """Round an equity amount to the configured precision."""
        return round(amount, self.esop_precision)
