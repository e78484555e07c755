"""
ESOP Wars Game Setup - Creates a ready-to-register game.

The engine builds the state; this module supplies the standard content.
Tables of 2-4 teams get a proportionally smaller auction deck, five
teams use every employee card.
"""

from __future__ import annotations

from ...engine_core.config import GameConfig
from ...engine_core.initial_state import create_initial_state
from ...engine_core.state import GameState
from .cards import default_catalog


def setup_esop_wars_game(
    team_count: int = 5,
    bot_slots: tuple[int, ...] | list[int] = (),
    random_seed: int | None = None,
    config: GameConfig | None = None,
    game_id: str | None = None,
) -> GameState:
    """
    Set up a new ESOP Wars game.

    Args:
        team_count: Number of teams (2-5)
        bot_slots: Seats played by bots
        random_seed: Seed for deterministic shuffling
        config: Rules for the session

    Returns:
        Initial GameState in the registration phase
    """
    return create_initial_state(
        default_catalog(),
        team_count,
        config=config,
        bot_slots=tuple(bot_slots),
        seed=random_seed,
        game_id=game_id,
    )
