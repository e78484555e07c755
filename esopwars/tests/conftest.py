"""
Pytest fixtures for ESOP Wars tests.
"""

import pytest

from ..engine_core.config import GameConfig
from ..engine_core.state import GameState
from ..games.esop_wars import setup_esop_wars_game
from .helpers import register_all, lock_all, staff_all


@pytest.fixture
def new_game() -> GameState:
    """A three-team game waiting for registration."""
    return setup_esop_wars_game(team_count=3, random_seed=42, game_id="test_game")


@pytest.fixture
def five_team_game() -> GameState:
    return setup_esop_wars_game(team_count=5, random_seed=7, game_id="test_game_5")


@pytest.fixture
def small_pool_game() -> GameState:
    """A two-team game where every team starts with 10% ESOP."""
    return setup_esop_wars_game(
        team_count=2,
        random_seed=3,
        config=GameConfig(initial_esop=10.0),
        game_id="small_pool",
    )


@pytest.fixture
def registered_game(new_game) -> GameState:
    """Every team registered; the setup draft has been dealt."""
    return register_all(new_game)


@pytest.fixture
def auction_game(registered_game) -> GameState:
    """Every team locked its setup; the first employee card is up."""
    return lock_all(registered_game)


@pytest.fixture
def staffed_game(auction_game) -> GameState:
    """Every team holds a full roster; the first wildcard round is open."""
    return staff_all(auction_game)


@pytest.fixture
def five_team_small_pool_game() -> GameState:
    """Five teams, each starting with 10% ESOP."""
    return setup_esop_wars_game(
        team_count=5,
        random_seed=11,
        config=GameConfig(initial_esop=10.0),
        game_id="small_pool_5",
    )
