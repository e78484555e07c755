"""
Seeded randomness for handlers.

Every random draw is derived from the state's seed, its action counter and
a purpose label, so replaying the same actions from the same initial state
reproduces the same game.
"""

from __future__ import annotations
import random
import secrets
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from .state import GameState


def new_seed() -> int:
    """Fresh seed for a new session."""
    return secrets.randbits(32)


def seeded_rng(seed: int, purpose: str) -> random.Random:
    return random.Random(f"{seed}:{purpose}")


def state_rng(state: GameState, purpose: str) -> random.Random:
    """RNG for one decision taken at the state's current action counter."""
    return random.Random(f"{state.random_seed}:{state.action_counter}:{purpose}")
