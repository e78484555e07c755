"""
Bot Personalities - Configurable play styles.

Personalities adjust:
- Aggression (how far past its budget a bot will bid)
- Randomness (how often it passes on an affordable card)
- Wildcard boldness (how eagerly it plays its wildcard)
- Investment appetite (share of ESOP it will spend on a conflict)
"""

from __future__ import annotations
import random
from dataclasses import dataclass


@dataclass(frozen=True)
class Personality:
    """
    A bot personality that defines play style.

    Personalities can be:
    - Predefined (balanced, aggressive, cautious, chaotic)
    - Generated (random variations)
    """
    name: str
    description: str = ""

    # Behavioral parameters
    aggression: float = 0.5  # 0 = never stretches, 1 = stretches for any good card
    randomness: float = 0.15  # Chance of passing on an affordable card
    wildcard_boldness: float = 0.6  # Chance of playing the wildcard when it fits
    investment_appetite: float = 0.25  # Share of ESOP it will bid in a conflict
    investment_pass_rate: float = 0.15  # Chance of declaring no investment

    @property
    def stretch_multiplier(self) -> float:
        """Budget multiplier applied to standout employees."""
        return 1.0 + self.aggression


# ============================================================================
# Predefined Personalities
# ============================================================================

BALANCED = Personality(
    name="Balanced",
    description="Spreads its equity evenly and plays the wildcard by position",
)


AGGRESSIVE = Personality(
    name="Aggressive",
    description="Overpays for standout hires and fights for investments",
    aggression=0.9,
    randomness=0.05,
    wildcard_boldness=0.8,
    investment_appetite=0.4,
    investment_pass_rate=0.05,
)


CAUTIOUS = Personality(
    name="Cautious",
    description="Keeps equity in reserve and rarely contests",
    aggression=0.2,
    randomness=0.2,
    wildcard_boldness=0.4,
    investment_appetite=0.1,
    investment_pass_rate=0.3,
)


CHAOTIC = Personality(
    name="Chaotic",
    description="Unpredictable play with high randomness",
    aggression=0.6,
    randomness=0.4,
    wildcard_boldness=0.5,
    investment_appetite=0.3,
    investment_pass_rate=0.25,
)


# All predefined personalities
PERSONALITIES: dict[str, Personality] = {
    "balanced": BALANCED,
    "aggressive": AGGRESSIVE,
    "cautious": CAUTIOUS,
    "chaotic": CHAOTIC,
}


def create_random_personality(
    name: str = "Random",
    base: Personality | None = None,
    variance: float = 0.3,
    seed: int | None = None,
) -> Personality:
    """
    Create a personality with random variations.

    Args:
        name: Name for the personality
        base: Base personality to vary from (default: BALANCED)
        variance: How much to vary (0-1)
        seed: Random seed for reproducibility
    """
    rng = random.Random(seed)
    base = base or BALANCED

    def vary(value: float) -> float:
        """Apply random variation to a value, kept within 0-1."""
        delta = value * variance * (rng.random() * 2 - 1)
        return min(1.0, max(0.0, value + delta))

    return Personality(
        name=name,
        description=f"Variation of {base.name}",
        aggression=vary(base.aggression),
        randomness=vary(base.randomness),
        wildcard_boldness=vary(base.wildcard_boldness),
        investment_appetite=vary(base.investment_appetite),
        investment_pass_rate=vary(base.investment_pass_rate),
    )


def get_personality(name: str) -> Personality:
    """Get a predefined personality by name."""
    if name not in PERSONALITIES:
        raise ValueError(f"Unknown personality: {name}. Available: {list(PERSONALITIES.keys())}")
    return PERSONALITIES[name]
