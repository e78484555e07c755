"""
Bots module - Automa implementations.

Provides:
- BotPolicy: Interface for bot decision-making
- RandomPolicy / FirstLegalPolicy: Baselines over the legal action list
- EsopBot: ESOP Wars heuristic bot
- Personality: Configurable play styles
"""

from .policy import BotPolicy, RandomPolicy, FirstLegalPolicy
from .personality import Personality, PERSONALITIES, get_personality, create_random_personality
from .esop_bot import EsopBot, BOT_NAMES

__all__ = [
    "BotPolicy",
    "RandomPolicy",
    "FirstLegalPolicy",
    "Personality",
    "PERSONALITIES",
    "get_personality",
    "create_random_personality",
    "EsopBot",
    "BOT_NAMES",
]
