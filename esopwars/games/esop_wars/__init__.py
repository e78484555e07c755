"""
ESOP Wars - The standard game content.

Teams bid equity for employees, ride two market rounds, contest
investments and exit at a random multiplier. This module contains:
- Employee, market, exit and setup card tables
- Team seat definitions
- A setup helper that builds a new game
"""

from .cards import (
    EMPLOYEES, RESERVE_EMPLOYEES, MARKET_CARDS, EXIT_CARDS, SEGMENTS, IDEAS,
    SETUP_BONUSES, TEAM_SLOTS, CATEGORIES, SOFT_SKILLS, default_catalog, get_employee_by_id,
)
from .setup import setup_esop_wars_game

__all__ = [
    "EMPLOYEES",
    "RESERVE_EMPLOYEES",
    "MARKET_CARDS",
    "EXIT_CARDS",
    "SEGMENTS",
    "IDEAS",
    "SETUP_BONUSES",
    "TEAM_SLOTS",
    "CATEGORIES",
    "SOFT_SKILLS",
    "default_catalog",
    "get_employee_by_id",
    "setup_esop_wars_game",
]
