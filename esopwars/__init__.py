"""
ESOP Wars - Authoritative engine for a multi-team startup simulation game.

Teams spend equity ("ESOP") to hire staff, weather market events, contest
investments and exit at a valuation multiplier. The engine provides:
- An immutable, serializable game state
- Pure validators and phase handlers
- A phase controller that sequences the game
- A single-writer session driver with bot auto-play
"""

__version__ = "0.1.0"
