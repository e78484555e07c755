"""
Engine Core - Deterministic state machine for ESOP Wars.

The engine is the runtime that:
1. Builds a GameState from a card catalog
2. Validates actions without side effects
3. Applies actions via the reducer
4. Advances phases when their exit conditions hold
5. Generates legal actions for bots and UIs
"""

from .config import GameConfig
from .errors import (
    Rejection, RejectionKind, EsopWarsError, InvariantViolation, SessionNotFoundError, HistoryError,
)
from .state import (
    GameState, Team, Phase, PHASE_SEQUENCE, WildcardChoice, SetupDeck, InvestmentStep,
    EmployeeCard, MarketCard, ExitCard, SetupCard, SetupBonus, TeamSlot, CardCatalog,
)
from .action import Action, ActionType, ActionPayload, ActionResult, SYSTEM_ACTIONS
from .initial_state import create_initial_state, build_employee_deck
from .validators import validate
from .queries import is_players_turn, is_phase_complete, get_winners, Winners, Standing
from .phases import advance_phase, settle
from .reducer import Reducer, apply_action
from .action_generator import ActionGenerator, legal_actions, is_legal
from .serialization import state_to_document, state_from_document

__all__ = [
    "GameConfig",
    "Rejection",
    "RejectionKind",
    "EsopWarsError",
    "InvariantViolation",
    "SessionNotFoundError",
    "HistoryError",
    "GameState",
    "Team",
    "Phase",
    "PHASE_SEQUENCE",
    "WildcardChoice",
    "SetupDeck",
    "InvestmentStep",
    "EmployeeCard",
    "MarketCard",
    "ExitCard",
    "SetupCard",
    "SetupBonus",
    "TeamSlot",
    "CardCatalog",
    "Action",
    "ActionType",
    "ActionPayload",
    "ActionResult",
    "SYSTEM_ACTIONS",
    "create_initial_state",
    "build_employee_deck",
    "validate",
    "is_players_turn",
    "is_phase_complete",
    "get_winners",
    "Winners",
    "Standing",
    "advance_phase",
    "settle",
    "Reducer",
    "apply_action",
    "ActionGenerator",
    "legal_actions",
    "is_legal",
    "state_to_document",
    "state_from_document",
]
