"""
Pydantic Schemas for API - Request/response models for OpenAPI.

These models define the contract between clients and the session driver.
All responses include explicit types for OpenAPI schema generation.

Error Codes:
- SESSION_NOT_FOUND: Session does not exist or has ended
- SESSION_CLOSED: Session no longer accepts actions
- INVALID_HISTORY: Undo target was never committed
- VALIDATION_ERROR: Request body or query is malformed
- PHASE_MISMATCH, OUT_OF_TURN, INSUFFICIENT_RESOURCE, INVALID_TARGET,
  ALREADY_RESOLVED, EMPTY_POOL: The engine rejected the action
"""

from enum import Enum
from typing import Optional, Any
from pydantic import BaseModel, Field

from ..engine_core.action import ActionType
from ..engine_core.state import SetupDeck, WildcardChoice


# =============================================================================
# Enums
# =============================================================================

class SessionStatus(str, Enum):
    """Session status values."""
    ACTIVE = "active"
    GAME_OVER = "game_over"
    ABANDONED = "abandoned"


class ErrorCode(str, Enum):
    """Structured error codes."""
    SESSION_NOT_FOUND = "SESSION_NOT_FOUND"
    SESSION_CLOSED = "SESSION_CLOSED"
    INVALID_HISTORY = "INVALID_HISTORY"
    VALIDATION_ERROR = "VALIDATION_ERROR"
    INTERNAL_ERROR = "INTERNAL_ERROR"
    # Engine rejections
    PHASE_MISMATCH = "PHASE_MISMATCH"
    OUT_OF_TURN = "OUT_OF_TURN"
    INSUFFICIENT_RESOURCE = "INSUFFICIENT_RESOURCE"
    INVALID_TARGET = "INVALID_TARGET"
    ALREADY_RESOLVED = "ALREADY_RESOLVED"
    EMPTY_POOL = "EMPTY_POOL"


# =============================================================================
# Shared Models
# =============================================================================

class EmployeeInfo(BaseModel):
    """A hired employee for display."""
    employee_id: int
    name: str
    role: str
    category: str
    hard_skill: float
    soft_skills: dict[str, float] = Field(default_factory=dict)
    bid_amount: float = 0.0
    esop_cost: float = 0.0


class TeamInfo(BaseModel):
    """Team information for display."""
    slot: int
    name: str
    color: str
    is_bot: bool = False
    is_registered: bool = False
    is_disqualified: bool = False
    is_current_turn: bool = False
    esop_remaining: float
    valuation: int
    employees: list[EmployeeInfo] = Field(default_factory=list)
    locked_segment: Optional[str] = None
    locked_idea: Optional[str] = None
    wildcard_used: bool = False
    invested_in: Optional[int] = None
    investor: Optional[int] = None


class BidInfo(BaseModel):
    """The leading bid in an open bidding window."""
    team: int
    amount: float


class StandingInfo(BaseModel):
    """One row of a final ranking."""
    team: int
    name: str
    score: float


# =============================================================================
# Request Models
# =============================================================================

class CreateSessionRequest(BaseModel):
    """Request to create a new game session."""
    team_count: int = Field(5, ge=2, le=5, description="Number of teams")
    bot_slots: list[int] = Field(default_factory=list, description="Seats played by bots")
    personalities: Optional[dict[int, str]] = Field(
        None, description="Personality per bot seat: balanced, aggressive, cautious, chaotic"
    )
    random_seed: Optional[int] = Field(None, description="Seed for reproducible games")
    initial_esop: Optional[float] = Field(None, gt=0, description="Starting equity pool per team")


class ActionPayloadModel(BaseModel):
    """Parameters for an action; each action type reads its own fields."""
    name: Optional[str] = None
    problem_statement: Optional[str] = None
    card_id: Optional[int] = None
    deck: Optional[SetupDeck] = None
    segment_id: Optional[int] = None
    idea_id: Optional[int] = None
    amount: Optional[float] = None
    choice: Optional[WildcardChoice] = None
    target: Optional[int] = None
    employee_id: Optional[int] = None


class ActionRequest(BaseModel):
    """An action submitted by a team, or by the host for driver steps."""
    action_type: ActionType
    actor: Optional[int] = Field(None, description="Team slot; omit for driver steps")
    payload: ActionPayloadModel = Field(default_factory=ActionPayloadModel)


class UndoRequest(BaseModel):
    """Rewind to the state committed at an action counter."""
    action_counter: int = Field(..., ge=0)


# =============================================================================
# Response Models
# =============================================================================

class ErrorResponse(BaseModel):
    """Standard error response."""
    error: str = Field(..., description="Human-readable error message")
    error_code: ErrorCode = Field(..., description="Machine-readable error code")
    details: Optional[dict[str, Any]] = Field(None, description="Additional error context")
    api_version: str = Field("v1", description="API version")


class SessionResponse(BaseModel):
    """Response containing session information."""
    session_id: str
    status: SessionStatus
    phase: str
    market_round: int = 0
    action_counter: int = 0
    teams: list[TeamInfo] = Field(default_factory=list)
    bot_slots: list[int] = Field(default_factory=list)
    created_at: float = 0.0
    api_version: str = "v1"


class GameStateResponse(BaseModel):
    """Complete game state for display."""
    session_id: str
    status: SessionStatus
    phase: str
    action_counter: int
    market_round: int = 0
    teams: list[TeamInfo] = Field(default_factory=list)
    current_card: Optional[EmployeeInfo] = None
    current_bid: Optional[BidInfo] = None
    active_market_card: Optional[str] = None
    exit_card: Optional[str] = None
    bid_deadline: Optional[float] = None
    document: dict[str, Any] = Field(
        default_factory=dict, description="The full serialized GameState"
    )
    api_version: str = "v1"


class ActionResponse(BaseModel):
    """Outcome of a submitted action, plus whatever bots did after it."""
    success: bool
    session_id: str
    phase: str
    action_counter: int
    changes: list[str] = Field(default_factory=list)
    bot_changes: list[str] = Field(default_factory=list)
    error: Optional[str] = None
    error_code: Optional[ErrorCode] = None
    api_version: str = "v1"


class LegalActionsResponse(BaseModel):
    """Actions a team (or the driver) may take right now."""
    session_id: str
    team: Optional[int] = None
    actions: list[dict[str, Any]] = Field(default_factory=list)
    count: int = 0


class TickResponse(BaseModel):
    """Result of checking the bid window."""
    session_id: str
    expired: bool
    action: Optional[ActionResponse] = None


class WinnersResponse(BaseModel):
    """Final rankings once the exit has been drawn."""
    session_id: str
    game_over: bool
    founder_ranking: list[StandingInfo] = Field(default_factory=list)
    employer_ranking: list[StandingInfo] = Field(default_factory=list)
    investor_ranking: list[StandingInfo] = Field(default_factory=list)
    best_founder: Optional[StandingInfo] = None
    best_employer: Optional[StandingInfo] = None
    same_team: bool = False


class SessionListResponse(BaseModel):
    """Response listing active sessions."""
    sessions: list[str]
    count: int


class EndSessionResponse(BaseModel):
    """Response after ending a session."""
    success: bool
    session_id: str
    status: SessionStatus


class HealthResponse(BaseModel):
    """Health check response."""
    status: str
    service: str
    version: str
    environment: str = "development"
