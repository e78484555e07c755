"""
API Module - Network interface to ESOP Wars sessions.

Exposes the session driver via REST and WebSocket. Clients:
1. Create a session, choosing which seats bots play
2. Submit actions for their team
3. Receive committed snapshots over the WebSocket
4. Read the final rankings

All state is session-scoped and in memory.
"""

from .schemas import (
    # Requests
    CreateSessionRequest,
    ActionRequest,
    ActionPayloadModel,
    UndoRequest,
    # Responses
    SessionResponse,
    GameStateResponse,
    ActionResponse,
    LegalActionsResponse,
    TickResponse,
    WinnersResponse,
    ErrorResponse,
    # Shared
    TeamInfo,
    EmployeeInfo,
    BidInfo,
    StandingInfo,
    # Enums
    ErrorCode,
    SessionStatus,
)
from .service import APIService

__all__ = [
    # Requests
    "CreateSessionRequest",
    "ActionRequest",
    "ActionPayloadModel",
    "UndoRequest",
    # Responses
    "SessionResponse",
    "GameStateResponse",
    "ActionResponse",
    "LegalActionsResponse",
    "TickResponse",
    "WinnersResponse",
    "ErrorResponse",
    # Shared
    "TeamInfo",
    "EmployeeInfo",
    "BidInfo",
    "StandingInfo",
    # Enums
    "ErrorCode",
    "SessionStatus",
    # Service
    "APIService",
]
