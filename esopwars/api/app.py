"""
FastAPI Application - REST and WebSocket API for ESOP Wars sessions.

Endpoints:
    POST   /api/v1/sessions                       Create game session
    GET    /api/v1/sessions                       List active sessions
    GET    /api/v1/sessions/{id}                  Get session status
    DELETE /api/v1/sessions/{id}                  End session
    GET    /api/v1/sessions/{id}/state            Get game state
    POST   /api/v1/sessions/{id}/actions          Submit an action
    GET    /api/v1/sessions/{id}/legal-actions    List legal actions
    POST   /api/v1/sessions/{id}/tick             Close an elapsed bid window
    POST   /api/v1/sessions/{id}/undo             Rewind to a committed state
    GET    /api/v1/sessions/{id}/winners          Final rankings
    WS     /api/v1/sessions/{id}/ws               Snapshot broadcast

Every action goes through the session's single serialization point.
Rejected actions answer 409 with the rejection kind as error_code.
"""

from typing import Optional
import asyncio
import contextlib
import json
import logging
import os

from .. import __version__

# Environment configuration
ESOPWARS_ENV = os.getenv("ESOPWARS_ENV", "development")
ESOPWARS_LOG_LEVEL = os.getenv("ESOPWARS_LOG_LEVEL", "INFO")
ALLOWED_ORIGINS = os.getenv("ALLOWED_ORIGINS", "*").split(",")
ESOPWARS_BID_WINDOW_SECONDS = float(os.getenv("ESOPWARS_BID_WINDOW_SECONDS", "20"))
ESOPWARS_TICK_INTERVAL = float(os.getenv("ESOPWARS_TICK_INTERVAL", "1"))

logger = logging.getLogger("esopwars.api")


def create_app(service=None):
    """
    Create the FastAPI application.

    Args:
        service: Optional APIService instance (creates new if not provided)

    Returns:
        FastAPI application instance
    """
    from fastapi import FastAPI, Query, Request, WebSocket, WebSocketDisconnect
    from fastapi.middleware.cors import CORSMiddleware
    from fastapi.responses import JSONResponse

    from .service import APIService
    from .schemas import (
        # Request models
        CreateSessionRequest,
        ActionRequest,
        UndoRequest,
        # Response models
        SessionResponse,
        GameStateResponse,
        ActionResponse,
        LegalActionsResponse,
        TickResponse,
        WinnersResponse,
        ErrorResponse,
        SessionListResponse,
        EndSessionResponse,
        HealthResponse,
        # Enums
        ErrorCode,
    )
    from ..engine_core.errors import HistoryError, SessionNotFoundError
    from ..engine_core.serialization import state_to_document

    logging.basicConfig(
        level=ESOPWARS_LOG_LEVEL.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    api_service = service or APIService(bid_window=ESOPWARS_BID_WINDOW_SECONDS)

    @contextlib.asynccontextmanager
    async def lifespan(app):
        """Close elapsed bid windows in the background."""
        ticker = None
        if ESOPWARS_TICK_INTERVAL > 0:
            ticker = asyncio.create_task(tick_forever())
        yield
        if ticker is not None:
            ticker.cancel()

    async def tick_forever():
        while True:
            await asyncio.sleep(ESOPWARS_TICK_INTERVAL)
            closed = api_service.tick_all()
            if closed:
                logger.debug("Closed %d bid windows", closed)

    app = FastAPI(
        title="ESOP Wars API",
        description="""
Multi-team startup economy game. Teams bid equity for employees, ride
market rounds, contest investments and exit.

## Error Codes

| Code | Description |
|------|-------------|
| `SESSION_NOT_FOUND` | Session does not exist |
| `SESSION_CLOSED` | Session no longer accepts actions |
| `INVALID_HISTORY` | Undo target was never committed |
| `PHASE_MISMATCH` | Action belongs to another phase |
| `OUT_OF_TURN` | Not this actor's turn |
| `INSUFFICIENT_RESOURCE` | Not enough ESOP, draws or roster room |
| `INVALID_TARGET` | Unknown card, employee or team |
| `ALREADY_RESOLVED` | Already done this round |
| `EMPTY_POOL` | Deck exhausted |
        """,
        version=__version__,
        docs_url="/api/docs",
        redoc_url="/api/redoc",
        lifespan=lifespan,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=ALLOWED_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # =========================================================================
    # Error helpers
    # =========================================================================

    def make_error_response(
        error_code: ErrorCode,
        message: str,
        status_code: int = 400,
        details: Optional[dict] = None,
    ) -> JSONResponse:
        """Create a standardized error response."""
        return JSONResponse(
            status_code=status_code,
            content=ErrorResponse(
                error=message,
                error_code=error_code,
                details=details,
            ).model_dump(mode="json"),
        )

    @app.exception_handler(SessionNotFoundError)
    async def session_not_found(request: Request, exc: SessionNotFoundError):
        return make_error_response(
            ErrorCode.SESSION_NOT_FOUND, str(exc), 404, {"session_id": exc.session_id},
        )

    @app.exception_handler(HistoryError)
    async def invalid_history(request: Request, exc: HistoryError):
        return make_error_response(ErrorCode.INVALID_HISTORY, str(exc), 409)

    # =========================================================================
    # Session Endpoints
    # =========================================================================

    @app.post(
        "/api/v1/sessions",
        response_model=SessionResponse,
        status_code=201,
        responses={400: {"model": ErrorResponse, "description": "Invalid seats or personality"}},
        tags=["Sessions"],
        summary="Create a new game session",
    )
    async def create_session(request: CreateSessionRequest):
        """
        Create a new game session.

        Bot seats listed in `bot_slots` are played automatically.
        """
        try:
            return api_service.create_session(request)
        except ValueError as e:
            return make_error_response(ErrorCode.VALIDATION_ERROR, str(e))

    @app.get(
        "/api/v1/sessions",
        response_model=SessionListResponse,
        tags=["Sessions"],
        summary="List active sessions",
    )
    async def list_sessions() -> SessionListResponse:
        return api_service.list_sessions()

    @app.get(
        "/api/v1/sessions/{session_id}",
        response_model=SessionResponse,
        responses={404: {"model": ErrorResponse}},
        tags=["Sessions"],
        summary="Get session status",
    )
    async def get_session(session_id: str) -> SessionResponse:
        return api_service.get_session(session_id)

    @app.delete(
        "/api/v1/sessions/{session_id}",
        response_model=EndSessionResponse,
        responses={404: {"model": ErrorResponse}},
        tags=["Sessions"],
        summary="End a session",
    )
    async def end_session(session_id: str) -> EndSessionResponse:
        return api_service.end_session(session_id)

    # =========================================================================
    # Game Endpoints
    # =========================================================================

    @app.get(
        "/api/v1/sessions/{session_id}/state",
        response_model=GameStateResponse,
        responses={404: {"model": ErrorResponse}},
        tags=["Game"],
        summary="Get the current game state",
    )
    async def get_state(session_id: str) -> GameStateResponse:
        return api_service.get_game_state(session_id)

    @app.post(
        "/api/v1/sessions/{session_id}/actions",
        response_model=ActionResponse,
        responses={
            404: {"model": ErrorResponse},
            409: {"model": ErrorResponse, "description": "Action rejected by the engine"},
        },
        tags=["Game"],
        summary="Submit an action",
    )
    async def submit_action(session_id: str, request: ActionRequest):
        """
        Submit an action for a team.

        Bots and driver steps run before the response is sent, so
        `bot_changes` lists everything that happened after the action.
        """
        response = api_service.submit_action(session_id, request)
        if not response.success:
            return make_error_response(
                response.error_code or ErrorCode.INTERNAL_ERROR,
                response.error or "Action rejected",
                409,
                {"action_type": request.action_type.value, "phase": response.phase},
            )
        return response

    @app.get(
        "/api/v1/sessions/{session_id}/legal-actions",
        response_model=LegalActionsResponse,
        responses={404: {"model": ErrorResponse}},
        tags=["Game"],
        summary="List legal actions",
    )
    async def get_legal_actions(
        session_id: str,
        team: Optional[int] = Query(None, description="Team slot; omit for driver steps"),
    ) -> LegalActionsResponse:
        return api_service.legal_actions(session_id, team)

    @app.post(
        "/api/v1/sessions/{session_id}/tick",
        response_model=TickResponse,
        responses={404: {"model": ErrorResponse}},
        tags=["Game"],
        summary="Close the bid window if it has elapsed",
    )
    async def tick(session_id: str) -> TickResponse:
        return api_service.tick(session_id)

    @app.post(
        "/api/v1/sessions/{session_id}/undo",
        response_model=GameStateResponse,
        responses={404: {"model": ErrorResponse}, 409: {"model": ErrorResponse}},
        tags=["Game"],
        summary="Rewind to a committed state",
    )
    async def undo(session_id: str, request: UndoRequest) -> GameStateResponse:
        return api_service.undo(session_id, request)

    @app.get(
        "/api/v1/sessions/{session_id}/winners",
        response_model=WinnersResponse,
        responses={404: {"model": ErrorResponse}},
        tags=["Game"],
        summary="Final rankings",
    )
    async def get_winners(session_id: str) -> WinnersResponse:
        return api_service.get_winners(session_id)

    # =========================================================================
    # WebSocket
    # =========================================================================

    @app.websocket("/api/v1/sessions/{session_id}/ws")
    async def websocket_endpoint(websocket: WebSocket, session_id: str):
        """
        WebSocket for real-time updates.

        Messages from server:
        - state_update: A state was committed
        - game_over: The winner phase was reached
        - pong: Reply to ping
        - error: Unreadable client message

        Messages from client:
        - ping: Keep-alive
        """
        try:
            initial = api_service.get_game_state(session_id)
        except SessionNotFoundError:
            await websocket.close(code=4404)
            return
        await websocket.accept()

        event_loop = asyncio.get_running_loop()
        outbox: asyncio.Queue = asyncio.Queue()

        def on_commit(state, changes):
            message = {
                "type": "game_over" if state.is_game_over else "state_update",
                "payload": {
                    "phase": state.phase.value,
                    "action_counter": state.action_counter,
                    "changes": changes,
                    "document": state_to_document(state),
                },
            }
            event_loop.call_soon_threadsafe(outbox.put_nowait, message)

        async def pump():
            while True:
                await websocket.send_json(await outbox.get())

        unsubscribe = api_service.subscribe(session_id, on_commit)
        sender = asyncio.create_task(pump())
        outbox.put_nowait({"type": "state_update", "payload": initial.model_dump(mode="json")})

        try:
            while True:
                data = await websocket.receive_text()
                try:
                    message = json.loads(data)
                except json.JSONDecodeError:
                    outbox.put_nowait({"type": "error", "payload": {"message": "Invalid JSON"}})
                    continue
                if isinstance(message, dict) and message.get("type") == "ping":
                    outbox.put_nowait({"type": "pong"})
        except WebSocketDisconnect:
            logger.debug("WebSocket for session %s disconnected", session_id)
        finally:
            unsubscribe()
            sender.cancel()

    # =========================================================================
    # Health Check
    # =========================================================================

    @app.get(
        "/health",
        response_model=HealthResponse,
        tags=["System"],
        summary="Health check",
    )
    async def health_check() -> HealthResponse:
        """Health check endpoint for load balancers."""
        return HealthResponse(
            status="healthy",
            service="esop-wars",
            version=__version__,
            environment=ESOPWARS_ENV,
        )

    @app.get("/", tags=["System"])
    async def root():
        """Root endpoint with API info."""
        return {
            "name": "ESOP Wars API",
            "version": __version__,
            "docs": "/api/docs",
            "health": "/health",
        }

    return app


# For running directly: uvicorn esopwars.api.app:app
app = create_app()
