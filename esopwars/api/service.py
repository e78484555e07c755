"""
API Service - Business logic layer between the API and the engine.

The service:
1. Translates API requests to engine actions
2. Manages sessions and their game loops
3. Lets bots and the driver catch up after every accepted action
4. Formats responses for clients

This layer is framework-agnostic (can be used with FastAPI, Flask, etc.)
"""

from __future__ import annotations
import time
import uuid
from dataclasses import dataclass, field
from typing import Callable

from .schemas import (
    # Requests
    CreateSessionRequest,
    ActionRequest,
    UndoRequest,
    # Responses
    SessionResponse,
    GameStateResponse,
    ActionResponse,
    LegalActionsResponse,
    TickResponse,
    WinnersResponse,
    SessionListResponse,
    EndSessionResponse,
    # Shared
    TeamInfo,
    EmployeeInfo,
    BidInfo,
    StandingInfo,
    # Enums
    SessionStatus,
    ErrorCode,
)
from ..engine_core.action import Action, ActionPayload, ActionResult
from ..engine_core.action_generator import legal_actions
from ..engine_core.config import GameConfig
from ..engine_core.queries import current_card, get_winners, is_players_turn
from ..engine_core.serialization import action_to_document, state_to_document
from ..engine_core.state import EmployeeCard, GameState, HiredEmployee, Team
from ..session import SessionManager, Session, GameLoop, DEFAULT_BID_WINDOW
from ..session.manager import Subscriber


@dataclass
class APIService:
    """
    Main API service.

    Usage:
        service = APIService()

        # Create session
        session = service.create_session(CreateSessionRequest(team_count=3, bot_slots=[1, 2]))

        # Submit an action for team 0
        response = service.submit_action(session.session_id, request)
    """
    session_manager: SessionManager = field(default_factory=SessionManager)
    bid_window: float = DEFAULT_BID_WINDOW
    clock: Callable[[], float] = time.monotonic

    # Game loops per session
    _game_loops: dict[str, GameLoop] = field(default_factory=dict)

    def create_session(self, request: CreateSessionRequest) -> SessionResponse:
        """
        Create a new game session.

        Bots seated before the first human register straight away.
        Raises ValueError for an impossible seat layout or personality.
        """
        config = None
        if request.initial_esop is not None:
            config = GameConfig(initial_esop=request.initial_esop)
        session = self.session_manager.create_session(
            team_count=request.team_count,
            bot_slots=request.bot_slots,
            random_seed=request.random_seed,
            config=config,
            personalities=request.personalities,
        )
        game_loop = GameLoop(
            session, clock=self.clock, bid_window=self.bid_window,
        )
        self._game_loops[session.session_id] = game_loop
        game_loop.run_bots()
        return self._session_to_response(session)

    def get_loop(self, session_id: str) -> GameLoop:
        """The loop driving a session; raises SessionNotFoundError if unknown."""
        session = self.session_manager.get_session(session_id)
        game_loop = self._game_loops.get(session_id)
        if game_loop is None:
            game_loop = GameLoop(session, clock=self.clock, bid_window=self.bid_window)
            self._game_loops[session_id] = game_loop
        return game_loop

    def get_session(self, session_id: str) -> SessionResponse:
        return self._session_to_response(self.session_manager.get_session(session_id))

    def list_sessions(self) -> SessionListResponse:
        sessions = self.session_manager.list_active_sessions()
        return SessionListResponse(sessions=sessions, count=len(sessions))

    def end_session(self, session_id: str, reason: str = "user_ended") -> EndSessionResponse:
        """
        End a game session.
        """
        session = self.session_manager.end_session(session_id, reason)
        self._game_loops.pop(session_id, None)
        return EndSessionResponse(
            success=True,
            session_id=session_id,
            status=SessionStatus(session.status.value),
        )

    def get_game_state(self, session_id: str) -> GameStateResponse:
        session = self.session_manager.get_session(session_id)
        return self._build_game_state(session)

    def submit_action(self, session_id: str, request: ActionRequest) -> ActionResponse:
        """
        Submit one action through the session's serialization point.

        On success the bots and driver steps run before responding, so the
        response reflects everything up to the next human decision.
        """
        game_loop = self.get_loop(session_id)
        action = Action(
            action_type=request.action_type,
            actor=request.actor,
            payload=ActionPayload(**request.payload.model_dump()),
            timestamp=time.time(),
            action_id=str(uuid.uuid4()),
        )
        result = game_loop.submit(action)
        bot_results = game_loop.run_bots() if result.success else []
        return self._action_response(game_loop.session, result, bot_results)

    def legal_actions(self, session_id: str, team: int | None) -> LegalActionsResponse:
        """Legal actions for a team, or driver steps when team is None."""
        session = self.session_manager.get_session(session_id)
        actions = [action_to_document(a) for a in legal_actions(session.game_state, team)]
        return LegalActionsResponse(
            session_id=session_id, team=team, actions=actions, count=len(actions),
        )

    def tick(self, session_id: str, now: float | None = None) -> TickResponse:
        """Close the session's bid window if it has elapsed."""
        game_loop = self.get_loop(session_id)
        outcome = game_loop.tick(now)
        action = None
        if outcome.result is not None:
            action = self._action_response(game_loop.session, outcome.result, outcome.bot_results)
        return TickResponse(session_id=session_id, expired=outcome.expired, action=action)

    def tick_all(self, now: float | None = None) -> int:
        """Tick every active session; returns how many windows were closed."""
        closed = 0
        for session_id in self.session_manager.list_active_sessions():
            if self.tick(session_id, now).action is not None:
                closed += 1
        return closed

    def undo(self, session_id: str, request: UndoRequest) -> GameStateResponse:
        """Rewind a session. Raises HistoryError for an unknown counter."""
        game_loop = self.get_loop(session_id)
        game_loop.undo(request.action_counter)
        return self._build_game_state(game_loop.session)

    def get_winners(self, session_id: str) -> WinnersResponse:
        session = self.session_manager.get_session(session_id)
        winners = get_winners(session.game_state)
        if winners is None:
            return WinnersResponse(session_id=session_id, game_over=False)

        def rows(ranking):
            return [StandingInfo(team=s.team, name=s.name, score=s.score) for s in ranking]

        founder = rows(winners.founder_ranking)
        employer = rows(winners.employer_ranking)
        return WinnersResponse(
            session_id=session_id,
            game_over=session.game_state.is_game_over,
            founder_ranking=founder,
            employer_ranking=employer,
            investor_ranking=rows(winners.investor_ranking),
            best_founder=founder[0] if founder else None,
            best_employer=employer[0] if employer else None,
            same_team=winners.same_team,
        )

    def subscribe(self, session_id: str, callback: Subscriber) -> Callable[[], None]:
        return self.get_loop(session_id).subscribe(callback)

    # =========================================================================
    # Helper methods
    # =========================================================================

    def _action_response(
        self,
        session: Session,
        result: ActionResult,
        bot_results: list[ActionResult],
    ) -> ActionResponse:
        state = session.game_state
        bot_changes = [line for r in bot_results for line in r.state_changes]
        return ActionResponse(
            success=result.success,
            session_id=session.session_id,
            phase=state.phase.value,
            action_counter=state.action_counter,
            changes=list(result.state_changes),
            bot_changes=bot_changes,
            error=result.error,
            error_code=ErrorCode(result.error_code) if result.error_code else None,
        )

    def _session_to_response(self, session: Session) -> SessionResponse:
        """Convert Session to SessionResponse."""
        state = session.game_state
        return SessionResponse(
            session_id=session.session_id,
            status=SessionStatus(session.status.value),
            phase=state.phase.value,
            market_round=state.market_round,
            action_counter=state.action_counter,
            teams=[self._team_info(state, t) for t in state.teams],
            bot_slots=sorted(session.bots),
            created_at=session.created_at,
        )

    def _build_game_state(self, session: Session) -> GameStateResponse:
        """Build complete game state response."""
        state = session.game_state
        card = current_card(state)
        bid = state.current_bid
        return GameStateResponse(
            session_id=session.session_id,
            status=SessionStatus(session.status.value),
            phase=state.phase.value,
            action_counter=state.action_counter,
            market_round=state.market_round,
            teams=[self._team_info(state, t) for t in state.teams],
            current_card=self._employee_info(card) if card else None,
            current_bid=BidInfo(team=bid.team, amount=bid.amount) if bid else None,
            active_market_card=state.active_market_card.name if state.active_market_card else None,
            exit_card=state.exit_card.name if state.exit_card else None,
            bid_deadline=session.bid_deadline,
            document=state_to_document(state),
        )

    def _team_info(self, state: GameState, team: Team) -> TeamInfo:
        return TeamInfo(
            slot=team.slot,
            name=team.name,
            color=team.color,
            is_bot=team.is_bot,
            is_registered=team.is_registered,
            is_disqualified=team.is_disqualified,
            is_current_turn=is_players_turn(state, team.slot),
            esop_remaining=team.esop_remaining,
            valuation=team.valuation,
            employees=[self._employee_info(e.card, e) for e in team.employees],
            locked_segment=team.locked_segment.name if team.locked_segment else None,
            locked_idea=team.locked_idea.name if team.locked_idea else None,
            wildcard_used=team.wildcard_used,
            invested_in=team.invested_in,
            investor=team.investor,
        )

    def _employee_info(self, card: EmployeeCard, hired: HiredEmployee | None = None) -> EmployeeInfo:
        return EmployeeInfo(
            employee_id=card.id,
            name=card.name,
            role=card.role,
            category=card.category,
            hard_skill=card.hard_skill,
            soft_skills=dict(card.soft_skills),
            bid_amount=hired.bid_amount if hired else 0.0,
            esop_cost=hired.esop_cost if hired else 0.0,
        )
