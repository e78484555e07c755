"""
Tests for the API request and response models.
"""

import pytest
from pydantic import ValidationError

from ..api.schemas import (
    ActionRequest, CreateSessionRequest, ErrorCode, ErrorResponse, UndoRequest,
)
from ..engine_core.action import ActionType
from ..engine_core.state import SetupDeck, WildcardChoice


class TestRequests:
    def test_create_defaults(self):
        request = CreateSessionRequest()

        assert request.team_count == 5
        assert request.bot_slots == []
        assert request.random_seed is None

    @pytest.mark.parametrize("team_count", [1, 6])
    def test_team_count_bounds(self, team_count):
        with pytest.raises(ValidationError):
            CreateSessionRequest(team_count=team_count)

    def test_initial_esop_must_be_positive(self):
        with pytest.raises(ValidationError):
            CreateSessionRequest(initial_esop=0)

    def test_personality_keys_are_slots(self):
        request = CreateSessionRequest(bot_slots=[1], personalities={"1": "cautious"})
        assert request.personalities == {1: "cautious"}

    def test_action_parses_enums(self):
        request = ActionRequest.model_validate({
            "action_type": "select_wildcard",
            "actor": 2,
            "payload": {"choice": "shield"},
        })

        assert request.action_type is ActionType.SELECT_WILDCARD
        assert request.payload.choice is WildcardChoice.SHIELD

    def test_draw_payload(self):
        request = ActionRequest.model_validate({
            "action_type": "draw_card", "actor": 0, "payload": {"deck": "idea"},
        })
        assert request.payload.deck is SetupDeck.IDEA

    def test_system_action_has_no_actor(self):
        request = ActionRequest(action_type=ActionType.DRAW_EXIT)

        assert request.actor is None
        assert request.payload.target is None

    def test_unknown_action_type(self):
        with pytest.raises(ValidationError):
            ActionRequest.model_validate({"action_type": "steal"})

    def test_undo_counter_not_negative(self):
        with pytest.raises(ValidationError):
            UndoRequest(action_counter=-1)


class TestErrorResponse:
    def test_dump(self):
        response = ErrorResponse(
            error="Not your turn", error_code=ErrorCode.OUT_OF_TURN, details={"phase": "setup"},
        )

        assert response.model_dump(mode="json") == {
            "error": "Not your turn",
            "error_code": "OUT_OF_TURN",
            "details": {"phase": "setup"},
            "api_version": "v1",
        }

    def test_rejection_kinds_are_error_codes(self):
        from ..engine_core.errors import RejectionKind

        for kind in RejectionKind:
            assert ErrorCode(kind.value).value == kind.value
