"""
Tests for state and action documents.
"""

import json

from ..engine_core.action import Action, ActionType
from ..engine_core.reducer import apply_action
from ..engine_core.serialization import (
    action_from_document, action_to_document, state_from_document, state_to_document,
)
from ..engine_core.state import Phase, SetupDeck, WildcardChoice
from ..session import GameLoop, SessionManager
from .helpers import run_to_secondary


class TestStateDocuments:
    """A state survives a trip through JSON unchanged."""

    def test_new_game(self, new_game):
        document = json.loads(json.dumps(state_to_document(new_game)))
        assert state_from_document(document) == new_game

    def test_mid_game(self, staffed_game):
        state = run_to_secondary(staffed_game)
        assert state.phase is Phase.SECONDARY_DROP

        document = json.loads(json.dumps(state_to_document(state)))
        restored = state_from_document(document)

        assert restored == state
        assert restored.active_market_card == state.active_market_card
        assert restored.teams[0].employees == state.teams[0].employees

    def test_finished_game(self):
        session = SessionManager().create_session(team_count=3, bot_slots=range(3), random_seed=6)
        final = GameLoop(session).play_out()

        document = json.loads(json.dumps(state_to_document(final)))
        assert state_from_document(document) == final

    def test_document_uses_enum_values(self, registered_game):
        document = state_to_document(registered_game)

        assert document["config"]["hire_cap"] == 3
        assert document["teams"][0]["setup_hand"][0]["kind"] in ("segment", "idea")

    def test_resumed_state_plays_on(self, registered_game):
        """A restored document accepts the same next action as the original."""
        restored = state_from_document(state_to_document(registered_game))
        team = restored.teams[0]
        action = Action.draw_card(team.slot, SetupDeck.IDEA)

        first = apply_action(registered_game, action)
        second = apply_action(restored, action)

        assert first.success == second.success
        if first.success:
            assert first.new_state == second.new_state


class TestActionDocuments:
    def test_team_action(self):
        action = Action.select_wildcard(2, WildcardChoice.DOUBLE)
        document = action_to_document(action)

        assert document["action_type"] == "select_wildcard"
        assert document["payload"]["choice"] == "double"
        assert action_from_document(document) == action

    def test_system_action(self):
        action = Action.close_conflict(1)
        restored = action_from_document(json.loads(json.dumps(action_to_document(action))))

        assert restored.action_type is ActionType.CLOSE_CONFLICT
        assert restored.actor is None
        assert restored.payload.target == 1

    def test_pass_keeps_none(self):
        action = Action.declare_investment(0, None)
        assert action_from_document(action_to_document(action)).payload.target is None
