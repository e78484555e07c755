"""
Tests for action validation.

Every illegal action is refused with a classified rejection and leaves
the state untouched.
"""

import pytest

from ..engine_core.action import Action, ActionType, ActionPayload
from ..engine_core.errors import RejectionKind
from ..engine_core.reducer import apply_action
from ..engine_core.state import Phase, SetupDeck, WildcardChoice, InvestmentStep
from ..engine_core.validators import validate
from ..games.esop_wars import EMPLOYEES, MARKET_CARDS
from .helpers import at_step, hire, play


def rejection_kind(state, action):
    rejection = validate(state, action)
    assert rejection is not None, f"{action.action_type.value} was accepted"
    return rejection.kind


class TestRejectionLeavesState:
    """A refused action never produces a new state."""

    def test_rejected_result_has_no_state(self, new_game):
        """The result carries the rejection and no new state."""
        result = apply_action(new_game, Action.register_team(2, "Late"))

        assert not result.success
        assert result.new_state is None
        assert result.error_code == "OUT_OF_TURN"
        assert result.rejection.kind is RejectionKind.OUT_OF_TURN

    def test_game_over_refuses_everything(self, new_game):
        """No action is legal once the winner phase is reached."""
        state = at_step(new_game, Phase.WINNER)

        assert rejection_kind(state, Action.draw_exit()) is RejectionKind.PHASE_MISMATCH
        assert rejection_kind(state, Action.place_bid(0, 1)) is RejectionKind.PHASE_MISMATCH


class TestRegistrationValidation:
    """Tests for register_team validation."""

    def test_registration_is_in_seat_order(self, new_game):
        """Only the lowest unregistered seat may register."""
        assert rejection_kind(new_game, Action.register_team(1, "Beta Co")) is RejectionKind.OUT_OF_TURN
        assert validate(new_game, Action.register_team(0, "Alpha Co")) is None

    def test_empty_name_rejected(self, new_game):
        assert rejection_kind(new_game, Action.register_team(0, "   ")) is RejectionKind.INVALID_TARGET

    def test_long_name_rejected(self, new_game):
        """Names are capped at the configured length."""
        action = Action.register_team(0, "x" * (new_game.config.max_name_length + 1))
        assert rejection_kind(new_game, action) is RejectionKind.INVALID_TARGET

    def test_duplicate_name_rejected(self, new_game):
        """Names are unique regardless of case."""
        state = play(new_game, Action.register_team(0, "Rocket"))
        assert rejection_kind(state, Action.register_team(1, "ROCKET")) is RejectionKind.INVALID_TARGET

    def test_long_problem_statement_rejected(self, new_game):
        action = Action.register_team(0, "Rocket", "p" * (new_game.config.max_problem_length + 1))
        assert rejection_kind(new_game, action) is RejectionKind.INVALID_TARGET

    def test_driver_cannot_register(self, new_game):
        """A team action without a team is out of turn."""
        action = Action(ActionType.REGISTER_TEAM, None, ActionPayload(name="Ghost"))
        assert rejection_kind(new_game, action) is RejectionKind.OUT_OF_TURN

    def test_unknown_slot_rejected(self, new_game):
        assert rejection_kind(new_game, Action.register_team(9, "Nobody")) is RejectionKind.INVALID_TARGET

    def test_wrong_phase(self, registered_game):
        """Registration closes once the draft starts."""
        assert rejection_kind(registered_game, Action.register_team(0, "Again")) is RejectionKind.PHASE_MISMATCH


class TestSetupValidation:
    """Tests for the setup draft."""

    def _idea(self, state, slot):
        return next(c for c in state.teams[slot].setup_hand if c.kind is SetupDeck.IDEA)

    def _segment(self, state, slot):
        return next(c for c in state.teams[slot].setup_hand if c.kind is SetupDeck.SEGMENT)

    def test_drop_out_of_turn(self, registered_game):
        """Only the team holding the setup turn may drop."""
        card = self._idea(registered_game, 1)
        assert rejection_kind(registered_game, Action.drop_card(1, card.id)) is RejectionKind.OUT_OF_TURN

    def test_cannot_drop_last_segment(self, registered_game):
        """A hand always keeps one card of each kind."""
        card = self._segment(registered_game, 0)
        assert rejection_kind(registered_game, Action.drop_card(0, card.id)) is RejectionKind.INSUFFICIENT_RESOURCE

    def test_one_drop_per_turn(self, registered_game):
        state = play(registered_game, Action.drop_card(0, self._idea(registered_game, 0).id))

        second = self._idea(state, 0)
        assert rejection_kind(state, Action.drop_card(0, second.id)) is RejectionKind.ALREADY_RESOLVED

    def test_drop_unknown_card(self, registered_game):
        assert rejection_kind(registered_game, Action.drop_card(0, 9999)) is RejectionKind.INVALID_TARGET

    def test_draw_budget(self, registered_game):
        """Draws past the budget are refused."""
        team = registered_game.teams[0]
        state = registered_game.with_team(
            team.with_changes(setup_draws_used=registered_game.config.setup_draw_budget)
        )
        assert rejection_kind(state, Action.draw_card(0, SetupDeck.IDEA)) is RejectionKind.INSUFFICIENT_RESOURCE

    def test_draw_from_empty_deck(self, registered_game):
        state = registered_game._copy_with(segment_deck=())
        assert rejection_kind(state, Action.draw_card(0, SetupDeck.SEGMENT)) is RejectionKind.EMPTY_POOL

    def test_lock_off_turn_allowed(self, registered_game):
        """Locking does not need the setup turn."""
        state = registered_game
        action = Action.lock_setup(2, self._segment(state, 2).id, self._idea(state, 2).id)
        assert validate(state, action) is None

    def test_lock_twice(self, registered_game):
        state = registered_game
        state = play(state, Action.lock_setup(2, self._segment(state, 2).id, self._idea(state, 2).id))

        assert rejection_kind(state, Action.lock_setup(2, 1, 101)) is RejectionKind.ALREADY_RESOLVED

    def test_lock_needs_one_of_each_kind(self, registered_game):
        """The segment slot must hold a segment card."""
        state = registered_game
        idea = self._idea(state, 0)
        assert rejection_kind(state, Action.lock_setup(0, idea.id, idea.id)) is RejectionKind.INVALID_TARGET

    def test_locked_team_cannot_draw(self, registered_game):
        """A locked team is out of the rotation."""
        state = registered_game
        state = play(state, Action.lock_setup(0, self._segment(state, 0).id, self._idea(state, 0).id))
        state = state._copy_with(setup_turn=0)

        assert rejection_kind(state, Action.skip_draw(0)) is RejectionKind.ALREADY_RESOLVED


class TestAuctionValidation:
    """Tests for bids and the driver's auction steps."""

    def test_bid_must_be_positive(self, auction_game):
        assert rejection_kind(auction_game, Action.place_bid(0, 0)) is RejectionKind.INSUFFICIENT_RESOURCE

    def test_bid_above_pool(self, auction_game):
        """A bid can't exceed the remaining ESOP."""
        too_much = auction_game.teams[0].esop_remaining + 1
        assert rejection_kind(auction_game, Action.place_bid(0, too_much)) is RejectionKind.INSUFFICIENT_RESOURCE

    def test_bid_must_beat_leader(self, auction_game):
        state = play(auction_game, Action.place_bid(0, 3))

        assert rejection_kind(state, Action.place_bid(1, 3)) is RejectionKind.INSUFFICIENT_RESOURCE
        assert validate(state, Action.place_bid(1, 3.5)) is None

    def test_bid_rounding_to_zero_rejected(self, auction_game):
        """0.001 is stored as 0.0 at two decimals, so it is not a positive bid."""
        action = Action.place_bid(0, 0.001)
        assert rejection_kind(auction_game, action) is RejectionKind.INSUFFICIENT_RESOURCE

    def test_bid_rounding_to_leader_rejected(self, auction_game):
        state = play(auction_game, Action.place_bid(0, 5))

        assert rejection_kind(state, Action.place_bid(1, 5.001)) is RejectionKind.INSUFFICIENT_RESOURCE
        assert state.current_bid.team == 0

    def test_bid_rounding_within_pool(self, auction_game):
        """A bid that rounds down to the whole pool is affordable."""
        pool = auction_game.teams[0].esop_remaining
        assert validate(auction_game, Action.place_bid(0, pool + 0.001)) is None

    def test_bid_without_amount(self, auction_game):
        action = Action(ActionType.PLACE_BID, 0, ActionPayload())
        assert rejection_kind(auction_game, action) is RejectionKind.INVALID_TARGET

    def test_full_roster_cannot_bid(self, auction_game):
        """A team at the hire cap is done bidding."""
        state = hire(auction_game, 0, *EMPLOYEES[15:18])
        assert rejection_kind(state, Action.place_bid(0, 1)) is RejectionKind.INSUFFICIENT_RESOURCE

    def test_driver_cannot_bid(self, auction_game):
        action = Action(ActionType.PLACE_BID, None, ActionPayload(amount=1))
        assert rejection_kind(auction_game, action) is RejectionKind.OUT_OF_TURN

    def test_team_cannot_close(self, auction_game):
        """Closing and skipping belong to the session driver."""
        state = play(auction_game, Action.place_bid(0, 1))
        action = Action(ActionType.CLOSE_BIDDING, 0)
        assert rejection_kind(state, action) is RejectionKind.OUT_OF_TURN

    def test_close_without_bid(self, auction_game):
        assert rejection_kind(auction_game, Action.close_bidding()) is RejectionKind.INVALID_TARGET

    def test_no_card_left(self, auction_game):
        state = auction_game._copy_with(current_card_index=len(auction_game.employee_deck))
        assert rejection_kind(state, Action.place_bid(0, 1)) is RejectionKind.EMPTY_POOL
        assert rejection_kind(state, Action.skip_card()) is RejectionKind.EMPTY_POOL

    def test_bid_outside_bidding_phase(self, new_game):
        assert rejection_kind(new_game, Action.place_bid(0, 1)) is RejectionKind.PHASE_MISMATCH

    def test_disqualified_team_cannot_bid(self, auction_game):
        team = auction_game.teams[1]
        state = auction_game.with_team(team.with_changes(is_disqualified=True))
        assert rejection_kind(state, Action.place_bid(1, 1)) is RejectionKind.OUT_OF_TURN


class TestWildcardValidation:
    """Tests for wildcard selection."""

    def test_one_choice_per_round(self, staffed_game):
        state = play(staffed_game, Action.select_wildcard(0, WildcardChoice.DOUBLE))

        action = Action.select_wildcard(0, WildcardChoice.SHIELD)
        assert rejection_kind(state, action) is RejectionKind.ALREADY_RESOLVED

    def test_wildcard_is_one_shot(self, staffed_game):
        """A used wildcard can't be played again, but passing is fine."""
        team = staffed_game.teams[1]
        state = staffed_game.with_team(team.with_changes(wildcard_used=True))

        action = Action.select_wildcard(1, WildcardChoice.SHIELD)
        assert rejection_kind(state, action) is RejectionKind.ALREADY_RESOLVED
        assert validate(state, Action.select_wildcard(1, None)) is None

    def test_unknown_choice(self, staffed_game):
        action = Action(ActionType.SELECT_WILDCARD, 0, ActionPayload(choice="triple"))
        assert rejection_kind(staffed_game, action) is RejectionKind.INVALID_TARGET


class TestMarketValidation:
    """Tests for the driver's market steps."""

    def test_draw_twice(self, new_game):
        state = at_step(new_game, Phase.MARKET, active_market_card=MARKET_CARDS[0])
        assert rejection_kind(state, Action.draw_market_card()) is RejectionKind.ALREADY_RESOLVED

    def test_apply_before_draw(self, new_game):
        state = at_step(new_game, Phase.MARKET)
        assert rejection_kind(state, Action.apply_market_effects()) is RejectionKind.INVALID_TARGET

    def test_apply_twice(self, new_game):
        """Market effects apply once per round."""
        state = at_step(
            new_game, Phase.MARKET, active_market_card=MARKET_CARDS[0], market_resolved=True,
        )
        assert rejection_kind(state, Action.apply_market_effects()) is RejectionKind.ALREADY_RESOLVED

    def test_empty_market_deck(self, new_game):
        state = at_step(new_game, Phase.MARKET, market_deck=())
        assert rejection_kind(state, Action.draw_market_card()) is RejectionKind.EMPTY_POOL

    def test_team_cannot_draw_market(self, new_game):
        state = at_step(new_game, Phase.MARKET)
        action = Action(ActionType.DRAW_MARKET_CARD, 1)
        assert rejection_kind(state, action) is RejectionKind.OUT_OF_TURN


class TestInvestmentValidation:
    """Tests for declarations and conflict bidding."""

    @pytest.fixture
    def declaring(self, new_game):
        return at_step(new_game, Phase.INVESTMENT)

    @pytest.fixture
    def contested(self, declaring):
        """Teams 0 and 1 both want team 2."""
        return play(
            declaring,
            Action.declare_investment(0, 2),
            Action.declare_investment(1, 2),
            Action.declare_investment(2, None),
            Action.resolve_investment_conflicts(),
        )

    def test_cannot_invest_in_self(self, declaring):
        assert rejection_kind(declaring, Action.declare_investment(1, 1)) is RejectionKind.INVALID_TARGET

    def test_unknown_target(self, declaring):
        assert rejection_kind(declaring, Action.declare_investment(1, 7)) is RejectionKind.INVALID_TARGET

    def test_declare_once(self, declaring):
        state = play(declaring, Action.declare_investment(0, None))
        assert rejection_kind(state, Action.declare_investment(0, 1)) is RejectionKind.ALREADY_RESOLVED

    def test_resolve_before_everyone_declared(self, declaring):
        state = play(declaring, Action.declare_investment(0, 1))
        assert rejection_kind(state, Action.resolve_investment_conflicts()) is RejectionKind.OUT_OF_TURN

    def test_finalize_too_early(self, declaring):
        assert rejection_kind(declaring, Action.finalize_investments()) is RejectionKind.OUT_OF_TURN

    def test_conflict_opens_bidding(self, contested):
        assert contested.investment_step is InvestmentStep.BIDDING
        assert contested.conflicts[0].claimants == (0, 1)

    def test_bid_above_pool(self, contested):
        too_much = contested.teams[0].esop_remaining + 1
        action = Action.place_investment_bid(0, too_much)
        assert rejection_kind(contested, action) is RejectionKind.INSUFFICIENT_RESOURCE

    def test_bid_rounding_to_zero_rejected(self, contested):
        action = Action.place_investment_bid(0, 0.004)
        assert rejection_kind(contested, action) is RejectionKind.INSUFFICIENT_RESOURCE

    def test_bid_rounding_to_leader_rejected(self, contested):
        state = play(contested, Action.place_investment_bid(0, 4))

        action = Action.place_investment_bid(1, 4.001)
        assert rejection_kind(state, action) is RejectionKind.INSUFFICIENT_RESOURCE
        assert state.conflicts[0].leading_bid.team == 0

    def test_non_claimant_cannot_bid(self, contested):
        assert rejection_kind(contested, Action.place_investment_bid(2, 1)) is RejectionKind.INVALID_TARGET

    def test_leader_cannot_pass(self, contested):
        state = play(contested, Action.place_investment_bid(0, 2))
        assert rejection_kind(state, Action.pass_investment_bid(0)) is RejectionKind.OUT_OF_TURN

    def test_passed_team_cannot_pass_again(self, contested):
        state = play(contested, Action.place_investment_bid(0, 2), Action.pass_investment_bid(1))
        assert rejection_kind(state, Action.pass_investment_bid(1)) is RejectionKind.ALREADY_RESOLVED

    def test_resolve_while_bidding_open(self, contested):
        state = play(contested, Action.place_investment_bid(0, 2))
        assert rejection_kind(state, Action.resolve_conflict_bids()) is RejectionKind.OUT_OF_TURN

    def test_bid_after_close(self, contested):
        """A closed conflict takes no more bids."""
        state = play(contested, Action.place_investment_bid(0, 2), Action.close_conflict(2))
        action = Action.place_investment_bid(1, 3)
        assert rejection_kind(state, action) is RejectionKind.ALREADY_RESOLVED

    def test_close_without_bids(self, contested):
        assert rejection_kind(contested, Action.close_conflict(2)) is RejectionKind.INVALID_TARGET


class TestSecondaryAndExitValidation:
    """Tests for drops and the exit draw."""

    def test_drop_needs_full_roster(self, new_game):
        state = hire(at_step(new_game, Phase.SECONDARY_DROP), 0, EMPLOYEES[0])
        action = Action.drop_employee(0, EMPLOYEES[0].id)
        assert rejection_kind(state, action) is RejectionKind.INSUFFICIENT_RESOURCE

    def test_drop_unknown_employee(self, new_game):
        state = hire(at_step(new_game, Phase.SECONDARY_DROP), 0, *EMPLOYEES[:3])
        action = Action.drop_employee(0, EMPLOYEES[5].id)
        assert rejection_kind(state, action) is RejectionKind.INVALID_TARGET

    def test_exit_drawn_once(self, new_game):
        from ..games.esop_wars import EXIT_CARDS

        state = at_step(new_game, Phase.EXIT, exit_card=EXIT_CARDS[0])
        assert rejection_kind(state, Action.draw_exit()) is RejectionKind.ALREADY_RESOLVED

    def test_empty_exit_deck(self, new_game):
        state = at_step(new_game, Phase.EXIT, exit_deck=())
        assert rejection_kind(state, Action.draw_exit()) is RejectionKind.EMPTY_POOL
