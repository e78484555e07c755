"""
Tests for bot policies.

Tests:
- Personalities
- EsopBot decisions per phase
- Baseline policies
- Bot-only games play through to the winner phase
"""

import pytest

from ..bots import (
    BOT_NAMES, EsopBot, FirstLegalPolicy, Personality, PERSONALITIES, RandomPolicy,
    create_random_personality, get_personality,
)
from ..bots.personality import AGGRESSIVE, BALANCED
from ..engine_core.action import Action, ActionType
from ..engine_core.queries import esop_ledger_balanced
from ..engine_core.state import Phase, SetupDeck, WildcardChoice
from ..engine_core.validators import validate
from ..games.esop_wars import EMPLOYEES, IDEAS, SEGMENTS
from ..session import GameLoop, SessionManager, replay
from .helpers import at_step, hire, play


class TestPersonality:
    """Tests for personality presets."""

    def test_presets(self):
        assert set(PERSONALITIES) == {"balanced", "aggressive", "cautious", "chaotic"}
        assert get_personality("aggressive") is AGGRESSIVE

    def test_unknown_personality(self):
        with pytest.raises(ValueError):
            get_personality("reckless")

    def test_stretch_multiplier(self):
        assert AGGRESSIVE.stretch_multiplier == pytest.approx(1.9)

    def test_random_personality_is_reproducible(self):
        """Same seed, same variation."""
        first = create_random_personality(seed=11)
        second = create_random_personality(seed=11)

        assert first == second
        for value in (first.aggression, first.randomness, first.wildcard_boldness):
            assert 0.0 <= value <= 1.0


class TestEsopBot:
    """Tests for EsopBot decisions."""

    @pytest.fixture
    def bot(self):
        return EsopBot(personality=BALANCED, seed=5)

    def test_registers_on_its_turn(self, bot, new_game):
        action = bot.decide(new_game, 0)

        assert action.action_type is ActionType.REGISTER_TEAM
        assert action.payload.name == BOT_NAMES[0]
        assert bot.decide(new_game, 1) is None

    def test_avoids_taken_names(self, bot, new_game):
        state = play(new_game, Action.register_team(0, BOT_NAMES[1]))

        action = bot.decide(state, 1)
        assert action.payload.name == BOT_NAMES[2]

    def test_locks_bonus_pair(self, bot, registered_game):
        """A hand holding a bonus pair is locked straight away."""
        fintech, gateway, other = SEGMENTS[2], IDEAS[1], IDEAS[7]
        team = registered_game.teams[1]
        state = registered_game.with_team(team.with_changes(setup_hand=(fintech, other, gateway)))

        action = bot.decide(state, 1)

        assert action.action_type is ActionType.LOCK_SETUP
        assert action.payload.segment_id == fintech.id
        assert action.payload.idea_id == gateway.id

    def test_drafts_on_its_turn(self, bot, registered_game):
        """Without a bonus pair the bot drops once, then draws."""
        logistics, mobile_app, video, booking = SEGMENTS[5], IDEAS[7], IDEAS[14], IDEAS[15]
        team = registered_game.teams[0]
        hand = (logistics, mobile_app, video, booking)
        state = registered_game.with_team(team.with_changes(setup_hand=hand))

        first = bot.decide(state, 0)
        assert first.action_type is ActionType.DROP_CARD

        state = play(state, first)
        second = bot.decide(state, 0)
        assert second.action_type is ActionType.DRAW_CARD
        assert second.payload.deck is SetupDeck.SEGMENT

    def test_locks_when_out_of_draws(self, bot, registered_game):
        team = registered_game.teams[2]
        state = registered_game.with_team(
            team.with_changes(setup_draws_used=registered_game.config.setup_draw_budget)
        )
        assert bot.decide(state, 2).action_type is ActionType.LOCK_SETUP

    def test_bids_are_legal(self, bot, auction_game):
        for slot in range(len(auction_game.teams)):
            action = bot.decide(auction_game, slot)
            if action is not None:
                assert validate(auction_game, action) is None

    def test_leader_does_not_rebid(self, bot, auction_game):
        state = play(auction_game, Action.place_bid(0, 1))
        assert bot.decide(state, 0) is None

    def test_keeps_reserve_for_later_hires(self, auction_game):
        """A bot never bids away the ESOP it needs for the rest of its roster."""
        bot = EsopBot(personality=AGGRESSIVE, seed=1)
        poor = auction_game.teams[0].with_changes(esop_remaining=2.0)
        state = auction_game.with_team(poor)

        action = bot.decide(state, 0)
        if action is not None:
            assert action.payload.amount <= 2.0 - (state.config.hire_cap - 1)

    def test_full_roster_waits(self, bot, auction_game):
        state = hire(auction_game, 0, *EMPLOYEES[15:18])
        assert bot.decide(state, 0) is None

    def test_decisions_are_deterministic(self, auction_game):
        """The same bot asked twice about the same state answers the same."""
        bot = EsopBot(personality=get_personality("chaotic"), seed=99)
        assert bot.decide(auction_game, 1) == bot.decide(auction_game, 1)

    def test_used_wildcard_passes(self, bot, staffed_game):
        team = staffed_game.teams[0].with_changes(wildcard_used=True)
        state = staffed_game.with_team(team)

        action = bot.decide(state, 0)
        assert action.action_type is ActionType.SELECT_WILDCARD
        assert action.payload.choice is None

    def test_bold_leader_shields(self, staffed_game):
        bold = EsopBot(personality=Personality(name="Bold", wildcard_boldness=1.0), seed=3)
        leader = staffed_game.teams[1].with_changes(valuation=30_000_000)
        state = staffed_game.with_team(leader)

        assert bold.decide(state, 1).payload.choice is WildcardChoice.SHIELD

    def test_declares_investment(self, bot, new_game):
        state = at_step(new_game, Phase.INVESTMENT)
        action = bot.decide(state, 0)

        assert action.action_type is ActionType.DECLARE_INVESTMENT
        assert action.payload.target in (None, 1, 2)

    def test_timid_bot_passes_conflict(self, new_game):
        timid = EsopBot(personality=Personality(name="Timid", investment_appetite=0.0), seed=2)
        state = play(
            at_step(new_game, Phase.INVESTMENT),
            Action.declare_investment(0, 2),
            Action.declare_investment(1, 2),
            Action.declare_investment(2, None),
            Action.resolve_investment_conflicts(),
        )

        assert timid.decide(state, 0).action_type is ActionType.PASS_INVESTMENT_BID

    def test_drops_weakest(self, bot, new_game):
        """Meera (0.55 hard, 1.3 soft) is the weakest of the three."""
        state = hire(at_step(new_game, Phase.SECONDARY_DROP), 0, EMPLOYEES[0], EMPLOYEES[6], EMPLOYEES[8])

        action = bot.decide(state, 0)
        assert action.action_type is ActionType.DROP_EMPLOYEE
        assert action.payload.employee_id == EMPLOYEES[6].id

    def test_disqualified_team_waits(self, bot, auction_game):
        gone = auction_game.teams[0].with_changes(is_disqualified=True)
        assert bot.decide(auction_game.with_team(gone), 0) is None


class TestBaselinePolicies:
    """Tests for the legal-action baselines."""

    def test_first_legal(self, new_game):
        policy = FirstLegalPolicy()

        action = policy.decide(new_game, 0)
        assert action.action_type is ActionType.REGISTER_TEAM
        assert policy.decide(new_game, 1) is None

    def test_random_policy_is_legal(self, registered_game):
        policy = RandomPolicy(seed=4)
        action = policy.decide(registered_game, 0)

        assert action is not None
        assert validate(registered_game, action) is None

    def test_random_policy_skips_self_outbids(self, auction_game):
        """A leading team is never offered a bid against itself."""
        state = play(auction_game, Action.place_bid(0, 1))
        policy = RandomPolicy(seed=4)

        assert all(a.action_type is not ActionType.PLACE_BID for a in policy.candidates(state, 0))

    def test_policy_name(self):
        assert EsopBot(seed=1).get_name() == "EsopBot"


class TestBotGames:
    """Bot-only games played through the session driver."""

    def _play(self, team_count, seed):
        manager = SessionManager()
        session = manager.create_session(
            team_count=team_count, bot_slots=range(team_count), random_seed=seed,
        )
        GameLoop(session).play_out()
        return session

    @pytest.mark.parametrize("team_count", [2, 3, 4, 5])
    @pytest.mark.parametrize("seed", [1, 2, 3])
    def test_game_reaches_winner(self, team_count, seed):
        session = self._play(team_count, seed)
        state = session.game_state

        assert state.phase is Phase.WINNER
        assert state.exit_card is not None
        assert session.status.value == "game_over"

    @pytest.mark.parametrize("seed", [4, 5])
    def test_invariants_hold_throughout(self, seed):
        """ESOP never goes negative and no employee sits on two rosters."""
        session = self._play(5, seed)

        for entry in session.history:
            state = entry.state
            seen = set()
            for team in state.teams:
                assert team.esop_remaining >= 0
                assert esop_ledger_balanced(team, state.config)
                assert team.employee_count <= state.config.hire_cap
                ids = {e.id for e in team.employees}
                assert not ids & seen
                seen |= ids

    @pytest.mark.parametrize("seed", [4, 5])
    def test_rostered_employees_leave_every_pool(self, seed):
        """A hired employee is never also waiting in a deck or pool."""
        session = self._play(5, seed)

        for entry in session.history:
            state = entry.state
            rostered = {e.id for team in state.teams for e in team.employees}
            waiting = (
                {c.id for c in state.employee_deck}
                | {c.id for c in state.secondary_pool}
                | {c.id for c in state.reserve_employees}
                | {d.employee.id for d in state.dropped_employees}
            )
            assert not rostered & waiting, f"{sorted(rostered & waiting)} at action {entry.action}"

    def test_history_replays(self):
        session = self._play(4, 8)

        rebuilt = replay(session.initial_state, [entry.action for entry in session.history])
        assert rebuilt == session.game_state

    def test_same_seed_same_game(self):
        first = self._play(3, 21).game_state
        second = self._play(3, 21).game_state

        assert first.action_counter == second.action_counter
        assert [t.valuation for t in first.teams] == [t.valuation for t in second.teams]
        assert first.exit_card == second.exit_card
