"""
ESOP Bot - Heuristic automa for ESOP Wars.

The bot plays every phase with simple rules of thumb:
- Bids what an employee's skills are worth, capped by the budget it needs
  to finish its roster
- Drafts toward a segment/idea pair with a setup bonus
- Shields when leading, doubles when behind
- Releases its weakest employee in the secondary market

The bot does NOT:
- Look ahead at future market cards
- Coordinate with other bots

Decisions are seeded by the bot's seed and the state's action counter, so
asking twice about the same state gives the same answer.
"""

from __future__ import annotations
import math
import random
from dataclasses import dataclass, field

from ..engine_core.action import Action
from ..engine_core.queries import (
    current_card, employee_value, find_setup_bonus, investment_targets,
    is_players_turn, open_conflict_for, active_teams,
)
from ..engine_core.state import (
    GameState, Phase, SetupCard, SetupDeck, WildcardChoice, InvestmentStep, EmployeeCard,
)
from ..engine_core.validators import validate
from .personality import Personality, BALANCED
from .policy import BotPolicy

BOT_NAMES = (
    "Quantum Phoenix Labs",
    "Azure Storm Tech",
    "Golden Nexus AI",
    "Emerald Pulse Systems",
    "Stellar Falcon Ventures",
    "Crimson Wave Co",
    "Lunar Spark Inc",
    "Solar Apex Works",
    "Cosmic Tiger Hub",
    "Prime Dragon Studio",
)

# Cards whose skill value clears this get the stretch budget.
STANDOUT_SKILL_VALUE = 1.5


@dataclass
class EsopBot(BotPolicy):
    """
    ESOP Wars automa driven by a Personality.

    Usage:
        bot = EsopBot(personality=AGGRESSIVE, seed=7)
        action = bot.decide(state, team=2)
    """
    personality: Personality = field(default_factory=lambda: BALANCED)
    seed: int | None = None

    def __post_init__(self):
        if self.seed is None:
            self.seed = random.randrange(2**32)

    def _rng(self, state: GameState, team: int, purpose: str) -> random.Random:
        return random.Random(f"{self.seed}:{state.action_counter}:{team}:{purpose}")

    def decide(self, state: GameState, team: int) -> Action | None:
        """Pick an action for the current phase, or None to wait."""
        if not state.teams[team].is_active:
            return None
        deciders = {
            Phase.REGISTRATION: self.decide_registration,
            Phase.SETUP: self.decide_setup,
            Phase.AUCTION: self.decide_bid,
            Phase.WILDCARD: self.decide_wildcard,
            Phase.INVESTMENT: self.decide_investment,
            Phase.SECONDARY_DROP: self.decide_drop,
            Phase.SECONDARY_HIRE: self.decide_bid,
        }
        decider = deciders.get(state.phase)
        if decider is None:
            return None
        action = decider(state, team)
        if action is None or validate(state, action) is not None:
            return None
        return action

    # =========================================================================
    # Registration and setup
    # =========================================================================

    def decide_registration(self, state: GameState, team: int) -> Action | None:
        if not is_players_turn(state, team):
            return None
        used = {t.name.lower() for t in state.teams if t.is_registered}
        for attempt in range(len(BOT_NAMES)):
            name = BOT_NAMES[(team + attempt) % len(BOT_NAMES)]
            if name.lower() not in used:
                return Action.register_team(team, name)
        return Action.register_team(team, f"{state.teams[team].name} Bot")

    def decide_setup(self, state: GameState, team: int) -> Action | None:
        """
        Draft toward a bonus pair.

        Locks as soon as the hand holds a bonus pair or the draft can't
        improve it, otherwise on its turn drops the weakest card once and
        draws to balance segments against ideas.
        """
        current = state.teams[team]
        if current.setup_locked:
            return None
        segment, idea, modifier = self._best_pair(state, current.setup_hand)
        if segment is None or idea is None:
            return None

        out_of_draws = current.setup_draws_used >= state.config.setup_draw_budget
        decks_empty = not state.segment_deck and not state.idea_deck
        if modifier > 0 or out_of_draws or decks_empty:
            return Action.lock_setup(team, segment.id, idea.id)

        if not is_players_turn(state, team):
            return None
        if not state.setup_dropped_this_turn:
            drop = self._weakest_setup_card(state, current.setup_hand)
            if drop is not None:
                return Action.drop_card(team, drop.id)
        deck = self._deck_to_draw(state, current.setup_hand, self._rng(state, team, "deck"))
        if deck is None:
            return Action.skip_draw(team)
        return Action.draw_card(team, deck)

    def _best_pair(self, state: GameState, hand: tuple[SetupCard, ...]):
        segments = [c for c in hand if c.kind is SetupDeck.SEGMENT]
        ideas = [c for c in hand if c.kind is SetupDeck.IDEA]
        best = (segments[0] if segments else None, ideas[0] if ideas else None, 0.0)
        for segment in segments:
            for idea in ideas:
                bonus = find_setup_bonus(state, segment.name, idea.name)
                if bonus is not None and bonus.modifier > best[2]:
                    best = (segment, idea, bonus.modifier)
        return best

    def _pairing_score(self, state: GameState, card: SetupCard, hand: tuple[SetupCard, ...]) -> float:
        score = 0.0
        for other in hand:
            if other.kind is card.kind:
                continue
            segment, idea = (card, other) if card.kind is SetupDeck.SEGMENT else (other, card)
            bonus = find_setup_bonus(state, segment.name, idea.name)
            if bonus is not None:
                score += bonus.modifier * 10
        return score

    def _weakest_setup_card(self, state: GameState, hand: tuple[SetupCard, ...]) -> SetupCard | None:
        droppable = [c for c in hand if sum(1 for o in hand if o.kind is c.kind) > 1]
        if not droppable:
            return None
        return min(droppable, key=lambda c: (self._pairing_score(state, c, hand), c.id))

    def _deck_to_draw(self, state: GameState, hand, rng: random.Random) -> SetupDeck | None:
        segments = sum(1 for c in hand if c.kind is SetupDeck.SEGMENT)
        ideas = len(hand) - segments
        if segments < ideas and state.segment_deck:
            return SetupDeck.SEGMENT
        if ideas < segments and state.idea_deck:
            return SetupDeck.IDEA
        if state.segment_deck and state.idea_deck:
            return rng.choice((SetupDeck.SEGMENT, SetupDeck.IDEA))
        if state.segment_deck:
            return SetupDeck.SEGMENT
        if state.idea_deck:
            return SetupDeck.IDEA
        return None

    # =========================================================================
    # Bidding
    # =========================================================================

    def skill_value(self, card: EmployeeCard) -> float:
        """Hard skill counts double; soft skills count once."""
        return card.hard_skill * 2 + sum(card.soft_skills.values())

    def decide_bid(self, state: GameState, team: int) -> Action | None:
        """
        Bid on the current card if it is worth it and affordable.

        The ceiling is the average budget per employee still needed, raised
        for standout cards, always leaving one percent for each later hire.
        """
        card = current_card(state)
        current = state.teams[team]
        cap = state.config.hire_cap
        if card is None or current.employee_count >= cap:
            return None
        leader = state.current_bid
        if leader is not None and leader.team == team:
            return None

        value = self.skill_value(card)
        base_bid = math.floor(value * 2)
        needed = cap - current.employee_count
        ceiling = math.floor(current.esop_remaining / needed)
        if value > STANDOUT_SKILL_VALUE:
            ceiling = math.floor(ceiling * self.personality.stretch_multiplier)
        reserve = needed - 1
        ceiling = min(ceiling, math.floor(current.esop_remaining - reserve))
        if ceiling < 1:
            return None

        leading = leader.amount if leader else 0
        amount = max(math.floor(leading) + 1, base_bid)
        rng = self._rng(state, team, "bid")
        if amount > ceiling:
            stretch = math.floor(leading) + 1
            if rng.random() < self.personality.aggression * 0.3 and stretch <= current.esop_remaining - reserve:
                return Action.place_bid(team, float(stretch))
            return None
        if rng.random() < self.personality.randomness:
            return None
        return Action.place_bid(team, float(amount))

    # =========================================================================
    # Wildcard and investment
    # =========================================================================

    def decide_wildcard(self, state: GameState, team: int) -> Action | None:
        """Shield when leading, double down when trailing, otherwise maybe pass."""
        current = state.teams[team]
        if team in state.wildcard_selections:
            return None
        if current.wildcard_used:
            return Action.select_wildcard(team, None)

        ranked = sorted(active_teams(state), key=lambda t: (-t.valuation, t.slot))
        rank = [t.slot for t in ranked].index(team)
        rng = self._rng(state, team, "wildcard")
        boldness = self.personality.wildcard_boldness
        if rank == 0 and rng.random() < boldness:
            return Action.select_wildcard(team, WildcardChoice.SHIELD)
        if rank >= 2 and rng.random() < min(1.0, boldness + 0.1):
            return Action.select_wildcard(team, WildcardChoice.DOUBLE)
        if rng.random() < boldness * 0.6:
            return Action.select_wildcard(team, rng.choice(list(WildcardChoice)))
        return Action.select_wildcard(team, None)

    def decide_investment(self, state: GameState, team: int) -> Action | None:
        if state.investment_step is InvestmentStep.DECLARE:
            if team in state.investment_declarations:
                return None
            targets = investment_targets(state, team)
            rng = self._rng(state, team, "invest")
            if not targets or rng.random() < self.personality.investment_pass_rate:
                return Action.declare_investment(team, None)
            return Action.declare_investment(team, rng.choice(targets))
        if state.investment_step is InvestmentStep.BIDDING:
            return self.decide_investment_bid(state, team)
        return None

    def decide_investment_bid(self, state: GameState, team: int) -> Action | None:
        """Outbid by one percent up to the personality's ceiling, then pass."""
        conflict = open_conflict_for(state, team)
        if conflict is None or team in conflict.passed:
            return None
        leader = conflict.leading_bid
        if leader is not None and leader.team == team:
            return None
        current = state.teams[team]
        ceiling = math.floor(current.esop_remaining * self.personality.investment_appetite)
        amount = math.floor(leader.amount) + 1 if leader else 1
        if amount > ceiling or amount > current.esop_remaining:
            return Action.pass_investment_bid(team)
        return Action.place_investment_bid(team, float(amount))

    # =========================================================================
    # Secondary
    # =========================================================================

    def decide_drop(self, state: GameState, team: int) -> Action | None:
        """Release the employee with the lowest raw skill value."""
        current = state.teams[team]
        if current.dropped_employee_id is not None or not current.employees:
            return None
        weakest = min(current.employees, key=lambda e: (employee_value(e.card), e.id))
        return Action.drop_employee(team, weakest.id)
