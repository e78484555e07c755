"""
Game State - Immutable snapshot of one ESOP Wars session.

Design principles:
- Immutable: frozen dataclasses and tuples, every change returns a new state
- Serializable: every field is plain data, see serialization.py
- Self-describing: the phase is derived from a step index into PHASE_SEQUENCE
- Content-agnostic: card tables come in through a CardCatalog
"""

from __future__ import annotations
from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Any

from .config import GameConfig


class Phase(Enum):
    """Game phases, in the order they first occur."""
    REGISTRATION = "registration"
    SETUP = "setup"
    AUCTION = "auction"
    WILDCARD = "wildcard"
    MARKET = "market"
    INVESTMENT = "investment"
    SECONDARY_DROP = "secondary_drop"
    SECONDARY_HIRE = "secondary_hire"
    EXIT = "exit"
    WINNER = "winner"


# The market round repeats, so the schedule is a sequence of steps
# rather than a cycle of phases.
PHASE_SEQUENCE: tuple[Phase, ...] = (
    Phase.REGISTRATION,
    Phase.SETUP,
    Phase.AUCTION,
    Phase.WILDCARD,
    Phase.MARKET,
    Phase.INVESTMENT,
    Phase.SECONDARY_DROP,
    Phase.SECONDARY_HIRE,
    Phase.WILDCARD,
    Phase.MARKET,
    Phase.EXIT,
    Phase.WINNER,
)

BIDDING_PHASES = frozenset({Phase.AUCTION, Phase.SECONDARY_HIRE})


class WildcardChoice(Enum):
    """One-shot modifiers a team may play before a market round."""
    DOUBLE = "double"  # Double a gain
    SHIELD = "shield"  # Cancel a loss


class SetupDeck(Enum):
    """The two draw piles of the setup draft."""
    SEGMENT = "segment"
    IDEA = "idea"


class InvestmentStep(Enum):
    """Progress through the investment phase."""
    DECLARE = "declare"
    BIDDING = "bidding"
    RESOLVED = "resolved"
    FINALIZED = "finalized"


# =============================================================================
# Card content (static, supplied by a CardCatalog)
# =============================================================================

@dataclass(frozen=True)
class EmployeeCard:
    """An employee that can be hired in an auction."""
    id: int
    name: str
    role: str
    category: str
    hard_skill: float
    soft_skills: dict[str, float] = field(default_factory=dict)


@dataclass(frozen=True)
class MarketCard:
    """A market event applied to every team's skills for one round."""
    id: int
    name: str
    description: str = ""
    hard_skill_modifiers: dict[str, float] = field(default_factory=dict)
    soft_skill_modifiers: dict[str, float] = field(default_factory=dict)


@dataclass(frozen=True)
class ExitCard:
    """The exit event that multiplies final valuations."""
    id: int
    name: str
    multiplier: float
    description: str = ""


@dataclass(frozen=True)
class SetupCard:
    """A segment or idea card from the setup draft."""
    id: int
    kind: SetupDeck
    name: str
    description: str = ""


@dataclass(frozen=True)
class SetupBonus:
    """Hard-skill bonus granted by a locked segment and idea pair."""
    segment: str
    idea: str
    category: str
    modifier: float
    description: str = ""


@dataclass(frozen=True)
class TeamSlot:
    """Display identity of a team seat."""
    name: str
    color: str


@dataclass(frozen=True)
class CardCatalog:
    """
    Card content consumed by create_initial_state.

    employee_distribution maps a team count to how many cards of each
    category make up the auction deck. Counts missing from the map use
    the whole employee table.
    """
    employees: tuple[EmployeeCard, ...]
    reserve_employees: tuple[EmployeeCard, ...]
    market_cards: tuple[MarketCard, ...]
    exit_cards: tuple[ExitCard, ...]
    segments: tuple[SetupCard, ...]
    ideas: tuple[SetupCard, ...]
    setup_bonuses: tuple[SetupBonus, ...]
    team_slots: tuple[TeamSlot, ...]
    employee_distribution: dict[int, dict[str, int]] = field(default_factory=dict)


# =============================================================================
# Runtime records
# =============================================================================

@dataclass(frozen=True)
class HiredEmployee:
    """An employee on a team's roster and what it cost."""
    card: EmployeeCard
    bid_amount: float
    esop_cost: float
    team: int

    @property
    def id(self) -> int:
        return self.card.id

    @property
    def category(self) -> str:
        return self.card.category


@dataclass(frozen=True)
class Bid:
    """A bid for an employee or an investment target."""
    team: int
    amount: float
    sequence: int  # Action counter at the time the bid was placed


@dataclass(frozen=True)
class DroppedEmployee:
    """An employee released during the secondary drop."""
    employee: EmployeeCard
    from_team: int


@dataclass(frozen=True)
class Conflict:
    """Two or more teams declared the same investment target."""
    target: int
    claimants: tuple[int, ...]
    bids: tuple[Bid, ...] = ()
    passed: tuple[int, ...] = ()
    closed: bool = False
    resolved: bool = False
    winner: int | None = None

    @property
    def leading_bid(self) -> Bid | None:
        if not self.bids:
            return None
        return max(self.bids, key=lambda b: (b.amount, -b.sequence, -b.team))


@dataclass(frozen=True)
class RoundPerformance:
    """What happened to one team's valuation in a market round."""
    team: int
    previous_valuation: int
    market_change: int
    wildcard: WildcardChoice | None = None
    change_after_wildcard: int = 0
    leader_bonus: int = 0
    new_valuation: int = 0


@dataclass(frozen=True)
class Team:
    """
    State for a single team.

    esop_remaining always equals the initial pool minus every hire's
    ESOP cost, conflict spend and forfeited drop cost.
    """
    slot: int
    name: str
    color: str
    esop_remaining: float
    valuation: int
    problem_statement: str = ""
    is_registered: bool = False
    is_bot: bool = False

    # Roster
    employees: tuple[HiredEmployee, ...] = ()
    is_complete: bool = False
    is_disqualified: bool = False

    # Setup draft
    setup_hand: tuple[SetupCard, ...] = ()
    setup_draws_used: int = 0
    setup_locked: bool = False
    locked_segment: SetupCard | None = None
    locked_idea: SetupCard | None = None
    setup_bonus: SetupBonus | None = None

    # Wildcard
    wildcard_used: bool = False
    wildcard_active: WildcardChoice | None = None

    # Market
    previous_valuation: int = 0
    last_change: int = 0
    is_market_leader: bool = False
    market_leader_count: int = 0

    # Investment
    conflict_spend: float = 0.0
    invested_in: int | None = None
    investment_amount: int = 0
    investor: int | None = None

    # Secondary
    dropped_employee_id: int | None = None
    forfeited_esop: float = 0.0
    secondary_hires: int = 0

    # Exit
    pre_exit_valuation: int = 0

    @property
    def is_active(self) -> bool:
        return not self.is_disqualified

    @property
    def employee_count(self) -> int:
        return len(self.employees)

    @property
    def esop_spent(self) -> float:
        """ESOP paid out for the current roster."""
        return sum(e.esop_cost for e in self.employees)

    def get_employee(self, employee_id: int) -> HiredEmployee | None:
        for employee in self.employees:
            if employee.id == employee_id:
                return employee
        return None

    def find_setup_card(self, card_id: int) -> SetupCard | None:
        for card in self.setup_hand:
            if card.id == card_id:
                return card
        return None

    def count_setup_cards(self, kind: SetupDeck) -> int:
        return sum(1 for c in self.setup_hand if c.kind is kind)

    def with_changes(self, **changes: Any) -> Team:
        return replace(self, **changes)


@dataclass(frozen=True)
class GameState:
    """
    Complete game state at a point in time.

    This is the canonical value validators read and handlers return.
    Nothing outside the reducer ever builds a modified copy.
    """
    game_id: str
    config: GameConfig
    teams: tuple[Team, ...]

    # Sequencing
    step_index: int = 0
    action_counter: int = 0
    random_seed: int = 0
    market_round: int = 0

    # Auction and secondary hire
    employee_deck: tuple[EmployeeCard, ...] = ()
    reserve_employees: tuple[EmployeeCard, ...] = ()
    current_card_index: int = 0
    current_bid: Bid | None = None

    # Setup draft
    segment_deck: tuple[SetupCard, ...] = ()
    idea_deck: tuple[SetupCard, ...] = ()
    setup_discard: tuple[SetupCard, ...] = ()
    setup_bonuses: tuple[SetupBonus, ...] = ()
    setup_turn: int | None = None
    setup_dropped_this_turn: bool = False

    # Wildcard
    wildcard_selections: dict[int, WildcardChoice | None] = field(default_factory=dict)

    # Market
    market_deck: tuple[MarketCard, ...] = ()
    used_market_cards: tuple[MarketCard, ...] = ()
    active_market_card: MarketCard | None = None
    market_resolved: bool = False
    round_performance: tuple[RoundPerformance, ...] = ()

    # Investment
    investment_step: InvestmentStep = InvestmentStep.DECLARE
    investment_declarations: dict[int, int | None] = field(default_factory=dict)
    conflicts: tuple[Conflict, ...] = ()

    # Secondary
    dropped_employees: tuple[DroppedEmployee, ...] = ()
    secondary_pool: tuple[EmployeeCard, ...] = ()
    secondary_pool_populated: bool = False
    secondary_misses: int = 0

    # Exit
    exit_deck: tuple[ExitCard, ...] = ()
    exit_card: ExitCard | None = None

    @property
    def phase(self) -> Phase:
        return PHASE_SEQUENCE[self.step_index]

    @property
    def is_game_over(self) -> bool:
        return self.phase is Phase.WINNER

    def team(self, slot: int) -> Team:
        return self.teams[slot]

    def with_team(self, team: Team) -> GameState:
        """Return new state with one team replaced."""
        teams = list(self.teams)
        teams[team.slot] = team
        return replace(self, teams=tuple(teams))

    def with_teams(self, teams: list[Team] | tuple[Team, ...]) -> GameState:
        return replace(self, teams=tuple(teams))

    def _copy_with(self, **changes: Any) -> GameState:
        """Create a copy with specified changes."""
        return replace(self, **changes)
